import math
import random
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from core.errors import SceneArgumentError
from core.lights import SurfaceLight
from core.math import EPSILON, Ray, Vec3

if TYPE_CHECKING:
    from core.geometry import Intersection
    from core.scene import Scene

DEFAULT_AMBIENT = Vec3(0.1, 0.1, 0.1)
BLACK = Vec3(0.0, 0.0, 0.0)


def _finite(value, name):
    if value is None or isinstance(value, bool) or not math.isfinite(value):
        raise SceneArgumentError(f"{name} must be a finite number, got {value!r}")
    return float(value)


def _unit(value, name):
    return min(1.0, max(0.0, _finite(value, name)))


def _color(value, name="Color"):
    if value is None:
        raise SceneArgumentError(f"{name} cannot be null")
    return Vec3(*(_unit(c, name) for c in value))


def schlick(cos_theta: float, n1: float, n2: float) -> float:
    """Schlick's approximation of the Fresnel reflectance."""
    r0 = ((n1 - n2) / (n1 + n2)) ** 2
    return r0 + (1 - r0) * (1 - cos_theta) ** 5


def random_in_unit_sphere() -> Vec3:
    theta = 2 * math.pi * random.random()
    phi = math.acos(2 * random.random() - 1)
    r = random.random() ** (1.0 / 3.0)
    return Vec3(r * math.sin(phi) * math.cos(theta),
                r * math.sin(phi) * math.sin(theta),
                r * math.cos(phi))


def is_in_shadow(scene: "Scene", point: Vec3, light_dir: Vec3, light_distance: float) -> bool:
    shadow_ray = Ray(point + light_dir * EPSILON, light_dir)
    blocker = scene.intersect(shadow_ray)
    return blocker is not None and blocker.t < light_distance


def trace_reflection(incident: Ray, hit: "Intersection", scene: "Scene", depth: int) -> Vec3:
    """Mirror bounce; black when out of bounces, on a miss, or on an unknown material."""
    if depth >= scene.max_bounces:
        return BLACK

    reflected_ray = Ray(hit.point + hit.normal * EPSILON, incident.direction.reflect(hit.normal))
    reflected_hit = scene.intersect(reflected_ray)
    if reflected_hit is None:
        return BLACK
    material = scene.material_for(reflected_hit)
    if material is None:
        return BLACK
    return material.scatter(reflected_ray, reflected_hit, scene, depth + 1)


def trace_refraction(incident: Ray,
                     hit: "Intersection",
                     scene: "Scene",
                     depth: int,
                     transparency: float,
                     refractive_index: float) -> Vec3:
    """Fresnel-weighted transmitted color: transparency * (1 - F) * traced color."""
    if transparency <= 0 or depth >= scene.max_bounces:
        return BLACK

    d = incident.direction
    n = hit.normal
    cos_theta = -n.dot(d)
    entering = cos_theta > 0

    n1 = 1.0 if entering else refractive_index
    n2 = refractive_index if entering else 1.0
    effective_normal = n if entering else -n
    cos_i = abs(cos_theta)

    did_refract, refracted_dir = d.refract(effective_normal, n1 / n2)
    if not did_refract:
        # total internal reflection
        return BLACK

    fresnel = schlick(cos_i, n1, n2)

    # start just past the interface, on the transmitted side
    refracted_ray = Ray(hit.point - effective_normal * EPSILON, refracted_dir)
    refracted_hit = scene.intersect(refracted_ray)

    refracted_color = scene.background
    if refracted_hit is not None:
        material = scene.material_for(refracted_hit)
        if material is not None:
            refracted_color = material.scatter(refracted_ray, refracted_hit, scene, depth + 1)

    return refracted_color * (transparency * (1.0 - fresnel))


class MaterialStrategy(ABC):
    """Scatter rule of a material: maps (ray, hit, scene, depth) to outgoing radiance."""

    kind = None

    reflectivity = 0.0
    transparency = 0.0
    refractive_index = 1.0

    def __init__(self, color: Vec3):
        self.color = _color(color)

    @abstractmethod
    def scatter(self, incident: Ray, hit: "Intersection", scene: "Scene", depth: int) -> Vec3:
        pass


class PhongMaterial(MaterialStrategy):
    kind = "phong"

    def __init__(self,
                 color: Vec3,
                 diffuse: float = 0.8,
                 specular: float = 0.5,
                 hardness: float = 50.0,
                 reflectivity: float = 0.0,
                 transparency: float = 0.0,
                 refractive_index: float = 1.0,
                 ambient: Vec3 = DEFAULT_AMBIENT):
        """
        color: base color, each channel in [0, 1]
        diffuse: Lambert coefficient k_d
        specular: Phong coefficient k_s
        hardness: Phong exponent (>= 1)
        reflectivity: mirror blend factor (0~1)
        transparency: transmitted fraction before Fresnel (0~1)
        refractive_index: index of refraction (>= 1)
        ambient: ambient light reaching the surface
        """
        super().__init__(color)
        self.diffuse = _unit(diffuse, "Diffuse coefficient")
        self.specular = _unit(specular, "Specular coefficient")
        self.hardness = max(1.0, _finite(hardness, "Specular hardness"))
        self.reflectivity = _unit(reflectivity, "Reflectivity")
        self.transparency = _unit(transparency, "Transparency")
        self.refractive_index = max(1.0, _finite(refractive_index, "Refractive index"))
        if ambient is None:
            ambient = DEFAULT_AMBIENT
        self.ambient = Vec3(*(_finite(c, "Ambient light") for c in ambient))

    def scatter(self, incident: Ray, hit: "Intersection", scene: "Scene", depth: int) -> Vec3:
        view_dir = -incident.direction

        # 1) Ambient
        color = self.ambient * self.color

        # 2) Diffuse + specular from every light, with shadows
        color = color + self._direct_lighting(hit.point, hit.normal, view_dir, scene)

        # 3) Reflection, blended
        if self.reflectivity > 0:
            reflected = trace_reflection(incident, hit, scene, depth)
            color = color * (1.0 - self.reflectivity) + reflected * self.reflectivity

        # 4) Refraction, added
        if self.transparency > 0:
            color = color + trace_refraction(incident, hit, scene, depth,
                                             self.transparency, self.refractive_index)

        return color.clamp()

    def _direct_lighting(self, point: Vec3, normal: Vec3, view_dir: Vec3, scene: "Scene") -> Vec3:
        lighting = BLACK
        for light in scene.lights:
            if isinstance(light, SurfaceLight):
                lighting = lighting + self._surface_light(light, point, normal, view_dir, scene)
                continue

            light_dir = light.direction_from(point)
            if is_in_shadow(scene, point, light_dir, light.distance_from(point)):
                continue
            lighting = lighting + self._local(light_dir, normal, view_dir, light.color) * light.intensity
        return lighting

    def _surface_light(self, light: SurfaceLight, point: Vec3, normal: Vec3, view_dir: Vec3,
                       scene: "Scene") -> Vec3:
        samples = light.sample_points()
        total = BLACK
        for sample in samples:
            to_sample = sample - point
            distance = to_sample.length()
            if distance == 0:
                continue
            light_dir = to_sample / distance
            if is_in_shadow(scene, point, light_dir, distance):
                continue
            total = total + self._local(light_dir, normal, view_dir, light.color)
        # divide by every sample, occluded ones included
        return total * (light.intensity / len(samples))

    def _local(self, light_dir: Vec3, normal: Vec3, view_dir: Vec3, light_color: Vec3) -> Vec3:
        diff = max(0.0, normal.dot(light_dir))
        color = self.color * light_color * (self.diffuse * diff)
        if self.specular > 0:
            reflect_dir = (-light_dir).reflect(normal)
            spec = max(0.0, view_dir.dot(reflect_dir)) ** self.hardness
            color = color + light_color * (self.specular * spec)
        return color

    def __repr__(self):
        return (f"PhongMaterial(color={self.color}, diffuse={self.diffuse:.2f}, "
                f"specular={self.specular:.2f}, reflectivity={self.reflectivity:.2f}, "
                f"transparency={self.transparency:.2f})")


class LambertianMaterial(PhongMaterial):
    """Purely diffuse: Phong without specular, reflection or refraction."""

    kind = "lambertian"

    def __init__(self, color: Vec3, diffuse: float = 0.8, ambient: Vec3 = DEFAULT_AMBIENT):
        super().__init__(color,
                         diffuse=diffuse,
                         specular=0.0,
                         hardness=1.0,
                         reflectivity=0.0,
                         transparency=0.0,
                         refractive_index=1.0,
                         ambient=ambient)

    def __repr__(self):
        return f"LambertianMaterial(color={self.color}, diffuse={self.diffuse:.2f})"


class MetalMaterial(MaterialStrategy):
    kind = "metal"

    def __init__(self, color: Vec3, reflectivity: float = 1.0, fuzziness: float = 0.0):
        super().__init__(color)
        self.reflectivity = _unit(reflectivity, "Reflectivity")
        self.fuzziness = _unit(fuzziness, "Fuzziness")

    def scatter(self, incident: Ray, hit: "Intersection", scene: "Scene", depth: int) -> Vec3:
        if depth >= scene.max_bounces:
            return scene.background

        reflect_dir = incident.direction.reflect(hit.normal)
        if self.fuzziness > 0:
            reflect_dir = (reflect_dir + random_in_unit_sphere() * self.fuzziness).normalize()

        reflected_ray = Ray(hit.point + hit.normal * EPSILON, reflect_dir)
        reflected_hit = scene.intersect(reflected_ray)
        if reflected_hit is None:
            return scene.background
        material = scene.material_for(reflected_hit)
        if material is None:
            return scene.background

        reflected = material.scatter(reflected_ray, reflected_hit, scene, depth + 1)
        return reflected * self.color * self.reflectivity

    def __repr__(self):
        return (f"MetalMaterial(color={self.color}, reflectivity={self.reflectivity:.2f}, "
                f"fuzziness={self.fuzziness:.2f})")

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Optional

from core.camera import Camera
from core.errors import SceneArgumentError
from core.geometry import Intersection, Primitive
from core.lights import Light
from core.material import MaterialStrategy
from core.math import Ray, Vec3


@dataclass(frozen=True)
class RenderSettings:
    width: int = 800
    height: int = 600
    samples_per_pixel: int = 1
    max_bounces: int = 3
    background: Vec3 = field(default_factory=lambda: Vec3(0.0, 0.0, 0.0))

    def __post_init__(self):
        for name in ("width", "height", "samples_per_pixel"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise SceneArgumentError(f"{name} must be a positive integer, got {value!r}")
        if isinstance(self.max_bounces, bool) or not isinstance(self.max_bounces, int) or self.max_bounces < 0:
            raise SceneArgumentError(f"max_bounces must be a non-negative integer, got {self.max_bounces!r}")
        bg = self.background
        if bg is None or not all(math.isfinite(c) and 0.0 <= c <= 1.0 for c in bg):
            raise SceneArgumentError(f"Background color must lie in [0, 1], got {bg!r}")


class Scene:
    """
    Read-only description of what to render. The constructor copies its
    inputs, so callers may keep mutating their own lists afterwards.
    """

    def __init__(self,
                 camera: Camera,
                 primitives: List[Primitive],
                 lights: List[Light],
                 materials: Dict[str, MaterialStrategy],
                 settings: RenderSettings):
        if camera is None:
            raise SceneArgumentError("Camera is required")
        if settings is None:
            raise SceneArgumentError("Render settings are required")
        self.camera = camera
        self.primitives = tuple(primitives or ())
        self.lights = tuple(lights or ())
        self.materials = MappingProxyType(dict(materials or {}))
        self.settings = settings

    @property
    def width(self) -> int:
        return self.settings.width

    @property
    def height(self) -> int:
        return self.settings.height

    @property
    def samples_per_pixel(self) -> int:
        return self.settings.samples_per_pixel

    @property
    def max_bounces(self) -> int:
        return self.settings.max_bounces

    @property
    def background(self) -> Vec3:
        return self.settings.background

    def material(self, material_id: str) -> Optional[MaterialStrategy]:
        return self.materials.get(material_id)

    def material_for(self, hit: Intersection) -> Optional[MaterialStrategy]:
        return self.materials.get(hit.primitive.material_id)

    def intersect(self, ray: Ray) -> Optional[Intersection]:
        """Nearest hit over all primitives; on equal t the earlier primitive wins."""
        closest = None
        closest_t = math.inf

        for primitive in self.primitives:
            t = primitive.intersect(ray)
            if t is not None and t < closest_t:
                closest_t = t
                closest = primitive

        if closest is None:
            return None
        point = ray.at(closest_t)
        return Intersection(closest_t, point, closest.normal_at(point), closest)


class SceneBuilder:
    """Collects scene parts one at a time; build() validates and freezes them."""

    def __init__(self):
        self._camera = None
        self._primitives: List[Primitive] = []
        self._lights: List[Light] = []
        self._materials: Dict[str, MaterialStrategy] = {}
        self._width = 800
        self._height = 600
        self._samples_per_pixel = 1
        self._max_bounces = 3
        self._background = Vec3(0.0, 0.0, 0.0)

    def camera(self, camera: Camera) -> "SceneBuilder":
        self._camera = camera
        return self

    def add_primitive(self, primitive: Primitive) -> "SceneBuilder":
        if primitive is None:
            raise SceneArgumentError("Primitive cannot be null")
        self._primitives.append(primitive)
        return self

    def add_light(self, light: Light) -> "SceneBuilder":
        if light is None:
            raise SceneArgumentError("Light cannot be null")
        self._lights.append(light)
        return self

    def add_material(self, material_id: str, material: MaterialStrategy) -> "SceneBuilder":
        if not material_id or not str(material_id).strip():
            raise SceneArgumentError("Material ID cannot be null or empty")
        if material is None:
            raise SceneArgumentError("Material strategy cannot be null")
        self._materials[material_id] = material
        return self

    def image_size(self, width: int, height: int) -> "SceneBuilder":
        self._width = width
        self._height = height
        return self

    def samples_per_pixel(self, samples: int) -> "SceneBuilder":
        self._samples_per_pixel = samples
        return self

    def max_bounces(self, bounces: int) -> "SceneBuilder":
        self._max_bounces = bounces
        return self

    def background(self, color: Vec3) -> "SceneBuilder":
        self._background = color
        return self

    def build(self) -> Scene:
        settings = RenderSettings(width=self._width,
                                  height=self._height,
                                  samples_per_pixel=self._samples_per_pixel,
                                  max_bounces=self._max_bounces,
                                  background=self._background)
        return Scene(self._camera, self._primitives, self._lights, self._materials, settings)

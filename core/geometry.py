import math
from abc import ABC, abstractmethod
from typing import Optional

from core.errors import SceneArgumentError
from core.math import EPSILON, Ray, Vec3


def _require_name(value, what):
    if value is None or not str(value).strip():
        raise SceneArgumentError(f"{what} cannot be null or empty")
    return str(value)


def _require_positive(value, what):
    if not (math.isfinite(value) and value > 0):
        raise SceneArgumentError(f"{what} must be positive, got {value}")
    return float(value)


def _sign(value):
    if value > 0:
        return 1.0
    if value < 0:
        return -1.0
    return 0.0


class Primitive(ABC):
    """Analytic surface with a display name and the id of its material."""

    kind = None

    def __init__(self, name: str, material_id: str):
        self.name = _require_name(name, "Name")
        self.material_id = _require_name(material_id, "Material ID")

    @abstractmethod
    def intersect(self, ray: Ray) -> Optional[float]:
        """Smallest admissible t (> EPSILON) along the ray, or None."""

    @abstractmethod
    def normal_at(self, point: Vec3) -> Vec3:
        """Unit outward normal at a point on the surface."""


class Sphere(Primitive):
    kind = "sphere"

    def __init__(self, name: str, material_id: str, center: Vec3, radius: float):
        super().__init__(name, material_id)
        if center is None:
            raise SceneArgumentError("Center cannot be null")
        self.center = center
        self.radius = _require_positive(radius, "Radius")

    def intersect(self, ray: Ray) -> Optional[float]:
        oc = ray.origin - self.center
        a = ray.direction.dot(ray.direction)
        b = 2.0 * oc.dot(ray.direction)
        c = oc.dot(oc) - self.radius * self.radius
        discriminant = b * b - 4 * a * c
        if discriminant < 0:
            return None

        sqrt_d = math.sqrt(discriminant)
        t1 = (-b - sqrt_d) / (2.0 * a)
        t2 = (-b + sqrt_d) / (2.0 * a)
        if t1 > EPSILON:
            return t1
        if t2 > EPSILON:
            return t2
        return None

    def normal_at(self, point: Vec3) -> Vec3:
        # renormalized to absorb drift off the surface
        return ((point - self.center) / self.radius).normalize()

    def __repr__(self):
        return f"Sphere(name={self.name}, center={self.center}, radius={self.radius:.4f})"


class Plane(Primitive):
    kind = "plane"

    def __init__(self, name: str, material_id: str, point: Vec3, normal: Vec3):
        super().__init__(name, material_id)
        if point is None or normal is None:
            raise SceneArgumentError("Plane point and normal cannot be null")
        if normal.length() == 0:
            raise SceneArgumentError("Plane normal must be non-zero")
        self.point = point
        self.normal = normal.normalize()

    def intersect(self, ray: Ray) -> Optional[float]:
        denom = self.normal.dot(ray.direction)
        if abs(denom) < 1e-6:
            return None  # ray parallel to the plane

        t = self.normal.dot(self.point - ray.origin) / denom
        if t > EPSILON:
            return t
        return None

    def normal_at(self, point: Vec3) -> Vec3:
        return self.normal

    def __repr__(self):
        return f"Plane(name={self.name}, point={self.point}, normal={self.normal})"


class Box(Primitive):
    """Axis-aligned box given by its min corner and its extents along x, y and z."""

    kind = "box"

    def __init__(self,
                 name: str,
                 material_id: str,
                 min_corner: Vec3,
                 width: float,
                 height: float,
                 depth: float):
        super().__init__(name, material_id)
        if min_corner is None:
            raise SceneArgumentError("Min corner cannot be null")
        width = _require_positive(width, "Width")
        height = _require_positive(height, "Height")
        depth = _require_positive(depth, "Depth")
        self.min = min_corner
        self.max = Vec3(min_corner.x + width, min_corner.y + height, min_corner.z + depth)
        self.center = (self.min + self.max) * 0.5

    def intersect(self, ray: Ray) -> Optional[float]:
        # slab method
        t_min = -math.inf
        t_max = math.inf
        for lo, hi, o, d in ((self.min.x, self.max.x, ray.origin.x, ray.direction.x),
                             (self.min.y, self.max.y, ray.origin.y, ray.direction.y),
                             (self.min.z, self.max.z, ray.origin.z, ray.direction.z)):
            if d == 0.0:
                # parallel to this slab: inside it or never
                if o < lo or o > hi:
                    return None
                continue
            inv_d = 1.0 / d
            t0 = (lo - o) * inv_d
            t1 = (hi - o) * inv_d
            if inv_d < 0.0:
                t0, t1 = t1, t0
            t_min = max(t_min, t0)
            t_max = min(t_max, t1)

        if t_max < t_min or t_max < EPSILON:
            return None
        # origin inside the box -> exit distance
        t = t_min if t_min > EPSILON else t_max
        return t if t > EPSILON else None

    def normal_at(self, point: Vec3) -> Vec3:
        # face along the largest raw offset from the center; ties go x, then y, then z
        d = point - self.center
        ax, ay, az = abs(d.x), abs(d.y), abs(d.z)
        largest = max(ax, ay, az)
        if abs(ax - largest) < EPSILON:
            return Vec3(_sign(d.x), 0, 0)
        if abs(ay - largest) < EPSILON:
            return Vec3(0, _sign(d.y), 0)
        return Vec3(0, 0, _sign(d.z))

    def __repr__(self):
        return f"Box(name={self.name}, min={self.min}, max={self.max})"


class Intersection:
    """Nearest hit of a ray: distance, point, unit outward normal and the primitive hit."""

    __slots__ = ("t", "point", "normal", "primitive")

    def __init__(self, t: float, point: Vec3, normal: Vec3, primitive: Primitive):
        if not (math.isfinite(t) and t >= 0):
            raise SceneArgumentError(f"Distance must be non-negative and finite, got {t}")
        if point is None or normal is None or primitive is None:
            raise SceneArgumentError("Intersection point, normal and primitive are required")
        self.t = t
        self.point = point
        self.normal = normal.normalize()
        self.primitive = primitive

    @property
    def distance(self):
        return self.t

    def __repr__(self):
        return f"Intersection(t={self.t:.4f}, point={self.point}, normal={self.normal})"

import math

from core.errors import SceneArgumentError
from core.math import Matrix3x3, Ray, Vec3


class Camera:
    def __init__(self,
                 position: Vec3,
                 direction: Vec3,
                 up: Vec3,
                 fov: float,                 # vertical FOV (deg)
                 focal_distance: float = 1.0):
        if position is None or direction is None or up is None:
            raise SceneArgumentError("Camera position, direction and up are required")
        if not (0.0 < fov < 180.0):
            raise SceneArgumentError(f"FOV must be between 0 and 180 degrees, got {fov}")
        if not (focal_distance > 0.0 and math.isfinite(focal_distance)):
            raise SceneArgumentError(f"Focal distance must be positive, got {focal_distance}")
        if direction.length() == 0 or up.length() == 0:
            raise SceneArgumentError("Camera direction and up must be non-zero vectors")
        if direction.cross(up).length() == 0:
            raise SceneArgumentError("Camera direction cannot be parallel to up")

        self.position = position
        self.direction = direction.normalize()
        self.up = up.normalize()
        self.fov = float(fov)
        self.focal_distance = float(focal_distance)

    @classmethod
    def look_at(cls,
                lookfrom: Vec3,
                lookat: Vec3,
                vup: Vec3,
                vfov: float,
                focal_distance: float = 1.0) -> "Camera":
        return cls(lookfrom, lookat - lookfrom, vup, vfov, focal_distance)

    @property
    def right(self) -> Vec3:
        return self.direction.cross(self.up).normalize()

    def basis(self) -> Matrix3x3:
        """Orthonormal camera frame with rows u (right), v (true up), w (backwards)."""
        w = -self.direction
        u = self.up.cross(w).normalize()
        v = w.cross(u)
        return Matrix3x3.from_rows(u, v, w)

    def viewport(self, width: int, height: int) -> "Viewport":
        return Viewport(self, width, height)

    def __repr__(self):
        return f"Camera(position={self.position}, direction={self.direction}, fov={self.fov:.1f})"


class Viewport:
    """Image plane one unit in front of the camera, spanned by horizontal and vertical edges."""

    def __init__(self, camera: Camera, width: int, height: int):
        self.origin = camera.position

        aspect = width / height
        theta = math.radians(camera.fov)
        viewport_height = 2.0 * math.tan(theta / 2)
        viewport_width = aspect * viewport_height

        frame = camera.basis()
        u, v, w = frame.row(0), frame.row(1), frame.row(2)

        self.horizontal = u * viewport_width
        self.vertical = v * viewport_height
        self.lower_left_corner = self.origin - self.horizontal * 0.5 - self.vertical * 0.5 - w

    def get_ray(self, s: float, t: float) -> Ray:
        target = (self.lower_left_corner +
                  self.horizontal * s +
                  self.vertical * t)
        return Ray(self.origin, target - self.origin)

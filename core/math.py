import math
from typing import Iterable, Optional, Tuple

import numpy as np

from core.errors import SceneArgumentError, VectorMathError

# Minimum admissible ray parameter and secondary-ray offset
EPSILON = 1e-4


class Vec3:
    def __init__(self, x=0.0, y=0.0, z=0.0):
        self.x = float(x)
        self.y = float(y)
        self.z = float(z)

    @classmethod
    def from_values(cls, values: Iterable, name: str = "vector") -> "Vec3":
        """Build a vector from exactly three finite numbers, rejecting anything else."""
        if values is None:
            raise SceneArgumentError(f"{name} cannot be null")
        try:
            items = list(values)
        except TypeError as e:
            raise SceneArgumentError(f"{name} must be a list of 3 numbers, got {values!r}") from e
        if len(items) != 3:
            raise SceneArgumentError(f"{name} must have exactly 3 components, got {len(items)}")
        coords = []
        for item in items:
            if isinstance(item, bool) or not isinstance(item, (int, float)):
                raise SceneArgumentError(f"{name} components must be numbers, got {item!r}")
            if not math.isfinite(item):
                raise SceneArgumentError(f"{name} components must be finite, got {item!r}")
            coords.append(item)
        return cls(*coords)

    def __add__(self, other):
        return Vec3(self.x + other.x,
                    self.y + other.y,
                    self.z + other.z)

    def __sub__(self, other):
        return Vec3(self.x - other.x,
                    self.y - other.y,
                    self.z - other.z)

    def __mul__(self, t):
        # scalar product, or element-wise (Hadamard) product with another Vec3
        if isinstance(t, Vec3):
            return Vec3(self.x * t.x,
                        self.y * t.y,
                        self.z * t.z)
        return Vec3(self.x * t, self.y * t, self.z * t)

    __rmul__ = __mul__

    def __truediv__(self, t):
        return Vec3(self.x / t, self.y / t, self.z / t)

    def __neg__(self):
        return Vec3(-self.x, -self.y, -self.z)

    def __eq__(self, other):
        if not isinstance(other, Vec3):
            return NotImplemented
        return self.x == other.x and self.y == other.y and self.z == other.z

    def __hash__(self):
        return hash((self.x, self.y, self.z))

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z

    def dot(self, other):
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other):
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x
        )

    def length(self):
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def distance(self, other):
        return (self - other).length()

    def normalize(self):
        l = self.length()
        if l == 0:
            raise VectorMathError("Cannot normalize zero vector")
        return self / l

    def reflect(self, normal):
        # r = v - 2 * dot(v, n) * n
        return self - normal * (2 * self.dot(normal))

    def refract(self, normal, ni_over_nt) -> Tuple[bool, Optional["Vec3"]]:
        """
        Snell refraction of this (unit) direction through a surface whose
        normal faces the incoming side. Returns (False, None) on total
        internal reflection.
        """
        dt = self.dot(normal)
        sin2_t = ni_over_nt * ni_over_nt * (1 - dt * dt)
        if sin2_t > 1.0:
            return False, None
        refracted = (self - normal * dt) * ni_over_nt - normal * math.sqrt(1.0 - sin2_t)
        return True, refracted.normalize()

    def clamp(self, low=0.0, high=1.0):
        return Vec3(min(high, max(low, self.x)),
                    min(high, max(low, self.y)),
                    min(high, max(low, self.z)))

    def is_close(self, other, tol=1e-9):
        return (abs(self.x - other.x) <= tol
                and abs(self.y - other.y) <= tol
                and abs(self.z - other.z) <= tol)

    def to_np(self):
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def __repr__(self):
        return f"Vec3({self.x:.3f}, {self.y:.3f}, {self.z:.3f})"


class Ray:
    def __init__(self, origin: Vec3, direction: Vec3):
        self.origin = origin
        self.direction = direction.normalize()

    def at(self, t):
        return self.origin + self.direction * t

    def __repr__(self):
        return f"Ray(origin={self.origin}, direction={self.direction})"


class Matrix3x3:
    """Row-major 3x3 matrix backed by a numpy array, used for frame transforms."""

    def __init__(self, data):
        array = np.array(data, dtype=np.float64)
        if array.shape != (3, 3):
            raise SceneArgumentError(f"Matrix must be 3x3, got shape {array.shape}")
        self._data = array
        self._data.flags.writeable = False

    @classmethod
    def identity(cls) -> "Matrix3x3":
        return cls(np.eye(3))

    @classmethod
    def from_rows(cls, r0: Vec3, r1: Vec3, r2: Vec3) -> "Matrix3x3":
        return cls([list(r0), list(r1), list(r2)])

    @classmethod
    def rotation_x(cls, angle: float) -> "Matrix3x3":
        c, s = math.cos(angle), math.sin(angle)
        return cls([[1, 0, 0], [0, c, -s], [0, s, c]])

    @classmethod
    def rotation_y(cls, angle: float) -> "Matrix3x3":
        c, s = math.cos(angle), math.sin(angle)
        return cls([[c, 0, s], [0, 1, 0], [-s, 0, c]])

    @classmethod
    def rotation_z(cls, angle: float) -> "Matrix3x3":
        c, s = math.cos(angle), math.sin(angle)
        return cls([[c, -s, 0], [s, c, 0], [0, 0, 1]])

    def get(self, row: int, col: int) -> float:
        if not (0 <= row < 3 and 0 <= col < 3):
            raise IndexError(f"Index ({row}, {col}) out of bounds")
        return float(self._data[row, col])

    def row(self, index: int) -> Vec3:
        return Vec3(*self._data[index])

    def transpose(self) -> "Matrix3x3":
        return Matrix3x3(self._data.T)

    def __add__(self, other: "Matrix3x3") -> "Matrix3x3":
        return Matrix3x3(self._data + other._data)

    def __matmul__(self, other):
        if isinstance(other, Vec3):
            return Vec3(*(self._data @ other.to_np()))
        return Matrix3x3(self._data @ other._data)

    def __eq__(self, other):
        if not isinstance(other, Matrix3x3):
            return NotImplemented
        return bool(np.array_equal(self._data, other._data))

    def __hash__(self):
        return hash(self._data.tobytes())

    def to_np(self):
        return self._data.copy()

    def __repr__(self):
        rows = ", ".join("[" + ", ".join(f"{v:.4f}" for v in r) + "]" for r in self._data)
        return f"Matrix3x3({rows})"

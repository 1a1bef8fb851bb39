import math
import random
import threading
from abc import ABC, abstractmethod
from typing import List

from core.errors import SceneArgumentError
from core.math import Vec3

# Seed shared by every surface light so renders are reproducible
SURFACE_LIGHT_SEED = 42


class Light(ABC):
    kind = None

    def __init__(self, color: Vec3, intensity: float):
        if color is None:
            raise SceneArgumentError("Light color cannot be null")
        if not (math.isfinite(intensity) and intensity >= 0):
            raise SceneArgumentError(f"Intensity must be non-negative, got {intensity}")
        self.color = color
        self.intensity = float(intensity)

    @abstractmethod
    def direction_from(self, point: Vec3) -> Vec3:
        """Unit vector from the point toward the light."""

    @abstractmethod
    def distance_from(self, point: Vec3) -> float:
        """Distance a shadow ray must travel to reach the light."""


class PointLight(Light):
    kind = "point"

    def __init__(self, color: Vec3, intensity: float, position: Vec3):
        super().__init__(color, intensity)
        if position is None:
            raise SceneArgumentError("Position cannot be null")
        self.position = position

    def direction_from(self, point: Vec3) -> Vec3:
        return (self.position - point).normalize()

    def distance_from(self, point: Vec3) -> float:
        return self.position.distance(point)

    def __repr__(self):
        return f"PointLight(position={self.position}, intensity={self.intensity:.2f})"


class DirectionalLight(Light):
    kind = "directional"

    def __init__(self, color: Vec3, intensity: float, direction: Vec3):
        super().__init__(color, intensity)
        if direction is None or direction.length() == 0:
            raise SceneArgumentError("Direction must be a non-zero vector")
        # direction the light travels, stored normalized
        self.direction = direction.normalize()

    def direction_from(self, point: Vec3) -> Vec3:
        return -self.direction

    def distance_from(self, point: Vec3) -> float:
        return math.inf

    def __repr__(self):
        return f"DirectionalLight(direction={self.direction}, intensity={self.intensity:.2f})"


class SurfaceLight(Light):
    """
    Rectangular area light. Shading samples it through sample_points(), which
    draws a jittered stratified set of points over the rectangle; the single
    direction/distance queries aim at its center.
    """

    kind = "surface"

    def __init__(self,
                 color: Vec3,
                 intensity: float,
                 position: Vec3,
                 normal: Vec3,
                 width: float,
                 height: float,
                 samples: int,
                 seed: int = SURFACE_LIGHT_SEED):
        super().__init__(color, intensity)
        if position is None:
            raise SceneArgumentError("Position cannot be null")
        if normal is None or normal.length() == 0:
            raise SceneArgumentError("Normal must be a non-zero vector")
        if not (math.isfinite(width) and width > 0):
            raise SceneArgumentError(f"Width must be positive, got {width}")
        if not (math.isfinite(height) and height > 0):
            raise SceneArgumentError(f"Height must be positive, got {height}")
        if isinstance(samples, bool) or not isinstance(samples, int) or samples < 1:
            raise SceneArgumentError(f"Samples must be an integer >= 1, got {samples}")

        self.position = position
        self.normal = normal.normalize()
        self.width = float(width)
        self.height = float(height)
        self.samples = samples

        # Shared between render workers
        self._random = random.Random(seed)
        self._lock = threading.Lock()

        fallback = Vec3(0, 1, 0) if abs(self.normal.y) < 0.9 else Vec3(1, 0, 0)
        self.u_axis = self.normal.cross(fallback).normalize()
        self.v_axis = self.normal.cross(self.u_axis).normalize()

    def direction_from(self, point: Vec3) -> Vec3:
        return (self.position - point).normalize()

    def distance_from(self, point: Vec3) -> float:
        return self.position.distance(point)

    def sample_points(self) -> List[Vec3]:
        grid_n = math.ceil(math.sqrt(self.samples))
        with self._lock:
            jitter = [(self._random.random(), self._random.random()) for _ in range(self.samples)]

        points = []
        for i, (ju, jv) in enumerate(jitter):
            row, col = divmod(i, grid_n)
            u_offset = (col + ju) / grid_n
            v_offset = (row + jv) / grid_n
            points.append(self.position
                          + self.u_axis * ((u_offset - 0.5) * self.width)
                          + self.v_axis * ((v_offset - 0.5) * self.height))
        return points

    def __repr__(self):
        return (f"SurfaceLight(position={self.position}, normal={self.normal}, "
                f"size={self.width:.2f}x{self.height:.2f}, samples={self.samples})")

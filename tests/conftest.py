"""Shared fixtures for the ray tracer tests.

Scenes are assembled through SceneBuilder so each test states only the
parts it cares about.
"""

import pytest

from core.camera import Camera
from core.geometry import Sphere
from core.material import PhongMaterial
from core.math import Vec3
from core.scene import SceneBuilder

BLACK = Vec3(0, 0, 0)


@pytest.fixture
def front_camera():
    """Camera at (0, 0, 5) looking down -z with a 60 degree field of view."""
    return Camera(Vec3(0, 0, 5), Vec3(0, 0, -1), Vec3(0, 1, 0), 60.0)


@pytest.fixture
def builder(front_camera):
    return SceneBuilder().camera(front_camera).background(BLACK)


@pytest.fixture
def sphere_scene(builder):
    """Factory: unit sphere at the origin with a flat Phong material."""

    def _make(color=Vec3(1, 0, 0), ambient=BLACK, diffuse=1.0, width=3, height=3, lights=()):
        material = PhongMaterial(color, diffuse=diffuse, specular=0.0, ambient=ambient)
        builder.add_material("red", material)
        builder.add_primitive(Sphere("ball", "red", Vec3(0, 0, 0), 1.0))
        for light in lights:
            builder.add_light(light)
        return builder.image_size(width, height).build()

    return _make


class RecordingListener:
    """Progress listener that records every event it receives."""

    def __init__(self):
        import threading

        self.events = []
        self._lock = threading.Lock()

    def _record(self, *event):
        with self._lock:
            self.events.append(event)

    def render_start(self, total_pixels):
        self._record("start", total_pixels)

    def progress_update(self, pixels_done, total_pixels):
        self._record("progress", pixels_done, total_pixels)

    def tile_completed(self, tile_id):
        self._record("tile", tile_id)

    def render_complete(self):
        self._record("complete")

    def of_kind(self, kind):
        return [e for e in self.events if e[0] == kind]


@pytest.fixture
def recorder():
    return RecordingListener()


@pytest.fixture(autouse=True)
def detach_log_handlers():
    """Remove handlers installed by setup_logging so they do not outlive a test's capture."""
    import logging

    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_raytracer_handler", False):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(logging.WARNING)

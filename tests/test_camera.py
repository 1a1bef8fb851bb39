"""Tests for the camera frame and primary ray generation."""

import math

import pytest

from core.camera import Camera
from core.errors import SceneArgumentError
from core.math import Vec3


class TestCameraValidation:
    """Tests for invalid camera parameters."""

    @pytest.mark.parametrize("fov", [0.0, 180.0, -10.0, 200.0])
    def test_fov_out_of_range(self, fov):
        with pytest.raises(SceneArgumentError):
            Camera(Vec3(0, 0, 0), Vec3(0, 0, -1), Vec3(0, 1, 0), fov)

    def test_non_positive_focal_distance(self):
        with pytest.raises(SceneArgumentError):
            Camera(Vec3(0, 0, 0), Vec3(0, 0, -1), Vec3(0, 1, 0), 60.0, 0.0)

    def test_zero_direction(self):
        with pytest.raises(SceneArgumentError):
            Camera(Vec3(0, 0, 0), Vec3(0, 0, 0), Vec3(0, 1, 0), 60.0)

    @pytest.mark.parametrize("direction", [Vec3(0, 1, 0), Vec3(0, -3, 0)])
    def test_direction_parallel_to_up(self, direction):
        """Test a degenerate frame is rejected at construction, before any render."""
        with pytest.raises(SceneArgumentError):
            Camera(Vec3(0, 0, 0), direction, Vec3(0, 1, 0), 60.0)

    def test_missing_position(self):
        with pytest.raises(SceneArgumentError):
            Camera(None, Vec3(0, 0, -1), Vec3(0, 1, 0), 60.0)


class TestCameraFrame:
    """Tests for the orthonormal basis and viewport."""

    def test_basis_is_orthonormal(self):
        camera = Camera(Vec3(1, 2, 3), Vec3(1, -0.5, -2), Vec3(0, 1, 0), 45.0)
        frame = camera.basis()
        u, v, w = frame.row(0), frame.row(1), frame.row(2)
        for axis in (u, v, w):
            assert abs(axis.length() - 1.0) < 1e-9
        assert abs(u.dot(v)) < 1e-9
        assert abs(u.dot(w)) < 1e-9
        assert abs(v.dot(w)) < 1e-9
        assert w.is_close(-camera.direction)

    def test_look_at(self):
        camera = Camera.look_at(Vec3(0, 0, 5), Vec3(0, 0, 0), Vec3(0, 1, 0), 60.0)
        assert camera.direction.is_close(Vec3(0, 0, -1))
        assert camera.right.is_close(Vec3(1, 0, 0))

    def test_center_ray_follows_direction(self, front_camera):
        """Test the viewport center maps to the viewing direction."""
        ray = front_camera.viewport(4, 3).get_ray(0.5, 0.5)
        assert ray.origin == front_camera.position
        assert ray.direction.is_close(Vec3(0, 0, -1))

    def test_viewport_extent(self, front_camera):
        """Test corner rays span the vertical field of view."""
        viewport = front_camera.viewport(2, 2)
        top = viewport.get_ray(0.5, 1.0).direction
        bottom = viewport.get_ray(0.5, 0.0).direction
        angle = math.degrees(math.acos(top.dot(bottom)))
        assert abs(angle - 60.0) < 1e-9
        # v = 1 is the top of the picture
        assert top.y > 0 > bottom.y

    def test_right_is_positive_u(self, front_camera):
        ray = front_camera.viewport(2, 2).get_ray(1.0, 0.5)
        assert ray.direction.x > 0

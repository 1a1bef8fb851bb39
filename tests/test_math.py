"""Unit tests for Vec3, Ray and Matrix3x3."""

import math

import pytest

from core.errors import SceneArgumentError, VectorMathError
from core.math import Matrix3x3, Ray, Vec3


class TestVec3:
    """Tests for vector arithmetic."""

    def test_basic_operators(self):
        """Test addition, subtraction, scaling and negation."""
        a = Vec3(1, 2, 3)
        b = Vec3(4, 5, 6)
        assert a + b == Vec3(5, 7, 9)
        assert b - a == Vec3(3, 3, 3)
        assert a * 2 == Vec3(2, 4, 6)
        assert 2 * a == Vec3(2, 4, 6)
        assert a / 2 == Vec3(0.5, 1, 1.5)
        assert -a == Vec3(-1, -2, -3)

    def test_hadamard_product(self):
        """Test that multiplying two vectors is element-wise."""
        assert Vec3(1, 2, 3) * Vec3(2, 0, -1) == Vec3(2, 0, -3)

    def test_dot_and_cross(self):
        """Test dot and cross products of the axes."""
        x, y, z = Vec3(1, 0, 0), Vec3(0, 1, 0), Vec3(0, 0, 1)
        assert x.dot(y) == 0
        assert x.dot(x) == 1
        assert x.cross(y) == z
        assert y.cross(z) == x

    def test_normalize(self):
        """Test normalization produces a unit vector."""
        v = Vec3(3, 4, 0).normalize()
        assert abs(v.length() - 1.0) < 1e-12
        assert v.is_close(Vec3(0.6, 0.8, 0))

    def test_normalize_zero_vector_raises(self):
        """Test zero vector normalization is a math error."""
        with pytest.raises(VectorMathError):
            Vec3(0, 0, 0).normalize()

    def test_reflect_is_involution(self):
        """Test reflecting twice returns the original unit vector."""
        n = Vec3(0, 1, 0)
        for v in (Vec3(1, -1, 0), Vec3(0.3, -0.2, 0.9), Vec3(-2, 5, 1)):
            v = v.normalize()
            r = v.reflect(n)
            assert abs(r.length() - 1.0) < 1e-9
            assert r.reflect(n).is_close(v)

    def test_refract_straight_through(self):
        """Test head-on refraction keeps the direction."""
        ok, d = Vec3(0, 0, -1).refract(Vec3(0, 0, 1), 1 / 1.5)
        assert ok
        assert d.is_close(Vec3(0, 0, -1))

    def test_refract_total_internal_reflection(self):
        """Test steep exit from glass reports no refraction."""
        d = Vec3(math.sin(math.radians(60)), math.cos(math.radians(60)), 0)
        ok, refracted = d.refract(Vec3(0, -1, 0), 1.5)
        assert not ok
        assert refracted is None

    def test_clamp(self):
        assert Vec3(-1, 0.5, 2).clamp() == Vec3(0, 0.5, 1)


class TestVec3FromValues:
    """Tests for boundary validation of vectors read from input."""

    def test_accepts_three_numbers(self):
        assert Vec3.from_values([1, 2.5, -3]) == Vec3(1, 2.5, -3)

    @pytest.mark.parametrize("values", [
        [1, 2],
        [1, 2, 3, 4],
        [1, "2", 3],
        [True, 0, 0],
        [float("nan"), 0, 0],
        [float("inf"), 0, 0],
        None,
        5,
    ])
    def test_rejects_invalid(self, values):
        """Test anything other than three finite numbers is an argument error."""
        with pytest.raises(SceneArgumentError):
            Vec3.from_values(values, "position")


class TestRay:
    """Tests for ray construction and evaluation."""

    def test_direction_is_normalized(self):
        ray = Ray(Vec3(0, 0, 0), Vec3(0, 0, -10))
        assert ray.direction == Vec3(0, 0, -1)

    @pytest.mark.parametrize("t", [0.0, 0.5, 3.0, 100.0])
    def test_at_distance(self, t):
        """Test |r.at(t) - origin| equals t for a unit direction."""
        ray = Ray(Vec3(1, 2, 3), Vec3(1, 1, 1))
        assert abs(ray.at(t).distance(ray.origin) - t) < 1e-9


class TestMatrix3x3:
    """Tests for the 3x3 matrix helper."""

    def test_identity_times_vector(self):
        v = Vec3(1, 2, 3)
        assert Matrix3x3.identity() @ v == v

    def test_get_and_bounds(self):
        m = Matrix3x3([[1, 2, 3], [4, 5, 6], [7, 8, 9]])
        assert m.get(1, 2) == 6
        with pytest.raises(IndexError):
            m.get(3, 0)

    def test_add_and_multiply(self):
        m = Matrix3x3([[1, 2, 3], [4, 5, 6], [7, 8, 9]])
        assert m + Matrix3x3.identity() == Matrix3x3([[2, 2, 3], [4, 6, 6], [7, 8, 10]])
        assert m @ Matrix3x3.identity() == m

    def test_rotation_z_quarter_turn(self):
        """Test rotating x by 90 degrees about z gives y."""
        r = Matrix3x3.rotation_z(math.pi / 2) @ Vec3(1, 0, 0)
        assert r.is_close(Vec3(0, 1, 0), tol=1e-12)

    def test_rotation_is_orthogonal(self):
        m = Matrix3x3.rotation_x(0.3) @ Matrix3x3.rotation_y(-1.1)
        product = (m @ m.transpose()).to_np()
        for i in range(3):
            for j in range(3):
                assert abs(product[i, j] - (1.0 if i == j else 0.0)) < 1e-12

    def test_wrong_shape_rejected(self):
        with pytest.raises(SceneArgumentError):
            Matrix3x3([[1, 2], [3, 4]])

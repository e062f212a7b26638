"""Unit tests for the ray module.

Tests cover:
- Host Ray position and transform
- RayStruct, ray_at and make_ray inside kernels
- Point/vector transforms and ray transforms inside kernels
- Reflection
"""

import math

import numpy as np
import taichi as ti


class TestHostRay:
    """Tests for the host-side Ray dataclass."""

    def test_position(self):
        """Test computing points along a ray, including behind its origin."""
        from src.raytracer.core.ray import Ray
        from src.raytracer.core.tuples import point, vector

        r = Ray(point(2, 3, 4), vector(1, 0, 0))
        assert np.allclose(r.position(0), point(2, 3, 4))
        assert np.allclose(r.position(1), point(3, 3, 4))
        assert np.allclose(r.position(-1), point(1, 3, 4))
        assert np.allclose(r.position(2.5), point(4.5, 3, 4))

    def test_translate(self):
        """Test translation moves the origin but not the direction."""
        from src.raytracer.core.ray import Ray
        from src.raytracer.core.transform import translation
        from src.raytracer.core.tuples import point, vector

        r = Ray(point(1, 2, 3), vector(0, 1, 0)).transform(translation(3, 4, 5))
        assert np.allclose(r.origin, point(4, 6, 8))
        assert np.allclose(r.direction, vector(0, 1, 0))

    def test_scale_keeps_direction_unnormalized(self):
        """Test scaling a ray scales its direction too."""
        from src.raytracer.core.ray import Ray
        from src.raytracer.core.transform import scaling
        from src.raytracer.core.tuples import point, vector

        original = Ray(point(1, 2, 3), vector(0, 1, 0))
        r = original.transform(scaling(2, 3, 4))
        assert np.allclose(r.origin, point(2, 6, 12))
        assert np.allclose(r.direction, vector(0, 3, 0))
        # The original ray is untouched
        assert np.allclose(original.origin, point(1, 2, 3))


class TestRayStruct:
    """Tests for RayStruct and ray_at inside kernels."""

    def test_ray_at_positive_and_negative_t(self):
        """Test ray_at on both sides of the origin."""
        from src.raytracer.core.ray import make_ray, ray_at, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=2)

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(2.0, 3.0, 4.0), vec3(1.0, 0.0, 0.0))
            result[0] = ray_at(ray, 2.5)
            result[1] = ray_at(ray, -1.0)

        test_kernel()
        ahead = result[0]
        behind = result[1]
        assert abs(ahead[0] - 4.5) < 1e-12
        assert abs(ahead[1] - 3.0) < 1e-12
        assert abs(behind[0] - 1.0) < 1e-12
        assert abs(behind[2] - 4.0) < 1e-12

    def test_transform_point_and_vector(self):
        """Test translation applies to points but not vectors."""
        from src.raytracer.core.ray import mat4, transform_point, transform_vector, vec3
        from src.raytracer.core.transform import translation

        m = mat4(translation(5, -3, 2).tolist())
        result = ti.Vector.field(3, dtype=ti.f64, shape=2)

        @ti.kernel
        def test_kernel(m: mat4):
            result[0] = transform_point(m, vec3(-3.0, 4.0, 5.0))
            result[1] = transform_vector(m, vec3(-3.0, 4.0, 5.0))

        test_kernel(m)
        p = result[0]
        v = result[1]
        assert abs(p[0] - 2.0) < 1e-12
        assert abs(p[1] - 1.0) < 1e-12
        assert abs(p[2] - 7.0) < 1e-12
        assert abs(v[0] - (-3.0)) < 1e-12
        assert abs(v[1] - 4.0) < 1e-12
        assert abs(v[2] - 5.0) < 1e-12

    def test_transform_ray_matches_host(self):
        """Test the kernel ray transform agrees with the host one."""
        from src.raytracer.core.ray import Ray, make_ray, mat4, transform_ray, vec3
        from src.raytracer.core.transform import chain, rotation_y, scaling, translation
        from src.raytracer.core.tuples import point, vector

        matrix = chain(scaling(2, 3, 4), rotation_y(math.pi / 3), translation(1, -2, 0.5))
        expected = Ray(point(1, 2, 3), vector(0, 1, -1)).transform(matrix)

        result = ti.Vector.field(3, dtype=ti.f64, shape=2)

        @ti.kernel
        def test_kernel(m: mat4):
            r = transform_ray(make_ray(vec3(1.0, 2.0, 3.0), vec3(0.0, 1.0, -1.0)), m)
            result[0] = r.origin
            result[1] = r.direction

        test_kernel(mat4(matrix.tolist()))
        origin, direction = result.to_numpy()
        assert np.allclose(origin, expected.origin[:3], atol=1e-12)
        assert np.allclose(direction, expected.direction[:3], atol=1e-12)


class TestReflect:
    """Tests for reflection inside kernels."""

    def test_reflect_at_45_degrees(self):
        """Test a vector approaching at 45 degrees bounces straight up."""
        from src.raytracer.core.ray import reflect, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-12
        assert abs(r[1] - 1.0) < 1e-12
        assert abs(r[2]) < 1e-12

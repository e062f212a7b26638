"""Unit tests for the world and its shading pipeline.

Tests cover:
- World construction and the default world
- Intersecting a ray with every primitive
- Precomputing shading geometry (outside, inside, over point)
- shade_hit with and without shadows
- color_at for misses, hits and hits behind the ray
- Shadow tests against the light
- Re-uploading the world after edits
"""

import math

import numpy as np
import pytest


def _default_ray():
    from src.raytracer.core.ray import Ray
    from src.raytracer.core.tuples import point, vector

    return Ray(point(0, 0, -5), vector(0, 0, 1))


class TestWorldConstruction:
    """Tests for building worlds."""

    def test_empty_world(self):
        """Test a new world has no shapes and a white light."""
        from src.raytracer.scene.world import World

        w = World()
        assert w.shapes == []
        assert w.light.intensity == (1.0, 1.0, 1.0)

    def test_add_returns_index(self):
        """Test add appends and returns the shape's index."""
        from src.raytracer.geometry.shape import Shape
        from src.raytracer.scene.world import World

        w = World()
        assert w.add(Shape.sphere()) == 0
        assert w.add(Shape.plane()) == 1
        assert len(w.shapes) == 2

    def test_default_world(self):
        """Test the contents of the default world."""
        from src.raytracer.core.transform import scaling
        from src.raytracer.core.tuples import point
        from src.raytracer.geometry.shape import ShapeKind
        from src.raytracer.scene.world import default_world

        w = default_world()
        assert np.allclose(w.light.position, point(-10, 10, -10))
        assert w.light.intensity == (1.0, 1.0, 1.0)
        assert len(w.shapes) == 2

        outer, inner = w.shapes
        assert outer.kind == ShapeKind.SPHERE
        assert outer.material.color == (0.8, 1.0, 0.6)
        assert outer.material.diffuse == 0.7
        assert outer.material.specular == 0.2
        assert np.allclose(inner.transform, scaling(0.5, 0.5, 0.5))

    def test_intersect_default_world(self):
        """Test a ray through both spheres gives four sorted intersections."""
        from src.raytracer.scene.world import default_world

        xs = default_world().intersect(_default_ray())
        assert len(xs) == 4
        assert np.allclose([i.t for i in xs], [4.0, 4.5, 5.5, 6.0])
        assert [i.shape for i in xs] == [0, 1, 1, 0]

    def test_world_hit(self):
        """Test the world hit is the nearest front intersection."""
        from src.raytracer.scene.world import default_world

        h = default_world().hit(_default_ray())
        assert h is not None
        assert abs(h.t - 4.0) < 1e-9
        assert h.shape == 0


class TestPrepareComputations:
    """Tests for precomputing shading geometry."""

    def test_hit_outside(self):
        """Test an intersection from outside the shape."""
        from src.raytracer.core.tuples import point, vector
        from src.raytracer.scene.intersection import Intersection
        from src.raytracer.scene.world import default_world

        comps = default_world().prepare_computations(Intersection(4.0, 0), _default_ray())
        assert comps.t == 4.0
        assert comps.shape == 0
        assert np.allclose(comps.point, point(0, 0, -1))
        assert np.allclose(comps.eyev, vector(0, 0, -1))
        assert np.allclose(comps.normalv, vector(0, 0, -1))
        assert comps.inside is False

    def test_hit_inside(self):
        """Test an intersection from inside flips the normal."""
        from src.raytracer.core.ray import Ray
        from src.raytracer.core.tuples import point, vector
        from src.raytracer.scene.intersection import Intersection
        from src.raytracer.scene.world import default_world

        ray = Ray(point(0, 0, 0), vector(0, 0, 1))
        comps = default_world().prepare_computations(Intersection(1.0, 0), ray)
        assert np.allclose(comps.point, point(0, 0, 1))
        assert np.allclose(comps.eyev, vector(0, 0, -1))
        assert comps.inside is True
        assert np.allclose(comps.normalv, vector(0, 0, -1))

    def test_inside_over_point_uses_outward_normal(self):
        """Test the over point of an inside hit lies just outside the surface."""
        from src.raytracer.core.ray import Ray
        from src.raytracer.core.tuples import point, vector
        from src.raytracer.scene.intersection import Intersection
        from src.raytracer.scene.world import OVER_POINT_EPSILON, default_world

        ray = Ray(point(0, 0, 0), vector(0, 0, 1))
        comps = default_world().prepare_computations(Intersection(1.0, 0), ray)
        assert comps.inside is True
        assert comps.over_point[2] > 1.0 + OVER_POINT_EPSILON / 2
        assert comps.over_point[2] > comps.point[2]

    def test_over_point_offset(self):
        """Test the over point sits just above the surface."""
        from src.raytracer.core.transform import translation
        from src.raytracer.geometry.shape import Shape
        from src.raytracer.scene.intersection import Intersection
        from src.raytracer.scene.world import OVER_POINT_EPSILON, World

        w = World(shapes=[Shape.sphere(transform=translation(0, 0, 1))])
        comps = w.prepare_computations(Intersection(5.0, 0), _default_ray())
        assert comps.over_point[2] < -OVER_POINT_EPSILON / 2
        assert comps.point[2] > comps.over_point[2]


class TestShading:
    """Tests for shade_hit and color_at."""

    def test_shade_outside(self, assert_color):
        """Test shading an intersection from outside."""
        from src.raytracer.scene.intersection import Intersection
        from src.raytracer.scene.world import default_world

        w = default_world()
        ray = _default_ray()
        comps = w.prepare_computations(Intersection(4.0, 0), ray)
        assert_color(w.shade_hit(comps), (0.38066, 0.47583, 0.2855))

    def test_shade_inside(self, assert_color):
        """Test an inside hit is shaded from outside the surface, so the
        primitive itself shadows the light and only ambient remains.
        """
        from src.raytracer.core.ray import Ray
        from src.raytracer.core.tuples import point, vector
        from src.raytracer.materials.phong import PointLight
        from src.raytracer.scene.intersection import Intersection
        from src.raytracer.scene.world import default_world

        w = default_world()
        w.light = PointLight((1.0, 1.0, 1.0), point(0, 0.25, 0))
        ray = Ray(point(0, 0, 0), vector(0, 0, 1))
        comps = w.prepare_computations(Intersection(0.5, 1), ray)
        assert comps.over_point[2] > 0.5
        assert_color(w.shade_hit(comps), (0.1, 0.1, 0.1))

    def test_shade_in_shadow(self, assert_color):
        """Test a point hidden from the light gets ambient only."""
        from src.raytracer.core.ray import Ray
        from src.raytracer.core.transform import translation
        from src.raytracer.core.tuples import point, vector
        from src.raytracer.geometry.shape import Shape
        from src.raytracer.materials.phong import PointLight
        from src.raytracer.scene.intersection import Intersection
        from src.raytracer.scene.world import World

        w = World(
            light=PointLight((1.0, 1.0, 1.0), point(0, 0, -10)),
            shapes=[Shape.sphere(), Shape.sphere(transform=translation(0, 0, 10))],
        )
        ray = Ray(point(0, 0, 5), vector(0, 0, 1))
        comps = w.prepare_computations(Intersection(4.0, 1), ray)
        assert_color(w.shade_hit(comps), (0.1, 0.1, 0.1))

    def test_color_when_ray_misses(self, assert_color):
        """Test a ray hitting nothing is black."""
        from src.raytracer.core.ray import Ray
        from src.raytracer.core.tuples import point, vector
        from src.raytracer.scene.world import default_world

        c = default_world().color_at(Ray(point(0, 0, -5), vector(0, 1, 0)))
        assert_color(c, (0.0, 0.0, 0.0))

    def test_color_when_ray_hits(self, assert_color):
        """Test color_at shades the visible hit."""
        from src.raytracer.scene.world import default_world

        assert_color(default_world().color_at(_default_ray()), (0.38066, 0.47583, 0.2855))

    def test_color_with_intersection_behind_ray(self, assert_color):
        """Test the inner sphere is seen from between the two spheres."""
        from src.raytracer.core.ray import Ray
        from src.raytracer.core.tuples import point, vector
        from src.raytracer.scene.world import default_world

        w = default_world()
        w.shapes[0].material.ambient = 1.0
        w.shapes[1].material.ambient = 1.0
        c = w.color_at(Ray(point(0, 0, 0.75), vector(0, 0, -1)))
        assert_color(c, w.shapes[1].material.color)

    def test_empty_world_is_black(self, assert_color):
        """Test every ray in an empty world is black."""
        from src.raytracer.scene.world import World

        assert_color(World().color_at(_default_ray()), (0.0, 0.0, 0.0))


class TestShadows:
    """Tests for shadow rays toward the light."""

    @pytest.mark.parametrize(
        "p, expected",
        [
            # Nothing collinear with point and light
            ((0, 10, 0), False),
            # Object between the point and the light
            ((10, -10, 10), True),
            # Object behind the light
            ((-20, 20, -20), False),
            # Object behind the point
            ((-2, 2, -2), False),
        ],
    )
    def test_is_shadowed(self, p, expected):
        """Test shadow detection in the default world."""
        from src.raytracer.core.tuples import point
        from src.raytracer.scene.world import default_world

        assert default_world().is_shadowed(point(*p)) is expected

    def test_floor_shadowed_by_sphere(self):
        """Test a sphere between a floor point and an overhead light."""
        from src.raytracer.core.transform import translation
        from src.raytracer.core.tuples import point
        from src.raytracer.geometry.shape import Shape
        from src.raytracer.materials.phong import PointLight
        from src.raytracer.scene.world import World

        w = World(
            light=PointLight((1.0, 1.0, 1.0), point(0, 10, 0)),
            shapes=[Shape.plane(), Shape.sphere(transform=translation(0, 2, 0))],
        )
        assert w.is_shadowed(point(0, 1e-7, 0)) is True
        assert w.is_shadowed(point(3, 1e-7, 0)) is False


class TestWorldUpload:
    """Tests for keeping the device copy of the world current."""

    def test_repeated_queries_are_identical(self):
        """Test the same query twice gives the same color."""
        from src.raytracer.scene.world import default_world

        w = default_world()
        first = w.color_at(_default_ray())
        second = w.color_at(_default_ray())
        assert np.array_equal(first, second)

    def test_edits_are_seen(self):
        """Test changing a material after a query affects the next one."""
        from src.raytracer.scene.world import default_world

        w = default_world()
        before = w.color_at(_default_ray())
        w.shapes[0].material.color = (0.0, 0.0, 0.0)
        after = w.color_at(_default_ray())
        assert not np.allclose(before, after)

    def test_switching_worlds(self):
        """Test querying a second world does not see the first one."""
        from src.raytracer.core.transform import translation
        from src.raytracer.geometry.shape import Shape
        from src.raytracer.scene.world import World, default_world

        default_world().color_at(_default_ray())
        w = World(shapes=[Shape.sphere(transform=translation(5, 0, 0))])
        assert w.hit(_default_ray()) is None
        assert np.allclose(w.color_at(_default_ray()), 0.0)

    def test_too_many_shapes(self):
        """Test exceeding the shape capacity raises."""
        from src.raytracer.geometry.shape import Shape
        from src.raytracer.scene.intersection import MAX_SHAPES
        from src.raytracer.scene.world import World

        w = World(shapes=[Shape.sphere() for _ in range(MAX_SHAPES + 1)])
        with pytest.raises(RuntimeError, match="Maximum number of shapes"):
            w.color_at(_default_ray())

    def test_many_shapes_at_capacity(self):
        """Test a full world of overlapping spheres still intersects."""
        from src.raytracer.core.transform import translation
        from src.raytracer.geometry.shape import Shape
        from src.raytracer.scene.intersection import MAX_SHAPES
        from src.raytracer.scene.world import World

        w = World(
            shapes=[
                Shape.sphere(transform=translation(0, 0, 0.01 * i)) for i in range(MAX_SHAPES)
            ]
        )
        xs = w.intersect(_default_ray())
        assert len(xs) == 2 * MAX_SHAPES
        assert w.hit(_default_ray()).shape == 0
        assert math.isclose(xs[0].t, 4.0, abs_tol=1e-9)

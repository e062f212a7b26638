"""The world: one point light, a list of primitives and the shading pipeline.

For a ray, the world finds the visible intersection, precomputes the
geometry at that point and shades it with the Phong model, testing the
shading point against the light for shadows:

    color_at(ray)
      -> hit_scene(ray)                      nearest non-negative t
      -> prepare_computations(hit, ray)      point, eye, normal, over point
      -> shade_hit(comps)                    lighting(..., is_shadowed(over_point))

The device functions here are what the camera's render kernel calls per
pixel. The :class:`World` methods run the same functions for a single ray
from Python, uploading the world first so edits to its light, shapes or
materials are always seen.

Nothing in the pipeline writes to the world, so any number of pixels can be
shaded concurrently against it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.raytracer.scene.world import default_world
    >>> from src.raytracer.core.ray import Ray
    >>> from src.raytracer.core.tuples import point, vector
    >>> w = default_world()
    >>> w.color_at(Ray(point(0, 0, -5), vector(0, 0, 1)))  # ~(0.38066, 0.47583, 0.2855)
"""

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from src.raytracer.core.ray import Ray, RayStruct, make_ray, ray_at, to_vec3, vec3
from src.raytracer.core.transform import scaling
from src.raytracer.core.tuples import Color, Tuple4, point, vector
from src.raytracer.geometry.shape import Shape, intersect_shape
from src.raytracer.materials.phong import Material, PointLight, lighting
from src.raytracer.scene.intersection import (
    MAX_SHAPES,
    Intersection,
    get_light,
    get_material,
    hit,
    hit_scene,
    intersections,
    light_position,
    load_world,
    num_shapes,
    shape_inverses,
    shape_kinds,
    shape_normal_at,
)

# Distance the shading point is pushed along the normal to avoid acne
OVER_POINT_EPSILON = 1e-7


# =============================================================================
# Host-side World
# =============================================================================


@dataclass
class Computations:
    """Geometry at an intersection, ready for shading.

    Attributes:
        t: Distance along the ray.
        shape: Index of the primitive hit.
        point: World-space surface point.
        over_point: point nudged along the outward normal by
            OVER_POINT_EPSILON.
        eyev: Unit vector from the point toward the eye.
        normalv: Unit surface normal, flipped to face the eye.
        inside: True if the ray started inside the primitive.
    """

    t: float
    shape: int
    point: Tuple4
    over_point: Tuple4
    eyev: Tuple4
    normalv: Tuple4
    inside: bool


class World:
    """A scene lit by a single point light.

    Attributes:
        light: The point light.
        shapes: Primitives in the scene. A primitive's index in this list is
            its identity in intersections and computations.
    """

    def __init__(
        self,
        light: PointLight | None = None,
        shapes: Iterable[Shape] | None = None,
    ) -> None:
        self.light = light if light is not None else PointLight((1.0, 1.0, 1.0), point(-10, 10, -10))
        self.shapes: list[Shape] = list(shapes) if shapes is not None else []

    def add(self, shape: Shape) -> int:
        """Append a primitive and return its index."""
        self.shapes.append(shape)
        return len(self.shapes) - 1

    def intersect(self, ray: Ray) -> list[Intersection]:
        """All intersections of a ray with every primitive, sorted by t."""
        load_world(self)
        _intersect_world_kernel(to_vec3(ray.origin), to_vec3(ray.direction))
        count = int(_xs_count[None])
        ts = _xs_t.to_numpy()[:count]
        ids = _xs_shape.to_numpy()[:count]
        return intersections(*(Intersection(float(t), int(i)) for t, i in zip(ts, ids)))

    def prepare_computations(self, intersection: Intersection, ray: Ray) -> Computations:
        """Precompute the shading geometry for an intersection.

        Args:
            intersection: The intersection to shade, normally the hit.
            ray: The ray that produced it.

        Returns:
            The computations for :meth:`shade_hit`.
        """
        load_world(self)
        _prepare_kernel(
            float(intersection.t),
            int(intersection.shape),
            to_vec3(ray.origin),
            to_vec3(ray.direction),
        )
        vectors = _comps_vectors.to_numpy()
        return Computations(
            t=float(intersection.t),
            shape=int(intersection.shape),
            point=point(*vectors[0]),
            over_point=point(*vectors[1]),
            eyev=vector(*vectors[2]),
            normalv=vector(*vectors[3]),
            inside=bool(_comps_inside[None]),
        )

    def shade_hit(self, comps: Computations) -> Color:
        """Color at a prepared intersection, including shadowing."""
        load_world(self)
        c = _shade_hit_kernel(
            comps.shape,
            to_vec3(comps.over_point),
            to_vec3(comps.eyev),
            to_vec3(comps.normalv),
        )
        return _to_color(c)

    def is_shadowed(self, p: Tuple4) -> bool:
        """Whether a primitive lies between a point and the light."""
        load_world(self)
        return bool(_is_shadowed_kernel(to_vec3(p)))

    def color_at(self, ray: Ray) -> Color:
        """Color seen along a ray; black when it hits nothing."""
        load_world(self)
        return _to_color(_color_at_kernel(to_vec3(ray.origin), to_vec3(ray.direction)))

    def hit(self, ray: Ray) -> Intersection | None:
        """The visible intersection of a ray, or None."""
        return hit(self.intersect(ray))


def default_world() -> World:
    """Build the two-sphere test scene.

    A white light at (-10, 10, -10), a unit sphere with a green-yellow
    material and a concentric sphere of radius 0.5 with the default
    material.
    """
    outer = Shape.sphere(material=Material(color=(0.8, 1.0, 0.6), diffuse=0.7, specular=0.2))
    inner = Shape.sphere(transform=scaling(0.5, 0.5, 0.5))
    return World(
        light=PointLight((1.0, 1.0, 1.0), point(-10, 10, -10)),
        shapes=[outer, inner],
    )


def _to_color(c) -> Color:
    return np.array([float(c[0]), float(c[1]), float(c[2])], dtype=np.float64)


# =============================================================================
# Shading Pipeline (Taichi-compatible)
# =============================================================================


@ti.dataclass
class ComputationsStruct:
    """Device counterpart of :class:`Computations`."""

    t: ti.f64
    shape_id: ti.i32
    point: vec3
    over_point: vec3
    eyev: vec3
    normalv: vec3
    inside: ti.i32


@ti.func
def prepare_computations(t: ti.f64, shape_id: ti.i32, ray: RayStruct) -> ComputationsStruct:
    """Precompute the shading geometry at distance t along a ray.

    The over point is pushed along the outward surface normal. The normal
    is then flipped to face the eye when the ray starts inside the
    primitive, so for inside hits the over point lies outside the surface.

    Args:
        t: Distance along the ray.
        shape_id: Index of the primitive hit.
        ray: The ray in world space.

    Returns:
        The computations for shade_hit.
    """
    p = ray_at(ray, t)
    eyev = -ray.direction
    normalv = shape_normal_at(shape_id, p)
    over_point = p + normalv * OVER_POINT_EPSILON

    inside = 0
    if tm.dot(normalv, eyev) < 0.0:
        inside = 1
        normalv = -normalv

    return ComputationsStruct(
        t=t,
        shape_id=shape_id,
        point=p,
        over_point=over_point,
        eyev=eyev,
        normalv=normalv,
        inside=inside,
    )


@ti.func
def is_shadowed(p: vec3) -> ti.i32:
    """Return 1 if the visible hit toward the light is closer than the light.

    Intersections at or beyond the light do not shadow the point.
    """
    v = light_position[None] - p
    distance = tm.length(v)
    record = hit_scene(make_ray(p, tm.normalize(v)))

    shadowed = 0
    if record.hit == 1 and record.t < distance:
        shadowed = 1
    return shadowed


@ti.func
def shade_hit(comps: ComputationsStruct) -> vec3:
    """Phong color at prepared computations, shadow-tested from the over point."""
    return lighting(
        get_material(comps.shape_id),
        get_light(),
        comps.over_point,
        comps.eyev,
        comps.normalv,
        is_shadowed(comps.over_point),
    )


@ti.func
def color_at(ray: RayStruct) -> vec3:
    """Color seen along a world-space ray; black on a miss."""
    color = vec3(0.0, 0.0, 0.0)
    record = hit_scene(ray)
    if record.hit == 1:
        color = shade_hit(prepare_computations(record.t, record.shape_id, ray))
    return color


# =============================================================================
# Python-side Queries
# =============================================================================

MAX_INTERSECTIONS = 2 * MAX_SHAPES

_xs_t = ti.field(dtype=ti.f64, shape=MAX_INTERSECTIONS)
_xs_shape = ti.field(dtype=ti.i32, shape=MAX_INTERSECTIONS)
_xs_count = ti.field(dtype=ti.i32, shape=())

# point, over_point, eyev, normalv
_comps_vectors = ti.Vector.field(3, dtype=ti.f64, shape=4)
_comps_inside = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _intersect_world_kernel(origin: vec3, direction: vec3):
    ray = make_ray(origin, direction)
    _xs_count[None] = 0

    ti.loop_config(serialize=True)
    for i in range(num_shapes[None]):
        count, t0, t1 = intersect_shape(shape_kinds[i], shape_inverses[i], ray)
        if count >= 1:
            n = _xs_count[None]
            _xs_t[n] = t0
            _xs_shape[n] = i
            _xs_count[None] = n + 1
        if count >= 2:
            n = _xs_count[None]
            _xs_t[n] = t1
            _xs_shape[n] = i
            _xs_count[None] = n + 1


@ti.kernel
def _prepare_kernel(t: ti.f64, shape_id: ti.i32, origin: vec3, direction: vec3):
    comps = prepare_computations(t, shape_id, make_ray(origin, direction))
    _comps_vectors[0] = comps.point
    _comps_vectors[1] = comps.over_point
    _comps_vectors[2] = comps.eyev
    _comps_vectors[3] = comps.normalv
    _comps_inside[None] = comps.inside


@ti.kernel
def _shade_hit_kernel(shape_id: ti.i32, over_point: vec3, eyev: vec3, normalv: vec3) -> vec3:
    # shade_hit only reads the over point, eye and normal
    comps = ComputationsStruct(
        t=0.0,
        shape_id=shape_id,
        point=over_point,
        over_point=over_point,
        eyev=eyev,
        normalv=normalv,
        inside=0,
    )
    return shade_hit(comps)


@ti.kernel
def _is_shadowed_kernel(p: vec3) -> ti.i32:
    return is_shadowed(p)


@ti.kernel
def _color_at_kernel(origin: vec3, direction: vec3) -> vec3:
    return color_at(make_ray(origin, direction))

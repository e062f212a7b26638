"""Intersection records, hit selection and the device-side scene arena.

An intersection is a ``(t, shape)`` pair where ``shape`` is the index of the
primitive in its world. Indices stay valid for as long as the world's shape
list is not reordered, and two intersections can be compared without holding
references to the primitives themselves.

The hit of a set of intersections is the one with the smallest non-negative
t, i.e. the first surface in front of the ray origin.

Primitives are uploaded to Taichi fields (Structure of Arrays, one entry per
primitive index) by :func:`load_world`, so device code can scan them.

Example:
    >>> from src.raytracer.scene.intersection import Intersection, hit, intersections
    >>> xs = intersections(Intersection(5.0, 0), Intersection(-3.0, 0), Intersection(2.0, 0))
    >>> hit(xs)
    Intersection(t=2.0, shape=0)
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

from src.raytracer.core.ray import RayStruct, vec3
from src.raytracer.geometry.shape import intersect_shape, normal_at
from src.raytracer.materials.phong import LightStruct, MaterialStruct

if TYPE_CHECKING:
    from collections.abc import Iterable

    from src.raytracer.scene.world import World


# =============================================================================
# Host-side Intersections
# =============================================================================


@dataclass(frozen=True)
class Intersection:
    """A ray crossing a primitive's surface.

    Attributes:
        t: Distance along the ray in units of its direction. Negative values
            lie behind the ray origin.
        shape: Index of the primitive in its world.
    """

    t: float
    shape: int


def intersections(*xs: Intersection) -> list[Intersection]:
    """Collect intersections into a list sorted ascending by t.

    The sort is stable, so equal t values keep their given order.
    """
    return sorted(xs, key=lambda i: i.t)


def hit(xs: "Iterable[Intersection]") -> "Intersection | None":
    """Select the visible intersection.

    Args:
        xs: Intersections in any order. t values must not be NaN.

    Returns:
        The intersection with the smallest non-negative t, or None when
        the set is empty or every t is negative.
    """
    for i in sorted(xs, key=lambda i: i.t):
        if i.t >= 0.0:
            return i
    return None


# =============================================================================
# Device Scene Arena
# =============================================================================

# Maximum number of primitives in one world
MAX_SHAPES = 256

shape_kinds = ti.field(dtype=ti.i32, shape=MAX_SHAPES)
shape_inverses = ti.Matrix.field(4, 4, dtype=ti.f64, shape=MAX_SHAPES)
material_colors = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SHAPES)
material_ambients = ti.field(dtype=ti.f64, shape=MAX_SHAPES)
material_diffuses = ti.field(dtype=ti.f64, shape=MAX_SHAPES)
material_speculars = ti.field(dtype=ti.f64, shape=MAX_SHAPES)
material_shininesses = ti.field(dtype=ti.f64, shape=MAX_SHAPES)
num_shapes = ti.field(dtype=ti.i32, shape=())

light_intensity = ti.Vector.field(3, dtype=ti.f64, shape=())
light_position = ti.Vector.field(3, dtype=ti.f64, shape=())


def load_world(world: "World") -> None:
    """Upload a world's light and primitives to the device fields.

    Inverse transforms are computed here, once per primitive.

    Args:
        world: The world to upload.

    Raises:
        RuntimeError: If the world holds more than MAX_SHAPES primitives.
        numpy.linalg.LinAlgError: If a primitive's transform is singular.
    """
    count = len(world.shapes)
    if count > MAX_SHAPES:
        raise RuntimeError(f"Maximum number of shapes ({MAX_SHAPES}) exceeded")

    kinds = np.zeros(MAX_SHAPES, dtype=np.int32)
    inverses = np.tile(np.eye(4, dtype=np.float64), (MAX_SHAPES, 1, 1))
    colors = np.zeros((MAX_SHAPES, 3), dtype=np.float64)
    ambients = np.zeros(MAX_SHAPES, dtype=np.float64)
    diffuses = np.zeros(MAX_SHAPES, dtype=np.float64)
    speculars = np.zeros(MAX_SHAPES, dtype=np.float64)
    shininesses = np.zeros(MAX_SHAPES, dtype=np.float64)

    for i, shape in enumerate(world.shapes):
        kinds[i] = int(shape.kind)
        inverses[i] = shape.inverse
        colors[i] = shape.material.color
        ambients[i] = shape.material.ambient
        diffuses[i] = shape.material.diffuse
        speculars[i] = shape.material.specular
        shininesses[i] = shape.material.shininess

    shape_kinds.from_numpy(kinds)
    shape_inverses.from_numpy(inverses)
    material_colors.from_numpy(colors)
    material_ambients.from_numpy(ambients)
    material_diffuses.from_numpy(diffuses)
    material_speculars.from_numpy(speculars)
    material_shininesses.from_numpy(shininesses)
    num_shapes[None] = count

    light_intensity[None] = [float(c) for c in world.light.intensity]
    light_position[None] = [float(c) for c in world.light.position[:3]]


# =============================================================================
# Device Queries (Taichi-compatible)
# =============================================================================


@ti.dataclass
class HitRecord:
    """The visible intersection of a ray with the scene.

    Attributes:
        hit: 1 if the ray hit anything in front of its origin, 0 otherwise.
        t: Distance along the ray. Only valid if hit == 1.
        shape_id: Index of the primitive hit, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f64
    shape_id: ti.i32


@ti.func
def get_material(shape_id: ti.i32) -> MaterialStruct:
    return MaterialStruct(
        color=material_colors[shape_id],
        ambient=material_ambients[shape_id],
        diffuse=material_diffuses[shape_id],
        specular=material_speculars[shape_id],
        shininess=material_shininesses[shape_id],
    )


@ti.func
def get_light() -> LightStruct:
    return LightStruct(intensity=light_intensity[None], position=light_position[None])


@ti.func
def hit_scene(ray: RayStruct) -> HitRecord:
    """Find the nearest non-negative intersection of a ray with the scene.

    Scans every primitive in index order. Only a strictly smaller t replaces
    the current best, so among equal t values the first one produced wins.
    This selects the same intersection as sorting all of them by t and
    taking the first non-negative one.

    Args:
        ray: The ray in world space.

    Returns:
        A HitRecord; hit == 0 if nothing lies in front of the ray.
    """
    best_t = 0.0
    best_id = -1

    ti.loop_config(serialize=True)
    for i in range(num_shapes[None]):
        count, t0, t1 = intersect_shape(shape_kinds[i], shape_inverses[i], ray)
        if count >= 1 and t0 >= 0.0:
            if best_id == -1 or t0 < best_t:
                best_t = t0
                best_id = i
        if count >= 2 and t1 >= 0.0:
            if best_id == -1 or t1 < best_t:
                best_t = t1
                best_id = i

    did_hit = 0
    if best_id >= 0:
        did_hit = 1
    return HitRecord(hit=did_hit, t=best_t, shape_id=best_id)


@ti.func
def shape_normal_at(shape_id: ti.i32, world_point: vec3) -> vec3:
    """World-space unit normal of an uploaded primitive."""
    return normal_at(shape_kinds[shape_id], shape_inverses[shape_id], world_point)

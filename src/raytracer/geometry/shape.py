"""Geometric primitives: unit spheres and planes under an affine transform.

Every primitive is defined in its own object space and placed in the world
by a 4x4 transform. Intersection and normal computation both start by taking
the world-space input into object space with the inverse transform:

    local_ray = inverse(transform) * ray

and normals come back to world space through the inverse transpose, which
keeps them perpendicular to the surface under non-uniform scaling:

    world_normal = normalize(transpose(inverse(transform)) * local_normal)

Supported kinds (see :class:`ShapeKind`):
    SPHERE: Unit sphere centred at the origin.
    PLANE: The xz-plane, normal +y.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.raytracer.geometry.shape import Shape
    >>> from src.raytracer.core.ray import Ray
    >>> from src.raytracer.core.tuples import point, vector
    >>> s = Shape.sphere()
    >>> [i.t for i in s.intersect(Ray(point(0, 0, -5), vector(0, 0, 1)))]
    [4.0, 6.0]
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti
import taichi.math as tm

from src.raytracer.core.ray import (
    Ray,
    RayStruct,
    make_ray,
    mat4,
    to_vec3,
    transform_point,
    transform_ray,
    transform_vector,
    vec3,
)
from src.raytracer.core.transform import Matrix4, identity
from src.raytracer.core.tuples import Tuple4, vector
from src.raytracer.materials.phong import Material

if TYPE_CHECKING:
    from src.raytracer.scene.intersection import Intersection


class ShapeKind(IntEnum):
    """Primitive variants. Dispatch happens in intersect_shape and normal_at."""

    SPHERE = 0
    PLANE = 1


# Rays whose local y-direction is smaller than this are parallel to a plane
PLANE_EPSILON = 1e-5


# =============================================================================
# Host-side Primitive
# =============================================================================


@dataclass
class Shape:
    """A primitive with its object-to-world transform and material.

    Attributes:
        kind: Which primitive this is.
        transform: Object-to-world 4x4 transform. Must be invertible; a
            singular matrix raises ``numpy.linalg.LinAlgError`` the first
            time the shape is intersected or asked for a normal.
        material: The surface material.
    """

    kind: ShapeKind
    transform: Matrix4 = field(default_factory=identity)
    material: Material = field(default_factory=Material)

    @classmethod
    def sphere(cls, transform: Matrix4 | None = None, material: Material | None = None) -> "Shape":
        return cls._make(ShapeKind.SPHERE, transform, material)

    @classmethod
    def plane(cls, transform: Matrix4 | None = None, material: Material | None = None) -> "Shape":
        return cls._make(ShapeKind.PLANE, transform, material)

    @classmethod
    def _make(cls, kind: ShapeKind, transform: Matrix4 | None, material: Material | None) -> "Shape":
        return cls(
            kind=kind,
            transform=identity() if transform is None else np.asarray(transform, dtype=np.float64),
            material=Material() if material is None else material,
        )

    @property
    def inverse(self) -> Matrix4:
        """World-to-object transform."""
        return np.linalg.inv(self.transform)

    def intersect(self, ray: Ray, shape_id: int = 0) -> "list[Intersection]":
        """Intersect a world-space ray with this primitive.

        Args:
            ray: The ray in world space.
            shape_id: Index to tag the intersections with, normally the
                primitive's position in its world.

        Returns:
            Intersections in the order the primitive produced them (not
            sorted). Empty on a miss.
        """
        from src.raytracer.scene.intersection import Intersection

        _scratch_inverse[None] = self.inverse.tolist()
        _intersect_kernel(int(self.kind), to_vec3(ray.origin), to_vec3(ray.direction))
        count = int(_local_count[None])
        return [Intersection(float(_local_hits[k]), shape_id) for k in range(count)]

    def normal_at(self, world_point: Tuple4) -> Tuple4:
        """Unit world-space normal at a point on the surface (w = 0)."""
        _scratch_inverse[None] = self.inverse.tolist()
        _normal_kernel(int(self.kind), to_vec3(world_point))
        n = _normal_result.to_numpy()
        return vector(float(n[0]), float(n[1]), float(n[2]))


# =============================================================================
# Local Intersections (Taichi-compatible)
# =============================================================================


@ti.func
def intersect_sphere(ray: RayStruct):
    """Intersect an object-space ray with the unit sphere.

    Solves |origin + t * direction|^2 = 1 for t.

    Returns:
        Tuple (count, t0, t1). count is 0 on a miss and 2 otherwise; a
        tangent ray gives two equal roots.
    """
    a = tm.dot(ray.direction, ray.direction)
    b = 2.0 * tm.dot(ray.direction, ray.origin)
    c = tm.dot(ray.origin, ray.origin) - 1.0

    count = 0
    t0 = 0.0
    t1 = 0.0
    # a is zero only for a zero-length direction
    if a != 0.0:
        discriminant = b * b - 4.0 * a * c
        if discriminant >= 0.0:
            sqrt_d = ti.sqrt(discriminant)
            t0 = (-b - sqrt_d) / (2.0 * a)
            t1 = (-b + sqrt_d) / (2.0 * a)
            count = 2
    return count, t0, t1


@ti.func
def intersect_plane(ray: RayStruct):
    """Intersect an object-space ray with the xz-plane.

    Returns:
        Tuple (count, t, 0.0). count is 0 when the ray is parallel to the
        plane (including coplanar rays) and 1 otherwise.
    """
    count = 0
    t = 0.0
    if ti.abs(ray.direction.y) >= PLANE_EPSILON:
        t = -ray.origin.y / ray.direction.y
        count = 1
    return count, t, 0.0


@ti.func
def intersect_shape(kind: ti.i32, inverse: mat4, ray: RayStruct):
    """Intersect a world-space ray with a primitive.

    Args:
        kind: The ShapeKind of the primitive.
        inverse: The primitive's world-to-object transform.
        ray: The ray in world space.

    Returns:
        Tuple (count, t0, t1) with up to two t values along the world ray.
    """
    local_ray = transform_ray(ray, inverse)

    count = 0
    t0 = 0.0
    t1 = 0.0
    if kind == int(ShapeKind.SPHERE):
        count, t0, t1 = intersect_sphere(local_ray)
    elif kind == int(ShapeKind.PLANE):
        count, t0, t1 = intersect_plane(local_ray)
    return count, t0, t1


@ti.func
def normal_at(kind: ti.i32, inverse: mat4, world_point: vec3) -> vec3:
    """World-space unit normal of a primitive at a surface point.

    Args:
        kind: The ShapeKind of the primitive.
        inverse: The primitive's world-to-object transform.
        world_point: A point on the surface, in world space.

    Returns:
        The outward unit normal in world space.
    """
    local_point = transform_point(inverse, world_point)

    local_normal = vec3(0.0, 1.0, 0.0)
    if kind == int(ShapeKind.SPHERE):
        local_normal = local_point

    # Dropping the w row of the result is what forces w = 0
    world_normal = transform_vector(inverse.transpose(), local_normal)
    return tm.normalize(world_normal)


# =============================================================================
# Python-side Queries
# =============================================================================

_scratch_inverse = ti.Matrix.field(4, 4, dtype=ti.f64, shape=())
_local_count = ti.field(dtype=ti.i32, shape=())
_local_hits = ti.field(dtype=ti.f64, shape=2)
_normal_result = ti.Vector.field(3, dtype=ti.f64, shape=())


@ti.kernel
def _intersect_kernel(kind: ti.i32, origin: vec3, direction: vec3):
    count, t0, t1 = intersect_shape(kind, _scratch_inverse[None], make_ray(origin, direction))
    _local_count[None] = count
    _local_hits[0] = t0
    _local_hits[1] = t1


@ti.kernel
def _normal_kernel(kind: ti.i32, world_point: vec3):
    _normal_result[None] = normal_at(kind, _scratch_inverse[None], world_point)

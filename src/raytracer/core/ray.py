"""Rays on the host and inside Taichi kernels.

The host :class:`Ray` holds homogeneous NumPy tuples and is what callers
pass to the world and camera APIs. :class:`RayStruct` is its Taichi
counterpart, used by every ``@ti.func`` on the render path. Device code
works in double precision, so Taichi must be initialised with
``default_fp=ti.f64``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.raytracer.core.ray import Ray
    >>> from src.raytracer.core.tuples import point, vector
    >>> r = Ray(point(2, 3, 4), vector(1, 0, 0))
    >>> r.position(2.5)  # point(4.5, 3, 4)
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from src.raytracer.core.tuples import Tuple4

# Type aliases for Taichi math types (float resolves to default_fp)
vec3 = tm.vec3
vec4 = tm.vec4
mat4 = tm.mat4


@dataclass(frozen=True)
class Ray:
    """A ray on the host side.

    Attributes:
        origin: Starting point (w = 1).
        direction: Direction vector (w = 0). Not required to be normalized.
    """

    origin: Tuple4
    direction: Tuple4

    def position(self, t: float) -> Tuple4:
        """Point at parameter ``t`` along the ray."""
        return self.origin + self.direction * t

    def transform(self, matrix: np.ndarray) -> "Ray":
        """Return this ray transformed by ``matrix``.

        The direction is not renormalized, so t values stay comparable
        between world and object space.
        """
        return Ray(matrix @ self.origin, matrix @ self.direction)


def to_vec3(t) -> vec3:
    """Convert the xyz part of a host tuple to a Taichi vec3 kernel argument."""
    return vec3(float(t[0]), float(t[1]), float(t[2]))


@ti.dataclass
class RayStruct:
    """A ray inside Taichi kernels.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3).
    """

    origin: vec3
    direction: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> RayStruct:
    return RayStruct(origin=origin, direction=direction)


@ti.func
def ray_at(ray: RayStruct, t: ti.f64) -> vec3:
    """Compute the point ray.origin + t * ray.direction."""
    return ray.origin + t * ray.direction


@ti.func
def transform_point(m: mat4, p: vec3) -> vec3:
    """Apply a 4x4 transform to a point (w = 1)."""
    r = m @ vec4(p[0], p[1], p[2], 1.0)
    return vec3(r[0], r[1], r[2])


@ti.func
def transform_vector(m: mat4, v: vec3) -> vec3:
    """Apply a 4x4 transform to a vector (w = 0), so translation is ignored."""
    r = m @ vec4(v[0], v[1], v[2], 0.0)
    return vec3(r[0], r[1], r[2])


@ti.func
def transform_ray(ray: RayStruct, m: mat4) -> RayStruct:
    """Transform a ray by a 4x4 matrix.

    The origin is transformed as a point and the direction as a vector.
    The direction keeps whatever length the transform gives it.
    """
    return RayStruct(
        origin=transform_point(m, ray.origin),
        direction=transform_vector(m, ray.direction),
    )


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The vector being reflected.
        normal: The surface normal (should be normalized).

    Returns:
        incident - 2 * dot(incident, normal) * normal
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal

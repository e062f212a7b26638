"""Core math module.

Components:
    tuples: Host-side points, vectors and colors (NumPy)
    transform: Host-side 4x4 affine transforms and the view transform
    ray: Host Ray and the Taichi RayStruct with transform helpers
"""

from .ray import (
    Ray,
    RayStruct,
    make_ray,
    ray_at,
    reflect,
    to_vec3,
    transform_point,
    transform_ray,
    transform_vector,
    vec3,
)
from .transform import (
    chain,
    identity,
    rotation_x,
    rotation_y,
    rotation_z,
    scaling,
    shearing,
    translation,
    view_transform,
)
from .tuples import color, cross, dot, magnitude, normalize, point, vector

__all__ = [
    # Tuples
    "point",
    "vector",
    "color",
    "magnitude",
    "normalize",
    "dot",
    "cross",
    # Transforms
    "identity",
    "translation",
    "scaling",
    "rotation_x",
    "rotation_y",
    "rotation_z",
    "shearing",
    "chain",
    "view_transform",
    # Rays
    "Ray",
    "RayStruct",
    "make_ray",
    "ray_at",
    "reflect",
    "to_vec3",
    "transform_point",
    "transform_vector",
    "transform_ray",
    "vec3",
]

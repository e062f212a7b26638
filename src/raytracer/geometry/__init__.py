"""Geometry module for shape primitives.

Components:
    shape: Sphere and plane primitives with local intersection and normals

Intersection routines are Taichi functions (@ti.func) operating in object
space; the Shape class wraps them for single queries from Python.
"""

from .shape import (
    PLANE_EPSILON,
    Shape,
    ShapeKind,
    intersect_plane,
    intersect_shape,
    intersect_sphere,
    normal_at,
)

__all__ = [
    "Shape",
    "ShapeKind",
    "PLANE_EPSILON",
    "intersect_sphere",
    "intersect_plane",
    "intersect_shape",
    "normal_at",
]

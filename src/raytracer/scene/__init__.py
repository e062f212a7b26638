"""Scene module for intersections and the world.

Components:
    intersection: Intersection records, hit selection and the device arena
    world: World container and the shading pipeline
"""

from .intersection import (
    MAX_SHAPES,
    HitRecord,
    Intersection,
    hit,
    hit_scene,
    intersections,
    load_world,
)
from .world import (
    OVER_POINT_EPSILON,
    Computations,
    World,
    color_at,
    default_world,
    is_shadowed,
    prepare_computations,
    shade_hit,
)

__all__ = [
    # Intersection module
    "Intersection",
    "intersections",
    "hit",
    "HitRecord",
    "hit_scene",
    "load_world",
    "MAX_SHAPES",
    # World module
    "World",
    "Computations",
    "default_world",
    "prepare_computations",
    "shade_hit",
    "is_shadowed",
    "color_at",
    "OVER_POINT_EPSILON",
]

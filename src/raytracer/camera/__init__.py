"""Camera module for ray generation and rendering.

Components:
    camera: Pinhole camera with per-pixel rays and a banded parallel render
"""

from .camera import (
    MAX_IMAGE_WIDTH,
    RENDER_BAND_ROWS,
    Camera,
    ray_for_pixel,
    setup_camera,
)

__all__ = [
    "Camera",
    "setup_camera",
    "ray_for_pixel",
    "MAX_IMAGE_WIDTH",
    "RENDER_BAND_ROWS",
]

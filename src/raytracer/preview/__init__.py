"""Preview module for pixel storage and image output.

Components:
    canvas: Pixel buffer with PPM encoding
    export: PNG export via Pillow and format selection
"""

from src.raytracer.preview.canvas import Canvas
from src.raytracer.preview.export import image_to_uint8, save_image, save_png

__all__ = [
    "Canvas",
    "save_png",
    "save_image",
    "image_to_uint8",
]

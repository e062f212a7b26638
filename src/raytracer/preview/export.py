"""Image export utilities for rendered canvases.

Supported formats:
    - PNG (8-bit RGB via Pillow)
    - PPM (plain text, see ``Canvas.write_ppm``)

Rendered colors are unclamped; they are clamped to [0, 1] here, at encoding
time.

Example:
    >>> from src.raytracer.preview.export import save_image
    >>> canvas = camera.render(world)
    >>> save_image(canvas, "output.png")
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from src.raytracer.preview.canvas import Canvas


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a float image to uint8 for export.

    Args:
        image: Image array of shape (H, W, 3), any range.

    Returns:
        8-bit image array of shape (H, W, 3).
    """
    image = np.clip(image, 0.0, 1.0)
    return np.rint(image * 255.0).astype(np.uint8)


def save_png(canvas: Canvas, filepath: str | Path) -> None:
    """Save a canvas as an 8-bit RGB PNG.

    Args:
        canvas: The canvas to save.
        filepath: Output file path (should end in .png).
    """
    pil_image = PILImage.fromarray(image_to_uint8(canvas.pixels))
    pil_image.save(filepath)


def save_image(canvas: Canvas, filepath: str | Path) -> Path:
    """Save a canvas, choosing PPM or PNG from the file suffix.

    Returns:
        The path written.

    Raises:
        ValueError: If the suffix is neither .ppm nor .png.
    """
    path = Path(filepath)
    suffix = path.suffix.lower()
    if suffix == ".ppm":
        canvas.write_ppm(path)
    elif suffix == ".png":
        save_png(canvas, path)
    else:
        raise ValueError(f"Unsupported image format: {path.suffix!r} (use .png or .ppm)")
    return path

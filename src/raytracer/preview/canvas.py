"""Pixel buffer receiving rendered colors, with PPM encoding.

The canvas stores unclamped float64 RGB in an array of shape
(height, width, 3), indexed [y, x] with y = 0 at the top. Colors are only
clamped to [0, 1] when encoded.

Example:
    >>> from src.raytracer.preview.canvas import Canvas
    >>> canvas = Canvas(10, 2)
    >>> canvas.set_pixel(0, 0, (1.0, 0.8, 0.6))
    >>> canvas.write_ppm("out.ppm")
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import numpy as np
import numpy.typing as npt

# PPM lines must not exceed this many characters
PPM_LINE_LIMIT = 70


class Canvas:
    """A width x height grid of RGB colors, initially black.

    Attributes:
        pixels: Float64 array of shape (height, width, 3).
    """

    def __init__(self, width: int, height: int) -> None:
        self.pixels: npt.NDArray[np.float64] = np.zeros((height, width, 3), dtype=np.float64)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise ValueError(
                f"Pixel ({x}, {y}) is outside the {self.width}x{self.height} canvas"
            )

    def set_pixel(self, x: int, y: int, color: Sequence[float]) -> None:
        """Set pixel (x, y) to an RGB color.

        Raises:
            ValueError: If (x, y) lies outside the canvas.
        """
        self._check(x, y)
        self.pixels[y, x] = color[:3]

    def pixel_at(self, x: int, y: int) -> npt.NDArray[np.float64]:
        """Color of pixel (x, y).

        Raises:
            ValueError: If (x, y) lies outside the canvas.
        """
        self._check(x, y)
        return self.pixels[y, x].copy()

    def to_ppm(self) -> str:
        """Encode the canvas as a plain (P3) PPM with a 255 maximum.

        Components are clamped to [0, 1], scaled and rounded. Each pixel
        row starts a new line and lines are wrapped at whitespace before
        they exceed 70 characters. The text ends with a newline.
        """
        scaled = np.clip(np.rint(np.clip(self.pixels, 0.0, 1.0) * 255.0), 0, 255).astype(int)

        lines = ["P3", f"{self.width} {self.height}", "255"]
        for row in scaled:
            line = ""
            for value in row.reshape(-1):
                token = str(value)
                if not line:
                    line = token
                elif len(line) + 1 + len(token) > PPM_LINE_LIMIT:
                    lines.append(line)
                    line = token
                else:
                    line = f"{line} {token}"
            lines.append(line)
        return "\n".join(lines) + "\n"

    def write_ppm(self, filepath: str | Path) -> None:
        """Write the canvas to a PPM file."""
        Path(filepath).write_text(self.to_ppm())

"""Pinhole camera mapping an image raster to world-space rays.

The camera sits at the origin of its own space looking down -z, with the
image plane one unit in front of it. The raster's narrower side spans the
field of view:

    half_view = tan(field_of_view / 2)
    aspect    = width / height
    aspect >= 1: half_width = half_view,          half_height = half_view / aspect
    aspect <  1: half_width = half_view * aspect, half_height = half_view
    pixel_size = 2 * half_width / width

Pixel (px, py) is sampled at its centre. Rows grow downward on screen while
camera y grows upward, so y is flipped. The camera's transform maps world
space into camera space (see ``view_transform``); its inverse takes the
pixel and the eye back into the world.

Rendering runs one Taichi kernel per band of rows, in parallel over the
pixels of the band. Pixels share no state, and the world is only read.

Example:
    >>> import math
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.raytracer.camera.camera import Camera
    >>> from src.raytracer.core.transform import view_transform
    >>> from src.raytracer.core.tuples import point, vector
    >>> from src.raytracer.scene.world import default_world
    >>>
    >>> camera = Camera(11, 11, math.pi / 2)
    >>> camera.transform = view_transform(point(0, 0, -5), point(0, 0, 0), vector(0, 1, 0))
    >>> canvas = camera.render(default_world())
    >>> canvas.pixel_at(5, 5)  # ~(0.38066, 0.47583, 0.2855)
"""

import math
from collections.abc import Callable

import numpy as np
import taichi as ti
import taichi.math as tm

from src.raytracer.core.ray import Ray, RayStruct, make_ray, transform_point, vec3
from src.raytracer.core.transform import Matrix4, identity
from src.raytracer.core.tuples import point, vector
from src.raytracer.preview.canvas import Canvas
from src.raytracer.scene.intersection import load_world
from src.raytracer.scene.world import World, color_at

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]

# Widest supported image (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 4096

# Rows rendered per kernel launch; progress is reported after each band
RENDER_BAND_ROWS = 32


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_inverse = ti.Matrix.field(4, 4, dtype=ti.f64, shape=())
_half_width = ti.field(dtype=ti.f64, shape=())
_half_height = ti.field(dtype=ti.f64, shape=())
_pixel_size = ti.field(dtype=ti.f64, shape=())

# One band of rendered rows, indexed [x, row_in_band]
_band = ti.Vector.field(3, dtype=ti.f64, shape=(MAX_IMAGE_WIDTH, RENDER_BAND_ROWS))

# origin, direction
_ray_result = ti.Vector.field(3, dtype=ti.f64, shape=2)


# =============================================================================
# Camera
# =============================================================================


class Camera:
    """A pinhole camera.

    Attributes:
        width: Horizontal size of the image in pixels.
        height: Vertical size of the image in pixels.
        field_of_view: Angle spanned by the narrower image side, in radians.
        transform: World-to-camera transform.
    """

    def __init__(
        self,
        width: int,
        height: int,
        field_of_view: float,
        transform: Matrix4 | None = None,
    ) -> None:
        self.width = width
        self.height = height
        self.field_of_view = field_of_view
        self.transform = identity() if transform is None else np.asarray(transform, dtype=np.float64)
        self.validate()

    def validate(self) -> None:
        """Check the raster size and field of view.

        Raises:
            ValueError: If width or height is not positive, width exceeds
                MAX_IMAGE_WIDTH, or the field of view is outside (0, pi).
        """
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions ({self.width}x{self.height}) must be positive")
        if self.width > MAX_IMAGE_WIDTH:
            raise ValueError(
                f"Image width ({self.width}) exceeds maximum supported ({MAX_IMAGE_WIDTH})"
            )
        if not 0.0 < self.field_of_view < math.pi:
            raise ValueError(f"Field of view ({self.field_of_view}) must be in (0, pi)")

    @property
    def half_width(self) -> float:
        half_view = math.tan(self.field_of_view / 2.0)
        aspect = self.width / self.height
        return half_view if aspect >= 1.0 else half_view * aspect

    @property
    def half_height(self) -> float:
        half_view = math.tan(self.field_of_view / 2.0)
        aspect = self.width / self.height
        return half_view / aspect if aspect >= 1.0 else half_view

    @property
    def pixel_size(self) -> float:
        """World-space size of one pixel on the image plane."""
        return self.half_width * 2.0 / self.width

    def ray_for_pixel(self, px: int, py: int) -> Ray:
        """The world-space ray through the centre of pixel (px, py)."""
        setup_camera(self)
        _ray_for_pixel_kernel(px, py)
        o, d = _ray_result.to_numpy()
        return Ray(point(*o), vector(*d))

    def render(self, world: World, callback: ProgressCallback | None = None) -> Canvas:
        """Render a world into a new canvas.

        Args:
            world: The scene to render. It must not be modified while the
                render runs.
            callback: Optional function called after each band of rows with
                (rows_done, total_rows).

        Returns:
            A canvas of width x height unclamped colors.
        """
        self.validate()
        load_world(world)
        setup_camera(self)

        canvas = Canvas(self.width, self.height)
        for row_start in range(0, self.height, RENDER_BAND_ROWS):
            rows = min(RENDER_BAND_ROWS, self.height - row_start)
            _render_band(row_start, self.width, rows)

            # (width, rows, 3) -> (rows, width, 3)
            band = _band.to_numpy()[: self.width, :rows]
            canvas.pixels[row_start : row_start + rows] = np.transpose(band, (1, 0, 2))

            if callback is not None:
                callback(row_start + rows, self.height)

        return canvas


def setup_camera(camera: Camera) -> None:
    """Write a camera's inverse transform and raster geometry to the device.

    Raises:
        numpy.linalg.LinAlgError: If the camera transform is singular.
    """
    _camera_inverse[None] = np.linalg.inv(camera.transform).tolist()
    _half_width[None] = camera.half_width
    _half_height[None] = camera.half_height
    _pixel_size[None] = camera.pixel_size


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def ray_for_pixel(px: ti.i32, py: ti.i32) -> RayStruct:
    """Generate the ray through the centre of a pixel.

    Uses the camera state written by setup_camera.

    Args:
        px: Pixel column (0 = left).
        py: Pixel row (0 = top).

    Returns:
        A ray from the eye with a unit direction.
    """
    x_offset = (ti.cast(px, ti.f64) + 0.5) * _pixel_size[None]
    y_offset = (ti.cast(py, ti.f64) + 0.5) * _pixel_size[None]

    # Camera looks toward -z, so +x is to the left
    world_x = _half_width[None] - x_offset
    world_y = _half_height[None] - y_offset

    inverse = _camera_inverse[None]
    pixel = transform_point(inverse, vec3(world_x, world_y, -1.0))
    origin = transform_point(inverse, vec3(0.0, 0.0, 0.0))
    return make_ray(origin, tm.normalize(pixel - origin))


@ti.kernel
def _render_band(row_start: ti.i32, width: ti.i32, rows: ti.i32):
    for x, j in ti.ndrange(width, rows):
        _band[x, j] = color_at(ray_for_pixel(x, row_start + j))


@ti.kernel
def _ray_for_pixel_kernel(px: ti.i32, py: ti.i32):
    ray = ray_for_pixel(px, py)
    _ray_result[0] = ray.origin
    _ray_result[1] = ray.direction

"""4x4 affine transforms built on the host with NumPy.

Transforms compose by left multiplication: applying ``B`` then ``A`` is
``A @ B``. :func:`chain` takes transforms in application order and does the
multiplication for you.

Rotations follow a left-handed convention: a positive angle about an axis
turns clockwise when looking down that axis toward the origin.

Example:
    >>> import math
    >>> from src.raytracer.core.transform import chain, rotation_x, scaling, translation
    >>> m = chain(rotation_x(math.pi / 2), scaling(5, 5, 5), translation(10, 5, 7))
"""

import math

import numpy as np
import numpy.typing as npt

from src.raytracer.core.tuples import Tuple4, cross, normalize

Matrix4 = npt.NDArray[np.float64]


def identity() -> Matrix4:
    return np.eye(4, dtype=np.float64)


def translation(x: float, y: float, z: float) -> Matrix4:
    m = identity()
    m[0, 3] = x
    m[1, 3] = y
    m[2, 3] = z
    return m


def scaling(x: float, y: float, z: float) -> Matrix4:
    return np.diag([x, y, z, 1.0]).astype(np.float64)


def rotation_x(radians: float) -> Matrix4:
    c, s = math.cos(radians), math.sin(radians)
    m = identity()
    m[1, 1] = c
    m[1, 2] = -s
    m[2, 1] = s
    m[2, 2] = c
    return m


def rotation_y(radians: float) -> Matrix4:
    c, s = math.cos(radians), math.sin(radians)
    m = identity()
    m[0, 0] = c
    m[0, 2] = s
    m[2, 0] = -s
    m[2, 2] = c
    return m


def rotation_z(radians: float) -> Matrix4:
    c, s = math.cos(radians), math.sin(radians)
    m = identity()
    m[0, 0] = c
    m[0, 1] = -s
    m[1, 0] = s
    m[1, 1] = c
    return m


def shearing(xy: float, xz: float, yx: float, yz: float, zx: float, zy: float) -> Matrix4:
    """Shear each axis in proportion to the other two.

    Args:
        xy: Moves x in proportion to y.
        xz: Moves x in proportion to z.
        yx: Moves y in proportion to x.
        yz: Moves y in proportion to z.
        zx: Moves z in proportion to x.
        zy: Moves z in proportion to y.
    """
    m = identity()
    m[0, 1] = xy
    m[0, 2] = xz
    m[1, 0] = yx
    m[1, 2] = yz
    m[2, 0] = zx
    m[2, 1] = zy
    return m


def chain(*transforms: Matrix4) -> Matrix4:
    """Compose transforms given in the order they should be applied."""
    result = identity()
    for m in transforms:
        result = m @ result
    return result


def view_transform(from_point: Tuple4, to_point: Tuple4, up: Tuple4) -> Matrix4:
    """Build the world-to-camera transform for an eye looking at a target.

    Derives an orthonormal basis from the view direction and the
    approximate up vector, orients the world into it, then moves the eye
    to the origin.

    Args:
        from_point: Eye position (point).
        to_point: Point the eye looks at.
        up: Approximate up direction (vector). Need not be normalized or
            exactly perpendicular to the view direction.

    Returns:
        The 4x4 view transform.
    """
    forward = normalize(to_point - from_point)
    left = cross(forward, normalize(up))
    true_up = cross(left, forward)
    orientation = np.array(
        [
            [left[0], left[1], left[2], 0.0],
            [true_up[0], true_up[1], true_up[2], 0.0],
            [-forward[0], -forward[1], -forward[2], 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ],
        dtype=np.float64,
    )
    return orientation @ translation(-from_point[0], -from_point[1], -from_point[2])

"""Host-side points, vectors and colors backed by NumPy.

Points and vectors are homogeneous 4-component float64 arrays distinguished
by their w component (1 for points, 0 for vectors). Colors are plain RGB
arrays. These helpers are used to build scenes on the Python side; the
per-ray math runs in Taichi (see ``core.ray``).

Example:
    >>> from src.raytracer.core.tuples import point, vector, normalize
    >>> p = point(1.0, 2.0, 3.0)
    >>> v = normalize(vector(0.0, 3.0, 4.0))  # (0, 0.6, 0.8, 0)
"""

import numpy as np
import numpy.typing as npt

Tuple4 = npt.NDArray[np.float64]
Color = npt.NDArray[np.float64]


def point(x: float, y: float, z: float) -> Tuple4:
    """Create a point (w = 1)."""
    return np.array([x, y, z, 1.0], dtype=np.float64)


def vector(x: float, y: float, z: float) -> Tuple4:
    """Create a vector (w = 0)."""
    return np.array([x, y, z, 0.0], dtype=np.float64)


def color(r: float, g: float, b: float) -> Color:
    """Create an RGB color."""
    return np.array([r, g, b], dtype=np.float64)


def is_point(t: Tuple4) -> bool:
    return bool(t[3] == 1.0)


def is_vector(t: Tuple4) -> bool:
    return bool(t[3] == 0.0)


def magnitude(v: Tuple4) -> float:
    """Euclidean length of the xyz part of a tuple."""
    return float(np.linalg.norm(v[:3]))


def normalize(v: Tuple4) -> Tuple4:
    """Scale a vector to unit length.

    A zero-length vector is returned unchanged instead of producing NaNs.
    """
    length = magnitude(v)
    if length == 0.0:
        return np.array(v, dtype=np.float64)
    return v / length


def dot(a: Tuple4, b: Tuple4) -> float:
    return float(np.dot(a, b))


def cross(a: Tuple4, b: Tuple4) -> Tuple4:
    """Cross product of two vectors (the result is a vector)."""
    c = np.cross(a[:3], b[:3])
    return vector(float(c[0]), float(c[1]), float(c[2]))


def reflect(incident: Tuple4, normal: Tuple4) -> Tuple4:
    """Reflect ``incident`` about ``normal``: v - 2 * dot(v, n) * n."""
    return incident - normal * 2.0 * dot(incident, normal)

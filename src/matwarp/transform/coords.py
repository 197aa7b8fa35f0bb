"""Coordinate conventions shared by both rasterizer backends.

Raster convention: row 0 is the top of the image, rows grow downward.
Math convention: y grows upward, so raster row 0 holds the largest math y.

Transformed coordinates are rounded half away from zero (``0.5 -> 1``,
``-0.5 -> -1``, ``2.5 -> 3``). The rule never adds 0.5 to the input, so
values just below a tie such as ``0.49999999999999994`` still round down.
"""

from __future__ import annotations

import numpy as np
from numba import njit


@njit(cache=True, nogil=True)
def raster_to_math(y: int, height: int) -> int:
    """Convert a raster row index into a math-convention y coordinate."""
    return height - y - 1


@njit(cache=True, nogil=True)
def math_to_raster(y: int, height: int) -> int:
    """Convert a math-convention y coordinate into a raster row index."""
    return height - y - 1


@njit(cache=True, nogil=True)
def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero.

    :param value: Transformed coordinate
    :returns: Rounded integer
    """
    rounded = np.trunc(value)
    # value - trunc(value) is exact in floating point
    if abs(value - rounded) >= 0.5:
        rounded += 1.0 if value > 0.0 else -1.0
    return int(rounded)


def round_half_away_array(values: np.ndarray) -> np.ndarray:
    """Vectorized :func:`round_half_away`.

    :param values: Float array of any shape
    :returns: int64 array of the same shape
    """
    rounded = np.trunc(values)
    step = np.where(np.abs(values - rounded) >= 0.5, np.copysign(1.0, values), 0.0)
    return (rounded + step).astype(np.int64)

"""
Numba-optimized kernels for forward-scatter rasterization.

The scatter kernel is compiled without ``parallel=True``: two source pixels
may land on the same destination cell, and the later one in row-major scan
order must win.
"""

from __future__ import annotations

import logging

import numpy as np
from numba import njit
from numpy.typing import NDArray

from matwarp.transform.coords import math_to_raster, raster_to_math, round_half_away

logger = logging.getLogger(__name__)

# Bounding box slots in the running-extrema array
BBOX_MIN_X = 0
BBOX_MAX_X = 1
BBOX_MIN_Y = 2
BBOX_MAX_Y = 3


def new_bbox_state() -> NDArray[np.int64]:
    """Create the running-extrema array ``[min_x, max_x, min_y, max_y]``."""
    info = np.iinfo(np.int64)
    return np.array([info.max, info.min, info.max, info.min], dtype=np.int64)


@njit(cache=True, nogil=True)
def scatter_rows_numba(
    src: NDArray[np.uint8],
    matrix: NDArray[np.float64],
    offset_x: int,
    offset_y: int,
    out: NDArray[np.uint8],
    row_start: int,
    row_stop: int,
    bbox: NDArray[np.int64],
    opaque: bool,
) -> int:
    """
    Scatter source rows ``[row_start, row_stop)`` into the output canvas.

    Args:
        src: Source pixels [H, W, 3]
        matrix: Effective transform [2, 2]
        offset_x: Integer X offset added after rounding
        offset_y: Integer Y offset added after rounding (math convention)
        out: Output canvas [out_H, out_W, 4] (modified in-place)
        row_start: First source row (raster convention)
        row_stop: One past the last source row
        bbox: Running extrema [min_x, max_x, min_y, max_y] (modified in-place)
        opaque: If True, written pixels get alpha 255

    Returns:
        Number of source pixels that fell outside the canvas
    """
    height = src.shape[0]
    width = src.shape[1]
    out_height = out.shape[0]
    out_width = out.shape[1]

    m00 = matrix[0, 0]
    m01 = matrix[0, 1]
    m10 = matrix[1, 0]
    m11 = matrix[1, 1]

    cut_off = 0
    for y in range(row_start, row_stop):
        math_y = float(raster_to_math(y, height))
        for x in range(width):
            tx = m00 * x + m01 * math_y
            ty = m10 * x + m11 * math_y

            new_x = round_half_away(tx) + offset_x
            new_y_math = round_half_away(ty) + offset_y

            if new_x < bbox[BBOX_MIN_X]:
                bbox[BBOX_MIN_X] = new_x
            if new_x > bbox[BBOX_MAX_X]:
                bbox[BBOX_MAX_X] = new_x
            if new_y_math < bbox[BBOX_MIN_Y]:
                bbox[BBOX_MIN_Y] = new_y_math
            if new_y_math > bbox[BBOX_MAX_Y]:
                bbox[BBOX_MAX_Y] = new_y_math

            new_y = math_to_raster(new_y_math, out_height)

            if 0 <= new_x < out_width and 0 <= new_y < out_height:
                out[new_y, new_x, 0] = src[y, x, 0]
                out[new_y, new_x, 1] = src[y, x, 1]
                out[new_y, new_x, 2] = src[y, x, 2]
                if opaque:
                    out[new_y, new_x, 3] = 255
            else:
                cut_off += 1

    return cut_off


def warmup_scatter_kernels() -> None:
    """Compile the scatter kernel ahead of the first real image."""
    src = np.zeros((2, 2, 3), dtype=np.uint8)
    out = np.zeros((2, 2, 4), dtype=np.uint8)
    matrix = np.eye(2, dtype=np.float64)
    scatter_rows_numba(src, matrix, 0, 0, out, 0, 2, new_bbox_state(), False)
    logger.debug("Scatter Numba kernels warmed up")


# Warmup on import
warmup_scatter_kernels()

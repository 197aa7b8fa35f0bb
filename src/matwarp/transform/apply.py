"""Apply a 2x2 warp to a pixel buffer by forward scatter.

This module provides the core rasterization function and its two backends:

- ``numba``: sequential JIT kernel, processed in row chunks so a progress
  callback can advance between chunks.
- ``numpy``: fully vectorized; collisions are resolved by keeping the last
  writer in scan order explicitly.

Both backends produce identical canvases, bounding boxes and cut-off counts.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence

import numpy as np

from matwarp.config.config import CONFIG
from matwarp.errors import ParameterError
from matwarp.transform.coords import round_half_away_array
from matwarp.transform.kernels import new_bbox_state, scatter_rows_numba
from matwarp.transform.result import BoundingBox, RasterResult

logger = logging.getLogger(__name__)

BACKENDS = ("numba", "numpy")

# Transformed coordinates must stay well inside int64 after rounding and offset
COORDINATE_LIMIT = 2**62


def resolve_dimensions(
    dims: Sequence[int] | None, width: int, height: int
) -> tuple[int, int]:
    """Resolve requested output dimensions against the source size.

    :param dims: ``(W, H)`` or None; a 0 component keeps the source dimension
    :param width: Source width
    :param height: Source height
    :returns: ``(out_width, out_height)``
    :raises ParameterError: If ``dims`` is malformed or negative
    """
    if dims is None:
        return width, height
    if len(dims) != 2:
        raise ParameterError(f"Expected 2 elements, got {len(dims)} ({list(dims)})")
    out_width, out_height = (int(d) for d in dims)
    if out_width < 0 or out_height < 0:
        raise ParameterError(f"Dimensions must be non-negative, got {tuple(dims)}")
    return out_width or width, out_height or height


def allocate_canvas(
    width: int, height: int, background: Sequence[int] | None = None
) -> np.ndarray:
    """Allocate an RGBA canvas filled with ``background`` or zeros.

    :param width: Canvas width
    :param height: Canvas height
    :param background: Optional RGBA color, 4 values in [0, 255]
    :returns: uint8 array [height, width, 4]
    """
    canvas = np.zeros((height, width, 4), dtype=np.uint8)
    if background is not None:
        if len(background) != 4:
            raise ParameterError(
                f"Expected 4 elements, got {len(background)} ({list(background)})"
            )
        canvas[:, :] = np.asarray(background, dtype=np.uint8)
    return canvas


def check_coordinate_range(
    matrix: np.ndarray, offset: tuple[int, int], width: int, height: int
) -> None:
    """Reject transforms whose coordinates would not fit in int64.

    Bounds ``|M @ p| + |offset|`` over the source rectangle by
    ``max row sum of |M| * max(W, H) + max |offset|``.

    :param matrix: Effective transform [2, 2]
    :param offset: Integer ``(dx, dy)``
    :param width: Source width
    :param height: Source height
    :raises ParameterError: If the matrix holds NaN/inf or coordinates could overflow
    """
    if not np.all(np.isfinite(matrix)):
        raise ParameterError(f"Matrix entries must be finite, got {matrix.ravel().tolist()}")

    reach = float(np.max(np.abs(matrix).sum(axis=1))) * max(width, height)
    reach += max(abs(offset[0]), abs(offset[1]))
    if reach > COORDINATE_LIMIT:
        raise ParameterError(
            f"Transformed coordinates reach {reach:g}, beyond the int64 pixel range"
        )


def _validate_source(pixels: np.ndarray) -> np.ndarray:
    if pixels.ndim != 3 or pixels.shape[2] < 3:
        raise ValueError(f"pixels must be [H, W, 3], got shape {pixels.shape}")
    if pixels.dtype != np.uint8:
        raise ValueError(f"pixels must be uint8, got {pixels.dtype}")
    return np.ascontiguousarray(pixels[:, :, :3])


def _scatter_numba(
    src: np.ndarray,
    matrix: np.ndarray,
    offset: tuple[int, int],
    out: np.ndarray,
    opaque: bool,
    progress: Callable[[int], object] | None,
) -> tuple[np.ndarray, int]:
    height, width = src.shape[:2]
    bbox = new_bbox_state()
    cut_off = 0
    chunk = max(1, CONFIG.chunk_rows)

    for row_start in range(0, height, chunk):
        row_stop = min(row_start + chunk, height)
        cut_off += scatter_rows_numba(
            src, matrix, offset[0], offset[1], out, row_start, row_stop, bbox, opaque
        )
        if progress is not None:
            progress((row_stop - row_start) * width)

    return bbox, cut_off


def _scatter_numpy(
    src: np.ndarray,
    matrix: np.ndarray,
    offset: tuple[int, int],
    out: np.ndarray,
    opaque: bool,
    progress: Callable[[int], object] | None,
) -> tuple[np.ndarray, int]:
    height, width = src.shape[:2]
    out_height, out_width = out.shape[:2]

    # Row-major scan order, flattened
    ys, xs = np.mgrid[0:height, 0:width]
    xs = xs.ravel().astype(np.float64)
    math_ys = (height - ys.ravel() - 1).astype(np.float64)

    tx = matrix[0, 0] * xs + matrix[0, 1] * math_ys
    ty = matrix[1, 0] * xs + matrix[1, 1] * math_ys

    new_x = round_half_away_array(tx) + offset[0]
    new_y_math = round_half_away_array(ty) + offset[1]

    bbox = np.array(
        [new_x.min(), new_x.max(), new_y_math.min(), new_y_math.max()], dtype=np.int64
    )

    new_y = out_height - new_y_math - 1
    inside = (new_x >= 0) & (new_x < out_width) & (new_y >= 0) & (new_y < out_height)
    cut_off = int(inside.size - np.count_nonzero(inside))

    src_index = np.flatnonzero(inside)
    dest_index = new_y[inside] * out_width + new_x[inside]

    # Last writer wins: reverse so np.unique's first occurrence is the last writer
    dest_rev = dest_index[::-1]
    unique_dest, first = np.unique(dest_rev, return_index=True)
    winners = src_index[::-1][first]

    flat_out = out.reshape(-1, 4)
    flat_out[unique_dest, :3] = src.reshape(-1, 3)[winners]
    if opaque:
        flat_out[unique_dest, 3] = 255

    if progress is not None:
        progress(height * width)

    return bbox, cut_off


def rasterize(
    pixels: np.ndarray,
    matrix: np.ndarray,
    offset: Sequence[int] = (0, 0),
    dims: Sequence[int] | None = None,
    background: Sequence[int] | None = None,
    opaque: bool = False,
    backend: str | None = None,
    progress: Callable[[int], object] | None = None,
) -> RasterResult:
    """Forward-scatter every source pixel through ``matrix`` onto a new canvas.

    For each source pixel (x, y), scanned row by row:

    1. ``p = (x, H - 1 - y)`` (raster row to math y)
    2. ``(tx, ty) = matrix @ p``
    3. ``new_x = round(tx) + dx``, ``new_y = round(ty) + dy`` (ties away from zero)
    4. the bounding box is updated with ``(new_x, new_y)``
    5. the pixel's RGB is written at canvas row ``out_H - 1 - new_y`` if it
       fits, otherwise it is counted as cut off

    A later pixel overwrites an earlier one landing on the same cell. Alpha is
    left at the canvas value unless ``opaque`` is set.

    :param pixels: Source pixels [H, W, 3] uint8 (extra channels are ignored)
    :param matrix: Effective transform [2, 2]
    :param offset: Integer ``(dx, dy)`` added after rounding
    :param dims: Output ``(W, H)``; None or 0 keeps the source dimension
    :param background: Optional RGBA fill for the canvas
    :param opaque: If True, written pixels get alpha 255
    :param backend: ``"numba"`` or ``"numpy"``, defaults to ``CONFIG.default_backend``
    :param progress: Optional callback receiving the number of pixels just processed
    :returns: RasterResult with canvas, bounding box and cut-off count
    :raises ValueError: If the backend is unknown or shapes are invalid
    :raises ParameterError: If the matrix is non-finite or coordinates overflow int64
    """
    backend = backend or CONFIG.default_backend
    if backend not in BACKENDS:
        raise ValueError(f"Unknown backend {backend!r}. Available: {', '.join(BACKENDS)}")

    src = _validate_source(pixels)
    matrix = np.ascontiguousarray(matrix, dtype=np.float64)
    if matrix.shape != (2, 2):
        raise ValueError(f"matrix must be [2, 2], got shape {matrix.shape}")
    if len(offset) != 2:
        raise ParameterError(f"Expected 2 elements, got {len(offset)} ({list(offset)})")
    offset = (int(offset[0]), int(offset[1]))

    height, width = src.shape[:2]
    check_coordinate_range(matrix, offset, width, height)
    out_width, out_height = resolve_dimensions(dims, width, height)
    out = allocate_canvas(out_width, out_height, background)

    if height == 0 or width == 0:
        logger.debug("[Rasterize] Empty source, returning blank canvas")
        return RasterResult(pixels=out, bbox=None, cut_off_count=0)

    scatter = _scatter_numba if backend == "numba" else _scatter_numpy
    logger.debug(
        "[Rasterize] %dx%d -> %dx%d using %s backend",
        width,
        height,
        out_width,
        out_height,
        backend,
    )

    start = time.perf_counter()
    bbox, cut_off = scatter(src, matrix, offset, out, opaque, progress)
    elapsed = time.perf_counter() - start

    return RasterResult(
        pixels=out,
        bbox=BoundingBox.from_array(bbox),
        cut_off_count=int(cut_off),
        elapsed=elapsed,
    )

"""
End-to-end warp pipeline: load -> build matrix -> rasterize -> save.

Diagnostics (dimensions, effective matrix, determinant, timing, bounding box)
are emitted through ``logging`` at INFO level. A cut-off notice is logged as
a WARNING; it never fails the run.

Example:
    >>> from matwarp import WarpValues, warp_file
    >>> result = warp_file("in.png", "out.png", WarpValues.from_rotation(90))
    >>> result.bbox
    BoundingBox(min_x=-63, max_x=0, min_y=0, max_y=63)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import numpy as np
from tqdm import tqdm

from matwarp.config.values import WarpValues
from matwarp.io import load_image, save_image
from matwarp.transform.apply import rasterize, resolve_dimensions
from matwarp.transform.matrix import determinant, format_matrix
from matwarp.transform.result import RasterResult

logger = logging.getLogger(__name__)


def describe_matrix(matrix: np.ndarray) -> None:
    """Log the effective matrix and its determinant."""
    logger.info("Transformation matrix:\n%s", format_matrix(matrix))
    logger.info("Determinant: %s", determinant(matrix))


def warp_image(
    pixels: np.ndarray,
    values: WarpValues,
    backend: str | None = None,
    progress: Callable[[int], object] | None = None,
    matrix: np.ndarray | None = None,
) -> RasterResult:
    """Warp an in-memory RGB array.

    The matrix and its determinant are logged only when the matrix is built
    here from ``values``. A caller passing ``matrix`` is expected to have
    logged it already (see :func:`describe_matrix`), as ``warp_file`` does.

    :param pixels: Source pixels [H, W, 3] uint8
    :param values: Warp parameters
    :param backend: Rasterizer backend, defaults to ``CONFIG.default_backend``
    :param progress: Optional callback receiving processed pixel counts
    :param matrix: Pre-built effective matrix; built from ``values`` when None
    :returns: RasterResult
    :raises SingularMatrixError: If ``values.inverse`` is set on a singular matrix
    """
    if matrix is None:
        matrix = values.effective_matrix()
        describe_matrix(matrix)

    return rasterize(
        pixels,
        matrix,
        offset=values.offset,
        dims=values.dims,
        background=values.background,
        opaque=values.opaque,
        backend=backend,
        progress=progress,
    )


def warp_file(
    input_path: str | Path,
    output_path: str | Path,
    values: WarpValues,
    backend: str | None = None,
    show_progress: bool = True,
) -> RasterResult:
    """Warp an image file and write the RGBA result.

    The matrix is built before any file is touched, so a singular matrix
    fails without reading the input or writing the output.

    :param input_path: Source image
    :param output_path: Destination image (format from extension)
    :param values: Warp parameters
    :param backend: Rasterizer backend, defaults to ``CONFIG.default_backend``
    :param show_progress: Display a tqdm progress bar over source pixels
    :returns: RasterResult
    :raises SingularMatrixError: If inversion is requested on a singular matrix
    :raises ImageIOError: If loading or saving fails
    """
    input_path = Path(input_path)
    output_path = Path(output_path)

    matrix = values.effective_matrix()

    logger.info("Loading image: %s...", input_path)
    pixels = load_image(input_path)
    height, width = pixels.shape[:2]
    logger.info("Input image dimensions: %dx%d", width, height)

    describe_matrix(matrix)
    if values.offset != (0, 0):
        logger.info("Offset: (%d, %d)", values.offset[0], values.offset[1])

    out_width, out_height = resolve_dimensions(values.dims, width, height)
    logger.info("Output image dimensions: %dx%d", out_width, out_height)

    with tqdm(
        total=width * height,
        unit="px",
        unit_scale=True,
        disable=not show_progress,
    ) as bar:
        result = warp_image(pixels, values, backend=backend, progress=bar.update, matrix=matrix)

    logger.info("Done! Took: %.3fs", result.elapsed)
    logger.info("Actual bounding box: %s", result.bbox)

    if result.cut_off:
        logger.warning(
            "Some pixels were cut off! (%d of %d)", result.cut_off_count, width * height
        )

    save_image(result.pixels, output_path)
    logger.info("Saved image: %s", output_path)

    return result

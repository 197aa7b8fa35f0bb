"""Verification utilities for matrices and rasterization results.

This module provides checks used by the test-suite and handy when
debugging a warp interactively.

Example:
    >>> from matwarp.verification import WarpVerifier
    >>>
    >>> WarpVerifier.assert_inverse(matrix, invert_matrix(matrix))
    >>> WarpVerifier.assert_bbox_bounds(result, pixels.shape, matrix, offset=(0, 0))
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from matwarp.config.config import CONFIG
from matwarp.transform.coords import round_half_away_array
from matwarp.transform.result import RasterResult

logger = logging.getLogger(__name__)


class WarpVerifier:
    """Utilities for verifying matrix inverses and bounding boxes."""

    @staticmethod
    def transformed_coordinates(
        shape: Sequence[int],
        matrix: np.ndarray,
        offset: Sequence[int] = (0, 0),
    ) -> tuple[np.ndarray, np.ndarray]:
        """Compute every pre-clip, pre-flip transformed coordinate.

        :param shape: Source shape (H, W, ...)
        :param matrix: Effective transform [2, 2]
        :param offset: Integer (dx, dy)
        :return: Tuple (new_x, new_y_math) of int64 arrays [H, W]
        """
        height, width = int(shape[0]), int(shape[1])
        ys, xs = np.mgrid[0:height, 0:width]
        math_ys = (height - ys - 1).astype(np.float64)
        xs = xs.astype(np.float64)
        tx = matrix[0, 0] * xs + matrix[0, 1] * math_ys
        ty = matrix[1, 0] * xs + matrix[1, 1] * math_ys
        return (
            round_half_away_array(tx) + int(offset[0]),
            round_half_away_array(ty) + int(offset[1]),
        )

    @staticmethod
    def assert_inverse(
        matrix: np.ndarray,
        inverse: np.ndarray,
        tolerance: float | None = None,
    ) -> None:
        """Assert ``matrix @ inverse`` is the identity within tolerance.

        :param matrix: Square matrix
        :param inverse: Candidate inverse
        :param tolerance: Absolute tolerance, defaults to ``CONFIG.inverse_check_tolerance``
        :raises AssertionError: If the product deviates from identity
        """
        if tolerance is None:
            tolerance = CONFIG.inverse_check_tolerance
        product = np.asarray(matrix) @ np.asarray(inverse)
        identity = np.eye(product.shape[0])
        max_diff = float(np.max(np.abs(product - identity)))
        if max_diff > tolerance:
            raise AssertionError(
                f"matrix @ inverse deviates from identity by {max_diff:g} "
                f"(tolerance {tolerance:g}):\n{product}"
            )
        logger.debug("[WarpVerifier] Inverse OK (max diff %g)", max_diff)

    @staticmethod
    def assert_bbox_bounds(
        result: RasterResult,
        shape: Sequence[int],
        matrix: np.ndarray,
        offset: Sequence[int] = (0, 0),
    ) -> None:
        """Assert the reported bounding box is exactly the coordinate extrema.

        :param result: Rasterization result to check
        :param shape: Source shape (H, W, ...)
        :param matrix: Effective transform used for the run
        :param offset: Offset used for the run
        :raises AssertionError: If any bound is not tight
        """
        new_x, new_y = WarpVerifier.transformed_coordinates(shape, matrix, offset)
        if new_x.size == 0:
            if result.bbox is not None:
                raise AssertionError(f"Expected no bounding box for empty source, got {result.bbox}")
            return

        expected = (
            int(new_x.min()),
            int(new_x.max()),
            int(new_y.min()),
            int(new_y.max()),
        )
        bbox = result.bbox
        actual = (bbox.min_x, bbox.max_x, bbox.min_y, bbox.max_y)
        if actual != expected:
            raise AssertionError(
                f"Bounding box mismatch: got (min_x, max_x, min_y, max_y)={actual}, "
                f"expected {expected}"
            )

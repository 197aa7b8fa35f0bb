"""Unified matwarp configuration.

This module provides a frozen configuration dataclass holding the numeric
tolerances and execution defaults shared by the matrix builder, the
rasterizer and the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class WarpConfig:
    """Top-level configuration for matrix building and rasterization.

    Attributes:
        pivot_tolerance: Relative threshold below which an LU pivot counts as
            zero (scaled by the largest absolute matrix entry)
        inverse_check_tolerance: Allowed deviation of ``M @ inv(M)`` from identity
        chunk_rows: Source rows scattered per kernel call between progress updates
        default_backend: Rasterizer backend used when none is requested
        matrix_precision: Decimal places used when printing matrices
    """

    pivot_tolerance: float = 1e-9
    inverse_check_tolerance: float = 1e-4
    chunk_rows: int = 64
    default_backend: Literal["numba", "numpy"] = "numba"
    matrix_precision: int = 2

    def get_all_settings(self) -> dict[str, float | int | str]:
        """Get all settings as a dictionary.

        :return: Dictionary mapping setting names to values
        """
        return {
            "pivot_tolerance": self.pivot_tolerance,
            "inverse_check_tolerance": self.inverse_check_tolerance,
            "chunk_rows": self.chunk_rows,
            "default_backend": self.default_backend,
            "matrix_precision": self.matrix_precision,
        }


# Main singleton instance
CONFIG = WarpConfig()

"""
2D warp module - matrix building and forward-scatter rasterization.

Example:
    >>> from matwarp.transform import build_matrix, rasterize
    >>> matrix = build_matrix((0, 1, -1, 0))  # rotate 90 degrees
    >>> result = rasterize(pixels, matrix, offset=(pixels.shape[0] - 1, 0))
"""

from matwarp.transform.apply import allocate_canvas, rasterize, resolve_dimensions
from matwarp.transform.coords import (
    math_to_raster,
    raster_to_math,
    round_half_away,
    round_half_away_array,
)
from matwarp.transform.matrix import (
    FullPivLU,
    build_matrix,
    determinant,
    format_matrix,
    full_piv_lu,
    invert_matrix,
    reorder_user_matrix,
)
from matwarp.transform.result import BoundingBox, RasterResult

__all__ = [
    # Matrix builder
    "reorder_user_matrix",
    "build_matrix",
    "full_piv_lu",
    "FullPivLU",
    "invert_matrix",
    "determinant",
    "format_matrix",
    # Coordinates
    "raster_to_math",
    "math_to_raster",
    "round_half_away",
    "round_half_away_array",
    # Rasterizer
    "rasterize",
    "resolve_dimensions",
    "allocate_canvas",
    "BoundingBox",
    "RasterResult",
]

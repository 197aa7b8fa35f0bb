"""
matwarp - Matrix image warping

Apply a 2x2 linear transformation (optionally inverted) to a raster image by
forward-scattering every source pixel onto a new RGBA canvas.

Features:
- User-order matrices (Xx, Xy, Yx, Yy) with full-pivot LU inversion
- Integer offsets, configurable output size, RGBA background fill
- Bounding box of all transformed coordinates and a cut-off tally
- Numba JIT kernel and a vectorized NumPy backend with identical output
- Warp presets (flips, rotations, scales, shear) and JSON configs

Example - Files:
    >>> from matwarp import WarpValues, warp_file
    >>>
    >>> values = WarpValues.from_rotation(90).with_overrides(offset=(63, 0))
    >>> result = warp_file("in.png", "out.png", values)
    >>> print(result.bbox, result.cut_off)

Example - Arrays:
    >>> from matwarp import build_matrix, rasterize
    >>>
    >>> matrix = build_matrix((1, 0, 0.5, 1), inverse=True)
    >>> result = rasterize(pixels, matrix, dims=(0, 0), background=(0, 0, 0, 255))
"""

__version__ = "0.1.0"

# Config values and presets
from matwarp.config import (
    CONFIG,
    DOUBLE_SIZE,
    FLIP_HORIZONTAL,
    FLIP_VERTICAL,
    HALF_SIZE,
    IDENTITY,
    ROTATE_90,
    ROTATE_180,
    ROTATE_270,
    SHEAR_X,
    TRANSPOSE,
    WarpConfig,
    WarpValues,
    get_warp_preset,
    load_warp_json,
    save_warp_json,
    warp_from_dict,
    warp_to_dict,
)

# Errors
from matwarp.errors import ImageIOError, MatwarpError, ParameterError, SingularMatrixError

# Image I/O
from matwarp.io import load_image, save_image

# Parameter parsing
from matwarp.parsing import (
    parse_background,
    parse_dims,
    parse_matrix,
    parse_numbers,
    parse_offset,
)

# Pipeline
from matwarp.pipeline import warp_file, warp_image

# Matrix builder and rasterizer
from matwarp.transform import (
    BoundingBox,
    RasterResult,
    build_matrix,
    determinant,
    format_matrix,
    invert_matrix,
    math_to_raster,
    raster_to_math,
    rasterize,
    reorder_user_matrix,
    round_half_away,
)

# Verification utilities
from matwarp.verification import WarpVerifier

__all__ = [
    # Version
    "__version__",
    # Config
    "CONFIG",
    "WarpConfig",
    "WarpValues",
    # Presets
    "IDENTITY",
    "FLIP_HORIZONTAL",
    "FLIP_VERTICAL",
    "ROTATE_90",
    "ROTATE_180",
    "ROTATE_270",
    "DOUBLE_SIZE",
    "HALF_SIZE",
    "SHEAR_X",
    "TRANSPOSE",
    "get_warp_preset",
    "warp_from_dict",
    "warp_to_dict",
    "load_warp_json",
    "save_warp_json",
    # Errors
    "MatwarpError",
    "ParameterError",
    "SingularMatrixError",
    "ImageIOError",
    # I/O
    "load_image",
    "save_image",
    # Parsing
    "parse_numbers",
    "parse_matrix",
    "parse_offset",
    "parse_dims",
    "parse_background",
    # Matrix builder
    "reorder_user_matrix",
    "build_matrix",
    "invert_matrix",
    "determinant",
    "format_matrix",
    # Rasterizer
    "raster_to_math",
    "math_to_raster",
    "round_half_away",
    "rasterize",
    "BoundingBox",
    "RasterResult",
    # Pipeline
    "warp_image",
    "warp_file",
    # Verification
    "WarpVerifier",
]

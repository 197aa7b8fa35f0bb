"""Configuration for matwarp.

Exports the configuration singleton, the warp value dataclass and the
preset library.
"""

from matwarp.config.config import CONFIG, WarpConfig
from matwarp.config.presets import (
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
    WARP_PRESETS,
    get_warp_preset,
    load_warp_json,
    save_warp_json,
    warp_from_dict,
    warp_to_dict,
)
from matwarp.config.values import WarpValues

__all__ = [
    # Settings
    "CONFIG",
    "WarpConfig",
    # Values
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
    "WARP_PRESETS",
    # Loading
    "get_warp_preset",
    "warp_from_dict",
    "warp_to_dict",
    "load_warp_json",
    "save_warp_json",
]

"""Preset library for matwarp warps.

Provides pre-configured warp values for common use cases,
with support for loading from dict and JSON.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from matwarp.config.values import WarpValues

logger = logging.getLogger(__name__)

# ============================================================================
# Warp Presets
# ============================================================================

IDENTITY = WarpValues.identity()

FLIP_HORIZONTAL = WarpValues.from_scale(-1.0, 1.0)
FLIP_VERTICAL = WarpValues.from_scale(1.0, -1.0)

ROTATE_90 = WarpValues.from_rotation(90)
ROTATE_180 = WarpValues.from_rotation(180)
ROTATE_270 = WarpValues.from_rotation(270)

DOUBLE_SIZE = WarpValues.from_scale(2.0)
HALF_SIZE = WarpValues.from_scale(0.5)

SHEAR_X = WarpValues.from_shear(kx=0.5)

# Swap X and Y axes
TRANSPOSE = WarpValues.from_matrix(0.0, 1.0, 1.0, 0.0)

# ============================================================================
# Preset Registry
# ============================================================================

WARP_PRESETS: dict[str, WarpValues] = {
    "identity": IDENTITY,
    "flip_horizontal": FLIP_HORIZONTAL,
    "flip_vertical": FLIP_VERTICAL,
    "rotate_90": ROTATE_90,
    "rotate_180": ROTATE_180,
    "rotate_270": ROTATE_270,
    "double_size": DOUBLE_SIZE,
    "half_size": HALF_SIZE,
    "shear_x": SHEAR_X,
    "transpose": TRANSPOSE,
}

# ============================================================================
# Loading Functions
# ============================================================================


def get_warp_preset(name: str) -> WarpValues:
    """Get warp preset by name.

    :param name: Preset name (case-insensitive)
    :returns: WarpValues preset
    :raises KeyError: If preset not found
    """
    name_lower = name.lower()
    if name_lower not in WARP_PRESETS:
        available = ", ".join(WARP_PRESETS.keys())
        raise KeyError(f"Unknown warp preset '{name}'. Available: {available}")
    return WARP_PRESETS[name_lower]


# ============================================================================
# Dict/JSON Loading
# ============================================================================


def warp_from_dict(d: dict) -> WarpValues:
    """Create WarpValues from dictionary.

    Supports both direct field assignment and factory method syntax.

    Example:
        >>> # Direct
        >>> d = {"matrix": [1, 0, 0.5, 1], "offset": [10, 0]}
        >>> values = warp_from_dict(d)

        >>> # Factory method, with extra fields layered on top
        >>> d = {"from_rotation": 90, "dims": [0, 0], "background": [0, 0, 0, 255]}
        >>> values = warp_from_dict(d)

        >>> # Named preset
        >>> d = {"preset": "flip_horizontal", "opaque": True}
        >>> values = warp_from_dict(d)
    """
    if "preset" in d:
        base = get_warp_preset(d["preset"])
    elif "from_scale" in d:
        scale = d["from_scale"]
        base = (
            WarpValues.from_scale(*scale)
            if isinstance(scale, list | tuple)
            else WarpValues.from_scale(scale)
        )
    elif "from_rotation" in d:
        base = WarpValues.from_rotation(d["from_rotation"])
    elif "from_shear" in d:
        base = WarpValues.from_shear(*d["from_shear"])
    else:
        base = WarpValues()

    kwargs = {}
    if "matrix" in d:
        kwargs["matrix"] = tuple(float(v) for v in d["matrix"])
    if "offset" in d:
        kwargs["offset"] = tuple(int(v) for v in d["offset"])
    if "inverse" in d:
        kwargs["inverse"] = bool(d["inverse"])
    if d.get("dims") is not None:
        kwargs["dims"] = tuple(int(v) for v in d["dims"])
    if d.get("background") is not None:
        kwargs["background"] = tuple(int(v) for v in d["background"])
    if "opaque" in d:
        kwargs["opaque"] = bool(d["opaque"])

    return base.with_overrides(**kwargs)


def load_warp_json(path: str | Path) -> WarpValues:
    """Load WarpValues from JSON file.

    :param path: Path to JSON file
    :returns: WarpValues instance
    """
    with open(path) as f:
        d = json.load(f)
    logger.debug("Loaded warp values from %s", path)
    return warp_from_dict(d)


# ============================================================================
# Saving Functions
# ============================================================================


def warp_to_dict(values: WarpValues) -> dict:
    """Convert WarpValues to dictionary.

    :param values: WarpValues instance
    :returns: Dictionary representation
    """
    d = {
        "matrix": list(values.matrix),
        "offset": list(values.offset),
        "inverse": values.inverse,
        "opaque": values.opaque,
    }
    if values.dims is not None:
        d["dims"] = list(values.dims)
    if values.background is not None:
        d["background"] = list(values.background)
    return d


def save_warp_json(values: WarpValues, path: str | Path) -> None:
    """Save WarpValues to JSON file.

    :param values: WarpValues instance
    :param path: Output path
    """
    with open(path, "w") as f:
        json.dump(warp_to_dict(values), f, indent=2)

"""Image file I/O.

Pixels move between files and ``uint8`` arrays shaped ``(H, W, C)`` in RGB(A)
order. Pillow does all decoding and encoding; every failure is re-raised as
:class:`~matwarp.errors.ImageIOError` naming the file.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from matwarp.errors import ImageIOError

logger = logging.getLogger(__name__)


def load_image(path: str | Path) -> np.ndarray:
    """Decode an image file into an RGB array.

    :param path: Image file (any format Pillow can read)
    :returns: uint8 array [H, W, 3]
    :raises ImageIOError: If the file is missing or cannot be decoded
    """
    path = Path(path)
    try:
        with PILImage.open(path) as img:
            pixels = np.asarray(img.convert("RGB"), dtype=np.uint8)
    except FileNotFoundError as err:
        raise ImageIOError(path, "Image not found") from err
    except UnidentifiedImageError as err:
        raise ImageIOError(path, "Unsupported or corrupt image") from err
    except OSError as err:
        raise ImageIOError(path, f"Failed to read image ({err})") from err

    logger.debug("Loaded %s with shape %s", path, pixels.shape)
    return np.ascontiguousarray(pixels)


def save_image(pixels: np.ndarray, path: str | Path) -> None:
    """Encode an RGBA (or RGB) array to an image file.

    The format follows the file extension.

    :param pixels: uint8 array [H, W, 4] or [H, W, 3]
    :param path: Destination file
    :raises ImageIOError: If the array shape is invalid or encoding fails
    """
    path = Path(path)
    if pixels.dtype != np.uint8 or pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
        raise ImageIOError(
            path,
            f"Failed to create image from array with shape {pixels.shape} "
            f"and dtype {pixels.dtype}",
        )

    # Pillow needs C-contiguous buffers
    if not pixels.flags["C_CONTIGUOUS"]:
        pixels = np.ascontiguousarray(pixels)

    try:
        PILImage.fromarray(pixels).save(path)
    except (ValueError, KeyError) as err:
        # Unknown extension or mode the format cannot store
        raise ImageIOError(path, f"Failed to encode image ({err})") from err
    except OSError as err:
        raise ImageIOError(path, f"Failed to write image ({err})") from err

    logger.debug("Saved %s with shape %s", path, pixels.shape)

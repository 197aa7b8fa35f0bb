"""Rasterization result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class BoundingBox:
    """Extrema of transformed coordinates before clipping and before the y flip.

    Coordinates are in the math convention (y grows upward) with the offset
    already applied.

    Attributes:
        min_x: Smallest transformed x
        max_x: Largest transformed x
        min_y: Smallest transformed y
        max_y: Largest transformed y
    """

    min_x: int
    max_x: int
    min_y: int
    max_y: int

    @classmethod
    def from_array(cls, state: np.ndarray) -> BoundingBox:
        """Create from the kernel's ``[min_x, max_x, min_y, max_y]`` array."""
        min_x, max_x, min_y, max_y = (int(v) for v in state)
        return cls(min_x=min_x, max_x=max_x, min_y=min_y, max_y=max_y)

    @property
    def width(self) -> int:
        """Number of columns spanned (inclusive)."""
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        """Number of rows spanned (inclusive)."""
        return self.max_y - self.min_y + 1

    def contains(self, x: int, y: int) -> bool:
        """Check if a transformed coordinate lies inside the box."""
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def __str__(self) -> str:
        return f"({self.min_x}, {self.min_y}) - ({self.max_x}, {self.max_y})"


@dataclass
class RasterResult:
    """Output of one rasterization run.

    Attributes:
        pixels: Output canvas [out_H, out_W, 4], uint8 RGBA
        bbox: Bounding box of all transformed coordinates, None for an empty source
        cut_off_count: Number of source pixels that fell outside the canvas
        elapsed: Seconds spent scattering pixels

    Example:
        >>> result = rasterize(pixels, np.eye(2))
        >>> print(f"Bounding box: {result.bbox}")
        >>> if result.cut_off:
        ...     print(f"{result.cut_off_count} pixels were cut off")
    """

    pixels: np.ndarray
    bbox: BoundingBox | None
    cut_off_count: int
    elapsed: float = 0.0

    @property
    def cut_off(self) -> bool:
        """True if at least one source pixel fell outside the canvas."""
        return self.cut_off_count > 0

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

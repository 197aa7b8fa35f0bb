"""Warp parameter dataclass with composition support.

This module provides the value-holding dataclass describing one image warp,
which can be composed using the + operator.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

import numpy as np

from matwarp.errors import ParameterError


@dataclass(frozen=True)
class WarpValues:
    """Parameters of one image warp.

    The matrix is stored in user order ``(Xx, Xy, Yx, Yy)``: where the unit X
    vector goes, then where the unit Y vector goes.

    Composition: a + b applies a FIRST, then b. Matrices multiply
    (``B @ A``), a's offset is carried through B and rounded, and the result
    is never flagged inverse because both sides are resolved to their
    effective matrices first.

    Example:
        >>> rotate = WarpValues.from_rotation(90)
        >>> bigger = WarpValues.from_scale(2.0)
        >>> composed = rotate + bigger  # rotate then scale
    """

    matrix: tuple[float, float, float, float] = (1.0, 0.0, 0.0, 1.0)
    offset: tuple[int, int] = (0, 0)
    inverse: bool = False
    dims: tuple[int, int] | None = None  # 0 in a slot keeps the source size
    background: tuple[int, int, int, int] | None = None
    opaque: bool = False

    def __post_init__(self):
        if len(self.matrix) != 4:
            raise ParameterError(
                f"Expected 4 elements, got {len(self.matrix)} ({list(self.matrix)})"
            )
        if not all(math.isfinite(v) for v in self.matrix):
            raise ParameterError(f"Matrix entries must be finite, got {list(self.matrix)}")
        if len(self.offset) != 2:
            raise ParameterError(
                f"Expected 2 elements, got {len(self.offset)} ({list(self.offset)})"
            )
        if self.dims is not None:
            if len(self.dims) != 2:
                raise ParameterError(
                    f"Expected 2 elements, got {len(self.dims)} ({list(self.dims)})"
                )
            if any(d < 0 for d in self.dims):
                raise ParameterError(f"Dimensions must be non-negative, got {self.dims}")
        if self.background is not None:
            if len(self.background) != 4:
                raise ParameterError(
                    f"Expected 4 elements, got {len(self.background)} "
                    f"({list(self.background)})"
                )
            if any(not 0 <= c <= 255 for c in self.background):
                raise ParameterError(f"Color components must be in [0, 255], got {self.background}")

    def effective_matrix(self) -> np.ndarray:
        """Build the 2x2 matrix actually applied to pixels.

        :returns: 2x2 float64 matrix (inverted if ``inverse`` is set)
        :raises SingularMatrixError: If inversion is requested on a singular matrix
        """
        from matwarp.transform.matrix import build_matrix

        return build_matrix(self.matrix, inverse=self.inverse)

    def __add__(self, other: WarpValues) -> WarpValues:
        """Compose warps: self applied FIRST, then other.

        :param other: Warp to apply after self
        :returns: Composed warp
        """
        if not isinstance(other, WarpValues):
            return NotImplemented

        from matwarp.transform.coords import round_half_away_array

        a = self.effective_matrix()
        b = other.effective_matrix()
        combined = b @ a
        carried = round_half_away_array(b @ np.asarray(self.offset, dtype=np.float64))

        return WarpValues(
            matrix=_to_user_order(combined),
            offset=(int(carried[0]) + other.offset[0], int(carried[1]) + other.offset[1]),
            inverse=False,
            dims=other.dims if other.dims is not None else self.dims,
            background=other.background if other.background is not None else self.background,
            opaque=self.opaque or other.opaque,
        )

    def __radd__(self, other):
        """Support sum() with initial value 0."""
        if other == 0:
            return self
        return other.__add__(self)

    def is_neutral(self) -> bool:
        """Check if this warp leaves pixel positions unchanged.

        Dims and background are ignored; they shape the canvas, not the mapping.

        :returns: True for the identity matrix with zero offset
        """
        return tuple(self.matrix) == (1.0, 0.0, 0.0, 1.0) and tuple(self.offset) == (0, 0)

    def with_overrides(self, **changes) -> WarpValues:
        """Return a copy with the given fields replaced; None values are skipped."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    # Factory methods
    @classmethod
    def identity(cls) -> WarpValues:
        """Create the identity warp."""
        return cls()

    @classmethod
    def from_matrix(cls, xx: float, xy: float, yx: float, yy: float) -> WarpValues:
        """Create a warp from a matrix in user order.

        :param xx: X component of the transformed unit X vector
        :param xy: Y component of the transformed unit X vector
        :param yx: X component of the transformed unit Y vector
        :param yy: Y component of the transformed unit Y vector
        """
        return cls(matrix=(float(xx), float(xy), float(yx), float(yy)))

    @classmethod
    def from_scale(cls, sx: float, sy: float | None = None) -> WarpValues:
        """Create a (possibly non-uniform) scale.

        :param sx: X scale factor
        :param sy: Y scale factor, defaults to ``sx``
        """
        if sy is None:
            sy = sx
        return cls.from_matrix(sx, 0.0, 0.0, sy)

    @classmethod
    def from_rotation(cls, degrees: float) -> WarpValues:
        """Create a counter-clockwise rotation about the origin (bottom-left pixel).

        Multiples of 90 degrees are snapped to exact integers so pixel grids map
        one-to-one.

        :param degrees: Rotation angle in degrees
        """
        radians = math.radians(degrees)
        c = math.cos(radians)
        s = math.sin(radians)
        if float(degrees) % 90.0 == 0.0:
            c = float(round(c))
            s = float(round(s))
        return cls.from_matrix(c, s, -s, c)

    @classmethod
    def from_shear(cls, kx: float = 0.0, ky: float = 0.0) -> WarpValues:
        """Create a shear.

        :param kx: X shift per unit of y
        :param ky: Y shift per unit of x
        """
        return cls.from_matrix(1.0, ky, kx, 1.0)

    @classmethod
    def from_offset(cls, dx: int, dy: int) -> WarpValues:
        """Create a pure integer translation."""
        return cls(offset=(int(dx), int(dy)))


def _to_user_order(matrix: np.ndarray) -> tuple[float, float, float, float]:
    """Convert an internal 2x2 matrix ``[[Xx, Yx], [Xy, Yy]]`` to user order."""
    return (
        float(matrix[0, 0]),
        float(matrix[1, 0]),
        float(matrix[0, 1]),
        float(matrix[1, 1]),
    )

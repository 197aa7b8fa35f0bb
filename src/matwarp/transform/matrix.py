"""
2x2 matrix building for image warps.

Functions:

- ``reorder_user_matrix()``: user order ``(Xx, Xy, Yx, Yy)`` to internal order.
- ``build_matrix()``: 2x2 matrix that left-multiplies column vectors ``(x, y)``,
  optionally inverted.
- ``full_piv_lu()`` / ``invert_matrix()`` / ``determinant()``: full-pivot LU
  decomposition and the operations derived from it.
- ``format_matrix()``: fixed-width print for operator sanity checks.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from matwarp.config.config import CONFIG
from matwarp.errors import ParameterError, SingularMatrixError

logger = logging.getLogger(__name__)

# ============================================================================
# Axis convention
# ============================================================================


def reorder_user_matrix(values: Sequence[float]) -> tuple[float, float, float, float]:
    """Reorder a user-order matrix into the internal row-major layout.

    Users enter where the unit X and Y vectors go: ``(Xx, Xy, Yx, Yy)``.
    Internally the matrix is ``[[Xx, Yx], [Xy, Yy]]``, so the flat row-major
    order is ``(Xx, Yx, Xy, Yy)``.

    :param values: Four numbers in user order
    :returns: Four numbers in internal row-major order
    :raises ParameterError: If ``values`` does not hold exactly 4 numbers
    """
    if len(values) != 4:
        raise ParameterError(f"Expected 4 elements, got {len(values)} ({list(values)})")
    xx, xy, yx, yy = (float(v) for v in values)
    return xx, yx, xy, yy


def build_matrix(values: Sequence[float], inverse: bool = False) -> np.ndarray:
    """Build the effective 2x2 transform matrix.

    :param values: Four numbers in user order ``(Xx, Xy, Yx, Yy)``
    :param inverse: If True, return the inverse matrix
    :returns: 2x2 float64 matrix
    :raises ParameterError: If ``values`` does not hold exactly 4 numbers
    :raises SingularMatrixError: If ``inverse`` is set and the matrix is singular

    Example:
        >>> build_matrix((1, 0, 1, 1))  # shear: Y axis leans right
        array([[1., 1.],
               [0., 1.]])
    """
    matrix = np.array(reorder_user_matrix(values), dtype=np.float64).reshape(2, 2)
    if inverse:
        logger.info("Inverting matrix...")
        matrix = invert_matrix(matrix)
    return matrix


# ============================================================================
# Full-pivot LU decomposition (NumPy)
# ============================================================================


@dataclass(frozen=True)
class FullPivLU:
    """Full-pivot LU decomposition ``P @ A @ Q = L @ U``.

    Attributes:
        lower: Unit lower triangular factor L [n, n]
        upper: Upper triangular factor U [n, n]
        row_perm: Row permutation, ``(P @ A)[i] = A[row_perm[i]]``
        col_perm: Column permutation, ``(A @ Q)[:, j] = A[:, col_perm[j]]``
        sign: Combined sign of both permutations (+1 or -1)
        scale: Largest absolute entry of A, used for relative pivot checks
    """

    lower: np.ndarray
    upper: np.ndarray
    row_perm: np.ndarray
    col_perm: np.ndarray
    sign: int
    scale: float

    @property
    def pivots(self) -> np.ndarray:
        """Diagonal of U."""
        return np.diag(self.upper)

    def is_singular(self, tolerance: float | None = None) -> bool:
        """Check whether any pivot is zero within a relative tolerance.

        :param tolerance: Relative pivot threshold, defaults to ``CONFIG.pivot_tolerance``
        :returns: True if the decomposed matrix is (numerically) singular
        """
        if tolerance is None:
            tolerance = CONFIG.pivot_tolerance
        if self.scale == 0.0:
            return True
        return bool(np.any(np.abs(self.pivots) <= tolerance * self.scale))

    def determinant(self) -> float:
        """Determinant ``sign * prod(diag(U))``."""
        return float(self.sign * np.prod(self.pivots))

    def inverse(self) -> np.ndarray:
        """Inverse ``Q @ inv(U) @ inv(L) @ P``.

        Callers must check :meth:`is_singular` first.
        """
        n = self.upper.shape[0]
        # P @ I
        rhs = np.eye(n, dtype=np.float64)[self.row_perm]
        y = _forward_substitute_numpy(self.lower, rhs)
        z = _back_substitute_numpy(self.upper, y)
        result = np.empty_like(z)
        result[self.col_perm] = z
        return result


def _forward_substitute_numpy(lower: np.ndarray, rhs: np.ndarray) -> np.ndarray:
    """Solve ``L @ X = B`` for unit lower triangular L."""
    n = lower.shape[0]
    x = rhs.astype(np.float64, copy=True)
    for i in range(n):
        x[i] -= lower[i, :i] @ x[:i]
    return x


def _back_substitute_numpy(upper: np.ndarray, rhs: np.ndarray) -> np.ndarray:
    """Solve ``U @ X = B`` for upper triangular U with non-zero diagonal."""
    n = upper.shape[0]
    x = rhs.astype(np.float64, copy=True)
    for i in range(n - 1, -1, -1):
        x[i] -= upper[i, i + 1 :] @ x[i + 1 :]
        x[i] /= upper[i, i]
    return x


def full_piv_lu(matrix: np.ndarray) -> FullPivLU:
    """Decompose a square matrix with complete (row and column) pivoting.

    Each step moves the largest remaining absolute entry onto the diagonal.
    Elimination stops at the first exactly-zero pivot; the remaining
    block is then zero and the matrix is singular.

    :param matrix: Square matrix [n, n]
    :returns: FullPivLU decomposition
    """
    a = np.asarray(matrix, dtype=np.float64)
    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise ValueError(f"matrix must be square, got shape {a.shape}")

    n = a.shape[0]
    upper = a.copy()
    lower = np.eye(n, dtype=np.float64)
    row_perm = np.arange(n)
    col_perm = np.arange(n)
    sign = 1
    scale = float(np.max(np.abs(a))) if a.size else 0.0

    for k in range(n):
        block = np.abs(upper[k:, k:])
        i, j = np.unravel_index(np.argmax(block), block.shape)
        i += k
        j += k

        if i != k:
            upper[[k, i]] = upper[[i, k]]
            lower[[k, i], :k] = lower[[i, k], :k]
            row_perm[[k, i]] = row_perm[[i, k]]
            sign = -sign
        if j != k:
            upper[:, [k, j]] = upper[:, [j, k]]
            col_perm[[k, j]] = col_perm[[j, k]]
            sign = -sign

        pivot = upper[k, k]
        if pivot == 0.0:
            break

        for r in range(k + 1, n):
            factor = upper[r, k] / pivot
            lower[r, k] = factor
            upper[r, k:] -= factor * upper[k, k:]
            upper[r, k] = 0.0

    return FullPivLU(
        lower=lower,
        upper=upper,
        row_perm=row_perm,
        col_perm=col_perm,
        sign=sign,
        scale=scale,
    )


def invert_matrix(matrix: np.ndarray, tolerance: float | None = None) -> np.ndarray:
    """Invert a square matrix through its full-pivot LU decomposition.

    :param matrix: Square matrix [n, n]
    :param tolerance: Relative pivot threshold, defaults to ``CONFIG.pivot_tolerance``
    :returns: Inverse matrix [n, n], float64, all entries finite
    :raises SingularMatrixError: If the matrix is singular, near-singular or
        holds NaN/inf entries
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    if not np.all(np.isfinite(matrix)):
        raise SingularMatrixError(
            f"Cannot invert matrix with non-finite entries:\n{format_matrix(matrix)}"
        )

    lu = full_piv_lu(matrix)
    if lu.is_singular(tolerance):
        raise SingularMatrixError(
            f"Cannot invert singular matrix (determinant {lu.determinant():g}):\n"
            f"{format_matrix(matrix)}"
        )

    # Subnormal pivots pass the relative check but overflow on division
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        inverse = lu.inverse()
    if not np.all(np.isfinite(inverse)):
        raise SingularMatrixError(
            f"Cannot invert near-singular matrix (inverse overflows):\n{format_matrix(matrix)}"
        )
    return inverse


def determinant(matrix: np.ndarray) -> float:
    """Determinant of a square matrix; exactly 0.0 when elimination hits a zero pivot."""
    return full_piv_lu(matrix).determinant()


# ============================================================================
# Diagnostics
# ============================================================================


def format_matrix(matrix: np.ndarray, precision: int | None = None) -> str:
    """Format a matrix one row per line, e.g. ``|  1.00  0.00 |``.

    :param matrix: 2D matrix
    :param precision: Decimal places, defaults to ``CONFIG.matrix_precision``
    :returns: Multi-line string without trailing newline
    """
    if precision is None:
        precision = CONFIG.matrix_precision
    rows = []
    for row in np.asarray(matrix):
        cells = "".join(f"{float(value):>5.{precision}f} " for value in row)
        rows.append(f"| {cells}|")
    return "\n".join(rows)

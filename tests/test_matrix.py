"""Tests for the matrix builder.

Tests cover:
- user order -> internal layout
- full-pivot LU decomposition, inverse and determinant
- singular matrix detection
- formatted print
"""

import numpy as np
import pytest

from matwarp.errors import ParameterError, SingularMatrixError
from matwarp.transform.matrix import (
    build_matrix,
    determinant,
    format_matrix,
    full_piv_lu,
    invert_matrix,
    reorder_user_matrix,
)
from matwarp.verification import WarpVerifier


class TestAxisConvention:
    """Test user order (Xx, Xy, Yx, Yy) handling."""

    def test_reorder(self):
        """Reorder swaps the two middle elements."""
        assert reorder_user_matrix((1, 2, 3, 4)) == (1.0, 3.0, 2.0, 4.0)

    def test_build_layout(self):
        """Internal layout is [[Xx, Yx], [Xy, Yy]]."""
        np.testing.assert_array_equal(build_matrix((1, 2, 3, 4)), [[1, 3], [2, 4]])

    def test_unit_vectors(self):
        """Unit X maps to (Xx, Xy); unit Y maps to (Yx, Yy)."""
        m = build_matrix((1, 2, 3, 4))
        np.testing.assert_array_equal(m @ np.array([1.0, 0.0]), [1, 2])
        np.testing.assert_array_equal(m @ np.array([0.0, 1.0]), [3, 4])

    def test_dtype(self):
        """Matrices are float64."""
        assert build_matrix((1, 0, 0, 1)).dtype == np.float64

    def test_wrong_count(self):
        """Three values are rejected before any math happens."""
        with pytest.raises(ParameterError, match="Expected 4 elements, got 3"):
            build_matrix((1, 0, 0))


class TestFullPivLU:
    """Test the decomposition itself."""

    @pytest.mark.parametrize("n", [2, 3, 4])
    def test_reconstruction(self, n):
        """P @ A @ Q equals L @ U."""
        rng = np.random.default_rng(n)
        a = rng.normal(size=(n, n))
        lu = full_piv_lu(a)
        permuted = a[lu.row_perm][:, lu.col_perm]
        np.testing.assert_allclose(lu.lower @ lu.upper, permuted, atol=1e-12)

    def test_triangular_factors(self):
        """L is unit lower triangular and U is upper triangular."""
        a = np.array([[2.0, -1.0, 0.5], [4.0, 3.0, -2.0], [1.0, 7.0, 1.0]])
        lu = full_piv_lu(a)
        np.testing.assert_array_equal(np.diag(lu.lower), np.ones(3))
        np.testing.assert_array_equal(np.triu(lu.lower, 1), np.zeros((3, 3)))
        np.testing.assert_array_equal(np.tril(lu.upper, -1), np.zeros((3, 3)))

    def test_largest_pivot_first(self):
        """The first pivot is the largest absolute entry."""
        lu = full_piv_lu(np.array([[1.0, 2.0], [-9.0, 3.0]]))
        assert lu.upper[0, 0] == -9.0

    def test_non_square(self):
        """Non-square input is rejected."""
        with pytest.raises(ValueError, match="square"):
            full_piv_lu(np.ones((2, 3)))


class TestInverse:
    """Test inversion."""

    @pytest.mark.parametrize(
        "values",
        [
            (1, 0, 0, 1),
            (2, 0, 0, 4),
            (0, 1, -1, 0),
            (1, 0, 1, 1),
            (0.3, -1.7, 2.2, 0.9),
            (1e-3, 5.0, -4.0, 1e3),
        ],
    )
    def test_product_is_identity(self, values):
        """M @ inv(M) is the identity within 1e-4."""
        m = build_matrix(values)
        WarpVerifier.assert_inverse(m, invert_matrix(m), tolerance=1e-4)

    def test_matches_numpy(self):
        """Inverse agrees with numpy.linalg.inv."""
        m = np.array([[3.0, -2.0], [1.5, 4.0]])
        np.testing.assert_allclose(invert_matrix(m), np.linalg.inv(m), rtol=1e-12)

    def test_random_3x3(self):
        """Inversion is not limited to 2x2."""
        rng = np.random.default_rng(7)
        m = rng.normal(size=(3, 3))
        np.testing.assert_allclose(m @ invert_matrix(m), np.eye(3), atol=1e-10)

    def test_build_inverse_flag(self):
        """The inverse flag replaces the matrix with its inverse."""
        np.testing.assert_allclose(
            build_matrix((2, 0, 0, 4), inverse=True), [[0.5, 0.0], [0.0, 0.25]]
        )

    def test_shear_inverse_exact(self):
        """Integer unimodular matrices invert exactly."""
        np.testing.assert_array_equal(build_matrix((1, 0, 1, 1), inverse=True), [[1, -1], [0, 1]])

    def test_singular_raises(self):
        """Rank-deficient matrices cannot be inverted."""
        with pytest.raises(SingularMatrixError, match="singular"):
            build_matrix((1, 2, 2, 4), inverse=True)

    def test_zero_matrix_raises(self):
        """The zero matrix cannot be inverted."""
        with pytest.raises(SingularMatrixError):
            invert_matrix(np.zeros((2, 2)))

    def test_near_singular_raises(self):
        """Pivots below the relative tolerance count as zero."""
        with pytest.raises(SingularMatrixError):
            invert_matrix(np.array([[1.0, 1.0], [1.0, 1.0 + 1e-13]]))

    def test_singular_is_value_error(self):
        """SingularMatrixError stays catchable as ValueError."""
        with pytest.raises(ValueError):
            invert_matrix(np.array([[0.0, 0.0], [0.0, 1.0]]))

    def test_no_nan_output(self):
        """A tiny but well-conditioned matrix still inverts cleanly."""
        inv = invert_matrix(np.eye(2) * 1e-6)
        assert np.all(np.isfinite(inv))
        np.testing.assert_allclose(inv, np.eye(2) * 1e6)

    @pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf])
    def test_non_finite_entry_raises(self, bad):
        """NaN or inf entries are rejected instead of spreading through the inverse."""
        with pytest.raises(SingularMatrixError, match="non-finite"):
            invert_matrix(np.array([[bad, 0.0], [0.0, 1.0]]))

    def test_non_finite_through_build(self):
        """build_matrix(inverse=True) rejects non-finite input too."""
        with pytest.raises(SingularMatrixError):
            build_matrix((float("nan"), 0.0, 0.0, 1.0), inverse=True)

    def test_subnormal_pivots_raise(self):
        """Subnormal pivots pass the relative check but the inverse overflows."""
        with pytest.raises(SingularMatrixError, match="overflows"):
            invert_matrix(np.eye(2) * 1e-310)


class TestDeterminant:
    """Test determinant diagnostics."""

    def test_basic(self):
        """det([[1, 3], [2, 4]]) = -2."""
        assert determinant(build_matrix((1, 2, 3, 4))) == pytest.approx(-2.0)

    def test_permutation_sign(self):
        """Axis swap has determinant -1."""
        assert determinant(np.array([[0.0, 1.0], [1.0, 0.0]])) == pytest.approx(-1.0)

    def test_singular_is_zero(self):
        """Singular matrices report exactly zero and do not raise."""
        assert determinant(np.array([[1.0, 2.0], [2.0, 4.0]])) == 0.0

    def test_inverse_reciprocal(self):
        """det(inv(M)) = 1 / det(M)."""
        m = build_matrix((0.3, -1.7, 2.2, 0.9))
        assert determinant(invert_matrix(m)) == pytest.approx(1.0 / determinant(m))

    def test_matches_numpy(self):
        """Agrees with numpy.linalg.det on a random 4x4."""
        rng = np.random.default_rng(11)
        m = rng.normal(size=(4, 4))
        assert determinant(m) == pytest.approx(np.linalg.det(m))


class TestFormatMatrix:
    """Test the fixed-width matrix print."""

    def test_identity(self):
        """Two decimals, width 5, framed rows."""
        assert format_matrix(np.eye(2)) == "|  1.00  0.00 |\n|  0.00  1.00 |"

    def test_negative_and_rounding(self):
        """Negative values and rounding to 2 decimals."""
        assert format_matrix(np.array([[-0.5, 1.234], [10.0, 0.005]])) == (
            "| -0.50  1.23 |\n| 10.00  0.01 |"
        )

    def test_precision(self):
        """Precision is configurable."""
        assert format_matrix(np.array([[1.0]]), precision=3) == "| 1.000 |"

# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np
import pytest

from vecmat import backend
from vecmat.backend import Transpose
from vecmat.exceptions import (
    DimensionMismatch,
    IndexOutOfRange,
    InvalidArgument,
    InvalidOperation,
)

TEST_ITERATIONS = 20


def test_transpose_flags_match_cblas():
    assert Transpose.NO_TRANSPOSE == 111
    assert Transpose.TRANSPOSE == 112


def test_gemm_ignores_c_when_beta_is_zero():
    rng = np.random.default_rng(1)
    a = rng.normal(size=(3, 4))
    b = rng.normal(size=(4, 2))
    c = np.full((3, 2), np.nan)
    backend.gemm(Transpose.NO_TRANSPOSE, Transpose.NO_TRANSPOSE, 2.0, a, b, 0.0, c)
    np.testing.assert_allclose(c, 2.0 * a @ b)


def test_gemm_accumulates_and_transposes():
    rng = np.random.default_rng(2)
    for _ in range(TEST_ITERATIONS):
        a = rng.normal(size=(4, 3))
        b = rng.normal(size=(2, 4))
        c = rng.normal(size=(3, 2))
        expected = 0.5 * a.T @ b.T + 1.0 * c
        backend.gemm(Transpose.TRANSPOSE, Transpose.TRANSPOSE, 0.5, a, b, 1.0, c)
        np.testing.assert_allclose(c, expected, rtol=1e-12, atol=1e-12)


def test_gemm_mismatch_leaves_c_untouched():
    c = np.ones((2, 2))
    with pytest.raises(DimensionMismatch):
        backend.gemm(
            Transpose.NO_TRANSPOSE,
            Transpose.NO_TRANSPOSE,
            1.0,
            np.ones((2, 3)),
            np.ones((2, 2)),
            0.0,
            c,
        )
    with pytest.raises(DimensionMismatch):
        backend.gemm(
            Transpose.NO_TRANSPOSE,
            Transpose.NO_TRANSPOSE,
            1.0,
            np.ones((2, 3)),
            np.ones((3, 3)),
            0.0,
            c,
        )
    np.testing.assert_array_equal(c, np.ones((2, 2)))


def test_gemv():
    a = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
    y = np.full(2, np.nan)
    backend.gemv(Transpose.NO_TRANSPOSE, 1.0, a, np.array([1.0, 0.0, 1.0]), 0.0, y)
    np.testing.assert_array_equal(y, [4.0, 10.0])

    y = np.ones(3)
    backend.gemv(Transpose.TRANSPOSE, 2.0, a, np.array([1.0, 1.0]), 1.0, y)
    np.testing.assert_array_equal(y, [11.0, 15.0, 19.0])

    with pytest.raises(DimensionMismatch):
        backend.gemv(Transpose.NO_TRANSPOSE, 1.0, a, np.ones(2), 0.0, np.ones(2))


def test_element_wise_never_broadcasts():
    dst = np.array([1.0, 2.0, 3.0])
    for op in [backend.add, backend.sub, backend.mul_elements, backend.div_elements]:
        with pytest.raises(DimensionMismatch):
            op(dst, np.array([1.0]))
    with pytest.raises(DimensionMismatch):
        backend.memcpy(np.zeros((2, 2)), np.zeros((1, 2)))
    np.testing.assert_array_equal(dst, [1.0, 2.0, 3.0])


def test_reductions():
    buf = np.array([[3.0, -1.0], [7.0, -1.0], [7.0, 0.0]])
    assert backend.minmax(buf) == (-1.0, 7.0)
    assert backend.min_index(buf) == (0, 1)
    assert backend.max_index(buf) == (1, 0)
    assert backend.minmax_index(buf) == (0, 1, 1, 0)

    with pytest.raises(InvalidArgument):
        backend.maximum(np.empty((0, 3)))


def test_predicates():
    assert backend.isnull(np.zeros(3))
    assert backend.isnull(np.empty(0))
    assert not backend.isnull(np.array([0.0, 1e-300]))
    assert backend.ispos(np.array([1.0, 2.0]))
    assert not backend.ispos(np.array([0.0, 2.0]))
    assert backend.isneg(np.array([-1.0]))
    assert backend.isnonneg(np.array([0.0, 1.0]))
    assert not backend.isnonneg(np.array([np.nan]))


def test_swap_rowcol():
    buf = np.arange(9, dtype=float).reshape(3, 3)
    expected = buf.copy()
    for p in range(3):
        expected[0, p], expected[p, 2] = expected[p, 2], expected[0, p]
    backend.swap_rowcol(buf, 0, 2)
    np.testing.assert_array_equal(buf, expected)

    with pytest.raises(InvalidOperation):
        backend.swap_rowcol(np.zeros((2, 3)), 0, 0)
    with pytest.raises(IndexOutOfRange):
        backend.swap_rowcol(np.zeros((2, 2)), 0, 2)


def test_transpose_in_place_needs_square():
    buf = np.array([[1.0, 2.0], [3.0, 4.0]])
    backend.transpose(buf)
    np.testing.assert_array_equal(buf, [[1.0, 3.0], [2.0, 4.0]])
    with pytest.raises(InvalidOperation):
        backend.transpose(np.zeros((2, 3)))
    with pytest.raises(DimensionMismatch):
        backend.transpose_memcpy(np.zeros((2, 3)), np.zeros((2, 3)))


def test_slide_matches_shifted_copy():
    rng = np.random.default_rng(3)
    for _ in range(TEST_ITERATIONS):
        m, n = rng.integers(1, 6, size=2)
        di, dj = rng.integers(-6, 7, size=2)
        original = rng.normal(size=(m, n))
        expected = np.zeros((m, n))
        for r in range(m):
            for c in range(n):
                if 0 <= r - di < m and 0 <= c - dj < n:
                    expected[r, c] = original[r - di, c - dj]

        buf = original.copy()
        backend.slide(buf, int(di), int(dj))
        np.testing.assert_array_equal(buf, expected)


def test_subvector_bounds():
    buf = np.arange(10, dtype=float)
    view = backend.subvector(buf, 1, 3, 3)
    np.testing.assert_array_equal(view, [1.0, 4.0, 7.0])
    assert np.shares_memory(view, buf)
    assert backend.stride(view) == 3
    assert backend.subvector(buf, 10, 0).size == 0

    with pytest.raises(InvalidArgument):
        backend.subvector(buf, 0, 2, 0)
    with pytest.raises(DimensionMismatch):
        backend.subvector(buf, 0, 4, 4)


def test_matrix_views_share_memory():
    buf = np.zeros((3, 4))
    for view in [
        backend.submatrix(buf, 1, 1, 2, 2),
        backend.row_view(buf, 2, 1, 3),
        backend.column_view(buf, 3, 0, 3),
    ]:
        assert np.shares_memory(view, buf)
    assert backend.stride(backend.column_view(buf, 0, 0, 3)) == 4

    with pytest.raises(DimensionMismatch):
        backend.row_view(buf, 3, 0, 1)
    with pytest.raises(DimensionMismatch):
        backend.column_view(buf, 0, 1, 3)


def test_rotate_and_identity():
    buf = np.arange(4, dtype=float)
    backend.rotate(buf, -5)
    np.testing.assert_array_equal(buf, [1.0, 2.0, 3.0, 0.0])

    rect = np.full((2, 3), 7.0)
    backend.set_identity(rect)
    np.testing.assert_array_equal(rect, [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])

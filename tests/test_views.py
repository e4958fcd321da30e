# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import gc
import weakref

import numpy as np
import pytest

from vecmat.exceptions import (
    DimensionMismatch,
    InvalidArgument,
    InvalidOperation,
    UnsupportedOperation,
)
from vecmat.matrix import Matrix, MatrixView
from vecmat.vector import Vector, VectorView


def grid(m, n):
    """m x n matrix with cell (i, j) = 10 * i + j."""
    return Matrix(m, n, init=lambda i, j: 10 * i + j)


def test_row_view_aliases_both_ways():
    m = grid(3, 4)
    row = m.row_view(0)
    for j in range(4):
        row[0, j] = 100 + j
        assert m[0, j] == 100 + j
        m[0, j] = -j
        assert row[0, j] == -j


def test_row_and_column_vecviews():
    m = grid(3, 4)
    r = m.row_vecview(1)
    c = m.column_vecview(2)
    assert isinstance(r, VectorView) and isinstance(c, VectorView)
    assert r.to_list() == [10.0, 11.0, 12.0, 13.0]
    assert c.to_list() == [2.0, 12.0, 22.0]
    assert r.stride == 1
    assert c.stride == m.columns

    c[1] = -5
    assert m[1, 2] == -5.0
    assert r[2] == -5.0

    assert m.row_vecview(0, 1).to_list() == [1.0, 2.0, 3.0]
    assert m.column_vecview(0, 1, 1).to_list() == [10.0]


def test_submatrix_view():
    m = grid(3, 4)
    v = m.view(1, 1, 2, 2)
    assert isinstance(v, MatrixView)
    assert v.owner is m
    assert v.is_view and not m.is_view
    assert v.size == (2, 2)
    assert v.tda == 4
    assert v.to_list() == [[11.0, 12.0], [21.0, 22.0]]

    v.fill_(0)
    assert m.to_list() == [
        [0.0, 1.0, 2.0, 3.0],
        [10.0, 0.0, 0.0, 13.0],
        [20.0, 0.0, 0.0, 23.0],
    ]
    assert m.view(1, 2).size == (2, 2)
    assert m.submatrix_view(0, 0, 1, 1).size == (1, 1)
    assert m.column_view(3).to_list() == [[3.0], [13.0], [23.0]]
    assert m.column(3, 1).to_list() == [[13.0], [23.0]]


def test_view_to_matrix_round_trip_is_independent():
    rng = np.random.default_rng(0)
    for m, n in [(1, 1), (3, 5), (6, 2)]:
        original = Matrix.from_array(rng.normal(size=(m, n)))
        copy = original.view(0, 0, original.rows, original.columns).to_matrix()
        assert copy == original
        assert type(copy) is Matrix
        assert not copy.is_view

        copy[0, 0] = 1e9
        assert original[0, 0] != 1e9


def test_views_of_views_are_rejected():
    m = grid(3, 3)
    v = m.view(0, 0, 2, 2)
    for make in [
        lambda: v.view(),
        lambda: v.row_view(0),
        lambda: v.column_view(0),
        lambda: v.row_vecview(0),
        lambda: v.column_vecview(0),
    ]:
        with pytest.raises(UnsupportedOperation):
            make()

    w = Vector.from_array(range(5)).view(1, 3)
    with pytest.raises(InvalidOperation):
        w.view(0, 1)


def test_out_of_range_views():
    m = grid(3, 3)
    with pytest.raises(DimensionMismatch):
        m.view(2, 2, 2, 2)
    with pytest.raises(DimensionMismatch):
        m.view(-1, 0)
    with pytest.raises(DimensionMismatch):
        m.row_view(5)
    with pytest.raises(DimensionMismatch):
        m.column_vecview(3)
    with pytest.raises(DimensionMismatch):
        m.row_vecview(0, 2, 2)


def test_vector_view():
    v = Vector.from_array(range(10))
    w = v.view(2, 3)
    assert w.to_list() == [2.0, 3.0, 4.0]
    assert w.owner is v
    w[0] = 100
    assert v[2] == 100.0
    v[3] = -1
    assert w[1] == -1.0

    strided = v.view(1, 3, 3)
    assert strided.to_list() == [1.0, 4.0, 7.0]
    assert strided.stride == 3
    assert v.view(7).to_list() == [7.0, 8.0, 9.0]
    assert v.view(1, stride=4).to_list() == [1.0, 5.0, 9.0]
    assert v.subvector(0, 2).to_list() == [0.0, 1.0]

    with pytest.raises(DimensionMismatch):
        v.view(8, 3)
    with pytest.raises(DimensionMismatch):
        v.view(-1, 2)
    with pytest.raises(DimensionMismatch):
        v.view(0, -1)
    with pytest.raises(InvalidArgument):
        v.view(0, 2, 0)


def test_in_place_ops_on_views_reach_the_owner():
    m = grid(2, 3)
    m.row_vecview(0).add_(1)
    m.column_view(2).mul_(2)
    assert m.to_list() == [[1.0, 2.0, 6.0], [10.0, 11.0, 24.0]]


def test_pure_ops_on_views_return_owning_objects():
    v = Vector.from_array([1, 2, 3])
    w = v.view(0, 2) + 1
    assert type(w) is Vector
    assert w.owner is None
    assert w.to_list() == [2.0, 3.0]
    assert v.to_list() == [1.0, 2.0, 3.0]

    m = grid(2, 2)
    r = m.row_view(1) * 2
    assert type(r) is Matrix
    assert r.to_list() == [[20.0, 22.0]]

    copied = v.view(1).to_vector()
    copied[0] = 50
    assert v[1] == 2.0


def test_view_keeps_owner_alive():
    m = Matrix.from_array([[1, 2], [3, 4]])
    ref = weakref.ref(m)
    row = m.row_vecview(1)
    del m
    gc.collect()

    assert ref() is not None
    assert row.owner is ref()
    assert row.to_list() == [3.0, 4.0]
    row[0] = 30
    assert ref()[1, 0] == 30.0

    del row
    gc.collect()
    assert ref() is None


def test_view_equality_with_owning_copy():
    m = grid(2, 2)
    assert m.row_view(1) == Matrix.from_array([[10, 11]])
    assert m.row_vecview(1) == Vector.from_array([10, 11])

# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Storage engine
==============

The numeric backend behind `Vector` and `Matrix`. Every function works on
raw float64 ndarrays: 1-D buffers for vectors, 2-D buffers for matrices.
A view is a basic-slice ndarray over its owner's buffer, so it shares
memory and carries its own offset and strides.

The function table follows the GSL vector/matrix/BLAS interface:
allocation, get/set, memcpy, element-wise arithmetic, reductions,
transposition, swaps, views, GEMM and GEMV.

Element-wise work never relies on NumPy broadcasting; operand shapes are
checked up front and nothing is written when the check fails.
"""

import logging
from enum import IntEnum
from typing import Callable, List, Tuple

import numpy as np

from .exceptions import (
    DimensionMismatch,
    IndexOutOfRange,
    InvalidArgument,
    InvalidOperation,
)
from .utils import DTYPE

logger = logging.getLogger(__name__)


class Transpose(IntEnum):
    """CBLAS transpose flags."""

    NO_TRANSPOSE = 111
    TRANSPOSE = 112


def _ieee():
    # IEEE-754 results (inf, nan) instead of RuntimeWarnings
    return np.errstate(divide="ignore", invalid="ignore", over="ignore")


def check_index(i: int, bound: int, what: str) -> None:
    if not 0 <= i < bound:
        raise IndexOutOfRange(
            f"{what} index {i} out of range [0, {bound})", index=i, bound=bound
        )


def _check_same_shape(dst: np.ndarray, src: np.ndarray) -> None:
    if dst.shape != src.shape:
        raise DimensionMismatch(
            f"shape mismatch: {dst.shape} vs {src.shape}",
            expected=dst.shape,
            actual=src.shape,
        )


def _check_nonempty(buf: np.ndarray, what: str) -> None:
    if buf.size == 0:
        raise InvalidArgument(f"{what} of an empty buffer is undefined")


# ---------------------------------------------------------------------
# Memory handling
# ---------------------------------------------------------------------
def alloc(n: int, zero: bool = False) -> np.ndarray:
    return np.zeros(n, dtype=DTYPE) if zero else np.empty(n, dtype=DTYPE)


def alloc_matrix(m: int, n: int, zero: bool = False) -> np.ndarray:
    shape = (m, n)
    return np.zeros(shape, dtype=DTYPE) if zero else np.empty(shape, dtype=DTYPE)


def stride(buf: np.ndarray) -> int:
    """Distance, in elements, between consecutive entries along axis 0."""
    return buf.strides[0] // buf.itemsize


# ---------------------------------------------------------------------
# Element access
# ---------------------------------------------------------------------
def get(buf: np.ndarray, i: int) -> float:
    check_index(i, buf.shape[0], "element")
    return float(buf[i])


def set(buf: np.ndarray, i: int, x: float) -> None:  # noqa: A001
    check_index(i, buf.shape[0], "element")
    buf[i] = x


def matrix_get(buf: np.ndarray, i: int, j: int) -> float:
    check_index(i, buf.shape[0], "row")
    check_index(j, buf.shape[1], "column")
    return float(buf[i, j])


def matrix_set(buf: np.ndarray, i: int, j: int, x: float) -> None:
    check_index(i, buf.shape[0], "row")
    check_index(j, buf.shape[1], "column")
    buf[i, j] = x


# ---------------------------------------------------------------------
# Initializing and copying
# ---------------------------------------------------------------------
def set_all(buf: np.ndarray, x: float) -> None:
    buf.fill(x)


def set_zero(buf: np.ndarray) -> None:
    buf.fill(0.0)


def set_identity(buf: np.ndarray) -> None:
    """Ones on the main diagonal, zeros elsewhere (any 2-D shape)."""
    buf.fill(0.0)
    diag = np.arange(min(buf.shape))
    buf[diag, diag] = 1.0


def memcpy(dst: np.ndarray, src: np.ndarray) -> None:
    _check_same_shape(dst, src)
    # copyto buffers internally when dst and src overlap
    np.copyto(dst, src)


# ---------------------------------------------------------------------
# Element-wise arithmetic
# ---------------------------------------------------------------------
def add(dst: np.ndarray, src: np.ndarray) -> None:
    _check_same_shape(dst, src)
    with _ieee():
        np.add(dst, src, out=dst)


def sub(dst: np.ndarray, src: np.ndarray) -> None:
    _check_same_shape(dst, src)
    with _ieee():
        np.subtract(dst, src, out=dst)


def mul_elements(dst: np.ndarray, src: np.ndarray) -> None:
    _check_same_shape(dst, src)
    with _ieee():
        np.multiply(dst, src, out=dst)


def div_elements(dst: np.ndarray, src: np.ndarray) -> None:
    _check_same_shape(dst, src)
    with _ieee():
        np.divide(dst, src, out=dst)


def scale(buf: np.ndarray, x: float) -> None:
    with _ieee():
        np.multiply(buf, x, out=buf)


def add_constant(buf: np.ndarray, x: float) -> None:
    with _ieee():
        np.add(buf, x, out=buf)


def div_constant(buf: np.ndarray, x: float) -> None:
    with _ieee():
        np.divide(buf, x, out=buf)


_COMPARISONS = {
    "<": np.less,
    ">": np.greater,
    "<=": np.less_equal,
    ">=": np.greater_equal,
}


def compare(a: np.ndarray, b: np.ndarray, op: str) -> np.ndarray:
    """Element-wise comparison as a new buffer of 0.0 / 1.0."""
    _check_same_shape(a, b)
    with _ieee():
        return _COMPARISONS[op](a, b).astype(DTYPE)


# ---------------------------------------------------------------------
# BLAS level 1
# ---------------------------------------------------------------------
def dot(x: np.ndarray, y: np.ndarray) -> float:
    _check_same_shape(x, y)
    with _ieee():
        return float(np.dot(x, y))


def nrm2(x: np.ndarray) -> float:
    return float(np.linalg.norm(x))


def asum(x: np.ndarray) -> float:
    return float(np.sum(np.abs(x)))


def total(x: np.ndarray) -> float:
    with _ieee():
        return float(np.sum(x))


# ---------------------------------------------------------------------
# Min / max. Row-major scan, the first occurrence wins; a NaN anywhere
# makes the value NaN and the index that of the first NaN.
# ---------------------------------------------------------------------
def minimum(buf: np.ndarray) -> float:
    _check_nonempty(buf, "min")
    return float(np.min(buf))


def maximum(buf: np.ndarray) -> float:
    _check_nonempty(buf, "max")
    return float(np.max(buf))


def minmax(buf: np.ndarray) -> Tuple[float, float]:
    _check_nonempty(buf, "minmax")
    return float(np.min(buf)), float(np.max(buf))


def _unravel(flat: int, shape: Tuple[int, ...]) -> Tuple[int, ...]:
    return tuple(int(k) for k in np.unravel_index(flat, shape))


def min_index(buf: np.ndarray) -> Tuple[int, ...]:
    _check_nonempty(buf, "min_index")
    return _unravel(int(np.argmin(buf)), buf.shape)


def max_index(buf: np.ndarray) -> Tuple[int, ...]:
    _check_nonempty(buf, "max_index")
    return _unravel(int(np.argmax(buf)), buf.shape)


def minmax_index(buf: np.ndarray) -> Tuple[int, ...]:
    """Indices of the minimum followed by the indices of the maximum."""
    return min_index(buf) + max_index(buf)


# ---------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------
def isnull(buf: np.ndarray) -> bool:
    return bool(np.all(buf == 0.0))


def ispos(buf: np.ndarray) -> bool:
    return bool(np.all(buf > 0.0))


def isneg(buf: np.ndarray) -> bool:
    return bool(np.all(buf < 0.0))


def isnonneg(buf: np.ndarray) -> bool:
    return bool(np.all(buf >= 0.0))


# ---------------------------------------------------------------------
# Permutations and shape changes
# ---------------------------------------------------------------------
def sort(buf: np.ndarray) -> None:
    buf.sort()


def rotate(buf: np.ndarray, k: int) -> None:
    """Circular shift: element i moves to (i + k) mod n."""
    if buf.size == 0:
        return
    buf[...] = np.roll(buf, k)


def swap_elements(buf: np.ndarray, i: int, j: int) -> None:
    check_index(i, buf.shape[0], "element")
    check_index(j, buf.shape[0], "element")
    buf[[i, j]] = buf[[j, i]]


def swap_rows(buf: np.ndarray, i: int, j: int) -> None:
    check_index(i, buf.shape[0], "row")
    check_index(j, buf.shape[0], "row")
    buf[[i, j], :] = buf[[j, i], :]


def swap_columns(buf: np.ndarray, i: int, j: int) -> None:
    check_index(i, buf.shape[1], "column")
    check_index(j, buf.shape[1], "column")
    buf[:, [i, j]] = buf[:, [j, i]]


def swap_rowcol(buf: np.ndarray, i: int, j: int) -> None:
    """
    Exchange row i with column j of a square buffer.

    The exchange runs position by position in ascending order, so the
    cells where the row and the column cross are swapped twice, exactly
    as gsl_matrix_swap_rowcol does.
    """
    m, n = buf.shape
    if m != n:
        raise InvalidOperation(f"swap_rowcol requires a square matrix, got {m}x{n}")
    check_index(i, m, "row")
    check_index(j, n, "column")
    for p in range(m):
        buf[i, p], buf[p, j] = buf[p, j], buf[i, p]


def transpose(buf: np.ndarray) -> None:
    m, n = buf.shape
    if m != n:
        raise InvalidOperation(
            f"in-place transpose requires a square matrix, got {m}x{n}"
        )
    buf[...] = buf.T.copy()


def transpose_memcpy(dst: np.ndarray, src: np.ndarray) -> None:
    if dst.shape != src.shape[::-1]:
        raise DimensionMismatch(
            f"transpose of {src.shape} does not fit into {dst.shape}",
            expected=src.shape[::-1],
            actual=dst.shape,
        )
    np.copyto(dst, src.T)


def slide(buf: np.ndarray, di: int, dj: int) -> None:
    """
    Shift every element by (di, dj), dropping what falls off the edge and
    filling the exposed rows / columns with zeros.

    di > 0 moves content down, di < 0 up; dj > 0 moves it right, dj < 0 left.
    """
    m, n = buf.shape
    if abs(di) >= m or abs(dj) >= n:
        logger.debug("slide(%d, %d) on %dx%d clears the whole buffer", di, dj, m, n)
        buf.fill(0.0)
        return
    src = buf[max(-di, 0) : m - max(di, 0), max(-dj, 0) : n - max(dj, 0)].copy()
    buf.fill(0.0)
    buf[max(di, 0) : m + min(di, 0), max(dj, 0) : n + min(dj, 0)] = src


# ---------------------------------------------------------------------
# Views. Basic slicing only, so the result always aliases `buf`.
# ---------------------------------------------------------------------
def subvector(buf: np.ndarray, offset: int, n: int, step: int = 1) -> np.ndarray:
    size = buf.shape[0]
    if step < 1:
        raise InvalidArgument(f"view stride must be >= 1, got {step}")
    if offset < 0 or n < 0:
        raise DimensionMismatch(f"negative view parameters: offset={offset}, size={n}")
    end = offset + (n - 1) * step + 1 if n else offset
    if end > size:
        raise DimensionMismatch(
            f"view (offset={offset}, size={n}, stride={step}) exceeds length {size}",
            expected=(size,),
            actual=(end,),
        )
    return buf[offset:end:step]


def submatrix(buf: np.ndarray, k1: int, k2: int, n1: int, n2: int) -> np.ndarray:
    m, n = buf.shape
    if min(k1, k2, n1, n2) < 0 or k1 + n1 > m or k2 + n2 > n:
        raise DimensionMismatch(
            f"submatrix ({k1}, {k2}, {n1}, {n2}) does not fit into {m}x{n}",
            expected=(m, n),
            actual=(k1 + n1, k2 + n2),
        )
    return buf[k1 : k1 + n1, k2 : k2 + n2]


def row_view(buf: np.ndarray, i: int, offset: int, n: int) -> np.ndarray:
    rows, cols = buf.shape
    if not 0 <= i < rows or offset < 0 or n < 0 or offset + n > cols:
        raise DimensionMismatch(
            f"row view (row={i}, offset={offset}, size={n}) outside {rows}x{cols}",
            expected=(rows, cols),
            actual=(i + 1, offset + n),
        )
    return buf[i, offset : offset + n]


def column_view(buf: np.ndarray, j: int, offset: int, n: int) -> np.ndarray:
    rows, cols = buf.shape
    if not 0 <= j < cols or offset < 0 or n < 0 or offset + n > rows:
        raise DimensionMismatch(
            f"column view (column={j}, offset={offset}, size={n}) outside {rows}x{cols}",
            expected=(rows, cols),
            actual=(offset + n, j + 1),
        )
    return buf[offset : offset + n, j]


def vector_as_row(buf: np.ndarray) -> np.ndarray:
    return buf[np.newaxis, :]


def vector_as_column(buf: np.ndarray) -> np.ndarray:
    return buf[:, np.newaxis]


# ---------------------------------------------------------------------
# BLAS level 2 / 3
# ---------------------------------------------------------------------
def _op(a: np.ndarray, trans: Transpose) -> np.ndarray:
    return a.T if trans == Transpose.TRANSPOSE else a


def gemv(
    trans: Transpose,
    alpha: float,
    a: np.ndarray,
    x: np.ndarray,
    beta: float,
    y: np.ndarray,
) -> None:
    """y := alpha * op(a) @ x + beta * y. With beta == 0, y is not read."""
    op_a = _op(a, trans)
    if op_a.shape[1] != x.shape[0] or op_a.shape[0] != y.shape[0]:
        raise DimensionMismatch(
            f"gemv: op(A) is {op_a.shape}, x has {x.shape[0]}, y has {y.shape[0]}",
            expected=(op_a.shape[0], op_a.shape[1]),
            actual=(y.shape[0], x.shape[0]),
        )
    logger.debug("gemv %s x %s", op_a.shape, x.shape)
    with _ieee():
        product = alpha * (op_a @ x)
        if beta == 0.0:
            y[...] = product
        else:
            y *= beta
            y += product


def gemm(
    trans_a: Transpose,
    trans_b: Transpose,
    alpha: float,
    a: np.ndarray,
    b: np.ndarray,
    beta: float,
    c: np.ndarray,
) -> None:
    """C := alpha * op(a) @ op(b) + beta * C. With beta == 0, C is not read."""
    op_a = _op(a, trans_a)
    op_b = _op(b, trans_b)
    if op_a.shape[1] != op_b.shape[0]:
        raise DimensionMismatch(
            f"gemm: inner dimensions differ, {op_a.shape} x {op_b.shape}",
            expected=(op_a.shape[1],),
            actual=(op_b.shape[0],),
        )
    if c.shape != (op_a.shape[0], op_b.shape[1]):
        raise DimensionMismatch(
            f"gemm: result {c.shape} cannot hold {op_a.shape} x {op_b.shape}",
            expected=(op_a.shape[0], op_b.shape[1]),
            actual=c.shape,
        )
    logger.debug("gemm %s x %s", op_a.shape, op_b.shape)
    with _ieee():
        product = alpha * (op_a @ op_b)
        if beta == 0.0:
            c[...] = product
        else:
            c *= beta
            c += product


# ---------------------------------------------------------------------
# Callback iteration, ascending index / row-major order
# ---------------------------------------------------------------------
def each(buf: np.ndarray, fn: Callable) -> None:
    for idx in np.ndindex(*buf.shape):
        fn(float(buf[idx]))


def each_with_index(buf: np.ndarray, fn: Callable) -> None:
    for idx in np.ndindex(*buf.shape):
        fn(float(buf[idx]), *idx)


def map_inplace(buf: np.ndarray, fn: Callable) -> None:
    for idx in np.ndindex(*buf.shape):
        buf[idx] = fn(float(buf[idx]))


def map_index_inplace(buf: np.ndarray, fn: Callable) -> None:
    for idx in np.ndindex(*buf.shape):
        buf[idx] = fn(*idx)


def map_with_index_inplace(buf: np.ndarray, fn: Callable) -> None:
    for idx in np.ndindex(*buf.shape):
        buf[idx] = fn(float(buf[idx]), *idx)


def map_to_list(buf: np.ndarray, fn: Callable) -> List:
    return [fn(float(buf[idx])) for idx in np.ndindex(*buf.shape)]

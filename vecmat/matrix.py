# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Fixed-size m x n matrices of float64 values, and views onto them.

Notes
-----
* `*` and `@` are the linear-algebra product (GEMM / GEMV). Element-wise
  multiplication is `multiply` / `mul_`. Every other operator works
  element by element.
* Operators take a scalar, a Vector or a Matrix on either side; see
  `Matrix.coerce`.
* `M[i, j]` reads one element. A full slice `:` on either axis is a
  wildcard: `M[0, :]` is row 0 as a 1 x n Matrix, `M[:, 0]` is column 0
  as an m x 1 Matrix.
"""

import logging
import numbers
import operator
from typing import Callable, List, Optional, Tuple

import numpy as np

from . import backend
from .backend import Transpose
from .coercion import Operand, OperandKind, expand_scalar, operand_kind
from .exceptions import DimensionMismatch, InvalidArgument, UnsupportedOperation
from .utils import DEFAULT_SEPARATOR, DTYPE, as_scalar, check_size
from .vector import Vector, VectorView

logger = logging.getLogger(__name__)

ALL = slice(None)


def _owning(data: np.ndarray) -> "Matrix":
    # adopt a freshly allocated 2-D buffer, no copy
    matrix = Matrix.__new__(Matrix)
    matrix._data = data
    return matrix


def _axis(key):
    # None stands for the ':' wildcard
    if isinstance(key, slice):
        if key == ALL:
            return None
        raise TypeError("only the full slice ':' can be used as a wildcard")
    return operator.index(key)


class Matrix(Operand):
    """
    A fixed-size m x n matrix of doubles, indexed (row, column).

    Parameters
    ----------
    m, n : int
        Number of rows and columns (>= 0). Both are fixed for life.
    zero : bool
        Zero-fill the storage. Otherwise the contents are unspecified
        until written.
    init : callable(i, j) -> float, optional
        Called for every cell in row-major order to fill the matrix
        (see `map_index_`).
    """

    kind = OperandKind.MATRIX

    def __init__(
        self,
        m: int,
        n: int,
        zero: bool = False,
        init: Optional[Callable[[int, int], float]] = None,
    ):
        self._data = backend.alloc_matrix(check_size(m, "m"), check_size(n, "n"), zero)
        if init is not None:
            self.map_index_(init)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------
    @classmethod
    def zero(cls, m: int, n: int) -> "Matrix":
        return Matrix(m, n, zero=True)

    @classmethod
    def eye(cls, n: int) -> "Matrix":
        return Matrix(n, n).identity_()

    @classmethod
    def from_array(cls, array) -> "Matrix":
        """
        Build a Matrix from a sequence.

        A flat sequence of numbers gives a 1 x k row; a sequence of rows
        (lists, ranges, Vectors, ...) gives one matrix row per entry.

        >>> Matrix.from_array([[1, 2], [3, 4]]).to_list()
        [[1.0, 2.0], [3.0, 4.0]]
        """
        if isinstance(array, Operand):
            return _owning(np.array(array, dtype=DTYPE, ndmin=2))
        rows = list(array)
        if not rows:
            raise InvalidArgument("Can't create empty matrix")
        if isinstance(rows[0], numbers.Real):
            rows = [rows]
        else:
            try:
                rows = [list(row) for row in rows]
            except TypeError as e:
                raise InvalidArgument(f"cannot convert rows to a Matrix: {e}") from e
        widths = sorted({len(row) for row in rows})
        if len(widths) > 1:
            raise DimensionMismatch(f"rows have different lengths: {widths}")
        try:
            data = np.array(rows, dtype=DTYPE)
        except (TypeError, ValueError) as e:
            raise InvalidArgument(f"cannot convert rows to a Matrix: {e}") from e
        return _owning(data)

    def blank(self) -> "Matrix":
        """A new, uninitialized Matrix of the same shape."""
        return Matrix(self.m, self.n)

    def copy(self) -> "Matrix":
        """An owning copy, independent of this object's storage."""
        return _owning(self._data.copy())

    def __copy__(self) -> "Matrix":
        return self.copy()

    def copy_from(self, other) -> "Matrix":
        """Overwrite every element with the values of `other` (in place)."""
        x, _ = self.coerce(other)
        backend.memcpy(self._data, x._data)
        return self

    # ------------------------------------------------------------------
    # Shape and ownership
    # ------------------------------------------------------------------
    @property
    def m(self) -> int:
        return self._data.shape[0]

    @property
    def n(self) -> int:
        return self._data.shape[1]

    rows = height = m
    columns = width = n

    @property
    def size(self) -> Tuple[int, int]:
        return self._data.shape

    shape = size

    @property
    def tda(self) -> int:
        """Physical row length in elements (>= n for views)."""
        return backend.stride(self._data)

    @property
    def owner(self):
        return None

    @property
    def is_view(self) -> bool:
        return False

    @property
    def _root(self):
        return self

    def is_square(self) -> bool:
        return self.m == self.n

    def is_column(self) -> bool:
        return self.n == 1

    # ------------------------------------------------------------------
    # Setting / getting values
    # ------------------------------------------------------------------
    def _split_key(self, key):
        if not isinstance(key, tuple) or len(key) != 2:
            raise TypeError(f"Matrix indices must be a pair (i, j), got {key!r}")
        return _axis(key[0]), _axis(key[1])

    def __getitem__(self, key):
        i, j = self._split_key(key)
        if i is None and j is None:
            return self
        if j is None:
            backend.check_index(i, self.m, "row")
            return self._row_alias(i).copy()
        if i is None:
            backend.check_index(j, self.n, "column")
            return self._column_alias(j).copy()
        return backend.matrix_get(self._data, i, j)

    def __setitem__(self, key, value) -> None:
        i, j = self._split_key(key)
        if i is None and j is None:
            self.copy_from(value)
        elif j is None:
            backend.check_index(i, self.m, "row")
            self._row_vec_alias(i).copy_from(value)
        elif i is None:
            backend.check_index(j, self.n, "column")
            self._column_vec_alias(j).copy_from(value)
        else:
            backend.matrix_set(self._data, i, j, as_scalar(value))

    def get(self, i, j=ALL):
        """Same as `self[i, j]`; `j` defaults to the whole row."""
        return self[i, j]

    def set(self, i, j, value) -> "Matrix":
        self[i, j] = value
        return self

    def fill_(self, value: float) -> "Matrix":
        backend.set_all(self._data, as_scalar(value))
        return self

    def zero_(self) -> "Matrix":
        backend.set_zero(self._data)
        return self

    def identity_(self) -> "Matrix":
        """Ones on the main diagonal, zeros elsewhere."""
        backend.set_identity(self._data)
        return self

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    def _check_viewable(self) -> None:
        pass

    def _sub_alias(self, x=0, y=0, m=None, n=None) -> "MatrixView":
        m = self.m - x if m is None else m
        n = self.n - y if n is None else n
        logger.debug("view (%d, %d) %dx%d over %dx%d", x, y, m, n, self.m, self.n)
        return MatrixView(self._root, backend.submatrix(self._data, x, y, m, n))

    def _row_alias(self, i, offset=0, size=None) -> "MatrixView":
        return self._sub_alias(i, offset, 1, size)

    def _column_alias(self, j, offset=0, size=None) -> "MatrixView":
        return self._sub_alias(offset, j, size, 1)

    def _row_vec_alias(self, i, offset=0, size=None) -> VectorView:
        size = self.n - offset if size is None else size
        return VectorView(self._root, backend.row_view(self._data, i, offset, size))

    def _column_vec_alias(self, j, offset=0, size=None) -> VectorView:
        size = self.m - offset if size is None else size
        return VectorView(self._root, backend.column_view(self._data, j, offset, size))

    def _vector_alias(self) -> VectorView:
        """This 1 x k or k x 1 matrix seen as a Vector."""
        if self.m == 1:
            return self._row_vec_alias(0)
        if self.n == 1:
            return self._column_vec_alias(0)
        raise DimensionMismatch(
            f"a {self.m}x{self.n} matrix can't be used as a vector",
            actual=self.shape,
        )

    def view(self, x: int = 0, y: int = 0, m: Optional[int] = None, n: Optional[int] = None):
        """
        A `MatrixView` of the m x n block whose top-left cell is (x, y).
        `m` and `n` default to everything down / right of that cell.
        """
        self._check_viewable()
        return self._sub_alias(x, y, m, n)

    submatrix_view = view

    def submatrix(self, *args) -> "Matrix":
        """Shorthand for `view(...).to_matrix()`."""
        return self._sub_alias(*args).copy()

    def row_view(self, i: int, offset: int = 0, size: Optional[int] = None):
        """Row `i` as a 1 x size `MatrixView`."""
        self._check_viewable()
        return self._row_alias(i, offset, size)

    def column_view(self, j: int, offset: int = 0, size: Optional[int] = None):
        """Column `j` as a size x 1 `MatrixView`."""
        self._check_viewable()
        return self._column_alias(j, offset, size)

    def row(self, i: int, offset: int = 0, size: Optional[int] = None) -> "Matrix":
        return self._row_alias(i, offset, size).copy()

    def column(self, j: int, offset: int = 0, size: Optional[int] = None) -> "Matrix":
        return self._column_alias(j, offset, size).copy()

    def row_vecview(self, i: int, offset: int = 0, size: Optional[int] = None) -> VectorView:
        """Row `i` as a `VectorView` (stride 1)."""
        self._check_viewable()
        return self._row_vec_alias(i, offset, size)

    def column_vecview(self, j: int, offset: int = 0, size: Optional[int] = None) -> VectorView:
        """Column `j` as a `VectorView` (stride = tda)."""
        self._check_viewable()
        return self._column_vec_alias(j, offset, size)

    # ------------------------------------------------------------------
    # Coercion and operators
    # ------------------------------------------------------------------
    def coerce(self, other) -> Tuple["Matrix", "Matrix"]:
        """
        Return `(expanded_other, self)` with `expanded_other` a Matrix.

        A scalar becomes a Matrix of this shape filled with it. A Vector
        becomes a 1 x n row view of itself, or an n x 1 column view when
        this matrix is a column of the same height.
        """
        kind = operand_kind(other, self)
        if kind is OperandKind.SCALAR:
            return expand_scalar(other, self), self
        if kind is OperandKind.VECTOR:
            if self.n == 1 and self.m != 1 and other.size == self.m:
                return other._as_column_matrix(), self
            return other._as_row_matrix(), self
        return other, self

    def _ewise_(self, other, matrix_op, scalar_op) -> "Matrix":
        if operand_kind(other, self) is OperandKind.SCALAR:
            scalar_op(self._data, float(other))
        else:
            x, _ = self.coerce(other)
            matrix_op(self._data, x._data)
        return self

    def add_(self, other) -> "Matrix":
        return self._ewise_(other, backend.add, backend.add_constant)

    def sub_(self, other) -> "Matrix":
        return self._ewise_(
            other, backend.sub, lambda buf, x: backend.add_constant(buf, -x)
        )

    def mul_(self, other) -> "Matrix":
        """Element-by-element (Hadamard) product, in place."""
        return self._ewise_(other, backend.mul_elements, backend.scale)

    def div_(self, other) -> "Matrix":
        return self._ewise_(other, backend.div_elements, backend.div_constant)

    subtract_ = sub_
    multiply_ = mul_
    divide_ = div_

    __iadd__ = add_
    __isub__ = sub_
    __itruediv__ = div_

    def __add__(self, other) -> "Matrix":
        return self.copy().add_(other)

    def __sub__(self, other) -> "Matrix":
        return self.copy().sub_(other)

    def __truediv__(self, other) -> "Matrix":
        return self.copy().div_(other)

    def multiply(self, other) -> "Matrix":
        """Element-by-element (Hadamard) product."""
        return self.copy().mul_(other)

    def __mul__(self, other) -> "Matrix":
        """
        Matrix product.

        A scalar scales every element. A Matrix needs `self.n == other.m`
        and gives `self.m x other.n`. A Vector is taken as a column, needs
        `self.n == other.size`, and gives a `self.m x 1` Matrix.

        >>> (Matrix.from_array([[1, 2], [2, 3]]) * 2).to_list()
        [[2.0, 4.0], [4.0, 6.0]]
        """
        kind = operand_kind(other, self)
        if kind is OperandKind.SCALAR:
            return self.multiply(other)
        if kind is OperandKind.VECTOR:
            result = Matrix(self.m, 1)
            backend.gemv(
                Transpose.NO_TRANSPOSE, 1.0, self._data, other._data, 0.0, result._data[:, 0]
            )
            return result
        result = Matrix(self.m, other.n)
        backend.gemm(
            Transpose.NO_TRANSPOSE,
            Transpose.NO_TRANSPOSE,
            1.0,
            self._data,
            other._data,
            0.0,
            result._data,
        )
        return result

    __matmul__ = __mul__

    def __radd__(self, other) -> "Matrix":
        x, y = self.coerce(other)
        return x + y

    def __rsub__(self, other) -> "Matrix":
        x, y = self.coerce(other)
        return x - y

    def __rmul__(self, other) -> "Matrix":
        # only scalars get here; Vector * Matrix is handled by Vector
        return self * other

    def __rtruediv__(self, other) -> "Matrix":
        x, y = self.coerce(other)
        return x / y

    def __neg__(self) -> "Matrix":
        result = self.copy()
        backend.scale(result._data, -1.0)
        return result

    # ------------------------------------------------------------------
    # Row / column swapping
    # ------------------------------------------------------------------
    def transpose_(self) -> "Matrix":
        """Transpose in place. Square matrices only."""
        backend.transpose(self._data)
        return self

    def transpose(self) -> "Matrix":
        result = Matrix(self.n, self.m)
        backend.transpose_memcpy(result._data, self._data)
        return result

    def swap_rows(self, i: int, j: int) -> "Matrix":
        backend.swap_rows(self._data, operator.index(i), operator.index(j))
        return self

    def swap_columns(self, i: int, j: int) -> "Matrix":
        backend.swap_columns(self._data, operator.index(i), operator.index(j))
        return self

    def swap_rowcol(self, i: int, j: int) -> "Matrix":
        """Swap row `i` with column `j`. Square matrices only."""
        backend.swap_rowcol(self._data, operator.index(i), operator.index(j))
        return self

    def slide(self, i: int, j: int) -> "Matrix":
        """
        Shift every value by (i, j), filling the exposed cells with zero.

        i > 0 slides values down (adding i zero rows at the top), i < 0
        slides them up. j > 0 slides values right (zero columns on the
        left), j < 0 slides them left.
        """
        backend.slide(self._data, operator.index(i), operator.index(j))
        return self

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------
    def is_zero(self) -> bool:
        return backend.isnull(self._data)

    def is_positive(self) -> bool:
        """True if every element is strictly positive."""
        return backend.ispos(self._data)

    def is_negative(self) -> bool:
        """True if every element is strictly negative."""
        return backend.isneg(self._data)

    def is_nonnegative(self) -> bool:
        return backend.isnonneg(self._data)

    # ------------------------------------------------------------------
    # Minimum / maximum
    # ------------------------------------------------------------------
    def max(self) -> float:
        return backend.maximum(self._data)

    def min(self) -> float:
        return backend.minimum(self._data)

    def minmax(self) -> Tuple[float, float]:
        return backend.minmax(self._data)

    def min_index(self) -> Tuple[int, int]:
        return backend.min_index(self._data)

    def max_index(self) -> Tuple[int, int]:
        return backend.max_index(self._data)

    def minmax_index(self) -> Tuple[int, int, int, int]:
        """(i_min, j_min, i_max, j_max)"""
        return backend.minmax_index(self._data)

    # ------------------------------------------------------------------
    # High-order methods, row-major order
    # ------------------------------------------------------------------
    def each(self, fn: Callable[[float], object]) -> None:
        backend.each(self._data, fn)

    def each_with_index(self, fn: Callable[[float, int, int], object]) -> None:
        backend.each_with_index(self._data, fn)

    def each_row(self, fn: Callable[["MatrixView"], object]) -> None:
        """Call `fn` with a 1 x n view of every row, top to bottom."""
        for i in range(self.m):
            fn(self._row_alias(i))

    def each_column(self, fn: Callable[["MatrixView"], object]) -> None:
        for j in range(self.n):
            fn(self._column_alias(j))

    def each_vec_row(self, fn: Callable[[VectorView], object]) -> None:
        for i in range(self.m):
            fn(self._row_vec_alias(i))

    def each_vec_column(self, fn: Callable[[VectorView], object]) -> None:
        for j in range(self.n):
            fn(self._column_vec_alias(j))

    def map_(self, fn: Callable[[float], float]) -> "Matrix":
        backend.map_inplace(self._data, fn)
        return self

    def map_index_(self, fn: Callable[[int, int], float]) -> "Matrix":
        backend.map_index_inplace(self._data, fn)
        return self

    def map_with_index_(self, fn: Callable[[float, int, int], float]) -> "Matrix":
        backend.map_with_index_inplace(self._data, fn)
        return self

    def map(self, fn: Callable[[float], float]) -> "Matrix":
        return self.copy().map_(fn)

    def map_array(self, fn: Callable[[float], object]) -> List:
        return backend.map_to_list(self._data, fn)

    def __iter__(self):
        return iter(self._data.ravel().tolist())

    # ------------------------------------------------------------------
    # Equality
    # ------------------------------------------------------------------
    def __eq__(self, other) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        if self.shape != other.shape:
            return False
        return bool(np.array_equal(self._data, other._data))

    def __hash__(self) -> int:
        return hash((self.shape, tuple(self._data.ravel().tolist())))

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------
    def join(self, sep: str = DEFAULT_SEPARATOR) -> str:
        """
        >>> Matrix.from_array([[1, 2], [2, 3]]).join()
        '1.0 2.0 2.0 3.0'
        """
        return sep.join(str(x) for x in self)

    def to_list(self) -> List[List[float]]:
        return self._data.tolist()

    def to_numpy(self) -> np.ndarray:
        return self._data.copy()

    def __array__(self, dtype=None, copy=None):
        return np.array(self._data, dtype=dtype)

    def __str__(self) -> str:
        rows = [" ".join(str(x) for x in row) for row in self.to_list()]
        return "[" + ";\n ".join(rows) + "]"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.to_list()})"


class MatrixView(Matrix):
    """
    A window onto a block of another object's storage.

    Created by `Matrix.view`, `row_view` and `column_view`. The view keeps
    its `owner` alive, and reads and writes go straight to the owner's
    memory. `copy()` / `to_matrix()` give an independent Matrix. A view
    cannot be viewed again.
    """

    def __init__(self, owner, data: np.ndarray):
        self._owner = owner
        self._data = data

    @property
    def owner(self):
        return self._owner

    @property
    def is_view(self) -> bool:
        return True

    @property
    def _root(self):
        return self._owner

    def _check_viewable(self) -> None:
        raise UnsupportedOperation("Can't create a View from a View")

    def to_matrix(self) -> Matrix:
        return self.copy()

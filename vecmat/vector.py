# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Fixed-length vectors of float64 values, and views onto them.

In-place operations end in an underscore (`add_`, `map_`, `wrap_`) and
return `self`; their pure counterparts return a new owning `Vector`.
"""

import logging
import operator
from typing import Callable, List, Optional, Tuple

import numpy as np

from . import backend
from .coercion import Operand, OperandKind, expand_scalar, operand_kind
from .exceptions import (
    CoercionError,
    DimensionMismatch,
    InvalidArgument,
    UnsupportedOperation,
)
from .utils import DEFAULT_SEPARATOR, DTYPE, as_scalar, check_size

logger = logging.getLogger(__name__)


def _owning(data: np.ndarray) -> "Vector":
    # adopt a freshly allocated 1-D buffer, no copy
    vector = Vector.__new__(Vector)
    vector._data = data
    return vector


class Vector(Operand):
    """
    A fixed-length vector of doubles.

    Parameters
    ----------
    n : int
        Number of elements (>= 0). The length never changes afterwards.
    zero : bool
        Zero-fill the storage. Otherwise the contents are unspecified
        until written.
    init : callable(i) -> float, optional
        Called for every index in ascending order; its return value is
        stored at that index (see `map_index_`).

    Example
    -------
    >>> v = Vector(3, init=lambda i: i * i)
    >>> v.to_list()
    [0.0, 1.0, 4.0]
    """

    kind = OperandKind.VECTOR

    def __init__(
        self,
        n: int,
        zero: bool = False,
        init: Optional[Callable[[int], float]] = None,
    ):
        self._data = backend.alloc(check_size(n, "n"), zero)
        if init is not None:
            self.map_index_(init)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------
    @classmethod
    def zero(cls, n: int) -> "Vector":
        return Vector(n, zero=True)

    @classmethod
    def from_array(cls, array) -> "Vector":
        """Copy any 1-D array-like (list, range, ndarray, Vector) into a Vector."""
        try:
            if not isinstance(array, Operand) and not hasattr(array, "__len__"):
                array = list(array)
            data = np.array(array, dtype=DTYPE)
        except (TypeError, ValueError) as e:
            raise InvalidArgument(
                f"cannot convert {type(array).__name__} to a Vector: {e}"
            ) from e
        if data.ndim != 1:
            raise DimensionMismatch(
                f"expected a 1-D source, got shape {data.shape}",
                expected=(data.size,),
                actual=data.shape,
            )
        return _owning(data)

    @classmethod
    def linspace(cls, start: float, stop: float, n: int) -> "Vector":
        """`n` evenly spaced values from `start` to `stop`, both included."""
        return _owning(np.linspace(start, stop, check_size(n, "n"), dtype=DTYPE))

    def blank(self) -> "Vector":
        """A new, uninitialized Vector of the same length."""
        return Vector(self.size)

    def copy(self) -> "Vector":
        """An owning copy, independent of this object's storage."""
        return _owning(self._data.copy())

    def __copy__(self) -> "Vector":
        return self.copy()

    def copy_from(self, other) -> "Vector":
        """Overwrite every element with the values of `other` (in place)."""
        x, _ = self.coerce(other)
        backend.memcpy(self._data, x._data)
        return self

    # ------------------------------------------------------------------
    # Shape and ownership
    # ------------------------------------------------------------------
    @property
    def size(self) -> int:
        return self._data.shape[0]

    @property
    def shape(self) -> Tuple[int]:
        return (self.size,)

    @property
    def stride(self) -> int:
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

    def __len__(self) -> int:
        return self.size

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------
    def get(self, i: int) -> float:
        return backend.get(self._data, operator.index(i))

    def set(self, i: int, value: float) -> "Vector":
        backend.set(self._data, operator.index(i), as_scalar(value))
        return self

    __getitem__ = get

    def __setitem__(self, i: int, value: float) -> None:
        self.set(i, value)

    def fill_(self, value: float) -> "Vector":
        backend.set_all(self._data, as_scalar(value))
        return self

    def zero_(self) -> "Vector":
        backend.set_zero(self._data)
        return self

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    def view(
        self, offset: int = 0, size: Optional[int] = None, stride: int = 1
    ) -> "VectorView":
        """
        A `VectorView` over `size` elements starting at `offset`, taking
        every `stride`-th element. `size` defaults to as many as fit.

        Writing through the view writes this Vector.
        """
        self._check_viewable()
        return self._alias(offset, size, stride)

    subvector_view = view

    def subvector(self, *args) -> "Vector":
        """Shorthand for `view(...).to_vector()`."""
        return self._alias(*args).copy()

    def _check_viewable(self) -> None:
        pass

    def _alias(
        self, offset: int = 0, size: Optional[int] = None, stride: int = 1
    ) -> "VectorView":
        if size is None:
            size = len(range(offset, self.size, max(stride, 1)))
        logger.debug(
            "view offset=%d size=%d stride=%d over %d elements",
            offset, size, stride, self.size,
        )
        return VectorView(self._root, backend.subvector(self._data, offset, size, stride))

    def _as_row_matrix(self):
        from .matrix import MatrixView

        return MatrixView(self._root, backend.vector_as_row(self._data))

    def _as_column_matrix(self):
        from .matrix import MatrixView

        return MatrixView(self._root, backend.vector_as_column(self._data))

    def to_matrix(self):
        """A 1 x n row `Matrix` holding a copy of the elements."""
        return self._as_row_matrix().copy()

    def transpose(self):
        """An n x 1 column `Matrix` holding a copy of the elements."""
        return self._as_column_matrix().copy()

    # ------------------------------------------------------------------
    # Coercion and operators
    # ------------------------------------------------------------------
    def coerce(self, other) -> Tuple["Vector", "Vector"]:
        """
        Return `(expanded_other, self)` with `expanded_other` a Vector.

        A scalar becomes a Vector filled with it; a 1 x k or k x 1 Matrix
        becomes a view of its only row or column.
        """
        kind = operand_kind(other, self)
        if kind is OperandKind.SCALAR:
            return expand_scalar(other, self), self
        if kind is OperandKind.MATRIX:
            return other._vector_alias(), self
        return other, self

    def _ewise_(self, other, vector_op, scalar_op) -> "Vector":
        if operand_kind(other, self) is OperandKind.SCALAR:
            scalar_op(self._data, float(other))
        else:
            x, _ = self.coerce(other)
            vector_op(self._data, x._data)
        return self

    def add_(self, other) -> "Vector":
        return self._ewise_(other, backend.add, backend.add_constant)

    def sub_(self, other) -> "Vector":
        return self._ewise_(
            other, backend.sub, lambda buf, x: backend.add_constant(buf, -x)
        )

    def mul_(self, other) -> "Vector":
        return self._ewise_(other, backend.mul_elements, backend.scale)

    def div_(self, other) -> "Vector":
        return self._ewise_(other, backend.div_elements, backend.div_constant)

    subtract_ = sub_
    multiply_ = mul_
    divide_ = div_

    __iadd__ = add_
    __isub__ = sub_
    __imul__ = mul_
    __itruediv__ = div_

    # A Matrix operand switches to the Matrix path: self becomes a
    # 1 x n (or n x 1) Matrix view and the result is a Matrix.
    def __add__(self, other):
        if operand_kind(other, self) is OperandKind.MATRIX:
            x, y = other.coerce(self)
            return x + y
        return self.copy().add_(other)

    def __sub__(self, other):
        if operand_kind(other, self) is OperandKind.MATRIX:
            x, y = other.coerce(self)
            return x - y
        return self.copy().sub_(other)

    def __mul__(self, other):
        if operand_kind(other, self) is OperandKind.MATRIX:
            return self._as_row_matrix() * other
        return self.copy().mul_(other)

    def __truediv__(self, other):
        if operand_kind(other, self) is OperandKind.MATRIX:
            x, y = other.coerce(self)
            return x / y
        return self.copy().div_(other)

    def __radd__(self, other) -> "Vector":
        x, y = self.coerce(other)
        return x + y

    def __rsub__(self, other) -> "Vector":
        x, y = self.coerce(other)
        return x - y

    def __rmul__(self, other) -> "Vector":
        x, y = self.coerce(other)
        return x * y

    def __rtruediv__(self, other) -> "Vector":
        x, y = self.coerce(other)
        return x / y

    def __neg__(self) -> "Vector":
        result = self.copy()
        backend.scale(result._data, -1.0)
        return result

    def __matmul__(self, other):
        """`v @ w` is the dot product, `v @ M` the row-vector product."""
        kind = operand_kind(other, self)
        if kind is OperandKind.MATRIX:
            return self._as_row_matrix() * other
        if kind is OperandKind.SCALAR:
            raise CoercionError(self, other)
        return self.dot(other)

    def dot(self, other) -> float:
        if operand_kind(other, self) is OperandKind.SCALAR:
            raise CoercionError(self, other)
        x, _ = self.coerce(other)
        return backend.dot(self._data, x._data)

    def norm(self) -> float:
        """Euclidean norm."""
        return backend.nrm2(self._data)

    def sum(self) -> float:
        return backend.total(self._data)

    def asum(self) -> float:
        """Sum of absolute values."""
        return backend.asum(self._data)

    def _compare(self, other, op: str) -> "Vector":
        x, _ = self.coerce(other)
        return _owning(backend.compare(self._data, x._data, op))

    def __lt__(self, other) -> "Vector":
        return self._compare(other, "<")

    def __gt__(self, other) -> "Vector":
        return self._compare(other, ">")

    def __le__(self, other) -> "Vector":
        return self._compare(other, "<=")

    def __ge__(self, other) -> "Vector":
        return self._compare(other, ">=")

    def __eq__(self, other) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return self.size == other.size and bool(np.array_equal(self._data, other._data))

    def __hash__(self) -> int:
        return hash((self.size, tuple(self._data.tolist())))

    # ------------------------------------------------------------------
    # Minimum / maximum and order statistics
    # ------------------------------------------------------------------
    def min(self) -> float:
        return backend.minimum(self._data)

    def max(self) -> float:
        return backend.maximum(self._data)

    def minmax(self) -> Tuple[float, float]:
        return backend.minmax(self._data)

    def min_index(self) -> int:
        return backend.min_index(self._data)[0]

    def max_index(self) -> int:
        return backend.max_index(self._data)[0]

    def minmax_index(self) -> Tuple[int, int]:
        i_min, i_max = backend.minmax_index(self._data)
        return i_min, i_max

    def sort_(self) -> "Vector":
        backend.sort(self._data)
        return self

    def sort(self) -> "Vector":
        return self.copy().sort_()

    def median(self) -> float:
        n = self.size
        if n == 0:
            raise InvalidArgument("median of an empty vector is undefined")
        s = self.sort()._data
        half = n // 2
        if n % 2:
            return float(s[half])
        return (float(s[half - 1]) + float(s[half])) / 2.0

    def quantile(self, q: float) -> float:
        """
        The `q`-quantile, 0 <= q <= 1, interpolating linearly between the
        order statistics of a sorted copy (same rule as
        gsl_stats_quantile_from_sorted_data).
        """
        q = as_scalar(q)
        if not 0.0 <= q <= 1.0:
            raise InvalidArgument(f"quantile must lie in [0, 1], got {q}")
        n = self.size
        if n == 0:
            raise InvalidArgument("quantile of an empty vector is undefined")
        s = self.sort()._data
        index = (n - 1) * q
        lhs = int(index)
        delta = index - lhs
        if lhs == n - 1:
            return float(s[lhs])
        return float((1.0 - delta) * s[lhs] + delta * s[lhs + 1])

    # ------------------------------------------------------------------
    # Rearranging
    # ------------------------------------------------------------------
    def wrap_(self, k: int) -> "Vector":
        """Rotate in place: element i moves to (i + k) mod n."""
        backend.rotate(self._data, operator.index(k))
        return self

    def wrap(self, k: int) -> "Vector":
        return self.copy().wrap_(k)

    def swap(self, i: int, j: int) -> "Vector":
        backend.swap_elements(self._data, operator.index(i), operator.index(j))
        return self

    # ------------------------------------------------------------------
    # High-order methods
    # ------------------------------------------------------------------
    def each(self, fn: Callable[[float], object]) -> None:
        backend.each(self._data, fn)

    def each_with_index(self, fn: Callable[[float, int], object]) -> None:
        backend.each_with_index(self._data, fn)

    def map_(self, fn: Callable[[float], float]) -> "Vector":
        backend.map_inplace(self._data, fn)
        return self

    def map_index_(self, fn: Callable[[int], float]) -> "Vector":
        backend.map_index_inplace(self._data, fn)
        return self

    def map_with_index_(self, fn: Callable[[float, int], float]) -> "Vector":
        backend.map_with_index_inplace(self._data, fn)
        return self

    def map(self, fn: Callable[[float], float]) -> "Vector":
        return self.copy().map_(fn)

    def map_array(self, fn: Callable[[float], object]) -> List:
        """Like `map`, but collects the results in a plain list."""
        return backend.map_to_list(self._data, fn)

    def __iter__(self):
        return iter(self._data.tolist())

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------
    def to_list(self) -> List[float]:
        return self._data.tolist()

    def to_numpy(self) -> np.ndarray:
        return self._data.copy()

    def __array__(self, dtype=None, copy=None):
        return np.array(self._data, dtype=dtype)

    def join(self, sep: str = DEFAULT_SEPARATOR) -> str:
        return sep.join(str(x) for x in self)

    def __str__(self) -> str:
        return f"[{self.join()}]"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.to_list()})"


class VectorView(Vector):
    """
    A window onto another object's storage.

    Views are created through `Vector.view` or the `row_vecview` /
    `column_vecview` methods of `Matrix`, never directly. Reads and writes
    go straight to the owner's memory; `owner` keeps that object alive for
    as long as the view exists.

    Pure operators and `copy()` return ordinary owning Vectors. A view
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

    def to_vector(self) -> Vector:
        return self.copy()

# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Exception hierarchy for vecmat.

Every error raised by the package derives from `VecMatError`, so callers
can catch library errors in one place. Each subclass also derives from the
closest builtin (IndexError, ValueError, TypeError) so generic handlers
keep working.

Messages name the offending indices, shapes or types.
"""

from typing import Optional, Tuple


class VecMatError(Exception):
    """Base exception for all vecmat errors."""


class IndexOutOfRange(VecMatError, IndexError):
    """
    Element, row or column index outside its valid range.

    Attributes:
        index: The index that was rejected
        bound: The exclusive upper bound it was checked against
    """

    def __init__(
        self,
        message: str,
        index: Optional[int] = None,
        bound: Optional[int] = None,
    ):
        super().__init__(message)
        self.index = index
        self.bound = bound


class DimensionMismatch(VecMatError, ValueError):
    """
    Operand shapes are incompatible for an operator, product or view.

    Attributes:
        expected: Shape (or length) the operation required
        actual: Shape (or length) it received
    """

    def __init__(
        self,
        message: str,
        expected: Optional[Tuple[int, ...]] = None,
        actual: Optional[Tuple[int, ...]] = None,
    ):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class InvalidOperation(VecMatError):
    """The operation is undefined for the object's current shape or kind."""


class UnsupportedOperation(InvalidOperation):
    """The operation is structurally disallowed, e.g. viewing a view."""


class InvalidArgument(VecMatError, ValueError):
    """A parameter lies outside its domain (quantile of 1.5, median of [])."""


class CoercionError(VecMatError, TypeError):
    """
    An operand type is not understood by the coercion protocol.

    Attributes:
        lhs_type: Type name of the left-hand operand
        rhs_type: Type name of the right-hand operand
    """

    def __init__(self, lhs: object, rhs: object):
        self.lhs_type = type(lhs).__name__
        self.rhs_type = type(rhs).__name__
        super().__init__(f"Can't coerce {self.rhs_type} into {self.lhs_type}")

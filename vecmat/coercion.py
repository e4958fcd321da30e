# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Operand coercion
================

Binary operators accept three kinds of right-hand operand: a real scalar,
a `Vector` or a `Matrix`. `operand_kind` maps a runtime object onto that
closed set; everything outside it is a `CoercionError`.

The shape work itself lives on the classes (`Vector.coerce`,
`Matrix.coerce`). Both return `(expanded_other, self)`, so a caller that
could not handle `other` directly continues with `expanded_other <op> self`.
"""

import logging
import numbers
from enum import Enum

from .exceptions import CoercionError

logger = logging.getLogger(__name__)


class OperandKind(Enum):
    SCALAR = "scalar"
    VECTOR = "vector"
    MATRIX = "matrix"


class Operand:
    """
    Common base of `Vector` and `Matrix`.

    Subclasses set `kind`. NumPy is told to stay out of binary operators
    (`__array_ufunc__ = None`) so `np.float64(2) * v` reaches `v.__rmul__`.
    """

    kind: OperandKind
    __array_ufunc__ = None


def operand_kind(obj, lhs=None) -> OperandKind:
    """Classify `obj`; `lhs` only feeds the error message."""
    if isinstance(obj, numbers.Real):
        return OperandKind.SCALAR
    if isinstance(obj, Operand):
        return obj.kind
    raise CoercionError(lhs, obj)


def expand_scalar(value, like):
    """A fresh operand shaped like `like` with every element set to `value`."""
    logger.debug("expanding scalar %r to %s", value, like.shape)
    return like.blank().fill_(float(value))

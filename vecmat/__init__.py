# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
vecmat
======

Dense float64 vectors and matrices with value semantics for whole-object
operators and aliasing views for rows, columns and blocks.

Public API
~~~~~~~~~~
- Containers
    - `Vector`, `Matrix`
- Views (share memory with their owner)
    - `VectorView`, `MatrixView`
- Storage engine
    - `backend` (GSL-style function table on NumPy buffers), `Transpose`
- Errors
    - `VecMatError`, `IndexOutOfRange`, `DimensionMismatch`,
      `InvalidOperation`, `UnsupportedOperation`, `InvalidArgument`,
      `CoercionError`

Example
-------
>>> from vecmat import Matrix
>>> A = Matrix.from_array([[1, 2], [3, 4]])
>>> (A * Matrix.from_array([[5, 6], [7, 8]])).to_list()
[[19.0, 22.0], [43.0, 50.0]]
>>> row = A.row_view(0)
>>> row[0, 1] = 9
>>> A[0, 1]
9.0
"""

from importlib.metadata import version as _pkg_version

from . import backend
from .backend import Transpose
from .coercion import OperandKind
from .exceptions import (
    CoercionError,
    DimensionMismatch,
    IndexOutOfRange,
    InvalidArgument,
    InvalidOperation,
    UnsupportedOperation,
    VecMatError,
)
from .matrix import ALL, Matrix, MatrixView
from .vector import Vector, VectorView

__all__ = [
    "Vector",
    "VectorView",
    "Matrix",
    "MatrixView",
    "ALL",
    "backend",
    "Transpose",
    "OperandKind",
    "VecMatError",
    "IndexOutOfRange",
    "DimensionMismatch",
    "InvalidOperation",
    "UnsupportedOperation",
    "InvalidArgument",
    "CoercionError",
]

# ---------------------------------------------------------------------
# Version string (helps “pip show vecmat”, Sphinx, etc.)
# ---------------------------------------------------------------------
try:  # installed via pip / build backend
    __version__ = _pkg_version(__name__)
except Exception:  # running from a checkout
    __version__ = "0.0.0.dev0"

# ---------------------------------------------------------------------
# Library logging stays silent unless the application configures it.
# ---------------------------------------------------------------------
import logging as _logging

_logging.getLogger(__name__).addHandler(_logging.NullHandler())

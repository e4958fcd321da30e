# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numbers
import operator

import numpy as np

from .exceptions import InvalidArgument

DTYPE = np.float64
DEFAULT_SEPARATOR: str = " "


def check_size(value, name: str) -> int:
    """Return `value` as a non-negative int, or raise."""
    size = operator.index(value)
    if size < 0:
        raise InvalidArgument(f"{name} must be non-negative, got {size}")
    return size


def as_scalar(value) -> float:
    """Convert a real number to a Python float; reject everything else."""
    if not isinstance(value, numbers.Real):
        raise TypeError(f"expected a real number, got {type(value).__name__}")
    return float(value)

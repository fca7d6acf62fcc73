# -*- coding: utf-8 -*-
"""Validation utilities for numeric input.

This module provides the finiteness checks shared by the projection kernel,
the transform adapter and the record store.
"""

import math
from numbers import Real

from latlong_lib.errors import InvalidArgumentError


def is_finite_number(value: object) -> bool:
    """Check if a value is a finite real number.

    Valid numbers:
    - ``int``, ``float`` or any other ``numbers.Real`` (``bool`` excluded)
    - Not NaN, not +/- infinity

    Args:
        value: Value to check

    Returns:
        True if valid, False otherwise
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)


def validate_finite(**values: object) -> None:
    """Validate that every keyword argument is a finite real number.

    Args:
        **values: Named values to validate, the name is used in the message

    Raises:
        InvalidArgumentError: If any value is not a finite real number
    """
    invalid = [name for name, value in values.items() if not is_finite_number(value)]
    if invalid:
        msg = f"All arguments must be finite numbers (invalid: {', '.join(invalid)})."
        raise InvalidArgumentError(msg)

from __future__ import annotations

import math
from numbers import Real
from typing import Any

U64_MAX = 2**64 - 1


def is_finite_number(value: Any) -> bool:
    # bool is an int subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)


def is_positive_dimension(value: Any) -> bool:
    return is_finite_number(value) and value > 0


def is_window_id(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return 0 <= value <= U64_MAX


def is_index(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return value >= 0


def validate_position(x: Any, y: Any) -> bool:
    return is_finite_number(x) and is_finite_number(y)


def validate_size(width: Any, height: Any) -> bool:
    return is_positive_dimension(width) and is_positive_dimension(height)


def validate_geometry(x: Any, y: Any, width: Any, height: Any) -> bool:
    return validate_position(x, y) and validate_size(width, height)

"""
PlainTalk Values

Values are plain Python objects: None (absent), bool, int, float, str, list
and dict. This module holds the few places where PlainTalk semantics differ
from Python's own: truthiness, display text, input coercion and equality.
"""

import math
from typing import Any

# Largest integer a double holds exactly
MAX_SAFE_INTEGER = 2 ** 53


def is_number(value: Any) -> bool:
    """int or float, but never bool"""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def normalize_number(value: Any) -> Any:
    """
    Keep numbers within double precision.

    Integers past MAX_SAFE_INTEGER become floats, and past float range they
    become signed infinity.
    """
    if isinstance(value, int) and not isinstance(value, bool) and abs(value) > MAX_SAFE_INTEGER:
        try:
            return float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    return value


def type_name(value: Any) -> str:
    """Name of a value's kind, for error messages"""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "text"
    if isinstance(value, list):
        return "list"
    if isinstance(value, dict):
        return "record"
    return type(value).__name__


def is_truthy(value: Any) -> bool:
    """None, false, 0, NaN and "" are false; everything else is true"""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if is_number(value):
        return value == value and value != 0
    if isinstance(value, str):
        return value != ""
    return True


def format_value(value: Any) -> str:
    """Display text for a value"""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, int) and abs(value) > MAX_SAFE_INTEGER:
        return format_value(normalize_number(value))
    if isinstance(value, list):
        return ",".join(format_value(item) for item in value)
    if isinstance(value, dict):
        items = ", ".join(f"{key}: {format_value(item)}" for key, item in value.items())
        return "{" + items + "}"
    return str(value)


def coerce_input(text: str) -> Any:
    """Answer text becomes a number when all of it reads as one"""
    stripped = text.strip()
    if not stripped or '_' in stripped:
        return text
    try:
        return normalize_number(int(stripped))
    except ValueError:
        pass
    try:
        number = float(stripped)
    except ValueError:
        return text
    if not math.isfinite(number):
        return text
    return number


def values_equal(left: Any, right: Any) -> bool:
    """Structural equality that never equates booleans with numbers"""
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return left == right


__all__ = [
    'MAX_SAFE_INTEGER',
    'is_number',
    'normalize_number',
    'type_name',
    'is_truthy',
    'format_value',
    'coerce_input',
    'values_equal',
]

"""JSON value model for jsonvet.

Schemas and instances are plain decoded Python values, exactly as produced by
``json.load``:

- ``None`` -> null
- ``bool`` -> boolean
- ``int`` / ``float`` -> integer / number
- ``str`` -> string
- ``list`` -> array
- ``dict`` -> object (insertion order preserved, keys are strings)

This module classifies such values and compares them with JSON semantics
(``True`` is not ``1``, ``1`` equals ``1.0``).
"""

import json
import math
from typing import Any, Iterable, Tuple

NULL = 'null'
BOOLEAN = 'boolean'
INTEGER = 'integer'
NUMBER = 'number'
STRING = 'string'
ARRAY = 'array'
OBJECT = 'object'

JSON_TYPES = (NULL, BOOLEAN, INTEGER, NUMBER, STRING, ARRAY, OBJECT)


def is_number(value: Any) -> bool:
    """Check whether a value is a JSON number (booleans are not numbers)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_integer(value: Any) -> bool:
    """Check whether a value is a JSON number with an integral value."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value) and value.is_integer()


def kind_of(value: Any) -> str:
    """Returns the JSON kind of a decoded value.

    Integral numbers report ``integer``, all other numbers ``number``.

    Raises:
        TypeError: If the value is not part of the JSON value model.
    """
    if value is None:
        return NULL
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, (int, float)):
        return INTEGER if is_integer(value) else NUMBER
    if isinstance(value, str):
        return STRING
    if isinstance(value, list):
        return ARRAY
    if isinstance(value, dict):
        return OBJECT
    raise TypeError(f"Value of type {type(value).__name__} is not a JSON value")


def matches_type(value: Any, json_type: str) -> bool:
    """Check whether a value belongs to a schema ``type`` name."""
    kind = kind_of(value)
    if json_type == NUMBER:
        return kind in (INTEGER, NUMBER)
    return kind == json_type


def json_equal(left: Any, right: Any) -> bool:
    """Compare two decoded values with JSON semantics."""
    left_kind = kind_of(left)
    right_kind = kind_of(right)
    if left_kind in (INTEGER, NUMBER) and right_kind in (INTEGER, NUMBER):
        return left == right
    if left_kind != right_kind:
        return False
    if left_kind == ARRAY:
        return len(left) == len(right) and all(json_equal(a, b) for a, b in zip(left, right))
    if left_kind == OBJECT:
        if left.keys() != right.keys():
            return False
        return all(json_equal(left[key], right[key]) for key in left)
    return left == right


def first_duplicate(values: Iterable[Any]) -> Tuple[int, int] | None:
    """Returns the indices of the first pair of JSON-equal items, if any."""
    seen: list = []
    for j, value in enumerate(values):
        for i, earlier in enumerate(seen):
            if json_equal(earlier, value):
                return i, j
        seen.append(value)
    return None


def to_json(value: Any) -> str:
    """Compact JSON text for a value, used in error messages."""
    return json.dumps(value, ensure_ascii=False, separators=(',', ':'))

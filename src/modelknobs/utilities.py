"""Small predicates and helpers shared by models, validators and collections."""

from __future__ import annotations

import base64
import copy
import inspect
import math
import uuid
from collections.abc import Iterable, Mapping
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any


def exists(value: Any) -> bool:
    """Test whether a value is present.

    ``None`` and NaN are absent. Falsy values such as ``False``, ``0`` and
    ``""`` are present.

    Args:
        value: Value to test

    Returns:
        True if the value exists
    """
    if value is None:
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    if isinstance(value, Decimal) and value.is_nan():
        return False
    return True


def is_object(value: Any) -> bool:
    """Test whether a value is a mapping."""
    return isinstance(value, Mapping)


def is_array(value: Any) -> bool:
    """Test whether a value is a list or tuple."""
    return isinstance(value, (list, tuple))


def is_function(value: Any) -> bool:
    """Test whether a value is a callable that is not a class.

    Classes are callable too, but a model type stored as a field value is data
    rather than a thunk.
    """
    return callable(value) and not inspect.isclass(value)


def flatten(values: Iterable[Any] | None) -> list[Any]:
    """Flatten one level of nested lists, dropping ``None`` entries.

    Example:
        ```python
        flatten([[1], [2, 3], 4, None])
        # [1, 2, 3, 4]
        ```
    """
    result: list[Any] = []
    for value in values or []:
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            result.extend(v for v in value if v is not None)
        else:
            result.append(value)
    return result


def clone(value: Any) -> Any:
    """Deep copy mappings and lists; return other values unchanged."""
    if isinstance(value, (Mapping, list)):
        return copy.deepcopy(value)
    return value


def to_text(value: Any) -> str:
    """Render a value as text for alias joins and error messages."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(to_text(v) for v in value)
    return str(value)


def matches_formats(value: Any, formats: Iterable[str], accept: tuple[type, ...] = ()) -> bool:
    """Check a value against a list of ``strptime`` formats.

    Args:
        value: String to parse, or an already-parsed temporal object
        formats: ``strptime`` format strings tried in order
        accept: Temporal types accepted without parsing

    Returns:
        True if the value is an accepted instance or parses with any format
    """
    if accept and isinstance(value, accept):
        return True
    if not isinstance(value, str):
        return False
    for fmt in formats:
        try:
            datetime.strptime(value, fmt)
        except ValueError:
            continue
        return True
    return False


def accepts_arguments(fn: Any, count: int) -> bool:
    """Check whether a callable can be called with ``count`` positional arguments.

    Callables without an inspectable signature are assumed to accept them.
    """
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return True
    try:
        signature.bind(*([None] * count))
    except TypeError:
        return False
    return True


def json_default(value: Any) -> Any:
    """``json.dumps`` fallback for common non-JSON scalar types."""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (Decimal, uuid.UUID)):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")

"""Stringification of mixed-type parameter maps."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping


def stringify(value: Any) -> str:
    """Render a single parameter value as a string.

    Strings pass through, booleans become ``true``/``false``, integral floats
    drop their fraction, sequences are comma-joined and anything else falls
    back to ``str()``.
    """
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return stringify(value.value)
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(stringify(item) for item in value)
    return str(value)


def parse_data(data: Mapping[str, Any] | None) -> dict[str, str] | None:
    """Stringify every value of ``data``; empty input yields ``None``."""
    if not data:
        return None
    return {str(key): stringify(value) for key, value in data.items()}

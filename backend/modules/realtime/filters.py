"""
Realtime filter strings.

Subscriptions may carry a filter of the form ``column=op.value``, e.g.
``user_id=eq.42`` or ``priority=gte.3``. A filter that cannot be parsed
never matches.
"""

import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)

_FILTER = re.compile(r"^\s*([^=\s]+)\s*=\s*(eq|neq|gt|gte|lt|lte|in)\.(.*)$")


def _as_text(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def filter_matches(filter_text: Optional[str], row: Optional[dict]) -> bool:
    """Check a realtime filter against the row carried by an event."""
    if not filter_text:
        return True
    match = _FILTER.match(filter_text)
    if match is None:
        logger.warning(f"[Realtime] Ignoring event for unparseable filter {filter_text!r}")
        return False

    column, op, expected = match.groups()
    actual = (row or {}).get(column)

    if op == "eq":
        return _as_text(actual) == expected
    if op == "neq":
        return _as_text(actual) != expected
    if op == "in":
        options = [v.strip() for v in expected.strip("()").split(",")]
        return _as_text(actual) in options

    left, right = _as_number(actual), _as_number(expected)
    if left is None or right is None:
        return False
    if op == "gt":
        return left > right
    if op == "gte":
        return left >= right
    if op == "lt":
        return left < right
    return left <= right

"""
Row filtering, ordering and pagination.

Rows are schema-less dicts, so every operator is a typed match that
fails closed: a comparison between mismatched types is simply "no match".
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from .models import FilterOperator, Row


@dataclass(frozen=True)
class Filter:
    """A single predicate attached to a query."""
    column: str
    operator: FilterOperator
    value: Any


@dataclass(frozen=True)
class OrderSpec:
    """One sort key. nulls_first=None means NULLs last ascending, first descending."""
    column: str
    desc: bool = False
    nulls_first: Optional[bool] = None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def values_equal(left: Any, right: Any) -> bool:
    """Type-aware equality: 1 == 1.0, but True != 1 and "1" != 1."""
    if _is_number(left) and _is_number(right):
        return left == right
    if type(left) is not type(right):
        return False
    return left == right


def _comparable(left: Any, right: Any) -> bool:
    return (_is_number(left) and _is_number(right)) or (
        isinstance(left, str) and isinstance(right, str)
    )


def like_pattern(pattern: str, ignore_case: bool = False) -> re.Pattern:
    """
    Compile a SQL LIKE pattern.

    ``%`` matches any run of characters. Every other character is literal
    and the pattern may match anywhere in the value.
    """
    parts = []
    for char in pattern:
        if char == "%":
            parts.append(".*")
        else:
            parts.append(re.escape(char))
    flags = re.DOTALL | (re.IGNORECASE if ignore_case else 0)
    return re.compile("".join(parts), flags)


def _contains(value: Any, expected: Any) -> bool:
    if isinstance(value, list):
        items = expected if isinstance(expected, list) else [expected]
        return all(any(values_equal(v, item) for v in value) for item in items)
    if isinstance(value, dict) and isinstance(expected, dict):
        return all(k in value and values_equal(value[k], v) for k, v in expected.items())
    if isinstance(value, str) and isinstance(expected, str):
        return expected in value
    return False


def matches(row: Row, flt: Filter) -> bool:
    """Evaluate one predicate against a row. Missing columns read as None."""
    value = row.get(flt.column)
    op = flt.operator
    expected = flt.value

    if op == FilterOperator.EQ:
        return values_equal(value, expected)
    if op == FilterOperator.NEQ:
        return not values_equal(value, expected)
    if op in (FilterOperator.GT, FilterOperator.GTE, FilterOperator.LT, FilterOperator.LTE):
        if not _comparable(value, expected):
            return False
        if op == FilterOperator.GT:
            return value > expected
        if op == FilterOperator.GTE:
            return value >= expected
        if op == FilterOperator.LT:
            return value < expected
        return value <= expected
    if op in (FilterOperator.LIKE, FilterOperator.ILIKE):
        if not isinstance(value, str) or not isinstance(expected, str):
            return False
        regex = like_pattern(expected, ignore_case=op == FilterOperator.ILIKE)
        return regex.search(value) is not None
    if op == FilterOperator.IN:
        return any(values_equal(value, candidate) for candidate in expected)
    if op == FilterOperator.IS:
        if expected == "null":
            expected = None
        return value is expected
    if op == FilterOperator.CONTAINS:
        return _contains(value, expected)
    return False


def apply_filters(rows: Iterable[Row], filters: list[Filter]) -> list[Row]:
    """Keep rows matching every filter (logical AND)."""
    return [row for row in rows if all(matches(row, f) for f in filters)]


def _sort_key(value: Any) -> tuple:
    if _is_number(value) or isinstance(value, bool):
        return (0, value)
    if isinstance(value, str):
        return (1, value)
    return (2, json.dumps(value, sort_keys=True, default=str))


def sort_rows(rows: list[Row], orders: list[OrderSpec]) -> list[Row]:
    """
    Stable multi-key sort.

    The first OrderSpec is the primary key. Equal keys keep insertion order.
    """
    result = list(rows)
    for order in reversed(orders):
        present = [r for r in result if r.get(order.column) is not None]
        missing = [r for r in result if r.get(order.column) is None]
        present.sort(key=lambda r: _sort_key(r[order.column]), reverse=order.desc)
        nulls_first = order.desc if order.nulls_first is None else order.nulls_first
        result = missing + present if nulls_first else present + missing
    return result


def paginate(
    rows: list[Row],
    limit: Optional[int] = None,
    range_: Optional[tuple[int, int]] = None,
) -> list[Row]:
    """Apply range (inclusive bounds) or, when no range is set, limit."""
    if range_ is not None:
        start, end = range_
        return rows[start:end + 1]
    if limit is not None:
        return rows[:limit]
    return rows


def parse_columns(columns: str) -> Optional[list[str]]:
    """
    Parse a select() column list.

    Returns:
        Column names to project, or None for whole rows ("*" or
        embedded resources such as "*, author(name)")
    """
    if not columns or "*" in columns or "(" in columns:
        return None
    names = [c.strip() for c in columns.split(",")]
    return [n for n in names if n]


def project(row: Row, columns: Optional[list[str]]) -> Row:
    if columns is None:
        return dict(row)
    return {c: row.get(c) for c in columns}

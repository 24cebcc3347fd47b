"""
Cell coercion: lenient conversion of spreadsheet/CSV cell values to typed
fields. Pure functions, ZERO I/O.

Spreadsheet cells arrive as str, int, float, datetime or None; CSV cells
always arrive as str. Every coercer accepts any of these and falls back to
an explicit default instead of raising, so a single malformed cell never
aborts parsing of a row.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%d-%m-%Y",
)


def coerce_str(value: Any) -> str:
    """Stripped text of a cell; "" for an empty cell.

    Integral floats (how spreadsheets hand back numeric ids) render without
    a trailing ".0".
    """
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def coerce_optional_str(value: Any) -> str | None:
    s = coerce_str(value)
    return s or None


def coerce_date(value: Any, default: date | None) -> date | None:
    """Parse a date cell, returning ``default`` when it cannot be read."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    s = coerce_str(value)
    if not s:
        return default
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
    except ValueError:
        return default


def coerce_decimal(value: Any, default: Decimal) -> Decimal:
    """Parse a numeric cell as Decimal via its text form.

    Going through str() keeps binary float artifacts out of amounts
    (0.1 stays Decimal("0.1")). Thousands separators "," are removed.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value
    s = coerce_str(value).replace(",", "")
    if not s:
        return default
    try:
        result = Decimal(s)
    except (ValueError, InvalidOperation):
        return default
    if not result.is_finite():
        return default
    return result


def coerce_int(value: Any, default: int = 1) -> int:
    """Parse an integral cell; non-integral or unreadable values give ``default``."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    s = coerce_str(value)
    if not s:
        return default
    try:
        number = Decimal(s)
    except (ValueError, InvalidOperation):
        return default
    if not number.is_finite() or number != number.to_integral_value():
        return default
    return int(number)

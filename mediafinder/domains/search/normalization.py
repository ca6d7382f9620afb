"""
Result Normalization - Field parsers shared by every provider adapter.

Each parser returns None for missing or unparseable input so adapters
never have to pick a sentinel value.
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any

__all__ = [
    "build_result_id",
    "parse_rating",
    "parse_text",
    "parse_year",
]

_YEAR_PREFIX = re.compile(r"^(\d{4})\b")


def build_result_id(prefix: str, native_id: Any) -> str | None:
    """Build a '{prefix}-{native id}' identifier, or None without a native id."""
    if native_id is None or isinstance(native_id, bool):
        return None
    native = str(native_id).strip()
    if not native:
        return None
    return f"{prefix}-{native}"


def parse_text(value: Any) -> str | None:
    """Return a stripped string, or None for empty/non-string input."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def parse_year(value: Any) -> int | None:
    """
    Extract a calendar year from an int or a date-like string.

    Accepts 1999, "1999", "1999-03-31" and ISO datetimes such as
    "1999-03-31T00:00:00+00:00".
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if not isinstance(value, str):
        return None

    value = value.strip()
    if not value:
        return None

    try:
        return datetime.fromisoformat(value).year
    except ValueError:
        pass

    match = _YEAR_PREFIX.match(value)
    if match:
        year = int(match.group(1))
        return year if year > 0 else None
    return None


def parse_rating(value: Any) -> float | None:
    """Return a finite float rating, or None when absent."""
    if value is None or isinstance(value, bool):
        return None
    try:
        rating = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(rating) or math.isinf(rating):
        return None
    return rating

from __future__ import annotations

import re
from datetime import date
from typing import Any, Optional

_FLOAT_PREFIX = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_INT_PREFIX = re.compile(r"^\s*[+-]?\d+")
_WHITESPACE = re.compile(r"\s+")


def parse_float(value: Any) -> float:
    """Parse the leading number of ``value`` ("3.5g" -> 3.5), or 0 when there is none."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        return value
    match = _FLOAT_PREFIX.match(str(value))
    if not match:
        return 0
    return float(match.group(0))


def parse_int(value: Any) -> int:
    """Parse the leading integer of ``value`` ("8.5" -> 8), or 0 when there is none."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = _INT_PREFIX.match(str(value))
    if not match:
        return 0
    return int(match.group(0))


def convert_to_iso_date(value: Optional[str]) -> Optional[str]:
    """
    Convert a ``M/D/YY`` export date to ``YYYY-MM-DD``.

    Two-digit years are always placed in the 2000s.  Empty, absent or
    unparseable values give ``None``.
    """
    if not value or not isinstance(value, str):
        return None
    parts = [p.strip() for p in value.strip().split("/")]
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None
    month, day, year = parts
    if len(year) <= 2:
        year = f"20{year.zfill(2)}"
    try:
        return date(int(year), int(month), int(day)).isoformat()
    except ValueError:
        return None


def slugify_title(title: str) -> str:
    """Lower-case ``title`` and replace each run of whitespace with one hyphen."""
    return _WHITESPACE.sub("-", (title or "").lower())

"""Utility helpers."""

from datetime import datetime
import re
from typing import Optional

BIRTH_DATE_FMT = "%Y%m%d"

_DATE_PATTERNS = (
    re.compile(r"^(?P<y>\d{4})[-/.](?P<m>\d{1,2})[-/.](?P<d>\d{1,2})$"),
    # Day-first only with "." or "-"; "05/02/1990" is ambiguous and left alone.
    re.compile(r"^(?P<d>\d{1,2})([-.])(?P<m>\d{1,2})\2(?P<y>\d{4})$"),
    re.compile(r"^(?P<y>\d{4})(?P<m>\d{2})(?P<d>\d{2})$"),
)


def _parse_birth_date(value: str) -> Optional[datetime]:
    for pattern in _DATE_PATTERNS:
        match = pattern.match(value)
        if not match:
            continue
        try:
            return datetime(int(match["y"]), int(match["m"]), int(match["d"]))
        except ValueError:
            return None
    return None


def normalize_birth_date(value: Optional[str]) -> Optional[str]:
    """Return the 8-digit YYYYMMDD form the form expects, e.g. '1990-05-02' -> '19900502'.

    Values that do not look like a calendar date are returned untouched.
    """

    if not value:
        return value
    text = value.strip()
    parsed = _parse_birth_date(text)
    if not parsed:
        return text
    return parsed.strftime(BIRTH_DATE_FMT)


def media_type_essence(value: Optional[str]) -> str:
    """Strip parameters and casing from a Content-Type value."""

    if not value:
        return ""
    return value.split(";", 1)[0].strip().lower()

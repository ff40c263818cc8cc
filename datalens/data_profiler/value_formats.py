# -*- coding: utf-8 -*-
"""
Value format recognition for the data profiler.

Holds the compiled format regexes used for pattern detection and date
recognition, plus the per-value predicates that decide whether a raw cell
reads as a boolean, a finite number or a date. The predicates are shared by
type inference, column statistics and mismatch detection so that a value
counted as a number in one stage is a number in every stage.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, Dict, Optional

# ---------------------------------------------------------------------------
# Pattern Regexes
# ---------------------------------------------------------------------------

_RE_EMAIL = re.compile(
    r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$"
)
_RE_PHONE_INTL = re.compile(
    r"^\+?[1-9]\d{0,2}[\s\-.]?\(?\d{1,4}\)?[\s\-.]?\d{1,4}[\s\-.]?\d{1,9}$"
)
_RE_URL = re.compile(
    r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE
)
_RE_IPV4 = re.compile(
    r"^(?:(?:25[0-5]|2[0-4]\d|[01]?\d\d?)\.){3}(?:25[0-5]|2[0-4]\d|[01]?\d\d?)$"
)
_RE_UUID = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)
_RE_DATE_ISO = re.compile(
    r"^\d{4}-(?:0[1-9]|1[0-2])-(?:0[1-9]|[12]\d|3[01])$"
)
_RE_DATE_US = re.compile(
    r"^(?:0[1-9]|1[0-2])/(?:0[1-9]|[12]\d|3[01])/\d{4}$"
)
_RE_DATE_EU = re.compile(
    r"^(?:0[1-9]|[12]\d|3[01])/(?:0[1-9]|1[0-2])/\d{4}$"
)
_RE_DATE_ISO_SLASH = re.compile(
    r"^\d{4}/(?:0[1-9]|1[0-2])/(?:0[1-9]|[12]\d|3[01])$"
)
_RE_DATE_DOT = re.compile(
    r"^(?:0[1-9]|[12]\d|3[01])\.(?:0[1-9]|1[0-2])\.\d{4}$"
)
_RE_DATETIME_ISO = re.compile(
    r"^\d{4}-(?:0[1-9]|1[0-2])-(?:0[1-9]|[12]\d|3[01])"
    r"[T ]\d{2}:\d{2}(:\d{2})?(\.\d+)?(Z|[+\-]\d{2}:?\d{2})?$"
)
_RE_DATETIME_US = re.compile(
    r"^(?:0[1-9]|1[0-2])/(?:0[1-9]|[12]\d|3[01])/\d{4}"
    r"\s+\d{1,2}:\d{2}(:\d{2})?\s*(AM|PM|am|pm)?$"
)
_RE_CURRENCY = re.compile(
    r"^[\$€£¥]\s?[\d,]+\.?\d*$"
)
_RE_PERCENTAGE = re.compile(
    r"^-?\d+\.?\d*\s*%$"
)
_RE_HEX_COLOR = re.compile(
    r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$"
)
_RE_ZIP_US = re.compile(
    r"^\d{5}(-\d{4})?$"
)
_RE_COUNTRY_ISO2 = re.compile(
    r"^[A-Z]{2}$"
)

# Date formats in classification order. A value valid as both a US and an
# EU date ("01/02/2024") is classified as US.
DATE_FORMATS: Dict[str, re.Pattern[str]] = {
    "datetime_iso": _RE_DATETIME_ISO,
    "datetime_us": _RE_DATETIME_US,
    "date_iso": _RE_DATE_ISO,
    "date_iso_slash": _RE_DATE_ISO_SLASH,
    "date_us": _RE_DATE_US,
    "date_eu": _RE_DATE_EU,
    "date_dot": _RE_DATE_DOT,
}

# Non-date format signatures reported on ColumnProfile.patterns
FORMAT_PATTERNS: Dict[str, re.Pattern[str]] = {
    "email": _RE_EMAIL,
    "url": _RE_URL,
    "uuid": _RE_UUID,
    "ipv4": _RE_IPV4,
    "phone": _RE_PHONE_INTL,
    "currency": _RE_CURRENCY,
    "percentage": _RE_PERCENTAGE,
    "hex_color": _RE_HEX_COLOR,
    "zip_us": _RE_ZIP_US,
    "country_iso2": _RE_COUNTRY_ISO2,
}

_BOOLEAN_LITERALS = frozenset({"true", "false"})


# ---------------------------------------------------------------------------
# Value predicates
# ---------------------------------------------------------------------------


def parse_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None when it is not one.

    Booleans are never numbers. Strings are parsed with ``float()``;
    ``"nan"`` and ``"inf"`` parse but are rejected as non-finite.

    Args:
        value: Raw cell value.

    Returns:
        Finite float or None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def is_boolean_like(value: Any) -> bool:
    """True for Python bools and the strings ``true``/``false`` in any case."""
    if isinstance(value, bool):
        return True
    return isinstance(value, str) and value.strip().lower() in _BOOLEAN_LITERALS


def date_format_of(value: Any) -> Optional[str]:
    """Return the name of the first date format ``value`` matches.

    Args:
        value: Raw cell value.

    Returns:
        A key of ``DATE_FORMATS``, ``"native"`` for date/datetime objects,
        or None when the value is not date-like.
    """
    if isinstance(value, (date, datetime)):
        return "native"
    if not isinstance(value, str):
        return None
    s = value.strip()
    for name, regex in DATE_FORMATS.items():
        if regex.match(s):
            return name
    return None


def is_date_like(value: Any) -> bool:
    """True for date/datetime objects and strings in a recognised date format."""
    return date_format_of(value) is not None


def json_safe(value: Any) -> Any:
    """Return ``value`` in a form that survives a JSON round trip unchanged.

    Strings, booleans, integers and finite floats pass through. Dates become
    ISO-8601 strings; anything else becomes its ``str()``.
    """
    if isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return str(value)
        return value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


__all__ = [
    "DATE_FORMATS",
    "FORMAT_PATTERNS",
    "parse_number",
    "is_boolean_like",
    "date_format_of",
    "is_date_like",
    "json_safe",
]

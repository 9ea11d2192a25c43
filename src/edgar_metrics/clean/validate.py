"""Field-level validators for untrusted CSV values.

Every validator is total: it returns a coerced, in-bounds value or ``None``
and never raises. ``None`` is the only invalid sentinel, so callers must test
``is None`` rather than truthiness (``0`` and ``""`` are valid results).
"""
from __future__ import annotations

import datetime
import math
import re
from typing import Any
from urllib.parse import urlsplit

_UNSAFE_CHARS_RE = re.compile(r"[<>\"'&]")
_INTEGER_RE = re.compile(r"^[+-]?[0-9]+(?:\.[0-9]*)?$")
_DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


def validate_string(value: Any, max_length: int = 255) -> str | None:
    """Strip markup-significant characters, trim and truncate a string.

    Args:
        value: Raw cell value.
        max_length: Maximum length of the returned string.

    Returns:
        The cleaned string (possibly empty) or ``None`` if `value` is not a str.
    """
    if not isinstance(value, str):
        return None
    return _UNSAFE_CHARS_RE.sub("", value).strip()[:max_length]


def validate_number(
    value: Any,
    min_value: float = -math.inf,
    max_value: float = math.inf,
) -> float | None:
    """Coerce to a finite float within ``[min_value, max_value]``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        # float() also takes digit separators and non-ASCII digits
        if "_" in value or not value.isascii():
            return None
    try:
        num = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(num) or num < min_value or num > max_value:
        return None
    return num


def validate_integer(
    value: Any,
    min_value: float = -math.inf,
    max_value: float = math.inf,
) -> int | None:
    """Coerce to an int, truncating any fractional part, within bounds.

    Accepts ints, finite floats and decimal strings such as ``"42"`` or
    ``"42.9"``; anything else (including bools) is invalid.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        num = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            return None
        num = math.trunc(value)
    elif isinstance(value, str):
        text = value.strip()
        if not _INTEGER_RE.match(text):
            return None
        try:
            num = int(text.split(".", 1)[0])
        except ValueError:
            # over sys.get_int_max_str_digits()
            return None
    else:
        return None
    if num < min_value or num > max_value:
        return None
    return num


def validate_date(
    value: Any,
    min_year: int = 1900,
    max_year: int = 2030,
) -> datetime.date | None:
    """Parse an exact ``YYYY-MM-DD`` string into a real calendar date.

    Returns:
        The parsed `datetime.date`, or ``None`` when the format is wrong, the
        date does not exist (e.g. 2023-02-30) or the year is out of range.
    """
    if not isinstance(value, str) or not _DATE_RE.match(value):
        return None
    try:
        parsed = datetime.date.fromisoformat(value)
    except ValueError:
        return None
    if parsed.year < min_year or parsed.year > max_year:
        return None
    return parsed


def validate_url(value: Any, trusted_domain: str = "sec.gov") -> str | None:
    """Accept only absolute https URLs hosted on `trusted_domain`.

    The host must equal the domain or be a subdomain of it, so look-alikes
    such as ``evilsec.gov`` or ``sec.gov.example.com`` are rejected.
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        parts = urlsplit(value.strip())
        host = parts.hostname
    except ValueError:
        return None
    if parts.scheme != "https" or not host:
        return None
    domain = trusted_domain.lower().strip(".")
    if host != domain and not host.endswith("." + domain):
        return None
    return parts.geturl()

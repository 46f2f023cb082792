from __future__ import annotations

import re
from typing import Any, Optional

from .exceptions import InvalidNumericFormatError

__all__ = [
    "INT_RANGE",
    "LONG_RANGE",
    "parse_bool",
    "parse_int",
    "parse_long",
    "redact_for_log",
]

_DECIMAL = re.compile(r"[+-]?[0-9]+")

INT_RANGE = (-(2**31), 2**31 - 1)
LONG_RANGE = (-(2**63), 2**63 - 1)

_SECRET_MARKERS = ("secret", "password", "passwd", "token", "api_key", "apikey", "credential")


def parse_bool(raw: Optional[str]) -> bool:
    """Only a case-insensitive "true" is True; everything else, None included, is False."""
    return raw is not None and raw.lower() == "true"


def _parse_decimal(raw: str, kind: str, bounds: tuple, key: Optional[str]) -> int:
    if not isinstance(raw, str) or not _DECIMAL.fullmatch(raw):
        raise InvalidNumericFormatError(key, raw, kind)
    value = int(raw)
    lo, hi = bounds
    if not (lo <= value <= hi):
        raise InvalidNumericFormatError(key, raw, kind)
    return value


def parse_int(raw: str, key: Optional[str] = None) -> int:
    return _parse_decimal(raw, "int", INT_RANGE, key)


def parse_long(raw: str, key: Optional[str] = None) -> int:
    return _parse_decimal(raw, "long", LONG_RANGE, key)


def redact_for_log(name: str, value: Any) -> str:
    """
    Redact likely secrets in logs.
    """
    lowered = name.lower()
    if any(s in lowered for s in _SECRET_MARKERS):
        return "***"
    try:
        return repr(value)
    except Exception:
        return "<unreprable>"

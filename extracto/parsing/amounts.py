"""Locale-tolerant amount parsing for bank statement values.

Colombian statements mix ``35,997,363.00`` and ``1.234.567,89`` styles. A ``.``
or ``,`` followed by exactly three digits (then a non-digit or the end) is a
thousands separator; any comma left after that is the decimal mark.
"""

import re
from typing import NamedTuple

_NOT_NUMERIC = re.compile(r"[^\d\-,.]")
_THOUSANDS_DOT = re.compile(r"\.(?=\d{3}(?:\D|$))")
_THOUSANDS_COMMA = re.compile(r",(?=\d{3}(?:\D|$))")


class ParsedAmount(NamedTuple):
    """An amount plus whether it had to fall back to zero."""

    value: float
    degraded: bool


def parse_amount(raw: object) -> ParsedAmount:
    """Parse a locale-formatted amount, never raising.

    Non-string input and anything that does not convert to a number yield
    ``0.0`` with ``degraded`` set.
    """
    if not isinstance(raw, str):
        return ParsedAmount(0.0, degraded=True)
    clean = _NOT_NUMERIC.sub("", raw)
    normalized = _THOUSANDS_DOT.sub("", clean)
    normalized = _THOUSANDS_COMMA.sub("", normalized)
    normalized = normalized.replace(",", ".")
    try:
        return ParsedAmount(float(normalized), degraded=False)
    except ValueError:
        return ParsedAmount(0.0, degraded=True)


def money(raw: object) -> float:
    """Return the numeric value of ``raw``, or ``0.0`` when it cannot be parsed."""
    return parse_amount(raw).value

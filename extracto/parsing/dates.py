"""Date normalization to ISO ``yyyy-MM-dd``."""

import re
from datetime import datetime
from typing import NamedTuple

DEFAULT_PATTERN = "yyyy/MM/dd"

_TOKENS = {"yyyy": "%Y", "yy": "%y", "MM": "%m", "dd": "%d"}
_TOKEN_RE = re.compile("|".join(sorted(_TOKENS, key=len, reverse=True)))


class ParsedDate(NamedTuple):
    """An ISO date string plus whether it came from the slash-to-dash fallback."""

    value: str
    degraded: bool


def pattern_to_strptime(pattern: str) -> str:
    """Translate a ``yyyy/MM/dd`` style pattern into a ``strptime`` format."""
    return _TOKEN_RE.sub(lambda m: _TOKENS[m.group(0)], pattern)


def parse_date(raw: object, pattern: str = DEFAULT_PATTERN) -> ParsedDate:
    """Parse ``raw`` against ``pattern`` and reformat it as ``yyyy-MM-dd``.

    When parsing fails the input is returned with ``/`` replaced by ``-``. The
    result may not be ISO (``21/08/2025`` becomes ``21-08-2025``); ``degraded``
    tells the caller so.
    """
    text = "" if raw is None else str(raw).strip()
    try:
        parsed = datetime.strptime(text, pattern_to_strptime(pattern))
    except ValueError:
        return ParsedDate(text.replace("/", "-"), degraded=True)
    return ParsedDate(parsed.strftime("%Y-%m-%d"), degraded=False)


def to_iso(raw: object, pattern: str = DEFAULT_PATTERN) -> str:
    """Return ``raw`` as an ISO date, falling back to a slash-to-dash substitution."""
    return parse_date(raw, pattern).value

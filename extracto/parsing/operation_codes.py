"""Operation code heuristic for statement descriptions."""

import re

# Last run of 6+ digits with no digit anywhere after it.
_OPERATION_CODE = re.compile(r"(\d{6,})\b(?!.*\d)")


def guess_operation_code(description: str) -> str:
    """Return the rightmost long digit run in ``description``, or ``""``."""
    if not isinstance(description, str):
        return ""
    match = _OPERATION_CODE.search(description)
    return match.group(1) if match else ""

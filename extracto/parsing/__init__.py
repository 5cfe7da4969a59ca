"""Parsing package: total, never-raising parsers for statement fields."""

from .amounts import ParsedAmount, money, parse_amount  # noqa: F401
from .dates import ParsedDate, parse_date, to_iso  # noqa: F401
from .operation_codes import guess_operation_code  # noqa: F401

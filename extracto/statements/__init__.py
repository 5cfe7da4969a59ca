"""Statements package: parser base class, registry, and bank-specific parsers."""

from .bancolombia import BancolombiaPdfParser, extract_pdf_text, parse_statement_text  # noqa: F401
from .base import StatementParser  # noqa: F401
from .registry import ParserRegistry  # noqa: F401

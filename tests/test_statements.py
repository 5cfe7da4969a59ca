"""Tests for the Bancolombia statement parser."""

import pytest

from extracto.core.errors import StatementParseError
from extracto.statements import BancolombiaPdfParser, ParserRegistry, extract_pdf_text, parse_statement_text

STATEMENT_TEXT = """
Empresa: FERRETERIA EL TORNILLO SAS
NIT: 900123456
Número de Cuenta: 123-456789-01
2025/08/01   IMPTO GOBIERNO 4X1000      -5,548.00
2025/08/05 TRANSFERENCIA DESDE NEQUI
CLIENTE ANDRES    4455667788 350,000.00
Página 1 de 2
Fecha y Hora: 2025/09/01 08:00
2025/08/06 COMPRA VARIOS - 45,990.00
2025/08/07 LINEA SIN VALOR
"""


def test_parse_statement_text_joins_continuations_and_skips_headers() -> None:
    """Continuation lines join the previous movement; headers and footers are dropped."""
    rows = parse_statement_text(STATEMENT_TEXT)
    got = [(r.fecha, r.descripcion, r.valor) for r in rows]
    expected = [
        ("2025/08/01", "IMPTO GOBIERNO 4X1000", "-5,548.00"),
        ("2025/08/05", "TRANSFERENCIA DESDE NEQUI CLIENTE ANDRES 4455667788", "350,000.00"),
        ("2025/08/06", "COMPRA VARIOS", "- 45,990.00"),
    ]
    if got != expected:
        msg = f"Unexpected rows: {got}"
        raise AssertionError(msg)


def test_parse_statement_text_handles_empty_text() -> None:
    """No text means no rows."""
    if parse_statement_text("") != []:
        msg = "Expected no rows from empty text"
        raise AssertionError(msg)


def test_pdf_parser_extracts_movements(statement_pdf: bytes) -> None:
    """The registered PDF parser reads every movement of a generated statement."""
    parser = ParserRegistry.get("bancolombia_pdf")()
    rows = parser.parse(statement_pdf)
    if [r.valor for r in rows] != ["-5,548.00", "-1,387,000.00", "350,000.00", "-45,990.00"]:
        msg = f"Unexpected amounts: {[r.valor for r in rows]}"
        raise AssertionError(msg)
    if not isinstance(parser, BancolombiaPdfParser):
        msg = f"Expected a BancolombiaPdfParser, got {type(parser)}"
        raise AssertionError(msg)


def test_extract_pdf_text_rejects_garbage() -> None:
    """Bytes that are not a PDF surface as a single StatementParseError."""
    with pytest.raises(StatementParseError):
        extract_pdf_text(b"this is not a pdf")

"""Bancolombia PDF statement parser.

Text is pulled from every page with pdfplumber. Each movement starts on a line
beginning with a ``yyyy/MM/dd`` date; lines that do not start with a date are
continuations of the previous movement's description. The amount is the last
number on the joined line.
"""

import io
import re

import pdfplumber

from extracto.core.errors import StatementParseError
from extracto.core.models import TransactionRow
from extracto.core.utils import get_logger
from extracto.statements.base import StatementParser
from extracto.statements.registry import ParserRegistry

logger = get_logger("extracto.statements.bancolombia")

DATE_RE = re.compile(r"^\d{4}/\d{2}/\d{2}\b")
ROW_RE = re.compile(r"^(?P<fecha>\d{4}/\d{2}/\d{2})\s+(?P<desc>.+?)\s+(?P<valor>-?\s?\d[\d,.]*)$")
PAGE_FOOTER_RE = re.compile(r"^Página\s+\d+\s+de", re.IGNORECASE)
HEADER_RE = re.compile(r"^Empresa:|^NIT:|^Saldo|^Número de Cuenta:|^Fecha y Hora", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")
_MULTI_SPACE = re.compile(r"\s{2,}")


def extract_pdf_text(data: bytes) -> str:
    """Return the text of every page of a PDF, one page after another."""
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            return "\n".join(page.extract_text() or "" for page in pdf.pages)
    except Exception as exc:
        logger.exception("Error during PDF text extraction")
        msg = "No se pudo extraer el texto del PDF. Asegúrate de que no esté protegido por contraseña o dañado."
        raise StatementParseError(msg) from exc


def _join_movement_lines(text: str) -> list[str]:
    lines = [_WHITESPACE.sub(" ", line).strip() for line in (text or "").split("\n")]
    rows: list[str] = []
    for line in lines:
        # Footers and page headers would otherwise be glued onto the last movement.
        if not line or PAGE_FOOTER_RE.match(line) or HEADER_RE.match(line):
            continue
        if DATE_RE.match(line):
            rows.append(line)
        elif rows:
            rows[-1] += f" {line}"
    return rows


def parse_statement_text(text: str) -> list[TransactionRow]:
    """Turn the extracted text of a Bancolombia statement into raw rows."""
    out: list[TransactionRow] = []
    for raw in _join_movement_lines(text):
        match = ROW_RE.match(raw)
        if not match:
            logger.debug(f"Skipping unrecognized line: {raw}")
            continue
        out.append(
            TransactionRow(
                fecha=match.group("fecha"),
                descripcion=_MULTI_SPACE.sub(" ", match.group("desc")).strip(),
                valor=match.group("valor"),
            )
        )
    return out


@ParserRegistry.register
class BancolombiaPdfParser(StatementParser):
    """Parser for Bancolombia account statements exported as PDF."""

    source = "bancolombia_pdf"
    date_pattern = "yyyy/MM/dd"

    def parse(self, data: bytes) -> list[TransactionRow]:
        """Extract raw rows from the PDF bytes."""
        text = extract_pdf_text(data)
        rows = parse_statement_text(text)
        logger.info(f"Extracted {len(rows)} movements from Bancolombia statement")
        return rows

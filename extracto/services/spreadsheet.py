"""XLSX rendering of normalized movements.

The emitter only builds bytes; storing or streaming them is up to the caller.
"""

import io
from collections.abc import Iterable
from datetime import date

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from extracto.core.errors import SpreadsheetError
from extracto.core.models import NormalizedRow
from extracto.core.utils import get_logger

logger = get_logger("extracto.spreadsheet")

SHEET_TITLE = "Movimientos"
MONEY_FORMAT = "#,##0.00;[Red](#,##0.00)"
DATE_FORMAT = "yyyy-mm-dd"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# (header, NormalizedRow attribute, width)
COLUMNS = [
    ("Fecha", "fecha", 12),
    ("Descripción", "descripcion", 60),
    ("Código Operación", "codigo_operacion", 18),
    ("Importe", "importe", 16),
    ("Saldo", "saldo", 16),
    ("Tipo Movimiento", "tipo_movimiento", 14),
    ("Fuente", "fuente", 18),
    ("Imputación", "imputacion", 24),
    ("Cuenta", "cuenta", 14),
]
MONEY_COLUMNS = {"importe", "saldo"}

HEADER_FONT = Font(bold=True, color="FFFFFFFF")
HEADER_FILL = PatternFill(fill_type="solid", start_color="FF007BFF", end_color="FF007BFF")
HEADER_ALIGNMENT = Alignment(horizontal="center", vertical="center")


def _cell_date(fecha: str) -> date | str:
    # Degraded dates are not ISO; keep them as text rather than guessing.
    try:
        return date.fromisoformat(fecha)
    except ValueError:
        return fecha


def _row_values(row: NormalizedRow) -> list:
    values = []
    for _, key, _ in COLUMNS:
        value = getattr(row, key)
        if key == "fecha":
            value = _cell_date(value)
        elif key == "tipo_movimiento":
            value = value.value
        values.append(value)
    return values


def build_workbook(rows: Iterable[NormalizedRow]) -> bytes:
    """Render rows as an XLSX document: one styled header row, then one row per movement."""
    try:
        wb = Workbook()
        ws = wb.active
        ws.title = SHEET_TITLE
        ws.append([header for header, _, _ in COLUMNS])

        count = 0
        for row in rows:
            ws.append(_row_values(row))
            count += 1

        for col_idx, (_, key, width) in enumerate(COLUMNS, start=1):
            letter = get_column_letter(col_idx)
            ws.column_dimensions[letter].width = width
            if key in MONEY_COLUMNS:
                for (cell,) in ws.iter_rows(min_row=2, min_col=col_idx, max_col=col_idx):
                    cell.number_format = MONEY_FORMAT
            elif key == "fecha":
                for (cell,) in ws.iter_rows(min_row=2, min_col=col_idx, max_col=col_idx):
                    if isinstance(cell.value, date):
                        cell.number_format = DATE_FORMAT

        for cell in ws[1]:
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.alignment = HEADER_ALIGNMENT
        ws.freeze_panes = "A2"

        output = io.BytesIO()
        wb.save(output)
    except Exception as exc:
        logger.exception("Failed to build spreadsheet")
        raise SpreadsheetError(f"No se pudo generar el archivo Excel: {exc}") from exc
    logger.info(f"Built spreadsheet with {count} movements")
    return output.getvalue()

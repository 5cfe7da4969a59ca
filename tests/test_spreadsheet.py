"""Tests for the XLSX emitter."""

import io
from datetime import datetime

import pytest
from openpyxl import load_workbook

from extracto.core.errors import SpreadsheetError
from extracto.core.models import MovementType, NormalizedRow
from extracto.services.spreadsheet import COLUMNS, MONEY_FORMAT, build_workbook


def _row(idx: int, fecha: str = "2025-08-21", importe: float = -1387.0) -> NormalizedRow:
    return NormalizedRow(
        fecha=fecha,
        descripcion=f"MOVIMIENTO {idx}",
        codigo_operacion="000123456789",
        importe=importe,
        saldo=None,
        tipo_movimiento=MovementType.DEBITO if importe < 0 else MovementType.CREDITO,
        fuente="bancolombia_pdf",
        imputacion="Por clasificar",
    )


def _sheet(data: bytes):  # noqa: ANN202
    return load_workbook(io.BytesIO(data)).active


def test_workbook_has_header_plus_one_row_per_movement() -> None:
    """N movements give N+1 rows, in input order."""
    rows = [_row(i) for i in range(5)]
    ws = _sheet(build_workbook(rows))
    if ws.max_row != len(rows) + 1:
        msg = f"Expected {len(rows) + 1} rows, got {ws.max_row}"
        raise AssertionError(msg)
    descriptions = [ws.cell(row=r, column=2).value for r in range(2, ws.max_row + 1)]
    if descriptions != [f"MOVIMIENTO {i}" for i in range(5)]:
        msg = f"Order not preserved: {descriptions}"
        raise AssertionError(msg)


def test_header_is_fixed_and_styled() -> None:
    """Headers follow the fixed column order and are bold on a filled background."""
    ws = _sheet(build_workbook([_row(0)]))
    headers = [cell.value for cell in ws[1]]
    if headers != [header for header, _, _ in COLUMNS]:
        msg = f"Unexpected headers: {headers}"
        raise AssertionError(msg)
    if headers[:8] != [
        "Fecha",
        "Descripción",
        "Código Operación",
        "Importe",
        "Saldo",
        "Tipo Movimiento",
        "Fuente",
        "Imputación",
    ]:
        msg = f"Unexpected leading headers: {headers[:8]}"
        raise AssertionError(msg)
    if not all(cell.font.bold for cell in ws[1]):
        msg = "Expected a bold header row"
        raise AssertionError(msg)
    if ws.freeze_panes != "A2":
        msg = f"Expected header row frozen, got {ws.freeze_panes}"
        raise AssertionError(msg)
    if ws.column_dimensions["B"].width != 60:
        msg = f"Expected description width 60, got {ws.column_dimensions['B'].width}"
        raise AssertionError(msg)


def test_dates_are_native_and_amounts_formatted() -> None:
    """ISO dates become date cells; amounts carry the money format."""
    ws = _sheet(build_workbook([_row(0)]))
    fecha = ws.cell(row=2, column=1).value
    if not isinstance(fecha, datetime) or fecha.date().isoformat() != "2025-08-21":
        msg = f"Expected a native date cell, got {fecha!r}"
        raise AssertionError(msg)
    importe = ws.cell(row=2, column=4)
    if importe.value != -1387 or importe.number_format != MONEY_FORMAT:
        msg = f"Unexpected amount cell: {importe.value!r} / {importe.number_format!r}"
        raise AssertionError(msg)
    if ws.cell(row=2, column=6).value != "DEBITO":
        msg = f"Expected DEBITO, got {ws.cell(row=2, column=6).value!r}"
        raise AssertionError(msg)


def test_degraded_dates_are_written_as_text() -> None:
    """Non-ISO fallback dates stay as text instead of being guessed."""
    ws = _sheet(build_workbook([_row(0, fecha="21-08-2025")]))
    if ws.cell(row=2, column=1).value != "21-08-2025":
        msg = f"Expected text date, got {ws.cell(row=2, column=1).value!r}"
        raise AssertionError(msg)


def test_empty_input_gives_header_only() -> None:
    """No movements still produce a valid workbook with the header."""
    ws = _sheet(build_workbook([]))
    if ws.max_row != 1:
        msg = f"Expected only the header row, got {ws.max_row}"
        raise AssertionError(msg)


def test_serialization_failure_is_a_single_error() -> None:
    """Characters Excel cannot store abort the whole workbook with SpreadsheetError."""
    bad = _row(0).model_copy(update={"descripcion": "PAGO\x00ROTO"})
    with pytest.raises(SpreadsheetError):
        build_workbook([bad])


def test_header_cells_are_centered() -> None:
    """Header cells are centered both ways."""
    ws = _sheet(build_workbook([_row(0)]))
    alignments = {(cell.alignment.horizontal, cell.alignment.vertical) for cell in ws[1]}
    if alignments != {("center", "center")}:
        msg = f"Unexpected header alignment: {alignments}"
        raise AssertionError(msg)

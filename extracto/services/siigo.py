"""Reader for Siigo accounting exports (XLSX ledger listings)."""

import io
import re

import pandas as pd

from extracto.core.errors import StatementParseError
from extracto.core.models import AsientoSiigo
from extracto.core.utils import get_logger

logger = get_logger("extracto.siigo")

REQUIRED_ANY = ("Fecha", "Descripción", "Débito", "Crédito")
_NOT_AMOUNT = re.compile(r"[^\d.\-]")


def _ledger_amount(value: object) -> float:
    """Plain ``1234.56`` style amounts as Siigo exports them; anything else is 0."""
    if value is None:
        return 0.0
    try:
        return float(_NOT_AMOUNT.sub("", str(value)))
    except ValueError:
        return 0.0


def _iso_date(value: object) -> str:
    if value is None:
        return ""
    stamp = pd.to_datetime(value, errors="coerce")
    if pd.isna(stamp):
        return ""
    return stamp.date().isoformat()


def _text(value: object) -> str:
    if value is None:
        return ""
    # Account and document numbers come back as floats when the column has gaps.
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def read_siigo_excel(data: bytes) -> list[AsientoSiigo]:
    """Read the first sheet of a Siigo export into ledger entries."""
    try:
        data_frame = pd.read_excel(io.BytesIO(data), sheet_name=0)
    except Exception as exc:
        logger.exception("Could not read Siigo export")
        raise StatementParseError(f"No se pudo leer el archivo de Siigo: {exc}") from exc

    data_frame = data_frame.astype(object).where(pd.notna(data_frame), None)
    records = data_frame.to_dict(orient="records")
    entries = []
    for record in records:
        if not any(record.get(col) for col in REQUIRED_ANY):
            continue
        entries.append(
            AsientoSiigo(
                fecha=_iso_date(record.get("Fecha")),
                descripcion=_text(record.get("Descripción")) or _text(record.get("Concepto")) or "N/A",
                debito=_ledger_amount(record.get("Débito")),
                credito=_ledger_amount(record.get("Crédito")),
                tercero=_text(record.get("Tercero")),
                cuenta=_text(record.get("Cuenta")),
                numero_doc=_text(record.get("Documento")),
            )
        )
    logger.info(f"Loaded {len(entries)} ledger entries from {len(records)} rows")
    return entries

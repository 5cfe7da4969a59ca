"""Normalization pipeline: raw statement rows to categorized movements.

Every row is handled on its own. A malformed amount or date degrades that row
(and is logged) but never aborts the batch.
"""

from collections.abc import Iterable

from extracto.categorization import RuleSet, categorize
from extracto.core.models import MovementType, MovimientoBanco, NormalizedRow, TransactionRow
from extracto.core.utils import get_logger
from extracto.parsing import guess_operation_code, parse_amount, parse_date
from extracto.parsing.dates import DEFAULT_PATTERN

logger = get_logger("extracto.normalizer")

_DEBIT_TAGS = frozenset({"D", "DB", "DEBIT", "DEBITO", "DÉBITO", "CARGO", "RETIRO"})
_CREDIT_TAGS = frozenset({"C", "CR", "CREDIT", "CREDITO", "CRÉDITO", "ABONO", "DEPOSITO"})


def movement_type(importe: float, explicit: str | None = None) -> MovementType:
    """Infer the movement type from an explicit source column, else from the sign."""
    tag = (explicit or "").strip().upper()
    if tag in _DEBIT_TAGS:
        return MovementType.DEBITO
    if tag in _CREDIT_TAGS:
        return MovementType.CREDITO
    return MovementType.DEBITO if importe < 0 else MovementType.CREDITO


def normalize_row(
    raw: TransactionRow,
    rules: RuleSet,
    fuente: str,
    date_pattern: str = DEFAULT_PATTERN,
) -> NormalizedRow:
    """Parse, tag and categorize a single raw row."""
    amount = parse_amount(raw.valor)
    fecha = parse_date(raw.fecha, date_pattern)
    saldo = parse_amount(raw.saldo).value if raw.saldo is not None else None
    descripcion = raw.descripcion.strip()
    imputacion = categorize(descripcion, rules)
    return NormalizedRow(
        fecha=fecha.value,
        descripcion=descripcion,
        codigo_operacion=guess_operation_code(descripcion),
        importe=amount.value,
        saldo=saldo,
        tipo_movimiento=movement_type(amount.value, raw.tipo),
        fuente=fuente,
        imputacion=imputacion.label,
        cuenta=imputacion.account_code,
        degradado=amount.degraded or fecha.degraded,
    )


def normalize_rows(
    rows: Iterable[TransactionRow],
    rules: RuleSet,
    fuente: str,
    date_pattern: str = DEFAULT_PATTERN,
) -> list[NormalizedRow]:
    """Normalize rows in input order, logging the ones that had to degrade."""
    out: list[NormalizedRow] = []
    for idx, raw in enumerate(rows):
        row = normalize_row(raw, rules, fuente, date_pattern)
        if row.degradado:
            logger.warning(f"[ROW {idx + 1}] Degraded parse: fecha={raw.fecha!r} valor={raw.valor!r}")
        out.append(row)
    logger.info(f"Normalized {len(out)} rows from {fuente}")
    return out


def to_movimientos(rows: Iterable[NormalizedRow], banco: str = "Bancolombia") -> list[MovimientoBanco]:
    """Project normalized rows onto the movement shape used by reconciliation."""
    return [
        MovimientoBanco(fecha=r.fecha, descripcion=r.descripcion, importe=r.importe, banco=banco, fuente="pdf")
        for r in rows
    ]

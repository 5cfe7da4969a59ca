"""Bank-to-ledger reconciliation.

Movements and ledger entries are paired in three passes of decreasing
strictness: same date and amount, same amount within a date window, and same
amount with a similar description. Each movement and each entry is used at
most once; earlier passes take precedence.
"""

import re
from collections import Counter
from collections.abc import Callable, Sequence
from datetime import date

from extracto.core.models import (
    AsientoSiigo,
    MovimientoBanco,
    ReconcileResult,
    ReconcileSummary,
    SideSummary,
)
from extracto.core.utils import get_logger

logger = get_logger("extracto.reconcile")

AMOUNT_TOLERANCE = 0.01
DEFAULT_DATE_WINDOW_DAYS = 3
DEFAULT_SIMILARITY_THRESHOLD = 0.85
_WHITESPACE = re.compile(r"\s+")


def _same_amount(mov: MovimientoBanco, entry: AsientoSiigo) -> bool:
    return abs(mov.importe - entry.importe) < AMOUNT_TOLERANCE


def _days_apart(a: str, b: str) -> int | None:
    try:
        return abs((date.fromisoformat(a) - date.fromisoformat(b)).days)
    except ValueError:
        return None


def _bigrams(text: str) -> Counter[str]:
    return Counter(text[i : i + 2] for i in range(len(text) - 1))


def description_similarity(a: str, b: str) -> float:
    """Dice coefficient over character bigrams, ignoring case and whitespace.

    Word order barely matters: "pago celsia agosto" and "celsia pago agosto"
    share most of their bigrams.
    """
    a = _WHITESPACE.sub("", a.lower())
    b = _WHITESPACE.sub("", b.lower())
    if a == b:
        return 1.0
    if len(a) < 2 or len(b) < 2:
        return 0.0
    shared = sum((_bigrams(a) & _bigrams(b)).values())
    return 2.0 * shared / (len(a) + len(b) - 2)


def _match_pass(
    movimientos: Sequence[MovimientoBanco],
    asientos: Sequence[AsientoSiigo],
    matched_mov: set[int],
    matched_asi: set[int],
    predicate: Callable[[MovimientoBanco, AsientoSiigo], bool],
) -> int:
    found = 0
    for i, mov in enumerate(movimientos):
        if i in matched_mov:
            continue
        for j, entry in enumerate(asientos):
            if j in matched_asi:
                continue
            if predicate(mov, entry):
                matched_mov.add(i)
                matched_asi.add(j)
                found += 1
                break
    return found


def reconcile(
    movimientos: Sequence[MovimientoBanco],
    asientos: Sequence[AsientoSiigo],
    date_window_days: int = DEFAULT_DATE_WINDOW_DAYS,
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> ReconcileResult:
    """Pair bank movements with ledger entries and report what is left over."""
    matched_mov: set[int] = set()
    matched_asi: set[int] = set()

    def exact(mov: MovimientoBanco, entry: AsientoSiigo) -> bool:
        return mov.fecha == entry.fecha and _same_amount(mov, entry)

    def in_window(mov: MovimientoBanco, entry: AsientoSiigo) -> bool:
        if not _same_amount(mov, entry):
            return False
        days = _days_apart(mov.fecha, entry.fecha)
        return days is not None and days <= date_window_days

    def similar(mov: MovimientoBanco, entry: AsientoSiigo) -> bool:
        return (
            _same_amount(mov, entry)
            and description_similarity(mov.descripcion, entry.descripcion) >= similarity_threshold
        )

    for name, predicate in (("exact", exact), ("window", in_window), ("similarity", similar)):
        found = _match_pass(movimientos, asientos, matched_mov, matched_asi, predicate)
        logger.info(f"Reconcile pass '{name}': {found} matches")

    matched_total = sum(abs(movimientos[i].importe) for i in matched_mov)
    summary = ReconcileSummary(
        movimientos=SideSummary(count=len(movimientos), total=sum(abs(m.importe) for m in movimientos)),
        asientos=SideSummary(
            count=len(asientos),
            total=sum(a.debito if a.debito > 0 else a.credito for a in asientos),
        ),
        matched=SideSummary(count=len(matched_mov), total=matched_total),
    )
    return ReconcileResult(
        summary=summary,
        unmatched_movimientos=[m for i, m in enumerate(movimientos) if i not in matched_mov],
        unmatched_asientos=[a for j, a in enumerate(asientos) if j not in matched_asi],
    )

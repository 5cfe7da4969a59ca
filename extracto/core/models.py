"""Pydantic models for the Extracto Normalizer.

This module defines the models that flow through the pipeline and the API: raw
statement rows, normalized movements, Siigo ledger entries, reconciliation
results and job tracking.
"""

from enum import StrEnum

from pydantic import BaseModel, Field


class MovementType(StrEnum):
    """Direction of a bank movement."""

    DEBITO = "DEBITO"
    CREDITO = "CREDITO"


class TransactionRow(BaseModel):
    """A raw statement row as extracted from the source.

    Amounts are expected as text; numbers or nulls are accepted and degrade to 0.
    """

    descripcion: str
    valor: str | int | float | None = None
    fecha: str = ""
    saldo: str | int | float | None = None
    tipo: str | None = None


class NormalizedRow(BaseModel):
    """A statement row after parsing and categorization."""

    fecha: str
    descripcion: str
    codigo_operacion: str = ""
    importe: float
    saldo: float | None = None
    tipo_movimiento: MovementType
    fuente: str
    imputacion: str = Field(min_length=1)
    cuenta: str | None = None
    degradado: bool = False


class MovimientoBanco(BaseModel):
    """A bank movement as used by reconciliation (>0 credit, <0 debit)."""

    fecha: str
    descripcion: str
    importe: float
    banco: str = "Bancolombia"
    fuente: str = "pdf"


class AsientoSiigo(BaseModel):
    """A ledger entry read from a Siigo accounting export."""

    fecha: str
    descripcion: str
    debito: float = 0.0
    credito: float = 0.0
    tercero: str = ""
    cuenta: str = ""
    numero_doc: str = ""
    fuente: str = "siigo"

    @property
    def importe(self) -> float:
        """Signed amount comparable with a bank movement."""
        return self.credito if self.credito > 0 else -self.debito


class SideSummary(BaseModel):
    """Count and absolute total for one side of a reconciliation."""

    count: int
    total: float


class ReconcileSummary(BaseModel):
    """Totals for movements, ledger entries and matched pairs."""

    movimientos: SideSummary
    asientos: SideSummary
    matched: SideSummary


class ReconcileResult(BaseModel):
    """Outcome of reconciling bank movements against ledger entries."""

    summary: ReconcileSummary
    unmatched_movimientos: list[MovimientoBanco]
    unmatched_asientos: list[AsientoSiigo]


class CategorizeRequest(BaseModel):
    """Descriptions to classify with the active rule set."""

    descripciones: list[str]


class Categorization(BaseModel):
    """Label and optional account code assigned to one description."""

    descripcion: str
    imputacion: str
    cuenta: str | None = None


class NormalizeRequest(BaseModel):
    """Raw rows to normalize, with the tag of the format they came from."""

    rows: list[TransactionRow]
    fuente: str = "manual"
    date_pattern: str | None = None


class RuleOut(BaseModel):
    """A categorization rule as exposed by the API."""

    pattern: str
    label: str
    account_code: str | None = None


class JobStatus(BaseModel):
    """Pydantic model representing the status of a conversion job."""

    status: str
    created_at: str
    completed_at: str | None = None
    error: str | None = None

"""Shared fixtures: an isolated jobs directory and database, plus statement builders."""

import io
import os
import tempfile
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

_WORKDIR = Path(tempfile.mkdtemp(prefix="extracto-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_WORKDIR / 'jobs.db'}"
os.environ["JOBS_DIR"] = str(_WORKDIR / "jobs")
os.environ["LOG_FILE"] = str(_WORKDIR / "jobs" / "extracto.log")
os.environ["STORAGE_BACKEND"] = "local"
os.environ.pop("RULES_FILE", None)

from fastapi.testclient import TestClient  # noqa: E402
from reportlab.lib.pagesizes import letter  # noqa: E402
from reportlab.pdfgen import canvas  # noqa: E402

from extracto.main import app  # noqa: E402

STATEMENT_LINES = [
    "Empresa: FERRETERIA EL TORNILLO SAS",
    "NIT: 900123456",
    "Saldo Anterior 12,500,000.00",
    "2025/08/01 IMPTO GOBIERNO 4X1000 -5,548.00",
    "2025/08/04 PAGO A NOMINA EMPLEADOS 000123456789 -1,387,000.00",
    "2025/08/05 TRANSFERENCIA DESDE NEQUI",
    "CLIENTE ANDRES 4455667788 350,000.00",
    "2025/08/06 COMPRA VARIOS -45,990.00",
]


def make_statement_pdf(lines: list[str]) -> bytes:
    """Render text lines into a one-page PDF, one line per row."""
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=letter)
    pdf.setFont("Helvetica", 9)
    y = 740
    for line in lines:
        pdf.drawString(40, y, line)
        y -= 14
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


@pytest.fixture
def statement_pdf() -> bytes:
    """A small Bancolombia-style statement PDF with four movements."""
    return make_statement_pdf(STATEMENT_LINES)


@pytest.fixture
def client() -> Iterator[TestClient]:
    """A TestClient with the app lifespan (logging, jobs table) running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def pdf_factory() -> Callable[[list[str]], bytes]:
    """Build statement PDFs from arbitrary lines."""
    return make_statement_pdf

"""API integration tests for the Extracto Normalizer."""

import inspect
import io
from collections.abc import Callable

from fastapi.testclient import TestClient
from openpyxl import load_workbook

from extracto.api.dependencies import get_rules
from extracto.categorization import CategorizationRule, RuleSet
from extracto.main import app
from extracto.services.spreadsheet import XLSX_MEDIA_TYPE

HTTP_200_OK = 200
HTTP_400_BAD_REQUEST = 400


def _expect_status(response: object, expected: int) -> None:
    if response.status_code != expected:
        msg = f"Expected status {expected}, got {response.status_code}: {response.text}"
        raise AssertionError(msg)


def test_health(client: TestClient) -> None:
    """Test the /health endpoint returns status ok."""
    response = client.get("/health")
    _expect_status(response, HTTP_200_OK)
    if response.json() != {"status": "ok"}:
        msg = f"Expected response {{'status': 'ok'}}, got {response.json()}"
        raise AssertionError(msg)


def test_scalar_docs(client: TestClient) -> None:
    """Test the /scalar endpoint returns the API reference page."""
    response = client.get("/scalar")
    _expect_status(response, HTTP_200_OK)
    if "openapi" not in response.text:
        msg = "Expected 'openapi' in response text"
        raise AssertionError(msg)


def test_convert_returns_workbook(client: TestClient, statement_pdf: bytes) -> None:
    """A statement PDF converts to an XLSX with one row per movement."""
    files = {"file": ("extracto_agosto.pdf", statement_pdf, "application/pdf")}
    response = client.post("/convert", files=files)
    _expect_status(response, HTTP_200_OK)
    if response.headers["content-type"] != XLSX_MEDIA_TYPE:
        msg = f"Unexpected content type: {response.headers['content-type']}"
        raise AssertionError(msg)
    if "extracto_agosto.xlsx" not in response.headers["content-disposition"]:
        msg = f"Unexpected filename: {response.headers['content-disposition']}"
        raise AssertionError(msg)
    ws = load_workbook(io.BytesIO(response.content)).active
    labels = [ws.cell(row=r, column=8).value for r in range(2, ws.max_row + 1)]
    if labels != ["Impuesto 4x1000", "Nómina", "Transferencias", "Por clasificar"]:
        msg = f"Unexpected imputaciones: {labels}"
        raise AssertionError(msg)


def test_convert_rejects_non_pdf(client: TestClient) -> None:
    """Only PDF uploads are accepted."""
    files = {"file": ("movimientos.csv", b"a,b\n1,2\n", "text/csv")}
    response = client.post("/convert", files=files)
    _expect_status(response, HTTP_400_BAD_REQUEST)


def test_convert_rejects_unknown_source(client: TestClient, statement_pdf: bytes) -> None:
    """Unregistered statement formats are a client error."""
    files = {"file": ("extracto.pdf", statement_pdf, "application/pdf")}
    response = client.post("/convert", files=files, params={"source": "davivienda_pdf"})
    _expect_status(response, HTTP_400_BAD_REQUEST)


def test_convert_reports_unreadable_pdf(client: TestClient) -> None:
    """A corrupt PDF is a single 400 error."""
    files = {"file": ("extracto.pdf", b"%PDF-1.4 broken", "application/pdf")}
    response = client.post("/convert", files=files)
    _expect_status(response, HTTP_400_BAD_REQUEST)


def test_convert_reports_statement_without_movements(client: TestClient, pdf_factory: Callable) -> None:
    """A readable PDF with no movement lines is rejected with a clear message."""
    files = {"file": ("extracto.pdf", pdf_factory(["Sin movimientos en el periodo"]), "application/pdf")}
    response = client.post("/convert", files=files)
    _expect_status(response, HTTP_400_BAD_REQUEST)
    if "No se encontraron movimientos" not in response.json()["detail"]:
        msg = f"Unexpected detail: {response.json()}"
        raise AssertionError(msg)


def test_normalize_endpoint(client: TestClient) -> None:
    """Raw JSON rows come back normalized; malformed ones degrade."""
    payload = {
        "fuente": "manual",
        "rows": [
            {"fecha": "2025/08/21", "descripcion": "Pago factura 000123456789", "valor": "-1,387.00"},
            {"fecha": "21/08/2025", "descripcion": "Compra varios", "valor": "???"},
        ],
    }
    response = client.post("/normalize", json=payload)
    _expect_status(response, HTTP_200_OK)
    first, second = response.json()
    if (first["fecha"], first["importe"], first["codigo_operacion"]) != ("2025-08-21", -1387.0, "000123456789"):
        msg = f"Unexpected first row: {first}"
        raise AssertionError(msg)
    if (second["importe"], second["imputacion"], second["degradado"]) != (0.0, "Por clasificar", True):
        msg = f"Unexpected second row: {second}"
        raise AssertionError(msg)


def test_normalize_endpoint_degrades_non_text_amounts(client: TestClient) -> None:
    """Numeric or null amounts degrade their own row instead of rejecting the batch."""
    payload = {
        "rows": [
            {"fecha": "2025/08/21", "descripcion": "ABONO", "valor": 1500, "saldo": 2500.5},
            {"fecha": "2025/08/22", "descripcion": "CARGO", "valor": None, "saldo": None},
            {"fecha": "2025/08/23", "descripcion": "PAGO NOMINA", "valor": "-1,000.00"},
        ],
    }
    response = client.post("/normalize", json=payload)
    _expect_status(response, HTTP_200_OK)
    got = [(row["importe"], row["degradado"]) for row in response.json()]
    if got != [(0.0, True), (0.0, True), (-1000.0, False)]:
        msg = f"Unexpected rows: {got}"
        raise AssertionError(msg)


def test_normalize_endpoint_accepts_date_pattern(client: TestClient) -> None:
    """A request-level date pattern overrides the configured one."""
    payload = {
        "date_pattern": "dd/MM/yyyy",
        "rows": [{"fecha": "21/08/2025", "descripcion": "ABONO", "valor": "10"}],
    }
    response = client.post("/normalize", json=payload)
    _expect_status(response, HTTP_200_OK)
    if response.json()[0]["fecha"] != "2025-08-21":
        msg = f"Unexpected fecha: {response.json()[0]['fecha']}"
        raise AssertionError(msg)


def test_categorize_endpoint(client: TestClient) -> None:
    """Descriptions are labelled with the default rules."""
    response = client.post("/categorize", json={"descripciones": ["PAGO NOMINA", "Compra varios"]})
    _expect_status(response, HTTP_200_OK)
    got = [(item["imputacion"], item["cuenta"]) for item in response.json()]
    if got != [("Nómina", "5105xx"), ("Por clasificar", None)]:
        msg = f"Unexpected categorization: {got}"
        raise AssertionError(msg)


def test_rules_endpoint_uses_injected_rule_set(client: TestClient) -> None:
    """Overriding the rule dependency changes what the API reports and applies."""
    custom = RuleSet([CategorizationRule("ARRIENDO", "Arrendamientos", "5120xx"), CategorizationRule(".*", "Otros")])
    app.dependency_overrides[get_rules] = lambda: custom
    try:
        rules = client.get("/rules").json()
        labels = client.post("/categorize", json={"descripciones": ["PAGO NOMINA"]}).json()
    finally:
        app.dependency_overrides.pop(get_rules, None)
    if [r["label"] for r in rules] != ["Arrendamientos", "Otros"]:
        msg = f"Unexpected rules: {rules}"
        raise AssertionError(msg)
    if labels[0]["imputacion"] != "Otros":
        msg = f"Expected custom fallback, got {labels}"
        raise AssertionError(msg)


def _siigo_export(entries: list[dict]) -> bytes:
    import pandas as pd

    buffer = io.BytesIO()
    pd.DataFrame(entries).to_excel(buffer, index=False)
    return buffer.getvalue()


def test_reconcile_endpoint(client: TestClient, statement_pdf: bytes, pdf_factory: Callable) -> None:
    """Movements from several statements are pooled and reconciled against one Siigo export."""
    september_pdf = pdf_factory(["2025/09/02 PAGO CELSIA ENERGIA AGOSTO -84,500.00"])
    ledger = _siigo_export(
        [
            {"Fecha": "2025-08-04", "Descripción": "Nómina agosto", "Débito": 1387000, "Crédito": 0},
            {"Fecha": "2025-08-07", "Descripción": "Recaudo Andres", "Débito": 0, "Crédito": 350000},
            {"Fecha": "2025-09-21", "Descripción": "Celsia energia pago agosto", "Débito": 84500, "Crédito": 0},
        ]
    )
    files = [
        ("statements", ("extracto_agosto.pdf", statement_pdf, "application/pdf")),
        ("statements", ("extracto_septiembre.pdf", september_pdf, "application/pdf")),
        ("ledger", ("siigo.xlsx", ledger, XLSX_MEDIA_TYPE)),
    ]
    response = client.post("/reconcile", files=files)
    _expect_status(response, HTTP_200_OK)
    summary = response.json()["summary"]
    if (summary["movimientos"]["count"], summary["asientos"]["count"], summary["matched"]["count"]) != (5, 3, 3):
        msg = f"Unexpected summary: {summary}"
        raise AssertionError(msg)


def test_reconcile_endpoint_rejects_non_pdf_statement(client: TestClient, statement_pdf: bytes) -> None:
    """Every statement in the batch must be a PDF."""
    files = [
        ("statements", ("extracto.pdf", statement_pdf, "application/pdf")),
        ("statements", ("movimientos.csv", b"a,b\n1,2\n", "text/csv")),
        ("ledger", ("siigo.xlsx", _siigo_export([{"Fecha": "2025-08-04", "Débito": 1, "Crédito": 0}]), XLSX_MEDIA_TYPE)),
    ]
    response = client.post("/reconcile", files=files)
    _expect_status(response, HTTP_400_BAD_REQUEST)


def test_pdf_handlers_run_in_threadpool() -> None:
    """PDF parsing endpoints are sync handlers so FastAPI keeps them off the event loop."""
    handlers = {route.path: route.endpoint for route in app.routes if route.path in {"/convert", "/reconcile"}}
    async_handlers = [path for path, endpoint in handlers.items() if inspect.iscoroutinefunction(endpoint)]
    if len(handlers) != 2 or async_handlers:
        msg = f"Expected sync /convert and /reconcile handlers, got async {async_handlers}"
        raise AssertionError(msg)

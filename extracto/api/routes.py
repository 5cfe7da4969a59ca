"""FastAPI endpoints for the Extracto Normalizer API.

This module defines the API routes for converting bank statements to XLSX
(synchronously or as background jobs), normalizing and categorizing raw rows,
reconciling a statement against a Siigo export, and health checks.
"""

import io

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, UploadFile
from fastapi.responses import JSONResponse, StreamingResponse

from extracto.api.dependencies import get_db_conn, get_file_service, get_rules
from extracto.categorization import RuleSet, categorize
from extracto.core.db import DBHelper
from extracto.core.errors import ExtractoError, SpreadsheetError
from extracto.core.models import (
    Categorization,
    CategorizeRequest,
    JobStatus,
    NormalizedRow,
    NormalizeRequest,
    ReconcileResult,
    RuleOut,
)
from extracto.core.settings import get_settings
from extracto.core.utils import get_logger
from extracto.services.file_service import FileService, save_upload
from extracto.services.normalizer import normalize_rows, to_movimientos
from extracto.services.reconcile import reconcile
from extracto.services.siigo import read_siigo_excel
from extracto.services.spreadsheet import XLSX_MEDIA_TYPE
from extracto.statements.registry import ParserRegistry
from extracto.workers.job_runner import convert_statement, run_job

router = APIRouter()
logger = get_logger("extracto.api")

DEFAULT_SOURCE = "bancolombia_pdf"


def _require_pdf(file: UploadFile) -> None:
    if not (file.filename or "").lower().endswith(".pdf"):
        logger.warning(f"Rejected file (not PDF): {file.filename}")
        raise HTTPException(400, "Se requiere un archivo PDF.")


def _require_source(source: str) -> None:
    if source not in ParserRegistry.available():
        raise HTTPException(400, f"Formato de extracto no soportado: {source}")


def _xlsx_response(data: bytes, filename: str) -> StreamingResponse:
    return StreamingResponse(
        io.BytesIO(data),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post(
    "/convert",
    response_class=StreamingResponse,
    summary="Convert a bank statement PDF to a categorized XLSX",
    description=(
        "Upload a bank statement PDF and receive the spreadsheet right away.\n\n"
        "**Request:**\n"
        "- Content-Type: multipart/form-data\n"
        "- Form field: `file` (PDF file)\n"
        "- Query: `source` (statement format, default `bancolombia_pdf`)\n\n"
        "**Response:**\n"
        "- 200 OK: the XLSX workbook as an attachment.\n"
        "- 400 Bad Request: not a PDF, unknown format, unreadable PDF, or no movements found.\n"
        "- 500 Internal Server Error: the workbook could not be generated."
    ),
    responses={
        200: {"description": "XLSX file download."},
        400: {
            "description": "Invalid statement.",
            "content": {"application/json": {"example": {"detail": "Se requiere un archivo PDF."}}},
        },
    },
)
def convert(
    file: UploadFile,
    source: str = DEFAULT_SOURCE,
    rules: RuleSet = Depends(get_rules),
) -> StreamingResponse:
    """Convert an uploaded statement into an XLSX download."""
    logger.info(f"Received convert request: filename={file.filename}, source={source}")
    _require_pdf(file)
    _require_source(source)
    data = file.file.read()
    try:
        workbook = convert_statement(data, source, rules)
    except SpreadsheetError as exc:
        raise HTTPException(500, str(exc)) from exc
    except ExtractoError as exc:
        raise HTTPException(400, str(exc)) from exc
    stem = (file.filename or "extracto").rsplit(".", 1)[0]
    return _xlsx_response(workbook, f"{stem}.xlsx")


@router.post(
    "/upload-statement",
    status_code=202,
    summary="Upload a bank statement PDF and start a conversion job",
    description=(
        "Stores the statement and converts it in the background. "
        "Returns a `job_id` to poll `/status/{job_id}` and fetch `/download/{job_id}`."
    ),
    responses={
        202: {
            "description": "Job accepted. Returns job_id.",
            "content": {"application/json": {"example": {"job_id": "123e4567-e89b-12d3-a456-426614174000"}}},
        },
        400: {"description": "Not a PDF or unknown statement format."},
    },
)
async def upload_statement(
    background_tasks: BackgroundTasks,
    file: UploadFile,
    source: str = DEFAULT_SOURCE,
    rules: RuleSet = Depends(get_rules),
    file_service: FileService = Depends(get_file_service),
    db: DBHelper = Depends(get_db_conn),
) -> JSONResponse:
    """Store an uploaded statement and schedule its conversion."""
    logger.info(f"Received upload request: filename={file.filename}")
    _require_pdf(file)
    _require_source(source)
    data = await file.read()
    job_id, in_key, out_key = save_upload(file_service, data)
    db.create_job(job_id, in_key, out_key)
    background_tasks.add_task(run_job, job_id, in_key, out_key, source, rules, file_service)
    logger.info(f"Background job started: job_id={job_id}")
    return JSONResponse({"job_id": job_id}, status_code=202)


@router.get(
    "/status/{job_id}",
    response_model=JobStatus,
    summary="Get conversion job status",
    responses={404: {"description": "Job not found."}},
)
async def get_status(job_id: str, db: DBHelper = Depends(get_db_conn)) -> dict:
    """Get the status of a job."""
    row = db.get_job_status(job_id)
    if not row:
        raise HTTPException(404, "Job not found")
    return row


@router.get(
    "/download/{job_id}",
    response_class=StreamingResponse,
    summary="Download the XLSX of a completed job",
    responses={404: {"description": "Job not found or not complete."}},
)
async def download(
    job_id: str,
    db: DBHelper = Depends(get_db_conn),
    file_service: FileService = Depends(get_file_service),
) -> StreamingResponse:
    """Download the workbook produced by a completed job."""
    out_key = db.get_job_output_path(job_id)
    if not out_key:
        raise HTTPException(404, "Job not found")
    if not file_service.file_exists(out_key):
        logger.warning(f"Output missing for completed job {job_id}: {out_key}")
        raise HTTPException(404, "Output file missing")
    return _xlsx_response(file_service.get_file(out_key), f"extracto_{job_id}.xlsx")


@router.post("/normalize", response_model=list[NormalizedRow], summary="Normalize and categorize raw rows")
async def normalize(payload: NormalizeRequest, rules: RuleSet = Depends(get_rules)) -> list[NormalizedRow]:
    """Normalize raw rows sent as JSON; bad amounts or dates degrade instead of failing."""
    pattern = payload.date_pattern or get_settings().date_pattern
    return normalize_rows(payload.rows, rules, fuente=payload.fuente, date_pattern=pattern)


@router.post("/categorize", response_model=list[Categorization], summary="Categorize descriptions")
async def categorize_descriptions(
    payload: CategorizeRequest, rules: RuleSet = Depends(get_rules)
) -> list[Categorization]:
    """Assign an imputación to each description with the active rule set."""
    out = []
    for descripcion in payload.descripciones:
        imputacion = categorize(descripcion, rules)
        out.append(
            Categorization(descripcion=descripcion, imputacion=imputacion.label, cuenta=imputacion.account_code)
        )
    return out


@router.get("/rules", response_model=list[RuleOut], summary="List the active categorization rules")
async def list_rules(rules: RuleSet = Depends(get_rules)) -> list[dict]:
    """Return the rules in evaluation order."""
    return rules.to_dicts()


@router.post(
    "/reconcile",
    response_model=ReconcileResult,
    summary="Reconcile bank statements against a Siigo export",
    description=(
        "Form fields: `statements` (one or more PDF files, repeated) and `ledger` (Siigo XLSX). "
        "Movements from all statements are pooled before matching."
    ),
)
def reconcile_statement(
    statements: list[UploadFile],
    ledger: UploadFile,
    source: str = DEFAULT_SOURCE,
    date_window_days: int | None = None,
    similarity_threshold: float | None = None,
    rules: RuleSet = Depends(get_rules),
) -> ReconcileResult:
    """Match the movements of one or more statement PDFs with the entries of a Siigo XLSX."""
    for statement in statements:
        _require_pdf(statement)
    _require_source(source)
    settings = get_settings()
    parser = ParserRegistry.get(source)()
    movimientos = []
    try:
        for statement in statements:
            raw_rows = parser.parse(statement.file.read())
            rows = normalize_rows(raw_rows, rules, fuente=parser.source, date_pattern=parser.date_pattern)
            logger.info(f"Reconcile: {len(rows)} movements from {statement.filename}")
            movimientos.extend(to_movimientos(rows))
        asientos = read_siigo_excel(ledger.file.read())
    except ExtractoError as exc:
        raise HTTPException(400, str(exc)) from exc
    return reconcile(
        movimientos,
        asientos,
        date_window_days=date_window_days if date_window_days is not None else settings.reconcile_date_window_days,
        similarity_threshold=(
            similarity_threshold if similarity_threshold is not None else settings.reconcile_similarity_threshold
        ),
    )


@router.get(
    "/health",
    summary="Health check",
    description="Simple health check endpoint. Returns status ok.",
    responses={200: {"description": "API is healthy.", "content": {"application/json": {"example": {"status": "ok"}}}}},
)
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}

"""Application factory for the Extracto Normalizer API.

This module builds the FastAPI application, configures logging, creates the
jobs table on startup, and exposes the Scalar API reference endpoint for
interactive OpenAPI documentation.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import HTMLResponse
from scalar_fastapi import get_scalar_api_reference
from sqlalchemy.exc import SQLAlchemyError

from extracto.api.routes import router
from extracto.core.db import init_db
from extracto.core.settings import get_settings
from extracto.core.utils import add_file_handler, ensure_dir, get_logger

logger = get_logger("extracto")


def setup_logging() -> None:
    """Configure logging to console and file, and ensure the jobs directory exists."""
    settings = get_settings()
    ensure_dir(settings.jobs_dir)
    add_file_handler(settings.log_file)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan event handler that creates the jobs table."""
    _ = app  # Silence unused argument warning
    setup_logging()
    try:
        init_db()
    except SQLAlchemyError:
        logger.exception("Failed to create jobs table")
        raise
    logger.info("Extracto Normalizer started")
    yield


app = FastAPI(
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    title="Extracto Normalizer API",
    description="""
    The Extracto Normalizer API turns Colombian bank statements into categorized spreadsheets.

    **Endpoints:**
    - `POST /convert`: Upload a statement PDF and download the XLSX.
    - `POST /upload-statement`: Upload a statement PDF and start a conversion job. Returns a `job_id`.
    - `GET /status/{{job_id}}`: Check the status of a conversion job.
    - `GET /download/{{job_id}}`: Download the XLSX for a completed job.
    - `POST /normalize`: Normalize and categorize raw rows sent as JSON.
    - `POST /categorize`: Categorize descriptions.
    - `GET /rules`: List the active categorization rules.
    - `POST /reconcile`: Reconcile a statement PDF against a Siigo export.
    - `GET /health`: Health check endpoint.
    - `GET /scalar`: Interactive Scalar OpenAPI documentation.
    """,
    version="1.0.0",
)
app.include_router(router)


@app.get("/scalar", include_in_schema=False)
async def scalar_docs() -> HTMLResponse:
    """Return Scalar API reference."""
    return get_scalar_api_reference(openapi_url=app.openapi_url, title=app.title)

"""Background job orchestration for statement-to-spreadsheet conversion."""

from extracto.categorization import RuleSet
from extracto.core.db import DBHelper, get_db
from extracto.core.errors import ExtractoError
from extracto.core.utils import get_logger
from extracto.services.file_service import FileService
from extracto.services.normalizer import normalize_rows
from extracto.services.spreadsheet import build_workbook
from extracto.statements.registry import ParserRegistry

logger = get_logger("extracto.worker")

NO_MOVEMENTS_MSG = (
    "No se encontraron movimientos válidos en el PDF. Asegúrate de que el formato sea el correcto."
)


def convert_statement(data: bytes, source: str, rules: RuleSet) -> bytes:
    """Parse, normalize and render one statement; raises ExtractoError on terminal failures."""
    parser = ParserRegistry.get(source)()
    raw_rows = parser.parse(data)
    if not raw_rows:
        raise ExtractoError(NO_MOVEMENTS_MSG)
    rows = normalize_rows(raw_rows, rules, fuente=parser.source, date_pattern=parser.date_pattern)
    return build_workbook(rows)


class JobRunner:
    """JobRunner executes conversion jobs against a file service and the jobs table."""

    def __init__(self, file_service: FileService, db: DBHelper | None = None) -> None:
        """Initialize JobRunner with storage and job bookkeeping."""
        self.file_service = file_service
        self.db = db or get_db()

    def run_job(self, job_id: str, input_key: str, output_key: str, source: str, rules: RuleSet) -> None:
        """Convert the stored statement and record the outcome on the job."""
        logger.info(f"Starting job: {job_id}, input: {input_key}, output: {output_key}")
        try:
            self.db.set_status(job_id, "in_progress")
            try:
                data = self.file_service.get_file(input_key)
                workbook = convert_statement(data, source, rules)
                self.file_service.save_file(output_key, workbook)
                logger.info(f"Stored workbook for job {job_id} at {output_key}")
                self.db.set_status(job_id, "completed")
            except Exception as exc:
                logger.exception(f"Error processing job {job_id}")
                self.db.set_status(job_id, "error", error=str(exc))
        finally:
            self.db.close()


def run_job(
    job_id: str,
    input_key: str,
    output_key: str,
    source: str,
    rules: RuleSet,
    file_service: FileService,
) -> None:
    """Top-level function to run a job using JobRunner (for background tasks)."""
    runner = JobRunner(file_service)
    runner.run_job(job_id, input_key, output_key, source, rules)

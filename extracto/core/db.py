"""DB connection and helpers for conversion job tracking."""

from functools import lru_cache
from pathlib import Path
from typing import Any

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from extracto.core.utils import ensure_dir, utcnow_iso

SQLITE_PREFIX = "sqlite:///"

metadata = MetaData()
jobs_table = Table(
    "jobs",
    metadata,
    Column("id", String, primary_key=True),
    Column("status", String, nullable=False),
    Column("created_at", String, nullable=False),
    Column("completed_at", String, nullable=True),
    Column("input_path", String, nullable=False),
    Column("output_path", String, nullable=False),
    Column("error", Text, nullable=True),
)


@lru_cache
def get_engine(url: str | None = None) -> Engine:
    """Create a SQLAlchemy engine using the configured database URL."""
    if url is None:
        from extracto.core.settings import get_settings

        url = get_settings().database_url
    connect_args = {}
    if url.startswith(SQLITE_PREFIX):
        ensure_dir(Path(url.removeprefix(SQLITE_PREFIX)).parent)
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args)


def init_db(engine: Engine | None = None) -> None:
    """Create the jobs table if it does not exist."""
    metadata.create_all(engine or get_engine(), tables=[jobs_table])


SessionLocal = sessionmaker(autocommit=False, autoflush=False)


def get_db() -> "DBHelper":
    """Get a DBHelper instance using a SQLAlchemy session."""
    session = SessionLocal(bind=get_engine())
    return DBHelper(session)


class DBHelper:
    """Helper class for job bookkeeping using SQLAlchemy Core statements."""

    def __init__(self, session: Session) -> None:
        """Initialize the DBHelper with a SQLAlchemy session."""
        self.session = session
        self.jobs_table = jobs_table

    def create_job(self, job_id: str, input_path: str, output_path: str) -> None:
        """Insert a new pending job."""
        stmt = insert(self.jobs_table).values(
            id=job_id,
            status="pending",
            created_at=utcnow_iso(),
            input_path=input_path,
            output_path=output_path,
        )
        self.session.execute(stmt)
        self.session.commit()

    def set_status(self, job_id: str, status: str, error: str | None = None) -> None:
        """Update a job's status; terminal statuses also stamp ``completed_at``."""
        values: dict[str, Any] = {"status": status}
        if status in ("completed", "error"):
            values["completed_at"] = utcnow_iso()
            values["error"] = error
        stmt = update(self.jobs_table).where(self.jobs_table.c.id == job_id).values(**values)
        self.session.execute(stmt)
        self.session.commit()

    def get_job_status(self, job_id: str) -> dict[str, Any] | None:
        """Retrieve the status and metadata for a job by its ID using SQLAlchemy."""
        stmt = select(
            self.jobs_table.c.status,
            self.jobs_table.c.created_at,
            self.jobs_table.c.completed_at,
            self.jobs_table.c.error,
        ).where(self.jobs_table.c.id == job_id)
        result = self.session.execute(stmt).first()
        if not result:
            return None
        return {
            "status": result.status,
            "created_at": result.created_at,
            "completed_at": result.completed_at,
            "error": result.error,
        }

    def get_job_output_path(self, job_id: str) -> str | None:
        """Retrieve the output file key for a completed job."""
        stmt = select(self.jobs_table.c.output_path).where(
            self.jobs_table.c.id == job_id,
            self.jobs_table.c.status == "completed",
        )
        result = self.session.execute(stmt).first()
        if not result:
            return None
        return result.output_path

    def close(self) -> None:
        """Close the SQLAlchemy session."""
        self.session.close()

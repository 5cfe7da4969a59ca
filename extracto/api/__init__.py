"""API package: provides FastAPI dependencies and route definitions for the application."""

from .dependencies import get_db_conn, get_file_service, get_rules  # noqa: F401
from .routes import router  # noqa: F401

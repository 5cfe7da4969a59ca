"""FastAPI dependencies for DI (settings, DB, storage, rule set).

Routes receive the active rule set and storage through these providers, so
tests and deployments can swap them with ``app.dependency_overrides``.
"""

from collections.abc import Iterator

from extracto.categorization import RuleSet, load_rules
from extracto.core.db import DBHelper, get_db
from extracto.core.settings import get_settings
from extracto.services.file_service import FileService, make_file_service


def get_rules() -> RuleSet:
    """Provide the configured rule set (default rules when no file is configured)."""
    return load_rules(get_settings().rules_file)


def get_file_service() -> FileService:
    """Provide the configured file service."""
    return make_file_service(get_settings())


def get_db_conn() -> Iterator[DBHelper]:
    """Provide a database helper, closing its session after the request."""
    db = get_db()
    try:
        yield db
    finally:
        db.close()

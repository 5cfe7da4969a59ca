"""Core package: provides models, errors, database helpers, settings, and shared utilities."""

from .db import get_db  # noqa: F401
from .errors import ExtractoError, RuleSetError, SpreadsheetError, StatementParseError  # noqa: F401
from .models import JobStatus, NormalizedRow, TransactionRow  # noqa: F401
from .settings import Settings  # noqa: F401
from .utils import get_logger  # noqa: F401

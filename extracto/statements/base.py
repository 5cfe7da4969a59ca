"""Base statement parser abstraction.

A statement parser turns the bytes of an uploaded bank statement into raw
transaction rows. Parsing amounts, dates and categories is not its job; the
normalization service does that for every source alike.
"""

from abc import ABC, abstractmethod
from typing import ClassVar

from extracto.core.models import TransactionRow


class StatementParser(ABC):
    """Abstract base class for all statement parsers."""

    source: ClassVar[str]
    date_pattern: ClassVar[str] = "yyyy/MM/dd"

    @abstractmethod
    def parse(self, data: bytes) -> list[TransactionRow]:
        """Extract raw rows from a statement file, in statement order."""

"""Parser registry for statement formats.

Statement parsers are registered under the ``fuente`` tag they stamp on their
rows, so routes and jobs can pick a parser by name.
"""

from typing import ClassVar

from extracto.statements.base import StatementParser


class ParserRegistry:
    """Registry for statement parser classes."""

    _registry: ClassVar[dict[str, type[StatementParser]]] = {}

    @classmethod
    def register(cls, parser_cls: type[StatementParser]) -> type[StatementParser]:
        """Register a parser class under its ``source`` tag; usable as a decorator."""
        cls._registry[parser_cls.source] = parser_cls
        return parser_cls

    @classmethod
    def get(cls, name: str) -> type[StatementParser]:
        """Retrieve a parser class by source tag."""
        return cls._registry[name]

    @classmethod
    def available(cls) -> list[str]:
        """List all registered source tags."""
        return list(cls._registry.keys())

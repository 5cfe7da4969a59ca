"""Categorization rules: ordered regex tests mapping descriptions to imputaciones.

A rule set is an immutable, ordered sequence. Order is significant: the engine
stops at the first match, so specific patterns must come before general ones
and the last rule must be a catch-all.
"""

import json
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from extracto.core.errors import RuleSetError

FALLBACK_LABEL = "Por clasificar"
# The last rule must match all of these to count as a catch-all.
_CATCH_ALL_SAMPLES = ("", "x", "PAGO A NOMINA 000123456789", "Compra varios -45,990.00")


@dataclass(frozen=True)
class CategorizationRule:
    """A case-insensitive regex with the label and optional account it assigns."""

    pattern: str
    label: str
    account_code: str | None = None
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.label:
            raise RuleSetError(f"Rule {self.pattern!r} has an empty label")
        try:
            compiled = re.compile(self.pattern, re.IGNORECASE)
        except re.error as exc:
            raise RuleSetError(f"Invalid rule pattern {self.pattern!r}: {exc}") from exc
        object.__setattr__(self, "regex", compiled)

    def matches(self, description: str) -> bool:
        """Return True if the pattern is found anywhere in ``description``."""
        return self.regex.search(description) is not None


class RuleSet:
    """An immutable ordered list of rules ending in a universal fallback."""

    def __init__(self, rules: Iterable[CategorizationRule]) -> None:
        """Freeze ``rules`` in order, requiring the last one to match any input."""
        self._rules = tuple(rules)
        if not self._rules:
            raise RuleSetError("A rule set needs at least the fallback rule")
        if not all(self._rules[-1].matches(sample) for sample in _CATCH_ALL_SAMPLES):
            msg = f"Last rule {self._rules[-1].pattern!r} is not a catch-all"
            raise RuleSetError(msg)

    def __iter__(self) -> Iterator[CategorizationRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __getitem__(self, index: int) -> CategorizationRule:
        return self._rules[index]

    def __repr__(self) -> str:
        return f"RuleSet({len(self._rules)} rules)"

    @classmethod
    def from_dicts(cls, items: Iterable[dict]) -> "RuleSet":
        """Build a rule set from ``{pattern, label, account_code}`` mappings."""
        rules = []
        for idx, item in enumerate(items):
            try:
                rules.append(
                    CategorizationRule(
                        pattern=item["pattern"],
                        label=item["label"],
                        account_code=item.get("account_code"),
                    )
                )
            except (KeyError, TypeError, AttributeError) as exc:
                raise RuleSetError(f"Rule #{idx + 1} is malformed: {item!r}") from exc
        return cls(rules)

    def to_dicts(self) -> list[dict]:
        """Return the rules as plain mappings, in evaluation order."""
        return [
            {"pattern": rule.pattern, "label": rule.label, "account_code": rule.account_code}
            for rule in self._rules
        ]


DEFAULT_RULES = RuleSet(
    [
        CategorizationRule(r"IMPTO\s+GOBIERNO\s+4X1000", "Impuesto 4x1000", "530535"),
        CategorizationRule(r"APORTES?\s+EN\s+LINEA", "Seguridad social", "2370xx"),
        CategorizationRule(r"PAGO\s+A\s+NOMIN|NOMINA", "Nómina", "5105xx"),
        CategorizationRule(r"ORGANIZACION\s+TERPEL|GASOLINA|COMBUSTIBLE", "Combustible", "5120xx"),
        CategorizationRule(r"CELSIA|ENERG|SERVICIOS\s+GENERALES", "Servicios públicos", "5135xx"),
        CategorizationRule(r"CUOTA\s+MANEJO|SOBREGIRO|COMISION", "Gastos bancarios", "5195xx"),
        CategorizationRule(r"INTERBANC|TRANSFERENCIA", "Transferencias", "1105↔1110"),
        CategorizationRule(r"PAGO\s+DE\s+PROV|A\s+PROV(?!E)", "Pago a proveedores", "2205↔2335"),
        # fallback
        CategorizationRule(r".*", FALLBACK_LABEL),
    ]
)


@lru_cache(maxsize=8)
def _read_rules_file(rules_path: Path, mtime_ns: int) -> RuleSet:
    try:
        items = json.loads(rules_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise RuleSetError(f"Could not read rules file {rules_path}: {exc}") from exc
    if not isinstance(items, list):
        raise RuleSetError(f"Rules file {rules_path} must contain a JSON list")
    return RuleSet.from_dicts(items)


def load_rules(path: str | Path | None) -> RuleSet:
    """Load a rule set from a JSON file, or return the default rules when ``path`` is None.

    Parsed files are cached per path and reloaded only when the file's
    modification time changes.
    """
    if path is None:
        return DEFAULT_RULES
    rules_path = Path(path).resolve()
    try:
        mtime_ns = rules_path.stat().st_mtime_ns
    except OSError as exc:
        raise RuleSetError(f"Could not read rules file {rules_path}: {exc}") from exc
    return _read_rules_file(rules_path, mtime_ns)

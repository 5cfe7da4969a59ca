"""Categorization package: ordered regex rules and the first-match engine."""

from .engine import Imputacion, categorize  # noqa: F401
from .rules import DEFAULT_RULES, FALLBACK_LABEL, CategorizationRule, RuleSet, load_rules  # noqa: F401

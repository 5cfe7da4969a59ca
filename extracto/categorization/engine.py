"""Categorization engine: first matching rule wins."""

from typing import NamedTuple

from extracto.categorization.rules import RuleSet


class Imputacion(NamedTuple):
    """Category label and optional account code assigned to a description."""

    label: str
    account_code: str | None


def categorize(description: str, rules: RuleSet) -> Imputacion:
    """Return the label and account of the first rule matching ``description``.

    Rules are tried strictly in list order. The rule set always ends in a
    catch-all, so every description gets a label.
    """
    text = description if isinstance(description, str) else ""
    for rule in rules:
        if rule.matches(text):
            return Imputacion(rule.label, rule.account_code)
    # RuleSet construction guarantees the last rule matches everything.
    fallback = rules[-1]
    return Imputacion(fallback.label, fallback.account_code)

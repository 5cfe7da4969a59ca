"""Exception hierarchy for the Extracto Normalizer.

Row-level problems never raise: amounts, dates and operation codes degrade to a
best-effort value. These exceptions cover the failures that halt a whole
statement, which callers report as a single terminal error.
"""


class ExtractoError(Exception):
    """Base class for all errors raised by the normalizer."""


class RuleSetError(ExtractoError):
    """A categorization rule set is malformed (bad regex, missing fallback)."""


class StatementParseError(ExtractoError):
    """A bank statement or accounting export could not be read."""


class SpreadsheetError(ExtractoError):
    """The spreadsheet emitter failed to serialize the workbook."""

"""
Exception hierarchy for the Transaction Analyzer.

DESIGN DECISION: Errors fall into three families:
1. ValidationError - the caller broke a precondition (None input, blank path)
2. NotFoundError - a referenced file does not exist
3. FormatError - a raw field does not match its grammar

Nothing in the package retries. Errors surface to the caller unchanged,
and the presentation layer decides how to show them.
"""

from typing import Optional


class TransactionAnalyzerError(Exception):
    """Base exception for all Transaction Analyzer errors."""
    pass


class ValidationError(TransactionAnalyzerError):
    """A precondition was violated (e.g. a None stream or blank path)."""
    pass


class NotFoundError(TransactionAnalyzerError):
    """A referenced file does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File not found: {path}")


class FormatError(TransactionAnalyzerError, ValueError):
    """
    A raw text field does not match its expected grammar.

    The message always names the offending literal. When raised by the
    reader, it also names the column and the (1-based) data row.
    """

    def __init__(
        self,
        message: str,
        value: Optional[str] = None,
        expected: Optional[str] = None,
        column: Optional[str] = None,
        row: Optional[int] = None,
    ):
        self.value = value
        self.expected = expected
        self.column = column
        self.row = row
        self.reason = message

        if column is not None and row is not None:
            message = f"{message} (column '{column}', row {row})"
        elif column is not None:
            message = f"{message} (column '{column}')"

        super().__init__(message)

    def at(self, column: str, row: int) -> "FormatError":
        """Return a copy of this error located at a column and row."""
        return type(self)(
            self.reason,
            value=self.value,
            expected=self.expected,
            column=column,
            row=row,
        )


class UnknownCurrencyError(FormatError):
    """A currency code is not one of the supported currencies."""

    @property
    def code(self) -> Optional[str]:
        return self.value

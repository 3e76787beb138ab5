"""Exception hierarchy for catalogkit.

All errors raised by the package derive from :class:`CatalogError`, so a
caller that only wants to know "did the catalog load" can catch that one
class. Query methods on a loaded catalog never raise.
"""

from __future__ import annotations

from pathlib import Path


class CatalogError(Exception):
    """Base exception for all catalog-related errors."""

    pass


class CatalogIOError(CatalogError):
    """Raised when a catalog file cannot be read or written."""

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = str(path)
        super().__init__(f"{message}: {self.path}")


class FormatError(CatalogError):
    """Raised when binary catalog data is malformed or unsupported."""

    pass


class POSyntaxError(CatalogError):
    """Raised when a PO text catalog violates the grammar."""

    def __init__(self, message: str, line_number: int) -> None:
        self.line_number = line_number
        super().__init__(f"{message} in line {line_number}")


class DuplicateKeyError(CatalogError):
    """Raised when two entries share the same context and message id."""

    def __init__(self, msgid: str, msgctxt: str | None = None) -> None:
        self.msgid = msgid
        self.msgctxt = msgctxt
        if msgctxt is None:
            super().__init__(f"Duplicate msgid: {msgid!r}")
        else:
            super().__init__(f"Duplicate msgid: {msgid!r} (context {msgctxt!r})")


class ExpressionError(CatalogError):
    """Raised for plural expressions outside the supported grammar."""

    def __init__(self, message: str, expression: str | None = None) -> None:
        self.expression = expression
        if expression is None:
            super().__init__(message)
        else:
            super().__init__(f"{message}: {expression!r}")

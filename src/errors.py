"""
Exception hierarchy for the price archive pipeline.

Every failure the ingest/export flows can surface derives from PriceArchiveError
and carries an HTTP-style status code, so the web layer can map errors to
responses without inspecting their types:

- ClientDataError (400): the uploaded archive or its rows are unusable.
- StoreError (500): the database refused or failed a read/write.
"""

from __future__ import annotations

from typing import Optional


class PriceArchiveError(Exception):
    """Base exception for all pipeline failures."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ClientDataError(PriceArchiveError):
    """Raised when the submitted data cannot be ingested."""

    status_code = 400


class EmptyInputError(ClientDataError):
    """Raised for a zero-length upload."""


class ArchiveCorruptError(ClientDataError):
    """Raised when the upload is not a readable ZIP archive."""


class PayloadNotFoundError(ClientDataError):
    """Raised when no CSV entry can be located inside the archive."""


class HeaderInvalidError(ClientDataError):
    """Raised when the CSV header is missing or has the wrong width."""


class RowError(ClientDataError):
    """
    Base for errors tied to a specific line of the CSV payload.

    Attributes
    ----------
    line_number : int
        1-based line number in the CSV payload (the header is line 1).
    field : str | None
        Name of the offending column, when the error concerns a single field.
    """

    def __init__(self, message: str, line_number: int, field: Optional[str] = None) -> None:
        super().__init__(f"line {line_number}: {message}")
        self.line_number = line_number
        self.field = field


class RowMalformedError(RowError):
    """Raised for a line with the wrong field count or broken quoting."""


class InvalidIdentifierError(RowError):
    """Raised when the id column is not a non-negative integer."""


class InvalidFieldError(RowError):
    """Raised when a required text column is blank."""


class InvalidPriceError(RowError):
    """Raised when the price column is not a non-negative decimal."""


class InvalidDateError(RowError):
    """Raised when the date column does not match YYYY-MM-DD."""


class StoreError(PriceArchiveError):
    """Raised for database failures."""

    status_code = 500


class InsertFailedError(StoreError):
    """Raised when the ingest transaction was rolled back."""


class ExportFailedError(StoreError):
    """Raised when reading the store for export failed."""


__all__ = [
    "PriceArchiveError",
    "ClientDataError",
    "EmptyInputError",
    "ArchiveCorruptError",
    "PayloadNotFoundError",
    "HeaderInvalidError",
    "RowError",
    "RowMalformedError",
    "InvalidIdentifierError",
    "InvalidFieldError",
    "InvalidPriceError",
    "InvalidDateError",
    "StoreError",
    "InsertFailedError",
    "ExportFailedError",
]

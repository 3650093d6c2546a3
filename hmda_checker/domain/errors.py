"""Exceptions raised across the validation pipeline."""
from __future__ import annotations

from .results import FormatError


class FilingError(Exception):
    """Base class for filing validation errors."""


class InvalidFileFormat(FilingError):
    """The byte stream is not a delimited HMDA filing at all."""

    def __init__(self, error: FormatError) -> None:
        super().__init__(f"{error.message}: {error.detail}" if error.detail else error.message)
        self.error = error


class InputTruncated(FilingError):
    """The line producer stopped before the end of the filing."""


class CatalogError(FilingError):
    """An edit catalog was authored inconsistently."""

"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from typing import Iterator, Protocol

from .models import InstitutionProfile


class FilingSource(Protocol):
    """Provides the raw lines of one filing.

    Each iteration starts again from the first line where the source allows it.
    A source whose producer was cancelled raises ``InputTruncated``.
    """

    def __iter__(self) -> Iterator[str | bytes]:
        ...


class InstitutionRepository(Protocol):
    """Provides registered institution profiles."""

    def find(self, respondent_id: str, activity_year: int | None = None) -> InstitutionProfile | None:
        ...

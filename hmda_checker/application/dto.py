"""Application-level DTOs for filing validation."""
from __future__ import annotations

from dataclasses import dataclass

from hmda_checker.domain.results import ReportStatus, ValidationReport


@dataclass(slots=True, frozen=True)
class SubmissionResponse:
    """Transport-facing view of a finished validation run."""

    status_code: int
    message: str
    status: ReportStatus
    detail: str = ""

    @classmethod
    def from_report(cls, report: ValidationReport) -> SubmissionResponse:
        if report.format_error is not None:
            return cls(400, report.format_error.message, report.status, report.format_error.detail)
        return cls(200, "uploaded", report.status)


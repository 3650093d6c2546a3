"""Domain-level results for filing validation."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Sequence, Union

from .models import LoanApplicationRegister, TransmittalSheet


class Category(Enum):
    """Edit categories in the order the engine evaluates them."""

    SYNTACTICAL = "syntactical"
    VALIDITY = "validity"
    QUALITY = "quality"
    MACRO = "macro"

    @property
    def stage(self) -> int:
        return _STAGE_ORDER[self]


_STAGE_ORDER = {category: index for index, category in enumerate(Category)}


class OutcomeStatus(Enum):
    PASSED = "passed"
    FAILED = "failed"
    NOT_EVALUATED = "not_evaluated"


class FilingState(Enum):
    PARSING = "parsing"
    SYNTACTICAL = "syntactical"
    VALIDITY = "validity"
    QUALITY = "quality"
    MACRO = "macro"
    REPORTED = "reported"


class ReportStatus(Enum):
    INVALID_FORMAT = "invalid_format"
    BLOCKED = "blocked"
    TRUNCATED = "truncated"
    PARSE_ERRORS = "parse_errors"
    SYNTACTICAL_VALIDITY_EDITS = "syntactical_validity_edits"
    QUALITY_EDITS = "quality_edits"
    MACRO_EDITS = "macro_edits"
    VALIDATED = "validated"


@dataclass(frozen=True)
class DecodeError:
    """A single token that could not be decoded into its field's kind."""

    field: str
    token: str
    reason: str

    @property
    def message(self) -> str:
        return f"{self.field}: {self.reason} (got {self.token!r})"


@dataclass(frozen=True)
class ParseError:
    """A line that was rejected as a whole."""

    line_number: int
    message: str
    field: str | None = None
    token: str | None = None
    expected: int | None = None
    actual: int | None = None


@dataclass(frozen=True)
class FormatError:
    message: str
    detail: str = ""


Record = Union[TransmittalSheet, LoanApplicationRegister]


@dataclass(frozen=True)
class ParsedLine:
    line_number: int
    item: Record | ParseError

    @property
    def is_error(self) -> bool:
        return isinstance(self.item, ParseError)


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of one edit check against one record or one filing."""

    check_id: str
    status: OutcomeStatus
    description: str
    category: Category | None = None
    record_id: str | None = None
    line_number: int | None = None
    fields: tuple[str, ...] = ()
    message: str = ""

    @property
    def passed(self) -> bool:
        return self.status is OutcomeStatus.PASSED

    @property
    def failed(self) -> bool:
        return self.status is OutcomeStatus.FAILED


@dataclass(frozen=True)
class LineResult:
    """Everything reported against a single line of the filing."""

    line_number: int
    record_id: str | None
    outcomes: tuple[ValidationOutcome, ...] = ()
    parse_error: ParseError | None = None


@dataclass(frozen=True)
class ValidationSummary:
    total_lines: int
    records_parsed: int
    parse_errors: int
    syntactical_failures: int
    validity_failures: int
    quality_failures: int
    macro_failures: int
    not_evaluated: int


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of one validation run, grouped by the stage that produced it.

    ``header`` and ``lines`` hold record-scope outcomes in file order. ``filing``
    holds every non-macro filing or aggregate edit, including per-record
    comparisons against the transmittal sheet such as S025 and S270: those are
    only known once the whole filing streamed, so they come after all line
    outcomes and carry the line number and record id they refer to. ``macro``
    holds the macro edits, and ``terminal`` the truncation marker if any.
    """

    summary: ValidationSummary
    format_error: FormatError | None = None
    header: LineResult | None = None
    lines: Sequence[LineResult] = field(default_factory=tuple)
    filing: Sequence[ValidationOutcome] = field(default_factory=tuple)
    macro: Sequence[ValidationOutcome] = field(default_factory=tuple)
    terminal: ValidationOutcome | None = None
    blocked_by: str | None = None
    stages: tuple[FilingState, ...] = ()

    @property
    def truncated(self) -> bool:
        return self.terminal is not None

    @property
    def status(self) -> ReportStatus:
        if self.format_error is not None:
            return ReportStatus.INVALID_FORMAT
        if self.blocked_by is not None:
            return ReportStatus.BLOCKED
        if self.truncated:
            return ReportStatus.TRUNCATED
        if self.summary.parse_errors:
            return ReportStatus.PARSE_ERRORS
        if self.summary.syntactical_failures or self.summary.validity_failures:
            return ReportStatus.SYNTACTICAL_VALIDITY_EDITS
        if self.summary.quality_failures:
            return ReportStatus.QUALITY_EDITS
        if self.summary.macro_failures:
            return ReportStatus.MACRO_EDITS
        return ReportStatus.VALIDATED

    def has_issues(self) -> bool:
        return self.status is not ReportStatus.VALIDATED

    def iter_outcomes(self) -> Iterable[ValidationOutcome]:
        """Outcomes in file order, then catalog order."""
        if self.header is not None:
            yield from self.header.outcomes
        for line in self.lines:
            yield from line.outcomes
        yield from self.filing
        yield from self.macro
        if self.terminal is not None:
            yield self.terminal

    def iter_failures(self) -> Iterable[ValidationOutcome]:
        return (outcome for outcome in self.iter_outcomes() if outcome.failed)

    def iter_parse_errors(self) -> Iterable[ParseError]:
        return (line.parse_error for line in self.lines if line.parse_error is not None)

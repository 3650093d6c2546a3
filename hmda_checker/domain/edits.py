"""Edit checks and the ordered catalog they live in.

An edit check is immutable data: an id, a category, a scope, an optional parent id
and exactly one evaluation strategy.

* ``evaluate`` - a pure function of one record returning a ``Verdict``
  (transmittal sheet and loan application register scopes).
* ``accumulator`` - a factory, given the transmittal sheet, for an incremental
  accumulator fed every loan application register while the filing streams.
* ``projection`` - a buffered second pass: selected columns are collected while
  streaming and evaluated together once the stream ends.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, Protocol, Sequence

import pandas as pd

from .errors import CatalogError
from .models import LoanApplicationRegister, TransmittalSheet
from .predicates import Verdict
from .results import Category, OutcomeStatus, ValidationOutcome

CHECK_ID_PATTERN = re.compile(r"[SVQ]\d{3}(-\d+)?")


class Scope(Enum):
    TRANSMITTAL = "transmittal"
    LAR = "lar"
    FILING = "filing"
    AGGREGATE = "aggregate"

    @property
    def is_record(self) -> bool:
        return self in (Scope.TRANSMITTAL, Scope.LAR)


@dataclass(frozen=True)
class Finding:
    """One violation found by a filing-level check."""

    message: str
    line_number: int | None = None
    record_id: str | None = None


class Accumulator(Protocol):
    def add(self, line_number: int, lar: LoanApplicationRegister) -> None:
        ...

    def merge(self, other: Accumulator) -> Accumulator:
        ...

    def findings(self) -> Sequence[Finding]:
        ...


@dataclass(frozen=True)
class Projection:
    """Columns buffered per record and the function evaluating them at the end."""

    columns: tuple[str, ...]
    select: Callable[[LoanApplicationRegister], tuple[Any, ...]]
    evaluate: Callable[[pd.DataFrame, TransmittalSheet], Sequence[Finding]]

    def row(self, line_number: int, lar: LoanApplicationRegister) -> tuple[Any, ...]:
        return (line_number, lar.record_id, *self.select(lar))

    def frame(self, rows: Iterable[tuple[Any, ...]]) -> pd.DataFrame:
        return pd.DataFrame.from_records(list(rows), columns=["line_number", "record_id", *self.columns])


@dataclass(frozen=True)
class EditCheck:
    check_id: str
    category: Category
    scope: Scope
    description: str
    evaluate: Callable[[Any], Verdict] | None = None
    accumulator: Callable[[TransmittalSheet], Accumulator] | None = None
    projection: Projection | None = None
    parent: str | None = None
    fields: tuple[str, ...] = ()
    blocking: bool = False

    def __post_init__(self) -> None:
        if not CHECK_ID_PATTERN.fullmatch(self.check_id):
            raise CatalogError(f"Malformed edit id {self.check_id!r}")
        strategies = [s for s in (self.evaluate, self.accumulator, self.projection) if s is not None]
        if len(strategies) != 1:
            raise CatalogError(f"{self.check_id} must declare exactly one evaluation strategy")
        if self.scope.is_record != (self.evaluate is not None):
            raise CatalogError(f"{self.check_id}: record scopes evaluate, filing scopes accumulate or project")
        if self.blocking and not (self.scope is Scope.TRANSMITTAL and self.category is Category.SYNTACTICAL):
            raise CatalogError(f"{self.check_id}: only syntactical transmittal sheet edits may block")

    @property
    def is_buffered(self) -> bool:
        return self.projection is not None

    def outcome(
        self,
        status: OutcomeStatus,
        record_id: str | None = None,
        line_number: int | None = None,
        message: str = "",
    ) -> ValidationOutcome:
        return ValidationOutcome(
            check_id=self.check_id,
            status=status,
            description=self.description,
            category=self.category,
            record_id=record_id,
            line_number=line_number,
            fields=self.fields,
            message=message,
        )

    def apply(self, record: Any, line_number: int | None = None) -> ValidationOutcome:
        """Evaluate a record-scope check."""
        verdict = self.evaluate(record)
        status = OutcomeStatus.PASSED if verdict else OutcomeStatus.FAILED
        return self.outcome(status, record.record_id, line_number)

    def skip(self, record_id: str | None = None, line_number: int | None = None) -> ValidationOutcome:
        return self.outcome(
            OutcomeStatus.NOT_EVALUATED,
            record_id,
            line_number,
            message=f"parent edit {self.parent} did not pass",
        )

    def conclude(self, findings: Sequence[Finding]) -> tuple[ValidationOutcome, ...]:
        """Turn filing-level findings into outcomes; no findings is one pass."""
        if not findings:
            return (self.outcome(OutcomeStatus.PASSED),)
        return tuple(
            self.outcome(OutcomeStatus.FAILED, item.record_id, item.line_number, item.message)
            for item in findings
        )

    def apply_filing(
        self,
        ts: TransmittalSheet,
        lars: Iterable[LoanApplicationRegister],
    ) -> tuple[ValidationOutcome, ...]:
        """Evaluate a filing or aggregate check over an in-memory sequence."""
        numbered = enumerate(lars, start=2)
        if self.projection is not None:
            frame = self.projection.frame(self.projection.row(n, lar) for n, lar in numbered)
            return self.conclude(self.projection.evaluate(frame, ts))
        accumulator = self.accumulator(ts)
        for line_number, lar in numbered:
            accumulator.add(line_number, lar)
        return self.conclude(accumulator.findings())


class EditCatalog:
    """Ordered, validated collection of edit checks."""

    def __init__(self, checks: Iterable[EditCheck]) -> None:
        self._checks = tuple(checks)
        self._by_id: dict[str, EditCheck] = {}
        for check in self._checks:
            if check.check_id in self._by_id:
                raise CatalogError(f"Duplicate edit id {check.check_id}")
            self._by_id[check.check_id] = check
        self._ordered = {scope: self._stage_order(scope) for scope in Scope}

    def _stage_order(self, scope: Scope) -> tuple[EditCheck, ...]:
        ordered = sorted(
            (check for check in self._checks if check.scope is scope),
            key=lambda check: check.category.stage,
        )
        seen: set[str] = set()
        for check in ordered:
            if check.parent is not None and check.parent not in seen:
                raise CatalogError(
                    f"{check.check_id}: parent {check.parent} must be an earlier {scope.value} edit"
                )
            seen.add(check.check_id)
        return tuple(ordered)

    def __iter__(self) -> Iterator[EditCheck]:
        return iter(self._checks)

    def __len__(self) -> int:
        return len(self._checks)

    def __contains__(self, check_id: object) -> bool:
        return check_id in self._by_id

    def get(self, check_id: str) -> EditCheck:
        return self._by_id[check_id]

    def ordered(self, *scopes: Scope) -> tuple[EditCheck, ...]:
        """Checks of the given scopes in stage order, declaration order within a stage."""
        if len(scopes) == 1:
            return self._ordered[scopes[0]]
        return tuple(
            sorted(
                (check for scope in scopes for check in self._ordered[scope]),
                key=lambda check: check.category.stage,
            )
        )


def run_gated(
    checks: Sequence[EditCheck],
    apply: Callable[[EditCheck], Sequence[ValidationOutcome]],
    skip: Callable[[EditCheck], ValidationOutcome],
) -> tuple[ValidationOutcome, ...]:
    """Run checks in order, skipping any whose parent did not pass."""
    passed: dict[str, bool] = {}
    outcomes: list[ValidationOutcome] = []
    for check in checks:
        if check.parent is not None and not passed.get(check.parent, False):
            produced: Sequence[ValidationOutcome] = (skip(check),)
        else:
            produced = apply(check)
        passed[check.check_id] = all(outcome.passed for outcome in produced)
        outcomes.extend(produced)
    return tuple(outcomes)

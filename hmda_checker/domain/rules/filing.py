"""Edits needing the whole filing: cross-record, aggregate and macro checks.

Incremental checks use accumulators fed one loan application register at a time.
Partial accumulators built over separate chunks are merged in file order, so a
merged accumulator is equivalent to a single sequential pass.
"""
from __future__ import annotations

from functools import partial
from typing import Callable, Mapping, Sequence

import pandas as pd

from hmda_checker.domain.codes import ActionTaken
from hmda_checker.domain.edits import EditCheck, Finding, Projection, Scope
from hmda_checker.domain.models import LoanApplicationRegister, TransmittalSheet
from hmda_checker.domain.results import Category

DEFAULT_THRESHOLDS: dict[str, float] = {
    "Q008": 0.30,
    "Q009": 0.15,
    "Q080": 5.0,
}


class RecordFindings:
    """Collects findings produced independently for each record."""

    def __init__(self, inspect: Callable[[int, LoanApplicationRegister], Finding | None]) -> None:
        self._inspect = inspect
        self._findings: list[Finding] = []

    def add(self, line_number: int, lar: LoanApplicationRegister) -> None:
        finding = self._inspect(line_number, lar)
        if finding is not None:
            self._findings.append(finding)

    def merge(self, other: RecordFindings) -> RecordFindings:
        merged = RecordFindings(self._inspect)
        merged._findings = [*self._findings, *other._findings]
        return merged

    def findings(self) -> Sequence[Finding]:
        return tuple(self._findings)


class RecordCount:
    def __init__(self, declared: int) -> None:
        self.declared = declared
        self.count = 0

    def add(self, line_number: int, lar: LoanApplicationRegister) -> None:
        self.count += 1

    def merge(self, other: RecordCount) -> RecordCount:
        merged = RecordCount(self.declared)
        merged.count = self.count + other.count
        return merged

    def findings(self) -> Sequence[Finding]:
        if self.count == self.declared:
            return ()
        return (Finding(f"Transmittal sheet declares {self.declared} records, found {self.count}"),)


class DuplicateLoanIds:
    def __init__(self) -> None:
        self._first_seen: dict[str, int] = {}
        self._duplicates: list[tuple[int, str]] = []

    def add(self, line_number: int, lar: LoanApplicationRegister) -> None:
        loan_id = lar.record_id
        if loan_id in self._first_seen:
            self._duplicates.append((line_number, loan_id))
        else:
            self._first_seen[loan_id] = line_number

    def merge(self, other: DuplicateLoanIds) -> DuplicateLoanIds:
        merged = DuplicateLoanIds()
        merged._first_seen = dict(self._first_seen)
        merged._duplicates = [*self._duplicates, *other._duplicates]
        for loan_id, line_number in other._first_seen.items():
            if loan_id in merged._first_seen:
                merged._duplicates.append((line_number, loan_id))
            else:
                merged._first_seen[loan_id] = line_number
        return merged

    def findings(self) -> Sequence[Finding]:
        return tuple(
            Finding(f"Loan id {loan_id} already reported on line {self._first_seen[loan_id]}", line_number, loan_id)
            for line_number, loan_id in sorted(self._duplicates)
        )


class ActionShare:
    """Share of records whose action taken is one of ``actions``."""

    def __init__(self, actions: tuple[ActionTaken, ...], threshold: float, label: str) -> None:
        self.actions = actions
        self.threshold = threshold
        self.label = label
        self.total = 0
        self.matching = 0

    def add(self, line_number: int, lar: LoanApplicationRegister) -> None:
        self.total += 1
        if lar.action.action_taken in self.actions:
            self.matching += 1

    def merge(self, other: ActionShare) -> ActionShare:
        merged = ActionShare(self.actions, self.threshold, self.label)
        merged.total = self.total + other.total
        merged.matching = self.matching + other.matching
        return merged

    def findings(self) -> Sequence[Finding]:
        if not self.total or self.matching / self.total <= self.threshold:
            return ()
        share = self.matching / self.total
        return (
            Finding(
                f"{self.matching} of {self.total} records ({share:.1%}) are {self.label}, "
                f"more than {self.threshold:.0%}"
            ),
        )


def _control_number(ts: TransmittalSheet, line_number: int, lar: LoanApplicationRegister) -> Finding | None:
    if lar.respondent_id == ts.respondent.id and lar.agency_code is ts.agency_code:
        return None
    return Finding(
        f"Respondent {lar.respondent_id}/agency {lar.agency_code.code} does not match "
        f"transmittal sheet {ts.respondent.id}/{ts.agency_code.code}",
        line_number,
        lar.record_id,
    )


def _action_year(ts: TransmittalSheet, line_number: int, lar: LoanApplicationRegister) -> Finding | None:
    year = lar.action.action_date.year
    if year == ts.activity_year:
        return None
    return Finding(f"Action date year {year} is not activity year {ts.activity_year}", line_number, lar.record_id)


def loan_amount_outliers(multiplier: float, frame: pd.DataFrame, ts: TransmittalSheet) -> Sequence[Finding]:
    if frame.empty:
        return ()
    median = frame["loan_amount"].median()
    limit = median * multiplier
    outliers = frame[frame["loan_amount"] > limit].sort_values("line_number")
    return tuple(
        Finding(
            f"Loan amount {row.loan_amount} exceeds {multiplier:g} times the filing median of {median:g}",
            int(row.line_number),
            str(row.record_id),
        )
        for row in outliers.itertuples(index=False)
    )


def filing_edits(thresholds: Mapping[str, float] | None = None) -> list[EditCheck]:
    limits = {**DEFAULT_THRESHOLDS, **(thresholds or {})}
    return [
        EditCheck(
            "S025",
            Category.SYNTACTICAL,
            Scope.FILING,
            "Respondent id and agency code on each LAR must match the transmittal sheet",
            accumulator=lambda ts: RecordFindings(partial(_control_number, ts)),
            fields=("respondent_id", "agency_code"),
        ),
        EditCheck(
            "S040",
            Category.SYNTACTICAL,
            Scope.AGGREGATE,
            "Loan/application numbers must be unique within the filing",
            accumulator=lambda ts: DuplicateLoanIds(),
            fields=("loan_id",),
        ),
        EditCheck(
            "S270",
            Category.SYNTACTICAL,
            Scope.FILING,
            "The year of the action taken date must equal the activity year",
            accumulator=lambda ts: RecordFindings(partial(_action_year, ts)),
            fields=("action_date", "activity_year"),
        ),
        EditCheck(
            "Q130",
            Category.QUALITY,
            Scope.FILING,
            "Total line entries on the transmittal sheet should equal the number of LAR records",
            accumulator=lambda ts: RecordCount(ts.total_lines),
            fields=("total_lines",),
        ),
        EditCheck(
            "Q008",
            Category.MACRO,
            Scope.AGGREGATE,
            "The share of withdrawn applications should not exceed the configured limit",
            accumulator=lambda ts: ActionShare((ActionTaken.WITHDRAWN,), limits["Q008"], "withdrawn"),
            fields=("action_taken",),
        ),
        EditCheck(
            "Q009",
            Category.MACRO,
            Scope.AGGREGATE,
            "The share of approved but not accepted applications should not exceed the configured limit",
            accumulator=lambda ts: ActionShare(
                (ActionTaken.APPROVED_NOT_ACCEPTED, ActionTaken.PREAPPROVAL_APPROVED_NOT_ACCEPTED),
                limits["Q009"],
                "approved but not accepted",
            ),
            fields=("action_taken",),
        ),
        EditCheck(
            "Q080",
            Category.MACRO,
            Scope.AGGREGATE,
            "Loan amounts should not be extreme outliers against the filing median",
            projection=Projection(
                columns=("loan_amount",),
                select=lambda lar: (lar.loan.amount,),
                evaluate=partial(loan_amount_outliers, limits["Q080"]),
            ),
            fields=("loan_amount",),
        ),
    ]

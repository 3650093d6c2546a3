"""Domain services running the edit catalog over a parsed filing."""
from __future__ import annotations

import logging
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from functools import reduce
from typing import Any, Iterable, Iterator, Sequence

from .edits import Accumulator, EditCatalog, EditCheck, Scope, run_gated
from .errors import InputTruncated, InvalidFileFormat
from .models import LoanApplicationRegister, TransmittalSheet
from .results import (
    Category,
    FilingState,
    FormatError,
    LineResult,
    OutcomeStatus,
    ParsedLine,
    ParseError,
    ValidationOutcome,
    ValidationReport,
    ValidationSummary,
)

logger = logging.getLogger(__name__)

TRUNCATED_CHECK_ID = "TRUNCATED"
FULL_RUN = (
    FilingState.PARSING,
    FilingState.SYNTACTICAL,
    FilingState.VALIDITY,
    FilingState.QUALITY,
    FilingState.MACRO,
    FilingState.REPORTED,
)


@dataclass(slots=True)
class ChunkResult:
    """Everything one worker produced for a contiguous run of lines."""

    lines: list[LineResult]
    accumulators: list[Accumulator]
    rows: list[list[tuple[Any, ...]]]


class FilingValidator:
    """Streams a parsed filing through the edit catalog and builds the report.

    Loan application registers are evaluated in chunks. With ``max_workers`` above
    one, chunks run on a thread pool with at most ``2 * max_workers`` chunks in
    flight; results are always collected in submission order, so the report is
    identical whatever the worker count.
    """

    def __init__(self, catalog: EditCatalog, max_workers: int = 1, chunk_size: int = 1000) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self._catalog = catalog
        self._max_workers = max(1, max_workers)
        self._chunk_size = chunk_size
        self._transmittal_checks = catalog.ordered(Scope.TRANSMITTAL)
        self._lar_checks = catalog.ordered(Scope.LAR)
        self._filing_checks = catalog.ordered(Scope.FILING, Scope.AGGREGATE)
        self._incremental = tuple(check for check in self._filing_checks if not check.is_buffered)
        self._buffered = tuple(check for check in self._filing_checks if check.is_buffered)

    @property
    def catalog(self) -> EditCatalog:
        return self._catalog

    def validate(
        self,
        parsed: Iterable[ParsedLine],
        cancel: threading.Event | None = None,
    ) -> ValidationReport:
        lines = iter(parsed)
        logger.info("Stage %s", FilingState.PARSING.value)
        try:
            first = next(lines, None)
        except InvalidFileFormat as exc:
            return self._format_report(exc.error)
        except InputTruncated:
            return self._format_report(FormatError("Invalid File Format", "input ended before the transmittal sheet"))
        if first is None or not isinstance(first.item, TransmittalSheet):
            return self._format_report(FormatError("Invalid File Format", "the first line is not a transmittal sheet"))

        ts = first.item
        header = self._check_header(ts, first.line_number)
        blocked_by = next(
            (
                outcome.check_id
                for outcome in header.outcomes
                if outcome.failed and self._catalog.get(outcome.check_id).blocking
            ),
            None,
        )
        if blocked_by is not None:
            logger.warning("Filing blocked by %s at line %d", blocked_by, first.line_number)
            stages = (FilingState.PARSING, FilingState.SYNTACTICAL, FilingState.REPORTED)
            return self._report(header=header, blocked_by=blocked_by, stages=stages)

        results, terminal = self._stream(ts, lines, cancel)
        line_results = [line for result in results for line in result.lines]
        filing, macro = self._check_filing(ts, results)
        logger.info("Stage %s: %d lines reported", FilingState.REPORTED.value, len(line_results) + 1)
        return self._report(
            header=header,
            lines=tuple(line_results),
            filing=filing,
            macro=macro,
            terminal=terminal,
            stages=FULL_RUN,
        )

    def _check_header(self, ts: TransmittalSheet, line_number: int) -> LineResult:
        outcomes = run_gated(
            self._transmittal_checks,
            lambda check: (check.apply(ts, line_number),),
            lambda check: check.skip(ts.record_id, line_number),
        )
        return LineResult(line_number, ts.record_id, outcomes)

    def check_record(self, lar: LoanApplicationRegister, line_number: int) -> LineResult:
        outcomes = run_gated(
            self._lar_checks,
            lambda check: (check.apply(lar, line_number),),
            lambda check: check.skip(lar.record_id, line_number),
        )
        return LineResult(line_number, lar.record_id, outcomes)

    def _evaluate_chunk(self, ts: TransmittalSheet, chunk: Sequence[ParsedLine]) -> ChunkResult:
        accumulators = [check.accumulator(ts) for check in self._incremental]
        rows: list[list[tuple[Any, ...]]] = [[] for _ in self._buffered]
        lines: list[LineResult] = []
        for parsed in chunk:
            item = parsed.item
            if isinstance(item, ParseError):
                lines.append(LineResult(parsed.line_number, None, parse_error=item))
                continue
            lines.append(self.check_record(item, parsed.line_number))
            for accumulator in accumulators:
                accumulator.add(parsed.line_number, item)
            for check, buffer in zip(self._buffered, rows):
                buffer.append(check.projection.row(parsed.line_number, item))
        return ChunkResult(lines, accumulators, rows)

    def _chunks(
        self,
        lines: Iterator[ParsedLine],
        cancel: threading.Event | None,
        truncation: list[int],
    ) -> Iterator[list[ParsedLine]]:
        chunk: list[ParsedLine] = []
        last_line = 1
        try:
            while True:
                if cancel is not None and cancel.is_set():
                    truncation.append(last_line)
                    break
                parsed = next(lines, None)
                if parsed is None:
                    break
                last_line = parsed.line_number
                chunk.append(parsed)
                if len(chunk) >= self._chunk_size:
                    yield chunk
                    chunk = []
        except InputTruncated:
            truncation.append(last_line)
        if chunk:
            yield chunk

    def _stream(
        self,
        ts: TransmittalSheet,
        lines: Iterator[ParsedLine],
        cancel: threading.Event | None,
    ) -> tuple[list[ChunkResult], ValidationOutcome | None]:
        logger.info(
            "Stages %s-%s: evaluating %d record edits",
            FilingState.SYNTACTICAL.value,
            FilingState.QUALITY.value,
            len(self._lar_checks),
        )
        truncation: list[int] = []
        chunks = self._chunks(lines, cancel, truncation)
        if self._max_workers == 1:
            results = [self._evaluate_chunk(ts, chunk) for chunk in chunks]
        else:
            results = []
            in_flight: deque[Future[ChunkResult]] = deque()
            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                for chunk in chunks:
                    if len(in_flight) >= self._max_workers * 2:
                        results.append(in_flight.popleft().result())
                    in_flight.append(executor.submit(self._evaluate_chunk, ts, chunk))
                while in_flight:
                    results.append(in_flight.popleft().result())

        terminal = None
        if truncation:
            logger.warning("Input truncated after line %d", truncation[0])
            terminal = ValidationOutcome(
                check_id=TRUNCATED_CHECK_ID,
                status=OutcomeStatus.FAILED,
                description="The filing input ended before it was complete",
                line_number=truncation[0],
                message=f"input truncated after line {truncation[0]}",
            )
        return results, terminal

    def _check_filing(
        self, ts: TransmittalSheet, results: Sequence[ChunkResult]
    ) -> tuple[tuple[ValidationOutcome, ...], tuple[ValidationOutcome, ...]]:
        merged: dict[str, Accumulator] = {}
        for index, check in enumerate(self._incremental):
            partials = [result.accumulators[index] for result in results]
            merged[check.check_id] = reduce(lambda left, right: left.merge(right), partials, check.accumulator(ts))
        buffered: dict[str, list[tuple[Any, ...]]] = {
            check.check_id: [row for result in results for row in result.rows[index]]
            for index, check in enumerate(self._buffered)
        }

        def apply(check: EditCheck) -> Sequence[ValidationOutcome]:
            if check.is_buffered:
                frame = check.projection.frame(buffered[check.check_id])
                return check.conclude(check.projection.evaluate(frame, ts))
            return check.conclude(merged[check.check_id].findings())

        logger.info("Stage %s: evaluating %d filing edits", FilingState.MACRO.value, len(self._filing_checks))
        outcomes = run_gated(self._filing_checks, apply, lambda check: check.skip())
        filing = tuple(outcome for outcome in outcomes if outcome.category is not Category.MACRO)
        macro = tuple(outcome for outcome in outcomes if outcome.category is Category.MACRO)
        return filing, macro

    def _format_report(self, error: FormatError) -> ValidationReport:
        logger.warning("%s: %s", error.message, error.detail)
        return self._report(format_error=error, stages=(FilingState.PARSING, FilingState.REPORTED))

    @staticmethod
    def _report(**parts: Any) -> ValidationReport:
        draft = ValidationReport(summary=_EMPTY_SUMMARY, **parts)
        outcomes = list(draft.iter_outcomes())
        failures = {category: 0 for category in Category}
        for outcome in outcomes:
            if outcome.failed and outcome.category is not None:
                failures[outcome.category] += 1
        header_lines = 1 if draft.header is not None else 0
        parse_errors = sum(1 for _ in draft.iter_parse_errors())
        summary = ValidationSummary(
            total_lines=header_lines + len(draft.lines),
            records_parsed=header_lines + len(draft.lines) - parse_errors,
            parse_errors=parse_errors,
            syntactical_failures=failures[Category.SYNTACTICAL],
            validity_failures=failures[Category.VALIDITY],
            quality_failures=failures[Category.QUALITY],
            macro_failures=failures[Category.MACRO],
            not_evaluated=sum(1 for outcome in outcomes if outcome.status is OutcomeStatus.NOT_EVALUATED),
        )
        return ValidationReport(summary=summary, **parts)


_EMPTY_SUMMARY = ValidationSummary(0, 0, 0, 0, 0, 0, 0, 0)

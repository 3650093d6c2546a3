import threading

import pytest

from hmda_checker.application.dto import SubmissionResponse
from hmda_checker.domain.results import FilingState, OutcomeStatus, ReportStatus
from hmda_checker.domain.rules.catalog import build_catalog
from hmda_checker.domain.services import TRUNCATED_CHECK_ID, FilingValidator
from hmda_checker.infrastructure.parsing.records import parse_file
from hmda_checker.infrastructure.repositories.file_sources import StreamFilingSource
from hmda_checker.presentation.report import render_json


def validate(lines, max_workers=1, chunk_size=1000, cancel=None, filing_year=2017):
    validator = FilingValidator(build_catalog(filing_year), max_workers=max_workers, chunk_size=chunk_size)
    return validator.validate(parse_file(lines), cancel=cancel)


def outcome(report, check_id):
    return next(o for o in report.iter_outcomes() if o.check_id == check_id)


def test_clean_filing_is_validated(filing_lines):
    report = validate(filing_lines(3))

    assert report.status is ReportStatus.VALIDATED
    assert outcome(report, "Q130").status is OutcomeStatus.PASSED
    assert report.summary.total_lines == 4
    assert report.summary.records_parsed == 4
    assert report.stages[-1] is FilingState.REPORTED
    assert SubmissionResponse.from_report(report).message == "uploaded"


def test_declared_count_against_parsed_records(filing_lines, lar_line):
    lines = filing_lines(2, declared=3) + [lar_line("BROKEN", loan_type="9")]

    report = validate(lines)

    q130 = outcome(report, "Q130")
    assert q130.status is OutcomeStatus.FAILED
    assert "declares 3 records, found 2" in q130.message
    assert report.summary.parse_errors == 1
    assert report.status is ReportStatus.PARSE_ERRORS


def test_parse_errors_are_reported_in_line_order(filing_lines, lar_line):
    lines = filing_lines(2, declared=4)
    lines[2:2] = [lar_line("BAD", action_date="2017")]
    lines.append(lar_line("ALSO-BAD") + "|")

    report = validate(lines, max_workers=2, chunk_size=1)

    assert [line.line_number for line in report.lines] == [2, 3, 4, 5]
    assert [error.line_number for error in report.iter_parse_errors()] == [3, 5]
    assert report.lines[1].outcomes == ()


def test_child_not_evaluated_when_parent_fails(ts_line, lar_line):
    lines = [ts_line(total_lines="1"), lar_line("L1", preapproval="3")]

    report = validate(lines)

    statuses = {o.check_id: o.status for o in report.lines[0].outcomes}
    assert statuses["V613-1"] is OutcomeStatus.FAILED
    assert statuses["V613-2"] is OutcomeStatus.NOT_EVALUATED
    assert report.summary.not_evaluated == 3
    assert report.status is ReportStatus.SYNTACTICAL_VALIDITY_EDITS


def test_outcomes_follow_file_order_then_catalog_order(filing_lines):
    report = validate(filing_lines(2))
    catalog = build_catalog(2017)

    lar_ids = [o.check_id for o in report.lines[0].outcomes]
    assert lar_ids[0] == "S200"
    assert lar_ids.index("V613-1") < lar_ids.index("V613-2") < lar_ids.index("Q632")
    assert [o.check_id for o in report.header.outcomes][:2] == ["S028", "S100"]
    assert len(list(report.iter_outcomes())) == len(catalog) + len(report.lines[0].outcomes)


def test_record_comparisons_against_the_header_sit_in_the_filing_bucket(filing_lines, lar_line):
    lines = filing_lines(3)
    lines[1] = lar_line(f"LOAN{1:021d}", respondent_id="9999999999")

    report = validate(lines)

    s025 = outcome(report, "S025")
    assert s025.status is OutcomeStatus.FAILED
    assert (s025.line_number, s025.record_id) == (2, f"LOAN{1:021d}")
    assert s025 in report.filing
    assert all(o.check_id != "S025" for line in report.lines for o in line.outcomes)
    ordered = list(report.iter_outcomes())
    assert ordered.index(s025) > ordered.index(report.lines[-1].outcomes[-1])


def test_report_is_deterministic_across_runs_and_workers(filing_lines, lar_line):
    lines = filing_lines(40, declared=41) + [lar_line("LOAN000000000000000000001"), lar_line("X", action_taken="4")]

    sequential = render_json(validate(lines), include_passed=True)
    again = render_json(validate(lines), include_passed=True)
    parallel = render_json(validate(lines, max_workers=4, chunk_size=3), include_passed=True)

    assert sequential == again == parallel


def test_duplicates_found_across_chunks(filing_lines, lar_line):
    lines = filing_lines(5, declared=6) + [lar_line("LOAN000000000000000000002")]

    report = validate(lines, max_workers=3, chunk_size=2)

    s040 = [o for o in report.filing if o.check_id == "S040"]
    assert [(o.status, o.line_number) for o in s040] == [(OutcomeStatus.FAILED, 7)]


def test_blocking_header_edit_short_circuits(ts_line, lar_line):
    lines = [ts_line(activity_year="2016", timestamp="201701171330"), lar_line("L1")]

    report = validate(lines)

    assert report.status is ReportStatus.BLOCKED
    assert report.blocked_by == "S100"
    assert report.lines == ()
    assert report.stages == (FilingState.PARSING, FilingState.SYNTACTICAL, FilingState.REPORTED)


@pytest.mark.parametrize("payload", [b"\x00\x01\x02\x03binary\xff", b"qdemd", b""])
def test_non_delimited_payload_is_single_format_error(payload):
    report = validate([payload])

    assert report.status is ReportStatus.INVALID_FORMAT
    assert report.header is None
    assert report.lines == ()
    assert list(report.iter_outcomes()) == []
    response = SubmissionResponse.from_report(report)
    assert (response.status_code, response.message) == (400, "Invalid File Format")


def test_cancelled_stream_reports_records_seen_plus_truncation(filing_lines):
    cancel = threading.Event()
    lines = filing_lines(5)

    def produce():
        for index, line in enumerate(lines):
            if index == 3:
                cancel.set()
            yield line

    report = validate(StreamFilingSource(produce(), cancel))

    assert report.status is ReportStatus.TRUNCATED
    assert [line.line_number for line in report.lines] == [2, 3, 4]
    assert report.terminal.check_id == TRUNCATED_CHECK_ID
    assert report.terminal.line_number == 4
    assert outcome(report, "Q130").status is OutcomeStatus.FAILED
    assert list(report.iter_outcomes())[-1] is report.terminal


def test_cancel_event_stops_the_engine(filing_lines):
    cancel = threading.Event()
    cancel.set()

    report = validate(filing_lines(3), cancel=cancel)

    assert report.truncated
    assert report.lines == ()
    assert report.header is not None

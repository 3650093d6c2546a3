import csv
import io
import json
from pathlib import Path

import pandas as pd

from hmda_checker.domain.rules.catalog import build_catalog
from hmda_checker.domain.services import FilingValidator
from hmda_checker.infrastructure.parsing.records import parse_file
from hmda_checker.presentation.report import (
    ROW_COLUMNS,
    outcomes_to_rows,
    render_csv,
    render_html,
    render_json,
    report_to_dataframe,
    write_excel,
)


def validate(lines):
    return FilingValidator(build_catalog(2017)).validate(parse_file(lines))


def test_rows_list_failures_and_parse_errors(filing_lines, lar_line):
    report = validate(filing_lines(1) + [lar_line("L2", loan_amount="0"), lar_line("L3", loan_type="x")])

    rows = outcomes_to_rows(report)

    assert [(row["check_id"], row["line_number"]) for row in rows] == [
        ("V260", "3"),
        ("PARSE", "4"),
        ("Q130", ""),
    ]
    assert rows[0]["record_id"] == "L2"
    assert rows[0]["fields"] == "loan_amount"


def test_passed_rows_on_request(filing_lines):
    report = validate(filing_lines(1))

    assert outcomes_to_rows(report) == []
    assert len(outcomes_to_rows(report, include_passed=True)) == len(list(report.iter_outcomes()))


def test_csv_and_html(filing_lines, lar_line):
    report = validate(filing_lines(1) + [lar_line("<L2>", loan_amount="0")])

    parsed = list(csv.DictReader(io.StringIO(render_csv(outcomes_to_rows(report)).decode("utf-8"))))
    html = render_html(report)

    assert parsed[0]["check_id"] == "V260"
    assert "&lt;L2&gt;" in html
    assert "syntactical_validity_edits" in html
    assert render_csv([]).decode("utf-8").strip() == ",".join(ROW_COLUMNS)


def test_json_has_sorted_keys_and_summary(filing_lines):
    report = validate(filing_lines(2))

    payload = json.loads(render_json(report))

    assert payload["summary"]["status"] == "validated"
    assert payload["summary"]["records_parsed"] == 3
    assert payload["stages"][-1] == "reported"
    assert render_json(report) == json.dumps(payload, indent=2, sort_keys=True)


def test_format_error_row():
    report = FilingValidator(build_catalog()).validate(parse_file([b"qdemd"]))

    (row,) = outcomes_to_rows(report)
    assert row["check_id"] == "FORMAT"
    assert row["description"] == "Invalid File Format"


def test_excel_export(tmp_path: Path, filing_lines, lar_line):
    report = validate(filing_lines(1) + [lar_line("L2", loan_amount="0")])
    target = tmp_path / "report.xlsx"

    write_excel(report, target)

    outcomes = pd.read_excel(target, sheet_name="Outcomes", dtype=str)
    summary = pd.read_excel(target, sheet_name="Summary")
    assert list(outcomes.columns) == list(ROW_COLUMNS)
    assert outcomes["check_id"].tolist() == report_to_dataframe(report)["check_id"].tolist()
    assert "status" in summary["metric"].tolist()

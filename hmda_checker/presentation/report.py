"""Report renderers for filing validation results."""
from __future__ import annotations

import csv
import html
import io
import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, BinaryIO

import pandas as pd

from hmda_checker.domain.results import ParseError, ValidationOutcome, ValidationReport

ROW_COLUMNS = ("line_number", "record_id", "check_id", "category", "status", "fields", "message", "description")


def _outcome_row(outcome: ValidationOutcome) -> dict[str, str]:
    return {
        "line_number": "" if outcome.line_number is None else str(outcome.line_number),
        "record_id": outcome.record_id or "",
        "check_id": outcome.check_id,
        "category": outcome.category.value if outcome.category is not None else "",
        "status": outcome.status.value,
        "fields": ";".join(outcome.fields),
        "message": outcome.message,
        "description": outcome.description,
    }


def _parse_error_row(error: ParseError) -> dict[str, str]:
    return {
        "line_number": str(error.line_number),
        "record_id": "",
        "check_id": "PARSE",
        "category": "",
        "status": "failed",
        "fields": error.field or "",
        "message": error.message,
        "description": "The line could not be parsed",
    }


def outcomes_to_rows(report: ValidationReport, include_passed: bool = False) -> list[dict[str, str]]:
    """Rows in file order, then catalog order; parse errors sit at their line."""
    rows: list[dict[str, str]] = []
    if report.format_error is not None:
        rows.append(
            {
                **dict.fromkeys(ROW_COLUMNS, ""),
                "check_id": "FORMAT",
                "status": "failed",
                "message": report.format_error.detail,
                "description": report.format_error.message,
            }
        )
    if report.header is not None:
        rows.extend(_outcome_row(o) for o in report.header.outcomes if include_passed or not o.passed)
    for line in report.lines:
        if line.parse_error is not None:
            rows.append(_parse_error_row(line.parse_error))
        rows.extend(_outcome_row(o) for o in line.outcomes if include_passed or not o.passed)
    for outcome in (*report.filing, *report.macro):
        if include_passed or not outcome.passed:
            rows.append(_outcome_row(outcome))
    if report.terminal is not None:
        rows.append(_outcome_row(report.terminal))
    return rows


def summary_to_dict(report: ValidationReport) -> dict[str, Any]:
    return {"status": report.status.value, **asdict(report.summary)}


def report_to_dict(report: ValidationReport, include_passed: bool = False) -> dict[str, Any]:
    return {
        "summary": summary_to_dict(report),
        "format_error": asdict(report.format_error) if report.format_error is not None else None,
        "blocked_by": report.blocked_by,
        "stages": [stage.value for stage in report.stages],
        "outcomes": outcomes_to_rows(report, include_passed),
    }


def render_json(report: ValidationReport, include_passed: bool = False) -> str:
    return json.dumps(report_to_dict(report, include_passed), indent=2, sort_keys=True)


def render_csv(rows: list[dict[str, str]]) -> bytes:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(ROW_COLUMNS))
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def render_html(report: ValidationReport, include_passed: bool = False) -> str:
    rows = outcomes_to_rows(report, include_passed)
    status = f"<p>Status: {html.escape(report.status.value)}</p>"
    if not rows:
        return status + "<p>No edits failed.</p>"
    header = "".join(f"<th>{col}</th>" for col in ROW_COLUMNS)
    body_parts = []
    for row in rows:
        body_parts.append("<tr>" + "".join(f"<td>{html.escape(row[col])}</td>" for col in ROW_COLUMNS) + "</tr>")
    body_html = "".join(body_parts)
    return f"{status}<table><thead><tr>{header}</tr></thead><tbody>{body_html}</tbody></table>"


def report_to_dataframe(report: ValidationReport, include_passed: bool = False) -> pd.DataFrame:
    return pd.DataFrame(outcomes_to_rows(report, include_passed), columns=list(ROW_COLUMNS))


def write_excel(report: ValidationReport, target: Path | BinaryIO, include_passed: bool = False) -> None:
    summary = pd.DataFrame(list(summary_to_dict(report).items()), columns=["metric", "value"])
    outcomes = report_to_dataframe(report, include_passed)
    with pd.ExcelWriter(target, engine="xlsxwriter") as writer:
        summary.to_excel(writer, sheet_name="Summary", index=False)
        outcomes.to_excel(writer, sheet_name="Outcomes", index=False)

"""Command-line entrypoint for HMDA filing validation."""
from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

from hmda_checker.application.dto import SubmissionResponse
from hmda_checker.application.use_cases import FilingValidationContext, ValidateFilingUseCase
from hmda_checker.config import SETTINGS
from hmda_checker.domain.results import ReportStatus, ValidationReport
from hmda_checker.infrastructure.repositories.file_sources import FileFilingSource
from hmda_checker.infrastructure.storage.institution_store import JsonInstitutionRepository
from hmda_checker.presentation.report import outcomes_to_rows, render_csv, render_html, render_json, write_excel

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "WARNING", log_file: Path | None = None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate an HMDA LAR filing against the edit catalog")
    parser.add_argument("filing", type=Path, help="Path to the pipe-delimited filing")
    parser.add_argument("--filing-year", type=int, help="Filing period the activity year must match")
    parser.add_argument("--institutions", type=Path, help="JSON registry of institution profiles")
    parser.add_argument("--institution-id", type=str, help="Respondent id to look up in the registry")
    parser.add_argument("--workers", type=int, default=SETTINGS.max_workers, help="Worker threads for record edits")
    parser.add_argument("--chunk-size", type=int, default=SETTINGS.chunk_size, help="Records per worker chunk")
    parser.add_argument("--format", choices=("text", "json", "csv", "html", "xlsx"), default="text")
    parser.add_argument("--output", type=Path, help="Write the report here instead of stdout")
    parser.add_argument("--include-passed", action="store_true", help="List passing outcomes as well")
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--log-file", type=Path)
    args = parser.parse_args(argv)
    if args.institution_id and not args.institutions:
        parser.error("--institution-id requires --institutions")
    if args.format == "xlsx" and not args.output:
        parser.error("--format xlsx requires --output")
    return args


def render_text(report: ValidationReport, submission: SubmissionResponse, include_passed: bool = False) -> str:
    summary = report.summary
    lines = [
        "Validation Summary",
        "==================",
        f"Response: {submission.status_code} {submission.message}",
        f"Status: {report.status.value}",
        f"Lines: {summary.total_lines}",
        f"Records parsed: {summary.records_parsed}",
        f"Parse errors: {summary.parse_errors}",
        f"Syntactical failures: {summary.syntactical_failures}",
        f"Validity failures: {summary.validity_failures}",
        f"Quality failures: {summary.quality_failures}",
        f"Macro failures: {summary.macro_failures}",
        f"Not evaluated: {summary.not_evaluated}",
    ]
    rows = outcomes_to_rows(report, include_passed)
    if rows:
        lines.append("\nEdits reported:")
        for row in rows:
            where = f"line {row['line_number']}" if row["line_number"] else "filing"
            lines.append(f"- {row['check_id']} ({row['status']}) at {where}: {row['message'] or row['description']}")
    else:
        lines.append("\nNo edits failed.")
    return "\n".join(lines) + "\n"


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    configure_logging(args.log_level, args.log_file)

    settings = dataclasses.replace(
        SETTINGS,
        filing_year=args.filing_year,
        max_workers=max(1, args.workers),
        chunk_size=max(1, args.chunk_size),
    )
    institution = None
    if args.institution_id:
        institution = JsonInstitutionRepository.from_path(args.institutions).find(args.institution_id, args.filing_year)
        if institution is None:
            logger.warning("Institution %s not found in %s", args.institution_id, args.institutions)

    source = FileFilingSource(args.filing)
    context = FilingValidationContext.from_settings(source, settings, institution)
    report = ValidateFilingUseCase(context).execute()
    submission = SubmissionResponse.from_report(report)

    if args.format == "xlsx":
        write_excel(report, args.output, args.include_passed)
    else:
        if args.format == "json":
            payload = render_json(report, args.include_passed)
        elif args.format == "csv":
            payload = render_csv(outcomes_to_rows(report, args.include_passed)).decode("utf-8")
        elif args.format == "html":
            payload = render_html(report, args.include_passed)
        else:
            payload = render_text(report, submission, args.include_passed)
        if args.output is not None:
            args.output.write_text(payload, encoding="utf-8")
        else:
            sys.stdout.write(payload)

    if report.status is ReportStatus.INVALID_FORMAT:
        return 2
    return 1 if report.has_issues() else 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

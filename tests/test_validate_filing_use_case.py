import dataclasses
import threading
from pathlib import Path

import pytest

from hmda_checker.application.use_cases import FilingValidationContext, ValidateFilingUseCase
from hmda_checker.config import SETTINGS
from hmda_checker.domain.codes import AgencyCode
from hmda_checker.domain.errors import InputTruncated
from hmda_checker.domain.models import InstitutionProfile
from hmda_checker.domain.results import ReportStatus
from hmda_checker.infrastructure.repositories.file_sources import FileFilingSource, StreamFilingSource


def write_filing(path: Path, lines: list[str]) -> Path:
    path.write_text("\r\n".join(lines) + "\r\n", encoding="utf-8")
    return path


def test_file_source_is_restartable(tmp_path: Path, filing_lines):
    source = FileFilingSource(write_filing(tmp_path / "filing.txt", filing_lines(2)))

    assert list(source) == list(source)
    assert len(list(source)) == 3
    assert len(source.digest()) == 64


def test_bytes_source_matches_path_source(tmp_path: Path, filing_lines):
    path = write_filing(tmp_path / "filing.txt", filing_lines(2))

    assert list(FileFilingSource(path.read_bytes())) == list(FileFilingSource(path))


def test_stream_source_is_one_shot_and_cancellable(filing_lines):
    cancel = threading.Event()
    source = StreamFilingSource(iter(filing_lines(2)), cancel)

    iterator = iter(source)
    next(iterator)
    cancel.set()
    with pytest.raises(InputTruncated):
        next(iterator)
    with pytest.raises(RuntimeError):
        list(source)


def test_stream_source_passes_on_the_line_taken_before_cancel(filing_lines):
    cancel = threading.Event()
    lines = filing_lines(2)

    def produce():
        yield lines[0]
        cancel.set()
        yield lines[1]
        yield lines[2]

    iterator = iter(StreamFilingSource(produce(), cancel))

    assert next(iterator) == lines[0]
    assert next(iterator) == lines[1]
    with pytest.raises(InputTruncated):
        next(iterator)


def test_use_case_validates_a_file(tmp_path: Path, filing_lines):
    source = FileFilingSource(write_filing(tmp_path / "filing.txt", filing_lines(3)))
    settings = dataclasses.replace(SETTINGS, filing_year=2017, max_workers=2, chunk_size=2)

    report = ValidateFilingUseCase(FilingValidationContext.from_settings(source, settings)).execute()

    assert report.status is ReportStatus.VALIDATED
    assert report.summary.records_parsed == 4


def test_use_case_with_institution(tmp_path: Path, filing_lines):
    source = FileFilingSource(write_filing(tmp_path / "filing.txt", filing_lines(1)))
    institution = InstitutionProfile("0123456789", AgencyCode.OCC, 2017, "99-1234567")

    context = FilingValidationContext.from_settings(source, SETTINGS, institution)
    report = ValidateFilingUseCase(context).execute()

    assert [o.check_id for o in report.iter_failures()] == ["S301"]
    assert report.status is ReportStatus.SYNTACTICAL_VALIDITY_EDITS


def test_use_case_honours_cancellation(filing_lines):
    cancel = threading.Event()
    cancel.set()
    context = FilingValidationContext.from_settings(StreamFilingSource(filing_lines(2)), SETTINGS)

    report = ValidateFilingUseCase(context).execute(cancel=cancel)

    assert report.status is ReportStatus.TRUNCATED

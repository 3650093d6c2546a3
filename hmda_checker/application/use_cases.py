"""Application services orchestrating the filing validation workflow."""
from __future__ import annotations

import threading
from dataclasses import dataclass

from hmda_checker.config import SETTINGS, Settings
from hmda_checker.domain.models import InstitutionProfile
from hmda_checker.domain.repositories import FilingSource
from hmda_checker.domain.results import ValidationReport
from hmda_checker.domain.rules.catalog import build_catalog
from hmda_checker.domain.services import FilingValidator
from hmda_checker.infrastructure.parsing.records import FilingParser


@dataclass(slots=True)
class FilingValidationContext:
    source: FilingSource
    validator: FilingValidator
    delimiter: str = "|"
    encoding: str = "utf-8"

    @classmethod
    def from_settings(
        cls,
        source: FilingSource,
        settings: Settings = SETTINGS,
        institution: InstitutionProfile | None = None,
    ) -> FilingValidationContext:
        catalog = build_catalog(settings.filing_year, settings.macro_thresholds, institution)
        return cls(
            source=source,
            validator=FilingValidator(catalog, settings.max_workers, settings.chunk_size),
            delimiter=settings.delimiter,
            encoding=settings.encoding,
        )


class ValidateFilingUseCase:
    def __init__(self, context: FilingValidationContext) -> None:
        self._context = context

    def execute(self, cancel: threading.Event | None = None) -> ValidationReport:
        parser = FilingParser(self._context.source, self._context.delimiter, self._context.encoding)
        return self._context.validator.validate(parser, cancel=cancel)

"""Domain-driven HMDA filing validation toolkit."""
from hmda_checker.application.use_cases import FilingValidationContext, ValidateFilingUseCase
from hmda_checker.domain.rules.catalog import build_catalog
from hmda_checker.domain.services import FilingValidator
from hmda_checker.infrastructure.parsing.records import FilingParser, parse_file, parse_line
from hmda_checker.infrastructure.repositories.file_sources import FileFilingSource, StreamFilingSource

__all__ = [
    "ValidateFilingUseCase",
    "FilingValidationContext",
    "FilingValidator",
    "FilingParser",
    "FileFilingSource",
    "StreamFilingSource",
    "build_catalog",
    "parse_file",
    "parse_line",
]

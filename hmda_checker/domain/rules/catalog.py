"""Assembly of the complete edit catalog for one filing period."""
from __future__ import annotations

from typing import Mapping

from hmda_checker.domain.edits import EditCatalog
from hmda_checker.domain.models import InstitutionProfile
from hmda_checker.domain.rules.filing import filing_edits
from hmda_checker.domain.rules.lar import LAR_EDITS
from hmda_checker.domain.rules.transmittal import institution_edits, transmittal_edits


def build_catalog(
    filing_year: int | None = None,
    thresholds: Mapping[str, float] | None = None,
    institution: InstitutionProfile | None = None,
) -> EditCatalog:
    checks = [*transmittal_edits(filing_year), *LAR_EDITS, *filing_edits(thresholds)]
    if institution is not None:
        checks.extend(institution_edits(institution))
    return EditCatalog(checks)

"""Positional layouts of the transmittal sheet and loan application register lines."""
from __future__ import annotations

from hmda_checker.domain.codes import (
    ActionTaken,
    AgencyCode,
    DenialReason,
    Ethnicity,
    HoepaStatus,
    LienStatus,
    LoanPurpose,
    LoanType,
    Occupancy,
    Preapproval,
    PropertyType,
    PurchaserType,
    Race,
    Sex,
    UnderwritingResult,
    UnderwritingSystem,
)
from hmda_checker.infrastructure.parsing.codec import FieldKind, FieldSpec

TS_RECORD_TAG = "1"
LAR_RECORD_TAG = "2"


def _text(name: str, width: int) -> FieldSpec:
    return FieldSpec(name, FieldKind.TEXT, width=width)


def _code(name: str, codes) -> FieldSpec:
    return FieldSpec(name, FieldKind.CODE, codes=codes)


TS_LAYOUT: tuple[FieldSpec, ...] = (
    _text("record_id", 1),
    _text("respondent_id", 10),
    _code("agency_code", AgencyCode),
    FieldSpec("timestamp", FieldKind.TIMESTAMP),
    FieldSpec("activity_year", FieldKind.INTEGER, width=4),
    _text("tax_id", 10),
    FieldSpec("total_lines", FieldKind.INTEGER, width=7),
    _text("respondent_name", 30),
    _text("respondent_address", 40),
    _text("respondent_city", 25),
    _text("respondent_state", 2),
    _text("respondent_zip", 10),
    _text("parent_name", 30),
    _text("parent_address", 40),
    _text("parent_city", 25),
    _text("parent_state", 2),
    _text("parent_zip", 10),
    _text("contact_name", 30),
    _text("contact_phone", 12),
    _text("contact_fax", 12),
    _text("contact_email", 66),
)

# 2017 pipe-delimited LAR fields in their published order, plus loan_term after
# loan_amount and the five aus/aus_result slot pairs from the 2018 format at the end.
# Lines in either published format alone fail the field-count check.
LAR_LAYOUT: tuple[FieldSpec, ...] = (
    _text("record_id", 1),
    _text("respondent_id", 10),
    _code("agency_code", AgencyCode),
    _text("loan_id", 25),
    FieldSpec("application_date", FieldKind.DATE, allow_na=True),
    _code("loan_type", LoanType),
    _code("property_type", PropertyType),
    _code("loan_purpose", LoanPurpose),
    _code("occupancy", Occupancy),
    FieldSpec("loan_amount", FieldKind.INTEGER, width=5),
    FieldSpec("loan_term", FieldKind.INTEGER, width=3, allow_na=True),
    _code("preapproval", Preapproval),
    _code("action_taken", ActionTaken),
    FieldSpec("action_date", FieldKind.DATE),
    _text("msa", 5),
    _text("state", 2),
    _text("county", 3),
    _text("tract", 7),
    _code("applicant_ethnicity", Ethnicity),
    _code("co_applicant_ethnicity", Ethnicity),
    *(_code(f"applicant_race{n}", Race) for n in range(1, 6)),
    *(_code(f"co_applicant_race{n}", Race) for n in range(1, 6)),
    _code("applicant_sex", Sex),
    _code("co_applicant_sex", Sex),
    FieldSpec("applicant_income", FieldKind.INTEGER, width=4, allow_na=True),
    _code("purchaser_type", PurchaserType),
    *(_code(f"denial_reason{n}", DenialReason) for n in range(1, 4)),
    FieldSpec("rate_spread", FieldKind.DECIMAL, width=5, signed=True, allow_na=True),
    _code("hoepa_status", HoepaStatus),
    _code("lien_status", LienStatus),
    *(_code(f"aus{n}", UnderwritingSystem) for n in range(1, 6)),
    *(_code(f"aus_result{n}", UnderwritingResult) for n in range(1, 6)),
)

LAYOUTS = {TS_RECORD_TAG: TS_LAYOUT, LAR_RECORD_TAG: LAR_LAYOUT}

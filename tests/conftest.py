from __future__ import annotations

import pytest

from hmda_checker.infrastructure.parsing.layout import LAR_LAYOUT, TS_LAYOUT

TS_DEFAULTS = {
    "record_id": "1",
    "respondent_id": "0123456789",
    "agency_code": "9",
    "timestamp": "201801171330",
    "activity_year": "2017",
    "tax_id": "99-1234567",
    "total_lines": "3",
    "respondent_name": "MIKES SMALL BANK",
    "respondent_address": "1234 Main St",
    "respondent_city": "Sacramento",
    "respondent_state": "CA",
    "respondent_zip": "99999-9999",
    "parent_name": "MIKES SMALL INC",
    "parent_address": "1234 Kearney St",
    "parent_city": "San Francisco",
    "parent_state": "CA",
    "parent_zip": "99999-1234",
    "contact_name": "Mrs. Krabappel",
    "contact_phone": "916-999-9999",
    "contact_fax": "999-753-9999",
    "contact_email": "krabappel@gmail.com",
}

LAR_DEFAULTS = {
    "record_id": "2",
    "respondent_id": "0123456789",
    "agency_code": "9",
    "loan_id": "ABCDEFGHIJKLMNOPQRSTUVWXY",
    "application_date": "20170117",
    "loan_type": "1",
    "property_type": "1",
    "loan_purpose": "1",
    "occupancy": "1",
    "loan_amount": "200",
    "loan_term": "360",
    "preapproval": "2",
    "action_taken": "1",
    "action_date": "20170301",
    "msa": "06920",
    "state": "06",
    "county": "034",
    "tract": "0100.01",
    "applicant_ethnicity": "2",
    "co_applicant_ethnicity": "5",
    "applicant_race1": "5",
    "co_applicant_race1": "8",
    "applicant_sex": "1",
    "co_applicant_sex": "5",
    "applicant_income": "95",
    "purchaser_type": "0",
    "rate_spread": "NA",
    "hoepa_status": "2",
    "lien_status": "1",
    "aus1": "1",
    "aus_result1": "1",
}


def build_ts_line(**overrides: str) -> str:
    values = {**TS_DEFAULTS, **overrides}
    return "|".join(values.get(spec.name, "") for spec in TS_LAYOUT)


def build_lar_line(loan_id: str = "LOAN0000000000000000001", **overrides: str) -> str:
    values = {**LAR_DEFAULTS, "loan_id": loan_id, **overrides}
    return "|".join(values.get(spec.name, "") for spec in LAR_LAYOUT)


@pytest.fixture
def ts_line():
    return build_ts_line


@pytest.fixture
def lar_line():
    return build_lar_line


@pytest.fixture
def filing_lines():
    """A filing whose transmittal sheet declares ``count`` records, with ``count`` clean LARs."""

    def build(count: int = 3, declared: int | None = None) -> list[str]:
        total = count if declared is None else declared
        lars = [build_lar_line(f"LOAN{n:021d}") for n in range(1, count + 1)]
        return [build_ts_line(total_lines=str(total)), *lars]

    return build

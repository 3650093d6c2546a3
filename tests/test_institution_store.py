from pathlib import Path
import json

from hmda_checker.domain.codes import AgencyCode
from hmda_checker.infrastructure.storage.institution_store import JsonInstitutionRepository, load_institutions


def write_registry(path: Path) -> Path:
    path.write_text(
        json.dumps(
            [
                {
                    "respondent_id": "0123456789",
                    "agency_code": "9",
                    "activity_year": 2016,
                    "tax_id": "99-1234567",
                },
                {
                    "respondent_id": "0123456789",
                    "agency_code": 9,
                    "activity_year": 2017,
                    "tax_id": "99-1234567",
                    "lei": "b90yweoxrh4wgzv8lm47",
                    "email_domains": ["Bank.com"],
                },
                {"respondent_id": "broken"},
            ]
        ),
        encoding="utf-8",
    )
    return path


def test_load_skips_malformed_entries(tmp_path: Path):
    profiles = load_institutions(write_registry(tmp_path / "institutions.json"))

    assert len(profiles) == 2
    assert profiles[1].agency_code is AgencyCode.CFPB
    assert profiles[1].lei == "B90YWEOXRH4WGZV8LM47"
    assert profiles[1].email_domains == ("bank.com",)


def test_find_by_year_or_latest(tmp_path: Path):
    repository = JsonInstitutionRepository.from_path(write_registry(tmp_path / "institutions.json"))

    assert repository.find("0123456789", 2016).activity_year == 2016
    assert repository.find("0123456789").activity_year == 2017
    assert repository.find("0123456789", 2015) is None
    assert repository.find("missing") is None

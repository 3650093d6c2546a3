"""JSON registry of institution profiles."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from hmda_checker.domain.codes import AgencyCode
from hmda_checker.domain.models import InstitutionProfile
from hmda_checker.domain.repositories import InstitutionRepository

logger = logging.getLogger(__name__)


def _to_profile(raw: dict[str, Any]) -> InstitutionProfile:
    return InstitutionProfile(
        respondent_id=str(raw["respondent_id"]).strip(),
        agency_code=AgencyCode(str(raw["agency_code"]).strip()),
        activity_year=int(raw["activity_year"]),
        tax_id=str(raw["tax_id"]).strip(),
        respondent_name=str(raw.get("respondent_name", "")).strip(),
        lei=str(raw.get("lei", "")).strip().upper(),
        email_domains=tuple(str(domain).strip().lower() for domain in raw.get("email_domains", ())),
    )


def load_institutions(path: Path) -> list[InstitutionProfile]:
    """Read profiles from a JSON list; malformed entries are skipped with a warning."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("institutions", [])
    profiles: list[InstitutionProfile] = []
    for index, raw in enumerate(data):
        try:
            profiles.append(_to_profile(raw))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping institution entry %d in %s: %s", index, path, exc)
    return profiles


class JsonInstitutionRepository(InstitutionRepository):
    def __init__(self, profiles: Iterable[InstitutionProfile]) -> None:
        self._profiles = tuple(profiles)

    @classmethod
    def from_path(cls, path: Path) -> JsonInstitutionRepository:
        return cls(load_institutions(path))

    def find(self, respondent_id: str, activity_year: int | None = None) -> InstitutionProfile | None:
        matches = [
            profile
            for profile in self._profiles
            if profile.respondent_id == respondent_id
            and (activity_year is None or profile.activity_year == activity_year)
        ]
        if not matches:
            return None
        return max(matches, key=lambda profile: profile.activity_year)

"""Central configuration for the HMDA checker package."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from hmda_checker.infrastructure.storage.threshold_store import load_thresholds

BASE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_CHUNK_SIZE = 1000


@dataclass(slots=True, frozen=True)
class Settings:
    delimiter: str
    encoding: str
    max_workers: int
    chunk_size: int
    filing_year: int | None
    macro_thresholds: dict[str, float]


SETTINGS = Settings(
    delimiter="|",
    encoding="utf-8",
    max_workers=min(4, os.cpu_count() or 1),
    chunk_size=DEFAULT_CHUNK_SIZE,
    filing_year=None,
    macro_thresholds=load_thresholds(),
)

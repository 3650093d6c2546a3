"""Storage helpers for macro edit thresholds."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from hmda_checker.domain.rules.filing import DEFAULT_THRESHOLDS

logger = logging.getLogger(__name__)

DEFAULT_PATH = Path(__file__).resolve().parents[2] / "macro_thresholds.json"


def _normalize_thresholds(raw: dict[str, Any] | None) -> dict[str, float]:
    normalized: dict[str, float] = {}
    if not isinstance(raw, dict):
        return normalized
    for key, value in raw.items():
        if key is None or value is None:
            continue
        key_str = str(key).strip().upper()
        if key_str not in DEFAULT_THRESHOLDS:
            logger.warning("Ignoring threshold for unknown macro edit %r", key)
            continue
        try:
            limit = float(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric threshold %r for %s", value, key_str)
            continue
        if limit < 0:
            logger.warning("Ignoring negative threshold %r for %s", value, key_str)
            continue
        normalized[key_str] = limit
    return normalized


def load_thresholds(path: Path | None = None) -> dict[str, float]:
    override_path = path or DEFAULT_PATH
    thresholds = dict(DEFAULT_THRESHOLDS)
    if not override_path.exists():
        return thresholds
    try:
        data = json.loads(override_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        logger.warning("Threshold file %s is not valid JSON; using defaults", override_path)
        return thresholds
    thresholds.update(_normalize_thresholds(data))
    return thresholds


def save_thresholds(thresholds: dict[str, float], path: Path | None = None) -> dict[str, float]:
    override_path = path or DEFAULT_PATH
    normalized = _normalize_thresholds(thresholds)
    override_path.write_text(
        json.dumps(normalized, ensure_ascii=False, indent=2, sort_keys=True),
        encoding="utf-8",
    )
    merged = dict(DEFAULT_THRESHOLDS)
    merged.update(normalized)
    return merged

"""ZIP boundary pass-through.

Geometry is never inspected: features are returned as received, with rank and
color hints added to ``properties`` from whatever the session cache holds.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

import pandas as pd

from core.classifier import rank_color, rank_series
from core.constants import ZIP_BOUNDARIES_PATH
from core.grade_table import grade_color
from core.parsing import normalize_zip
from services.cache import KeyValueCache, income_latest_key
from services.models import CrimeGrade, YearlyRecord
from services.ranking_service import cached_crime_grade
from services.transport import Success, Transport


logger = logging.getLogger("zipscope.boundaries")


class BoundaryLoadError(RuntimeError):
    pass


def fetch_zip_boundaries(transport: Transport, state: str) -> dict[str, Any]:
    state = state.strip().upper()
    outcome = transport.get(f"{ZIP_BOUNDARIES_PATH}/{state}")
    if not isinstance(outcome, Success):
        raise BoundaryLoadError(f"ZIP boundaries unavailable for {state}: {outcome!r}")
    payload = outcome.payload
    if not isinstance(payload, dict) or not isinstance(payload.get("features"), list):
        raise BoundaryLoadError(f"ZIP boundaries for {state} are not a FeatureCollection")
    logger.info("boundaries_loaded state=%s features=%s", state, len(payload["features"]))
    return payload


def _feature_zip(feature: Any) -> str | None:
    if not isinstance(feature, dict):
        return None
    props = feature.get("properties")
    if not isinstance(props, dict):
        return None
    return normalize_zip(props.get("zip"))


def annotate_boundaries(collection: dict[str, Any], cache: KeyValueCache) -> dict[str, Any]:
    """Return a copy of ``collection`` with rank / color properties per ZIP."""

    out = copy.deepcopy(collection)
    features = [f for f in out.get("features", []) if isinstance(f, dict)]
    zips = [_feature_zip(f) for f in features]

    incomes: list[float | None] = []
    grades: list[str | None] = []
    for zip_code in zips:
        record = cache.get(income_latest_key(zip_code)) if zip_code else None
        crime = cached_crime_grade(zip_code, cache) if zip_code else None
        incomes.append(record.value if isinstance(record, YearlyRecord) else None)
        grades.append(crime.grade if isinstance(crime, CrimeGrade) else None)

    labels = rank_series(pd.Series(incomes, dtype=object), grades)
    for feature, income, grade, label in zip(features, incomes, grades, labels.tolist()):
        props = feature.setdefault("properties", {})
        if not isinstance(props, dict):
            continue
        props["median_income"] = income
        props["crime_grade"] = grade
        props["rank"] = label
        props["color"] = rank_color(label)
        props["grade_color"] = grade_color(grade) if grade is not None else None
    return out

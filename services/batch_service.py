"""Batch preload of per-state aggregates into the session cache.

One request per resource, no walk and no retry: if the call does not succeed
the whole load fails with ``BatchLoadError``. Malformed items inside a
successful payload are skipped.
"""

from __future__ import annotations

import logging
from typing import Any

from core.constants import CRIME_GRADES_PATH, INCOME_LATEST_PATH, INCOME_VALUE_FIELD
from core.grade_table import grade_color, grade_score, normalize_grade
from core.parsing import normalize_zip, parse_amount
from services.cache import KeyValueCache, crime_grade_key, income_latest_key
from services.models import CrimeGrade, PreloadSummary, YearlyRecord
from services.transport import Outcome, Success, Transport


logger = logging.getLogger("zipscope.batch")


class BatchLoadError(RuntimeError):
    def __init__(self, resource: str, outcome: Outcome):
        super().__init__(f"[{resource}] batch load failed: {outcome!r}")
        self.resource = resource
        self.outcome = outcome


def _items(payload: Any) -> list[dict[str, Any]]:
    if isinstance(payload, dict):
        payload = payload.get("data", [])
    if not isinstance(payload, list):
        return []
    return [item for item in payload if isinstance(item, dict)]


def _zip_of(item: dict[str, Any]) -> str | None:
    return normalize_zip(item.get("zip", item.get("zipCode")))


def _get_items(transport: Transport, path: str, resource: str) -> list[dict[str, Any]]:
    outcome = transport.get(path)
    if not isinstance(outcome, Success):
        logger.warning("batch_failed resource=%s path=%s outcome=%r", resource, path, outcome)
        raise BatchLoadError(resource, outcome)
    return _items(outcome.payload)


def load_latest_incomes(transport: Transport, state: str, cache: KeyValueCache) -> int:
    """Cache ``income:latest:<zip>`` for every ZIP of a state. Returns the count."""

    loaded = 0
    for item in _get_items(transport, f"{INCOME_LATEST_PATH}/{state}", "income"):
        zip_code = _zip_of(item)
        try:
            year = int(item["year"])
        except (KeyError, TypeError, ValueError):
            year = None
        if zip_code is None or year is None:
            logger.debug("batch_skip resource=income item=%r", item)
            continue
        value = parse_amount(item.get(INCOME_VALUE_FIELD, item.get("value")))
        cache.set(income_latest_key(zip_code), YearlyRecord(year=year, value=value, payload=item))
        loaded += 1
    logger.info("batch_loaded resource=income state=%s count=%s", state, loaded)
    return loaded


def load_crime_grades(transport: Transport, state: str, cache: KeyValueCache) -> int:
    loaded = 0
    for item in _get_items(transport, f"{CRIME_GRADES_PATH}/{state}", "crime"):
        zip_code = _zip_of(item)
        raw_grade = item.get("grade")
        if zip_code is None or not isinstance(raw_grade, str) or not raw_grade.strip():
            logger.debug("batch_skip resource=crime item=%r", item)
            continue
        grade = normalize_grade(raw_grade) or raw_grade.strip()
        record = CrimeGrade(
            zip_code=zip_code,
            grade=grade,
            score=grade_score(grade),
            color=grade_color(grade),
        )
        cache.set(crime_grade_key(zip_code), record)
        loaded += 1
    logger.info("batch_loaded resource=crime state=%s count=%s", state, loaded)
    return loaded


def preload_state(transport: Transport, state: str, cache: KeyValueCache) -> PreloadSummary:
    state = state.strip().upper()
    incomes = load_latest_incomes(transport, state, cache)
    grades = load_crime_grades(transport, state, cache)
    return PreloadSummary(state=state, incomes_loaded=incomes, grades_loaded=grades)

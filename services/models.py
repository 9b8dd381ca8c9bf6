from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from core.constants import (
    DEFAULT_LOOKBACK_YEARS,
    DEFAULT_MAX_SAMPLES,
    MAX_LOOKBACK_YEARS,
    MAX_SAMPLES_LIMIT,
)


@dataclass(frozen=True)
class YearlyRecord:
    year: int
    value: float | None
    # Raw payload returned by the source for that year (chart tooltips, debugging).
    payload: dict[str, Any] | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class SeriesResult:
    """Outcome of one backward walk.

    ``records`` keeps acceptance order, i.e. most recent year first. Use
    ``chronological()`` for charting.
    """

    entity_key: str
    records: tuple[YearlyRecord, ...]
    start_year: int
    min_year: int
    max_samples: int
    requests_issued: int = 0
    stopped_on_quota: bool = False

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records

    def chronological(self) -> list[YearlyRecord]:
        return sorted(self.records, key=lambda r: r.year)

    def latest(self) -> YearlyRecord | None:
        if not self.records:
            return None
        return max(self.records, key=lambda r: r.year)

    def years(self) -> list[int]:
        return [r.year for r in self.records]


@dataclass(frozen=True)
class FetchConfig:
    max_samples: int = DEFAULT_MAX_SAMPLES
    lookback_years: int = DEFAULT_LOOKBACK_YEARS
    # Pin the starting year (reproducible runs); None means the current calendar year.
    current_year: int | None = None
    max_samples_limit: int = MAX_SAMPLES_LIMIT
    max_lookback_years: int = MAX_LOOKBACK_YEARS


@dataclass(frozen=True)
class CrimeGrade:
    zip_code: str
    grade: str
    score: int
    color: str


@dataclass(frozen=True)
class ZipRanking:
    zip_code: str
    latest_year: int | None
    median_income: float | None
    crime_grade: str | None
    rank: str
    rank_color: str
    grade_color: str | None
    source: str  # "cache" | "series" | "none"


@dataclass(frozen=True)
class PreloadSummary:
    state: str
    incomes_loaded: int
    grades_loaded: int

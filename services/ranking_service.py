"""High level entry points used by the API (no HTTP concerns here).

Reads go through the session cache first; the backward walk only runs on a
miss.
"""

from __future__ import annotations

from core.classifier import has_grade, rank, rank_color
from core.grade_table import grade_color
from services.cache import (
    INCOME_SERIES_NS,
    KeyValueCache,
    NullCache,
    crime_grade_key,
    income_latest_key,
    make_cache_key,
)
from services.income_fetcher import HistoricalSeriesFetcher
from services.models import CrimeGrade, SeriesResult, YearlyRecord, ZipRanking


SERIES_CACHE_VERSION = "1"


def _remember_latest(cache: KeyValueCache, zip_code: str, record: YearlyRecord | None) -> None:
    """Store ``record`` as the latest income unless a newer year is already cached."""

    if record is None:
        return
    key = income_latest_key(zip_code)
    cached = cache.get(key)
    if isinstance(cached, YearlyRecord) and cached.year >= record.year:
        return
    cache.set(key, record)


def income_series(
    zip_code: str,
    *,
    fetcher: HistoricalSeriesFetcher,
    cache: KeyValueCache | None = None,
    current_year: int | None = None,
    max_samples: int | None = None,
    min_year: int | None = None,
) -> SeriesResult:
    cache = NullCache() if cache is None else cache
    start, samples, floor = fetcher.resolve_bounds(current_year, max_samples, min_year)
    key = make_cache_key(
        namespace=INCOME_SERIES_NS,
        version=SERIES_CACHE_VERSION,
        payload={"zip": zip_code, "start": start, "max_samples": samples, "min_year": floor},
    )
    cached = cache.get(key)
    if isinstance(cached, SeriesResult):
        return cached

    series = fetcher.fetch(zip_code, current_year=start, max_samples=samples, min_year=floor)
    # A quota-truncated walk is not a complete batch; retry it on the next call.
    if not series.stopped_on_quota:
        cache.set(key, series)
    # Only a walk from the default start year says what "latest" is.
    if start == fetcher.start_year():
        _remember_latest(cache, series.entity_key, series.latest())
    return series


def latest_income(
    zip_code: str,
    *,
    fetcher: HistoricalSeriesFetcher,
    cache: KeyValueCache | None = None,
) -> tuple[YearlyRecord | None, str]:
    """Latest yearly record for a ZIP and where it came from ("cache" | "series" | "none")."""

    cache = NullCache() if cache is None else cache
    cached = cache.get(income_latest_key(zip_code))
    if isinstance(cached, YearlyRecord):
        return cached, "cache"
    latest = income_series(zip_code, fetcher=fetcher, cache=cache).latest()
    if latest is None:
        return None, "none"
    return latest, "series"


def cached_crime_grade(zip_code: str, cache: KeyValueCache | None = None) -> CrimeGrade | None:
    if cache is None:
        return None
    cached = cache.get(crime_grade_key(zip_code))
    return cached if isinstance(cached, CrimeGrade) else None


def rank_zip(
    zip_code: str,
    *,
    fetcher: HistoricalSeriesFetcher,
    cache: KeyValueCache | None = None,
    grade: str | None = None,
) -> ZipRanking:
    """Rank one ZIP. An explicit ``grade`` wins over the cached crime grade."""

    zip_code = zip_code.strip()
    record, source = latest_income(zip_code, fetcher=fetcher, cache=cache)
    if not has_grade(grade):
        crime = cached_crime_grade(zip_code, cache)
        grade = crime.grade if crime is not None else None

    value = record.value if record is not None else None
    label = rank(value, grade)
    return ZipRanking(
        zip_code=zip_code,
        latest_year=record.year if record is not None else None,
        median_income=value,
        crime_grade=grade,
        rank=label,
        rank_color=rank_color(label),
        grade_color=grade_color(grade) if grade is not None else None,
        source=source,
    )

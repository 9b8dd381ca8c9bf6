"""Historical median income retrieval (backward walk).

Starting at the current (or pinned) year, one request per year is issued for
a ZIP code, walking towards the past until either ``max_samples`` records were
collected or the cursor went below ``min_year``.

Per-year outcomes:

- not found / transport failure: the year is skipped, the walk goes on;
- success: a ``YearlyRecord`` is accepted;
- quota exceeded (403 / 429): the walk stops and returns what it has, since
  every remaining year would most likely fail the same way.

Per-year failures are never raised. Only caller misuse is
(``InvalidConfigurationError``).
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Iterable, Iterator

from core.constants import INCOME_PATH, INCOME_VALUE_FIELD
from core.parsing import parse_amount
from services.models import FetchConfig, SeriesResult, YearlyRecord
from services.transport import Failure, NotFound, QuotaExceeded, Success, Transport


logger = logging.getLogger("zipscope.fetcher")

ValueExtractor = Callable[[Any], "float | None"]


class InvalidConfigurationError(ValueError):
    """Raised when a walk is requested with unusable bounds."""


def extract_median_income(payload: Any) -> float | None:
    """Read ``data.totalHouseholdMedianIncome`` from a yearly payload.

    A payload that is not a JSON object is malformed (ValueError). A missing or
    non-numeric income is kept as ``None``.
    """

    if not isinstance(payload, dict):
        raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
    data = payload.get("data")
    if not isinstance(data, dict):
        return None
    return parse_amount(data.get(INCOME_VALUE_FIELD))


@dataclass
class _WalkStats:
    requests: int = 0
    stopped_on_quota: bool = False


class HistoricalSeriesFetcher:
    def __init__(
        self,
        transport: Transport,
        *,
        config: FetchConfig | None = None,
        income_path: str = INCOME_PATH,
        value_extractor: ValueExtractor = extract_median_income,
        today: Callable[[], date] = date.today,
    ):
        self._transport = transport
        self.config = config or FetchConfig()
        self._income_path = income_path.rstrip("/")
        self._extract = value_extractor
        self._today = today

    def year_path(self, entity_key: str, year: int) -> str:
        return f"{self._income_path}/{int(year)}/{entity_key}"

    def start_year(self, current_year: int | None = None) -> int:
        """Year the walk starts from: explicit, else pinned in config, else today."""

        if current_year is None:
            current_year = self.config.current_year
        if current_year is None:
            current_year = self._today().year
        return int(current_year)

    def resolve_bounds(
        self,
        current_year: int | None = None,
        max_samples: int | None = None,
        min_year: int | None = None,
    ) -> tuple[int, int, int]:
        """Return ``(start_year, max_samples, min_year)`` after applying defaults."""

        current_year = self.start_year(current_year)
        if max_samples is None:
            max_samples = self.config.max_samples
        if min_year is None:
            min_year = int(current_year) - int(self.config.lookback_years)

        start, samples, floor = int(current_year), int(max_samples), int(min_year)
        if samples <= 0:
            raise InvalidConfigurationError(f"max_samples must be > 0, got {samples}")
        if samples > self.config.max_samples_limit:
            raise InvalidConfigurationError(
                f"max_samples must be <= {self.config.max_samples_limit}, got {samples}"
            )
        if floor > start:
            raise InvalidConfigurationError(f"min_year ({floor}) is after current_year ({start})")
        if start - floor > self.config.max_lookback_years:
            raise InvalidConfigurationError(
                f"min_year ({floor}) is more than {self.config.max_lookback_years} years before {start}"
            )
        return start, samples, floor

    @staticmethod
    def _normalize_key(entity_key: Any) -> str:
        key = str(entity_key).strip() if entity_key is not None else ""
        if not key:
            raise InvalidConfigurationError("entity key must be a non-empty ZIP code")
        return key

    def _walk(self, key: str, start: int, samples: int, floor: int, stats: _WalkStats) -> Iterator[YearlyRecord]:
        accepted = 0
        year = start
        while accepted < samples and year >= floor:
            outcome = self._transport.get(self.year_path(key, year))
            stats.requests += 1

            if isinstance(outcome, QuotaExceeded):
                stats.stopped_on_quota = True
                logger.warning(
                    "quota_exceeded zip=%s year=%s status=%s collected=%s",
                    key,
                    year,
                    outcome.status_code,
                    accepted,
                )
                return

            if isinstance(outcome, Success):
                try:
                    value = self._extract(outcome.payload)
                except (TypeError, ValueError, KeyError) as exc:
                    logger.debug("skip zip=%s year=%s reason=malformed error=%s", key, year, exc)
                else:
                    payload = outcome.payload if isinstance(outcome.payload, dict) else None
                    accepted += 1
                    yield YearlyRecord(year=year, value=value, payload=payload)
            elif isinstance(outcome, NotFound):
                logger.debug("skip zip=%s year=%s reason=%s", key, year, outcome.reason)
            elif isinstance(outcome, Failure):
                logger.debug("skip zip=%s year=%s reason=failure error=%s", key, year, outcome.error)
            else:
                raise TypeError(f"Unexpected transport outcome: {outcome!r}")

            year -= 1

    def iter_records(
        self,
        entity_key: str,
        current_year: int | None = None,
        max_samples: int | None = None,
        min_year: int | None = None,
    ) -> Iterator[YearlyRecord]:
        """Lazily yield accepted records, most recent first.

        Bounds are validated now, requests are only issued while iterating.
        """

        key = self._normalize_key(entity_key)
        start, samples, floor = self.resolve_bounds(current_year, max_samples, min_year)
        return self._walk(key, start, samples, floor, _WalkStats())

    def fetch(
        self,
        entity_key: str,
        current_year: int | None = None,
        max_samples: int | None = None,
        min_year: int | None = None,
    ) -> SeriesResult:
        key = self._normalize_key(entity_key)
        start, samples, floor = self.resolve_bounds(current_year, max_samples, min_year)
        stats = _WalkStats()
        # Materialized in one go: an interrupted walk yields no partial result.
        records = tuple(self._walk(key, start, samples, floor, stats))

        logger.info(
            "income_walk zip=%s start=%s min_year=%s records=%s requests=%s quota_stop=%s",
            key,
            start,
            floor,
            len(records),
            stats.requests,
            stats.stopped_on_quota,
        )
        return SeriesResult(
            entity_key=key,
            records=records,
            start_year=start,
            min_year=floor,
            max_samples=samples,
            requests_issued=stats.requests,
            stopped_on_quota=stats.stopped_on_quota,
        )

    def fetch_many(
        self,
        entity_keys: Iterable[str],
        *,
        max_workers: int = 4,
        current_year: int | None = None,
        max_samples: int | None = None,
        min_year: int | None = None,
    ) -> dict[str, SeriesResult]:
        """Run independent walks concurrently, one per distinct ZIP code."""

        keys = list(dict.fromkeys(self._normalize_key(k) for k in entity_keys))
        # Fail fast on bad bounds before any thread starts.
        self.resolve_bounds(current_year, max_samples, min_year)
        if not keys:
            return {}

        results: dict[str, SeriesResult] = {}
        with ThreadPoolExecutor(max_workers=max(1, min(int(max_workers), len(keys)))) as executor:
            future_to_key = {
                executor.submit(self.fetch, key, current_year, max_samples, min_year): key
                for key in keys
            }
            for future in as_completed(future_to_key):
                results[future_to_key[future]] = future.result()
        return results

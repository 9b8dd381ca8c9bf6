"""Runtime settings read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from core.constants import (
    DEFAULT_LOOKBACK_YEARS,
    DEFAULT_MAX_SAMPLES,
    MAX_LOOKBACK_YEARS,
    MAX_SAMPLES_LIMIT,
)
from services.models import FetchConfig


ENV_PREFIX = "ZIPSCOPE_"


def _env_int(env: Mapping[str, str], name: str, default: int | None) -> int | None:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from None


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    api_base_url: str = "http://localhost:8080"
    http_timeout_s: float = 10.0
    max_samples: int = DEFAULT_MAX_SAMPLES
    lookback_years: int = DEFAULT_LOOKBACK_YEARS
    current_year: int | None = None
    max_samples_limit: int = MAX_SAMPLES_LIMIT
    max_lookback_years: int = MAX_LOOKBACK_YEARS
    cache_ttl_s: float = 3600.0
    cache_max_items: int = 4096

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if env is None else env
        defaults = cls()
        return cls(
            api_base_url=env.get(ENV_PREFIX + "API_BASE_URL") or defaults.api_base_url,
            http_timeout_s=_env_float(env, "HTTP_TIMEOUT_S", defaults.http_timeout_s),
            max_samples=_env_int(env, "MAX_SAMPLES", defaults.max_samples),
            lookback_years=_env_int(env, "LOOKBACK_YEARS", defaults.lookback_years),
            current_year=_env_int(env, "CURRENT_YEAR", None),
            max_samples_limit=_env_int(env, "MAX_SAMPLES_LIMIT", defaults.max_samples_limit),
            max_lookback_years=_env_int(env, "MAX_LOOKBACK_YEARS", defaults.max_lookback_years),
            cache_ttl_s=_env_float(env, "CACHE_TTL_S", defaults.cache_ttl_s),
            cache_max_items=_env_int(env, "CACHE_MAX_ITEMS", defaults.cache_max_items),
        )

    def fetch_config(self) -> FetchConfig:
        return FetchConfig(
            max_samples=self.max_samples,
            lookback_years=self.lookback_years,
            current_year=self.current_year,
            max_samples_limit=self.max_samples_limit,
            max_lookback_years=self.max_lookback_years,
        )

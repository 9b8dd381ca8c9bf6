"""Session caches (in-memory only, nothing is persisted).

Populated once (batch preload or first lookup) and then read by the ranking
service. Keys are namespaced: ``income:latest:<zip>``, ``crime:grade:<zip>``,
``income:series:<digest>``.
"""

from __future__ import annotations

import hashlib
import json
from collections import OrderedDict
from dataclasses import dataclass
from threading import RLock
from time import monotonic
from typing import Any, Protocol


INCOME_LATEST_NS = "income:latest"
INCOME_SERIES_NS = "income:series"
CRIME_GRADE_NS = "crime:grade"


class KeyValueCache(Protocol):
    """Minimal cache interface shared by the services."""

    def get(self, key: str) -> Any | None:  # noqa: D401
        ...

    def set(self, key: str, value: Any, *, ttl_s: float | None = None) -> None:
        ...


def stable_json_dumps(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def make_key(namespace: str, *parts: str) -> str:
    safe = ":".join(str(p).replace(":", "_") for p in parts)
    return f"{namespace}:{safe}"


def make_cache_key(*, namespace: str, version: str, payload: Any) -> str:
    """Stable key for a JSON-dumpable payload (dict key order does not matter)."""

    blob = stable_json_dumps({"version": version, "payload": payload})
    digest = hashlib.sha256(blob.encode("utf-8")).hexdigest()
    return make_key(namespace, digest)


def income_latest_key(zip_code: str) -> str:
    return make_key(INCOME_LATEST_NS, zip_code)


def crime_grade_key(zip_code: str) -> str:
    return make_key(CRIME_GRADE_NS, zip_code)


@dataclass(frozen=True)
class CacheStats:
    hits: int
    misses: int
    size: int


class NullCache:
    """No-op cache."""

    def get(self, key: str) -> Any | None:
        return None

    def set(self, key: str, value: Any, *, ttl_s: float | None = None) -> None:
        return


class InMemoryCache:
    """Thread-safe LRU cache with optional per-entry TTL."""

    def __init__(self, max_items: int = 256, *, default_ttl_s: float | None = None):
        self._max_items = int(max_items)
        self._default_ttl_s = default_ttl_s
        self._lock = RLock()
        # key -> (expires_at_monotonic | None, value)
        self._data: OrderedDict[str, tuple[float | None, Any]] = OrderedDict()
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(hits=self._hits, misses=self._misses, size=len(self._data))

    def get(self, key: str) -> Any | None:
        now = monotonic()
        with self._lock:
            item = self._data.get(key)
            if item is None:
                self._misses += 1
                return None
            expires_at, value = item
            if expires_at is not None and now >= expires_at:
                self._data.pop(key, None)
                self._misses += 1
                return None
            # Refresh LRU order.
            self._data.move_to_end(key)
            self._hits += 1
            return value

    def set(self, key: str, value: Any, *, ttl_s: float | None = None) -> None:
        if ttl_s is None:
            ttl_s = self._default_ttl_s
        expires_at = None if ttl_s is None else monotonic() + float(ttl_s)
        with self._lock:
            self._data.pop(key, None)
            self._data[key] = (expires_at, value)
            while len(self._data) > self._max_items:
                self._data.popitem(last=False)

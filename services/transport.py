"""Transport boundary towards the income / crime data API.

Every call is reduced to one of four outcomes so callers never deal with
HTTP details:

- ``Success``: 2xx with a JSON payload;
- ``NotFound``: 404, or a 2xx payload flagged ``{"status": "not_found"}``;
- ``QuotaExceeded``: 403 / 429 (forbidden or rate limited);
- ``Failure``: anything else (timeouts, network errors, 5xx, malformed JSON).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, Union

import httpx


logger = logging.getLogger("zipscope.transport")

QUOTA_STATUS_CODES = frozenset({403, 429})
NOT_FOUND_STATUS = "not_found"


@dataclass(frozen=True)
class Success:
    payload: Any


@dataclass(frozen=True)
class NotFound:
    reason: str = NOT_FOUND_STATUS


@dataclass(frozen=True)
class QuotaExceeded:
    status_code: int


@dataclass(frozen=True)
class Failure:
    error: str


Outcome = Union[Success, NotFound, QuotaExceeded, Failure]


class Transport(Protocol):
    def get(self, path: str) -> Outcome:  # noqa: D401
        ...


def _is_not_found_payload(payload: Any) -> bool:
    return isinstance(payload, dict) and payload.get("status") == NOT_FOUND_STATUS


def classify_response(response: httpx.Response) -> Outcome:
    status = response.status_code
    if status in QUOTA_STATUS_CODES:
        return QuotaExceeded(status_code=status)
    if status == 404:
        return NotFound(reason="http_404")
    if not response.is_success:
        return Failure(error=f"HTTP {status}")

    try:
        payload = response.json()
    except ValueError:
        return Failure(error=f"malformed payload (HTTP {status})")

    if _is_not_found_payload(payload):
        return NotFound()
    return Success(payload=payload)


class HttpxTransport:
    """``Transport`` on top of a synchronous ``httpx.Client``.

    The per-request timeout lives here; a timeout surfaces as ``Failure``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=float(timeout_s),
            headers={"Accept": "application/json", "User-Agent": "zipscope/1.0"},
            transport=transport,
        )

    def get(self, path: str) -> Outcome:
        try:
            response = self._client.get(path)
        except httpx.TimeoutException as exc:
            logger.debug("timeout path=%s error=%s", path, exc)
            return Failure(error=f"timeout: {exc}")
        except httpx.HTTPError as exc:
            logger.debug("transport_error path=%s error=%s", path, exc)
            return Failure(error=str(exc) or exc.__class__.__name__)
        return classify_response(response)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

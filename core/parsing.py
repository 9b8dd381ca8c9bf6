"""Parsing helpers for values coming back from the data API."""

from __future__ import annotations

import math
import re
from typing import Any


_ZIP_RE = re.compile(r"^(\d{5})(?:-\d{4})?$")
_AMOUNT_STRIP_RE = re.compile(r"[$,\s]")


def parse_amount(raw: Any) -> float | None:
    """Parse a monetary amount ("$82,500", 82500, "82500.0"). None when unusable."""

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = _AMOUNT_STRIP_RE.sub("", raw)
        if not raw:
            return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def normalize_zip(raw: Any) -> str | None:
    """Return the 5-digit ZIP code, or None.

    Integers are zero-padded (7501 -> "07501"); ZIP+4 keeps its first 5 digits.
    """

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        text = str(raw).zfill(5)
    else:
        text = str(raw).strip()
    match = _ZIP_RE.match(text)
    return match.group(1) if match else None

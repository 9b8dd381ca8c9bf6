"""JSON serialization helpers.

Converts backend objects (dataclasses, pandas, numpy scalars, Plotly figures)
into plain JSON structures for the API.
"""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from typing import Any

import numpy as np
import pandas as pd

from services.models import SeriesResult


# Raw source payloads stay server-side.
_SKIPPED_FIELDS = frozenset({"payload"})


def _is_nan(value: Any) -> bool:
    try:
        return bool(value != value)
    except Exception:
        return False


def df_to_records(df: pd.DataFrame, *, limit: int | None = None) -> list[dict[str, Any]]:
    if df is None:
        return []
    if limit is not None:
        df = df.head(int(limit))
    # Cast to object first so numeric columns can hold None.
    safe = df.copy().astype(object)
    safe = safe.where(pd.notna(safe), None)
    return [{str(k): to_jsonable(v) for k, v in row.items()} for row in safe.to_dict(orient="records")]


def to_jsonable(obj: Any) -> Any:
    """Return only dict/list/str/int/float/bool/None."""

    if obj is None:
        return None

    if isinstance(obj, np.generic):
        return to_jsonable(obj.item())

    if isinstance(obj, (str, int, bool)):
        return obj
    if isinstance(obj, float):
        return None if _is_nan(obj) else obj

    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [to_jsonable(v) for v in obj]
    if isinstance(obj, np.ndarray):
        return [to_jsonable(v) for v in obj.tolist()]

    if isinstance(obj, pd.DataFrame):
        return df_to_records(obj)
    if isinstance(obj, pd.Series):
        return [to_jsonable(v) for v in obj.astype(object).where(pd.notna(obj), None).tolist()]

    # Plotly figures (or anything exposing to_plotly_json)
    to_plotly_json = getattr(obj, "to_plotly_json", None)
    if callable(to_plotly_json):
        return to_jsonable(to_plotly_json())

    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in fields(obj) if f.name not in _SKIPPED_FIELDS}

    return str(obj)


def series_payload(series: SeriesResult) -> dict[str, Any]:
    """API view of a walk: records in chronological order plus walk metadata."""

    return {
        "zip_code": series.entity_key,
        "records": [{"year": r.year, "value": to_jsonable(r.value)} for r in series.chronological()],
        "start_year": series.start_year,
        "min_year": series.min_year,
        "max_samples": series.max_samples,
        "requests_issued": series.requests_issued,
        "stopped_on_quota": series.stopped_on_quota,
    }

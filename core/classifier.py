"""ZIP ranking from median income and an optional crime grade.

Two modes, selected by whether a grade is available:

- single signal: income thresholds (120k / 90k / 60k / 30k, inclusive);
- combined: ``income / 10_000 + grade_score * 5`` against 25 / 15 / 5 / 0
  (exclusive).

A missing income always yields "N/A", whatever the grade. All functions here
are pure and do no I/O.
"""

from __future__ import annotations

from typing import Any, Iterable, Literal

import numpy as np
import pandas as pd

from core.constants import (
    GRADE_WEIGHT,
    INCOME_RANK_THRESHOLDS,
    INCOME_SCALE,
    NEUTRAL_COLOR,
    RANK_COLORS,
    WEIGHTED_RANK_THRESHOLDS,
)
from core.grade_table import grade_score


RankLabel = Literal["S", "A", "B", "C", "D", "N/A"]

NOT_AVAILABLE: RankLabel = "N/A"
LOWEST_RANK: RankLabel = "D"

# S > A > B > C > D. "N/A" is deliberately absent: it is not an ordinal value.
RANK_ORDER: dict[str, int] = {"S": 4, "A": 3, "B": 2, "C": 1, "D": 0}


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def has_grade(grade: Any) -> bool:
    """True when a grade signal is present (combined mode).

    Blank strings count as absent. Unknown non-blank grades still select the
    combined mode, with a neutral score.
    """

    return isinstance(grade, str) and bool(grade.strip())


def weighted_score(monetary_value: float, grade: str | None) -> float:
    return float(monetary_value) / INCOME_SCALE + grade_score(grade) * GRADE_WEIGHT


def _rank_single(value: float) -> RankLabel:
    for threshold, label in INCOME_RANK_THRESHOLDS:
        if value >= threshold:
            return label  # type: ignore[return-value]
    return LOWEST_RANK


def _rank_weighted(score: float) -> RankLabel:
    for threshold, label in WEIGHTED_RANK_THRESHOLDS:
        if score > threshold:
            return label  # type: ignore[return-value]
    return LOWEST_RANK


def rank(monetary_value: float | None, grade: str | None = None) -> RankLabel:
    """Rank a ZIP code from its latest median income and optional crime grade."""

    if _is_missing(monetary_value):
        return NOT_AVAILABLE
    value = float(monetary_value)  # type: ignore[arg-type]
    if has_grade(grade):
        return _rank_weighted(weighted_score(value, grade))
    return _rank_single(value)


def rank_color(label: str | None) -> str:
    if label is None:
        return NEUTRAL_COLOR
    return RANK_COLORS.get(label, NEUTRAL_COLOR)


def rank_order(label: str | None) -> int | None:
    """Ordinal position of a rank label (higher is better), None for N/A/unknown."""

    if label is None:
        return None
    return RANK_ORDER.get(label)


def rank_series(values: Iterable[Any], grades: Iterable[Any] | None = None) -> pd.Series:
    """Vectorized ``rank`` over aligned sequences.

    Element-wise identical to ``rank(value, grade)``. When ``values`` is a
    Series, its index is kept (and ``grades`` is aligned on it if it is a
    Series too).
    """

    if isinstance(values, pd.Series):
        index = values.index
        numeric = pd.to_numeric(values, errors="coerce")
    else:
        raw = list(values)
        index = pd.RangeIndex(len(raw))
        numeric = pd.to_numeric(pd.Series(raw, index=index, dtype=object), errors="coerce")
    vals = numeric.to_numpy(dtype=float)

    single = np.select(
        [vals >= threshold for threshold, _label in INCOME_RANK_THRESHOLDS],
        [label for _threshold, label in INCOME_RANK_THRESHOLDS],
        default=LOWEST_RANK,
    ).astype(object)

    if grades is None:
        out = single
    else:
        if isinstance(grades, pd.Series):
            grade_s = grades.reindex(index)
        else:
            grade_s = pd.Series(list(grades), index=index, dtype=object)
        present = grade_s.map(has_grade).to_numpy(dtype=bool)
        scores = grade_s.map(lambda g: grade_score(g) if has_grade(g) else 0).to_numpy(dtype=float)
        with np.errstate(invalid="ignore"):
            weighted = vals / INCOME_SCALE + scores * GRADE_WEIGHT
        combined = np.select(
            [weighted > threshold for threshold, _label in WEIGHTED_RANK_THRESHOLDS],
            [label for _threshold, label in WEIGHTED_RANK_THRESHOLDS],
            default=LOWEST_RANK,
        ).astype(object)
        out = np.where(present, combined, single).astype(object)

    out[np.isnan(vals)] = NOT_AVAILABLE
    return pd.Series(out, index=index, dtype=object)

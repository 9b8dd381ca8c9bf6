"""Crime letter grade table.

Maps the 13 letter grades published by the crime-grade source to an integer
score (used by the combined ranking) and to a display color.
"""

from __future__ import annotations

from core.constants import NEUTRAL_COLOR


# Best grade first. Scores step down by one and land on [-2, 10].
GRADE_SCORES: dict[str, int] = {
    "A+": 10,
    "A": 9,
    "A-": 8,
    "B+": 7,
    "B": 6,
    "B-": 5,
    "C+": 4,
    "C": 3,
    "C-": 2,
    "D+": 1,
    "D": 0,
    "D-": -1,
    "F": -2,
}

DEFAULT_GRADE_SCORE = 0

# Red -> green gradient, same key order as GRADE_SCORES.
GRADE_COLORS: dict[str, str] = {
    "A+": "#00A651",
    "A": "#2DB84C",
    "A-": "#5AC947",
    "B+": "#87D942",
    "B": "#B4E83D",
    "B-": "#D8F036",
    "C+": "#FFF200",
    "C": "#FFD200",
    "C-": "#FFB000",
    "D+": "#FF8C00",
    "D": "#FF6A00",
    "D-": "#F44336",
    "F": "#D32F2F",
}


def normalize_grade(grade: object) -> str | None:
    """Return the canonical grade key, or None when grade is not a known grade."""

    if not isinstance(grade, str):
        return None
    key = grade.strip().upper()
    return key if key in GRADE_SCORES else None


def grade_score(grade: object) -> int:
    """Integer projection of a letter grade. Unknown grades score 0."""

    key = normalize_grade(grade)
    if key is None:
        return DEFAULT_GRADE_SCORE
    return GRADE_SCORES[key]


def grade_color(grade: object) -> str:
    key = normalize_grade(grade)
    if key is None:
        return NEUTRAL_COLOR
    return GRADE_COLORS[key]

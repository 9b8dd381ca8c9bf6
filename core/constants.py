"""Shared constants (no third-party dependencies).

This module centralizes the thresholds and default values used across core/
and services/. Keep it stdlib-only.
"""

from __future__ import annotations


# Backward walk defaults. The lower calendar bound is derived from the start
# year and DEFAULT_LOOKBACK_YEARS, never hardcoded in the walk itself.
DEFAULT_MAX_SAMPLES: int = 3
DEFAULT_LOOKBACK_YEARS: int = 6

# Hard caps on one walk, whatever the caller asks for.
MAX_SAMPLES_LIMIT: int = 10
MAX_LOOKBACK_YEARS: int = 10

# Source endpoints (relative to the data API base URL).
INCOME_PATH: str = "/median-income"
INCOME_LATEST_PATH: str = "/median-income/latest"
CRIME_GRADES_PATH: str = "/crime-grade"
ZIP_BOUNDARIES_PATH: str = "/geo-zipcode"

# Field holding the median household income inside a yearly payload.
INCOME_VALUE_FIELD: str = "totalHouseholdMedianIncome"

# Single-signal thresholds (USD, inclusive lower bounds), best rank first.
INCOME_RANK_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (120_000.0, "S"),
    (90_000.0, "A"),
    (60_000.0, "B"),
    (30_000.0, "C"),
)

# Combined-signal thresholds (exclusive lower bounds on the weighted score).
WEIGHTED_RANK_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (25.0, "S"),
    (15.0, "A"),
    (5.0, "B"),
    (0.0, "C"),
)

# weighted = income / INCOME_SCALE + grade_score * GRADE_WEIGHT
INCOME_SCALE: float = 10_000.0
GRADE_WEIGHT: float = 5.0

# Display colors.
RANK_COLORS: dict[str, str] = {
    "S": "#006400",  # dark green
    "A": "#228B22",  # green
    "B": "#90EE90",  # light green
    "C": "#FFA500",  # orange
    "D": "#FF0000",  # red
}
NEUTRAL_COLOR: str = "#808080"

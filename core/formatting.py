from __future__ import annotations

"""Display formatting helpers shared by the chart and the API payloads."""

import math


def format_usd(value: float | None) -> str:
    """Format an amount like the chart axis does (e.g. $82,500 / '-')."""

    if value is None:
        return "-"
    if isinstance(value, float) and math.isnan(value):
        return "-"
    return f"${value:,.0f}"

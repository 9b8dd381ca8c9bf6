"""Income history chart payloads (Plotly figure + tabular form)."""

from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go

from core.formatting import format_usd
from services.models import SeriesResult


LINE_COLOR = "#007bff"
FILL_COLOR = "rgba(0, 123, 255, 0.2)"


def series_to_frame(series: SeriesResult) -> pd.DataFrame:
    """Chronological DataFrame with columns ``year`` / ``median_income``."""

    records = series.chronological()
    df = pd.DataFrame(
        {
            "year": [r.year for r in records],
            "median_income": [r.value for r in records],
        },
        columns=["year", "median_income"],
    )
    df["year"] = df["year"].astype("int64")
    df["median_income"] = pd.to_numeric(df["median_income"], errors="coerce").astype("float64")
    return df


def build_income_figure(series: SeriesResult) -> go.Figure:
    """Line chart of the median income, oldest year on the left.

    Missing incomes are drawn at 0 so every fetched year keeps its tick.
    """

    df = series_to_frame(series)
    fig = go.Figure()
    if df.empty:
        fig.update_layout(title=dict(text=f"ZIP: {series.entity_key} (no data)"))
        return fig

    incomes = df["median_income"].fillna(0.0)
    fig.add_trace(
        go.Scatter(
            x=df["year"],
            y=incomes,
            mode="lines+markers",
            name="Median Income",
            line=dict(color=LINE_COLOR),
            fill="tozeroy",
            fillcolor=FILL_COLOR,
            customdata=[format_usd(v) for v in df["median_income"].tolist()],
            hovertemplate="%{x}: %{customdata}<extra></extra>",
        )
    )
    fig.update_layout(
        title=dict(text=f"ZIP: {series.entity_key}", font=dict(size=16)),
        xaxis=dict(tickmode="array", tickvals=df["year"].tolist(), tickfont=dict(size=12, color="#555")),
        yaxis=dict(tickprefix="$", tickformat=",.0f", tickfont=dict(size=12, color="#555")),
        legend=dict(font=dict(size=14, color="#333")),
        margin=dict(t=40, b=40),
    )
    return fig

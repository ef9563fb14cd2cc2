from __future__ import annotations

from typing import Sequence

import plotly.graph_objects as go

from .models import MonthlyReading

CHART_TYPES = ("bar", "line", "area")

GENERATION_COLOR = "#10B981"
CUMULATIVE_COLOR = "#6366F1"
AVERAGE_COLOR = "#3B82F6"


def build_monthly_chart(
    monthly: Sequence[MonthlyReading],
    chart_type: str = "bar",
    *,
    show_cumulative: bool = True,
) -> go.Figure:
    """Monthly generation as bar, line or area with an average reference line."""

    if chart_type not in CHART_TYPES:
        raise ValueError(f"chart_type must be one of {', '.join(CHART_TYPES)}")

    labels = [item.short_label for item in monthly]
    values = [round(item.monthly_kwh, 2) for item in monthly]

    fig = go.Figure()
    name = "Monthly Generation (kWh)"
    if chart_type == "bar":
        fig.add_trace(go.Bar(x=labels, y=values, name=name, marker_color=GENERATION_COLOR, opacity=0.8))
    else:
        fig.add_trace(
            go.Scatter(
                x=labels,
                y=values,
                name=name,
                mode="lines+markers",
                line={"color": GENERATION_COLOR, "width": 2},
                fill="tozeroy" if chart_type == "area" else None,
            )
        )

    if show_cumulative and monthly:
        fig.add_trace(
            go.Scatter(
                x=labels,
                y=[round(item.cumulative_kwh, 2) for item in monthly],
                name="Cumulative (kWh)",
                mode="lines",
                line={"color": CUMULATIVE_COLOR, "dash": "dot"},
                yaxis="y2",
            )
        )

    if values:
        average = sum(item.monthly_kwh for item in monthly) / len(monthly)
        fig.add_hline(
            y=average,
            line_dash="dash",
            line_color=AVERAGE_COLOR,
            annotation_text=f"Avg: {average:.2f} kWh",
            annotation_position="top right",
        )

    fig.update_layout(
        template="plotly_white",
        margin={"l": 40, "r": 40, "t": 30, "b": 60},
        xaxis={"title": "Month", "tickangle": -45},
        yaxis={"title": "Monthly Energy (kWh)"},
        yaxis2={"title": "Cumulative (kWh)", "overlaying": "y", "side": "right", "showgrid": False},
        legend={"orientation": "h", "y": -0.3},
    )
    return fig

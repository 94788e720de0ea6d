"""
Plotly figure builders for the dashboard.

Each builder takes data that is already computed (points, records, matrix,
counts) and only lays it out; nothing here fetches or aggregates data.
"""

from typing import Dict, List, Sequence

import numpy as np
import plotly.graph_objects as go

from riskviz_dashboard.colors import (
    DARK_GREEN,
    DARK_RED,
    LEVEL_COLORS,
    LIGHT_YELLOW,
    RISK_COLOR_SCALE,
    get_score_color,
)
from riskviz_dashboard.helpers import record_score

BACKGROUND = "#0E1117"
FOREGROUND = "#F8F9FA"


def _dark_layout(fig: go.Figure, title: str) -> go.Figure:
    fig.update_layout(
        title=title,
        paper_bgcolor=BACKGROUND,
        plot_bgcolor=BACKGROUND,
        font=dict(color=FOREGROUND),
        margin=dict(l=60, r=60, t=60, b=60),
    )
    return fig


def scatter_plot(points: Sequence[Dict], title: str = "Data Points") -> go.Figure:
    """x/y scatter; points carrying a score are coloured on the risk scale."""
    xs = [p.get("x", 0) for p in points]
    ys = [p.get("y", 0) for p in points]
    colors = [get_score_color(p["score"]) if "score" in p else LEVEL_COLORS["moderate"] for p in points]
    fig = go.Figure(
        data=go.Scatter(
            x=xs,
            y=ys,
            mode="markers",
            marker=dict(size=10, color=colors, line=dict(width=1, color=FOREGROUND)),
            hovertemplate="<b>x:</b> %{x}<br><b>y:</b> %{y}<extra></extra>",
        )
    )
    return _dark_layout(fig, title)


def dot_plot(records: Sequence[Dict], category_field: str = "metric_name", title: str = "Risk Scores") -> go.Figure:
    """One dot per record: category on the y axis, score (1-9) on the x axis."""
    scores = [record_score(r) for r in records]
    categories = [str(r.get(category_field) or "Unknown") for r in records]
    fig = go.Figure(
        data=go.Scatter(
            x=scores,
            y=categories,
            mode="markers",
            marker=dict(size=14, color=[get_score_color(s) for s in scores], line=dict(width=1, color=FOREGROUND)),
            hovertemplate="<b>%{y}</b><br>Score: %{x:.1f}<extra></extra>",
        )
    )
    fig.update_xaxes(range=[0.5, 9.5], dtick=1, title="Risk score")
    return _dark_layout(fig, title)


def risk_heatmap(matrix: Dict[str, np.ndarray], title: str = "Organizational Risk Matrix") -> go.Figure:
    """Likelihood x severity heatmap of record counts; hover shows the average score."""
    counts = np.asarray(matrix["count"])
    averages = np.asarray(matrix["avg_score"])
    labels = [1, 2, 3, 4, 5]
    # rows are likelihood, plotted on x; transpose so severity runs up the y axis
    z = counts.T
    fig = go.Figure(
        data=go.Heatmap(
            z=z,
            x=labels,
            y=labels,
            customdata=averages.T,
            colorscale=[[0.0, DARK_GREEN], [0.5, LIGHT_YELLOW], [1.0, DARK_RED]],
            hovertemplate=(
                "<b>Likelihood:</b> %{x}<br><b>Severity:</b> %{y}<br>"
                "<b>Risks:</b> %{z}<br><b>Avg score:</b> %{customdata:.1f}<extra></extra>"
            ),
            showscale=True,
            zmin=0,
            zmax=float(z.max()) if z.size and z.max() > 0 else 1,
            colorbar_title="Risk Count",
        )
    )
    fig.update_xaxes(title="Likelihood")
    fig.update_yaxes(title="Severity")
    return _dark_layout(fig, title)


def risk_distribution(counts: Dict[str, int], title: str = "Risk Distribution") -> go.Figure:
    """Bar chart of low / moderate / high counts."""
    levels = ["low", "moderate", "high"]
    fig = go.Figure(
        data=go.Bar(
            x=[level.capitalize() for level in levels],
            y=[counts.get(level, 0) for level in levels],
            marker_color=[LEVEL_COLORS[level] for level in levels],
        )
    )
    return _dark_layout(fig, title)


def color_scale_legend() -> List[Dict]:
    """Legend rows (value, colour, label) for rendering next to charts."""
    return [dict(entry) for entry in RISK_COLOR_SCALE]

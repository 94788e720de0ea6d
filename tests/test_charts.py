"""
Tests for Plotly figure builders.
"""

from __future__ import annotations

import numpy as np

from riskviz_dashboard.charts import color_scale_legend, dot_plot, risk_distribution, risk_heatmap, scatter_plot


def test_scatter_plot_uses_score_colors():
    fig = scatter_plot([{"x": 1, "y": 2, "score": 9}, {"x": 3, "y": 4}])
    trace = fig.data[0]
    assert list(trace.x) == [1, 3]
    assert list(trace.y) == [2, 4]
    assert trace.marker.color[0] == "#8B0000"


def test_dot_plot_one_marker_per_record():
    records = [
        {"metric_name": "Flooding", "risk_score": 7.5},
        {"metric_name": "Drought", "risk_score": 2},
        {"risk_score": 5},
    ]
    trace = dot_plot(records).data[0]
    assert list(trace.y) == ["Flooding", "Drought", "Unknown"]
    assert list(trace.marker.color) == ["#FFA07A", "#90EE90", "#FEF7CD"]


def test_risk_heatmap_transposes_matrix():
    count = np.zeros((5, 5), dtype=int)
    count[4, 0] = 3  # likelihood 5, severity 1
    fig = risk_heatmap({"count": count, "avg_score": np.zeros((5, 5))})
    z = np.asarray(fig.data[0].z)
    assert z[0, 4] == 3
    assert fig.data[0].zmax == 3


def test_risk_heatmap_empty_matrix():
    fig = risk_heatmap({"count": np.zeros((5, 5), dtype=int), "avg_score": np.zeros((5, 5))})
    assert fig.data[0].zmax == 1


def test_risk_distribution_bars():
    trace = risk_distribution({"low": 2, "high": 1}).data[0]
    assert list(trace.x) == ["Low", "Moderate", "High"]
    assert list(trace.y) == [2, 0, 1]


def test_color_scale_legend_is_a_copy():
    legend = color_scale_legend()
    legend[0]["color"] = "#000000"
    assert color_scale_legend()[0]["color"] == "#006400"

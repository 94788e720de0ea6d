"""
Tests for risk score calculations, level counting and the risk matrix.
"""

from __future__ import annotations

import math

import pandas as pd
import pytest

from riskviz_dashboard.helpers import (
    build_matrix,
    calculate_risk_score,
    count_risk_levels,
    generate_risk_observations,
    generate_rp_recommendation,
    get_risk_level,
    hotspot_observation,
    interpret_rp_score,
    safe_parse_float,
)


def test_safe_parse_float():
    assert safe_parse_float("3.5") == 3.5
    assert safe_parse_float(" 2 ") == 2.0
    assert safe_parse_float(None) == 0.0
    assert safe_parse_float("") == 0.0
    assert safe_parse_float("abc") == 0.0
    assert safe_parse_float(math.nan) == 0.0
    assert safe_parse_float("inf") == 0.0
    assert safe_parse_float("-Infinity") == 0.0
    assert safe_parse_float(float("-inf")) == 0.0
    assert safe_parse_float("1e999") == 0.0
    assert safe_parse_float(10**400) == 0.0
    assert safe_parse_float(7) == 7.0


@pytest.mark.parametrize(
    "likelihood, severity, expected",
    [
        (5, 5, 9.0),
        (1, 1, 1.0),
        (3, 3, 3.2),
        (10, 10, 9.0),
        (0, 0, 1.0),
        ("4", "5", 7.2),
    ],
)
def test_calculate_risk_score(likelihood, severity, expected):
    assert calculate_risk_score(likelihood, severity) == pytest.approx(expected)


def test_risk_levels_and_labels():
    assert get_risk_level(3.9) == "low"
    assert get_risk_level(4) == "moderate"
    assert get_risk_level(6.99) == "moderate"
    assert get_risk_level(7) == "high"
    assert interpret_rp_score(8) == "High Risk"
    assert interpret_rp_score("5") == "Moderate Risk"
    assert interpret_rp_score(None) == "Low Risk"
    assert generate_rp_recommendation(7).startswith("Immediate action required")
    assert generate_rp_recommendation(1).startswith("Continue standard monitoring")


def test_count_risk_levels_uses_score_aliases_and_skips_zero():
    records = [
        {"risk_score": 8},
        {"Risk Score": "5"},
        {"RP Score": 2},
        {"score": 0},
        {"other": 1},
    ]
    assert count_risk_levels(records) == {"low": 1, "moderate": 1, "high": 1}


def test_build_matrix_counts_and_averages():
    df = pd.DataFrame([
        {"likelihood": 5, "severity": 5, "risk_score": 9},
        {"likelihood": 5, "severity": 5, "risk_score": 7},
        {"likelihood": 1, "severity": 2, "risk_score": 2},
        {"likelihood": 0, "severity": 3, "risk_score": 5},
        {"likelihood": 7, "severity": 1, "risk_score": 4},
    ])
    matrix = build_matrix(df)
    assert matrix["count"].shape == (5, 5)
    assert matrix["count"][4, 4] == 2
    assert matrix["avg_score"][4, 4] == pytest.approx(8.0)
    assert matrix["count"][0, 1] == 1
    # likelihood above 5 is clamped into the last row
    assert matrix["count"][4, 0] == 1
    assert matrix["count"].sum() == 4
    assert matrix["avg_score"][2, 2] == 0


def test_build_matrix_empty_frame():
    matrix = build_matrix(pd.DataFrame(columns=["likelihood", "severity", "risk_score"]))
    assert matrix["count"].sum() == 0


def test_risk_observations():
    texts = [o["text"] for o in generate_risk_observations(8, 6, 5, 1)]
    assert any(t.startswith("High risk perception") for t in texts)
    assert any(t.startswith("Improving risk perception") for t in texts)
    assert any(t.startswith("Outlier") for t in texts)

    texts = [o["text"] for o in generate_risk_observations(2, 4, 2.5, 0)]
    assert any(t.startswith("Low risk perception") for t in texts)
    assert any("2.0 point drop" in t for t in texts)


def test_hotspot_observation():
    assert hotspot_observation("Market", 7.456, 2) == "Market shows high risk perception (7.46) in Phase 2."

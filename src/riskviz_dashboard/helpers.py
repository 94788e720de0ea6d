import math
from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

SCORE_FIELDS = ("score", "risk_score", "Risk Score", "RP Score", "Score")

RECOMMENDATIONS = {
    "high": "Immediate action required. Allocate resources to address this high-risk area.",
    "moderate": "Monitor closely and develop mitigation strategies for this moderate-risk area.",
    "low": "Continue standard monitoring for this low-risk area.",
}


def safe_parse_float(value) -> float:
    """Parse a number leniently; None, blanks, NaN, infinities and junk become 0.0."""
    if value is None:
        return 0.0
    try:
        parsed = float(str(value).strip()) if not isinstance(value, (int, float)) else float(value)
    except (ValueError, OverflowError):
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


def calculate_risk_score(likelihood, severity) -> float:
    """Scale likelihood x severity (each clamped to 1-5) onto the 1-9 risk scale."""
    l = min(5.0, max(1.0, safe_parse_float(likelihood)))
    s = min(5.0, max(1.0, safe_parse_float(severity)))
    score = l * s / (25 / 9)
    return min(9.0, max(1.0, round(score, 1)))


def get_risk_level(score) -> str:
    value = safe_parse_float(score)
    if value >= 7:
        return "high"
    if value >= 4:
        return "moderate"
    return "low"


def interpret_rp_score(score) -> str:
    """Risk perception label: 'Low Risk', 'Moderate Risk' or 'High Risk'."""
    return f"{get_risk_level(score).capitalize()} Risk"


def generate_rp_recommendation(score) -> str:
    return RECOMMENDATIONS[get_risk_level(score)]


def record_score(record: Dict) -> float:
    """First score-like field present in a record, parsed."""
    for key in SCORE_FIELDS:
        if record.get(key) is not None:
            return safe_parse_float(record[key])
    return 0.0


def count_risk_levels(records: Iterable[Dict]) -> Dict[str, int]:
    """Count records per risk level; non-positive scores are ignored."""
    counts = {"low": 0, "moderate": 0, "high": 0}
    for record in records:
        score = record_score(record)
        if score > 0:
            counts[get_risk_level(score)] += 1
    return counts


def build_matrix(df: pd.DataFrame) -> Dict[str, np.ndarray]:
    """
    Build the 5x5 likelihood/severity risk matrix.

    Returns ``count`` and ``avg_score`` arrays indexed [likelihood - 1, severity - 1].
    Rows without a positive likelihood and severity are skipped.
    """
    count = np.zeros((5, 5), dtype=int)
    total = np.zeros((5, 5), dtype=float)
    for _, row in df.iterrows():
        row = row.to_dict()
        likelihood = safe_parse_float(row.get("likelihood", row.get("Likelihood")))
        severity = safe_parse_float(row.get("severity", row.get("Severity")))
        if likelihood <= 0 or severity <= 0:
            continue
        li = min(max(int(likelihood), 1), 5) - 1
        si = min(max(int(severity), 1), 5) - 1
        count[li, si] += 1
        total[li, si] += record_score(row)
    avg_score = np.divide(total, count, out=np.zeros_like(total), where=count > 0)
    return {"count": count, "avg_score": avg_score}


def generate_risk_observations(
    risk_score,
    previous_score,
    overall_average,
    standard_deviation,
) -> List[Dict[str, str]]:
    """Observations for a group/location score compared with its past and the population."""
    score = safe_parse_float(risk_score)
    previous = safe_parse_float(previous_score)
    average = safe_parse_float(overall_average)
    std = safe_parse_float(standard_deviation)
    observations = []

    if score > 7:
        observations.append({
            "text": "High risk perception: Reinforce strategies in this group/location",
            "importance": "high",
        })
    if score < 3.0:
        observations.append({
            "text": "Low risk perception: Immediate attention required",
            "importance": "high",
        })
    if score < previous - 1.0:
        observations.append({
            "text": (
                "Declining risk perception: Investigate potential causes and adjust strategies "
                f"({previous - score:.1f} point drop)"
            ),
            "importance": "medium",
        })
    if score > previous + 0.5:
        observations.append({
            "text": f"Improving risk perception: Current strategies are working ({score - previous:.1f} point gain)",
            "importance": "low",
        })
    if std > 0 and abs(score - average) > 1.5 * std:
        direction = "above" if score > average else "below"
        observations.append({
            "text": f"Outlier: score is significantly {direction} the overall average ({average:.1f})",
            "importance": "medium",
        })
    return observations


def hotspot_observation(hotspot: str, score, phase: Optional[int]) -> str:
    value = safe_parse_float(score)
    return f"{hotspot} shows {get_risk_level(value)} risk perception ({value:.2f}) in Phase {phase}."

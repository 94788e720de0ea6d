"""
Risk Service Module

Turns uploaded CSV data into stored risk records or graph points, and derives
rule-based insights from stored risk records.
"""

import io
from typing import Dict, List

import pandas as pd

from riskviz_dashboard.db import Store
from riskviz_dashboard.errors import UploadError
from riskviz_dashboard.colors import get_score_label
from riskviz_dashboard.helpers import (
    calculate_risk_score,
    generate_risk_observations,
    generate_rp_recommendation,
    get_risk_level,
    hotspot_observation,
    interpret_rp_score,
    safe_parse_float,
)
from riskviz_dashboard.logger import get_logger
from riskviz_dashboard.models import GraphPoint, RiskRecord, UploadResult

logger = get_logger(__name__)

# Any of these headers marks an upload as risk data rather than x,y points.
RISK_DATA_MARKERS = ("Respondent Type", "Risk Score", "Metric Name")


def _first(row: Dict, *keys: str, default: str = "") -> str:
    for key in keys:
        value = row.get(key)
        if value is not None and str(value).strip() != "":
            return str(value).strip()
    return default


def read_csv_upload(content: bytes) -> pd.DataFrame:
    """Parse uploaded CSV bytes into a string-typed DataFrame."""
    if not content or not content.strip():
        raise UploadError("Uploaded file is empty")
    try:
        return pd.read_csv(io.BytesIO(content), dtype=str, keep_default_na=False)
    except (ValueError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise UploadError(f"Failed to parse file: {e}") from e


def is_risk_data(df: pd.DataFrame) -> bool:
    return any(marker in df.columns for marker in RISK_DATA_MARKERS)


def risk_record_from_row(row: Dict) -> RiskRecord:
    """
    Build a RiskRecord from a CSV row, accepting the column aliases used by
    collection spreadsheets. Blank scores are computed from likelihood and
    severity when both are present; blank levels are derived from the score.
    """
    likelihood = safe_parse_float(row.get("Likelihood"))
    severity = safe_parse_float(row.get("Severity"))
    raw_score = _first(row, "Risk Score", "RP Score")
    if raw_score:
        score = safe_parse_float(raw_score)
    elif likelihood > 0 and severity > 0:
        score = calculate_risk_score(likelihood, severity)
    else:
        score = 0.0
    return RiskRecord(
        respondent_type=_first(row, "Respondent Type"),
        hotspot=_first(row, "Hotspot"),
        ao_location=_first(row, "AO Location", "AO"),
        phase=int(safe_parse_float(_first(row, "Phase", default="1"))) or 1,
        risk_score=score,
        likelihood=likelihood,
        severity=severity,
        risk_level=_first(row, "Risk Level") or (get_risk_level(score) if score > 0 else ""),
        metric_name=_first(row, "Metric Name", "Metric"),
        timeline=_first(row, "Timeline"),
    )


def point_from_row(row: Dict) -> GraphPoint:
    return GraphPoint(x=safe_parse_float(row.get("x")), y=safe_parse_float(row.get("y")))


def ingest_csv(store: Store, content: bytes, filename: str = "") -> UploadResult:
    """
    Store every row of an uploaded CSV as risk data or graph points.

    A row that cannot be converted is logged and skipped; the remaining rows
    are still stored. Storage failures propagate.
    """
    df = read_csv_upload(content)
    rows = df.to_dict(orient="records")
    if is_risk_data(df):
        kind, table, convert = "risk_data", store.risk_data, risk_record_from_row
    else:
        kind, table, convert = "points", store.points, point_from_row
    logger.info("upload_processing", filename=filename, kind=kind, rows=len(rows))

    stored = 0
    for index, row in enumerate(rows):
        try:
            record = convert(row)
        except (ValueError, OverflowError) as e:
            logger.warning("upload_row_skipped", filename=filename, row=index, error=str(e))
            continue
        table.insert(record)
        stored += 1

    logger.info("upload_processed", filename=filename, kind=kind, rows=len(rows), stored=stored)
    return UploadResult(
        success=True,
        message=f"Data inserted successfully: {len(rows)} rows processed",
        rows=len(rows),
        kind=kind,
    )


def list_risk_data(store: Store) -> List[Dict]:
    """Stored risk records, newest first (later inserts win timestamp ties)."""
    rows = list(enumerate(store.risk_data.all()))
    rows.sort(key=lambda pair: (pair[1]["created_at"], pair[0]), reverse=True)
    return [row for _, row in rows]


def _group_averages(df: pd.DataFrame, column: str) -> pd.Series:
    values = df[df[column].astype(str).str.strip() != ""]
    return values.groupby(column)["risk_score"].mean().sort_values(ascending=False)


def generate_insights(records: List[Dict]) -> List[Dict[str, str]]:
    """
    Rule-based insights over stored risk records: highest-risk metric,
    trend across phases, respondent group spread and riskiest location.
    """
    if not records:
        return [{
            "text": "No data available for analysis. Try adjusting your filters or upload more data.",
            "importance": "medium",
        }]

    df = pd.DataFrame(records)
    df["risk_score"] = df["risk_score"].map(safe_parse_float)
    insights = []

    top = df.sort_values("risk_score", ascending=False).iloc[0]
    where = f" in {top['hotspot']}" if str(top.get("hotspot", "")).strip() else ""
    insights.append({
        "text": f"{top['metric_name'] or 'Unnamed metric'} has the highest risk score ({top['risk_score']:.1f}){where}.",
        "importance": "high" if top["risk_score"] >= 7 else "medium",
    })

    phases = df.groupby("phase")["risk_score"].mean().sort_index()
    if len(phases) > 1:
        change = phases.iloc[-1] - phases.iloc[0]
        insights.append({
            "text": (
                f"Overall risk {'increased' if change > 0 else 'decreased'} by {abs(change):.1f} "
                f"from Phase {phases.index[0]} to Phase {phases.index[-1]}."
            ),
            "importance": "high" if abs(change) > 1 else "medium",
        })

    groups = _group_averages(df, "respondent_type")
    if len(groups) > 1:
        insights.append({
            "text": (
                f"{groups.index[0]} perceives the highest risk (avg: {groups.iloc[0]:.1f}), while "
                f"{groups.index[-1]} has the lowest perception (avg: {groups.iloc[-1]:.1f})."
            ),
            "importance": "high" if groups.iloc[0] - groups.iloc[-1] > 2 else "medium",
        })

    locations = _group_averages(df, "ao_location")
    if len(locations) > 1:
        insights.append({
            "text": (
                f"{locations.index[0]} shows the highest average risk score ({locations.iloc[0]:.1f}) "
                "among all areas of operation."
            ),
            "importance": "high" if locations.iloc[0] >= 7 else "medium",
        })
    return insights


def hotspot_summaries(records: List[Dict]) -> List[Dict]:
    """
    Latest-phase average score per hotspot, riskiest first, with its label,
    recommendation and observations against the previous phase and the
    other hotspots. Records without a hotspot or a positive score are ignored.
    """
    if not records:
        return []
    df = pd.DataFrame(records)
    df["risk_score"] = df["risk_score"].map(safe_parse_float)
    df["phase"] = df["phase"].map(lambda value: int(safe_parse_float(value)) or 1)
    df = df[(df["risk_score"] > 0) & (df["hotspot"].astype(str).str.strip() != "")]
    if df.empty:
        return []

    latest = {}
    for hotspot, group in df.groupby("hotspot"):
        by_phase = group.groupby("phase")["risk_score"].mean().sort_index()
        previous = by_phase.iloc[-2] if len(by_phase) > 1 else by_phase.iloc[-1]
        latest[hotspot] = (int(by_phase.index[-1]), float(by_phase.iloc[-1]), float(previous))

    scores = pd.Series({hotspot: values[1] for hotspot, values in latest.items()})
    average = float(scores.mean())
    std = float(scores.std(ddof=0))

    summaries = []
    for hotspot in scores.sort_values(ascending=False).index:
        phase, score, previous = latest[hotspot]
        summaries.append({
            "hotspot": hotspot,
            "phase": phase,
            "score": round(score, 2),
            "label": get_score_label(score),
            "interpretation": interpret_rp_score(score),
            "recommendation": generate_rp_recommendation(score),
            "observation": hotspot_observation(hotspot, score, phase),
            "observations": generate_risk_observations(score, previous, average, std),
        })
    return summaries

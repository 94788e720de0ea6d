"""
models.py

Data models for the RiskViz API: survey responses, uploaded risk data rows
and graph points.
"""

from datetime import datetime, timezone
import math
from typing import Any, Dict, List, Optional
import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator

REQUIRED_RESPONSE_FIELDS = ("respondent_id", "location", "category", "timeline", "answers")


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def is_blank(value: Any) -> bool:
    """None, False, zero, NaN, empty/whitespace strings and empty containers count as missing."""
    if value is None or value is False:
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or value != value
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (dict, list, tuple)):
        return len(value) == 0
    return False


def has_non_finite(value: Any) -> bool:
    """True if NaN or an infinity appears anywhere inside a decoded JSON value."""
    if isinstance(value, float):
        return not math.isfinite(value)
    if isinstance(value, dict):
        return any(has_non_finite(item) for item in value.values())
    if isinstance(value, (list, tuple)):
        return any(has_non_finite(item) for item in value)
    return False


def missing_response_fields(payload: Dict[str, Any]) -> List[str]:
    """Names of required Response fields that are absent or blank in a payload."""
    return [name for name in REQUIRED_RESPONSE_FIELDS if is_blank(payload.get(name))]


class ResponseSubmission(BaseModel):
    """A survey response as submitted. ``answers`` is kept as given, in order."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    respondent_id: str
    location: str
    category: str
    timeline: str
    answers: Any

    @field_validator("answers")
    @classmethod
    def answers_must_be_json_safe(cls, value: Any) -> Any:
        if has_non_finite(value):
            raise ValueError("answers must not contain NaN or infinite numbers")
        return value


class StoredResponse(ResponseSubmission):
    """A persisted response with its generated identifier."""

    id: str = Field(default_factory=new_id)
    created_at: str = Field(default_factory=utc_now)


class RiskRecord(BaseModel):
    """One row of uploaded risk perception data."""

    id: str = Field(default_factory=new_id)
    respondent_type: str = ""
    hotspot: str = ""
    ao_location: str = ""
    phase: int = 1
    risk_score: float = 0.0
    likelihood: float = 0.0
    severity: float = 0.0
    risk_level: str = ""
    metric_name: str = ""
    timeline: str = ""
    created_at: str = Field(default_factory=utc_now)


class PointIn(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    x: Optional[float] = None
    y: Optional[float] = None


class GraphPoint(BaseModel):
    id: str = Field(default_factory=new_id)
    x: float = 0.0
    y: float = 0.0
    created_at: str = Field(default_factory=utc_now)


class UploadResult(BaseModel):
    success: bool
    message: str
    rows: int
    kind: str


class Insight(BaseModel):
    text: str
    importance: str

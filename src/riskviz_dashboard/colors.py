import math
from typing import Dict, List, Union

DARK_GREEN = "#006400"
LIGHT_GREEN = "#90EE90"
VERY_LIGHT_GREEN = "#C1FFC1"
LIGHT_YELLOW = "#FFFFE0"
SOFT_YELLOW = "#FEF7CD"
LIGHT_ORANGE = "#FFB347"
LIGHT_RED = "#FFA07A"
ORANGE_RED = "#FF6347"
DARK_RED = "#8B0000"

LIGHT_TEXT = "#ffffff"
DARK_TEXT = "#1a1a1a"

# Upper bound (exclusive) of each bucket; scores >= 9 fall through to DARK_RED.
SCORE_LADDER = [
    (1, DARK_GREEN),  # below the scale: fallback
    (2, DARK_GREEN),
    (3, LIGHT_GREEN),
    (4, VERY_LIGHT_GREEN),
    (5, LIGHT_YELLOW),
    (6, SOFT_YELLOW),
    (7, LIGHT_ORANGE),
    (8, LIGHT_RED),
    (9, ORANGE_RED),
]

RISK_COLOR_SCALE: List[Dict] = [
    {"value": 1, "color": DARK_GREEN, "label": "Low"},
    {"value": 2, "color": LIGHT_GREEN, "label": "Low"},
    {"value": 3, "color": VERY_LIGHT_GREEN, "label": "Low"},
    {"value": 4, "color": LIGHT_YELLOW, "label": "Moderate"},
    {"value": 5, "color": SOFT_YELLOW, "label": "Moderate"},
    {"value": 6, "color": LIGHT_ORANGE, "label": "Moderate"},
    {"value": 7, "color": LIGHT_RED, "label": "High"},
    {"value": 8, "color": ORANGE_RED, "label": "High"},
    {"value": 9, "color": DARK_RED, "label": "High"},
]

DARK_BACKGROUNDS = frozenset({ORANGE_RED, DARK_RED, DARK_GREEN})

LEVEL_COLORS = {
    "low": LIGHT_GREEN,
    "moderate": LIGHT_ORANGE,
    "high": ORANGE_RED,
}


def get_score_color(score) -> str:
    """Map a 1-9 risk score to its palette colour. NaN and non-numbers get the fallback."""
    try:
        value = float(score)
    except (TypeError, ValueError):
        return DARK_GREEN
    if math.isnan(value):
        return DARK_GREEN
    for upper, color in SCORE_LADDER:
        if value < upper:
            return color
    return DARK_RED


def get_text_color(background_color: str) -> str:
    """High-contrast text colour for a palette background."""
    return LIGHT_TEXT if background_color in DARK_BACKGROUNDS else DARK_TEXT


def get_risk_level_color(score_or_level: Union[float, int, str]) -> str:
    """Colour for a risk level string ('low', 'moderate'/'medium', 'high') or a numeric score."""
    if isinstance(score_or_level, str):
        level = score_or_level.lower()
        if "low" in level:
            return LEVEL_COLORS["low"]
        if "moderate" in level or "medium" in level:
            return LEVEL_COLORS["moderate"]
        if "high" in level:
            return LEVEL_COLORS["high"]
        return DARK_GREEN
    return get_score_color(score_or_level)


def get_score_label(score) -> str:
    """Legend label (Low / Moderate / High) for a score."""
    color = get_score_color(score)
    for entry in RISK_COLOR_SCALE:
        if entry["color"] == color:
            return entry["label"]
    return "Low"

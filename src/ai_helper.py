import os
from typing import Dict, List, Optional

from openai import OpenAI, OpenAIError

from riskviz_dashboard.helpers import RECOMMENDATIONS
from riskviz_dashboard.logger import get_logger

logger = get_logger(__name__)

MODEL = "gpt-4o-mini"

# --- Fallback guidance (used if AI API fails or for offline mode) ---
RISK_LEVEL_ACTIONS = {
    "high": [
        "Prioritise the hotspots with the highest scores for immediate follow-up.",
        "Reinforce risk communication with the respondent groups reporting high perception.",
        "Schedule a re-survey after mitigation to confirm the change.",
    ],
    "moderate": [
        "Track moderate areas phase over phase for upward drift.",
        "Compare respondent groups to find where perception diverges.",
        "Prepare mitigation plans for metrics close to the high threshold.",
    ],
    "low": [
        "Continue standard monitoring.",
        "Check low-perception groups for awareness gaps.",
        "Keep collection cadence so trends stay visible.",
    ],
}


def overall_level(insights: List[Dict[str, str]]) -> str:
    """'high' if any insight is high importance, 'moderate' if any medium, else 'low'."""
    importances = {i.get("importance") for i in insights}
    if "high" in importances:
        return "high"
    if "medium" in importances:
        return "moderate"
    return "low"


def offline_summary(insights: List[Dict[str, str]]) -> str:
    level = overall_level(insights)
    lines = ["⚙️ [Offline Mode]", f"Overall: {RECOMMENDATIONS[level]}", "", "Key findings:"]
    lines += [f"- {i['text']}" for i in insights]
    lines += ["", "Suggested actions:"]
    lines += [f"- {a}" for a in RISK_LEVEL_ACTIONS[level]]
    return "\n".join(lines)


def summarize_insights(insights: List[Dict[str, str]], context: str = "", client: Optional[OpenAI] = None) -> str:
    """
    Turn rule-based insights into a short narrative for the dashboard.
    Falls back to the offline summary when no API key is configured or the call fails.
    """
    if client is None:
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            return offline_summary(insights)
        client = OpenAI(api_key=api_key)

    findings = "\n".join(f"- ({i['importance']}) {i['text']}" for i in insights)
    prompt = f"""
    You are a risk analyst summarising survey-based risk perception data.

    Findings:
    {findings}

    Context: {context}

    Write three short sentences: the overall picture, the most important
    concern, and one concrete next step.
    """

    try:
        response = client.chat.completions.create(
            model=MODEL,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.4,
            max_tokens=250,
        )
        text = (response.choices[0].message.content or "").strip()
        if not text:
            return offline_summary(insights)
        return f"🧠 {text}"
    except OpenAIError as e:
        logger.warning("ai_summary_failed", error=str(e))
        return f"⚠️ AI Error: {e}\n\n" + offline_summary(insights)

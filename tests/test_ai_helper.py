"""
Tests for the insight summariser: offline fallback and a stubbed OpenAI client.
"""

from __future__ import annotations

from types import SimpleNamespace

import openai

import ai_helper

INSIGHTS = [
    {"text": "Flooding has the highest risk score (7.5) in Market.", "importance": "high"},
    {"text": "Overall risk decreased by 4.5 from Phase 1 to Phase 2.", "importance": "medium"},
]


class StubCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def test_overall_level():
    assert ai_helper.overall_level(INSIGHTS) == "high"
    assert ai_helper.overall_level([{"text": "x", "importance": "medium"}]) == "moderate"
    assert ai_helper.overall_level([]) == "low"


def test_offline_summary_without_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    summary = ai_helper.summarize_insights(INSIGHTS)
    assert summary.startswith("⚙️ [Offline Mode]")
    assert "Immediate action required" in summary
    assert "- Flooding has the highest risk score (7.5) in Market." in summary


def test_summary_from_model():
    completions = StubCompletions(content="Risk is concentrated in Market.")
    summary = ai_helper.summarize_insights(INSIGHTS, context="2 records", client=_client(completions))
    assert summary == "🧠 Risk is concentrated in Market."
    assert completions.kwargs["model"] == ai_helper.MODEL
    assert "Flooding" in completions.kwargs["messages"][0]["content"]


def test_empty_model_reply_falls_back():
    summary = ai_helper.summarize_insights(INSIGHTS, client=_client(StubCompletions(content="")))
    assert summary.startswith("⚙️ [Offline Mode]")


def test_api_error_falls_back():
    completions = StubCompletions(error=openai.OpenAIError("quota exceeded"))
    summary = ai_helper.summarize_insights(INSIGHTS, client=_client(completions))
    assert summary.startswith("⚠️ AI Error: quota exceeded")
    assert "[Offline Mode]" in summary

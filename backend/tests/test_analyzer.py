"""Tests for room analysis prompt building and response parsing."""

import asyncio
from types import SimpleNamespace

import pytest

from backend.ai.analyzer import AnalysisError, RoomAnalyzer, parse_analysis
from backend.ai.prompts import build_analysis_content

REPLY = """{
  "clutter_level": "high",
  "quick_summary": "Crowded bedroom.",
  "top_fixes": [{"title": "Clear the floor", "action": "Move shoes to a rack."}],
  "furniture_tips": [{"item": "Desk", "move": "Under the window", "reason": "More daylight"}],
  "design_prompt": "The same bedroom, tidy, soft neutral palette."
}"""


class FakeMessages:
    def __init__(self, text):
        self.text = text
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        return SimpleNamespace(content=[SimpleNamespace(text=self.text)])


class TestParseAnalysis:

    def test_plain_json(self):
        result = parse_analysis(REPLY)
        assert result.clutter_level == "high"
        assert result.furniture_tips[0].item == "Desk"

    def test_code_fenced_json(self):
        assert parse_analysis(f"```json\n{REPLY}\n```").design_prompt.startswith("The same bedroom")

    def test_not_json(self):
        with pytest.raises(AnalysisError):
            parse_analysis("I can't see a room here.")

    def test_missing_fields(self):
        with pytest.raises(AnalysisError):
            parse_analysis('{"clutter_level": "low"}')


class TestPrompt:

    def test_image_first_then_text(self):
        content = build_analysis_content("abc", "image/jpeg", "paint", "pro")
        assert content[0]["type"] == "image"
        assert content[0]["source"]["data"] == "abc"
        assert "exactly 5 top fixes" in content[1]["text"]
        assert "wall colour" in content[1]["text"]

    def test_instructions_are_fenced(self):
        content = build_analysis_content("abc", "image/png", "custom", "free", "Make it japandi")
        assert "<user_instructions>Make it japandi</user_instructions>" in content[1]["text"]
        assert "exactly 3 top fixes" in content[1]["text"]


class TestRoomAnalyzer:

    def test_calls_model(self):
        messages = FakeMessages(REPLY)
        analyzer = RoomAnalyzer(client=SimpleNamespace(messages=messages), model="test-model")
        result = asyncio.run(analyzer.analyze("abc", "image/jpeg", "restyle", "basic"))
        assert result.quick_summary == "Crowded bedroom."
        assert messages.kwargs["model"] == "test-model"
        assert messages.kwargs["messages"][0]["role"] == "user"

    def test_missing_key(self, monkeypatch):
        from backend import config
        monkeypatch.setattr(config, "ANTHROPIC_API_KEY", "")
        with pytest.raises(AnalysisError):
            asyncio.run(RoomAnalyzer().analyze("abc", "image/jpeg", "restyle", "free"))

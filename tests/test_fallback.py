"""Tests for the deterministic fallback responder (pulse/core/router/fallback.py)."""
from __future__ import annotations

import pytest

from pulse.core.router import CLARIFICATION_OPTIONS, fallback_plan, match_genre


class TestBeats:

    def test_genre_beat(self) -> None:
        plan, rule = fallback_plan("Make a boom bap beat")
        assert rule == "genre_beat"
        assert plan.actions[0] == {"action": "setBpm", "parameters": {"bpm": 90}}
        assert len(plan.actions) == 49
        assert plan.confidence == 0.85

    def test_generic_beat(self) -> None:
        plan, rule = fallback_plan("create a beat please")
        assert rule == "beat"
        assert plan.actions[0] == {"action": "setBpm", "parameters": {"bpm": 90}}
        assert len(plan.actions) == 9

    def test_beat_needs_a_verb(self) -> None:
        _, rule = fallback_plan("nice beat")
        assert rule == "clarification"

    @pytest.mark.parametrize(
        "text,pattern_id",
        [
            ("drum and bass", "drum-and-bass"),
            ("some dnb", "drum-and-bass"),
            ("lo-fi vibes", "lofi-hiphop"),
            ("uk drill", "drill-uk"),
        ],
    )
    def test_match_genre(self, text: str, pattern_id: str) -> None:
        pattern = match_genre(text)
        assert pattern is not None
        assert pattern.id == pattern_id

    def test_genre_needs_word_boundary(self) -> None:
        assert match_genre("a popular song") is None


class TestSimpleRules:

    def test_pattern(self) -> None:
        plan, rule = fallback_plan("add a kick pattern")
        assert rule == "pattern"
        assert plan.actions == [{"action": "addPattern", "parameters": {"name": "Kick Pattern", "lengthInSteps": 16}}]
        assert plan.confidence == 0.9

    def test_pattern_without_instrument(self) -> None:
        plan, _ = fallback_plan("create a pattern")
        assert plan.actions[0]["parameters"]["name"] == "New Pattern"

    def test_tempo(self) -> None:
        plan, rule = fallback_plan("set BPM to 128")
        assert rule == "tempo"
        assert plan.actions == [{"action": "setBpm", "parameters": {"bpm": 128}}]
        assert plan.confidence == 0.95

    def test_tempo_without_number(self) -> None:
        plan, _ = fallback_plan("change the tempo")
        assert plan.actions[0]["parameters"]["bpm"] == 120

    @pytest.mark.parametrize("text", ["play", "Start playback", "can you play it"])
    def test_play(self, text: str) -> None:
        plan, rule = fallback_plan(text)
        assert rule == "play"
        assert plan.confidence == 1.0

    def test_stop(self) -> None:
        assert fallback_plan("  stop  ")[1] == "stop"

    def test_note(self) -> None:
        plan, rule = fallback_plan("add a note")
        assert rule == "note"
        assert plan.actions[0]["parameters"]["patternId"] == "current"
        assert plan.confidence == 0.7


class TestClarification:

    def test_unmatched(self) -> None:
        plan, rule = fallback_plan("sing me a song")
        assert rule == "clarification"
        params = plan.actions[0]["parameters"]
        assert plan.actions[0]["action"] == "clarificationNeeded"
        assert '"sing me a song"' in params["message"]
        assert params["suggestedOptions"] == CLARIFICATION_OPTIONS
        assert plan.confidence == 0.1

    def test_deterministic(self) -> None:
        assert fallback_plan("make a trap beat") == fallback_plan("make a trap beat")

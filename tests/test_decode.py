"""Tests for model reply decoding (pulse/core/router/decode.py)."""
from __future__ import annotations

import json

from pulse.core.router import PARSE_FAILURE_REASON, decode_plan_text, strip_code_fences


class TestStripFences:

    def test_json_fence(self) -> None:
        assert strip_code_fences('```json\n{"actions": []}\n```') == '{"actions": []}'

    def test_bare_fence(self) -> None:
        assert strip_code_fences('```\n{"a": 1}```') == '{"a": 1}'

    def test_plain_text_untouched(self) -> None:
        assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'


class TestDecodePlan:

    def test_batch_shape(self) -> None:
        text = json.dumps({
            "actions": [{"action": "play", "parameters": {}}],
            "confidence": 0.8,
            "reasoning": "Starting",
            "sampleChoices": {"drums/kick": "kick_dusty", "bad": 3},
        })
        plan = decode_plan_text(text, "play")
        assert plan.actions == [{"action": "play", "parameters": {}}]
        assert plan.confidence == 0.8
        assert plan.reasoning == "Starting"
        assert plan.sample_choices == {"drums/kick": "kick_dusty"}

    def test_fenced_reply(self) -> None:
        plan = decode_plan_text('```json\n{"actions": [{"action": "stop"}]}\n```', "stop")
        assert plan.actions == [{"action": "stop"}]

    def test_legacy_single_action(self) -> None:
        plan = decode_plan_text('{"action": "setBpm", "parameters": {"bpm": 90}, "confidence": 0.7}', "90 bpm")
        assert plan.actions == [{"action": "setBpm", "parameters": {"bpm": 90}}]
        assert plan.confidence == 0.7

    def test_confidence_clamped(self) -> None:
        assert decode_plan_text('{"actions": [], "confidence": 7}', "x").confidence == 1.0
        assert decode_plan_text('{"actions": [], "confidence": -1}', "x").confidence == 0.0
        assert decode_plan_text('{"actions": [], "confidence": "high"}', "x").confidence is None

    def test_non_object_entries_become_unknown(self) -> None:
        plan = decode_plan_text('{"actions": ["play", {"action": "stop"}]}', "x")
        first = plan.actions[0]
        assert first["action"] == "unknown"
        assert first["parameters"]["reason"] == "Invalid command structure"
        assert plan.actions[1] == {"action": "stop"}

    def test_invalid_json(self) -> None:
        plan = decode_plan_text("Sure! Here's your beat.", "make a beat")
        assert len(plan.actions) == 1
        params = plan.actions[0]["parameters"]
        assert plan.actions[0]["action"] == "unknown"
        assert params == {
            "originalText": "make a beat",
            "reason": PARSE_FAILURE_REASON,
            "rawResponse": "Sure! Here's your beat.",
        }

    def test_json_array_is_not_a_plan(self) -> None:
        plan = decode_plan_text("[1, 2]", "x")
        assert plan.actions[0]["parameters"]["reason"] == PARSE_FAILURE_REASON

    def test_empty_reply(self) -> None:
        assert decode_plan_text("", "x").actions[0]["action"] == "unknown"

"""Tests for the command parser (pulse/core/commands/parser.py).

Covers: typed decode per action, parameter aliases, numeric-string
coercion, "current" entity refs, and the never-raises contract.
"""
from __future__ import annotations

import pytest

from pulse.core.commands import (
    COMMAND_MODELS,
    AddAudioSample,
    AddClip,
    AddNote,
    AddNoteSequence,
    AddPattern,
    ExplicitRef,
    LastCreatedRef,
    Play,
    SetBpm,
    SetTrackEffect,
    Unknown,
    UpdateEffect,
    parse_command,
    parse_commands,
    validate_command_structure,
)


class TestTypedDecode:
    """Well-formed entries decode into their own variant."""

    def test_set_bpm(self) -> None:
        cmd = parse_command({"action": "setBpm", "parameters": {"bpm": 128}})
        assert isinstance(cmd, SetBpm)
        assert cmd.bpm == 128

    def test_missing_parameters_means_empty(self) -> None:
        assert isinstance(parse_command({"action": "play"}), Play)
        assert isinstance(parse_command({"action": "play", "parameters": None}), Play)

    def test_add_pattern_defaults(self) -> None:
        cmd = parse_command({"action": "addPattern", "parameters": {}})
        assert isinstance(cmd, AddPattern)
        assert cmd.name == "New Pattern"
        assert cmd.length_in_steps is None

    def test_add_note_velocity_optional(self) -> None:
        cmd = parse_command({
            "action": "addNote",
            "parameters": {"patternId": "p1", "pitch": 60, "startTick": 0, "durationTick": 96},
        })
        assert isinstance(cmd, AddNote)
        assert cmd.velocity is None
        assert cmd.pattern_id == ExplicitRef(id="p1")

    def test_action_name_is_trimmed(self) -> None:
        assert isinstance(parse_command({"action": "  play ", "parameters": {}}), Play)

    def test_every_action_has_a_model(self) -> None:
        assert len(COMMAND_MODELS) >= 45
        assert "addAudioSample" in COMMAND_MODELS
        assert "applyTrackEffects" in COMMAND_MODELS

    def test_out_of_range_values_still_decode(self) -> None:
        """Range checks belong to the executors, not the parser."""
        cmd = parse_command({"action": "setBpm", "parameters": {"bpm": 5000}})
        assert isinstance(cmd, SetBpm)
        assert cmd.bpm == 5000


class TestCoercion:

    def test_numeric_strings_coerce(self) -> None:
        cmd = parse_command({"action": "setBpm", "parameters": {"bpm": "128"}})
        assert isinstance(cmd, SetBpm)
        assert cmd.bpm == 128

    def test_decimal_strings_coerce(self) -> None:
        cmd = parse_command({"action": "setBpm", "parameters": {"bpm": "87.5"}})
        assert isinstance(cmd, SetBpm)
        assert cmd.bpm == 87.5

    def test_non_numeric_string_rejected(self) -> None:
        cmd = parse_command({"action": "setBpm", "parameters": {"bpm": "fast"}})
        assert isinstance(cmd, Unknown)
        assert cmd.reason.startswith("Invalid parameters for setBpm")

    def test_missing_required_field_rejected(self) -> None:
        cmd = parse_command({"action": "setBpm", "parameters": {}})
        assert isinstance(cmd, Unknown)
        assert "setBpm" in cmd.reason

    def test_effect_parameters_must_be_numeric(self) -> None:
        cmd = parse_command({"action": "updateEffect", "parameters": {"effectId": "e1", "parameters": {"mix": 0.4}}})
        assert isinstance(cmd, UpdateEffect)
        assert cmd.parameters == {"mix": 0.4}


class TestAliases:

    def test_tempo_alias(self) -> None:
        cmd = parse_command({"action": "setBpm", "parameters": {"tempo": 100}})
        assert isinstance(cmd, SetBpm)
        assert cmd.bpm == 100

    def test_canonical_name_wins_over_alias(self) -> None:
        cmd = parse_command({"action": "setBpm", "parameters": {"bpm": 90, "tempo": 100}})
        assert cmd.bpm == 90

    def test_entity_id_alias(self) -> None:
        cmd = parse_command({"action": "setTrackEffect", "parameters": {"id": "t1", "key": "eqLow", "value": 3}})
        assert isinstance(cmd, SetTrackEffect)
        assert cmd.track_id == "t1"

    def test_sample_type_alias(self) -> None:
        cmd = parse_command({
            "action": "addAudioSample",
            "parameters": {"category": "drums", "type": "kick", "track": 2, "tick": 96},
        })
        assert isinstance(cmd, AddAudioSample)
        assert cmd.subcategory == "kick"
        assert cmd.track_index == 2
        assert cmd.start_tick == 96

    def test_note_sequence_note_aliases(self) -> None:
        cmd = parse_command({
            "action": "addNoteSequence",
            "parameters": {"patternId": "current", "notes": [{"pitch": 60, "tick": 48, "duration": 24}]},
        })
        assert isinstance(cmd, AddNoteSequence)
        assert cmd.notes[0].start_tick == 48
        assert cmd.notes[0].duration_tick == 24
        assert cmd.notes[0].velocity == 100

    def test_empty_note_sequence_rejected(self) -> None:
        cmd = parse_command({"action": "addNoteSequence", "parameters": {"patternId": "p1", "notes": []}})
        assert isinstance(cmd, Unknown)


class TestEntityRefs:
    """``"current"`` decodes once into LastCreatedRef; anything else is an explicit id."""

    @pytest.mark.parametrize("value", ["current", "CURRENT", " Current "])
    def test_current_keyword(self, value: str) -> None:
        cmd = parse_command({"action": "addClip", "parameters": {"patternId": value}})
        assert isinstance(cmd, AddClip)
        assert isinstance(cmd.pattern_id, LastCreatedRef)

    def test_explicit_id(self) -> None:
        cmd = parse_command({"action": "addClip", "parameters": {"patternId": "abc-123"}})
        assert cmd.pattern_id == ExplicitRef(id="abc-123")
        assert str(cmd.pattern_id) == "abc-123"

    def test_numeric_id_becomes_string(self) -> None:
        cmd = parse_command({"action": "selectPattern", "parameters": {"patternId": 7}})
        assert cmd.pattern_id == ExplicitRef(id="7")

    def test_empty_ref_rejected(self) -> None:
        cmd = parse_command({"action": "selectPattern", "parameters": {"patternId": "  "}})
        assert isinstance(cmd, Unknown)

    def test_add_clip_defaults(self) -> None:
        cmd = parse_command({"action": "addClip", "parameters": {"patternId": "current"}})
        assert cmd.track_index == 0
        assert cmd.start_tick == 0
        assert cmd.duration_tick is None


class TestNeverRaises:

    @pytest.mark.parametrize("raw", ["hello", 42, None, ["play"]])
    def test_non_object_input(self, raw: object) -> None:
        cmd = parse_command(raw)
        assert isinstance(cmd, Unknown)
        assert cmd.reason == "Invalid command structure"

    def test_missing_action(self) -> None:
        cmd = parse_command({"parameters": {"bpm": 120}})
        assert isinstance(cmd, Unknown)
        assert cmd.reason == "Missing action field"

    def test_parameters_not_an_object(self) -> None:
        cmd = parse_command({"action": "setBpm", "parameters": [120]})
        assert isinstance(cmd, Unknown)
        assert cmd.reason == "Invalid command structure"

    def test_unrecognized_action(self) -> None:
        cmd = parse_command({"action": "dance", "parameters": {}})
        assert isinstance(cmd, Unknown)
        assert cmd.reason == "Unrecognized action: dance"

    def test_unknown_action_passes_through(self) -> None:
        cmd = parse_command({
            "action": "unknown",
            "parameters": {"originalText": "blorp", "reason": "Failed to parse AI response", "rawResponse": "oops"},
        })
        assert isinstance(cmd, Unknown)
        assert cmd.original_text == "blorp"
        assert cmd.reason == "Failed to parse AI response"
        assert cmd.raw_response == "oops"

    def test_parse_is_side_effect_free(self) -> None:
        raw = {"action": "setBpm", "parameters": {"tempo": 100}}
        first = parse_command(raw)
        second = parse_command(raw)
        assert first == second
        assert raw == {"action": "setBpm", "parameters": {"tempo": 100}}

    def test_parse_commands_keeps_order(self) -> None:
        cmds = parse_commands([{"action": "play"}, "junk", {"action": "stop"}])
        assert [c.action for c in cmds] == ["play", "unknown", "stop"]


class TestStructureCheck:

    def test_valid(self) -> None:
        assert validate_command_structure({"action": "play", "parameters": {}}).valid

    def test_unrecognized(self) -> None:
        assert validate_command_structure({"action": "dance"}).error == "Unknown command: dance"

    def test_unknown_carries_reason(self) -> None:
        result = validate_command_structure({"action": "unknown", "parameters": {"reason": "gibberish"}})
        assert result.error == "Unknown command: gibberish"

    def test_not_an_object(self) -> None:
        assert validate_command_structure("play").error == "Command must be an object"

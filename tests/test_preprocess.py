"""Tests for batch preprocessing (pulse/core/executor/preprocess.py)."""
from __future__ import annotations

import random
from typing import Any, Optional

from pulse.core.executor import (
    ensure_tracks_exist,
    max_track_index,
    resolve_clip_conflicts,
    resolve_samples_consistently,
)
from pulse.core.project_store import ProjectStore
from pulse.core.samples import SampleLibrary
from pulse.core.validation import MAX_TRACKS


def sample(subcategory: Optional[str] = None, **params: Any) -> dict[str, Any]:
    p: dict[str, Any] = {"category": "drums", **params}
    if subcategory is not None:
        p["subcategory"] = subcategory
    return {"action": "addAudioSample", "parameters": p}


class TestSampleConsistency:

    def test_same_key_same_sample(self, library: SampleLibrary, rng: random.Random) -> None:
        choices: dict[str, str] = {}
        out = resolve_samples_consistently([sample("kick") for _ in range(6)], library, choices, rng=rng)
        ids = {e["parameters"]["sampleId"] for e in out}
        assert len(ids) == 1
        assert choices == {"drums/kick": ids.pop()}

    def test_distinct_keys_bound_separately(self, library: SampleLibrary, rng: random.Random) -> None:
        choices: dict[str, str] = {}
        resolve_samples_consistently([sample("kick"), sample("snare")], library, choices, rng=rng)
        assert set(choices) == {"drums/kick", "drums/snare"}

    def test_seeded_choice_is_reused(self, library: SampleLibrary) -> None:
        choices = {"drums/kick": "kick_dusty"}
        out = resolve_samples_consistently([sample("kick"), sample("Kick")], library, choices)
        assert [e["parameters"]["sampleId"] for e in out] == ["kick_dusty", "kick_dusty"]

    def test_explicit_sample_id_untouched(self, library: SampleLibrary) -> None:
        choices: dict[str, str] = {}
        out = resolve_samples_consistently([sample("kick", sampleId="kick_punchy")], library, choices)
        assert out[0]["parameters"]["sampleId"] == "kick_punchy"
        assert choices == {}

    def test_sample_name_lookup(self, library: SampleLibrary) -> None:
        entry = {"action": "addAudioSample", "parameters": {"sampleName": "Vinyl Snare"}}
        out = resolve_samples_consistently([entry], library, {})
        assert out[0]["parameters"]["sampleId"] == "snare_vinyl"

    def test_unresolvable_key_stays_unbound(self, library: SampleLibrary) -> None:
        choices: dict[str, str] = {}
        entry = {"action": "addAudioSample", "parameters": {"category": "vocals", "subcategory": "chop"}}
        out = resolve_samples_consistently([entry], library, choices)
        assert "sampleId" not in out[0]["parameters"]
        assert choices == {}

    def test_input_entries_not_mutated(self, library: SampleLibrary) -> None:
        entries = [sample("kick")]
        resolve_samples_consistently(entries, library, {})
        assert "sampleId" not in entries[0]["parameters"]

    def test_other_actions_ignored(self, library: SampleLibrary) -> None:
        entries = [{"action": "setBpm", "parameters": {"bpm": 90}}, "junk"]
        assert resolve_samples_consistently(entries, library, {}) == entries


class TestTrackProvisioning:

    def test_max_index_reads_aliases_and_strings(self) -> None:
        entries = [
            {"action": "addClip", "parameters": {"trackIndex": 1}},
            {"action": "addAudioSample", "parameters": {"track": "3"}},
            {"action": "play", "parameters": {}},
        ]
        assert max_track_index(entries) == 3

    def test_creates_missing_tracks(self, store: ProjectStore) -> None:
        created = ensure_tracks_exist([sample("kick", trackIndex=2)], store)
        assert created == 3
        assert store.track_count == 3

    def test_existing_tracks_are_enough(self, store: ProjectStore) -> None:
        store.add_playlist_track()
        store.add_playlist_track()
        assert ensure_tracks_exist([sample("kick", trackIndex=1)], store) == 0

    def test_no_index_referenced(self, store: ProjectStore) -> None:
        assert ensure_tracks_exist([{"action": "play"}], store) == 0
        assert store.track_count == 0

    def test_invalid_indices_ignored(self, store: ProjectStore) -> None:
        entries = [sample("kick", trackIndex=-1), sample("kick", trackIndex=1.5)]
        assert ensure_tracks_exist(entries, store) == 0

    def test_indices_beyond_track_limit_are_not_provisioned(self, store: ProjectStore) -> None:
        entries = [
            {"action": "setVolume", "parameters": {"trackIndex": 200_000, "volume": 0.5}},
            sample("kick", trackIndex=MAX_TRACKS),
        ]
        assert ensure_tracks_exist(entries, store) == 0
        assert store.track_count == 0

    def test_limit_does_not_hide_valid_indices(self, store: ProjectStore) -> None:
        entries = [sample("kick", trackIndex=2), sample("kick", trackIndex="999999")]
        assert ensure_tracks_exist(entries, store) == 3

    def test_last_index_under_limit_is_provisioned(self, store: ProjectStore) -> None:
        assert ensure_tracks_exist([sample("kick", trackIndex=MAX_TRACKS - 1)], store) == MAX_TRACKS

    def test_track_alias_only_counts_where_it_means_track_index(self) -> None:
        # On togglePlaylistTrackMute "track" is a track id, not an index.
        entries = [{"action": "togglePlaylistTrackMute", "parameters": {"track": "7"}}]
        assert max_track_index(entries) is None


class TestClipConflicts:

    def test_exact_collisions_shift_by_12(self) -> None:
        entries = [sample("kick", trackIndex=0, startTick=0) for _ in range(3)]
        out = resolve_clip_conflicts(entries)
        assert [e["parameters"]["startTick"] for e in out] == [0, 12, 24]

    def test_shift_skips_occupied_ticks(self) -> None:
        entries = [
            sample("kick", trackIndex=0, startTick=12),
            sample("kick", trackIndex=0, startTick=0),
            sample("kick", trackIndex=0, startTick=0),
        ]
        out = resolve_clip_conflicts(entries)
        assert [e["parameters"]["startTick"] for e in out] == [12, 0, 24]

    def test_other_tracks_do_not_collide(self) -> None:
        entries = [sample("kick", trackIndex=0, startTick=0), sample("snare", trackIndex=1, startTick=0)]
        out = resolve_clip_conflicts(entries)
        assert [e["parameters"]["startTick"] for e in out] == [0, 0]

    def test_overlap_is_not_a_collision(self) -> None:
        entries = [sample("kick", trackIndex=0, startTick=0), sample("kick", trackIndex=0, startTick=6)]
        out = resolve_clip_conflicts(entries)
        assert [e["parameters"]["startTick"] for e in out] == [0, 6]

    def test_add_clip_defaults_to_track_and_tick_zero(self) -> None:
        entries = [
            sample("kick", trackIndex=0, startTick=0),
            {"action": "addClip", "parameters": {"patternId": "current"}},
        ]
        out = resolve_clip_conflicts(entries)
        assert out[1]["parameters"]["startTick"] == 12

    def test_add_clip_reads_start_alias(self) -> None:
        entries = [
            {"action": "addClip", "parameters": {"patternId": "p1", "trackIndex": 0, "start": 96}},
            {"action": "addClip", "parameters": {"patternId": "p1", "trackIndex": 0, "start": 96}},
        ]
        out = resolve_clip_conflicts(entries)
        assert out[0]["parameters"].get("startTick", 96) == 96
        assert out[1]["parameters"]["startTick"] == 108

    def test_add_clip_ignores_keys_the_parser_ignores(self) -> None:
        # addClip has no "tick" alias, so both clips really land on tick 0.
        entries = [
            {"action": "addClip", "parameters": {"patternId": "p1", "trackIndex": 0, "tick": 96}},
            {"action": "addClip", "parameters": {"patternId": "p1", "trackIndex": 0, "tick": 96}},
        ]
        out = resolve_clip_conflicts(entries)
        assert out[0]["parameters"].get("startTick", 0) == 0
        assert out[1]["parameters"]["startTick"] == 12

    def test_sample_without_track_never_collides(self) -> None:
        entries = [sample("kick", startTick=0), sample("kick", startTick=0)]
        out = resolve_clip_conflicts(entries)
        assert [e["parameters"]["startTick"] for e in out] == [0, 0]

    def test_input_entries_not_mutated(self) -> None:
        entries = [sample("kick", trackIndex=0, startTick=0), sample("kick", trackIndex=0, startTick=0)]
        resolve_clip_conflicts(entries)
        assert entries[1]["parameters"]["startTick"] == 0

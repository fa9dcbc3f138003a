"""Tests for the in-memory Project Mutation API (pulse/core/project_store.py).

Covers: lookups and not-found errors, mutations per command family,
event log versioning, grouped undo, and the session registry.
"""
from __future__ import annotations

import pytest

from pulse.core.project import DEFAULT_TRACK_EFFECTS, Project
from pulse.core.project_store import (
    MAX_UNDO_GROUPS,
    EventType,
    NoProjectError,
    NotFoundError,
    ProjectStore,
    TrackIndexNotFoundError,
    clear_store,
    get_or_create_store,
)
from pulse.core.samples import SampleLibrary


class TestProjectLifecycle:

    def test_new_store_has_empty_project(self, store: ProjectStore) -> None:
        assert store.has_project
        assert store.project.patterns == []
        assert store.track_count == 0
        assert store.version == 0

    def test_no_project(self) -> None:
        empty = ProjectStore(with_project=False)
        assert not empty.has_project
        with pytest.raises(NoProjectError, match="No project loaded"):
            empty.add_pattern("Drums")

    def test_close_project(self, store: ProjectStore) -> None:
        store.close_project()
        assert not store.has_project

    def test_load_project_replaces_current(self) -> None:
        empty = ProjectStore(with_project=False)
        project = Project(name="Sketch")
        empty.load_project(project)
        assert empty.has_project
        assert empty.project is project
        assert empty.add_pattern("Drums").name == "Drums"


class TestPatternsAndNotes:

    def test_add_pattern_selects_it(self, store: ProjectStore) -> None:
        pattern = store.add_pattern("Drums", 32)
        assert store.project.selected_pattern_id == pattern.id
        assert pattern.length_in_ticks == 32 * 24
        assert store.last_created_pattern_id() == pattern.id

    def test_missing_pattern(self, store: ProjectStore) -> None:
        with pytest.raises(NotFoundError, match="Pattern not found: nope"):
            store.get_pattern("nope")

    def test_delete_pattern_removes_its_clips(self, store: ProjectStore) -> None:
        pattern = store.add_pattern("Drums")
        other = store.add_pattern("Bass")
        store.add_playlist_track()
        store.add_clip(pattern.id, 0, 0)
        store.add_clip(other.id, 0, 384)
        store.delete_pattern(pattern.id)
        assert [c.pattern_id for c in store.project.clips] == [other.id]
        assert store.project.selected_pattern_id == other.id

    def test_notes_roundtrip(self, store: ProjectStore) -> None:
        pattern = store.add_pattern("Keys")
        notes = store.add_notes(pattern.id, [(60, 0, 96, 100), (64, 96, 96, 90)])
        assert len(pattern.notes) == 2
        owner, note = store.update_note(notes[0].id, pitch=62, velocity=None)
        assert owner is pattern
        assert note.pitch == 62
        assert note.velocity == 100
        store.delete_note(notes[1].id)
        assert [n.id for n in pattern.notes] == [notes[0].id]
        assert store.clear_pattern_notes(pattern.id) == 1

    def test_open_piano_roll_focuses_panel(self, store: ProjectStore) -> None:
        pattern = store.add_pattern("Lead")
        store.open_piano_roll(pattern.id)
        assert store.project.piano_roll_pattern_id == pattern.id
        assert store.project.focused_panel == "pianoRoll"


class TestTransport:

    def test_stop_resets_position(self, store: ProjectStore) -> None:
        store.set_position(768)
        store.play()
        assert store.project.transport.state == "playing"
        store.stop()
        assert store.project.transport.state == "stopped"
        assert store.project.transport.position == 0

    def test_pause_keeps_position(self, store: ProjectStore) -> None:
        store.set_position(384)
        store.pause()
        assert store.project.transport.position == 384

    def test_bpm_and_metronome(self, store: ProjectStore) -> None:
        store.set_bpm(90)
        assert store.project.bpm == 90
        assert store.toggle_metronome() is True
        assert store.toggle_metronome() is False


class TestChannelsAndMixer:

    def test_channel_toggles(self, store: ProjectStore) -> None:
        channel = store.add_channel("Lead", "synth", "brightLead")
        assert store.last_created_channel_id() == channel.id
        _, muted = store.toggle_channel_mute(channel.id)
        assert muted is True
        _, soloed = store.toggle_channel_solo(channel.id)
        assert soloed is True
        store.update_channel(channel.id, name="Lead 2")
        assert channel.name == "Lead 2"
        assert channel.preset == "brightLead"

    def test_track_volume_writes_mixer_strip(self, store: ProjectStore) -> None:
        store.add_playlist_track()
        track = store.set_track_volume(0, 1.2)
        assert track.effects["volume"] == 1.2
        store.set_track_pan(0, -0.5)
        assert track.effects["pan"] == -0.5

    def test_track_index_not_found(self, store: ProjectStore) -> None:
        with pytest.raises(TrackIndexNotFoundError, match="Mixer track not found at index 3"):
            store.set_track_volume(3, 1.0)

    def test_mute_by_index_and_by_id_share_state(self, store: ProjectStore) -> None:
        track = store.add_playlist_track("Drums")
        store.toggle_track_mute(0)
        assert track.mute is True
        store.toggle_playlist_track_mute(track.id)
        assert track.mute is False

    def test_master_volume(self, store: ProjectStore) -> None:
        store.set_master_volume(1.8)
        assert store.project.master_volume == 1.8


class TestPlaylist:

    def test_default_track_names(self, store: ProjectStore) -> None:
        store.add_playlist_track()
        second = store.add_playlist_track()
        assert second.name == "Track 2"
        assert second.effects == DEFAULT_TRACK_EFFECTS

    def test_clip_duration_defaults_to_pattern_length(self, store: ProjectStore) -> None:
        pattern = store.add_pattern("Drums", 16)
        store.add_playlist_track()
        clip = store.add_clip(pattern.id, 0, 384)
        assert clip.duration_tick == 384
        assert clip.type == "pattern"

    def test_clip_on_missing_track(self, store: ProjectStore) -> None:
        pattern = store.add_pattern("Drums")
        with pytest.raises(TrackIndexNotFoundError):
            store.add_clip(pattern.id, 0, 0)

    def test_move_resize_delete_clip(self, store: ProjectStore) -> None:
        pattern = store.add_pattern("Drums")
        store.add_playlist_track()
        store.add_playlist_track()
        clip = store.add_clip(pattern.id, 0, 0)
        store.move_clip(clip.id, 1, 768)
        assert (clip.track_index, clip.start_tick) == (1, 768)
        store.resize_clip(clip.id, 96)
        assert clip.duration_tick == 96
        store.delete_clip(clip.id)
        with pytest.raises(NotFoundError):
            store.get_clip(clip.id)

    def test_audio_assets_dedupe_by_sample(self, store: ProjectStore, library: SampleLibrary) -> None:
        sample = library.get("kick_punchy")
        first = store.add_audio_asset(sample)
        second = store.add_audio_asset(sample)
        assert first is second
        assert len(store.project.assets) == 1

    def test_loop_region_enables_loop(self, store: ProjectStore) -> None:
        store.set_loop_region(0, 1536)
        assert store.project.loop_enabled
        assert (store.project.loop_start, store.project.loop_end) == (0, 1536)


class TestEffects:

    def test_reset_restores_unity_strip(self, store: ProjectStore) -> None:
        track = store.add_playlist_track()
        store.set_track_effect(track.id, "reverbWet", 0.4)
        store.apply_track_effects(track.id)
        assert track.applied_effects["reverbWet"] == 0.4
        store.reset_track_effects(track.id)
        assert track.effects == DEFAULT_TRACK_EFFECTS
        assert track.applied_effects is None

    def test_insert_effect_lifecycle(self, store: ProjectStore) -> None:
        store.add_playlist_track()
        track, effect = store.add_insert_effect(0, "delay")
        store.update_insert_effect(effect.id, {"feedback": 0.3})
        assert effect.parameters == {"feedback": 0.3}
        _, removed = store.remove_insert_effect(effect.id)
        assert removed is effect
        assert track.inserts == []

    def test_missing_effect(self, store: ProjectStore) -> None:
        with pytest.raises(NotFoundError, match="Effect not found: fx1"):
            store.remove_insert_effect("fx1")


class TestEventsAndUndo:

    def test_every_mutation_bumps_version(self, store: ProjectStore) -> None:
        store.add_pattern("Drums")
        store.set_bpm(100)
        assert store.version == 2
        assert [e.event_type for e in store.events] == [EventType.PATTERN_CREATED, EventType.TEMPO_CHANGED]
        assert len(store.get_events_since(1)) == 1

    def test_undo_restores_state_before_group(self, store: ProjectStore) -> None:
        store.set_bpm(100)
        store.begin_undo_group("batch_1")
        store.add_pattern("Drums")
        store.set_bpm(140)
        store.end_undo_group()

        assert store.can_undo()
        assert store.undo_last_group() == "batch_1"
        assert store.project.patterns == []
        assert store.project.bpm == 100
        assert not store.can_undo()

    def test_grouped_events_are_tagged(self, store: ProjectStore) -> None:
        store.begin_undo_group("batch_1")
        store.play()
        group = store.end_undo_group()
        assert group is not None
        tagged = [e for e in store.events if e.undo_group_id == "batch_1"]
        assert EventType.TRANSPORT_CHANGED in {e.event_type for e in tagged}
        assert any(e.event_type == EventType.TRANSPORT_CHANGED for e in group.events)

    def test_nested_group_rejected(self, store: ProjectStore) -> None:
        store.begin_undo_group("a")
        with pytest.raises(RuntimeError):
            store.begin_undo_group("b")

    def test_nothing_to_undo(self, store: ProjectStore) -> None:
        assert store.undo_last_group() is None

    def test_undo_is_last_in_first_out(self, store: ProjectStore) -> None:
        for group_id, bpm in (("g1", 90), ("g2", 150)):
            store.begin_undo_group(group_id)
            store.set_bpm(bpm)
            store.end_undo_group()
        assert store.undo_last_group() == "g2"
        assert store.project.bpm == 90
        assert store.undo_last_group() == "g1"
        assert store.project.bpm == 120

    def test_only_recent_groups_are_kept(self, store: ProjectStore) -> None:
        """Old snapshots are dropped so a long session does not grow without bound."""
        for i in range(MAX_UNDO_GROUPS + 5):
            store.begin_undo_group(f"g{i}")
            store.set_bpm(60 + i)
            store.end_undo_group()

        undone = []
        while store.can_undo():
            undone.append(store.undo_last_group())

        assert len(undone) == MAX_UNDO_GROUPS
        assert undone[0] == f"g{MAX_UNDO_GROUPS + 4}"
        assert undone[-1] == "g5"
        assert store.project.bpm == 64

    def test_to_dict(self, store: ProjectStore) -> None:
        store.add_pattern("Drums")
        data = store.to_dict()
        assert data["version"] == 1
        assert data["project"]["patterns"][0]["name"] == "Drums"
        assert data["events"][0]["event_type"] == "pattern.created"


class TestRegistry:

    def test_same_session_same_store(self) -> None:
        assert get_or_create_store("abc") is get_or_create_store("abc")

    def test_clear_store(self) -> None:
        first = get_or_create_store("abc")
        clear_store("abc")
        assert get_or_create_store("abc") is not first

"""
ProjectStore: the Project Mutation API.

The store owns one ``Project`` and is the only thing that mutates it.
Executors receive the store explicitly; nothing reaches for a global.

Key principles:
1. One method per command family; lookups raise ``NotFoundError``
2. Every mutation is recorded as a ``StateEvent``
3. Undo is grouped: a batch opens a group, the whole group reverts at once

Architecture:
    ProjectStore (per chat session)
        └── Project (dataclasses, see pulse.core.project)
        └── EventLog (append-only mutation history)
        └── Undo groups (snapshot taken when a group opens)
"""

from __future__ import annotations

import logging
import uuid
from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pulse.core.project import (
    DEFAULT_PATTERN_STEPS,
    DEFAULT_TRACK_EFFECTS,
    AudioAsset,
    Channel,
    Clip,
    InsertEffect,
    Note,
    Pattern,
    PlaylistTrack,
    Project,
    new_id,
    palette_color,
)
from pulse.core.samples.models import SampleRef

logger = logging.getLogger(__name__)

# Closed undo groups kept per store; each holds a full project snapshot.
MAX_UNDO_GROUPS = 10


# =============================================================================
# Errors
# =============================================================================

class ProjectError(Exception):
    """Base for domain errors raised by the mutation API."""


class NoProjectError(ProjectError):
    def __init__(self) -> None:
        super().__init__("No project loaded")


class NotFoundError(ProjectError):
    """A referenced entity does not exist.  ``str(e)`` is the user-facing message."""

    def __init__(self, kind: str, ref: object) -> None:
        self.kind = kind
        self.ref = ref
        super().__init__(f"{kind} not found: {ref}")


class TrackIndexNotFoundError(NotFoundError):
    def __init__(self, index: int) -> None:
        super().__init__("Mixer track", index)
        self.args = (f"Mixer track not found at index {index}",)


# =============================================================================
# Events
# =============================================================================

class EventType(str, Enum):
    """Types of project mutation events."""
    # Patterns & notes
    PATTERN_CREATED = "pattern.created"
    PATTERN_MODIFIED = "pattern.modified"
    PATTERN_DELETED = "pattern.deleted"
    NOTES_ADDED = "notes.added"
    NOTES_MODIFIED = "notes.modified"
    NOTES_REMOVED = "notes.removed"

    # Transport
    TRANSPORT_CHANGED = "transport.changed"
    TEMPO_CHANGED = "project.tempo_changed"

    # Channels & mixer
    CHANNEL_CREATED = "channel.created"
    CHANNEL_MODIFIED = "channel.modified"
    CHANNEL_DELETED = "channel.deleted"
    TRACK_CREATED = "track.created"
    TRACK_MODIFIED = "track.modified"
    MASTER_MODIFIED = "master.modified"

    # Playlist
    CLIP_CREATED = "clip.created"
    CLIP_MODIFIED = "clip.modified"
    CLIP_DELETED = "clip.deleted"
    LOOP_CHANGED = "playlist.loop_changed"
    ASSET_ADDED = "asset.added"

    # Effects
    EFFECT_ADDED = "effect.added"
    EFFECT_MODIFIED = "effect.modified"
    EFFECT_REMOVED = "effect.removed"

    # UI
    SELECTION_CHANGED = "ui.selection_changed"
    PANEL_FOCUSED = "ui.panel_focused"

    # Undo group markers
    GROUP_START = "undo_group.start"
    GROUP_END = "undo_group.end"
    GROUP_UNDONE = "undo_group.undone"


@dataclass
class StateEvent:
    """A single project mutation event."""
    id: str
    event_type: EventType
    entity_id: Optional[str]
    data: dict[str, Any]
    timestamp: datetime
    version: int
    undo_group_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "event_type": self.event_type.value,
            "entity_id": self.entity_id,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
            "version": self.version,
            "undo_group_id": self.undo_group_id,
        }


@dataclass
class UndoGroup:
    """Everything one batch did, revertible as a unit."""
    id: str
    snapshot: Project
    started_at: datetime
    events: list[StateEvent] = field(default_factory=list)
    closed: bool = False


class ProjectStore:
    """
    In-memory Project Mutation API for one chat session.

    Usage:
        store = ProjectStore(session_id="abc-123")

        store.begin_undo_group("batch_1")
        pattern = store.add_pattern("Drums")
        store.add_note(pattern.id, pitch=36, start_tick=0, duration_tick=96)
        store.end_undo_group()

        store.undo_last_group()  # pattern and note are gone
    """

    def __init__(
        self,
        session_id: Optional[str] = None,
        project: Optional[Project] = None,
        with_project: bool = True,
    ):
        self.session_id = session_id or str(uuid.uuid4())
        self._project: Optional[Project] = project or (Project() if with_project else None)
        self._version: int = 0
        self._events: list[StateEvent] = []
        self._undo_groups: list[UndoGroup] = []
        self._active_group: Optional[UndoGroup] = None

        logger.debug(f"🏗️ ProjectStore initialized: session={self.session_id[:8]}")

    @property
    def project(self) -> Project:
        """The loaded project; raises ``NoProjectError`` when there is none."""
        if self._project is None:
            raise NoProjectError()
        return self._project

    @property
    def has_project(self) -> bool:
        return self._project is not None

    @property
    def version(self) -> int:
        return self._version

    @property
    def events(self) -> list[StateEvent]:
        return list(self._events)

    def load_project(self, project: Project) -> None:
        self._project = project
        logger.info(f"📂 Project loaded: {project.name} ({project.id[:8]})")

    def close_project(self) -> None:
        self._project = None

    # =========================================================================
    # Undo Groups
    # =========================================================================

    def begin_undo_group(self, group_id: str, description: str = "") -> UndoGroup:
        """
        Open an undo group.

        The project is snapshotted first, so ``undo_last_group`` restores
        exactly the state before the group's first mutation.
        """
        if self._active_group and not self._active_group.closed:
            raise RuntimeError("Undo group already active. End it first.")

        group = UndoGroup(
            id=group_id,
            snapshot=deepcopy(self.project),
            started_at=datetime.now(timezone.utc),
        )
        self._active_group = group
        self._append_event(EventType.GROUP_START, None, {"description": description})
        logger.debug(f"🔒 Undo group started: {group_id}")
        return group

    def end_undo_group(self) -> Optional[UndoGroup]:
        group = self._active_group
        if group is None:
            return None
        self._append_event(EventType.GROUP_END, None, {"event_count": len(group.events)})
        group.closed = True
        self._undo_groups.append(group)
        if len(self._undo_groups) > MAX_UNDO_GROUPS:
            self._undo_groups = self._undo_groups[-MAX_UNDO_GROUPS:]
        self._active_group = None
        logger.debug(f"✅ Undo group closed: {group.id} ({len(group.events)} events)")
        return group

    def can_undo(self) -> bool:
        return bool(self._undo_groups)

    def undo_last_group(self) -> Optional[str]:
        """Restore the snapshot taken before the most recent group; returns its id."""
        if not self._undo_groups:
            return None
        group = self._undo_groups.pop()
        self._project = group.snapshot
        self._append_event(EventType.GROUP_UNDONE, None, {"undone_group_id": group.id}, grouped=False)
        logger.warning(f"⏪ Undo group reverted: {group.id} ({len(group.events)} events)")
        return group.id

    # =========================================================================
    # Lookups
    # =========================================================================

    @property
    def track_count(self) -> int:
        return len(self.project.tracks)

    def last_created_pattern_id(self) -> Optional[str]:
        patterns = self.project.patterns
        return patterns[-1].id if patterns else None

    def last_created_channel_id(self) -> Optional[str]:
        channels = self.project.channels
        return channels[-1].id if channels else None

    def get_pattern(self, pattern_id: str) -> Pattern:
        for pattern in self.project.patterns:
            if pattern.id == pattern_id:
                return pattern
        raise NotFoundError("Pattern", pattern_id)

    def find_note(self, note_id: str) -> tuple[Pattern, Note]:
        for pattern in self.project.patterns:
            for note in pattern.notes:
                if note.id == note_id:
                    return pattern, note
        raise NotFoundError("Note", note_id)

    def get_channel(self, channel_id: str) -> Channel:
        for channel in self.project.channels:
            if channel.id == channel_id:
                return channel
        raise NotFoundError("Channel", channel_id)

    def get_track(self, index: int) -> PlaylistTrack:
        tracks = self.project.tracks
        if 0 <= index < len(tracks):
            return tracks[index]
        raise TrackIndexNotFoundError(index)

    def get_track_by_id(self, track_id: str) -> PlaylistTrack:
        for track in self.project.tracks:
            if track.id == track_id:
                return track
        raise NotFoundError("Track", track_id)

    def get_clip(self, clip_id: str) -> Clip:
        for clip in self.project.clips:
            if clip.id == clip_id:
                return clip
        raise NotFoundError("Clip", clip_id)

    def find_effect(self, effect_id: str) -> tuple[PlaylistTrack, InsertEffect]:
        for track in self.project.tracks:
            for effect in track.inserts:
                if effect.id == effect_id:
                    return track, effect
        raise NotFoundError("Effect", effect_id)

    # =========================================================================
    # Patterns & Notes
    # =========================================================================

    def add_pattern(self, name: str, length_in_steps: int = DEFAULT_PATTERN_STEPS) -> Pattern:
        project = self.project
        pattern = Pattern(
            id=new_id(),
            name=name,
            color=palette_color(len(project.patterns)),
            length_in_steps=length_in_steps,
        )
        project.patterns.append(pattern)
        project.selected_pattern_id = pattern.id
        self._append_event(EventType.PATTERN_CREATED, pattern.id, {"name": name, "length_in_steps": length_in_steps})
        return pattern

    def delete_pattern(self, pattern_id: str) -> Pattern:
        """Remove the pattern and every playlist clip that plays it."""
        project = self.project
        pattern = self.get_pattern(pattern_id)
        project.patterns.remove(pattern)
        project.clips = [c for c in project.clips if c.pattern_id != pattern_id]
        if project.selected_pattern_id == pattern_id:
            project.selected_pattern_id = project.patterns[-1].id if project.patterns else None
        if project.piano_roll_pattern_id == pattern_id:
            project.piano_roll_pattern_id = None
        self._append_event(EventType.PATTERN_DELETED, pattern_id, {"name": pattern.name})
        return pattern

    def select_pattern(self, pattern_id: str) -> Pattern:
        pattern = self.get_pattern(pattern_id)
        self.project.selected_pattern_id = pattern_id
        self._append_event(EventType.SELECTION_CHANGED, pattern_id, {"pattern_id": pattern_id})
        return pattern

    def set_pattern_length(self, pattern_id: str, length_in_steps: int) -> Pattern:
        pattern = self.get_pattern(pattern_id)
        old = pattern.length_in_steps
        pattern.length_in_steps = length_in_steps
        self._append_event(EventType.PATTERN_MODIFIED, pattern_id, {"old_length": old, "new_length": length_in_steps})
        return pattern

    def clear_pattern_notes(self, pattern_id: str) -> int:
        pattern = self.get_pattern(pattern_id)
        removed = len(pattern.notes)
        pattern.notes = []
        self._append_event(EventType.NOTES_REMOVED, pattern_id, {"notes_count": removed})
        return removed

    def open_piano_roll(self, pattern_id: str) -> Pattern:
        pattern = self.get_pattern(pattern_id)
        self.project.piano_roll_pattern_id = pattern_id
        self.project.selected_pattern_id = pattern_id
        self.project.focused_panel = "pianoRoll"
        self._append_event(EventType.PANEL_FOCUSED, pattern_id, {"panel": "pianoRoll"})
        return pattern

    def add_note(
        self,
        pattern_id: str,
        pitch: int,
        start_tick: int,
        duration_tick: int,
        velocity: int = 100,
    ) -> Note:
        return self.add_notes(pattern_id, [(pitch, start_tick, duration_tick, velocity)])[0]

    def add_notes(self, pattern_id: str, notes: list[tuple[int, int, int, int]]) -> list[Note]:
        """Add ``(pitch, start_tick, duration_tick, velocity)`` rows in one event."""
        pattern = self.get_pattern(pattern_id)
        created = [
            Note(id=new_id(), pitch=pitch, start_tick=start, duration_tick=duration, velocity=velocity)
            for pitch, start, duration, velocity in notes
        ]
        pattern.notes.extend(created)
        self._append_event(
            EventType.NOTES_ADDED,
            pattern_id,
            {"notes_count": len(created), "note_ids": [n.id for n in created]},
        )
        return created

    def update_note(self, note_id: str, **changes: Optional[int]) -> tuple[Pattern, Note]:
        """Apply non-``None`` field changes (``pitch``, ``start_tick``, ...) to a note."""
        pattern, note = self.find_note(note_id)
        applied = {k: v for k, v in changes.items() if v is not None}
        for key, value in applied.items():
            setattr(note, key, value)
        self._append_event(EventType.NOTES_MODIFIED, note_id, {"pattern_id": pattern.id, **applied})
        return pattern, note

    def delete_note(self, note_id: str) -> Pattern:
        pattern, note = self.find_note(note_id)
        pattern.notes.remove(note)
        self._append_event(EventType.NOTES_REMOVED, note_id, {"pattern_id": pattern.id, "notes_count": 1})
        return pattern

    # =========================================================================
    # Transport
    # =========================================================================

    def _set_transport_state(self, state: str) -> None:
        transport = self.project.transport
        old = transport.state
        transport.state = state  # type: ignore[assignment]  # narrowed by callers
        if state == "stopped":
            transport.position = 0
        self._append_event(EventType.TRANSPORT_CHANGED, None, {"old_state": old, "new_state": state})

    def play(self) -> None:
        self._set_transport_state("playing")

    def stop(self) -> None:
        self._set_transport_state("stopped")

    def pause(self) -> None:
        self._set_transport_state("paused")

    def set_bpm(self, bpm: float) -> None:
        transport = self.project.transport
        old = transport.bpm
        transport.bpm = bpm
        self._append_event(EventType.TEMPO_CHANGED, None, {"old_tempo": old, "new_tempo": bpm})

    def set_position(self, tick: int) -> None:
        self.project.transport.position = tick
        self._append_event(EventType.TRANSPORT_CHANGED, None, {"position": tick})

    def toggle_metronome(self) -> bool:
        transport = self.project.transport
        transport.metronome_enabled = not transport.metronome_enabled
        self._append_event(EventType.TRANSPORT_CHANGED, None, {"metronome_enabled": transport.metronome_enabled})
        return transport.metronome_enabled

    # =========================================================================
    # Channels
    # =========================================================================

    def add_channel(self, name: str, channel_type: str, preset: Optional[str] = None) -> Channel:
        project = self.project
        channel = Channel(
            id=new_id(),
            name=name,
            type=channel_type,
            color=palette_color(len(project.channels)),
            preset=preset,
        )
        project.channels.append(channel)
        self._append_event(EventType.CHANNEL_CREATED, channel.id, {"name": name, "type": channel_type, "preset": preset})
        return channel

    def update_channel(self, channel_id: str, name: Optional[str] = None, preset: Optional[str] = None) -> Channel:
        channel = self.get_channel(channel_id)
        if name is not None:
            channel.name = name
        if preset is not None:
            channel.preset = preset
        self._append_event(EventType.CHANNEL_MODIFIED, channel_id, {"name": name, "preset": preset})
        return channel

    def delete_channel(self, channel_id: str) -> Channel:
        project = self.project
        channel = self.get_channel(channel_id)
        project.channels.remove(channel)
        if project.selected_channel_id == channel_id:
            project.selected_channel_id = None
        self._append_event(EventType.CHANNEL_DELETED, channel_id, {"name": channel.name})
        return channel

    def select_channel(self, channel_id: str) -> Channel:
        channel = self.get_channel(channel_id)
        self.project.selected_channel_id = channel_id
        self._append_event(EventType.SELECTION_CHANGED, channel_id, {"channel_id": channel_id})
        return channel

    def set_channel_volume(self, channel_id: str, volume: float) -> Channel:
        channel = self.get_channel(channel_id)
        channel.volume = volume
        self._append_event(EventType.CHANNEL_MODIFIED, channel_id, {"volume": volume})
        return channel

    def set_channel_pan(self, channel_id: str, pan: float) -> Channel:
        channel = self.get_channel(channel_id)
        channel.pan = pan
        self._append_event(EventType.CHANNEL_MODIFIED, channel_id, {"pan": pan})
        return channel

    def toggle_channel_mute(self, channel_id: str) -> tuple[Channel, bool]:
        channel = self.get_channel(channel_id)
        channel.mute = not channel.mute
        self._append_event(EventType.CHANNEL_MODIFIED, channel_id, {"mute": channel.mute})
        return channel, channel.mute

    def toggle_channel_solo(self, channel_id: str) -> tuple[Channel, bool]:
        channel = self.get_channel(channel_id)
        channel.solo = not channel.solo
        self._append_event(EventType.CHANNEL_MODIFIED, channel_id, {"solo": channel.solo})
        return channel, channel.solo

    # =========================================================================
    # Mixer (playlist track strips)
    # =========================================================================

    def set_track_volume(self, index: int, volume: float) -> PlaylistTrack:
        track = self.get_track(index)
        track.effects["volume"] = volume
        self._append_event(EventType.TRACK_MODIFIED, track.id, {"volume": volume})
        return track

    def set_track_pan(self, index: int, pan: float) -> PlaylistTrack:
        track = self.get_track(index)
        track.effects["pan"] = pan
        self._append_event(EventType.TRACK_MODIFIED, track.id, {"pan": pan})
        return track

    def toggle_track_mute(self, index: int) -> tuple[PlaylistTrack, bool]:
        return self.toggle_playlist_track_mute(self.get_track(index).id)

    def toggle_track_solo(self, index: int) -> tuple[PlaylistTrack, bool]:
        return self.toggle_playlist_track_solo(self.get_track(index).id)

    def set_master_volume(self, volume: float) -> None:
        project = self.project
        old = project.master_volume
        project.master_volume = volume
        self._append_event(EventType.MASTER_MODIFIED, None, {"old_volume": old, "new_volume": volume})

    # =========================================================================
    # Playlist
    # =========================================================================

    def add_playlist_track(self, name: Optional[str] = None) -> PlaylistTrack:
        project = self.project
        index = len(project.tracks)
        track = PlaylistTrack(
            id=new_id(),
            name=name or f"Track {index + 1}",
            color=palette_color(index),
        )
        project.tracks.append(track)
        self._append_event(EventType.TRACK_CREATED, track.id, {"name": track.name, "index": index})
        return track

    def toggle_playlist_track_mute(self, track_id: str) -> tuple[PlaylistTrack, bool]:
        track = self.get_track_by_id(track_id)
        track.mute = not track.mute
        self._append_event(EventType.TRACK_MODIFIED, track_id, {"mute": track.mute})
        return track, track.mute

    def toggle_playlist_track_solo(self, track_id: str) -> tuple[PlaylistTrack, bool]:
        track = self.get_track_by_id(track_id)
        track.solo = not track.solo
        self._append_event(EventType.TRACK_MODIFIED, track_id, {"solo": track.solo})
        return track, track.solo

    def add_clip(
        self,
        pattern_id: str,
        track_index: int,
        start_tick: int,
        duration_tick: Optional[int] = None,
    ) -> Clip:
        """Place a pattern clip; duration defaults to the pattern's length."""
        pattern = self.get_pattern(pattern_id)
        self.get_track(track_index)
        clip = Clip(
            id=new_id(),
            type="pattern",
            track_index=track_index,
            start_tick=start_tick,
            duration_tick=duration_tick or pattern.length_in_ticks,
            pattern_id=pattern_id,
        )
        self.project.clips.append(clip)
        self._append_event(
            EventType.CLIP_CREATED,
            clip.id,
            {"pattern_id": pattern_id, "track_index": track_index, "start_tick": start_tick},
        )
        return clip

    def add_audio_asset(self, sample: SampleRef) -> AudioAsset:
        """Pull a library sample into the project; one asset per sample id."""
        project = self.project
        for asset in project.assets:
            if asset.sample_id == sample.sample_id:
                return asset
        asset = AudioAsset(
            id=new_id(),
            sample_id=sample.sample_id,
            name=sample.name,
            path=sample.path,
            duration=sample.duration,
        )
        project.assets.append(asset)
        self._append_event(EventType.ASSET_ADDED, asset.id, {"sample_id": sample.sample_id})
        return asset

    def add_audio_clip(self, asset_id: str, track_index: int, start_tick: int, duration_tick: int) -> Clip:
        self.get_track(track_index)
        clip = Clip(
            id=new_id(),
            type="audio",
            track_index=track_index,
            start_tick=start_tick,
            duration_tick=duration_tick,
            asset_id=asset_id,
        )
        self.project.clips.append(clip)
        self._append_event(
            EventType.CLIP_CREATED,
            clip.id,
            {"asset_id": asset_id, "track_index": track_index, "start_tick": start_tick},
        )
        return clip

    def move_clip(self, clip_id: str, track_index: int, start_tick: int) -> Clip:
        clip = self.get_clip(clip_id)
        self.get_track(track_index)
        clip.track_index = track_index
        clip.start_tick = start_tick
        self._append_event(EventType.CLIP_MODIFIED, clip_id, {"track_index": track_index, "start_tick": start_tick})
        return clip

    def resize_clip(self, clip_id: str, duration_tick: int) -> Clip:
        clip = self.get_clip(clip_id)
        clip.duration_tick = duration_tick
        self._append_event(EventType.CLIP_MODIFIED, clip_id, {"duration_tick": duration_tick})
        return clip

    def delete_clip(self, clip_id: str) -> Clip:
        clip = self.get_clip(clip_id)
        self.project.clips.remove(clip)
        self._append_event(EventType.CLIP_DELETED, clip_id, {})
        return clip

    def set_loop_region(self, start_tick: int, end_tick: int) -> None:
        project = self.project
        project.loop_start = start_tick
        project.loop_end = end_tick
        project.loop_enabled = True
        self._append_event(EventType.LOOP_CHANGED, None, {"start_tick": start_tick, "end_tick": end_tick})

    # =========================================================================
    # Effects
    # =========================================================================

    def set_track_effect(self, track_id: str, key: str, value: float) -> PlaylistTrack:
        track = self.get_track_by_id(track_id)
        track.effects[key] = value
        self._append_event(EventType.TRACK_MODIFIED, track_id, {"effect": key, "value": value})
        return track

    def reset_track_effects(self, track_id: str) -> PlaylistTrack:
        track = self.get_track_by_id(track_id)
        track.effects = dict(DEFAULT_TRACK_EFFECTS)
        track.applied_effects = None
        self._append_event(EventType.TRACK_MODIFIED, track_id, {"effects": "reset"})
        return track

    def apply_track_effects(self, track_id: str) -> PlaylistTrack:
        """Commit the current strip settings as the track's rendered effects."""
        track = self.get_track_by_id(track_id)
        track.applied_effects = dict(track.effects)
        self._append_event(EventType.TRACK_MODIFIED, track_id, {"effects": "applied"})
        return track

    def add_insert_effect(self, track_index: int, effect_type: str) -> tuple[PlaylistTrack, InsertEffect]:
        track = self.get_track(track_index)
        effect = InsertEffect(id=new_id(), type=effect_type)
        track.inserts.append(effect)
        self._append_event(EventType.EFFECT_ADDED, effect.id, {"track_id": track.id, "effect_type": effect_type})
        return track, effect

    def update_insert_effect(self, effect_id: str, parameters: dict[str, float]) -> InsertEffect:
        track, effect = self.find_effect(effect_id)
        effect.parameters.update(parameters)
        self._append_event(EventType.EFFECT_MODIFIED, effect_id, {"track_id": track.id, "parameters": parameters})
        return effect

    def remove_insert_effect(self, effect_id: str) -> tuple[PlaylistTrack, InsertEffect]:
        track, effect = self.find_effect(effect_id)
        track.inserts.remove(effect)
        self._append_event(EventType.EFFECT_REMOVED, effect_id, {"track_id": track.id, "effect_type": effect.type})
        return track, effect

    # =========================================================================
    # UI
    # =========================================================================

    def focus_panel(self, panel: str) -> None:
        self.project.focused_panel = panel
        self._append_event(EventType.PANEL_FOCUSED, None, {"panel": panel})

    # =========================================================================
    # Event Log
    # =========================================================================

    def _append_event(
        self,
        event_type: EventType,
        entity_id: Optional[str],
        data: dict[str, Any],
        grouped: bool = True,
    ) -> StateEvent:
        """Append an event to the log, tagging it with the open undo group."""
        self._version += 1
        group = self._active_group if grouped else None

        event = StateEvent(
            id=str(uuid.uuid4()),
            event_type=event_type,
            entity_id=entity_id,
            data=data,
            timestamp=datetime.now(timezone.utc),
            version=self._version,
            undo_group_id=group.id if group else None,
        )
        self._events.append(event)
        if group and not group.closed:
            group.events.append(event)
        return event

    def get_events_since(self, version: int) -> list[StateEvent]:
        return [e for e in self._events if e.version > version]

    def to_dict(self) -> dict[str, Any]:
        """Serialize store state (last 100 events)."""
        return {
            "session_id": self.session_id,
            "version": self._version,
            "project": self._project.to_dict() if self._project else None,
            "events": [e.to_dict() for e in self._events[-100:]],
            "can_undo": self.can_undo(),
        }


# =============================================================================
# Store Registry (session_id -> ProjectStore)
# =============================================================================

_stores: dict[str, ProjectStore] = {}


def get_or_create_store(session_id: str) -> ProjectStore:
    """
    Get the store for a chat session, creating one with an empty project.

    This is the primary way the HTTP layer obtains a ProjectStore.
    """
    if session_id in _stores:
        return _stores[session_id]

    store = ProjectStore(session_id=session_id)
    _stores[session_id] = store
    return store


def clear_store(session_id: str) -> None:
    """Remove a store from the registry."""
    _stores.pop(session_id, None)


def clear_all_stores() -> None:
    """Clear all stores (for testing)."""
    _stores.clear()

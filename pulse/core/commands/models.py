"""Typed command variants, one pydantic model per action.

Every model carries an ``action`` literal as its discriminant and only the
fields meaningful to that action.  Numeric fields are typed numbers; range
checks are left to ``pulse.core.validation`` so an out-of-range value still
decodes and is rejected by its executor with a readable message.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import ConfigDict, Field

from pulse.core.commands.refs import EntityRef
from pulse.models.base import CamelModel

Number = Union[int, float]


class CommandModel(CamelModel):
    """Base for every command variant."""

    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)

    action: str


# =============================================================================
# Patterns
# =============================================================================

class AddPattern(CommandModel):
    action: Literal["addPattern"] = "addPattern"
    name: str = "New Pattern"
    length_in_steps: Optional[Number] = None


class DeletePattern(CommandModel):
    action: Literal["deletePattern"] = "deletePattern"
    pattern_id: EntityRef


class SelectPattern(CommandModel):
    action: Literal["selectPattern"] = "selectPattern"
    pattern_id: EntityRef


class SetPatternLength(CommandModel):
    action: Literal["setPatternLength"] = "setPatternLength"
    pattern_id: EntityRef
    length_in_steps: Number


class ClearPatternNotes(CommandModel):
    action: Literal["clearPatternNotes"] = "clearPatternNotes"
    pattern_id: EntityRef


class OpenPianoRoll(CommandModel):
    action: Literal["openPianoRoll"] = "openPianoRoll"
    pattern_id: EntityRef


# =============================================================================
# Notes
# =============================================================================

class NoteSpec(CamelModel):
    """One note inside an ``addNoteSequence`` payload."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    pitch: Number
    start_tick: Number = 0
    duration_tick: Number = 96
    velocity: Number = 100


class AddNote(CommandModel):
    action: Literal["addNote"] = "addNote"
    pattern_id: EntityRef
    pitch: Number
    start_tick: Number = 0
    duration_tick: Number = 96
    velocity: Optional[Number] = None


class UpdateNote(CommandModel):
    action: Literal["updateNote"] = "updateNote"
    note_id: str
    pitch: Optional[Number] = None
    start_tick: Optional[Number] = None
    duration_tick: Optional[Number] = None
    velocity: Optional[Number] = None


class DeleteNote(CommandModel):
    action: Literal["deleteNote"] = "deleteNote"
    note_id: str


class AddNoteSequence(CommandModel):
    action: Literal["addNoteSequence"] = "addNoteSequence"
    pattern_id: EntityRef
    notes: list[NoteSpec] = Field(min_length=1)


# =============================================================================
# Transport
# =============================================================================

class Play(CommandModel):
    action: Literal["play"] = "play"


class Stop(CommandModel):
    action: Literal["stop"] = "stop"


class Pause(CommandModel):
    action: Literal["pause"] = "pause"


class SetBpm(CommandModel):
    action: Literal["setBpm"] = "setBpm"
    bpm: Number


class SetPosition(CommandModel):
    action: Literal["setPosition"] = "setPosition"
    tick: Number


class ToggleMetronome(CommandModel):
    action: Literal["toggleMetronome"] = "toggleMetronome"


# =============================================================================
# Channels
# =============================================================================

class AddChannel(CommandModel):
    action: Literal["addChannel"] = "addChannel"
    name: Optional[str] = None
    type: str = "synth"
    preset: Optional[str] = None


class UpdateChannel(CommandModel):
    action: Literal["updateChannel"] = "updateChannel"
    channel_id: EntityRef
    name: Optional[str] = None
    preset: Optional[str] = None


class DeleteChannel(CommandModel):
    action: Literal["deleteChannel"] = "deleteChannel"
    channel_id: EntityRef


class SelectChannel(CommandModel):
    action: Literal["selectChannel"] = "selectChannel"
    channel_id: EntityRef


class SetChannelVolume(CommandModel):
    action: Literal["setChannelVolume"] = "setChannelVolume"
    channel_id: EntityRef
    volume: Number


class SetChannelPan(CommandModel):
    action: Literal["setChannelPan"] = "setChannelPan"
    channel_id: EntityRef
    pan: Number


class ToggleChannelMute(CommandModel):
    action: Literal["toggleChannelMute"] = "toggleChannelMute"
    channel_id: EntityRef


class ToggleChannelSolo(CommandModel):
    action: Literal["toggleChannelSolo"] = "toggleChannelSolo"
    channel_id: EntityRef


# =============================================================================
# Mixer
# =============================================================================

class SetVolume(CommandModel):
    action: Literal["setVolume"] = "setVolume"
    track_index: Number
    volume: Number


class SetPan(CommandModel):
    action: Literal["setPan"] = "setPan"
    track_index: Number
    pan: Number


class ToggleMute(CommandModel):
    action: Literal["toggleMute"] = "toggleMute"
    track_index: Number


class ToggleSolo(CommandModel):
    action: Literal["toggleSolo"] = "toggleSolo"
    track_index: Number


class SetMasterVolume(CommandModel):
    action: Literal["setMasterVolume"] = "setMasterVolume"
    volume: Number


# =============================================================================
# Playlist
# =============================================================================

class AddPlaylistTrack(CommandModel):
    action: Literal["addPlaylistTrack"] = "addPlaylistTrack"
    name: Optional[str] = None


class TogglePlaylistTrackMute(CommandModel):
    action: Literal["togglePlaylistTrackMute"] = "togglePlaylistTrackMute"
    track_id: str


class TogglePlaylistTrackSolo(CommandModel):
    action: Literal["togglePlaylistTrackSolo"] = "togglePlaylistTrackSolo"
    track_id: str


class AddClip(CommandModel):
    action: Literal["addClip"] = "addClip"
    pattern_id: EntityRef
    track_index: Number = 0
    start_tick: Number = 0
    duration_tick: Optional[Number] = None


class MoveClip(CommandModel):
    action: Literal["moveClip"] = "moveClip"
    clip_id: str
    track_index: Number
    start_tick: Number


class ResizeClip(CommandModel):
    action: Literal["resizeClip"] = "resizeClip"
    clip_id: str
    duration_tick: Number


class DeleteClip(CommandModel):
    action: Literal["deleteClip"] = "deleteClip"
    clip_id: str


class SetLoopRegion(CommandModel):
    action: Literal["setLoopRegion"] = "setLoopRegion"
    start_tick: Number
    end_tick: Number


# =============================================================================
# Effects
# =============================================================================

class SetTrackEffect(CommandModel):
    action: Literal["setTrackEffect"] = "setTrackEffect"
    track_id: str
    key: str
    value: Number


class ResetTrackEffects(CommandModel):
    action: Literal["resetTrackEffects"] = "resetTrackEffects"
    track_id: str


class ApplyTrackEffects(CommandModel):
    action: Literal["applyTrackEffects"] = "applyTrackEffects"
    track_id: str


class AddEffect(CommandModel):
    action: Literal["addEffect"] = "addEffect"
    track_index: Number
    effect_type: str


class UpdateEffect(CommandModel):
    action: Literal["updateEffect"] = "updateEffect"
    effect_id: str
    parameters: dict[str, Number] = Field(default_factory=dict)


class DeleteEffect(CommandModel):
    action: Literal["deleteEffect"] = "deleteEffect"
    effect_id: str


# =============================================================================
# Samples / UI
# =============================================================================

class AddAudioSample(CommandModel):
    action: Literal["addAudioSample"] = "addAudioSample"
    sample_id: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    sample_name: Optional[str] = None
    track_index: Optional[Number] = None
    start_tick: Number = 0
    duration_tick: Optional[Number] = None


class FocusPanel(CommandModel):
    action: Literal["focusPanel"] = "focusPanel"
    panel: str


# =============================================================================
# Sentinels
# =============================================================================

class ClarificationNeeded(CommandModel):
    action: Literal["clarificationNeeded"] = "clarificationNeeded"
    message: str = "I need more information"
    suggested_options: list[str] = Field(default_factory=list)


class Unknown(CommandModel):
    """Anything the decoder could not turn into a real command."""

    action: Literal["unknown"] = "unknown"
    original_text: str = ""
    reason: str = "Unknown reason"
    raw_response: Optional[str] = None


Command = Annotated[
    Union[
        AddPattern, DeletePattern, SelectPattern, SetPatternLength, ClearPatternNotes, OpenPianoRoll,
        AddNote, UpdateNote, DeleteNote, AddNoteSequence,
        Play, Stop, Pause, SetBpm, SetPosition, ToggleMetronome,
        AddChannel, UpdateChannel, DeleteChannel, SelectChannel,
        SetChannelVolume, SetChannelPan, ToggleChannelMute, ToggleChannelSolo,
        SetVolume, SetPan, ToggleMute, ToggleSolo, SetMasterVolume,
        AddPlaylistTrack, TogglePlaylistTrackMute, TogglePlaylistTrackSolo,
        AddClip, MoveClip, ResizeClip, DeleteClip, SetLoopRegion,
        SetTrackEffect, ResetTrackEffects, ApplyTrackEffects,
        AddEffect, UpdateEffect, DeleteEffect,
        AddAudioSample, FocusPanel,
        ClarificationNeeded, Unknown,
    ],
    Field(discriminator="action"),
]

# action name -> model, built from each variant's ``action`` default.
COMMAND_MODELS: dict[str, type[CommandModel]] = {
    model.model_fields["action"].default: model
    for model in (
        AddPattern, DeletePattern, SelectPattern, SetPatternLength, ClearPatternNotes, OpenPianoRoll,
        AddNote, UpdateNote, DeleteNote, AddNoteSequence,
        Play, Stop, Pause, SetBpm, SetPosition, ToggleMetronome,
        AddChannel, UpdateChannel, DeleteChannel, SelectChannel,
        SetChannelVolume, SetChannelPan, ToggleChannelMute, ToggleChannelSolo,
        SetVolume, SetPan, ToggleMute, ToggleSolo, SetMasterVolume,
        AddPlaylistTrack, TogglePlaylistTrackMute, TogglePlaylistTrackSolo,
        AddClip, MoveClip, ResizeClip, DeleteClip, SetLoopRegion,
        SetTrackEffect, ResetTrackEffects, ApplyTrackEffects,
        AddEffect, UpdateEffect, DeleteEffect,
        AddAudioSample, FocusPanel,
        ClarificationNeeded, Unknown,
    )
}

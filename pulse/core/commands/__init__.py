"""
Command package for Pulse Copilot.

Closed set of typed commands decoded from the model's loosely typed
``{action, parameters}`` entries.

Public API:
    parse_command(raw) -> CommandModel        (never raises)
    parse_commands(entries) -> list[CommandModel]
    validate_command_structure(raw) -> ValidationResult
"""

from pulse.core.commands.models import (
    CommandModel,
    AddPattern,
    DeletePattern,
    SelectPattern,
    SetPatternLength,
    ClearPatternNotes,
    OpenPianoRoll,
    NoteSpec,
    AddNote,
    UpdateNote,
    DeleteNote,
    AddNoteSequence,
    Play,
    Stop,
    Pause,
    SetBpm,
    SetPosition,
    ToggleMetronome,
    AddChannel,
    UpdateChannel,
    DeleteChannel,
    SelectChannel,
    SetChannelVolume,
    SetChannelPan,
    ToggleChannelMute,
    ToggleChannelSolo,
    SetVolume,
    SetPan,
    ToggleMute,
    ToggleSolo,
    SetMasterVolume,
    AddPlaylistTrack,
    TogglePlaylistTrackMute,
    TogglePlaylistTrackSolo,
    AddClip,
    MoveClip,
    ResizeClip,
    DeleteClip,
    SetLoopRegion,
    SetTrackEffect,
    ResetTrackEffects,
    ApplyTrackEffects,
    AddEffect,
    UpdateEffect,
    DeleteEffect,
    AddAudioSample,
    FocusPanel,
    ClarificationNeeded,
    Unknown,
    COMMAND_MODELS,
    Command,
)
from pulse.core.commands.refs import (
    LAST_CREATED_KEYWORD,
    EntityRef,
    ExplicitRef,
    LastCreatedRef,
    explicit,
)
from pulse.core.commands.parser import (
    PARAMETER_ALIASES,
    parse_command,
    parse_commands,
    validate_command_structure,
)

__all__ = [
    # Models
    "CommandModel",
    "AddPattern",
    "DeletePattern",
    "SelectPattern",
    "SetPatternLength",
    "ClearPatternNotes",
    "OpenPianoRoll",
    "NoteSpec",
    "AddNote",
    "UpdateNote",
    "DeleteNote",
    "AddNoteSequence",
    "Play",
    "Stop",
    "Pause",
    "SetBpm",
    "SetPosition",
    "ToggleMetronome",
    "AddChannel",
    "UpdateChannel",
    "DeleteChannel",
    "SelectChannel",
    "SetChannelVolume",
    "SetChannelPan",
    "ToggleChannelMute",
    "ToggleChannelSolo",
    "SetVolume",
    "SetPan",
    "ToggleMute",
    "ToggleSolo",
    "SetMasterVolume",
    "AddPlaylistTrack",
    "TogglePlaylistTrackMute",
    "TogglePlaylistTrackSolo",
    "AddClip",
    "MoveClip",
    "ResizeClip",
    "DeleteClip",
    "SetLoopRegion",
    "SetTrackEffect",
    "ResetTrackEffects",
    "ApplyTrackEffects",
    "AddEffect",
    "UpdateEffect",
    "DeleteEffect",
    "AddAudioSample",
    "FocusPanel",
    "ClarificationNeeded",
    "Unknown",
    "COMMAND_MODELS",
    "Command",
    # References
    "LAST_CREATED_KEYWORD",
    "EntityRef",
    "ExplicitRef",
    "LastCreatedRef",
    "explicit",
    # Parser
    "PARAMETER_ALIASES",
    "parse_command",
    "parse_commands",
    "validate_command_structure",
]

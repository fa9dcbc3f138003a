"""Command executors: one handler per command variant.

Every handler runs its validators first and returns on the first failure,
so an invalid command never reaches the store.  ``ProjectError`` raised by
the store (missing pattern, no project) becomes a failed result in
``execute_command``; nothing here lets a domain error escape.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Optional, Union

from pulse.core.commands import models as cmd
from pulse.core.commands.models import CommandModel
from pulse.core.commands.refs import ExplicitRef, LastCreatedRef
from pulse.core.executor.models import BatchContext, ExecutionResult
from pulse.core.library.melodic_patterns import note_name
from pulse.core.project_store import ProjectError
from pulse.core.samples.resolver import sample_key
from pulse.core.timing import PPQ, seconds_to_ticks
from pulse.core.tracing import log_validation_error
from pulse.core.validation import (
    ValidationResult,
    first_failure,
    validate_bpm,
    validate_channel_type,
    validate_duration,
    validate_effect_key,
    validate_effect_parameters,
    validate_effect_type,
    validate_effect_value,
    validate_focus_panel,
    validate_loop_region,
    validate_pan,
    validate_pattern_length,
    validate_pitch,
    validate_tick,
    validate_track_capacity,
    validate_track_index,
    validate_velocity,
    validate_volume,
)

logger = logging.getLogger(__name__)

Handler = Callable[[CommandModel, BatchContext], ExecutionResult]

_HANDLERS: dict[type[CommandModel], Handler] = {}


def handles(*models: type[CommandModel]) -> Callable[[Handler], Handler]:
    """Register a handler for one or more command models."""
    def register(fn: Handler) -> Handler:
        for model in models:
            _HANDLERS[model] = fn
        return fn
    return register


# =============================================================================
# Helpers
# =============================================================================

def _ok(message: str, data: Optional[dict] = None) -> ExecutionResult:
    return ExecutionResult(success=True, message=message, data=data)


def _fail(message: str, error: Optional[str] = None, data: Optional[dict] = None) -> ExecutionResult:
    return ExecutionResult(success=False, message=message, error=error or message, data=data)


def _prefixed(result: ValidationResult, prefix: str) -> ValidationResult:
    if result.valid:
        return result
    return ValidationResult(valid=False, error=f"{prefix}: {result.error}")


def _rejected(ctx: BatchContext, action: str, *checks: ValidationResult) -> Optional[ExecutionResult]:
    """First failing check as a failed result, or ``None`` when all passed."""
    failure = first_failure(checks)
    if failure is None:
        return None
    log_validation_error(ctx.trace.trace_id, action, failure.error_message)
    return _fail(failure.error_message)


def _num(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def _percent(value: float) -> str:
    return f"{round(value * 100)}%"


def _pan_label(pan: float) -> str:
    if pan == 0:
        return "center"
    side = "left" if pan < 0 else "right"
    return f"{round(abs(pan) * 100)}% {side}"


Ref = Union[ExplicitRef, LastCreatedRef]


def resolve_pattern_ref(ref: Ref, ctx: BatchContext) -> Optional[str]:
    """Pattern id for *ref*: this batch's newest pattern, then the project's."""
    if isinstance(ref, ExplicitRef):
        return ref.id
    return ctx.created_pattern_id or ctx.store.last_created_pattern_id()


def resolve_channel_ref(ref: Ref, ctx: BatchContext) -> Optional[str]:
    if isinstance(ref, ExplicitRef):
        return ref.id
    return ctx.created_channel_id or ctx.store.last_created_channel_id()


_NO_PATTERN = "No pattern available to resolve 'current' reference"
_NO_CHANNEL = "No channel available to resolve 'current' reference"


# =============================================================================
# Patterns
# =============================================================================

@handles(cmd.AddPattern)
def add_pattern(c: cmd.AddPattern, ctx: BatchContext) -> ExecutionResult:
    length = c.length_in_steps if c.length_in_steps is not None else 16
    rejected = _rejected(ctx, c.action, validate_pattern_length(length))
    if rejected:
        return rejected
    pattern = ctx.store.add_pattern(c.name, int(length))
    ctx.created_pattern_id = pattern.id
    return _ok(
        f'Created pattern "{pattern.name}" with {pattern.length_in_steps} steps',
        {"patternId": pattern.id},
    )


@handles(cmd.DeletePattern)
def delete_pattern(c: cmd.DeletePattern, ctx: BatchContext) -> ExecutionResult:
    pattern_id = resolve_pattern_ref(c.pattern_id, ctx)
    if pattern_id is None:
        return _fail(_NO_PATTERN)
    pattern = ctx.store.delete_pattern(pattern_id)
    if ctx.created_pattern_id == pattern_id:
        ctx.created_pattern_id = None
    return _ok(f'Deleted pattern "{pattern.name}"', {"patternId": pattern_id})


@handles(cmd.SelectPattern)
def select_pattern(c: cmd.SelectPattern, ctx: BatchContext) -> ExecutionResult:
    pattern_id = resolve_pattern_ref(c.pattern_id, ctx)
    if pattern_id is None:
        return _fail(_NO_PATTERN)
    pattern = ctx.store.select_pattern(pattern_id)
    return _ok(f'Selected pattern "{pattern.name}"', {"patternId": pattern_id})


@handles(cmd.SetPatternLength)
def set_pattern_length(c: cmd.SetPatternLength, ctx: BatchContext) -> ExecutionResult:
    rejected = _rejected(ctx, c.action, validate_pattern_length(c.length_in_steps))
    if rejected:
        return rejected
    pattern_id = resolve_pattern_ref(c.pattern_id, ctx)
    if pattern_id is None:
        return _fail(_NO_PATTERN)
    pattern = ctx.store.set_pattern_length(pattern_id, int(c.length_in_steps))
    return _ok(f'Set pattern "{pattern.name}" length to {pattern.length_in_steps} steps')


@handles(cmd.ClearPatternNotes)
def clear_pattern_notes(c: cmd.ClearPatternNotes, ctx: BatchContext) -> ExecutionResult:
    pattern_id = resolve_pattern_ref(c.pattern_id, ctx)
    if pattern_id is None:
        return _fail(_NO_PATTERN)
    removed = ctx.store.clear_pattern_notes(pattern_id)
    pattern = ctx.store.get_pattern(pattern_id)
    return _ok(f'Cleared {removed} notes from pattern "{pattern.name}"', {"removed": removed})


@handles(cmd.OpenPianoRoll)
def open_piano_roll(c: cmd.OpenPianoRoll, ctx: BatchContext) -> ExecutionResult:
    pattern_id = resolve_pattern_ref(c.pattern_id, ctx)
    if pattern_id is None:
        return _fail(_NO_PATTERN)
    pattern = ctx.store.open_piano_roll(pattern_id)
    return _ok(f'Opened piano roll for pattern "{pattern.name}"')


# =============================================================================
# Notes
# =============================================================================

def _note_checks(pitch, start_tick, duration_tick, velocity) -> list[ValidationResult]:
    return [
        validate_pitch(pitch),
        validate_velocity(velocity),
        _prefixed(validate_tick(start_tick), "Start position"),
        _prefixed(validate_duration(duration_tick), "Duration"),
    ]


@handles(cmd.AddNote)
def add_note(c: cmd.AddNote, ctx: BatchContext) -> ExecutionResult:
    velocity = c.velocity if c.velocity is not None else 100
    rejected = _rejected(ctx, c.action, *_note_checks(c.pitch, c.start_tick, c.duration_tick, velocity))
    if rejected:
        return rejected
    pattern_id = resolve_pattern_ref(c.pattern_id, ctx)
    if pattern_id is None:
        return _fail(_NO_PATTERN)
    note = ctx.store.add_note(pattern_id, int(c.pitch), int(c.start_tick), int(c.duration_tick), int(velocity))
    pattern = ctx.store.get_pattern(pattern_id)
    return _ok(
        f'Added note {note_name(note.pitch)} to pattern "{pattern.name}"',
        {"noteId": note.id, "patternId": pattern_id},
    )


@handles(cmd.AddNoteSequence)
def add_note_sequence(c: cmd.AddNoteSequence, ctx: BatchContext) -> ExecutionResult:
    for i, n in enumerate(c.notes, start=1):
        failure = first_failure(_note_checks(n.pitch, n.start_tick, n.duration_tick, n.velocity))
        if failure is not None:
            log_validation_error(ctx.trace.trace_id, c.action, failure.error_message)
            return _fail(f"Note {i}: {failure.error}")
    pattern_id = resolve_pattern_ref(c.pattern_id, ctx)
    if pattern_id is None:
        return _fail(_NO_PATTERN)
    notes = ctx.store.add_notes(
        pattern_id,
        [(int(n.pitch), int(n.start_tick), int(n.duration_tick), int(n.velocity)) for n in c.notes],
    )
    pattern = ctx.store.get_pattern(pattern_id)
    return _ok(
        f'Added {len(notes)} notes to pattern "{pattern.name}"',
        {"noteIds": [n.id for n in notes], "patternId": pattern_id},
    )


@handles(cmd.UpdateNote)
def update_note(c: cmd.UpdateNote, ctx: BatchContext) -> ExecutionResult:
    checks = []
    if c.pitch is not None:
        checks.append(validate_pitch(c.pitch))
    if c.velocity is not None:
        checks.append(validate_velocity(c.velocity))
    if c.start_tick is not None:
        checks.append(_prefixed(validate_tick(c.start_tick), "Start position"))
    if c.duration_tick is not None:
        checks.append(_prefixed(validate_duration(c.duration_tick), "Duration"))
    rejected = _rejected(ctx, c.action, *checks)
    if rejected:
        return rejected

    def _int(v):
        return int(v) if v is not None else None

    pattern, note = ctx.store.update_note(
        c.note_id,
        pitch=_int(c.pitch),
        start_tick=_int(c.start_tick),
        duration_tick=_int(c.duration_tick),
        velocity=_int(c.velocity),
    )
    return _ok(f'Updated note in pattern "{pattern.name}"', {"noteId": note.id})


@handles(cmd.DeleteNote)
def delete_note(c: cmd.DeleteNote, ctx: BatchContext) -> ExecutionResult:
    pattern = ctx.store.delete_note(c.note_id)
    return _ok(f'Deleted note from pattern "{pattern.name}"', {"noteId": c.note_id})


# =============================================================================
# Transport
# =============================================================================

@handles(cmd.Play)
def play(c: cmd.Play, ctx: BatchContext) -> ExecutionResult:
    ctx.store.play()
    return _ok("Playback started")


@handles(cmd.Stop)
def stop(c: cmd.Stop, ctx: BatchContext) -> ExecutionResult:
    ctx.store.stop()
    return _ok("Playback stopped")


@handles(cmd.Pause)
def pause(c: cmd.Pause, ctx: BatchContext) -> ExecutionResult:
    ctx.store.pause()
    return _ok("Playback paused")


@handles(cmd.SetBpm)
def set_bpm(c: cmd.SetBpm, ctx: BatchContext) -> ExecutionResult:
    rejected = _rejected(ctx, c.action, validate_bpm(c.bpm))
    if rejected:
        return rejected
    ctx.store.set_bpm(c.bpm)
    return _ok(f"Set tempo to {_num(c.bpm)} BPM", {"bpm": c.bpm})


@handles(cmd.SetPosition)
def set_position(c: cmd.SetPosition, ctx: BatchContext) -> ExecutionResult:
    rejected = _rejected(ctx, c.action, _prefixed(validate_tick(c.tick), "Position"))
    if rejected:
        return rejected
    ctx.store.set_position(int(c.tick))
    return _ok(f"Set playback position to tick {int(c.tick)}")


@handles(cmd.ToggleMetronome)
def toggle_metronome(c: cmd.ToggleMetronome, ctx: BatchContext) -> ExecutionResult:
    enabled = ctx.store.toggle_metronome()
    return _ok(f"Metronome {'enabled' if enabled else 'disabled'}", {"enabled": enabled})


# =============================================================================
# Channels
# =============================================================================

@handles(cmd.AddChannel)
def add_channel(c: cmd.AddChannel, ctx: BatchContext) -> ExecutionResult:
    rejected = _rejected(ctx, c.action, validate_channel_type(c.type))
    if rejected:
        return rejected
    name = c.name or f"{c.type.capitalize()} {len(ctx.store.project.channels) + 1}"
    channel = ctx.store.add_channel(name, c.type, c.preset)
    ctx.created_channel_id = channel.id
    suffix = f' with preset "{c.preset}"' if c.preset else ""
    return _ok(f'Added {c.type} channel "{channel.name}"{suffix}', {"channelId": channel.id})


@handles(cmd.UpdateChannel)
def update_channel(c: cmd.UpdateChannel, ctx: BatchContext) -> ExecutionResult:
    channel_id = resolve_channel_ref(c.channel_id, ctx)
    if channel_id is None:
        return _fail(_NO_CHANNEL)
    channel = ctx.store.update_channel(channel_id, name=c.name, preset=c.preset)
    return _ok(f'Updated channel "{channel.name}"', {"channelId": channel_id})


@handles(cmd.DeleteChannel)
def delete_channel(c: cmd.DeleteChannel, ctx: BatchContext) -> ExecutionResult:
    channel_id = resolve_channel_ref(c.channel_id, ctx)
    if channel_id is None:
        return _fail(_NO_CHANNEL)
    channel = ctx.store.delete_channel(channel_id)
    if ctx.created_channel_id == channel_id:
        ctx.created_channel_id = None
    return _ok(f'Deleted channel "{channel.name}"', {"channelId": channel_id})


@handles(cmd.SelectChannel)
def select_channel(c: cmd.SelectChannel, ctx: BatchContext) -> ExecutionResult:
    channel_id = resolve_channel_ref(c.channel_id, ctx)
    if channel_id is None:
        return _fail(_NO_CHANNEL)
    channel = ctx.store.select_channel(channel_id)
    return _ok(f'Selected channel "{channel.name}"', {"channelId": channel_id})


@handles(cmd.SetChannelVolume)
def set_channel_volume(c: cmd.SetChannelVolume, ctx: BatchContext) -> ExecutionResult:
    rejected = _rejected(ctx, c.action, validate_volume(c.volume))
    if rejected:
        return rejected
    channel_id = resolve_channel_ref(c.channel_id, ctx)
    if channel_id is None:
        return _fail(_NO_CHANNEL)
    channel = ctx.store.set_channel_volume(channel_id, c.volume)
    return _ok(f'Set volume to {_percent(c.volume)} for channel "{channel.name}"')


@handles(cmd.SetChannelPan)
def set_channel_pan(c: cmd.SetChannelPan, ctx: BatchContext) -> ExecutionResult:
    rejected = _rejected(ctx, c.action, validate_pan(c.pan))
    if rejected:
        return rejected
    channel_id = resolve_channel_ref(c.channel_id, ctx)
    if channel_id is None:
        return _fail(_NO_CHANNEL)
    channel = ctx.store.set_channel_pan(channel_id, c.pan)
    return _ok(f'Set pan to {_pan_label(c.pan)} for channel "{channel.name}"')


@handles(cmd.ToggleChannelMute)
def toggle_channel_mute(c: cmd.ToggleChannelMute, ctx: BatchContext) -> ExecutionResult:
    channel_id = resolve_channel_ref(c.channel_id, ctx)
    if channel_id is None:
        return _fail(_NO_CHANNEL)
    channel, muted = ctx.store.toggle_channel_mute(channel_id)
    return _ok(f'{"Muted" if muted else "Unmuted"} channel "{channel.name}"', {"mute": muted})


@handles(cmd.ToggleChannelSolo)
def toggle_channel_solo(c: cmd.ToggleChannelSolo, ctx: BatchContext) -> ExecutionResult:
    channel_id = resolve_channel_ref(c.channel_id, ctx)
    if channel_id is None:
        return _fail(_NO_CHANNEL)
    channel, soloed = ctx.store.toggle_channel_solo(channel_id)
    return _ok(f'{"Soloed" if soloed else "Unsoloed"} channel "{channel.name}"', {"solo": soloed})


# =============================================================================
# Mixer
# =============================================================================

@handles(cmd.SetVolume)
def set_volume(c: cmd.SetVolume, ctx: BatchContext) -> ExecutionResult:
    rejected = _rejected(
        ctx, c.action,
        validate_track_index(c.track_index, ctx.store.track_count),
        validate_volume(c.volume, scope="track"),
    )
    if rejected:
        return rejected
    track = ctx.store.set_track_volume(int(c.track_index), c.volume)
    return _ok(f'Set volume to {_percent(c.volume)} for track "{track.name}"')


@handles(cmd.SetPan)
def set_pan(c: cmd.SetPan, ctx: BatchContext) -> ExecutionResult:
    rejected = _rejected(
        ctx, c.action,
        validate_track_index(c.track_index, ctx.store.track_count),
        validate_pan(c.pan),
    )
    if rejected:
        return rejected
    track = ctx.store.set_track_pan(int(c.track_index), c.pan)
    return _ok(f'Set pan to {_pan_label(c.pan)} for track "{track.name}"')


@handles(cmd.ToggleMute)
def toggle_mute(c: cmd.ToggleMute, ctx: BatchContext) -> ExecutionResult:
    rejected = _rejected(ctx, c.action, validate_track_index(c.track_index, ctx.store.track_count))
    if rejected:
        return rejected
    track, muted = ctx.store.toggle_track_mute(int(c.track_index))
    return _ok(f'{"Muted" if muted else "Unmuted"} track "{track.name}"', {"mute": muted})


@handles(cmd.ToggleSolo)
def toggle_solo(c: cmd.ToggleSolo, ctx: BatchContext) -> ExecutionResult:
    rejected = _rejected(ctx, c.action, validate_track_index(c.track_index, ctx.store.track_count))
    if rejected:
        return rejected
    track, soloed = ctx.store.toggle_track_solo(int(c.track_index))
    return _ok(f'{"Soloed" if soloed else "Unsoloed"} track "{track.name}"', {"solo": soloed})


@handles(cmd.SetMasterVolume)
def set_master_volume(c: cmd.SetMasterVolume, ctx: BatchContext) -> ExecutionResult:
    rejected = _rejected(ctx, c.action, validate_volume(c.volume, scope="master"))
    if rejected:
        return rejected
    ctx.store.set_master_volume(c.volume)
    return _ok(f"Set master volume to {_percent(c.volume)}")


# =============================================================================
# Playlist
# =============================================================================

@handles(cmd.AddPlaylistTrack)
def add_playlist_track(c: cmd.AddPlaylistTrack, ctx: BatchContext) -> ExecutionResult:
    rejected = _rejected(ctx, c.action, validate_track_capacity(ctx.store.track_count))
    if rejected:
        return rejected
    track = ctx.store.add_playlist_track(c.name)
    return _ok(
        f'Added playlist track "{track.name}"',
        {"trackId": track.id, "trackIndex": ctx.store.track_count - 1},
    )


@handles(cmd.TogglePlaylistTrackMute)
def toggle_playlist_track_mute(c: cmd.TogglePlaylistTrackMute, ctx: BatchContext) -> ExecutionResult:
    track, muted = ctx.store.toggle_playlist_track_mute(c.track_id)
    return _ok(f'{"Muted" if muted else "Unmuted"} track "{track.name}"', {"mute": muted})


@handles(cmd.TogglePlaylistTrackSolo)
def toggle_playlist_track_solo(c: cmd.TogglePlaylistTrackSolo, ctx: BatchContext) -> ExecutionResult:
    track, soloed = ctx.store.toggle_playlist_track_solo(c.track_id)
    return _ok(f'{"Soloed" if soloed else "Unsoloed"} track "{track.name}"', {"solo": soloed})


@handles(cmd.AddClip)
def add_clip(c: cmd.AddClip, ctx: BatchContext) -> ExecutionResult:
    checks = [
        validate_track_index(c.track_index, ctx.store.track_count),
        _prefixed(validate_tick(c.start_tick), "Start position"),
    ]
    if c.duration_tick is not None:
        checks.append(_prefixed(validate_duration(c.duration_tick), "Duration"))
    rejected = _rejected(ctx, c.action, *checks)
    if rejected:
        return rejected
    pattern_id = resolve_pattern_ref(c.pattern_id, ctx)
    if pattern_id is None:
        return _fail(_NO_PATTERN)
    clip = ctx.store.add_clip(
        pattern_id,
        int(c.track_index),
        int(c.start_tick),
        int(c.duration_tick) if c.duration_tick is not None else None,
    )
    pattern = ctx.store.get_pattern(pattern_id)
    track = ctx.store.get_track(clip.track_index)
    return _ok(
        f'Added clip for pattern "{pattern.name}" to track "{track.name}" at tick {clip.start_tick}',
        {"clipId": clip.id, "startTick": clip.start_tick, "trackIndex": clip.track_index},
    )


@handles(cmd.MoveClip)
def move_clip(c: cmd.MoveClip, ctx: BatchContext) -> ExecutionResult:
    rejected = _rejected(
        ctx, c.action,
        validate_track_index(c.track_index, ctx.store.track_count),
        _prefixed(validate_tick(c.start_tick), "Start position"),
    )
    if rejected:
        return rejected
    clip = ctx.store.move_clip(c.clip_id, int(c.track_index), int(c.start_tick))
    return _ok(f"Moved clip to track {clip.track_index} at tick {clip.start_tick}", {"clipId": clip.id})


@handles(cmd.ResizeClip)
def resize_clip(c: cmd.ResizeClip, ctx: BatchContext) -> ExecutionResult:
    rejected = _rejected(ctx, c.action, _prefixed(validate_duration(c.duration_tick), "Duration"))
    if rejected:
        return rejected
    clip = ctx.store.resize_clip(c.clip_id, int(c.duration_tick))
    return _ok(f"Resized clip to {clip.duration_tick} ticks", {"clipId": clip.id})


@handles(cmd.DeleteClip)
def delete_clip(c: cmd.DeleteClip, ctx: BatchContext) -> ExecutionResult:
    clip = ctx.store.delete_clip(c.clip_id)
    return _ok("Deleted clip", {"clipId": clip.id})


@handles(cmd.SetLoopRegion)
def set_loop_region(c: cmd.SetLoopRegion, ctx: BatchContext) -> ExecutionResult:
    rejected = _rejected(ctx, c.action, validate_loop_region(c.start_tick, c.end_tick))
    if rejected:
        return rejected
    start, end = int(c.start_tick), int(c.end_tick)
    ctx.store.set_loop_region(start, end)
    return _ok(f"Set loop region from tick {start} to {end} ({end - start} ticks)")


# =============================================================================
# Effects
# =============================================================================

@handles(cmd.SetTrackEffect)
def set_track_effect(c: cmd.SetTrackEffect, ctx: BatchContext) -> ExecutionResult:
    rejected = _rejected(ctx, c.action, validate_effect_key(c.key), validate_effect_value(c.key, c.value))
    if rejected:
        return rejected
    track = ctx.store.set_track_effect(c.track_id, c.key, c.value)
    return _ok(f'Set {c.key} to {_num(c.value)} on track "{track.name}"')


@handles(cmd.ResetTrackEffects)
def reset_track_effects(c: cmd.ResetTrackEffects, ctx: BatchContext) -> ExecutionResult:
    track = ctx.store.reset_track_effects(c.track_id)
    return _ok(f'Reset effects on track "{track.name}"')


@handles(cmd.ApplyTrackEffects)
def apply_track_effects(c: cmd.ApplyTrackEffects, ctx: BatchContext) -> ExecutionResult:
    track = ctx.store.apply_track_effects(c.track_id)
    return _ok(f'Applied effects to track "{track.name}"', {"effects": dict(track.effects)})


@handles(cmd.AddEffect)
def add_effect(c: cmd.AddEffect, ctx: BatchContext) -> ExecutionResult:
    rejected = _rejected(
        ctx, c.action,
        validate_track_index(c.track_index, ctx.store.track_count),
        validate_effect_type(c.effect_type),
    )
    if rejected:
        return rejected
    track, effect = ctx.store.add_insert_effect(int(c.track_index), c.effect_type)
    return _ok(f'Added {effect.type} effect to track "{track.name}"', {"effectId": effect.id})


@handles(cmd.UpdateEffect)
def update_effect(c: cmd.UpdateEffect, ctx: BatchContext) -> ExecutionResult:
    rejected = _rejected(ctx, c.action, validate_effect_parameters(c.parameters))
    if rejected:
        return rejected
    effect = ctx.store.update_insert_effect(c.effect_id, dict(c.parameters))
    return _ok(f"Updated {effect.type} effect parameters", {"effectId": effect.id})


@handles(cmd.DeleteEffect)
def delete_effect(c: cmd.DeleteEffect, ctx: BatchContext) -> ExecutionResult:
    track, effect = ctx.store.remove_insert_effect(c.effect_id)
    return _ok(f'Removed {effect.type} effect from track "{track.name}"', {"effectId": effect.id})


# =============================================================================
# Samples / UI
# =============================================================================

@handles(cmd.AddAudioSample)
def add_audio_sample(c: cmd.AddAudioSample, ctx: BatchContext) -> ExecutionResult:
    """
    Place a library sample on the playlist.

    The batch has already bound ``sample_id`` for category queries.  With
    no ``track_index`` a new track named after the sample is created.
    """
    if not c.sample_id:
        return _fail(f"No sample found for {sample_key(c.category or 'drums', c.subcategory)}")
    sample = ctx.library.get(c.sample_id)
    if sample is None:
        return _fail(f"Sample not found: {c.sample_id}")

    checks = [_prefixed(validate_tick(c.start_tick), "Start position")]
    if c.track_index is not None:
        checks.append(validate_track_index(c.track_index, ctx.store.track_count))
    else:
        checks.append(validate_track_capacity(ctx.store.track_count))
    if c.duration_tick is not None:
        checks.append(_prefixed(validate_duration(c.duration_tick), "Duration"))
    rejected = _rejected(ctx, c.action, *checks)
    if rejected:
        return rejected

    if c.track_index is None:
        ctx.store.add_playlist_track(sample.name)
        track_index = ctx.store.track_count - 1
    else:
        track_index = int(c.track_index)

    if c.duration_tick is not None:
        duration = int(c.duration_tick)
    else:
        duration = seconds_to_ticks(sample.duration, ctx.store.project.bpm) or PPQ

    asset = ctx.store.add_audio_asset(sample)
    clip = ctx.store.add_audio_clip(asset.id, track_index, int(c.start_tick), max(duration, 1))
    track = ctx.store.get_track(track_index)
    return _ok(
        f'Added sample "{sample.name}" to track "{track.name}" at tick {clip.start_tick}',
        {
            "clipId": clip.id,
            "assetId": asset.id,
            "sampleId": sample.sample_id,
            "trackIndex": track_index,
            "startTick": clip.start_tick,
        },
    )


@handles(cmd.FocusPanel)
def focus_panel(c: cmd.FocusPanel, ctx: BatchContext) -> ExecutionResult:
    rejected = _rejected(ctx, c.action, validate_focus_panel(c.panel))
    if rejected:
        return rejected
    ctx.store.focus_panel(c.panel)
    return _ok(f"Focused {c.panel} panel")


# =============================================================================
# Sentinels
# =============================================================================

@handles(cmd.ClarificationNeeded)
def clarification_needed(c: cmd.ClarificationNeeded, ctx: BatchContext) -> ExecutionResult:
    return ExecutionResult(
        success=False,
        message=c.message,
        data={"suggestedOptions": list(c.suggested_options)},
    )


@handles(cmd.Unknown)
def unknown(c: cmd.Unknown, ctx: BatchContext) -> ExecutionResult:
    return ExecutionResult(
        success=False,
        message=f"Could not understand command: {c.reason}",
        error=c.original_text,
    )


# =============================================================================
# Dispatch
# =============================================================================

def execute_command(command: CommandModel, ctx: BatchContext) -> ExecutionResult:
    """
    Run one typed command against ``ctx.store``.

    Domain errors from the store become failed results.  Anything else
    propagates to the caller's step boundary.
    """
    handler = _HANDLERS.get(type(command))
    if handler is None:
        result = _fail(f"No executor for action: {command.action}")
    else:
        try:
            result = handler(command, ctx)
        except ProjectError as e:
            logger.debug(f"Command {command.action} failed: {e}")
            result = _fail(str(e))
    result.action = command.action
    return result

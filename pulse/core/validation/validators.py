"""Pure field validators used by every command executor.

Each validator takes a value (plus any context it needs, passed explicitly)
and returns a ``ValidationResult``.  Executors run the relevant validators
in order and stop at the first failure, so no mutation happens for an
invalid command.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Literal, Optional

from pulse.core.validation.constants import (
    CHANNEL_TYPES,
    EFFECT_TYPES,
    FOCUS_PANELS,
    MAX_TRACKS,
    TRACK_EFFECT_KEYS,
    TRACK_EFFECT_MESSAGES,
    TRACK_EFFECT_RANGES,
    VALUE_RANGES,
)
from pulse.core.validation.models import OK, ValidationResult, fail


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value) and not math.isinf(value)


def _is_integer(value: float) -> bool:
    return float(value).is_integer()


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def validate_bpm(bpm: object) -> ValidationResult:
    if not _is_number(bpm):
        return fail("BPM must be a number")
    low, high = VALUE_RANGES["bpm"]
    if bpm < low:
        return fail(f"BPM too low (minimum: {_fmt(low)})")
    if bpm > high:
        return fail(f"BPM too high (maximum: {_fmt(high)})")
    return OK


def _validate_midi_byte(value: object, label: str, field: str) -> ValidationResult:
    if not _is_number(value):
        return fail(f"{label} must be a number")
    low, high = VALUE_RANGES[field]
    if value < low:
        return fail(f"{label} below valid range (minimum: {_fmt(low)})")
    if value > high:
        return fail(f"{label} above valid range (maximum: {_fmt(high)})")
    if not _is_integer(value):
        return fail(f"{label} must be an integer")
    return OK


def validate_pitch(pitch: object) -> ValidationResult:
    """MIDI pitch, integer in [0, 127]."""
    return _validate_midi_byte(pitch, "Pitch", "pitch")


def validate_velocity(velocity: object) -> ValidationResult:
    """MIDI velocity, integer in [0, 127]."""
    return _validate_midi_byte(velocity, "Velocity", "velocity")


def validate_volume(
    volume: object,
    scope: Literal["track", "master"] = "track",
) -> ValidationResult:
    """Linear gain.  Mixer tracks allow up to 1.5 (150%), master up to 2.0 (200%)."""
    if not _is_number(volume):
        return fail("Volume must be a number")
    low, high = VALUE_RANGES["master_volume" if scope == "master" else "track_volume"]
    if volume < low:
        return fail("Volume cannot be negative")
    if volume > high:
        return fail(f"Volume too high (maximum: {_fmt(high)} / {round(high * 100)}%)")
    return OK


def validate_pan(pan: object) -> ValidationResult:
    if not _is_number(pan):
        return fail("Pan must be a number")
    low, high = VALUE_RANGES["pan"]
    if pan < low:
        return fail(f"Pan too far left (minimum: {_fmt(low)})")
    if pan > high:
        return fail(f"Pan too far right (maximum: {_fmt(high)})")
    return OK


def validate_track_index(index: object, track_count: int) -> ValidationResult:
    """Index into the playlist; *track_count* is the collaborator's current count."""
    if not _is_number(index):
        return fail("Track index must be a number")
    if not _is_integer(index):
        return fail("Track index must be an integer")
    if index < 0:
        return fail("Track index cannot be negative")
    if index >= track_count:
        return fail(f"Track index out of range (maximum: {track_count - 1})")
    return OK


def validate_track_capacity(track_count: int) -> ValidationResult:
    """Room for one more playlist track."""
    if track_count >= MAX_TRACKS:
        return fail(f"Track limit reached (maximum: {MAX_TRACKS} tracks)")
    return OK


def validate_tick(tick: object) -> ValidationResult:
    if not _is_number(tick):
        return fail("Tick must be a number")
    if not _is_integer(tick):
        return fail("Tick must be an integer")
    if tick < 0:
        return fail("Tick cannot be negative")
    return OK


def validate_duration(duration: object) -> ValidationResult:
    if not _is_number(duration):
        return fail("Duration must be a number")
    if not _is_integer(duration):
        return fail("Duration must be an integer")
    if duration <= 0:
        return fail("Duration must be positive")
    return OK


def validate_pattern_length(length_in_steps: object) -> ValidationResult:
    if not _is_number(length_in_steps):
        return fail("Pattern length must be a number")
    if not _is_integer(length_in_steps):
        return fail("Pattern length must be an integer")
    low, high = VALUE_RANGES["pattern_length"]
    if length_in_steps < low:
        return fail("Pattern length must be at least 1 step")
    if length_in_steps > high:
        return fail(f"Pattern length too long (maximum: {_fmt(high)} steps)")
    return OK


def _validate_member(value: object, allowed: tuple[str, ...], label: str) -> ValidationResult:
    if value not in allowed:
        return fail(f"Invalid {label}. Must be one of: {', '.join(allowed)}")
    return OK


def validate_channel_type(channel_type: object) -> ValidationResult:
    return _validate_member(channel_type, CHANNEL_TYPES, "channel type")


def validate_effect_type(effect_type: object) -> ValidationResult:
    return _validate_member(effect_type, EFFECT_TYPES, "effect type")


def validate_focus_panel(panel: object) -> ValidationResult:
    return _validate_member(panel, FOCUS_PANELS, "panel")


def validate_effect_key(key: object) -> ValidationResult:
    """Membership check for per-track mixer effect keys."""
    return _validate_member(key, TRACK_EFFECT_KEYS, "effect key")


def validate_effect_value(key: str, value: object) -> ValidationResult:
    """Range check for a per-track mixer effect value, keyed by effect."""
    if not _is_number(value):
        return fail(f"Effect value for '{key}' must be a number")
    bounds = TRACK_EFFECT_RANGES.get(key)
    if bounds is None:
        return fail(f"Unknown effect key: {key}")
    low, high = bounds
    if value < low or value > high:
        default = f"{key} must be between {_fmt(low)} and {_fmt(high)}"
        if key.startswith("eq"):
            default = f"{key} must be between {_fmt(low)} and +{_fmt(high)} dB"
        return fail(TRACK_EFFECT_MESSAGES.get(key, default))
    return OK


def validate_effect_parameters(parameters: Mapping[str, object]) -> ValidationResult:
    """Insert-effect parameter bag: at least one entry, every value numeric."""
    if not parameters:
        return fail("Effect parameters cannot be empty")
    for name, value in parameters.items():
        if not name.strip():
            return fail("Effect parameter names cannot be empty")
        if not _is_number(value):
            return fail(f"Effect parameter '{name}' must be a number")
    return OK


def validate_non_empty_string(value: object, field_name: str = "Field") -> ValidationResult:
    if not isinstance(value, str):
        return fail(f"{field_name} must be a string")
    if not value.strip():
        return fail(f"{field_name} cannot be empty")
    return OK


def validate_loop_region(start_tick: object, end_tick: object) -> ValidationResult:
    start = validate_tick(start_tick)
    if not start:
        return fail(f"Loop start: {start.error}")
    end = validate_tick(end_tick)
    if not end:
        return fail(f"Loop end: {end.error}")
    if start_tick >= end_tick:  # type: ignore[operator]  # both checked numeric above
        return fail("Loop start must be before loop end")
    return OK


# =============================================================================
# Composition helpers
# =============================================================================

def first_failure(results: Iterable[ValidationResult]) -> Optional[ValidationResult]:
    """Return the first failing result, or ``None`` when every check passed."""
    for result in results:
        if not result.valid:
            return result
    return None


def collect_errors(results: Iterable[ValidationResult]) -> list[str]:
    """Collect error messages from every failing result."""
    return [r.error_message for r in results if not r.valid]

"""
Command validation package for Pulse Copilot.

Pure range/shape checks run by every command executor before it touches
the project:
1. Numeric domain ranges (pitch, velocity, BPM, volume, pan, ticks)
2. Index bounds against an explicitly passed track count
3. Enum membership (channel types, effect types, effect keys, panels)
4. Per-key effect value ranges

Public API:
    validate_<field>(value, ...) -> ValidationResult
    first_failure(results) -> ValidationResult | None
    collect_errors(results) -> list[str]
"""

from pulse.core.validation.models import ValidationResult
from pulse.core.validation.constants import (
    CHANNEL_TYPES,
    EFFECT_TYPES,
    FOCUS_PANELS,
    MAX_TRACKS,
    TRACK_EFFECT_KEYS,
    TRACK_EFFECT_RANGES,
    VALUE_RANGES,
)
from pulse.core.validation.validators import (
    collect_errors,
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
    validate_non_empty_string,
    validate_pan,
    validate_pattern_length,
    validate_pitch,
    validate_tick,
    validate_track_capacity,
    validate_track_index,
    validate_velocity,
    validate_volume,
)

__all__ = [
    # Models
    "ValidationResult",
    # Constants
    "CHANNEL_TYPES",
    "EFFECT_TYPES",
    "FOCUS_PANELS",
    "MAX_TRACKS",
    "TRACK_EFFECT_KEYS",
    "TRACK_EFFECT_RANGES",
    "VALUE_RANGES",
    # Validators
    "validate_bpm",
    "validate_channel_type",
    "validate_duration",
    "validate_effect_key",
    "validate_effect_parameters",
    "validate_effect_type",
    "validate_effect_value",
    "validate_focus_panel",
    "validate_loop_region",
    "validate_non_empty_string",
    "validate_pan",
    "validate_pattern_length",
    "validate_pitch",
    "validate_tick",
    "validate_track_capacity",
    "validate_track_index",
    "validate_velocity",
    "validate_volume",
    # Composition
    "collect_errors",
    "first_failure",
]

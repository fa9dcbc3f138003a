"""Constants for command validation: domain ranges and enum memberships."""

from __future__ import annotations

# (min, max) inclusive ranges keyed by field.
VALUE_RANGES: dict[str, tuple[float, float]] = {
    "pitch": (0, 127),
    "velocity": (0, 127),
    "bpm": (20, 999),
    "track_volume": (0.0, 1.5),
    "master_volume": (0.0, 2.0),
    "pan": (-1.0, 1.0),
    "pattern_length": (1, 256),
}

CHANNEL_TYPES: tuple[str, ...] = ("synth", "sampler")

EFFECT_TYPES: tuple[str, ...] = ("reverb", "delay", "eq", "compressor", "distortion")

FOCUS_PANELS: tuple[str, ...] = ("browser", "channelRack", "mixer", "playlist", "pianoRoll", "chat")

# Per-track mixer effect keys and their accepted ranges.
TRACK_EFFECT_RANGES: dict[str, tuple[float, float]] = {
    "volume": (0.0, 2.0),
    "pan": (-1.0, 1.0),
    "eqLow": (-12.0, 12.0),
    "eqMid": (-12.0, 12.0),
    "eqHigh": (-12.0, 12.0),
    "compThreshold": (-60.0, 0.0),
    "compRatio": (1.0, 20.0),
    "reverbWet": (0.0, 1.0),
    "reverb": (0.0, 1.0),
    "delay": (0.0, 1.0),
    "distortion": (0.0, 1.0),
    "lowpass": (100.0, 20000.0),
    "highpass": (20.0, 10000.0),
}

TRACK_EFFECT_KEYS: tuple[str, ...] = tuple(TRACK_EFFECT_RANGES)

# Human-readable range errors for keys whose message is not the generic one.
TRACK_EFFECT_MESSAGES: dict[str, str] = {
    "volume": "Volume must be between 0 and 2 (0% to 200%)",
    "pan": "Pan must be between -1 (left) and 1 (right)",
    "compThreshold": "Compression threshold must be between -60 and 0 dB",
    "compRatio": "Compression ratio must be between 1 and 20",
    "reverbWet": "Reverb wet must be between 0 (dry) and 1 (wet)",
    "lowpass": "Lowpass cutoff must be between 100 and 20000 Hz",
    "highpass": "Highpass cutoff must be between 20 and 10000 Hz",
}


# Upper bound on playlist tracks; batch provisioning never creates more.
MAX_TRACKS: int = 128

"""Musical time constants and tick conversions (PPQ 96, 4/4)."""

from __future__ import annotations

PPQ = 96
BEATS_PER_BAR = 4
TICKS_PER_BAR = PPQ * BEATS_PER_BAR
STEPS_PER_BEAT = 4
TICKS_PER_STEP = PPQ // STEPS_PER_BEAT

# 32nd note; placements colliding on the exact same tick move by this much.
CONFLICT_SHIFT_TICKS = PPQ // 8


def beats_to_ticks(beats: float) -> int:
    return round(beats * PPQ)


def bars_to_ticks(bars: float) -> int:
    return round(bars * TICKS_PER_BAR)


def steps_to_ticks(steps: int) -> int:
    return steps * TICKS_PER_STEP


def ticks_to_seconds(ticks: int, bpm: float) -> float:
    """Wall-clock duration of *ticks* at *bpm*."""
    return (ticks / PPQ) * (60.0 / bpm)


def seconds_to_ticks(seconds: float, bpm: float) -> int:
    return round(seconds * (bpm / 60.0) * PPQ)

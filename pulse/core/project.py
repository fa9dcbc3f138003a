"""
Project domain model.

Plain dataclasses mutated only through ``ProjectStore``.  Ids are uuid4
strings; ticks use the PPQ = 96 grid from ``pulse.core.timing``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Literal, Optional

from pulse.core.timing import TICKS_PER_BAR, TICKS_PER_STEP

DEFAULT_BPM = 120
DEFAULT_PATTERN_STEPS = 16

# Unity mixer strip: every key a freshly created playlist track starts with.
DEFAULT_TRACK_EFFECTS: dict[str, float] = {
    "volume": 1.0,
    "pan": 0.0,
    "eqLow": 0.0,
    "eqMid": 0.0,
    "eqHigh": 0.0,
    "compThreshold": -24.0,
    "compRatio": 4.0,
    "reverbWet": 0.0,
}

# Rotating palette for new patterns, channels and tracks.
PALETTE: tuple[str, ...] = (
    "#ff6b6b", "#feca57", "#48dbfb", "#1dd1a1", "#5f27cd", "#ff9ff3", "#54a0ff", "#00d2d3",
)

TransportState = Literal["stopped", "playing", "paused"]
ClipType = Literal["pattern", "audio"]


def new_id() -> str:
    return str(uuid.uuid4())


def palette_color(index: int) -> str:
    return PALETTE[index % len(PALETTE)]


@dataclass
class Note:
    id: str
    pitch: int
    start_tick: int
    duration_tick: int
    velocity: int = 100


@dataclass
class Pattern:
    id: str
    name: str
    color: str
    length_in_steps: int = DEFAULT_PATTERN_STEPS
    notes: list[Note] = field(default_factory=list)

    @property
    def length_in_ticks(self) -> int:
        return self.length_in_steps * TICKS_PER_STEP


@dataclass
class Channel:
    id: str
    name: str
    type: str
    color: str
    volume: float = 0.8
    pan: float = 0.0
    mute: bool = False
    solo: bool = False
    preset: Optional[str] = None


@dataclass
class InsertEffect:
    id: str
    type: str
    enabled: bool = True
    parameters: dict[str, float] = field(default_factory=dict)


@dataclass
class PlaylistTrack:
    """One playlist lane; doubles as the mixer strip at the same index."""
    id: str
    name: str
    color: str
    mute: bool = False
    solo: bool = False
    effects: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_TRACK_EFFECTS))
    applied_effects: Optional[dict[str, float]] = None
    inserts: list[InsertEffect] = field(default_factory=list)


@dataclass
class Clip:
    id: str
    type: ClipType
    track_index: int
    start_tick: int
    duration_tick: int
    pattern_id: Optional[str] = None
    asset_id: Optional[str] = None
    mute: bool = False


@dataclass
class AudioAsset:
    """A library sample pulled into the project."""
    id: str
    sample_id: str
    name: str
    path: str
    duration: float  # seconds


@dataclass
class Transport:
    state: TransportState = "stopped"
    position: int = 0
    bpm: float = DEFAULT_BPM
    metronome_enabled: bool = False


@dataclass
class Project:
    id: str = field(default_factory=new_id)
    name: str = "Untitled Project"
    patterns: list[Pattern] = field(default_factory=list)
    channels: list[Channel] = field(default_factory=list)
    tracks: list[PlaylistTrack] = field(default_factory=list)
    clips: list[Clip] = field(default_factory=list)
    assets: list[AudioAsset] = field(default_factory=list)
    transport: Transport = field(default_factory=Transport)
    master_volume: float = 1.0
    loop_start: int = 0
    loop_end: int = TICKS_PER_BAR * 4
    loop_enabled: bool = False
    selected_pattern_id: Optional[str] = None
    selected_channel_id: Optional[str] = None
    piano_roll_pattern_id: Optional[str] = None
    focused_panel: Optional[str] = None

    @property
    def bpm(self) -> float:
        return self.transport.bpm

    def to_dict(self) -> dict[str, Any]:
        """camelCase summary used in API responses and the context prompt."""
        return {
            "id": self.id,
            "name": self.name,
            "bpm": self.transport.bpm,
            "transport": {
                "state": self.transport.state,
                "position": self.transport.position,
                "metronomeEnabled": self.transport.metronome_enabled,
            },
            "masterVolume": self.master_volume,
            "loop": {"start": self.loop_start, "end": self.loop_end, "enabled": self.loop_enabled},
            "patterns": [
                {
                    "id": p.id,
                    "name": p.name,
                    "lengthInSteps": p.length_in_steps,
                    "noteCount": len(p.notes),
                }
                for p in self.patterns
            ],
            "channels": [
                {"id": c.id, "name": c.name, "type": c.type, "preset": c.preset, "volume": c.volume, "pan": c.pan}
                for c in self.channels
            ],
            "tracks": [
                {
                    "id": t.id,
                    "index": i,
                    "name": t.name,
                    "mute": t.mute,
                    "solo": t.solo,
                    "effects": dict(t.effects),
                    "inserts": [{"id": e.id, "type": e.type} for e in t.inserts],
                }
                for i, t in enumerate(self.tracks)
            ],
            "clips": [
                {
                    "id": c.id,
                    "type": c.type,
                    "trackIndex": c.track_index,
                    "startTick": c.start_tick,
                    "durationTick": c.duration_tick,
                    "patternId": c.pattern_id,
                    "assetId": c.asset_id,
                }
                for c in self.clips
            ],
            "selectedPatternId": self.selected_pattern_id,
            "focusedPanel": self.focused_panel,
        }

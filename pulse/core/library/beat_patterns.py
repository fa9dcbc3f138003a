"""
Beat pattern templates.

Each pattern pins drum hits to exact ticks (PPQ = 96):
- 1 beat = 96 ticks, 1 bar = 384 ticks
- 8th = 48, 16th = 24, 32nd = 12, triplet 8th = 32

Patterns are four bars unless noted.  ``pattern_to_actions`` turns a
template into ``addAudioSample`` entries, one playlist track per drum
track, which the batch executor then resolves against the sample library.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional

from pulse.contracts.json_types import RawActionDict
from pulse.core.timing import PPQ, TICKS_PER_BAR

Instrument = Literal["kick", "snare", "clap", "hihat", "hihat-open", "tom", "cymbal", "perc"]


@dataclass(frozen=True)
class Hit:
    tick: int
    velocity: int = 100


@dataclass(frozen=True)
class DrumTrack:
    instrument: Instrument
    subcategory: str  # sample-library subcategory
    hits: tuple[Hit, ...]


@dataclass(frozen=True)
class BeatPattern:
    id: str
    name: str
    genre: str
    bpm_range: tuple[int, int]
    default_bpm: int
    description: str
    tracks: tuple[DrumTrack, ...]
    subgenre: Optional[str] = None
    bars: int = 4
    tags: tuple[str, ...] = field(default_factory=tuple)


# =============================================================================
# Hit helpers
# =============================================================================

def regular_hits(start: int, interval: int, count: int, velocity: int = 100) -> tuple[Hit, ...]:
    """*count* hits every *interval* ticks from *start*."""
    return tuple(Hit(start + i * interval, velocity) for i in range(count))


def beats_to_ticks(bars: int, beats: list[float]) -> list[int]:
    """Beat positions (0-based, per bar) repeated over *bars* bars."""
    return [int(bar * TICKS_PER_BAR + beat * PPQ) for bar in range(bars) for beat in beats]


def ticks_to_hits(ticks: list[int], velocity: int = 100) -> tuple[Hit, ...]:
    return tuple(Hit(t, velocity) for t in ticks)


def _hits(*pairs: tuple[int, int]) -> tuple[Hit, ...]:
    return tuple(Hit(tick, velocity) for tick, velocity in pairs)


def _track(instrument: Instrument, hits: tuple[Hit, ...], subcategory: Optional[str] = None) -> DrumTrack:
    if subcategory is None:
        subcategory = "hihat" if instrument.startswith("hihat") else instrument
    return DrumTrack(instrument=instrument, subcategory=subcategory, hits=hits)


# Backbeat on 2 and 4 across four bars: 96, 288, 480, ...
_BACKBEAT = beats_to_ticks(4, [1, 3])
# Kick on "one" and "two-and" per bar: 0, 144, 384, 528, ...
_ONE_AND_TWO_AND = beats_to_ticks(4, [0, 1.5])
# Kick on 1, 2-and, 4: 0, 144, 288, 384, ...
_DRILL_KICK = beats_to_ticks(4, [0, 1.5, 3])
_DOWNBEATS = beats_to_ticks(4, [0])


# =============================================================================
# Hip-Hop
# =============================================================================

BOOM_BAP_CLASSIC = BeatPattern(
    id="boom-bap-classic",
    name="Boom Bap Classic",
    genre="Hip-Hop",
    subgenre="Boom Bap",
    bpm_range=(85, 95),
    default_bpm=90,
    description="Classic NYC 90s hip-hop feel with punchy kicks and snappy snares",
    tags=("90s", "nyc", "golden-era", "sample-based"),
    tracks=(
        _track("kick", tuple(Hit(t, 110 if t % TICKS_PER_BAR == 0 else 90) for t in _ONE_AND_TWO_AND)),
        _track("snare", ticks_to_hits(_BACKBEAT)),
        _track("hihat", regular_hits(0, 48, 32, 80)),
    ),
)

TRAP_ATLANTA = BeatPattern(
    id="trap-atlanta",
    name="Trap Atlanta",
    genre="Hip-Hop",
    subgenre="Trap",
    bpm_range=(130, 145),
    default_bpm=140,
    description="Atlanta trap with 808s, hi-hat rolls, and halftime snare",
    tags=("808", "atlanta", "modern", "hi-hat-rolls"),
    tracks=(
        _track("kick", _hits(
            (0, 127), (288, 110), (384, 127), (576, 100),
            (768, 127), (1056, 110), (1152, 127), (1344, 100),
        )),
        _track("clap", ticks_to_hits(_BACKBEAT, 110)),
        _track("hihat", regular_hits(0, 24, 64, 90) + _hits(
            (72, 60), (84, 70), (168, 60), (180, 70),
            (456, 60), (468, 70), (840, 60), (852, 70),
        )),
        _track("hihat-open", ticks_to_hits([144, 528, 912, 1296], 80)),
    ),
)

DRILL_UK = BeatPattern(
    id="drill-uk",
    name="UK Drill",
    genre="Hip-Hop",
    subgenre="Drill",
    bpm_range=(140, 145),
    default_bpm=142,
    description="UK drill with sliding 808s and complex hi-hat patterns",
    tags=("uk", "drill", "dark", "808"),
    tracks=(
        _track("kick", tuple(Hit(t, 100 if t % PPQ else 127) for t in _DRILL_KICK)),
        _track("snare", ticks_to_hits(_BACKBEAT, 110)),
        _track("hihat", regular_hits(0, 32, 48, 80) + ticks_to_hits([16, 400, 784, 1168], 60)),
    ),
)

PHONK = BeatPattern(
    id="phonk",
    name="Phonk",
    genre="Hip-Hop",
    subgenre="Phonk",
    bpm_range=(130, 145),
    default_bpm=140,
    description="Memphis-style phonk with cowbell, distorted kicks, and aggressive percussion",
    tags=("memphis", "cowbell", "distorted", "dark"),
    tracks=(
        _track("kick", tuple(Hit(t, 110 if t % PPQ else 127) for t in _DRILL_KICK)),
        _track("clap", ticks_to_hits(_BACKBEAT, 110)),
        _track("hihat", regular_hits(0, 48, 32, 100)),
    ),
)

LOFI_HIPHOP = BeatPattern(
    id="lofi-hiphop",
    name="Lo-Fi Hip-Hop",
    genre="Hip-Hop",
    subgenre="Lo-Fi",
    bpm_range=(70, 90),
    default_bpm=80,
    description="Chill lo-fi beats with dusty drums and swing",
    tags=("chill", "study", "relax", "dusty", "jazzy"),
    tracks=(
        _track("kick", tuple(Hit(t, 90 if t % TICKS_PER_BAR == 0 else 85) for t in beats_to_ticks(4, [0, 2]))),
        _track("snare", ticks_to_hits(_BACKBEAT, 85)),
        # Swung 8ths: off-beat lands 4 ticks late
        _track("hihat", tuple(
            Hit(beat * PPQ + offset, 70 if offset == 0 else 50)
            for beat in range(16)
            for offset in (0, 52)
        )),
    ),
)

# =============================================================================
# Electronic
# =============================================================================

HOUSE_CLASSIC = BeatPattern(
    id="house-classic",
    name="House Classic",
    genre="Electronic",
    subgenre="House",
    bpm_range=(120, 128),
    default_bpm=124,
    description="Classic four-on-the-floor house beat",
    tags=("four-on-the-floor", "classic", "dance"),
    tracks=(
        _track("kick", regular_hits(0, 96, 16, 110)),
        _track("clap", ticks_to_hits(_BACKBEAT)),
        _track("hihat", regular_hits(48, 96, 16, 80)),
        _track("hihat-open", ticks_to_hits([48, 432, 816, 1200], 90)),
    ),
)

TECHNO_MINIMAL = BeatPattern(
    id="techno-minimal",
    name="Techno Minimal",
    genre="Electronic",
    subgenre="Techno",
    bpm_range=(125, 135),
    default_bpm=130,
    description="Minimal techno with sparse, hypnotic groove",
    tags=("minimal", "hypnotic", "berlin", "underground"),
    tracks=(
        _track("kick", regular_hits(0, 96, 16, 110)),
        _track("hihat", regular_hits(48, 96, 16, 60)),
        _track("clap", ticks_to_hits([288, 672, 1056, 1440], 80)),
    ),
)

DUBSTEP_HALFTIME = BeatPattern(
    id="dubstep-halftime",
    name="Dubstep Halftime",
    genre="Electronic",
    subgenre="Dubstep",
    bpm_range=(140, 150),
    default_bpm=145,
    description="Heavy dubstep halftime pattern with snare on 3",
    tags=("heavy", "halftime", "bass", "wobble"),
    tracks=(
        _track("kick", ticks_to_hits(_DOWNBEATS, 127)),
        _track("snare", ticks_to_hits(beats_to_ticks(4, [2]), 120)),
        _track("hihat", regular_hits(0, 48, 32, 70)),
    ),
)

DRUM_AND_BASS = BeatPattern(
    id="drum-and-bass",
    name="Drum and Bass",
    genre="Electronic",
    subgenre="Drum and Bass",
    bpm_range=(170, 180),
    default_bpm=174,
    description="Fast-paced DnB with two-step kick pattern",
    tags=("fast", "jungle", "breakbeat", "energy"),
    tracks=(
        _track("kick", tuple(
            Hit(t, 110 if t % TICKS_PER_BAR == 0 else (90 if t % PPQ else 100)) for t in _DRILL_KICK
        )),
        _track("snare", ticks_to_hits(_BACKBEAT, 110)),
        _track("hihat", regular_hits(0, 24, 64, 80)),
    ),
)

# =============================================================================
# Pop / Rock
# =============================================================================

POP_DANCE = BeatPattern(
    id="pop-dance",
    name="Pop Dance",
    genre="Pop",
    subgenre="Dance Pop",
    bpm_range=(118, 128),
    default_bpm=123,
    description="Energetic dance pop with driving beat",
    tags=("energetic", "radio", "commercial", "upbeat"),
    tracks=(
        _track("kick", regular_hits(0, 96, 16, 110)),
        _track("clap", ticks_to_hits(_BACKBEAT, 105)),
        _track("hihat", regular_hits(0, 48, 32, 80)),
    ),
)

ROCK_BASIC = BeatPattern(
    id="rock-basic",
    name="Rock Basic",
    genre="Rock",
    subgenre="Basic Rock",
    bpm_range=(110, 140),
    default_bpm=125,
    description="Standard rock beat with kick on 1 and 3, snare on 2 and 4",
    tags=("classic", "simple", "straightforward"),
    tracks=(
        _track("kick", ticks_to_hits(beats_to_ticks(4, [0, 2]), 110)),
        _track("snare", ticks_to_hits(_BACKBEAT, 110)),
        _track("hihat", regular_hits(0, 48, 32, 90)),
        _track("cymbal", ticks_to_hits([0, 768], 100), subcategory="crash"),
    ),
)

# =============================================================================
# Latin / Funk
# =============================================================================

REGGAETON = BeatPattern(
    id="reggaeton",
    name="Reggaeton",
    genre="Latin",
    subgenre="Reggaeton",
    bpm_range=(85, 100),
    default_bpm=92,
    description="Classic dembow rhythm with tresillo pattern",
    tags=("dembow", "latin", "urban", "dance"),
    tracks=(
        _track("kick", tuple(
            Hit(bar * TICKS_PER_BAR + offset, velocity)
            for bar in range(4)
            for offset, velocity in ((0, 110), (144, 90), (192, 100), (288, 95))
        )),
        _track("snare", tuple(
            Hit(bar * TICKS_PER_BAR + offset, velocity)
            for bar in range(4)
            for offset, velocity in ((144, 100), (288, 110))
        )),
        _track("hihat", regular_hits(0, 48, 32, 85)),
    ),
)

FUNK_CLASSIC = BeatPattern(
    id="funk-classic",
    name="Funk Classic",
    genre="Funk",
    subgenre="Classic Funk",
    bpm_range=(95, 115),
    default_bpm=105,
    description='Classic funk with emphasis on "the one" and ghost notes',
    tags=("groovy", "syncopated", "james-brown", "tight"),
    tracks=(
        _track("kick", tuple(
            Hit(t, 120 if t == 0 else (110 if t % TICKS_PER_BAR == 0 else (80 if t % PPQ else 100)))
            for t in _DRILL_KICK
        )),
        # Backbeat plus ghost notes a 16th before each beat for the first two bars
        _track("snare", ticks_to_hits(_BACKBEAT) + ticks_to_hits(list(range(72, 768, 96)), 35)),
        _track("hihat", regular_hits(0, 24, 64, 80)),
    ),
)


ALL_PATTERNS: tuple[BeatPattern, ...] = (
    BOOM_BAP_CLASSIC,
    TRAP_ATLANTA,
    DRILL_UK,
    PHONK,
    LOFI_HIPHOP,
    HOUSE_CLASSIC,
    TECHNO_MINIMAL,
    DUBSTEP_HALFTIME,
    DRUM_AND_BASS,
    POP_DANCE,
    ROCK_BASIC,
    REGGAETON,
    FUNK_CLASSIC,
)


# =============================================================================
# Lookups
# =============================================================================

def get_pattern_by_id(pattern_id: str) -> Optional[BeatPattern]:
    return next((p for p in ALL_PATTERNS if p.id == pattern_id), None)


def get_patterns_by_genre(genre: str) -> list[BeatPattern]:
    """Patterns whose genre or subgenre equals *genre* (case-insensitive)."""
    wanted = genre.strip().lower()
    return [
        p for p in ALL_PATTERNS
        if p.genre.lower() == wanted or (p.subgenre or "").lower() == wanted
    ]


def search_patterns_by_tags(tags: list[str]) -> list[BeatPattern]:
    wanted = {t.lower() for t in tags}
    return [p for p in ALL_PATTERNS if any(t.lower() in wanted for t in p.tags)]


def get_patterns_for_bpm(bpm: float) -> list[BeatPattern]:
    return [p for p in ALL_PATTERNS if p.bpm_range[0] <= bpm <= p.bpm_range[1]]


def pattern_to_actions(pattern: BeatPattern, category: str = "drums") -> list[RawActionDict]:
    """One ``addAudioSample`` entry per hit; ``trackIndex`` is the drum track's position."""
    return [
        {
            "action": "addAudioSample",
            "parameters": {
                "category": category,
                "subcategory": track.subcategory,
                "trackIndex": track_index,
                "startTick": hit.tick,
            },
        }
        for track_index, track in enumerate(pattern.tracks)
        for hit in track.hits
    ]


def pattern_summary_for_prompt() -> str:
    """Patterns grouped by genre, one line each, for the system prompt."""
    by_genre: dict[str, list[BeatPattern]] = {}
    for p in ALL_PATTERNS:
        by_genre.setdefault(p.genre, []).append(p)

    lines = ["## AVAILABLE BEAT PATTERNS", ""]
    for genre, patterns in by_genre.items():
        lines.append(f"### {genre}")
        for p in patterns:
            low, high = p.bpm_range
            lines.append(f"- {p.id}: {p.name} ({low}-{high} BPM) - {p.description}")
        lines.append("")
    return "\n".join(lines)

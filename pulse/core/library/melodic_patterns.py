"""
Melodic templates: scales, chords, progressions and pre-built note patterns.

MIDI reference: C4 (middle C) = 60, one semitone = 1, one octave = 12.
Timing uses the same PPQ = 96 grid as the beat templates.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal, Optional

from pulse.contracts.json_types import JSONObject

# Note name -> semitone offset from C
NOTE_OFFSETS: dict[str, int] = {
    "C": 0, "C#": 1, "Db": 1,
    "D": 2, "D#": 3, "Eb": 3,
    "E": 4, "Fb": 4,
    "F": 5, "F#": 6, "Gb": 6,
    "G": 7, "G#": 8, "Ab": 8,
    "A": 9, "A#": 10, "Bb": 10,
    "B": 11, "Cb": 11,
}

_SHARP_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")

SCALE_INTERVALS: dict[str, tuple[int, ...]] = {
    "major": (0, 2, 4, 5, 7, 9, 11),
    "minor": (0, 2, 3, 5, 7, 8, 10),
    "harmonicMinor": (0, 2, 3, 5, 7, 8, 11),
    "melodicMinor": (0, 2, 3, 5, 7, 9, 11),
    "dorian": (0, 2, 3, 5, 7, 9, 10),
    "phrygian": (0, 1, 3, 5, 7, 8, 10),
    "lydian": (0, 2, 4, 6, 7, 9, 11),
    "mixolydian": (0, 2, 4, 5, 7, 9, 10),
    "locrian": (0, 1, 3, 5, 6, 8, 10),
    "pentatonicMajor": (0, 2, 4, 7, 9),
    "pentatonicMinor": (0, 3, 5, 7, 10),
    "blues": (0, 3, 5, 6, 7, 10),
    "chromatic": tuple(range(12)),
}

CHORD_INTERVALS: dict[str, tuple[int, ...]] = {
    "major": (0, 4, 7),
    "minor": (0, 3, 7),
    "diminished": (0, 3, 6),
    "augmented": (0, 4, 8),
    "major7": (0, 4, 7, 11),
    "minor7": (0, 3, 7, 10),
    "dominant7": (0, 4, 7, 10),
    "diminished7": (0, 3, 6, 9),
    "halfDiminished7": (0, 3, 6, 10),
    "sus2": (0, 2, 7),
    "sus4": (0, 5, 7),
    "add9": (0, 4, 7, 14),
    "minor9": (0, 3, 7, 10, 14),
    "major9": (0, 4, 7, 11, 14),
}

PatternType = Literal["melody", "bass", "pad", "arpeggio", "chords"]
ArpDirection = Literal["up", "down", "upDown"]


@dataclass(frozen=True)
class MelodicNote:
    pitch: int
    start_tick: int
    duration_tick: int
    velocity: int = 80

    def to_params(self) -> JSONObject:
        """Wire shape used inside ``addNoteSequence``."""
        return {
            "pitch": self.pitch,
            "startTick": self.start_tick,
            "durationTick": self.duration_tick,
            "velocity": self.velocity,
        }


@dataclass(frozen=True)
class ProgressionChord:
    degree: str  # roman numeral
    chord: str
    duration_bars: float = 1


@dataclass(frozen=True)
class ChordProgression:
    id: str
    name: str
    genres: tuple[str, ...]
    key: str
    scale: str
    chords: tuple[ProgressionChord, ...]
    description: str


@dataclass(frozen=True)
class MelodicPattern:
    id: str
    name: str
    genres: tuple[str, ...]
    type: PatternType
    key: str
    scale: str
    bpm_range: tuple[int, int]
    description: str
    suggested_preset: str
    notes: tuple[MelodicNote, ...]
    bars: int = 4
    tags: tuple[str, ...] = field(default_factory=tuple)


# =============================================================================
# Pitch helpers
# =============================================================================

def midi_pitch(note_name: str, octave: int) -> int:
    """MIDI pitch for a note name and octave (C4 = 60)."""
    offset = NOTE_OFFSETS.get(note_name)
    if offset is None:
        raise ValueError(f"Invalid note name: {note_name}")
    return 12 + octave * 12 + offset


def note_name(pitch: int) -> str:
    """``60`` -> ``"C4"``, sharps for accidentals."""
    return f"{_SHARP_NAMES[pitch % 12]}{pitch // 12 - 1}"


def scale_pitches(root_pitch: int, scale: str, octaves: int = 2) -> list[int]:
    """Every pitch of *scale* from *root_pitch* upward, capped at 127."""
    intervals = SCALE_INTERVALS[scale]
    return [
        root_pitch + octave * 12 + interval
        for octave in range(octaves)
        for interval in intervals
        if root_pitch + octave * 12 + interval <= 127
    ]


def chord_pitches(root_pitch: int, chord_type: str, inversion: int = 0) -> list[int]:
    """Chord tones above *root_pitch*; each inversion lifts the lowest tone an octave."""
    pitches = [root_pitch + interval for interval in CHORD_INTERVALS[chord_type]]
    for i in range(min(inversion, len(pitches))):
        pitches[i] += 12
    return sorted(pitches)


def transpose_notes(notes: tuple[MelodicNote, ...], semitones: int) -> tuple[MelodicNote, ...]:
    """Shift every pitch, clamped to 0..127."""
    return tuple(replace(n, pitch=max(0, min(127, n.pitch + semitones))) for n in notes)


def transpose_pattern(pattern: MelodicPattern, semitones: int) -> MelodicPattern:
    return replace(pattern, notes=transpose_notes(pattern.notes, semitones))


def chord_notes(
    root_pitch: int,
    chord_type: str,
    start_tick: int,
    duration_tick: int,
    velocity: int = 80,
    inversion: int = 0,
) -> list[MelodicNote]:
    """A block chord: every tone starts together."""
    return [
        MelodicNote(pitch, start_tick, duration_tick, velocity)
        for pitch in chord_pitches(root_pitch, chord_type, inversion)
    ]


def arpeggio_notes(
    root_pitch: int,
    chord_type: str,
    start_tick: int,
    note_interval: int = 24,
    note_duration: int = 48,
    velocity: int = 80,
    direction: ArpDirection = "up",
) -> list[MelodicNote]:
    """Chord tones one after another, *note_interval* ticks apart."""
    pitches = chord_pitches(root_pitch, chord_type)
    if direction == "down":
        pitches = pitches[::-1]
    elif direction == "upDown":
        pitches = pitches + pitches[1:-1][::-1]
    return [
        MelodicNote(pitch, start_tick + i * note_interval, note_duration, velocity)
        for i, pitch in enumerate(pitches)
    ]


def _notes(*rows: tuple[int, int, int, int]) -> tuple[MelodicNote, ...]:
    return tuple(MelodicNote(*row) for row in rows)


def _progression(*chords: tuple[str, str, float]) -> tuple[ProgressionChord, ...]:
    return tuple(ProgressionChord(degree, chord, bars) for degree, chord, bars in chords)


# =============================================================================
# Chord progressions
# =============================================================================

CHORD_PROGRESSIONS: tuple[ChordProgression, ...] = (
    ChordProgression(
        id="pop-classic",
        name="Pop Classic (I-V-vi-IV)",
        genres=("pop", "rock", "country"),
        key="C",
        scale="major",
        chords=_progression(("I", "C", 1), ("V", "G", 1), ("vi", "Am", 1), ("IV", "F", 1)),
        description="The most popular chord progression in modern pop music",
    ),
    ChordProgression(
        id="pop-emotional",
        name="Emotional Pop (vi-IV-I-V)",
        genres=("pop", "ballad"),
        key="C",
        scale="major",
        chords=_progression(("vi", "Am", 1), ("IV", "F", 1), ("I", "C", 1), ("V", "G", 1)),
        description="Emotional, melancholic feel starting on minor chord",
    ),
    ChordProgression(
        id="hiphop-dark",
        name="Dark Hip-Hop (i-VI-III-VII)",
        genres=("hip-hop", "trap", "drill"),
        key="Am",
        scale="minor",
        chords=_progression(("i", "Am", 1), ("VI", "F", 1), ("III", "C", 1), ("VII", "G", 1)),
        description="Dark, moody progression common in trap and drill",
    ),
    ChordProgression(
        id="trap-simple",
        name="Simple Trap (i-VII)",
        genres=("trap", "hip-hop"),
        key="Am",
        scale="minor",
        chords=_progression(("i", "Am", 2), ("VII", "G", 2)),
        description="Minimal two-chord trap progression",
    ),
    ChordProgression(
        id="lofi-jazzy",
        name="Lo-Fi Jazzy (ii7-V7-Imaj7-vi7)",
        genres=("lo-fi", "jazz", "chill"),
        key="C",
        scale="major",
        chords=_progression(("ii7", "Dm7", 1), ("V7", "G7", 1), ("Imaj7", "Cmaj7", 1), ("vi7", "Am7", 1)),
        description="Jazz-influenced lo-fi progression with 7th chords",
    ),
    ChordProgression(
        id="house-uplifting",
        name="Uplifting House (I-V-vi-IV)",
        genres=("house", "edm", "dance"),
        key="C",
        scale="major",
        chords=_progression(("I", "C", 1), ("V", "G", 1), ("vi", "Am", 1), ("IV", "F", 1)),
        description="Classic uplifting house progression",
    ),
    ChordProgression(
        id="rnb-smooth",
        name="Smooth R&B (Imaj7-iii7-vi7-ii7-V7)",
        genres=("r&b", "soul", "neo-soul"),
        key="C",
        scale="major",
        chords=_progression(
            ("Imaj7", "Cmaj7", 1), ("iii7", "Em7", 0.5), ("vi7", "Am7", 0.5), ("ii7", "Dm7", 1), ("V7", "G7", 1),
        ),
        description="Smooth R&B with rich harmony",
    ),
)


# =============================================================================
# Melodic patterns
# =============================================================================

MELODIC_PATTERNS: tuple[MelodicPattern, ...] = (
    MelodicPattern(
        id="trap-dark-melody",
        name="Dark Trap Melody",
        genres=("trap", "hip-hop", "drill"),
        type="melody",
        key="Am",
        scale="pentatonicMinor",
        bpm_range=(130, 150),
        description="Dark, sparse trap melody using minor pentatonic",
        suggested_preset="lead",
        tags=("dark", "sparse", "minor"),
        notes=_notes(
            (69, 0, 192, 90), (67, 192, 96, 85), (64, 288, 96, 80),
            (69, 384, 144, 90), (72, 528, 96, 95), (69, 624, 144, 85),
            (67, 768, 96, 85), (64, 864, 96, 80), (60, 960, 192, 75),
            (57, 1152, 384, 85),
        ),
    ),
    MelodicPattern(
        id="trap-808-bass",
        name="Trap 808 Bass Line",
        genres=("trap", "hip-hop"),
        type="bass",
        key="Am",
        scale="minor",
        bpm_range=(130, 150),
        description="Heavy 808 bass pattern for trap beats",
        suggested_preset="subBass",
        tags=("808", "heavy", "sub"),
        notes=_notes(
            (33, 0, 288, 110), (33, 288, 96, 100),
            (36, 384, 192, 105), (31, 576, 192, 100),
            (33, 768, 288, 110), (36, 1056, 96, 95),
            (31, 1152, 192, 100), (33, 1344, 192, 110),
        ),
    ),
    MelodicPattern(
        id="lofi-piano-chords",
        name="Lo-Fi Piano Chords",
        genres=("lo-fi", "chill", "study"),
        type="chords",
        key="C",
        scale="major",
        bpm_range=(70, 90),
        description="Warm, jazzy piano chords for lo-fi beats",
        suggested_preset="piano",
        tags=("jazzy", "warm", "chords", "7ths"),
        # Dm7 - G7 - Cmaj7 - Am7, each held just short of the bar
        notes=tuple(
            note
            for bar, (root, chord) in enumerate(((50, "minor7"), (43, "dominant7"), (48, "major7"), (45, "minor7")))
            for note in chord_notes(root, chord, bar * 384, 336, 65)
        ),
    ),
    MelodicPattern(
        id="lofi-melody-simple",
        name="Simple Lo-Fi Melody",
        genres=("lo-fi", "chill"),
        type="melody",
        key="C",
        scale="major",
        bpm_range=(70, 90),
        description="Soft, nostalgic melody for lo-fi hip-hop",
        suggested_preset="electricPiano",
        tags=("soft", "nostalgic", "simple"),
        notes=_notes(
            (64, 48, 144, 65), (67, 192, 96, 60), (69, 336, 48, 55),
            (67, 432, 144, 65), (64, 576, 192, 60),
            (60, 816, 144, 65), (62, 960, 96, 60), (64, 1104, 48, 55),
            (60, 1296, 240, 55),
        ),
    ),
    MelodicPattern(
        id="edm-arpeggio",
        name="EDM Arpeggio",
        genres=("edm", "trance", "house"),
        type="arpeggio",
        key="Am",
        scale="minor",
        bpm_range=(120, 140),
        description="Driving 16th-note minor arpeggio, up and down",
        suggested_preset="pluck",
        tags=("arpeggio", "driving", "16ths"),
        notes=tuple(
            note
            for step in range(16)
            for note in arpeggio_notes(57, "minor7", step * 96, note_interval=24, note_duration=24, direction="up")
        ),
    ),
    MelodicPattern(
        id="ambient-pad",
        name="Ambient Pad",
        genres=("ambient", "chill", "cinematic"),
        type="pad",
        key="C",
        scale="major",
        bpm_range=(60, 100),
        description="Slow, wide pad chords held for two bars each",
        suggested_preset="atmosphericPad",
        tags=("ambient", "wide", "slow"),
        notes=tuple(chord_notes(48, "major9", 0, 768, 60)) + tuple(chord_notes(45, "minor9", 768, 768, 60)),
    ),
)


# =============================================================================
# Lookups
# =============================================================================

def _genre_matches(genres: tuple[str, ...], query: str) -> bool:
    query = query.strip().lower()
    return any(query in g.lower() or g.lower() in query for g in genres)


def get_progressions_by_genre(genre: str) -> list[ChordProgression]:
    return [p for p in CHORD_PROGRESSIONS if _genre_matches(p.genres, genre)]


def get_melodic_patterns_by_genre(genre: str) -> list[MelodicPattern]:
    return [p for p in MELODIC_PATTERNS if _genre_matches(p.genres, genre)]


def get_melodic_patterns_by_type(pattern_type: PatternType) -> list[MelodicPattern]:
    return [p for p in MELODIC_PATTERNS if p.type == pattern_type]


def get_melodic_pattern(pattern_id: str) -> Optional[MelodicPattern]:
    return next((p for p in MELODIC_PATTERNS if p.id == pattern_id), None)


# =============================================================================
# Prompt summaries
# =============================================================================

def melodic_pattern_summary() -> str:
    by_genre: dict[str, list[MelodicPattern]] = {}
    for pattern in MELODIC_PATTERNS:
        for genre in pattern.genres:
            by_genre.setdefault(genre, []).append(pattern)

    lines = ["## MELODIC PATTERN LIBRARY", "", "Available pre-built melodic patterns by genre:", ""]
    for genre, patterns in by_genre.items():
        lines.append(f"### {genre.upper()}")
        for p in patterns:
            lines.append(
                f"- **{p.name}** ({p.type}): {p.description} | Key: {p.key} | Preset: {p.suggested_preset}"
            )
        lines.append("")
    return "\n".join(lines)


def chord_progression_summary() -> str:
    lines = ["## CHORD PROGRESSIONS BY GENRE", ""]
    for prog in CHORD_PROGRESSIONS:
        lines.append(f"**{prog.name}** ({', '.join(prog.genres)})")
        lines.append(f"  {' - '.join(c.chord for c in prog.chords)}")
        lines.append(f"  {prog.description}")
        lines.append("")
    return "\n".join(lines)

"""Static beat and melodic template library."""

from pulse.core.library.beat_patterns import (
    ALL_PATTERNS,
    BeatPattern,
    DrumTrack,
    Hit,
    beats_to_ticks,
    get_pattern_by_id,
    get_patterns_by_genre,
    get_patterns_for_bpm,
    pattern_summary_for_prompt,
    pattern_to_actions,
    regular_hits,
    search_patterns_by_tags,
    ticks_to_hits,
)
from pulse.core.library.melodic_patterns import (
    CHORD_INTERVALS,
    CHORD_PROGRESSIONS,
    MELODIC_PATTERNS,
    NOTE_OFFSETS,
    SCALE_INTERVALS,
    ChordProgression,
    MelodicNote,
    MelodicPattern,
    arpeggio_notes,
    chord_notes,
    chord_pitches,
    chord_progression_summary,
    get_melodic_pattern,
    get_melodic_patterns_by_genre,
    get_melodic_patterns_by_type,
    get_progressions_by_genre,
    melodic_pattern_summary,
    midi_pitch,
    note_name,
    scale_pitches,
    transpose_notes,
    transpose_pattern,
)

__all__ = [
    # Beat patterns
    "ALL_PATTERNS",
    "BeatPattern",
    "DrumTrack",
    "Hit",
    "beats_to_ticks",
    "get_pattern_by_id",
    "get_patterns_by_genre",
    "get_patterns_for_bpm",
    "pattern_summary_for_prompt",
    "pattern_to_actions",
    "regular_hits",
    "search_patterns_by_tags",
    "ticks_to_hits",
    # Melodic patterns
    "CHORD_INTERVALS",
    "CHORD_PROGRESSIONS",
    "MELODIC_PATTERNS",
    "NOTE_OFFSETS",
    "SCALE_INTERVALS",
    "ChordProgression",
    "MelodicNote",
    "MelodicPattern",
    "arpeggio_notes",
    "chord_notes",
    "chord_pitches",
    "chord_progression_summary",
    "get_melodic_pattern",
    "get_melodic_patterns_by_genre",
    "get_melodic_patterns_by_type",
    "get_progressions_by_genre",
    "melodic_pattern_summary",
    "midi_pitch",
    "note_name",
    "scale_pitches",
    "transpose_notes",
    "transpose_pattern",
]

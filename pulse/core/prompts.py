"""
Prompt construction for the upstream model.

The system prompt is rebuilt from live project state on every request, so
its hash changes whenever the project does; the router uses that hash to
decide when an upstream session must be recreated.

Core principles:
- Always answer with the ``actions`` array JSON format, nothing else
- Use exact ids from the project state
- Name samples by category/subcategory and let the server pick one
"""

from __future__ import annotations

from typing import Any, Optional

from pulse.core.library.beat_patterns import pattern_summary_for_prompt
from pulse.core.library.melodic_patterns import chord_progression_summary, melodic_pattern_summary
from pulse.core.project import Project
from pulse.core.samples.models import SampleLibrary
from pulse.core.timing import PPQ, TICKS_PER_BAR
from pulse.core.validation.constants import EFFECT_TYPES, FOCUS_PANELS, TRACK_EFFECT_RANGES, VALUE_RANGES

DEFAULT_SYSTEM_PROMPT = (
    "You are a DAW (Digital Audio Workstation) assistant for Pulse Studio. "
    "Convert natural language commands into structured JSON actions.\n\n"
    "IMPORTANT: Always respond with ONLY valid JSON, no markdown, no explanation.\n\n"
    "Response format (always use actions array):\n"
    "{\n"
    '  "actions": [\n'
    '    { "action": "commandName", "parameters": { ... } }\n'
    "  ],\n"
    '  "confidence": 0.0-1.0,\n'
    '  "reasoning": "brief explanation"\n'
    "}\n\n"
    "For unclear commands use action \"clarificationNeeded\" with a message explaining what you need."
)

SYNTH_PRESETS: tuple[str, ...] = (
    "piano", "electricPiano", "organ", "harpsichord",
    "lead", "brightLead",
    "bass", "subBass", "acidBass",
    "pad", "warmPad", "stringPad", "atmosphericPad",
    "strings", "violin", "cello",
    "brass", "trumpet", "trombone",
    "bell", "glockenspiel", "marimba",
    "pluck", "guitar", "harp",
    "metallic",
)


# =============================================================================
# Context extraction
# =============================================================================

def extract_project_context(project: Optional[Project]) -> Optional[dict[str, Any]]:
    """Compact summary of *project* for the prompt; ``None`` when nothing is loaded."""
    if project is None:
        return None

    pattern_names = {p.id: p.name for p in project.patterns}
    asset_names = {a.id: a.name for a in project.assets}

    def source_name(clip) -> str:
        if clip.type == "pattern":
            return pattern_names.get(clip.pattern_id, "Unknown Pattern")
        return asset_names.get(clip.asset_id, "Unknown Audio")

    return {
        "bpm": project.bpm,
        "masterVolume": project.master_volume,
        "ppq": PPQ,
        "patterns": [
            {"id": p.id, "name": p.name, "lengthInSteps": p.length_in_steps, "noteCount": len(p.notes)}
            for p in project.patterns
        ],
        "channels": [
            {
                "id": c.id,
                "name": c.name,
                "type": c.type,
                "preset": c.preset,
                "volume": c.volume,
                "muted": c.mute,
            }
            for c in project.channels
        ],
        "playlistTracks": [
            {
                "id": t.id,
                "index": i,
                "name": t.name,
                "muted": t.mute,
                "clipCount": sum(1 for c in project.clips if c.track_index == i),
            }
            for i, t in enumerate(project.tracks)
        ],
        "clips": [
            {
                "id": c.id,
                "type": c.type,
                "trackIndex": c.track_index,
                "startTick": c.start_tick,
                "durationTick": c.duration_tick,
                "sourceName": source_name(c),
            }
            for c in project.clips
        ],
        "loopRegion": {"start": project.loop_start, "end": project.loop_end} if project.loop_enabled else None,
    }


def format_samples_for_prompt(library: Optional[SampleLibrary]) -> str:
    if library is None or library.total_samples == 0:
        return "No samples available."
    lines = [f"Available Samples ({library.total_samples} total):"]
    for category, subcategories in library.categories.items():
        lines.append(f"\n## {category.upper()}")
        for subcategory, samples in subcategories.items():
            lines.append(f"  {subcategory}: {', '.join(s.id for s in samples)}")
    return "\n".join(lines)


def daw_capabilities() -> dict[str, Any]:
    bpm_min, bpm_max = VALUE_RANGES["bpm"]
    pitch_min, pitch_max = VALUE_RANGES["pitch"]
    return {
        "synthPresets": list(SYNTH_PRESETS),
        "effectTypes": list(EFFECT_TYPES),
        "trackEffectKeys": list(TRACK_EFFECT_RANGES),
        "panels": list(FOCUS_PANELS),
        "bpmRange": {"min": int(bpm_min), "max": int(bpm_max)},
        "pitchRange": {"min": int(pitch_min), "max": int(pitch_max)},
        "ppq": PPQ,
    }


# =============================================================================
# Sections
# =============================================================================

def _project_section(context: Optional[dict[str, Any]]) -> str:
    if context is None:
        return "## CURRENT PROJECT STATE\nNo project loaded. User must create or load a project first.\n"

    def block(items: list[str]) -> str:
        return "\n".join(items) or "  (none)"

    patterns = [
        f'  - "{p["name"]}" (id: {p["id"]}, {p["lengthInSteps"]} steps, {p["noteCount"]} notes)'
        for p in context["patterns"]
    ]
    channels = [
        f'  - "{c["name"]}" (id: {c["id"]}, type: {c["type"]}'
        + (f', preset: {c["preset"]}' if c["preset"] else "")
        + f', vol: {round(c["volume"] * 100)}%'
        + (", MUTED" if c["muted"] else "")
        + ")"
        for c in context["channels"]
    ]
    tracks = [
        f'  - Track {t["index"]}: "{t["name"]}" (id: {t["id"]}, {t["clipCount"]} clips'
        + (", MUTED" if t["muted"] else "")
        + ")"
        for t in context["playlistTracks"]
    ]
    clips = [
        f'  - {c["type"]} clip "{c["sourceName"]}" on track {c["trackIndex"]} '
        f'at tick {c["startTick"]} (duration: {c["durationTick"]} ticks)'
        for c in context["clips"]
    ]

    section = (
        "## CURRENT PROJECT STATE\n"
        f"- BPM: {context['bpm']}\n"
        f"- Master Volume: {round(context['masterVolume'] * 100)}%\n"
        f"- PPQ (ticks per beat): {context['ppq']}\n\n"
        f"### Patterns ({len(patterns)} total):\n{block(patterns)}\n\n"
        f"### Channels ({len(channels)} total):\n{block(channels)}\n\n"
        f"### Playlist Tracks ({len(tracks)} total):\n{block(tracks)}\n\n"
        f"### Clips on Timeline:\n{block(clips)}\n"
    )
    loop = context.get("loopRegion")
    if loop:
        section += f"\n### Loop Region: ticks {loop['start']} to {loop['end']}\n"
    return section


def _rules_section(capabilities: dict[str, Any]) -> str:
    bpm = capabilities["bpmRange"]
    pitch = capabilities["pitchRange"]
    return (
        "## CRITICAL RULES\n"
        '1. ALWAYS return the "actions" array format (even for single actions)\n'
        "2. Use EXACT IDs from the project state when referencing existing patterns, channels, or tracks\n"
        '3. Use "current" as patternId/channelId to mean the pattern/channel you just created\n'
        '4. For samples: specify "category" and "subcategory"; the system picks one consistent sample per key\n'
        f"5. All tick values use PPQ={capabilities['ppq']} ({PPQ} ticks = 1 beat, {TICKS_PER_BAR} ticks = 1 bar)\n"
        f"6. BPM must be between {bpm['min']}-{bpm['max']}\n"
        f"7. MIDI pitch: {pitch['min']}-{pitch['max']} (60 = middle C)\n"
        "8. Track volume: 0.0-1.5 (1.0 = 100%), master volume: 0.0-2.0\n"
        "9. Pan: -1.0 (left) to 1.0 (right)\n"
        "10. Tracks are auto-created if trackIndex doesn't exist\n"
        "11. Placements on the exact same track and tick are shifted by 12 ticks\n"
    )


def _timing_section() -> str:
    return (
        "## TIMING REFERENCE\n"
        "| Note Value | Ticks | Notes Per Bar |\n"
        "|------------|-------|---------------|\n"
        "| Whole note | 384 | 1 |\n"
        "| Half note | 192 | 2 |\n"
        "| Quarter note (beat) | 96 | 4 |\n"
        "| 8th note | 48 | 8 |\n"
        "| 16th note | 24 | 16 |\n"
        "| 32nd note | 12 | 32 |\n"
        "| Triplet 8th | 32 | 12 |\n\n"
        "Bar 1 beats: 0, 96, 192, 288. Bar 2 starts at 384, bar 3 at 768, bar 4 at 1152.\n"
    )


def _commands_section(capabilities: dict[str, Any]) -> str:
    return (
        "## AVAILABLE COMMANDS\n"
        "Patterns: addPattern {name?, lengthInSteps?}, deletePattern {patternId}, selectPattern {patternId},\n"
        "  setPatternLength {patternId, lengthInSteps}, clearPatternNotes {patternId}, openPianoRoll {patternId}\n"
        "Notes: addNote {patternId, pitch, startTick, durationTick, velocity?}, updateNote {noteId, ...},\n"
        "  deleteNote {noteId}, addNoteSequence {patternId, notes: [{pitch, startTick, durationTick, velocity}]}\n"
        "Transport: play, stop, pause, setBpm {bpm}, setPosition {tick}, toggleMetronome\n"
        'Channels: addChannel {name?, type: "synth"|"sampler", preset?}, updateChannel {channelId, name?, preset?},\n'
        "  deleteChannel, selectChannel, setChannelVolume {channelId, volume}, setChannelPan {channelId, pan},\n"
        "  toggleChannelMute, toggleChannelSolo\n"
        "Mixer: setVolume {trackIndex, volume}, setPan {trackIndex, pan}, toggleMute {trackIndex},\n"
        "  toggleSolo {trackIndex}, setMasterVolume {volume}\n"
        "Playlist: addPlaylistTrack {name?}, togglePlaylistTrackMute {trackId}, togglePlaylistTrackSolo {trackId},\n"
        "  addClip {patternId, trackIndex, startTick, durationTick?}, moveClip {clipId, trackIndex, startTick},\n"
        "  resizeClip {clipId, durationTick}, deleteClip {clipId}, setLoopRegion {startTick, endTick}\n"
        f"Track effects: setTrackEffect {{trackId, key, value}} (keys: {', '.join(capabilities['trackEffectKeys'])}),\n"
        "  resetTrackEffects {trackId}, applyTrackEffects {trackId}\n"
        f"Insert effects: addEffect {{trackIndex, effectType}} (types: {', '.join(capabilities['effectTypes'])}),\n"
        "  updateEffect {effectId, parameters}, deleteEffect {effectId}\n"
        "Samples: addAudioSample {category, subcategory, trackIndex?, startTick?} or {sampleId, ...}\n"
        f"UI: focusPanel {{panel}} (panels: {', '.join(capabilities['panels'])})\n"
        "Clarification: clarificationNeeded {message, suggestedOptions?}\n\n"
        f"Synth presets: {', '.join(capabilities['synthPresets'])}\n"
    )


# =============================================================================
# System prompt
# =============================================================================

def build_system_prompt(project: Optional[Project], library: Optional[SampleLibrary]) -> str:
    """Full context prompt: role, format, rules, timing, project, samples, templates, commands."""
    capabilities = daw_capabilities()
    return "\n".join([
        "You are an AI assistant for Pulse Studio, a digital audio workstation (DAW). "
        "You help users create music by executing commands.\n",
        "## YOUR ROLE\n"
        "Convert natural language requests into structured JSON commands. "
        "You MUST respond with ONLY valid JSON, no markdown, no explanation.\n",
        "## RESPONSE FORMAT - BATCH ACTIONS\n"
        "{\n"
        '  "actions": [\n'
        '    { "action": "setBpm", "parameters": { "bpm": 90 } },\n'
        '    { "action": "addAudioSample", "parameters": { "category": "drums", "subcategory": "kick", '
        '"trackIndex": 0, "startTick": 0 } }\n'
        "  ],\n"
        '  "confidence": 0.85,\n'
        '  "reasoning": "Creating a basic beat"\n'
        "}\n",
        _rules_section(capabilities),
        _timing_section(),
        _project_section(extract_project_context(project)),
        "## " + format_samples_for_prompt(library) + "\n",
        pattern_summary_for_prompt(),
        melodic_pattern_summary(),
        chord_progression_summary(),
        _commands_section(capabilities),
    ])

"""Deterministic fallback responder.

Used when the upstream model is unconfigured or every attempt failed.
Matches the utterance against a small ordered rule set and always
returns a plan, so the caller is never left without a structured answer.
"""

from __future__ import annotations

import re
from typing import Optional

from pulse.core.library.beat_patterns import BeatPattern, get_pattern_by_id, pattern_to_actions
from pulse.core.plan import BatchPlan

# Checked in order; multi-word keys first so "drum and bass" never reads as something shorter.
GENRE_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("drum and bass", "drum-and-bass"),
    ("drum & bass", "drum-and-bass"),
    ("boom bap", "boom-bap-classic"),
    ("boom-bap", "boom-bap-classic"),
    ("boombap", "boom-bap-classic"),
    ("dnb", "drum-and-bass"),
    ("trap", "trap-atlanta"),
    ("drill", "drill-uk"),
    ("phonk", "phonk"),
    ("lofi", "lofi-hiphop"),
    ("lo-fi", "lofi-hiphop"),
    ("house", "house-classic"),
    ("techno", "techno-minimal"),
    ("dubstep", "dubstep-halftime"),
    ("reggaeton", "reggaeton"),
    ("funk", "funk-classic"),
    ("rock", "rock-basic"),
    ("pop", "pop-dance"),
)

PATTERN_INSTRUMENTS: tuple[str, ...] = ("kick", "snare", "hihat", "clap", "tom", "cymbal")

CLARIFICATION_OPTIONS: list[str] = ["Make a beat", "Add a pattern", "Set BPM", "Play/Stop"]

_NUMBER_RE = re.compile(r"\d+")


def _is_beat_request(text: str) -> bool:
    return "beat" in text and ("make" in text or "create" in text)


def match_genre(text: str) -> Optional[BeatPattern]:
    lowered = text.lower()
    for keyword, pattern_id in GENRE_KEYWORDS:
        if re.search(rf"(?<![a-z]){re.escape(keyword)}(?![a-z])", lowered):
            return get_pattern_by_id(pattern_id)
    return None


def _genre_beat(pattern: BeatPattern) -> BatchPlan:
    actions = [{"action": "setBpm", "parameters": {"bpm": pattern.default_bpm}}]
    actions.extend(pattern_to_actions(pattern))
    return BatchPlan(
        actions=actions,
        confidence=0.85,
        reasoning=f"Building a {pattern.name} beat at {pattern.default_bpm} BPM",
    )


def _generic_beat() -> BatchPlan:
    def hit(subcategory: str, track_index: int, tick: int) -> dict:
        return {
            "action": "addAudioSample",
            "parameters": {
                "category": "drums",
                "subcategory": subcategory,
                "trackIndex": track_index,
                "startTick": tick,
            },
        }

    return BatchPlan(
        actions=[
            {"action": "setBpm", "parameters": {"bpm": 90}},
            hit("kick", 0, 0),
            hit("kick", 0, 384),
            hit("snare", 1, 192),
            hit("snare", 1, 576),
            hit("hihat", 2, 0),
            hit("hihat", 2, 96),
            hit("hihat", 2, 192),
            hit("hihat", 2, 288),
        ],
        confidence=0.85,
        reasoning="Creating a hip-hop style beat with kick, snare, and hi-hats",
    )


def fallback_plan(utterance: str) -> tuple[BatchPlan, str]:
    """Return ``(plan, rule)`` where *rule* names the rule that matched."""
    text = utterance.strip().lower()

    if _is_beat_request(text):
        pattern = match_genre(text)
        if pattern is not None:
            return _genre_beat(pattern), "genre_beat"
        return _generic_beat(), "beat"

    if "pattern" in text and ("add" in text or "create" in text):
        found = next((inst for inst in PATTERN_INSTRUMENTS if inst in text), None)
        name = f"{found.capitalize()} Pattern" if found else "New Pattern"
        reasoning = f"Creating a new pattern for {found}" if found else "Creating a new pattern"
        return BatchPlan.single(
            "addPattern", {"name": name, "lengthInSteps": 16}, confidence=0.9, reasoning=reasoning,
        ), "pattern"

    if "bpm" in text or "tempo" in text:
        match = _NUMBER_RE.search(utterance)
        bpm = int(match.group()) if match else 120
        return BatchPlan.single(
            "setBpm", {"bpm": bpm}, confidence=0.95, reasoning=f"Setting tempo to {bpm} BPM",
        ), "tempo"

    if re.match(r"^(play|start)", text) or "play it" in text:
        return BatchPlan.single("play", confidence=1.0, reasoning="Starting playback"), "play"

    if re.match(r"^stop", text):
        return BatchPlan.single("stop", confidence=1.0, reasoning="Stopping playback"), "stop"

    if "note" in text:
        return BatchPlan.single(
            "addNote",
            {"patternId": "current", "pitch": 60, "startTick": 0, "durationTick": 96, "velocity": 100},
            confidence=0.7,
            reasoning="Adding a note to the current pattern",
        ), "note"

    return BatchPlan.single(
        "clarificationNeeded",
        {
            "message": (
                f'I understand you want to "{utterance}", but I\'m not sure how to help with that. '
                'Try commands like "make a beat", "add a kick pattern", "set BPM to 128", or "play".'
            ),
            "suggestedOptions": list(CLARIFICATION_OPTIONS),
        },
        confidence=0.1,
        reasoning="Command not recognized",
    ), "clarification"

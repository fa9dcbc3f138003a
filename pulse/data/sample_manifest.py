"""Seed sample catalogue.

Used when ``PULSE_SAMPLE_MANIFEST_PATH`` is not set, so the copilot can
resolve drum and instrument requests out of the box.  Shape matches the
JSON manifest the sample pipeline exports.
"""

from __future__ import annotations

from typing import Any


def _sample(sample_id: str, name: str, category: str, subcategory: str, duration: float, tags: list[str]) -> dict[str, Any]:
    filename = f"{sample_id}.wav"
    return {
        "id": sample_id,
        "name": name,
        "filename": filename,
        "path": f"/samples/{category}/{subcategory}/{filename}",
        "duration": duration,
        "tags": tags,
        "license": "CC0",
        "author": "Pulse Studio",
    }


SEED_MANIFEST: dict[str, Any] = {
    "libraryName": "Pulse Seed Library",
    "version": "1.0.0",
    "createdAt": "2025-01-01T00:00:00Z",
    "categories": {
        "drums": {
            "kick": [
                _sample("kick_808_deep", "808 Deep Kick", "drums", "kick", 0.9, ["808", "deep", "trap"]),
                _sample("kick_punchy", "Punchy Kick", "drums", "kick", 0.4, ["punchy", "house"]),
                _sample("kick_dusty", "Dusty Kick", "drums", "kick", 0.5, ["lofi", "boom-bap"]),
            ],
            "snare": [
                _sample("snare_crisp", "Crisp Snare", "drums", "snare", 0.35, ["crisp", "pop"]),
                _sample("snare_vinyl", "Vinyl Snare", "drums", "snare", 0.4, ["lofi", "boom-bap"]),
            ],
            "clap": [
                _sample("clap_tight", "Tight Clap", "drums", "clap", 0.3, ["trap", "house"]),
            ],
            "hihat_closed": [
                _sample("hihat_closed_tick", "Closed Hat Tick", "drums", "hihat_closed", 0.1, ["closed", "tight"]),
                _sample("hihat_closed_shaker", "Closed Hat Shaker", "drums", "hihat_closed", 0.15, ["closed", "soft"]),
            ],
            "hihat_open": [
                _sample("hihat_open_wash", "Open Hat Wash", "drums", "hihat_open", 0.6, ["open"]),
            ],
            "crash": [
                _sample("crash_bright", "Bright Crash", "drums", "crash", 2.1, ["cymbal", "rock"]),
            ],
            "perc": [
                _sample("perc_rim", "Rim Shot", "drums", "perc", 0.2, ["rim", "percussion"]),
                _sample("perc_conga", "Conga Hit", "drums", "perc", 0.3, ["conga", "latin"]),
            ],
        },
        "bass": {
            "808": [
                _sample("bass_808_long", "Long 808", "bass", "808", 1.8, ["808", "sub", "trap"]),
            ],
            "synth_bass": [
                _sample("bass_acid_stab", "Acid Stab", "bass", "synth_bass", 0.5, ["acid", "techno"]),
            ],
        },
        "fx": {
            "riser": [
                _sample("fx_white_riser", "White Noise Riser", "fx", "riser", 4.0, ["riser", "build"]),
            ],
            "impact": [
                _sample("fx_sub_impact", "Sub Impact", "fx", "impact", 2.5, ["impact", "drop"]),
            ],
        },
    },
}

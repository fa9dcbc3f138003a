"""Command Parser: untyped ``{action, parameters}`` entries to typed commands.

The parser never raises.  Anything it cannot decode becomes ``Unknown``
with a reason, so a malformed entry turns into one failed step instead
of an aborted batch.

Decoding is two-phase:
1. Canonicalize parameter names (``tempo`` → ``bpm``, ``id`` → ``patternId``…)
2. Strict pydantic decode into the action's model (numeric strings coerce,
   anything else non-numeric is rejected)
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from pulse.core.commands.models import COMMAND_MODELS, CommandModel, Unknown
from pulse.core.validation.models import OK, ValidationResult, fail

logger = logging.getLogger(__name__)


# Canonical parameter name -> accepted aliases, checked in order.
_ENTITY_ID_ALIASES: dict[str, dict[str, tuple[str, ...]]] = {
    "patternId": {
        "actions": ("deletePattern", "selectPattern", "setPatternLength", "clearPatternNotes", "openPianoRoll"),
        "aliases": ("id", "pattern"),
    },
    "noteId": {
        "actions": ("updateNote", "deleteNote"),
        "aliases": ("id",),
    },
    "channelId": {
        "actions": (
            "updateChannel", "deleteChannel", "selectChannel", "setChannelVolume",
            "setChannelPan", "toggleChannelMute", "toggleChannelSolo",
        ),
        "aliases": ("id", "channel"),
    },
    "clipId": {
        "actions": ("moveClip", "resizeClip", "deleteClip"),
        "aliases": ("id", "clip"),
    },
    "effectId": {
        "actions": ("updateEffect", "deleteEffect"),
        "aliases": ("id",),
    },
    "trackId": {
        "actions": (
            "togglePlaylistTrackMute", "togglePlaylistTrackSolo",
            "setTrackEffect", "resetTrackEffects", "applyTrackEffects",
        ),
        "aliases": ("id", "track"),
    },
}

PARAMETER_ALIASES: dict[str, dict[str, tuple[str, ...]]] = {
    "addPattern": {"lengthInSteps": ("length", "steps")},
    "setPatternLength": {"lengthInSteps": ("length", "steps")},
    "addNote": {"startTick": ("tick", "start"), "durationTick": ("duration",)},
    "updateNote": {"startTick": ("tick", "start"), "durationTick": ("duration",)},
    "setBpm": {"bpm": ("tempo",)},
    "setPosition": {"tick": ("position", "startTick")},
    "addChannel": {"type": ("channelType",)},
    "setVolume": {"trackIndex": ("track",)},
    "setPan": {"trackIndex": ("track",)},
    "toggleMute": {"trackIndex": ("track",)},
    "toggleSolo": {"trackIndex": ("track",)},
    "addClip": {"trackIndex": ("track",), "startTick": ("start",), "durationTick": ("duration",)},
    "moveClip": {"trackIndex": ("track",), "startTick": ("start",)},
    "resizeClip": {"durationTick": ("duration",)},
    "setLoopRegion": {"startTick": ("start",), "endTick": ("end",)},
    "setTrackEffect": {"key": ("effectKey", "param")},
    "addEffect": {"effectType": ("type",), "trackIndex": ("track",)},
    "updateEffect": {"parameters": ("effectParameters", "params")},
    "addAudioSample": {"subcategory": ("type",), "trackIndex": ("track",), "startTick": ("start", "tick")},
    "clarificationNeeded": {"suggestedOptions": ("options",)},
}

for _canonical, _spec in _ENTITY_ID_ALIASES.items():
    for _action in _spec["actions"]:
        PARAMETER_ALIASES.setdefault(_action, {})[_canonical] = _spec["aliases"]

NOTE_ALIASES: dict[str, tuple[str, ...]] = {
    "startTick": ("tick", "start"),
    "durationTick": ("duration",),
}


def _dump(value: object) -> str:
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        return str(value)


def _canonicalize(params: Mapping[str, Any], aliases: Mapping[str, tuple[str, ...]]) -> dict[str, Any]:
    """Copy *params* with alias keys folded onto their canonical names.

    An alias only fills a canonical key that is absent, ``None`` or ``""``;
    ``None`` values are dropped so model defaults apply.
    """
    out = {k: v for k, v in params.items() if v is not None}
    for canonical, names in aliases.items():
        if out.get(canonical) not in (None, ""):
            continue
        for name in names:
            if out.get(name) not in (None, ""):
                out[canonical] = out[name]
                break
    return out


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    return f"{loc}: {first.get('msg', 'invalid value')}" if loc else first.get("msg", "invalid value")


def parse_command(raw: object) -> CommandModel:
    """
    Decode one raw ``{action, parameters}`` entry into a typed command.

    Never raises: unknown actions, non-object input and parameter decode
    failures all produce ``Unknown`` with a human-readable ``reason``.
    Side-effect free; safe to call repeatedly on the same input.
    """
    if not isinstance(raw, Mapping):
        return Unknown(original_text=_dump(raw), reason="Invalid command structure")

    action = raw.get("action")
    if not isinstance(action, str) or not action.strip():
        return Unknown(original_text=_dump(raw), reason="Missing action field")
    action = action.strip()

    params = raw.get("parameters")
    if params is None:
        params = {}
    if not isinstance(params, Mapping):
        return Unknown(original_text=_dump(raw), reason="Invalid command structure")

    if action == "unknown":
        raw_response = params.get("rawResponse")
        return Unknown(
            original_text=str(params.get("originalText") or _dump(raw)),
            reason=str(params.get("reason") or "Unknown reason"),
            raw_response=str(raw_response) if raw_response is not None else None,
        )

    model = COMMAND_MODELS.get(action)
    if model is None:
        return Unknown(
            original_text=str(params.get("originalText") or _dump(raw)),
            reason=f"Unrecognized action: {action}",
        )

    payload = _canonicalize(params, PARAMETER_ALIASES.get(action, {}))
    if action == "addNoteSequence" and isinstance(payload.get("notes"), list):
        payload["notes"] = [
            _canonicalize(note, NOTE_ALIASES) if isinstance(note, Mapping) else note
            for note in payload["notes"]
        ]
    payload["action"] = action

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        reason = f"Invalid parameters for {action}: {_describe(e)}"
        logger.debug(f"Command decode failed: {reason}")
        return Unknown(original_text=_dump(raw), reason=reason)
    except (TypeError, ValueError, OverflowError) as e:
        logger.debug(f"Command coercion failed for {action}: {e}")
        return Unknown(original_text=_dump(raw), reason=f"Invalid parameters for {action}: {e}")


def parse_commands(entries: Iterable[object]) -> list[CommandModel]:
    return [parse_command(entry) for entry in entries]


def validate_command_structure(raw: object) -> ValidationResult:
    """Shape check for a raw entry: string ``action`` and object ``parameters``."""
    if not isinstance(raw, Mapping):
        return fail("Command must be an object")
    action = raw.get("action")
    if not isinstance(action, str) or not action.strip():
        return fail("Command is missing an action")
    params = raw.get("parameters", {})
    if params is not None and not isinstance(params, Mapping):
        return fail("Command parameters must be an object")
    if action == "unknown" or action not in COMMAND_MODELS:
        reason = (params or {}).get("reason") if action == "unknown" else action
        return fail(f"Unknown command: {reason}")
    return OK

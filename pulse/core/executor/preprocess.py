"""Batch preprocessing, run on raw entries before any command executes.

Three passes, strictly in this order:

1. ``resolve_samples_consistently``: bind every category/subcategory query
   to one concrete sample id per key for the whole batch.
2. ``ensure_tracks_exist``: create playlist tracks up to the highest
   referenced ``trackIndex``.
3. ``resolve_clip_conflicts``: move placements that land on an exact
   ``(trackIndex, startTick)`` already taken in this batch forward by
   ``CONFLICT_SHIFT_TICKS`` until the tick is free.

Each pass returns new entry dicts; the plan's own entries are never mutated.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from pulse.contracts.json_types import JSONObject, RawActionDict, jnumber
from pulse.core.commands.parser import PARAMETER_ALIASES
from pulse.core.project_store import ProjectStore
from pulse.core.samples.models import SampleLibrary
from pulse.core.samples.resolver import find_sample, resolve_sample, sample_key
from pulse.core.timing import CONFLICT_SHIFT_TICKS
from pulse.core.validation.constants import MAX_TRACKS

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_CATEGORY = "drums"

SAMPLE_ACTIONS: frozenset[str] = frozenset({"addAudioSample"})

# Actions that place content at (trackIndex, startTick).
PLACEMENT_ACTIONS: frozenset[str] = frozenset({"addAudioSample", "addClip"})


def _keys(action: object, canonical: str) -> tuple[str, ...]:
    """*canonical* followed by the aliases the parser accepts for it on *action*."""
    aliases = PARAMETER_ALIASES.get(action, {}) if isinstance(action, str) else {}
    return (canonical, *aliases.get(canonical, ()))


def _first(params: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = params.get(key)
        if value is not None and value != "":
            return value
    return None


def _as_index(value: Any) -> Optional[int]:
    """Non-negative integer from a raw value, else ``None``."""
    number = jnumber(value)
    if number is None or number < 0 or not float(number).is_integer():
        return None
    return int(number)


def copy_entries(entries: Iterable[object]) -> list[Any]:
    """Shallow-copy each entry and its ``parameters`` so later passes can write to them."""
    copied: list[Any] = []
    for entry in entries:
        if isinstance(entry, Mapping):
            new = dict(entry)
            params = entry.get("parameters")
            if isinstance(params, Mapping):
                new["parameters"] = dict(params)
            copied.append(new)
        else:
            copied.append(entry)
    return copied


def _params(entry: object) -> Optional[JSONObject]:
    if not isinstance(entry, dict):
        return None
    params = entry.get("parameters")
    return params if isinstance(params, dict) else None


# =============================================================================
# 1. Sample consistency
# =============================================================================

def resolve_samples_consistently(
    entries: list[RawActionDict],
    library: SampleLibrary,
    choices: dict[str, str],
    rng: Optional[random.Random] = None,
) -> list[RawActionDict]:
    """
    Write a concrete ``sampleId`` into every sample entry that lacks one.

    *choices* is the batch's choice table.  A key already bound (earlier in
    this batch, or pre-seeded by the caller) is reused; an unbound key is
    resolved once and bound.  Entries with an explicit ``sampleId`` are
    left alone.  A key that resolves to nothing stays unbound and its
    entries fail when they execute.
    """
    out = copy_entries(entries)
    for entry in out:
        params = _params(entry)
        if params is None or entry.get("action") not in SAMPLE_ACTIONS:
            continue
        if params.get("sampleId"):
            continue

        sample_name = params.get("sampleName")
        if isinstance(sample_name, str) and sample_name.strip() and not params.get("category"):
            found = find_sample(library, sample_name)
            if found is not None:
                params["sampleId"] = found.sample_id
            continue

        category = params.get("category") or DEFAULT_SAMPLE_CATEGORY
        subcategory = _first(params, ("subcategory", "type"))
        key = sample_key(str(category), str(subcategory) if subcategory is not None else None)

        sample_id = choices.get(key)
        if sample_id is None:
            resolved = resolve_sample(
                library,
                str(category),
                str(subcategory) if subcategory is not None else None,
                rng=rng,
            )
            if resolved is None:
                logger.warning(f"⚠️ No sample for key '{key}'")
                continue
            sample_id = resolved.sample_id
            choices[key] = sample_id
            logger.debug(f"🎯 Bound sample key '{key}' → {sample_id}")
        params["sampleId"] = sample_id
    return out


# =============================================================================
# 2. Track provisioning
# =============================================================================

def max_track_index(entries: Iterable[object], limit: Optional[int] = None) -> Optional[int]:
    """Highest ``trackIndex`` referenced; indices at or beyond *limit* are ignored."""
    highest: Optional[int] = None
    for entry in entries:
        params = _params(entry)
        if params is None:
            continue
        index = _as_index(_first(params, _keys(entry.get("action"), "trackIndex")))
        if index is None or (limit is not None and index >= limit):
            continue
        if highest is None or index > highest:
            highest = index
    return highest


def ensure_tracks_exist(entries: Iterable[object], store: ProjectStore) -> int:
    """Create tracks until every referenced index exists; returns how many were created.

    Never grows the playlist past ``MAX_TRACKS``.  A step naming an index
    beyond that fails its own track-index check when it executes.
    """
    highest = max_track_index(entries, limit=MAX_TRACKS)
    if highest is None or not store.has_project:
        return 0
    created = 0
    while store.track_count <= highest:
        store.add_playlist_track()
        created += 1
    if created:
        logger.info(f"➕ Provisioned {created} playlist track(s) (up to index {highest})")
    return created


# =============================================================================
# 3. Exact-tick conflicts
# =============================================================================

def resolve_clip_conflicts(entries: list[RawActionDict]) -> list[RawActionDict]:
    """
    Shift exact ``(trackIndex, startTick)`` collisions by 12-tick steps.

    Only identical start ticks collide; overlapping durations are left
    as they are.  ``addClip`` defaults to track 0 and tick 0.  An
    ``addAudioSample`` without a ``trackIndex`` gets a fresh track, so it
    never collides.
    """
    out = copy_entries(entries)
    occupancy: dict[int, set[int]] = {}
    for entry in out:
        params = _params(entry)
        action = entry.get("action") if isinstance(entry, dict) else None
        if params is None or action not in PLACEMENT_ACTIONS:
            continue

        raw_index = _first(params, _keys(action, "trackIndex"))
        if raw_index is None and action == "addAudioSample":
            continue
        track_index = _as_index(raw_index) if raw_index is not None else 0
        raw_tick = _first(params, _keys(action, "startTick"))
        start_tick = _as_index(raw_tick) if raw_tick is not None else 0
        if track_index is None or start_tick is None:
            continue

        occupied = occupancy.setdefault(track_index, set())
        tick = start_tick
        while tick in occupied:
            tick += CONFLICT_SHIFT_TICKS
        occupied.add(tick)
        if tick != start_tick:
            params["startTick"] = tick
            logger.debug(f"↪️ {action} on track {track_index}: tick {start_tick} → {tick}")
    return out

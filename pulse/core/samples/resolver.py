"""Sample Resolver: category/subcategory queries to concrete samples.

Matching is case-insensitive.  A shorthand subcategory such as ``hihat``
matches every concrete subcategory it names (``hihat_closed``,
``hihat_open``) by prefix, containment or alias.  When nothing in the
subcategory matches, any sample in the category is used.  A missing or
empty category yields ``None``; nothing here raises on a miss.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Literal, Optional

from pulse.core.samples.models import SampleLibrary, SampleMetadata, SampleRef, to_ref

logger = logging.getLogger(__name__)

MatchType = Literal["exact", "id", "name", "category", "fuzzy"]

# Shorthand subcategory -> concrete subcategory names it also matches.
SUBCATEGORY_ALIASES: dict[str, tuple[str, ...]] = {
    "hihat": ("hihat_closed", "hihat_open", "hh", "hat"),
    "hi-hat": ("hihat_closed", "hihat_open"),
    "hh": ("hihat_closed", "hihat_open"),
    "hat": ("hihat_closed", "hihat_open"),
    "perc": ("perc", "percussion"),
    "percussion": ("perc",),
}

# Canonical instrument word -> words that mean the same thing in a search query.
SEARCH_ALIASES: dict[str, tuple[str, ...]] = {
    "kick": ("bass drum", "bd", "bassdrum"),
    "snare": ("snr", "sd"),
    "hihat": ("hi-hat", "hh", "hat"),
    "clap": ("handclap", "cp"),
    "tom": ("floor tom", "hi tom", "mid tom"),
    "cymbal": ("crash", "ride"),
    "bass": ("sub", "low"),
    "pad": ("atmosphere", "ambient"),
    "lead": ("synth lead", "melody"),
    "strings": ("orchestra", "violin", "cello"),
    "brass": ("trumpet", "trombone", "horn"),
    "piano": ("keys", "keyboard"),
    "guitar": ("gtr", "acoustic"),
}


@dataclass(frozen=True)
class SampleMatch:
    sample: SampleRef
    score: int
    match_type: MatchType


def sample_key(category: Optional[str], subcategory: Optional[str] = None) -> str:
    """Composite ``category[/subcategory]`` key, lowercased."""
    cat = (category or "").strip().lower()
    sub = (subcategory or "").strip().lower()
    return f"{cat}/{sub}" if sub else cat


def _subcategory_matches(name: str, query: str) -> bool:
    name = name.lower()
    return (
        name == query
        or name.startswith(query)
        or query in name
        or query.startswith(name)
        or name in SUBCATEGORY_ALIASES.get(query, ())
    )


def candidate_samples(
    library: SampleLibrary,
    category: str,
    subcategory: Optional[str] = None,
) -> list[SampleRef]:
    """Every sample the query could resolve to, in manifest order."""
    subcategories = None
    for name, subs in library.categories.items():
        if name.lower() == category.strip().lower():
            category, subcategories = name, subs
            break
    if not subcategories:
        return []

    query = (subcategory or "").strip().lower()
    candidates: list[SampleRef] = []
    if query:
        exact = {name.lower(): name for name in subcategories}.get(query)
        if exact is not None:
            candidates = [to_ref(s, category, exact) for s in subcategories[exact]]
        else:
            for name, samples in subcategories.items():
                if _subcategory_matches(name, query):
                    candidates.extend(to_ref(s, category, name) for s in samples)

    if not candidates:
        for name, samples in subcategories.items():
            candidates.extend(to_ref(s, category, name) for s in samples)
    return candidates


def resolve_sample(
    library: SampleLibrary,
    category: str,
    subcategory: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> Optional[SampleRef]:
    """
    Pick one concrete sample for a category/subcategory query.

    The choice among candidates is random; pass a seeded ``rng`` for a
    reproducible pick.  Returns ``None`` when the category is unknown or
    holds no samples.
    """
    candidates = candidate_samples(library, category, subcategory)
    if not candidates:
        logger.debug(f"No sample candidates for {sample_key(category, subcategory)}")
        return None
    return (rng or random).choice(candidates)


def _score(
    sample: SampleMetadata,
    category: str,
    subcategory: str,
    query: str,
    words: list[str],
) -> tuple[int, MatchType]:
    sample_id = sample.id.lower()
    name = sample.name.lower()
    cat = category.lower()
    sub = subcategory.lower()

    if sample_id == query:
        return 100, "exact"

    score = 0
    match_type: MatchType = "fuzzy"
    if query in sample_id or sample_id in query:
        score += 50
        match_type = "id"
    if name == query:
        return 95, "name"
    if query in name:
        score += 40
        match_type = "name"
    if sub == query:
        score += 35
        match_type = "category"
    if cat == query:
        score += 30
        match_type = "category"

    for word in words:
        if len(word) < 2:
            continue
        if word in sub:
            score += 15
        if word in cat:
            score += 10
        if word in name:
            score += 10
        for canonical, aliases in SEARCH_ALIASES.items():
            if (word == canonical or word in aliases) and (canonical in sub or canonical in cat):
                score += 12

    for tag in sample.tags:
        tag = tag.lower()
        if query in tag or tag in query:
            score += 8
        score += 5 * sum(1 for word in words if word in tag)

    return score, match_type


def search_samples(library: SampleLibrary, query: str, limit: int = 5) -> list[SampleMatch]:
    """Score every sample against *query*; best matches first."""
    normalized = query.strip().lower()
    if not normalized:
        return []
    words = normalized.split()

    matches: list[SampleMatch] = []
    for category, subcategory, sample in library.iter_samples():
        score, match_type = _score(sample, category, subcategory, normalized, words)
        if score > 0:
            matches.append(SampleMatch(to_ref(sample, category, subcategory), score, match_type))

    matches.sort(key=lambda m: m.score, reverse=True)
    return matches[:limit]


def find_sample(library: SampleLibrary, query: str) -> Optional[SampleRef]:
    """Deterministic lookup: exact id first, then the best search hit."""
    exact = library.get(query)
    if exact is not None:
        return exact
    matches = search_samples(library, query, limit=1)
    return matches[0].sample if matches else None


def category_structure(library: SampleLibrary) -> dict[str, list[str]]:
    return {category: list(subs) for category, subs in library.categories.items()}


def compact_index(library: SampleLibrary) -> str:
    """One ``category/subcategory: id, id, ...`` line per subcategory."""
    lines = []
    for category, subcategories in library.categories.items():
        for subcategory, samples in subcategories.items():
            lines.append(f"{category}/{subcategory}: {', '.join(s.id for s in samples)}")
    return "\n".join(lines)

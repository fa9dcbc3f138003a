"""Tests for the sample library and resolver (pulse/core/samples/)."""
from __future__ import annotations

import json
import random
from pathlib import Path

from pulse.core.samples import (
    SampleLibrary,
    candidate_samples,
    category_structure,
    compact_index,
    find_sample,
    resolve_sample,
    sample_key,
    search_samples,
)


class TestLibrary:

    def test_total_filled_from_manifest(self, library: SampleLibrary) -> None:
        assert library.total_samples == 16

    def test_get_by_id(self, library: SampleLibrary) -> None:
        ref = library.get("snare_crisp")
        assert ref is not None
        assert ref.category == "drums"
        assert ref.subcategory == "snare"
        assert ref.duration == 0.35

    def test_get_missing(self, library: SampleLibrary) -> None:
        assert library.get("nope") is None

    def test_from_path(self, tmp_path: Path, library: SampleLibrary) -> None:
        manifest = tmp_path / "manifest.json"
        manifest.write_text(json.dumps({
            "libraryName": "Tiny",
            "categories": {"drums": {"kick": [{"id": "k1", "name": "Kick One", "duration": 0.5}]}},
        }))
        loaded = SampleLibrary.from_path(manifest)
        assert loaded.library_name == "Tiny"
        assert loaded.total_samples == 1

    def test_structure_and_index(self, library: SampleLibrary) -> None:
        assert category_structure(library)["bass"] == ["808", "synth_bass"]
        assert "drums/snare: snare_crisp, snare_vinyl" in compact_index(library).splitlines()


class TestSampleKey:

    def test_lowercased(self) -> None:
        assert sample_key("Drums", "Kick") == "drums/kick"

    def test_category_only(self) -> None:
        assert sample_key("drums") == "drums"
        assert sample_key("drums", "  ") == "drums"


class TestCandidates:

    def test_exact_subcategory(self, library: SampleLibrary) -> None:
        ids = [s.sample_id for s in candidate_samples(library, "drums", "kick")]
        assert ids == ["kick_808_deep", "kick_punchy", "kick_dusty"]

    def test_hihat_shorthand_matches_both_hats(self, library: SampleLibrary) -> None:
        subs = {s.subcategory for s in candidate_samples(library, "drums", "hihat")}
        assert subs == {"hihat_closed", "hihat_open"}

    def test_case_insensitive(self, library: SampleLibrary) -> None:
        assert len(candidate_samples(library, "DRUMS", "Snare")) == 2

    def test_unmatched_subcategory_falls_back_to_category(self, library: SampleLibrary) -> None:
        assert len(candidate_samples(library, "fx", "laser")) == 2

    def test_unknown_category(self, library: SampleLibrary) -> None:
        assert candidate_samples(library, "vocals", "chop") == []


class TestResolve:

    def test_seeded_rng_is_reproducible(self, library: SampleLibrary) -> None:
        first = resolve_sample(library, "drums", "kick", rng=random.Random(7))
        second = resolve_sample(library, "drums", "kick", rng=random.Random(7))
        assert first is not None and second is not None
        assert first.sample_id == second.sample_id

    def test_pick_comes_from_the_subcategory(self, library: SampleLibrary, rng: random.Random) -> None:
        for _ in range(10):
            ref = resolve_sample(library, "drums", "snare", rng=rng)
            assert ref is not None
            assert ref.subcategory == "snare"

    def test_unknown_category_is_none(self, library: SampleLibrary) -> None:
        assert resolve_sample(library, "vocals") is None

    def test_empty_category_is_none(self, library: SampleLibrary) -> None:
        assert resolve_sample(library, "") is None


class TestSearch:

    def test_exact_id_scores_highest(self, library: SampleLibrary) -> None:
        matches = search_samples(library, "kick_punchy")
        assert matches[0].sample.sample_id == "kick_punchy"
        assert matches[0].match_type == "exact"

    def test_exact_name(self, library: SampleLibrary) -> None:
        matches = search_samples(library, "vinyl snare")
        assert matches[0].sample.sample_id == "snare_vinyl"
        assert matches[0].score == 95

    def test_blank_query(self, library: SampleLibrary) -> None:
        assert search_samples(library, "   ") == []

    def test_find_sample_by_alias_word(self, library: SampleLibrary) -> None:
        found = find_sample(library, "open hat")
        assert found is not None
        assert found.subcategory == "hihat_open"

    def test_find_sample_is_deterministic(self, library: SampleLibrary) -> None:
        assert find_sample(library, "808").sample_id == find_sample(library, "808").sample_id

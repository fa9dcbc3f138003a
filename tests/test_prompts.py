"""Tests for system prompt construction (pulse/core/prompts.py)."""
from __future__ import annotations

from pulse.core.project_store import ProjectStore
from pulse.core.prompts import (
    build_system_prompt,
    daw_capabilities,
    extract_project_context,
    format_samples_for_prompt,
)
from pulse.core.router import hash_context
from pulse.core.samples import SampleLibrary


class TestProjectContext:

    def test_no_project(self) -> None:
        assert extract_project_context(None) is None

    def test_clip_source_names(self, store: ProjectStore, library: SampleLibrary) -> None:
        pattern = store.add_pattern("Drums")
        store.add_playlist_track("Main")
        store.add_clip(pattern.id, 0, 0)
        asset = store.add_audio_asset(library.get("clap_tight"))
        store.add_audio_clip(asset.id, 0, 384, 96)

        context = extract_project_context(store.project)
        assert [c["sourceName"] for c in context["clips"]] == ["Drums", "Tight Clap"]
        assert context["playlistTracks"][0]["clipCount"] == 2
        assert context["loopRegion"] is None

    def test_loop_region_only_when_enabled(self, store: ProjectStore) -> None:
        store.set_loop_region(0, 768)
        assert extract_project_context(store.project)["loopRegion"] == {"start": 0, "end": 768}


class TestSections:

    def test_samples_listed_by_category(self, library: SampleLibrary) -> None:
        text = format_samples_for_prompt(library)
        assert text.startswith("Available Samples (16 total):")
        assert "## DRUMS" in text
        assert "kick: kick_808_deep, kick_punchy, kick_dusty" in text

    def test_no_library(self) -> None:
        assert format_samples_for_prompt(None) == "No samples available."

    def test_capabilities(self) -> None:
        caps = daw_capabilities()
        assert caps["bpmRange"] == {"min": 20, "max": 999}
        assert caps["ppq"] == 96
        assert "reverb" in caps["effectTypes"]


class TestSystemPrompt:

    def test_contains_project_and_library(self, store: ProjectStore, library: SampleLibrary) -> None:
        store.add_pattern("Verse Keys")
        prompt = build_system_prompt(store.project, library)
        assert '"Verse Keys"' in prompt
        assert "boom-bap-classic" in prompt
        assert "addAudioSample" in prompt
        assert "Bar 2 starts at 384" in prompt

    def test_no_project_section(self, library: SampleLibrary) -> None:
        assert "No project loaded" in build_system_prompt(None, library)

    def test_prompt_hash_follows_project_state(self, store: ProjectStore, library: SampleLibrary) -> None:
        before = hash_context(build_system_prompt(store.project, library))
        assert before == hash_context(build_system_prompt(store.project, library))
        store.set_bpm(95)
        assert before != hash_context(build_system_prompt(store.project, library))

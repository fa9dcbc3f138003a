"""Tests for pulse.config."""
from __future__ import annotations

import pytest

from pulse.config import DEFAULT_MODEL_TIER, MODEL_TIERS, Settings, resolve_model_tier


class TestModelTiers:

    def test_known_tiers(self) -> None:
        assert resolve_model_tier("gemini") == MODEL_TIERS["gemini"]
        assert resolve_model_tier("fallback") == ("openai", "gpt-4o-mini")

    def test_unknown_tier_uses_default(self) -> None:
        assert resolve_model_tier("mystery") == MODEL_TIERS[DEFAULT_MODEL_TIER]


class TestSettings:

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PULSE_MODEL_API_KEY", raising=False)
        config = Settings(_env_file=None)
        assert config.model_api_key is None
        assert config.model_max_retries == 2
        assert config.model_retry_base_delay == 1.0
        assert config.cors_origins == []

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PULSE_MODEL_API_KEY", "abc")
        monkeypatch.setenv("PULSE_MODEL_MAX_RETRIES", "5")
        monkeypatch.setenv("PULSE_CORS_ORIGINS", '["https://studio.test"]')
        config = Settings(_env_file=None)
        assert config.model_api_key == "abc"
        assert config.model_max_retries == 5
        assert config.cors_origins == ["https://studio.test"]

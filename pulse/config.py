"""
Pulse Copilot Configuration

Environment-based configuration for the copilot service.
"""
import logging
from functools import lru_cache
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _app_version_from_package() -> str:
    """Read version from installed package metadata."""
    try:
        from importlib.metadata import version
        return version("pulse-copilot")
    except Exception:
        return "0.0.0-unknown"


# Model tiers exposed to clients. The tier name is what the chat request
# carries; the value is the (provider, model) pair sent upstream.
MODEL_TIERS: dict[str, tuple[str, str]] = {
    "gemini": ("openai", "gpt-4o"),
    "fallback": ("openai", "gpt-4o-mini"),
}

DEFAULT_MODEL_TIER: str = "gemini"


def resolve_model_tier(tier: str) -> tuple[str, str]:
    """Return the (provider, model) pair for a tier, defaulting to the primary tier."""
    return MODEL_TIERS.get(tier, MODEL_TIERS[DEFAULT_MODEL_TIER])


class Settings(BaseSettings):
    """Copilot settings, read from ``PULSE_*`` environment variables or ``.env``."""

    # Service Info
    app_name: str = "Pulse Copilot"
    app_version: str = _app_version_from_package()
    debug: bool = False

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 10011

    # Upstream assistant backend (assistant/thread REST API)
    model_api_key: Optional[str] = None
    model_base_url: str = "https://app.backboard.io/api"
    model_timeout: int = 60  # seconds
    model_max_retries: int = 2  # additional attempts after the first
    model_retry_base_delay: float = 1.0  # seconds, multiplied by attempt index
    assistant_name: str = "Pulse Studio Music Copilot"

    # Sample library manifest (JSON). Unset uses the bundled seed catalogue.
    sample_manifest_path: Optional[str] = None

    # Chat endpoint rate limit (per client IP)
    chat_rate_limit: str = "30/minute"

    # CORS Settings (fail closed: no default origins)
    cors_origins: list[str] = []

    @model_validator(mode="after")
    def _warn_cors_wildcard_in_production(self) -> "Settings":
        """A wildcard origin is only expected while debugging."""
        if not self.debug and self.cors_origins and "*" in self.cors_origins:
            logging.getLogger(__name__).warning(
                "CORS allows all origins (*) with PULSE_DEBUG=false. "
                "Set PULSE_CORS_ORIGINS to exact origins in production."
            )
        return self

    model_config = SettingsConfigDict(
        env_prefix="PULSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        protected_namespaces=(),
    )


@lru_cache()
def get_settings() -> Settings:
    """Settings are read once per process."""
    return Settings()


# Convenience access
settings = get_settings()

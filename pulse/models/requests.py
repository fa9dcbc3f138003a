"""Request models for the Pulse Copilot API."""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field

from pulse.models.base import CamelModel

# Generous limit for a chat utterance; the context prompt is built server-side.
_MAX_TEXT_LENGTH = 4_000
_MAX_SYSTEM_PROMPT_LENGTH = 200_000

ModelTier = Literal["gemini", "fallback"]


class ChatRequest(CamelModel):
    """A natural-language request from the chat panel."""

    text: str = Field(
        ...,
        min_length=1,
        max_length=_MAX_TEXT_LENGTH,
        description="What the user asked for",
        examples=["make a trap beat"],
    )
    model: ModelTier = Field(
        default="gemini",
        description="Model tier: 'gemini' (primary) or 'fallback' (smaller, faster)",
    )
    session_id: Optional[str] = Field(
        default=None,
        max_length=128,
        description="Chat session id. Project state and the upstream session persist per id.",
    )
    system_prompt: Optional[str] = Field(
        default=None,
        max_length=_MAX_SYSTEM_PROMPT_LENGTH,
        description="Client-built context prompt. Omit to build it from the server-side project.",
    )
    sample_choices: dict[str, str] = Field(
        default_factory=dict,
        description="Sample choices from a previous batch, reused for consistent sounds on retry",
    )


class UndoRequest(CamelModel):
    """Revert the most recent batch in a session."""

    session_id: str = Field(..., min_length=1, max_length=128)

"""Pydantic models for the Pulse Copilot API."""
from __future__ import annotations

from pulse.models.base import CamelModel
from pulse.models.requests import ChatRequest, UndoRequest
from pulse.models.responses import ChatData, ChatResponse, UndoResponse

__all__ = [
    "CamelModel",
    "ChatRequest",
    "UndoRequest",
    "ChatData",
    "ChatResponse",
    "UndoResponse",
]

"""Response models for the Pulse Copilot API."""
from __future__ import annotations

from typing import Any, Optional

from pulse.models.base import CamelModel


class ChatData(CamelModel):
    """Plan (and, server-side, its execution result) for one request."""
    message: str
    plan: dict[str, Any]
    batch_result: Optional[dict[str, Any]] = None
    session_id: Optional[str] = None


class ChatResponse(CamelModel):
    success: bool
    data: Optional[ChatData] = None
    error: Optional[str] = None


class UndoResponse(CamelModel):
    success: bool
    undone_group_id: Optional[str] = None
    message: str

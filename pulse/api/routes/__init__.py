"""API route modules."""
from __future__ import annotations

from pulse.api.routes import chat, health

__all__ = ["chat", "health"]

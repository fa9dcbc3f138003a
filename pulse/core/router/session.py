"""Upstream model sessions.

An upstream assistant is created against one fixed system prompt, so a
session is only reusable while the context prompt hashes the same.  The
router is handed a ``ModelSession`` explicitly; ``SessionRegistry`` keeps
one per chat session for the HTTP layer.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


def hash_context(prompt: str) -> str:
    return hashlib.sha256(prompt.encode("utf-8")).hexdigest()


@dataclass
class ModelSession:
    """Assistant and thread handles bound to one context prompt hash."""
    assistant_id: Optional[str] = None
    thread_id: Optional[str] = None
    context_hash: Optional[str] = None

    def is_bound_to(self, context_hash: str) -> bool:
        return self.assistant_id is not None and self.context_hash == context_hash

    def bind_assistant(self, assistant_id: str, context_hash: str) -> None:
        """A new assistant always starts a new thread."""
        self.assistant_id = assistant_id
        self.context_hash = context_hash
        self.thread_id = None

    def invalidate(self) -> None:
        self.assistant_id = None
        self.thread_id = None
        self.context_hash = None


class SessionRegistry:
    """chat session id -> ``ModelSession``."""

    def __init__(self) -> None:
        self._sessions: dict[str, ModelSession] = {}

    def get(self, session_id: str) -> ModelSession:
        session = self._sessions.get(session_id)
        if session is None:
            session = ModelSession()
            self._sessions[session_id] = session
            logger.debug(f"🧵 New model session for {session_id[:8]}")
        return session

    def drop(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def clear(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions


session_registry = SessionRegistry()

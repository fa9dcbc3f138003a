"""
Model Router: utterance + context prompt → ``BatchPlan``.

Per call:
1. Hash the context prompt; a session bound to another hash is dropped
2. Create the assistant and thread when the session has none
3. Send the utterance; decode the reply into a plan
4. Retry transport failures with linear backoff (attempt × base delay);
   auth and quota errors propagate at once
5. When every attempt failed, answer from the fallback responder

The fallback is never silent: it always emits a ``model_fallback`` event.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Optional

from pulse.config import DEFAULT_MODEL_TIER, resolve_model_tier, settings
from pulse.core.plan import BatchPlan
from pulse.core.prompts import DEFAULT_SYSTEM_PROMPT
from pulse.core.router.backend import ModelBackend, ModelTransportError, create_model_backend
from pulse.core.router.decode import decode_plan_text
from pulse.core.router.fallback import fallback_plan
from pulse.core.router.session import ModelSession, hash_context
from pulse.core.tracing import (
    get_trace_context,
    log_model_call,
    log_model_fallback,
    log_model_retry,
    trace_span,
)

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class ModelRouter:
    """
    Routes utterances to the upstream model with retry and fallback.

    Usage:
        router = ModelRouter(backend=create_model_backend())
        plan = await router.send("make a trap beat", "gemini", prompt, session)
    """

    def __init__(
        self,
        backend: Optional[ModelBackend],
        max_retries: Optional[int] = None,
        base_delay: Optional[float] = None,
        assistant_name: Optional[str] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.backend = backend
        self.max_retries = settings.model_max_retries if max_retries is None else max_retries
        self.base_delay = settings.model_retry_base_delay if base_delay is None else base_delay
        self.assistant_name = assistant_name or settings.assistant_name
        self._sleep = sleep

    async def _ensure_thread(
        self,
        backend: ModelBackend,
        session: ModelSession,
        prompt: str,
        context_hash: str,
    ) -> str:
        """Thread id for *session*, creating assistant and thread as needed."""
        assistant_id = session.assistant_id
        if assistant_id is None or not session.is_bound_to(context_hash):
            if assistant_id is not None:
                logger.info("🔄 Context prompt changed, creating new assistant")
            session.invalidate()
            assistant_id = await backend.create_assistant(self.assistant_name, prompt)
            session.bind_assistant(assistant_id, context_hash)
        if session.thread_id is None:
            session.thread_id = await backend.create_thread(assistant_id)
        return session.thread_id

    async def send(
        self,
        utterance: str,
        model_tier: str = DEFAULT_MODEL_TIER,
        context_prompt: Optional[str] = None,
        session: Optional[ModelSession] = None,
    ) -> BatchPlan:
        """
        Turn *utterance* into a plan.

        Raises ``ModelAuthError`` / ``ModelQuotaError`` without retrying.
        Never returns ``None``: exhaustion falls back to the local responder.
        """
        trace = get_trace_context()

        backend = self.backend
        if backend is None:
            plan, rule = fallback_plan(utterance)
            log_model_fallback(trace.trace_id, "backend_unconfigured", attempts=0, rule=rule)
            return plan

        prompt = context_prompt or DEFAULT_SYSTEM_PROMPT
        session = session if session is not None else ModelSession()
        context_hash = hash_context(prompt)
        provider, model = resolve_model_tier(model_tier)
        attempts = self.max_retries + 1
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            started = time.time()
            try:
                with trace_span(trace, "model_call", {"model": model, "attempt": attempt}):
                    thread_id = await self._ensure_thread(backend, session, prompt, context_hash)
                    content = await backend.send_message(thread_id, utterance, provider, model)
            except ModelTransportError as e:
                last_error = e
                if attempt < attempts:
                    delay = self.base_delay * attempt
                    log_model_retry(trace.trace_id, attempt, self.max_retries, delay, str(e))
                    await self._sleep(delay)
                continue

            plan = decode_plan_text(content, utterance)
            log_model_call(
                trace.trace_id,
                model,
                attempt,
                (time.time() - started) * 1000,
                len(plan.actions),
            )
            return plan

        plan, rule = fallback_plan(utterance)
        log_model_fallback(
            trace.trace_id,
            "retries_exhausted",
            attempts=attempts,
            rule=rule,
            last_error=str(last_error) if last_error else None,
        )
        return plan


# =============================================================================
# Process-wide router
# =============================================================================

_shared_router: Optional[ModelRouter] = None


def get_model_router() -> ModelRouter:
    """Return the process-wide ModelRouter singleton."""
    global _shared_router
    if _shared_router is None:
        _shared_router = ModelRouter(backend=create_model_backend())
    return _shared_router


async def close_model_router() -> None:
    """Close the singleton's backend (call from FastAPI lifespan shutdown)."""
    global _shared_router
    if _shared_router is not None:
        close = getattr(_shared_router.backend, "close", None)
        if close is not None:
            await close()
        _shared_router = None

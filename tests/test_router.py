"""Tests for the model router (pulse/core/router/router.py).

The upstream backend is an ``AsyncMock``; ``sleep`` is injected so retry
backoff is asserted without waiting.
"""
from __future__ import annotations

import json
from unittest.mock import AsyncMock, call

import pytest

from pulse.core.router import (
    ModelAuthError,
    ModelQuotaError,
    ModelRouter,
    ModelSession,
    ModelTransportError,
    fallback_plan,
    hash_context,
)

PLAN_JSON = json.dumps({
    "actions": [{"action": "setBpm", "parameters": {"bpm": 128}}],
    "confidence": 0.9,
    "reasoning": "Tempo change",
})


def make_backend(reply: str = PLAN_JSON) -> AsyncMock:
    backend = AsyncMock()
    backend.create_assistant.return_value = "asst-1"
    backend.create_thread.return_value = "thread-1"
    backend.send_message.return_value = reply
    return backend


def make_router(backend: AsyncMock, max_retries: int = 2) -> tuple[ModelRouter, AsyncMock]:
    sleep = AsyncMock()
    router = ModelRouter(backend=backend, max_retries=max_retries, base_delay=1.0, assistant_name="Test", sleep=sleep)
    return router, sleep


class TestSend:

    @pytest.mark.anyio
    async def test_decodes_reply(self) -> None:
        backend = make_backend()
        router, _ = make_router(backend)
        plan = await router.send("set bpm to 128", "gemini", "PROMPT", ModelSession())
        assert plan.actions == [{"action": "setBpm", "parameters": {"bpm": 128}}]
        assert plan.confidence == 0.9
        backend.create_assistant.assert_awaited_once_with("Test", "PROMPT")
        backend.send_message.assert_awaited_once_with("thread-1", "set bpm to 128", "openai", "gpt-4o")

    @pytest.mark.anyio
    async def test_fallback_tier_uses_smaller_model(self) -> None:
        backend = make_backend()
        router, _ = make_router(backend)
        await router.send("play", "fallback", "PROMPT", ModelSession())
        assert backend.send_message.await_args.args[3] == "gpt-4o-mini"

    @pytest.mark.anyio
    async def test_unparseable_reply_becomes_unknown(self) -> None:
        router, _ = make_router(make_backend("not json at all"))
        plan = await router.send("do a thing", "gemini", "PROMPT", ModelSession())
        assert plan.actions[0]["action"] == "unknown"
        assert plan.actions[0]["parameters"]["rawResponse"] == "not json at all"


class TestSessions:

    @pytest.mark.anyio
    async def test_bound_session_without_thread_gets_one(self) -> None:
        backend = make_backend()
        router, _ = make_router(backend)
        session = ModelSession()
        session.bind_assistant("asst-9", hash_context("PROMPT"))
        await router.send("play", "gemini", "PROMPT", session)
        backend.create_assistant.assert_not_awaited()
        backend.create_thread.assert_awaited_once_with("asst-9")
        assert session.thread_id == "thread-1"

    @pytest.mark.anyio
    async def test_session_reused_for_same_prompt(self) -> None:
        backend = make_backend()
        router, _ = make_router(backend)
        session = ModelSession()
        await router.send("one", "gemini", "PROMPT", session)
        await router.send("two", "gemini", "PROMPT", session)
        assert backend.create_assistant.await_count == 1
        assert backend.create_thread.await_count == 1
        assert session.context_hash == hash_context("PROMPT")

    @pytest.mark.anyio
    async def test_changed_prompt_rebinds(self) -> None:
        backend = make_backend()
        backend.create_assistant.side_effect = ["asst-1", "asst-2"]
        backend.create_thread.side_effect = ["thread-1", "thread-2"]
        router, _ = make_router(backend)
        session = ModelSession()
        await router.send("one", "gemini", "PROMPT A", session)
        await router.send("two", "gemini", "PROMPT B", session)
        assert session.assistant_id == "asst-2"
        assert session.thread_id == "thread-2"
        assert backend.send_message.await_args.args[0] == "thread-2"

    def test_hash_is_sha256_hex(self) -> None:
        assert len(hash_context("x")) == 64
        assert hash_context("x") != hash_context("y")


class TestRetries:

    @pytest.mark.anyio
    async def test_transport_errors_retry_with_linear_backoff(self) -> None:
        backend = make_backend()
        backend.send_message.side_effect = [ModelTransportError("a"), ModelTransportError("b"), PLAN_JSON]
        router, sleep = make_router(backend, max_retries=2)
        plan = await router.send("set bpm to 128", "gemini", "PROMPT", ModelSession())
        assert plan.actions[0]["action"] == "setBpm"
        assert sleep.await_args_list == [call(1.0), call(2.0)]

    @pytest.mark.anyio
    async def test_exhaustion_falls_back(self) -> None:
        backend = make_backend()
        backend.send_message.side_effect = ModelTransportError("down")
        router, sleep = make_router(backend, max_retries=2)
        plan = await router.send("play", "gemini", "PROMPT", ModelSession())
        assert backend.send_message.await_count == 3
        assert sleep.await_count == 2
        assert plan == fallback_plan("play")[0]

    @pytest.mark.anyio
    async def test_zero_retries_means_one_attempt(self) -> None:
        backend = make_backend()
        backend.send_message.side_effect = ModelTransportError("down")
        router, sleep = make_router(backend, max_retries=0)
        await router.send("play", "gemini", "PROMPT", ModelSession())
        assert backend.send_message.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.anyio
    async def test_assistant_creation_failure_is_retried(self) -> None:
        backend = make_backend()
        backend.create_assistant.side_effect = [ModelTransportError("flaky"), "asst-1"]
        router, _ = make_router(backend)
        plan = await router.send("set bpm to 128", "gemini", "PROMPT", ModelSession())
        assert plan.actions[0]["action"] == "setBpm"

    @pytest.mark.anyio
    @pytest.mark.parametrize("error", [ModelAuthError("bad key", 401), ModelQuotaError("slow down", 429)])
    async def test_terminal_errors_propagate_immediately(self, error: Exception) -> None:
        backend = make_backend()
        backend.send_message.side_effect = error
        router, sleep = make_router(backend)
        with pytest.raises(type(error)):
            await router.send("play", "gemini", "PROMPT", ModelSession())
        assert backend.send_message.await_count == 1
        sleep.assert_not_awaited()


class TestUnconfigured:

    @pytest.mark.anyio
    async def test_no_backend_uses_fallback(self, fallback_router: ModelRouter) -> None:
        plan = await fallback_router.send("stop the music")
        assert plan.actions == [{"action": "stop", "parameters": {}}]
        assert plan.confidence == 1.0

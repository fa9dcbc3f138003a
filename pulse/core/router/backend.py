"""
Upstream assistant backend.

The router depends only on the ``ModelBackend`` protocol.  The shipped
implementation talks to an assistant/thread REST API:

    POST /assistants                     -> {"assistant_id": ...}
    POST /assistants/{id}/threads        -> {"thread_id": ...}
    POST /threads/{id}/messages          -> {"content": ..., "status": ...}

Every failure is raised as a ``ModelBackendError`` subclass so the router
can tell terminal errors (auth, quota) from retryable ones.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import httpx

from pulse.config import Settings, settings

logger = logging.getLogger(__name__)


class ModelBackendError(Exception):
    """Base for upstream model failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ModelAuthError(ModelBackendError):
    """401/403: the API key is missing or rejected.  Never retried."""


class ModelQuotaError(ModelBackendError):
    """429: upstream rate limit or quota.  Never retried."""


class ModelTransportError(ModelBackendError):
    """Network failure, timeout, 5xx or a failed response.  Retried."""


class ModelBackend(Protocol):
    async def create_assistant(self, name: str, system_prompt: str) -> str:
        ...

    async def create_thread(self, assistant_id: str) -> str:
        ...

    async def send_message(self, thread_id: str, content: str, provider: str, model: str) -> str:
        ...


def classify_status(status_code: int, detail: str) -> ModelBackendError:
    if status_code in (401, 403):
        return ModelAuthError(f"Upstream rejected API key ({status_code})", status_code)
    if status_code == 429:
        return ModelQuotaError("Upstream rate limit exceeded", status_code)
    return ModelTransportError(f"Upstream error {status_code}: {detail[:200]}", status_code)


class HttpAssistantBackend:
    """
    httpx client for the assistant/thread API.

    The ``AsyncClient`` is created lazily on first use; call ``close()``
    on shutdown.
    """

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key
        self.base_url = (base_url or settings.model_base_url).rstrip("/")
        self.timeout = timeout or settings.model_timeout
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"X-API-Key": self.api_key},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self.client.post(path, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise classify_status(e.response.status_code, e.response.text) from e
        except httpx.TimeoutException as e:
            raise ModelTransportError(f"Upstream timeout: {e}") from e
        except httpx.HTTPError as e:
            raise ModelTransportError(f"Upstream connection error: {e}") from e
        except ValueError as e:
            raise ModelTransportError(f"Upstream returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ModelTransportError("Upstream returned a non-object body")
        return data

    async def create_assistant(self, name: str, system_prompt: str) -> str:
        data = await self._post("/assistants", {"name": name, "system_prompt": system_prompt})
        assistant_id = data.get("assistant_id")
        if not assistant_id:
            raise ModelTransportError("Upstream did not return an assistant id")
        logger.info(f"🤖 Created assistant {str(assistant_id)[:8]}")
        return str(assistant_id)

    async def create_thread(self, assistant_id: str) -> str:
        data = await self._post(f"/assistants/{assistant_id}/threads", {})
        thread_id = data.get("thread_id")
        if not thread_id:
            raise ModelTransportError("Upstream did not return a thread id")
        logger.info(f"🧵 Created thread {str(thread_id)[:8]}")
        return str(thread_id)

    async def send_message(self, thread_id: str, content: str, provider: str, model: str) -> str:
        data = await self._post(
            f"/threads/{thread_id}/messages",
            {
                "content": content,
                "llm_provider": provider,
                "model_name": model,
                "stream": False,
            },
        )
        text = data.get("content") or ""
        if data.get("status") == "FAILED":
            raise ModelTransportError(f"Upstream response failed: {text}")
        return str(text)


def create_model_backend(config: Optional[Settings] = None) -> Optional[HttpAssistantBackend]:
    """Backend for the configured API key, or ``None`` when no key is set."""
    config = config or settings
    if not config.model_api_key:
        logger.warning("⚠️ PULSE_MODEL_API_KEY not set; chat requests use the fallback responder")
        return None
    return HttpAssistantBackend(
        api_key=config.model_api_key,
        base_url=config.model_base_url,
        timeout=config.model_timeout,
    )

"""
Model Router package for Pulse Copilot.

Public API:
    ModelRouter(backend).send(utterance, tier, context_prompt, session) -> BatchPlan
    create_model_backend(settings) -> HttpAssistantBackend | None
    fallback_plan(utterance) -> (BatchPlan, rule)
    decode_plan_text(content, utterance) -> BatchPlan
"""

from pulse.core.router.session import ModelSession, SessionRegistry, hash_context, session_registry
from pulse.core.router.backend import (
    HttpAssistantBackend,
    ModelAuthError,
    ModelBackend,
    ModelBackendError,
    ModelQuotaError,
    ModelTransportError,
    classify_status,
    create_model_backend,
)
from pulse.core.router.decode import PARSE_FAILURE_REASON, decode_plan_text, strip_code_fences, unknown_plan
from pulse.core.router.fallback import CLARIFICATION_OPTIONS, GENRE_KEYWORDS, fallback_plan, match_genre
from pulse.core.router.router import ModelRouter, close_model_router, get_model_router

__all__ = [
    # Session
    "ModelSession",
    "SessionRegistry",
    "hash_context",
    "session_registry",
    # Backend
    "HttpAssistantBackend",
    "ModelAuthError",
    "ModelBackend",
    "ModelBackendError",
    "ModelQuotaError",
    "ModelTransportError",
    "classify_status",
    "create_model_backend",
    # Decode
    "PARSE_FAILURE_REASON",
    "decode_plan_text",
    "strip_code_fences",
    "unknown_plan",
    # Fallback
    "CLARIFICATION_OPTIONS",
    "GENRE_KEYWORDS",
    "fallback_plan",
    "match_genre",
    # Router
    "ModelRouter",
    "close_model_router",
    "get_model_router",
]

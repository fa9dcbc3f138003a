"""
Chat endpoints: natural language → plan, optionally executed server-side.

``POST /chat`` returns the plan for the client to execute.
``POST /chat/execute`` also runs it against the session's ``ProjectStore``.
``POST /chat/undo`` reverts the most recent executed batch.
"""
from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from pulse.config import settings
from pulse.core.executor import execute_batch
from pulse.core.plan import BatchPlan
from pulse.core.project_store import get_or_create_store
from pulse.core.prompts import build_system_prompt
from pulse.core.router import (
    ModelAuthError,
    ModelQuotaError,
    ModelRouter,
    get_model_router,
    session_registry,
)
from pulse.core.samples import SampleLibrary
from pulse.core.samples.loader import get_sample_library
from pulse.core.tracing import create_trace_context
from pulse.models import ChatData, ChatRequest, ChatResponse, UndoRequest, UndoResponse

router = APIRouter()
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

AUTH_ERROR_DETAIL = "AI service configuration error. Please contact support."
QUOTA_ERROR_DETAIL = "AI service is currently busy. Please try again in a moment."
GENERIC_ERROR_DETAIL = "AI service error. Please try again."


async def _plan_for(
    body: ChatRequest,
    session_id: str,
    model_router: ModelRouter,
    library: SampleLibrary,
) -> BatchPlan:
    """Ask the router for a plan, mapping terminal upstream errors to HTTP errors."""
    store = get_or_create_store(session_id)
    prompt = body.system_prompt or build_system_prompt(
        store.project if store.has_project else None, library
    )
    try:
        plan = await model_router.send(
            body.text,
            model_tier=body.model,
            context_prompt=prompt,
            session=session_registry.get(session_id),
        )
    except ModelAuthError as e:
        logger.error(f"❌ Upstream model rejected credentials: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=AUTH_ERROR_DETAIL)
    except ModelQuotaError as e:
        logger.warning(f"⚠️ Upstream model quota exceeded: {e}")
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=QUOTA_ERROR_DETAIL)
    except Exception as e:
        logger.exception(f"❌ Model routing failed: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=GENERIC_ERROR_DETAIL)

    if body.sample_choices:
        plan.sample_choices = {**body.sample_choices, **plan.sample_choices}
    return plan


@router.post("/chat", response_model=ChatResponse, response_model_exclude_none=True)
@limiter.limit(settings.chat_rate_limit)
async def chat(
    request: Request,
    body: ChatRequest,
    model_router: ModelRouter = Depends(get_model_router),
    library: SampleLibrary = Depends(get_sample_library),
) -> ChatResponse:
    """Turn an utterance into a plan for client-side execution."""
    session_id = body.session_id or str(uuid.uuid4())
    create_trace_context(session_id)
    logger.info(f"💬 Chat request: session={session_id[:8]} model={body.model} ({len(body.text)} chars)")

    plan = await _plan_for(body, session_id, model_router, library)
    return ChatResponse(
        success=True,
        data=ChatData(
            message=plan.reasoning or f"Planned {len(plan.actions)} action(s)",
            plan=plan.to_wire(),
            session_id=session_id,
        ),
    )


@router.post("/chat/execute", response_model=ChatResponse, response_model_exclude_none=True)
@limiter.limit(settings.chat_rate_limit)
async def chat_execute(
    request: Request,
    body: ChatRequest,
    model_router: ModelRouter = Depends(get_model_router),
    library: SampleLibrary = Depends(get_sample_library),
) -> ChatResponse:
    """Turn an utterance into a plan and execute it against the session's project."""
    session_id = body.session_id or str(uuid.uuid4())
    trace = create_trace_context(session_id)
    logger.info(f"⚡ Execute request: session={session_id[:8]} model={body.model}")

    plan = await _plan_for(body, session_id, model_router, library)
    batch = execute_batch(plan, get_or_create_store(session_id), library, trace=trace)
    return ChatResponse(
        success=batch.success,
        data=ChatData(
            message=batch.message,
            plan=plan.to_wire(),
            batch_result=batch.to_dict(),
            session_id=session_id,
        ),
        error=None if batch.success else batch.message,
    )


@router.post("/chat/undo", response_model=UndoResponse, response_model_exclude_none=True)
async def chat_undo(body: UndoRequest) -> UndoResponse:
    """Revert the most recent batch executed in a session."""
    store = get_or_create_store(body.session_id)
    group_id = store.undo_last_group()
    if group_id is None:
        return UndoResponse(success=False, message="Nothing to undo")
    return UndoResponse(success=True, undone_group_id=group_id, message=f"Undid batch {group_id}")

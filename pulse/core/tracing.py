"""
Request tracing for the utterance → plan → batch pipeline.

One ``TraceContext`` per chat request, held in a ``ContextVar`` so the
router and the executors can reach it without threading it through every
call.  Spans nest; each finished span is logged with its attributes as
``extra`` fields.  The ``log_*`` helpers emit the pipeline's structured
events (``command``, ``batch_execution``, ``model_call``, ``model_retry``,
``model_fallback``, ``validation_error``).

Usage:
    trace = create_trace_context(session_id)
    with trace_span(trace, "batch_execution", {"action_count": 12}) as span:
        result = execute_batch(plan, store, library, trace=trace)
        span.set_attribute("fail_count", result.fail_count)
"""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generator, Optional

logger = logging.getLogger(__name__)


class SpanStatus(str, Enum):
    OK = "ok"
    ERROR = "error"


@dataclass
class Span:
    """One timed step of a request (a model call, a batch run)."""
    name: str
    trace_id: str
    span_id: str
    parent_span_id: Optional[str]
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None
    status: SpanStatus = SpanStatus.OK
    attributes: dict[str, Any] = field(default_factory=dict)

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    def set_error(self, error: Exception) -> None:
        self.status = SpanStatus.ERROR
        self.attributes["error.type"] = type(error).__name__
        self.attributes["error.message"] = str(error)

    @property
    def duration_ms(self) -> Optional[float]:
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time) * 1000

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "trace_id": self.trace_id,
            "span_id": self.span_id,
            "parent_span_id": self.parent_span_id,
            "duration_ms": self.duration_ms,
            "status": self.status.value,
            "attributes": dict(self.attributes),
        }


@dataclass
class TraceContext:
    """Trace id, owning chat session, and every span opened so far."""
    trace_id: str
    session_id: Optional[str] = None
    spans: list[Span] = field(default_factory=list)
    _open: list[Span] = field(default_factory=list)

    @property
    def current_span(self) -> Optional[Span]:
        return self._open[-1] if self._open else None

    def open_span(self, name: str, attributes: Optional[dict[str, Any]] = None) -> Span:
        parent = self.current_span
        span = Span(
            name=name,
            trace_id=self.trace_id,
            span_id=uuid.uuid4().hex[:8],
            parent_span_id=parent.span_id if parent else None,
            attributes=dict(attributes or {}),
        )
        self._open.append(span)
        self.spans.append(span)
        return span

    def close_span(self, span: Span) -> None:
        span.end_time = time.time()
        if span in self._open:
            self._open.remove(span)

    def to_dict(self) -> dict[str, Any]:
        return {
            "trace_id": self.trace_id,
            "session_id": self.session_id,
            "spans": [s.to_dict() for s in self.spans],
        }


_current_trace: ContextVar[Optional[TraceContext]] = ContextVar("pulse_trace", default=None)


def create_trace_context(session_id: Optional[str] = None) -> TraceContext:
    """Start a new trace and make it the current one."""
    ctx = TraceContext(trace_id=str(uuid.uuid4()), session_id=session_id)
    _current_trace.set(ctx)
    return ctx


def get_trace_context() -> TraceContext:
    """The current trace; starts an anonymous one outside a request."""
    return _current_trace.get() or create_trace_context()


def get_trace_id() -> str:
    return get_trace_context().trace_id


def clear_trace_context() -> None:
    _current_trace.set(None)


@contextmanager
def trace_span(
    ctx: TraceContext,
    name: str,
    attributes: Optional[dict[str, Any]] = None,
) -> Generator[Span, None, None]:
    """Time the enclosed block as a child of the current span; exceptions mark it failed and propagate."""
    span = ctx.open_span(name, attributes)
    try:
        yield span
    except Exception as e:
        span.set_error(e)
        raise
    finally:
        ctx.close_span(span)
        log_span(span)


def log_span(span: Span) -> None:
    fields = {
        "trace_id": span.trace_id,
        "span_id": span.span_id,
        "span_name": span.name,
        "duration_ms": span.duration_ms,
        "status": span.status.value,
        **span.attributes,
    }
    if span.status == SpanStatus.ERROR:
        logger.error(f"[{span.trace_id[:8]}] ✗ {span.name}", extra=fields)
    else:
        logger.info(f"[{span.trace_id[:8]}] ✓ {span.name} ({span.duration_ms:.0f}ms)", extra=fields)


# =============================================================================
# Pipeline events
# =============================================================================

def _emit(level: int, trace_id: str, event: str, text: str, **fields: Any) -> None:
    logger.log(level, f"[{trace_id[:8]}] {text}", extra={"trace_id": trace_id, "event": event, **fields})


def log_command(trace_id: str, action: str, success: bool, message: str) -> None:
    """One executed command; failures log at WARNING."""
    _emit(
        logging.INFO if success else logging.WARNING,
        trace_id,
        "command",
        f"{'✓' if success else '✗'} Command: {action}",
        action=action,
        success=success,
        result_message=message,
    )


def log_batch_execution(
    trace_id: str,
    undo_group_id: str,
    total_actions: int,
    success_count: int,
    fail_count: int,
    duration_ms: float,
) -> None:
    _emit(
        logging.INFO,
        trace_id,
        "batch_execution",
        f"{'✅' if fail_count == 0 else '⚠️'} Batch: {success_count}/{total_actions} actions ({duration_ms:.0f}ms)",
        undo_group_id=undo_group_id,
        total_actions=total_actions,
        success_count=success_count,
        fail_count=fail_count,
        duration_ms=duration_ms,
        success=fail_count == 0,
    )


def log_model_call(trace_id: str, model: str, attempt: int, duration_ms: float, action_count: int) -> None:
    _emit(
        logging.INFO,
        trace_id,
        "model_call",
        f"🤖 Model: {model} → {action_count} actions (attempt {attempt}, {duration_ms:.0f}ms)",
        model=model,
        attempt=attempt,
        duration_ms=duration_ms,
        action_count=action_count,
    )


def log_model_retry(trace_id: str, attempt: int, max_retries: int, delay_s: float, error: str) -> None:
    """A retryable upstream failure and the backoff about to be applied."""
    _emit(
        logging.WARNING,
        trace_id,
        "model_retry",
        f"🔁 Retry {attempt}/{max_retries} after {delay_s:.1f}s: {error}",
        attempt=attempt,
        max_retries=max_retries,
        delay_s=delay_s,
        error=error,
    )


def log_model_fallback(
    trace_id: str,
    reason: str,
    attempts: int,
    rule: str,
    last_error: Optional[str] = None,
) -> None:
    """Degradation to the local fallback responder.  Never skipped."""
    _emit(
        logging.WARNING,
        trace_id,
        "model_fallback",
        f"🛟 Fallback responder used ({reason}, rule={rule})",
        reason=reason,
        attempts=attempts,
        rule=rule,
        last_error=last_error,
    )


def log_validation_error(trace_id: str, action: str, error: str) -> None:
    _emit(
        logging.WARNING,
        trace_id,
        "validation_error",
        f"🚫 Validation: {action}",
        action=action,
        error=error,
    )

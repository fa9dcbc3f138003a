"""Batch Executor: run a whole ``BatchPlan`` against a ``ProjectStore``.

``execute_batch`` never raises.  Every step is isolated: a parse failure,
a validation failure, a missing entity or an unexpected exception turns
into that step's failed ``ExecutionResult`` and the next step still runs.
"""

from __future__ import annotations

import logging
import random
import string
import time
from collections.abc import Mapping
from typing import Optional

from pulse.core.commands.parser import parse_command
from pulse.core.executor.handlers import execute_command
from pulse.core.executor.models import BatchContext, BatchResult, ExecutionResult
from pulse.core.executor.preprocess import (
    copy_entries,
    ensure_tracks_exist,
    resolve_clip_conflicts,
    resolve_samples_consistently,
)
from pulse.core.plan import BatchPlan
from pulse.core.project_store import ProjectStore
from pulse.core.samples.models import SampleLibrary
from pulse.core.tracing import (
    TraceContext,
    get_trace_context,
    log_batch_execution,
    trace_span,
)

logger = logging.getLogger(__name__)

MAX_REPORTED_ERRORS = 3

_BASE36 = string.digits + string.ascii_lowercase


def new_undo_group_id() -> str:
    """``batch_<ms timestamp>_<9 base36 chars>``."""
    suffix = "".join(random.choices(_BASE36, k=9))
    return f"batch_{int(time.time() * 1000)}_{suffix}"


def summarize(results: list[ExecutionResult], reasoning: Optional[str] = None) -> str:
    total = len(results)
    failures = [r for r in results if not r.success]
    if not failures:
        message = f"Executed {total} actions"
        return f"{message}: {reasoning}" if reasoning else message
    if len(failures) == total:
        return f"Failed to execute all {total} actions"

    errors = "; ".join(r.message for r in failures[:MAX_REPORTED_ERRORS])
    hidden = len(failures) - MAX_REPORTED_ERRORS
    if hidden > 0:
        errors = f"{errors} (+{hidden} more)"
    return (
        f"Executed {total - len(failures)}/{total} actions. "
        f"{len(failures)} failed. Errors: {errors}"
    )


def _action_name(raw: object) -> str:
    if isinstance(raw, Mapping) and isinstance(raw.get("action"), str):
        return raw["action"]
    return "unknown"


def _run_step(raw: object, ctx: BatchContext) -> ExecutionResult:
    """Parse and execute one raw entry; the step boundary for unexpected errors."""
    try:
        command = parse_command(raw)
        return execute_command(command, ctx)
    except Exception as e:
        action = _action_name(raw)
        logger.exception(f"❌ Unexpected error executing {action}: {e}")
        return ExecutionResult(
            success=False,
            message=f"Error executing {action}: {e}",
            error=str(e),
            action=action,
        )


def execute_single_action(
    raw: object,
    store: ProjectStore,
    library: SampleLibrary,
    trace: Optional[TraceContext] = None,
) -> ExecutionResult:
    """Execute one raw entry outside a batch (no preprocessing, no undo group)."""
    ctx = BatchContext(store=store, library=library, trace=trace or get_trace_context())
    result = _run_step(raw, ctx)
    ctx.add_result(result)
    return result


def execute_batch(
    plan: BatchPlan,
    store: ProjectStore,
    library: SampleLibrary,
    rng: Optional[random.Random] = None,
    trace: Optional[TraceContext] = None,
) -> BatchResult:
    """
    Execute every entry of *plan* in order.

    Stages:
    1. Bind sample keys to concrete ids (seeded from ``plan.sample_choices``)
    2. Provision playlist tracks up to the highest referenced index
    3. Shift exact-tick placement collisions
    4. Parse and execute each entry; ``"current"`` refs see earlier steps

    The whole batch runs inside one undo group keyed by the returned
    ``undo_group_id``.
    """
    trace = trace or get_trace_context()
    undo_group_id = new_undo_group_id()
    choices: dict[str, str] = dict(plan.sample_choices)
    ctx = BatchContext(store=store, library=library, trace=trace)
    started = time.time()

    with trace_span(trace, "batch_execution", {"action_count": len(plan.actions), "undo_group_id": undo_group_id}):
        grouped = store.has_project
        if grouped:
            store.begin_undo_group(undo_group_id, plan.reasoning or "")
        try:
            entries = copy_entries(plan.actions)
            try:
                entries = resolve_samples_consistently(entries, library, choices, rng=rng)
                ensure_tracks_exist(entries, store)
                entries = resolve_clip_conflicts(entries)
            except Exception as e:
                logger.exception(f"❌ Batch preprocessing failed, executing entries as given: {e}")

            for raw in entries:
                ctx.add_result(_run_step(raw, ctx))
        finally:
            if grouped:
                store.end_undo_group()

    duration_ms = (time.time() - started) * 1000
    log_batch_execution(
        trace.trace_id,
        undo_group_id,
        total_actions=len(ctx.results),
        success_count=ctx.success_count,
        fail_count=ctx.fail_count,
        duration_ms=duration_ms,
    )

    return BatchResult(
        success=ctx.fail_count == 0,
        message=summarize(ctx.results, plan.reasoning),
        total_actions=len(ctx.results),
        success_count=ctx.success_count,
        fail_count=ctx.fail_count,
        results=ctx.results,
        undo_group_id=undo_group_id,
        sample_choices=choices,
    )

"""Dataclass models for executor contexts and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from pulse.core.project_store import ProjectStore
from pulse.core.samples.models import SampleLibrary
from pulse.core.tracing import TraceContext, log_command


@dataclass
class ExecutionResult:
    """Result of one command executor.

    Attributes:
        success: ``True`` when every validator passed and the mutation landed.
        message: Human-readable summary, shown to the user as-is.
        data: Ids of created entities and similar small payloads.
        error: Failure detail; for ``unknown`` commands the original text.
        action: The command's action name, for logging and aggregation.
    """

    success: bool
    message: str
    data: Optional[dict[str, Any]] = None
    error: Optional[str] = None
    action: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        if self.error is not None:
            out["error"] = self.error
        if self.action:
            out["action"] = self.action
        return out


@dataclass
class BatchResult:
    """Aggregate outcome of one batch.  ``success`` iff nothing failed."""

    success: bool
    message: str
    total_actions: int
    success_count: int
    fail_count: int
    results: list[ExecutionResult]
    undo_group_id: str
    sample_choices: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "totalActions": self.total_actions,
            "successCount": self.success_count,
            "failCount": self.fail_count,
            "results": [r.to_dict() for r in self.results],
            "undoGroupId": self.undo_group_id,
            "sampleChoices": dict(self.sample_choices),
        }


@dataclass
class BatchContext:
    """Mutable accumulator for one batch run.

    Holds the store every executor mutates, the sample library, the trace,
    and the ids of entities created so far in this batch (the first place
    a ``LastCreatedRef`` looks).
    """

    store: ProjectStore
    library: SampleLibrary
    trace: TraceContext
    created_pattern_id: Optional[str] = None
    created_channel_id: Optional[str] = None
    results: list[ExecutionResult] = field(default_factory=list)

    def add_result(self, result: ExecutionResult) -> None:
        """Append a result and emit a structured ``command`` log entry."""
        self.results.append(result)
        log_command(self.trace.trace_id, result.action or "unknown", result.success, result.message)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def fail_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

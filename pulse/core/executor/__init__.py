"""Executor package for Pulse Copilot.

Batch pipeline (``execute_batch``):

1. **Preprocess** raw entries: consistent sample choices, track
   provisioning, exact-tick conflict shifting.
2. **Execute** each entry in order: parse → validate → mutate the
   ``ProjectStore``, one isolated step at a time.
3. **Aggregate** step results into a ``BatchResult`` with a summary message.
"""

from pulse.core.executor.models import BatchContext, BatchResult, ExecutionResult
from pulse.core.executor.handlers import execute_command, resolve_channel_ref, resolve_pattern_ref
from pulse.core.executor.preprocess import (
    PLACEMENT_ACTIONS,
    SAMPLE_ACTIONS,
    ensure_tracks_exist,
    max_track_index,
    resolve_clip_conflicts,
    resolve_samples_consistently,
)
from pulse.core.executor.batch import (
    MAX_REPORTED_ERRORS,
    execute_batch,
    execute_single_action,
    new_undo_group_id,
    summarize,
)

__all__ = [
    # Models
    "BatchContext",
    "BatchResult",
    "ExecutionResult",
    # Handlers
    "execute_command",
    "resolve_channel_ref",
    "resolve_pattern_ref",
    # Preprocessing
    "PLACEMENT_ACTIONS",
    "SAMPLE_ACTIONS",
    "ensure_tracks_exist",
    "max_track_index",
    "resolve_clip_conflicts",
    "resolve_samples_consistently",
    # Batch
    "MAX_REPORTED_ERRORS",
    "execute_batch",
    "execute_single_action",
    "new_undo_group_id",
    "summarize",
]

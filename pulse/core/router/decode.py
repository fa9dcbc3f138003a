"""Model response text to ``BatchPlan``.

Accepted shapes, after stripping markdown code fences:

    {"actions": [...], "confidence"?, "reasoning"?, "sampleChoices"?}
    {"action": "...", "parameters": {...}, "confidence"?, "reasoning"?}   (legacy)

Anything else becomes a one-entry plan holding an ``unknown`` action that
carries the raw text.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from pulse.contracts.json_types import jnumber
from pulse.core.plan import BatchPlan

logger = logging.getLogger(__name__)

PARSE_FAILURE_REASON = "Failed to parse AI response"

_FENCE_RE = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def unknown_plan(utterance: str, raw_response: str, reason: str = PARSE_FAILURE_REASON) -> BatchPlan:
    return BatchPlan.single(
        "unknown",
        {"originalText": utterance, "reason": reason, "rawResponse": raw_response},
    )


def _confidence(value: Any) -> Optional[float]:
    number = jnumber(value)
    if number is None:
        return None
    return min(max(float(number), 0.0), 1.0)


def _entry(value: Any) -> dict[str, Any]:
    """Keep object entries as they are; anything else becomes an ``unknown`` entry."""
    if isinstance(value, dict):
        return value
    return {
        "action": "unknown",
        "parameters": {"originalText": json.dumps(value, default=str), "reason": "Invalid command structure"},
    }


def _sample_choices(value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): v for k, v in value.items() if isinstance(v, str) and v}


def decode_plan_text(content: str, utterance: str) -> BatchPlan:
    """Decode the model's reply; never raises."""
    text = strip_code_fences(content or "")
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        logger.warning(f"⚠️ Could not parse model response as JSON ({len(text)} chars)")
        return unknown_plan(utterance, text)
    if not isinstance(parsed, dict):
        logger.warning("⚠️ Model response JSON is not an object")
        return unknown_plan(utterance, text)

    reasoning = parsed.get("reasoning")
    meta = {
        "confidence": _confidence(parsed.get("confidence")),
        "reasoning": reasoning if isinstance(reasoning, str) else None,
    }

    actions = parsed.get("actions")
    if isinstance(actions, list):
        return BatchPlan(
            actions=[_entry(a) for a in actions],
            sample_choices=_sample_choices(parsed.get("sampleChoices")),
            **meta,
        )

    params = parsed.get("parameters")
    return BatchPlan.single(
        str(parsed.get("action") or "unknown"),
        params if isinstance(params, dict) else {},
        **meta,
    )

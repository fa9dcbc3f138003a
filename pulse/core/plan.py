"""BatchPlan: the router's output and the executor's input."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import Field

from pulse.models.base import CamelModel


class BatchPlan(CamelModel):
    """
    Ordered raw ``{action, parameters}`` entries plus plan metadata.

    ``sample_choices`` maps a ``category[/subcategory]`` key to a concrete
    sample id.  A caller passes a previous batch's choices back in to get
    the same sounds on a retry.
    """

    actions: list[dict[str, Any]] = Field(default_factory=list)
    confidence: Optional[float] = None
    reasoning: Optional[str] = None
    sample_choices: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def single(cls, action: str, parameters: Optional[dict] = None, **meta) -> "BatchPlan":
        return cls(actions=[{"action": action, "parameters": parameters or {}}], **meta)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)

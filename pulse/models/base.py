"""camelCase base model for commands, plans and chat bodies."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict


def to_camel(name: str) -> str:
    """``start_tick`` → ``startTick``; single words are unchanged."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


class CamelModel(BaseModel):
    """
    Model whose fields are snake_case in Python and camelCase in JSON.

    Commands decode straight from model output (``{"patternId": ..., "startTick": ...}``)
    and accept the snake_case name too.  Responses go out with
    ``model_dump(by_alias=True)`` so the client sees the same keys it sends.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

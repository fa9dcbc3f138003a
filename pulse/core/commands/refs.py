"""Entity references carried by commands.

A command that targets a pattern or channel names it either explicitly by
id or with the ``"current"`` keyword, meaning "the one most recently
created".  The keyword is decoded once, here, into ``LastCreatedRef`` so
executors never compare strings.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict

LAST_CREATED_KEYWORD = "current"


class ExplicitRef(BaseModel):
    """Reference to an entity by its id."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["explicit"] = "explicit"
    id: str

    def __str__(self) -> str:
        return self.id


class LastCreatedRef(BaseModel):
    """Reference to the entity created most recently (this batch first, then the project)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["last_created"] = "last_created"

    def __str__(self) -> str:
        return LAST_CREATED_KEYWORD


def _coerce_ref(value: object) -> object:
    if isinstance(value, (ExplicitRef, LastCreatedRef)):
        return value
    if isinstance(value, bool):
        raise ValueError("reference must be an id string")
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        raise ValueError("reference must be an id string")
    text = value.strip()
    if not text:
        raise ValueError("reference cannot be empty")
    if text.lower() == LAST_CREATED_KEYWORD:
        return LastCreatedRef()
    return ExplicitRef(id=text)


EntityRef = Annotated[Union[ExplicitRef, LastCreatedRef], BeforeValidator(_coerce_ref)]


def explicit(entity_id: str) -> ExplicitRef:
    return ExplicitRef(id=entity_id)

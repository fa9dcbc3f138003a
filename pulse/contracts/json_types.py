"""Canonical type definitions for JSON data crossing the model boundary.

Use ``JSONValue`` / ``JSONObject`` only where the shape is genuinely unknown
(raw model output before decoding, arbitrary ``parameters`` bags).  Every
decoded structure has a named model in ``pulse.core``.

## Entity catalog

JSON primitives:
  JSONValue      recursive JSON value
  JSONObject     dict[str, JSONValue]

Model wire shapes:
  RawActionDict  one ``{action, parameters}`` entry
"""

from __future__ import annotations

from typing_extensions import TypedDict

JSONValue = str | int | float | bool | None | list["JSONValue"] | dict[str, "JSONValue"]

JSONObject = dict[str, JSONValue]


class RawActionDict(TypedDict):
    """One untyped action entry as emitted by the upstream model."""

    action: str
    parameters: JSONObject


def jnumber(v: JSONValue) -> int | float | None:
    """Coerce a numeric or numeric-string ``JSONValue``; ``None`` when not a number.

    Model output routinely quotes numbers (``"trackIndex": "2"``), so
    strings are parsed the way a lenient JSON consumer would::

        jnumber("2")    # 2
        jnumber("1.5")  # 1.5
        jnumber("two")  # None
    """
    if isinstance(v, bool) or v is None:
        return None
    if isinstance(v, (int, float)):
        return v
    if isinstance(v, str):
        text = v.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            value = float(text)
        except ValueError:
            return None
        return value if value == value and value not in (float("inf"), float("-inf")) else None
    return None

"""Wire-level type contracts shared across the copilot."""

from pulse.contracts.json_types import JSONObject, JSONValue, RawActionDict, jnumber

__all__ = [
    "JSONObject",
    "JSONValue",
    "RawActionDict",
    "jnumber",
]

"""Dataclass model for validator results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a single validator: ``valid`` plus a human-readable error."""

    valid: bool
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid

    @property
    def error_message(self) -> str:
        return self.error or ""


OK = ValidationResult(valid=True)


def fail(error: str) -> ValidationResult:
    return ValidationResult(valid=False, error=error)

"""Package layout tests: every ``pulse`` module parses and imports."""
from __future__ import annotations

import ast
import importlib
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
PACKAGE = ROOT / "pulse"

_MODULE_FILES = sorted(PACKAGE.rglob("*.py"))


def _module_name(path: Path) -> str:
    parts = path.relative_to(ROOT).with_suffix("").parts
    if parts[-1] == "__init__":
        parts = parts[:-1]
    return ".".join(parts)


@pytest.mark.parametrize("path", _MODULE_FILES, ids=lambda p: str(p.relative_to(ROOT)))
def test_module_parses(path: Path) -> None:
    ast.parse(path.read_text(encoding="utf-8"), filename=str(path))


@pytest.mark.parametrize("path", _MODULE_FILES, ids=lambda p: str(p.relative_to(ROOT)))
def test_module_imports(path: Path) -> None:
    importlib.import_module(_module_name(path))


def test_core_package_documents_pipeline() -> None:
    import pulse.core

    assert pulse.core.__doc__ is not None
    assert "EXECUTOR" in pulse.core.__doc__

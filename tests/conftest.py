"""Pytest configuration and fixtures."""
import logging
import random

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from pulse.api.routes import chat as chat_routes
from pulse.core.project_store import ProjectStore, clear_all_stores
from pulse.core.router import ModelRouter, get_model_router, session_registry
from pulse.core.samples import SampleLibrary
from pulse.core.samples.loader import get_sample_library
from pulse.core.tracing import clear_trace_context, create_trace_context
from pulse.data.sample_manifest import SEED_MANIFEST
from pulse.main import app


def pytest_configure(config):
    """Ensure asyncio_mode is auto so async fixtures work when pyproject is not in cwd."""
    if hasattr(config.option, "asyncio_mode") and config.option.asyncio_mode is None:
        config.option.asyncio_mode = "auto"
    logging.getLogger("httpcore").setLevel(logging.CRITICAL)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reset stores, model sessions and trace context between tests."""
    clear_all_stores()
    session_registry.clear()
    clear_trace_context()
    yield
    clear_all_stores()
    session_registry.clear()
    clear_trace_context()
    app.dependency_overrides.clear()


@pytest.fixture
def library() -> SampleLibrary:
    """The bundled seed catalogue (16 samples)."""
    return SampleLibrary.from_manifest(SEED_MANIFEST)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def store() -> ProjectStore:
    """A store holding an empty project."""
    return ProjectStore(session_id="test-session")


@pytest.fixture
def trace():
    return create_trace_context("test-session")


@pytest.fixture
def fallback_router() -> ModelRouter:
    """Router with no backend: every request answers from the fallback responder."""
    return ModelRouter(backend=None)


@pytest_asyncio.fixture
async def client(fallback_router: ModelRouter, library: SampleLibrary):
    """Async test client with the router and library swapped for test doubles."""
    chat_routes.limiter.reset()
    app.dependency_overrides[get_model_router] = lambda: fallback_router
    app.dependency_overrides[get_sample_library] = lambda: library
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

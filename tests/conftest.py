# tests/conftest.py
import os
import asyncio
import logging
from typing import AsyncIterator, List, Optional, Sequence

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Ensure test-friendly env (keys present, library in memory)
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ["LIBRARY_PATH"] = ""

# IMPORTANT: import the app after envs are set
from flash_ui import main as main_module  # noqa: E402
from flash_ui.api.routers import generate as generate_router  # noqa: E402
from flash_ui.providers.base import GenerationRequest, Provider  # noqa: E402
from flash_ui.providers.factory import resolve_model  # noqa: E402


class Fault(Exception):
    """Stands in for an SDK exception: a message plus an HTTP-ish status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StubProvider(Provider):
    """Deterministic provider: replays `increments`, then raises `fail` if given."""

    name = "gemini"

    def __init__(
        self,
        increments: Sequence[str] = (),
        *,
        text: str = "",
        fail: Optional[Exception] = None,
    ) -> None:
        super().__init__(api_key="stub")
        self.increments = list(increments)
        self.text = text
        self.fail = fail
        self.requests: List[GenerationRequest] = []

    def _make_client(self):
        return None

    async def complete(self, request: GenerationRequest) -> str:
        self.requests.append(request)
        if self.fail is not None:
            raise self.fail
        return self.text

    async def stream(self, request: GenerationRequest) -> AsyncIterator[str]:
        self.requests.append(request)
        for inc in self.increments:
            await asyncio.sleep(0)
            yield inc
        if self.fail is not None:
            raise self.fail


@pytest.fixture
def use_provider(monkeypatch):
    # Swaps the router's provider lookup for a stub; model ids are still validated.
    def install(stub: StubProvider) -> StubProvider:
        monkeypatch.setattr(
            generate_router, "get_provider", lambda model_id: (resolve_model(model_id), stub)
        )
        return stub
    return install


@pytest_asyncio.fixture
async def app():
    # A fresh app per test so library state never leaks between tests
    return main_module.create_app()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def caplog_info(caplog):
    caplog.set_level(logging.INFO)
    return caplog

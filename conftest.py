from __future__ import annotations

# Pytest helpers: asyncio tests without extra plugins and a fake icon server.

import asyncio
import inspect
from typing import Callable, Optional

import httpx
import pytest

from iconfetch.config import get_settings


def _is_asyncio_test(pyfuncitem: pytest.Function) -> bool:
    return inspect.iscoroutinefunction(pyfuncitem.obj) and (
        pyfuncitem.get_closest_marker("asyncio") is not None
    )


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> Optional[bool]:
    """Run ``@pytest.mark.asyncio`` coroutines to completion with ``asyncio.run``."""

    if not _is_asyncio_test(pyfuncitem):
        return None

    argnames = pyfuncitem._fixtureinfo.argnames
    kwargs = {name: pyfuncitem.funcargs[name] for name in argnames}
    asyncio.run(pyfuncitem.obj(**kwargs))
    return True


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "asyncio: mark test to run in an asyncio event loop")


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Keep tests independent of the caller's environment and the settings cache."""

    for name in ("RESOLVER", "CONCURRENCY", "REQUEST_TIMEOUT", "FOLLOW_REDIRECTS", "ICON_BASE_URL"):
        monkeypatch.delenv(f"ICONFETCH_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeIconServer:
    """Mock transport serving an SVG per URL while counting concurrent requests.

    ``statuses`` overrides the status code for a URL and ``failures`` maps a URL
    to a callable building the exception raised for it.
    """

    def __init__(self, delay: float = 0.01):
        self.delay = delay
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.statuses: dict[str, int] = {}
        self.failures: dict[str, Callable[[httpx.Request], Exception]] = {}

    async def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if url in self.failures:
                raise self.failures[url](request)
            status = self.statuses.get(url, 200)
            return httpx.Response(status, content=f"<svg>{request.url.path}</svg>".encode())
        finally:
            self.in_flight -= 1

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def icon_server() -> FakeIconServer:
    return FakeIconServer()

# File: tests/conftest.py
import io
import logging
from collections import Counter
from typing import Callable, Iterable

import pytest
import pytest_asyncio
from aiohttp import web

from https_scout.config import CrawlerConfig
from https_scout.report.sink import LineWriter


class FakeProber:
    """Stand-in for HttpsProber: *upgradable* URLs answer True, everything else False."""

    def __init__(self, upgradable: Iterable[str] = ()) -> None:
        self.upgradable = set(upgradable)
        self.calls: list[str] = []

    async def probe_upgrade(self, http_url: str) -> bool:
        self.calls.append(http_url)
        return http_url in self.upgradable


class CapturedLog:
    """A private logger whose records end up in an in-memory buffer."""

    def __init__(self, name: str) -> None:
        self.buffer = io.StringIO()
        self.logger = logging.getLogger(name)
        self.logger.handlers.clear()
        self.logger.setLevel(logging.INFO)
        self.logger.propagate = False
        self.logger.addHandler(logging.StreamHandler(self.buffer))

    @property
    def lines(self) -> list[str]:
        return [line for line in self.buffer.getvalue().splitlines() if line]


class Results:
    def __init__(self) -> None:
        self.buffer = io.StringIO()
        self.writer = LineWriter(self.buffer)

    @property
    def lines(self) -> list[str]:
        return self.buffer.getvalue().splitlines()


@pytest.fixture()
def results() -> Results:
    return Results()


@pytest.fixture()
def error_log(request) -> CapturedLog:
    return CapturedLog(f"HttpsScout.tests.{request.node.name}")


@pytest.fixture()
def fake_prober() -> FakeProber:
    return FakeProber()


@pytest.fixture()
def make_config() -> Callable[..., CrawlerConfig]:
    """Factory for a fast CrawlerConfig: no delay, short timeout."""

    def _make(sites, **overrides) -> CrawlerConfig:
        params = dict(
            sites=list(sites) if not isinstance(sites, str) else [sites],
            depth=0,
            parallel=2,
            delay=0,
            timeout=2.0,
            user_agent="TestAgent/1.0",
        )
        params.update(overrides)
        return CrawlerConfig(**params)

    return _make


@pytest_asyncio.fixture
async def serve(unused_tcp_port_factory):
    """Start aiohttp apps on free ports; returns their base URL, cleans up afterwards."""
    runners: list[web.AppRunner] = []

    async def _serve(app: web.Application) -> str:
        port = unused_tcp_port_factory()
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, "localhost", port, backlog=1024)
        await site.start()
        runners.append(runner)
        return f"http://localhost:{port}"

    yield _serve
    for runner in runners:
        await runner.cleanup()


def html_site(pages: dict[str, str], hits: Counter, content_type: str = "text/html") -> web.Application:
    """App serving *pages* (path -> body) that counts requests per path in *hits*."""
    app = web.Application()

    def handler_for(path: str, body: str):
        async def handler(_):
            hits[path] += 1
            return web.Response(text=body, content_type=content_type)

        return handler

    for path, body in pages.items():
        app.router.add_get(path, handler_for(path, body))
    return app


@pytest.fixture()
def site_factory():
    return html_site

# File: tests/test_prober.py
import asyncio

import aiohttp
import pytest
from aiohttp import web

from https_scout.crawler.prober import HttpsProber
from https_scout.crawler.throttle import HostThrottle


class FakeResponse:
    def __init__(self, status: int) -> None:
        self.status = status

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """Minimal ClientSession double: answers from a table keyed by method."""

    def __init__(self, statuses=None, error=None, latency: float = 0.0) -> None:
        self.statuses = statuses or {}
        self.error = error
        self.latency = latency
        self.calls: list[tuple[str, str, dict]] = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return _Pending(self, method)


class _Pending:
    def __init__(self, session: FakeSession, method: str) -> None:
        self.session = session
        self.method = method

    async def __aenter__(self):
        if self.session.latency:
            await asyncio.sleep(self.session.latency)
        if self.session.error is not None:
            raise self.session.error
        return FakeResponse(self.session.statuses[self.method])

    async def __aexit__(self, *exc):
        return False


def make_prober(session, **kwargs) -> HttpsProber:
    return HttpsProber(session, HostThrottle(parallel=2, delay=0), **kwargs)


@pytest.mark.asyncio()
@pytest.mark.parametrize("status,expected", [(200, True), (204, True), (301, True), (404, False), (500, False)])
async def test_head_status_decides(status, expected):
    session = FakeSession({"HEAD": status})
    assert await make_prober(session).probe_upgrade("http://b.example/p") is expected
    method, url, kwargs = session.calls[0]
    assert method == "HEAD"
    assert url == "https://b.example/p"
    assert kwargs["allow_redirects"] is False


@pytest.mark.asyncio()
async def test_default_http_port_is_not_carried_over():
    session = FakeSession({"HEAD": 200})
    assert await make_prober(session).probe_upgrade("http://b.example:80/p") is True
    assert session.calls[0][1] == "https://b.example/p"


@pytest.mark.asyncio()
@pytest.mark.parametrize("rejected", [405, 501])
async def test_rejected_head_falls_back_to_get(rejected):
    session = FakeSession({"HEAD": rejected, "GET": 200})
    assert await make_prober(session).probe_upgrade("http://b.example/") is True
    assert [call[0] for call in session.calls] == ["HEAD", "GET"]


@pytest.mark.asyncio()
async def test_failed_get_after_rejected_head():
    session = FakeSession({"HEAD": 405, "GET": 403})
    assert await make_prober(session).probe_upgrade("http://b.example/") is False


@pytest.mark.asyncio()
@pytest.mark.parametrize(
    "error",
    [
        aiohttp.ClientConnectionError("refused"),
        aiohttp.ServerDisconnectedError(),
        asyncio.TimeoutError(),
        OSError("unreachable"),
    ],
)
async def test_request_failures_mean_not_upgradable(error):
    session = FakeSession(error=error)
    assert await make_prober(session).probe_upgrade("http://b.example/") is False


@pytest.mark.asyncio()
@pytest.mark.parametrize("url", ["https://b.example/", "ftp://b.example/", "mailto:me@b.example"])
async def test_non_http_input_is_not_probed(url):
    session = FakeSession({"HEAD": 200})
    assert await make_prober(session).probe_upgrade(url) is False
    assert session.calls == []


@pytest.mark.asyncio()
async def test_results_are_cached_per_url():
    session = FakeSession({"HEAD": 200}, latency=0.05)
    prober = make_prober(session)
    outcomes = await asyncio.gather(*(prober.probe_upgrade("http://b.example/x") for _ in range(5)))
    assert outcomes == [True] * 5
    assert await prober.probe_upgrade("http://b.example/x") is True
    assert len(session.calls) == 1

    await prober.probe_upgrade("http://b.example/y")
    assert len(session.calls) == 2


@pytest.mark.asyncio()
async def test_timeout_is_passed_to_the_request():
    session = FakeSession({"HEAD": 200})
    await make_prober(session, timeout=3.5).probe_upgrade("http://b.example/")
    assert session.calls[0][2]["timeout"].total == 3.5


@pytest.mark.asyncio()
async def test_probe_goes_through_host_throttle():
    session = FakeSession({"HEAD": 200}, latency=0.05)
    throttle = HostThrottle(parallel=1, delay=0)
    prober = HttpsProber(session, throttle)
    peak = 0

    async def watch():
        nonlocal peak
        for _ in range(20):
            peak = max(peak, throttle.budget("b.example").in_flight)
            await asyncio.sleep(0.01)

    await asyncio.gather(
        prober.probe_upgrade("http://b.example/1"),
        prober.probe_upgrade("http://b.example/2"),
        watch(),
    )
    assert peak == 1
    assert len(session.calls) == 2


@pytest.mark.asyncio()
async def test_cancel_pending_stops_running_probes():
    session = FakeSession({"HEAD": 200}, latency=5)
    prober = make_prober(session)
    waiter = asyncio.create_task(prober.probe_upgrade("http://b.example/slow"))
    await asyncio.sleep(0.05)
    prober.cancel_pending()
    with pytest.raises(asyncio.CancelledError):
        await waiter


@pytest.mark.asyncio()
async def test_connection_refused(unused_tcp_port):
    async with aiohttp.ClientSession() as session:
        prober = HttpsProber(session, HostThrottle(1, 0), timeout=2)
        assert await prober.probe_upgrade(f"http://127.0.0.1:{unused_tcp_port}/") is False


@pytest.mark.asyncio()
async def test_plain_http_server_fails_tls(serve):
    app = web.Application()

    async def ok(_):
        return web.Response(text="plain")

    app.router.add_route("*", "/", ok)
    base = await serve(app)

    async with aiohttp.ClientSession() as session:
        prober = HttpsProber(session, HostThrottle(1, 0), timeout=2)
        assert await prober.probe_upgrade(f"{base}/") is False

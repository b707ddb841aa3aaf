# File: tests/test_frontier.py
import asyncio

import pytest

from https_scout.crawler.frontier import Frontier
from https_scout.crawler.models import PageTask


def task(url: str, depth: int = 0) -> PageTask:
    return PageTask(url, depth, "a.example")


@pytest.mark.asyncio()
async def test_same_key_admitted_once():
    frontier = Frontier()
    assert await frontier.try_enqueue(task("http://a.example/page"))
    assert not await frontier.try_enqueue(task("http://a.example/page#section"))
    assert not await frontier.try_enqueue(task("HTTP://A.EXAMPLE/page", depth=3))
    assert not await frontier.try_enqueue(task("http://a.example/x/../page"))
    assert len(frontier) == 1
    assert frontier.visited_count == 1


@pytest.mark.asyncio()
async def test_depth_limit_rejects_deep_tasks():
    frontier = Frontier(max_depth=2)
    assert await frontier.try_enqueue(task("http://a.example/2", depth=2))
    assert not await frontier.try_enqueue(task("http://a.example/3", depth=3))
    # a rejected deep task does not mark the URL visited
    assert frontier.visited_count == 1


@pytest.mark.asyncio()
async def test_unlimited_depth():
    frontier = Frontier(max_depth=0)
    assert frontier.admits_depth(10_000)
    assert await frontier.try_enqueue(task("http://a.example/deep", depth=10_000))


def test_negative_depth_is_rejected():
    with pytest.raises(ValueError):
        Frontier(max_depth=-1)


@pytest.mark.asyncio()
async def test_fifo_order():
    frontier = Frontier()
    urls = [f"http://a.example/{i}" for i in range(5)]
    for url in urls:
        await frontier.try_enqueue(task(url))

    seen = []
    for _ in urls:
        t = await frontier.dequeue()
        seen.append(t.url)
        await frontier.task_done()
    assert seen == urls


@pytest.mark.asyncio()
async def test_dequeue_returns_none_when_exhausted():
    frontier = Frontier()
    assert await frontier.dequeue() is None


@pytest.mark.asyncio()
async def test_dequeue_waits_for_in_flight_work():
    frontier = Frontier()
    await frontier.try_enqueue(task("http://a.example/"))
    first = await frontier.dequeue()
    assert frontier.in_flight == 1

    waiter = asyncio.create_task(frontier.dequeue())
    await asyncio.sleep(0.05)
    assert not waiter.done()

    await frontier.try_enqueue(PageTask("http://a.example/child", first.depth + 1, first.site))
    await frontier.task_done()
    child = await asyncio.wait_for(waiter, timeout=1)
    assert child.url == "http://a.example/child"
    assert child.depth == 1

    idle = asyncio.create_task(frontier.dequeue())
    await asyncio.sleep(0.05)
    assert not idle.done()
    await frontier.task_done()
    assert await asyncio.wait_for(idle, timeout=1) is None


@pytest.mark.asyncio()
async def test_all_waiters_released_on_completion():
    frontier = Frontier()
    await frontier.try_enqueue(task("http://a.example/"))
    await frontier.dequeue()
    waiters = [asyncio.create_task(frontier.dequeue()) for _ in range(3)]
    await asyncio.sleep(0.01)
    await frontier.task_done()
    assert await asyncio.wait_for(asyncio.gather(*waiters), timeout=1) == [None, None, None]


@pytest.mark.asyncio()
async def test_concurrent_enqueue_admits_exactly_one():
    frontier = Frontier()
    outcomes = await asyncio.gather(
        *(frontier.try_enqueue(task("http://a.example/same", depth=1)) for _ in range(50))
    )
    assert outcomes.count(True) == 1
    assert len(frontier) == 1


@pytest.mark.asyncio()
async def test_task_done_without_dequeue():
    frontier = Frontier()
    with pytest.raises(ValueError):
        await frontier.task_done()

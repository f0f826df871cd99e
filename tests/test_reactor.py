from __future__ import annotations

import asyncio

from icetop.reactor import Reactor, RedrawScheduler


async def test_redraw_requests_coalesce():
    reactor = Reactor()
    renders = []
    redraw = RedrawScheduler(reactor, lambda: renders.append(1))
    for _ in range(10):
        redraw.request()
    await asyncio.sleep(0.01)
    assert renders == [1]

    redraw.request()
    await asyncio.sleep(0.01)
    assert renders == [1, 1]


async def test_cancelled_redraw_never_runs():
    reactor = Reactor()
    renders = []
    redraw = RedrawScheduler(reactor, lambda: renders.append(1))
    redraw.request()
    redraw.cancel()
    await asyncio.sleep(0.01)
    assert renders == []
    assert reactor.pending == 0


async def test_call_later_fires_once():
    reactor = Reactor()
    fired = []
    handle = reactor.call_later(0.001, lambda: fired.append(1))
    assert handle.active
    await asyncio.sleep(0.02)
    assert fired == [1]
    assert not handle.active
    assert reactor.pending == 0


async def test_call_every_repeats_until_cancelled():
    reactor = Reactor()
    fired = []
    handle = reactor.call_every(0.001, lambda: fired.append(1))
    await asyncio.sleep(0.05)
    handle.cancel()
    count = len(fired)
    assert count >= 2
    await asyncio.sleep(0.02)
    assert len(fired) == count


async def test_close_cancels_everything():
    reactor = Reactor()
    fired = []
    reactor.call_later(0.001, lambda: fired.append("later"))
    reactor.call_every(0.001, lambda: fired.append("every"))
    reactor.call_idle(lambda: fired.append("idle"))
    task = reactor.spawn(asyncio.sleep(10))
    assert reactor.pending == 4

    reactor.close()
    await asyncio.sleep(0.02)
    assert fired == []
    assert reactor.pending == 0
    assert not task.active


async def test_spawned_task_forgotten_when_done():
    reactor = Reactor()
    done = []

    async def work():
        done.append(1)

    reactor.spawn(work())
    await asyncio.sleep(0.01)
    assert done == [1]
    assert reactor.pending == 0

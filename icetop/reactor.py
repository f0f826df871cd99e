"""
Event loop capability
=====================
Thin layer over the running asyncio loop: delayed and repeating timers,
fd readability watches, idle callbacks and background tasks.  Every
registration returns a ``Handle``; anything still registered when the
reactor closes is cancelled so no callback fires against torn-down state.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

logger = logging.getLogger(__name__)


class Handle:
    def __init__(self, reactor: Reactor, cancel: Callable[[], None]):
        self._reactor = reactor
        self._cancel = cancel
        self.active = True

    def cancel(self):
        if not self.active:
            return
        self.active = False
        self._cancel()
        self._reactor._forget(self)

    def _finished(self):
        self.active = False
        self._reactor._forget(self)


class Reactor:
    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self.loop = loop or asyncio.get_running_loop()
        self._handles: set[Handle] = set()

    def _track(self, handle: Handle) -> Handle:
        self._handles.add(handle)
        return handle

    def _forget(self, handle: Handle):
        self._handles.discard(handle)

    @property
    def pending(self) -> int:
        return len(self._handles)

    def call_later(self, delay: float, callback: Callable[[], Any]) -> Handle:
        timer: asyncio.TimerHandle | None = None

        def fire():
            handle._finished()
            callback()

        handle = Handle(self, lambda: timer.cancel())
        timer = self.loop.call_later(delay, fire)
        return self._track(handle)

    def call_every(self, interval: float, callback: Callable[[], Any]) -> Handle:
        timer: asyncio.TimerHandle | None = None

        def fire():
            nonlocal timer
            timer = self.loop.call_later(interval, fire)
            callback()

        handle = Handle(self, lambda: timer.cancel())
        timer = self.loop.call_later(interval, fire)
        return self._track(handle)

    def call_idle(self, callback: Callable[[], Any]) -> Handle:
        def fire():
            handle._finished()
            callback()

        handle = Handle(self, lambda: soon.cancel())
        soon = self.loop.call_soon(fire)
        return self._track(handle)

    def add_reader(self, fd: int, callback: Callable[[], Any]) -> Handle:
        self.loop.add_reader(fd, callback)
        return self._track(Handle(self, lambda: self.loop.remove_reader(fd)))

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> Handle:
        task = self.loop.create_task(coro)
        handle = Handle(self, task.cancel)

        def done(t: asyncio.Future):
            handle._finished()
            if not t.cancelled() and t.exception() is not None:
                logger.error("Background task failed", exc_info=t.exception())

        task.add_done_callback(done)
        return self._track(handle)

    def add_signal_handler(self, sig: int, callback: Callable[[], Any]) -> Handle:
        self.loop.add_signal_handler(sig, callback)
        return self._track(Handle(self, lambda: self.loop.remove_signal_handler(sig)))

    def close(self):
        for handle in list(self._handles):
            handle.cancel()


class RedrawScheduler:
    """Coalesces redraw requests into one render at the next idle point."""

    def __init__(self, reactor: Reactor, render: Callable[[], None]):
        self.reactor = reactor
        self.render = render
        self._pending: Handle | None = None

    def request(self):
        if self._pending is None:
            self._pending = self.reactor.call_idle(self._run)

    def _run(self):
        self._pending = None
        self.render()

    def cancel(self):
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

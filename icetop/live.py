"""
Live scheduler feed
===================
Talks to the scheduler's monitor bridge over HTTP:

    GET /discover?netname=NAME   -> {"scheduler": "...", "netname": "..."}
    GET /monitor?netname=NAME    -> NDJSON event stream (see events.py)

The ReconnectSupervisor owns the connection lifecycle.  Losing the feed or
failing discovery clears the registry and starts a new attempt; while no
scheduler can be found a fixed-delay retry timer keeps trying, and it is
cancelled as soon as an attempt succeeds.
"""

from __future__ import annotations

import asyncio
import enum
import json
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable

import aiohttp

from .events import Event, FeedEnd, parse_event
from .model import Registry
from .reactor import Handle, Reactor
from .source import DataSource

logger = logging.getLogger(__name__)

DEFAULT_NETNAME = "ICECREAM"

FEED_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, ConnectionError, ValueError)


class DiscoveryError(Exception):
    """No scheduler could be found or it refused the monitor login."""


@dataclass
class SchedulerInfo:
    name: str
    netname: str


class SchedulerClient:
    def __init__(self, base_url: str, timeout: float = 5.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _params(self, netname: str) -> dict[str, str]:
        return {"netname": netname} if netname else {}

    async def discover(self, netname: str = "") -> SchedulerInfo:
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    f"{self.base_url}/discover",
                    params=self._params(netname),
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as resp:
                    if resp.status != 200:
                        raise DiscoveryError(f"discovery failed ({resp.status})")
                    data: Any = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise DiscoveryError(str(exc) or type(exc).__name__) from exc

        if not isinstance(data, dict):
            raise DiscoveryError("malformed discovery reply")
        return SchedulerInfo(
            name=str(data.get("scheduler") or ""),
            netname=str(data.get("netname") or "") or DEFAULT_NETNAME,
        )

    async def events(self, netname: str = "") -> AsyncIterator[Event]:
        """Yield events until the stream ends or a FeedEnd arrives."""
        timeout = aiohttp.ClientTimeout(total=None, sock_connect=self.timeout)
        async with aiohttp.ClientSession() as session:
            async with session.get(
                f"{self.base_url}/monitor",
                params=self._params(netname),
                timeout=timeout,
            ) as resp:
                resp.raise_for_status()
                async for raw in resp.content:
                    line = raw.decode("utf-8", errors="ignore").strip()
                    if not line:
                        continue
                    try:
                        record = json.loads(line)
                    except json.JSONDecodeError:
                        logger.debug("Skipping malformed feed line: %.80s", line)
                        continue
                    if not isinstance(record, dict):
                        continue
                    event = parse_event(record)
                    if event is None:
                        continue
                    yield event
                    if isinstance(event, FeedEnd):
                        return


# ---------------------------------------------------------------------------
# Reconnect supervision
# ---------------------------------------------------------------------------

class State(enum.Enum):
    DISCONNECTED = "disconnected"
    DISCOVERING = "discovering"
    CONNECTED = "connected"


class ReconnectSupervisor:
    def __init__(
        self,
        reactor: Reactor,
        surface: Any,
        discover: Callable[[], Awaitable[None]],
        follow: Callable[[], Awaitable[None]],
        reset: Callable[[], None],
        redraw: Callable[[], None] = lambda: None,
        retry_interval: float = 1.0,
    ):
        self.reactor = reactor
        self.surface = surface
        self.discover = discover
        self.follow = follow
        self.reset = reset
        self.redraw = redraw
        self.retry_interval = retry_interval

        self.state = State.DISCONNECTED
        self._task: Handle | None = None
        self._retry: Handle | None = None

    @property
    def retry_armed(self) -> bool:
        return self._retry is not None

    def start(self):
        self._attempt()

    def stop(self):
        self._cancel_retry()
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self.state = State.DISCONNECTED

    def _attempt(self):
        if self.state is State.DISCOVERING:
            return
        self.state = State.DISCOVERING
        self.reset()
        self.surface.suspend()
        self._task = self.reactor.spawn(self._run())

    def _arm_retry(self):
        if self._retry is None:
            self._retry = self.reactor.call_every(self.retry_interval, self._on_retry)

    def _cancel_retry(self):
        if self._retry is not None:
            self._retry.cancel()
            self._retry = None

    def _on_retry(self):
        if self.state is State.DISCONNECTED:
            self._attempt()

    def _show(self):
        self.surface.resume()
        self.redraw()

    def _discovery_failed(self):
        self.state = State.DISCONNECTED
        self._show()
        self._arm_retry()

    async def _run(self):
        try:
            await self.discover()
        except DiscoveryError as exc:
            logger.warning("Cannot get scheduler: %s", exc)
            self._discovery_failed()
            return
        except Exception:
            logger.exception("Scheduler discovery failed")
            self._discovery_failed()
            return

        self.state = State.CONNECTED
        self._cancel_retry()
        self._show()

        try:
            await self.follow()
        except FEED_ERRORS as exc:
            logger.warning("Lost connection to scheduler: %s", exc)
        except Exception:
            logger.exception("Scheduler feed failed")
        else:
            logger.info("Scheduler feed ended")

        self.state = State.DISCONNECTED
        self._attempt()


class LiveSource(DataSource):
    def __init__(
        self,
        registry: Registry,
        reactor: Reactor,
        surface: Any,
        client: SchedulerClient,
        netname: str = "",
        retry_interval: float = 1.0,
        redraw: Callable[[], None] = lambda: None,
    ):
        super().__init__(registry)
        self.client = client
        self.requested_netname = netname
        self._scheduler = ""
        self._netname = ""
        self.supervisor = ReconnectSupervisor(
            reactor,
            surface,
            discover=self._discover,
            follow=self._follow,
            reset=self._reset,
            redraw=redraw,
            retry_interval=retry_interval,
        )

    def net_name(self) -> str:
        return self._netname

    def scheduler_name(self) -> str:
        return self._scheduler

    def start(self):
        self.supervisor.start()

    def stop(self):
        self.supervisor.stop()

    def _reset(self):
        self._scheduler = ""
        self._netname = ""
        self.registry.clear()

    async def _discover(self):
        info = await self.client.discover(self.requested_netname)
        self._scheduler = info.name
        self._netname = info.netname
        logger.info("Got scheduler %s (netname %s)", info.name, info.netname)

    async def _follow(self):
        async for event in self.client.events(self._netname):
            if isinstance(event, FeedEnd):
                break
            self.dispatch(event)

"""
icetop -- Icecream cluster monitor
==================================
Full-screen live view of an Icecream distributed compile cluster: worker
hosts, their capacity, and the jobs pending, running locally or running
remotely.

Usage:
    icetop                               # connect to the scheduler monitor bridge
    icetop -s http://sched:8766 -n LAB   # explicit bridge URL and network name
    icetop --simulate --seed 7           # synthetic cluster, no scheduler needed
Controls:
    up/down j/k        select host        space   expand host
    left/right h/l tab select sort column a       expand all
    r                  reverse sort       T       track individual jobs
    q                  quit
"""

from __future__ import annotations

import asyncio
import logging
import signal
import time

from rich.console import Console

from .aggregate import build_snapshot
from .columns import default_columns
from .config import Config, parse_config
from .keys import KeyReader
from .live import LiveSource, SchedulerClient
from .logs import configure_logging
from .model import Registry
from .reactor import Reactor, RedrawScheduler
from .render import Canvas, render_frame
from .simulator import Simulator
from .source import DataSource
from .surface import LiveSurface
from .view import ViewController

logger = logging.getLogger(__name__)


class Dashboard:
    def __init__(self, config: Config, reactor: Reactor, surface):
        self.config = config
        self.reactor = reactor
        self.surface = surface
        self.redraw = RedrawScheduler(reactor, self.render)
        self.registry = Registry(on_change=self.redraw.request)
        self.columns = default_columns()
        self.quit_event = asyncio.Event()
        self.frames = 0

        self.source = self._make_source()
        self.view = ViewController(
            self.registry,
            self.columns,
            redraw=self.redraw.request,
            on_quit=self.quit,
            source=self.source,
        )

    def _make_source(self) -> DataSource:
        cfg = self.config
        if cfg.simulate:
            return Simulator(
                self.registry,
                self.reactor,
                seed=cfg.seed,
                interval=cfg.interval,
                cycles=cfg.cycles,
                on_finished=self.quit,
            )
        return LiveSource(
            self.registry,
            self.reactor,
            self.surface,
            SchedulerClient(cfg.scheduler),
            netname=cfg.netname,
            retry_interval=cfg.retry_interval,
            redraw=self.redraw.request,
        )

    def quit(self):
        self.quit_event.set()

    def render(self):
        if not self.surface.visible:
            return
        width, height = self.surface.size
        canvas = Canvas(width, height)
        snap = build_snapshot(self.registry, anonymize=self.config.anonymize)
        render_frame(canvas, snap, self.view, self.source, self.columns, time.monotonic())
        self.surface.show(canvas.to_text())
        self.frames += 1

    def _watch_signals(self):
        handlers = (
            (signal.SIGWINCH, self.redraw.request),
            (signal.SIGINT, self.quit),
            (signal.SIGTERM, self.quit),
        )
        for sig, callback in handlers:
            try:
                self.reactor.add_signal_handler(sig, callback)
            except (NotImplementedError, RuntimeError):
                logger.debug("Signal %s not supported here", sig)

    async def run(self):
        self.surface.start()
        self.reactor.call_every(self.config.refresh, self.redraw.request)
        self._watch_signals()
        try:
            with KeyReader(self.reactor, self.view.handle_key):
                self.source.start()
                self.redraw.request()
                await self.quit_event.wait()
        finally:
            self.source.stop()
            self.redraw.cancel()
            self.reactor.close()
            self.surface.stop()


async def run(config: Config, console: Console) -> Dashboard:
    dashboard = Dashboard(config, Reactor(), LiveSurface(console))
    await dashboard.run()
    return dashboard


def main(argv: list[str] | None = None):
    config = parse_config(argv)
    console = Console()
    configure_logging(config.log_level, config.log_file, console)

    try:
        dashboard = asyncio.run(run(config, console))
    except KeyboardInterrupt:
        return

    reg = dashboard.registry
    console.print()
    console.print("[bold bright_cyan]icetop session complete[/]")
    console.print(f"  Frames      {dashboard.frames}")
    console.print(f"  Hosts       {len(reg.hosts)}")
    console.print(f"  Remote jobs {reg.total_remote_jobs}")
    console.print(f"  Local jobs  {reg.total_local_jobs}")
    console.print()


if __name__ == "__main__":
    main()

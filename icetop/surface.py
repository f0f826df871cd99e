"""
Render surface
==============
Full-screen rich ``Live`` display that the dashboard pushes finished frames
to.  The reconnect supervisor suspends it while it waits on discovery.
"""

from __future__ import annotations

from rich.console import Console, RenderableType
from rich.live import Live


class LiveSurface:
    def __init__(self, console: Console):
        self.console = console
        self.live = Live(console=console, screen=True, auto_refresh=False)
        self.started = False
        self.suspended = False

    @property
    def size(self) -> tuple[int, int]:
        width, height = self.console.size
        return width, height

    def start(self):
        if not self.started:
            self.live.start()
            self.started = True

    def stop(self):
        if self.started:
            if not self.suspended:
                self.live.stop()
            self.started = False
            self.suspended = False

    def suspend(self):
        if self.started and not self.suspended:
            self.live.stop()
            self.suspended = True

    def resume(self):
        if self.started and self.suspended:
            self.live.start()
            self.suspended = False

    @property
    def visible(self) -> bool:
        return self.started and not self.suspended

    def show(self, renderable: RenderableType):
        if self.visible:
            self.live.update(renderable, refresh=True)

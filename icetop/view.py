"""
View controller
===============
Cursor, sort and expand state of the host table, driven by key presses.
"""

from __future__ import annotations

from typing import Callable

from .aggregate import ClusterSnapshot, HostDisplayData
from .columns import Column
from .model import Registry
from .source import DataSource

KEYS_UP = ("UP", "k")
KEYS_DOWN = ("DOWN", "j")
KEYS_LEFT = ("LEFT", "h")
KEYS_RIGHT = ("RIGHT", "l")


class ViewController:
    def __init__(
        self,
        registry: Registry,
        columns: list[Column],
        redraw: Callable[[], None] = lambda: None,
        on_quit: Callable[[], None] = lambda: None,
        source: DataSource | None = None,
    ):
        self.registry = registry
        self.columns = columns
        self.redraw = redraw
        self.on_quit = on_quit
        self.source = source

        self.selected_host_id = 0
        self.selected_column = 0
        self.sort_reversed = False
        self.global_expand = False
        self.track_jobs = False
        self.host_order: list[int] = []

    # -- sorting ------------------------------------------------------------

    def sort_hosts(self, snapshot: ClusterSnapshot) -> list[HostDisplayData]:
        hosts = [d for d in snapshot.hosts.values() if d.id]
        if not 0 <= self.selected_column < len(self.columns):
            return sorted(hosts, key=lambda d: d.id)
        column = self.columns[self.selected_column]
        return sorted(
            hosts,
            key=lambda d: (column.sort_key(d), d.id),
            reverse=self.sort_reversed,
        )

    def record_order(self, host_ids: list[int]):
        self.host_order = list(host_ids)
        for position, host_id in enumerate(self.host_order):
            host = self.registry.find_host(host_id)
            if host is not None:
                host.current_position = position

    # -- input --------------------------------------------------------------

    def _move(self, delta: int):
        if not self.host_order:
            self.selected_host_id = 0
            return
        current = self.registry.find_host(self.selected_host_id)
        if current is None or self.selected_host_id not in self.host_order:
            self.selected_host_id = self.host_order[0]
            return
        position = min(max(current.current_position + delta, 0), len(self.host_order) - 1)
        self.selected_host_id = self.host_order[position]

    def _set_highlight(self):
        for host in self.registry.hosts.values():
            host.highlighted = host.id == self.selected_host_id

    def toggle_expand_all(self):
        self.global_expand = not self.global_expand
        self.registry.expand_new_hosts = self.global_expand
        for host in self.registry.hosts.values():
            host.expanded = self.global_expand

    def handle_key(self, key: str) -> bool:
        """Apply one key press; returns False for keys nobody handled."""
        if self.registry.find_host(self.selected_host_id) is None:
            self.selected_host_id = 0

        ncols = len(self.columns)
        if key in KEYS_UP:
            self._move(-1)
        elif key in KEYS_DOWN:
            self._move(1)
        elif key in KEYS_LEFT:
            if self.selected_column > 0:
                self.selected_column -= 1
        elif key in KEYS_RIGHT:
            if self.selected_column < ncols - 1:
                self.selected_column += 1
        elif key == "TAB":
            if ncols:
                self.selected_column = (self.selected_column + 1) % ncols
        elif key == " ":
            host = self.registry.find_host(self.selected_host_id)
            if host is not None:
                host.expanded = not host.expanded
        elif key == "a":
            self.toggle_expand_all()
        elif key == "r":
            self.sort_reversed = not self.sort_reversed
        elif key == "T":
            self.track_jobs = not self.track_jobs
        elif key == "q":
            self.on_quit()
            return True
        elif self.source is None or not self.source.on_input(key):
            return False

        self._set_highlight()
        self.redraw()
        return True

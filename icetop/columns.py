"""
Host table columns
==================
Column descriptors for the host table and the width negotiation that fits
them into the terminal.

Each column reports ``(min_width, desired_width)`` for the current frame.
Simple columns want exactly what their longest value needs; the job graph
can shrink (it switches to compressed mode) so it offers slack.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from rich.text import Text

from .aggregate import ClusterSnapshot, HostDisplayData
from .jobgraph import build_job_graph, color_style


class Column:
    def __init__(
        self,
        header: str,
        value: Callable[[HostDisplayData], Any],
        min_width: int = 0,
    ):
        self.header = header
        self.value = value
        self.min_width = min_width

    def text(self, data: HostDisplayData) -> str:
        return str(self.value(data))

    def style(self, data: HostDisplayData) -> str:
        return ""

    def sort_key(self, data: HostDisplayData) -> Any:
        return self.value(data)

    def widths(self, snapshot: ClusterSnapshot) -> tuple[int, int]:
        width = max(len(self.header), self.min_width)
        for data in snapshot.hosts.values():
            width = max(width, len(self.text(data)))
        return width, width

    def render(self, data: HostDisplayData, width: int, snapshot: ClusterSnapshot,
               track_jobs: bool = False) -> Text:
        return Text(self.text(data)[:width], style=self.style(data))


class NameColumn(Column):
    def __init__(self):
        super().__init__("NAME", lambda d: d.name)

    def style(self, data: HostDisplayData) -> str:
        style = color_style(data.color)
        if data.no_remote:
            style = f"{style} underline".strip()
        return style


class JobGraphColumn(Column):
    def __init__(self):
        super().__init__("JOBS", lambda d: len(d.jobs))

    def text(self, data: HostDisplayData) -> str:
        return ""

    def widths(self, snapshot: ClusterSnapshot) -> tuple[int, int]:
        minimum = len(self.header)
        desired = minimum
        for data in snapshot.hosts.values():
            desired = max(desired, data.max_jobs + 2)
        return minimum, desired

    def render(self, data: HostDisplayData, width: int, snapshot: ClusterSnapshot,
               track_jobs: bool = False) -> Text:
        graph = build_job_graph(
            data.jobs.values(), data.max_jobs, width, snapshot.color_of, track_jobs
        )
        return graph.to_text()


def default_columns() -> list[Column]:
    return [
        Column("ID", lambda d: d.id),
        NameColumn(),
        Column("IN", lambda d: d.total_in, min_width=5),
        Column("CUR", lambda d: len(d.jobs)),
        Column("MAX", lambda d: d.max_jobs),
        JobGraphColumn(),
        Column("OUT", lambda d: d.total_out, min_width=5),
        Column("LOCAL", lambda d: d.total_local, min_width=5),
        Column("ACTIVE", lambda d: d.active_jobs),
        Column("PENDING", lambda d: d.pending_jobs),
    ]


# ---------------------------------------------------------------------------
# Width negotiation
# ---------------------------------------------------------------------------

@dataclass
class PlacedColumn:
    column: Column
    index: int
    start: int
    width: int


def negotiate_widths(sizes: list[tuple[int, int]], available: int) -> list[int]:
    """
    Widths for columns whose desired total does not fit in ``available``.

    ``available`` is the space left over once every column has its minimum.
    It is shared evenly between the columns with slack, the first
    ``available % n`` of them getting one extra cell.
    """
    slack = [i for i, (lo, hi) in enumerate(sizes) if hi > lo]
    widths = [hi for _, hi in sizes]
    if not slack:
        return widths

    share, extra = divmod(max(0, available), len(slack))
    for n, i in enumerate(slack):
        widths[i] = sizes[i][0] + share + (1 if n < extra else 0)
    return widths


def layout_columns(
    columns: list[Column],
    snapshot: ClusterSnapshot,
    width: int,
    start: int = 2,
    gap: int = 1,
) -> list[PlacedColumn]:
    sizes = [c.widths(snapshot) for c in columns]
    widths = [hi for _, hi in sizes]

    overhead = start + gap * max(0, len(columns) - 1)
    required = overhead + sum(widths)
    if required > width:
        available = width - overhead - sum(lo for lo, _ in sizes)
        widths = negotiate_widths(sizes, available)

    placed: list[PlacedColumn] = []
    pos = start
    for i, (column, w) in enumerate(zip(columns, widths)):
        if pos + w > width:
            break
        placed.append(PlacedColumn(column=column, index=i, start=pos, width=w))
        pos += w + gap
    return placed

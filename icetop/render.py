"""
Frame rendering
===============
Draws one complete frame of the dashboard onto a cell canvas: cluster
summary, cluster-wide job graph, the host table and the expanded details
of any host the operator opened.
"""

from __future__ import annotations

from rich.text import Text

from .aggregate import ClusterSnapshot, HostDisplayData
from .columns import Column, layout_columns
from .jobgraph import build_job_graph, color_style
from .model import UNASSIGNED_SLOT, Host, Job
from .source import DataSource
from .view import ViewController

HEADER_STYLE = "black on green"
HIGHLIGHT_STYLE = "black on cyan"
EXPAND_STYLE = "green"
BOLD = "bold"

HIDDEN_WHEN_ANONYMOUS = ("Name", "IP")


class Canvas:
    """Fixed-size grid of styled cells; anything drawn off-grid is dropped."""

    def __init__(self, width: int, height: int):
        self.width = max(0, width)
        self.height = max(0, height)
        self._chars = [[" "] * self.width for _ in range(self.height)]
        self._styles = [[""] * self.width for _ in range(self.height)]
        self.used = 0

    def full(self, row: int) -> bool:
        return row >= self.height

    def write(self, row: int, col: int, text: str, style: str = "") -> int:
        """Draw ``text`` at (row, col); returns the column after it."""
        if 0 <= row < self.height:
            chars, styles = self._chars[row], self._styles[row]
            for i, ch in enumerate(text):
                x = col + i
                if x >= self.width:
                    break
                if x >= 0:
                    chars[x] = ch
                    styles[x] = style
            self.used = max(self.used, row + 1)
        return col + len(text)

    def write_text(self, row: int, col: int, text: Text) -> int:
        plain = text.plain
        styles = [str(text.style)] * len(plain)
        for span in text.spans:
            for i in range(span.start, min(span.end, len(plain))):
                styles[i] = str(span.style)
        for i, ch in enumerate(plain):
            self.write(row, col + i, ch, styles[i])
        return col + len(plain)

    def fill(self, row: int, style: str):
        self.write(row, 0, " " * self.width, style)

    def line(self, row: int) -> str:
        return "".join(self._chars[row]).rstrip()

    def to_text(self) -> Text:
        out = Text()
        for row in range(self.used):
            if row:
                out.append("\n")
            chars, styles = self._chars[row], self._styles[row]
            run_start = 0
            for x in range(1, self.width + 1):
                if x == self.width or styles[x] != styles[run_start]:
                    out.append("".join(chars[run_start:x]), style=styles[run_start])
                    run_start = x
        return out


def assign_host_slots(jobs: dict[int, Job], slots: int) -> list[Job | None]:
    """Keep each running job on the same expanded-view line between frames."""
    ordered = [jobs[k] for k in sorted(jobs)]
    result: list[Job | None] = []
    for i in range(slots):
        job = next((j for j in ordered if j.host_slot == i), None)
        if job is None:
            job = next((j for j in ordered if j.host_slot == UNASSIGNED_SLOT), None)
            if job is not None:
                job.host_slot = i
        result.append(job)
    return result


def _render_summary(canvas: Canvas, snap: ClusterSnapshot, source: DataSource,
                    track_jobs: bool) -> int:
    row = 0
    col = canvas.write(row, 0, "Scheduler: ", BOLD)
    scheduler = source.scheduler_name()
    if scheduler:
        col = canvas.write(row, col, scheduler)
    else:
        col = canvas.write(row, col, "<disconnected>", "dim")
    col = canvas.write(row, col, " Netname: ", BOLD)
    canvas.write(row, col, source.net_name())
    row += 1

    col = canvas.write(row, 0, "Servers: ", BOLD)
    canvas.write(row, col, f"Total:{snap.host_count} Available:{snap.available_servers}"
                           f" Active:{snap.active_hosts}")
    row += 1

    col = canvas.write(row, 0, "Total: ", BOLD)
    canvas.write(row, col, f"Remote:{snap.total_remote_jobs} Local:{snap.total_local_jobs}")
    row += 1

    col = canvas.write(row, 0, "Jobs: ", BOLD)
    canvas.write(row, col, f"Maximum:{snap.total_slots} Active:{snap.active_jobs}"
                           f" Local:{snap.local_jobs} Pending:{snap.pending_jobs}")
    row += 1

    graph = build_job_graph(
        snap.all_jobs.values(), snap.total_slots, canvas.width - 6,
        snap.color_of, track_jobs,
    )
    canvas.write_text(row, 6, graph.to_text())
    return row + 2


def _render_expanded(canvas: Canvas, row: int, host: Host, data: HostDisplayData,
                     snap: ClusterSnapshot, now: float) -> int:
    for i, job in enumerate(assign_host_slots(data.jobs, data.max_jobs)):
        row += 1
        if canvas.full(row):
            return row
        col = canvas.write(row, 2, f"Job {i + 1}: ", BOLD)
        if job is None:
            continue
        col = canvas.write(row, col, f"({now - job.start_time:5.1f}s) ")
        filename = snap.filename_of(job) or "<unknown>"
        canvas.write(row, col, filename, color_style(snap.color_of(job)))

    attrs = sorted(host.attr.items())
    if snap.anonymize:
        attrs = [(k, v) for k, v in attrs if k not in HIDDEN_WHEN_ANONYMOUS]
    width = max((len(k) for k, _ in attrs), default=0)
    for key, value in attrs:
        row += 1
        if canvas.full(row):
            return row
        canvas.write(row, 2, key, BOLD)
        canvas.write(row, 2 + width + 1, value)
    return row


def render_frame(
    canvas: Canvas,
    snap: ClusterSnapshot,
    view: ViewController,
    source: DataSource,
    columns: list[Column],
    now: float,
):
    row = _render_summary(canvas, snap, source, view.track_jobs)

    placed = layout_columns(columns, snap, canvas.width)
    canvas.fill(row, HEADER_STYLE)
    canvas.write(row, 0, "↑" if view.sort_reversed else "↓", HEADER_STYLE)
    for pc in placed:
        style = HIGHLIGHT_STYLE if pc.index == view.selected_column else HEADER_STYLE
        canvas.write(row, pc.start, pc.column.header.ljust(pc.width), style)
    row += 1

    ordered = view.sort_hosts(snap)
    view.record_order([d.id for d in ordered])

    for data in ordered:
        if canvas.full(row):
            break
        host = view.registry.find_host(data.id)
        if host is None:
            continue

        marker_style = HIGHLIGHT_STYLE if host.highlighted else EXPAND_STYLE
        canvas.write(row, 0, "-" if host.expanded else "+", marker_style)
        for pc in placed:
            canvas.write_text(row, pc.start,
                              pc.column.render(data, pc.width, snap, view.track_jobs))

        if host.expanded:
            row = _render_expanded(canvas, row, host, data, snap, now)
        row += 1

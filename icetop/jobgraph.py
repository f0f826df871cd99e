"""
Job graph
=========
Fixed-width bracketed strip showing the active job mix of a host (or the
whole cluster).  When the host has more job slots than there is room on
screen the strip is scaled down with largest-remainder apportionment and
drawn with curly brackets so the viewer knows it is approximate.

    [%%==      ]    exact, 10 slots
    {%===   }       compressed
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable

from rich.text import Text

from .model import Job

LOCAL_GLYPH = "%"
REMOTE_GLYPH = "="
LOCAL_TRACK = "abcdefghijklmnopqrstuvwxyz"
REMOTE_TRACK = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"

EXACT_BRACKETS = ("[", "]")
COMPRESSED_BRACKETS = ("{", "}")

HOST_STYLES = {
    0: "",
    1: "red",
    2: "green",
    3: "yellow",
    4: "blue",
    5: "magenta",
    6: "cyan",
    7: "white",
}


def color_style(color: int) -> str:
    return HOST_STYLES.get(color, "")


@dataclass
class Bin:
    color: int
    is_local: bool
    jobs: list[Job] = field(default_factory=list)
    slots: int = 0

    @property
    def count(self) -> int:
        return len(self.jobs)

    def glyphs(self, track_jobs: bool) -> str:
        if not track_jobs:
            return (LOCAL_GLYPH if self.is_local else REMOTE_GLYPH) * self.slots
        track = LOCAL_TRACK if self.is_local else REMOTE_TRACK
        ordered = sorted(self.jobs, key=lambda j: j.id)
        return "".join(track[j.id % len(track)] for j in ordered[: self.slots])


@dataclass
class JobGraph:
    bins: list[Bin]
    graph_slots: int
    target_slots: int
    compressed: bool
    track_jobs: bool = False

    @property
    def brackets(self) -> tuple[str, str]:
        return COMPRESSED_BRACKETS if self.compressed else EXACT_BRACKETS

    def segments(self) -> list[tuple[str, int]]:
        """(text, colour id) pieces in drawing order."""
        opening, closing = self.brackets
        out: list[tuple[str, int]] = [(opening, 0)]
        for b in self.bins:
            if b.slots:
                out.append((b.glyphs(self.track_jobs), b.color))
        pad = self.graph_slots - self.target_slots
        if pad > 0:
            out.append((" " * pad, 0))
        out.append((closing, 0))
        return out

    def text(self) -> str:
        return "".join(s for s, _ in self.segments())

    def to_text(self) -> Text:
        txt = Text()
        for s, color in self.segments():
            txt.append(s, style=color_style(color))
        return txt


def allocate_slots(counts: list[int], target: int) -> list[int]:
    """
    Split ``target`` slots across bins proportionally to ``counts``.

    Whole slots go out by floor division, then the leftover slots go one
    each to the bins with the largest remainders.  The result always sums
    to ``target`` when ``target <= sum(counts)``.
    """
    total = sum(counts)
    if total <= 0 or target <= 0:
        return [0] * len(counts)

    slots = [c * target // total for c in counts]
    remainders = [(c * target) % total for c in counts]

    leftover = target - sum(slots)
    by_remainder = sorted(range(len(counts)), key=lambda i: -remainders[i])
    for i in by_remainder[:leftover]:
        slots[i] += 1
    return slots


def _visual_order(b: Bin) -> tuple[int, int]:
    return (0 if b.is_local else 1, b.color)


def build_job_graph(
    jobs: Iterable[Job],
    host_capacity: int,
    available_slots: int,
    color_of: Callable[[Job], int],
    track_jobs: bool = False,
) -> JobGraph:
    host_capacity = max(0, host_capacity)

    bins: dict[tuple[int, bool], Bin] = {}
    for job in jobs:
        if not job.active:
            continue
        key = (color_of(job), job.is_local)
        if key not in bins:
            bins[key] = Bin(color=key[0], is_local=key[1])
        bins[key].jobs.append(job)

    ordered = sorted(bins.values(), key=_visual_order)
    total_active = sum(b.count for b in ordered)

    graph_slots = max(0, min(available_slots - 2, host_capacity))
    compressed = graph_slots < host_capacity

    # Local jobs can push a host past its nominal capacity.
    effective = max(total_active, host_capacity)
    if total_active == 0 or effective == 0:
        target = 0
    else:
        target = -(-graph_slots * total_active // effective)

    for b, n in zip(ordered, allocate_slots([b.count for b in ordered], target)):
        b.slots = n

    return JobGraph(
        bins=ordered,
        graph_slots=graph_slots,
        target_slots=target,
        compressed=compressed,
        track_jobs=track_jobs,
    )

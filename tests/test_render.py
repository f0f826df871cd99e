from __future__ import annotations

from rich.text import Text

from conftest import add_host
from icetop.aggregate import build_snapshot
from icetop.columns import default_columns
from icetop.model import Job
from icetop.render import Canvas, assign_host_slots, render_frame
from icetop.simulator import Simulator
from icetop.view import ViewController


def _frame(registry, source, width=100, height=40, anonymize=False, view=None, now=110.0):
    columns = default_columns()
    view = view or ViewController(registry, columns)
    canvas = Canvas(width, height)
    render_frame(canvas, build_snapshot(registry, anonymize), view, source, columns, now)
    return canvas, view


def test_canvas_clips():
    canvas = Canvas(5, 2)
    canvas.write(0, 3, "abcdef", "bold")
    canvas.write(5, 0, "off-screen")
    assert canvas.line(0) == "   ab"
    assert canvas.used == 1
    assert canvas.to_text().plain == "   ab"


def test_canvas_styled_text():
    canvas = Canvas(10, 1)
    txt = Text("[")
    txt.append("%", style="red")
    txt.append("]")
    canvas.write_text(0, 1, txt)
    out = canvas.to_text()
    assert out.plain == " [%]      "
    assert any(str(span.style) == "red" for span in out.spans)


def test_assign_host_slots_is_sticky():
    jobs = {i: Job(id=i, active=True) for i in (5, 3)}
    first = assign_host_slots(jobs, 3)
    assert [j.id if j else None for j in first] == [3, 5, None]

    del jobs[3]
    jobs[1] = Job(id=1, active=True)
    second = assign_host_slots(jobs, 3)
    assert [j.id if j else None for j in second] == [1, 5, None]


def test_summary_and_table(registry):
    sim = Simulator(registry, seed=2)
    sim.populate()
    for _ in range(200):
        sim.tick()

    canvas, view = _frame(registry, sim)
    lines = [canvas.line(r) for r in range(canvas.used)]
    assert lines[0] == "Scheduler: simulator Netname: ICECREAM"
    assert lines[1].startswith("Servers: Total:10 ")
    assert lines[3].startswith("Jobs: Maximum:")
    assert lines[4].lstrip().startswith(("[", "{"))
    header = lines[6]
    assert header.startswith("↓ ID")
    assert "NAME" in header and "PENDING" in header
    assert len(view.host_order) == 10
    assert sum(1 for line in lines[7:] if line[:1] == "+") == 10


def test_disconnected_source(registry):
    from icetop.source import DataSource

    canvas, _ = _frame(registry, DataSource(registry))
    assert canvas.line(0).startswith("Scheduler: <disconnected>")


def test_expanded_host(registry, clock):
    from icetop.source import DataSource

    host = add_host(registry, 1, name="builder", max_jobs=2, IP="10.1.1.1")
    host.expanded = True
    clock.now = 100.0
    registry.create_local(7, 1, "lib.c")

    canvas, _ = _frame(registry, DataSource(registry), now=112.5)
    lines = [canvas.line(r) for r in range(canvas.used)]
    assert "  Job 1: ( 12.5s) lib.c" in lines
    assert "  Job 2:" in lines
    assert any(line.startswith("  IP ") for line in lines)
    assert any(line.startswith("  Name ") and "builder" in line for line in lines)

    canvas, _ = _frame(registry, DataSource(registry), anonymize=True)
    text = "\n".join(canvas.line(r) for r in range(canvas.used))
    assert "builder" not in text
    assert "10.1.1.1" not in text
    assert "lib.c" not in text


def test_narrow_terminal_drops_columns(registry):
    from icetop.source import DataSource

    add_host(registry, 1)
    canvas, _ = _frame(registry, DataSource(registry), width=20)
    header = canvas.line(6)
    assert "ID" in header
    assert "PENDING" not in header


def test_short_terminal_stops_early(registry):
    from icetop.source import DataSource

    for i in range(1, 30):
        add_host(registry, i)
    canvas, view = _frame(registry, DataSource(registry), height=10)
    assert canvas.used == 10
    assert len(view.host_order) == 29

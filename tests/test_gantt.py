from kernel_sim.gantt import build_rich_gantt, render_gantt
from kernel_sim.registry import ProcessRegistry
from kernel_sim.scheduler import simulate


def _timeline():
    return simulate(ProcessRegistry.from_pairs([(1, 4), (2, 2)]), quantum=2).timeline


def test_plain_gantt():
    lines = render_gantt(_timeline()).splitlines()
    assert lines[0] == "Gantt Chart:"
    assert lines[1] == "|======|"
    assert lines[2].split() == ["1", "2", "1"]
    assert lines[3] == "0 2 4 6"


def test_empty_gantt():
    assert render_gantt([]) == "(no execution)"
    _, marks = build_rich_gantt([])
    assert marks == ""


def test_rich_gantt_time_marks():
    panel, marks = build_rich_gantt(_timeline())
    assert panel.title == "Gantt Chart"
    assert marks == "0 2 4 6"

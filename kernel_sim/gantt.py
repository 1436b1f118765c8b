from __future__ import annotations

from typing import Dict, List

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ScheduledSlice


def render_gantt(slices: List[ScheduledSlice]) -> str:
    """
    Plain-text Gantt chart of CPU work units, one block per quantum.
    """
    if not slices:
        return "(no execution)"

    slices = sorted(slices, key=lambda s: (s.start, s.step))

    line = "|"
    labels = ""
    time_marks = "0"

    for sl in slices:
        width = max(1, sl.end - sl.start)
        line += "=" * width
        labels += str(sl.pid)[:width].ljust(width)
        time_marks += f"{sl.end:>{width}}"

    line += "|"

    return "\n".join(
        [
            "Gantt Chart:",
            line,
            " " + labels,
            time_marks,
        ]
    )


def build_rich_gantt(slices: List[ScheduledSlice]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not slices:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    slices = sorted(slices, key=lambda s: (s.start, s.step))

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[int, str] = {}

    def pid_color(pid: int) -> str:
        if pid not in pid_to_color:
            pid_to_color[pid] = colors[len(pid_to_color) % len(colors)]
        return pid_to_color[pid]

    timeline = Text()
    labels = Text()
    time_marks = "0"

    for sl in slices:
        width = max(1, sl.end - sl.start)
        timeline.append(" " * width, style=f"on {pid_color(sl.pid)}")
        labels.append(str(sl.pid)[:width].ljust(width), style="bold")
        time_marks += f"{sl.end:>{width}}"

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks

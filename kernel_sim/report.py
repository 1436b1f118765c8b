from __future__ import annotations

import sys
import time
from typing import IO, List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .models import ProcessState, SimulationResult, Snapshot

COMPLETION_LINE = "All processes completed."

STATE_STYLES = {
    ProcessState.READY: "yellow",
    ProcessState.RUNNING: "bold green",
    ProcessState.TERMINATED: "dim",
}


def format_snapshot(snapshot: Snapshot) -> List[str]:
    """
    Render one step as the interrupt header followed by one line per process.
    """
    lines = [f"Interrupt {snapshot.step}:"]
    for view in sorted(snapshot.processes, key=lambda v: v.pid):
        lines.append(f"PID {view.pid}: {view.state.value}, at pc {view.progress}")
    return lines


class TextReporter:
    """
    Snapshot callback writing the plain trace to a text stream.
    """

    def __init__(self, stream: Optional[IO[str]] = None, delay: float = 0.0) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.delay = delay
        self.finished = False

    def __call__(self, snapshot: Snapshot) -> None:
        self.stream.write("\n".join(format_snapshot(snapshot)) + "\n")
        self.stream.flush()
        if self.delay:
            time.sleep(self.delay)

    def finish(self) -> None:
        if self.finished:
            return
        self.stream.write(COMPLETION_LINE + "\n")
        self.stream.flush()
        self.finished = True


class RichReporter:
    """
    Snapshot callback rendering each step as a coloured table.
    """

    def __init__(self, console: Optional[Console] = None, delay: float = 0.0) -> None:
        self.console = console if console is not None else Console()
        self.delay = delay
        self.finished = False

    def __call__(self, snapshot: Snapshot) -> None:
        table = Table(title=f"Interrupt {snapshot.step}", box=box.SIMPLE_HEAVY)
        table.add_column("PID", justify="right")
        table.add_column("State", justify="center")
        table.add_column("PC", justify="right")

        for view in sorted(snapshot.processes, key=lambda v: v.pid):
            style = STATE_STYLES[view.state]
            table.add_row(
                str(view.pid),
                f"[{style}]{view.state.value}[/{style}]",
                str(view.progress),
            )

        self.console.print(table)
        if self.delay:
            time.sleep(self.delay)

    def finish(self) -> None:
        if self.finished:
            return
        self.console.print(Panel.fit(COMPLETION_LINE, style="bold green"))
        self.finished = True


def render_summary(result: SimulationResult, console: Console) -> None:
    console.print(f"[bold]Quantum:[/bold] {result.quantum}")
    console.print(f"[bold]Steps:[/bold] {result.steps}")
    console.print()

    proc_table = Table(title="Per-process summary", box=box.SIMPLE_HEAVY)
    for h in ["PID", "Work", "Visits", "First run", "Completed", "Waiting"]:
        proc_table.add_column(h, justify="center" if h == "PID" else "right")

    for p in result.processes:
        proc_table.add_row(
            str(p.pid),
            str(p.total_work),
            str(p.visits),
            str(p.first_run_step),
            str(p.completion_step),
            str(p.waiting_steps),
        )

    console.print(proc_table)
    console.print()

    if result.system:
        sys_ = result.system
        sys_table = Table(title="System summary", box=box.SIMPLE_HEAVY)
        sys_table.add_column("Metric")
        sys_table.add_column("Value", justify="right")

        sys_table.add_row("Total steps", str(sys_.total_steps))
        sys_table.add_row("Idle steps", str(sys_.idle_steps))
        sys_table.add_row("CPU busy (work units)", str(sys_.cpu_busy_units))
        sys_table.add_row("Throughput (proc/step)", f"{sys_.throughput:.3f}")
        sys_table.add_row("Avg completion step", f"{sys_.avg_completion_step:.2f}")
        sys_table.add_row("Avg waiting steps", f"{sys_.avg_waiting_steps:.2f}")

        console.print(sys_table)

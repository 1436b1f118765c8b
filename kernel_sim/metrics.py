from __future__ import annotations

from typing import Dict, List

from .models import ProcessSummary, ScheduledSlice, SimulationResult, SystemSummary
from .registry import ProcessRegistry


def compute_summaries(registry: ProcessRegistry, result: SimulationResult) -> SystemSummary:
    """
    Derive per-process and system summaries from a finished run's timeline.

    Steps are the unit of time here: a process that terminates at step 5
    after 2 visits spent 3 steps waiting in the ready queue.
    """
    by_pid: Dict[int, List[ScheduledSlice]] = {}
    for slice_ in result.timeline:
        by_pid.setdefault(slice_.pid, []).append(slice_)

    summaries: List[ProcessSummary] = []
    for pcb in sorted(registry, key=lambda p: p.pid):
        slices = by_pid.get(pcb.pid, [])
        if not slices:
            continue
        visits = len(slices)
        completion_step = slices[-1].step
        summaries.append(
            ProcessSummary(
                pid=pcb.pid,
                total_work=pcb.total_work,
                visits=visits,
                first_run_step=slices[0].step,
                completion_step=completion_step,
                waiting_steps=completion_step - visits,
            )
        )

    result.processes = summaries
    result.system = compute_system_summary(result)
    return result.system


def compute_system_summary(result: SimulationResult) -> SystemSummary:
    if not result.processes or result.steps == 0:
        return SystemSummary(
            total_steps=result.steps,
            idle_steps=result.steps,
            cpu_busy_units=0,
            throughput=0.0,
            avg_completion_step=0.0,
            avg_waiting_steps=0.0,
        )

    n = len(result.processes)
    return SystemSummary(
        total_steps=result.steps,
        idle_steps=result.steps - len(result.timeline),
        cpu_busy_units=sum(s.end - s.start for s in result.timeline),
        throughput=n / result.steps,
        avg_completion_step=sum(p.completion_step for p in result.processes) / n,
        avg_waiting_steps=sum(p.waiting_steps for p in result.processes) / n,
    )


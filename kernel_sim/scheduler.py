from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Deque, Optional

from .config import DEFAULT_QUANTUM, check_quantum
from .errors import SchedulerStalled
from .metrics import compute_summaries
from .models import PCB, ProcessState, ScheduledSlice, SimulationResult, Snapshot
from .registry import ProcessRegistry

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[Snapshot], None]


class RoundRobinScheduler:
    """
    Single-core round robin over a process registry.

    Each call to :meth:`step` is one timer interrupt: the head of the ready
    queue runs for at most one quantum, the whole registry is reported, and
    only then is the process put back at the tail of the queue (or retired).
    A process therefore shows up as ``Running`` only in the snapshot of the
    step it ran in, and as ``Terminated`` instead if that visit finished it.
    """

    def __init__(
        self,
        registry: ProcessRegistry,
        quantum: int = DEFAULT_QUANTUM,
        on_snapshot: Optional[SnapshotCallback] = None,
    ) -> None:
        self.registry = registry
        self.quantum = check_quantum(quantum)
        self.on_snapshot = on_snapshot

        self.current_step = 0
        self.clock = 0
        self.ready: Deque[int] = deque(pcb.pid for pcb in registry if not pcb.is_terminated)
        self.result = SimulationResult(quantum=self.quantum)

    def step(self) -> Snapshot:
        self.current_step += 1

        pcb: Optional[PCB] = None
        if self.ready:
            pcb = self._execute(self.ready.popleft())
        else:
            logger.debug("step %d: ready queue empty, CPU idle", self.current_step)

        snapshot = self.registry.snapshot(self.current_step)
        self.result.snapshots.append(snapshot)
        if self.on_snapshot is not None:
            self.on_snapshot(snapshot)

        if pcb is not None:
            self._requeue_or_retire(pcb)

        return snapshot

    def run(self, max_steps: Optional[int] = None) -> SimulationResult:
        """
        Step until every process has terminated and return the full record.

        ``max_steps`` bounds the run; the default is unbounded, since every
        visit makes progress on a CPU-bound process.
        """
        logger.debug(
            "starting round robin: %d processes, quantum %d", len(self.registry), self.quantum
        )
        while not self.registry.is_all_terminated():
            if max_steps is not None and self.current_step >= max_steps:
                raise SchedulerStalled(max_steps)
            self.step()

        self.result.steps = self.current_step
        compute_summaries(self.registry, self.result)
        logger.info("all %d processes completed after %d steps", len(self.registry), self.current_step)
        return self.result

    def _execute(self, pid: int) -> PCB:
        pcb = self.registry.get(pid)
        pcb.state = ProcessState.RUNNING

        work_done = min(self.quantum, pcb.remaining)
        pcb.progress += work_done

        self.result.timeline.append(
            ScheduledSlice(pid=pid, step=self.current_step, start=self.clock, end=self.clock + work_done)
        )
        self.clock += work_done

        if pcb.progress == pcb.total_work:
            pcb.state = ProcessState.TERMINATED
            logger.info("step %d: PID %d terminated at pc %d", self.current_step, pid, pcb.progress)
        else:
            logger.debug(
                "step %d: PID %d ran %d units, pc %d/%d",
                self.current_step,
                pid,
                work_done,
                pcb.progress,
                pcb.total_work,
            )
        return pcb

    def _requeue_or_retire(self, pcb: PCB) -> None:
        if pcb.is_terminated:
            return
        pcb.state = ProcessState.READY
        self.ready.append(pcb.pid)


def simulate(
    registry: ProcessRegistry,
    quantum: int = DEFAULT_QUANTUM,
    on_snapshot: Optional[SnapshotCallback] = None,
    max_steps: Optional[int] = None,
) -> SimulationResult:
    """
    Run a registry to completion under round robin with the given quantum.
    """
    return RoundRobinScheduler(registry, quantum=quantum, on_snapshot=on_snapshot).run(
        max_steps=max_steps
    )

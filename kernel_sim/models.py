from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class ProcessState(Enum):
    READY = "Ready"
    RUNNING = "Running"
    TERMINATED = "Terminated"


@dataclass
class PCB:
    """
    Process control block: identity, state and program counter of one process.
    """

    pid: int
    total_work: int
    state: ProcessState = ProcessState.READY
    progress: int = 0

    @property
    def remaining(self) -> int:
        return self.total_work - self.progress

    @property
    def is_terminated(self) -> bool:
        return self.state is ProcessState.TERMINATED


@dataclass(frozen=True)
class ProcessView:
    pid: int
    state: ProcessState
    progress: int


@dataclass(frozen=True)
class Snapshot:
    """
    State of every process at one time step, ordered by pid.
    """

    step: int
    processes: Tuple[ProcessView, ...]

    @property
    def running_pid(self) -> Optional[int]:
        for view in self.processes:
            if view.state is ProcessState.RUNNING:
                return view.pid
        return None

    def state_of(self, pid: int) -> ProcessState:
        for view in self.processes:
            if view.pid == pid:
                return view.state
        raise KeyError(pid)


@dataclass
class ScheduledSlice:
    """
    One quantum of execution, measured in work units on the virtual CPU clock.
    """

    pid: int
    step: int
    start: int
    end: int


@dataclass
class ProcessSummary:
    pid: int
    total_work: int
    visits: int
    first_run_step: int
    completion_step: int
    waiting_steps: int


@dataclass
class SystemSummary:
    total_steps: int
    idle_steps: int
    cpu_busy_units: int
    throughput: float
    avg_completion_step: float
    avg_waiting_steps: float


@dataclass
class SimulationResult:
    quantum: int
    steps: int = 0
    snapshots: List[Snapshot] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    processes: List[ProcessSummary] = field(default_factory=list)
    system: Optional[SystemSummary] = None

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Tuple

from .errors import DuplicatePid, InvalidWork
from .models import PCB, ProcessState, ProcessView, Snapshot


class ProcessRegistry:
    """
    Owns every PCB of a simulation run, keyed by pid.

    Iteration follows creation order, which is also the order the scheduler
    seeds its ready queue with. Reports are always ordered by pid.
    """

    def __init__(self) -> None:
        self._pcbs: Dict[int, PCB] = {}

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[int, int]]) -> "ProcessRegistry":
        registry = cls()
        for pid, total_work in pairs:
            registry.create(pid, total_work)
        return registry

    def create(self, pid: int, total_work: int) -> PCB:
        if pid in self._pcbs:
            raise DuplicatePid(pid)
        if total_work <= 0:
            raise InvalidWork(pid, total_work)

        pcb = PCB(pid=pid, total_work=total_work)
        self._pcbs[pid] = pcb
        return pcb

    def get(self, pid: int) -> PCB:
        return self._pcbs[pid]

    def pids(self) -> List[int]:
        return list(self._pcbs)

    def pairs(self) -> List[Tuple[int, int]]:
        """(pid, total_work) in creation order, enough to rebuild a fresh registry."""
        return [(pcb.pid, pcb.total_work) for pcb in self._pcbs.values()]

    def __contains__(self, pid: object) -> bool:
        return pid in self._pcbs

    def __len__(self) -> int:
        return len(self._pcbs)

    def __iter__(self) -> Iterator[PCB]:
        return iter(self._pcbs.values())

    def is_all_terminated(self) -> bool:
        return all(pcb.state is ProcessState.TERMINATED for pcb in self._pcbs.values())

    def snapshot(self, step: int) -> Snapshot:
        """
        Read-only view of every process at ``step``, sorted ascending by pid.
        """
        views = tuple(
            ProcessView(pid=pcb.pid, state=pcb.state, progress=pcb.progress)
            for pcb in sorted(self._pcbs.values(), key=lambda p: p.pid)
        )
        return Snapshot(step=step, processes=views)

from __future__ import annotations

from typing import Optional


class SimulatorError(Exception):
    """Base class for every error the simulator reports to the user."""


class InvalidInput(SimulatorError, ValueError):
    """
    Malformed or missing numeric field, non-positive count, pid or work value.
    """

    def __init__(self, message: str, value: Optional[object] = None) -> None:
        super().__init__(message)
        self.value = value

    def __str__(self) -> str:
        message = super().__str__()
        if self.value is None:
            return message
        return f"{message}: {self.value!r}"


class InvalidWork(InvalidInput):
    def __init__(self, pid: int, value: int) -> None:
        super().__init__(f"Invalid work units for PID {pid}", value=value)
        self.pid = pid


class DuplicatePid(SimulatorError, ValueError):
    def __init__(self, pid: int) -> None:
        super().__init__(f"Duplicate PID {pid} detected")
        self.pid = pid


class InvalidQuantum(SimulatorError, ValueError):
    def __init__(self, quantum: object) -> None:
        super().__init__(f"Round Robin requires a positive quantum (got {quantum!r})")
        self.quantum = quantum


class SchedulerStalled(SimulatorError, RuntimeError):
    def __init__(self, max_steps: int) -> None:
        super().__init__(f"Simulation did not finish within {max_steps} steps")
        self.max_steps = max_steps

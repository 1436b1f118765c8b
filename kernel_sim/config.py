from __future__ import annotations

from dataclasses import dataclass

from .errors import InvalidQuantum

# Quantum used by the reference traces.
DEFAULT_QUANTUM = 2

OUTPUT_FORMATS = ("text", "rich")


@dataclass
class SimulationConfig:
    quantum: int = DEFAULT_QUANTUM
    output_format: str = "text"
    show_summary: bool = False
    show_gantt: bool = False
    step_delay: float = 0.0
    verbose: bool = False

    def validate(self) -> "SimulationConfig":
        check_quantum(self.quantum)
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"Unsupported output format: {self.output_format} (use {' or '.join(OUTPUT_FORMATS)})"
            )
        if self.step_delay < 0:
            raise ValueError("Step delay must not be negative")
        return self


def check_quantum(quantum: object) -> int:
    # bool is an int subclass but never a meaningful quantum.
    if isinstance(quantum, bool) or not isinstance(quantum, int) or quantum <= 0:
        raise InvalidQuantum(quantum)
    return quantum

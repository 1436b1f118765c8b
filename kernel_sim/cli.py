from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import DEFAULT_QUANTUM, OUTPUT_FORMATS, SimulationConfig, check_quantum
from .errors import SimulatorError
from .gantt import build_rich_gantt, render_gantt
from .registry import ProcessRegistry
from .report import RichReporter, TextReporter, render_summary
from .scheduler import simulate
from .workload_io import load_registry, load_workload

logger = logging.getLogger(__name__)

COMMANDS = ("run", "compare")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kernel-sim",
        description="Round-robin kernel simulator: prints every process state after each timer interrupt.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser(
        "run",
        help="Simulate a workload and print the per-step trace (default command).",
    )
    _add_input_argument(run_parser)
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Work units a process may run before preemption (default: {DEFAULT_QUANTUM}).",
    )
    run_parser.add_argument(
        "--format",
        "-f",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        default="text",
        help="Trace format: exact plain text or rich tables (default: text).",
    )
    run_parser.add_argument(
        "--summary",
        action="store_true",
        help="Print per-process and system summaries after the trace.",
    )
    run_parser.add_argument(
        "--gantt",
        action="store_true",
        help="Print a Gantt chart of CPU work units after the trace.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=float,
        default=0.0,
        help="Seconds to wait after each step (default: 0).",
    )
    _add_verbose_argument(run_parser)

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run the same workload with several quanta and compare the summaries.",
    )
    _add_input_argument(compare_parser)
    compare_parser.add_argument(
        "--quanta",
        "-q",
        type=int,
        nargs="+",
        default=[1, 2, 4],
        help="Quanta to compare (default: 1 2 4).",
    )
    _add_verbose_argument(compare_parser)

    return parser


def _add_input_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--input",
        "-i",
        default="-",
        help="Workload file (.json, .csv or plain text); '-' reads standard input (default).",
    )


def _add_verbose_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log scheduling decisions to standard error.",
    )


def configure_logging(verbose: bool) -> None:
    """
    Send package logs to stderr through Rich so the trace on stdout stays exact.
    """
    package_logger = logging.getLogger("kernel_sim")
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        package_logger.addHandler(handler)


def _load(source: str) -> ProcessRegistry:
    if source == "-":
        return load_registry(sys.stdin)
    return load_workload(source)


def _run(args: argparse.Namespace) -> int:
    config = SimulationConfig(
        quantum=args.quantum,
        output_format=args.output_format,
        show_summary=args.summary,
        show_gantt=args.gantt,
        step_delay=args.step_delay,
        verbose=args.verbose,
    ).validate()

    registry = _load(args.input)

    console = Console()
    if config.output_format == "rich":
        reporter = RichReporter(console, delay=config.step_delay)
    else:
        reporter = TextReporter(sys.stdout, delay=config.step_delay)

    result = simulate(registry, quantum=config.quantum, on_snapshot=reporter)
    reporter.finish()

    if config.show_summary:
        console.print()
        render_summary(result, console)

    if config.show_gantt:
        if config.output_format == "rich":
            panel, time_marks = build_rich_gantt(result.timeline)
            console.print(panel)
            if time_marks:
                console.print(time_marks)
        else:
            sys.stdout.write(render_gantt(result.timeline) + "\n")

    return 0


def _compare(args: argparse.Namespace) -> int:
    quanta = [check_quantum(q) for q in args.quanta]
    pairs = _load(args.input).pairs()

    console = Console()
    summary_table = Table(title="Quantum comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Steps", justify="right")
    summary_table.add_column("Avg completion step", justify="right")
    summary_table.add_column("Avg waiting steps", justify="right")
    summary_table.add_column("Throughput", justify="right")

    for quantum in quanta:
        result = simulate(ProcessRegistry.from_pairs(pairs), quantum=quantum)
        system = result.system
        summary_table.add_row(
            str(quantum),
            str(result.steps),
            f"{system.avg_completion_step:.2f}",
            f"{system.avg_waiting_steps:.2f}",
            f"{system.throughput:.3f}",
        )

    console.print(summary_table)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    # A bare invocation (or one starting with run options) means "run".
    if not argv or (argv[0] not in COMMANDS and argv[0] not in ("-h", "--help")):
        argv = ["run", *argv]

    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        if args.command == "run":
            return _run(args)
        if args.command == "compare":
            return _compare(args)
    except (SimulatorError, ValueError, OSError) as exc:
        logger.debug("aborting: %r", exc)
        err_console = Console(stderr=True, highlight=False, soft_wrap=True)
        err_console.print(f"Error: {exc}", style="red", markup=False)
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())

"""
Round-robin kernel simulator.

Models a fixed set of CPU-bound processes sharing a single core under a
fixed time quantum and reports the state of every process after each
scheduling step.
"""

__all__ = ["cli", "simulate"]

from .scheduler import simulate

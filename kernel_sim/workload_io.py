from __future__ import annotations

import csv
import json
import logging
import re
from pathlib import Path
from typing import IO, Iterable, Iterator, List, Mapping, Tuple, Union

from .errors import DuplicatePid, InvalidInput
from .registry import ProcessRegistry

logger = logging.getLogger(__name__)

Pair = Tuple[int, int]

# ASCII digits only, no underscores.
INT_TOKEN = re.compile(r"[+-]?[0-9]+")


def parse_workload(text: str) -> List[Pair]:
    """
    Parse the plain process list: a count ``N`` followed by ``N`` pairs of
    ``pid work``, all whitespace separated. Tokens after the last pair are
    ignored.
    """
    tokens = text.split()
    if not tokens:
        raise InvalidInput("Invalid input for number of processes")

    count = _to_int(tokens[0], "Invalid input for number of processes")
    if count <= 0:
        raise InvalidInput("Invalid number of processes", value=count)

    return validate_pairs(_token_pairs(tokens[1:], count))


def _token_pairs(tokens: List[str], count: int) -> Iterator[Tuple[str, str]]:
    for i in range(count):
        chunk = tokens[2 * i : 2 * i + 2]
        if len(chunk) < 2:
            raise InvalidInput("Invalid input format for process data")
        yield chunk[0], chunk[1]


def validate_pairs(raw_pairs: Iterable[Tuple[object, object]]) -> List[Pair]:
    """
    Convert and check ``(pid, work)`` values in input order, stopping at the
    first bad entry.
    """
    pairs: List[Pair] = []
    seen = set()
    for raw_pid, raw_work in raw_pairs:
        pid = _to_int(raw_pid, "Invalid input format for process data")
        work = _to_int(raw_work, "Invalid input format for process data")
        if work <= 0:
            raise InvalidInput(f"Invalid work units for PID {pid}", value=work)
        if pid in seen:
            raise DuplicatePid(pid)
        if pid <= 0:
            raise InvalidInput(f"Invalid PID {pid}", value=pid)
        seen.add(pid)
        pairs.append((pid, work))

    if not pairs:
        raise InvalidInput("Invalid number of processes", value=0)
    return pairs


def load_registry(source: Union[str, IO[str]]) -> ProcessRegistry:
    """
    Build a registry from plain-format text or a text stream.

    The registry is only created once the whole input has validated.
    """
    text = source if isinstance(source, str) else source.read()
    pairs = parse_workload(text)
    logger.debug("loaded %d processes", len(pairs))
    return ProcessRegistry.from_pairs(pairs)


def load_workload(path: Union[str, Path]) -> ProcessRegistry:
    """
    Load a workload file into a registry.

    ``.json`` files hold a list of ``{"pid": ..., "work": ...}`` objects,
    ``.csv`` files a ``pid,work`` header and one row per process; anything
    else is read as the plain count-then-pairs format.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        pairs = _load_json(path)
    elif suffix == ".csv":
        pairs = _load_csv(path)
    else:
        pairs = parse_workload(path.read_text(encoding="utf-8"))

    logger.debug("loaded %d processes from %s", len(pairs), path)
    return ProcessRegistry.from_pairs(pairs)


def _load_json(path: Path) -> List[Pair]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise InvalidInput(f"Invalid JSON workload: {exc}") from exc

    if not isinstance(raw, list):
        raise InvalidInput("JSON workload must be a list of process objects")

    return validate_pairs(_pair_from_mapping(entry) for entry in raw)


def _load_csv(path: Path) -> List[Pair]:
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        return validate_pairs(_pair_from_mapping(row) for row in reader)


def _pair_from_mapping(mapping: Mapping) -> Tuple[object, object]:
    try:
        pid = mapping["pid"]
        work = mapping["work"] if "work" in mapping else mapping["total_work"]
    except (KeyError, TypeError) as exc:
        raise InvalidInput(f"Invalid process entry: {mapping!r}") from exc
    return pid, work


def _to_int(token: object, message: str) -> int:
    # Reject bools and floats: only whole numbers written as integers count.
    if isinstance(token, bool) or token is None or isinstance(token, float):
        raise InvalidInput(message, value=token)
    text = str(token).strip()
    if not INT_TOKEN.fullmatch(text):
        raise InvalidInput(message, value=token)
    return int(text)

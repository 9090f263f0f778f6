from __future__ import annotations

import json
from collections import Counter
from pathlib import Path

from .errors import ModelLoadError
from .model import Machine
from .result import Err, Ok, Result
from .rodin import load_bcm
from .serialization import loads_machine


def check_labels(machine: Machine) -> str | None:
    """Return a description of the first repeated label, or None."""
    repeated = [label for label, n in Counter(e.label for e in machine.events).items() if n > 1]
    if repeated:
        return f"Duplicate event label {repeated[0]!r}"
    for event in machine.events:
        counts = Counter(g.label for g in event.guards)
        repeated = [label for label, n in counts.items() if n > 1]
        if repeated:
            return f"Duplicate guard label {repeated[0]!r} in event {event.label!r}"
    return None


def _load_json(path: Path) -> Result[Machine, ModelLoadError]:
    try:
        source = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(ModelLoadError(str(path), f"Could not read file: {e}"))
    try:
        return Ok(loads_machine(source))
    except json.JSONDecodeError as e:
        return Err(ModelLoadError(str(path), f"Invalid JSON: {e}"))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ModelLoadError(str(path), f"Malformed machine: {e}"))


def load_machine(path: str | Path) -> Result[Machine, ModelLoadError]:
    """Load a machine from a ``.json`` or Rodin ``.bcm`` file.

    Labels must be unique: events within the machine, guards within
    their event.
    """
    path = Path(path)
    match path.suffix:
        case ".json":
            result = _load_json(path)
        case ".bcm":
            result = load_bcm(path)
        case _:
            return Err(ModelLoadError(str(path), f"Unsupported file type {path.suffix!r}"))
    match result:
        case Ok(machine):
            problem = check_labels(machine)
            if problem is not None:
                return Err(ModelLoadError(str(path), problem))
    return result

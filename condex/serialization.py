"""JSON serialization for machines and extracted conditions.

Every object serializes to a dict with a "type" discriminator field.
Types are written in Rodin notation (``ℙ(S×ℤ)``) and parsed back with the
formula grammar.  Round-trip: machine_from_json(machine_to_json(m)) == m.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from .extractor import Condition, Conditions, EventConditions
from .formula import to_text
from .model import Event, Guard, Machine
from .result import Err, Ok
from .typecheck import parse_type
from .typesys import Type, type_to_text


def _expect(d: dict[str, Any], expected: str) -> None:
    if not isinstance(d, dict):
        raise TypeError(f"Expected a {expected!r} object, got {type(d).__name__}")
    t = d.get("type", expected)
    if t != expected:
        raise ValueError(f"Expected a {expected!r} object, got {t!r}")


def _text(d: dict[str, Any], key: str) -> str:
    value = d[key]
    if not isinstance(value, str):
        raise TypeError(f"{key!r} must be a string, got {type(value).__name__}")
    return value


def _list(d: dict[str, Any], key: str) -> list[Any]:
    value = d.get(key, [])
    if not isinstance(value, list):
        raise TypeError(f"{key!r} must be a list, got {type(value).__name__}")
    return value


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


def symbols_to_json(symbols: Mapping[str, Type]) -> dict[str, str]:
    return {name: type_to_text(t) for name, t in symbols.items()}


def symbols_from_json(d: dict[str, str]) -> Mapping[str, Type]:
    if not isinstance(d, dict):
        raise TypeError(f"Symbols must be an object, got {type(d).__name__}")
    symbols: dict[str, Type] = {}
    for name, text in d.items():
        if not isinstance(text, str):
            raise TypeError(f"Bad type for {name}: {text!r}")
        match parse_type(text):
            case Ok(t):
                symbols[name] = t
            case Err(error):
                raise ValueError(f"Bad type for {name}: {error}") from error
    return MappingProxyType(symbols)


# ---------------------------------------------------------------------------
# Machines
# ---------------------------------------------------------------------------


def guard_to_json(g: Guard) -> dict[str, Any]:
    return {
        "type": "guard",
        "label": g.label,
        "predicate": g.predicate,
        "theorem": g.theorem,
    }


def guard_from_json(d: dict[str, Any]) -> Guard:
    _expect(d, "guard")
    theorem = d.get("theorem", False)
    if not isinstance(theorem, bool):
        raise TypeError(f"'theorem' must be a boolean, got {type(theorem).__name__}")
    return Guard(label=_text(d, "label"), predicate=_text(d, "predicate"), theorem=theorem)


def event_to_json(e: Event) -> dict[str, Any]:
    return {
        "type": "event",
        "label": e.label,
        "parameters": symbols_to_json(e.parameters),
        "guards": [guard_to_json(g) for g in e.guards],
    }


def event_from_json(d: dict[str, Any]) -> Event:
    _expect(d, "event")
    return Event(
        label=_text(d, "label"),
        guards=tuple(guard_from_json(g) for g in _list(d, "guards")),
        parameters=symbols_from_json(d.get("parameters", {})),
    )


def machine_to_json(m: Machine) -> dict[str, Any]:
    return {
        "type": "machine",
        "name": m.name,
        "carrier_sets": list(m.carrier_sets),
        "constants": symbols_to_json(m.constants),
        "variables": symbols_to_json(m.variables),
        "events": [event_to_json(e) for e in m.events],
    }


def machine_from_json(d: dict[str, Any]) -> Machine:
    _expect(d, "machine")
    carrier_sets = _list(d, "carrier_sets")
    if not all(isinstance(s, str) for s in carrier_sets):
        raise TypeError(f"'carrier_sets' must hold strings, got {carrier_sets!r}")
    return Machine(
        name=_text(d, "name"),
        events=tuple(event_from_json(e) for e in _list(d, "events")),
        carrier_sets=tuple(carrier_sets),
        constants=symbols_from_json(d.get("constants", {})),
        variables=symbols_from_json(d.get("variables", {})),
    )


# ---------------------------------------------------------------------------
# Conditions
# ---------------------------------------------------------------------------


def condition_to_json(c: Condition) -> dict[str, Any]:
    return {
        "type": "condition",
        "id": c.identifier,
        "predicate": to_text(c.predicate),
        "wd": c.wd_predicate,
    }


def event_conditions_to_json(e: EventConditions) -> dict[str, Any]:
    return {
        "type": "event_conditions",
        "label": e.label,
        "conditions": [condition_to_json(c) for c in e],
    }


def conditions_to_json(c: Conditions) -> dict[str, Any]:
    return {
        "type": "conditions",
        "machine": c.machine,
        "events": [event_conditions_to_json(e) for e in c],
    }


# ---------------------------------------------------------------------------
# Convenience: dump / load as JSON strings
# ---------------------------------------------------------------------------


def dumps_machine(m: Machine) -> str:
    return json.dumps(machine_to_json(m), indent=2, ensure_ascii=False)


def loads_machine(s: str) -> Machine:
    return machine_from_json(json.loads(s))


def dumps_conditions(c: Conditions) -> str:
    return json.dumps(conditions_to_json(c), indent=2, ensure_ascii=False)

"""Tests for condex.extractor."""

from __future__ import annotations

import logging

import pytest

from condex.errors import ParseError, TypeCheckError
from condex.extractor import ConditionsExtractor, condition_id, extract_conditions
from condex.formula import to_text
from condex.model import Event, Guard, Machine
from condex.serialization import dumps_conditions
from condex.typesys import GivenType, IntegerType, PowerSetType

Z = IntegerType()


def _machine(*events: Event) -> Machine:
    return Machine(
        name="M",
        events=events,
        carrier_sets=("S",),
        constants={"k": Z},
        variables={"a": Z, "b": Z, "c": Z, "d": Z, "s": PowerSetType(Z)},
    )


def _event(label: str, *guards: tuple[str, str]) -> Event:
    return Event(label, tuple(Guard(gl, source) for gl, source in guards))


def _rows(machine: Machine, event: str) -> list[tuple[str, str, str]]:
    conditions = extract_conditions(machine)
    return [(c.identifier, to_text(c.predicate), c.wd_predicate) for c in conditions[event]]


def test_condition_id() -> None:
    assert condition_id("grd1", 3) == "grd1/3"


def test_worked_example() -> None:
    m = _machine(_event("evt", ("guard", "((a=b) ⇒ (c≠a)) ∧ ((a≠b) ⇒ (a=c))")))
    assert _rows(m, "evt") == [("guard/1", "a=b", "⊤"), ("guard/2", "c≠a", "⊤")]


def test_dedup_across_guards_renumbers_densely() -> None:
    m = _machine(
        _event(
            "evt",
            ("G1", "a = b ∧ c ≠ a"),
            ("G2", "a ≠ b ∨ a = c ∨ d < a ∨ k ≤ d"),
        )
    )
    rows = _rows(m, "evt")
    assert [(i, t) for i, t, _ in rows] == [
        ("G1/1", "a=b"),
        ("G1/2", "c≠a"),
        ("G2/1", "d<a"),
        ("G2/2", "k≤d"),
    ]


def test_events_are_independent() -> None:
    m = _machine(_event("e1", ("g", "a = b")), _event("e2", ("g", "b = a")))
    conditions = extract_conditions(m)
    assert [e.label for e in conditions] == ["e1", "e2"]
    assert conditions["e2"].identifiers == ("g/1",)


def test_event_without_guards() -> None:
    m = _machine(Event("INITIALISATION"), _event("evt", ("g", "a > 0")))
    conditions = extract_conditions(m)
    assert len(conditions["INITIALISATION"]) == 0
    assert conditions.total == 1


def test_well_definedness_of_conditions() -> None:
    m = _machine(_event("evt", ("g", "b ≠ 0 ⇒ a ÷ b > 1"), ("h", "card(s) > 0")))
    assert _rows(m, "evt") == [
        ("g/1", "b≠0", "⊤"),
        ("g/2", "a÷b>1", "b≠0"),
        ("h/1", "card(s)>0", "finite(s)"),
    ]


def test_lookup_by_identifier() -> None:
    m = _machine(_event("evt", ("g", "a ∈ {1, 2}")))
    evt = extract_conditions(m)["evt"]
    assert evt.identifiers == ("g/1", "g/2")
    assert to_text(evt["g/2"].predicate) == "a=2"


def test_parameters_and_carrier_sets_are_in_scope() -> None:
    evt = Event(
        "evt",
        (Guard("g", "p ∈ S ∧ q > a"),),
        parameters={"p": GivenType("S"), "q": Z},
    )
    conditions = extract_conditions(_machine(evt))
    assert conditions["evt"].identifiers == ("g/1", "g/2")


def test_extraction_is_idempotent() -> None:
    m = _machine(
        _event("evt", ("g1", "a ∈ {b, c} ∨ a ÷ d = 0"), ("g2", "c = a ⇒ d ≥ b")),
        _event("other", ("g1", "s ⊆ 1‥k")),
    )
    assert dumps_conditions(extract_conditions(m)) == dumps_conditions(extract_conditions(m))


def test_extractor_computes_eagerly() -> None:
    m = _machine(_event("evt", ("g", "a = b")))
    extractor = ConditionsExtractor(m)
    assert extractor.conditions.machine == "M"
    assert extractor.conditions["evt"].identifiers == ("g/1",)


def test_parse_error_aborts_extraction() -> None:
    m = _machine(
        _event("ok", ("g", "a = b")),
        _event("broken", ("g1", "a = b"), ("bad", "a = = b")),
    )
    with pytest.raises(ParseError) as exc:
        extract_conditions(m)
    assert exc.value.label == "bad"
    assert exc.value.source == "a = = b"
    assert str(exc.value).startswith("Cannot parse guard bad: a = = b:")


def test_type_error_aborts_extraction() -> None:
    m = _machine(_event("evt", ("g", "a = b"), ("typo", "a = TRUE")))
    with pytest.raises(TypeCheckError) as exc:
        extract_conditions(m)
    assert exc.value.label == "typo"
    assert exc.value.formula_text == "a=TRUE"
    assert "Types ℤ and BOOL do not match in a=TRUE" in exc.value.problems


def test_totals_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    m = _machine(_event("evt", ("g", "a = b ∧ b < c")))
    with caplog.at_level(logging.INFO, logger="condex.extractor"):
        extract_conditions(m)
    assert "Extracted 2 condition(s) from 1 event(s) of M" in caplog.text


def test_event_environment_shadows_machine_symbols() -> None:
    m = Machine(
        name="M",
        events=(Event("evt", parameters={"c": GivenType("S"), "k": GivenType("S")}),),
        carrier_sets=("S",),
        constants={"k": Z},
        variables={"c": Z, "v": Z},
    )
    machine_env = m.environment()
    assert machine_env.name == "M"
    assert machine_env.get("c") == Z
    env = m.type_environment(m.events[0])
    assert env.name == "M.evt"
    assert env.get("S") == PowerSetType(GivenType("S"))
    assert env.get("c") == GivenType("S")
    assert env.get("k") == GivenType("S")
    assert env.get("v") == Z
    assert "c" in env and "missing" not in env

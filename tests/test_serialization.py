"""Round-trip tests for machine serialization and the conditions JSON."""

import json

import pytest

from condex import Event, Guard, Machine, dumps_machine, loads_machine
from condex.extractor import extract_conditions
from condex.serialization import conditions_to_json, machine_from_json
from condex.typesys import BooleanType, GivenType, IntegerType, PowerSetType, ProductType


def _machine() -> Machine:
    return Machine(
        name="Library",
        events=(
            Event(
                "borrow",
                (
                    Guard("grd1", "b ∈ BOOK ∖ dom(loans)"),
                    Guard("grd2", "card(loans) < limit", theorem=True),
                ),
                parameters={"b": GivenType("BOOK")},
            ),
            Event("reset"),
        ),
        carrier_sets=("BOOK", "MEMBER"),
        constants={"limit": IntegerType()},
        variables={
            "loans": PowerSetType(ProductType(GivenType("BOOK"), GivenType("MEMBER"))),
            "open": BooleanType(),
        },
    )


def test_machine_round_trip() -> None:
    m = _machine()
    assert loads_machine(dumps_machine(m)) == m


def test_types_are_written_in_rodin_notation() -> None:
    d = json.loads(dumps_machine(_machine()))
    assert d["type"] == "machine"
    assert d["variables"] == {"loans": "ℙ(BOOK×MEMBER)", "open": "BOOL"}
    assert d["events"][0]["guards"][1] == {
        "type": "guard",
        "label": "grd2",
        "predicate": "card(loans) < limit",
        "theorem": True,
    }


def test_ascii_types_are_accepted() -> None:
    m = machine_from_json(
        {"type": "machine", "name": "M", "variables": {"r": "POW(INTEGER ** BOOL)"}}
    )
    assert m.variables["r"] == PowerSetType(ProductType(IntegerType(), BooleanType()))


def test_bad_type_is_rejected() -> None:
    with pytest.raises(ValueError, match="Bad type for x"):
        machine_from_json({"type": "machine", "name": "M", "variables": {"x": "1 + 2"}})


def test_wrong_discriminator_is_rejected() -> None:
    with pytest.raises(ValueError, match="Expected a 'machine' object"):
        machine_from_json({"type": "event", "name": "M"})


def test_conditions_json() -> None:
    d = conditions_to_json(extract_conditions(_machine()))
    assert d["type"] == "conditions"
    assert d["machine"] == "Library"
    assert [e["label"] for e in d["events"]] == ["borrow", "reset"]
    assert d["events"][0]["conditions"] == [
        {"type": "condition", "id": "grd1/1", "predicate": "b∈BOOK∖dom(loans)", "wd": "⊤"},
        {"type": "condition", "id": "grd2/1", "predicate": "card(loans)<limit", "wd": "finite(loans)"},
    ]
    assert d["events"][1]["conditions"] == []

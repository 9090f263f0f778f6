"""Tests for condex.wd and the formula service."""

from __future__ import annotations

import pytest

from condex.grammar import parse_predicate
from condex.result import Err, Ok, unwrap
from condex.service import EventBFormulaService
from condex.typecheck import type_check
from condex.typesys import IntegerType, PowerSetType, ProductType, TypeEnvironment
from condex.wd import well_definedness_text

Z = IntegerType()

ENV = TypeEnvironment(
    "m.evt",
    {
        "x": Z,
        "y": Z,
        "z": Z,
        "s": PowerSetType(Z),
        "b": PowerSetType(Z),
        "f": PowerSetType(ProductType(Z, Z)),
    },
)


def _wd(source: str) -> str:
    typed = unwrap(type_check(unwrap(parse_predicate(source)), ENV))
    return well_definedness_text(typed)


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("x = y", "⊤"),
        ("x ÷ y > 1", "y≠0"),
        ("x mod y = 0", "0≤x∧0<y"),
        ("x ^ y > 1", "0≤x∧0≤y"),
        ("card(s) > 0", "finite(s)"),
        ("f(x) = 1", "x∈dom(f)∧f∈ℤ ⇸ ℤ"),
        ("min(s) > 0", "s≠∅∧(∃b·∀x·x∈s⇒b≤x)"),
        ("max(b) > 0", "b≠∅∧(∃b0·∀x·x∈b⇒b0≥x)"),
    ],
)
def test_expression_rules(source: str, expected: str) -> None:
    assert _wd(source) == expected


def test_implication_guards_right_operand() -> None:
    assert _wd("x > 0 ⇒ y ÷ x = 1") == "x>0⇒x≠0"


def test_disjunction() -> None:
    assert _wd("x = 0 ∨ y ÷ x = 1") == "x=0∨x≠0"


def test_conjunction_accumulates_left_operands() -> None:
    assert _wd("x ≠ 0 ∧ y ÷ x = 1 ∧ z ÷ y = 2") == "(x≠0⇒x≠0)∧(x≠0∧y÷x=1⇒y≠0)"


def test_equivalence() -> None:
    assert _wd("x ÷ y = 1 ⇔ z ÷ x = 1") == "y≠0∧x≠0"


def test_quantifier() -> None:
    assert _wd("∀v·v ∈ s ⇒ x ÷ v > 0") == "∀v·v∈s⇒v≠0"
    assert _wd("∃v·v ∈ s") == "⊤"


def test_negation_is_transparent() -> None:
    assert _wd("¬(x ÷ y = 0)") == "y≠0"


class TestFormulaService:
    @pytest.fixture(autouse=True)
    def _setup(self) -> None:
        self.service = EventBFormulaService()

    def test_parse_error_names_guard(self) -> None:
        result = self.service.parse("x = = 1", "grd7")
        match result:
            case Err(error):
                assert error.label == "grd7"
                assert str(error).startswith("Cannot parse guard grd7: x = = 1:")
            case Ok(_):
                pytest.fail("expected a parse error")

    def test_well_definedness_requires_types(self) -> None:
        predicate = unwrap(self.service.parse("x ÷ y = 1", "grd1"))
        with pytest.raises(ValueError, match="not been type-checked"):
            self.service.well_definedness_text(predicate)

    def test_type_check_then_well_definedness(self) -> None:
        predicate = unwrap(self.service.parse("x ÷ y = 1", "grd1"))
        typed = unwrap(self.service.type_check(predicate, ENV))
        assert self.service.well_definedness_text(typed) == "y≠0"

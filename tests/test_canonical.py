"""Tests for condex.canonical."""

from __future__ import annotations

import itertools

import pytest

from condex.canonical import canonical_form, normalize
from condex.formula import RelOp, to_text
from condex.grammar import parse_predicate
from condex.helpers import eq, ge, gt, ident, le, lt, neq, rel
from condex.result import unwrap

a, b = ident("a"), ident("b")

ORDERED = [RelOp.EQUAL, RelOp.NOTEQUAL, RelOp.LT, RelOp.LE, RelOp.GT, RelOp.GE]


def _key(source: str) -> str:
    return canonical_form(unwrap(parse_predicate(source)))


def test_symmetry() -> None:
    assert canonical_form(eq(a, b)) == canonical_form(eq(b, a))
    assert canonical_form(neq(a, b)) == canonical_form(neq(b, a))
    assert canonical_form(lt(a, b)) == canonical_form(gt(b, a))
    assert canonical_form(le(a, b)) == canonical_form(ge(b, a))


def test_relation_and_its_negation_coincide() -> None:
    assert canonical_form(eq(a, b)) == canonical_form(neq(a, b))
    assert canonical_form(lt(a, b)) == canonical_form(ge(a, b))
    assert canonical_form(le(a, b)) == canonical_form(gt(a, b))


def test_all_comparisons_in_both_orders() -> None:
    groups: dict[str, set[str]] = {}
    for op, (left, right) in itertools.product(ORDERED, [(a, b), (b, a)]):
        p = rel(op, left, right)
        groups.setdefault(canonical_form(p), set()).add(to_text(p))

    assert groups == {
        "a=b": {"a=b", "b=a", "a≠b", "b≠a"},
        "a<b": {"a<b", "b>a", "a≥b", "b≤a"},
        "a≤b": {"a≤b", "b≥a", "a>b", "b<a"},
    }


@pytest.mark.parametrize(
    ("negative", "positive"),
    [("x ∉ S", "x ∈ S"), ("S ⊄ T", "S ⊂ T"), ("S ⊈ T", "S ⊆ T")],
)
def test_negated_set_relations(negative: str, positive: str) -> None:
    assert _key(negative) == _key(positive)


def test_set_relations_are_not_swapped() -> None:
    assert _key("S ⊆ T") != _key("T ⊆ S")
    assert _key("S ⊂ T") != _key("S ⊆ T")


def test_operands_compared_by_text() -> None:
    assert _key("x + 1 = y") == _key("y = x + 1")
    assert _key("f(x) > card(S)") == _key("card(S) < f(x)")


def test_normalize_reaches_terminal_tags() -> None:
    for op, (left, right) in itertools.product(ORDERED, [(a, b), (b, a)]):
        assert normalize(rel(op, left, right)).op in (RelOp.EQUAL, RelOp.LT, RelOp.LE)


def test_non_relations_are_their_own_text() -> None:
    for source in ("⊤", "finite(S)", "∀x·x > 0"):
        p = unwrap(parse_predicate(source))
        assert canonical_form(p) == to_text(p)

"""Tests for condex.splitter."""

from __future__ import annotations

import pytest

from condex.formula import Predicate, to_text
from condex.grammar import parse_predicate
from condex.helpers import eq, ident, inter, member, not_member, set_of, subseteq, union
from condex.result import unwrap
from condex.splitter import split


def _p(source: str) -> Predicate:
    return unwrap(parse_predicate(source))


def _split(source: str) -> list[str]:
    return [to_text(c) for c in split(_p(source))]


def test_worked_example() -> None:
    assert _split("((a=b) ⇒ (c≠a)) ∧ ((a≠b) ⇒ (a=c))") == ["a=b", "c≠a", "a≠b", "a=c"]


@pytest.mark.parametrize("op", ["=", "≠", "<", "≤", ">", "≥"])
def test_comparisons_are_conditions(op: str) -> None:
    p = _p(f"a + 1 {op} f(b)")
    assert split(p) == [p]


@pytest.mark.parametrize(
    ("left", "right"),
    [
        ("a = b", "c < d"),
        ("a = b ∧ c = d", "e ∈ {f, g}"),
        ("¬(a = b ∨ c = d)", "x ∈ A ∪ B"),
    ],
)
def test_connectives_split_into_operands(left: str, right: str) -> None:
    expected = _split(f"({left})") + _split(f"({right})")
    assert _split(f"({left}) ⇒ ({right})") == expected
    assert _split(f"({left}) ⇔ ({right})") == expected
    assert _split(f"({left}) ∧ ({right})") == expected
    assert _split(f"({left}) ∨ ({right})") == expected


def test_n_ary_conjunction_keeps_order() -> None:
    assert _split("a = 1 ∧ b = 2 ∧ c = 3 ∧ d = 4") == ["a=1", "b=2", "c=3", "d=4"]


def test_negation() -> None:
    assert _split("¬(a = b ⇒ c ≠ d)") == ["a=b", "c≠d"]


def test_membership_in_set_extension() -> None:
    assert _split("x ∈ {a, b, c}") == ["x=a", "x=b", "x=c"]
    assert _split("x ∉ {a, b}") == ["x=a", "x=b"]


def test_membership_in_union_and_intersection() -> None:
    assert _split("x ∈ A ∪ B") == ["x∈A", "x∈B"]
    assert _split("x ∉ A ∩ B ∩ C") == ["x∈A", "x∈B", "x∈C"]


def test_expansions_nest() -> None:
    assert _split("x ∈ A ∪ {b, c}") == ["x∈A", "x=b", "x=c"]


def test_subseteq_of_set_extension() -> None:
    assert _split("{a, b} ⊆ S") == ["a∈S", "b∈S"]
    assert _split("{a, b} ⊈ S ∪ T") == ["a∈S", "a∈T", "b∈S", "b∈T"]


@pytest.mark.parametrize("source", ["x ∈ S", "S ⊆ T", "{a, b} ⊂ S", "S ⊄ {a}", "S ⊆ {a, b}"])
def test_other_set_relations_are_conditions(source: str) -> None:
    p = _p(source)
    assert split(p) == [p]


@pytest.mark.parametrize("source", ["⊤", "finite(S)", "∀x·x ∈ S ⇒ x > 0"])
def test_other_shapes_are_conditions(source: str) -> None:
    p = _p(source)
    assert split(p) == [p]


def test_expansion_spliced_in_place() -> None:
    assert _split("a = 0 ∧ x ∈ {b, c} ∧ d > 1") == ["a=0", "x=b", "x=c", "d>1"]


def test_built_trees_split_like_parsed_ones() -> None:
    x, a, b, s, t = (ident(n) for n in ("x", "a", "b", "S", "T"))
    assert split(not_member(x, inter(s, t))) == [member(x, s), member(x, t)]
    assert split(member(x, union(s, set_of(a, b)))) == [member(x, s), eq(x, a), eq(x, b)]
    assert split(subseteq(set_of(a, b), s)) == split(_p("{a, b} ⊆ S"))

"""Tests for condex.grammar: Unicode and ASCII notation, priorities, errors."""

from __future__ import annotations

import pytest

from condex.errors import ParseError
from condex.formula import (
    AssocExprOp,
    AssociativeExpression,
    AtomicExpression,
    AtomicOp,
    BinaryExpression,
    BinaryExprOp,
    Expression,
    FunctionApplication,
    IntegerLiteral,
    LiteralOp,
    LiteralPredicate,
    Predicate,
    UnaryExpression,
    UnaryExprOp,
    to_text,
)
from condex.grammar import parse_expression, parse_predicate
from condex.helpers import (
    eq,
    exists,
    finite,
    forall,
    gt,
    ident,
    iff,
    implies,
    land,
    lor,
    member,
    neq,
    not_,
    num,
    set_of,
)
from condex.result import Err, Ok, unwrap

a, b, c, x, y, z = (ident(n) for n in "abcxyz")


def _p(source: str) -> Predicate:
    return unwrap(parse_predicate(source))


def _e(source: str) -> Expression:
    return unwrap(parse_expression(source))


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def test_unicode_and_ascii_notation_agree() -> None:
    unicode = _p("x ∈ {a, b} ∧ (y ≠ 0 ⇒ z ÷ y > 1)")
    ascii = _p("x : {a, b} & (y /= 0 => z / y > 1)")
    assert unicode == ascii
    assert to_text(unicode) == "x∈{a,b}∧(y≠0⇒z÷y>1)"


def test_worked_example_structure() -> None:
    p = _p("((a=b) ⇒ (c≠a)) ∧ ((a≠b) ⇒ (a=c))")
    assert p == land(implies(eq(a, b), neq(c, a)), implies(neq(a, b), eq(a, c)))


def test_conjunction_is_flat() -> None:
    assert _p("a=b ∧ b=c ∧ c=a") == land(eq(a, b), eq(b, c), eq(c, a))


def test_disjunction_keyword() -> None:
    assert _p("a = b or a = c") == lor(eq(a, b), eq(a, c))


def test_negation_binds_tighter_than_conjunction() -> None:
    assert _p("¬a=b ∧ c=a") == land(not_(eq(a, b)), eq(c, a))
    assert _p("not a = b & c = a") == land(not_(eq(a, b)), eq(c, a))


def test_equivalence_binds_looser_than_implication() -> None:
    assert _p("a=b ⇒ b=c ⇔ c=a") == iff(implies(eq(a, b), eq(b, c)), eq(c, a))


def test_quantifiers() -> None:
    expected = forall(["x"], implies(member(x, ident("S")), gt(x, num(0))))
    assert _p("∀x·x ∈ S ⇒ x > 0") == expected
    assert _p("!x. x : S => x > 0") == expected
    assert _p("∃x,y·x = y") == exists(["x", "y"], eq(x, y))
    assert to_text(expected) == "∀x·x∈S⇒x>0"


def test_literals_and_finite() -> None:
    assert _p("⊤") == LiteralPredicate(LiteralOp.TRUE)
    assert _p("false") == LiteralPredicate(LiteralOp.FALSE)
    assert _p("finite(S)") == finite(ident("S"))


def test_parenthesized_expression_on_left_of_relation() -> None:
    assert _p("(a + b) = c") == eq(AssociativeExpression(AssocExprOp.PLUS, (a, b)), c)


def test_set_relations_ascii() -> None:
    assert to_text(_p("{a, b} <: S")) == "{a,b}⊆S"
    assert to_text(_p("a /: S")) == "a∉S"
    assert to_text(_p("A /<<: B")) == "A⊄B"


def test_mixed_conjunction_and_disjunction_rejected() -> None:
    result = parse_predicate("a = b ∧ b = c ∨ c = a")
    match result:
        case Err(error):
            assert "must be parenthesized" in error.problems[0]
        case Ok(_):
            pytest.fail("mixing ∧ and ∨ should not parse")


def test_syntax_error_position() -> None:
    result = parse_predicate("x = ")
    assert isinstance(result, Err)
    assert isinstance(result.error, ParseError)
    assert result.error.problems[0].startswith("Syntax error at line 1")
    assert str(result.error).startswith("Cannot parse formula: x = :")


def test_trailing_garbage_rejected() -> None:
    assert isinstance(parse_predicate("x = 1 )"), Err)


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


def test_product_binds_tighter_than_sum() -> None:
    assert _e("a + b ∗ c") == AssociativeExpression(
        AssocExprOp.PLUS, (a, AssociativeExpression(AssocExprOp.MUL, (b, c)))
    )


def test_sum_chain_is_one_node() -> None:
    assert _e("a + b + c") == AssociativeExpression(AssocExprOp.PLUS, (a, b, c))


def test_subtraction_is_left_associative() -> None:
    e = _e("a - b - c")
    assert e == BinaryExpression(BinaryExprOp.MINUS, BinaryExpression(BinaryExprOp.MINUS, a, b), c)
    assert to_text(e) == "a−b−c"
    assert to_text(_e("a − (b − c)")) == "a−(b−c)"


def test_negative_numbers_and_unary_minus() -> None:
    assert _e("−1") == IntegerLiteral(-1)
    assert _e("-x") == UnaryExpression(UnaryExprOp.UNMINUS, x)
    assert to_text(_p("x = −1")) == "x=−1"


def test_function_application_and_builtins() -> None:
    assert _p("f(x) = card(S)") == eq(
        FunctionApplication(ident("f"), x), UnaryExpression(UnaryExprOp.CARD, ident("S"))
    )


def test_atomic_expressions() -> None:
    assert _e("ℕ1") == AtomicExpression(AtomicOp.NATURAL1)
    assert _e("NAT") == AtomicExpression(AtomicOp.NATURAL)
    assert _e("{}") == AtomicExpression(AtomicOp.EMPTYSET)
    assert _e("∅") == AtomicExpression(AtomicOp.EMPTYSET)


def test_maplet_and_relations() -> None:
    assert _p("x |-> y : r") == member(BinaryExpression(BinaryExprOp.MAPSTO, x, y), ident("r"))
    assert to_text(_p("f ∈ S +-> T")) == "f∈S ⇸ T"


def test_identifier_starting_with_keyword() -> None:
    assert _e("order") == ident("order")
    assert _e("cardinal") == ident("cardinal")


def test_set_extension_text() -> None:
    assert to_text(_p("x ∈ {a, b, c}")) == "x∈{a,b,c}"
    assert _p("x ∈ {a}") == member(x, set_of(a))

"""Well-definedness predicates.

WD(F) is the condition under which every operator application in F is
meaningful: a divisor is not zero, a function is applied inside its
domain, a cardinality is taken of a finite set, and so on.  Connectives
are read left to right, so the right operand only needs to be defined
where the left one allows it to be evaluated:

    WD(P ∧ Q) = WD(P) ∧ (P ⇒ WD(Q))
    WD(P ∨ Q) = WD(P) ∧ (P ∨ WD(Q))
    WD(P ⇒ Q) = WD(P) ∧ (P ⇒ WD(Q))
    WD(P ⇔ Q) = WD(P) ∧ WD(Q)
    WD(∀x·P) = WD(∃x·P) = ∀x·WD(P)

⊤ operands are simplified away; a formula without partial operators has
the well-definedness predicate ⊤.
"""

from __future__ import annotations

from typing import assert_never

from .formula import (
    TRUE,
    AssocPredOp,
    AssociativeExpression,
    AssociativePredicate,
    AtomicExpression,
    AtomicOp,
    BinaryExpression,
    BinaryExprOp,
    BinaryPredicate,
    BinaryPredOp,
    Expression,
    FinitePredicate,
    FunctionApplication,
    Identifier,
    IntegerLiteral,
    LiteralPredicate,
    Predicate,
    QuantifiedPredicate,
    RelationalPredicate,
    SetExtension,
    UnaryExpression,
    UnaryExprOp,
    UnaryPredicate,
    to_text,
)
from .helpers import empty_set, exists, finite, forall, ge, implies, land, le, lor, lt, member, neq, num
from .typecheck import iter_expressions
from .typesys import BooleanType, GivenType, IntegerType, PowerSetType, ProductType, Type


def type_expression(t: Type) -> Expression:
    """The set denoted by a type, e.g. ℙ(S×ℤ) for the type ℙ(S×ℤ)."""
    if isinstance(t, IntegerType):
        return AtomicExpression(AtomicOp.INTEGER)
    if isinstance(t, BooleanType):
        return AtomicExpression(AtomicOp.BOOL)
    if isinstance(t, GivenType):
        return Identifier(t.name)
    if isinstance(t, PowerSetType):
        return UnaryExpression(UnaryExprOp.POW, type_expression(t.base))
    if isinstance(t, ProductType):
        return BinaryExpression(BinaryExprOp.CPROD, type_expression(t.left), type_expression(t.right))
    assert_never(t)


def _fresh(base: str, used: set[str]) -> str:
    name = base
    suffix = 0
    while name in used:
        name = f"{base}{suffix}"
        suffix += 1
    used.add(name)
    return name


def _guarded(antecedent: Predicate, wd: Predicate) -> Predicate:
    if wd == TRUE:
        return TRUE
    return implies(antecedent, wd)


def _bounded(e: UnaryExpression) -> Predicate:
    # min(S) and max(S) need S non-empty and bounded below (above).
    s = e.child
    used = {x.name for x in iter_expressions(s) if isinstance(x, Identifier)}
    bound = Identifier(_fresh("b", used))
    x = Identifier(_fresh("x", used))
    if e.op is UnaryExprOp.MIN:
        comparison = le(bound, x)
    else:
        comparison = ge(bound, x)
    return land(
        neq(s, empty_set()),
        exists([bound.name], forall([x.name], implies(member(x, s), comparison))),
    )


def _expression_wd(e: Expression) -> Predicate:
    if isinstance(e, (Identifier, IntegerLiteral, AtomicExpression)):
        return TRUE
    if isinstance(e, SetExtension):
        return land(*(_expression_wd(m) for m in e.members))
    if isinstance(e, UnaryExpression):
        child = _expression_wd(e.child)
        match e.op:
            case UnaryExprOp.CARD:
                return land(child, finite(e.child))
            case UnaryExprOp.MIN | UnaryExprOp.MAX:
                return land(child, _bounded(e))
            case (
                UnaryExprOp.DOM | UnaryExprOp.RAN | UnaryExprOp.POW
                | UnaryExprOp.POW1 | UnaryExprOp.UNMINUS
            ):
                return child
            case _:
                assert_never(e.op)
    if isinstance(e, BinaryExpression):
        operands = land(_expression_wd(e.left), _expression_wd(e.right))
        match e.op:
            case BinaryExprOp.DIV:
                return land(operands, neq(e.right, num(0)))
            case BinaryExprOp.MOD:
                return land(operands, le(num(0), e.left), lt(num(0), e.right))
            case BinaryExprOp.EXPN:
                return land(operands, le(num(0), e.left), le(num(0), e.right))
            case _:
                return operands
    if isinstance(e, AssociativeExpression):
        return land(*(_expression_wd(c) for c in e.children))
    if isinstance(e, FunctionApplication):
        t = e.function.type
        if not isinstance(t, PowerSetType) or not isinstance(t.base, ProductType):
            raise ValueError(f"Function {to_text(e.function)} has not been type-checked")
        partial = BinaryExpression(
            BinaryExprOp.PFUN, type_expression(t.base.left), type_expression(t.base.right)
        )
        return land(
            _expression_wd(e.function),
            _expression_wd(e.argument),
            member(e.argument, UnaryExpression(UnaryExprOp.DOM, e.function)),
            member(e.function, partial),
        )
    assert_never(e)


def well_definedness(p: Predicate) -> Predicate:
    """Compute WD(p) for a type-checked predicate."""
    if isinstance(p, LiteralPredicate):
        return TRUE
    if isinstance(p, RelationalPredicate):
        return land(_expression_wd(p.left), _expression_wd(p.right))
    if isinstance(p, FinitePredicate):
        return _expression_wd(p.expression)
    if isinstance(p, UnaryPredicate):
        return well_definedness(p.child)
    if isinstance(p, BinaryPredicate):
        match p.op:
            case BinaryPredOp.IMPLIES:
                return land(well_definedness(p.left), _guarded(p.left, well_definedness(p.right)))
            case BinaryPredOp.EQUIV:
                return land(well_definedness(p.left), well_definedness(p.right))
            case _:
                assert_never(p.op)
    if isinstance(p, AssociativePredicate):
        parts = [well_definedness(p.children[0])]
        for i in range(1, len(p.children)):
            wd = well_definedness(p.children[i])
            if wd == TRUE:
                continue
            before = p.children[:i]
            match p.op:
                case AssocPredOp.AND:
                    parts.append(_guarded(land(*before), wd))
                case AssocPredOp.OR:
                    parts.append(lor(*before, wd))
                case _:
                    assert_never(p.op)
        return land(*parts)
    if isinstance(p, QuantifiedPredicate):
        wd = well_definedness(p.body)
        if wd == TRUE:
            return TRUE
        return forall(list(p.bound), wd)
    assert_never(p)


def well_definedness_text(p: Predicate) -> str:
    return to_text(well_definedness(p))

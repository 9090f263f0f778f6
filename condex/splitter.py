"""Decomposition of guards into elementary conditions.

Connectives are always taken apart: ``P ⇒ Q``, ``P ⇔ Q``, ``P ∧ Q ∧ R``,
``P ∨ Q`` and ``¬P`` contribute the conditions of their operands, left
to right.  Comparisons (= ≠ < ≤ > ≥) are conditions.  Set relations are
expanded where the set is given explicitly:

    x ∈ {a, b}      →  x = a,  x = b
    x ∈ A ∪ B       →  x ∈ A,  x ∈ B
    {a, b} ⊆ S      →  a ∈ S,  b ∈ S

and are conditions otherwise.  Literals, quantified predicates and
finite(S) are conditions as they stand.
"""

from __future__ import annotations

from collections import deque
from typing import assert_never

from .formula import (
    AssocExprOp,
    AssociativeExpression,
    AssociativePredicate,
    BinaryPredicate,
    FinitePredicate,
    LiteralPredicate,
    Predicate,
    QuantifiedPredicate,
    RelationalPredicate,
    RelOp,
    SetExtension,
    UnaryPredicate,
)
from .helpers import eq, member


def split(predicate: Predicate) -> list[Predicate]:
    """Return the conditions of `predicate` in pre-order, first operand first."""
    pending: deque[Predicate] = deque([predicate])
    conditions: list[Predicate] = []
    while pending:
        p = pending.popleft()
        parts = _decompose(p)
        if parts is None:
            conditions.append(p)
        else:
            pending.extendleft(reversed(parts))
    return conditions


def _decompose(p: Predicate) -> list[Predicate] | None:
    """The predicates replacing `p`, or None if `p` is a condition."""
    if isinstance(p, BinaryPredicate):
        return [p.left, p.right]
    if isinstance(p, AssociativePredicate):
        return list(p.children)
    if isinstance(p, UnaryPredicate):
        return [p.child]
    if isinstance(p, RelationalPredicate):
        return _expand_relation(p)
    if isinstance(p, (LiteralPredicate, QuantifiedPredicate, FinitePredicate)):
        return None
    assert_never(p)


def _expand_relation(p: RelationalPredicate) -> list[Predicate] | None:
    match p.op:
        case RelOp.EQUAL | RelOp.NOTEQUAL | RelOp.LT | RelOp.LE | RelOp.GT | RelOp.GE:
            return None
        case RelOp.IN | RelOp.NOTIN:
            s = p.right
            if isinstance(s, SetExtension):
                return [eq(p.left, m) for m in s.members]
            if isinstance(s, AssociativeExpression) and s.op in (
                AssocExprOp.BUNION,
                AssocExprOp.BINTER,
            ):
                return [member(p.left, child) for child in s.children]
            return None
        case RelOp.SUBSETEQ | RelOp.NOTSUBSETEQ:
            if isinstance(p.left, SetExtension):
                return [member(m, p.right) for m in p.left.members]
            return None
        case RelOp.SUBSET | RelOp.NOTSUBSET:
            return None
        case _:
            assert_never(p.op)

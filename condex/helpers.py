"""Builder helpers for constructing formula trees.

Tests and the well-definedness rules build formulas with these rather
than constructing nodes directly.
"""

from condex.formula import (
    TRUE,
    AssocExprOp,
    AssocPredOp,
    AssociativeExpression,
    AssociativePredicate,
    AtomicExpression,
    AtomicOp,
    BinaryPredicate,
    BinaryPredOp,
    Expression,
    FinitePredicate,
    Identifier,
    IntegerLiteral,
    Predicate,
    QuantifiedPredicate,
    QuantOp,
    RelationalPredicate,
    RelOp,
    SetExtension,
    UnaryPredicate,
)


def ident(name: str) -> Identifier:
    return Identifier(name)


def num(value: int) -> IntegerLiteral:
    return IntegerLiteral(value)


def empty_set() -> AtomicExpression:
    return AtomicExpression(AtomicOp.EMPTYSET)


def set_of(*members: Expression) -> SetExtension:
    return SetExtension(tuple(members))


def union(*children: Expression) -> AssociativeExpression:
    return AssociativeExpression(AssocExprOp.BUNION, tuple(children))


def inter(*children: Expression) -> AssociativeExpression:
    return AssociativeExpression(AssocExprOp.BINTER, tuple(children))


def rel(op: RelOp, lhs: Expression, rhs: Expression) -> RelationalPredicate:
    return RelationalPredicate(op, lhs, rhs)


def eq(lhs: Expression, rhs: Expression) -> RelationalPredicate:
    return RelationalPredicate(RelOp.EQUAL, lhs, rhs)


def neq(lhs: Expression, rhs: Expression) -> RelationalPredicate:
    return RelationalPredicate(RelOp.NOTEQUAL, lhs, rhs)


def lt(lhs: Expression, rhs: Expression) -> RelationalPredicate:
    return RelationalPredicate(RelOp.LT, lhs, rhs)


def le(lhs: Expression, rhs: Expression) -> RelationalPredicate:
    return RelationalPredicate(RelOp.LE, lhs, rhs)


def gt(lhs: Expression, rhs: Expression) -> RelationalPredicate:
    return RelationalPredicate(RelOp.GT, lhs, rhs)


def ge(lhs: Expression, rhs: Expression) -> RelationalPredicate:
    return RelationalPredicate(RelOp.GE, lhs, rhs)


def member(element: Expression, s: Expression) -> RelationalPredicate:
    return RelationalPredicate(RelOp.IN, element, s)


def not_member(element: Expression, s: Expression) -> RelationalPredicate:
    return RelationalPredicate(RelOp.NOTIN, element, s)


def subseteq(lhs: Expression, rhs: Expression) -> RelationalPredicate:
    return RelationalPredicate(RelOp.SUBSETEQ, lhs, rhs)


def not_(p: Predicate) -> UnaryPredicate:
    return UnaryPredicate(p)


def land(*children: Predicate) -> Predicate:
    """Conjunction: ⊤ operands are dropped, nested conjunctions flattened."""
    return _junction(AssocPredOp.AND, children)


def lor(*children: Predicate) -> Predicate:
    return _junction(AssocPredOp.OR, children)


def _junction(op: AssocPredOp, children: tuple[Predicate, ...]) -> Predicate:
    flat: list[Predicate] = []
    for child in children:
        if child == TRUE and op is AssocPredOp.AND:
            continue
        if isinstance(child, AssociativePredicate) and child.op is op:
            flat.extend(child.children)
        else:
            flat.append(child)
    if not flat:
        return TRUE
    if len(flat) == 1:
        return flat[0]
    return AssociativePredicate(op, tuple(flat))


def implies(lhs: Predicate, rhs: Predicate) -> BinaryPredicate:
    return BinaryPredicate(BinaryPredOp.IMPLIES, lhs, rhs)


def iff(lhs: Predicate, rhs: Predicate) -> BinaryPredicate:
    """Equivalence: lhs ⇔ rhs."""
    return BinaryPredicate(BinaryPredOp.EQUIV, lhs, rhs)


def forall(bound: list[str], body: Predicate) -> QuantifiedPredicate:
    return QuantifiedPredicate(QuantOp.FORALL, tuple(bound), body)


def exists(bound: list[str], body: Predicate) -> QuantifiedPredicate:
    return QuantifiedPredicate(QuantOp.EXISTS, tuple(bound), body)


def finite(s: Expression) -> FinitePredicate:
    return FinitePredicate(s)

"""Canonical forms of conditions.

Two conditions are the same condition when their canonical forms are
equal.  Only relations are normalised; any other predicate is its own
text.  A comparison is first oriented so that its left operand has the
smaller text (swapping the operands inverts < and ≤), then a negated
relation is replaced by the relation it negates:

    ≠ → =    > → ≤    ≥ → <    ∉ → ∈    ⊄ → ⊂    ⊈ → ⊆

so `b > a`, `a < b`, `a ≥ b` and `b ≤ a` are all the condition `a<b`.
The result is a comparison key, not something to display.
"""

from __future__ import annotations

from .formula import Formula, RelationalPredicate, RelOp, expression_text, to_text

_ORDERED = frozenset({RelOp.EQUAL, RelOp.NOTEQUAL, RelOp.LT, RelOp.LE, RelOp.GT, RelOp.GE})

# Tag after the operands of a comparison are swapped.
_INVERTED = {
    RelOp.EQUAL: RelOp.EQUAL,
    RelOp.NOTEQUAL: RelOp.NOTEQUAL,
    RelOp.LT: RelOp.GT,
    RelOp.GT: RelOp.LT,
    RelOp.LE: RelOp.GE,
    RelOp.GE: RelOp.LE,
}

# Tag of the relation that a negative relation negates.
_NEGATED = {
    RelOp.NOTEQUAL: RelOp.EQUAL,
    RelOp.GT: RelOp.LE,
    RelOp.GE: RelOp.LT,
    RelOp.NOTIN: RelOp.IN,
    RelOp.NOTSUBSET: RelOp.SUBSET,
    RelOp.NOTSUBSETEQ: RelOp.SUBSETEQ,
}


def normalize(p: RelationalPredicate) -> RelationalPredicate:
    while True:
        if p.op in _ORDERED and expression_text(p.left) > expression_text(p.right):
            p = RelationalPredicate(_INVERTED[p.op], p.right, p.left)
        elif p.op in _NEGATED:
            p = RelationalPredicate(_NEGATED[p.op], p.left, p.right)
        else:
            return p


def canonical_form(f: Formula) -> str:
    if isinstance(f, RelationalPredicate):
        return to_text(normalize(f))
    return to_text(f)

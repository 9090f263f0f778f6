"""Formula trees of the Event-B mathematical language.

A formula is either a predicate (something that holds or not) or an
expression (something that denotes a value).  Guards are predicates built
from:
  - Connectives: ⇒ ⇔ (binary), ∧ ∨ (associative), ¬ (unary)
  - Relations between two expressions: = ≠ < ≤ > ≥ ∈ ∉ ⊂ ⊄ ⊆ ⊈
  - Literals ⊤ ⊥, quantifiers ∀ ∃ and finite(S)

All nodes are immutable.  Structural equality compares shape and leaves;
the `type` annotation that the type checker adds to expression nodes is
not part of equality.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import assert_never

from .typesys import Type

# ---------------------------------------------------------------------------
# Operator tags
# ---------------------------------------------------------------------------


class RelOp(Enum):
    EQUAL = "="
    NOTEQUAL = "≠"
    LT = "<"
    LE = "≤"
    GT = ">"
    GE = "≥"
    IN = "∈"
    NOTIN = "∉"
    SUBSET = "⊂"
    NOTSUBSET = "⊄"
    SUBSETEQ = "⊆"
    NOTSUBSETEQ = "⊈"


class BinaryPredOp(Enum):
    IMPLIES = "⇒"
    EQUIV = "⇔"


class AssocPredOp(Enum):
    AND = "∧"
    OR = "∨"


class QuantOp(Enum):
    FORALL = "∀"
    EXISTS = "∃"


class LiteralOp(Enum):
    TRUE = "⊤"
    FALSE = "⊥"


class AtomicOp(Enum):
    INTEGER = "ℤ"
    NATURAL = "ℕ"
    NATURAL1 = "ℕ1"
    BOOL = "BOOL"
    TRUE = "TRUE"
    FALSE = "FALSE"
    EMPTYSET = "∅"


class UnaryExprOp(Enum):
    CARD = "card"
    DOM = "dom"
    RAN = "ran"
    POW = "ℙ"
    POW1 = "ℙ1"
    MIN = "min"
    MAX = "max"
    UNMINUS = "−"


class BinaryExprOp(Enum):
    MAPSTO = "↦"
    REL = "↔"
    PFUN = "⇸"
    TFUN = "→"
    SETMINUS = "∖"
    CPROD = "×"
    UPTO = "‥"
    MINUS = "−"
    DIV = "÷"
    MOD = "mod"
    EXPN = "^"


class AssocExprOp(Enum):
    BUNION = "∪"
    BINTER = "∩"
    PLUS = "+"
    MUL = "∗"


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Identifier:
    """A free or bound identifier.

    Example: x
    """

    name: str
    type: Type | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class IntegerLiteral:
    """An integer constant; negative literals are written −1."""

    value: int
    type: Type | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class AtomicExpression:
    """A built-in constant such as ℤ, BOOL, TRUE or ∅."""

    op: AtomicOp
    type: Type | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class SetExtension:
    """A set given by its members.

    Example: {a, b, c} — SetExtension((Identifier("a"), Identifier("b"), Identifier("c")))
    """

    members: tuple[Expression, ...]
    type: Type | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class UnaryExpression:
    """A prefix operator applied to one expression.

    Example: card(S) — UnaryExpression(UnaryExprOp.CARD, Identifier("S"))
    """

    op: UnaryExprOp
    child: Expression
    type: Type | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class BinaryExpression:
    """A non-associative infix operator.

    Example: a ÷ b, x ↦ y, A ∖ B
    """

    op: BinaryExprOp
    left: Expression
    right: Expression
    type: Type | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class AssociativeExpression:
    """An associative operator over two or more operands.

    Example: A ∪ B ∪ C — AssociativeExpression(AssocExprOp.BUNION, (A, B, C))
    """

    op: AssocExprOp
    children: tuple[Expression, ...]
    type: Type | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class FunctionApplication:
    """Application of a function (a relation) to an argument.

    Example: f(x)
    """

    function: Expression
    argument: Expression
    type: Type | None = field(default=None, compare=False, repr=False)


# Union of all expression forms
Expression = (
    Identifier
    | IntegerLiteral
    | AtomicExpression
    | SetExtension
    | UnaryExpression
    | BinaryExpression
    | AssociativeExpression
    | FunctionApplication
)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LiteralPredicate:
    """⊤ or ⊥."""

    op: LiteralOp


@dataclass(frozen=True)
class RelationalPredicate:
    """A relation between two expressions.

    Example: x ∈ S — RelationalPredicate(RelOp.IN, Identifier("x"), Identifier("S"))
    """

    op: RelOp
    left: Expression
    right: Expression


@dataclass(frozen=True)
class UnaryPredicate:
    """Negation.

    Example: ¬ x = y
    """

    child: Predicate


@dataclass(frozen=True)
class BinaryPredicate:
    """Implication or equivalence.

    Example: x = 0 ⇒ y > 0
    """

    op: BinaryPredOp
    left: Predicate
    right: Predicate


@dataclass(frozen=True)
class AssociativePredicate:
    """Conjunction or disjunction of two or more predicates.

    Example: a = b ∧ c = d ∧ e = f
    """

    op: AssocPredOp
    children: tuple[Predicate, ...]


@dataclass(frozen=True)
class QuantifiedPredicate:
    """Universal or existential quantification.

    Example: ∀x·x ∈ S ⇒ x > 0
    """

    op: QuantOp
    bound: tuple[str, ...]
    body: Predicate


@dataclass(frozen=True)
class FinitePredicate:
    """finite(S)."""

    expression: Expression


# Union of all predicate forms
Predicate = (
    LiteralPredicate
    | RelationalPredicate
    | UnaryPredicate
    | BinaryPredicate
    | AssociativePredicate
    | QuantifiedPredicate
    | FinitePredicate
)

Formula = Predicate | Expression

TRUE = LiteralPredicate(LiteralOp.TRUE)


# ---------------------------------------------------------------------------
# Textual form
# ---------------------------------------------------------------------------

# Binding strength of expression operators; higher binds tighter.
_EXPR_LEVEL: dict[BinaryExprOp | AssocExprOp, int] = {
    BinaryExprOp.MAPSTO: 1,
    BinaryExprOp.REL: 2,
    BinaryExprOp.PFUN: 2,
    BinaryExprOp.TFUN: 2,
    AssocExprOp.BUNION: 3,
    AssocExprOp.BINTER: 3,
    BinaryExprOp.SETMINUS: 3,
    BinaryExprOp.CPROD: 3,
    BinaryExprOp.UPTO: 4,
    AssocExprOp.PLUS: 5,
    BinaryExprOp.MINUS: 5,
    AssocExprOp.MUL: 6,
    BinaryExprOp.DIV: 6,
    BinaryExprOp.MOD: 6,
    BinaryExprOp.EXPN: 7,
}
_UNARY_MINUS_LEVEL = 8
_PRIMARY_LEVEL = 9

# Levels whose operators may be chained without parentheses on the left.
_LEFT_ASSOCIATIVE_LEVELS = frozenset({1, 5, 6})

_SPACED_OPS = frozenset(
    {
        BinaryExprOp.MAPSTO,
        BinaryExprOp.REL,
        BinaryExprOp.PFUN,
        BinaryExprOp.TFUN,
        BinaryExprOp.MOD,
    }
)


def _expr_level(e: Expression) -> int:
    if isinstance(e, (BinaryExpression, AssociativeExpression)):
        return _EXPR_LEVEL[e.op]
    if isinstance(e, UnaryExpression) and e.op is UnaryExprOp.UNMINUS:
        return _UNARY_MINUS_LEVEL
    if isinstance(e, IntegerLiteral) and e.value < 0:
        return _UNARY_MINUS_LEVEL
    return _PRIMARY_LEVEL


def _operand(e: Expression, level: int, first: bool) -> str:
    text = expression_text(e)
    child_level = _expr_level(e)
    if child_level < level:
        return f"({text})"
    if child_level == level and not (first and level in _LEFT_ASSOCIATIVE_LEVELS):
        return f"({text})"
    return text


def _infix(op: BinaryExprOp | AssocExprOp) -> str:
    return f" {op.value} " if op in _SPACED_OPS else op.value


def expression_text(e: Expression) -> str:
    if isinstance(e, Identifier):
        return e.name
    if isinstance(e, IntegerLiteral):
        return f"−{-e.value}" if e.value < 0 else str(e.value)
    if isinstance(e, AtomicExpression):
        return e.op.value
    if isinstance(e, SetExtension):
        return "{" + ",".join(expression_text(m) for m in e.members) + "}"
    if isinstance(e, UnaryExpression):
        if e.op is UnaryExprOp.UNMINUS:
            child = expression_text(e.child)
            if _expr_level(e.child) < _UNARY_MINUS_LEVEL:
                child = f"({child})"
            return f"−{child}"
        return f"{e.op.value}({expression_text(e.child)})"
    if isinstance(e, BinaryExpression):
        level = _EXPR_LEVEL[e.op]
        left = _operand(e.left, level, first=True)
        right = _operand(e.right, level, first=False)
        return f"{left}{_infix(e.op)}{right}"
    if isinstance(e, AssociativeExpression):
        level = _EXPR_LEVEL[e.op]
        parts = [_operand(c, level, first=(i == 0)) for i, c in enumerate(e.children)]
        return _infix(e.op).join(parts)
    if isinstance(e, FunctionApplication):
        function = expression_text(e.function)
        if _expr_level(e.function) < _PRIMARY_LEVEL:
            function = f"({function})"
        return f"{function}({expression_text(e.argument)})"
    assert_never(e)


# Predicate binding strength: quantifier bodies extend as far right as possible.
def _pred_level(p: Predicate) -> int:
    if isinstance(p, QuantifiedPredicate):
        return 0
    if isinstance(p, BinaryPredicate):
        return 1
    if isinstance(p, AssociativePredicate):
        return 2
    if isinstance(p, UnaryPredicate):
        return 3
    return 4


def _wrap(p: Predicate, max_wrapped_level: int) -> str:
    text = predicate_text(p)
    if _pred_level(p) <= max_wrapped_level:
        return f"({text})"
    return text


def predicate_text(p: Predicate) -> str:
    if isinstance(p, LiteralPredicate):
        return p.op.value
    if isinstance(p, RelationalPredicate):
        return f"{expression_text(p.left)}{p.op.value}{expression_text(p.right)}"
    if isinstance(p, UnaryPredicate):
        return f"¬{_wrap(p.child, 2)}"
    if isinstance(p, BinaryPredicate):
        return f"{_wrap(p.left, 1)}{p.op.value}{_wrap(p.right, 1)}"
    if isinstance(p, AssociativePredicate):
        return p.op.value.join(_wrap(c, 2) for c in p.children)
    if isinstance(p, QuantifiedPredicate):
        return f"{p.op.value}{','.join(p.bound)}·{predicate_text(p.body)}"
    if isinstance(p, FinitePredicate):
        return f"finite({expression_text(p.expression)})"
    assert_never(p)


def to_text(f: Formula) -> str:
    """Render a formula the way Rodin prints it, e.g. ``(a=b⇒c≠a)∧x∈{1,2}``."""
    if isinstance(
        f,
        (
            LiteralPredicate,
            RelationalPredicate,
            UnaryPredicate,
            BinaryPredicate,
            AssociativePredicate,
            QuantifiedPredicate,
            FinitePredicate,
        ),
    ):
        return predicate_text(f)
    return expression_text(f)

"""Parser for the Event-B mathematical language.

Formulas may be written in Rodin's Unicode notation or in its ASCII input
notation; both produce the same tree:

    x ∈ {a, b} ∧ (y ≠ 0 ⇒ z ÷ y > 1)
    x : {a, b} & (y /= 0 => z / y > 1)

The grammar is a Parsimonious PEG.  Operator priorities, lowest first:

    predicates:  ∀∃  <  ⇔  <  ⇒  <  ∧ ∨  <  ¬  <  relations
    expressions: ↦  <  ↔ ⇸ →  <  ∪ ∩ ∖ ×  <  ‥  <  + −  <  ∗ ÷ mod  <  ^  <  unary −

⇒ and ⇔ do not associate, and ∧ may not be mixed with ∨ without
parentheses.
"""

from __future__ import annotations

from typing import Any

from parsimonious.exceptions import ParseError as PegParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from .errors import ParseError
from .formula import (
    AssocExprOp,
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
    LiteralOp,
    LiteralPredicate,
    Predicate,
    QuantifiedPredicate,
    QuantOp,
    RelationalPredicate,
    RelOp,
    SetExtension,
    UnaryExpression,
    UnaryExprOp,
    UnaryPredicate,
)
from .result import Err, Ok, Result

# ---------------------------------------------------------------------------
# Grammar
# ---------------------------------------------------------------------------

EVENTB_GRAMMAR = Grammar(r"""
    predicate_root  = _ predicate _
    expression_root = _ expression _

    # Predicates
    predicate       = implication equiv_tail?
    equiv_tail      = _ equiv_op _ implication
    implication     = junction implies_tail?
    implies_tail    = _ implies_op _ junction
    junction        = negation junction_tail*
    junction_tail   = _ junction_op _ negation
    negation        = negated / unit_pred
    negated         = not_op _ negation
    unit_pred       = quantified / literal_pred / finite_pred / paren_pred / relation
    quantified      = quantifier _ bound_list _ bound_dot _ predicate
    bound_list      = identifier bound_more*
    bound_more      = _ "," _ identifier
    literal_pred    = ~r"⊤|⊥|(?:true|false)(?![\w'])"
    finite_pred     = ~r"finite(?![\w'])" _ "(" _ expression _ ")"
    paren_pred      = "(" _ predicate _ ")"
    relation        = expression _ rel_op _ expression

    # Expressions
    expression      = relset maplet_tail*
    maplet_tail     = _ maplet_op _ relset
    relset          = setexpr relset_tail?
    relset_tail     = _ relset_op _ setexpr
    setexpr         = interval setexpr_tail*
    setexpr_tail    = _ set_op _ interval
    interval        = sum interval_tail?
    interval_tail   = _ upto_op _ sum
    sum             = product sum_tail*
    sum_tail        = _ sum_op _ product
    product         = power product_tail*
    product_tail    = _ product_op _ power
    power           = unary power_tail?
    power_tail      = _ expn_op _ unary
    unary           = application / negative
    negative        = minus_op _ unary
    application     = primary call*
    call            = _ "(" _ expression _ ")"
    primary         = paren_expr / set_extension / builtin_call / atomic_expr / number / identifier
    paren_expr      = "(" _ expression _ ")"
    set_extension   = "{" _ expression set_member* _ "}"
    set_member      = _ "," _ expression
    builtin_call    = builtin _ "(" _ expression _ ")"
    builtin         = ~r"(?:card|dom|ran|min|max|POW1|POW|ℙ1|ℙ)(?![\w'])"
    atomic_expr     = ~r"(?:ℤ|INTEGER|ℕ1|NAT1|ℕ|NAT|BOOL|TRUE|FALSE)(?![\w'])|∅|\{\s*\}"
    number          = ~r"[−-]?\d+(?![\w'])"
    identifier      = ~r"(?!(?:or|not|mod|finite|true|false|card|dom|ran|min|max|POW1|POW|ℙ1|ℙ|ℤ|INTEGER|ℕ1|NAT1|ℕ|NAT|BOOL|TRUE|FALSE)(?![\w']))[^\W\d][\w']*"

    # Operators
    equiv_op        = ~r"⇔|<=>"
    implies_op      = ~r"⇒|=>"
    junction_op     = ~r"∧|&|∨|or(?![\w'])"
    not_op          = ~r"¬|not(?![\w'])"
    quantifier      = ~r"[∀!∃#]"
    bound_dot       = ~r"·|\.(?!\.)"
    rel_op          = ~r"/<<:|/<:|<<:|<:|/=|/:|<=(?!>)|>=|[=≠<≤>≥∈:∉⊂⊄⊆⊈]"
    maplet_op       = ~r"↦|\|->"
    relset_op       = ~r"↔|<->|⇸|\+->|→|-->"
    set_op          = ~r"∪|\\/|∩|/\\|∖|\\|×|\*\*"
    upto_op         = ~r"‥|\.\."
    sum_op          = ~r"\+(?!->)|−|-(?!->)"
    product_op      = ~r"∗|\*(?!\*)|÷|/(?![\\=:<])|mod(?![\w'])"
    expn_op         = "^"
    minus_op        = ~r"−|-(?!->)"

    _               = ~r"\s*"
""")

_EXPRESSION_GRAMMAR = EVENTB_GRAMMAR.default("expression_root")

# ASCII spellings map onto the same tags as their Unicode counterparts.
_REL_OPS = {
    "=": RelOp.EQUAL,
    "≠": RelOp.NOTEQUAL, "/=": RelOp.NOTEQUAL,
    "<": RelOp.LT,
    "≤": RelOp.LE, "<=": RelOp.LE,
    ">": RelOp.GT,
    "≥": RelOp.GE, ">=": RelOp.GE,
    "∈": RelOp.IN, ":": RelOp.IN,
    "∉": RelOp.NOTIN, "/:": RelOp.NOTIN,
    "⊂": RelOp.SUBSET, "<<:": RelOp.SUBSET,
    "⊄": RelOp.NOTSUBSET, "/<<:": RelOp.NOTSUBSET,
    "⊆": RelOp.SUBSETEQ, "<:": RelOp.SUBSETEQ,
    "⊈": RelOp.NOTSUBSETEQ, "/<:": RelOp.NOTSUBSETEQ,
}

_JUNCTION_OPS = {"∧": AssocPredOp.AND, "&": AssocPredOp.AND, "∨": AssocPredOp.OR, "or": AssocPredOp.OR}

_BINARY_EXPR_OPS = {
    "↦": BinaryExprOp.MAPSTO, "|->": BinaryExprOp.MAPSTO,
    "↔": BinaryExprOp.REL, "<->": BinaryExprOp.REL,
    "⇸": BinaryExprOp.PFUN, "+->": BinaryExprOp.PFUN,
    "→": BinaryExprOp.TFUN, "-->": BinaryExprOp.TFUN,
    "∖": BinaryExprOp.SETMINUS, "\\": BinaryExprOp.SETMINUS,
    "×": BinaryExprOp.CPROD, "**": BinaryExprOp.CPROD,
    "‥": BinaryExprOp.UPTO, "..": BinaryExprOp.UPTO,
    "−": BinaryExprOp.MINUS, "-": BinaryExprOp.MINUS,
    "÷": BinaryExprOp.DIV, "/": BinaryExprOp.DIV,
    "mod": BinaryExprOp.MOD,
    "^": BinaryExprOp.EXPN,
}

_ASSOC_EXPR_OPS = {
    "∪": AssocExprOp.BUNION, "\\/": AssocExprOp.BUNION,
    "∩": AssocExprOp.BINTER, "/\\": AssocExprOp.BINTER,
    "+": AssocExprOp.PLUS,
    "∗": AssocExprOp.MUL, "*": AssocExprOp.MUL,
}

_BUILTINS = {
    "card": UnaryExprOp.CARD,
    "dom": UnaryExprOp.DOM,
    "ran": UnaryExprOp.RAN,
    "min": UnaryExprOp.MIN,
    "max": UnaryExprOp.MAX,
    "ℙ": UnaryExprOp.POW, "POW": UnaryExprOp.POW,
    "ℙ1": UnaryExprOp.POW1, "POW1": UnaryExprOp.POW1,
}

_ATOMICS = {
    "ℤ": AtomicOp.INTEGER, "INTEGER": AtomicOp.INTEGER,
    "ℕ": AtomicOp.NATURAL, "NAT": AtomicOp.NATURAL,
    "ℕ1": AtomicOp.NATURAL1, "NAT1": AtomicOp.NATURAL1,
    "BOOL": AtomicOp.BOOL,
    "TRUE": AtomicOp.TRUE,
    "FALSE": AtomicOp.FALSE,
    "∅": AtomicOp.EMPTYSET,
}


# ---------------------------------------------------------------------------
# Parse tree → formula tree
# ---------------------------------------------------------------------------


class FormulaBuilder(NodeVisitor):
    """Transforms a Parsimonious parse tree into a formula tree.

    Problems that the PEG cannot express (mixing ∧ with ∨) are collected
    in `problems` rather than raised.
    """

    def __init__(self) -> None:
        self.problems: list[str] = []

    def generic_visit(self, node: Node, visited_children: list[Any]) -> Any:
        # Anonymous literals and repetitions; repetitions stay lists even when empty.
        return visited_children

    def _first(self, node: Node, visited_children: list[Any]) -> Any:
        return visited_children[0]

    visit_negation = _first
    visit_unit_pred = _first
    visit_unary = _first
    visit_primary = _first

    # -- roots --------------------------------------------------------------

    def visit_predicate_root(self, node: Node, visited_children: list[Any]) -> Predicate:
        _, predicate, _ = visited_children
        return predicate

    def visit_expression_root(self, node: Node, visited_children: list[Any]) -> Expression:
        _, expression, _ = visited_children
        return expression

    # -- predicates ---------------------------------------------------------

    def visit_predicate(self, node: Node, visited_children: list[Any]) -> Predicate:
        left, tail = visited_children
        for op, right in tail:
            return BinaryPredicate(op, left, right)
        return left

    visit_implication = visit_predicate

    def visit_equiv_tail(self, node: Node, visited_children: list[Any]) -> tuple[Any, Any]:
        _, op, _, operand = visited_children
        return op, operand

    visit_implies_tail = visit_equiv_tail
    visit_junction_tail = visit_equiv_tail
    visit_maplet_tail = visit_equiv_tail
    visit_relset_tail = visit_equiv_tail
    visit_setexpr_tail = visit_equiv_tail
    visit_interval_tail = visit_equiv_tail
    visit_sum_tail = visit_equiv_tail
    visit_product_tail = visit_equiv_tail
    visit_power_tail = visit_equiv_tail

    def visit_junction(self, node: Node, visited_children: list[Any]) -> Predicate:
        first, tail = visited_children
        if not tail:
            return first
        ops = {op for op, _ in tail}
        if len(ops) > 1:
            self.problems.append(
                f"Operators ∧ and ∨ must be parenthesized when mixed: {node.text.strip()}"
            )
        return AssociativePredicate(tail[0][0], (first, *(child for _, child in tail)))

    def visit_negated(self, node: Node, visited_children: list[Any]) -> Predicate:
        _, _, child = visited_children
        return UnaryPredicate(child)

    def visit_quantified(self, node: Node, visited_children: list[Any]) -> Predicate:
        op, _, bound, _, _, _, body = visited_children
        return QuantifiedPredicate(op, bound, body)

    def visit_bound_list(self, node: Node, visited_children: list[Any]) -> tuple[str, ...]:
        first, more = visited_children
        return (first.name, *(ident.name for ident in more))

    def visit_bound_more(self, node: Node, visited_children: list[Any]) -> Identifier:
        _, _, _, ident = visited_children
        return ident

    def visit_literal_pred(self, node: Node, visited_children: list[Any]) -> Predicate:
        if node.text in ("⊤", "true"):
            return LiteralPredicate(LiteralOp.TRUE)
        return LiteralPredicate(LiteralOp.FALSE)

    def visit_finite_pred(self, node: Node, visited_children: list[Any]) -> Predicate:
        return FinitePredicate(visited_children[4])

    def visit_paren_pred(self, node: Node, visited_children: list[Any]) -> Predicate:
        return visited_children[2]

    def visit_relation(self, node: Node, visited_children: list[Any]) -> Predicate:
        left, _, op, _, right = visited_children
        return RelationalPredicate(op, left, right)

    # -- expressions --------------------------------------------------------

    def _fold(self, first: Expression, tail: list[tuple[Any, Expression]]) -> Expression:
        # Left fold; consecutive uses of one associative operator share a node.
        acc = first
        extendable = False
        for op, operand in tail:
            if isinstance(op, AssocExprOp):
                if extendable and isinstance(acc, AssociativeExpression) and acc.op is op:
                    acc = AssociativeExpression(op, (*acc.children, operand))
                else:
                    acc = AssociativeExpression(op, (acc, operand))
                extendable = True
            else:
                acc = BinaryExpression(op, acc, operand)
                extendable = False
        return acc

    def visit_expression(self, node: Node, visited_children: list[Any]) -> Expression:
        first, tail = visited_children
        return self._fold(first, tail)

    visit_relset = visit_expression
    visit_setexpr = visit_expression
    visit_interval = visit_expression
    visit_sum = visit_expression
    visit_product = visit_expression
    visit_power = visit_expression

    def visit_negative(self, node: Node, visited_children: list[Any]) -> Expression:
        _, _, child = visited_children
        return UnaryExpression(UnaryExprOp.UNMINUS, child)

    def visit_application(self, node: Node, visited_children: list[Any]) -> Expression:
        acc, calls = visited_children
        for argument in calls:
            acc = FunctionApplication(acc, argument)
        return acc

    def visit_call(self, node: Node, visited_children: list[Any]) -> Expression:
        return visited_children[3]

    def visit_paren_expr(self, node: Node, visited_children: list[Any]) -> Expression:
        return visited_children[2]

    def visit_set_extension(self, node: Node, visited_children: list[Any]) -> Expression:
        _, _, first, more, _, _ = visited_children
        return SetExtension((first, *more))

    def visit_set_member(self, node: Node, visited_children: list[Any]) -> Expression:
        return visited_children[3]

    def visit_builtin_call(self, node: Node, visited_children: list[Any]) -> Expression:
        op, _, _, _, child, _, _ = visited_children
        return UnaryExpression(op, child)

    def visit_atomic_expr(self, node: Node, visited_children: list[Any]) -> Expression:
        text = node.text
        if text.startswith("{"):
            return AtomicExpression(AtomicOp.EMPTYSET)
        return AtomicExpression(_ATOMICS[text])

    def visit_number(self, node: Node, visited_children: list[Any]) -> Expression:
        return IntegerLiteral(int(node.text.replace("−", "-")))

    def visit_identifier(self, node: Node, visited_children: list[Any]) -> Identifier:
        return Identifier(node.text)

    # -- operators ----------------------------------------------------------

    def visit_equiv_op(self, node: Node, visited_children: list[Any]) -> BinaryPredOp:
        return BinaryPredOp.EQUIV

    def visit_implies_op(self, node: Node, visited_children: list[Any]) -> BinaryPredOp:
        return BinaryPredOp.IMPLIES

    def visit_junction_op(self, node: Node, visited_children: list[Any]) -> AssocPredOp:
        return _JUNCTION_OPS[node.text]

    def visit_quantifier(self, node: Node, visited_children: list[Any]) -> QuantOp:
        return QuantOp.FORALL if node.text in ("∀", "!") else QuantOp.EXISTS

    def visit_rel_op(self, node: Node, visited_children: list[Any]) -> RelOp:
        return _REL_OPS[node.text]

    def visit_builtin(self, node: Node, visited_children: list[Any]) -> UnaryExprOp:
        return _BUILTINS[node.text]

    def _expr_op(self, node: Node, visited_children: list[Any]) -> BinaryExprOp | AssocExprOp:
        text = node.text
        if text in _ASSOC_EXPR_OPS:
            return _ASSOC_EXPR_OPS[text]
        return _BINARY_EXPR_OPS[text]

    visit_maplet_op = _expr_op
    visit_relset_op = _expr_op
    visit_set_op = _expr_op
    visit_upto_op = _expr_op
    visit_sum_op = _expr_op
    visit_product_op = _expr_op
    visit_expn_op = _expr_op


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def _describe(error: PegParseError, source: str) -> str:
    snippet = source[error.pos:error.pos + 12]
    found = repr(snippet) if snippet else "end of formula"
    return f"Syntax error at line {error.line()}, column {error.column()}: unexpected {found}"


def _parse(grammar: Grammar, source: str) -> Result[Any, ParseError]:
    try:
        tree = grammar.parse(source)
    except PegParseError as e:
        return Err(ParseError(source, [_describe(e, source)]))
    builder = FormulaBuilder()
    formula = builder.visit(tree)
    if builder.problems:
        return Err(ParseError(source, builder.problems))
    return Ok(formula)


def parse_predicate(source: str) -> Result[Predicate, ParseError]:
    """Parse a predicate such as ``x ∈ S ∧ y > 0``."""
    return _parse(EVENTB_GRAMMAR, source)


def parse_expression(source: str) -> Result[Expression, ParseError]:
    """Parse an expression such as ``f(x) + 1``."""
    return _parse(_EXPRESSION_GRAMMAR, source)

"""Type inference for Event-B formulas.

Types are inferred by unification: every identifier gets its type from the
environment (or from an enclosing quantifier), every operator constrains
the types of its operands, and constants such as ∅ start out with an
unknown element type that later constraints fill in.

Type-checking is a pure function: it returns a copy of the formula whose
expression nodes carry their inferred `type`.  A formula whose nodes are
all typed is returned unchanged.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from typing import Any, assert_never

from .errors import ParseError, TypeCheckError
from .formula import (
    AssocExprOp,
    AssociativeExpression,
    AssociativePredicate,
    AtomicExpression,
    AtomicOp,
    BinaryExpression,
    BinaryExprOp,
    BinaryPredicate,
    Expression,
    FinitePredicate,
    Formula,
    FunctionApplication,
    Identifier,
    IntegerLiteral,
    LiteralPredicate,
    Predicate,
    QuantifiedPredicate,
    RelationalPredicate,
    RelOp,
    SetExtension,
    UnaryExpression,
    UnaryExprOp,
    UnaryPredicate,
    to_text,
)
from .grammar import parse_expression
from .result import Err, Ok, Result
from .typesys import (
    BooleanType,
    GivenType,
    IntegerType,
    PowerSetType,
    ProductType,
    Type,
    TypeEnvironment,
    type_to_text,
)

INTEGER = IntegerType()
BOOLEAN = BooleanType()


@dataclass(frozen=True)
class TypeVariable:
    """A placeholder for a type that is not known yet."""

    index: int


@dataclass
class TypeCheckContext:
    environment: TypeEnvironment
    problems: list[str] = field(default_factory=list)
    _bindings: dict[int, Any] = field(default_factory=dict)
    _scopes: list[dict[str, Any]] = field(default_factory=list)
    _counter: int = 0

    def error(self, message: str) -> None:
        if message not in self.problems:
            self.problems.append(message)

    def fresh(self) -> TypeVariable:
        self._counter += 1
        return TypeVariable(self._counter)

    def push_scope(self, names: tuple[str, ...]) -> None:
        self._scopes.append({name: self.fresh() for name in names})

    def pop_scope(self) -> None:
        self._scopes.pop()

    def lookup(self, name: str) -> Any:
        for scope in reversed(self._scopes):
            if name in scope:
                return scope[name]
        return self.environment.get(name)

    def resolve(self, t: Any) -> Any:
        while isinstance(t, TypeVariable) and t.index in self._bindings:
            t = self._bindings[t.index]
        return t

    def substitute(self, t: Any) -> Any:
        t = self.resolve(t)
        if isinstance(t, PowerSetType):
            return PowerSetType(self.substitute(t.base))
        if isinstance(t, ProductType):
            return ProductType(self.substitute(t.left), self.substitute(t.right))
        return t

    def unify(self, expected: Any, actual: Any, where: str) -> None:
        a = self.resolve(expected)
        b = self.resolve(actual)
        if a == b:
            return
        if isinstance(a, TypeVariable):
            self._bind(a, b, where)
        elif isinstance(b, TypeVariable):
            self._bind(b, a, where)
        elif isinstance(a, PowerSetType) and isinstance(b, PowerSetType):
            self.unify(a.base, b.base, where)
        elif isinstance(a, ProductType) and isinstance(b, ProductType):
            self.unify(a.left, b.left, where)
            self.unify(a.right, b.right, where)
        else:
            self.error(
                f"Types {_show(self.substitute(a))} and {_show(self.substitute(b))} "
                f"do not match in {where}"
            )

    def _bind(self, var: TypeVariable, t: Any, where: str) -> None:
        if _occurs(var, self.substitute(t)):
            self.error(f"Recursive type in {where}")
            return
        self._bindings[var.index] = t


def _occurs(var: TypeVariable, t: Any) -> bool:
    if isinstance(t, TypeVariable):
        return t == var
    if isinstance(t, PowerSetType):
        return _occurs(var, t.base)
    if isinstance(t, ProductType):
        return _occurs(var, t.left) or _occurs(var, t.right)
    return False


def _show(t: Any) -> str:
    if isinstance(t, TypeVariable):
        return f"'{t.index}"
    if isinstance(t, PowerSetType):
        return f"ℙ({_show(t.base)})"
    if isinstance(t, ProductType):
        return f"{_show(t.left)}×{_show(t.right)}"
    return type_to_text(t)


def _is_ground(t: Any) -> bool:
    if isinstance(t, TypeVariable):
        return False
    if isinstance(t, PowerSetType):
        return _is_ground(t.base)
    if isinstance(t, ProductType):
        return _is_ground(t.left) and _is_ground(t.right)
    return True


# ---------------------------------------------------------------------------
# Phase 1: collect constraints, annotate nodes with (possibly open) types
# ---------------------------------------------------------------------------


def _infer(e: Expression, ctx: TypeCheckContext) -> tuple[Expression, Any]:
    where = to_text(e)
    if isinstance(e, Identifier):
        t = ctx.lookup(e.name)
        if t is None:
            ctx.error(f"Identifier '{e.name}' has not been declared")
            t = ctx.fresh()
        return replace(e, type=t), t
    if isinstance(e, IntegerLiteral):
        return replace(e, type=INTEGER), INTEGER
    if isinstance(e, AtomicExpression):
        match e.op:
            case AtomicOp.INTEGER | AtomicOp.NATURAL | AtomicOp.NATURAL1:
                t = PowerSetType(INTEGER)
            case AtomicOp.BOOL:
                t = PowerSetType(BOOLEAN)
            case AtomicOp.TRUE | AtomicOp.FALSE:
                t = BOOLEAN
            case AtomicOp.EMPTYSET:
                t = PowerSetType(ctx.fresh())
            case _:
                assert_never(e.op)
        return replace(e, type=t), t
    if isinstance(e, SetExtension):
        element = ctx.fresh()
        members = []
        for member in e.members:
            typed, mt = _infer(member, ctx)
            ctx.unify(element, mt, where)
            members.append(typed)
        t = PowerSetType(element)
        return replace(e, members=tuple(members), type=t), t
    if isinstance(e, UnaryExpression):
        child, ct = _infer(e.child, ctx)
        match e.op:
            case UnaryExprOp.CARD:
                ctx.unify(PowerSetType(ctx.fresh()), ct, where)
                t = INTEGER
            case UnaryExprOp.DOM | UnaryExprOp.RAN:
                src, dst = ctx.fresh(), ctx.fresh()
                ctx.unify(PowerSetType(ProductType(src, dst)), ct, where)
                t = PowerSetType(src if e.op is UnaryExprOp.DOM else dst)
            case UnaryExprOp.POW | UnaryExprOp.POW1:
                element = ctx.fresh()
                ctx.unify(PowerSetType(element), ct, where)
                t = PowerSetType(PowerSetType(element))
            case UnaryExprOp.MIN | UnaryExprOp.MAX:
                ctx.unify(PowerSetType(INTEGER), ct, where)
                t = INTEGER
            case UnaryExprOp.UNMINUS:
                ctx.unify(INTEGER, ct, where)
                t = INTEGER
            case _:
                assert_never(e.op)
        return replace(e, child=child, type=t), t
    if isinstance(e, BinaryExpression):
        left, lt = _infer(e.left, ctx)
        right, rt = _infer(e.right, ctx)
        match e.op:
            case BinaryExprOp.MAPSTO:
                t = ProductType(lt, rt)
            case BinaryExprOp.REL | BinaryExprOp.PFUN | BinaryExprOp.TFUN:
                src, dst = ctx.fresh(), ctx.fresh()
                ctx.unify(PowerSetType(src), lt, where)
                ctx.unify(PowerSetType(dst), rt, where)
                t = PowerSetType(PowerSetType(ProductType(src, dst)))
            case BinaryExprOp.CPROD:
                src, dst = ctx.fresh(), ctx.fresh()
                ctx.unify(PowerSetType(src), lt, where)
                ctx.unify(PowerSetType(dst), rt, where)
                t = PowerSetType(ProductType(src, dst))
            case BinaryExprOp.SETMINUS:
                element = ctx.fresh()
                ctx.unify(PowerSetType(element), lt, where)
                ctx.unify(PowerSetType(element), rt, where)
                t = PowerSetType(element)
            case BinaryExprOp.UPTO:
                ctx.unify(INTEGER, lt, where)
                ctx.unify(INTEGER, rt, where)
                t = PowerSetType(INTEGER)
            case BinaryExprOp.MINUS | BinaryExprOp.DIV | BinaryExprOp.MOD | BinaryExprOp.EXPN:
                ctx.unify(INTEGER, lt, where)
                ctx.unify(INTEGER, rt, where)
                t = INTEGER
            case _:
                assert_never(e.op)
        return replace(e, left=left, right=right, type=t), t
    if isinstance(e, AssociativeExpression):
        if e.op in (AssocExprOp.BUNION, AssocExprOp.BINTER):
            t = PowerSetType(ctx.fresh())
        else:
            t = INTEGER
        children = []
        for child in e.children:
            typed, ct = _infer(child, ctx)
            ctx.unify(t, ct, where)
            children.append(typed)
        return replace(e, children=tuple(children), type=t), t
    if isinstance(e, FunctionApplication):
        function, ft = _infer(e.function, ctx)
        argument, at = _infer(e.argument, ctx)
        t = ctx.fresh()
        ctx.unify(PowerSetType(ProductType(at, t)), ft, where)
        return replace(e, function=function, argument=argument, type=t), t
    assert_never(e)


def _check(p: Predicate, ctx: TypeCheckContext) -> Predicate:
    if isinstance(p, LiteralPredicate):
        return p
    if isinstance(p, RelationalPredicate):
        where = to_text(p)
        left, lt = _infer(p.left, ctx)
        right, rt = _infer(p.right, ctx)
        match p.op:
            case RelOp.EQUAL | RelOp.NOTEQUAL:
                ctx.unify(lt, rt, where)
            case RelOp.LT | RelOp.LE | RelOp.GT | RelOp.GE:
                ctx.unify(INTEGER, lt, where)
                ctx.unify(INTEGER, rt, where)
            case RelOp.IN | RelOp.NOTIN:
                ctx.unify(PowerSetType(lt), rt, where)
            case (
                RelOp.SUBSET | RelOp.NOTSUBSET | RelOp.SUBSETEQ | RelOp.NOTSUBSETEQ
            ):
                element = ctx.fresh()
                ctx.unify(PowerSetType(element), lt, where)
                ctx.unify(PowerSetType(element), rt, where)
            case _:
                assert_never(p.op)
        return replace(p, left=left, right=right)
    if isinstance(p, UnaryPredicate):
        return replace(p, child=_check(p.child, ctx))
    if isinstance(p, BinaryPredicate):
        return replace(p, left=_check(p.left, ctx), right=_check(p.right, ctx))
    if isinstance(p, AssociativePredicate):
        return replace(p, children=tuple(_check(c, ctx) for c in p.children))
    if isinstance(p, QuantifiedPredicate):
        ctx.push_scope(p.bound)
        body = _check(p.body, ctx)
        ctx.pop_scope()
        return replace(p, body=body)
    if isinstance(p, FinitePredicate):
        expression, t = _infer(p.expression, ctx)
        ctx.unify(PowerSetType(ctx.fresh()), t, to_text(p))
        return replace(p, expression=expression)
    assert_never(p)


# ---------------------------------------------------------------------------
# Phase 2: replace type variables by the types they were solved to
# ---------------------------------------------------------------------------


def _solve_expression(e: Expression, ctx: TypeCheckContext) -> Expression:
    t = ctx.substitute(e.type)
    if not _is_ground(t):
        if isinstance(e, (Identifier, AtomicExpression)):
            ctx.error(f"Type of '{to_text(e)}' cannot be inferred")
        t = None
    if isinstance(e, SetExtension):
        return replace(e, members=tuple(_solve_expression(m, ctx) for m in e.members), type=t)
    if isinstance(e, UnaryExpression):
        return replace(e, child=_solve_expression(e.child, ctx), type=t)
    if isinstance(e, BinaryExpression):
        return replace(
            e,
            left=_solve_expression(e.left, ctx),
            right=_solve_expression(e.right, ctx),
            type=t,
        )
    if isinstance(e, AssociativeExpression):
        return replace(e, children=tuple(_solve_expression(c, ctx) for c in e.children), type=t)
    if isinstance(e, FunctionApplication):
        return replace(
            e,
            function=_solve_expression(e.function, ctx),
            argument=_solve_expression(e.argument, ctx),
            type=t,
        )
    return replace(e, type=t)


def _solve(p: Predicate, ctx: TypeCheckContext) -> Predicate:
    if isinstance(p, LiteralPredicate):
        return p
    if isinstance(p, RelationalPredicate):
        return replace(p, left=_solve_expression(p.left, ctx), right=_solve_expression(p.right, ctx))
    if isinstance(p, UnaryPredicate):
        return replace(p, child=_solve(p.child, ctx))
    if isinstance(p, BinaryPredicate):
        return replace(p, left=_solve(p.left, ctx), right=_solve(p.right, ctx))
    if isinstance(p, AssociativePredicate):
        return replace(p, children=tuple(_solve(c, ctx) for c in p.children))
    if isinstance(p, QuantifiedPredicate):
        return replace(p, body=_solve(p.body, ctx))
    if isinstance(p, FinitePredicate):
        return replace(p, expression=_solve_expression(p.expression, ctx))
    assert_never(p)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def iter_expressions(f: Formula) -> Iterator[Expression]:
    """Yield every expression node of a formula, outermost first."""
    if isinstance(f, (Identifier, IntegerLiteral, AtomicExpression)):
        yield f
    elif isinstance(f, SetExtension):
        yield f
        for m in f.members:
            yield from iter_expressions(m)
    elif isinstance(f, UnaryExpression):
        yield f
        yield from iter_expressions(f.child)
    elif isinstance(f, BinaryExpression):
        yield f
        yield from iter_expressions(f.left)
        yield from iter_expressions(f.right)
    elif isinstance(f, AssociativeExpression):
        yield f
        for c in f.children:
            yield from iter_expressions(c)
    elif isinstance(f, FunctionApplication):
        yield f
        yield from iter_expressions(f.function)
        yield from iter_expressions(f.argument)
    elif isinstance(f, RelationalPredicate):
        yield from iter_expressions(f.left)
        yield from iter_expressions(f.right)
    elif isinstance(f, UnaryPredicate):
        yield from iter_expressions(f.child)
    elif isinstance(f, BinaryPredicate):
        yield from iter_expressions(f.left)
        yield from iter_expressions(f.right)
    elif isinstance(f, AssociativePredicate):
        for c in f.children:
            yield from iter_expressions(c)
    elif isinstance(f, QuantifiedPredicate):
        yield from iter_expressions(f.body)
    elif isinstance(f, FinitePredicate):
        yield from iter_expressions(f.expression)


def is_type_checked(f: Formula) -> bool:
    return all(e.type is not None for e in iter_expressions(f))


def type_check(
    predicate: Predicate, environment: TypeEnvironment
) -> Result[Predicate, TypeCheckError]:
    """Infer the types of all expressions of `predicate` in `environment`."""
    if is_type_checked(predicate):
        return Ok(predicate)
    ctx = TypeCheckContext(environment)
    annotated = _check(predicate, ctx)
    if not ctx.problems:
        annotated = _solve(annotated, ctx)
    if ctx.problems:
        return Err(TypeCheckError(to_text(predicate), ctx.problems))
    return Ok(annotated)


def type_from_expression(e: Expression) -> Type | None:
    """Read a type expression such as ``ℙ(S×ℤ)``; None if `e` denotes no type."""
    if isinstance(e, AtomicExpression):
        if e.op is AtomicOp.INTEGER:
            return INTEGER
        if e.op is AtomicOp.BOOL:
            return BOOLEAN
        return None
    if isinstance(e, Identifier):
        return GivenType(e.name)
    if isinstance(e, UnaryExpression) and e.op is UnaryExprOp.POW:
        base = type_from_expression(e.child)
        return None if base is None else PowerSetType(base)
    if isinstance(e, BinaryExpression) and e.op is BinaryExprOp.CPROD:
        left = type_from_expression(e.left)
        right = type_from_expression(e.right)
        if left is None or right is None:
            return None
        return ProductType(left, right)
    return None


def parse_type(source: str) -> Result[Type, ParseError]:
    """Parse a type written as an expression, e.g. ``POW(S**INTEGER)``."""
    match parse_expression(source):
        case Ok(expression):
            t = type_from_expression(expression)
            if t is None:
                return Err(ParseError(source, [f"'{source.strip()}' is not a type expression"]))
            return Ok(t)
        case Err(error):
            return Err(error)
    raise AssertionError("unreachable")

"""Types of the Event-B mathematical language.

Every well-typed expression has one of the following types:

- ℤ: the integers
- BOOL: the booleans
- Given sets: carrier sets declared in a context (e.g. S, COLOUR)
- ℙ(T): sets of elements of type T
- T×U: ordered pairs (maplets) of a T and a U

Identifiers are typed by a TypeEnvironment, which the type checker
consults for every free identifier of a formula.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IntegerType:
    """The type ℤ."""


@dataclass(frozen=True)
class BooleanType:
    """The type BOOL."""


@dataclass(frozen=True)
class GivenType:
    """A carrier set used as a type.

    Example: COLOUR — GivenType("COLOUR")
    """

    name: str


@dataclass(frozen=True)
class PowerSetType:
    """The type of sets of `base`.

    Example: ℙ(ℤ) — PowerSetType(IntegerType())
    """

    base: Type


@dataclass(frozen=True)
class ProductType:
    """The type of maplets left ↦ right.

    Example: S×ℤ — ProductType(GivenType("S"), IntegerType())
    """

    left: Type
    right: Type


# Union of all type forms
Type = IntegerType | BooleanType | GivenType | PowerSetType | ProductType


def type_to_text(t: Type) -> str:
    """Render a type in Rodin's notation, e.g. ``ℙ(S×ℤ)``."""
    if isinstance(t, IntegerType):
        return "ℤ"
    if isinstance(t, BooleanType):
        return "BOOL"
    if isinstance(t, GivenType):
        return t.name
    if isinstance(t, PowerSetType):
        return f"ℙ({type_to_text(t.base)})"
    if isinstance(t, ProductType):
        # × is left-associative: only a product on the right needs parentheses
        right = type_to_text(t.right)
        if isinstance(t.right, ProductType):
            right = f"({right})"
        return f"{type_to_text(t.left)}×{right}"
    raise TypeError(f"Unknown type: {type(t)}")


# ---------------------------------------------------------------------------
# Type environments
# ---------------------------------------------------------------------------

_EMPTY_SYMBOLS: Mapping[str, Type] = MappingProxyType({})


@dataclass(frozen=True)
class TypeEnvironment:
    """A named mapping from identifiers to their types.

    One environment is built per event: the machine's carrier sets,
    constants and variables, plus the event's parameters.
    """

    name: str
    symbols: Mapping[str, Type] = _EMPTY_SYMBOLS

    def get(self, identifier: str) -> Type | None:
        return self.symbols.get(identifier)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self.symbols

    def extend(self, name: str, symbols: Mapping[str, Type]) -> TypeEnvironment:
        """Return a new environment with `symbols` added (later ones win)."""
        merged = dict(self.symbols)
        merged.update(symbols)
        return TypeEnvironment(name=name, symbols=MappingProxyType(merged))

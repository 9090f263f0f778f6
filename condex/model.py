"""Machines, events and guards.

A machine is the statically checked form of an Event-B machine: its
carrier sets, typed constants and variables (its own and those of the
contexts it sees), and its events.  Each event has typed parameters and
an ordered sequence of labelled guards.

Example:
    machine TrafficLight
        sets COLOUR
        variables light : COLOUR, count : ℤ
        event change
            any c
            where
                @grd1 c ∈ COLOUR
                @grd2 c ≠ light ∧ count < 10

Events and guards keep their declaration order; the extractor addresses
them by position, labels are data.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .typesys import GivenType, PowerSetType, Type, TypeEnvironment

_NO_SYMBOLS: Mapping[str, Type] = MappingProxyType({})


@dataclass(frozen=True)
class Guard:
    """A labelled guard; `predicate` is the formula source text."""

    label: str
    predicate: str
    theorem: bool = False


@dataclass(frozen=True)
class Event:
    label: str
    guards: tuple[Guard, ...] = ()
    parameters: Mapping[str, Type] = field(default=_NO_SYMBOLS)


@dataclass(frozen=True)
class Machine:
    name: str
    events: tuple[Event, ...] = ()
    carrier_sets: tuple[str, ...] = ()
    constants: Mapping[str, Type] = field(default=_NO_SYMBOLS)
    variables: Mapping[str, Type] = field(default=_NO_SYMBOLS)

    def environment(self) -> TypeEnvironment:
        """Machine-level symbols: carrier sets typed ℙ(S), constants, variables."""
        symbols: dict[str, Type] = {s: PowerSetType(GivenType(s)) for s in self.carrier_sets}
        symbols.update(self.constants)
        symbols.update(self.variables)
        return TypeEnvironment(name=self.name, symbols=MappingProxyType(symbols))

    def type_environment(self, event: Event) -> TypeEnvironment:
        """Symbols visible in the guards of `event`.

        Parameters shadow variables, which shadow constants.
        """
        return self.environment().extend(f"{self.name}.{event.label}", event.parameters)

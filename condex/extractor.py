"""Extraction of the conditions of a machine.

For each event, every guard is parsed and split into conditions, repeated
conditions are dropped across all guards of the event, and the survivors
are numbered per guard:

    event change
        @grd1 x ∈ {1, 2}          grd1/1  x=1
                                  grd1/2  x=2
        @grd2 x = 1 ∨ y > 0       grd2/1  y>0     (x=1 repeats grd1/1)

Each condition carries its well-definedness predicate.  A guard that does
not parse, or a condition that does not type-check, aborts the whole
extraction.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from .dedup import deduplicate
from .errors import TypeCheckError
from .formula import Predicate
from .model import Event, Machine
from .result import Err, Ok, unwrap
from .service import EventBFormulaService, FormulaService
from .splitter import split
from .typecheck import is_type_checked
from .typesys import TypeEnvironment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Condition:
    identifier: str
    predicate: Predicate
    wd_predicate: str


@dataclass(frozen=True)
class EventConditions:
    """The conditions of one event, in guard order then split order."""

    label: str
    identifiers: tuple[str, ...]
    by_id: Mapping[str, Condition]

    def __iter__(self) -> Iterator[Condition]:
        for identifier in self.identifiers:
            yield self.by_id[identifier]

    def __len__(self) -> int:
        return len(self.identifiers)

    def __getitem__(self, identifier: str) -> Condition:
        return self.by_id[identifier]


@dataclass(frozen=True)
class Conditions:
    """Conditions of every event of a machine, keyed by event label in model order."""

    machine: str
    events: Mapping[str, EventConditions]

    def __iter__(self) -> Iterator[EventConditions]:
        return iter(self.events.values())

    def __getitem__(self, label: str) -> EventConditions:
        return self.events[label]

    def __len__(self) -> int:
        return len(self.events)

    @property
    def total(self) -> int:
        return sum(len(e) for e in self.events.values())


def condition_id(guard_label: str, index: int) -> str:
    """Identifier of the `index`-th (1-based) condition of a guard."""
    return f"{guard_label}/{index}"


class ConditionsExtractor:
    """Computes the conditions of `machine` once, at construction."""

    def __init__(self, machine: Machine, service: FormulaService | None = None) -> None:
        self.machine = machine
        self.service: FormulaService = service if service is not None else EventBFormulaService()
        self.conditions = self._extract()

    def _extract(self) -> Conditions:
        events = {event.label: self._event_conditions(event) for event in self.machine.events}
        conditions = Conditions(self.machine.name, MappingProxyType(events))
        logger.info(
            "Extracted %d condition(s) from %d event(s) of %s",
            conditions.total, len(conditions), self.machine.name,
        )
        return conditions

    def _event_conditions(self, event: Event) -> EventConditions:
        per_guard: list[list[Predicate]] = []
        for guard in event.guards:
            predicate = unwrap(self.service.parse(guard.predicate, guard.label))
            conditions = split(predicate)
            logger.debug(
                "%s/%s: %d condition(s) before deduplication",
                event.label, guard.label, len(conditions),
            )
            per_guard.append(conditions)

        result = deduplicate(per_guard)
        environment = self.machine.type_environment(event)
        identifiers: list[str] = []
        by_id: dict[str, Condition] = {}
        for guard, survivors in zip(event.guards, result.survivors, strict=True):
            for index, predicate in enumerate(survivors, start=1):
                identifier = condition_id(guard.label, index)
                typed = self._typed(predicate, environment, guard.label)
                wd = self.service.well_definedness_text(typed)
                identifiers.append(identifier)
                by_id[identifier] = Condition(identifier, typed, wd)
        return EventConditions(event.label, tuple(identifiers), MappingProxyType(by_id))

    def _typed(self, predicate: Predicate, environment: TypeEnvironment, label: str) -> Predicate:
        if is_type_checked(predicate):
            return predicate
        match self.service.type_check(predicate, environment):
            case Ok(typed):
                return typed
            case Err(error):
                raise TypeCheckError(error.formula_text, error.problems, label=label) from error
        raise AssertionError("unreachable")


def extract_conditions(machine: Machine, service: FormulaService | None = None) -> Conditions:
    return ConditionsExtractor(machine, service).conditions

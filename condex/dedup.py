"""Removal of repeated conditions within an event.

The conditions of all guards of an event are scanned once, in guard order
and then split order.  A condition is dropped if it is structurally
identical to a condition already kept, or if its canonical form equals
the canonical form of one; the earliest occurrence always survives.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .canonical import canonical_form
from .formula import Predicate, to_text

logger = logging.getLogger(__name__)


class DuplicateKind(Enum):
    IDENTICAL = "identical"
    CANONICAL = "canonical"


@dataclass(frozen=True)
class Duplicate:
    """A dropped condition and the kept condition it repeats.

    Positions are indices into the per-guard split lists.
    """

    guard_index: int
    position: int
    first_guard_index: int
    first_position: int
    kind: DuplicateKind


@dataclass(frozen=True)
class DedupResult:
    survivors: tuple[tuple[Predicate, ...], ...]
    duplicates: tuple[Duplicate, ...]


def deduplicate(per_guard: Sequence[Sequence[Predicate]]) -> DedupResult:
    """Keep the first occurrence of every condition across `per_guard`.

    The result has one survivor tuple per input guard, each in its
    original order.
    """
    kept_nodes: dict[Predicate, tuple[int, int]] = {}
    kept_keys: dict[str, tuple[int, int]] = {}
    survivors: list[tuple[Predicate, ...]] = []
    duplicates: list[Duplicate] = []

    for g, conditions in enumerate(per_guard):
        kept: list[Predicate] = []
        for i, condition in enumerate(conditions):
            first = kept_nodes.get(condition)
            kind = DuplicateKind.IDENTICAL
            if first is None:
                key = canonical_form(condition)
                first = kept_keys.get(key)
                kind = DuplicateKind.CANONICAL
                if first is None:
                    kept_keys[key] = (g, i)
                    kept_nodes[condition] = (g, i)
                    kept.append(condition)
                    continue
            logger.debug(
                "Dropping %s (guard %d, position %d): %s duplicate of guard %d, position %d",
                to_text(condition), g, i, kind.value, first[0], first[1],
            )
            duplicates.append(Duplicate(g, i, first[0], first[1], kind))
        survivors.append(tuple(kept))

    return DedupResult(survivors=tuple(survivors), duplicates=tuple(duplicates))

"""Errors raised while extracting conditions from a machine.

Parse and type-check failures are static defects of the model: they are
never retried and abort extraction of the whole machine.
"""

from __future__ import annotations

from collections.abc import Sequence


class IllegalModelError(Exception):
    """A guard of the machine cannot be processed."""


class ParseError(IllegalModelError):
    """A formula is not syntactically valid.

    `label` names the guard the formula came from, when known.
    """

    def __init__(self, source: str, problems: Sequence[str], label: str | None = None) -> None:
        self.source = source
        self.problems = tuple(problems)
        self.label = label
        if label is None:
            header = f"Cannot parse formula: {source}:"
        else:
            header = f"Cannot parse guard {label}: {source}:"
        super().__init__("\n".join([header, *self.problems]))


class TypeCheckError(IllegalModelError):
    """A formula does not type-check against its type environment."""

    def __init__(
        self, formula_text: str, problems: Sequence[str], label: str | None = None
    ) -> None:
        self.formula_text = formula_text
        self.problems = tuple(problems)
        self.label = label
        header = f"Cannot type-check predicate: {formula_text}"
        if label is not None:
            header = f"{header} (guard {label})"
        super().__init__("\n".join([header, *self.problems]))


class ModelLoadError(Exception):
    """A machine file cannot be read or is malformed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")

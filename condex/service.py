"""The formula service used by the conditions extractor.

The extractor only needs three things from the mathematical language:
parse a guard, type-check a condition, and compute the well-definedness
predicate of a typed condition.  `FormulaService` names that interface;
`EventBFormulaService` implements it with this package's grammar, type
checker and WD rules.
"""

from __future__ import annotations

from typing import Protocol

from .errors import ParseError, TypeCheckError
from .formula import Predicate, to_text
from .grammar import parse_predicate
from .result import Err, Ok, Result
from .typecheck import is_type_checked, type_check
from .typesys import TypeEnvironment
from .wd import well_definedness_text


class FormulaService(Protocol):
    def parse(self, source: str, label: str) -> Result[Predicate, ParseError]: ...

    def type_check(
        self, formula: Predicate, environment: TypeEnvironment
    ) -> Result[Predicate, TypeCheckError]: ...

    def well_definedness_text(self, formula: Predicate) -> str: ...


class EventBFormulaService:
    """Parses and types Event-B predicates.

    Parsing does not depend on the type environment; `label` names the
    guard in diagnostics.
    """

    def parse(self, source: str, label: str) -> Result[Predicate, ParseError]:
        match parse_predicate(source):
            case Ok(predicate):
                return Ok(predicate)
            case Err(error):
                return Err(ParseError(error.source, error.problems, label=label))
        raise AssertionError("unreachable")

    def type_check(
        self, formula: Predicate, environment: TypeEnvironment
    ) -> Result[Predicate, TypeCheckError]:
        return type_check(formula, environment)

    def well_definedness_text(self, formula: Predicate) -> str:
        if not is_type_checked(formula):
            raise ValueError(f"Formula has not been type-checked: {to_text(formula)}")
        return well_definedness_text(formula)

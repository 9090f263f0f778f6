"""condex: extraction of elementary conditions from Event-B guards."""

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
from .formula import (
    AssociativeExpression,
    AssociativePredicate,
    AtomicExpression,
    BinaryExpression,
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
    UnaryPredicate,
    to_text,
)
from .errors import IllegalModelError, ModelLoadError, ParseError, TypeCheckError
from .grammar import parse_expression, parse_predicate
from .typecheck import is_type_checked, parse_type, type_check
from .wd import well_definedness, well_definedness_text
from .service import EventBFormulaService, FormulaService
from .model import Event, Guard, Machine
from .splitter import split
from .canonical import canonical_form
from .dedup import deduplicate
from .extractor import (
    Condition,
    Conditions,
    ConditionsExtractor,
    EventConditions,
    condition_id,
    extract_conditions,
)
from .serialization import dumps_conditions, dumps_machine, loads_machine
from .load import load_machine
from .report import print_conditions, render_markdown
from .result import Ok, Err, Result

__all__ = [
    # Types
    "BooleanType", "GivenType", "IntegerType", "PowerSetType", "ProductType",
    "Type", "TypeEnvironment", "type_to_text",
    # Formulas
    "AssociativeExpression", "AssociativePredicate", "AtomicExpression",
    "BinaryExpression", "BinaryPredicate", "Expression", "FinitePredicate",
    "Formula", "FunctionApplication", "Identifier", "IntegerLiteral",
    "LiteralPredicate", "Predicate", "QuantifiedPredicate",
    "RelationalPredicate", "RelOp", "SetExtension", "UnaryExpression",
    "UnaryPredicate", "to_text",
    # Errors
    "IllegalModelError", "ModelLoadError", "ParseError", "TypeCheckError",
    # Formula service
    "parse_expression", "parse_predicate", "is_type_checked", "parse_type",
    "type_check", "well_definedness", "well_definedness_text",
    "EventBFormulaService", "FormulaService",
    # Model
    "Event", "Guard", "Machine", "load_machine",
    # Extraction
    "split", "canonical_form", "deduplicate", "Condition", "Conditions",
    "ConditionsExtractor", "EventConditions", "condition_id", "extract_conditions",
    # Output
    "dumps_conditions", "dumps_machine", "loads_machine", "print_conditions",
    "render_markdown",
    # Result
    "Ok", "Err", "Result",
]

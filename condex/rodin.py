"""Reader for Rodin statically checked machine files (``.bcm``).

A ``.bcm`` file is the output of Rodin's static checker: every element is
already type-checked and carries its type as text.  The parts read here:

    <org.eventb.core.scMachineFile>
      <org.eventb.core.scInternalContext name="ctx">
        <org.eventb.core.scCarrierSet name="COLOUR" .../>
        <org.eventb.core.scConstant name="red" org.eventb.core.type="COLOUR"/>
      </org.eventb.core.scInternalContext>
      <org.eventb.core.scVariable name="light" org.eventb.core.type="COLOUR"/>
      <org.eventb.core.scEvent org.eventb.core.label="change">
        <org.eventb.core.scParameter name="c" org.eventb.core.type="COLOUR"/>
        <org.eventb.core.scGuard org.eventb.core.label="grd1"
                                 org.eventb.core.predicate="c≠light"/>
      </org.eventb.core.scEvent>
    </org.eventb.core.scMachineFile>

Axioms, invariants, actions and the other proof-related elements are
skipped.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from types import MappingProxyType

from .errors import ModelLoadError
from .model import Event, Guard, Machine
from .result import Err, Ok, Result
from .typecheck import parse_type
from .typesys import Type

logger = logging.getLogger(__name__)

_CORE = "org.eventb.core."

MACHINE_FILE = _CORE + "scMachineFile"
INTERNAL_CONTEXT = _CORE + "scInternalContext"
CARRIER_SET = _CORE + "scCarrierSet"
CONSTANT = _CORE + "scConstant"
VARIABLE = _CORE + "scVariable"
EVENT = _CORE + "scEvent"
PARAMETER = _CORE + "scParameter"
GUARD = _CORE + "scGuard"

LABEL = _CORE + "label"
PREDICATE = _CORE + "predicate"
TYPE = _CORE + "type"
THEOREM = _CORE + "theorem"
CONCRETE = _CORE + "concrete"

# Elements that carry nothing needed for condition extraction.
_SKIPPED = frozenset(
    _CORE + tag
    for tag in (
        "scAxiom",
        "scInvariant",
        "scTheorem",
        "scVariant",
        "scAction",
        "scWitness",
        "scRefinesEvent",
        "scRefinesMachine",
        "scSeesContext",
        "scExtendsContext",
        "scInternalContext",
        "scCarrierSet",
        "scConstant",
    )
)


class _BcmError(Exception):
    pass


def _typed_symbol(element: ET.Element) -> tuple[str, Type]:
    name = element.get("name")
    text = element.get(TYPE)
    if name is None or text is None:
        raise _BcmError(f"<{element.tag}> without name or type")
    match parse_type(text):
        case Ok(t):
            return name, t
        case Err(error):
            raise _BcmError(f"Bad type {text!r} for {name}: {error.problems[0]}")
    raise AssertionError("unreachable")


def _read_event(element: ET.Element) -> Event:
    label = element.get(LABEL)
    if label is None:
        raise _BcmError("event without label")
    guards: list[Guard] = []
    parameters: dict[str, Type] = {}
    for child in element:
        if child.tag == PARAMETER:
            name, t = _typed_symbol(child)
            parameters[name] = t
        elif child.tag == GUARD:
            guard_label = child.get(LABEL)
            predicate = child.get(PREDICATE)
            if guard_label is None or predicate is None:
                raise _BcmError(f"guard without label or predicate in event {label}")
            theorem = child.get(THEOREM, "false") == "true"
            guards.append(Guard(guard_label, predicate, theorem))
        elif child.tag not in _SKIPPED:
            logger.warning("Skipping unknown element <%s> in event %s", child.tag, label)
    return Event(label, tuple(guards), MappingProxyType(parameters))


def _read_machine(root: ET.Element, name: str) -> Machine:
    if root.tag != MACHINE_FILE:
        raise _BcmError(f"not a statically checked machine (root <{root.tag}>)")
    carrier_sets: list[str] = []
    constants: dict[str, Type] = {}
    variables: dict[str, Type] = {}
    events: list[Event] = []

    for context in root.iter(INTERNAL_CONTEXT):
        for element in context.iter(CARRIER_SET):
            set_name = element.get("name")
            if set_name is None:
                raise _BcmError("carrier set without name")
            carrier_sets.append(set_name)
        for element in context.iter(CONSTANT):
            constant, t = _typed_symbol(element)
            constants[constant] = t

    for element in root:
        if element.tag == VARIABLE:
            # abstract variables that disappear in this machine are not in scope
            if element.get(CONCRETE, "true") == "false":
                continue
            variable, t = _typed_symbol(element)
            variables[variable] = t
        elif element.tag == EVENT:
            events.append(_read_event(element))
        elif element.tag not in _SKIPPED:
            logger.warning("Skipping unknown element <%s>", element.tag)

    return Machine(
        name=name,
        events=tuple(events),
        carrier_sets=tuple(carrier_sets),
        constants=MappingProxyType(constants),
        variables=MappingProxyType(variables),
    )


def load_bcm(path: str | Path) -> Result[Machine, ModelLoadError]:
    """Read a Rodin ``.bcm`` file; the machine is named after the file."""
    path = Path(path)
    try:
        root = ET.parse(path).getroot()
    except OSError as e:
        return Err(ModelLoadError(str(path), f"Could not read file: {e}"))
    except ET.ParseError as e:
        return Err(ModelLoadError(str(path), f"Malformed XML: {e}"))
    try:
        return Ok(_read_machine(root, path.stem))
    except _BcmError as e:
        return Err(ModelLoadError(str(path), str(e)))

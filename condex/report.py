"""Renderings of an extracted conditions table."""

from __future__ import annotations

import os
from typing import TextIO

import jinja2

from .extractor import Conditions
from .formula import to_text

_TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")
_ENV = jinja2.Environment(
    loader=jinja2.FileSystemLoader(_TEMPLATE_DIR),
    autoescape=False,
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
)
_ENV.filters["formula"] = to_text


def print_conditions(conditions: Conditions, out: TextIO) -> None:
    """Write each event label, its conditions as `` - [id] text``, then a blank line."""
    for event in conditions:
        out.write(f"{event.label}\n")
        for condition in event:
            out.write(f" - [{condition.identifier}] {to_text(condition.predicate)}\n")
        out.write("\n")


def render_markdown(conditions: Conditions) -> str:
    """Markdown report: one table per event with each condition's WD predicate."""
    return _ENV.get_template("conditions.md.j2").render(conditions=conditions)

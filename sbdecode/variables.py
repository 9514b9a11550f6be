"""Variable declarations and textual substitution for overlay event lines."""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from sbdecode.errors import report_diagnostic

VARIABLE_MARKER = "$"

_DEFINITION_REGEX = re.compile(r"^(\$[^=]+)=(.*)$")
_REFERENCE_REGEX = re.compile(r"\$[^,]*")


@dataclass(frozen=True)
class VariableTable:
    """Immutable ``$name -> replacement`` bindings from a ``[Variables]`` section."""

    bindings: Mapping[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.bindings)

    def __contains__(self, name: object) -> bool:
        return name in self.bindings

    def resolve(self, name: str) -> Optional[str]:
        return self.bindings.get(name)

    def substitute(self, text: str) -> str:
        return substitute_variables(text, self)


def parse_variable_definition(line: str) -> Optional[Tuple[str, str]]:
    """Split a ``$name=value`` line, or return ``None`` when it is malformed."""
    match = _DEFINITION_REGEX.match(line)
    if match is None:
        return None
    return match.group(1), match.group(2)


def build_variable_table(definitions: List[Tuple[str, str]]) -> VariableTable:
    bindings: Dict[str, str] = {}
    for name, value in definitions:
        # Later declarations win.
        bindings[name] = value
    return VariableTable(bindings)


def substitute_variables(text: str, table: VariableTable) -> str:
    """Replace every ``$name`` reference in ``text`` with its bound value.

    A reference runs from the marker to the next comma or the end of the line.
    Replacement text is not scanned again, so a value that itself contains a
    reference is inserted verbatim. Unknown names are kept as written.
    """
    references = list(_REFERENCE_REGEX.finditer(text))
    if not references:
        return text

    pieces: List[str] = []
    cursor = 0
    for match in references:
        name = match.group(0)
        value = table.resolve(name)
        if value is None:
            report_diagnostic(f"Unresolved variable '{name}'.")
            value = name
        pieces.append(text[cursor:match.start()])
        pieces.append(value)
        cursor = match.end()
    pieces.append(text[cursor:])
    return "".join(pieces)

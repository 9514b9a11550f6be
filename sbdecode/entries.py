"""Line parser turning storyboard text into a forest of generic entries."""

import re
from enum import Enum
from typing import List, Optional, Tuple

from sbdecode.errors import line_context, report_diagnostic
from sbdecode.model import Entry
from sbdecode.variables import (
    VariableTable,
    build_variable_table,
    parse_variable_definition,
)

INDENT_MAX_LEVEL = 2

_LINE_BREAK_REGEX = re.compile(r"\r?\n")
_COMMENT_REGEX = re.compile(r"^\s*//")
_INDENT_REGEX = re.compile(r"^([_ ]*)(.*)$", re.DOTALL)
_HEADER_REGEX = re.compile(r"^\[(.*)\]$")


class _Section(Enum):
    NONE = "none"
    VARIABLES = "variables"
    EVENTS = "events"


def _section_for_header(name: str, allow_variables: bool) -> _Section:
    lowered = name.lower()
    if lowered == "events":
        return _Section.EVENTS
    if lowered == "variables":
        if allow_variables:
            return _Section.VARIABLES
        report_diagnostic("[Variables] section is not allowed in this document; ignoring it.")
    return _Section.NONE


def parse_entries(
    text: str,
    *,
    allow_variables: bool = False,
    variables: Optional[VariableTable] = None,
) -> Tuple[List[Entry], Optional[VariableTable]]:
    """Parse the ``[Events]`` section of ``text`` into top-level entries.

    Args:
        text: Full document text. Unrelated sections are skipped.
        allow_variables: Whether this document may declare ``[Variables]``.
        variables: Bindings to substitute into event lines before splitting.

    Returns:
        The top-level entries in document order, and the variable table
        declared by this document (``None`` when it has no variables section).
    """
    entries: List[Entry] = []
    stack: List[Entry] = []
    definitions: List[Tuple[str, str]] = []
    saw_variables = False
    section = _Section.NONE

    for line_no, line in enumerate(_LINE_BREAK_REGEX.split(text), start=1):
        if _COMMENT_REGEX.match(line) or not line.strip():
            continue

        with line_context(line_no):
            header = _HEADER_REGEX.match(line.rstrip())
            if header is not None:
                section = _section_for_header(header.group(1), allow_variables)
                saw_variables = saw_variables or section is _Section.VARIABLES
                stack.clear()
                continue

            if section is _Section.VARIABLES:
                definition = parse_variable_definition(line.strip())
                if definition is None:
                    report_diagnostic(f"Malformed variable declaration '{line.strip()}'.")
                    continue
                definitions.append(definition)
                continue

            if section is not _Section.EVENTS:
                continue

            match = _INDENT_REGEX.match(line)
            indent, content = match.group(1), match.group(2)
            depth = len(indent)
            allowed = min(INDENT_MAX_LEVEL, len(stack))
            if depth > allowed:
                report_diagnostic(f"Unexpected indent of depth {depth}; using depth {allowed}.")
                depth = allowed

            if variables is not None:
                content = variables.substitute(content)

            # Quoted fields are not protected: a comma inside a filename splits it.
            entry = Entry(values=content.split(","), line=line_no)

            del stack[depth:]
            if depth == 0:
                entries.append(entry)
            else:
                stack[depth - 1].children.append(entry)
            stack.append(entry)

    table = build_variable_table(definitions) if saw_variables else None
    return entries, table

# File: schemagen/markup.py
"""
SchemaGen - Block Markup Interpreter
=====================================
A tiny markup language for writing whole blocks of generated code in one
call.  Each fragment passed to ``interpret_block`` is scanned character by
character; control characters drive the writer, everything else is text.

=========  ===============================================================
Character  Effect
=========  ===============================================================
``\\a``    push the writer's default indent
``\\b``    pop one indent level
``\\n``    end the current line
``{``      break the line unless already at a line start, then open scope
``}``      break the line unless already at a line start, then close scope
other      written verbatim
=========  ===============================================================

An empty fragment produces exactly one blank line.

Braces are *always* structural: a fragment cannot contain a literal ``{``
or ``}``.  Code that needs literal braces (string interpolation, object
initializers) must be written through the writer directly.

Example::

    interpret_block(writer, [
        "if (source == null){",
        "return null;",
        "}",
    ])

produces::

    if (source == null)
    {
        return null;
    }
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List

from schemagen.errors import InvalidArgumentError

if TYPE_CHECKING:
    from schemagen.writer import CodeWriter

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.markup")

# ---------------------------------------------------------------------------
# Control characters
# ---------------------------------------------------------------------------

INDENT_MARKER: str = "\a"
DEDENT_MARKER: str = "\b"
NEWLINE_MARKER: str = "\n"
SCOPE_OPEN_MARKER: str = "{"
SCOPE_CLOSE_MARKER: str = "}"


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _indent(writer: CodeWriter) -> None:
    writer.push_indent(writer.default_indent)


def _dedent(writer: CodeWriter) -> None:
    writer.pop_indent()


def _newline(writer: CodeWriter) -> None:
    writer.write_line()


def _break_line(writer: CodeWriter) -> None:
    if not writer.at_line_start:
        writer.write_line()


def _open_scope(writer: CodeWriter) -> None:
    _break_line(writer)
    writer.open_scope()


def _close_scope(writer: CodeWriter) -> None:
    _break_line(writer)
    writer.close_scope()


_HANDLERS: Dict[str, Callable[["CodeWriter"], None]] = {
    INDENT_MARKER: _indent,
    DEDENT_MARKER: _dedent,
    NEWLINE_MARKER: _newline,
    SCOPE_OPEN_MARKER: _open_scope,
    SCOPE_CLOSE_MARKER: _close_scope,
}

CONTROL_CHARACTERS: frozenset = frozenset(_HANDLERS)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def dispatch_control_character(writer: CodeWriter, char: str) -> None:
    """
    Apply the effect of a single markup character.

    Characters without a handler are written verbatim.
    """
    handler = _HANDLERS.get(char)
    if handler is None:
        writer.write(char)
    else:
        handler(writer)


def interpret_block(writer: CodeWriter, lines: Iterable[str]) -> None:
    """
    Interpret each fragment of *lines* against *writer*.

    Runs of ordinary characters are written with a single ``write`` call;
    since such runs never contain a line terminator this is equivalent to
    writing them one character at a time.
    """
    for line in lines:
        if line is None:
            raise InvalidArgumentError("lines", "Markup fragments must not be None.")
        if line == "":
            writer.write_line()
            continue

        start: int = 0
        for position, char in enumerate(line):
            if char not in _HANDLERS:
                continue
            if position > start:
                writer.write(line[start:position])
            dispatch_control_character(writer, char)
            start = position + 1
        if start < len(line):
            writer.write(line[start:])


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "INDENT_MARKER",
    "DEDENT_MARKER",
    "NEWLINE_MARKER",
    "SCOPE_OPEN_MARKER",
    "SCOPE_CLOSE_MARKER",
    "CONTROL_CHARACTERS",
    "dispatch_control_character",
    "interpret_block",
]

logger.debug("schemagen.markup loaded: %d public symbols.", len(__all__))

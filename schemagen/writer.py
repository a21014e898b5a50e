# File: schemagen/writer.py
"""
SchemaGen - Indentation-Aware Code Writer
==========================================
``CodeWriter`` accumulates generated source text while tracking a stack of
indentation segments, scope boundaries and whether the last write ended a
line.

Indentation is applied *lazily*: a write that ends with a line terminator
does not leave indentation behind it.  The indentation for the next line is
emitted by the next non-empty write, using whatever indent is current at
that moment.  This is what lets callers pop an indent level between lines
without producing trailing whitespace or indent-only lines.

Performance contract:
    - Output is accumulated as ``List[str]`` chunks and joined on demand.
    - Every operation is O(len(text)); ``code_output`` is O(total) once and
      then cached as a single chunk.

Thread-safety: NOT thread-safe.  One writer per rendering pass; callers
serialize access when sharing one.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Union

from schemagen.errors import InvalidArgumentError, StructuralInconsistencyError
from schemagen.markup import interpret_block
from schemagen.utils import break_into_lines, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.writer")


# ---------------------------------------------------------------------------
# CodeWriter
# ---------------------------------------------------------------------------


class CodeWriter:
    """
    Stateful text emitter with a nested indentation stack.

    Usage::

        writer = CodeWriter()
        writer.write_line("class Customer")
        writer.open_scope()
        writer.write_line("public int Id { get; set; }")
        writer.close_scope()
        print(writer.code_output)

    Popping an empty indent stack is lenient by default (returns ``""``);
    pass ``strict_indent=True`` to have unbalanced pops raise
    ``StructuralInconsistencyError`` instead.
    """

    DEFAULT_INDENT: str = "\t"
    COMMENT_PREFIX: str = "//"
    SCOPE_OPEN: str = "{"
    SCOPE_CLOSE: str = "}"

    def __init__(
        self,
        *,
        newline: str = "\n",
        default_indent: str = DEFAULT_INDENT,
        strict_indent: bool = False,
        generate_partial_classes: bool = False,
    ) -> None:
        if newline is None:
            raise InvalidArgumentError("newline")
        if not newline:
            raise InvalidArgumentError("newline", "Line terminator must not be empty.")
        if default_indent is None:
            raise InvalidArgumentError("default_indent")

        self._newline: str = newline
        self._default_indent: str = default_indent
        self.strict_indent: bool = strict_indent
        self.generate_partial_classes: bool = generate_partial_classes

        self._chunks: List[str] = []
        self._current_indent: str = ""
        self._indent_lengths: List[int] = []
        self._ends_with_newline: bool = False
        # dict keeps insertion order; values unused
        self._action_methods: Dict[str, None] = {}

    # -----------------------------------------------------------------
    # Read-only state
    # -----------------------------------------------------------------

    @property
    def code_output(self) -> str:
        """Everything written since construction or the last ``reset()``."""
        if len(self._chunks) > 1:
            self._chunks = ["".join(self._chunks)]
        return self._chunks[0] if self._chunks else ""

    @property
    def current_indent(self) -> str:
        return self._current_indent

    @property
    def indent_depth(self) -> int:
        return len(self._indent_lengths)

    @property
    def ends_with_newline(self) -> bool:
        return self._ends_with_newline

    @property
    def at_line_start(self) -> bool:
        """True when the next write starts a fresh line."""
        return not self._chunks or self._ends_with_newline

    @property
    def newline(self) -> str:
        return self._newline

    @property
    def default_indent(self) -> str:
        return self._default_indent

    @property
    def action_methods(self) -> List[str]:
        return list(self._action_methods)

    # -----------------------------------------------------------------
    # Core emission
    # -----------------------------------------------------------------

    def write(self, text: str) -> None:
        """
        Append *text*, applying the current indent to every line start.

        The indent for a line is written by the first non-empty write on
        that line.  A trailing line terminator is not followed by indent.
        """
        if text is None:
            raise InvalidArgumentError("text")
        if not text:
            return

        if not self._chunks or self._ends_with_newline:
            self._append(self._current_indent)
            self._ends_with_newline = False

        if text.endswith(self._newline):
            self._ends_with_newline = True

        if not self._current_indent:
            self._append(text)
            return

        text = text.replace(self._newline, self._newline + self._current_indent)
        if self._ends_with_newline:
            text = text[: len(text) - len(self._current_indent)]
        self._append(text)

    def write_line(self, text: str = "") -> None:
        """Write *text* (if any) followed by exactly one line terminator."""
        if text is None:
            raise InvalidArgumentError("text")
        if text:
            self.write(text)
        self._chunks.append(self._newline)
        self._ends_with_newline = True

    def write_block(self, *lines: str) -> None:
        """Interpret *lines* as block markup (see ``schemagen.markup``)."""
        interpret_block(self, lines)

    # -----------------------------------------------------------------
    # Indentation stack
    # -----------------------------------------------------------------

    def push_indent(self, indent: str = DEFAULT_INDENT) -> None:
        """Push one indent segment.  An empty segment is a legal level."""
        if indent is None:
            raise InvalidArgumentError("indent")
        self._current_indent += indent
        self._indent_lengths.append(len(indent))

    def pop_indent(self) -> str:
        """Pop the most recent indent segment and return it."""
        if not self._indent_lengths:
            if self.strict_indent:
                raise StructuralInconsistencyError(
                    "pop_indent() called with an empty indent stack."
                )
            logger.debug("pop_indent() on an empty indent stack ignored.")
            return ""

        length: int = self._indent_lengths.pop()
        cut: int = len(self._current_indent) - length
        removed: str = self._current_indent[cut:]
        self._current_indent = self._current_indent[:cut]
        return removed

    def clear_indent(self) -> None:
        self._indent_lengths.clear()
        self._current_indent = ""

    # -----------------------------------------------------------------
    # Scopes
    # -----------------------------------------------------------------

    def open_scope(self, marker: str = SCOPE_OPEN) -> None:
        """Write *marker* on its own line, then indent one level."""
        self.write_line(marker)
        self.push_indent(self._default_indent)

    def close_scope(self, marker: str = SCOPE_CLOSE) -> None:
        """Outdent one level, then write *marker* on its own line."""
        self.pop_indent()
        self.write_line(marker)

    # -----------------------------------------------------------------
    # Comments and documentation blocks
    # -----------------------------------------------------------------

    def write_comment(self, text: str) -> None:
        """Write a single-line comment (prefix + text, no added space)."""
        self.write_line(f"{self.COMMENT_PREFIX}{text}")

    def write_wrapped(self, text: str, prefix: str, line_length: int = 80) -> None:
        """Word-wrap *text* and write each resulting line behind *prefix*."""
        for line in break_into_lines(text, line_length):
            self.write_line(f"{prefix}{line}")

    # -----------------------------------------------------------------
    # Action registry
    # -----------------------------------------------------------------

    def add_action(self, method_name: str) -> bool:
        """
        Register an action (method) name.

        Returns False when the name was already registered.
        """
        if method_name is None:
            raise InvalidArgumentError("method_name")
        if method_name in self._action_methods:
            return False
        self._action_methods[method_name] = None
        return True

    # -----------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------

    def reset(self) -> None:
        """Return to the freshly-constructed state (options are kept)."""
        self._chunks.clear()
        self._ends_with_newline = False
        self._action_methods.clear()
        self.clear_indent()

    def save(self, output_path: Union[str, Path]) -> int:
        """Write ``code_output`` to *output_path*; returns bytes written."""
        if output_path is None:
            raise InvalidArgumentError("output_path")
        return write_file(Path(output_path), self.code_output)

    # -----------------------------------------------------------------
    # Internal
    # -----------------------------------------------------------------

    def _append(self, chunk: str) -> None:
        if chunk:
            self._chunks.append(chunk)

    def __str__(self) -> str:
        return self.code_output

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} depth={self.indent_depth} "
            f"chars={len(self.code_output)}>"
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "CodeWriter",
]

logger.debug("schemagen.writer loaded: %d public symbols.", len(__all__))

"""
tests/test_markup.py
Unit tests for schemagen.markup (block markup interpreter).

Tests cover:
- Each control character
- Scope braces with and without a pending line
- Empty fragments and None fragments
- Equivalence of batched and per-character interpretation
"""

from __future__ import annotations

from typing import List

import pytest

from schemagen.errors import InvalidArgumentError
from schemagen.markup import (
    CONTROL_CHARACTERS,
    DEDENT_MARKER,
    INDENT_MARKER,
    dispatch_control_character,
    interpret_block,
)
from schemagen.writer import CodeWriter


def _render(lines: List[str], **kwargs) -> str:
    writer = CodeWriter(**kwargs)
    interpret_block(writer, lines)
    return writer.code_output


class TestControlCharacters:
    """Effect of the individual markup characters."""

    def test_control_set(self) -> None:
        assert CONTROL_CHARACTERS == frozenset({"\a", "\b", "\n", "{", "}"})

    def test_plain_text_is_verbatim(self) -> None:
        assert _render(["return x;"]) == "return x;"

    def test_newline_ends_line(self) -> None:
        assert _render(["a\nb"]) == "a\nb"

    def test_indent_and_dedent(self) -> None:
        assert _render([f"{INDENT_MARKER}x\n{DEDENT_MARKER}y"]) == "\tx\ny"

    def test_indent_uses_writer_default(self) -> None:
        assert _render([f"{INDENT_MARKER}x"], default_indent="  ") == "  x"

    def test_dedent_on_empty_stack_is_lenient(self) -> None:
        assert _render([f"{DEDENT_MARKER}x"]) == "x"

    def test_dispatch_writes_other_characters(self) -> None:
        writer = CodeWriter()
        dispatch_control_character(writer, "q")
        dispatch_control_character(writer, "\n")
        assert writer.code_output == "q\n"


class TestScopeMarkup:
    """Braces break the line and open or close a scope."""

    def test_brace_after_text_breaks_line(self) -> None:
        assert _render(["if (x){", "y;", "}"]) == "if (x)\n{\n\ty;\n}\n"

    def test_leading_brace_has_no_blank_line(self) -> None:
        assert _render(["{", "}"]) == "{\n}\n"

    def test_brace_at_line_start_does_not_break(self) -> None:
        assert _render(["a\n", "{", "}"]) == "a\n{\n}\n"

    def test_nested_scopes(self) -> None:
        assert _render(["{", "{", "x;", "}", "}"]) == "{\n\t{\n\t\tx;\n\t}\n}\n"

    def test_close_brace_inside_fragment(self) -> None:
        assert _render(["{a;}b;"]) == "{\n\ta;\n}\nb;"


class TestFragments:
    """Fragment-level rules."""

    def test_empty_fragment_is_blank_line(self) -> None:
        assert _render(["a", "", "b"]) == "a\nb"
        assert _render([""]) == "\n"

    def test_none_fragment_raises(self) -> None:
        writer = CodeWriter()
        with pytest.raises(InvalidArgumentError):
            interpret_block(writer, ["a", None])  # type: ignore[list-item]

    def test_write_block_delegates(self) -> None:
        writer = CodeWriter()
        writer.write_block("if (source == null){", "return null;", "}")
        assert writer.code_output == "if (source == null)\n{\n\treturn null;\n}\n"

    @pytest.mark.parametrize(
        "fragment",
        [
            "abc",
            "a{b}c",
            "x\ay\bz",
            "one\ntwo\n{three}\n",
            "\a\a{deep}\b\bshallow",
        ],
    )
    def test_batched_equals_per_character(self, fragment: str) -> None:
        batched = CodeWriter()
        interpret_block(batched, [fragment])

        per_char = CodeWriter()
        for char in fragment:
            dispatch_control_character(per_char, char)

        assert batched.code_output == per_char.code_output

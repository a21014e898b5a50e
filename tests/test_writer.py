"""
tests/test_writer.py
Unit tests for schemagen.writer (CodeWriter) and schemagen.csharp (CSharpWriter).

Tests cover:
- Lazy indentation and trailing line terminators
- The indent stack (push / pop / clear, lenient and strict pops)
- Scope helpers and nesting
- Argument checks that leave the writer untouched
- Action registry, reset and save
- C# constructs built on top of the writer
"""

from __future__ import annotations

import pathlib
from typing import List, Tuple

import pytest

from schemagen.csharp import CSharpWriter
from schemagen.errors import InvalidArgumentError, StructuralInconsistencyError
from schemagen.writer import CodeWriter


# ===========================================================================
# Core emission
# ===========================================================================


class TestWrite:
    """write() and write_line() behaviour."""

    def test_write_without_indent_is_verbatim(self, writer: CodeWriter) -> None:
        writer.write("abc")
        writer.write("def")
        assert writer.code_output == "abcdef"

    def test_empty_write_is_noop(self, writer: CodeWriter) -> None:
        writer.push_indent("\t")
        writer.write("")
        assert writer.code_output == ""
        assert writer.at_line_start is True

    def test_indent_applied_to_every_line(self, writer: CodeWriter) -> None:
        writer.push_indent("  ")
        writer.write("a\nb")
        assert writer.code_output == "  a\n  b"

    def test_trailing_terminator_leaves_no_indent(self, writer: CodeWriter) -> None:
        writer.push_indent("\t")
        writer.write("a\n")
        assert writer.code_output == "\ta\n"
        assert writer.ends_with_newline is True

    def test_indent_is_applied_lazily(self, writer: CodeWriter) -> None:
        writer.push_indent("\t")
        writer.write("a\n")
        writer.pop_indent()
        writer.write("b")
        assert writer.code_output == "\ta\nb"

    def test_push_after_line_break_affects_next_line(self, writer: CodeWriter) -> None:
        writer.write_line("a")
        writer.push_indent()
        writer.write("b")
        assert writer.code_output == "a\n\tb"

    def test_write_line_without_text(self, writer: CodeWriter) -> None:
        writer.write_line()
        assert writer.code_output == "\n"
        assert writer.ends_with_newline is True

    def test_write_line_never_emits_indent_only_line(self, writer: CodeWriter) -> None:
        writer.push_indent("\t")
        writer.write_line()
        writer.write_line("x")
        assert writer.code_output == "\n\tx\n"

    def test_custom_newline(self) -> None:
        writer = CodeWriter(newline="\r\n")
        writer.push_indent("\t")
        writer.write("a\r\nb\r\n")
        assert writer.code_output == "\ta\r\n\tb\r\n"

    def test_none_text_raises_and_keeps_state(self, writer: CodeWriter) -> None:
        writer.write("keep")
        with pytest.raises(InvalidArgumentError):
            writer.write(None)  # type: ignore[arg-type]
        with pytest.raises(InvalidArgumentError):
            writer.write_line(None)  # type: ignore[arg-type]
        assert writer.code_output == "keep"

    @pytest.mark.parametrize("newline", [None, ""])
    def test_invalid_newline_rejected(self, newline: str) -> None:
        with pytest.raises(InvalidArgumentError):
            CodeWriter(newline=newline)

    @pytest.mark.parametrize(
        "lines",
        [
            ["a", "b", "c"],
            ["", "x", ""],
            ["class X", "{", "}", ""],
        ],
    )
    def test_no_trailing_whitespace_at_any_depth(self, lines: List[str]) -> None:
        writer = CodeWriter()
        for depth in range(3):
            for line in lines:
                writer.write_line(line)
            writer.push_indent("    ")
        for line in writer.code_output.split("\n"):
            assert line == line.rstrip()


# ===========================================================================
# Indent stack
# ===========================================================================


class TestIndentStack:
    """push_indent / pop_indent / clear_indent."""

    def test_pop_returns_last_segment(self, writer: CodeWriter) -> None:
        writer.push_indent("ab")
        writer.push_indent("c")
        assert writer.pop_indent() == "c"
        assert writer.current_indent == "ab"
        assert writer.indent_depth == 1

    def test_empty_segment_is_a_level(self, writer: CodeWriter) -> None:
        writer.push_indent("")
        assert writer.indent_depth == 1
        assert writer.current_indent == ""
        assert writer.pop_indent() == ""
        assert writer.indent_depth == 0

    def test_push_none_raises_and_keeps_stack(self, writer: CodeWriter) -> None:
        writer.push_indent("\t")
        with pytest.raises(InvalidArgumentError):
            writer.push_indent(None)  # type: ignore[arg-type]
        assert writer.current_indent == "\t"
        assert writer.indent_depth == 1

    def test_pop_on_empty_stack_is_lenient(self, writer: CodeWriter) -> None:
        assert writer.pop_indent() == ""
        assert writer.indent_depth == 0
        writer.write("x")
        assert writer.code_output == "x"

    def test_pop_on_empty_stack_raises_when_strict(self) -> None:
        writer = CodeWriter(strict_indent=True)
        with pytest.raises(StructuralInconsistencyError):
            writer.pop_indent()

    def test_clear_indent(self, writer: CodeWriter) -> None:
        writer.push_indent("\t")
        writer.push_indent("\t")
        writer.clear_indent()
        assert writer.indent_depth == 0
        assert writer.current_indent == ""

    @pytest.mark.parametrize(
        "segments",
        [("\t",), ("\t", "  "), ("", "x", "yy", "")],
    )
    def test_push_pop_round_trip_restores_indent(self, segments: Tuple[str, ...]) -> None:
        writer = CodeWriter()
        writer.push_indent(">")
        before: str = writer.current_indent
        for segment in segments:
            writer.push_indent(segment)
        for segment in reversed(segments):
            assert writer.pop_indent() == segment
        assert writer.current_indent == before


# ===========================================================================
# Scopes
# ===========================================================================


class TestScopes:
    """open_scope / close_scope."""

    def test_empty_scope(self, writer: CodeWriter) -> None:
        writer.open_scope()
        writer.close_scope()
        assert writer.code_output == "{\n}\n"

    def test_nested_scopes(self, writer: CodeWriter) -> None:
        writer.open_scope()
        writer.open_scope()
        writer.close_scope()
        writer.close_scope()
        assert writer.code_output == "{\n\t{\n\t}\n}\n"

    def test_scope_content_is_indented(self, writer: CodeWriter) -> None:
        writer.write_line("class Customer")
        writer.open_scope()
        writer.write_line("int Id;")
        writer.close_scope()
        assert writer.code_output == "class Customer\n{\n\tint Id;\n}\n"

    def test_custom_markers(self, writer: CodeWriter) -> None:
        writer.open_scope("(")
        writer.write_line("x")
        writer.close_scope(");")
        assert writer.code_output == "(\n\tx\n);\n"

    def test_custom_default_indent(self) -> None:
        writer = CodeWriter(default_indent="    ")
        writer.open_scope()
        writer.write_line("x")
        writer.close_scope()
        assert writer.code_output == "{\n    x\n}\n"

    def test_unbalanced_close_in_strict_mode(self) -> None:
        writer = CodeWriter(strict_indent=True)
        with pytest.raises(StructuralInconsistencyError):
            writer.close_scope()


# ===========================================================================
# Helpers, registry and lifecycle
# ===========================================================================


class TestWriterHelpers:
    """Comments, wrapping, the action registry, reset and save."""

    def test_write_comment(self, writer: CodeWriter) -> None:
        writer.write_comment(" hello")
        assert writer.code_output == "// hello\n"

    def test_write_wrapped(self, writer: CodeWriter) -> None:
        writer.write_wrapped("one two three four", "# ", line_length=9)
        assert writer.code_output == "# one two\n# three\n# four\n"

    def test_action_registry_deduplicates(self, writer: CodeWriter) -> None:
        assert writer.add_action("GetOrders") is True
        assert writer.add_action("GetCustomers") is True
        assert writer.add_action("GetOrders") is False
        assert writer.action_methods == ["GetOrders", "GetCustomers"]

    def test_add_action_none_raises(self, writer: CodeWriter) -> None:
        with pytest.raises(InvalidArgumentError):
            writer.add_action(None)  # type: ignore[arg-type]

    def test_reset(self, writer: CodeWriter) -> None:
        writer.push_indent()
        writer.write_line("x")
        writer.add_action("A")
        writer.reset()
        assert writer.code_output == ""
        assert writer.indent_depth == 0
        assert writer.action_methods == []
        assert writer.at_line_start is True
        assert writer.ends_with_newline is False
        assert writer.current_indent == ""

    def test_output_after_reset_matches_fresh_writer(self, writer: CodeWriter) -> None:
        writer.push_indent()
        writer.write_line("stale")
        writer.reset()

        fresh = CodeWriter()
        for target in (writer, fresh):
            target.write("{")
            target.write_block("a\n")
            target.open_scope()
            target.write_line("b")
            target.close_scope()
        assert writer.code_output == fresh.code_output
        assert writer.ends_with_newline is fresh.ends_with_newline

    def test_code_output_is_stable(self, writer: CodeWriter) -> None:
        writer.write("a")
        writer.write("b")
        first: str = writer.code_output
        writer.write("c")
        assert first == "ab"
        assert writer.code_output == "abc"
        assert str(writer) == "abc"

    def test_save(self, writer: CodeWriter, tmp_path: pathlib.Path) -> None:
        writer.write_line("namespace X")
        target = tmp_path / "out" / "X.cs"
        written: int = writer.save(target)
        assert written == len("namespace X\n")
        assert target.read_text(encoding="utf-8") == "namespace X\n"


# ===========================================================================
# CSharpWriter
# ===========================================================================


class TestCSharpWriter:
    """C# constructs built from the writer primitives."""

    def test_public_partial_class_with_base(self) -> None:
        writer = CSharpWriter()
        writer.begin_class("Foo", "Bar", is_public=True, is_partial=True)
        writer.end_class()
        assert writer.code_output == "public partial class Foo : Bar\n{\n}\n"

    def test_internal_static_class(self) -> None:
        writer = CSharpWriter()
        writer.begin_class("Helpers", is_static=True)
        writer.end_class()
        assert writer.code_output.startswith("internal static class Helpers\n")

    def test_partial_forced_by_writer_option(self) -> None:
        writer = CSharpWriter(generate_partial_classes=True)
        writer.begin_class("X", is_public=True)
        assert writer.code_output == "public partial class X\n{\n"
        assert writer.indent_depth == 1

    def test_summary_is_escaped(self) -> None:
        writer = CSharpWriter()
        writer.write_summary("a & b")
        assert writer.code_output == "/// <summary>\n/// a &amp; b\n/// </summary>\n"

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_blank_summary_writes_nothing(self, text: str) -> None:
        writer = CSharpWriter()
        writer.write_summary(text)
        assert writer.code_output == ""

    def test_public_enum(self) -> None:
        writer = CSharpWriter()
        writer.write_public_enum("Color", ["Red", "Green"])
        assert writer.code_output == "public enum Color\n{\n\tRed,\n\tGreen\n}\n"

    def test_namespace_and_property(self) -> None:
        writer = CSharpWriter()
        writer.write_using("System")
        writer.begin_namespace("Shop")
        writer.write_auto_property("int", "Id", is_public=True)
        writer.end_namespace()
        assert writer.code_output == (
            "using System;\nnamespace Shop\n{\n\tpublic int Id { get; set; }\n}\n"
        )
        assert writer.using_count == 1

    def test_public_interface_with_base(self) -> None:
        writer = CSharpWriter()
        writer.begin_interface("IShopContext", "IDisposable", is_public=True)
        writer.write_line("void Save();")
        writer.end_interface()
        assert writer.code_output == (
            "public interface IShopContext : IDisposable\n{\n\tvoid Save();\n}\n"
        )
        assert writer.indent_depth == 0

    def test_internal_interface(self) -> None:
        writer = CSharpWriter()
        writer.begin_interface("IMarker")
        writer.end_interface()
        assert writer.code_output == "internal interface IMarker\n{\n}\n"

    def test_inline_attribute(self) -> None:
        writer = CSharpWriter()
        writer.begin_class("Foo", is_public=True)
        writer.write_attribute("Column")
        writer.write_line(" public int Id;")
        writer.end_class()
        assert writer.code_output == (
            "public class Foo\n{\n\t[Column] public int Id;\n}\n"
        )

    def test_readonly_property(self) -> None:
        writer = CSharpWriter(default_indent="  ")
        writer.write_readonly_property("int", "Count", "_count")
        assert writer.code_output == (
            "internal int Count\n{\n  get { return _count; }\n}\n"
        )

    def test_reset_clears_using_count(self) -> None:
        writer = CSharpWriter()
        writer.write_using("System")
        writer.reset()
        assert writer.using_count == 0
        assert writer.code_output == ""

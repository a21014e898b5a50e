# File: schemagen/csharp.py
"""
SchemaGen - C# Emission Helpers
================================
``CSharpWriter`` layers C#-specific constructs (usings, namespaces, class
and interface headers, enums, attributes, properties, XML doc summaries)
on top of the language-neutral ``CodeWriter`` primitives.

All scoped constructs are built from ``open_scope`` / ``close_scope`` so
their braces always sit on their own lines and follow the writer's current
indentation.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence
from xml.sax.saxutils import escape

from schemagen.writer import CodeWriter

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.csharp")

MAX_SUMMARY_LINE_LENGTH: int = 40


def _accessibility(is_public: bool) -> str:
    return "public" if is_public else "internal"


class CSharpWriter(CodeWriter):
    """``CodeWriter`` with helpers for the C# constructs the renderer needs."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.using_count: int = 0

    def reset(self) -> None:
        super().reset()
        self.using_count = 0

    # -- Documentation ------------------------------------------------------

    def write_summary(
        self,
        text: Optional[str],
        line_length: int = MAX_SUMMARY_LINE_LENGTH,
    ) -> None:
        """
        Write an XML ``<summary>`` doc comment.

        Long lines are word-wrapped to *line_length*; XML special characters
        are escaped.  Blank or missing text writes nothing.
        """
        if text is None or not text.strip():
            return
        self.write_line("/// <summary>")
        self.write_wrapped(escape(text), "/// ", line_length)
        self.write_line("/// </summary>")

    # -- Usings / namespaces --------------------------------------------------

    def write_using(self, namespace: str) -> None:
        self.write_line(f"using {namespace};")
        self.using_count += 1

    def begin_namespace(self, namespace: str) -> None:
        self.write_line(f"namespace {namespace}")
        self.open_scope()

    def end_namespace(self) -> None:
        self.close_scope()

    # -- Types ----------------------------------------------------------------

    def begin_class(
        self,
        class_name: str,
        base_class_name: Optional[str] = None,
        *,
        is_static: bool = False,
        is_public: bool = False,
        is_partial: bool = False,
        is_sealed: bool = False,
    ) -> None:
        """
        Write a class header and open its body.

        ``generate_partial_classes`` on the writer forces ``partial``.
        """
        parts: List[str] = [_accessibility(is_public)]
        if is_static:
            parts.append("static")
        elif is_sealed:
            parts.append("sealed")
        if self.generate_partial_classes or is_partial:
            parts.append("partial")
        parts.append(f"class {class_name}")

        header: str = " ".join(parts)
        if base_class_name:
            header = f"{header} : {base_class_name}"
        self.write_line(header)
        self.open_scope()

    def end_class(self) -> None:
        self.close_scope()

    def begin_interface(
        self,
        interface_name: str,
        base_interface_name: Optional[str] = None,
        *,
        is_public: bool = False,
    ) -> None:
        header: str = f"{_accessibility(is_public)} interface {interface_name}"
        if base_interface_name:
            header = f"{header} : {base_interface_name}"
        self.write_line(header)
        self.open_scope()

    def end_interface(self) -> None:
        self.close_scope()

    def begin_enum(self, enum_name: str, *, is_public: bool = False) -> None:
        self.write_line(f"{_accessibility(is_public)} enum {enum_name}")
        self.open_scope()

    def end_enum(self) -> None:
        self.close_scope()

    def write_public_enum(self, enum_name: str, members: Sequence[str]) -> None:
        """Write a complete public enum; members are comma separated."""
        self.begin_enum(enum_name, is_public=True)
        for position, member in enumerate(members):
            separator: str = "," if position < len(members) - 1 else ""
            self.write_line(f"{member}{separator}")
        self.end_enum()

    # -- Members --------------------------------------------------------------

    def write_attribute(self, attribute: str) -> None:
        """Write ``[attribute]`` on the current line (no line break)."""
        self.write(f"[{attribute}]")

    def write_attribute_line(self, attribute: str) -> None:
        self.write_line(f"[{attribute}]")

    def write_auto_property(
        self, type_name: str, name: str, *, is_public: bool = False
    ) -> None:
        self.write_line(
            f"{_accessibility(is_public)} {type_name} {name} {{ get; set; }}"
        )

    def write_readonly_property(
        self, type_name: str, name: str, value: str, *, is_public: bool = False
    ) -> None:
        self.write_line(f"{_accessibility(is_public)} {type_name} {name}")
        self.open_scope()
        self.write_line(f"get {{ return {value}; }}")
        self.close_scope()


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "CSharpWriter",
    "MAX_SUMMARY_LINE_LENGTH",
]

logger.debug("schemagen.csharp loaded: %d public symbols.", len(__all__))

# File: schemagen/utils.py
"""
SchemaGen - Utility Functions & Helpers
========================================
String transformation, C# identifier and type helpers, file I/O and
timing utilities used throughout the generation pipeline.

- Naming functions are decorated with ``@lru_cache(maxsize=None)``; the
  renderer asks for the same class and member names many times per run.
- File I/O helpers use atomic rename for safety.
- No external dependencies beyond the Python standard library.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import os
import re
import tempfile
import textwrap
import time
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns (compiled once at module load)
# ---------------------------------------------------------------------------

_NON_ALPHANUM_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]")
_SPLIT_WORDS_RE: re.Pattern[str] = re.compile(
    r"[A-Z]?[a-z]+|[A-Z]+(?=[A-Z][a-z]|\d|\b)|[A-Z]|\d+"
)
_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# C# keywords that must be escaped with '@' when used as member names
CSHARP_KEYWORDS: FrozenSet[str] = frozenset({
    "abstract", "as", "base", "bool", "break", "byte", "case", "catch",
    "char", "checked", "class", "const", "continue", "decimal", "default",
    "delegate", "do", "double", "else", "enum", "event", "explicit",
    "extern", "false", "finally", "fixed", "float", "for", "foreach",
    "goto", "if", "implicit", "in", "int", "interface", "internal", "is",
    "lock", "long", "namespace", "new", "null", "object", "operator",
    "out", "override", "params", "private", "protected", "public",
    "readonly", "ref", "return", "sbyte", "sealed", "short", "sizeof",
    "stackalloc", "static", "string", "struct", "switch", "this", "throw",
    "true", "try", "typeof", "uint", "ulong", "unchecked", "unsafe",
    "ushort", "using", "virtual", "void", "volatile", "while",
})

# Source column type -> CLR type.  Value types get a '?' when nullable.
_CLR_TYPE_MAP: Dict[str, Tuple[str, bool]] = {
    "bigint": ("long", True),
    "int": ("int", True),
    "integer": ("int", True),
    "smallint": ("short", True),
    "tinyint": ("byte", True),
    "bit": ("bool", True),
    "boolean": ("bool", True),
    "decimal": ("decimal", True),
    "numeric": ("decimal", True),
    "money": ("decimal", True),
    "smallmoney": ("decimal", True),
    "float": ("double", True),
    "real": ("float", True),
    "date": ("DateTime", True),
    "datetime": ("DateTime", True),
    "datetime2": ("DateTime", True),
    "smalldatetime": ("DateTime", True),
    "datetimeoffset": ("DateTimeOffset", True),
    "time": ("TimeSpan", True),
    "uniqueidentifier": ("Guid", True),
    "char": ("string", False),
    "nchar": ("string", False),
    "varchar": ("string", False),
    "nvarchar": ("string", False),
    "text": ("string", False),
    "ntext": ("string", False),
    "xml": ("string", False),
    "binary": ("byte[]", False),
    "varbinary": ("byte[]", False),
    "image": ("byte[]", False),
    "timestamp": ("byte[]", False),
    "rowversion": ("byte[]", False),
}


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def _extract_words(name: str) -> Tuple[str, ...]:
    """
    Extract individual words from any casing style.

    Returns a tuple (hashable for LRU cache) of lowercase word strings.
    """
    cleaned: str = _NON_ALPHANUM_RE.sub(" ", name)
    words: List[str] = _SPLIT_WORDS_RE.findall(cleaned)
    return tuple(w.lower() for w in words if w)


@functools.lru_cache(maxsize=None)
def to_pascal_case(name: str) -> str:
    """
    Convert any string to PascalCase.

    Examples:
        >>> to_pascal_case("order_line")
        'OrderLine'
        >>> to_pascal_case("CUSTOMER_ID")
        'CustomerId'
    """
    if not name:
        return ""
    words: Tuple[str, ...] = _extract_words(name)
    return "".join(word.capitalize() for word in words)


@functools.lru_cache(maxsize=None)
def to_camel_case(name: str) -> str:
    """Convert any string to camelCase."""
    pascal: str = to_pascal_case(name)
    if not pascal:
        return ""
    return pascal[0].lower() + pascal[1:]


@functools.lru_cache(maxsize=None)
def to_plural(name: str) -> str:
    """
    Naive English pluralisation sufficient for code generation.

    Preserves the casing of the first character.
    """
    if not name:
        return ""

    lower: str = name.lower()

    irregulars: Dict[str, str] = {
        "person": "people",
        "child": "children",
        "man": "men",
        "woman": "women",
        "datum": "data",
        "index": "indices",
        "status": "statuses",
        "address": "addresses",
    }

    if lower in irregulars:
        plural: str = irregulars[lower]
        if name[0].isupper():
            return plural[0].upper() + plural[1:]
        return plural

    if lower.endswith("s") and not lower.endswith("ss"):
        return name
    if lower.endswith(("sh", "ch", "x", "z", "ss")):
        return name + "es"
    if lower.endswith("y") and len(name) > 1 and lower[-2] not in "aeiou":
        return name[:-1] + "ies"

    return name + "s"


@functools.lru_cache(maxsize=None)
def to_singular(name: str) -> str:
    """Naive English singularisation (reverse of ``to_plural``)."""
    if not name:
        return ""

    lower: str = name.lower()

    reverse_irregulars: Dict[str, str] = {
        "people": "person",
        "children": "child",
        "men": "man",
        "women": "woman",
        "data": "datum",
        "indices": "index",
        "statuses": "status",
        "addresses": "address",
    }

    if lower in reverse_irregulars:
        singular: str = reverse_irregulars[lower]
        if name[0].isupper():
            return singular[0].upper() + singular[1:]
        return singular

    if lower.endswith("ies") and len(name) > 3:
        return name[:-3] + "y"
    if lower.endswith(("sses", "xes", "zes", "ches", "shes")):
        return name[:-2]
    if lower.endswith("s") and not lower.endswith("ss"):
        return name[:-1]

    return name


# ---------------------------------------------------------------------------
# C# identifier and type helpers
# ---------------------------------------------------------------------------


def is_identifier(name: str) -> bool:
    """True when *name* is a syntactically valid C# / Python identifier."""
    return bool(name) and _IDENTIFIER_RE.match(name) is not None


def is_dotted_identifier(name: str) -> bool:
    """True for namespace-like names such as ``Company.Data.Models``."""
    return bool(name) and all(is_identifier(part) for part in name.split("."))


@functools.lru_cache(maxsize=None)
def safe_member_name(name: str) -> str:
    """
    Make a string usable as a C# member name.

    Non-identifier characters become underscores, a leading digit gets an
    underscore prefix and keywords are escaped with ``@``.
    """
    result: str = _NON_ALPHANUM_RE.sub("_", name)
    if not result:
        return "_unnamed"
    if result[0].isdigit():
        result = f"_{result}"
    if result in CSHARP_KEYWORDS:
        result = f"@{result}"
    return result


def clr_type_for(column_type: str, nullable: bool) -> str:
    """
    Map a source column type (``nvarchar(50)``, ``int``...) to a CLR type.

    Unknown types map to ``object``.
    """
    base: str = column_type.split("(")[0].strip().lower()
    clr_type, is_value_type = _CLR_TYPE_MAP.get(base, ("object", False))
    if nullable and is_value_type:
        return f"{clr_type}?"
    return clr_type


def break_into_lines(text: str, line_length: int) -> List[str]:
    """
    Word-wrap *text* into lines of at most *line_length* characters.

    Existing line breaks are kept; words longer than the limit are not
    split.
    """
    lines: List[str] = []
    for source_line in text.split("\n"):
        if len(source_line) <= line_length:
            lines.append(source_line)
            continue
        lines.extend(
            textwrap.wrap(
                source_line,
                width=line_length,
                break_long_words=False,
                break_on_hyphens=False,
            )
        )
    return lines


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path*, creating the parent directory.

    When *atomic* is True, writes to a temporary file in the target
    directory first and then renames it over the target.

    Returns the number of bytes written.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")
    byte_count: int = len(encoded)

    if atomic:
        fd: int
        tmp_path: str
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(encoded)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, str(path))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    else:
        path.write_bytes(encoded)

    logger.debug("Wrote %d bytes to %s", byte_count, path)
    return byte_count


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling pipeline steps.

    Usage:
        with Timer("render") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "CSHARP_KEYWORDS",
    "to_pascal_case",
    "to_camel_case",
    "to_plural",
    "to_singular",
    "is_identifier",
    "is_dotted_identifier",
    "safe_member_name",
    "clr_type_for",
    "break_into_lines",
    "ensure_directory",
    "write_file",
    "sha256_hex",
    "count_lines",
    "Timer",
]

logger.debug("schemagen.utils loaded: %d public symbols.", len(__all__))

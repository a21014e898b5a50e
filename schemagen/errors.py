# File: schemagen/errors.py
"""
SchemaGen - Error Taxonomy
===========================
Exception hierarchy shared by the writer, the schema model, the collector
and the output boundary.

Two families are distinguished:

* ``InvalidArgumentError``: a required argument was ``None``.  Raised
  before any state is touched, so the caller's object is left intact.
* ``StructuralInconsistencyError``: the object graph or the writer's scope
  stack no longer describes a consistent structure (indent underflow in
  strict mode, dangling or asymmetric back references, divergent duplicate
  tables, re-entrant traversal).

Malformed *input documents* are reported through pydantic's own
``ValidationError``, exactly like every other model in this package.
"""

from __future__ import annotations

import logging
from typing import List

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.errors")


class SchemaGenError(Exception):
    """Base class for every error raised by SchemaGen."""


class InvalidArgumentError(SchemaGenError, ValueError):
    """A required argument was missing (``None``)."""

    def __init__(self, argument: str, message: str = "") -> None:
        self.argument: str = argument
        super().__init__(message or f"Argument '{argument}' must not be None.")


class StructuralInconsistencyError(SchemaGenError):
    """The model graph or the writer's scope structure is inconsistent."""


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SchemaGenError",
    "InvalidArgumentError",
    "StructuralInconsistencyError",
]

logger.debug("schemagen.errors loaded: %d public symbols.", len(__all__))

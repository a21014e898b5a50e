# File: schemagen/collector.py
"""
SchemaGen - Model Collector
============================
``ModelCollector`` walks a ``schemagen.graph`` tree once and flattens it
into four ordered lists: tables, classes, procedures and namespaces.

Tables are de-duplicated by *name*: the first occurrence in traversal order
is kept, later ones are dropped.  Classes, procedures and namespaces are
recorded every time they are visited.

When a later table shares a name with the recorded one but differs in
content, the configured ``DuplicateTablePolicy`` decides what happens:

* ``FIRST_WINS``: drop it silently.
* ``WARN``: drop it, log a warning and record it in ``conflicts``.
* ``ERROR``: raise ``StructuralInconsistencyError``.

Visiting the very same table object twice is never a conflict.

A collector supports one traversal at a time.  Starting a second traversal
while one is in progress (from another visitor hook or another thread)
raises ``StructuralInconsistencyError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from schemagen.errors import InvalidArgumentError, StructuralInconsistencyError
from schemagen.graph import ClassDef, ModelRoot, ModelVisitor, Namespace, Procedure
from schemagen.models import DuplicateTablePolicy, Table

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.collector")


@dataclass(frozen=True, slots=True)
class TableConflict:
    """A table dropped because an earlier, different table had its name."""

    name: str
    kept: Table
    dropped: Table


class ModelCollector(ModelVisitor):
    """
    Flattening visitor.

    Usage::

        collector = ModelCollector()
        collector.collect(root)
        for table in collector.tables:
            ...
    """

    def __init__(
        self, duplicate_policy: DuplicateTablePolicy = DuplicateTablePolicy.FIRST_WINS
    ) -> None:
        self.duplicate_policy: DuplicateTablePolicy = DuplicateTablePolicy(duplicate_policy)
        self.tables: List[Table] = []
        self.classes: List[ClassDef] = []
        self.procedures: List[Procedure] = []
        self.namespaces: List[Namespace] = []
        self.conflicts: List[TableConflict] = []
        self._visited_tables: Dict[str, Table] = {}
        self._in_traversal: bool = False

    # -----------------------------------------------------------------
    # Traversal
    # -----------------------------------------------------------------

    def collect(self, root: ModelRoot) -> "ModelCollector":
        """Traverse *root*, appending to the collected lists; returns self."""
        if root is None:
            raise InvalidArgumentError("root")
        if self._in_traversal:
            raise StructuralInconsistencyError(
                "ModelCollector is already traversing a model; "
                "a collector supports one traversal at a time."
            )

        self._in_traversal = True
        try:
            root.accept(self)
        finally:
            self._in_traversal = False

        logger.info(
            "Collected %d tables, %d classes, %d procedures, %d namespaces "
            "(%d duplicate-name conflict(s)).",
            len(self.tables),
            len(self.classes),
            len(self.procedures),
            len(self.namespaces),
            len(self.conflicts),
        )
        return self

    def reset(self) -> None:
        if self._in_traversal:
            raise StructuralInconsistencyError("Cannot reset a collector mid-traversal.")
        self.tables.clear()
        self.classes.clear()
        self.procedures.clear()
        self.namespaces.clear()
        self.conflicts.clear()
        self._visited_tables.clear()

    # -----------------------------------------------------------------
    # Visitor hooks
    # -----------------------------------------------------------------

    def visit_table(self, table: Table) -> None:
        recorded: Optional[Table] = self._visited_tables.get(table.name)
        if recorded is None:
            self._visited_tables[table.name] = table
            self.tables.append(table)
            return
        if recorded is table or recorded.model_dump() == table.model_dump():
            return
        self._handle_conflict(recorded, table)

    def visit_class(self, class_def: ClassDef) -> None:
        self.classes.append(class_def)

    def visit_procedure(self, procedure: Procedure) -> None:
        self.procedures.append(procedure)

    def visit_namespace(self, namespace: Namespace) -> None:
        self.namespaces.append(namespace)

    # -----------------------------------------------------------------
    # Internal
    # -----------------------------------------------------------------

    def _handle_conflict(self, kept: Table, dropped: Table) -> None:
        if self.duplicate_policy == DuplicateTablePolicy.ERROR:
            raise StructuralInconsistencyError(
                f"Two different tables named '{kept.name}' were found in the model."
            )
        if self.duplicate_policy == DuplicateTablePolicy.WARN:
            logger.warning(
                "Table '%s' appears twice with different definitions; "
                "keeping the first one.",
                kept.name,
            )
            self.conflicts.append(TableConflict(name=kept.name, kept=kept, dropped=dropped))
            return
        logger.debug("Dropping later definition of table '%s'.", kept.name)

    def __repr__(self) -> str:
        return (
            f"<ModelCollector {len(self.tables)} tables, "
            f"{len(self.procedures)} procedures>"
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ModelCollector",
    "TableConflict",
]

logger.debug("schemagen.collector loaded: %d public symbols.", len(__all__))

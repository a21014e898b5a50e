# File: schemagen/graph.py
"""
SchemaGen - Schema Graph Nodes
===============================
The hierarchical model the collector walks::

    ModelRoot
      └─ Namespace
           ├─ Table ...                       (schemagen.models.Table)
           └─ ClassDef  (the data context)
                └─ Procedure
                     ├─ result_table           (a Table, possibly shared)
                     └─ similar_tables         (Tables, possibly shared)

The same ``Table`` object may be reachable along several paths (directly
from the namespace and again as a procedure's result table).  Nodes only
describe *how to descend*; deciding what to do with repeats is up to the
visitor.

Every node exposes ``accept(visitor)``, which calls the matching
``visit_*`` method and then descends into its children.  A ``Table``
does not descend: the collector records tables, not their columns.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from schemagen.models import Table

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.graph")


# ---------------------------------------------------------------------------
# Visitor base
# ---------------------------------------------------------------------------


class ModelVisitor:
    """No-op visitor; subclasses override the hooks they care about."""

    def visit_root(self, root: "ModelRoot") -> None:
        pass

    def visit_namespace(self, namespace: "Namespace") -> None:
        pass

    def visit_class(self, class_def: "ClassDef") -> None:
        pass

    def visit_procedure(self, procedure: "Procedure") -> None:
        pass

    def visit_table(self, table: Table) -> None:
        pass


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Parameter:
    """A stored-procedure parameter."""

    name: str
    type_name: str = "object"
    is_output: bool = False


@dataclass(frozen=False, slots=True)
class Procedure:
    """A stored procedure, its result shape and the tables shaped like it."""

    name: str
    owner: Optional[str] = None
    parameters: List[Parameter] = field(default_factory=list)
    result_table: Optional[Table] = None
    similar_tables: List[Table] = field(default_factory=list)
    description: Optional[str] = None

    def accept(self, visitor: ModelVisitor) -> None:
        visitor.visit_procedure(self)
        if self.result_table is not None:
            self.result_table.accept(visitor)
        for table in self.similar_tables:
            table.accept(visitor)

    @property
    def qualified_name(self) -> str:
        return f"{self.owner}.{self.name}" if self.owner else self.name


@dataclass(frozen=False, slots=True)
class ClassDef:
    """A generated class whose members are procedures (the data context)."""

    name: str
    members: List[Procedure] = field(default_factory=list)

    def accept(self, visitor: ModelVisitor) -> None:
        visitor.visit_class(self)
        for member in self.members:
            member.accept(visitor)


NamespaceMember = Union[Table, ClassDef]


@dataclass(frozen=False, slots=True)
class Namespace:
    """A namespace holding tables and classes, in declaration order."""

    name: str
    types: List[NamespaceMember] = field(default_factory=list)

    def accept(self, visitor: ModelVisitor) -> None:
        visitor.visit_namespace(self)
        for member in self.types:
            member.accept(visitor)


@dataclass(frozen=False, slots=True)
class ModelRoot:
    """Entry point of a traversal."""

    namespaces: List[Namespace] = field(default_factory=list)

    def accept(self, visitor: ModelVisitor) -> None:
        visitor.visit_root(self)
        for namespace in self.namespaces:
            namespace.accept(visitor)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


def build_model_graph(
    namespace: str,
    tables: Sequence[Table],
    procedures: Sequence[Procedure] = (),
    data_context_name: str = "DataContext",
) -> ModelRoot:
    """
    Arrange *tables* and *procedures* under a single namespace.

    Procedures become members of a ``ClassDef`` named after the data
    context, placed after the tables.
    """
    members: List[NamespaceMember] = list(tables)
    if procedures:
        members.append(ClassDef(name=data_context_name, members=list(procedures)))
    root: ModelRoot = ModelRoot(namespaces=[Namespace(name=namespace, types=members)])
    logger.debug(
        "Built model graph: namespace=%s, %d tables, %d procedures.",
        namespace,
        len(tables),
        len(procedures),
    )
    return root


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ModelVisitor",
    "Parameter",
    "Procedure",
    "ClassDef",
    "Namespace",
    "ModelRoot",
    "build_model_graph",
]

logger.debug("schemagen.graph loaded: %d public symbols.", len(__all__))

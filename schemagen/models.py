# File: schemagen/models.py
"""
SchemaGen - Core Data Models
=============================
Pydantic V2 models representing the relational schema and the generation
run.  These models are the single source of truth for the pipeline:
Schema Loading -> Validation -> Collection -> Rendering -> Export.

Ownership: ``SchemaModel`` is the arena that owns every ``Table``.  Foreign
keys never hold object references to other tables or foreign keys; they
hold *handles* (table names, column names, ``AssociationRef``) which are
resolved through the owning ``SchemaModel``.  This keeps the graph free of
reference cycles even when two foreign keys are each other's back
reference.

Bidirectional association rule: assigning ``ForeignKey.association_type``
on a key that has a back reference also assigns the mirrored type to the
back reference (one hop only, see ``propagate_association_type``).
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    computed_field,
    field_validator,
    model_validator,
)

from schemagen.errors import InvalidArgumentError, StructuralInconsistencyError

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.models")

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class AssociationType(str, Enum):
    """Cardinality of a foreign-key association, seen from its owning table."""

    AUTO = "auto"
    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_ONE = "many_to_one"


# Type set on one side -> type implied for the back reference.
MIRRORED_ASSOCIATION_TYPES: Dict[AssociationType, AssociationType] = {
    AssociationType.AUTO: AssociationType.AUTO,
    AssociationType.ONE_TO_ONE: AssociationType.ONE_TO_ONE,
    AssociationType.ONE_TO_MANY: AssociationType.MANY_TO_ONE,
    AssociationType.MANY_TO_ONE: AssociationType.ONE_TO_MANY,
}


class ArtifactKind(str, Enum):
    """Kinds of per-table artifacts the renderer produces."""

    DATA_OBJECT = "data_object"
    POCO = "poco"
    ADAPTER = "adapter"


class DuplicateTablePolicy(str, Enum):
    """What the collector does with a second, *different* table of the same name."""

    FIRST_WINS = "first_wins"
    WARN = "warn"
    ERROR = "error"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)


def mirror_association_type(kind: AssociationType) -> AssociationType:
    """Return the association type implied for the other side of *kind*."""
    return MIRRORED_ASSOCIATION_TYPES[AssociationType(kind)]


# ---------------------------------------------------------------------------
# Column
# ---------------------------------------------------------------------------


class Column(BaseModel):
    """
    One column of a source table and the member generated for it.

    Primary-key membership is derived from ``pk_index`` alone; it cannot be
    supplied separately.
    """

    model_config = _SHARED_CONFIG

    id: int = Field(default=0, ge=0, description="Ordinal of the column in its table.")
    column_name: str = Field(..., min_length=1, description="Source column name.")
    member_name: str = Field(
        default="", description="Generated member name (defaults to column_name)."
    )
    is_nullable: bool = Field(default=True, description="Column allows NULL.")
    is_identity: bool = Field(default=False, description="Server-generated identity.")
    member_type: str = Field(
        default="",
        description="Logical type of the generated member; derived from column_type when empty.",
    )
    column_type: str = Field(default="", description="Source column type, e.g. 'nvarchar(50)'.")
    is_class: bool = Field(default=False, description="Member type is a reference type.")
    db_type: Optional[str] = Field(default=None, description="Provider DbType tag.")
    sql_db_type: Optional[str] = Field(default=None, description="Provider SqlDbType tag.")
    length: int = Field(default=0, ge=0, description="Maximum length for sized types.")
    precision: int = Field(default=0, ge=0, description="Numeric precision.")
    scale: int = Field(default=0, ge=0, description="Numeric scale.")
    description: Optional[str] = Field(default=None, description="Column comment / doc.")
    pk_index: int = Field(
        default=-1, ge=-1, description="Zero-based primary key ordinal, -1 when not a key."
    )
    attributes: List[str] = Field(
        default_factory=list, description="Extra attribute decorations, in order."
    )

    @computed_field  # type: ignore[misc]
    @property
    def is_primary_key(self) -> bool:
        return self.pk_index >= 0

    @model_validator(mode="after")
    def _default_member_name(self) -> "Column":
        if not self.member_name:
            # direct __dict__ write avoids re-running assignment validation
            self.__dict__["member_name"] = self.column_name
        return self

    def __repr__(self) -> str:
        pk: str = f" pk#{self.pk_index}" if self.is_primary_key else ""
        return f"<Column {self.column_name}: {self.column_type or self.member_type}{pk}>"


# ---------------------------------------------------------------------------
# Foreign key association
# ---------------------------------------------------------------------------


class AssociationRef(BaseModel):
    """Handle of a foreign key: owning table name plus key name."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    table: str = Field(..., min_length=1, description="Owning table name.")
    key: str = Field(..., min_length=1, description="Foreign key name within that table.")

    def __str__(self) -> str:
        return f"{self.table}.{self.key}"


class ForeignKey(BaseModel):
    """
    A foreign-key association from the owning table to ``other_table``.

    ``this_columns[i]`` pairs with ``other_columns[i]``.  The optional
    ``back_reference`` names the association on the other table that
    describes the same relationship in the opposite direction.
    """

    model_config = _SHARED_CONFIG

    key_name: str = Field(..., min_length=1, description="Constraint / key name.")
    member_name: str = Field(default="", description="Generated association member name.")
    other_table: str = Field(..., min_length=1, description="Referenced table name.")
    this_columns: List[str] = Field(
        default_factory=list, description="Local column names, in key order."
    )
    other_columns: List[str] = Field(
        default_factory=list, description="Referenced column names, paired positionally."
    )
    attributes: List[str] = Field(
        default_factory=list, description="Extra attribute decorations, in order."
    )
    can_be_null: bool = Field(default=True, description="Association may be unset.")
    back_reference: Optional[AssociationRef] = Field(
        default=None, description="Handle of the opposite-direction association."
    )
    association_type: AssociationType = Field(
        default=AssociationType.AUTO, description="Cardinality seen from this side."
    )

    _resolver: Optional[Callable[[AssociationRef], Any]] = PrivateAttr(
        default=None
    )

    @model_validator(mode="after")
    def _columns_are_paired(self) -> "ForeignKey":
        if len(self.this_columns) != len(self.other_columns):
            raise ValueError(
                f"Foreign key '{self.key_name}' pairs {len(self.this_columns)} local "
                f"column(s) with {len(self.other_columns)} referenced column(s)."
            )
        return self

    def __setattr__(self, name: str, value: Any) -> None:
        if name != "association_type":
            super().__setattr__(name, value)
            return
        # resolve before storing so a broken handle leaves both sides unchanged
        back: Optional[ForeignKey] = self.resolve_back_reference()
        super().__setattr__(name, value)
        if back is not None:
            propagate_association_type(self, back)

    @property
    def is_attached(self) -> bool:
        """True once the owning ``SchemaModel`` has bound this key."""
        return self._resolver is not None

    def resolve_back_reference(self) -> Optional["ForeignKey"]:
        """
        Return the back-reference association, or None when there is none.

        Raises:
            StructuralInconsistencyError: a back reference is set but cannot
                be resolved (key not attached to a schema, or dangling handle).
        """
        if self.back_reference is None:
            return None
        if self._resolver is None:
            raise StructuralInconsistencyError(
                f"Foreign key '{self.key_name}' has back reference "
                f"'{self.back_reference}' but is not attached to a schema."
            )
        back: Optional[ForeignKey] = self._resolver(self.back_reference)
        if back is None:
            raise StructuralInconsistencyError(
                f"Back reference '{self.back_reference}' of foreign key "
                f"'{self.key_name}' does not resolve."
            )
        return back

    def _store_association_type(self, kind: AssociationType) -> None:
        """Assign ``association_type`` without triggering propagation."""
        BaseModel.__setattr__(self, "association_type", kind)

    def __repr__(self) -> str:
        return (
            f"<ForeignKey {self.key_name} -> {self.other_table} "
            f"({self.association_type.value})>"
        )


def propagate_association_type(source: ForeignKey, target: ForeignKey) -> None:
    """
    Give *target* the association type mirrored from *source*.

    Exactly one hop: *target*'s own back reference is not followed, so
    back-reference cycles of any length terminate.
    """
    mirrored: AssociationType = mirror_association_type(source.association_type)
    target._store_association_type(mirrored)
    logger.debug(
        "Association type %s on '%s' mirrored as %s on '%s'.",
        source.association_type.value,
        source.key_name,
        mirrored.value,
        target.key_name,
    )


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------


class Table(BaseModel):
    """
    A source table (or view) and the class names generated from it.

    ``columns`` and ``foreign_keys`` are ordered mappings keyed by column
    name and key name; both also accept a plain list on input.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Table name.")
    owner: Optional[str] = Field(default=None, description="Schema / owner, e.g. 'dbo'.")
    description: Optional[str] = Field(default=None, description="Table comment / doc.")
    is_view: bool = Field(default=False, description="Source object is a view.")
    data_object_class_name: Optional[str] = Field(
        default=None, description="Override for the data object class name."
    )
    poco_class_name: Optional[str] = Field(
        default=None, description="Override for the POCO class name."
    )
    data_context_property_name: Optional[str] = Field(
        default=None, description="Override for the data context property name."
    )
    base_class_name: Optional[str] = Field(
        default=None, description="Base class of the generated data object."
    )
    attributes: List[str] = Field(
        default_factory=list, description="Extra class-level attribute decorations."
    )
    columns: Dict[str, Column] = Field(
        default_factory=dict, description="Columns keyed by column name."
    )
    foreign_keys: Dict[str, ForeignKey] = Field(
        default_factory=dict, description="Foreign keys keyed by key name."
    )

    @field_validator("columns", mode="before")
    @classmethod
    def _columns_from_list(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        mapping: Dict[str, Any] = {}
        for position, item in enumerate(value):
            key: str = item.column_name if isinstance(item, Column) else item.get("column_name", "")
            if key in mapping:
                raise ValueError(f"Duplicate column name '{key}'.")
            if isinstance(item, dict) and "id" not in item:
                item = {**item, "id": position}
            mapping[key] = item
        return mapping

    @field_validator("foreign_keys", mode="before")
    @classmethod
    def _foreign_keys_from_list(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        mapping: Dict[str, Any] = {}
        for item in value:
            key: str = item.key_name if isinstance(item, ForeignKey) else item.get("key_name", "")
            if key in mapping:
                raise ValueError(f"Duplicate foreign key name '{key}'.")
            mapping[key] = item
        return mapping

    @model_validator(mode="after")
    def _keys_match_names(self) -> "Table":
        for key, column in self.columns.items():
            if key != column.column_name:
                raise ValueError(
                    f"Column stored under '{key}' is named '{column.column_name}'."
                )
        for key, fk in self.foreign_keys.items():
            if key != fk.key_name:
                raise ValueError(f"Foreign key stored under '{key}' is named '{fk.key_name}'.")
        return self

    @computed_field  # type: ignore[misc]
    @property
    def primary_key_columns(self) -> List[str]:
        """Primary key column names ordered by ``pk_index``."""
        keyed: List[Column] = [c for c in self.columns.values() if c.is_primary_key]
        return [c.column_name for c in sorted(keyed, key=lambda c: c.pk_index)]

    def get_column(self, name: str) -> Optional[Column]:
        return self.columns.get(name)

    def accept(self, visitor: Any) -> None:
        """Visitor entry point used by ``schemagen.graph`` traversals."""
        visitor.visit_table(self)

    def __repr__(self) -> str:
        kind: str = "View" if self.is_view else "Table"
        return (
            f"<{kind} {self.name} ({len(self.columns)} cols, "
            f"{len(self.foreign_keys)} FKs)>"
        )


# ---------------------------------------------------------------------------
# SchemaModel: the arena owning every table
# ---------------------------------------------------------------------------


class SchemaModel(BaseModel):
    """
    The root model: every table of the schema, in declaration order.

    Foreign keys are bound to this model on construction and whenever a
    table is added, so that their back-reference handles can be resolved.
    """

    model_config = _SHARED_CONFIG

    tables: List[Table] = Field(default_factory=list, description="All tables.")
    check_back_reference_symmetry: bool = Field(
        default=True,
        description="Require back references to point back at the owning table.",
    )

    _table_map: Dict[str, Table] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _validate_unique_table_names(self) -> "SchemaModel":
        names: List[str] = [t.name for t in self.tables]
        if len(names) != len(set(names)):
            dupes: List[str] = [n for n in names if names.count(n) > 1]
            raise ValueError(f"Duplicate table names: {sorted(set(dupes))}")
        return self

    @model_validator(mode="after")
    def _bind_tables(self) -> "SchemaModel":
        self._table_map = {t.name: t for t in self.tables}
        for table in self.tables:
            self._bind_table(table)
        return self

    @model_validator(mode="after")
    def _validate_back_references(self) -> "SchemaModel":
        for table in self.tables:
            for fk in table.foreign_keys.values():
                problem: Optional[str] = self._back_reference_problem(table, fk)
                if problem:
                    raise ValueError(problem)
        return self

    # -- Lookup -------------------------------------------------------------

    def get_table(self, name: str) -> Optional[Table]:
        return self._table_map.get(name)

    def find_foreign_key(self, ref: AssociationRef) -> Optional[ForeignKey]:
        table: Optional[Table] = self._table_map.get(ref.table)
        if table is None:
            return None
        return table.foreign_keys.get(ref.key)

    @computed_field  # type: ignore[misc]
    @property
    def table_names(self) -> List[str]:
        return [t.name for t in self.tables]

    # -- Mutation -----------------------------------------------------------

    def add_table(self, table: Table) -> None:
        """Attach *table* to this schema and bind its foreign keys."""
        if table is None:
            raise InvalidArgumentError("table")
        if table.name in self._table_map:
            raise StructuralInconsistencyError(
                f"Table '{table.name}' is already part of the schema."
            )
        self.tables.append(table)
        self._table_map[table.name] = table
        self._bind_table(table)

    def link_back_references(self, first: AssociationRef, second: AssociationRef) -> None:
        """
        Make the two associations each other's back reference.

        Raises:
            StructuralInconsistencyError: either handle does not resolve, or
                (with symmetry checking on) the keys do not point at each
                other's owning tables.
        """
        if first is None:
            raise InvalidArgumentError("first")
        if second is None:
            raise InvalidArgumentError("second")

        first_fk: Optional[ForeignKey] = self.find_foreign_key(first)
        second_fk: Optional[ForeignKey] = self.find_foreign_key(second)
        if first_fk is None or second_fk is None:
            missing: AssociationRef = first if first_fk is None else second
            raise StructuralInconsistencyError(f"Association '{missing}' does not resolve.")

        if self.check_back_reference_symmetry and (
            first_fk.other_table != second.table or second_fk.other_table != first.table
        ):
            raise StructuralInconsistencyError(
                f"Associations '{first}' and '{second}' do not reference each "
                f"other's tables."
            )

        first_fk.back_reference = second
        second_fk.back_reference = first

    def set_association_type(self, ref: AssociationRef, kind: AssociationType) -> ForeignKey:
        """Assign *kind* to the association behind *ref* (propagating one hop)."""
        fk: Optional[ForeignKey] = self.find_foreign_key(ref)
        if fk is None:
            raise StructuralInconsistencyError(f"Association '{ref}' does not resolve.")
        fk.association_type = kind
        return fk

    # -- Ordering -----------------------------------------------------------

    def topological_order(self) -> List[str]:
        """
        Return table names in dependency order (referenced tables first).

        Uses Kahn's algorithm, O(V + E).  Tables caught in a reference cycle
        are appended in declaration order.
        """
        in_degree: Dict[str, int] = {t.name: 0 for t in self.tables}
        adjacency: Dict[str, List[str]] = {t.name: [] for t in self.tables}

        for table in self.tables:
            targets: Set[str] = {
                fk.other_table
                for fk in table.foreign_keys.values()
                if fk.other_table != table.name and fk.other_table in adjacency
            }
            for target in targets:
                adjacency[target].append(table.name)
                in_degree[table.name] += 1

        queue: List[str] = [n for n, d in in_degree.items() if d == 0]
        result: List[str] = []

        while queue:
            node: str = queue.pop(0)
            result.append(node)
            for neighbour in adjacency[node]:
                in_degree[neighbour] -= 1
                if in_degree[neighbour] == 0:
                    queue.append(neighbour)

        if len(result) != len(self.tables):
            logger.warning(
                "Circular foreign key dependency detected; topological order is partial."
            )
            placed: Set[str] = set(result)
            result.extend(t.name for t in self.tables if t.name not in placed)

        return result

    # -- Internal -----------------------------------------------------------

    def _bind_table(self, table: Table) -> None:
        for fk in table.foreign_keys.values():
            fk._resolver = self.find_foreign_key

    def _back_reference_problem(self, table: Table, fk: ForeignKey) -> Optional[str]:
        if fk.back_reference is None:
            return None
        back: Optional[ForeignKey] = self.find_foreign_key(fk.back_reference)
        if back is None:
            return (
                f"Back reference '{fk.back_reference}' of '{table.name}.{fk.key_name}' "
                f"does not resolve."
            )
        if self.check_back_reference_symmetry and back.other_table != table.name:
            return (
                f"Back reference '{fk.back_reference}' of '{table.name}.{fk.key_name}' "
                f"references '{back.other_table}' instead of '{table.name}'."
            )
        return None

    def __repr__(self) -> str:
        return f"<SchemaModel {len(self.tables)} tables>"


# ---------------------------------------------------------------------------
# Generation configuration
# ---------------------------------------------------------------------------


class GenerationConfig(BaseModel):
    """All options of a generation run."""

    model_config = _SHARED_CONFIG

    # Data context
    data_context_name: str = Field(default="DataContext", min_length=1)
    base_data_context_class: Optional[str] = Field(
        default="LinqToDB.Data.DataConnection",
        description="Base class of the generated data context.",
    )
    generate_data_context: bool = Field(default=True)

    # Namespaces
    data_namespace: str = Field(default="DataModels", min_length=1)
    poco_namespace: Optional[str] = Field(
        default=None, description="Defaults to data_namespace."
    )
    adapter_namespace: Optional[str] = Field(
        default=None, description="Defaults to data_namespace."
    )

    # Class naming
    data_object_suffix: str = Field(default="Data")
    poco_suffix: str = Field(default="")
    adapter_suffix: str = Field(default="Adapter")
    singularize_class_names: bool = Field(default=False)
    use_pascal_casing: bool = Field(default=False)

    # Artifacts
    generate_data_objects: bool = Field(default=True)
    generate_pocos: bool = Field(default=False)
    generate_adapters: bool = Field(default=False)
    generate_partial_classes: bool = Field(default=False)
    render_foreign_keys: bool = Field(default=False)

    # Table selection
    include_tables: List[str] = Field(default_factory=list)
    include_table_pattern: Optional[str] = Field(
        default=None, description="Regular expression matched against table names."
    )

    # Output
    data_object_dir: Optional[str] = Field(default=None, description="Defaults to cwd.")
    poco_dir: Optional[str] = Field(default=None, description="Defaults to cwd.")
    adapter_dir: Optional[str] = Field(default=None, description="Defaults to cwd.")
    file_extension: str = Field(default=".cs", min_length=1)
    indent: str = Field(default="\t", min_length=1)

    # Structural strictness
    duplicate_table_policy: DuplicateTablePolicy = Field(default=DuplicateTablePolicy.FIRST_WINS)
    strict_indent: bool = Field(default=False)

    @field_validator("include_table_pattern")
    @classmethod
    def _pattern_compiles(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            try:
                re.compile(value)
            except re.error as exc:
                raise ValueError(f"Invalid table pattern '{value}': {exc}") from exc
        return value

    @computed_field  # type: ignore[misc]
    @property
    def resolved_poco_namespace(self) -> str:
        return self.poco_namespace or self.data_namespace

    @computed_field  # type: ignore[misc]
    @property
    def resolved_adapter_namespace(self) -> str:
        return self.adapter_namespace or self.data_namespace

    def includes_table(self, name: str) -> bool:
        """Apply the explicit table list and the pattern (both must pass)."""
        if self.include_tables and name not in self.include_tables:
            return False
        if self.include_table_pattern and not re.search(self.include_table_pattern, name):
            return False
        return True


# ---------------------------------------------------------------------------
# Generation result
# ---------------------------------------------------------------------------


class Artifact(BaseModel):
    """One generated per-table class file."""

    model_config = _SHARED_CONFIG

    kind: ArtifactKind = Field(..., description="Which output directory it belongs to.")
    name: str = Field(..., min_length=1, description="Artifact (class) name.")
    content: str = Field(default="", description="Full file content.")

    def __repr__(self) -> str:
        return f"<Artifact {self.kind.value}:{self.name} ({len(self.content)} chars)>"


class GenerationResult(BaseModel):
    """
    Everything one rendering pass produced.

    ``data_context`` is the main data-context text (empty when not
    generated); ``procedures`` is the optional secondary part.
    """

    model_config = _SHARED_CONFIG

    data_context: str = Field(default="", description="Main data-context text.")
    procedures: Optional[str] = Field(default=None, description="Procedures part, if any.")
    artifacts: List[Artifact] = Field(default_factory=list, description="Per-table artifacts.")

    @computed_field  # type: ignore[misc]
    @property
    def artifact_count(self) -> int:
        return len(self.artifacts)

    @computed_field  # type: ignore[misc]
    @property
    def is_empty(self) -> bool:
        return not self.data_context and not self.procedures and not self.artifacts

    def add_artifact(self, kind: ArtifactKind, name: str, content: str) -> Artifact:
        artifact: Artifact = Artifact(kind=kind, name=name, content=content)
        self.artifacts.append(artifact)
        return artifact

    def artifacts_of(self, kind: ArtifactKind) -> List[Artifact]:
        return [a for a in self.artifacts if a.kind == kind]

    def __repr__(self) -> str:
        return (
            f"<GenerationResult {self.artifact_count} artifacts, "
            f"context={'yes' if self.data_context else 'no'}, "
            f"procedures={'yes' if self.procedures else 'no'}>"
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "AssociationType",
    "MIRRORED_ASSOCIATION_TYPES",
    "ArtifactKind",
    "DuplicateTablePolicy",
    "mirror_association_type",
    "propagate_association_type",
    "Column",
    "AssociationRef",
    "ForeignKey",
    "Table",
    "SchemaModel",
    "GenerationConfig",
    "Artifact",
    "GenerationResult",
]

logger.debug("schemagen.models loaded: %d public symbols.", len(__all__))

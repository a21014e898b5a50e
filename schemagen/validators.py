# File: schemagen/validators.py
"""
SchemaGen - Schema & Configuration Validators
==============================================
A pure-function validation pipeline over the models in
``schemagen.models``.

Pydantic's validators handle per-model structural correctness (required
fields, paired key columns, unique table names, resolvable back
references).  This module adds cross-entity semantic checks that are
reported rather than raised: foreign-key targets and columns, primary-key
ordinals, back-reference agreement, identifier rules for the generated C#
and configuration sanity.

Usage by downstream modules:
    from schemagen.validators import validate_full
    result = validate_full(schema, config)
    if not result.is_valid:
        ...
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Set

from schemagen.errors import StructuralInconsistencyError
from schemagen.graph import Procedure
from schemagen.models import (
    ForeignKey,
    GenerationConfig,
    SchemaModel,
    Table,
    mirror_association_type,
)
from schemagen.utils import CSHARP_KEYWORDS, is_dotted_identifier, is_identifier

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationError:
    """Lightweight issue descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()


class ValidationResult:
    """Accumulates ``ValidationError`` instances produced by the pipeline."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationError] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self, code: str, message: str, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self._items.append(ValidationError("error", code, message, context))

    def add_warning(
        self, code: str, message: str, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self._items.append(ValidationError("warning", code, message, context))

    def add_info(
        self, code: str, message: str, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self._items.append(ValidationError("info", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_warning]

    @property
    def codes(self) -> Set[str]:
        return {e.code for e in self._items}

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def summary(self) -> str:
        return (
            f"Validation: {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)


# ---------------------------------------------------------------------------
# Individual validation functions
# ---------------------------------------------------------------------------


def validate_table_names(schema: SchemaModel) -> ValidationResult:
    """
    Check table names:
    - no duplicates (also enforced by the model)
    - C# keywords produce warnings; generated names get escaped
    """
    result: ValidationResult = ValidationResult()
    seen: Set[str] = set()

    for table in schema.tables:
        ctx: Dict[str, Any] = {"table": table.name}
        if table.name in seen:
            result.add_error(
                "DUPLICATE_TABLE_NAME",
                f"Table name '{table.name}' is defined more than once.",
                ctx,
            )
        seen.add(table.name)

        if table.name.lower() in CSHARP_KEYWORDS:
            result.add_warning(
                "TABLE_NAME_CSHARP_KEYWORD",
                f"Table name '{table.name}' is a C# keyword; generated "
                f"identifiers will be escaped.",
                ctx,
            )

        if not table.columns:
            result.add_warning(
                "TABLE_WITHOUT_COLUMNS",
                f"Table '{table.name}' has no columns.",
                ctx,
            )

    logger.debug(
        "validate_table_names: checked %d tables, %d issue(s).",
        len(schema.tables),
        len(result),
    )
    return result


def validate_columns(schema: SchemaModel) -> ValidationResult:
    """
    Check columns of every table:
    - member names are unique within the table
    - primary-key ordinals are unique (error) and contiguous from 0 (warning)
    - identity columns are not nullable (warning)
    """
    result: ValidationResult = ValidationResult()

    for table in schema.tables:
        members_seen: Set[str] = set()
        pk_indexes: List[int] = []

        for column in table.columns.values():
            ctx: Dict[str, Any] = {"table": table.name, "column": column.column_name}

            if column.member_name in members_seen:
                result.add_error(
                    "DUPLICATE_MEMBER_NAME",
                    f"Member '{column.member_name}' is generated twice in "
                    f"table '{table.name}'.",
                    ctx,
                )
            members_seen.add(column.member_name)

            if column.is_primary_key:
                pk_indexes.append(column.pk_index)

            if column.is_identity and column.is_nullable:
                result.add_warning(
                    "NULLABLE_IDENTITY",
                    f"Identity column '{column.column_name}' in table "
                    f"'{table.name}' is nullable.",
                    ctx,
                )

        if len(pk_indexes) != len(set(pk_indexes)):
            result.add_error(
                "DUPLICATE_PK_INDEX",
                f"Table '{table.name}' has duplicate primary key ordinals: "
                f"{sorted(pk_indexes)}.",
                {"table": table.name},
            )
        elif pk_indexes and sorted(pk_indexes) != list(range(len(pk_indexes))):
            result.add_warning(
                "NON_CONTIGUOUS_PK_INDEX",
                f"Primary key ordinals of table '{table.name}' are not "
                f"0..{len(pk_indexes) - 1}: {sorted(pk_indexes)}.",
                {"table": table.name},
            )

        if not pk_indexes and not table.is_view:
            result.add_warning(
                "MISSING_PRIMARY_KEY",
                f"Table '{table.name}' has no primary key.",
                {"table": table.name},
            )

    return result


def _check_foreign_key(
    schema: SchemaModel, table: Table, fk: ForeignKey, result: ValidationResult
) -> None:
    ctx: Dict[str, Any] = {"table": table.name, "foreign_key": fk.key_name}

    for column_name in fk.this_columns:
        if column_name not in table.columns:
            result.add_error(
                "FK_COLUMN_NOT_FOUND",
                f"Foreign key '{fk.key_name}' uses column '{column_name}' which "
                f"does not exist in table '{table.name}'.",
                ctx,
            )

    other: Optional[Table] = schema.get_table(fk.other_table)
    if other is None:
        result.add_error(
            "FK_TARGET_NOT_FOUND",
            f"Foreign key '{fk.key_name}' of table '{table.name}' references "
            f"unknown table '{fk.other_table}'.",
            ctx,
        )
    else:
        for column_name in fk.other_columns:
            if column_name not in other.columns:
                result.add_error(
                    "FK_TARGET_COLUMN_NOT_FOUND",
                    f"Foreign key '{fk.key_name}' references column "
                    f"'{fk.other_table}.{column_name}' which does not exist.",
                    ctx,
                )

    if fk.back_reference is None:
        return

    try:
        back: Optional[ForeignKey] = fk.resolve_back_reference()
    except StructuralInconsistencyError as exc:
        result.add_error("BACK_REFERENCE_UNRESOLVED", str(exc), ctx)
        return

    if back is None:
        return
    if back.other_table != table.name:
        result.add_error(
            "BACK_REFERENCE_ASYMMETRIC",
            f"Back reference '{fk.back_reference}' of '{table.name}.{fk.key_name}' "
            f"references '{back.other_table}' instead of '{table.name}'.",
            ctx,
        )
    if back.association_type != mirror_association_type(fk.association_type):
        result.add_warning(
            "BACK_REFERENCE_TYPE_MISMATCH",
            f"'{table.name}.{fk.key_name}' is {fk.association_type.value} but its "
            f"back reference '{fk.back_reference}' is {back.association_type.value}.",
            ctx,
        )


def validate_foreign_keys(schema: SchemaModel) -> ValidationResult:
    """
    Cross-table foreign key validation:
    - local and referenced columns exist
    - referenced table exists
    - back references resolve, point back at the owning table and carry the
      mirrored association type
    """
    result: ValidationResult = ValidationResult()
    for table in schema.tables:
        for fk in table.foreign_keys.values():
            _check_foreign_key(schema, table, fk, result)
    return result


def validate_generation_config(config: GenerationConfig) -> ValidationResult:
    """Namespaces, suffixes and names used in generated code must be identifiers."""
    result: ValidationResult = ValidationResult()

    namespaces: Dict[str, Optional[str]] = {
        "data_namespace": config.data_namespace,
        "poco_namespace": config.poco_namespace,
        "adapter_namespace": config.adapter_namespace,
    }
    for option, value in namespaces.items():
        if value is not None and not is_dotted_identifier(value):
            result.add_error(
                "INVALID_NAMESPACE",
                f"{option} '{value}' is not a valid namespace.",
                {"option": option},
            )

    suffixes: Dict[str, str] = {
        "data_object_suffix": config.data_object_suffix,
        "poco_suffix": config.poco_suffix,
        "adapter_suffix": config.adapter_suffix,
    }
    for option, value in suffixes.items():
        if value and not is_identifier(f"_{value}"):
            result.add_error(
                "INVALID_SUFFIX",
                f"{option} '{value}' cannot be part of a class name.",
                {"option": option},
            )

    if not is_identifier(config.data_context_name):
        result.add_error(
            "INVALID_DATA_CONTEXT_NAME",
            f"Data context name '{config.data_context_name}' is not a valid identifier.",
            {"option": "data_context_name"},
        )

    if config.poco_suffix == config.data_object_suffix and config.generate_pocos:
        result.add_warning(
            "CLASS_NAME_CLASH",
            "POCO and data object suffixes are equal; generated class names "
            "will collide when both share a namespace.",
            {"option": "poco_suffix"},
        )

    if not (config.generate_data_objects or config.generate_pocos or config.generate_adapters):
        result.add_info(
            "NO_PER_TABLE_ARTIFACTS",
            "No per-table artifacts are enabled.",
        )

    return result


def validate_procedure_tables(
    schema: SchemaModel, procedures: Sequence[Procedure]
) -> ValidationResult:
    """
    Check the tables procedures carry that are not part of *schema*.

    Such inline result tables are never bound to the schema, so their
    foreign keys cannot declare a back reference.
    """
    result: ValidationResult = ValidationResult()
    seen: Set[int] = set()

    for procedure in procedures:
        tables: List[Table] = list(procedure.similar_tables)
        if procedure.result_table is not None:
            tables.insert(0, procedure.result_table)
        for table in tables:
            if schema.get_table(table.name) is table or id(table) in seen:
                continue
            seen.add(id(table))
            for fk in table.foreign_keys.values():
                if fk.back_reference is not None:
                    result.add_error(
                        "INLINE_BACK_REFERENCE",
                        f"Foreign key '{table.name}.{fk.key_name}' of procedure "
                        f"'{procedure.name}' declares back reference "
                        f"'{fk.back_reference}', but its table is not part of the schema.",
                        {"procedure": procedure.name, "table": table.name, "key": fk.key_name},
                    )

    return result


# ---------------------------------------------------------------------------
# Composite validation orchestrators
# ---------------------------------------------------------------------------


def validate_schema(schema: SchemaModel) -> ValidationResult:
    """Run all schema-level validators and merge their results."""
    result: ValidationResult = ValidationResult()

    validators: List[Callable[[SchemaModel], ValidationResult]] = [
        validate_table_names,
        validate_columns,
        validate_foreign_keys,
    ]

    for validator_fn in validators:
        logger.debug("Running validator: %s", validator_fn.__name__)
        result.merge(validator_fn(schema))

    logger.info("Schema validation complete: %s", result.summary())
    return result


def validate_full(
    schema: SchemaModel,
    config: GenerationConfig,
    procedures: Optional[Sequence[Procedure]] = None,
) -> ValidationResult:
    """
    **Master validation entry point.**

    Runs schema validators, config validators, procedure table checks and
    cross-cutting checks (table filters that select nothing).
    """
    logger.info("Starting full validation: %d tables.", len(schema.tables))

    result: ValidationResult = ValidationResult()
    result.merge(validate_schema(schema))
    result.merge(validate_generation_config(config))
    if procedures:
        result.merge(validate_procedure_tables(schema, procedures))

    table_names: Set[str] = set(schema.table_names)
    for name in config.include_tables:
        if name not in table_names:
            result.add_warning(
                "INCLUDE_UNKNOWN_TABLE",
                f"Table '{name}' is listed for generation but does not exist.",
                {"table": name},
            )

    if schema.tables and not any(config.includes_table(n) for n in table_names):
        result.add_warning(
            "NO_TABLE_SELECTED",
            "The table filters exclude every table in the schema.",
        )

    if result.has_errors:
        logger.error("Validation FAILED with %d error(s).", len(result.errors))
    else:
        logger.info("Validation PASSED. %s", result.summary())

    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationError",
    "ValidationResult",
    "validate_table_names",
    "validate_columns",
    "validate_foreign_keys",
    "validate_generation_config",
    "validate_schema",
    "validate_procedure_tables",
    "validate_full",
]

logger.debug("schemagen.validators loaded: %d public symbols.", len(__all__))

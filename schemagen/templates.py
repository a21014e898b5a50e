# File: schemagen/templates.py
"""
SchemaGen - C# Artifact Renderer
=================================
This module is the **heart** of SchemaGen: it turns ``Table`` objects,
collected procedures and a ``GenerationConfig`` into C# source text for:

    1. Data object classes (LINQ to DB mapping attributes)
    2. POCO classes (plain auto properties)
    3. Adapter classes (``ToPoco`` / ``ToDataObject`` extension methods)
    4. The data context (one ``ITable<T>`` property per table)
    5. The procedures part of the data context

**Writer contract:**
    - All text goes through one ``CSharpWriter`` owned by the generator
      and reset before each artifact.
    - Every artifact must close all the scopes it opens; a writer left
      indented after rendering raises ``StructuralInconsistencyError``.

Not thread-safe: the shared writer is mutable.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from schemagen.csharp import CSharpWriter
from schemagen.errors import InvalidArgumentError, StructuralInconsistencyError
from schemagen.graph import Parameter, Procedure
from schemagen.models import (
    ArtifactKind,
    AssociationType,
    Column,
    ForeignKey,
    GenerationConfig,
    GenerationResult,
    SchemaModel,
    Table,
)
from schemagen.utils import (
    clr_type_for,
    safe_member_name,
    to_camel_case,
    to_pascal_case,
    to_plural,
    to_singular,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_HEADER_RULE: str = "-" * 99

_HEADER_LINES: List[str] = [
    _HEADER_RULE,
    " <auto-generated>",
    "    This code was generated by SchemaGen.",
    "    Changes to this file may cause incorrect behavior and will be lost if",
    "    the code is regenerated.",
    " </auto-generated>",
    _HEADER_RULE,
]

_DATA_OBJECT_USINGS: List[str] = [
    "System",
    "System.Collections.Generic",
    "LinqToDB",
    "LinqToDB.Mapping",
]

_DATA_CONTEXT_USINGS: List[str] = [
    "System",
    "System.Linq",
    "LinqToDB",
    "LinqToDB.Data",
]

_PROCEDURE_USINGS: List[str] = [
    "System",
    "System.Collections.Generic",
    "System.Data",
    "LinqToDB",
    "LinqToDB.Data",
]

_RELATIONSHIP_NAMES: Dict[AssociationType, str] = {
    AssociationType.ONE_TO_ONE: "Relationship.OneToOne",
    AssociationType.ONE_TO_MANY: "Relationship.OneToMany",
    AssociationType.MANY_TO_ONE: "Relationship.ManyToOne",
}


def _csharp_bool(value: bool) -> str:
    return "true" if value else "false"


def _quote(text: str) -> str:
    escaped: str = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


# ---------------------------------------------------------------------------
# TemplateGenerator class
# ---------------------------------------------------------------------------


class TemplateGenerator:
    """
    Renders C# artifacts through a single reusable ``CSharpWriter``.

    Each ``generate_*`` method returns the complete content of one file.
    """

    def __init__(self, config: GenerationConfig) -> None:
        if config is None:
            raise InvalidArgumentError("config")
        self._config: GenerationConfig = config
        self._writer: CSharpWriter = CSharpWriter(
            default_indent=config.indent,
            strict_indent=config.strict_indent,
            generate_partial_classes=config.generate_partial_classes,
        )
        self._schema: Optional[SchemaModel] = None
        logger.debug(
            "TemplateGenerator initialised (namespace=%s, partial=%s, fk=%s).",
            config.data_namespace,
            config.generate_partial_classes,
            config.render_foreign_keys,
        )

    @property
    def writer(self) -> CSharpWriter:
        return self._writer

    # ===================================================================
    # Naming
    # ===================================================================

    def base_class_name(self, table_name: str) -> str:
        """Table name after optional singularization and Pascal casing."""
        name: str = table_name
        if self._config.singularize_class_names:
            name = to_singular(name)
        if self._config.use_pascal_casing:
            name = to_pascal_case(name)
        return safe_member_name(name)

    def data_object_class_name(self, table: Table) -> str:
        if table.data_object_class_name:
            return table.data_object_class_name
        return f"{self.base_class_name(table.name)}{self._config.data_object_suffix}"

    def poco_class_name(self, table: Table) -> str:
        if table.poco_class_name:
            return table.poco_class_name
        return f"{self.base_class_name(table.name)}{self._config.poco_suffix}"

    def adapter_class_name(self, table: Table) -> str:
        return f"{self.base_class_name(table.name)}{self._config.adapter_suffix}"

    def data_context_property_name(self, table: Table) -> str:
        if table.data_context_property_name:
            return table.data_context_property_name
        return to_plural(self.base_class_name(table.name))

    def member_type(self, column: Column) -> str:
        if column.member_type:
            return column.member_type
        return clr_type_for(column.column_type, column.is_nullable)

    def _member_name(self, column: Column) -> str:
        name: str = column.member_name
        if self._config.use_pascal_casing:
            name = to_pascal_case(name)
        return safe_member_name(name)

    def _other_class_name(self, fk: ForeignKey) -> str:
        other: Optional[Table] = (
            self._schema.get_table(fk.other_table) if self._schema is not None else None
        )
        if other is not None:
            return self.data_object_class_name(other)
        return f"{self.base_class_name(fk.other_table)}{self._config.data_object_suffix}"

    def association_member_name(self, fk: ForeignKey) -> str:
        """
        Explicit ``member_name``, else the other table's name, plural for
        one-to-many associations and singular otherwise.
        """
        if fk.member_name:
            return safe_member_name(fk.member_name)
        base: str = to_pascal_case(fk.other_table)
        if fk.association_type == AssociationType.ONE_TO_MANY:
            return safe_member_name(to_plural(base))
        return safe_member_name(to_singular(base))

    def association_member_type(self, fk: ForeignKey) -> str:
        class_name: str = self._other_class_name(fk)
        if fk.association_type == AssociationType.ONE_TO_MANY:
            return f"List<{class_name}>"
        return class_name

    # ===================================================================
    # Shared pieces
    # ===================================================================

    def _begin_file(self, usings: Sequence[str], namespace: str) -> CSharpWriter:
        writer: CSharpWriter = self._writer
        writer.reset()
        for line in _HEADER_LINES:
            writer.write_comment(line)
        writer.write_line()
        for using in usings:
            writer.write_using(using)
        writer.write_line()
        writer.begin_namespace(namespace)
        return writer

    def _end_file(self, artifact: str) -> str:
        writer: CSharpWriter = self._writer
        writer.end_namespace()
        if writer.indent_depth != 0:
            raise StructuralInconsistencyError(
                f"Rendering '{artifact}' left {writer.indent_depth} scope(s) open."
            )
        return writer.code_output

    def _column_attribute(self, column: Column) -> str:
        args: List[str] = [_quote(column.column_name)]
        if column.db_type:
            args.append(f"DataType=LinqToDB.DataType.{column.db_type}")
        if column.sql_db_type:
            args.append(f"DbType={_quote(column.sql_db_type)}")
        if column.length:
            args.append(f"Length={column.length}")
        if column.precision:
            args.append(f"Precision={column.precision}")
        if column.scale:
            args.append(f"Scale={column.scale}")
        return f"Column({', '.join(args)})"

    def _table_attribute(self, table: Table) -> str:
        args: List[str] = []
        if table.owner:
            args.append(f"Schema={_quote(table.owner)}")
        args.append(f"Name={_quote(table.name)}")
        if table.is_view:
            args.append("IsView=true")
        return f"Table({', '.join(args)})"

    def _association_attribute(self, fk: ForeignKey) -> str:
        args: List[str] = [
            f"ThisKey={_quote(', '.join(fk.this_columns))}",
            f"OtherKey={_quote(', '.join(fk.other_columns))}",
            f"CanBeNull={_csharp_bool(fk.can_be_null)}",
        ]
        relationship: Optional[str] = _RELATIONSHIP_NAMES.get(fk.association_type)
        if relationship:
            args.append(f"Relationship={relationship}")
        args.append(f"KeyName={_quote(fk.key_name)}")
        if fk.back_reference is not None:
            back: Optional[ForeignKey] = fk.resolve_back_reference()
            if back is not None:
                args.append(f"BackReferenceName={_quote(self.association_member_name(back))}")
        return f"Association({', '.join(args)})"

    # ===================================================================
    # 1. Data object
    # ===================================================================

    def generate_data_object(self, table: Table) -> str:
        """Generate the LINQ to DB mapped class for one table."""
        class_name: str = self.data_object_class_name(table)
        writer: CSharpWriter = self._begin_file(_DATA_OBJECT_USINGS, self._config.data_namespace)

        writer.write_summary(table.description)
        writer.write_attribute_line(self._table_attribute(table))
        for attribute in table.attributes:
            writer.write_attribute_line(attribute)
        writer.begin_class(class_name, table.base_class_name, is_public=True)

        first: bool = True
        for column in table.columns.values():
            if not first:
                writer.write_line()
            first = False

            writer.write_summary(column.description)
            parts: List[str] = [self._column_attribute(column)]
            if column.is_primary_key:
                parts.append(f"PrimaryKey({column.pk_index})")
            if column.is_identity:
                parts.append("Identity")
            parts.append("Nullable" if column.is_nullable else "NotNull")
            parts.extend(column.attributes)
            writer.write_attribute_line(", ".join(parts))
            writer.write_auto_property(
                self.member_type(column), self._member_name(column), is_public=True
            )

        if self._config.render_foreign_keys and table.foreign_keys:
            writer.write_line()
            writer.write_line("#region Associations")
            for fk in table.foreign_keys.values():
                writer.write_line()
                writer.write_attribute_line(self._association_attribute(fk))
                for attribute in fk.attributes:
                    writer.write_attribute_line(attribute)
                writer.write_auto_property(
                    self.association_member_type(fk),
                    self.association_member_name(fk),
                    is_public=True,
                )
            writer.write_line()
            writer.write_line("#endregion")

        writer.end_class()
        content: str = self._end_file(class_name)
        logger.debug(
            "Generated data object '%s' for table '%s' (%d columns).",
            class_name,
            table.name,
            len(table.columns),
        )
        return content

    # ===================================================================
    # 2. POCO
    # ===================================================================

    def generate_poco(self, table: Table) -> str:
        """Generate a plain class with one auto property per column."""
        class_name: str = self.poco_class_name(table)
        writer: CSharpWriter = self._begin_file(["System"], self._config.resolved_poco_namespace)

        writer.write_summary(table.description)
        writer.begin_class(class_name, is_public=True)
        for column in table.columns.values():
            writer.write_summary(column.description)
            writer.write_auto_property(
                self.member_type(column), self._member_name(column), is_public=True
            )
        writer.end_class()

        content: str = self._end_file(class_name)
        logger.debug("Generated POCO '%s' for table '%s'.", class_name, table.name)
        return content

    # ===================================================================
    # 3. Adapter
    # ===================================================================

    def _write_conversion(self, source_type: str, target_type: str, method: str, table: Table) -> None:
        writer: CSharpWriter = self._writer
        writer.write_line(f"public static {target_type} {method}(this {source_type} source)")
        writer.write_block(
            "{",
            "if (source == null){",
            "return null;",
            "}",
        )
        writer.write_line(f"return new {target_type}")
        writer.open_scope()
        for column in table.columns.values():
            member: str = self._member_name(column)
            writer.write_line(f"{member} = source.{member},")
        writer.close_scope("};")
        writer.close_scope()

    def generate_adapter(self, table: Table) -> str:
        """Generate static conversions between the data object and the POCO."""
        class_name: str = self.adapter_class_name(table)
        data_class: str = self.data_object_class_name(table)
        poco_class: str = self.poco_class_name(table)
        namespace: str = self._config.resolved_adapter_namespace

        usings: List[str] = ["System"]
        for other in (self._config.data_namespace, self._config.resolved_poco_namespace):
            if other != namespace and other not in usings:
                usings.append(other)

        writer: CSharpWriter = self._begin_file(usings, namespace)
        writer.begin_class(class_name, is_public=True, is_static=True)
        self._write_conversion(data_class, poco_class, "ToPoco", table)
        writer.write_line()
        self._write_conversion(poco_class, data_class, "ToDataObject", table)
        writer.end_class()

        content: str = self._end_file(class_name)
        logger.debug("Generated adapter '%s' for table '%s'.", class_name, table.name)
        return content

    # ===================================================================
    # 4. Data context
    # ===================================================================

    def generate_data_context(self, tables: Sequence[Table]) -> str:
        """
        Generate the main part of the data context: constructors and one
        ``ITable<T>`` property per table, in the given order.
        """
        name: str = self._config.data_context_name
        writer: CSharpWriter = self._begin_file(_DATA_CONTEXT_USINGS, self._config.data_namespace)

        writer.begin_class(
            name, self._config.base_data_context_class, is_public=True, is_partial=True
        )
        for table in tables:
            data_class: str = self.data_object_class_name(table)
            writer.write_line(
                f"public ITable<{data_class}> {self.data_context_property_name(table)} "
                f"{{ get {{ return this.GetTable<{data_class}>(); }} }}"
            )
        if tables:
            writer.write_line()

        writer.write_line(f"public {name}()")
        writer.write_block("{", "InitDataContext();", "}")
        writer.write_line()
        if self._config.base_data_context_class:
            writer.write_line(f"public {name}(string configuration)")
            writer.push_indent()
            writer.write_line(": base(configuration)")
            writer.pop_indent()
            writer.write_block("{", "InitDataContext();", "}")
            writer.write_line()
        writer.write_line("partial void InitDataContext();")
        writer.end_class()

        content: str = self._end_file(name)
        logger.debug("Generated data context '%s' with %d tables.", name, len(tables))
        return content

    # ===================================================================
    # 5. Procedures
    # ===================================================================

    def _procedure_parameter(self, parameter: Parameter) -> str:
        prefix: str = "ref " if parameter.is_output else ""
        return f"{prefix}{parameter.type_name} {safe_member_name(to_camel_case(parameter.name))}"

    def _write_procedure(self, procedure: Procedure, method_name: str) -> None:
        writer: CSharpWriter = self._writer
        result_type: Optional[str] = (
            self.data_object_class_name(procedure.result_table)
            if procedure.result_table is not None
            else None
        )
        signature: str = ", ".join(self._procedure_parameter(p) for p in procedure.parameters)
        return_type: str = f"IEnumerable<{result_type}>" if result_type else "int"

        writer.write_summary(procedure.description)
        writer.write_line(f"public {return_type} {method_name}({signature})")
        writer.open_scope()

        for parameter in procedure.parameters:
            local: str = safe_member_name(to_camel_case(parameter.name))
            writer.write(f"var {local}Parameter = new DataParameter({_quote(parameter.name)}, {local})")
            if parameter.is_output:
                writer.write(" { Direction = ParameterDirection.InputOutput }")
            writer.write_line(";")

        arguments: List[str] = [
            f"{safe_member_name(to_camel_case(p.name))}Parameter" for p in procedure.parameters
        ]
        call: str = (
            f"QueryProc<{result_type}>" if result_type else "ExecuteProc"
        )
        target: str = _quote(
            f"[{procedure.owner}].[{procedure.name}]" if procedure.owner else f"[{procedure.name}]"
        )
        variable: str = "result"
        writer.write_line(f"var {variable} = this.{call}({', '.join([target] + arguments)});")

        for parameter in procedure.parameters:
            if parameter.is_output:
                local = safe_member_name(to_camel_case(parameter.name))
                writer.write_line(f"{local} = ({parameter.type_name}){local}Parameter.Value;")

        writer.write_line(f"return {variable};")
        writer.close_scope()

    def generate_procedures(self, procedures: Sequence[Procedure]) -> Optional[str]:
        """
        Generate the procedures part of the data context.

        Procedures that map to an already written method name are skipped.
        Returns None when *procedures* is empty.
        """
        if not procedures:
            return None

        name: str = self._config.data_context_name
        writer: CSharpWriter = self._begin_file(_PROCEDURE_USINGS, self._config.data_namespace)
        writer.begin_class(name, is_public=True, is_partial=True)

        written: int = 0
        for procedure in procedures:
            method_name: str = safe_member_name(to_pascal_case(procedure.name))
            if not writer.add_action(method_name):
                logger.debug("Procedure method '%s' already written; skipping.", method_name)
                continue
            if written:
                writer.write_line()
            self._write_procedure(procedure, method_name)
            written += 1

        writer.end_class()
        content: str = self._end_file(f"{name}.Procedures")
        logger.debug("Generated %d procedure method(s).", written)
        return content

    # ===================================================================
    # Aggregate generation
    # ===================================================================

    def generate_all(
        self,
        schema: SchemaModel,
        tables: Sequence[Table],
        procedures: Sequence[Procedure] = (),
    ) -> GenerationResult:
        """
        Render every enabled artifact for *tables*.

        Per-table artifacts follow the order of *tables*; the data context
        lists them in the schema's dependency order.
        """
        if schema is None:
            raise InvalidArgumentError("schema")
        if tables is None:
            raise InvalidArgumentError("tables")

        self._schema = schema
        result: GenerationResult = GenerationResult()
        try:
            for table in tables:
                if self._config.generate_data_objects:
                    result.add_artifact(
                        ArtifactKind.DATA_OBJECT,
                        self.data_object_class_name(table),
                        self.generate_data_object(table),
                    )
                if self._config.generate_pocos:
                    result.add_artifact(
                        ArtifactKind.POCO,
                        self.poco_class_name(table),
                        self.generate_poco(table),
                    )
                if self._config.generate_adapters:
                    result.add_artifact(
                        ArtifactKind.ADAPTER,
                        self.adapter_class_name(table),
                        self.generate_adapter(table),
                    )

            if self._config.generate_data_context:
                order: Dict[str, int] = {
                    name: position for position, name in enumerate(schema.topological_order())
                }
                ordered: List[Table] = sorted(
                    tables, key=lambda t: order.get(t.name, len(order))
                )
                result.data_context = self.generate_data_context(ordered)
                result.procedures = self.generate_procedures(procedures)
        finally:
            self._schema = None

        logger.info(
            "Rendering complete: %d artifact(s), data context=%s, procedures=%s.",
            result.artifact_count,
            "yes" if result.data_context else "no",
            "yes" if result.procedures else "no",
        )
        return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "TemplateGenerator",
]

logger.debug("schemagen.templates loaded: %d public symbols.", len(__all__))

"""
tests/test_models.py
Unit tests for schemagen.models.

Tests cover:
- Column primary-key derivation and member-name defaults
- Table construction from lists, duplicate detection
- Foreign key column pairing
- Bidirectional association-type propagation (one hop, cycles, repeats)
- SchemaModel lookups, back-reference linking and symmetry checks
- Topological ordering
- GenerationConfig defaults and table filters
- GenerationResult bookkeeping
"""

from __future__ import annotations

from typing import List
from unittest import mock

import pytest
from pydantic import ValidationError

from schemagen import models
from schemagen.errors import InvalidArgumentError, StructuralInconsistencyError
from schemagen.models import (
    ArtifactKind,
    AssociationRef,
    AssociationType,
    Column,
    ForeignKey,
    GenerationConfig,
    GenerationResult,
    SchemaModel,
    Table,
    mirror_association_type,
)

from schema_builders import fk, make_table


# ===========================================================================
# Column
# ===========================================================================


class TestColumn:
    """Column defaults and derived values."""

    @pytest.mark.parametrize(
        "pk_index, expected",
        [(-1, False), (0, True), (3, True)],
    )
    def test_primary_key_derived_from_index(self, pk_index: int, expected: bool) -> None:
        column = Column(column_name="Id", pk_index=pk_index)
        assert column.is_primary_key is expected

    def test_primary_key_cannot_be_supplied(self) -> None:
        with pytest.raises(ValidationError):
            Column(column_name="Id", is_primary_key=True)

    def test_pk_index_below_minus_one_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Column(column_name="Id", pk_index=-2)

    def test_member_name_defaults_to_column_name(self) -> None:
        assert Column(column_name="first_name").member_name == "first_name"
        assert Column(column_name="x", member_name="X").member_name == "X"

    def test_defaults(self) -> None:
        column = Column(column_name="c")
        assert column.is_nullable is True
        assert column.is_identity is False
        assert column.attributes == []


# ===========================================================================
# Table and ForeignKey
# ===========================================================================


class TestTable:
    """Table construction."""

    def test_columns_from_list_keep_order_and_ids(self) -> None:
        table = Table(
            name="T",
            columns=[{"column_name": "b"}, {"column_name": "a"}],
        )
        assert list(table.columns) == ["b", "a"]
        assert [c.id for c in table.columns.values()] == [0, 1]

    def test_duplicate_column_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Table(name="T", columns=[{"column_name": "a"}, {"column_name": "a"}])

    def test_duplicate_foreign_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            make_table("T", fk("FK", "X"), fk("FK", "Y"))

    def test_mismatched_mapping_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Table(name="T", columns={"a": {"column_name": "b"}})

    def test_primary_key_columns_sorted_by_index(self) -> None:
        table = Table(
            name="T",
            columns=[
                {"column_name": "second", "pk_index": 1},
                {"column_name": "plain"},
                {"column_name": "first", "pk_index": 0},
            ],
        )
        assert table.primary_key_columns == ["first", "second"]
        assert table.get_column("plain") is not None
        assert table.get_column("missing") is None

    def test_accept_calls_visit_table(self) -> None:
        table = make_table("T")
        visitor = mock.Mock()
        table.accept(visitor)
        visitor.visit_table.assert_called_once_with(table)


class TestForeignKey:
    """ForeignKey field rules."""

    def test_unpaired_columns_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ForeignKey(key_name="FK", other_table="X", this_columns=["a", "b"], other_columns=["c"])

    def test_defaults(self) -> None:
        key = ForeignKey(key_name="FK", other_table="X")
        assert key.can_be_null is True
        assert key.association_type == AssociationType.AUTO
        assert key.back_reference is None
        assert key.is_attached is False

    def test_assignment_without_back_reference(self) -> None:
        key = ForeignKey(key_name="FK", other_table="X")
        key.association_type = AssociationType.ONE_TO_MANY
        assert key.association_type == AssociationType.ONE_TO_MANY

    def test_unattached_back_reference_raises_on_assignment(self) -> None:
        key = ForeignKey(
            key_name="FK",
            other_table="X",
            back_reference=AssociationRef(table="X", key="FK_X"),
        )
        with pytest.raises(StructuralInconsistencyError):
            key.association_type = AssociationType.ONE_TO_ONE
        assert key.association_type == AssociationType.AUTO


# ===========================================================================
# Association type propagation
# ===========================================================================


class TestAssociationPropagation:
    """Assigning association_type mirrors it onto the back reference."""

    @pytest.mark.parametrize(
        "assigned, mirrored",
        [
            (AssociationType.AUTO, AssociationType.AUTO),
            (AssociationType.ONE_TO_ONE, AssociationType.ONE_TO_ONE),
            (AssociationType.ONE_TO_MANY, AssociationType.MANY_TO_ONE),
            (AssociationType.MANY_TO_ONE, AssociationType.ONE_TO_MANY),
        ],
    )
    def test_mirror_table(
        self, linked_schema: SchemaModel, assigned: AssociationType, mirrored: AssociationType
    ) -> None:
        a_fk = linked_schema.get_table("A").foreign_keys["FK_A_B"]
        b_fk = linked_schema.get_table("B").foreign_keys["FK_B_A"]

        a_fk.association_type = assigned

        assert a_fk.association_type == assigned
        assert b_fk.association_type == mirrored
        assert mirror_association_type(assigned) == mirrored

    def test_reverse_direction(self, linked_schema: SchemaModel) -> None:
        a_fk = linked_schema.get_table("A").foreign_keys["FK_A_B"]
        b_fk = linked_schema.get_table("B").foreign_keys["FK_B_A"]

        b_fk.association_type = AssociationType.ONE_TO_MANY
        assert a_fk.association_type == AssociationType.MANY_TO_ONE

    def test_exactly_one_hop(self, linked_schema: SchemaModel) -> None:
        a_fk = linked_schema.get_table("A").foreign_keys["FK_A_B"]
        with mock.patch.object(
            models, "propagate_association_type", wraps=models.propagate_association_type
        ) as spy:
            a_fk.association_type = AssociationType.ONE_TO_MANY
        assert spy.call_count == 1

    def test_repeated_assignment_is_stable(self, linked_schema: SchemaModel) -> None:
        a_fk = linked_schema.get_table("A").foreign_keys["FK_A_B"]
        b_fk = linked_schema.get_table("B").foreign_keys["FK_B_A"]
        for _ in range(3):
            a_fk.association_type = AssociationType.MANY_TO_ONE
        assert a_fk.association_type == AssociationType.MANY_TO_ONE
        assert b_fk.association_type == AssociationType.ONE_TO_MANY

    def test_three_cycle_terminates(self) -> None:
        schema = SchemaModel(
            check_back_reference_symmetry=False,
            tables=[
                make_table("A", fk("FK_A", "B", back=("B", "FK_B"))),
                make_table("B", fk("FK_B", "C", back=("C", "FK_C"))),
                make_table("C", fk("FK_C", "A", back=("A", "FK_A"))),
            ],
        )
        fk_a = schema.get_table("A").foreign_keys["FK_A"]
        fk_b = schema.get_table("B").foreign_keys["FK_B"]
        fk_c = schema.get_table("C").foreign_keys["FK_C"]

        fk_a.association_type = AssociationType.ONE_TO_MANY

        assert fk_b.association_type == AssociationType.MANY_TO_ONE
        # only one hop: C is untouched
        assert fk_c.association_type == AssociationType.AUTO

    def test_reading_does_not_propagate(self, linked_schema: SchemaModel) -> None:
        a_fk = linked_schema.get_table("A").foreign_keys["FK_A_B"]
        with mock.patch.object(models, "propagate_association_type") as spy:
            _ = a_fk.association_type
        spy.assert_not_called()

    def test_invalid_value_rejected(self, linked_schema: SchemaModel) -> None:
        a_fk = linked_schema.get_table("A").foreign_keys["FK_A_B"]
        with pytest.raises(ValidationError):
            a_fk.association_type = "many_to_many"  # type: ignore[assignment]

    def test_set_association_type_by_handle(self, linked_schema: SchemaModel) -> None:
        linked_schema.set_association_type(
            AssociationRef(table="A", key="FK_A_B"), AssociationType.ONE_TO_ONE
        )
        b_fk = linked_schema.get_table("B").foreign_keys["FK_B_A"]
        assert b_fk.association_type == AssociationType.ONE_TO_ONE

    def test_set_association_type_unknown_handle(self, linked_schema: SchemaModel) -> None:
        with pytest.raises(StructuralInconsistencyError):
            linked_schema.set_association_type(
                AssociationRef(table="A", key="nope"), AssociationType.ONE_TO_ONE
            )


# ===========================================================================
# SchemaModel
# ===========================================================================


class TestSchemaModel:
    """Arena behaviour."""

    def test_duplicate_table_names_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SchemaModel(tables=[make_table("A"), make_table("A")])

    def test_dangling_back_reference_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SchemaModel(tables=[make_table("A", fk("FK_A", "B", back=("B", "FK_B")))])

    def test_asymmetric_back_reference_rejected(self) -> None:
        tables = [
            make_table("A", fk("FK_A", "B", back=("B", "FK_B"))),
            make_table("B", fk("FK_B", "C")),
            make_table("C"),
        ]
        with pytest.raises(ValidationError):
            SchemaModel(tables=tables)

    def test_asymmetric_back_reference_allowed_when_unchecked(self) -> None:
        schema = SchemaModel(
            check_back_reference_symmetry=False,
            tables=[
                make_table("A", fk("FK_A", "B", back=("B", "FK_B"))),
                make_table("B", fk("FK_B", "C")),
                make_table("C"),
            ],
        )
        back = schema.get_table("A").foreign_keys["FK_A"].resolve_back_reference()
        assert back is schema.get_table("B").foreign_keys["FK_B"]

    def test_lookup(self, linked_schema: SchemaModel) -> None:
        assert linked_schema.table_names == ["A", "B"]
        assert linked_schema.get_table("missing") is None
        key = linked_schema.find_foreign_key(AssociationRef(table="B", key="FK_B_A"))
        assert key is not None and key.other_table == "A"
        assert linked_schema.find_foreign_key(AssociationRef(table="Z", key="FK")) is None

    def test_add_table_binds_foreign_keys(self) -> None:
        schema = SchemaModel(tables=[make_table("A")])
        table = make_table("B", fk("FK_B", "A"))
        schema.add_table(table)
        assert schema.get_table("B") is table
        assert table.foreign_keys["FK_B"].is_attached is True

    def test_add_table_rejects_none_and_duplicates(self) -> None:
        schema = SchemaModel(tables=[make_table("A")])
        with pytest.raises(InvalidArgumentError):
            schema.add_table(None)  # type: ignore[arg-type]
        with pytest.raises(StructuralInconsistencyError):
            schema.add_table(make_table("A"))

    def test_link_back_references(self) -> None:
        schema = SchemaModel(
            tables=[make_table("A", fk("FK_A", "B")), make_table("B", fk("FK_B", "A"))]
        )
        first = AssociationRef(table="A", key="FK_A")
        second = AssociationRef(table="B", key="FK_B")
        schema.link_back_references(first, second)

        fk_a = schema.find_foreign_key(first)
        fk_b = schema.find_foreign_key(second)
        assert fk_a.back_reference == second
        assert fk_b.back_reference == first

        fk_a.association_type = AssociationType.ONE_TO_MANY
        assert fk_b.association_type == AssociationType.MANY_TO_ONE

    def test_link_back_references_checks_symmetry(self) -> None:
        schema = SchemaModel(
            tables=[
                make_table("A", fk("FK_A", "B")),
                make_table("B", fk("FK_B", "C")),
                make_table("C"),
            ]
        )
        with pytest.raises(StructuralInconsistencyError):
            schema.link_back_references(
                AssociationRef(table="A", key="FK_A"), AssociationRef(table="B", key="FK_B")
            )

    def test_link_back_references_unknown_handle(self, linked_schema: SchemaModel) -> None:
        with pytest.raises(StructuralInconsistencyError):
            linked_schema.link_back_references(
                AssociationRef(table="A", key="FK_A_B"), AssociationRef(table="B", key="nope")
            )
        with pytest.raises(InvalidArgumentError):
            linked_schema.link_back_references(None, None)  # type: ignore[arg-type]

    def test_topological_order(self) -> None:
        schema = SchemaModel(
            tables=[
                make_table("Lines", fk("FK_L", "Orders")),
                make_table("Orders", fk("FK_O", "Customers")),
                make_table("Customers"),
            ]
        )
        assert schema.topological_order() == ["Customers", "Orders", "Lines"]

    def test_topological_order_with_cycle_keeps_every_table(
        self, linked_schema: SchemaModel
    ) -> None:
        order: List[str] = linked_schema.topological_order()
        assert sorted(order) == ["A", "B"]


# ===========================================================================
# GenerationConfig and GenerationResult
# ===========================================================================


class TestGenerationConfig:
    """Defaults, derived namespaces and table filters."""

    def test_defaults(self) -> None:
        config = GenerationConfig()
        assert config.data_context_name == "DataContext"
        assert config.data_object_suffix == "Data"
        assert config.poco_suffix == ""
        assert config.adapter_suffix == "Adapter"
        assert config.file_extension == ".cs"
        assert config.indent == "\t"
        assert config.resolved_poco_namespace == config.data_namespace
        assert config.resolved_adapter_namespace == config.data_namespace

    def test_explicit_namespaces(self) -> None:
        config = GenerationConfig(poco_namespace="Models", adapter_namespace="Adapters")
        assert config.resolved_poco_namespace == "Models"
        assert config.resolved_adapter_namespace == "Adapters"

    def test_table_filters(self) -> None:
        config = GenerationConfig(include_tables=["Orders", "OrderLines"], include_table_pattern="Lines$")
        assert config.includes_table("OrderLines") is True
        assert config.includes_table("Orders") is False
        assert config.includes_table("Customers") is False
        assert GenerationConfig().includes_table("Anything") is True

    def test_invalid_pattern_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GenerationConfig(include_table_pattern="(")

    def test_unknown_option_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GenerationConfig.model_validate({"no_such_option": True})


class TestGenerationResult:
    """Result envelope."""

    def test_empty(self) -> None:
        result = GenerationResult()
        assert result.is_empty is True
        assert result.artifact_count == 0
        assert result.procedures is None

    def test_add_and_filter_artifacts(self) -> None:
        result = GenerationResult()
        result.add_artifact(ArtifactKind.DATA_OBJECT, "CustomerData", "class CustomerData {}")
        result.add_artifact(ArtifactKind.POCO, "Customer", "class Customer {}")
        assert result.artifact_count == 2
        assert result.is_empty is False
        assert [a.name for a in result.artifacts_of(ArtifactKind.POCO)] == ["Customer"]

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GenerationResult().add_artifact("bogus", "X", "")  # type: ignore[arg-type]

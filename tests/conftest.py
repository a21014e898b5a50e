"""
tests/conftest.py
Shared fixtures for the schemagen test suite.

Real file I/O is performed inside temporary directories managed by
pytest's tmp_path fixture; schemas are written and read through PyYAML.
"""

from __future__ import annotations

import copy
import pathlib
from typing import Any, Dict, List

import pytest
import yaml

from schemagen.generator import parse_raw_schema
from schemagen.graph import Procedure
from schemagen.models import GenerationConfig, SchemaModel
from schemagen.writer import CodeWriter
from schema_builders import fk, make_table


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
SCHEMA_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "schema_example.yaml"


# ---------------------------------------------------------------------------
# Raw schema data fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_schema_dict() -> Dict[str, Any]:
    """Load the reference schema_example.yaml once per session."""
    assert SCHEMA_EXAMPLE_PATH.exists(), (
        f"Reference schema not found at {SCHEMA_EXAMPLE_PATH}. "
        "Make sure schema_example.yaml is in the project root."
    )
    with open(SCHEMA_EXAMPLE_PATH, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


@pytest.fixture()
def schema_dict(raw_schema_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_schema_dict)


@pytest.fixture()
def schema_yaml_path(schema_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the schema dict to a temporary YAML file and return its path."""
    path = tmp_path / "schema.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(schema_dict, fh, default_flow_style=False, allow_unicode=True)
    return path


@pytest.fixture()
def parsed_example(schema_dict: Dict[str, Any]):
    """(SchemaModel, GenerationConfig, procedures) for the reference schema."""
    return parse_raw_schema(schema_dict)


@pytest.fixture()
def example_schema(parsed_example) -> SchemaModel:
    return parsed_example[0]


@pytest.fixture()
def example_config(parsed_example) -> GenerationConfig:
    return parsed_example[1]


@pytest.fixture()
def example_procedures(parsed_example) -> List[Procedure]:
    return parsed_example[2]


# ---------------------------------------------------------------------------
# Minimal / edge-case schema fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def minimal_schema_dict() -> Dict[str, Any]:
    """Smallest useful schema: one table with a key column and a text column."""
    return {
        "tables": [
            {
                "name": "Item",
                "description": "A simple item",
                "columns": [
                    {
                        "column_name": "Id",
                        "column_type": "int",
                        "is_nullable": False,
                        "is_identity": True,
                        "pk_index": 0,
                    },
                    {
                        "column_name": "Title",
                        "column_type": "nvarchar(100)",
                        "is_nullable": False,
                        "length": 100,
                    },
                ],
            }
        ],
    }


@pytest.fixture()
def minimal_schema_yaml_path(
    minimal_schema_dict: Dict[str, Any], tmp_path: pathlib.Path
) -> pathlib.Path:
    """Write minimal schema to a temp YAML and return the path."""
    path = tmp_path / "minimal_schema.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(minimal_schema_dict, fh, default_flow_style=False)
    return path


@pytest.fixture()
def linked_schema() -> SchemaModel:
    """Two tables whose foreign keys are each other's back reference."""
    return SchemaModel(
        tables=[
            make_table("A", fk("FK_A_B", "B", back=("B", "FK_B_A"))),
            make_table("B", fk("FK_B_A", "A", back=("A", "FK_A_B"))),
        ]
    )


@pytest.fixture()
def writer() -> CodeWriter:
    return CodeWriter()

"""
tests/schema_builders.py
Small builders for tables and foreign keys used across the test modules.

Imported by absolute name (``from schema_builders import ...``); pytest
puts this directory on ``sys.path`` when it collects the tests.
"""

from __future__ import annotations

from typing import Any, Dict

from schemagen.models import Table


def make_table(name: str, *foreign_keys: Dict[str, Any], columns: Any = None) -> Table:
    """Build a table with an ``Id`` key column and the given foreign keys."""
    return Table.model_validate(
        {
            "name": name,
            "columns": columns
            or [
                {"column_name": "Id", "column_type": "int", "is_nullable": False, "pk_index": 0},
                {"column_name": "ParentId", "column_type": "int"},
            ],
            "foreign_keys": list(foreign_keys),
        }
    )


def fk(key: str, other: str, back: Any = None, **extra: Any) -> Dict[str, Any]:
    """Foreign key dict from ``ParentId`` to ``other.Id``."""
    data: Dict[str, Any] = {
        "key_name": key,
        "other_table": other,
        "this_columns": ["ParentId"],
        "other_columns": ["Id"],
    }
    if back is not None:
        data["back_reference"] = {"table": back[0], "key": back[1]}
    data.update(extra)
    return data

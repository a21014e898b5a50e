# File: schemagen/__init__.py
"""
SchemaGen - C# Data Model Generator
====================================

Turns a relational schema description (JSON/YAML) into C# source files:
LINQ to DB data objects, plain POCOs, adapters between the two, and a data
context with one table property per table plus stored-procedure methods.

Architecture overview::

    ┌──────────────┐     ┌────────────────┐     ┌───────────────────┐
    │  CLI / Entry │────▶│ ModelGenerator │────▶│ TemplateGenerator │
    │   (cli.py)   │     │ (generator.py) │     │  (templates.py)   │
    └──────────────┘     └───────┬────────┘     └─────────┬─────────┘
                                 │                        ▼
                    ┌────────────┼────────────┐    ┌─────────────┐
                    ▼            ▼            ▼    │ CSharpWriter│
             ┌──────────┐ ┌───────────┐ ┌─────────┐│ CodeWriter  │
             │validators│ │ collector │ │exporters││ markup      │
             │  (.py)   │ │ (.py)     │ │ (.py)   │└─────────────┘
             └──────────┘ └───────────┘ └─────────┘

Usage::

    # As a library
    from schemagen import ModelGenerator
    report = ModelGenerator().generate_from_file(Path("schema.yaml"))

    # From the command line
    python -m schemagen --schema schema.yaml --poco --adapter -v

Public API:
    - ModelGenerator     - Pipeline orchestrator
    - CodeWriter         - Indentation-aware text writer
    - SchemaModel        - Schema arena (tables, foreign keys)
    - ModelCollector     - Flattening visitor over the namespace graph
    - TemplateGenerator  - C# artifact renderer
    - ArtifactExporter   - File-system writer
    - validate_full      - Validation entry point
"""

from __future__ import annotations

__version__: str = "1.0.0"
__author__: str = "SchemaGen Team"
__license__: str = "MIT"

from schemagen.errors import (
    InvalidArgumentError,
    SchemaGenError,
    StructuralInconsistencyError,
)
from schemagen.writer import CodeWriter
from schemagen.csharp import CSharpWriter
from schemagen.models import (
    Artifact,
    ArtifactKind,
    AssociationRef,
    AssociationType,
    Column,
    DuplicateTablePolicy,
    ForeignKey,
    GenerationConfig,
    GenerationResult,
    SchemaModel,
    Table,
)
from schemagen.graph import (
    ClassDef,
    ModelRoot,
    ModelVisitor,
    Namespace,
    Parameter,
    Procedure,
    build_model_graph,
)
from schemagen.collector import ModelCollector
from schemagen.validators import ValidationResult, validate_full
from schemagen.templates import TemplateGenerator
from schemagen.exporters import ArtifactExporter, ExportOutcome, ExportResult
from schemagen.generator import GenerationReport, ModelGenerator

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Errors
    "SchemaGenError",
    "InvalidArgumentError",
    "StructuralInconsistencyError",
    # Text emission
    "CodeWriter",
    "CSharpWriter",
    # Models
    "Artifact",
    "ArtifactKind",
    "AssociationRef",
    "AssociationType",
    "Column",
    "DuplicateTablePolicy",
    "ForeignKey",
    "GenerationConfig",
    "GenerationResult",
    "SchemaModel",
    "Table",
    # Graph and collection
    "ClassDef",
    "ModelRoot",
    "ModelVisitor",
    "Namespace",
    "Parameter",
    "Procedure",
    "build_model_graph",
    "ModelCollector",
    # Validation
    "validate_full",
    "ValidationResult",
    # Rendering and export
    "TemplateGenerator",
    "ArtifactExporter",
    "ExportOutcome",
    "ExportResult",
    # Orchestration
    "ModelGenerator",
    "GenerationReport",
]

# File: schemagen/generator.py
"""
SchemaGen - Generation Pipeline (Orchestrator)
===============================================

Connects every phase together:

    Schema Input -> Validation -> Collection -> Rendering -> File Export

The ``ModelGenerator`` class provides both a programmatic API and the
backend for the CLI.

Workflow::

    1. Load the schema document from a JSON/YAML file.
    2. Parse it into ``SchemaModel`` + ``GenerationConfig`` + procedures.
    3. Run the full validation pipeline (validators.py).
    4. Build the namespace graph and flatten it with ``ModelCollector``.
    5. Apply the table filters of the config.
    6. Render every enabled artifact with ``TemplateGenerator``.
    7. Hand the result to ``ArtifactExporter`` (skipped on dry runs).
    8. Return a ``GenerationReport`` with metrics and the export outcome.

Error handling strategy:
    - Load and parse failures are reported as input errors.
    - Validation errors are collected and surfaced, not swallowed.
    - Structural errors raised while collecting or rendering are recorded
      as generation errors.
    - Export failures and skipped artifacts come back in the report and
      its ``ExportOutcome``.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from schemagen.collector import ModelCollector
from schemagen.errors import SchemaGenError
from schemagen.exporters import ArtifactExporter, ExportManifest, ExportOutcome, ExportResult
from schemagen.graph import ModelRoot, Parameter, Procedure, build_model_graph
from schemagen.models import GenerationConfig, GenerationResult, SchemaModel, Table
from schemagen.templates import TemplateGenerator
from schemagen.utils import Timer, count_lines
from schemagen.validators import ValidationResult, validate_full

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.generator")


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``ModelGenerator.generate()``.

    ``outcome`` is None when the export step did not run (failure before
    export, or a dry run).
    """

    success: bool = False
    dry_run: bool = False
    data_namespace: str = ""
    outcome: Optional[ExportOutcome] = None

    # Metrics
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    total_artifacts: int = 0
    total_tables_processed: int = 0
    total_elapsed_seconds: float = 0.0

    # Sub-reports
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    input_errors: List[str] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)
    skipped_tables: List[str] = field(default_factory=list)
    skipped_artifacts: List[str] = field(default_factory=list)

    result: Optional[GenerationResult] = None
    manifest: Optional[ExportManifest] = None

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        if self.dry_run:
            export_status: str = "not written (dry run)"
        elif self.outcome is None:
            export_status = "not run"
        else:
            export_status = self.outcome.value.upper()

        lines.append(f"{'='*60}")
        lines.append("  SchemaGen - Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:           {status}")
        lines.append(f"  Export:           {export_status}")
        lines.append(f"  Namespace:        {self.data_namespace}")
        lines.append(f"  Tables processed: {self.total_tables_processed}")
        lines.append(f"  Artifacts:        {self.total_artifacts}")
        lines.append(f"  Files written:    {self.total_files}")
        lines.append(f"  Total lines:      {self.total_lines:,}")
        lines.append(f"  Total bytes:      {self.total_bytes:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'─'*60}")

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<28s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        sections: List[Tuple[str, str, List[str]]] = [
            ("Input Errors", "✗", self.input_errors),
            ("Validation Errors", "✗", self.validation_errors),
            ("Validation Warnings", "⚠", self.validation_warnings),
            ("Generation Errors", "✗", self.generation_errors),
            ("Export Errors", "✗", self.export_errors),
            ("Skipped Tables", "⊘", self.skipped_tables),
            ("Skipped Artifacts", "⊘", self.skipped_artifacts),
        ]
        for title, icon, items in sections:
            if not items:
                continue
            lines.append(f"{'─'*60}")
            lines.append(f"  {title} ({len(items)}):")
            for item in items:
                lines.append(f"    {icon} {item}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Schema loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object at top level, got {type(data).__name__}.")
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping at top level, got {type(data).__name__}.")
    return data


def load_schema_file(path: Path) -> Dict[str, Any]:
    """
    Load a schema document (JSON or YAML), dispatching on the extension.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Schema file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Schema path is not a file: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)

    logger.info("Unknown extension '%s'; trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except ValueError:
        return _load_yaml_file(path)


def _resolve_table(schema: SchemaModel, value: Any, procedure_name: str) -> Table:
    """A procedure's table is either a schema table name or an inline table."""
    if isinstance(value, str):
        table: Optional[Table] = schema.get_table(value)
        if table is None:
            raise ValueError(
                f"Procedure '{procedure_name}' references unknown table '{value}'."
            )
        return table
    if isinstance(value, dict):
        return Table.model_validate(value)
    raise ValueError(
        f"Procedure '{procedure_name}' has an invalid table reference: {value!r}."
    )


def _parse_procedure(schema: SchemaModel, data: Dict[str, Any]) -> Procedure:
    if not isinstance(data, dict) or not data.get("name"):
        raise ValueError(f"Procedure entries need a 'name': {data!r}.")
    name: str = data["name"]

    parameters: List[Parameter] = []
    for item in data.get("parameters") or []:
        if not isinstance(item, dict) or not item.get("name"):
            raise ValueError(f"Parameter of procedure '{name}' needs a 'name': {item!r}.")
        parameters.append(
            Parameter(
                name=item["name"],
                type_name=item.get("type", "object"),
                is_output=bool(item.get("output", False)),
            )
        )

    result_value: Any = data.get("result_table")
    return Procedure(
        name=name,
        owner=data.get("owner"),
        parameters=parameters,
        result_table=_resolve_table(schema, result_value, name) if result_value else None,
        similar_tables=[
            _resolve_table(schema, value, name) for value in data.get("similar_tables") or []
        ],
        description=data.get("description"),
    )


def parse_raw_schema(
    raw: Dict[str, Any],
) -> Tuple[SchemaModel, GenerationConfig, List[Procedure]]:
    """
    Parse a raw dictionary (from JSON/YAML) into validated models.

    Expected top-level keys:
        - "tables" (required): list of tables
        - "check_back_reference_symmetry" (optional)
        - "procedures" (optional): list of procedures
        - "config" (optional): generation settings

    Raises:
        ValueError: If required keys are missing or validation fails.
    """
    if "tables" not in raw:
        raise ValueError("Cannot find schema definition in input. Expected top-level key: 'tables'.")

    schema_data: Dict[str, Any] = {"tables": raw["tables"] or []}
    if "check_back_reference_symmetry" in raw:
        schema_data["check_back_reference_symmetry"] = raw["check_back_reference_symmetry"]

    config_data: Any = raw.get("config")
    if config_data is None:
        logger.info("No generation config found in input; using defaults.")
        config_data = {}

    try:
        schema: SchemaModel = SchemaModel.model_validate(schema_data)
    except ValueError as exc:
        raise ValueError(f"Schema validation failed: {exc}") from exc

    try:
        config: GenerationConfig = GenerationConfig.model_validate(config_data)
    except ValueError as exc:
        raise ValueError(f"Config validation failed: {exc}") from exc

    procedures: List[Procedure] = []
    for item in raw.get("procedures") or []:
        try:
            procedures.append(_parse_procedure(schema, item))
        except ValueError as exc:
            raise ValueError(f"Procedure validation failed: {exc}") from exc

    return schema, config, procedures


# ---------------------------------------------------------------------------
# ModelGenerator: master orchestrator
# ---------------------------------------------------------------------------


class ModelGenerator:
    """
    Pipeline orchestrator for SchemaGen.

    Usage::

        generator = ModelGenerator()

        # From a file
        report = generator.generate_from_file(Path("schema.yaml"))

        # From in-memory objects
        report = generator.generate(schema, config, procedures)

        print(report.summary())

    The generator is reusable: create once, call generate() many times.
    """

    def __init__(
        self,
        *,
        strict_validation: bool = True,
        fail_on_warnings: bool = False,
        dry_run: bool = False,
        base_dir: Optional[Path] = None,
    ) -> None:
        """
        Args:
            strict_validation: If True, abort on any validation error.
            fail_on_warnings: If True, treat validation warnings as errors.
            dry_run: If True, render everything but write nothing.
            base_dir: Directory that relative output directories are
                resolved against (default: current working directory).
        """
        self._strict_validation: bool = strict_validation
        self._fail_on_warnings: bool = fail_on_warnings
        self._dry_run: bool = dry_run
        self._base_dir: Optional[Path] = base_dir

        logger.debug(
            "ModelGenerator initialised: strict=%s, fail_on_warnings=%s, dry_run=%s.",
            strict_validation,
            fail_on_warnings,
            dry_run,
        )

    # -----------------------------------------------------------------
    # Public: load
    # -----------------------------------------------------------------

    def load(
        self,
        schema_path: Path,
        config_overrides: Optional[Dict[str, Any]] = None,
    ) -> Tuple[SchemaModel, GenerationConfig, List[Procedure]]:
        """
        Load and parse *schema_path*, applying *config_overrides* on top of
        the document's ``config`` section.
        """
        raw_data: Dict[str, Any] = load_schema_file(schema_path)
        logger.info("Loaded schema file: %s (%d top-level keys).", schema_path, len(raw_data))

        if config_overrides:
            config_section: Any = raw_data.get("config") or {}
            if not isinstance(config_section, dict):
                raise ValueError("The 'config' section must be a mapping.")
            raw_data["config"] = {**config_section, **config_overrides}

        return parse_raw_schema(raw_data)

    # -----------------------------------------------------------------
    # Public: generate from file
    # -----------------------------------------------------------------

    def generate_from_file(
        self,
        schema_path: Path,
        config_overrides: Optional[Dict[str, Any]] = None,
    ) -> GenerationReport:
        """Full pipeline: load file, validate, collect, render, export."""
        report: GenerationReport = GenerationReport(dry_run=self._dry_run)

        with Timer("load_schema") as t_load:
            try:
                schema, config, procedures = self.load(schema_path, config_overrides)
            except (FileNotFoundError, ValueError) as exc:
                report.input_errors.append(str(exc))
                failed: bool = True
            else:
                failed = False

        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Load Schema File",
                success=not failed,
                elapsed_seconds=t_load.elapsed,
                detail=report.input_errors[-1] if failed else f"from {schema_path.name}",
            )
        )
        if failed:
            logger.error("Failed to load schema: %s", report.input_errors[-1])
            return self._finalise_report(report, t_load.elapsed)

        return self._run_pipeline(schema, config, procedures, report)

    # -----------------------------------------------------------------
    # Public: generate from in-memory objects
    # -----------------------------------------------------------------

    def generate(
        self,
        schema: SchemaModel,
        config: GenerationConfig,
        procedures: Sequence[Procedure] = (),
    ) -> GenerationReport:
        """Full pipeline from pre-parsed objects."""
        report: GenerationReport = GenerationReport(dry_run=self._dry_run)
        return self._run_pipeline(schema, config, procedures, report)

    # -----------------------------------------------------------------
    # Internal: master pipeline
    # -----------------------------------------------------------------

    def _run_pipeline(
        self,
        schema: SchemaModel,
        config: GenerationConfig,
        procedures: Sequence[Procedure],
        report: GenerationReport,
    ) -> GenerationReport:
        pipeline_start: float = time.perf_counter()
        report.data_namespace = config.data_namespace

        validation_ok: bool = self._step_validate(schema, config, procedures, report)
        if not validation_ok and self._strict_validation:
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        tables: Optional[List[Table]] = self._step_collect(schema, config, procedures, report)
        if tables is None:
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        result: Optional[GenerationResult] = self._step_render(
            schema, config, tables, procedures, report
        )
        if result is None:
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        if result.is_empty:
            report.generation_errors.append("No artifacts were generated; nothing to export.")
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        if self._dry_run:
            logger.info("Dry run: %d artifact(s) rendered, nothing written.", result.artifact_count)
        else:
            self._step_export(result, config, report)

        return self._finalise_report(report, time.perf_counter() - pipeline_start)

    # -----------------------------------------------------------------
    # Pipeline step: Validation
    # -----------------------------------------------------------------

    def _step_validate(
        self,
        schema: SchemaModel,
        config: GenerationConfig,
        procedures: Sequence[Procedure],
        report: GenerationReport,
    ) -> bool:
        """Returns True if validation passed (or only warnings and not fail_on_warnings)."""
        with Timer("validation") as t:
            result: ValidationResult = validate_full(schema, config, procedures)

        report.validation_errors.extend(str(e) for e in result.errors)
        report.validation_warnings.extend(str(w) for w in result.warnings)

        if result.errors:
            detail: str = f"{len(result.errors)} error(s)"
        elif result.warnings:
            detail = f"{len(result.warnings)} warning(s)"
        else:
            detail = "all checks passed"

        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Validate Schema",
                success=result.is_valid,
                elapsed_seconds=t.elapsed,
                detail=detail,
            )
        )

        if result.errors:
            for err in result.errors:
                logger.error("  ✗ %s", err)
            return False

        for warn in result.warnings:
            logger.warning("  ⚠ %s", warn)
        return not (self._fail_on_warnings and result.warnings)

    # -----------------------------------------------------------------
    # Pipeline step: Collection and filtering
    # -----------------------------------------------------------------

    def _step_collect(
        self,
        schema: SchemaModel,
        config: GenerationConfig,
        procedures: Sequence[Procedure],
        report: GenerationReport,
    ) -> Optional[List[Table]]:
        """Flatten the namespace graph and apply the table filters."""
        selected: List[Table] = []
        collector: Optional[ModelCollector] = None
        with Timer("collection") as t:
            try:
                root: ModelRoot = build_model_graph(
                    config.data_namespace,
                    schema.tables,
                    procedures,
                    config.data_context_name,
                )
                collector = ModelCollector(config.duplicate_table_policy)
                collector.collect(root)
            except SchemaGenError as exc:
                error_msg: str = f"Collection failed: {type(exc).__name__}: {exc}"
                report.generation_errors.append(error_msg)
                logger.error(error_msg)
                collector = None

        if collector is None:
            report.step_metrics.append(
                GenerationStepMetric(
                    step_name="Collect Model",
                    success=False,
                    elapsed_seconds=t.elapsed,
                    detail=report.generation_errors[-1],
                )
            )
            return None

        for conflict in collector.conflicts:
            report.validation_warnings.append(
                f"Table '{conflict.name}' is defined twice with different content; "
                f"the first definition was kept."
            )

        for table in collector.tables:
            if config.includes_table(table.name):
                selected.append(table)
            else:
                report.skipped_tables.append(table.name)

        report.total_tables_processed = len(selected)
        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Collect Model",
                success=True,
                elapsed_seconds=t.elapsed,
                detail=(
                    f"{len(selected)} tables selected, "
                    f"{len(report.skipped_tables)} filtered, "
                    f"{len(collector.procedures)} procedures"
                ),
            )
        )
        return selected

    # -----------------------------------------------------------------
    # Pipeline step: Rendering
    # -----------------------------------------------------------------

    def _step_render(
        self,
        schema: SchemaModel,
        config: GenerationConfig,
        tables: Sequence[Table],
        procedures: Sequence[Procedure],
        report: GenerationReport,
    ) -> Optional[GenerationResult]:
        result: Optional[GenerationResult] = None
        with Timer("rendering") as t:
            try:
                template_gen: TemplateGenerator = TemplateGenerator(config)
                result = template_gen.generate_all(schema, tables, procedures)
            except SchemaGenError as exc:
                error_msg: str = f"Rendering failed: {type(exc).__name__}: {exc}"
                report.generation_errors.append(error_msg)
                logger.error(error_msg)

        if result is not None:
            report.result = result
            report.total_artifacts = result.artifact_count
            rendered_lines: int = sum(count_lines(a.content) for a in result.artifacts)
            detail: str = f"{result.artifact_count} artifacts, ~{rendered_lines:,} lines"
        else:
            detail = report.generation_errors[-1]

        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Render Artifacts",
                success=result is not None,
                elapsed_seconds=t.elapsed,
                detail=detail,
            )
        )
        return result

    # -----------------------------------------------------------------
    # Pipeline step: Export
    # -----------------------------------------------------------------

    def _step_export(
        self,
        result: GenerationResult,
        config: GenerationConfig,
        report: GenerationReport,
    ) -> None:
        with Timer("export") as t:
            exporter: ArtifactExporter = ArtifactExporter(config, base_dir=self._base_dir)
            export_result: ExportResult = exporter.export(result)

        report.outcome = export_result.outcome
        report.manifest = export_result.manifest
        report.total_files = export_result.manifest.total_files
        report.total_bytes = export_result.manifest.total_bytes
        report.total_lines = export_result.manifest.total_lines
        report.export_errors.extend(export_result.errors)
        report.skipped_artifacts.extend(export_result.skipped)

        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Export to Filesystem",
                success=export_result.outcome != ExportOutcome.FAILED,
                elapsed_seconds=t.elapsed,
                detail=(
                    f"{export_result.outcome.value}: "
                    f"{export_result.manifest.total_files} files, "
                    f"{export_result.manifest.total_bytes:,} bytes"
                ),
            )
        )

    # -----------------------------------------------------------------
    # Internal: finalise report
    # -----------------------------------------------------------------

    def _finalise_report(self, report: GenerationReport, total_elapsed: float) -> GenerationReport:
        report.total_elapsed_seconds = total_elapsed
        has_errors: bool = bool(
            report.input_errors
            or report.generation_errors
            or report.export_errors
            or (report.validation_errors and self._strict_validation)
            or (report.validation_warnings and self._fail_on_warnings)
        )
        report.success = not has_errors
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ModelGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "load_schema_file",
    "parse_raw_schema",
]

logger.debug("schemagen.generator loaded: %d public symbols.", len(__all__))

# File: schemagen/cli.py
"""
SchemaGen - Command-Line Interface
===================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Data objects for every table, written to the current directory
    python -m schemagen --schema schema.yaml

    # Data objects, POCOs and adapters in separate directories
    python -m schemagen -s schema.yaml --poco --adapter \\
        --dodir ./Data --pocodir ./Models --adapterdir ./Adapters

    # Only some tables, Pascal-cased and singularized class names
    python -m schemagen -s schema.yaml --tables Customers,Orders --pascal --singularize

    # Validate only (no file output)
    python -m schemagen -s schema.yaml --validate-only

Exit codes:
    0 - success
    1 - validation error
    2 - generation error (including "no artifacts generated")
    3 - export error
    4 - input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the ``schemagen`` logger.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    formatter: logging.Formatter = logging.Formatter(fmt, datefmt="%H:%M:%S")
    handler.setFormatter(formatter)

    root_logger: logging.Logger = logging.getLogger("schemagen")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from schemagen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="schemagen",
        description=(
            "SchemaGen - C# data model generator.\n\n"
            "Turns a relational schema description (JSON/YAML) into LINQ to DB "
            "data objects, POCOs, adapters and a data context."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -s schema.yaml\n"
            "  %(prog)s -s schema.yaml --poco --adapter --pocodir ./Models\n"
            "  %(prog)s -s schema.yaml --validate-only\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"SchemaGen v{__version__}",
    )
    parser.add_argument(
        "-s", "--schema",
        type=str,
        required=True,
        metavar="PATH",
        help="Path to the schema description file (JSON or YAML).",
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Only validate the schema without generating code.",
    )
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Render everything but don't write files to disk.",
    )
    mode_group.add_argument(
        "--no-strict",
        action="store_true",
        default=False,
        help="Continue even if validation reports errors.",
    )

    # --- Table selection ---
    tables_group = parser.add_argument_group("table selection")
    tables_group.add_argument(
        "--tables",
        type=str,
        default=None,
        metavar="NAMES",
        help="Comma separated list of tables to generate.",
    )
    tables_group.add_argument(
        "--table-pattern",
        type=str,
        default=None,
        metavar="REGEX",
        help="Only generate tables whose name matches this regular expression.",
    )

    # --- Artifacts ---
    artifact_group = parser.add_argument_group("artifacts")
    artifact_group.add_argument(
        "--do",
        dest="data_objects",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Generate data object classes (default: on).",
    )
    artifact_group.add_argument(
        "--poco",
        action="store_true",
        default=None,
        help="Generate POCO classes.",
    )
    artifact_group.add_argument(
        "--adapter",
        action="store_true",
        default=None,
        help="Generate adapter classes between data objects and POCOs.",
    )
    artifact_group.add_argument(
        "--fk",
        action="store_true",
        default=None,
        help="Render foreign keys as association members.",
    )
    artifact_group.add_argument(
        "--partial",
        action="store_true",
        default=None,
        help="Generate partial classes.",
    )
    artifact_group.add_argument(
        "--no-data-context",
        action="store_true",
        default=False,
        help="Don't generate the data context.",
    )
    artifact_group.add_argument(
        "--data-context",
        type=str,
        default=None,
        metavar="NAME",
        help="Name of the data context class.",
    )
    artifact_group.add_argument(
        "--data-context-base",
        type=str,
        default=None,
        metavar="CLASS",
        help="Base class of the data context.",
    )

    # --- Naming ---
    naming_group = parser.add_argument_group("naming")
    naming_group.add_argument("--dons", type=str, default=None, metavar="NS",
                              help="Namespace of the data objects.")
    naming_group.add_argument("--pocons", type=str, default=None, metavar="NS",
                              help="Namespace of the POCOs.")
    naming_group.add_argument("--adapterns", type=str, default=None, metavar="NS",
                              help="Namespace of the adapters.")
    naming_group.add_argument("--dosuffix", type=str, default=None, metavar="SUFFIX",
                              help="Class name suffix of the data objects.")
    naming_group.add_argument("--pocosuffix", type=str, default=None, metavar="SUFFIX",
                              help="Class name suffix of the POCOs.")
    naming_group.add_argument("--adaptersuffix", type=str, default=None, metavar="SUFFIX",
                              help="Class name suffix of the adapters.")
    naming_group.add_argument(
        "--singularize",
        action="store_true",
        default=None,
        help="Singularize table names for class names.",
    )
    naming_group.add_argument(
        "--pascal",
        action="store_true",
        default=None,
        help="Use Pascal casing for class and member names.",
    )

    # --- Output ---
    output_group = parser.add_argument_group("output directories")
    output_group.add_argument("--dodir", type=str, default=None, metavar="DIR",
                              help="Output directory of data objects and the data context.")
    output_group.add_argument("--pocodir", type=str, default=None, metavar="DIR",
                              help="Output directory of POCOs.")
    output_group.add_argument("--adapterdir", type=str, default=None, metavar="DIR",
                              help="Output directory of adapters.")

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all logging output.",
    )

    return parser


# ---------------------------------------------------------------------------
# Config override builder
# ---------------------------------------------------------------------------

# CLI attribute -> GenerationConfig field, for options copied as given.
_DIRECT_OVERRIDES: Dict[str, str] = {
    "table_pattern": "include_table_pattern",
    "data_objects": "generate_data_objects",
    "poco": "generate_pocos",
    "adapter": "generate_adapters",
    "fk": "render_foreign_keys",
    "partial": "generate_partial_classes",
    "data_context": "data_context_name",
    "data_context_base": "base_data_context_class",
    "dons": "data_namespace",
    "pocons": "poco_namespace",
    "adapterns": "adapter_namespace",
    "dosuffix": "data_object_suffix",
    "pocosuffix": "poco_suffix",
    "adaptersuffix": "adapter_suffix",
    "singularize": "singularize_class_names",
    "pascal": "use_pascal_casing",
    "dodir": "data_object_dir",
    "pocodir": "poco_dir",
    "adapterdir": "adapter_dir",
}


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Build a config override dictionary from CLI arguments."""
    overrides: Dict[str, Any] = {}

    for attribute, config_field in _DIRECT_OVERRIDES.items():
        value: Any = getattr(args, attribute)
        if value is not None:
            overrides[config_field] = value

    if args.tables is not None:
        overrides["include_tables"] = [
            name.strip() for name in args.tables.split(",") if name.strip()
        ]

    if args.no_data_context:
        overrides["generate_data_context"] = False

    return overrides


# ---------------------------------------------------------------------------
# Validate-only mode
# ---------------------------------------------------------------------------


def _run_validate_only(schema_path: Path, config_overrides: Dict[str, Any]) -> int:
    """Run validation only (no code generation); returns the exit code."""
    from schemagen.generator import ModelGenerator
    from schemagen.utils import Timer
    from schemagen.validators import validate_full

    logger.info("Running validation-only mode for: %s", schema_path)

    try:
        schema, config, procedures = ModelGenerator().load(schema_path, config_overrides)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load schema: %s", exc)
        return EXIT_INPUT_ERROR

    with Timer("validation") as t:
        result = validate_full(schema, config, procedures)

    print(f"\n{'='*50}")
    print("  Schema Validation Report")
    print(f"{'='*50}")
    print(f"  File:       {schema_path.name}")
    print(f"  Tables:     {len(schema.tables)}")
    print(f"  Procedures: {len(procedures)}")
    print(f"  Time:       {t.elapsed:.3f}s")
    print(f"  Valid:      {'Yes' if result.is_valid else 'No'}")

    if result.errors:
        print(f"\n  Errors ({len(result.errors)}):")
        for err in result.errors:
            print(f"    ✗ {err}")

    if result.warnings:
        print(f"\n  Warnings ({len(result.warnings)}):")
        for warn in result.warnings:
            print(f"    ⚠ {warn}")

    if result.is_valid and not result.warnings:
        print("\n  ✅ All validations passed!")

    print(f"{'='*50}\n")

    return EXIT_SUCCESS if result.is_valid else EXIT_VALIDATION_ERROR


# ---------------------------------------------------------------------------
# Full generation mode
# ---------------------------------------------------------------------------


def _exit_code_for(report: Any) -> int:
    if report.success:
        return EXIT_SUCCESS
    if report.input_errors:
        return EXIT_INPUT_ERROR
    if report.validation_errors:
        return EXIT_VALIDATION_ERROR
    if report.generation_errors:
        return EXIT_GENERATION_ERROR
    if report.export_errors:
        return EXIT_EXPORT_ERROR
    return EXIT_GENERATION_ERROR


def _run_generation(
    schema_path: Path,
    config_overrides: Dict[str, Any],
    args: argparse.Namespace,
) -> int:
    """Run the full generation pipeline; returns the exit code."""
    from schemagen.generator import GenerationReport, ModelGenerator

    generator: ModelGenerator = ModelGenerator(
        strict_validation=not args.no_strict,
        dry_run=args.dry_run,
    )

    if args.dry_run:
        logger.info("Dry-run mode: files will not be written to disk.")

    report: GenerationReport = generator.generate_from_file(
        schema_path,
        config_overrides=config_overrides or None,
    )

    print(report.summary())
    return _exit_code_for(report)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.quiet:
        verbosity: int = -1
        logging.disable(logging.CRITICAL)
    else:
        verbosity = args.verbose
        logging.disable(logging.NOTSET)

    _setup_logging(verbosity)

    schema_path: Path = Path(args.schema).resolve()
    if not schema_path.exists():
        logger.error("Schema file not found: %s", schema_path)
        sys.exit(EXIT_INPUT_ERROR)
    if not schema_path.is_file():
        logger.error("Schema path is not a file: %s", schema_path)
        sys.exit(EXIT_INPUT_ERROR)

    config_overrides: Dict[str, Any] = _build_config_overrides(args)

    if args.validate_only:
        sys.exit(_run_validate_only(schema_path, config_overrides))

    logger.info("Schema:    %s", schema_path)
    logger.info("Overrides: %s", sorted(config_overrides))

    exit_code: int = _run_generation(schema_path, config_overrides, args)

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)

    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("schemagen.cli loaded: %d public symbols.", len(__all__))

# File: schemagen/exporters.py
"""
SchemaGen - Artifact Exporter (File-System Boundary)
=====================================================

Responsible for:
    1. Mapping each artifact kind to its configured output directory.
    2. Creating those directories.
    3. Writing every artifact atomically (write-to-temp then rename).
    4. Writing the data context and its procedures part.
    5. Producing a manifest with checksums for every written file.

Failures never abort the batch: an artifact whose kind maps to no
directory is logged and skipped, a file that cannot be written is recorded
as an error, and everything else is still written.  The ``ExportOutcome``
tells callers which of these happened.

Complexity: O(F) where F = number of output files.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from schemagen.errors import InvalidArgumentError
from schemagen.models import Artifact, ArtifactKind, GenerationConfig, GenerationResult
from schemagen.utils import Timer, count_lines, ensure_directory, sha256_hex, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.exporters")


# ---------------------------------------------------------------------------
# Outcome and result data classes
# ---------------------------------------------------------------------------


class ExportOutcome(str, Enum):
    """Overall result of one export run."""

    EMPTY = "empty"  # nothing was produced, nothing written
    COMPLETE = "complete"
    PARTIAL = "partial"  # some artifacts skipped, no write failed
    FAILED = "failed"  # at least one write failed


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    kind: str
    name: str
    path: str
    size_bytes: int
    line_count: int
    sha256: str


@dataclass(frozen=False, slots=True)
class ExportManifest:
    """All files written by one export, serialisable to JSON."""

    generator_version: str = ""
    export_timestamp: str = ""
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    files: List[FileRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generator_version": self.generator_version,
            "export_timestamp": self.export_timestamp,
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
            "total_lines": self.total_lines,
            "files": [
                {
                    "kind": f.kind,
                    "name": f.name,
                    "path": f.path,
                    "size_bytes": f.size_bytes,
                    "line_count": f.line_count,
                    "sha256": f.sha256,
                }
                for f in self.files
            ],
        }

    def to_json(self, indent_size: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Final result returned by ``ArtifactExporter.export()``."""

    outcome: ExportOutcome
    manifest: ExportManifest
    skipped: Tuple[str, ...]
    errors: Tuple[str, ...]
    warnings: Tuple[str, ...]
    elapsed_seconds: float

    @property
    def records(self) -> List[FileRecord]:
        return self.manifest.files

    @property
    def success(self) -> bool:
        return self.outcome in (ExportOutcome.COMPLETE, ExportOutcome.EMPTY)


# ---------------------------------------------------------------------------
# ArtifactExporter class
# ---------------------------------------------------------------------------


class ArtifactExporter:
    """
    Writes a ``GenerationResult`` to the directories named in the config.

    Usage::

        exporter = ArtifactExporter(config)
        result = exporter.export(generation_result)
        print(result.outcome.value)

    Relative directories are resolved against *base_dir* (default: the
    current working directory at construction time).

    Thread-safety: NOT thread-safe.  Use one exporter per export run.
    """

    def __init__(
        self,
        config: GenerationConfig,
        *,
        base_dir: Optional[Path] = None,
        atomic_writes: bool = True,
    ) -> None:
        if config is None:
            raise InvalidArgumentError("config")
        self._config: GenerationConfig = config
        self._base_dir: Path = (base_dir or Path.cwd()).resolve()
        self._atomic_writes: bool = atomic_writes

        self._directories: Dict[ArtifactKind, Path] = {
            ArtifactKind.DATA_OBJECT: self._resolve(config.data_object_dir),
            ArtifactKind.POCO: self._resolve(config.poco_dir),
            ArtifactKind.ADAPTER: self._resolve(config.adapter_dir),
        }

        self._errors: List[str] = []
        self._warnings: List[str] = []
        self._skipped: List[str] = []
        self._file_records: List[FileRecord] = []

        logger.debug(
            "ArtifactExporter initialised: base_dir=%s, atomic=%s.",
            self._base_dir,
            self._atomic_writes,
        )

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def directory_for(self, kind: Any) -> Optional[Path]:
        """Output directory of *kind*, or None when the kind is unknown."""
        try:
            return self._directories[ArtifactKind(kind)]
        except ValueError:
            return None

    def export(self, result: GenerationResult) -> ExportResult:
        """
        Write every artifact of *result*, then the data context files.

        Returns:
            ExportResult with outcome, manifest, skipped artifacts, errors.
        """
        if result is None:
            raise InvalidArgumentError("result")

        self._errors.clear()
        self._warnings.clear()
        self._skipped.clear()
        self._file_records.clear()

        with Timer("export") as timer:
            for artifact in result.artifacts:
                self._export_artifact(artifact)
            self._export_data_context(result)

        manifest: ExportManifest = self._build_manifest()
        outcome: ExportOutcome = self._outcome()

        export_result: ExportResult = ExportResult(
            outcome=outcome,
            manifest=manifest,
            skipped=tuple(self._skipped),
            errors=tuple(self._errors),
            warnings=tuple(self._warnings),
            elapsed_seconds=timer.elapsed,
        )

        if outcome == ExportOutcome.FAILED:
            logger.error(
                "Export failed with %d error(s) in %.3fs.",
                len(self._errors),
                timer.elapsed,
            )
        else:
            logger.info(
                "Export %s: %d files, %d bytes, %d skipped, %.3fs.",
                outcome.value,
                manifest.total_files,
                manifest.total_bytes,
                len(self._skipped),
                timer.elapsed,
            )
        return export_result

    # -----------------------------------------------------------------
    # Internal: writing
    # -----------------------------------------------------------------

    def _resolve(self, directory: Optional[str]) -> Path:
        if not directory:
            return self._base_dir
        path: Path = Path(directory)
        return path if path.is_absolute() else self._base_dir / path

    def _export_artifact(self, artifact: Artifact) -> None:
        directory: Optional[Path] = self.directory_for(artifact.kind)
        if directory is None:
            message: str = f"{artifact.kind}:{artifact.name} (no output directory for kind)"
            self._skipped.append(message)
            logger.warning("Skipping artifact with unknown kind: %s", message)
            return

        kind: str = ArtifactKind(artifact.kind).value
        file_name: Optional[str] = self._file_name(kind, artifact.name)
        if file_name is not None:
            self._write(kind, artifact.name, directory / file_name, artifact.content)

    def _file_name(self, kind: str, name: str) -> Optional[str]:
        """Return *name* plus the extension, or None (recorded as skipped) for paths."""
        file_name: str = f"{name}{self._config.file_extension}"
        if Path(file_name).name != file_name:
            message: str = f"{kind}:{name} (name is not a plain file name)"
            self._skipped.append(message)
            logger.warning("Skipping artifact: %s", message)
            return None
        return file_name

    def _export_data_context(self, result: GenerationResult) -> None:
        directory: Path = self._directories[ArtifactKind.DATA_OBJECT]
        name: str = self._config.data_context_name
        file_name: Optional[str]

        if result.data_context:
            file_name = self._file_name("data_context", name)
            if file_name is not None:
                self._write("data_context", name, directory / file_name, result.data_context)
        if result.procedures:
            procedures_name: str = f"{name}.Procedures"
            file_name = self._file_name("procedures", procedures_name)
            if file_name is not None:
                self._write("procedures", procedures_name, directory / file_name, result.procedures)

    def _write(self, kind: str, name: str, path: Path, content: str) -> None:
        try:
            ensure_directory(path.parent)
            size_bytes: int = write_file(path, content, atomic=self._atomic_writes)
        except OSError as exc:
            error_msg: str = f"Failed to write {path}: {type(exc).__name__}: {exc}"
            self._errors.append(error_msg)
            logger.error(error_msg)
            return

        if content and not content.endswith("\n"):
            self._warnings.append(f"{path} does not end with a line break.")

        self._file_records.append(
            FileRecord(
                kind=kind,
                name=name,
                path=str(path),
                size_bytes=size_bytes,
                line_count=count_lines(content),
                sha256=sha256_hex(content),
            )
        )
        logger.debug("Wrote %s '%s' to %s (%d bytes).", kind, name, path, size_bytes)

    # -----------------------------------------------------------------
    # Internal: manifest and outcome
    # -----------------------------------------------------------------

    def _outcome(self) -> ExportOutcome:
        if self._errors:
            return ExportOutcome.FAILED
        if self._skipped:
            return ExportOutcome.PARTIAL
        if not self._file_records:
            return ExportOutcome.EMPTY
        return ExportOutcome.COMPLETE

    def _build_manifest(self) -> ExportManifest:
        import schemagen

        return ExportManifest(
            generator_version=schemagen.__version__,
            export_timestamp=time.strftime("%Y-%m-%dT%H:%M:%S%z"),
            total_files=len(self._file_records),
            total_bytes=sum(r.size_bytes for r in self._file_records),
            total_lines=sum(r.line_count for r in self._file_records),
            files=list(self._file_records),
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ArtifactExporter",
    "ExportManifest",
    "ExportOutcome",
    "ExportResult",
    "FileRecord",
]

logger.debug("schemagen.exporters loaded: %d public symbols.", len(__all__))

"""Abstract base class for artifact encoders."""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from ..core.errors import EncodingError
from ..core.formatting import build_filename
from ..core.models import (
    ColumnSpec,
    ExportOptions,
    GenerationResult,
    OutputFormat,
    Row,
    ensure_unique_keys,
)
from .themes import DEFAULT_THEME, Theme

log = logging.getLogger(__name__)


@dataclass
class Artifact:
    """Encoded bytes of one artifact plus what the encoder learned making it."""

    data: bytes
    page_count: int | None = None
    warnings: list[str] = field(default_factory=list)


class BaseGenerator(ABC):
    """Every encoder inherits from this class.

    Encoders consume the same ``columns`` / ``rows`` / ``ExportOptions``
    triple. :meth:`render` produces bytes in memory; :meth:`generate`
    writes them next to the other artifacts of the same export.
    """

    format: OutputFormat  # set by subclasses
    extension: str  # set by subclasses
    name_suffix: str = ""

    def __init__(self, theme: Theme | None = None) -> None:
        self.theme = theme or DEFAULT_THEME

    @abstractmethod
    def render(
        self, columns: list[ColumnSpec], rows: list[Row], options: ExportOptions
    ) -> Artifact:
        """Encode the dataset. Raises :class:`EncodingError` on failure."""
        ...

    def encode(
        self, columns: list[ColumnSpec], rows: list[Row], options: ExportOptions
    ) -> bytes:
        """Shortcut for ``render(...).data``."""
        return self.render(columns, rows, options).data

    def generate(
        self,
        columns: list[ColumnSpec],
        rows: list[Row],
        options: ExportOptions,
        output_dir: Path,
    ) -> GenerationResult:
        """Encode and write the artifact; return a ``GenerationResult``.

        Errors propagate: a failed artifact never leaves a partial file.
        """
        ensure_unique_keys(columns)
        options = self._pin_time(options)
        artifact = self.render(columns, rows, options)
        return self._store(artifact, options, Path(output_dir))

    # -- Helpers ---------------------------------------------------------

    def _store(
        self, artifact: Artifact, options: ExportOptions, output_dir: Path
    ) -> GenerationResult:
        output_dir = self._ensure_dir(output_dir)
        fname = build_filename(
            options.filename_base + self.name_suffix,
            self.extension,
            moment=options.generated_at,
            include_timestamp=options.include_timestamp,
        )
        output_path = output_dir / fname
        self._write_atomic(output_path, artifact.data)
        log.info("%s written to %s (%d bytes)", self.format.value, output_path, len(artifact.data))
        return GenerationResult(
            format=self.format,
            output_path=output_path,
            page_count=artifact.page_count,
            warnings=artifact.warnings,
        )

    @staticmethod
    def _pin_time(options: ExportOptions) -> ExportOptions:
        """Fix ``generated_at`` so file name and content agree on the moment."""
        if options.generated_at is not None:
            return options
        return options.model_copy(update={"generated_at": datetime.now()})

    @staticmethod
    def _ensure_dir(path: Path) -> Path:
        path.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def _write_atomic(path: Path, data: bytes) -> None:
        """Write to a sibling temp file, then move it into place."""
        tmp = path.with_name(f".{path.name}.tmp")
        try:
            tmp.write_bytes(data)
            os.replace(tmp, path)
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise EncodingError(f"Cannot write {path}: {exc}") from exc

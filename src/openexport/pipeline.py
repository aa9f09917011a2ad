"""Orchestration pipeline: run several encoders over one dataset."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from rich.console import Console

from .core.errors import ExportError
from .core.models import (
    ColumnSpec,
    ExportOptions,
    ExportResult,
    GenerationResult,
    OutputFormat,
    Row,
    ensure_unique_keys,
)
from .generators.base import BaseGenerator
from .generators.csv_generator import CsvGenerator
from .generators.excel_generator import ExcelGenerator
from .generators.json_generator import JsonGenerator
from .generators.pdf_generator import DocumentBuilder
from .generators.themes import get_theme

log = logging.getLogger(__name__)

console = Console()

# Map format enum -> generator class
_GENERATORS: dict[OutputFormat, type[BaseGenerator]] = {
    OutputFormat.PDF: DocumentBuilder,
    OutputFormat.CSV: CsvGenerator,
    OutputFormat.EXCEL: ExcelGenerator,
    OutputFormat.JSON: JsonGenerator,
}

ALL_FORMATS = [OutputFormat.PDF, OutputFormat.CSV, OutputFormat.EXCEL, OutputFormat.JSON]


def expand_formats(formats: list[OutputFormat] | None) -> list[OutputFormat]:
    """Resolve ``None`` and ``ALL`` into concrete formats, keeping order."""
    if not formats:
        return list(ALL_FORMATS)
    out: list[OutputFormat] = []
    for fmt in formats:
        for f in ALL_FORMATS if fmt == OutputFormat.ALL else [fmt]:
            if f not in out:
                out.append(f)
    return out


class ExportPipeline:
    """Dataset -> multi-format export pipeline.

    Usage::

        pipeline = ExportPipeline()
        result = pipeline.run(columns, rows, ExportOptions(title="Users"))
        print(result.pdf_path)
    """

    def __init__(self, out: Console | None = None) -> None:
        self.console = out or console

    def run(
        self,
        columns: list[ColumnSpec],
        rows: list[Row],
        options: ExportOptions | None = None,
        *,
        output_dir: str | Path = "./output",
        formats: list[OutputFormat] | None = None,
        theme_name: str | None = None,
    ) -> ExportResult:
        """Run every requested encoder.

        Parameters
        ----------
        columns
            Column definitions shared by all encoders.
        rows
            Records to export.
        options
            Export options; the generation time is fixed once so every
            artifact carries the same timestamp.
        output_dir
            Directory where generated files will be written.
        formats
            Which formats to generate. Defaults to all.
        theme_name
            Name of the PDF theme; overrides ``options.theme``.
        """
        ensure_unique_keys(columns)
        options = options or ExportOptions()
        if options.generated_at is None:
            options = options.model_copy(update={"generated_at": datetime.now()})
        output_path = Path(output_dir).resolve()

        theme = get_theme(theme_name or options.theme)
        self.console.print(f"[dim]Theme:[/] [bold]{theme.name}[/bold]")
        self.console.print(
            f"[bold blue]Exporting {len(rows):,} record(s), {len(columns)} column(s)[/]"
        )

        result = ExportResult(record_count=len(rows))
        for fmt in expand_formats(formats):
            gen = _GENERATORS[fmt](theme=theme)
            self.console.print(f"[bold blue]Generating {fmt.value.upper()}...[/]")
            try:
                gen_result = gen.generate(columns, rows, options, output_path)
            except ExportError as exc:
                log.error("%s export failed: %s", fmt.value, exc)
                gen_result = GenerationResult(
                    format=fmt,
                    output_path=output_path,
                    success=False,
                    error=str(exc),
                )
            result.results.append(gen_result)

            if gen_result.success:
                pages = f" ({gen_result.page_count} page(s))" if gen_result.page_count else ""
                self.console.print(f"[green]✓[/] {gen_result.output_path}{pages}")
                for warning in gen_result.warnings:
                    self.console.print(f"[yellow]⚠  {warning}[/]")
            else:
                self.console.print(f"[red]✗[/] {fmt.value}: {gen_result.error}")

        success = sum(1 for r in result.results if r.success)
        total = len(result.results)
        self.console.print(
            f"\n[bold green]Done![/] {success}/{total} formats generated "
            f"→ [link=file://{output_path}]{output_path}[/link]\n"
        )
        return result

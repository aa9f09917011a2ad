"""openexport CLI: export a JSON dataset to PDF, CSV, spreadsheet text and JSON."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click
from rich.console import Console

from . import __version__
from .core.loader import load_dataset
from .core.models import ChartBlock, ExportOptions, Orientation, OutputFormat
from .generators.pdf_generator import DocumentBuilder, DocumentMode
from .generators.themes import Theme, get_theme, list_themes
from .layout.pagination import ItemKind
from .pipeline import ExportPipeline

console = Console()

FORMAT_MAP = {
    "pdf": OutputFormat.PDF,
    "csv": OutputFormat.CSV,
    "excel": OutputFormat.EXCEL,
    "json": OutputFormat.JSON,
    "all": OutputFormat.ALL,
}


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _parse_chart(value: str) -> ChartBlock:
    title, sep, source = value.partition("=")
    if not sep or not title.strip() or not source.strip():
        raise click.BadParameter(f"expected TITLE=IMAGE, got {value!r}", param_hint="--chart")
    return ChartBlock(title=title.strip(), image=source.strip())


def _load(data_file: str):
    try:
        return load_dataset(data_file)
    except (KeyError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc


def _resolve_theme(name: str) -> Theme:
    try:
        return get_theme(name)
    except KeyError as exc:
        raise click.ClickException(exc.args[0]) from exc


def _apply_overrides(options: ExportOptions, **overrides) -> ExportOptions:
    """Command-line values win over ``options`` from the data file."""
    update = {k: v for k, v in overrides.items() if v not in (None, (), [])}
    return ExportOptions.model_validate({**options.model_dump(), **update})


@click.group()
@click.version_option(version=__version__, prog_name="openexport")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """openexport: paginated PDF and tabular exports from JSON datasets."""
    _setup_logging(verbose)


@main.command()
@click.argument("data_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "-f", "--format",
    "fmt",
    type=click.Choice(list(FORMAT_MAP), case_sensitive=False),
    multiple=True,
    help="Output format; repeat for several (default: all).",
)
@click.option(
    "-o", "--output",
    "output_dir",
    type=click.Path(file_okay=False),
    envvar="OPENEXPORT_OUTPUT_DIR",
    default="./output",
    show_default=True,
    help="Output directory (or set OPENEXPORT_OUTPUT_DIR).",
)
@click.option(
    "--theme",
    "theme_name",
    type=click.Choice([t.name for t in list_themes()], case_sensitive=False),
    envvar="OPENEXPORT_THEME",
    default=None,
    help="PDF theme (or set OPENEXPORT_THEME).",
)
@click.option("--title", default=None, help="Document title.")
@click.option("--subtitle", default=None, help="Subtitle under the title.")
@click.option(
    "--header-line",
    "header_lines",
    multiple=True,
    help="Official header line; repeat for several lines.",
)
@click.option(
    "--orientation",
    type=click.Choice([o.value for o in Orientation], case_sensitive=False),
    default=None,
    help="Page orientation (default: portrait).",
)
@click.option("--no-timestamp", is_flag=True, help="Omit timestamps from names and headers.")
@click.option("--left-logo", default=None, help="Left header logo (path, URL or data URI).")
@click.option("--right-logo", default=None, help="Right header logo.")
@click.option("--footer-logo", default=None, help="Footer logo.")
@click.option(
    "--chart",
    "charts",
    multiple=True,
    help="Chart block as TITLE=IMAGE; repeat for several.",
)
@click.option("--hide-total", is_flag=True, help="Do not print the record count block.")
@click.option("--filename", "filename_base", default=None, help="Base name of output files.")
def export(
    data_file: str,
    fmt: tuple[str, ...],
    output_dir: str,
    theme_name: str | None,
    title: str | None,
    subtitle: str | None,
    header_lines: tuple[str, ...],
    orientation: str | None,
    no_timestamp: bool,
    left_logo: str | None,
    right_logo: str | None,
    footer_logo: str | None,
    charts: tuple[str, ...],
    hide_total: bool,
    filename_base: str | None,
):
    """Export the dataset in DATA_FILE.

    DATA_FILE is a JSON document with ``columns``, ``rows`` and optional
    ``options``, or a bare list of row objects.
    """
    columns, rows, options = _load(data_file)
    logos = options.logos.model_dump()
    for side, src in (("left", left_logo), ("right", right_logo), ("footer", footer_logo)):
        if src:
            logos[side] = src

    options = _apply_overrides(
        options,
        title=title,
        subtitle=subtitle,
        header_lines=list(header_lines),
        orientation=orientation,
        include_timestamp=False if no_timestamp else None,
        logos=logos,
        chart_images=[_parse_chart(c) for c in charts],
        hide_total_records=True if hide_total else None,
        filename_base=filename_base,
    )

    theme = _resolve_theme(theme_name or options.theme)
    formats = [FORMAT_MAP[f.lower()] for f in fmt] or None
    result = ExportPipeline(console).run(
        columns,
        rows,
        options,
        output_dir=Path(output_dir),
        formats=formats,
        theme_name=theme.name,
    )

    # Exit code
    if not any(r.success for r in result.results):
        raise SystemExit(1)


@main.command()
@click.argument("data_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--orientation",
    type=click.Choice([o.value for o in Orientation], case_sensitive=False),
    default=None,
    help="Page orientation (default: from the data file).",
)
@click.option(
    "--theme",
    "theme_name",
    type=click.Choice([t.name for t in list_themes()], case_sensitive=False),
    envvar="OPENEXPORT_THEME",
    default=None,
)
def plan(data_file: str, orientation: str | None, theme_name: str | None):
    """Show how DATA_FILE would be paginated, without writing anything."""
    from rich.table import Table as RichTable

    columns, rows, options = _load(data_file)
    options = _apply_overrides(options, orientation=orientation)
    builder = DocumentBuilder(theme=_resolve_theme(theme_name or options.theme))
    doc_plan = asyncio.run(builder.plan_async(columns, rows, options))

    kind = ItemKind.FIELD if doc_plan.mode == DocumentMode.RECORD else ItemKind.ROW
    table = RichTable(title=f"{doc_plan.mode.value.title()} layout", show_lines=False)
    table.add_column("Page", style="bold cyan", justify="right")
    table.add_column(f"{kind.value.title()}s", justify="right")
    table.add_column("Range")
    table.add_column("Blocks")

    for page in doc_plan.pages:
        idx = page.indices(kind)
        span = f"{idx[0] + 1}-{idx[-1] + 1}" if idx else ""
        blocks = ", ".join(
            p.kind.value for p in page.placements if p.kind not in (kind, ItemKind.TABLE_HEADER)
        )
        table.add_row(str(page.number), str(len(idx)), span, blocks)

    console.print(table)
    if doc_plan.allocation is not None:
        widths = ", ".join(f"{w:.0f}" for w in doc_plan.allocation.widths)
        console.print(f"[dim]Column widths (pt):[/] {widths}")
    console.print(f"[bold]{doc_plan.page_count}[/bold] page(s), {doc_plan.record_count} record(s)")
    for warning in doc_plan.warnings:
        console.print(f"[yellow]⚠  {warning}[/]")


@main.command()
def themes():
    """List available document themes."""
    from rich.table import Table as RichTable

    table = RichTable(title="Available Themes", show_lines=False)
    table.add_column("Name", style="bold cyan")
    table.add_column("Display Name", no_wrap=True)
    table.add_column("Table Header", style="bold")
    table.add_column("Summary", style="bold")
    table.add_column("Font")
    table.add_column("Description")

    for t in list_themes():
        h = t.colors.table_header_bg
        s = t.colors.summary_border
        h_hex = f"#{h[0]:02X}{h[1]:02X}{h[2]:02X}"
        s_hex = f"#{s[0]:02X}{s[1]:02X}{s[2]:02X}"
        table.add_row(
            t.name,
            t.display_name,
            f"[{h_hex}]██ {h_hex}[/]",
            f"[{s_hex}]██ {s_hex}[/]",
            t.fonts.regular,
            t.description,
        )

    console.print(table)


if __name__ == "__main__":
    main()

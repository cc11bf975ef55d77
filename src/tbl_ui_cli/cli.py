"""
Table CLI Application

Typer-based command-line interface for rendering tables.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from tbl_engine.models import RenderOptions, TableInput
from tbl_engine.renderer import TableRenderer
from tbl_io.readers import read_input_file
from tbl_io.writers import export_csv, export_html, export_xlsx
from tbl_ui_cli.display import count_failures, display_layout, display_summary


app = typer.Typer(
    name="tbl",
    help="Render spreadsheet-like tables with formulas and merged cells to HTML",
    add_completion=False,
)

console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable debug logging",
    ),
) -> None:
    """Table rendering tool."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _resolve_input_file(input_file: Optional[Path], input_option: Optional[Path]) -> Path:
    """Resolve input file from positional arg or --input option."""
    resolved = input_option or input_file
    if resolved is None:
        raise typer.BadParameter("Missing input file. Provide a positional INPUT_FILE or --input.")
    if not resolved.exists():
        raise typer.BadParameter(f"Input file not found: {resolved}")
    if not resolved.is_file():
        raise typer.BadParameter(f"Input path is not a file: {resolved}")
    return resolved


def _load_request(
    input_file: Path,
    hide_rows: Optional[str] = None,
    hide_columns: Optional[str] = None,
    row_offset: Optional[int] = None,
    row_count: Optional[int] = None,
) -> TableInput:
    """Read the input file and layer command-line overrides on its options."""
    request = read_input_file(input_file)
    overrides = {}
    if hide_rows is not None:
        overrides["hide_rows"] = hide_rows
    if hide_columns is not None:
        overrides["hide_columns"] = hide_columns
    if row_offset is not None:
        overrides["row_offset"] = row_offset
    if row_count is not None:
        overrides["row_count"] = row_count
    if overrides:
        options = RenderOptions.model_validate({**request.options.model_dump(), **overrides})
        request = request.model_copy(update={"options": options})
    return request


def _render(request: TableInput) -> tuple[TableRenderer, str]:
    renderer = TableRenderer(site_defaults=request.site_defaults)
    renderer.set_input(request.table, request.options)
    return renderer, renderer.get_output()


@app.command()
def render(
    input_file: Optional[Path] = typer.Argument(
        None,
        help="Path to input file (YAML, JSON or CSV)",
    ),
    input_option: Optional[Path] = typer.Option(
        None,
        "--input", "-i",
        help="Path to input file (YAML, JSON or CSV)",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Output HTML file path (default: stdout)",
    ),
    hide_rows: Optional[str] = typer.Option(
        None,
        "--hide-rows",
        help="Comma-separated 0-based row indexes to hide",
    ),
    hide_columns: Optional[str] = typer.Option(
        None,
        "--hide-columns",
        help="Comma-separated 0-based column indexes to hide",
    ),
    row_offset: Optional[int] = typer.Option(
        None,
        "--offset",
        help="1-based first row to render",
    ),
    row_count: Optional[int] = typer.Option(
        None,
        "--count",
        help="Number of rows to render",
    ),
    preview_css: bool = typer.Option(
        False,
        "--preview-css",
        help="Prepend the preview stylesheet",
    ),
) -> None:
    """
    Render a table to HTML.

    Reads the table and its render options from an input file, evaluates
    formulas, applies merge keywords and writes the resulting HTML.
    """
    try:
        input_file = _resolve_input_file(input_file, input_option)
        request = _load_request(input_file, hide_rows, hide_columns, row_offset, row_count)
        _, html = _render(request)

        if output:
            export_html(html, output, preview_css=preview_css)
            console.print(f"[green]✓ Rendered to {output}[/green]")
        else:
            typer.echo(html, nl=False)

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def show(
    input_file: Optional[Path] = typer.Argument(
        None,
        help="Path to input file (YAML, JSON or CSV)",
    ),
    input_option: Optional[Path] = typer.Option(
        None,
        "--input", "-i",
        help="Path to input file (YAML, JSON or CSV)",
    ),
    hide_rows: Optional[str] = typer.Option(None, "--hide-rows", help="Comma-separated row indexes to hide"),
    hide_columns: Optional[str] = typer.Option(None, "--hide-columns", help="Comma-separated column indexes to hide"),
) -> None:
    """
    Display the evaluated table in the terminal.

    Merged cells are annotated with their spans and formula errors are
    highlighted.
    """
    try:
        input_file = _resolve_input_file(input_file, input_option)
        request = _load_request(input_file, hide_rows, hide_columns)
        display_summary(request)

        renderer, html = _render(request)
        if renderer.layout is None:
            console.print(f"[yellow]{html}[/yellow]")
            return

        display_layout(renderer.layout, renderer.rendered_table.num_columns)
        failures = count_failures(renderer.layout)
        if failures:
            console.print(f"[red]✗ {failures} cell(s) with formula errors[/red]")
        else:
            console.print("[green]✓ All formulas evaluated[/green]")

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def validate(
    input_file: Optional[Path] = typer.Argument(
        None,
        help="Path to input file (YAML, JSON or CSV)",
    ),
    input_option: Optional[Path] = typer.Option(
        None,
        "--input", "-i",
        help="Path to input file (YAML, JSON or CSV)",
    ),
) -> None:
    """
    Validate an input file without rendering it.

    Checks that the table is rectangular and the options are well-formed.
    """
    try:
        input_file = _resolve_input_file(input_file, input_option)
        console.print(f"[dim]Validating: {input_file}[/dim]")
        request = read_input_file(input_file)

        console.print("[green]✓ Input file is valid[/green]")

        console.print(f"\n  Table ID: {request.table.id}")
        console.print(f"  Size: {request.table.num_rows} x {request.table.num_columns}")
        console.print(f"  Table head: {request.options.table_head.value}")
        console.print(f"  Table foot: {request.options.table_foot.value}")

    except Exception as e:
        console.print(f"[red]Validation failed: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def export(
    input_file: Optional[Path] = typer.Argument(
        None,
        help="Path to input file (YAML, JSON or CSV)",
    ),
    input_option: Optional[Path] = typer.Option(
        None,
        "--input", "-i",
        help="Path to input file (YAML, JSON or CSV)",
    ),
    output: Path = typer.Option(
        ...,
        "--output", "-o",
        help="Output file path (.xlsx, .csv or .html)",
    ),
) -> None:
    """
    Render a table and export it to a file.

    The format follows the output suffix: .xlsx keeps merged cells, .csv
    holds the evaluated grid, .html the rendered markup.
    """
    try:
        input_file = _resolve_input_file(input_file, input_option)
        suffix = output.suffix.lower()
        if suffix not in (".xlsx", ".csv", ".html", ".htm"):
            raise typer.BadParameter(f"Unsupported export format: {suffix}")

        request = _load_request(input_file)
        renderer, html = _render(request)
        if renderer.layout is None:
            raise ValueError(f"Table {request.table.id} has no visible cells")

        if suffix == ".xlsx":
            export_xlsx(renderer.layout, output)
        elif suffix == ".csv":
            export_csv(renderer.rendered_table, output)
        else:
            export_html(html, output, preview_css=True)

        console.print(f"[green]✓ Exported to {output}[/green]")

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()

"""
Table CLI Display

Rich table formatting for terminal output.
"""
from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table as RichTable
from rich.text import Text

from tbl_engine.errors import is_failure
from tbl_engine.models import RowLayout, TableInput, TableLayout
from tbl_io.writers import plain_text


console = Console()


def display_header(title: str) -> None:
    """Display a section header."""
    console.print()
    console.print(Panel(Text(title, style="bold white"), style="blue"))


def _cell_text(content: str, colspan: int, rowspan: int) -> Text:
    text = Text(plain_text(content))
    if is_failure(content):
        text.stylize("bold red")
    spans = []
    if colspan > 1:
        spans.append(f"colspan={colspan}")
    if rowspan > 1:
        spans.append(f"rowspan={rowspan}")
    if spans:
        text.append(f" ({', '.join(spans)})", style="dim")
    return text


def _row_cells(row: RowLayout, num_columns: int) -> list[Text]:
    """Place emitted cells on their grid columns, leaving merged positions blank."""
    cells = [Text("") for _ in range(num_columns)]
    for cell in row.cells:
        cells[cell.column] = _cell_text(cell.content, cell.colspan, cell.rowspan)
    return cells


def display_layout(layout: TableLayout, num_columns: int) -> None:
    """Display a laid-out table, with header and footer rows highlighted."""
    title = layout.name.text if layout.name else f"Table {layout.table_id}"
    display_header(f"📋 {plain_text(title)}")

    table = RichTable(show_header=layout.header is not None, show_footer=False, header_style="bold cyan")
    header_cells = _row_cells(layout.header, num_columns) if layout.header else None
    for col_idx in range(num_columns):
        table.add_column(header_cells[col_idx] if header_cells else "", justify="left")

    for row in layout.body:
        table.add_row(*_row_cells(row, num_columns))
    if layout.footer is not None:
        table.add_section()
        table.add_row(*_row_cells(layout.footer, num_columns), style="bold")

    console.print(table)

    if layout.description and layout.description.text:
        console.print(f"[dim]{plain_text(layout.description.text)}[/dim]")


def display_summary(request: TableInput) -> None:
    """Display a short summary of a render request."""
    display_header("📊 Input Summary")

    table = RichTable(show_header=True, header_style="bold cyan")
    table.add_column("Parameter", style="dim")
    table.add_column("Value", justify="right")

    source = request.table
    formula_count = sum(1 for row in source.data for cell in row if cell.startswith("="))
    table.add_row("Table ID", str(source.id))
    table.add_row("Name", source.name or "-")
    table.add_row("Rows x Columns", f"{source.num_rows} x {source.num_columns}")
    table.add_row("Formulas", str(formula_count))
    table.add_row("Row Window", f"{request.options.row_offset} + {request.options.row_count or 'all'}")
    table.add_row("Hidden Rows", ", ".join(map(str, request.options.hide_rows)) or "-")
    table.add_row("Hidden Columns", ", ".join(map(str, request.options.hide_columns)) or "-")

    console.print(table)


def count_failures(layout: TableLayout) -> int:
    return sum(1 for row in layout.rows() for cell in row.cells if is_failure(cell.content))

"""
Table I/O Writers

Export rendered tables to HTML, CSV and XLSX formats.
"""
from __future__ import annotations

import html
import re
from pathlib import Path
from typing import Optional

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from tbl_engine.models import Table, TableLayout
from tbl_engine.renderer import PREVIEW_CSS
from tbl_io.xlsx_layout import SheetLayout

_BREAK_TAG_RE = re.compile(r"<br\s*/?>(\r\n|\n\r|\n|\r)?")
_NUMBER_RE = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")

THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)


def grid_to_frame(table: Table) -> pd.DataFrame:
    """Evaluated grid as a DataFrame of strings (no header row)."""
    return pd.DataFrame(table.data, dtype=str)


def plain_text(content: str) -> str:
    """Undo the markup applied to cell content for non-HTML targets."""
    content = _BREAK_TAG_RE.sub("\n", content)
    return html.unescape(content).replace("\xa0", " ").strip()


def _cell_value(content: str) -> str | float | int:
    text = plain_text(content)
    if _NUMBER_RE.match(text):
        number = float(text)
        if number.is_integer() and "." not in text and "e" not in text.lower():
            return int(number)
        return number
    return text


def export_html(output: str, path: str | Path, preview_css: bool = False) -> Path:
    """
    Write rendered HTML to a file.

    Args:
        output: HTML returned by TableRenderer.get_output()
        path: Output file path
        preview_css: Prepend the preview stylesheet

    Returns:
        The written path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if preview_css:
        output = PREVIEW_CSS + "\n" + output
    path.write_text(output, encoding="utf-8")
    return path


def export_csv(table: Table, path: str | Path) -> Path:
    """
    Export the evaluated grid to CSV.

    Args:
        table: Filtered and evaluated table
        path: Output file path

    Returns:
        The written path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    grid_to_frame(table).to_csv(path, index=False, header=False)
    return path


def _style_section_row(ws, row: int, max_col: int) -> None:
    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="2E75B6", end_color="2E75B6", fill_type="solid")
    for col in range(1, max_col + 1):
        cell = ws.cell(row=row, column=col)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center", vertical="center")


def _auto_fit_columns(ws, max_col: int) -> None:
    for col in range(1, max_col + 1):
        max_length = 0
        for row in ws.iter_rows(min_col=col, max_col=col, max_row=ws.max_row):
            value = row[0].value
            if value is not None:
                max_length = max(max_length, len(str(value)))
        ws.column_dimensions[get_column_letter(col)].width = min(max_length + 2, 40)


def export_xlsx(
    layout: TableLayout,
    path: str | Path,
    sheet_name: Optional[str] = None,
    sheet_layout: Optional[SheetLayout] = None,
) -> Path:
    """
    Export a laid-out table to an Excel workbook.

    Spanning cells become merged ranges; header and footer rows are styled
    like table headers. Numeric cell text is written as numbers.

    Args:
        layout: Layout produced by the span layout engine
        path: Output file path
        sheet_name: Worksheet title, defaults to the table id
        sheet_layout: Placement of the table on the sheet

    Returns:
        The written path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    sheet_layout = sheet_layout or SheetLayout()

    wb = Workbook()
    ws = wb.active
    ws.title = (sheet_name or f"Table {layout.table_id}")[:31]

    max_col = 0
    section_rows = set()
    for row in layout.rows():
        is_section = row is layout.header or row is layout.footer
        for cell in row.cells:
            target = ws[sheet_layout.cell(cell.column, cell.row)]
            target.value = _cell_value(cell.content)
            target.border = THIN_BORDER
            if cell.tag == "th" and not is_section:
                target.font = Font(bold=True)
            merged = sheet_layout.merge_range(cell)
            if merged:
                ws.merge_cells(merged)
            max_col = max(max_col, sheet_layout.start_col + cell.column + cell.colspan - 1)
        if is_section:
            section_rows.add(sheet_layout.start_row + row.index)

    for row_number in sorted(section_rows):
        _style_section_row(ws, row_number, max_col)
    _auto_fit_columns(ws, max_col)

    wb.save(path)
    return path

"""
XLSX Export Layout

Maps laid-out grid positions onto worksheet coordinates.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from openpyxl.utils import get_column_letter

from tbl_engine.models import CellLayout


@dataclass(frozen=True)
class SheetLayout:
    """Placement of the table on the worksheet (1-based top-left corner)."""
    start_col: int = 1
    start_row: int = 1

    def cell(self, col_idx: int, row_idx: int) -> str:
        """Worksheet coordinate of a 0-based grid position."""
        return f"{get_column_letter(self.start_col + col_idx)}{self.start_row + row_idx}"

    def merge_range(self, cell: CellLayout) -> Optional[str]:
        """Range covered by a spanning cell, None for a plain cell."""
        if cell.colspan == 1 and cell.rowspan == 1:
            return None
        top_left = self.cell(cell.column, cell.row)
        bottom_right = self.cell(cell.column + cell.colspan - 1, cell.row + cell.rowspan - 1)
        return f"{top_left}:{bottom_right}"

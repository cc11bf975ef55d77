"""
Visibility Filter

Removes hidden rows and columns and applies the row window, producing the
dense grid that formulas are evaluated on and that gets laid out.
"""
from __future__ import annotations

import logging

from tbl_engine.models import RenderOptions, Table, Visibility

logger = logging.getLogger(__name__)


def hidden_row_indexes(table: Table, options: RenderOptions) -> set[int]:
    """Rows flagged hidden or listed in hide_rows, minus those in show_rows."""
    hidden = table.visibility.hidden_rows() | set(options.hide_rows)
    return hidden - set(options.show_rows)


def hidden_column_indexes(table: Table, options: RenderOptions) -> set[int]:
    """Columns flagged hidden or listed in hide_columns, minus those in show_columns."""
    hidden = table.visibility.hidden_columns() | set(options.hide_columns)
    return hidden - set(options.show_columns)


def filter_visibility(table: Table, options: RenderOptions) -> Table:
    """
    Return a new table holding only the visible part of ``table``.

    The row window (row_offset/row_count) is cut first; visibility flags and
    hide/show indexes then address the windowed rows. Both axes are
    reindexed from 0, and the returned table marks everything visible.
    """
    start = options.row_offset - 1
    stop = None if options.row_count is None else start + options.row_count
    rows = table.data[start:stop]

    hidden_rows = hidden_row_indexes(table, options)
    hidden_columns = hidden_column_indexes(table, options)

    data = [
        [cell for col_idx, cell in enumerate(row) if col_idx not in hidden_columns]
        for row_idx, row in enumerate(rows)
        if row_idx not in hidden_rows
    ]

    logger.debug(
        "Table %s filtered from %dx%d to %dx%d",
        table.id,
        table.num_rows,
        table.num_columns,
        len(data),
        len(data[0]) if data else 0,
    )

    return table.model_copy(update={"data": data, "visibility": Visibility()})

"""
Span Layout Engine

Walks the filtered, evaluated grid to find merge trigger keywords, computes
rowspan/colspan counts and splits the rows into header, body and footer.

Rows and cells are visited last to first: a trigger keyword folds its cell
into the predecessor (upwards for rowspan, leftwards for colspan), so the
counters must be accumulated before that predecessor is reached.
"""
from __future__ import annotations

import logging
from typing import Optional

from tbl_engine.hooks import RenderHooks
from tbl_engine.markup import safe_output
from tbl_engine.models import (
    DEFAULT_SPAN_TRIGGERS,
    CellLayout,
    PrintPosition,
    RenderOptions,
    RowLayout,
    Table,
    TableLayout,
    TextBlock,
)

logger = logging.getLogger(__name__)

NBSP = "&nbsp;"
CSS_PREFIX = "tbl"


class SpanLayoutEngine:
    """
    Lay out one table.

    Args:
        table: Filtered and evaluated table, at least one row and column
        options: Render options with every tri-state resolved
        hooks: Extension points, identity by default
    """

    def __init__(self, table: Table, options: RenderOptions, hooks: Optional[RenderHooks] = None):
        if table.num_rows == 0 or table.num_columns == 0:
            raise ValueError(f"Cannot lay out empty table {table.id}")
        self.table = table
        self.options = options
        self.hooks = hooks or RenderHooks()

        self.num_rows = table.num_rows
        self.num_columns = table.num_columns
        self.last_row_idx = self.num_rows - 1
        self.last_column_idx = self.num_columns - 1

        self.has_head = options.table_head.enabled and self.num_rows > 1
        self.has_foot = options.table_foot.enabled and self.num_rows > 1

        self.rowspan: list[int] = []
        self.colspan: list[int] = []
        self.span_trigger: dict[str, str] = {}
        self.column_widths: list[str] = []
        self.nl2br = True

    # ------------------------------------------------------------------------
    # Trigger validity
    # ------------------------------------------------------------------------

    def _rowspan_allowed(self, row_idx: int) -> bool:
        """A cell may merge upwards unless it is in the first row, would merge
        into the header, or is itself the footer."""
        if row_idx == 0:
            return False
        if row_idx == 1 and self.has_head:
            return False
        if row_idx == self.last_row_idx and self.has_foot:
            return False
        return True

    def _colspan_allowed(self, col_idx: int) -> bool:
        if col_idx == 0:
            return False
        return not (col_idx == 1 and self.options.first_column_th)

    def _span_allowed(self, row_idx: int, col_idx: int) -> bool:
        if 1 < row_idx < self.last_row_idx and col_idx > 1:
            return True
        if row_idx == 0 or col_idx != 1 or self.options.first_column_th:
            return False
        return (row_idx == 1 and not self.has_head) or (
            row_idx == self.last_row_idx and not self.has_foot
        )

    # ------------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------------

    def layout(self) -> TableLayout:
        """Produce the header/body/footer structure for the table."""
        table_id = self.table.id
        options = self.options

        self.rowspan = [1] * self.num_columns
        self.colspan = [1] * self.num_rows
        self.span_trigger = self.hooks.span_trigger_keywords(dict(DEFAULT_SPAN_TRIGGERS), table_id)
        self.column_widths = options.column_widths + [""] * (self.num_columns - len(options.column_widths))
        self.nl2br = self.hooks.apply_nl2br(True, table_id)

        header = footer = None
        body: list[RowLayout] = []
        for row_idx in range(self.last_row_idx, -1, -1):
            if row_idx == self.last_row_idx and self.has_foot:
                footer = self._layout_row(row_idx, "th")
                continue
            if row_idx == 0 and self.has_head:
                header = self._layout_row(row_idx, "th")
                continue
            body.append(self._layout_row(row_idx, "td"))
        body.reverse()

        css_classes = [CSS_PREFIX, f"{CSS_PREFIX}-id-{table_id}", options.extra_css_classes]
        caption, caption_class, caption_style = self._caption()

        layout = TableLayout(
            table_id=table_id,
            html_id=options.html_id,
            css_classes=self.hooks.table_css_classes(css_classes, table_id),
            summary=self.hooks.print_summary_attr("", self.table),
            cellspacing=options.cellspacing,
            cellpadding=options.cellpadding,
            border=options.border,
            caption=caption,
            caption_class=caption_class,
            caption_style=caption_style,
            colgroup=self._colgroup(),
            header=header,
            footer=footer,
            body=body,
            body_class="row-hover" if options.row_hover.enabled else "",
            name=self._text_block("name", options.print_name, "h2", self.table.name),
            description=self._text_block(
                "description", options.print_description, "span", self.table.description
            ),
        )
        logger.debug(
            "Laid out table %s: header=%s footer=%s body_rows=%d",
            table_id,
            header is not None,
            footer is not None,
            len(body),
        )
        return layout

    def _layout_row(self, row_idx: int, tag: str) -> RowLayout:
        table_id = self.table.id
        triggers = self.span_trigger
        cells: list[CellLayout] = []

        for col_idx in range(self.last_column_idx, -1, -1):
            content = self.table.data[row_idx][col_idx]

            # formulas escaped as '= are printed as text
            if len(content) > 2 and content.startswith("'="):
                content = content[1:]
            content = safe_output(content, self.nl2br)
            content = self.hooks.cell_content(content, table_id, row_idx + 1, col_idx + 1)

            if content == triggers["rowspan"]:
                if self._rowspan_allowed(row_idx):
                    self.rowspan[col_idx] += 1
                    # a combined span may be running in this row
                    self.colspan[row_idx] = 1
                    continue
                content = NBSP
            elif content == triggers["colspan"]:
                if self._colspan_allowed(col_idx):
                    self.colspan[row_idx] += 1
                    self.rowspan[col_idx] = 1
                    continue
                content = NBSP
            elif content == triggers["span"]:
                if self._span_allowed(row_idx, col_idx):
                    continue
                content = NBSP

            colspan = self.colspan[row_idx]
            rowspan = self.rowspan[col_idx]
            css_class = f"column-{col_idx + 1}"
            if colspan > 1:
                css_class += f" colspan-{colspan}"
            if rowspan > 1:
                css_class += f" rowspan-{rowspan}"
            css_class = self.hooks.cell_css_class(
                css_class, table_id, content, row_idx + 1, col_idx + 1, colspan, rowspan
            )

            style = ""
            if row_idx == 0 and self.column_widths[col_idx]:
                style = f"width:{self.column_widths[col_idx]};"

            cell_tag = "th" if self.options.first_column_th and col_idx == 0 else tag
            cells.append(
                CellLayout(
                    row=row_idx,
                    column=col_idx,
                    tag=cell_tag,
                    content=content,
                    colspan=colspan,
                    rowspan=rowspan,
                    css_class=css_class,
                    style=style,
                )
            )
            self.colspan[row_idx] = 1
            self.rowspan[col_idx] = 1

        cells.reverse()

        row_class = f"row-{row_idx + 1}"
        if self.options.alternating_row_colors.enabled:
            row_class += " even" if row_idx % 2 == 1 else " odd"
        row_class = self.hooks.row_css_class(row_class, table_id, cells, row_idx + 1)
        return RowLayout(index=row_idx, css_class=row_class, cells=cells)

    def _caption(self) -> tuple[str, str, str]:
        table_id = self.table.id
        caption = self.hooks.print_caption_text("", self.table)
        caption_class = ""
        caption_style = ""
        if caption:
            caption_class = self.hooks.print_caption_class(
                f"{CSS_PREFIX}-table-caption {CSS_PREFIX}-table-caption-id-{table_id}", table_id
            )
        if self.options.edit_table_url:
            if caption:
                caption += "<br/>"
            caption += f'<a href="{self.options.edit_table_url}" title="Edit">Edit</a>'
            caption_style = "caption-side:bottom;text-align:left;border:none;background:none;"
        return caption, caption_class, caption_style

    def _colgroup(self) -> list[str]:
        table_id = self.table.id
        if not self.hooks.print_colgroup_tag(False, table_id):
            return []
        columns = []
        for col_idx in range(self.num_columns):
            attributes = f' class="colgroup-column-{col_idx + 1} "'
            columns.append(self.hooks.colgroup_tag_attributes(attributes, table_id, col_idx + 1))
        return columns

    def _text_block(
        self, kind: str, position: PrintPosition, default_tag: str, text: str
    ) -> Optional[TextBlock]:
        if position in (PrintPosition.NO, PrintPosition.UNSET):
            return None
        table_id = self.table.id
        if kind == "name":
            tag = self.hooks.print_name_html_tag(default_tag, table_id)
            css_class = self.hooks.print_name_css_class(
                f"{CSS_PREFIX}-table-name {CSS_PREFIX}-table-name-id-{table_id}", table_id
            )
        else:
            tag = self.hooks.print_description_html_tag(default_tag, table_id)
            css_class = self.hooks.print_description_css_class(
                f"{CSS_PREFIX}-table-description {CSS_PREFIX}-table-description-id-{table_id}",
                table_id,
            )
        return TextBlock(tag=tag, css_class=css_class, text=safe_output(text, self.nl2br), position=position)

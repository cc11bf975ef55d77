"""
Table Renderer

Coordinates visibility filtering, formula evaluation, span layout and markup
emission to turn a table into its HTML output.
"""
from __future__ import annotations

import copy
import logging
import threading
import time
from typing import Any, Optional

from tbl_engine.formulas import Evaluator, FormulaResolver
from tbl_engine.hooks import RenderHooks
from tbl_engine.layout import CSS_PREFIX, SpanLayoutEngine
from tbl_engine.markup import HtmlEmitter
from tbl_engine.models import RenderOptions, SiteDefaults, Table, TableLayout
from tbl_engine.visibility import filter_visibility

logger = logging.getLogger(__name__)

PREVIEW_CSS = f"""<style type="text/css">
.{CSS_PREFIX} {{
\tborder-collapse: collapse;
\tborder: 2px solid #000000;
\tmargin: 10px auto;
}}
.{CSS_PREFIX} td,
.{CSS_PREFIX} th {{
\tbox-sizing: border-box;
\twidth: 200px;
\tborder: 1px solid #dddddd;
\tpadding: 3px;
}}
.{CSS_PREFIX} thead tr,
.{CSS_PREFIX} tfoot tr {{
\tbackground-color: #e6eeee;
}}
.{CSS_PREFIX} tbody tr.even {{
\tbackground-color: #ffffff;
}}
.{CSS_PREFIX} tbody tr.odd {{
\tbackground-color: #eeeeee;
}}
.{CSS_PREFIX} .row-hover tr:hover {{
\tbackground-color: #d0d0d6;
}}
</style>"""


class TableRenderer:
    """
    Render tables to HTML.

    Call set_input() and then get_output(). Every get_output() call works on
    its own copy of the input, so repeated calls give identical results and
    no derived state survives between them.
    """

    def __init__(
        self,
        hooks: Optional[RenderHooks] = None,
        evaluator: Optional[Evaluator] = None,
        site_defaults: Optional[SiteDefaults] = None,
        max_depth: Optional[int] = None,
    ):
        self.hooks = hooks or RenderHooks()
        self.evaluator = evaluator
        self.site_defaults = site_defaults or SiteDefaults()
        self.max_depth = max_depth
        self.emitter = HtmlEmitter()

        self.table: Optional[Table] = None
        self.render_options: Optional[RenderOptions] = None
        self.layout: Optional[TableLayout] = None
        self.rendered_table: Optional[Table] = None
        self._lock = threading.Lock()

    def set_input(self, table: Table | dict[str, Any], render_options: RenderOptions | dict[str, Any] | None = None) -> None:
        """Set the table and the options it is rendered with."""
        if not isinstance(table, Table):
            table = Table.model_validate(table)
        if render_options is None:
            render_options = RenderOptions()
        elif not isinstance(render_options, RenderOptions):
            render_options = RenderOptions.model_validate(render_options)
        self.table = table.model_copy(deep=True)
        self.render_options = render_options.model_copy(deep=True)

    def get_output(self) -> str:
        """Run the render and return the HTML (or a placeholder comment for an empty table)."""
        if self.table is None or self.render_options is None:
            raise RuntimeError("set_input() must be called before get_output()")

        with self._lock:
            started = time.perf_counter()
            orig_table = self.table.model_copy(deep=True)
            options = self.render_options.resolve(self.site_defaults)

            table = filter_visibility(orig_table, options)
            table = self.hooks.render_data(table, orig_table, options)

            table = self._evaluate_table_data(table, options)
            self.rendered_table = table

            if table.num_rows == 0 or table.num_columns == 0:
                logger.info("Table %s has no visible cells", table.id)
                self.layout = None
                return f"<!-- The table with the ID {table.id} is empty! -->"

            self.layout = SpanLayoutEngine(table, options, self.hooks).layout()
            output = self.emitter.emit(self.layout)
            output = self.hooks.table_output(output, table, options)

            logger.debug("Rendered table %s in %.2f ms", table.id, (time.perf_counter() - started) * 1000)
            return output

    def _evaluate_table_data(self, table: Table, options: RenderOptions) -> Table:
        """Resolve formulas on a copy of the filtered grid."""
        grid = copy.deepcopy(table.data)
        resolver = FormulaResolver(grid, evaluator=self.evaluator, max_depth=self.max_depth)
        resolver.evaluate_table_data()
        evaluated = table.model_copy(update={"data": grid})
        return self.hooks.evaluate_data(evaluated, table, options)

    @staticmethod
    def get_default_render_options() -> dict[str, Any]:
        """Default render options, in their legacy (-1 = use site default) form."""
        return {
            "id": 0,
            "column_widths": [],
            "alternating_row_colors": -1,
            "row_hover": -1,
            "table_head": -1,
            "first_column_th": False,
            "table_foot": -1,
            "print_name": -1,
            "print_description": -1,
            "cache_table_output": -1,
            "extra_css_classes": "",
            "use_datatables": -1,
            "datatables_sort": -1,
            "datatables_paginate": -1,
            "datatables_paginate_entries": -1,
            "datatables_lengthchange": -1,
            "datatables_filter": -1,
            "datatables_info": -1,
            "datatables_tabletools": -1,
            "datatables_custom_commands": -1,
            "row_offset": 1,
            "row_count": None,
            "show_rows": [],
            "show_columns": [],
            "hide_rows": [],
            "hide_columns": [],
            "cellspacing": False,
            "cellpadding": False,
            "border": False,
            "html_id": "test",
        }

    @staticmethod
    def get_preview_css() -> str:
        return PREVIEW_CSS


def render_table(
    table: Table | dict[str, Any],
    options: RenderOptions | dict[str, Any] | None = None,
    **kwargs: Any,
) -> str:
    """Render a single table in one call; keyword arguments go to TableRenderer."""
    renderer = TableRenderer(**kwargs)
    renderer.set_input(table, options)
    return renderer.get_output()

"""
Table Rendering Engine

Formula evaluation and span layout for rendering string tables to HTML:
- Cell references ([B3]) and ranges ([A1:C4]) with cycle detection
- Row/column visibility and row windowing
- #rowspan# / #colspan# / #span# merge keywords
- Header/footer promotion and extension hooks
"""
from tbl_engine.addressing import letter_to_number, number_to_letter
from tbl_engine.errors import ERROR_PREFIX, ExpressionError, FailureKind, TableInputError
from tbl_engine.expression import ExpressionEvaluator
from tbl_engine.formulas import FormulaResolver
from tbl_engine.hooks import RenderHooks
from tbl_engine.layout import SpanLayoutEngine
from tbl_engine.markup import HtmlEmitter, safe_output
from tbl_engine.models import (
    PrintPosition,
    RenderOptions,
    SiteDefaults,
    Table,
    TableInput,
    TableLayout,
    TriState,
    Visibility,
)
from tbl_engine.renderer import TableRenderer, render_table
from tbl_engine.visibility import filter_visibility

__all__ = [
    "letter_to_number",
    "number_to_letter",
    "ERROR_PREFIX",
    "ExpressionError",
    "FailureKind",
    "TableInputError",
    "ExpressionEvaluator",
    "FormulaResolver",
    "RenderHooks",
    "SpanLayoutEngine",
    "HtmlEmitter",
    "safe_output",
    "PrintPosition",
    "RenderOptions",
    "SiteDefaults",
    "Table",
    "TableInput",
    "TableLayout",
    "TriState",
    "Visibility",
    "TableRenderer",
    "render_table",
    "filter_visibility",
]

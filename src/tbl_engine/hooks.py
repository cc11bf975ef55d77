"""
Render Extension Points

Every hook receives the in-progress value first, followed by context
(table id, 1-based row/column positions, ...), and returns the value to use.
The defaults pass the value through unchanged.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable


def passthrough(value: Any, *context: Any) -> Any:
    return value


@dataclass
class RenderHooks:
    """Injected transforms applied at fixed points of a render."""
    # (filtered table, original table, options) -> table
    render_data: Callable[..., Any] = passthrough
    # (evaluated table, filtered table, options) -> table
    evaluate_data: Callable[..., Any] = passthrough
    # (keywords dict, table id) -> keywords dict
    span_trigger_keywords: Callable[..., Any] = passthrough
    # (tag or css class, table id) -> str
    print_name_html_tag: Callable[..., Any] = passthrough
    print_name_css_class: Callable[..., Any] = passthrough
    print_description_html_tag: Callable[..., Any] = passthrough
    print_description_css_class: Callable[..., Any] = passthrough
    # (caption text, table) -> str
    print_caption_text: Callable[..., Any] = passthrough
    # (css class, table id) -> str
    print_caption_class: Callable[..., Any] = passthrough
    # (enabled, table id) -> bool
    print_colgroup_tag: Callable[..., Any] = passthrough
    # (attributes, table id, column) -> str
    colgroup_tag_attributes: Callable[..., Any] = passthrough
    # (content, table id, row, column) -> str
    cell_content: Callable[..., Any] = passthrough
    # (css class, table id, content, row, column, colspan, rowspan) -> str
    cell_css_class: Callable[..., Any] = passthrough
    # (css class, table id, cells, row) -> str
    row_css_class: Callable[..., Any] = passthrough
    # (css classes, table id) -> list[str]
    table_css_classes: Callable[..., Any] = passthrough
    # (summary, table) -> str
    print_summary_attr: Callable[..., Any] = passthrough
    # (enabled, table id) -> bool
    apply_nl2br: Callable[..., Any] = passthrough
    # (html, table, options) -> str
    table_output: Callable[..., Any] = passthrough

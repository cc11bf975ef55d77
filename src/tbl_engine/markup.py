"""
HTML Markup Emitter

Serializes a TableLayout into the final HTML string. Cell, name and
description text arrive already passed through safe_output().
"""
from __future__ import annotations

import re
from html import escape as html_escape

from tbl_engine.models import CellLayout, PrintPosition, RowLayout, TableLayout, TextBlock

_BARE_AMPERSAND_RE = re.compile(r"&(?![A-Za-z]{0,4}\w{2,3};|#[0-9]{2,4};)")
_LINE_BREAK_RE = re.compile(r"(\r\n|\n\r|\n|\r)")


def safe_output(text: str, nl2br: bool = True) -> str:
    """
    Encode bare ampersands and optionally mark up line breaks.

    HTML tags in the text are kept as they are; only ``&`` characters that do
    not already start an entity are encoded.
    """
    text = _BARE_AMPERSAND_RE.sub("&amp;", text)
    if nl2br:
        text = _LINE_BREAK_RE.sub(r"<br />\1", text)
    return text


def _attr(name: str, value) -> str:
    if value is False or value is None:
        return ""
    if value is True:
        value = 1
    return f' {name}="{value}"'


class HtmlEmitter:
    """Turn a laid-out table into an HTML string."""

    def emit(self, layout: TableLayout) -> str:
        output = ""
        output += self._text_block(layout.name, PrintPosition.ABOVE)
        output += self._text_block(layout.description, PrintPosition.ABOVE)

        class_attr = " ".join(c for c in layout.css_classes if c).strip()
        summary = html_escape(layout.summary, quote=True) if layout.summary else False
        output += (
            "\n<table"
            + _attr("id", layout.html_id or False)
            + _attr("class", class_attr or False)
            + _attr("summary", summary)
            + _attr("cellspacing", layout.cellspacing)
            + _attr("cellpadding", layout.cellpadding)
            + _attr("border", layout.border)
            + ">\n"
        )
        output += self._caption(layout)
        output += self._colgroup(layout)
        if layout.header is not None:
            output += "<thead>\n" + self._row(layout.header) + "</thead>\n"
        if layout.footer is not None:
            output += "<tfoot>\n" + self._row(layout.footer) + "</tfoot>\n"
        output += f"<tbody{_attr('class', layout.body_class or False)}>\n"
        output += "".join(self._row(row) for row in layout.body)
        output += "</tbody>\n"
        output += "</table>\n"

        output += self._text_block(layout.name, PrintPosition.BELOW)
        output += self._text_block(layout.description, PrintPosition.BELOW)
        return output

    def _text_block(self, block: TextBlock | None, position: PrintPosition) -> str:
        if block is None or block.position is not position:
            return ""
        return f'<{block.tag} class="{block.css_class}">{block.text}</{block.tag}>\n'

    def _caption(self, layout: TableLayout) -> str:
        if not layout.caption:
            return ""
        class_attr = _attr("class", layout.caption_class or False)
        style_attr = _attr("style", layout.caption_style or False)
        return f"<caption{class_attr}{style_attr}>\n{layout.caption}</caption>\n"

    def _colgroup(self, layout: TableLayout) -> str:
        if not layout.colgroup:
            return ""
        columns = "".join(f"\t<col{attributes}/>\n" for attributes in layout.colgroup)
        return f"<colgroup>\n{columns}</colgroup>\n"

    def _row(self, row: RowLayout) -> str:
        cells = "".join(self._cell(cell) for cell in row.cells)
        return f"\t<tr{_attr('class', row.css_class or False)}>\n\t\t{cells}\n\t</tr>\n"

    def _cell(self, cell: CellLayout) -> str:
        span_attr = ""
        if cell.colspan > 1:
            span_attr += _attr("colspan", cell.colspan)
        if cell.rowspan > 1:
            span_attr += _attr("rowspan", cell.rowspan)
        class_attr = _attr("class", cell.css_class or False)
        style_attr = _attr("style", cell.style or False)
        return f"<{cell.tag}{span_attr}{class_attr}{style_attr}>{cell.content}</{cell.tag}>"

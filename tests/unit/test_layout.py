"""
Unit Tests for the Span Layout Engine

Covers header/footer promotion, merge keywords, cell and row classes and
the layout-level hooks.
"""
import pytest

from tbl_engine.hooks import RenderHooks
from tbl_engine.layout import NBSP, SpanLayoutEngine
from tbl_engine.models import PrintPosition, RenderOptions, Table


def _layout(data, hooks=None, name="", description="", **options):
    table = Table(id=1, name=name, description=description, data=data)
    resolved = RenderOptions(**options).resolve()
    return SpanLayoutEngine(table, resolved, hooks).layout()


def _cell(layout, row_idx, col_idx):
    for row in layout.rows():
        if row.index != row_idx:
            continue
        for cell in row.cells:
            if cell.column == col_idx:
                return cell
    return None


# ============================================================================
# Header / footer
# ============================================================================

class TestSections:
    """Header and footer promotion."""

    def test_head_and_foot(self):
        layout = _layout([["h1", "h2"], ["b1", "b2"], ["f1", "f2"]], table_foot=True)

        assert layout.header.index == 0
        assert layout.footer.index == 2
        assert [row.index for row in layout.body] == [1]
        assert {cell.tag for cell in layout.header.cells} == {"th"}
        assert {cell.tag for cell in layout.footer.cells} == {"th"}
        assert {cell.tag for cell in layout.body[0].cells} == {"td"}

    def test_single_row_is_never_promoted(self):
        layout = _layout([["only"]], table_head=True, table_foot=True)
        assert layout.header is None
        assert layout.footer is None
        assert len(layout.body) == 1

    def test_head_disabled(self):
        layout = _layout([["a"], ["b"]], table_head=False)
        assert layout.header is None
        assert [row.index for row in layout.body] == [0, 1]

    def test_body_rows_top_to_bottom(self):
        layout = _layout([["0"], ["1"], ["2"], ["3"]])
        assert [row.index for row in layout.body] == [1, 2, 3]
        assert [row.cells[0].content for row in layout.body] == ["1", "2", "3"]

    def test_empty_table_rejected(self):
        with pytest.raises(ValueError):
            SpanLayoutEngine(Table(id=1), RenderOptions().resolve())


# ============================================================================
# Merge keywords
# ============================================================================

class TestRowspan:
    """Upward merges."""

    def test_rowspan_in_body(self):
        layout = _layout([["H", "H2"], ["a", "b"], ["#rowspan#", "c"], ["d", "e"]])

        merged = _cell(layout, 1, 0)
        assert merged.rowspan == 2
        assert merged.css_class == "column-1 rowspan-2"
        assert _cell(layout, 2, 0) is None
        assert [cell.content for cell in layout.body[1].cells] == ["c"]

    def test_rowspan_in_first_row_is_literal_space(self):
        layout = _layout([["#rowspan#", "x"], ["a", "b"]], table_head=False)
        assert _cell(layout, 0, 0).content == NBSP
        assert _cell(layout, 1, 0).rowspan == 1

    def test_rowspan_into_header_rejected(self):
        layout = _layout([["H", "H"], ["#rowspan#", "x"], ["a", "b"]])
        assert _cell(layout, 1, 0).content == NBSP
        assert layout.header.cells[0].rowspan == 1

    def test_rowspan_allowed_without_header(self):
        layout = _layout([["H", "H"], ["#rowspan#", "x"]], table_head=False)
        assert _cell(layout, 0, 0).rowspan == 2

    def test_footer_cannot_merge_upwards(self):
        layout = _layout([["H"], ["a"], ["#rowspan#"]], table_foot=True)
        assert layout.footer.cells[0].content == NBSP
        assert _cell(layout, 1, 0).rowspan == 1

    def test_three_row_merge(self):
        layout = _layout([["a"], ["#rowspan#"], ["#rowspan#"]], table_head=False)
        assert _cell(layout, 0, 0).rowspan == 3
        assert len(layout.body) == 3
        assert layout.body[1].cells == []


class TestColspan:
    """Leftward merges."""

    def test_colspan_chain(self):
        layout = _layout([["H1", "H2", "H3"], ["a", "#colspan#", "#colspan#"]])
        row = layout.body[0]
        assert len(row.cells) == 1
        assert row.cells[0].colspan == 3
        assert row.cells[0].css_class == "column-1 colspan-3"

    def test_colspan_in_first_column_is_literal_space(self):
        layout = _layout([["#colspan#", "b"]])
        assert _cell(layout, 0, 0).content == NBSP

    def test_colspan_into_th_column_rejected(self):
        layout = _layout([["a", "#colspan#"]], first_column_th=True)
        assert _cell(layout, 0, 1).content == NBSP
        assert _cell(layout, 0, 0).colspan == 1

    def test_colspan_in_header(self):
        layout = _layout([["Title", "#colspan#"], ["a", "b"]])
        assert layout.header.cells[0].colspan == 2


class TestCombinedSpan:
    """A 2x2 block merged with #colspan#, #rowspan# and #span#."""

    DATA = [
        ["a", "b", "c", "d"],
        ["e", "f", "#colspan#", "h"],
        ["i", "#rowspan#", "#span#", "l"],
        ["m", "n", "o", "p"],
    ]

    def test_block(self):
        layout = _layout(self.DATA, table_head=False)

        anchor = _cell(layout, 1, 1)
        assert (anchor.colspan, anchor.rowspan) == (2, 2)
        assert anchor.css_class == "column-2 colspan-2 rowspan-2"
        assert [cell.content for cell in layout.body[1].cells] == ["e", "f", "h"]
        assert [cell.content for cell in layout.body[2].cells] == ["i", "l"]
        assert _cell(layout, 2, 0).colspan == 1

    def test_span_on_edge_row_with_header_is_literal_space(self):
        layout = _layout([["H", "H"], ["a", "#span#"], ["c", "d"]])
        assert _cell(layout, 1, 1).content == NBSP

    def test_span_in_second_column_without_header(self):
        layout = _layout([["a", "b"], ["c", "#span#"]], table_head=False)
        assert _cell(layout, 1, 1) is None


class TestTriggerKeywordsHook:
    def test_custom_keywords(self):
        hooks = RenderHooks(span_trigger_keywords=lambda keywords, table_id: {**keywords, "colspan": "<<"})
        layout = _layout([["a", "<<"]], hooks=hooks)
        assert layout.body[0].cells[0].colspan == 2

        layout = _layout([["a", "#colspan#"]], hooks=hooks)
        assert _cell(layout, 0, 1).content == "#colspan#"


# ============================================================================
# Cells and rows
# ============================================================================

class TestCells:
    """Cell content, tags, classes and styles."""

    def test_first_column_th(self):
        layout = _layout([["a", "b"], ["c", "d"]], first_column_th=True, table_head=False)
        assert [cell.tag for cell in layout.body[1].cells] == ["th", "td"]

    def test_column_widths_on_first_row_only(self):
        layout = _layout([["a", "b", "c"], ["d", "e", "f"]], column_widths="10px||5em")
        assert [cell.style for cell in layout.header.cells] == ["width:10px;", "", "width:5em;"]
        assert {cell.style for cell in layout.body[0].cells} == {""}

    def test_content_is_made_safe(self):
        layout = _layout([["Tom & Jerry\nShow"]])
        assert layout.body[0].cells[0].content == "Tom &amp; Jerry<br />\nShow"

    def test_escaped_formula_printed_as_text(self):
        layout = _layout([["'=1+1", "'="]])
        assert [cell.content for cell in layout.body[0].cells] == ["=1+1", "'="]

    def test_cell_hooks(self):
        hooks = RenderHooks(
            cell_content=lambda content, table_id, row, column: f"{content}@{row},{column}",
            cell_css_class=lambda css, table_id, content, row, column, colspan, rowspan: css + " custom",
        )
        layout = _layout([["a"]], hooks=hooks)
        cell = layout.body[0].cells[0]
        assert cell.content == "a@1,1"
        assert cell.css_class == "column-1 custom"

    def test_nl2br_hook(self):
        hooks = RenderHooks(apply_nl2br=lambda enabled, table_id: False)
        layout = _layout([["a\nb"]], hooks=hooks)
        assert layout.body[0].cells[0].content == "a\nb"


class TestRows:
    """Row classes."""

    def test_alternating_classes(self):
        layout = _layout([["0"], ["1"], ["2"]])
        assert [row.css_class for row in layout.rows()] == ["row-1 odd", "row-2 even", "row-3 odd"]

    def test_alternating_disabled(self):
        layout = _layout([["0"], ["1"]], alternating_row_colors=False)
        assert [row.css_class for row in layout.rows()] == ["row-1", "row-2"]

    def test_row_class_hook(self):
        hooks = RenderHooks(row_css_class=lambda css, table_id, cells, row: f"{css} cells-{len(cells)}")
        layout = _layout([["a", "#colspan#"]], hooks=hooks)
        assert layout.body[0].css_class == "row-1 odd cells-1"


# ============================================================================
# Table-level decorations
# ============================================================================

class TestDecorations:
    """Classes, caption, colgroup, name and description."""

    def test_css_classes(self):
        layout = _layout([["a"]], extra_css_classes="striped")
        assert layout.css_classes == ["tbl", "tbl-id-1", "striped"]
        assert layout.body_class == "row-hover"
        assert layout.html_id == "test"

    def test_row_hover_disabled(self):
        assert _layout([["a"]], row_hover=False).body_class == ""

    def test_no_caption_by_default(self):
        layout = _layout([["a"]])
        assert layout.caption == ""
        assert layout.caption_class == ""
        assert layout.colgroup == []

    def test_caption_hook_and_edit_link(self):
        hooks = RenderHooks(print_caption_text=lambda caption, table: f"Table {table.id}")
        layout = _layout([["a"]], hooks=hooks, edit_table_url="/edit/1")

        assert layout.caption == 'Table 1<br/><a href="/edit/1" title="Edit">Edit</a>'
        assert layout.caption_class == "tbl-table-caption tbl-table-caption-id-1"
        assert layout.caption_style.startswith("caption-side:bottom;")

    def test_colgroup(self):
        hooks = RenderHooks(print_colgroup_tag=lambda enabled, table_id: True)
        layout = _layout([["a", "b"]], hooks=hooks)
        assert layout.colgroup == [' class="colgroup-column-1 "', ' class="colgroup-column-2 "']

    def test_name_and_description(self):
        layout = _layout(
            [["a"]],
            name="Prices & Fees",
            description="Line one\nLine two",
            print_name="above",
            print_description="below",
        )
        assert layout.name.tag == "h2"
        assert layout.name.css_class == "tbl-table-name tbl-table-name-id-1"
        assert layout.name.text == "Prices &amp; Fees"
        assert layout.name.position is PrintPosition.ABOVE
        assert layout.description.tag == "span"
        assert layout.description.text == "Line one<br />\nLine two"
        assert layout.description.position is PrintPosition.BELOW

    def test_name_not_printed_by_default(self):
        layout = _layout([["a"]], name="Hidden")
        assert layout.name is None
        assert layout.description is None

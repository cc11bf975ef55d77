"""
Unit Tests for the Visibility Filter
"""
from tbl_engine.models import RenderOptions, Table
from tbl_engine.visibility import (
    filter_visibility,
    hidden_column_indexes,
    hidden_row_indexes,
)


def _table(**kwargs) -> Table:
    data = kwargs.pop("data", [["a", "b", "c"], ["d", "e", "f"]])
    return Table(id=1, data=data, **kwargs)


class TestHiddenIndexes:
    """Union of flags and hide lists, minus show lists."""

    def test_flags_and_options_combine(self):
        table = _table(visibility={"rows": [1, 0], "columns": [1, 1, 0]})
        options = RenderOptions(hide_rows=[0], hide_columns=[1])
        assert hidden_row_indexes(table, options) == {0, 1}
        assert hidden_column_indexes(table, options) == {1, 2}

    def test_show_wins_over_hide(self):
        table = _table(visibility={"columns": [0, 1, 1]})
        options = RenderOptions(hide_columns=[1], show_columns=[0, 1])
        assert hidden_column_indexes(table, options) == set()


class TestFilterVisibility:
    """Tests for the filtered grid."""

    def test_hide_middle_column(self):
        filtered = filter_visibility(_table(), RenderOptions(hide_columns=[1]))
        assert filtered.data == [["a", "c"], ["d", "f"]]
        assert filtered.num_columns == 2

    def test_hidden_row_flag(self):
        table = _table(visibility={"rows": [0, 1]})
        filtered = filter_visibility(table, RenderOptions())
        assert filtered.data == [["d", "e", "f"]]

    def test_original_table_untouched(self):
        table = _table()
        filter_visibility(table, RenderOptions(hide_rows=[0], hide_columns=[0]))
        assert table.data == [["a", "b", "c"], ["d", "e", "f"]]

    def test_row_window(self):
        table = _table(data=[[str(n)] for n in range(1, 6)])
        filtered = filter_visibility(table, RenderOptions(row_offset=2, row_count=2))
        assert filtered.data == [["2"], ["3"]]

    def test_row_window_to_end(self):
        table = _table(data=[[str(n)] for n in range(1, 6)])
        filtered = filter_visibility(table, RenderOptions(row_offset=4))
        assert filtered.data == [["4"], ["5"]]

    def test_hide_rows_address_the_window(self):
        table = _table(data=[[str(n)] for n in range(1, 6)])
        filtered = filter_visibility(table, RenderOptions(row_offset=2, row_count=3, hide_rows=[0]))
        assert filtered.data == [["3"], ["4"]]

    def test_offset_beyond_table_gives_empty(self):
        filtered = filter_visibility(_table(), RenderOptions(row_offset=10))
        assert filtered.data == []
        assert filtered.num_columns == 0

    def test_all_columns_hidden(self):
        filtered = filter_visibility(_table(), RenderOptions(hide_columns=[0, 1, 2]))
        assert filtered.data == [[], []]
        assert filtered.num_columns == 0

    def test_filtering_twice_is_a_noop(self):
        options = RenderOptions(hide_columns=[1])
        once = filter_visibility(_table(visibility={"rows": [1, 0]}), options)
        # hide lists are positional, so refilter with a clean option set
        twice = filter_visibility(once, RenderOptions())
        assert twice.data == once.data
        assert twice.visibility.hidden_rows() == set()

"""
Integration Test - Command-Line Interface
"""
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from tbl_ui_cli.cli import app


runner = CliRunner()


@pytest.fixture
def input_file(tmp_path: Path) -> Path:
    path = tmp_path / "table.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "table": {
                    "id": 5,
                    "name": "Totals",
                    "data": [["A", "B", "Sum"], ["1", "2", "=[A2]+[B2]"]],
                },
                "options": {"table_head": True},
            }
        ),
        encoding="utf-8",
    )
    return path


class TestRender:
    def test_render_to_stdout(self, input_file):
        result = runner.invoke(app, ["render", str(input_file)])
        assert result.exit_code == 0
        assert '<table id="test" class="tbl tbl-id-5">' in result.stdout
        assert '<td class="column-3">3</td>' in result.stdout

    def test_render_to_file(self, input_file, tmp_path):
        output = tmp_path / "out" / "table.html"
        result = runner.invoke(app, ["render", "--input", str(input_file), "-o", str(output), "--preview-css"])

        assert result.exit_code == 0
        html = output.read_text(encoding="utf-8")
        assert html.startswith('<style type="text/css">')
        assert "<thead>" in html

    def test_hide_columns_override(self, input_file):
        result = runner.invoke(app, ["render", str(input_file), "--hide-columns", "0,1"])
        assert result.exit_code == 0
        # the formula cell is now A2 and refers to itself
        assert "!ERROR! Circle Reference" in result.stdout

    def test_missing_input(self, tmp_path):
        result = runner.invoke(app, ["render", str(tmp_path / "missing.yaml")])
        assert result.exit_code != 0


class TestShowAndValidate:
    def test_show(self, input_file):
        result = runner.invoke(app, ["show", str(input_file)])
        assert result.exit_code == 0
        assert "Totals" in result.stdout
        assert "All formulas evaluated" in result.stdout

    def test_show_reports_failures(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text('{"table": {"id": 1, "data": [["=1/0", "=[A1]"]]}}', encoding="utf-8")
        result = runner.invoke(app, ["show", str(path)])
        assert result.exit_code == 0
        assert "2 cell(s) with formula errors" in result.stdout

    def test_validate(self, input_file):
        result = runner.invoke(app, ["validate", str(input_file)])
        assert result.exit_code == 0
        assert "Input file is valid" in result.stdout
        assert "Size: 2 x 3" in result.stdout

    def test_validate_ragged_table(self, tmp_path):
        path = tmp_path / "ragged.yaml"
        path.write_text("table:\n  id: 1\n  data: [[a, b], [c]]\n", encoding="utf-8")
        result = runner.invoke(app, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Validation failed" in result.stdout


class TestExport:
    def test_export_csv(self, input_file, tmp_path):
        output = tmp_path / "table.csv"
        result = runner.invoke(app, ["export", str(input_file), "-o", str(output)])
        assert result.exit_code == 0
        assert output.read_text(encoding="utf-8").splitlines() == ["A,B,Sum", "1,2,3"]

    def test_export_unsupported_suffix(self, input_file, tmp_path):
        result = runner.invoke(app, ["export", str(input_file), "-o", str(tmp_path / "table.pdf")])
        assert result.exit_code == 1

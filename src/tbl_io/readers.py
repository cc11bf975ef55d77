"""
Table I/O Readers

YAML, JSON and CSV input file parsing.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pandas as pd
import yaml

from tbl_engine.errors import TableInputError
from tbl_engine.models import (
    RenderOptions,
    SiteDefaults,
    Table,
    TableInput,
)


def _parse_table(data: dict) -> Table:
    """Parse table section."""
    return Table.model_validate(data)


def _parse_options(data: dict | None) -> RenderOptions:
    """Parse options section, falling back to defaults for missing keys."""
    return RenderOptions.model_validate(data or {})


def _parse_site_defaults(data: dict | None) -> SiteDefaults:
    """Parse site_defaults section."""
    return SiteDefaults.model_validate(data or {})


def parse_input_dict(data: dict[str, Any]) -> TableInput:
    """
    Parse a dictionary into a render request.

    This is the core parsing function used by both YAML and JSON readers.
    A document may either hold ``table`` / ``options`` / ``site_defaults``
    sections or be a bare table (a mapping with ``data``).

    Args:
        data: Raw input dictionary

    Returns:
        TableInput model
    """
    if not isinstance(data, dict):
        raise TableInputError("Input document must be a mapping")

    if "table" in data:
        table_data = data["table"]
    elif "data" in data:
        table_data = {key: value for key, value in data.items() if key not in ("options", "site_defaults")}
    else:
        raise TableInputError("Input document has no 'table' section")

    return TableInput(
        table=_parse_table(table_data),
        options=_parse_options(data.get("options")),
        site_defaults=_parse_site_defaults(data.get("site_defaults")),
    )


def read_yaml(path: str | Path) -> TableInput:
    """
    Read a render request from a YAML file.

    Args:
        path: Path to YAML file

    Returns:
        TableInput model
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    return parse_input_dict(data)


def read_json(path: str | Path) -> TableInput:
    """
    Read a render request from a JSON file.

    Args:
        path: Path to JSON file

    Returns:
        TableInput model
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return parse_input_dict(data)


def read_csv(path: str | Path) -> TableInput:
    """
    Read a bare grid of cells from a CSV file.

    Every cell is kept as text; the table id is the file stem.
    """
    path = Path(path)
    try:
        frame = pd.read_csv(path, header=None, dtype=str, keep_default_na=False)
        rows = frame.values.tolist()
    except pd.errors.EmptyDataError:
        rows = []

    return TableInput(table=Table(id=path.stem, name=path.stem, data=rows))


def read_input_file(path: str | Path) -> TableInput:
    """
    Read a render request from a file (auto-detects format).

    Args:
        path: Path to input file (YAML, JSON or CSV)

    Returns:
        TableInput model
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        return read_yaml(path)
    elif suffix == ".json":
        return read_json(path)
    elif suffix == ".csv":
        return read_csv(path)
    else:
        raise TableInputError(f"Unsupported file format: {suffix}")

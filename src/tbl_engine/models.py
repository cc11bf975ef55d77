"""
Table Rendering Core Data Models

Pydantic models for tables, render options and the laid-out row/cell
descriptors handed to the markup emitter.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# ============================================================================
# ENUMS
# ============================================================================

class TriState(str, Enum):
    """Render flag that may defer to the site default."""
    UNSET = "unset"
    ENABLED = "enabled"
    DISABLED = "disabled"

    @classmethod
    def coerce(cls, value: Any) -> "TriState":
        """Map legacy values (-1, None, booleans, 0/1) onto the enum."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.UNSET
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("", "-1", "unset", "default"):
                return cls.UNSET
            if lowered in ("1", "true", "yes", "on", "enabled"):
                return cls.ENABLED
            if lowered in ("0", "false", "no", "off", "disabled"):
                return cls.DISABLED
            raise ValueError(f"Invalid tri-state value: {value!r}")
        if not isinstance(value, bool) and value == -1:
            return cls.UNSET
        return cls.ENABLED if value else cls.DISABLED

    @property
    def enabled(self) -> bool:
        return self is TriState.ENABLED

    def resolve(self, default: bool) -> "TriState":
        if self is TriState.UNSET:
            return TriState.ENABLED if default else TriState.DISABLED
        return self


class PrintPosition(str, Enum):
    """Where the table name or description is printed."""
    UNSET = "unset"
    NO = "no"
    ABOVE = "above"
    BELOW = "below"

    @classmethod
    def coerce(cls, value: Any) -> "PrintPosition":
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.UNSET
        if isinstance(value, bool):
            return cls.ABOVE if value else cls.NO
        if isinstance(value, int):
            return cls.UNSET if value == -1 else (cls.ABOVE if value else cls.NO)
        lowered = str(value).strip().lower()
        if lowered in ("-1", "unset", "default"):
            return cls.UNSET
        if lowered in ("", "0", "false", "no", "off"):
            return cls.NO
        return cls(lowered)


# ============================================================================
# CONSTANTS
# ============================================================================

DEFAULT_SPAN_TRIGGERS = {
    "colspan": "#colspan#",
    "rowspan": "#rowspan#",
    "span": "#span#",
}

_TRI_STATE_OPTIONS = (
    "alternating_row_colors",
    "row_hover",
    "table_head",
    "table_foot",
    "cache_table_output",
    "use_datatables",
    "datatables_sort",
    "datatables_paginate",
    "datatables_lengthchange",
    "datatables_filter",
    "datatables_info",
    "datatables_tabletools",
)


# ============================================================================
# INPUT MODELS
# ============================================================================

class Visibility(BaseModel):
    """Per-row and per-column visibility flags (0 = hidden)."""
    rows: list[int] = Field(default_factory=list, description="Row flags, missing entries are visible")
    columns: list[int] = Field(default_factory=list, description="Column flags, missing entries are visible")

    @field_validator("rows", "columns", mode="before")
    @classmethod
    def coerce_flags(cls, v: Any) -> list[int]:
        if v is None:
            return []
        return [1 if flag else 0 for flag in v]

    def hidden_rows(self) -> set[int]:
        return {idx for idx, flag in enumerate(self.rows) if not flag}

    def hidden_columns(self) -> set[int]:
        return {idx for idx, flag in enumerate(self.columns) if not flag}


class Table(BaseModel):
    """A table of string cells, rows outer and columns inner."""
    id: int | str = Field(..., description="Opaque identifier, used for hook keying and CSS classes")
    name: str = Field("", description="Table name")
    description: str = Field("", description="Table description")
    data: list[list[str]] = Field(default_factory=list, description="Rectangular grid of cell strings")
    visibility: Visibility = Field(default_factory=Visibility)

    @field_validator("name", "description", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("data", mode="before")
    @classmethod
    def coerce_cells(cls, v: Any) -> list[list[str]]:
        if v is None:
            return []
        rows = []
        for row in v:
            rows.append(["" if cell is None else str(cell) for cell in row])
        return rows

    @model_validator(mode="after")
    def validate_rectangular(self) -> "Table":
        widths = {len(row) for row in self.data}
        if len(widths) > 1:
            raise ValueError(f"Table data must be rectangular, got row lengths {sorted(widths)}")
        return self

    @property
    def num_rows(self) -> int:
        return len(self.data)

    @property
    def num_columns(self) -> int:
        return len(self.data[0]) if self.data else 0


class SiteDefaults(BaseModel):
    """Values that unset tri-state options resolve to."""
    table_head: bool = True
    table_foot: bool = False
    alternating_row_colors: bool = True
    row_hover: bool = True
    cache_table_output: bool = True
    use_datatables: bool = True
    datatables_sort: bool = True
    datatables_paginate: bool = True
    datatables_lengthchange: bool = True
    datatables_filter: bool = True
    datatables_info: bool = True
    datatables_tabletools: bool = False
    print_name: PrintPosition = PrintPosition.NO
    print_description: PrintPosition = PrintPosition.NO

    @field_validator("print_name", "print_description", mode="before")
    @classmethod
    def coerce_position(cls, v: Any) -> PrintPosition:
        position = PrintPosition.coerce(v)
        return PrintPosition.NO if position is PrintPosition.UNSET else position


class RenderOptions(BaseModel):
    """Options that influence the rendered output of a table."""
    id: int | str = 0
    column_widths: list[str] = Field(default_factory=list, description="CSS widths per column")
    alternating_row_colors: TriState = TriState.UNSET
    row_hover: TriState = TriState.UNSET
    table_head: TriState = TriState.UNSET
    first_column_th: bool = False
    table_foot: TriState = TriState.UNSET
    print_name: PrintPosition = PrintPosition.UNSET
    print_description: PrintPosition = PrintPosition.UNSET
    cache_table_output: TriState = TriState.UNSET
    extra_css_classes: str = ""
    use_datatables: TriState = TriState.UNSET
    datatables_sort: TriState = TriState.UNSET
    datatables_paginate: TriState = TriState.UNSET
    datatables_paginate_entries: int = -1
    datatables_lengthchange: TriState = TriState.UNSET
    datatables_filter: TriState = TriState.UNSET
    datatables_info: TriState = TriState.UNSET
    datatables_tabletools: TriState = TriState.UNSET
    datatables_custom_commands: int | str = -1
    row_offset: int = Field(1, ge=1, description="1-based first row of the row window")
    row_count: Optional[int] = Field(None, ge=0, description="Rows in the window, None means to the end")
    show_rows: list[int] = Field(default_factory=list)
    show_columns: list[int] = Field(default_factory=list)
    hide_rows: list[int] = Field(default_factory=list)
    hide_columns: list[int] = Field(default_factory=list)
    cellspacing: bool | int | str = False
    cellpadding: bool | int | str = False
    border: bool | int | str = False
    html_id: str = "test"
    edit_table_url: str = ""

    @field_validator(*_TRI_STATE_OPTIONS, mode="before")
    @classmethod
    def coerce_tri_state(cls, v: Any) -> TriState:
        return TriState.coerce(v)

    @field_validator("print_name", "print_description", mode="before")
    @classmethod
    def coerce_print_position(cls, v: Any) -> PrintPosition:
        return PrintPosition.coerce(v)

    @field_validator("column_widths", mode="before")
    @classmethod
    def coerce_widths(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split("|")
        return ["" if w is None else str(w).strip() for w in v]

    @field_validator("show_rows", "show_columns", "hide_rows", "hide_columns", mode="before")
    @classmethod
    def coerce_index_list(cls, v: Any) -> list[int]:
        if v is None:
            return []
        if isinstance(v, str):
            return [int(part) for part in v.split(",") if part.strip()]
        if isinstance(v, int):
            return [v]
        return list(v)

    @field_validator("extra_css_classes", "html_id", "edit_table_url", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    def resolve(self, defaults: SiteDefaults | None = None) -> "RenderOptions":
        """Return a copy in which no tri-state or print option is left unset."""
        defaults = defaults or SiteDefaults()
        updates: dict[str, Any] = {}
        for name in _TRI_STATE_OPTIONS:
            updates[name] = getattr(self, name).resolve(getattr(defaults, name))
        for name in ("print_name", "print_description"):
            position = getattr(self, name)
            updates[name] = getattr(defaults, name) if position is PrintPosition.UNSET else position
        return self.model_copy(update=updates)


class TableInput(BaseModel):
    """A render request as read from an input document."""
    table: Table
    options: RenderOptions = Field(default_factory=RenderOptions)
    site_defaults: SiteDefaults = Field(default_factory=SiteDefaults)


# ============================================================================
# LAYOUT MODELS
# ============================================================================

class CellLayout(BaseModel):
    """A single emitted cell."""
    row: int  # 0-based row index in the filtered grid
    column: int  # 0-based column index in the filtered grid
    tag: str
    content: str
    colspan: int = 1
    rowspan: int = 1
    css_class: str = ""
    style: str = ""


class RowLayout(BaseModel):
    """A row with its cells in left-to-right order."""
    index: int
    css_class: str = ""
    cells: list[CellLayout] = Field(default_factory=list)


class TextBlock(BaseModel):
    """Table name or description printed next to the table."""
    tag: str
    css_class: str
    text: str
    position: PrintPosition


class TableLayout(BaseModel):
    """Header/body/footer structure produced by the span layout engine."""
    table_id: int | str
    html_id: str = ""
    css_classes: list[str] = Field(default_factory=list)
    summary: str = ""
    cellspacing: bool | int | str = False
    cellpadding: bool | int | str = False
    border: bool | int | str = False
    caption: str = ""
    caption_class: str = ""
    caption_style: str = ""
    colgroup: list[str] = Field(default_factory=list, description="Attribute strings, one per <col>")
    header: Optional[RowLayout] = None
    footer: Optional[RowLayout] = None
    body: list[RowLayout] = Field(default_factory=list)
    body_class: str = ""
    name: Optional[TextBlock] = None
    description: Optional[TextBlock] = None

    def rows(self) -> list[RowLayout]:
        """All rows in top-to-bottom order."""
        ordered = []
        if self.header is not None:
            ordered.append(self.header)
        ordered.extend(self.body)
        if self.footer is not None:
            ordered.append(self.footer)
        return ordered

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from openpyxl.worksheet.worksheet import Worksheet

"""Grid / Cell domain model shared by the log reader and the roster annotator.

A spreadsheet is reduced to a 1-based grid of typed cells. Each cell is a
tagged variant (absent / text / date) so that date canonicalization happens in
exactly one place (`canonical_date`) for both sides of the punch join.

Roster grids are bound to their openpyxl worksheet: `Grid.set_value` writes
through to the worksheet so the annotated workbook can be re-encoded as-is.
"""

__all__ = [
    "DEFAULT_DATE_FORMAT",
    "Cell",
    "CellKind",
    "Grid",
    "canonical_date",
]

# day/month/year (ネイティブ日付セルの表示形式)
DEFAULT_DATE_FORMAT = "%d/%m/%Y"
TIME_FORMAT = "%H:%M"


class CellKind(Enum):
    """Tagged variant for a cell value."""
    ABSENT = "absent"
    TEXT = "text"
    DATE = "date"


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, float) and math.isnan(value):
        return True
    # pandas.NaT compares unequal to itself like NaN
    try:
        return bool(value != value)
    except (TypeError, ValueError):  # pragma: no cover
        return False


def _render(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, time):
        return value.strftime(TIME_FORMAT)
    return str(value)


@dataclass(frozen=True)
class Cell:
    """A single grid position (1-based row / column)."""
    row: int
    column: int
    value: Any = None
    kind: CellKind = CellKind.ABSENT

    @staticmethod
    def of(row: int, column: int, value: Any) -> Cell:
        if _is_missing(value):
            return Cell(row=row, column=column)
        # datetime は date のサブクラス (pandas.Timestamp も含む)
        if isinstance(value, date):
            return Cell(row=row, column=column, value=value, kind=CellKind.DATE)
        return Cell(row=row, column=column, value=value, kind=CellKind.TEXT)

    @property
    def text(self) -> str:
        """Rendered text of the cell (empty string when absent)."""
        if self.kind is CellKind.ABSENT:
            return ""
        if self.kind is CellKind.DATE:
            return canonical_date(self)
        return _render(self.value)


def canonical_date(cell: Cell, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    """Canonical display string for a date-bearing cell.

    Native dates are rendered with ``date_format``; text is used as-is. Both
    the punch index and the roster annotator build their keys through this
    function, so a log cell and a roster header denoting the same day meet on
    the same key.
    """
    if cell.kind is CellKind.ABSENT:
        return ""
    if cell.kind is CellKind.DATE:
        return cell.value.strftime(date_format)
    return _render(cell.value)


@dataclass
class Grid:
    """Ordered rows of cells; row 1 is the header row."""
    rows: list[list[Cell]] = field(default_factory=list)
    sheet: Worksheet | None = None

    @classmethod
    def from_values(cls, values: list[list[Any]], sheet: Worksheet | None = None) -> Grid:
        rows = [
            [Cell.of(r, c, v) for c, v in enumerate(row_values, start=1)]
            for r, row_values in enumerate(values, start=1)
        ]
        return cls(rows=rows, sheet=sheet)

    @classmethod
    def from_worksheet(cls, sheet: Worksheet) -> Grid:
        values = [list(r) for r in sheet.iter_rows(values_only=True)]
        return cls.from_values(values, sheet=sheet)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def header(self) -> list[Cell]:
        return self.rows[0] if self.rows else []

    def cell(self, row: int, column: int | None) -> Cell:
        """Return the cell at (row, column); out-of-range positions read as absent."""
        if column is None or row < 1 or column < 1 or row > len(self.rows):
            return Cell(row=row, column=column or 0)
        cells = self.rows[row - 1]
        if column > len(cells):
            return Cell(row=row, column=column)
        return cells[column - 1]

    def set_value(self, row: int, column: int, value: Any) -> None:
        """Assign a value in place (and on the bound worksheet, if any)."""
        if row < 1 or column < 1:
            raise IndexError(f"invalid cell position ({row}, {column})")
        while len(self.rows) < row:
            self.rows.append([])
        cells = self.rows[row - 1]
        while len(cells) < column:
            cells.append(Cell(row=row, column=len(cells) + 1))
        cells[column - 1] = Cell.of(row, column, value)
        if self.sheet is not None:
            self.sheet.cell(row=row, column=column, value=value)

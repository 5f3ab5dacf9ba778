from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO

import pandas as pd
from openpyxl import Workbook, load_workbook

from ..models.grid import Grid

"""Workbook I/O boundary.

- Log report: first sheet decoded with pandas (header=None, dtype=object) so
  that native dates / times survive as Python objects; the grid is read-only.
- Roster sheets: loaded with openpyxl so the workbook (styles, other sheets)
  is kept and re-encoded after annotation.

Only the first worksheet of each workbook is read.
"""

__all__ = [
    "XLSX_MIME_TYPE",
    "RosterWorkbook",
    "read_log_grid",
    "load_roster",
    "save_roster",
]

XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass
class RosterWorkbook:
    filename: str
    workbook: Workbook
    grid: Grid

    @property
    def sheet_name(self) -> str:
        return self.workbook.worksheets[0].title


def read_log_grid(data: bytes) -> Grid:
    """Decode the first sheet of the log report into a Grid."""
    # "NA" や "None" などは文字列のまま残す (空セルのみ NaN)
    df = pd.read_excel(
        BytesIO(data),
        sheet_name=0,
        header=None,
        dtype=object,
        engine="openpyxl",
        keep_default_na=False,
        na_values=[""],
    )
    # NaN / NaT は Grid 側で absent 扱い
    return Grid.from_values(df.values.tolist())


def load_roster(filename: str, data: bytes) -> RosterWorkbook:
    """Load a roster workbook; its first worksheet becomes a write-through Grid."""
    wb = load_workbook(BytesIO(data))
    sheet = wb.worksheets[0]
    return RosterWorkbook(filename=filename, workbook=wb, grid=Grid.from_worksheet(sheet))


def save_roster(roster: RosterWorkbook) -> bytes:
    buffer = BytesIO()
    roster.workbook.save(buffer)
    return buffer.getvalue()

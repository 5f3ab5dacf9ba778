from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType

from ..excel.headers import (
    EMPLOYEE_ID_VARIANTS,
    LOG_DATE_VARIANTS,
    PUNCH_TIME_VARIANTS,
    resolve_column,
)
from ..models.grid import DEFAULT_DATE_FORMAT, TIME_FORMAT, Cell, CellKind, Grid, canonical_date

"""Punch index: (employee id, canonical date) -> earliest punch time text.

The "earliest" punch is the lexicographically smallest time string. This is
only a time-of-day ordering when every punch shares one fixed-width format
(zero-padded "HH:MM"); native time cells are rendered that way by the grid
model, text punches are compared as written.
"""

__all__ = [
    "MissingColumnsError",
    "PunchIndex",
    "build_index",
    "punch_key",
]

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "|"


class MissingColumnsError(Exception):
    """Raised when the log sheet lacks employee id, date or time columns."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"log report missing columns: {missing}")


def punch_key(employee_id: str, date_text: str) -> str:
    return f"{employee_id}{KEY_SEPARATOR}{date_text}"


@dataclass(frozen=True)
class PunchIndex(Mapping[str, str]):
    """Read-only mapping of punch keys to earliest punch time."""
    entries: Mapping[str, str]
    indexed_rows: int = 0
    skipped_rows: int = 0

    def __getitem__(self, key: str) -> str:
        return self.entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def lookup(self, employee_id: str, date_text: str) -> str | None:
        return self.entries.get(punch_key(employee_id, date_text))


def _punch_time_text(cell: Cell) -> str:
    # 日時セル (タイムスタンプ) は時刻部分のみ使う
    if cell.kind is CellKind.DATE and isinstance(cell.value, datetime):
        return cell.value.strftime(TIME_FORMAT)
    return cell.text


def build_index(log_grid: Grid, date_format: str = DEFAULT_DATE_FORMAT) -> PunchIndex:
    """Build the punch index from the log sheet grid.

    Raises:
        MissingColumnsError: employee id, date or time column not found in row 1
    """
    header = log_grid.header
    emp_col = resolve_column(header, EMPLOYEE_ID_VARIANTS)
    date_col = resolve_column(header, LOG_DATE_VARIANTS)
    time_col = resolve_column(header, PUNCH_TIME_VARIANTS)

    missing = [
        name
        for name, col in (("employee_id", emp_col), ("date", date_col), ("time", time_col))
        if col is None
    ]
    if missing:
        raise MissingColumnsError(missing)
    logger.debug(f"log columns resolved emp={emp_col} date={date_col} time={time_col}")

    earliest: dict[str, str] = {}
    indexed = 0
    skipped = 0
    for row_number in range(2, log_grid.row_count + 1):
        emp_id = log_grid.cell(row_number, emp_col).text
        date_text = canonical_date(log_grid.cell(row_number, date_col), date_format)
        punch = _punch_time_text(log_grid.cell(row_number, time_col))
        if not emp_id or not date_text or not punch:
            skipped += 1
            continue
        key = punch_key(emp_id, date_text)
        current = earliest.get(key)
        if current is None or punch < current:
            earliest[key] = punch
        indexed += 1

    logger.debug(f"punch index built keys={len(earliest)} indexed={indexed} skipped={skipped}")
    return PunchIndex(entries=MappingProxyType(earliest), indexed_rows=indexed, skipped_rows=skipped)

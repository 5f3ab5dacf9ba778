from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from ..models.grid import Cell, CellKind

"""Heuristic header discovery for heterogeneous attendance sheets.

Headers are matched on a normalized form (lowercase, all whitespace removed)
by substring, so "Employee ID", "EMP ID" and "Employees Id" all resolve to the
employee column. The leftmost matching column wins.
"""

__all__ = [
    "EMPLOYEE_ID_VARIANTS",
    "LOG_DATE_VARIANTS",
    "PUNCH_TIME_VARIANTS",
    "normalize_header",
    "resolve_column",
    "detect_date_columns",
]

EMPLOYEE_ID_VARIANTS: tuple[str, ...] = ("employeeid", "employeesid", "empid", "emp")
LOG_DATE_VARIANTS: tuple[str, ...] = ("logdate", "date")
PUNCH_TIME_VARIANTS: tuple[str, ...] = ("time", "in", "punchin")

# d/m/yyyy, dd-mm-yy ...
DATE_HEADER_PATTERN = re.compile(r"^\d{1,2}[/-]\d{1,2}[/-](?:\d{2}|\d{4})$")

_WHITESPACE = re.compile(r"\s")


def normalize_header(cell: Cell) -> str:
    return _WHITESPACE.sub("", cell.text.lower())


def resolve_column(header_row: Sequence[Cell], variants: Iterable[str]) -> int | None:
    """Return the 1-based index of the first header cell containing any variant.

    Returns None when no header cell matches.
    """
    variants = tuple(variants)
    for index, cell in enumerate(header_row, start=1):
        name = normalize_header(cell)
        if any(v in name for v in variants):
            return index
    return None


def detect_date_columns(header_row: Sequence[Cell]) -> list[int]:
    """Return the 1-based indices of text header cells that look like d/m/y dates.

    Native date cells are not considered; only textual headers qualify.
    """
    columns: list[int] = []
    for index, cell in enumerate(header_row, start=1):
        if cell.kind is not CellKind.TEXT or not isinstance(cell.value, str):
            continue
        if DATE_HEADER_PATTERN.fullmatch(cell.value):
            columns.append(index)
    return columns

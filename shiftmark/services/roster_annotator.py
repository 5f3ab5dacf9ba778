from __future__ import annotations

import logging

from ..excel.headers import EMPLOYEE_ID_VARIANTS, detect_date_columns, resolve_column
from ..models.grid import DEFAULT_DATE_FORMAT, Grid, canonical_date
from .punch_index import PunchIndex
from .shift_classifier import classify

"""Roster annotation: write shift codes into employee x date cells."""

__all__ = [
    "annotate",
]

logger = logging.getLogger(__name__)


def annotate(
    roster: Grid,
    index: PunchIndex,
    date_format: str = DEFAULT_DATE_FORMAT,
    *,
    sheet_name: str = "",
) -> int:
    """Annotate a roster grid in place and return the number of cells written.

    Every (employee row, date column) pair with a punch in the index and a
    real shift code is overwritten, whatever the cell held before. A roster
    without an employee id column is left untouched.
    """
    header = roster.header
    emp_col = resolve_column(header, EMPLOYEE_ID_VARIANTS)
    if emp_col is None:
        logger.warning(f"roster '{sheet_name}': employee id column not found, skipped")
        return 0

    date_cols = detect_date_columns(header)
    if not date_cols:
        logger.debug(f"roster '{sheet_name}': no date columns detected")
        return 0
    # ヘッダの日付キーは行に依らないので先に求めておく
    date_keys = [(col, canonical_date(header[col - 1], date_format)) for col in date_cols]

    written = 0
    for row_number in range(2, roster.row_count + 1):
        emp_id = roster.cell(row_number, emp_col).text
        if not emp_id:
            continue
        for col, date_text in date_keys:
            punch = index.lookup(emp_id, date_text)
            if punch is None:
                continue
            code = classify(punch)
            if code:
                roster.set_value(row_number, col, code.value)
                written += 1
    logger.debug(f"roster '{sheet_name}': cells_written={written} date_columns={len(date_cols)}")
    return written

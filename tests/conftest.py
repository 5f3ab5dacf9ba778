# Shared pytest fixtures
from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable
from io import BytesIO
from pathlib import Path
from typing import Any

import pytest
from openpyxl import Workbook, load_workbook

from shiftmark.config.loader import AppConfig
from shiftmark.logging.init import LOGGER_NAME, reset_logging

XlsxFactory = Callable[[list[list[Any]]], bytes]


def _to_xlsx(rows: list[list[Any]], title: str = "Sheet1") -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = title
    for r in rows:
        ws.append(r)
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("PORT", raising=False)
        monkeypatch.delenv("SHIFTMARK_CONFIG", raising=False)
        yield p


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    # capsys のストリームを掴んだハンドラを残さない
    logger = logging.getLogger(LOGGER_NAME)
    for h in logger.handlers[:]:
        logger.removeHandler(h)
    reset_logging()


@pytest.fixture()
def make_xlsx() -> XlsxFactory:
    """Build .xlsx bytes from a list of rows (first sheet)."""
    return _to_xlsx


@pytest.fixture()
def read_xlsx() -> Callable[[bytes], list[list[Any]]]:
    """Decode .xlsx bytes back into the first sheet's values."""
    def _read(data: bytes) -> list[list[Any]]:
        ws = load_workbook(BytesIO(data)).worksheets[0]
        return [list(r) for r in ws.iter_rows(values_only=True)]
    return _read


@pytest.fixture()
def app_config(temp_workdir: Path) -> AppConfig:
    return AppConfig(error_log_dir=str(temp_workdir / "logs"))


@pytest.fixture()
def log_rows() -> list[list[Any]]:
    return [
        ["EmployeeID", "LogDate", "PunchIn"],
        ["E1", "01/05/2024", "07:45"],
        ["E1", "01/05/2024", "06:50"],
        ["E2", "01/05/2024", "12:10"],
        ["E2", "02/05/2024", "17:05"],
        ["E3", "01/05/2024", "10:15"],  # hour 10 -> no code
        ["", "01/05/2024", "05:00"],  # no employee id -> skipped
    ]


@pytest.fixture()
def roster_rows() -> list[list[Any]]:
    return [
        ["Name", "Emp ID", "01/05/2024", "02/05/2024"],
        ["Alice", "E1", None, None],
        ["Bob", "E2", "X", None],
        ["Carol", "E3", None, None],
        ["Nobody", None, None, None],
    ]

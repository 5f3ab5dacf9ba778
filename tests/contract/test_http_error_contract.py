from __future__ import annotations

from io import BytesIO
from unittest.mock import patch

import pytest

from shiftmark.web.app import create_app

"""HTTP error contract: 400 for missing log columns, 500 for everything else (plain text)."""


@pytest.fixture()
def client(app_config):
    return create_app(app_config).test_client()


def _form(log: bytes | None, rosters: list[bytes]) -> dict:
    data: dict = {"deptSheets": [(BytesIO(r), f"dept{i}.xlsx") for i, r in enumerate(rosters)]}
    if log is not None:
        data["logReport"] = (BytesIO(log), "log.xlsx")
    return data


def test_missing_log_columns_is_400(client, make_xlsx, roster_rows):
    log = make_xlsx([["EmployeeID", "LogDate"], ["E1", "01/05/2024"]])
    with patch("shiftmark.services.orchestrator.load_roster") as mock_load:
        resp = client.post("/process", data=_form(log, [make_xlsx(roster_rows)]), content_type="multipart/form-data")
        mock_load.assert_not_called()
    assert resp.status_code == 400
    assert resp.mimetype == "text/plain"
    assert resp.get_data(as_text=True) == "Missing required columns in log report"


def test_corrupt_workbook_is_500(client, make_xlsx, log_rows):
    resp = client.post(
        "/process", data=_form(make_xlsx(log_rows), [b"garbage"]), content_type="multipart/form-data"
    )
    assert resp.status_code == 500
    assert resp.mimetype == "text/plain"
    assert resp.get_data(as_text=True).startswith("Error processing files: ")


def test_missing_log_upload_is_500(client, make_xlsx, roster_rows):
    resp = client.post("/process", data=_form(None, [make_xlsx(roster_rows)]), content_type="multipart/form-data")
    assert resp.status_code == 500
    assert "log report file is required" in resp.get_data(as_text=True)


def test_missing_rosters_is_500(client, make_xlsx, log_rows):
    resp = client.post("/process", data=_form(make_xlsx(log_rows), []), content_type="multipart/form-data")
    assert resp.status_code == 500


def test_too_many_rosters_is_500(client, make_xlsx, log_rows, roster_rows):
    rosters = [make_xlsx(roster_rows) for _ in range(6)]
    resp = client.post("/process", data=_form(make_xlsx(log_rows), rosters), content_type="multipart/form-data")
    assert resp.status_code == 500
    assert "too many department sheets" in resp.get_data(as_text=True)


def test_unexpected_annotation_failure_is_500(client, make_xlsx, log_rows, roster_rows):
    with patch("shiftmark.services.orchestrator.annotate", side_effect=RuntimeError("boom")):
        resp = client.post(
            "/process", data=_form(make_xlsx(log_rows), [make_xlsx(roster_rows)]), content_type="multipart/form-data"
        )
    assert resp.status_code == 500
    assert resp.get_data(as_text=True) == "Error processing files: boom"

from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import pytest

from shiftmark.logging.error_log import ErrorLogBuffer, ErrorRecord

"""Error log JSON Lines contract: fixed keys, no extras."""

ERROR_LOG_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "required": ["timestamp", "file", "sheet", "row", "error_type", "message"],
    "properties": {
        "timestamp": {"type": "string", "pattern": "Z$"},
        "file": {"type": "string"},
        "sheet": {"type": "string"},
        "row": {"type": "integer", "minimum": -1},
        "error_type": {"type": "string", "pattern": "^[A-Z][A-Z_]*$"},
        "message": {"type": "string"},
    },
}


def test_flushed_records_match_schema(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path)
    buf.append(ErrorRecord.create("log.xlsx", "", -1, "MISSING_COLUMNS", "missing"))
    path = buf.flush()
    for line in path.read_text(encoding="utf-8").splitlines():
        jsonschema.validate(json.loads(line), ERROR_LOG_SCHEMA)


def test_schema_rejects_extra_key():
    record = json.loads(ErrorRecord.create("a.xlsx", "", -1, "UNEXPECTED_PROCESSING", "x").to_json_line())
    record["extra"] = "not allowed"
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(record, ERROR_LOG_SCHEMA)

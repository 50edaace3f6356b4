from __future__ import annotations

import json
import re

from roster_import.models import ErrorRecord
from roster_import.models.error_record import ERROR_TYPES

"""Error log JSON Lines contract: fixed key set, UPPER_SNAKE error types, UTC 'Z' timestamps."""

REQUIRED_KEYS = {"timestamp", "file", "row", "email", "error_type", "message"}
TS_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$")


def test_error_log_line_keys():
    rec = ErrorRecord.create("people.csv", 5, "DUPLICATE_ERROR", "User already exists", email="a@x.io")
    obj = json.loads(rec.to_json_line())
    assert set(obj.keys()) == REQUIRED_KEYS
    assert TS_RE.match(obj["timestamp"])
    assert isinstance(obj["row"], int)


def test_error_types_are_upper_snake():
    assert ERROR_TYPES == {
        "FORMAT_ERROR",
        "ROW_SKIPPED",
        "VALIDATION_ERROR",
        "DUPLICATE_ERROR",
        "STORE_ERROR",
    }
    for t in ERROR_TYPES:
        assert re.fullmatch(r"[A-Z]+(_[A-Z]+)*", t)


def test_file_level_errors_use_row_minus_one():
    obj = json.loads(ErrorRecord.create("x.csv", -1, "FORMAT_ERROR", "no data").to_json_line())
    assert obj["row"] == -1
    assert obj["email"] is None

from __future__ import annotations

import json
import logging
import sys

from schema_mapping_app.infrastructure.logging import _JsonFormatter


def test_json_formatter_includes_event_fields() -> None:
    record = logging.makeLogRecord(
        {
            "name": "schema_mapping_app.services.resource_manager",
            "levelno": logging.INFO,
            "levelname": "INFO",
            "msg": "Resource configuration saved. resource=%s",
            "args": ("birds",),
            "event": "resource_saved",
            "mapping_count": 2,
        }
    )

    payload = json.loads(_JsonFormatter().format(record))

    assert payload["message"] == "Resource configuration saved. resource=birds"
    assert payload["level"] == "INFO"
    assert payload["event"] == "resource_saved"
    assert payload["mapping_count"] == 2
    assert "args" not in payload
    assert "exc_info" not in payload


def test_json_formatter_renders_exceptions() -> None:
    try:
        raise OSError("disk full")
    except OSError:
        record = logging.makeLogRecord(
            {"msg": "Resource configuration write failed.", "levelname": "ERROR", "exc_info": sys.exc_info()}
        )

    payload = json.loads(_JsonFormatter().format(record))

    assert "OSError: disk full" in payload["exc_info"]

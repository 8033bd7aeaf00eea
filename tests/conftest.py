from __future__ import annotations

import json
import sys
from pathlib import Path

import pandas as pd
import pytest

APP_ROOT = Path(__file__).resolve().parents[1] / "app"
if str(APP_ROOT) not in sys.path:
    sys.path.insert(0, str(APP_ROOT))

from schema_mapping_app.web.core.runtime import clear_runtime_caches  # noqa: E402

TEST_SCHEMA_ID = "http://rs.gbif.org/data-schema/test-dp/1.0"
TEST_SCHEMA_NAME = "test-dp"
TEST_RESOURCE = "birds"

TEST_SCHEMA = {
    "identifier": TEST_SCHEMA_ID,
    "name": TEST_SCHEMA_NAME,
    "title": "Test Data Package",
    "version": "1.0",
    "sub_schemas": [
        {
            "name": "occurrences",
            "fields": [
                {"name": "occurrenceID", "constraints": {"required": True}},
                {"name": "scientificName"},
                {"name": "eventDate", "type": "date"},
                {"name": "basisOfRecord"},
            ],
        },
        {
            "name": "events",
            "fields": [{"name": "eventID"}],
        },
    ],
}

OCCURRENCE_ROWS = [
    {
        "occurrenceID": "occ-1",
        "scientificName": "Parus major",
        "eventDate": "2024-05-01",
        "basisOfRecord": "HumanObservation",
    },
    {
        "occurrenceID": "occ-2",
        "scientificName": "Erithacus rubecula",
        "eventDate": "2024-05-02",
        "basisOfRecord": "HumanObservation",
    },
]


def write_schema(directory: Path, payload: dict, filename: str = "test-dp.json") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def write_resource(data_dir: Path, payload: dict) -> Path:
    path = data_dir / "resources" / str(payload["shortname"]) / "resource.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


@pytest.fixture()
def schemas_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "data_schemas"
    write_schema(directory, TEST_SCHEMA)
    return directory


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "data"
    sources = directory / "sources"
    sources.mkdir(parents=True)
    frame = pd.DataFrame(OCCURRENCE_ROWS)
    frame.to_csv(sources / "occurrences.csv", index=False)
    frame.to_csv(sources / "headerless.txt", index=False, header=False, sep="\t")
    write_resource(
        directory,
        {
            "shortname": TEST_RESOURCE,
            "title": "Garden birds",
            "sources": [
                {"type": "file", "name": "occurrences", "path": "sources/occurrences.csv", "ignore_header_lines": 1},
                {
                    "type": "file",
                    "name": "headerless",
                    "path": "sources/headerless.txt",
                    "ignore_header_lines": 0,
                    "field_delimiter": "\\t",
                },
                {"type": "file", "name": "missing", "path": "sources/missing.csv", "ignore_header_lines": 1},
            ],
            "data_schema_mappings": [],
        },
    )
    return directory


@pytest.fixture()
def isolated_runtime(monkeypatch: pytest.MonkeyPatch, schemas_dir: Path, data_dir: Path) -> Path:
    monkeypatch.setenv("SCHEMAMAP_ENV", "dev")
    monkeypatch.setenv("SCHEMAMAP_DATA_DIR", str(data_dir))
    monkeypatch.setenv("SCHEMAMAP_SCHEMAS_DIR", str(schemas_dir))
    monkeypatch.setenv("SCHEMAMAP_SESSION_SECRET", "test-session-secret")
    monkeypatch.delenv("SCHEMAMAP_LOCKED_MODE", raising=False)
    monkeypatch.delenv("SCHEMAMAP_PEEK_ROWS", raising=False)
    clear_runtime_caches()
    yield data_dir
    clear_runtime_caches()

from __future__ import annotations

from contextlib import closing
from pathlib import Path
import sqlite3

import pytest

from schema_mapping_app.core.errors import SourceReadError
from schema_mapping_app.domain.source import FileSource, SqlSource, UrlSource, source_from_dict
from schema_mapping_app.services.source_manager import SourceManager


def test_peek_skips_header_lines_of_csv_source(data_dir: Path) -> None:
    manager = SourceManager(base_dir=data_dir)
    source = FileSource(name="occurrences", path="sources/occurrences.csv", ignore_header_lines=1)

    rows = manager.peek(source, 5)

    assert rows == [
        ["occ-1", "Parus major", "2024-05-01", "HumanObservation"],
        ["occ-2", "Erithacus rubecula", "2024-05-02", "HumanObservation"],
    ]


def test_peek_limits_row_count(data_dir: Path) -> None:
    manager = SourceManager(base_dir=data_dir)
    source = FileSource(name="occurrences", path="sources/occurrences.csv", ignore_header_lines=1)

    assert len(manager.peek(source, 1)) == 1


def test_columns_of_csv_source_use_header_names(data_dir: Path) -> None:
    manager = SourceManager(base_dir=data_dir)
    source = FileSource(name="occurrences", path="sources/occurrences.csv", ignore_header_lines=1)

    assert manager.columns(source) == ["occurrenceID", "scientificName", "eventDate", "basisOfRecord"]


def test_headerless_tab_source_is_read_from_first_line(data_dir: Path) -> None:
    manager = SourceManager(base_dir=data_dir)
    source = source_from_dict(
        {
            "type": "file",
            "name": "headerless",
            "path": "sources/headerless.txt",
            "ignore_header_lines": 0,
            "field_delimiter": "\\t",
        }
    )

    rows = manager.peek(source, 5)

    assert source.field_delimiter == "\t"
    assert rows[0] == ["occ-1", "Parus major", "2024-05-01", "HumanObservation"]
    assert manager.columns(source) == ["Column #1", "Column #2", "Column #3", "Column #4"]


def test_missing_file_raises_source_read_error(data_dir: Path) -> None:
    manager = SourceManager(base_dir=data_dir)
    source = FileSource(name="missing", path="sources/missing.csv")

    with pytest.raises(SourceReadError) as exc_info:
        manager.peek(source, 5)

    assert exc_info.value.source_name == "missing"


def test_source_without_location_raises_source_read_error() -> None:
    manager = SourceManager()

    with pytest.raises(SourceReadError, match="no URL configured"):
        manager.peek(UrlSource(name="remote"), 5)


def test_empty_file_yields_no_rows_or_columns(tmp_path: Path) -> None:
    (tmp_path / "empty.csv").write_text("", encoding="utf-8")
    manager = SourceManager(base_dir=tmp_path)
    source = FileSource(name="empty", path="empty.csv")

    assert manager.peek(source, 5) == []
    assert manager.columns(source) == []


def test_sql_source_reads_rows_and_column_names(tmp_path: Path) -> None:
    database = tmp_path / "birds.db"
    with closing(sqlite3.connect(database)) as conn:
        conn.execute("CREATE TABLE occurrence (occurrence_id TEXT, scientific_name TEXT, individual_count INTEGER)")
        conn.executemany(
            "INSERT INTO occurrence VALUES (?, ?, ?)",
            [("occ-1", "Parus major", 2), ("occ-2", "Erithacus rubecula", None), ("occ-3", "Pica pica", 1)],
        )
        conn.commit()
    manager = SourceManager(base_dir=tmp_path)
    source = SqlSource(name="db", database="birds.db", sql="SELECT * FROM occurrence ORDER BY occurrence_id;")

    rows = manager.peek(source, 2)

    assert len(rows) == 2
    assert rows[0][:2] == ["occ-1", "Parus major"]
    assert rows[1][2] == ""
    assert manager.columns(source) == ["occurrence_id", "scientific_name", "individual_count"]


def test_sql_source_with_bad_statement_raises_source_read_error(tmp_path: Path) -> None:
    database = tmp_path / "birds.db"
    with closing(sqlite3.connect(database)) as conn:
        conn.execute("CREATE TABLE occurrence (occurrence_id TEXT)")
        conn.commit()
    manager = SourceManager(base_dir=tmp_path)

    with pytest.raises(SourceReadError):
        manager.peek(SqlSource(name="db", database="birds.db", sql="SELECT * FROM missing_table"), 5)


def test_describe_reports_location(data_dir: Path) -> None:
    manager = SourceManager(base_dir=data_dir)
    source = FileSource(name="occurrences", path="sources/occurrences.csv", ignore_header_lines=1)

    assert manager.describe(source) == {
        "name": "occurrences",
        "type": "file",
        "location": "sources/occurrences.csv",
        "ignore_header_lines": 1,
    }


def test_headerless_rows_keep_their_own_width(tmp_path: Path) -> None:
    (tmp_path / "ragged.csv").write_text(
        "occ-1,Parus major\nocc-2,Erithacus rubecula,2024-05-02\n\nocc-3\n",
        encoding="utf-8",
    )
    manager = SourceManager(base_dir=tmp_path)
    source = FileSource(name="ragged", path="ragged.csv", ignore_header_lines=0)

    assert manager.peek(source, 5) == [
        ["occ-1", "Parus major"],
        ["occ-2", "Erithacus rubecula", "2024-05-02"],
        ["occ-3"],
    ]
    assert manager.columns(source) == ["Column #1", "Column #2"]


def test_header_source_with_wider_data_row_is_previewed(tmp_path: Path) -> None:
    (tmp_path / "ragged.csv").write_text(
        'id,name\nocc-1,Parus major\nocc-2,"Erithacus rubecula, juvenile",extra\n',
        encoding="utf-8",
    )
    manager = SourceManager(base_dir=tmp_path)
    source = FileSource(name="ragged", path="ragged.csv", ignore_header_lines=1)

    assert manager.peek(source, 5) == [
        ["occ-1", "Parus major"],
        ["occ-2", "Erithacus rubecula, juvenile", "extra"],
    ]
    assert manager.columns(source) == ["id", "name"]

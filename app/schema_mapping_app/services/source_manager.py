from __future__ import annotations

from contextlib import closing
import csv
import io
import logging
from pathlib import Path
import sqlite3
from typing import Any, TextIO
from urllib.request import urlopen

import pandas as pd

from schema_mapping_app.core.errors import SourceReadError
from schema_mapping_app.domain.source import FileSource, Source, SqlSource, TextSource, UrlSource

LOGGER = logging.getLogger(__name__)

URL_TIMEOUT_SECONDS = 30


def _frame_rows(frame: pd.DataFrame) -> list[list[str]]:
    if frame.empty:
        return []
    cleaned = frame.fillna("").astype(str)
    return [[str(value).strip() for value in row] for row in cleaned.itertuples(index=False, name=None)]


class SourceManager:
    """Reads preview rows and column names from resource sources."""

    def __init__(self, *, base_dir: str | Path | None = None) -> None:
        self.base_dir = Path(base_dir) if base_dir is not None else None

    def _location(self, source: TextSource) -> str:
        if isinstance(source, UrlSource):
            if not source.url:
                raise SourceReadError(source.name, "no URL configured")
            return source.url
        if isinstance(source, FileSource):
            if not source.path:
                raise SourceReadError(source.name, "no file path configured")
            path = Path(source.path)
            if not path.is_absolute() and self.base_dir is not None:
                path = self.base_dir / path
            return str(path)
        raise SourceReadError(source.name, f"unsupported text source type {type(source).__name__}")

    def _open_text(self, source: TextSource) -> TextIO:
        location = self._location(source)
        encoding = source.encoding or "utf-8"
        if isinstance(source, UrlSource):
            return io.TextIOWrapper(urlopen(location, timeout=URL_TIMEOUT_SECONDS), encoding=encoding, newline="")
        return open(location, encoding=encoding, newline="")

    def _read_text(self, source: TextSource, *, skip_rows: int, rows: int) -> list[list[str]]:
        # Rows keep their own width; exported files often have ragged trailing fields.
        limit = max(1, int(rows))
        skip = max(0, int(skip_rows))
        collected: list[list[str]] = []
        try:
            with self._open_text(source) as stream:
                reader = csv.reader(stream, delimiter=source.field_delimiter or ",")
                for position, raw_row in enumerate(reader):
                    if position < skip:
                        continue
                    values = [str(value).strip() for value in raw_row]
                    if not any(values):
                        continue
                    collected.append(values)
                    if len(collected) >= limit:
                        break
        except (OSError, ValueError, csv.Error) as exc:
            raise SourceReadError(source.name, str(exc)) from exc
        return collected

    def _read_sql(self, source: SqlSource, *, rows: int) -> pd.DataFrame:
        if not source.database or not source.sql:
            raise SourceReadError(source.name, "database and SQL statement are both required")
        database = Path(source.database)
        if not database.is_absolute() and self.base_dir is not None:
            database = self.base_dir / database
        if not database.exists():
            raise SourceReadError(source.name, f"database not found: {database}")
        statement = source.sql.strip().rstrip(";")
        query = f"SELECT * FROM ({statement}) AS source_preview LIMIT {max(1, int(rows))}"
        try:
            with closing(sqlite3.connect(f"file:{database}?mode=ro", uri=True)) as conn:
                return pd.read_sql_query(query, conn)
        except (sqlite3.Error, pd.errors.DatabaseError) as exc:
            raise SourceReadError(source.name, str(exc)) from exc

    def peek(self, source: Source, rows: int) -> list[list[str]]:
        """Return up to ``rows`` data rows, skipping any configured header lines."""
        if isinstance(source, SqlSource):
            peeked = _frame_rows(self._read_sql(source, rows=rows))
        elif isinstance(source, TextSource):
            peeked = self._read_text(source, skip_rows=source.ignore_header_lines, rows=rows)
        else:
            raise SourceReadError(source.name, f"unsupported source type {type(source).__name__}")
        LOGGER.debug(
            "Source peeked. source=%s rows=%s",
            source.name,
            len(peeked),
            extra={"event": "source_peek", "source": source.name, "row_count": len(peeked)},
        )
        return peeked

    def columns(self, source: Source) -> list[str]:
        if isinstance(source, SqlSource):
            frame = self._read_sql(source, rows=1)
            return [str(name) for name in frame.columns]
        if not isinstance(source, TextSource):
            raise SourceReadError(source.name, f"unsupported source type {type(source).__name__}")
        header = self._read_text(source, skip_rows=0, rows=1)
        if not header:
            return []
        if source.ignore_header_lines <= 0:
            return [f"Column #{position}" for position in range(1, len(header[0]) + 1)]
        return [name or f"Column #{position}" for position, name in enumerate(header[0], start=1)]

    def describe(self, source: Source) -> dict[str, Any]:
        if isinstance(source, SqlSource):
            return {"name": source.name, "type": source.source_type, "location": source.database}
        location = source.url if isinstance(source, UrlSource) else getattr(source, "path", "")
        return {
            "name": source.name,
            "type": source.source_type,
            "location": location,
            "ignore_header_lines": getattr(source, "ignore_header_lines", 0),
        }

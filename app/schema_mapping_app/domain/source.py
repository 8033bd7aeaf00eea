from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from schema_mapping_app.core.errors import ResourceConfigError

SOURCE_TYPE_FILE = "file"
SOURCE_TYPE_URL = "url"
SOURCE_TYPE_SQL = "sql"


@dataclass
class Source(ABC):
    name: str

    source_type = ""

    @property
    def is_file_source(self) -> bool:
        return self.source_type == SOURCE_TYPE_FILE

    @property
    def is_url_source(self) -> bool:
        return self.source_type == SOURCE_TYPE_URL

    @property
    def is_sql_source(self) -> bool:
        return self.source_type == SOURCE_TYPE_SQL

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        ...


@dataclass
class TextSource(Source):
    """A delimited text source which may carry header lines to skip."""

    ignore_header_lines: int = 1
    field_delimiter: str = ","
    encoding: str = "utf-8"

    def _text_options(self) -> dict[str, Any]:
        return {
            "ignore_header_lines": int(self.ignore_header_lines),
            "field_delimiter": self.field_delimiter,
            "encoding": self.encoding,
        }


@dataclass
class FileSource(TextSource):
    path: str = ""

    source_type = SOURCE_TYPE_FILE

    def to_dict(self) -> dict[str, Any]:
        return {"type": SOURCE_TYPE_FILE, "name": self.name, "path": self.path, **self._text_options()}


@dataclass
class UrlSource(TextSource):
    url: str = ""

    source_type = SOURCE_TYPE_URL

    def to_dict(self) -> dict[str, Any]:
        return {"type": SOURCE_TYPE_URL, "name": self.name, "url": self.url, **self._text_options()}


@dataclass
class SqlSource(Source):
    database: str = ""
    sql: str = ""

    source_type = SOURCE_TYPE_SQL

    def to_dict(self) -> dict[str, Any]:
        return {"type": SOURCE_TYPE_SQL, "name": self.name, "database": self.database, "sql": self.sql}


def _safe_delimiter(value: Any) -> str:
    cleaned = str(value or "")
    if cleaned == "\\t":
        return "\t"
    if not cleaned:
        return ","
    return cleaned[0]


def _safe_header_lines(value: Any) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 1


def source_from_dict(payload: dict[str, Any]) -> Source:
    source_type = str(payload.get("type") or "").strip().lower()
    name = str(payload.get("name") or "").strip()
    if not name:
        raise ResourceConfigError("Source entries must have a name.")
    text_options = {
        "ignore_header_lines": _safe_header_lines(payload.get("ignore_header_lines", 1)),
        "field_delimiter": _safe_delimiter(payload.get("field_delimiter", ",")),
        "encoding": str(payload.get("encoding") or "utf-8").strip() or "utf-8",
    }
    if source_type == SOURCE_TYPE_FILE:
        return FileSource(name=name, path=str(payload.get("path") or "").strip(), **text_options)
    if source_type == SOURCE_TYPE_URL:
        return UrlSource(name=name, url=str(payload.get("url") or "").strip(), **text_options)
    if source_type == SOURCE_TYPE_SQL:
        return SqlSource(
            name=name,
            database=str(payload.get("database") or "").strip(),
            sql=str(payload.get("sql") or "").strip(),
        )
    raise ResourceConfigError(f"Unsupported source type for {name}: {source_type or '(missing)'}")

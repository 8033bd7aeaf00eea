from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable

from schema_mapping_app.domain.schema import DataSchema, DataSchemaField
from schema_mapping_app.domain.source import Source

UNSET_INDEX = -9999


@dataclass
class DataSchemaFieldMapping:
    field: DataSchemaField | None = None
    index: int | None = None
    default_value: str | None = None

    @property
    def field_name(self) -> str:
        return self.field.name if self.field is not None else ""

    @property
    def effective_index(self) -> int:
        return self.index if self.index is not None else UNSET_INDEX

    @property
    def is_mapped(self) -> bool:
        return self.effective_index >= 0 or bool(str(self.default_value or "").strip())

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"field": self.field_name}
        if self.index is not None and self.index >= 0:
            payload["index"] = int(self.index)
        if str(self.default_value or "").strip():
            payload["default_value"] = str(self.default_value)
        return payload


def sorted_unique_field_mappings(items: Iterable[DataSchemaFieldMapping]) -> list[DataSchemaFieldMapping]:
    """Order field mappings by field name, keeping the first mapping seen for each field."""
    seen: dict[str, DataSchemaFieldMapping] = {}
    for item in items:
        key = item.field_name
        if key not in seen:
            seen[key] = item
    return [seen[key] for key in sorted(seen)]


def _first_non_empty(peek: list[list[str]], column: int) -> str:
    for row in peek:
        if column < len(row):
            value = str(row[column] if row[column] is not None else "").strip()
            if value:
                return value
    return ""


@dataclass
class DataSchemaMapping:
    data_schema: DataSchema | None = None
    source: Source | None = None
    fields: list[DataSchemaFieldMapping] = field(default_factory=list)
    last_modified: datetime | None = None

    def set_fields(self, items: Iterable[DataSchemaFieldMapping]) -> None:
        self.fields = sorted_unique_field_mappings(items)

    def get_field(self, name: str) -> DataSchemaFieldMapping | None:
        key = str(name or "").strip()
        for item in self.fields:
            if item.field_name == key:
                return item
        return None

    def get_columns(self, peek: list[list[str]] | None) -> list[str]:
        # Headerless sources get positional labels with the first non-empty value as an example.
        if not peek:
            return []
        columns: list[str] = []
        for column in range(len(peek[0])):
            label = f"Column #{column + 1}"
            example = _first_non_empty(peek, column)
            if example:
                label = f"{label} - {example}"
            columns.append(label)
        return columns

    def to_dict(self) -> dict[str, Any]:
        return {
            "data_schema": self.data_schema.identifier if self.data_schema is not None else None,
            "source": self.source.name if self.source is not None else None,
            "fields": [item.to_dict() for item in self.fields],
            "last_modified": self.last_modified.isoformat() if self.last_modified is not None else None,
        }

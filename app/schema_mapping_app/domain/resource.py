from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
import logging
from typing import Any, Callable

from schema_mapping_app.core.errors import ResourceConfigError
from schema_mapping_app.domain.mapping import DataSchemaFieldMapping, DataSchemaMapping
from schema_mapping_app.domain.schema import DataSchema, DataSchemaField
from schema_mapping_app.domain.source import Source, source_from_dict

LOGGER = logging.getLogger(__name__)

SchemaLookup = Callable[[str], "DataSchema | None"]


def _parse_timestamp(value: Any) -> datetime | None:
    text = str(value or "").strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _schema_field(schema: DataSchema, name: str) -> DataSchemaField:
    for sub_schema in schema.sub_schemas:
        found = sub_schema.get_field(name)
        if found is not None:
            return found
    return DataSchemaField(name=name)


def _optional_index(value: Any) -> int | None:
    if value is None or str(value).strip() == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class Resource:
    """A publishable dataset configuration owning sources and data schema mappings."""

    shortname: str
    title: str = ""
    sources: list[Source] = field(default_factory=list)
    data_schema_mappings: list[DataSchemaMapping] = field(default_factory=list)
    modified: datetime | None = None
    mappings_modified: datetime | None = None

    def get_source(self, name: str) -> Source | None:
        key = str(name or "").strip().lower()
        if not key:
            return None
        for source in self.sources:
            if source.name.lower() == key:
                return source
        return None

    def get_data_schema_mappings(self, schema_id: str) -> list[DataSchemaMapping]:
        return [
            mapping
            for mapping in self.data_schema_mappings
            if mapping.data_schema is not None and mapping.data_schema.matches(schema_id)
        ]

    def get_data_schema_mapping(self, schema_id: str, mid: int | None) -> DataSchemaMapping | None:
        if mid is None or mid < 0:
            return None
        mappings = self.get_data_schema_mappings(schema_id)
        if mid >= len(mappings):
            return None
        return mappings[mid]

    def indexed_data_schema_mappings(self) -> list[tuple[int, DataSchemaMapping]]:
        """Pair every mapping with its sequence position among mappings of the same schema."""
        positions: dict[str, int] = {}
        indexed: list[tuple[int, DataSchemaMapping]] = []
        for mapping in self.data_schema_mappings:
            if mapping.data_schema is None:
                continue
            mid = positions.get(mapping.data_schema.identifier, 0)
            positions[mapping.data_schema.identifier] = mid + 1
            indexed.append((mid, mapping))
        return indexed

    def add_data_schema_mapping(self, mapping: DataSchemaMapping) -> int:
        """Append a mapping and return its sequence position among mappings of the same schema."""
        if mapping.data_schema is None:
            raise ValueError("Cannot add a data schema mapping without a data schema.")
        self.data_schema_mappings.append(mapping)
        return len(self.get_data_schema_mappings(mapping.data_schema.identifier)) - 1

    def delete_data_schema_mapping(self, mapping: DataSchemaMapping) -> bool:
        for position, item in enumerate(self.data_schema_mappings):
            if item is mapping:
                del self.data_schema_mappings[position]
                return True
        return False

    def set_mappings_modified(self, timestamp: datetime) -> None:
        self.mappings_modified = timestamp
        self.modified = timestamp

    def to_dict(self) -> dict[str, Any]:
        return {
            "shortname": self.shortname,
            "title": self.title,
            "modified": self.modified.isoformat() if self.modified is not None else None,
            "mappings_modified": self.mappings_modified.isoformat() if self.mappings_modified is not None else None,
            "sources": [source.to_dict() for source in self.sources],
            "data_schema_mappings": [mapping.to_dict() for mapping in self.data_schema_mappings],
        }

    @staticmethod
    def from_dict(payload: dict[str, Any], *, schema_lookup: SchemaLookup) -> "Resource":
        shortname = str(payload.get("shortname") or "").strip()
        if not shortname:
            raise ResourceConfigError("Resource configuration is missing a shortname.")
        resource = Resource(
            shortname=shortname,
            title=str(payload.get("title") or shortname).strip(),
            sources=[source_from_dict(dict(item)) for item in list(payload.get("sources") or []) if isinstance(item, dict)],
            modified=_parse_timestamp(payload.get("modified")),
            mappings_modified=_parse_timestamp(payload.get("mappings_modified")),
        )
        for raw_mapping in list(payload.get("data_schema_mappings") or []):
            if not isinstance(raw_mapping, dict):
                continue
            schema_key = str(raw_mapping.get("data_schema") or "").strip()
            schema = schema_lookup(schema_key) if schema_key else None
            if schema is None:
                LOGGER.warning(
                    "Skipping mapping to unknown data schema. resource=%s schema=%s",
                    shortname,
                    schema_key,
                    extra={"event": "mapping_schema_missing", "resource": shortname, "data_schema": schema_key},
                )
                continue
            mapping = DataSchemaMapping(
                data_schema=schema,
                source=resource.get_source(str(raw_mapping.get("source") or "")),
                last_modified=_parse_timestamp(raw_mapping.get("last_modified")),
            )
            mapping.set_fields(
                DataSchemaFieldMapping(
                    field=_schema_field(schema, str(item.get("field") or "").strip()),
                    index=_optional_index(item.get("index")),
                    default_value=(str(item["default_value"]) if item.get("default_value") is not None else None),
                )
                for item in list(raw_mapping.get("fields") or [])
                if isinstance(item, dict) and str(item.get("field") or "").strip()
            )
            resource.data_schema_mappings.append(mapping)
        return resource

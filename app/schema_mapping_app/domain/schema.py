from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class DataSchemaField:
    name: str
    description: str = ""
    type: str = "string"
    format: str = ""
    required: bool = False
    example: str = ""

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> "DataSchemaField":
        constraints = dict(payload.get("constraints") or {})
        return DataSchemaField(
            name=str(payload.get("name") or "").strip(),
            description=str(payload.get("description") or "").strip(),
            type=str(payload.get("type") or "string").strip() or "string",
            format=str(payload.get("format") or "").strip(),
            required=bool(constraints.get("required", payload.get("required", False))),
            example=str(payload.get("example") or "").strip(),
        )


@dataclass(frozen=True)
class DataSubSchema:
    name: str
    title: str = ""
    fields: tuple[DataSchemaField, ...] = ()

    def get_field(self, name: str) -> DataSchemaField | None:
        key = str(name or "").strip()
        for field in self.fields:
            if field.name == key:
                return field
        return None


@dataclass(frozen=True)
class DataSchema:
    """A named, versioned set of sub-schemas loaded from a definition file."""

    identifier: str
    name: str
    title: str = ""
    version: str = ""
    description: str = ""
    sub_schemas: tuple[DataSubSchema, ...] = ()

    @property
    def primary_sub_schema(self) -> DataSubSchema | None:
        return self.sub_schemas[0] if self.sub_schemas else None

    def matches(self, key: str) -> bool:
        cleaned = str(key or "").strip()
        return bool(cleaned) and cleaned in {self.identifier, self.name}

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> "DataSchema":
        sub_schemas = []
        for raw_sub in list(payload.get("sub_schemas") or payload.get("subSchemas") or []):
            if not isinstance(raw_sub, dict):
                continue
            fields = tuple(
                DataSchemaField.from_dict(item)
                for item in list(raw_sub.get("fields") or [])
                if isinstance(item, dict) and str(item.get("name") or "").strip()
            )
            sub_schemas.append(
                DataSubSchema(
                    name=str(raw_sub.get("name") or "").strip(),
                    title=str(raw_sub.get("title") or "").strip(),
                    fields=fields,
                )
            )
        name = str(payload.get("name") or "").strip()
        return DataSchema(
            identifier=str(payload.get("identifier") or name).strip(),
            name=name,
            title=str(payload.get("title") or name).strip(),
            version=str(payload.get("version") or "").strip(),
            description=str(payload.get("description") or "").strip(),
            sub_schemas=tuple(sub_schemas),
        )

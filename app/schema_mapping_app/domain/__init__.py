"""Domain types for data schemas, sources, resources and their mappings."""

from schema_mapping_app.domain.mapping import (
    UNSET_INDEX,
    DataSchemaFieldMapping,
    DataSchemaMapping,
    sorted_unique_field_mappings,
)
from schema_mapping_app.domain.resource import Resource
from schema_mapping_app.domain.schema import DataSchema, DataSchemaField, DataSubSchema
from schema_mapping_app.domain.source import FileSource, Source, SqlSource, TextSource, UrlSource

__all__ = [
    "UNSET_INDEX",
    "DataSchema",
    "DataSchemaField",
    "DataSchemaFieldMapping",
    "DataSchemaMapping",
    "DataSubSchema",
    "FileSource",
    "Resource",
    "Source",
    "SqlSource",
    "TextSource",
    "UrlSource",
    "sorted_unique_field_mappings",
]

from __future__ import annotations

import pytest

from schema_mapping_app.core.errors import ResourceConfigError
from schema_mapping_app.domain import (
    DataSchema,
    DataSchemaFieldMapping,
    DataSchemaMapping,
    Resource,
)
from schema_mapping_app.domain.source import Source, TextSource, source_from_dict

from conftest import TEST_SCHEMA


def _schema(identifier: str) -> DataSchema:
    return DataSchema.from_dict({**TEST_SCHEMA, "identifier": identifier, "name": identifier})


def test_get_columns_labels_each_peeked_column() -> None:
    mapping = DataSchemaMapping()

    assert mapping.get_columns([]) == []
    assert mapping.get_columns([["", "b"], ["a", ""]]) == ["Column #1 - a", "Column #2 - b"]
    assert mapping.get_columns([["", ""]]) == ["Column #1", "Column #2"]


def test_field_mapping_is_mapped_by_index_or_default() -> None:
    assert DataSchemaFieldMapping(index=0).is_mapped
    assert DataSchemaFieldMapping(default_value="x").is_mapped
    assert not DataSchemaFieldMapping(index=-9999, default_value=" ").is_mapped
    assert DataSchemaFieldMapping().effective_index == -9999


def test_mapping_ids_are_positions_within_one_schema() -> None:
    first, second = _schema("a"), _schema("b")
    resource = Resource(shortname="birds")

    assert resource.add_data_schema_mapping(DataSchemaMapping(data_schema=first)) == 0
    assert resource.add_data_schema_mapping(DataSchemaMapping(data_schema=second)) == 0
    assert resource.add_data_schema_mapping(DataSchemaMapping(data_schema=first)) == 1

    assert [mid for mid, _mapping in resource.indexed_data_schema_mappings()] == [0, 0, 1]
    assert resource.get_data_schema_mapping("a", 1) is resource.data_schema_mappings[2]
    assert resource.get_data_schema_mapping("a", 2) is None
    assert resource.get_data_schema_mapping("b", -1) is None


def test_adding_mapping_without_schema_is_rejected() -> None:
    with pytest.raises(ValueError):
        Resource(shortname="birds").add_data_schema_mapping(DataSchemaMapping())


def test_delete_matches_mapping_identity() -> None:
    schema = _schema("a")
    resource = Resource(shortname="birds")
    kept = DataSchemaMapping(data_schema=schema)
    removed = DataSchemaMapping(data_schema=schema)
    resource.add_data_schema_mapping(kept)
    resource.add_data_schema_mapping(removed)

    assert resource.delete_data_schema_mapping(removed) is True
    assert resource.delete_data_schema_mapping(removed) is False
    assert resource.data_schema_mappings == [kept]
    assert resource.data_schema_mappings[0] is kept


@pytest.mark.parametrize(
    "payload",
    [
        {"type": "file", "name": ""},
        {"type": "ftp", "name": "remote"},
    ],
)
def test_invalid_source_entries_raise_config_error(payload: dict) -> None:
    with pytest.raises(ResourceConfigError):
        source_from_dict(payload)


def test_sql_source_round_trips_through_dict() -> None:
    source = source_from_dict({"type": "SQL", "name": "db", "database": "birds.db", "sql": "SELECT 1"})

    assert source.is_sql_source
    assert source.to_dict() == {"type": "sql", "name": "db", "database": "birds.db", "sql": "SELECT 1"}


@pytest.mark.parametrize("source_class", [Source, TextSource])
def test_base_source_types_cannot_be_instantiated(source_class: type) -> None:
    with pytest.raises(TypeError):
        source_class(name="occurrences")

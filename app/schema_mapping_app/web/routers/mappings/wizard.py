from __future__ import annotations

from datetime import UTC, datetime
import logging
from typing import Any, Mapping

from schema_mapping_app.core.defaults import DEFAULT_PEEK_ROWS
from schema_mapping_app.core.errors import SourceReadError
from schema_mapping_app.domain.mapping import DataSchemaFieldMapping, DataSchemaMapping
from schema_mapping_app.domain.schema import DataSchema, DataSchemaField
from schema_mapping_app.services.resource_manager import ResourceManager
from schema_mapping_app.services.schema_manager import DataSchemaManager
from schema_mapping_app.services.source_manager import SourceManager
from schema_mapping_app.web.routers.mappings.context import (
    RESULT_SOURCE,
    RESULT_SUCCESS,
    MappingRequestContext,
)

LOGGER = logging.getLogger(__name__)

MSG_SCHEMA_INVALID = "Please select a valid data schema."
MSG_MAPPING_NOT_FOUND = "The requested data schema mapping was not found."
MSG_SOURCE_INVALID = "The selected source does not exist in this resource."
MSG_NO_COLUMNS = "No columns could be read from source {name}."
MSG_SOURCE_UNREADABLE = "Source {name} could not be read: {reason}"

FIELD_NAME_KEY = "field_name"
FIELD_INDEX_KEY = "field_index"
FIELD_DEFAULT_KEY = "field_default"


def resolve_mapping(ctx: MappingRequestContext, *, schema_manager: DataSchemaManager) -> MappingRequestContext:
    """Find or create the mapping the request refers to.

    Without a mapping sequence id a new mapping is created for the requested data
    schema. With one, the stored mapping at that position is used. Unknown schemas
    and stale positions are recorded as action errors.
    """
    params = ctx.params
    if ctx.resource is None or not params.schema_id:
        ctx.not_found = True
        return ctx

    if params.mid_invalid:
        ctx.fail(MSG_MAPPING_NOT_FOUND)
        return ctx

    if params.mid is None:
        data_schema = schema_manager.get(params.schema_id)
        if data_schema is None:
            # Covers the "select one" placeholder option as well as unknown identifiers.
            ctx.fail(MSG_SCHEMA_INVALID)
            return ctx
        ctx.mapping = DataSchemaMapping(data_schema=data_schema)
        return ctx

    mappings = ctx.resource.get_data_schema_mappings(params.schema_id)
    if not 0 <= params.mid < len(mappings):
        LOGGER.info(
            "Stale data schema mapping reference. resource=%s schema=%s mid=%s",
            ctx.resource.shortname,
            params.schema_id,
            params.mid,
            extra={"event": "mapping_not_found", "resource": ctx.resource.shortname, "mid": params.mid},
        )
        ctx.fail(MSG_MAPPING_NOT_FOUND)
        return ctx
    ctx.mapping = mappings[params.mid]
    ctx.mid = params.mid
    return ctx


def read_source(
    ctx: MappingRequestContext,
    *,
    source_manager: SourceManager,
    peek_rows: int = DEFAULT_PEEK_ROWS,
) -> list[str]:
    source = ctx.mapping.source if ctx.mapping is not None else None
    if source is None:
        ctx.peek = []
        ctx.columns = []
        return ctx.columns

    try:
        ctx.peek = source_manager.peek(source, peek_rows)
        # Headerless text sources are numbered, using the first non-empty value as an example.
        if (source.is_url_source or source.is_file_source) and source.ignore_header_lines == 0:
            ctx.columns = ctx.mapping.get_columns(ctx.peek)
        else:
            ctx.columns = source_manager.columns(source)
    except SourceReadError as exc:
        LOGGER.warning(
            "Source preview failed. source=%s reason=%s",
            source.name,
            exc.reason,
            extra={"event": "source_read_failed", "source": source.name},
        )
        ctx.peek = []
        ctx.columns = []
        ctx.add_action_warning(MSG_SOURCE_UNREADABLE.format(name=source.name, reason=exc.reason))
        return ctx.columns

    if not ctx.columns and source.name:
        ctx.add_action_warning(MSG_NO_COLUMNS.format(name=source.name))
    return ctx.columns


def populate_field_mapping(mapping: DataSchemaMapping, field: DataSchemaField) -> DataSchemaFieldMapping:
    """Return the stored field mapping for ``field`` or a fresh, unmapped one."""
    field_mapping = mapping.get_field(field.name)
    if field_mapping is None:
        field_mapping = DataSchemaFieldMapping()
    field_mapping.field = field
    return field_mapping


def build_field_slots(mapping: DataSchemaMapping) -> list[DataSchemaFieldMapping]:
    if mapping.data_schema is None:
        return []
    # TODO: build slots for sub-schemas after the first once the field form can group them.
    sub_schema = mapping.data_schema.primary_sub_schema
    if sub_schema is None:
        return []
    return [populate_field_mapping(mapping, field) for field in sub_schema.fields]


def prepare_mapping(
    ctx: MappingRequestContext,
    *,
    schema_manager: DataSchemaManager,
    source_manager: SourceManager,
    peek_rows: int = DEFAULT_PEEK_ROWS,
) -> MappingRequestContext:
    resolve_mapping(ctx, schema_manager=schema_manager)
    if ctx.has_errors or ctx.mapping is None or ctx.mapping.data_schema is None:
        return ctx

    if ctx.mapping.source is None:
        if not ctx.params.source:
            ctx.result = RESULT_SOURCE
            return ctx
        source = ctx.resource.get_source(ctx.params.source)
        if source is None:
            ctx.fail(MSG_SOURCE_INVALID)
            return ctx
        ctx.mapping.source = source

    read_source(ctx, source_manager=source_manager, peek_rows=peek_rows)
    ctx.fields = build_field_slots(ctx.mapping)
    return ctx


def _parse_index(raw: Any) -> int | None:
    text = str(raw if raw is not None else "").strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def _form_list(form: Any, key: str) -> list[str]:
    if hasattr(form, "getlist"):
        return [str(item) for item in form.getlist(key)]
    raw = form.get(key) if isinstance(form, Mapping) else None
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return [str(item) for item in raw]
    return [str(raw)]


def bind_field_mappings(form: Any, data_schema: DataSchema | None) -> list[DataSchemaFieldMapping]:
    """Deserialise the submitted field-mapping slots.

    Slots are posted as parallel ``field_name``/``field_index``/``field_default``
    lists. Names that are not fields of the mapped sub-schema are ignored.
    """
    if data_schema is None or data_schema.primary_sub_schema is None:
        return []
    sub_schema = data_schema.primary_sub_schema
    names = _form_list(form, FIELD_NAME_KEY)
    indexes = _form_list(form, FIELD_INDEX_KEY)
    defaults = _form_list(form, FIELD_DEFAULT_KEY)

    submitted: list[DataSchemaFieldMapping] = []
    for position, name in enumerate(names):
        schema_field = sub_schema.get_field(name)
        if schema_field is None:
            continue
        default_value = defaults[position] if position < len(defaults) else ""
        submitted.append(
            DataSchemaFieldMapping(
                field=schema_field,
                index=_parse_index(indexes[position] if position < len(indexes) else None),
                default_value=default_value or None,
            )
        )
    return submitted


def _save_timestamp(ctx: MappingRequestContext, now: datetime | None) -> datetime:
    timestamp = now or datetime.now(UTC)
    previous = [
        value
        for value in (
            ctx.resource.mappings_modified if ctx.resource is not None else None,
            ctx.mapping.last_modified if ctx.mapping is not None else None,
        )
        if value is not None
    ]
    if previous and timestamp < max(previous):
        timestamp = max(previous)
    return timestamp


def save_mapping(
    ctx: MappingRequestContext,
    submitted_fields: list[DataSchemaFieldMapping],
    *,
    schema_manager: DataSchemaManager,
    resource_manager: ResourceManager,
    now: datetime | None = None,
) -> str:
    """Store the mapping in its resource and persist the whole resource configuration.

    A mapping the resource does not hold yet is appended and receives its sequence
    id. For stored mappings only slots bound to a column or carrying a default value
    are kept. Persistence errors propagate to the caller.
    """
    resource = ctx.resource
    mapping = ctx.mapping
    if resource is None or mapping is None:
        raise ValueError("save_mapping requires a prepared resource and mapping.")

    if mapping.data_schema is None:
        mapping.data_schema = schema_manager.get(ctx.params.schema_name)

    if resource.get_data_schema_mapping(ctx.params.schema_id, ctx.mid) is None:
        ctx.mid = resource.add_data_schema_mapping(mapping)
        event = "mapping_created"
    else:
        mapping.set_fields(item for item in submitted_fields if item.is_mapped)
        event = "mapping_updated"

    last_modified = _save_timestamp(ctx, now)
    mapping.last_modified = last_modified
    resource.set_mappings_modified(last_modified)

    resource_manager.save(resource)
    LOGGER.info(
        "Data schema mapping saved. resource=%s schema=%s mid=%s fields=%s",
        resource.shortname,
        mapping.data_schema.identifier if mapping.data_schema is not None else "",
        ctx.mid,
        len(mapping.fields),
        extra={"event": event, "resource": resource.shortname, "mid": ctx.mid},
    )
    ctx.result = RESULT_SUCCESS
    return ctx.result


def delete_mapping(
    ctx: MappingRequestContext,
    *,
    resource_manager: ResourceManager,
    now: datetime | None = None,
) -> str:
    resource = ctx.resource
    mapping = ctx.mapping
    if resource is None or mapping is None or ctx.mid is None:
        ctx.fail(MSG_MAPPING_NOT_FOUND)
        return ctx.result
    if not resource.delete_data_schema_mapping(mapping):
        ctx.fail(MSG_MAPPING_NOT_FOUND)
        return ctx.result

    resource.set_mappings_modified(_save_timestamp(ctx, now))
    resource_manager.save(resource)
    LOGGER.info(
        "Data schema mapping deleted. resource=%s schema=%s mid=%s",
        resource.shortname,
        ctx.params.schema_id,
        ctx.mid,
        extra={"event": "mapping_deleted", "resource": resource.shortname, "mid": ctx.mid},
    )
    ctx.result = RESULT_SUCCESS
    return ctx.result

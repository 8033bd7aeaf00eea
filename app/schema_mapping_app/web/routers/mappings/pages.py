from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

from schema_mapping_app.domain.resource import Resource
from schema_mapping_app.web.core.template_context import base_template_context
from schema_mapping_app.web.http.flash import add_flashes
from schema_mapping_app.web.routers.mappings.common import (
    load_prepared_context,
    mapping_url,
    mappings_module,
    raise_not_found,
    redirect_to_overview,
)
from schema_mapping_app.web.routers.mappings.context import (
    RESULT_ERROR,
    RESULT_SOURCE,
    PARAM_RESOURCE,
    extract_early_params,
)

router = APIRouter()


def _mapping_rows(resource: Resource) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for mid, mapping in resource.indexed_data_schema_mappings():
        schema_id = mapping.data_schema.identifier
        rows.append(
            {
                "schema_id": schema_id,
                "schema_title": mapping.data_schema.title or mapping.data_schema.name,
                "mid": mid,
                "source_name": mapping.source.name if mapping.source is not None else "",
                "mapped_fields": len(mapping.fields),
                "last_modified": mapping.last_modified,
                "edit_url": mapping_url(resource.shortname, schema_id, mid),
            }
        )
    return rows


@router.get("/manage/resource")
def resource_overview(request: Request):
    module = mappings_module()
    config = module.get_config()
    shortname = str(request.query_params.get(PARAM_RESOURCE, "") or "").strip()
    resource = module.get_resource_manager().get(shortname) if shortname else None
    if resource is None:
        raise_not_found()

    source_manager = module.get_source_manager()
    context = base_template_context(
        request,
        config,
        title=f"Resource {resource.title}",
        extra={
            "resource": resource,
            "sources": [source_manager.describe(source) for source in resource.sources],
            "schemas": module.get_schema_manager().list_schemas(),
            "mappings": _mapping_rows(resource),
        },
    )
    return request.app.state.templates.TemplateResponse(request, "resource_overview.html", context)


@router.get("/manage/mapping")
def mapping_page(request: Request):
    module = mappings_module()
    config = module.get_config()
    params = extract_early_params(request.query_params)
    ctx = load_prepared_context(params)
    if ctx.not_found:
        raise_not_found()
    if ctx.result == RESULT_ERROR:
        return redirect_to_overview(request, ctx)

    add_flashes(request, ctx.action_warnings, "warning")
    data_schema = ctx.mapping.data_schema
    extra = {
        "resource": ctx.resource,
        "mapping": ctx.mapping,
        "data_schema": data_schema,
        "mid": ctx.mid,
    }
    if ctx.result == RESULT_SOURCE:
        context = base_template_context(
            request,
            config,
            title=f"Select source for {data_schema.title or data_schema.name}",
            extra={**extra, "sources": ctx.resource.sources},
        )
        return request.app.state.templates.TemplateResponse(request, "mapping_source.html", context)

    context = base_template_context(
        request,
        config,
        title=f"Map {data_schema.title or data_schema.name}",
        extra={
            **extra,
            "sub_schema": data_schema.primary_sub_schema,
            "columns": ctx.columns,
            "peek": ctx.peek,
            "fields": ctx.fields,
        },
    )
    return request.app.state.templates.TemplateResponse(request, "mapping_fields.html", context)

from __future__ import annotations

from urllib.parse import urlencode

from fastapi import HTTPException, Request
from fastapi.responses import RedirectResponse

from schema_mapping_app.web.http.flash import add_flashes
from schema_mapping_app.web.routers.mappings.context import (
    PARAM_MAPPING_ID,
    PARAM_RESOURCE,
    PARAM_SCHEMA_ID,
    MappingRequestContext,
    MappingRequestParams,
)
from schema_mapping_app.web.routers.mappings.wizard import prepare_mapping, resolve_mapping

MSG_RESOURCE_NOT_FOUND = "Resource not found."


def mappings_module():
    # Resolve through package namespace so tests can monkeypatch mappings.get_resource_manager and friends.
    from schema_mapping_app.web.routers import mappings as mappings_module

    return mappings_module


def overview_url(shortname: str) -> str:
    return f"/manage/resource?{urlencode({PARAM_RESOURCE: shortname})}"


def mapping_url(shortname: str, schema_id: str, mid: int | None = None) -> str:
    query = {PARAM_RESOURCE: shortname, PARAM_SCHEMA_ID: schema_id}
    if mid is not None:
        query[PARAM_MAPPING_ID] = str(mid)
    return f"/manage/mapping?{urlencode(query)}"


def redirect_to_overview(request: Request, ctx: MappingRequestContext) -> RedirectResponse:
    add_flashes(request, ctx.action_errors, "error")
    add_flashes(request, ctx.action_warnings, "warning")
    return RedirectResponse(url=overview_url(ctx.params.resource), status_code=303)


def raise_not_found() -> None:
    raise HTTPException(status_code=404, detail=MSG_RESOURCE_NOT_FOUND)


def new_context(params: MappingRequestParams) -> MappingRequestContext:
    module = mappings_module()
    resource = module.get_resource_manager().get(params.resource) if params.resource else None
    return MappingRequestContext(params=params, resource=resource)


def load_prepared_context(params: MappingRequestParams) -> MappingRequestContext:
    module = mappings_module()
    ctx = new_context(params)
    return prepare_mapping(
        ctx,
        schema_manager=module.get_schema_manager(),
        source_manager=module.get_source_manager(),
        peek_rows=module.get_config().peek_rows,
    )


def load_resolved_context(params: MappingRequestParams) -> MappingRequestContext:
    ctx = new_context(params)
    return resolve_mapping(ctx, schema_manager=mappings_module().get_schema_manager())

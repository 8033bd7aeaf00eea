from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse

from schema_mapping_app.web.http.flash import add_flash, add_flashes
from schema_mapping_app.web.routers.mappings.common import (
    load_prepared_context,
    load_resolved_context,
    mapping_url,
    mappings_module,
    overview_url,
    raise_not_found,
    redirect_to_overview,
)
from schema_mapping_app.web.routers.mappings.context import (
    RESULT_ERROR,
    RESULT_SOURCE,
    extract_early_params,
)
from schema_mapping_app.web.routers.mappings.wizard import (
    bind_field_mappings,
    delete_mapping,
    save_mapping,
)

router = APIRouter()

MSG_LOCKED_MODE = "Application is in locked mode. Mapping changes are disabled."
MSG_SOURCE_REQUIRED = "Please select a source before mapping fields."


@router.post("/manage/mapping/save")
async def mapping_save(request: Request):
    module = mappings_module()
    config = module.get_config()
    form = await request.form()
    params = extract_early_params(request.query_params, form)

    if config.locked_mode:
        if not params.resource:
            raise_not_found()
        add_flash(request, MSG_LOCKED_MODE, "error")
        return RedirectResponse(url=overview_url(params.resource), status_code=303)

    ctx = load_prepared_context(params)
    if ctx.not_found:
        raise_not_found()
    if ctx.result == RESULT_ERROR:
        return redirect_to_overview(request, ctx)
    if ctx.result == RESULT_SOURCE:
        add_flash(request, MSG_SOURCE_REQUIRED, "error")
        return RedirectResponse(url=mapping_url(params.resource, params.schema_id, ctx.mid), status_code=303)

    submitted = bind_field_mappings(form, ctx.mapping.data_schema)
    save_mapping(
        ctx,
        submitted,
        schema_manager=module.get_schema_manager(),
        resource_manager=module.get_resource_manager(),
    )
    add_flash(request, "Data schema mapping saved.", "success")
    add_flashes(request, ctx.action_warnings, "warning")
    return RedirectResponse(url=mapping_url(params.resource, params.schema_id, ctx.mid), status_code=303)


@router.post("/manage/mapping/delete")
async def mapping_delete(request: Request):
    module = mappings_module()
    config = module.get_config()
    form = await request.form()
    params = extract_early_params(request.query_params, form)

    if config.locked_mode:
        if not params.resource:
            raise_not_found()
        add_flash(request, MSG_LOCKED_MODE, "error")
        return RedirectResponse(url=overview_url(params.resource), status_code=303)

    ctx = load_resolved_context(params)
    if ctx.not_found:
        raise_not_found()
    if ctx.result != RESULT_ERROR:
        delete_mapping(ctx, resource_manager=module.get_resource_manager())
    if ctx.result == RESULT_ERROR:
        return redirect_to_overview(request, ctx)
    add_flash(request, "Data schema mapping deleted.", "success")
    return RedirectResponse(url=overview_url(params.resource), status_code=303)


@router.post("/manage/mapping/cancel")
async def mapping_cancel(request: Request):
    form = await request.form()
    params = extract_early_params(request.query_params, form)
    if not params.resource:
        raise_not_found()
    return RedirectResponse(url=overview_url(params.resource), status_code=303)

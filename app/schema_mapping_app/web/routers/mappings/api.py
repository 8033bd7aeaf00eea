from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from schema_mapping_app.domain.resource import Resource
from schema_mapping_app.web.http.errors import ERROR_CODE_NOT_FOUND, ApiError
from schema_mapping_app.web.routers.mappings.common import mappings_module

router = APIRouter()


def _mapping_payloads(resource: Resource) -> list[dict[str, Any]]:
    return [{"mid": mid, **mapping.to_dict()} for mid, mapping in resource.indexed_data_schema_mappings()]


@router.get("/api/resources/{shortname}/mappings")
def list_resource_mappings(shortname: str):
    resource = mappings_module().get_resource_manager().get(shortname)
    if resource is None:
        raise ApiError(
            status_code=404,
            code=ERROR_CODE_NOT_FOUND,
            message=f"Resource {shortname} was not found.",
        )
    return {
        "ok": True,
        "resource": resource.shortname,
        "mappings_modified": resource.mappings_modified.isoformat() if resource.mappings_modified else None,
        "mappings": _mapping_payloads(resource),
    }

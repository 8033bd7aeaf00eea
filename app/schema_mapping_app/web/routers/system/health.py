from __future__ import annotations

from fastapi import APIRouter

from schema_mapping_app.web.core.runtime import get_config, get_schema_manager

router = APIRouter()


@router.get("/health")
def health():
    config = get_config()
    return {
        "status": "ok",
        "env": config.env,
        "locked_mode": bool(config.locked_mode),
        "data_schemas": len(get_schema_manager().list_schemas()),
    }

from __future__ import annotations

from fastapi import APIRouter

from schema_mapping_app.web.routers.mappings.actions import router as actions_router
from schema_mapping_app.web.routers.mappings.api import router as api_router
from schema_mapping_app.web.routers.mappings.pages import router as pages_router


router = APIRouter()
router.include_router(pages_router)
router.include_router(actions_router)
router.include_router(api_router)

from fastapi import APIRouter

from schema_mapping_app.web.routers.mappings import router as mappings_router
from schema_mapping_app.web.routers.system import router as system_router


router = APIRouter()
router.include_router(system_router)
router.include_router(mappings_router)

from schema_mapping_app.web.routers.mappings.routes import router
from schema_mapping_app.web.core.runtime import (
    get_config,
    get_resource_manager,
    get_schema_manager,
    get_source_manager,
)

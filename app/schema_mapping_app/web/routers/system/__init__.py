from schema_mapping_app.web.routers.system.health import router

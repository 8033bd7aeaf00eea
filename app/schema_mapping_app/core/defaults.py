from __future__ import annotations

DEFAULT_ENV_NAME = "dev"
DEFAULT_DEV_ENV_NAMES = ("dev", "local", "development")
DEFAULT_DATA_DIR = "data"
DEFAULT_SCHEMAS_DIR = "app/schema_mapping_app/data_schemas"
DEFAULT_PEEK_ROWS = 5
DEFAULT_SESSION_SECRET = "schema-mapping-dev-secret"
RESOURCE_CONFIG_FILENAME = "resource.json"

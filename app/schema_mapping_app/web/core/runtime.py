from __future__ import annotations

from functools import lru_cache

from schema_mapping_app.core.config import AppConfig
from schema_mapping_app.services.resource_manager import ResourceManager
from schema_mapping_app.services.schema_manager import DataSchemaManager
from schema_mapping_app.services.source_manager import SourceManager


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    return AppConfig.from_env()


@lru_cache(maxsize=1)
def get_schema_manager() -> DataSchemaManager:
    return DataSchemaManager(get_config().schemas_dir)


@lru_cache(maxsize=1)
def get_source_manager() -> SourceManager:
    return SourceManager(base_dir=get_config().data_dir)


@lru_cache(maxsize=1)
def get_resource_manager() -> ResourceManager:
    config = get_config()
    return ResourceManager(config.resources_dir, get_schema_manager())


def clear_runtime_caches() -> None:
    get_resource_manager.cache_clear()
    get_source_manager.cache_clear()
    get_schema_manager.cache_clear()
    get_config.cache_clear()

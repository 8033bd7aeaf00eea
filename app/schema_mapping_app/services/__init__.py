"""Schema, source and resource managers used by the mapping wizard."""

from schema_mapping_app.services.resource_manager import ResourceManager
from schema_mapping_app.services.schema_manager import DataSchemaManager
from schema_mapping_app.services.source_manager import SourceManager

__all__ = [
    "DataSchemaManager",
    "ResourceManager",
    "SourceManager",
]

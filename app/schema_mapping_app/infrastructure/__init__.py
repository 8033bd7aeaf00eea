"""Infrastructure adapters for logging."""

from schema_mapping_app.infrastructure.logging import setup_app_logging

__all__ = [
    "setup_app_logging",
]

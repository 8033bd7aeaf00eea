from __future__ import annotations

import json
import logging
from pathlib import Path
import threading

from schema_mapping_app.core.errors import DataSchemaLoadError
from schema_mapping_app.domain.schema import DataSchema

LOGGER = logging.getLogger(__name__)


class DataSchemaManager:
    """Loads data schema definitions from a directory of JSON files.

    Definitions are read once on first use and then served from memory.
    """

    def __init__(self, schemas_dir: str | Path) -> None:
        self.schemas_dir = Path(schemas_dir)
        self._lock = threading.Lock()
        self._schemas: list[DataSchema] | None = None

    def _load_file(self, path: Path) -> DataSchema:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise DataSchemaLoadError(str(path), str(exc)) from exc
        if not isinstance(payload, dict):
            raise DataSchemaLoadError(str(path), "top-level JSON value must be an object")
        schema = DataSchema.from_dict(payload)
        if not schema.name:
            raise DataSchemaLoadError(str(path), "schema name is required")
        if not schema.sub_schemas:
            raise DataSchemaLoadError(str(path), "at least one sub-schema is required")
        return schema

    def _load_all(self) -> list[DataSchema]:
        if not self.schemas_dir.is_dir():
            LOGGER.warning(
                "Data schema directory does not exist. path=%s",
                self.schemas_dir,
                extra={"event": "schemas_dir_missing", "path": str(self.schemas_dir)},
            )
            return []
        schemas: list[DataSchema] = []
        for path in sorted(self.schemas_dir.glob("*.json")):
            try:
                schemas.append(self._load_file(path))
            except DataSchemaLoadError:
                LOGGER.exception(
                    "Skipping invalid data schema definition. path=%s",
                    path,
                    extra={"event": "schema_load_failed", "path": str(path)},
                )
        LOGGER.info(
            "Data schemas loaded. count=%s path=%s",
            len(schemas),
            self.schemas_dir,
            extra={"event": "schemas_loaded", "schema_count": len(schemas)},
        )
        return schemas

    def list_schemas(self) -> list[DataSchema]:
        with self._lock:
            if self._schemas is None:
                self._schemas = self._load_all()
            return list(self._schemas)

    def get(self, identifier: str | None) -> DataSchema | None:
        key = str(identifier or "").strip()
        if not key:
            return None
        for schema in self.list_schemas():
            if schema.matches(key):
                return schema
        return None

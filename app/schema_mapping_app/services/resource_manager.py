from __future__ import annotations

import json
import logging
import os
from pathlib import Path
import re
import tempfile
import threading

from schema_mapping_app.core.defaults import RESOURCE_CONFIG_FILENAME
from schema_mapping_app.core.errors import ResourceConfigError, ResourcePersistenceError
from schema_mapping_app.domain.resource import Resource
from schema_mapping_app.services.schema_manager import DataSchemaManager

LOGGER = logging.getLogger(__name__)
RESOURCE_WRITE_LOCK = threading.Lock()
SHORTNAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{0,99}$")


def safe_shortname(value: str | None) -> str:
    cleaned = str(value or "").strip()
    if SHORTNAME_PATTERN.match(cleaned):
        return cleaned
    return ""


class ResourceManager:
    """Persists whole resource configurations as one JSON document per resource."""

    def __init__(self, resources_dir: str | Path, schema_manager: DataSchemaManager) -> None:
        self.resources_dir = Path(resources_dir)
        self.schema_manager = schema_manager

    def _config_path(self, shortname: str) -> Path:
        return self.resources_dir / shortname / RESOURCE_CONFIG_FILENAME

    def get(self, shortname: str | None) -> Resource | None:
        key = safe_shortname(shortname)
        if not key:
            return None
        path = self._config_path(key)
        if not path.is_file():
            return None
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise ResourceConfigError(f"Resource configuration {path} could not be read: {exc}") from exc
        if not isinstance(payload, dict):
            raise ResourceConfigError(f"Resource configuration {path} must be a JSON object.")
        payload.setdefault("shortname", key)
        return Resource.from_dict(payload, schema_lookup=self.schema_manager.get)

    def save(self, resource: Resource) -> None:
        key = safe_shortname(resource.shortname)
        if not key:
            raise ResourcePersistenceError(str(resource.shortname), "invalid resource shortname")
        path = self._config_path(key)
        body = json.dumps(resource.to_dict(), indent=2, ensure_ascii=False)
        with RESOURCE_WRITE_LOCK:
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(prefix=".resource-", suffix=".json", dir=str(path.parent))
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as handle:
                        handle.write(body)
                    os.replace(tmp_name, path)
                except BaseException:
                    Path(tmp_name).unlink(missing_ok=True)
                    raise
            except OSError as exc:
                LOGGER.error(
                    "Resource configuration write failed. resource=%s path=%s",
                    key,
                    path,
                    extra={"event": "resource_save_failed", "resource": key, "path": str(path)},
                )
                raise ResourcePersistenceError(key, str(exc)) from exc
        LOGGER.info(
            "Resource configuration saved. resource=%s mappings=%s",
            key,
            len(resource.data_schema_mappings),
            extra={
                "event": "resource_saved",
                "resource": key,
                "mapping_count": len(resource.data_schema_mappings),
            },
        )

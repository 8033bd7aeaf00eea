from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from schema_mapping_app.core.defaults import (
    DEFAULT_DATA_DIR,
    DEFAULT_DEV_ENV_NAMES,
    DEFAULT_ENV_NAME,
    DEFAULT_PEEK_ROWS,
    DEFAULT_SCHEMAS_DIR,
)
from schema_mapping_app.core.env import (
    SCHEMAMAP_DATA_DIR,
    SCHEMAMAP_ENV,
    SCHEMAMAP_LOCKED_MODE,
    SCHEMAMAP_PEEK_ROWS,
    SCHEMAMAP_SCHEMAS_DIR,
    get_env,
    get_env_bool,
    get_env_int,
)


DEV_ENV_NAMES = set(DEFAULT_DEV_ENV_NAMES)


def _repo_root() -> Path:
    # app/schema_mapping_app/core/config.py -> repo root
    # parents[0]=core, [1]=schema_mapping_app, [2]=app, [3]=repo root
    return Path(__file__).resolve().parents[3]


def _resolve_repo_relative_path(raw_path: str) -> str:
    value = str(raw_path or "").strip()
    if not value:
        return value
    path = Path(value)
    if path.is_absolute():
        return str(path)
    return str((_repo_root() / path).resolve())


@dataclass(frozen=True)
class AppConfig:
    data_dir: str
    schemas_dir: str
    env: str = DEFAULT_ENV_NAME
    peek_rows: int = DEFAULT_PEEK_ROWS
    locked_mode: bool = False

    @property
    def is_dev_env(self) -> bool:
        return self.env in DEV_ENV_NAMES

    @property
    def resources_dir(self) -> Path:
        return Path(self.data_dir) / "resources"

    @staticmethod
    def from_env() -> "AppConfig":
        env_name = get_env(SCHEMAMAP_ENV, DEFAULT_ENV_NAME).lower() or DEFAULT_ENV_NAME
        return AppConfig(
            data_dir=_resolve_repo_relative_path(get_env(SCHEMAMAP_DATA_DIR, DEFAULT_DATA_DIR)),
            schemas_dir=_resolve_repo_relative_path(get_env(SCHEMAMAP_SCHEMAS_DIR, DEFAULT_SCHEMAS_DIR)),
            env=env_name,
            peek_rows=get_env_int(SCHEMAMAP_PEEK_ROWS, default=DEFAULT_PEEK_ROWS, min_value=1, max_value=100),
            locked_mode=get_env_bool(SCHEMAMAP_LOCKED_MODE, default=False),
        )

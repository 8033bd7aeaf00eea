from __future__ import annotations

import os

SCHEMAMAP_ENV = "SCHEMAMAP_ENV"
SCHEMAMAP_DATA_DIR = "SCHEMAMAP_DATA_DIR"
SCHEMAMAP_SCHEMAS_DIR = "SCHEMAMAP_SCHEMAS_DIR"
SCHEMAMAP_PEEK_ROWS = "SCHEMAMAP_PEEK_ROWS"
SCHEMAMAP_LOCKED_MODE = "SCHEMAMAP_LOCKED_MODE"
SCHEMAMAP_SESSION_SECRET = "SCHEMAMAP_SESSION_SECRET"
SCHEMAMAP_ALLOW_DEFAULT_SESSION_SECRET = "SCHEMAMAP_ALLOW_DEFAULT_SESSION_SECRET"
SCHEMAMAP_SESSION_HTTPS_ONLY = "SCHEMAMAP_SESSION_HTTPS_ONLY"
SCHEMAMAP_SECURITY_HEADERS_ENABLED = "SCHEMAMAP_SECURITY_HEADERS_ENABLED"
SCHEMAMAP_REQUEST_ID_HEADER_ENABLED = "SCHEMAMAP_REQUEST_ID_HEADER_ENABLED"
SCHEMAMAP_CSRF_ENABLED = "SCHEMAMAP_CSRF_ENABLED"
SCHEMAMAP_ERROR_INCLUDE_DETAILS = "SCHEMAMAP_ERROR_INCLUDE_DETAILS"
SCHEMAMAP_LOG_LEVEL = "SCHEMAMAP_LOG_LEVEL"
SCHEMAMAP_LOG_JSON = "SCHEMAMAP_LOG_JSON"
SCHEMAMAP_LOG_CAPTURE_ROOT = "SCHEMAMAP_LOG_CAPTURE_ROOT"

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "no", "n", "off"}


def get_env(name: str, default: str = "") -> str:
    value = os.getenv(name)
    if value is None:
        return default
    return str(value).strip()


def get_env_bool(name: str, *, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    cleaned = str(raw).strip().lower()
    if cleaned in _TRUE_VALUES:
        return True
    if cleaned in _FALSE_VALUES:
        return False
    return default


def get_env_int(
    name: str,
    *,
    default: int,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    raw = get_env(name)
    try:
        value = int(raw) if raw else int(default)
    except ValueError:
        value = int(default)
    if min_value is not None:
        value = max(min_value, value)
    if max_value is not None:
        value = min(max_value, value)
    return value

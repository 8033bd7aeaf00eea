from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from schema_mapping_app.core.env import SCHEMAMAP_ERROR_INCLUDE_DETAILS, get_env_bool
from schema_mapping_app.core.errors import ResourceConfigError, ResourcePersistenceError

ERROR_CODE_VALIDATION = "VALIDATION_ERROR"
ERROR_CODE_BAD_REQUEST = "BAD_REQUEST"
ERROR_CODE_NOT_FOUND = "NOT_FOUND"
ERROR_CODE_RESOURCE_CONFIG = "RESOURCE_CONFIG_ERROR"
ERROR_CODE_RESOURCE_PERSISTENCE = "RESOURCE_PERSISTENCE_ERROR"
ERROR_CODE_INTERNAL = "INTERNAL_SERVER_ERROR"


@dataclass(frozen=True)
class ApiErrorSpec:
    status_code: int
    code: str
    message: str
    details: dict[str, Any] | None = None


class ApiError(RuntimeError):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = int(status_code)
        self.code = str(code)
        self.message = str(message)
        self.details = details


def is_api_request(request: Request) -> bool:
    route = request.scope.get("route")
    route_path = str(getattr(route, "path", "") or "")
    if route_path:
        return route_path.startswith("/api/")
    path = str(getattr(request.url, "path", "") or "")
    return path.startswith("/api/")


def request_id_from_request(request: Request) -> str:
    request_id = str(getattr(request.state, "request_id", "") or "").strip()
    if request_id:
        return request_id
    from_header = str(request.headers.get("x-request-id", "")).strip()
    return from_header or "-"


def _include_details() -> bool:
    return get_env_bool(SCHEMAMAP_ERROR_INCLUDE_DETAILS, default=False)


def build_api_error_payload(
    *,
    code: str,
    message: str,
    request_id: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "ok": False,
        "error": {
            "code": str(code),
            "message": str(message),
        },
        "request_id": str(request_id or "-"),
        "timestamp": datetime.now(UTC).isoformat(),
    }
    if details and _include_details():
        payload["error"]["details"] = details
    return payload


def api_error_response(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    request_id = request_id_from_request(request)
    payload = build_api_error_payload(
        code=code,
        message=message,
        request_id=request_id,
        details=details,
    )
    return JSONResponse(payload, status_code=int(status_code), headers={"X-Request-ID": request_id})


def normalize_exception(exc: Exception) -> ApiErrorSpec:
    if isinstance(exc, ApiError):
        return ApiErrorSpec(
            status_code=exc.status_code,
            code=exc.code,
            message=exc.message,
            details=exc.details,
        )

    if isinstance(exc, RequestValidationError):
        return ApiErrorSpec(
            status_code=422,
            code=ERROR_CODE_VALIDATION,
            message="Request validation failed. Check field values and try again.",
            details={"errors": exc.errors()},
        )

    if isinstance(exc, ResourcePersistenceError):
        return ApiErrorSpec(
            status_code=500,
            code=ERROR_CODE_RESOURCE_PERSISTENCE,
            message="The resource configuration could not be saved.",
            details={"resource": exc.shortname, "reason": exc.reason},
        )

    if isinstance(exc, ResourceConfigError):
        return ApiErrorSpec(
            status_code=500,
            code=ERROR_CODE_RESOURCE_CONFIG,
            message="The resource configuration is invalid.",
            details={"reason": str(exc)},
        )

    if isinstance(exc, StarletteHTTPException):
        status_code = int(exc.status_code or 500)
        if status_code == 404:
            code = ERROR_CODE_NOT_FOUND
        elif status_code < 500:
            code = ERROR_CODE_BAD_REQUEST
        else:
            code = ERROR_CODE_INTERNAL
        return ApiErrorSpec(status_code=status_code, code=code, message=str(exc.detail or "Request failed."))

    return ApiErrorSpec(
        status_code=500,
        code=ERROR_CODE_INTERNAL,
        message="An unexpected error occurred.",
    )

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler, request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from schema_mapping_app.core.errors import ResourceConfigError, ResourcePersistenceError
from schema_mapping_app.web.http.errors import ApiError, api_error_response, is_api_request, normalize_exception

LOGGER = logging.getLogger(__name__)


def _log_context(request: Request) -> dict[str, str]:
    return {
        "request_id": str(getattr(request.state, "request_id", "-")),
        "method": request.method,
        "path": str(request.url.path),
    }


def register_exception_handlers(app: FastAPI, templates: Jinja2Templates) -> None:
    async def _resource_storage_exception_handler(request: Request, exc: Exception):
        LOGGER.exception(
            "Resource configuration storage failed. path=%s method=%s",
            request.url.path,
            request.method,
            extra={"event": "resource_storage_error", **_log_context(request)},
        )
        spec = normalize_exception(exc)
        if is_api_request(request):
            return api_error_response(
                request,
                status_code=spec.status_code,
                code=spec.code,
                message=spec.message,
                details=spec.details,
            )
        return templates.TemplateResponse(
            request,
            "error.html",
            {"request": request, "title": "Error", "error_message": spec.message, "flashes": []},
            status_code=spec.status_code,
        )

    app.add_exception_handler(ResourcePersistenceError, _resource_storage_exception_handler)
    app.add_exception_handler(ResourceConfigError, _resource_storage_exception_handler)

    @app.exception_handler(ApiError)
    async def _api_error_exception_handler(request: Request, exc: ApiError):
        if not is_api_request(request):
            return PlainTextResponse(str(exc), status_code=exc.status_code)
        spec = normalize_exception(exc)
        return api_error_response(
            request,
            status_code=spec.status_code,
            code=spec.code,
            message=spec.message,
            details=spec.details,
        )

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error_handler(request: Request, exc: RequestValidationError):
        if not is_api_request(request):
            return await request_validation_exception_handler(request, exc)
        spec = normalize_exception(exc)
        return api_error_response(
            request,
            status_code=spec.status_code,
            code=spec.code,
            message=spec.message,
            details=spec.details,
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(request: Request, exc: StarletteHTTPException):
        if not is_api_request(request):
            if int(getattr(exc, "status_code", 500) or 500) == 404:
                return templates.TemplateResponse(
                    request,
                    "404.html",
                    {
                        "request": request,
                        "title": "Not found",
                        "missing_path": str(request.url.path or "/"),
                        "detail": str(exc.detail or ""),
                        "flashes": [],
                    },
                    status_code=404,
                )
            return await http_exception_handler(request, exc)
        spec = normalize_exception(exc)
        return api_error_response(
            request,
            status_code=spec.status_code,
            code=spec.code,
            message=spec.message,
            details=spec.details,
        )

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        if not is_api_request(request):
            LOGGER.exception(
                "Unhandled web request error. path=%s method=%s",
                request.url.path,
                request.method,
                extra={"event": "unhandled_web_error", **_log_context(request)},
            )
            return PlainTextResponse("An unexpected error occurred.", status_code=500)

        spec = normalize_exception(exc)
        log_fn = LOGGER.warning if spec.status_code < 500 else LOGGER.exception
        log_fn(
            "API request failed. code=%s status=%s path=%s method=%s",
            spec.code,
            spec.status_code,
            request.url.path,
            request.method,
            extra={
                "event": "api_error",
                "error_code": spec.code,
                "status_code": int(spec.status_code),
                **_log_context(request),
            },
        )
        return api_error_response(
            request,
            status_code=spec.status_code,
            code=spec.code,
            message=spec.message,
            details=spec.details,
        )

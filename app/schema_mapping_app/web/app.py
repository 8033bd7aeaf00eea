from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from pathlib import Path
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from schema_mapping_app.core.config import AppConfig
from schema_mapping_app.core.defaults import DEFAULT_SESSION_SECRET
from schema_mapping_app.core.env import (
    SCHEMAMAP_ALLOW_DEFAULT_SESSION_SECRET,
    SCHEMAMAP_CSRF_ENABLED,
    SCHEMAMAP_REQUEST_ID_HEADER_ENABLED,
    SCHEMAMAP_SECURITY_HEADERS_ENABLED,
    SCHEMAMAP_SESSION_HTTPS_ONLY,
    SCHEMAMAP_SESSION_SECRET,
    get_env,
    get_env_bool,
)
from schema_mapping_app.infrastructure.logging import setup_app_logging
from schema_mapping_app.web.core.runtime import get_config, get_schema_manager
from schema_mapping_app.web.http.errors import api_error_response, is_api_request
from schema_mapping_app.web.http.exception_handlers import register_exception_handlers
from schema_mapping_app.web.routers import router as web_router
from schema_mapping_app.web.security_controls import (
    CSRF_HEADER,
    ensure_csrf_token,
    request_matches_csrf_token,
    request_requires_write_protection,
)

LOGGER = logging.getLogger(__name__)


def ensure_data_dir_ready(config: AppConfig) -> None:
    config.resources_dir.mkdir(parents=True, exist_ok=True)
    schemas = get_schema_manager().list_schemas()
    LOGGER.info(
        "Data directories ready. data_dir=%s schemas=%s",
        config.data_dir,
        len(schemas),
        extra={"event": "data_dir_ready", "data_dir": config.data_dir, "schema_count": len(schemas)},
    )


def create_app() -> FastAPI:
    setup_app_logging()
    config = get_config()
    session_secret = get_env(SCHEMAMAP_SESSION_SECRET, DEFAULT_SESSION_SECRET)
    allow_default_session_secret = get_env_bool(SCHEMAMAP_ALLOW_DEFAULT_SESSION_SECRET, default=False)
    if (
        not config.is_dev_env
        and session_secret == DEFAULT_SESSION_SECRET
        and not allow_default_session_secret
    ):
        raise RuntimeError(
            "SCHEMAMAP_SESSION_SECRET must be set to a strong, non-default value outside dev/local environments."
        )
    session_https_only = get_env_bool(SCHEMAMAP_SESSION_HTTPS_ONLY, default=not config.is_dev_env)
    security_headers_enabled = get_env_bool(SCHEMAMAP_SECURITY_HEADERS_ENABLED, default=True)
    request_id_header_enabled = get_env_bool(SCHEMAMAP_REQUEST_ID_HEADER_ENABLED, default=True)
    csrf_enabled = get_env_bool(SCHEMAMAP_CSRF_ENABLED, default=not config.is_dev_env)

    @asynccontextmanager
    async def _app_lifespan(_app: FastAPI):
        ensure_data_dir_ready(get_config())
        yield

    app = FastAPI(title="Data Schema Mapping", lifespan=_app_lifespan)

    base_dir = Path(__file__).resolve().parent
    templates = Jinja2Templates(directory=str(base_dir / "templates"))
    app.state.templates = templates

    if security_headers_enabled:

        @app.middleware("http")
        async def _security_headers_middleware(request: Request, call_next):
            response = await call_next(request)
            response.headers.setdefault("X-Content-Type-Options", "nosniff")
            response.headers.setdefault("X-Frame-Options", "DENY")
            response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
            if session_https_only:
                response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
            return response

    @app.middleware("http")
    async def _request_id_middleware(request: Request, call_next):
        request_id = uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        started = time.perf_counter()
        status_code = 500
        try:
            csrf_token = ensure_csrf_token(request)
            request.state.csrf_token = csrf_token
            if csrf_enabled and request_requires_write_protection(request.method):
                if not await request_matches_csrf_token(
                    request,
                    expected_token=csrf_token,
                    header_name=CSRF_HEADER,
                ):
                    LOGGER.warning(
                        "Blocked write request due to invalid CSRF token. method=%s path=%s",
                        request.method,
                        request.url.path,
                        extra={
                            "event": "csrf_validation_failed",
                            "request_id": request_id,
                            "method": request.method,
                            "path": str(request.url.path),
                        },
                    )
                    message = "Invalid CSRF token. Refresh and try again."
                    if is_api_request(request):
                        response = api_error_response(
                            request,
                            status_code=403,
                            code="FORBIDDEN",
                            message=message,
                        )
                    else:
                        response = PlainTextResponse(message, status_code=403)
                    status_code = response.status_code
                    return response

            response = await call_next(request)
            status_code = int(response.status_code)
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000.0
            LOGGER.info(
                "Request completed. method=%s path=%s status=%s elapsed_ms=%.2f",
                request.method,
                request.url.path,
                status_code,
                elapsed_ms,
                extra={
                    "event": "request_completed",
                    "request_id": request_id,
                    "method": request.method,
                    "path": str(request.url.path),
                    "status_code": status_code,
                    "elapsed_ms": round(elapsed_ms, 2),
                },
            )
        if request_id_header_enabled:
            response.headers["X-Request-ID"] = request_id
        return response

    app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret,
        same_site="lax",
        https_only=session_https_only,
    )

    register_exception_handlers(app, templates)

    app.mount("/static", StaticFiles(directory=str(base_dir / "static")), name="static")
    app.include_router(web_router)
    return app

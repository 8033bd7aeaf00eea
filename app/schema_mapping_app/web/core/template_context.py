from __future__ import annotations

from typing import Any

from fastapi import Request

from schema_mapping_app.core.config import AppConfig
from schema_mapping_app.web.http.flash import pop_flashes
from schema_mapping_app.web.security_controls import CSRF_SESSION_KEY


def base_template_context(
    request: Request,
    config: AppConfig,
    title: str,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    csrf_token = str(getattr(request.state, "csrf_token", "") or "").strip()
    if not csrf_token:
        session = request.scope.get("session")
        if isinstance(session, dict):
            csrf_token = str(session.get(CSRF_SESSION_KEY, "")).strip()

    context: dict[str, Any] = {
        "request": request,
        "title": title,
        "flashes": pop_flashes(request),
        "locked_mode": bool(config.locked_mode),
        "env_name": config.env,
        "request_id": str(getattr(request.state, "request_id", "") or ""),
        "csrf_token": csrf_token,
    }
    if extra:
        context.update(extra)
    return context

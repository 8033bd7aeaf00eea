from __future__ import annotations

import hmac
import secrets
from urllib.parse import urlparse

from fastapi import Request
from starlette.exceptions import HTTPException

CSRF_SESSION_KEY = "_schemamap_csrf_token"
CSRF_FORM_FIELD = "csrf_token"
CSRF_HEADER = "x-csrf-token"
UNSAFE_HTTP_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def _clean_header_value(value: str, *, max_len: int = 320) -> str:
    text = str(value or "").strip()
    if not text or len(text) > max_len:
        return ""
    if any(ch in text for ch in ("\r", "\n", "\t", "\x00")):
        return ""
    return text


def request_requires_write_protection(method: str) -> bool:
    return str(method or "").upper() in UNSAFE_HTTP_METHODS


def ensure_csrf_token(request: Request, *, session_key: str = CSRF_SESSION_KEY) -> str:
    """Return the session's CSRF token, minting one on first use."""
    session = request.scope.get("session")
    if not isinstance(session, dict):
        return ""
    token = str(session.get(session_key, "")).strip()
    if token:
        return token
    token = secrets.token_urlsafe(32)
    session[session_key] = token
    return token


def _is_same_origin(request: Request) -> bool:
    request_origin = f"{request.url.scheme}://{request.url.netloc}".lower()
    origin = _clean_header_value(str(request.headers.get("origin", ""))).lower()
    if origin:
        return origin == request_origin

    referer = _clean_header_value(str(request.headers.get("referer", "")))
    if not referer:
        return False
    parsed = urlparse(referer)
    referer_origin = f"{parsed.scheme}://{parsed.netloc}".lower()
    return bool(parsed.scheme and parsed.netloc and referer_origin == request_origin)


def _is_form_content_type(content_type: str) -> bool:
    normalized = str(content_type or "").lower()
    return ("application/x-www-form-urlencoded" in normalized) or ("multipart/form-data" in normalized)


async def request_matches_csrf_token(
    request: Request,
    *,
    expected_token: str,
    header_name: str = CSRF_HEADER,
    form_field_name: str = CSRF_FORM_FIELD,
) -> bool:
    expected = str(expected_token or "").strip()
    if not expected:
        return False

    header_value = str(request.headers.get(header_name, "")).strip()
    if header_value and hmac.compare_digest(header_value, expected):
        return True

    content_type = str(request.headers.get("content-type", ""))
    if _is_form_content_type(content_type):
        # The body is cached here so the route can parse the same form again.
        await request.body()
        try:
            form = await request.form()
        except (HTTPException, ValueError):
            return False
        form_value = str(form.get(form_field_name, "") or "").strip()
        if form_value and hmac.compare_digest(form_value, expected):
            return True

    # Clients posting without a token must at least come from this origin.
    return _is_same_origin(request)

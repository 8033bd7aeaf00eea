from __future__ import annotations

from typing import Any, Iterable

from fastapi import Request

FLASH_SESSION_KEY = "_schemamap_flashes"
FLASH_LEVELS = ("info", "success", "warning", "error")


def add_flash(request: Request, message: str, level: str = "info") -> None:
    text = str(message or "").strip()
    if not text:
        return
    flashes = list(request.session.get(FLASH_SESSION_KEY, []))
    flashes.append({"message": text, "level": level if level in FLASH_LEVELS else "info"})
    request.session[FLASH_SESSION_KEY] = flashes


def add_flashes(request: Request, messages: Iterable[str], level: str) -> None:
    for message in messages:
        add_flash(request, message, level)


def pop_flashes(request: Request) -> list[dict[str, Any]]:
    flashes = list(request.session.get(FLASH_SESSION_KEY, []))
    request.session[FLASH_SESSION_KEY] = []
    return flashes

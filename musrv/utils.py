from typing import Optional
from urllib.parse import quote

from fastapi import Request

from .filters import InvalidPath, validate_request_path
from .library import Library
from .reload import HotReloadController

NO_CACHE = {"Cache-Control": "no-cache"}
M3U8_MEDIA_TYPE = "audio/x-mpegurl; charset=utf-8"


def get_controller(request: Request) -> HotReloadController:
    return request.app.state.controller


def get_library(request: Request) -> Library:
    """The snapshot this request works with; read once, never re-read."""
    return request.app.state.controller.library


def get_base_url(request: Request) -> str:
    return request.app.state.base_url


def requote(decoded: str) -> str:
    """Undo the framework's decoding so the path validator decodes exactly once."""
    return quote(decoded, safe="/")


def folder_key(raw: Optional[str]) -> str:
    """Folder key from a `?path=` value; anything invalid falls back to the root."""
    if not raw:
        return ""
    try:
        key = validate_request_path(requote(raw))
    except InvalidPath:
        return ""
    return key.strip("/")


def folder_playlist_url(base: str, key: str) -> str:
    return f"{base}api/folder.m3u8?path={quote(key, safe='')}"


def artwork_url(base: str, artwork_id: Optional[str]) -> Optional[str]:
    if not artwork_id:
        return None
    return f"{base}api/artwork/{artwork_id}"


def album_playlist_url(base: str, name: str) -> str:
    return f"{base}album/{quote(name, safe='')}.m3u8"

# config.py
import os
import socket
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080


class Settings(BaseModel):
    root: str
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    public_base_url: Optional[str] = None   # e.g. behind a reverse proxy
    log_level: str = "INFO"
    admin: bool = True                      # expose /admin/rescan


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "on")


def load_settings(root: Optional[str] = None, **overrides) -> Settings:
    """Settings from the environment (.env included); explicit args win."""
    values = {
        "root": root or os.getenv("MUSRV_ROOT") or ".",
        "host": os.getenv("MUSRV_HOST", DEFAULT_HOST),
        "port": int(os.getenv("MUSRV_PORT", str(DEFAULT_PORT))),
        "public_base_url": os.getenv("PUBLIC_BASE_URL") or None,
        "log_level": os.getenv("MUSRV_LOG_LEVEL", "INFO").upper(),
        "admin": _env_bool("MUSRV_ADMIN", True),
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**values)


def _lan_ip_fallback() -> str:
    ip = "127.0.0.1"
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        # no packet is sent; this only picks the outgoing interface
        s.connect(("8.8.8.8", 80))
        ip = s.getsockname()[0]
    except OSError:
        pass
    finally:
        s.close()
    return ip


def base_url(settings: Settings) -> str:
    """Absolute URL prefix used in playlists. Always ends with "/"."""
    if settings.public_base_url:
        return settings.public_base_url.rstrip("/") + "/"
    host = settings.host
    if host in ("0.0.0.0", "::", ""):
        host = _lan_ip_fallback()
    elif ":" in host:
        host = f"[{host}]"
    return f"http://{host}:{settings.port}/"

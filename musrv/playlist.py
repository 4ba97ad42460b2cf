from typing import Iterable
from urllib.parse import quote

from .models import Track


def encode_path(rel: str) -> str:
    """Percent-encode each segment of a "/" path, keeping the separators."""
    return "/".join(quote(seg, safe="") for seg in rel.split("/"))


def track_url(base: str, t: Track) -> str:
    return f"{base}{encode_path(t.relative_path)}"


def render_m3u8(base: str, tracks: Iterable[Track]) -> str:
    """Extended M3U with CRLF line endings; unknown durations are written as 0."""
    lines = ["#EXTM3U"]
    for t in tracks:
        dur = t.metadata.duration
        secs = int(dur + 0.5) if dur else 0  # half rounds up, not to even
        lines.append(f"#EXTINF:{secs},{t.display_name}")
        lines.append(track_url(base, t))
    return "\r\n".join(lines) + "\r\n"

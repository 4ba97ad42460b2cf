import os
from urllib.parse import unquote

AUDIO_EXTENSIONS = frozenset({
    "mp3", "flac", "wav", "aac", "m4a", "ogg", "opus", "wma",
    "aif", "aiff", "alac", "pcm", "mp2", "mpga", "ape",
})

JUNK_NAMES = ("Thumbs.db", "desktop.ini")


class InvalidPath(ValueError):
    """A client-supplied path that must never reach the filesystem."""


def is_hidden_name(name: str) -> bool:
    # "._" is covered by the leading dot; kept explicit for AppleDouble files
    return name.startswith(".") or name.startswith("._") or name in JUNK_NAMES


def is_hidden_path(rel_path: str) -> bool:
    segs = rel_path.replace(os.sep, "/").split("/")
    return any(is_hidden_name(s) for s in segs if s)


def is_audio_file(name: str) -> bool:
    stem, ext = os.path.splitext(name)
    if not stem or not ext:
        return False
    return ext[1:].lower() in AUDIO_EXTENSIONS


def validate_request_path(raw: str, static: bool = False) -> str:
    """Decode a client path and reject anything that could escape the library.

    `static` is for the file-serving route, which also refuses paths that
    start at a root separator. Returns the decoded path unchanged otherwise.
    """
    if not raw:
        raise InvalidPath("empty path")
    decoded = unquote(raw)
    if not decoded or "\0" in decoded:
        raise InvalidPath("empty path or null byte")
    if static and decoded.startswith(("/", "\\")):
        raise InvalidPath("absolute path")
    for seg in decoded.replace("\\", "/").split("/"):
        if not seg:
            continue
        if seg in (".", "..") or is_hidden_name(seg):
            raise InvalidPath(f"rejected segment: {seg!r}")
    return decoded


def parse_album_name(raw: str) -> str:
    """Album name from the last segment of an album playlist URL.

    Drops a trailing ".m3u8", decodes once, and refuses anything that could
    name more than one path segment or a hidden entry.
    """
    if raw.endswith(".m3u8"):
        raw = raw[: -len(".m3u8")]
    name = unquote(raw)
    if not name or name.startswith(".") or "\0" in name:
        raise InvalidPath(f"bad album name: {name!r}")
    if "/" in name or "\\" in name:
        raise InvalidPath(f"album name with a separator: {name!r}")
    return name

import math
import re
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]+")


def one_line(text: str) -> str:
    """Fold line breaks and other control characters to a single space."""
    return _CONTROL_CHARS.sub(" ", text)


class TrackMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    duration: Optional[float] = None   # seconds
    artwork_id: Optional[str] = None   # content hash of the embedded image

    @field_validator("title", "artist", "album", "artwork_id", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if v is None:
            return None
        v = one_line(str(v)).strip()
        return v or None

    @field_validator("duration", mode="before")
    @classmethod
    def _positive_finite(cls, v):
        if v is None:
            return None
        try:
            v = float(v)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(v) or v <= 0:
            return None
        return v


class Track(BaseModel):
    model_config = ConfigDict(frozen=True)

    relative_path: str                 # root-relative, "/" separated
    size: Optional[int] = None
    metadata: TrackMetadata = TrackMetadata()

    @property
    def parent(self) -> str:
        head, sep, _ = self.relative_path.rpartition("/")
        return head if sep else ""

    @property
    def filename(self) -> str:
        return self.relative_path.rpartition("/")[2]

    @property
    def sort_key(self) -> Tuple[str, ...]:
        return tuple(self.relative_path.split("/"))

    @property
    def display_name(self) -> str:
        m = self.metadata
        if m.artist and m.title:
            return f"{m.artist} - {m.title}"
        # file names may carry newlines too
        return m.title or one_line(self.filename)


class Artwork(BaseModel):
    model_config = ConfigDict(
        frozen=True, ser_json_bytes="base64", val_json_bytes="base64"
    )

    mime: str
    data: bytes


class ArtworkBlob(BaseModel):
    """Raw picture handed back by the tag reader, before it is content-hashed."""
    mime: str = "image/jpeg"
    data: bytes


class FolderEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    subfolders: Tuple[str, ...] = ()   # full folder keys, sorted
    tracks: Tuple[int, ...] = ()       # indices into Library.tracks


# -------- API payloads --------
class FolderLink(BaseModel):
    name: str
    path: str


class FolderTrack(BaseModel):
    name: str
    path: str
    url: str
    duration: Optional[float] = None
    artwork: Optional[str] = None


class FolderResponse(BaseModel):
    name: str
    path: str
    m3u8: str
    albums: List[FolderLink] = []
    tracks: List[FolderTrack] = []


class AlbumSummary(BaseModel):
    name: str
    m3u8: str
    tracks: List[FolderTrack] = []


class LibraryResponse(BaseModel):
    albums: List[AlbumSummary] = []
    tracks: int = 0


class StatusResponse(BaseModel):
    ready: bool
    scanning: bool
    tracks: int
    folders: int
    artworks: int
    last_error: Optional[str] = None
    last_scan_at: Optional[int] = None

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from .library import Library
from .models import Artwork, FolderEntry, Track

logger = logging.getLogger(__name__)

# hidden, so neither the scanner nor the file route ever sees it
CACHE_DIR = ".musrv"
CACHE_FILE = "library.json"
CACHE_VERSION = 1


class CacheError(Exception):
    pass


class CacheMissing(CacheError):
    """No cache written yet for this root (normal on first run)."""


class CacheCorrupt(CacheError):
    """A cache file exists but cannot be turned back into a Library."""


class LibraryCache(BaseModel):
    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    version: int = CACHE_VERSION
    root: Optional[str] = None
    tracks: List[Track] = []
    folders: Dict[str, FolderEntry] = {}
    artworks: Dict[str, Artwork] = {}


def cache_path(root) -> Path:
    return Path(root) / CACHE_DIR / CACHE_FILE


def save_library(library: Library) -> Path:
    """Write `library` to its cache file. OSError propagates to the caller."""
    p = cache_path(library.root)
    p.parent.mkdir(parents=True, exist_ok=True)
    doc = LibraryCache(
        root=str(library.root),
        tracks=list(library.tracks),
        folders=dict(library.folders),
        artworks=dict(library.artworks),
    )
    tmp = p.with_name(p.name + ".tmp")
    tmp.write_text(doc.model_dump_json(), encoding="utf-8")
    os.replace(tmp, p)
    logger.debug("Saved library cache %s (%d tracks)", p, len(library))
    return p


def _check_consistent(doc: LibraryCache):
    n = len(doc.tracks)
    if "" not in doc.folders:
        raise CacheCorrupt("root folder entry missing")
    for key, entry in doc.folders.items():
        if any(i < 0 or i >= n for i in entry.tracks):
            raise CacheCorrupt(f"folder {key!r} points past the track list")
        if any(child not in doc.folders for child in entry.subfolders):
            raise CacheCorrupt(f"folder {key!r} links to a missing subfolder")
        if key:
            parent = doc.folders.get(key.rpartition("/")[0])
            if parent is None or key not in parent.subfolders:
                raise CacheCorrupt(f"folder {key!r} is not linked from its parent")

    listed = {key: set(entry.tracks) for key, entry in doc.folders.items()}
    for i, t in enumerate(doc.tracks):
        if i not in listed.get(t.parent, ()):
            raise CacheCorrupt(f"track {t.relative_path!r} is not listed under its folder")


def load_library(root) -> Library:
    p = cache_path(root)
    try:
        raw = p.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise CacheMissing(str(p)) from e
    except (OSError, UnicodeDecodeError) as e:
        raise CacheCorrupt(f"{p}: {e}") from e

    try:
        doc = LibraryCache.model_validate_json(raw)
    except ValidationError as e:
        raise CacheCorrupt(f"{p}: {e.error_count()} validation error(s)") from e
    _check_consistent(doc)
    return Library(root, doc.tracks, folders=doc.folders, artworks=doc.artworks)

# scanner.py
import hashlib
import logging
import os
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from .filters import is_audio_file, is_hidden_name, is_hidden_path
from .library import Library
from .metadata import read_metadata as default_read_metadata
from .models import Artwork, ArtworkBlob, Track, TrackMetadata

logger = logging.getLogger(__name__)

MetadataReader = Callable[[str], Tuple[TrackMetadata, Optional[ArtworkBlob]]]


class ScanError(OSError):
    """The library root itself could not be read."""


def artwork_id(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _file_size(path: str) -> Optional[int]:
    try:
        return os.stat(path).st_size
    except OSError:
        return None


def _check_root(root: Path):
    if not root.is_dir():
        raise ScanError(f"Library root is not a directory: {root}")
    try:
        with os.scandir(root) as it:
            next(it, None)
    except OSError as e:
        raise ScanError(f"Cannot read library root {root}: {e}") from e


def iter_audio_paths(root: Path):
    """Yield (absolute, root-relative) paths of indexable files under `root`."""
    def on_error(err: OSError):
        logger.warning("Skipping unreadable directory %s: %s", err.filename, err.strerror)

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error, followlinks=False):
        # prune in place so hidden subtrees are never entered
        dirnames[:] = [d for d in dirnames if not is_hidden_name(d)]
        for fname in filenames:
            if not is_audio_file(fname):
                continue
            full_path = os.path.join(dirpath, fname)
            rel = os.path.relpath(full_path, root).replace(os.sep, "/")
            if is_hidden_path(rel) or not os.path.isfile(full_path):
                continue
            yield full_path, rel


def scan(root, read_metadata: MetadataReader = default_read_metadata) -> Library:
    """Walk `root` and build a fresh Library snapshot.

    Per-file problems (unreadable tags, vanished files) never abort the scan;
    only an unreadable root raises ScanError.
    """
    root = Path(root).resolve()
    _check_root(root)

    started = time.monotonic()
    logger.info("Scanning %s", root)

    tracks: List[Track] = []
    artworks: Dict[str, Artwork] = {}
    for full_path, rel in iter_audio_paths(root):
        try:
            meta, blob = read_metadata(full_path)
        except Exception as e:
            logger.debug("Metadata failed for %s: %s", rel, e)
            meta, blob = TrackMetadata(), None

        if blob is not None and blob.data:
            aid = artwork_id(blob.data)
            if aid not in artworks:
                artworks[aid] = Artwork(mime=blob.mime, data=blob.data)
            meta = meta.model_copy(update={"artwork_id": aid})

        tracks.append(Track(relative_path=rel, size=_file_size(full_path), metadata=meta))

    tracks.sort(key=lambda t: t.sort_key)
    library = Library(root, tracks, artworks=artworks)
    logger.info(
        "Scanned %d tracks (%d folders, %d artworks) in %.1fs",
        len(tracks), len(library.folders), len(artworks), time.monotonic() - started,
    )
    return library

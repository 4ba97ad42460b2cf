"""Best-effort tag and cover-art reading on top of mutagen."""
from __future__ import annotations

import base64
import logging
from typing import Optional, Tuple

from mutagen import File as MutagenFile
from mutagen.flac import Picture, VCFLACDict
from mutagen.id3 import ID3
from mutagen.mp4 import MP4Cover, MP4Tags
from mutagen.oggflac import OggFLACVComment
from mutagen.oggopus import OggOpusVComment
from mutagen.oggspeex import OggSpeexVComment
from mutagen.oggvorbis import OggVCommentDict

from .models import ArtworkBlob, TrackMetadata

logger = logging.getLogger(__name__)

FRONT_COVER = 3  # ID3 / FLAC picture type

VORBIS_COMMENTS = (OggVCommentDict, OggOpusVComment, OggFLACVComment, OggSpeexVComment, VCFLACDict)


def _first(easy, key: str) -> Optional[str]:
    v = easy.get(key) if easy is not None and easy.tags is not None else None
    if not v:
        return None
    if isinstance(v, list):
        v = v[0] if v else None
    s = str(v).strip() if v is not None else ""
    return s or None


def _duration(audio) -> Optional[float]:
    info = getattr(audio, "info", None)
    length = getattr(info, "length", None)
    return float(length) if length else None


def _pick(pictures):
    """Front cover if there is one, else the first picture."""
    for p in pictures:
        if getattr(p, "type", None) == FRONT_COVER:
            return p
    return pictures[0] if pictures else None


def _mp4_mime(cover: MP4Cover) -> str:
    if cover.imageformat == MP4Cover.FORMAT_PNG:
        return "image/png"
    return "image/jpeg"


def _extract_artwork(audio) -> Optional[ArtworkBlob]:
    # FLAC keeps pictures outside the tag block
    pictures = getattr(audio, "pictures", None)
    if pictures:
        pic = _pick(pictures)
        return ArtworkBlob(mime=pic.mime or "image/jpeg", data=bytes(pic.data))

    tags = getattr(audio, "tags", None)
    if not tags:
        return None

    if isinstance(tags, ID3):
        apic = tags.getall("APIC")
        if apic:
            pic = _pick(apic)
            return ArtworkBlob(mime=pic.mime or "image/jpeg", data=bytes(pic.data))
        return None

    if isinstance(tags, MP4Tags):
        covr = tags.get("covr")
        if covr:
            cover = covr[0]
            return ArtworkBlob(mime=_mp4_mime(cover), data=bytes(cover))
        return None

    # Vorbis comments: base64 FLAC picture blocks
    blocks = tags.get("metadata_block_picture") if isinstance(tags, VORBIS_COMMENTS) else None
    if blocks:
        decoded = []
        for b in blocks:
            try:
                decoded.append(Picture(base64.b64decode(b)))
            except Exception as e:
                logger.debug("Bad picture block: %s", e)
        pic = _pick(decoded)
        if pic is not None:
            return ArtworkBlob(mime=pic.mime or "image/jpeg", data=bytes(pic.data))
    return None


def read_metadata(path: str) -> Tuple[TrackMetadata, Optional[ArtworkBlob]]:
    """Read title/artist/album, duration and embedded cover art from `path`.

    Never raises: unreadable or untagged files come back as empty metadata and
    no artwork. `artwork_id` is left empty; the scanner assigns it.
    """
    try:
        easy = MutagenFile(path, easy=True)
    except Exception as e:
        logger.debug("Could not read tags from %s: %s", path, e)
        return TrackMetadata(), None
    if easy is None:
        return TrackMetadata(), None

    meta = TrackMetadata(
        title=_first(easy, "title"),
        artist=_first(easy, "artist"),
        album=_first(easy, "album"),
        duration=_duration(easy),
    )

    artwork = None
    try:
        # the "easy" wrappers hide picture frames, so reopen with full tags
        full = MutagenFile(path)
        if full is not None:
            artwork = _extract_artwork(full)
    except Exception as e:
        logger.debug("Could not read artwork from %s: %s", path, e)
    return meta, artwork

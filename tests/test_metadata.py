"""Tests for reading tags and cover art from real tagged files."""

import base64
import struct
from types import SimpleNamespace

from mutagen.flac import FLAC, Picture
from mutagen.id3 import APIC, ID3, TIT2, TPE1, PictureType
from mutagen.mp4 import MP4Cover, MP4Tags

from musrv.metadata import _extract_artwork, read_metadata
from musrv.scanner import scan

# one MPEG-1 layer III frame header (128 kbit/s, 44.1 kHz) padded to its frame length
MP3_FRAME = b"\xff\xfb\x90\x64" + b"\x00" * 413


def _flac_bytes(seconds=3, rate=44100):
    info = struct.pack(">HH", 4096, 4096) + b"\x00" * 6
    packed = (rate << 44) | (1 << 41) | (15 << 36) | (rate * seconds)
    info += packed.to_bytes(8, "big") + b"\x00" * 16
    return b"fLaC" + b"\x80" + len(info).to_bytes(3, "big") + info


def _picture(data, mime="image/png", kind=3):
    pic = Picture()
    pic.type = kind
    pic.mime = mime
    pic.data = data
    return pic


def make_flac(path, pictures=(), **tags):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(_flac_bytes())
    audio = FLAC(str(path))
    for key, value in tags.items():
        audio[key] = value
    for pic in pictures:
        audio.add_picture(pic)
    audio.save()
    return path


def make_mp3(path, *frames):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(MP3_FRAME * 4)
    tags = ID3()
    for frame in frames:
        tags.add(frame)
    tags.save(str(path))
    return path


class TestFlac:
    def test_tags_duration_and_picture(self, tmp_path) -> None:
        p = make_flac(tmp_path / "a.flac", [_picture(b"cover")], title="Song", artist="Band")
        meta, art = read_metadata(str(p))
        assert (meta.title, meta.artist, meta.album) == ("Song", "Band", None)
        assert meta.duration == 3.0
        assert art.mime == "image/png"
        assert art.data == b"cover"

    def test_front_cover_preferred(self, tmp_path) -> None:
        p = make_flac(tmp_path / "a.flac", [
            _picture(b"back", mime="image/jpeg", kind=4),
            _picture(b"front", mime="image/png", kind=3),
        ])
        _, art = read_metadata(str(p))
        assert (art.mime, art.data) == ("image/png", b"front")

    def test_first_picture_without_front_cover(self, tmp_path) -> None:
        p = make_flac(tmp_path / "a.flac", [
            _picture(b"one", mime="image/jpeg", kind=0),
            _picture(b"two", kind=4),
        ])
        _, art = read_metadata(str(p))
        assert (art.mime, art.data) == ("image/jpeg", b"one")

    def test_picture_in_vorbis_comment(self, tmp_path) -> None:
        block = base64.b64encode(_picture(b"in comment", mime="image/gif").write()).decode("ascii")
        p = make_flac(tmp_path / "a.flac", metadata_block_picture=[block])
        _, art = read_metadata(str(p))
        assert (art.mime, art.data) == ("image/gif", b"in comment")

    def test_no_picture(self, tmp_path) -> None:
        p = make_flac(tmp_path / "a.flac", title="Bare")
        meta, art = read_metadata(str(p))
        assert meta.title == "Bare"
        assert art is None


class TestMp3:
    def test_apic_front_cover_preferred(self, tmp_path) -> None:
        p = make_mp3(
            tmp_path / "a.mp3",
            TIT2(encoding=3, text="Song"),
            TPE1(encoding=3, text="Band"),
            APIC(encoding=3, mime="image/jpeg", type=PictureType.OTHER, desc="other", data=b"other"),
            APIC(encoding=3, mime="image/png", type=PictureType.COVER_FRONT, desc="front", data=b"front"),
        )
        meta, art = read_metadata(str(p))
        assert (meta.title, meta.artist) == ("Song", "Band")
        assert meta.duration is not None and meta.duration > 0
        assert (art.mime, art.data) == ("image/png", b"front")

    def test_without_apic(self, tmp_path) -> None:
        p = make_mp3(tmp_path / "a.mp3", TIT2(encoding=3, text="Song"))
        meta, art = read_metadata(str(p))
        assert meta.title == "Song"
        assert art is None


class TestMp4Cover:
    def test_png_and_jpeg_formats(self) -> None:
        tags = MP4Tags()
        tags["covr"] = [MP4Cover(b"png bytes", imageformat=MP4Cover.FORMAT_PNG)]
        art = _extract_artwork(SimpleNamespace(tags=tags))
        assert (art.mime, art.data) == ("image/png", b"png bytes")

        tags["covr"] = [MP4Cover(b"jpeg bytes")]
        art = _extract_artwork(SimpleNamespace(tags=tags))
        assert (art.mime, art.data) == ("image/jpeg", b"jpeg bytes")


class TestScanWithRealTags:
    def test_shared_cover_stored_once(self, tmp_path) -> None:
        make_flac(tmp_path / "A" / "1.flac", [_picture(b"same cover")], title="One")
        make_flac(tmp_path / "A" / "2.flac", [_picture(b"same cover")], title="Two")
        make_mp3(
            tmp_path / "B" / "3.mp3",
            APIC(encoding=3, mime="image/jpeg", type=PictureType.COVER_FRONT, desc="", data=b"other cover"),
        )

        lib = scan(tmp_path)
        one, two, three = lib.tracks
        assert (one.metadata.title, two.metadata.title) == ("One", "Two")
        assert len(lib.artworks) == 2
        assert one.metadata.artwork_id == two.metadata.artwork_id
        assert three.metadata.artwork_id != one.metadata.artwork_id
        assert lib.artwork(one.metadata.artwork_id).data == b"same cover"
        assert lib.artwork(three.metadata.artwork_id).mime == "image/jpeg"

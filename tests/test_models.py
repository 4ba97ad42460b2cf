"""Tests for model normalisation and the tag reader."""

import math

import pytest
from pydantic import ValidationError

from musrv.metadata import read_metadata
from musrv.models import Track, TrackMetadata

from .helpers import write_file


class TestTrackMetadata:
    def test_blank_strings_become_none(self) -> None:
        m = TrackMetadata(title="  ", artist="", album="X")
        assert (m.title, m.artist, m.album) == (None, None, "X")

    def test_control_characters_folded(self) -> None:
        m = TrackMetadata(title="Line\r\nBreak", album="\x00Nul\x1b")
        assert m.title == "Line Break"
        assert m.album == "Nul"

    @pytest.mark.parametrize("bad", [0, -3, math.inf, math.nan, "abc"])
    def test_bad_durations_dropped(self, bad) -> None:
        assert TrackMetadata(duration=bad).duration is None

    def test_frozen(self) -> None:
        m = TrackMetadata(title="a")
        with pytest.raises(ValidationError):
            m.title = "b"


class TestTrack:
    def test_parent_and_filename(self) -> None:
        t = Track(relative_path="A/B/c.mp3")
        assert t.parent == "A/B"
        assert t.filename == "c.mp3"
        assert t.sort_key == ("A", "B", "c.mp3")

    def test_root_level(self) -> None:
        t = Track(relative_path="c.mp3")
        assert t.parent == ""
        assert t.display_name == "c.mp3"


class TestReadMetadata:
    def test_garbage_file_yields_empty_metadata(self, tmp_path) -> None:
        p = tmp_path / "x.mp3"
        write_file(p, b"\x00" * 64)
        meta, art = read_metadata(str(p))
        assert meta == TrackMetadata()
        assert art is None

    def test_missing_file(self, tmp_path) -> None:
        meta, art = read_metadata(str(tmp_path / "gone.flac"))
        assert meta == TrackMetadata()
        assert art is None

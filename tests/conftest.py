import pytest

from .helpers import make_tree


@pytest.fixture
def example_root(tmp_path):
    return make_tree(
        tmp_path / "music",
        "Album1/song1.mp3",
        "Album1/Sub/song2.flac",
        "loose.mp3",
    )

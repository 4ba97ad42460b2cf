from pathlib import Path

from musrv.models import ArtworkBlob, TrackMetadata


def write_file(path: Path, data: bytes = b""):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


def make_tree(root: Path, *rel_paths: str) -> Path:
    for rel in rel_paths:
        write_file(root / rel)
    return root


def no_tags(path):
    return TrackMetadata(), None


class FakeTags:
    """Stand-in tag reader keyed by file name."""

    def __init__(self, tags=None, art=None):
        self.tags = tags or {}
        self.art = art or {}
        self.calls = []

    def __call__(self, path):
        name = Path(path).name
        self.calls.append(name)
        blob = self.art.get(name)
        if blob is not None:
            blob = ArtworkBlob(mime="image/png", data=blob)
        return TrackMetadata(**self.tags.get(name, {})), blob

from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .folders import build_albums, build_folder_index, collect_tracks
from .models import Artwork, FolderEntry, Track


class Library:
    """One immutable snapshot of an indexed music folder.

    Built once per scan (or cache load) and replaced wholesale on rescan, so a
    reference obtained by a request stays consistent for as long as it is held.
    """

    __slots__ = ("_root", "_tracks", "_folders", "_artworks", "_by_path")

    def __init__(
        self,
        root,
        tracks: Sequence[Track],
        folders: Optional[Dict[str, FolderEntry]] = None,
        artworks: Optional[Dict[str, Artwork]] = None,
    ):
        self._root = Path(root)
        self._tracks = tuple(tracks)
        if folders is None:
            folders = build_folder_index(self._tracks)
        self._folders = MappingProxyType(dict(folders))
        self._artworks = MappingProxyType(dict(artworks or {}))
        self._by_path = {t.relative_path: i for i, t in enumerate(self._tracks)}

    @classmethod
    def empty(cls, root) -> "Library":
        return cls(root, ())

    @property
    def root(self) -> Path:
        return self._root

    @property
    def tracks(self) -> Sequence[Track]:
        return self._tracks

    @property
    def folders(self) -> Mapping[str, FolderEntry]:
        return self._folders

    @property
    def artworks(self) -> Mapping[str, Artwork]:
        return self._artworks

    def folder(self, key: str) -> Optional[FolderEntry]:
        return self._folders.get(key)

    def collect_tracks(self, key: str) -> List[Track]:
        return collect_tracks(self._folders, self._tracks, key)

    def albums(self) -> List[Tuple[str, List[Track]]]:
        return build_albums(self._folders, self._tracks)

    def album(self, name: str) -> Optional[List[Track]]:
        for album_name, tracks in self.albums():
            if album_name == name:
                return tracks
        return None

    def artwork(self, artwork_id: str) -> Optional[Artwork]:
        # the stored object itself; its bytes are immutable
        return self._artworks.get(artwork_id)

    def track(self, relative_path: str) -> Optional[Track]:
        i = self._by_path.get(relative_path)
        return None if i is None else self._tracks[i]

    def __len__(self) -> int:
        return len(self._tracks)

    def __eq__(self, other):
        if not isinstance(other, Library):
            return NotImplemented
        return (
            self._tracks == other._tracks
            and dict(self._folders) == dict(other._folders)
            and dict(self._artworks) == dict(other._artworks)
        )

    __hash__ = None

    def __repr__(self):
        return (
            f"Library(root={str(self._root)!r}, tracks={len(self._tracks)}, "
            f"folders={len(self._folders)}, artworks={len(self._artworks)})"
        )

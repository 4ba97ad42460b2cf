"""Folder tree over a sorted track list.

Folder keys are "/"-joined path segments relative to the library root; the
empty string is the root folder. Every key that exists has its whole chain of
ancestors present, each linking to the next.
"""
from collections import defaultdict
from typing import Dict, List, Mapping, Sequence, Tuple

from .models import FolderEntry, Track

ROOT_KEY = ""


def build_folder_index(tracks: Sequence[Track]) -> Dict[str, FolderEntry]:
    subfolders: Dict[str, set] = {ROOT_KEY: set()}  # root exists even for an empty library
    own: Dict[str, List[int]] = defaultdict(list)

    for idx, t in enumerate(tracks):
        parent = t.parent
        if parent:
            segs = parent.split("/")
            prev = ROOT_KEY
            for n in range(1, len(segs) + 1):
                key = "/".join(segs[:n])
                subfolders[prev].add(key)
                subfolders.setdefault(key, set())
                prev = key
        own[parent].append(idx)

    return {
        key: FolderEntry(subfolders=tuple(sorted(children)), tracks=tuple(own.get(key, ())))
        for key, children in subfolders.items()
    }


def collect_tracks(
    folders: Mapping[str, FolderEntry], tracks: Sequence[Track], key: str
) -> List[Track]:
    """Tracks of `key` and everything below it, depth-first.

    A folder's own tracks come first, then each subfolder in key order. An
    unknown key yields an empty list.
    """
    out: List[Track] = []
    stack = [key]
    while stack:
        entry = folders.get(stack.pop())
        if entry is None:
            continue
        out.extend(tracks[i] for i in entry.tracks)
        stack.extend(reversed(entry.subfolders))
    return out


def folder_name(key: str) -> str:
    if not key:
        return "/"
    return key.rstrip("/").rpartition("/")[2]


SINGLES = "Singles"


def build_albums(
    folders: Mapping[str, FolderEntry], tracks: Sequence[Track]
) -> List[Tuple[str, List[Track]]]:
    """(name, tracks) per album, sorted by name.

    An album is a top-level folder with everything below it. Tracks sitting
    directly in the root form one extra album, "Singles", renamed to
    "Singles (root)" if a folder already uses that name.
    """
    root = folders.get(ROOT_KEY)
    if root is None:
        return []
    albums = [(folder_name(key), collect_tracks(folders, tracks, key)) for key in root.subfolders]
    if root.tracks:
        name = SINGLES
        if any(n == name for n, _ in albums):
            name = f"{SINGLES} (root)"
        albums.append((name, [tracks[i] for i in root.tracks]))
    albums.sort(key=lambda a: a[0])
    return albums

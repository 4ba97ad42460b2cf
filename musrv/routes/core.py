from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response

from ..filters import InvalidPath, parse_album_name
from ..folders import folder_name
from ..library import Library
from ..models import (
    AlbumSummary,
    FolderLink,
    FolderResponse,
    FolderTrack,
    LibraryResponse,
    StatusResponse,
    Track,
)
from ..playlist import render_m3u8, track_url
from ..reload import HotReloadController
from ..utils import (
    M3U8_MEDIA_TYPE,
    NO_CACHE,
    album_playlist_url,
    artwork_url,
    folder_key,
    folder_playlist_url,
    get_base_url,
    get_controller,
    get_library,
    requote,
)

router = APIRouter(prefix="/api", tags=["core"])
playlists = APIRouter(tags=["playlists"])


def _folder_track(base: str, t: Track) -> FolderTrack:
    return FolderTrack(
        name=t.display_name,
        path=t.relative_path,
        url=track_url(base, t),
        duration=t.metadata.duration,
        artwork=artwork_url(base, t.metadata.artwork_id),
    )


@router.get("/folder", response_model=FolderResponse)
def api_folder(
    path: Optional[str] = None,
    lib: Library = Depends(get_library),
    base: str = Depends(get_base_url),
):
    key = folder_key(path)
    albums = []
    tracks = []
    entry = lib.folder(key)
    if entry is not None:
        albums = [FolderLink(name=folder_name(child), path=child) for child in entry.subfolders]
        tracks = [_folder_track(base, lib.tracks[i]) for i in entry.tracks]
    body = FolderResponse(
        name=folder_name(key),
        path=key,
        m3u8=folder_playlist_url(base, key),
        albums=albums,
        tracks=tracks,
    )
    return Response(body.model_dump_json(), media_type="application/json", headers=NO_CACHE)


@router.get("/folder.m3u8")
def api_folder_m3u8(
    path: Optional[str] = None,
    lib: Library = Depends(get_library),
    base: str = Depends(get_base_url),
):
    body = render_m3u8(base, lib.collect_tracks(folder_key(path)))
    return Response(body, media_type=M3U8_MEDIA_TYPE, headers=NO_CACHE)


@router.get("/artwork/{artwork_id}")
def api_artwork(artwork_id: str, lib: Library = Depends(get_library)):
    art = lib.artwork(artwork_id)
    if art is None:
        raise HTTPException(status_code=404, detail="Unknown artwork")
    # content-addressed, so the bytes behind an id never change
    return Response(
        art.data,
        media_type=art.mime,
        headers={"Cache-Control": "public, max-age=31536000, immutable"},
    )


@router.get("/status", response_model=StatusResponse)
def api_status(ctl: HotReloadController = Depends(get_controller)):
    lib = ctl.library
    return StatusResponse(
        ready=ctl.ready,
        scanning=ctl.scanning,
        tracks=len(lib.tracks),
        folders=len(lib.folders),
        artworks=len(lib.artworks),
        last_error=ctl.last_error,
        last_scan_at=ctl.last_scan_at,
    )


@playlists.get("/library.m3u8")
def library_m3u8(lib: Library = Depends(get_library), base: str = Depends(get_base_url)):
    return Response(render_m3u8(base, lib.tracks), media_type=M3U8_MEDIA_TYPE, headers=NO_CACHE)


@playlists.get("/library.json", response_model=LibraryResponse)
def library_json(lib: Library = Depends(get_library), base: str = Depends(get_base_url)):
    body = LibraryResponse(
        albums=[
            AlbumSummary(
                name=name,
                m3u8=album_playlist_url(base, name),
                tracks=[_folder_track(base, t) for t in tracks],
            )
            for name, tracks in lib.albums()
        ],
        tracks=len(lib.tracks),
    )
    return Response(body.model_dump_json(), media_type="application/json", headers=NO_CACHE)


@playlists.get("/album/{name:path}")
def album_m3u8(name: str, lib: Library = Depends(get_library), base: str = Depends(get_base_url)):
    # bad or unknown names get an empty playlist rather than an error
    try:
        album = lib.album(parse_album_name(requote(name)))
    except InvalidPath:
        album = None
    return Response(render_m3u8(base, album or []), media_type=M3U8_MEDIA_TYPE, headers=NO_CACHE)


@playlists.api_route("/admin/rescan", methods=["GET", "POST"])
def admin_rescan(request: Request, ctl: HotReloadController = Depends(get_controller)):
    if not request.app.state.settings.admin:
        raise HTTPException(status_code=404)
    # keep serving the current snapshot as ready until the new one lands
    return {"accepted": ctl.trigger_rescan(mark_unready=False)}

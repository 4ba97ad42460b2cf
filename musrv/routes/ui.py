from html import escape
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from ..folders import folder_name
from ..playlist import track_url
from ..reload import HotReloadController
from ..utils import NO_CACHE, folder_key, folder_playlist_url, get_base_url, get_controller

router = APIRouter(tags=["ui"])


def _fmt_duration(secs: Optional[float]) -> str:
    if not secs:
        return ""
    secs = int(secs + 0.5)
    return f"{secs // 60}:{secs % 60:02d}"


# ---------------- UI: folder browser ----------------
@router.get("/", response_class=HTMLResponse)
def index(
    path: Optional[str] = None,
    ctl: HotReloadController = Depends(get_controller),
    base: str = Depends(get_base_url),
):
    lib = ctl.library
    key = folder_key(path)
    entry = lib.folder(key)

    rows = []
    if key:
        parent = key.rpartition("/")[0]
        rows.append(f'<li><a href="/?path={quote(parent, safe="")}">..</a></li>')
    if entry is not None:
        for child in entry.subfolders:
            rows.append(
                f'<li>📁 <a href="/?path={quote(child, safe="")}">{escape(folder_name(child))}</a>'
                f' · <a href="{escape(folder_playlist_url(base, child))}">m3u8</a></li>'
            )
        for i in entry.tracks:
            t = lib.tracks[i]
            rows.append(
                f'<li>🎵 <a href="{escape(track_url(base, t))}">{escape(t.display_name)}</a>'
                f' <span class="dur">{_fmt_duration(t.metadata.duration)}</span></li>'
            )
    rows_html = "\n".join(rows) or "<li>Nothing here.</li>"
    state = "ready" if ctl.ready else ("scanning…" if ctl.scanning else "not ready")

    html = f"""<!doctype html>
<html>
<head>
<meta charset="utf-8"/>
<meta name="viewport" content="width=device-width, initial-scale=1"/>
<title>musrv – {escape(folder_name(key))}</title>
<style>
  body{{font-family:system-ui,Segoe UI,Roboto,Arial;margin:0;padding:16px 24px 40px}}
  ul{{list-style:none;padding:0}}
  li{{border-bottom:1px solid #eee;padding:8px}}
  .dur{{opacity:.6;margin-left:6px}}
  .pill{{border:1px solid #ddd;border-radius:999px;padding:4px 10px}}
</style>
</head>
<body>
<h1>{escape(folder_name(key))}</h1>
<p>
  <span class="pill">{state}</span>
  <span class="pill">{len(lib.tracks)} tracks</span>
  <a class="pill" href="{escape(folder_playlist_url(base, key))}">Play folder (m3u8)</a>
  <a class="pill" href="{escape(base)}library.m3u8">Whole library</a>
</p>
<ul>
{rows_html}
</ul>
</body>
</html>"""
    return HTMLResponse(html, status_code=200, headers=NO_CACHE)

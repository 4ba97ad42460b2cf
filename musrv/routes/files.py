from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from ..filters import InvalidPath, validate_request_path
from ..reload import HotReloadController
from ..utils import get_controller, requote

router = APIRouter(tags=["files"])


# Registered last: it matches every path the other routers did not claim.
@router.api_route("/{path:path}", methods=["GET", "HEAD"])
def static_file(path: str, ctl: HotReloadController = Depends(get_controller)):
    try:
        rel = validate_request_path(requote(path), static=True)
    except InvalidPath:
        raise HTTPException(status_code=404)

    root = ctl.root
    try:
        abs_path = (root / rel).resolve(strict=True)
    except (OSError, RuntimeError):
        raise HTTPException(status_code=404)
    # symlinks may point anywhere; only serve what stays inside the root
    if not abs_path.is_relative_to(root) or not abs_path.is_file():
        raise HTTPException(status_code=404)
    return FileResponse(abs_path)

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .config import Settings, base_url, load_settings
from .reload import HotReloadController
from .routes.core import playlists as playlist_router
from .routes.core import router as core_router
from .routes.files import router as files_router
from .routes.ui import router as ui_router


def create_app(
    settings: Optional[Settings] = None,
    controller: Optional[HotReloadController] = None,
) -> FastAPI:
    """Build the app. A controller passed in is used as-is and not started."""
    settings = settings or load_settings()
    owns_controller = controller is None
    if controller is None:
        controller = HotReloadController(settings.root)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if owns_controller:
            controller.start()
        yield

    app = FastAPI(title="musrv", lifespan=lifespan)
    app.state.settings = settings
    app.state.controller = controller
    app.state.base_url = base_url(settings)

    app.include_router(ui_router)
    app.include_router(core_router)
    app.include_router(playlist_router)
    app.include_router(files_router)  # catch-all, keep last
    return app

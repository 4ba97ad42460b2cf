"""Swappable library snapshot with single-flight background rescans."""
import logging
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from .library import Library
from .scanner import scan
from .storage import CacheCorrupt, CacheMissing, load_library, save_library

logger = logging.getLogger(__name__)


class HotReloadController:
    """Owns the published Library and rebuilds it off the request path.

    Readers take `controller.library` once per request and keep using that
    object; a rescan builds a new Library and publishes it with a single
    attribute assignment. At most one scan runs at a time; extra triggers are
    rejected, not queued.
    """

    def __init__(
        self,
        root,
        scanner: Callable[[Path], Library] = scan,
        persist: bool = True,
        library: Optional[Library] = None,
    ):
        self.root = Path(root).resolve()
        self._scan = scanner
        self._persist = persist
        self._library = library if library is not None else Library.empty(self.root)
        self._scanning = threading.Lock()
        self._ready = threading.Event()
        self._state = threading.Lock()
        self._unready_gen = 0  # bumped by every trigger that clears ready
        self._thread: Optional[threading.Thread] = None
        self.last_error: Optional[str] = None
        self.last_scan_at: Optional[int] = None

    @property
    def library(self) -> Library:
        return self._library

    @property
    def scanning(self) -> bool:
        return self._scanning.locked()

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    def load_cached(self) -> bool:
        """Publish the on-disk snapshot, if any. Does not mark ready."""
        try:
            lib = load_library(self.root)
        except CacheMissing:
            logger.info("No library cache yet under %s", self.root)
            return False
        except CacheCorrupt as e:
            logger.warning("Ignoring unreadable library cache: %s", e)
            return False
        self._library = lib
        logger.info("Loaded cached library: %d tracks", len(lib))
        return True

    def start(self) -> bool:
        """Serve the cache (if present) and kick off the first real scan."""
        self.load_cached()
        return self.trigger_rescan(mark_unready=True)

    def trigger_rescan(self, mark_unready: bool = False) -> bool:
        if not self._scanning.acquire(blocking=False):
            logger.info("Rescan already running; request ignored")
            return False
        with self._state:
            if mark_unready:
                self._unready_gen += 1
                self._ready.clear()
            gen = self._unready_gen
        self._thread = threading.Thread(
            target=self._run_scan, args=(gen,), name="musrv-scan", daemon=True
        )
        self._thread.start()
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the current scan (if any) has finished."""
        t = self._thread
        if t is not None:
            t.join(timeout)
            if t.is_alive():
                return False
        return True

    def _run_scan(self, gen: int):
        try:
            try:
                lib = self._scan(self.root)
            except Exception as e:
                self.last_error = f"{type(e).__name__}: {e}"
                logger.exception("Rescan of %s failed; keeping previous library", self.root)
                return

            if self._persist:
                try:
                    save_library(lib)
                except OSError as e:
                    logger.warning("Could not write library cache: %s", e)

            self._library = lib
            self.last_error = None
            self.last_scan_at = int(time.time())
        finally:
            self._scanning.release()
        self._mark_ready(gen)

    def _mark_ready(self, gen: int):
        # scanning is already false here; a trigger that cleared ready since
        # this scan started owns the flag now
        with self._state:
            if gen == self._unready_gen:
                self._ready.set()

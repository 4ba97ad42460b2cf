import argparse
import logging
import os
import sys

from .config import base_url, load_settings


def _configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _scan_only(root: str) -> int:
    from .scanner import ScanError, scan
    from .storage import save_library

    try:
        lib = scan(root)
    except ScanError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    path = save_library(lib)
    print(f"🎵 {len(lib.tracks)} tracks, {len(lib.folders)} folders, "
          f"{len(lib.artworks)} artworks → {path}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="musrv", description="Serve a music folder as M3U playlists.")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Index PATH and serve it over HTTP")
    serve.add_argument("path", help="Music library root")
    serve.add_argument("--port", type=int, help="Port to listen on")
    serve.add_argument("--bind", help="Address to bind (default 0.0.0.0)")
    serve.add_argument("--base-url", help="Public URL used in playlists")
    serve.add_argument("--scan-only", action="store_true", help="Scan, write the cache and exit")

    args = parser.parse_args(argv)
    if not os.path.isdir(args.path):
        print(f"❌ Not a directory: {args.path}", file=sys.stderr)
        return 1

    settings = load_settings(
        root=os.path.abspath(args.path),
        port=args.port,
        host=args.bind,
        public_base_url=args.base_url,
    )
    _configure_logging(settings.log_level)

    if args.scan_only:
        return _scan_only(settings.root)

    import uvicorn

    from .main import create_app

    print(f"📡 Serving {settings.root} at {base_url(settings)}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port,
                log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())

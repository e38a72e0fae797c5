import argparse
import os
from typing import Dict, List, Optional

import uvicorn

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the session feed over HTTP")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    parser.add_argument("--feed-url", help="Remote post list to refresh from (FEED_ENDPOINT_URL)")
    parser.add_argument(
        "--submit-delay",
        type=float,
        help="Seconds a new post waits before it is added to the feed (SUBMIT_DELAY_SECONDS)",
    )
    parser.add_argument(
        "--refresh-on-startup",
        action="store_true",
        help="Fetch the post list once before serving (REFRESH_ON_STARTUP)",
    )
    args = parser.parse_args(argv)
    if args.submit_delay is not None and args.submit_delay < 0:
        parser.error("--submit-delay must not be negative")
    return args

def feed_environment(args: argparse.Namespace) -> Dict[str, str]:
    """Settings overrides for the server process, as environment variables"""
    overrides = {}
    if args.feed_url:
        overrides["FEED_ENDPOINT_URL"] = args.feed_url
    if args.submit_delay is not None:
        overrides["SUBMIT_DELAY_SECONDS"] = str(args.submit_delay)
    if args.refresh_on_startup:
        overrides["REFRESH_ON_STARTUP"] = "true"
    return overrides

def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)
    # Environment first: settings are read when feedcore is imported, also in reload workers
    os.environ.update(feed_environment(args))

    from feedcore.core.config import settings

    use_reload = args.reload or settings.DEBUG
    print(f"Serving feed from {settings.FEED_ENDPOINT_URL} at http://{args.host}:{args.port}")
    print(f"New posts appear after {settings.SUBMIT_DELAY_SECONDS}s; refresh on startup: {settings.REFRESH_ON_STARTUP}")

    uvicorn.run(
        "feedcore.main:app",
        host=args.host,
        port=args.port,
        reload=use_reload
    )

if __name__ == "__main__":
    main()

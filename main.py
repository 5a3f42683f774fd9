#!/usr/bin/env python3
"""
ShopSession -- users, products, and a session-backed cart over HTTP.

Usage:
  python main.py
  python main.py --port 8080
  python main.py --host 0.0.0.0 --reload
  PORT=8080 python main.py

Environment variables (see core/config.py for the full list):
  PORT / HOST               Listen address (defaults 3000 / 127.0.0.1).
  SESSION_MAX_AGE_MS        Session and cookie lifetime (default 86400000).
  SLIDING_EXPIRATION        true = expiry window resets on every request.
  SESSION_SWEEP_INTERVAL_SECONDS
                            How often expired sessions are purged (default 60).
"""

import argparse

import uvicorn

from core.config import get_settings


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="shopsession",
        description="Run the ShopSession API server.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py
  python main.py --port 8080
  SLIDING_EXPIRATION=true python main.py --reload
        """,
    )
    parser.add_argument(
        "--host",
        default=settings.host,
        help=f"Interface to bind (default: {settings.host})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help=f"Port to listen on (default: {settings.port})",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when source files change (development only)",
    )
    args = parser.parse_args()

    print(f"Server is running on port {args.port}")
    uvicorn.run(
        "asgi:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()

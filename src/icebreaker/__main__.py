"""Icebreaker main entry point."""

import argparse
import sys

import uvicorn

from icebreaker.config import get_settings
from icebreaker.version import __version__


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the application.

    Runs the FastAPI application with uvicorn.

    Args:
        argv: Command line arguments. Defaults to ``sys.argv[1:]``.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parser = argparse.ArgumentParser(
        prog="icebreaker",
        description="Icebreaker - meetup pairing bot for Microsoft Teams",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Interface to bind to")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    settings = get_settings()
    uvicorn.run(
        "icebreaker.bot.app:app",
        host=args.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())

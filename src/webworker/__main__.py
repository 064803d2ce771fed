"""
=============================================================================
WEBWORKER CLI ENTRY POINT
=============================================================================

    # Serve the current directory on localhost:8080
    python -m webworker

    # Serve ./public on all interfaces
    python -m webworker --host 0.0.0.0 --root ./public

    # Drop silent clients after 10 seconds, refuse ".." in targets
    python -m webworker --idle-timeout 10 --reject-parent-paths

Environment variables (WEBWORKER_PORT, WEBWORKER_ROOT, ...) provide the
defaults; command-line flags override them.

=============================================================================
"""

import argparse
import os
import sys

from . import __version__
from .config import ServerConfig
from .server import WebServer


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webworker",
        description="Minimal one-request-per-connection HTTP server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m webworker                       # Serve cwd on 127.0.0.1:8080
  python -m webworker --port 3000           # Custom port
  python -m webworker --root ./public       # Serve another directory
  python -m webworker --reject-parent-paths # 404 for targets with ".."
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=defaults.base_dir,
        help="Directory request targets are appended to (default: cwd)"
    )

    parser.add_argument(
        "--server-name",
        default=defaults.server_name,
        help=f"Server header and <cs371server> value (default: {defaults.server_name})"
    )

    parser.add_argument(
        "--reject-parent-paths",
        action="store_true",
        help="Answer 404 for targets containing '..' segments"
    )

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST READING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--poll-interval",
        type=float,
        default=defaults.poll_interval,
        help=f"Seconds per readiness wait step (default: {defaults.poll_interval})"
    )

    parser.add_argument(
        "--idle-timeout",
        type=float,
        default=defaults.idle_timeout,
        help="Drop clients silent for this many seconds (default: wait forever)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level})"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"webworker {__version__}"
    )

    return parser


def main(argv=None):
    """Parse arguments, build the config, run the server."""
    defaults = ServerConfig.from_env()
    args = build_parser(defaults).parse_args(argv)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        base_dir=os.path.abspath(args.root),
        server_name=args.server_name,
        reject_parent_segments=args.reject_parent_paths,
        poll_interval=args.poll_interval,
        idle_timeout=args.idle_timeout,
        log_level=args.log_level,
    )

    try:
        server = WebServer(config)
        server.run()
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

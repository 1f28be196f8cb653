"""
=============================================================================
COASTER SERVER CLI ENTRY POINT
=============================================================================

    # ADMIN_PASSWORD is required
    ADMIN_PASSWORD=secret python -m coasterserver

    # More worker threads, JSON access log
    ADMIN_PASSWORD=secret coaster-server --workers 32 --log-format json

The server always listens on 0.0.0.0:3000.

Flags override the environment:

    --workers      COASTERS_WORKERS
    --log-level    COASTERS_LOG_LEVEL
    --log-format   COASTERS_LOG_FORMAT

Exit status is 1 when the configuration is invalid (including a missing
ADMIN_PASSWORD) or the port cannot be bound.

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .app import create_app
from .config import LOG_FORMATS, ServerConfig
from .errors import ConfigurationError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coaster-server",
        description="In-memory roller-coaster HTTP service (port 3000)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  ADMIN_PASSWORD          password for user "admin" on /admin (required)
  COASTERS_WORKERS        max worker threads (default: 16)
  COASTERS_LOG_LEVEL      logging level (default: INFO)
  COASTERS_LOG_FORMAT     access log format, text or json (default: text)
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # PERFORMANCE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Maximum number of worker threads"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level"
    )

    parser.add_argument(
        "--log-format",
        choices=list(LOG_FORMATS),
        default=None,
        help="Access log format"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"coaster-server {__version__}"
    )

    return parser


def load_config(args: argparse.Namespace) -> ServerConfig:
    """
    Environment first, then flags on top.

    Raises:
        ConfigurationError: If the result is not runnable.
    """
    config = ServerConfig.from_env()

    if args.workers is not None:
        config.max_workers = args.workers
        config.min_workers = min(config.min_workers, max(args.workers, 1))
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_format is not None:
        config.log_format = args.log_format

    config.validate()
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
        server = create_app(config)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        server.run()
    except OSError as e:
        print(f"Error: cannot listen on {config.host}:{config.port}: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

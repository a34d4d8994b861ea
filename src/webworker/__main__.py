"""
=============================================================================
WEBWORKER CLI ENTRY POINT
=============================================================================

    # Serve the current directory on localhost:8080
    python -m webworker

    # Serve ./site on all interfaces
    python -m webworker --root ./site --host 0.0.0.0

    # JSON access log, debug diagnostics
    python -m webworker --log-format json --log-level DEBUG

Environment variables (WEBWORKER_*) are read first; flags override them.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import ServerConfig
from .server import WebServer


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser. Defaults of None mean "keep env/config"."""
    parser = argparse.ArgumentParser(
        prog="webworker",
        description="Minimal one-request-per-connection HTTP server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m webworker                        # Serve . on 127.0.0.1:8080
  python -m webworker --root ./site          # Serve another directory
  python -m webworker --port 0               # Let the OS pick a port
  python -m webworker --no-materialize       # Don't write Test.html
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--host", "-H", default=None,
                        help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", "-p", type=int, default=None,
                        help="Port to listen on (default: 8080)")
    parser.add_argument("--timeout", "-t", type=float, default=None,
                        help="Client socket timeout in seconds (default: 30)")

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--root", "-r", default=None,
                        help="Document root (default: current directory)")
    parser.add_argument("--server-name", default=None,
                        help="Value of the Server header")
    parser.add_argument("--no-confine", action="store_true",
                        help="Allow paths outside the document root (unsafe, unchecked join)")
    parser.add_argument("--no-materialize", action="store_true",
                        help="Don't write the substituted home page to Test.html")

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--log-level", "-l",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], default=None,
                        help="Logging level (default: INFO)")
    parser.add_argument("--log-format", choices=["text", "json"], default=None,
                        help="Access log format (default: text)")

    parser.add_argument("--version", "-v", action="version",
                        version=f"webworker {__version__}")

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Start from the environment and apply any flags that were given."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.root is not None:
        config.doc_root = args.root
    if args.server_name is not None:
        config.server_name = args.server_name
    if args.no_confine:
        config.confine_to_root = False
    if args.no_materialize:
        config.materialize_home = False
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_format is not None:
        config.log_format = args.log_format

    return config


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        server = WebServer(config_from_args(args))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        server.run()
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

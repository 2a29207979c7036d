"""CLI entry point for the PaperScout server."""

from __future__ import annotations

import argparse
import os
import socket
import sys

from paperscout import __version__
from paperscout.config.settings import Settings, load_settings
from paperscout.core.exceptions import ConfigurationError
from paperscout.observability.logging import setup_logging

CONFIG_FILE_ENV = "PAPERSCOUT_CONFIG_FILE"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paperscout",
        description="PaperScout — Uniform access to academic paper sources",
    )
    parser.add_argument("--config", "-c", type=str, default=None, help="Path to YAML configuration file")
    parser.add_argument("--host", type=str, default=None, help="Server bind address (overrides config)")
    parser.add_argument("--port", "-p", type=int, default=None, help="Server port (overrides config)")
    parser.add_argument("--workers", "-w", type=int, default=None, help="Number of worker processes")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error", "critical"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument("--version", action="version", version=f"PaperScout {__version__}")
    return parser


def load_cli_settings(args: argparse.Namespace) -> Settings:
    """Load settings and apply CLI overrides.

    Raises:
        ConfigurationError: If the configuration is invalid or the file is missing.
    """
    overrides = {"log_level": args.log_level} if args.log_level else {}
    settings = load_settings(args.config, **overrides)
    if args.host:
        settings.server.host = args.host
    if args.port:
        settings.server.port = args.port
    if args.workers:
        settings.server.workers = args.workers
    return settings


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point. Returns the process exit status."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_cli_settings(args)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(settings)

    if not _port_available(settings.server.host, settings.server.port):
        print(f"Error: Port {settings.server.port} is already in use", file=sys.stderr)
        return 1

    # Workers re-create the app from the factory, so hand them the same config.
    if args.config:
        os.environ[CONFIG_FILE_ENV] = str(args.config)
    if args.log_level:
        os.environ["PAPERSCOUT_LOG_LEVEL"] = args.log_level

    import uvicorn

    uvicorn.run(
        "paperscout.api.app:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        workers=settings.server.workers if not args.reload else 1,
        reload=args.reload,
        log_level=settings.log_level,
    )
    return 0


def _port_available(host: str, port: int) -> bool:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.bind((host if host != "0.0.0.0" else "127.0.0.1", port))
    except OSError:
        return False
    finally:
        sock.close()
    return True


if __name__ == "__main__":
    sys.exit(main())

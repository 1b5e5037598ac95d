#!/usr/bin/env python3
"""
healthping - UDP liveness/control listener entry point

Usage:
    healthping                         # Listen on UDP port 7654
    healthping --port 9000             # Listen on another port
    healthping --config listener.yaml  # Load settings from YAML
    healthping --health-port 8081      # Also serve GET /health over HTTP
    healthping --verbose               # Enable debug logging

Exit status is 0 after an EXIT command or SIGINT/SIGTERM, 1 on any
startup or socket error.
"""

import argparse
import asyncio
import sys

from healthping import __version__
from healthping.common.config import (
    ListenerConfig,
    load_config_file,
    load_listener_config,
    parse_port,
)
from healthping.common.exceptions import HealthPingError
from healthping.common.logging_setup import get_service_logger, setup_logging
from healthping.services.listener import ListenerService

logger = get_service_logger("main")


def build_config(args: argparse.Namespace) -> ListenerConfig:
    """
    Merge config file, environment and CLI flags (CLI wins).

    Args:
        args: Parsed command line arguments

    Returns:
        Final listener configuration
    """
    data = load_config_file(args.config) if args.config else {}
    config = load_listener_config(data)

    if args.port is not None:
        config.port = parse_port(args.port)
    if args.health_port is not None:
        config.health_port = parse_port(args.health_port, "health_port")
    if args.verbose:
        # Plain text in verbose/debug mode
        config.log_level = "DEBUG"
        config.json_logs = False

    return config


async def main_async(config: ListenerConfig) -> None:
    """
    Async main function that runs the listener.

    Args:
        config: Listener configuration
    """
    service = ListenerService(config)

    try:
        await service.run()
    finally:
        await service.stop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="healthping",
        description="UDP liveness/control listener",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands (UDP, plain text):
    EXIT ...     Reply "ACK: <text>" and exit with status 0
    UNHEALTHY    Stop the health heartbeat (no reply)
        """
    )

    parser.add_argument(
        "--port",
        type=str,
        default=None,
        help="The port to listen to udp traffic on (default: 7654)"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to an optional YAML configuration file"
    )

    parser.add_argument(
        "--health-port",
        type=str,
        default=None,
        help="Serve GET /health on 127.0.0.1 at this TCP port"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (debug) logging"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"healthping v{__version__}"
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = build_config(args)
    except HealthPingError as e:
        logger.critical(e.message)
        sys.exit(1)

    setup_logging(config.log_level, json_format=config.json_logs)

    try:
        asyncio.run(main_async(config))
    except HealthPingError as e:
        logger.critical(
            f"Fatal error: {e.message}",
            extra={"error_type": type(e).__name__, "recoverable": e.recoverable},
        )
        sys.exit(1)


if __name__ == "__main__":
    main()

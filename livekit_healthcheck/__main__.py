"""
livekit-healthcheck entrypoint.

Check the health of a LiveKit server by attempting to connect to a room.

Usage:
    livekit-healthcheck --host wss://livekit.example.com:7880 --keys "APIkey: secret"
    LIVEKIT_HOST=... LIVEKIT_KEYS=... python -m livekit_healthcheck
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import structlog

from .errors import ConfigError, HealthcheckError
from .health_check import run_healthcheck
from .settings import DEFAULT_TIMEOUT, HealthcheckSettings, load_settings

# Logger
logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Configure logging on stderr; stdout is reserved for the verdict."""
    level = logging.DEBUG if debug else logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )

    # Reduce noise from the SDK and friends
    logging.getLogger("livekit").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="livekit-healthcheck",
        description="Check the health of the livekit server by attempting to connect to a room",
    )
    parser.add_argument(
        "--keys",
        help="api keys (key: secret\\n) [$LIVEKIT_KEYS]",
    )
    parser.add_argument(
        "--host",
        help=(
            "host (incl. port) of the livekit server to connect to "
            "(example: wss://livekit.example.com:7880) [$LIVEKIT_HOST]"
        ),
    )
    parser.add_argument(
        "--timeout",
        help=(
            f"time to wait for the connection, e.g. 5s, 500ms, 1m "
            f"(default: {DEFAULT_TIMEOUT}) [$LIVEKIT_HEALTHCHECK_TIMEOUT]"
        ),
    )
    parser.add_argument(
        "--strict-keys",
        action="store_true",
        default=None,
        help="fail when more than one key pair is given [$LIVEKIT_HEALTHCHECK_STRICT_KEYS]",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=None,
        help="debug logging on stderr [$DEBUG]",
    )
    return parser


def load_cli_settings(args: argparse.Namespace) -> HealthcheckSettings:
    """Merge CLI flags over the environment."""
    return load_settings(
        host=args.host,
        keys=args.keys,
        timeout=args.timeout,
        strict_keys=args.strict_keys,
        debug=args.verbose,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Run the healthcheck and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_cli_settings(args)
    except ConfigError as e:
        print(e)
        return 1

    setup_logging(settings.debug)

    try:
        settings.require()
    except ConfigError as e:
        parser.print_help()
        print("\n-----")
        print(e)
        return 1

    try:
        result = asyncio.run(run_healthcheck(settings))
    except HealthcheckError as e:
        logger.debug(f"Healthcheck failed ({e.reason})")
        print(e)
        return 1

    print(result.message)
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()

"""
VibeGate API launcher.

    python -m api [--host HOST] [--port PORT] [--log-level LEVEL]

Flags override the VIBEGATE_API_HOST / VIBEGATE_API_PORT / VIBEGATE_LOG_LEVEL
settings. The app is built through ``api.app:create_app`` so logging and the
pipeline are configured once per worker.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

import uvicorn

from .settings import Settings

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="vibegate-api", description="Run the VibeGate API")
    parser.add_argument("--host", help="bind address (default: settings)")
    parser.add_argument("--port", type=int, help="listen port (default: settings)")
    parser.add_argument("--log-level", help="uvicorn log level (default: settings)")
    return parser.parse_args(argv)


def server_config(settings: Settings, args: argparse.Namespace) -> uvicorn.Config:
    """uvicorn config for ``settings`` with command line overrides applied.

    Proxy headers stay off: caller identity for rate limiting is taken from
    X-Forwarded-For by the chat routes themselves.
    """
    return uvicorn.Config(
        app="api.app:create_app",
        factory=True,
        host=args.host or settings.host,
        port=args.port if args.port is not None else settings.port,
        log_level=(args.log_level or settings.log_level).lower(),
        proxy_headers=False,
        access_log=False,
        use_colors=False,
    )


def main(argv: Sequence[str] | None = None) -> int:
    config = server_config(Settings(), parse_args(argv))
    logger.info("Starting VibeGate API on %s:%d", config.host, config.port)
    try:
        uvicorn.Server(config).run()
    except KeyboardInterrupt:
        return 130
    except (OSError, RuntimeError) as e:
        logger.error("Server error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

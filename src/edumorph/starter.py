#!/usr/bin/env python3
"""
EduMorph - API launcher
Starts the FastAPI backend with uvicorn on the first free port.
"""

import argparse
import logging
import socket

import uvicorn

from edumorph.core.services.logging import get_logging_service


def find_free_port(start_port: int = 8000) -> int:
    """Find a free port starting from start_port using bind()."""
    port = start_port
    while port < 65535:
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                s.bind(("127.0.0.1", port))
                return port
        except OSError:
            port += 1
    return start_port


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run the EduMorph API server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument(
        "--strict-port",
        action="store_true",
        help="Fail instead of moving to the next free port",
    )
    args = parser.parse_args(argv)

    # Installs the structlog configuration and file handlers
    get_logging_service()
    logger = logging.getLogger(__name__)

    port = args.port if args.strict_port else find_free_port(args.port)
    logger.info(f"Starting EduMorph API on http://{args.host}:{port}")

    uvicorn.run(
        "edumorph.api.main:app",
        host=args.host,
        port=port,
        log_level="info",
        reload=False,
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

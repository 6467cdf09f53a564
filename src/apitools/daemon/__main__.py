"""Entry point for the email RPC service.

Usage:
    python -m apitools.daemon -f etc/apitools.json
    python -m apitools.daemon --port 18861 --log-file /var/log/apitools-rpc.log
"""

import argparse
import logging
from pathlib import Path

from ..config import load_config
from ..utils.exception_logger import ExceptionLogger
from .server import start_server

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def main():
    """Main entry point for the email RPC service."""
    parser = argparse.ArgumentParser(description="apitools email RPC service")
    parser.add_argument(
        "-f", "--config", default=None, help="Path to apitools JSON config"
    )
    parser.add_argument("--host", default=None, help="Override RPC bind host")
    parser.add_argument("--port", type=int, default=None, help="Override RPC port")
    parser.add_argument(
        "--socket", default=None, help="Bind a Unix socket instead of TCP"
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Also log to file")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    args = parser.parse_args()

    config = load_config(args.config)
    if args.host:
        config.email_rpc.host = args.host
    if args.port:
        config.email_rpc.port = args.port
    if args.socket:
        config.email_rpc.socket_path = args.socket

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
    )

    if args.log_file:
        file_handler = logging.FileHandler(args.log_file)
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(file_handler)
        logger.info(f"Email RPC service logging to {args.log_file}")

    ExceptionLogger.initialize(mode="rpc").install_thread_exception_hook()

    start_server(config)


if __name__ == "__main__":
    main()

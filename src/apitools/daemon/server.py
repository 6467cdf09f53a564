"""Email RPC server startup.

Binds either a TCP host/port or, when configured, a Unix socket. A Unix
socket also acts as an atomic lock: only one server can bind it.
"""

import logging
import signal
import socket
import sys
from pathlib import Path
from typing import Optional

from rpyc.utils.server import ThreadedServer

from ..config import AppConfig
from .service import EmailRpcService

logger = logging.getLogger(__name__)

PROTOCOL_CONFIG = {
    "allow_public_attrs": False,
    "allow_pickle": False,
    "sync_request_timeout": 300,
}


def create_server(config: AppConfig, service: Optional[EmailRpcService] = None) -> ThreadedServer:
    """Create (but do not start) the rpyc server for the mail tier."""
    service = service or EmailRpcService(config.email)
    rpc = config.email_rpc

    if rpc.socket_path:
        socket_path = Path(rpc.socket_path)
        _clean_stale_socket(socket_path)
        return ThreadedServer(
            service,
            socket_path=str(socket_path),
            protocol_config=PROTOCOL_CONFIG,
        )

    return ThreadedServer(
        service,
        hostname=rpc.host,
        port=rpc.port,
        protocol_config=PROTOCOL_CONFIG,
    )


def start_server(config: AppConfig) -> None:
    """Start the mail tier and block until shutdown.

    Raises:
        SystemExit: If the address or socket is already in use
    """
    socket_path = Path(config.email_rpc.socket_path) if config.email_rpc.socket_path else None
    _setup_signal_handlers(socket_path)

    try:
        server = create_server(config)
    except OSError as e:
        if "Address already in use" in str(e):
            logger.error(f"Email RPC service already running: {e}")
            print(f"ERROR: Email RPC service already running: {e}", file=sys.stderr)
            sys.exit(1)
        raise

    target = socket_path or f"{config.email_rpc.host}:{server.port}"
    logger.info(f"Email RPC service listening on {target}")
    print(f"Email RPC service started on {target}")

    try:
        server.start()
    finally:
        if socket_path and socket_path.exists():
            socket_path.unlink()
            logger.info(f"Cleaned up socket {socket_path}")


def _clean_stale_socket(socket_path: Path) -> None:
    """Remove a leftover socket file, or exit if a server still answers on it."""
    if not socket_path.exists():
        return

    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.connect(str(socket_path))
    except (ConnectionRefusedError, FileNotFoundError):
        logger.info(f"Removing stale socket {socket_path}")
        socket_path.unlink()
        return
    finally:
        sock.close()

    logger.error(f"Email RPC service already running on {socket_path}")
    print(f"ERROR: Email RPC service already running on {socket_path}", file=sys.stderr)
    sys.exit(1)


def _setup_signal_handlers(socket_path: Optional[Path]) -> None:
    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down")
        if socket_path and socket_path.exists():
            socket_path.unlink()
        sys.exit(0)

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

"""Email RPC tier.

Key Components:
- EmailRpcService: rpyc service with exposed send_email and ping
- create_server / start_server: ThreadedServer on TCP or a Unix socket
"""

from .server import create_server, start_server
from .service import EmailRpcService

__all__ = [
    "EmailRpcService",
    "create_server",
    "start_server",
]

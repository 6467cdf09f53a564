"""
Main entry point for the apitools HTTP API.

Runs the FastAPI app factory under uvicorn.
"""

import argparse
import logging
import os
from typing import Optional

import uvicorn

from ..config import CONFIG_ENV_VAR, load_config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def run_server(
    config_path: Optional[str] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
    reload: bool = False,
) -> None:
    """Run the API under uvicorn; blocks until shutdown."""
    # The factory runs inside uvicorn (and its reload workers), so the
    # config path travels through the environment.
    if config_path:
        os.environ[CONFIG_ENV_VAR] = os.path.abspath(config_path)

    config = load_config(config_path)
    host = host or config.server.host
    port = port or config.server.port

    print(f"Starting apitools API on {host}:{port}")
    print(f"Email backend: {config.email_backend}")
    print(f"Documentation available at: http://{host}:{port}/docs")

    uvicorn.run(
        "apitools.server.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        access_log=False,
    )


def main():
    """Main entry point for the HTTP API."""
    parser = argparse.ArgumentParser(description="apitools HTTP API")
    parser.add_argument(
        "-f", "--config", default=None, help="Path to apitools JSON config"
    )
    parser.add_argument("--host", type=str, default=None, help="Host to bind to")
    parser.add_argument("--port", type=int, default=None, help="Port to run on")
    parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT
    )

    run_server(args.config, args.host, args.port, args.reload)


if __name__ == "__main__":
    main()

"""
Command-line interface for Podboard.

This module provides the command-line interface for the Podboard application,
handling argument parsing, input validation, and server startup. All options
are collected into an immutable ServerConfig handed to the server.

Key Functions:
- build_parser: Create and configure the argument parser
- build_config: Validate parsed arguments into a ServerConfig
- main: Main entry point for the CLI application

Kubernetes configuration:
- Uses in-cluster config when running in a pod
- Otherwise uses --kubeconfig, then KUBECONFIG, then ~/.kube/config

Example:
    ```bash
    # Local development, all defaults
    podboard serve

    # Production deployment
    podboard serve --bind-address=0.0.0.0:9999 --domain=podboard.example.com
    ```
"""

import argparse
import asyncio
import os
import sys
from typing import Optional, Sequence

from .constants import (
    DEFAULT_BIND_ADDRESS, DEFAULT_LOG_LEVEL, DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_UVICORN_LOG_LEVEL, ENV_BIND_ADDRESS, ENV_DOMAIN, ENV_LOG_LEVEL,
    ENV_REQUEST_TIMEOUT, ENV_UVICORN_LOG_LEVEL
)
from .exceptions import ConfigurationError
from .models import ServerConfig
from .validation import validate_bind_address, validate_log_level, validate_request_timeout


def build_parser() -> argparse.ArgumentParser:
    """
    Build and configure the command-line argument parser.

    Environment variables are used as defaults where appropriate.

    Returns:
        argparse.ArgumentParser: Configured argument parser with all options

    Environment Variables:
        PODBOARD_BIND_ADDRESS: Default address to listen on (default: 0.0.0.0:9999)
        PODBOARD_LOG_LEVEL: Default log level (default: Info)
        PODBOARD_REQUEST_TIMEOUT: Default Kubernetes API timeout in seconds (default: 30)
        DOMAIN: Default server domain name
    """
    p = argparse.ArgumentParser("podboard", description="Kubernetes pod dashboard (multi-cluster, regex label filtering)")
    p.add_argument("command", choices=['serve'], help="Subcommand to run (only 'serve' supported)")
    p.add_argument("-b", "--bind-address", default=os.getenv(ENV_BIND_ADDRESS, DEFAULT_BIND_ADDRESS),
                   help="Address (host and port) on which to listen (env: PODBOARD_BIND_ADDRESS)")
    p.add_argument("-d", "--domain", default=os.getenv(ENV_DOMAIN), help="Server domain name (env: DOMAIN)")
    p.add_argument("--kubeconfig", default=None, help="Path to kubeconfig (defaults to KUBECONFIG, then ~/.kube/config)")
    p.add_argument("--request-timeout", default=os.getenv(ENV_REQUEST_TIMEOUT, str(DEFAULT_REQUEST_TIMEOUT_SECONDS)),
                   help="Seconds to wait on Kubernetes API calls, 0 disables (env: PODBOARD_REQUEST_TIMEOUT)")
    p.add_argument("-l", "--log-level", default=os.getenv(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL),
                   help="Log Level (Trace, Debug, Info, Warn, Error)")
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose output (same as --log-level=Debug)")
    return p


def build_config(args: argparse.Namespace) -> ServerConfig:
    """
    Validate parsed arguments and build the server configuration.

    Raises:
        ConfigurationError: If any option is invalid
    """
    host, port = validate_bind_address(args.bind_address)
    log_level = "DEBUG" if args.verbose else validate_log_level(args.log_level)
    return ServerConfig(
        host=host,
        port=port,
        domain=args.domain or None,
        kubeconfig=args.kubeconfig,
        request_timeout=validate_request_timeout(args.request_timeout),
        log_level=log_level,
        uvicorn_log_level=os.getenv(ENV_UVICORN_LOG_LEVEL, DEFAULT_UVICORN_LOG_LEVEL),
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    Main entry point for the Podboard CLI application.

    Raises:
        SystemExit: On configuration errors (exit code 2) or server errors (exit code 1)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        server_config = build_config(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    from .server import run_server

    try:
        asyncio.run(run_server(server_config))
    except KeyboardInterrupt:
        print("\nShutting down...", file=sys.stderr)
    except Exception as e:
        print(f"Server error: {e}", file=sys.stderr)
        sys.exit(1)

if __name__ == "__main__":  # pragma: no cover
    main()

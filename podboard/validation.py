"""
Input validation for Podboard configuration.

This module validates the values that reach the server from the command line
and the environment before a ServerConfig is built.

Key Functions:
- validate_port: Validates port numbers (1-65535)
- validate_host: Validates host strings
- validate_bind_address: Splits and validates "host:port"
- validate_log_level: Normalizes a log level name for the logging module
- validate_request_timeout: Validates the Kubernetes API request timeout

All validation functions raise ConfigurationError with a descriptive message
when validation fails.

Example:
    ```python
    try:
        host, port = validate_bind_address("0.0.0.0:9999")
        level = validate_log_level("warn")  # "WARNING"
    except ConfigurationError as e:
        print(f"Validation failed: {e}")
    ```
"""

from typing import Optional, Tuple, Union

from .constants import LOG_LEVELS
from .exceptions import ConfigurationError


def validate_port(port: int) -> int:
    """
    Validate port number for server binding.

    Raises:
        ConfigurationError: If port is not an integer or outside 1-65535
    """
    if not isinstance(port, int) or port < 1 or port > 65535:
        raise ConfigurationError(f"Port must be an integer between 1 and 65535, got: {port}")
    return port


def validate_host(host: str) -> str:
    """
    Validate host string for server binding.

    Raises:
        ConfigurationError: If host is empty or too long
    """
    if not host or not host.strip():
        raise ConfigurationError("Host cannot be empty")

    host = host.strip()

    if len(host) > 253:  # DNS name length limit
        raise ConfigurationError("Host name too long")

    return host


def validate_bind_address(address: str) -> Tuple[str, int]:
    """
    Split a bind address of the form "host:port" and validate both parts.

    IPv6 hosts may be bracketed, e.g. "[::1]:9999".

    Returns:
        Tuple[str, int]: The host and port

    Raises:
        ConfigurationError: If the address has no port or either part is invalid
    """
    if not address or ":" not in address:
        raise ConfigurationError(f"Bind address must be host:port, got: {address!r}")

    host, _, port_text = address.strip().rpartition(":")
    host = host.strip("[]")
    try:
        port = int(port_text)
    except ValueError:
        raise ConfigurationError(f"Invalid port in bind address: {address!r}")

    return validate_host(host), validate_port(port)


def validate_log_level(level: str) -> str:
    """
    Normalize a log level name to one the logging module understands.

    Accepts Trace, Debug, Info, Warn, Warning and Error in any case. Trace maps
    to DEBUG and Warn to WARNING.

    Raises:
        ConfigurationError: If the level is not recognized
    """
    name = (level or "").strip().upper()
    if name not in LOG_LEVELS:
        raise ConfigurationError(f"Unknown log level {level!r}, expected one of: Trace, Debug, Info, Warn, Error")
    if name == "TRACE":
        return "DEBUG"
    if name == "WARN":
        return "WARNING"
    return name


def validate_request_timeout(timeout: Union[str, float, None]) -> Optional[float]:
    """
    Validate the timeout applied to Kubernetes API calls.

    Accepts a number or its string form (from the command line or environment).
    Zero or None disables the timeout.

    Raises:
        ConfigurationError: If timeout is not a number or negative
    """
    if timeout is None:
        return None
    try:
        value = float(timeout)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Request timeout must be a non-negative number, got: {timeout!r}") from None
    if not value >= 0:
        raise ConfigurationError(f"Request timeout must be a non-negative number, got: {timeout!r}")
    if value == 0:
        return None
    return value

"""
Constants and configuration defaults for Podboard.

This module contains the configuration constants used throughout the Podboard
application, including server defaults, Kubernetes naming conventions, display
markers for derived pod status, and environment variable names.

Constants are organized by category:
- Server defaults: Default bind address and log levels
- Environment variables: Names of the variables read at startup
- Namespaces: Default namespace and the "all namespaces" sentinel
- Kubernetes API: Delete propagation and request timeouts
- Display markers: Fallback strings for status, image tag and age
"""

# Server defaults
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 9999
DEFAULT_BIND_ADDRESS = f"{DEFAULT_HOST}:{DEFAULT_PORT}"

# Logging
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_UVICORN_LOG_LEVEL = "info"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "WARN", "WARNING", "ERROR")

# Environment variables
ENV_BIND_ADDRESS = "PODBOARD_BIND_ADDRESS"
ENV_LOG_LEVEL = "PODBOARD_LOG_LEVEL"
ENV_UVICORN_LOG_LEVEL = "PODBOARD_UVICORN_LEVEL"
ENV_REQUEST_TIMEOUT = "PODBOARD_REQUEST_TIMEOUT"
ENV_DOMAIN = "DOMAIN"
ENV_KUBECONFIG = "KUBECONFIG"

# Namespaces
DEFAULT_NAMESPACE = "default"
ALL_NAMESPACES = "all"

# Kubernetes API
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0
DELETE_PROPAGATION_POLICY = "Foreground"
VIRTUAL_CONTEXT_NAME = "virtual"
REGEX_SELECTOR_OPERATOR = "=~"

# Display markers
STATUS_TERMINATING = "Terminating"
STATUS_INIT_ERROR = "InitError"
STATUS_ERROR = "Error"
DEFAULT_IMAGE_TAG = "latest"
UNKNOWN = "unknown"

"""
Custom exceptions for Podboard.

This module defines the exception classes raised by the cluster resolver and
the pod query engine. The HTTP layer is the only place that maps them to
response status codes; everything below it raises and lets the error travel.

Exception Hierarchy:
- PodboardError: Base exception for all Podboard-specific errors
  - ConfigUnavailableError: No usable kubeconfig, or operation invalid in-cluster
  - ClusterNotFoundError: Named cluster absent from the kubeconfig
  - CredentialNotFoundError: No context references the cluster, or its user is missing
  - ClientConstructionError: Transport or auth setup for a cluster client failed
  - ApiError: An upstream list/delete call failed, timed out or was cancelled
  - ConfigurationError: Invalid command-line or environment configuration

Example:
    ```python
    try:
        client = resolver.build_client("staging")
    except ClusterNotFoundError as e:
        print(f"Unknown cluster: {e}")
    ```
"""

from typing import Optional


class PodboardError(Exception):
    """Base exception for Podboard errors."""
    pass


class ConfigUnavailableError(PodboardError):
    """Raised when no kubeconfig can be used, or the operation is invalid in-cluster."""
    pass


class ClusterNotFoundError(PodboardError):
    """Raised when a named cluster is not declared in the kubeconfig."""

    def __init__(self, cluster: str):
        super().__init__(f"cluster {cluster!r} not found in kubeconfig")
        self.cluster = cluster


class CredentialNotFoundError(PodboardError):
    """Raised when no usable user can be selected for a cluster."""
    pass


class ClientConstructionError(PodboardError):
    """Raised when a Kubernetes client cannot be built for a cluster."""
    pass


class ApiError(PodboardError):
    """
    Raised when a call against the Kubernetes API fails.

    Attributes:
        status: HTTP status returned by the API server, if any
        cancelled: True when the call was aborted by a timeout
    """

    def __init__(self, message: str, status: Optional[int] = None, cancelled: bool = False):
        super().__init__(message)
        self.status = status
        self.cancelled = cancelled


class ConfigurationError(PodboardError):
    """Raised when there's a configuration issue."""
    pass

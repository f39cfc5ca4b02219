"""
Data models for Podboard.

This module defines the data structures exchanged between the cluster
resolver, the pod query engine and the HTTP layer. None of them outlive a
single request except ServerConfig, which is built once at startup.

Key Models:
- ClusterInfo: A cluster declared in the kubeconfig, flagged if current
- PodRecord: Display projection of a pod for the dashboard table
- ServerConfig: Immutable startup configuration for the server

All models use dataclasses; `to_dict` produces the JSON shape the web UI reads.

Example:
    ```python
    record = PodRecord(
        name="api-7f9c",
        namespace="default",
        image_tag="1.25",
        status="Running",
        ready="1/1",
        restarts=0,
        age="3h",
    )
    ```
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional


@dataclass
class ClusterInfo:
    """
    A cluster entry from the kubeconfig.

    Attributes:
        name: Cluster name as declared in the kubeconfig
        current: Whether the current context points at this cluster
    """
    name: str
    current: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'current': self.current}


@dataclass
class PodRecord:
    """
    Pod information for the dashboard.

    Every field is computed from the pod object at list time; records are
    never cached or updated in place.

    Attributes:
        name: Pod name
        namespace: Kubernetes namespace
        image_tag: Tag of the first container's image
        status: Display status (phase, container reason, or Terminating)
        ready: Ready containers over declared containers, e.g. "1/2"
        restarts: Restart count summed across containers
        age: Elapsed time since creation in a single unit, e.g. "5m"
        node: Node the pod is scheduled on
        ip: Pod IP address
        labels: Pod labels

    Example:
        ```python
        record.to_dict()
        # {'name': 'api-7f9c', 'imageTag': '1.25', 'ready': '1/1', ...}
        ```
    """
    name: str
    namespace: str
    image_tag: str
    status: str
    ready: str
    restarts: int
    age: str
    node: str = ""
    ip: str = ""
    labels: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'name': self.name,
            'namespace': self.namespace,
            'imageTag': self.image_tag,
            'status': self.status,
            'ready': self.ready,
            'restarts': self.restarts,
            'age': self.age,
            'node': self.node,
            'ip': self.ip,
        }
        if self.labels:
            data['labels'] = dict(self.labels)
        return data


@dataclass(frozen=True)
class ServerConfig:
    """
    Server configuration parameters.

    Built once by the CLI and handed to `run_server`; nothing in the package
    reads command-line flags from global state.

    Attributes:
        host: Server bind host
        port: Server port
        domain: Public domain name the dashboard is served under (informational)
        kubeconfig: Explicit kubeconfig path, overriding KUBECONFIG and ~/.kube/config
        request_timeout: Seconds before a Kubernetes API call is abandoned
        log_level: Application log level
        uvicorn_log_level: Uvicorn server log level

    Example:
        ```python
        config = ServerConfig(host="0.0.0.0", port=9999)
        ```
    """
    host: str
    port: int
    domain: Optional[str] = None
    kubeconfig: Optional[str] = None
    request_timeout: Optional[float] = 30.0
    log_level: str = "INFO"
    uvicorn_log_level: str = "info"

"""Test configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest
import yaml
from kubernetes import client

from podboard.exceptions import ApiError
from podboard.kube import ClusterClient

NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def container_status(
    name: str = "app",
    ready: bool = True,
    restarts: int = 0,
    waiting: Optional[str] = None,
    exit_code: Optional[int] = None,
    terminated_reason: Optional[str] = None,
) -> client.V1ContainerStatus:
    """Build a container status in the running, waiting or terminated state."""
    if waiting is not None:
        state = client.V1ContainerState(waiting=client.V1ContainerStateWaiting(reason=waiting))
    elif exit_code is not None:
        state = client.V1ContainerState(
            terminated=client.V1ContainerStateTerminated(exit_code=exit_code, reason=terminated_reason)
        )
    else:
        state = client.V1ContainerState(running=client.V1ContainerStateRunning(started_at=NOW))
    return client.V1ContainerStatus(
        name=name, ready=ready, restart_count=restarts, image="img", image_id="img-id", state=state
    )


def make_pod(
    name: str = "web-1",
    namespace: str = "default",
    labels: Optional[Dict[str, str]] = None,
    images: Optional[List[str]] = None,
    phase: str = "Running",
    statuses: Optional[List[client.V1ContainerStatus]] = None,
    init_statuses: Optional[List[client.V1ContainerStatus]] = None,
    age: timedelta = timedelta(hours=3),
    deleting: bool = False,
    node: str = "node-a",
    ip: str = "10.0.0.5",
) -> client.V1Pod:
    """Build a V1Pod the way the API client returns it."""
    images = ["nginx:1.25"] if images is None else images
    if statuses is None:
        statuses = [container_status(name=f"c{i}") for i in range(len(images))]
    return client.V1Pod(
        metadata=client.V1ObjectMeta(
            name=name,
            namespace=namespace,
            labels=labels,
            creation_timestamp=NOW - age,
            deletion_timestamp=NOW if deleting else None,
        ),
        spec=client.V1PodSpec(
            containers=[client.V1Container(name=f"c{i}", image=image) for i, image in enumerate(images)],
            node_name=node,
        ),
        status=client.V1PodStatus(
            phase=phase,
            pod_ip=ip,
            container_statuses=statuses,
            init_container_statuses=init_statuses,
        ),
    )


class FakeClusterClient(ClusterClient):
    """In-memory ClusterClient with equality-only native label selectors."""

    def __init__(self, pods: Optional[List[client.V1Pod]] = None, namespaces: Optional[List[str]] = None):
        self.pods = list(pods or [])
        self.namespaces = list(namespaces or ["default", "kube-system"])
        self.calls = []
        self.closed = False

    def list_namespaces(self):
        self.calls.append(("list_namespaces",))
        return [client.V1Namespace(metadata=client.V1ObjectMeta(name=n)) for n in self.namespaces]

    def list_pods(self, namespace: str, label_selector: str = ""):
        self.calls.append(("list_pods", namespace, label_selector))
        pods = [p for p in self.pods if not namespace or p.metadata.namespace == namespace]
        if label_selector:
            wanted = {}
            for clause in label_selector.split(","):
                key, value = clause.split("=", 1)
                wanted[key.strip()] = value.lstrip("=").strip()
            pods = [
                p for p in pods
                if all((p.metadata.labels or {}).get(k) == v for k, v in wanted.items())
            ]
        return pods

    def delete_pod(self, namespace: str, name: str) -> None:
        self.calls.append(("delete_pod", namespace, name))
        for pod in self.pods:
            if pod.metadata.namespace == namespace and pod.metadata.name == name:
                self.pods.remove(pod)
                return
        raise ApiError(f'failed to delete pod {namespace}/{name}: 404 Not Found', status=404)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_client():
    """Fake cluster with a small set of labelled pods."""
    return FakeClusterClient(pods=[
        make_pod("nginx-1", labels={"app": "nginx-frontend", "env": "dev"}),
        make_pod("nginx-2", labels={"app": "nginx-backend", "env": "prod"}),
        make_pod("redis-1", labels={"app": "redis", "env": "dev"}),
        make_pod("bare-1", labels=None),
        make_pod("coredns-1", namespace="kube-system", labels={"k8s-app": "kube-dns"}),
    ])


@pytest.fixture
def kubeconfig_data():
    """Kubeconfig with three clusters; cluster "A" is used by three contexts."""
    return {
        "apiVersion": "v1",
        "kind": "Config",
        "current-context": "b-admin",
        "clusters": [
            {"name": "c-cluster", "cluster": {"server": "https://c.example.com:6443"}},
            {"name": "A", "cluster": {"server": "https://a.example.com:6443", "insecure-skip-tls-verify": True}},
            {"name": "b-cluster", "cluster": {"server": "https://b.example.com:6443"}},
        ],
        "users": [
            {"name": "u1", "user": {"token": "token-u1"}},
            {"name": "u2", "user": {"token": "token-u2"}},
            {"name": "b-user", "user": {"token": "token-b"}},
        ],
        "contexts": [
            {"name": "a1", "context": {"cluster": "A", "user": "u1"}},
            {"name": "a2", "context": {"cluster": "A", "user": "u2"}},
            {"name": "a3", "context": {"cluster": "A", "user": "u1"}},
            {"name": "b-admin", "context": {"cluster": "b-cluster", "user": "b-user"}},
        ],
    }


@pytest.fixture
def write_kubeconfig(tmp_path):
    """Write a kubeconfig dict to a temporary file and return its path."""
    def _write(data) -> str:
        path = tmp_path / "config"
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def kubeconfig_path(write_kubeconfig, kubeconfig_data):
    return write_kubeconfig(kubeconfig_data)

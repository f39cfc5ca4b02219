"""
Kubernetes cluster resolution and client construction for Podboard.

This module provides the interface between Podboard and the Kubernetes API.
It decides whether the process runs inside a cluster or from a local
kubeconfig, enumerates the clusters a kubeconfig declares, and builds a
client scoped to exactly one named cluster on demand.

Key Components:
- ClusterClient: Capability to list namespaces/pods and delete a pod in one cluster
- KubernetesClusterClient: ClusterClient backed by the official CoreV1Api
- KubeConfigData: The parts of a kubeconfig file the resolver works with
- ClusterResolver: Mode detection, cluster listing and per-cluster client factory
- find_best_user: Choose the user most contexts pair with a cluster

The kubeconfig is re-read on every call, so each request sees the file as it
is on disk at that moment. Nothing here mutates the file.

Example:
    ```python
    resolver = ClusterResolver()
    for cluster in resolver.list_clusters():
        print(cluster.name, cluster.current)
    kube = resolver.build_client("staging")
    ```
"""

from __future__ import annotations
import logging
import os
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List

import urllib3
import yaml
from kubernetes import client, config
from kubernetes.client import ApiException
from kubernetes.config.config_exception import ConfigException
from kubernetes.config.kube_config import KubeConfigLoader

from .constants import DELETE_PROPAGATION_POLICY, ENV_KUBECONFIG, VIRTUAL_CONTEXT_NAME
from .exceptions import (
    ApiError, ClientConstructionError, ClusterNotFoundError,
    ConfigUnavailableError, CredentialNotFoundError
)
from .models import ClusterInfo

log = logging.getLogger('podboard')


class ClusterClient(ABC):
    """
    Anything that can list pods and namespaces and delete a pod, scoped to one cluster.

    Implementations are blocking; the pod query engine runs them in an executor.
    Failures are reported as ApiError.
    """

    @abstractmethod
    def list_namespaces(self) -> List[Any]:
        """Return namespace objects in API order."""

    @abstractmethod
    def list_pods(self, namespace: str, label_selector: str = "") -> List[Any]:
        """Return pod objects; an empty namespace means all namespaces."""

    @abstractmethod
    def delete_pod(self, namespace: str, name: str) -> None:
        """Request deletion of a pod."""

    def close(self) -> None:
        """Release connections held by the client."""


class KubernetesClusterClient(ClusterClient):
    """
    ClusterClient backed by the Kubernetes CoreV1Api.

    Attributes:
        core: CoreV1Api client bound to a single cluster
        request_timeout: Per-request timeout in seconds passed to the API client
    """

    def __init__(self, core: client.CoreV1Api, request_timeout: Optional[float] = None):
        self.core = core
        self.request_timeout = request_timeout

    def _call(self, action: str, fn, *args, **kwargs):
        if self.request_timeout:
            kwargs['_request_timeout'] = self.request_timeout
        try:
            return fn(*args, **kwargs)
        except ApiException as e:
            raise ApiError(f"failed to {action}: {e.status} {e.reason}", status=e.status) from e
        except urllib3.exceptions.TimeoutError as e:
            raise ApiError(f"failed to {action}: request timed out", cancelled=True) from e
        except urllib3.exceptions.HTTPError as e:
            raise ApiError(f"failed to {action}: {e}") from e

    def list_namespaces(self) -> List[Any]:
        return self._call("list namespaces", self.core.list_namespace).items

    def list_pods(self, namespace: str, label_selector: str = "") -> List[Any]:
        kwargs = {}
        if label_selector:
            kwargs['label_selector'] = label_selector
        if namespace:
            result = self._call("list pods", self.core.list_namespaced_pod, namespace, **kwargs)
        else:
            result = self._call("list pods", self.core.list_pod_for_all_namespaces, **kwargs)
        return result.items

    def delete_pod(self, namespace: str, name: str) -> None:
        body = client.V1DeleteOptions(propagation_policy=DELETE_PROPAGATION_POLICY)
        self._call(f"delete pod {namespace}/{name}", self.core.delete_namespaced_pod, name, namespace, body=body)

    def close(self) -> None:
        self.core.api_client.close()


@dataclass
class KubeConfigData:
    """
    Parsed kubeconfig, keyed by entry name in declared order.

    Attributes:
        clusters: Cluster name -> cluster body (server, certificate-authority, ...)
        users: User name -> user body (token, client certificate, exec, ...)
        contexts: Context name -> context body (cluster, user, namespace)
        current_context: Value of the current-context field
    """
    clusters: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    users: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    contexts: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    current_context: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'KubeConfigData':
        return cls(
            clusters=_named_entries(data.get('clusters'), 'cluster'),
            users=_named_entries(data.get('users'), 'user'),
            contexts={
                name: {**context, 'cluster': _name(context.get('cluster')), 'user': _name(context.get('user'))}
                for name, context in _named_entries(data.get('contexts'), 'context').items()
            },
            current_context=_name(data.get('current-context')),
        )

    def current_cluster(self) -> str:
        """Cluster of the current context, or "" when unset or dangling."""
        if self.current_context:
            context = self.contexts.get(self.current_context)
            if context is not None:
                return context.get('cluster') or ""
        return ""


def _name(value: Any) -> str:
    # names are strings even when YAML reads them as numbers (name: 2024)
    return "" if value is None else str(value)


def _named_entries(entries: Any, body_key: str) -> Dict[str, Dict[str, Any]]:
    # first entry wins on duplicate names
    result: Dict[str, Dict[str, Any]] = {}
    for entry in entries or []:
        if not isinstance(entry, dict):
            continue
        name = _name(entry.get('name'))
        body = entry.get(body_key)
        if name:
            result.setdefault(name, body if isinstance(body, dict) else {})
    return result


def load_kubeconfig(path: str) -> KubeConfigData:
    """
    Read and parse a kubeconfig file.

    Args:
        path: Path to the kubeconfig file

    Returns:
        KubeConfigData: Clusters, users, contexts and the current context

    Raises:
        ConfigUnavailableError: If the path is empty, unreadable or not a kubeconfig
    """
    if not path:
        raise ConfigUnavailableError("kubeconfig path not found")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigUnavailableError(f"failed to load kubeconfig {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigUnavailableError(f"failed to parse kubeconfig {path}: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigUnavailableError(f"failed to parse kubeconfig {path}: not a mapping")
    return KubeConfigData.from_dict(data)


def find_best_user(kubeconfig: KubeConfigData, cluster_name: str) -> str:
    """
    Find the user most commonly paired with a cluster across all contexts.

    Ties go to the user seen first in declared context order.

    Args:
        kubeconfig: Parsed kubeconfig
        cluster_name: Cluster to find a user for

    Returns:
        str: Name of the chosen user

    Raises:
        CredentialNotFoundError: If no context references the cluster, or the
            chosen user is not declared in the kubeconfig

    Example:
        ```python
        # contexts: a1 -> (A, u1), a2 -> (A, u1), a3 -> (A, u2)
        find_best_user(kubeconfig, "A")  # "u1"
        ```
    """
    counts = Counter(
        context.get('user') for context in kubeconfig.contexts.values()
        if context.get('cluster') == cluster_name
    )
    if not counts:
        raise CredentialNotFoundError(f"no contexts found for cluster {cluster_name!r}")

    best_user, _ = counts.most_common(1)[0]
    if best_user not in kubeconfig.users:
        raise CredentialNotFoundError(f"user {best_user!r} not found in kubeconfig users")
    return best_user


def detect_in_cluster() -> bool:
    """Return True when in-cluster service account credentials are mounted."""
    try:
        config.load_incluster_config(client_configuration=client.Configuration())
    except ConfigException:
        return False
    return True


def default_kubeconfig_path() -> str:
    """Resolve the kubeconfig path from KUBECONFIG, falling back to ~/.kube/config."""
    env_path = os.getenv(ENV_KUBECONFIG, "")
    if env_path:
        return env_path.split(os.pathsep)[0]
    home = os.path.expanduser("~")
    if home and home != "~":
        return os.path.join(home, ".kube", "config")
    return ""


class ClusterResolver:
    """
    Resolve which cluster to talk to and build clients for it.

    The mode is decided once, at construction: if in-cluster credentials are
    present the resolver stays in in-cluster mode for its whole life and
    cluster names are ignored. Otherwise it works from a kubeconfig file.

    Attributes:
        kubeconfig_path: Kubeconfig file used in local mode ("" in-cluster)
        request_timeout: Per-request timeout handed to every client built

    Example:
        ```python
        resolver = ClusterResolver(kubeconfig="/path/to/config")
        if not resolver.is_in_cluster():
            print(resolver.current_cluster_name())
        ```
    """

    def __init__(
        self,
        kubeconfig: Optional[str] = None,
        in_cluster: Optional[bool] = None,
        request_timeout: Optional[float] = None,
    ):
        if in_cluster is None:
            in_cluster = detect_in_cluster()
        self._in_cluster = in_cluster
        self.request_timeout = request_timeout
        self.kubeconfig_path = "" if in_cluster else (kubeconfig or default_kubeconfig_path())
        if in_cluster:
            log.info("[kube] using in-cluster configuration")
        else:
            log.info(f"[kube] using kubeconfig path={self.kubeconfig_path or '<none>'}")

    def is_in_cluster(self) -> bool:
        return self._in_cluster

    def _load(self, what: str) -> KubeConfigData:
        if self._in_cluster:
            raise ConfigUnavailableError(f"{what} not available when running in cluster")
        return load_kubeconfig(self.kubeconfig_path)

    def list_clusters(self) -> List[ClusterInfo]:
        """
        List the clusters declared in the kubeconfig.

        Returns:
            List[ClusterInfo]: Sorted by name, with the current cluster first

        Raises:
            ConfigUnavailableError: In-cluster, or when the kubeconfig cannot be read
        """
        kubeconfig = self._load("clusters")
        current = kubeconfig.current_cluster()
        clusters = [ClusterInfo(name=name, current=name == current) for name in kubeconfig.clusters]
        clusters.sort(key=lambda c: (not c.current, c.name))
        return clusters

    def current_context_name(self) -> str:
        return self._load("current context").current_context

    def current_cluster_name(self) -> str:
        return self._load("current cluster").current_cluster()

    def build_client(self, cluster_name: str) -> ClusterClient:
        """
        Build a client for a named cluster.

        In local mode the client is built from a synthetic kubeconfig holding
        only the named cluster, its best user, and a virtual context pairing
        the two, so that no other context can leak into the connection.

        Args:
            cluster_name: Cluster to connect to (ignored in-cluster)

        Returns:
            ClusterClient: Client scoped to that cluster

        Raises:
            ConfigUnavailableError: When the kubeconfig cannot be read
            ClusterNotFoundError: When the cluster is not declared
            CredentialNotFoundError: When no user can be chosen for it
            ClientConstructionError: When the client configuration is invalid
        """
        if self._in_cluster:
            configuration = client.Configuration()
            try:
                config.load_incluster_config(client_configuration=configuration)
            except ConfigException as e:
                raise ClientConstructionError(f"failed to get in-cluster config: {e}") from e
            return self._wrap(configuration)

        kubeconfig = load_kubeconfig(self.kubeconfig_path)
        cluster = kubeconfig.clusters.get(cluster_name)
        if cluster is None:
            raise ClusterNotFoundError(cluster_name)

        user_name = find_best_user(kubeconfig, cluster_name)
        config_dict = {
            'apiVersion': 'v1',
            'kind': 'Config',
            'clusters': [{'name': cluster_name, 'cluster': cluster}],
            'users': [{'name': user_name, 'user': kubeconfig.users[user_name]}],
            'contexts': [{
                'name': VIRTUAL_CONTEXT_NAME,
                'context': {'cluster': cluster_name, 'user': user_name},
            }],
            'current-context': VIRTUAL_CONTEXT_NAME,
        }

        configuration = client.Configuration()
        try:
            loader = KubeConfigLoader(
                config_dict=config_dict,
                active_context=VIRTUAL_CONTEXT_NAME,
                # relative certificate paths resolve against the kubeconfig's directory
                config_base_path=os.path.dirname(os.path.abspath(self.kubeconfig_path)),
            )
            loader.load_and_set(configuration)
        except (ConfigException, ValueError, OSError) as e:
            raise ClientConstructionError(
                f"failed to create client config for cluster {cluster_name!r} (user {user_name!r}): {e}"
            ) from e

        log.info(f"[kube] created client cluster={cluster_name} user={user_name}")
        return self._wrap(configuration)

    def client_for(self, cluster_name: Optional[str]) -> ClusterClient:
        """
        Build a client for a request, falling back to the current cluster.

        In-cluster the name is ignored; locally an empty name means the cluster
        of the kubeconfig's current context.
        """
        if self._in_cluster:
            return self.build_client("")
        if not cluster_name:
            cluster_name = self.current_cluster_name()
            log.debug(f"[kube] no cluster requested, using current cluster={cluster_name!r}")
        return self.build_client(cluster_name)

    def _wrap(self, configuration: client.Configuration) -> KubernetesClusterClient:
        core = client.CoreV1Api(client.ApiClient(configuration))
        return KubernetesClusterClient(core, request_timeout=self.request_timeout)

"""
Pod and namespace queries for Podboard.

This module is the pod query engine: it lists namespaces and pods through a
ClusterClient, applies regex label filtering locally when the API cannot,
converts pods to display records, and deletes pods.

Client calls are blocking, so each one runs in the event loop's default
executor. A `timeout` bounds how long the caller waits; when it expires the
await is abandoned and an ApiError with `cancelled=True` is raised. No call is
retried.

Example:
    ```python
    kube = resolver.client_for("staging")
    pods = await list_pods(kube, "all", "app=~^api-", timeout=10)
    await delete_pod(kube, "default", pods[0].name)
    ```
"""

import asyncio
import functools
import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from .constants import ALL_NAMESPACES
from .exceptions import ApiError
from .kube import ClusterClient
from .label_selectors import LabelSelector, is_regex_selector
from .models import PodRecord
from .pod_processing import pod_to_record

log = logging.getLogger('podboard')


async def run_blocking(action: str, fn: Callable[..., Any], *args: Any, timeout: Optional[float] = None) -> Any:
    """Run a blocking call in the default executor, raising a cancelled ApiError on timeout."""
    loop = asyncio.get_event_loop()
    future = loop.run_in_executor(None, functools.partial(fn, *args))
    try:
        return await asyncio.wait_for(future, timeout)
    except asyncio.TimeoutError as e:
        log.warning(f"[pods] {action} timed out after {timeout}s")
        raise ApiError(f"failed to {action}: timed out after {timeout}s", cancelled=True) from e


async def list_namespaces(kube: ClusterClient, timeout: Optional[float] = None) -> List[str]:
    """
    List namespace names in the order the API returns them.

    Raises:
        ApiError: If the API call fails or times out
    """
    try:
        namespaces = await run_blocking("list namespaces", kube.list_namespaces, timeout=timeout)
    except ApiError as e:
        log.error(f"[pods] failed to list namespaces: {e}")
        raise
    return [ns.metadata.name for ns in namespaces]


async def list_pods(
    kube: ClusterClient,
    namespace: str,
    label_selector: str = "",
    timeout: Optional[float] = None,
) -> List[PodRecord]:
    """
    List pods as display records.

    Args:
        kube: Client for the target cluster
        namespace: Namespace to list, or "all" for every namespace
        label_selector: Optional selector; `=~` clauses are evaluated locally
            against the full pod list, anything else is passed to the API
        timeout: Seconds to wait for the API before giving up

    Returns:
        List[PodRecord]: One record per matching pod, in API order

    Raises:
        ApiError: If the API call fails or times out
    """
    query_namespace = "" if namespace == ALL_NAMESPACES else namespace
    selector = None
    if is_regex_selector(label_selector):
        # the API has no regex support, fetch everything and filter here
        selector = LabelSelector.parse(label_selector)
        api_selector = ""
    else:
        api_selector = label_selector or ""

    try:
        pods = await run_blocking("list pods", kube.list_pods, query_namespace, api_selector, timeout=timeout)
    except ApiError as e:
        log.error(f"[pods] failed to list pods namespace={namespace} selector='{label_selector}': {e}")
        raise

    now = datetime.now(timezone.utc)
    records = []
    for pod in pods:
        if selector is not None and not selector.matches(pod.metadata.labels):
            continue
        records.append(pod_to_record(pod, now))
    log.debug(f"[pods] namespace={namespace} selector='{label_selector}' matched={len(records)}/{len(pods)}")
    return records


async def delete_pod(kube: ClusterClient, namespace: str, name: str, timeout: Optional[float] = None) -> None:
    """
    Request deletion of a pod.

    Returns once the API server has accepted the request; the pod may still be
    terminating.

    Raises:
        ApiError: If the pod does not exist or the API call fails
    """
    try:
        await run_blocking(f"delete pod {namespace}/{name}", kube.delete_pod, namespace, name, timeout=timeout)
    except ApiError as e:
        log.error(f"[pods] failed to delete pod {namespace}/{name}: {e}")
        raise
    log.info(f"[pods] pod deleted namespace={namespace} pod={name}")

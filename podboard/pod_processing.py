"""
Pod data processing and transformation utilities.

This module turns Kubernetes pod objects into the rows shown in the Podboard
table. Every value is derived from the pod object alone, so the same pod
always produces the same record for a given clock reading.

Key Functions:
- get_pod_status: Derive a display status from phase and container states
- parse_image_tag: Extract the tag from an image reference
- extract_image_tag: Tag of the pod's first container image
- count_restarts: Sum of container restart counts
- ready_ratio: Ready containers over declared containers
- format_age: Render an age in seconds as a single unit
- pod_to_record: Convert a Kubernetes pod object to a PodRecord

Example:
    ```python
    record = pod_to_record(k8s_pod_object)
    print(f"{record.name}: {record.status} ({record.ready})")
    ```
"""

from datetime import datetime, timezone
from typing import Any, Optional

from .constants import (
    DEFAULT_IMAGE_TAG, STATUS_ERROR, STATUS_INIT_ERROR, STATUS_TERMINATING, UNKNOWN
)
from .models import PodRecord

_DETAILED_PHASES = ('Pending', 'Running')


def _waiting_reason(container_status: Any) -> Optional[str]:
    state = getattr(container_status, 'state', None)
    waiting = getattr(state, 'waiting', None)
    if waiting is not None and waiting.reason:
        return waiting.reason
    return None


def _failed_termination(container_status: Any, fallback: str) -> Optional[str]:
    # zero exit codes are expected completions and are not reported
    state = getattr(container_status, 'state', None)
    terminated = getattr(state, 'terminated', None)
    if terminated is not None and terminated.exit_code != 0:
        return terminated.reason or fallback
    return None


def get_pod_status(pod: Any) -> str:
    """
    Return the most accurate status for a pod.

    Goes beyond the pod phase to surface container problems such as
    CrashLoopBackOff or ImagePullBackOff:

    1. A pod with a deletion timestamp is "Terminating".
    2. For Pending and Running pods, init containers are checked first, then
       regular containers, each in declaration order. The first waiting
       container with a reason, or terminated container with a non-zero exit
       code, decides the status.
    3. Otherwise the phase is returned.
    """
    if pod.metadata.deletion_timestamp is not None:
        return STATUS_TERMINATING

    status = pod.status
    phase = status.phase or ""
    if phase not in _DETAILED_PHASES:
        return phase

    for container_status in status.init_container_statuses or []:
        reason = _waiting_reason(container_status) or _failed_termination(container_status, STATUS_INIT_ERROR)
        if reason:
            return reason

    for container_status in status.container_statuses or []:
        reason = _waiting_reason(container_status) or _failed_termination(container_status, STATUS_ERROR)
        if reason:
            return reason

    return phase


def parse_image_tag(image: str) -> str:
    """
    Extract the tag from an image reference.

    Example:
        ```python
        parse_image_tag("nginx:1.25")              # "1.25"
        parse_image_tag("myregistry.io:5000/app")  # "latest"
        parse_image_tag("app")                     # "latest"
        ```
    """
    _, colon, after = image.rpartition(":")
    if not colon:
        return DEFAULT_IMAGE_TAG
    # registry:port/image, the colon belongs to the host
    if "/" in after:
        return DEFAULT_IMAGE_TAG
    return after.strip() or DEFAULT_IMAGE_TAG


def extract_image_tag(pod: Any) -> str:
    """Tag of the first container's image, or "unknown" for a pod without containers."""
    containers = getattr(pod.spec, 'containers', None) or []
    if not containers:
        return UNKNOWN
    return parse_image_tag(containers[0].image or "")


def count_restarts(pod: Any) -> int:
    return sum(cs.restart_count or 0 for cs in pod.status.container_statuses or [])


def ready_ratio(pod: Any) -> str:
    total = len(getattr(pod.spec, 'containers', None) or [])
    ready = sum(1 for cs in pod.status.container_statuses or [] if cs.ready)
    return f"{ready}/{total}"


def format_age(seconds: float) -> str:
    """Render an age as the largest whole unit that fits: 45s, 1m, 3h, 2d."""
    seconds = max(int(seconds), 0)
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    return f"{seconds // 86400}d"


def pod_age(pod: Any, now: Optional[datetime] = None) -> str:
    created = pod.metadata.creation_timestamp
    if created is None:
        return UNKNOWN
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return format_age((now - created).total_seconds())


def pod_to_record(pod: Any, now: Optional[datetime] = None) -> PodRecord:
    """Convert Kubernetes pod object to a PodRecord."""
    return PodRecord(
        name=pod.metadata.name,
        namespace=pod.metadata.namespace,
        image_tag=extract_image_tag(pod),
        status=get_pod_status(pod),
        ready=ready_ratio(pod),
        restarts=count_restarts(pod),
        age=pod_age(pod, now),
        node=getattr(pod.spec, 'node_name', None) or "",
        ip=getattr(pod.status, 'pod_ip', None) or "",
        labels=dict(pod.metadata.labels or {}),
    )

"""Test pod status, image tag, readiness and age derivation."""

import pytest
from datetime import timedelta

from conftest import NOW, container_status, make_pod
from podboard.pod_processing import (
    count_restarts, extract_image_tag, format_age, get_pod_status,
    parse_image_tag, pod_to_record, ready_ratio
)


class TestImageTag:
    @pytest.mark.parametrize("image, tag", [
        ("nginx:1.25", "1.25"),
        ("myregistry.io:5000/app", "latest"),
        ("app", "latest"),
        ("app:", "latest"),
        ("myregistry.io:5000/team/app:v2.1", "v2.1"),
        ("ghcr.io/org/app:sha-abc123", "sha-abc123"),
    ])
    def test_parse_image_tag(self, image, tag):
        assert parse_image_tag(image) == tag

    def test_uses_first_container(self):
        pod = make_pod(images=["api:3.0", "sidecar:9.9"])
        assert extract_image_tag(pod) == "3.0"

    def test_pod_without_containers(self):
        pod = make_pod(images=[])
        assert extract_image_tag(pod) == "unknown"


class TestPodStatus:
    def test_running(self):
        assert get_pod_status(make_pod()) == "Running"

    def test_terminating_wins(self):
        pod = make_pod(deleting=True, statuses=[container_status(waiting="CrashLoopBackOff")])
        assert get_pod_status(pod) == "Terminating"

    def test_crash_loop_overrides_running(self):
        pod = make_pod(statuses=[container_status(ready=False, waiting="CrashLoopBackOff")])
        assert get_pod_status(pod) == "CrashLoopBackOff"

    def test_completed_init_container_suppressed(self):
        pod = make_pod(
            init_statuses=[container_status(name="init", ready=False, exit_code=0, terminated_reason="Completed")],
            statuses=[container_status(ready=True)],
        )
        assert get_pod_status(pod) == "Running"

    def test_init_container_checked_before_regular(self):
        pod = make_pod(
            phase="Pending",
            init_statuses=[container_status(name="init", ready=False, waiting="PodInitializing")],
            statuses=[container_status(ready=False, waiting="ContainerCreating")],
        )
        assert get_pod_status(pod) == "PodInitializing"

    def test_failed_init_container_reason(self):
        pod = make_pod(
            phase="Pending",
            init_statuses=[container_status(name="init", ready=False, exit_code=1, terminated_reason="OOMKilled")],
        )
        assert get_pod_status(pod) == "OOMKilled"

    def test_failed_init_container_without_reason(self):
        pod = make_pod(
            phase="Pending",
            init_statuses=[container_status(name="init", ready=False, exit_code=2)],
        )
        assert get_pod_status(pod) == "InitError"

    def test_failed_container_without_reason(self):
        pod = make_pod(statuses=[container_status(ready=False, exit_code=137)])
        assert get_pod_status(pod) == "Error"

    def test_clean_sidecar_exit_suppressed(self):
        pod = make_pod(
            images=["app:1", "sidecar:1"],
            statuses=[
                container_status(name="c0", ready=True),
                container_status(name="c1", ready=False, exit_code=0, terminated_reason="Completed"),
            ],
        )
        assert get_pod_status(pod) == "Running"

    def test_first_problem_wins(self):
        pod = make_pod(
            images=["app:1", "sidecar:1"],
            statuses=[
                container_status(name="c0", ready=False, waiting="ImagePullBackOff"),
                container_status(name="c1", ready=False, waiting="CrashLoopBackOff"),
            ],
        )
        assert get_pod_status(pod) == "ImagePullBackOff"

    def test_container_states_ignored_outside_pending_running(self):
        pod = make_pod(phase="Failed", statuses=[container_status(ready=False, exit_code=1, terminated_reason="Error")])
        assert get_pod_status(pod) == "Failed"


class TestAge:
    @pytest.mark.parametrize("seconds, age", [
        (0, "0s"),
        (45, "45s"),
        (59.9, "59s"),
        (90, "1m"),
        (3599, "59m"),
        (3600, "1h"),
        (25 * 3600, "1d"),
        (10 * 86400 + 5, "10d"),
        (-5, "0s"),
    ])
    def test_format_age(self, seconds, age):
        assert format_age(seconds) == age


class TestPodToRecord:
    def test_record_fields(self):
        pod = make_pod(
            name="api-1",
            namespace="prod",
            labels={"app": "api"},
            images=["api:2.0", "proxy:1.0"],
            statuses=[
                container_status(name="c0", ready=True, restarts=2),
                container_status(name="c1", ready=False, restarts=3),
            ],
            age=timedelta(minutes=5, seconds=30),
        )
        record = pod_to_record(pod, now=NOW)

        assert record.name == "api-1"
        assert record.namespace == "prod"
        assert record.image_tag == "2.0"
        assert record.status == "Running"
        assert record.ready == "1/2"
        assert record.restarts == 5
        assert record.age == "5m"
        assert record.node == "node-a"
        assert record.ip == "10.0.0.5"
        assert record.labels == {"app": "api"}

    def test_ready_counts_declared_containers(self):
        pod = make_pod(images=["a:1", "b:1"], statuses=[])
        assert ready_ratio(pod) == "0/2"
        assert count_restarts(pod) == 0

    def test_to_dict_omits_empty_labels(self):
        data = pod_to_record(make_pod(labels=None), now=NOW).to_dict()

        assert "labels" not in data
        assert data["imageTag"] == "1.25"
        assert data["age"] == "3h"

    def test_missing_creation_timestamp(self):
        pod = make_pod()
        pod.metadata.creation_timestamp = None
        assert pod_to_record(pod, now=NOW).age == "unknown"

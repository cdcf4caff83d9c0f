"""Pytest configuration and fixtures."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from restart_notifier.channels import NotificationChannel
from restart_notifier.errors import DeliveryFailed


class FakeChannel(NotificationChannel):
    """In-memory channel recording every message it was asked to send."""

    def __init__(self, kind: str, fail: bool = False):
        super().__init__("https://hooks.example.com/" + kind, session=MagicMock())
        self.kind = kind
        self.fail = fail
        self.sent = []

    def build_payload(self, message):
        return {"text": message}

    def notify(self, message):
        self.sent.append(message)
        if self.fail:
            raise DeliveryFailed(self.kind, f"{self.kind} unreachable")


def make_pod(name, restarts, namespace="default", containers=None):
    """Build an object shaped like a V1Pod with container restart counters."""
    containers = containers or ["app"]
    if isinstance(restarts, int):
        restarts = [restarts] * len(containers)
    statuses = [
        SimpleNamespace(name=c, restart_count=r) for c, r in zip(containers, restarts)
    ]
    return SimpleNamespace(
        metadata=SimpleNamespace(name=name, namespace=namespace),
        status=SimpleNamespace(container_statuses=statuses),
    )


def make_monitor(name="notifier", namespace="monitoring", **spec):
    return {
        "apiVersion": "monitoring.vodafone.com/v1",
        "kind": "PodNotifRestart",
        "metadata": {"name": name, "namespace": namespace, "generation": 1},
        "spec": spec,
        "status": {},
    }


@pytest.fixture
def settings():
    return SimpleNamespace(
        crd_group="monitoring.vodafone.com",
        crd_version="v1",
        crd_plural="podnotifrestarts",
        watch_namespace="",
        kube_config_path=None,
        in_cluster=True,
    )


@pytest.fixture
def ok_response():
    resp = MagicMock()
    resp.status_code = 200
    resp.reason = "OK"
    return resp

"""Tests for monitor config and status conversion."""

import re

from conftest import make_monitor
from restart_notifier.models import MonitorConfig, MonitorStatus, utc_now_rfc3339


class TestMonitorConfig:
    def test_from_resource(self):
        cfg = MonitorConfig.from_resource(make_monitor(
            namespacesToMonitor=["prod", "staging"],
            minRestarts=3,
            slackWebhookURL="https://hooks/slack",
        ))
        assert cfg.key == "monitoring/notifier"
        assert cfg.namespaces_to_monitor == ["prod", "staging"]
        assert cfg.effective_min_restarts == 3
        assert cfg.channel_endpoints == {
            "discord": "",
            "teams": "",
            "slack": "https://hooks/slack",
        }

    def test_defaults_when_spec_empty(self):
        cfg = MonitorConfig.from_resource(make_monitor())
        assert cfg.namespaces_to_monitor == []
        assert cfg.min_restarts == 0
        assert cfg.effective_min_restarts == 1

    def test_missing_spec(self):
        obj = make_monitor()
        del obj["spec"]
        assert MonitorConfig.from_resource(obj).effective_min_restarts == 1


class TestMonitorStatus:
    def test_from_resource(self):
        obj = make_monitor()
        obj["status"] = {"lastChecked": "2024-01-01T00:00:00Z", "notificationsSent": 7}
        status = MonitorStatus.from_resource(obj)
        assert status.last_checked == "2024-01-01T00:00:00Z"
        assert status.notifications_sent == 7

    def test_missing_status(self):
        obj = make_monitor()
        del obj["status"]
        assert MonitorStatus.from_resource(obj) == MonitorStatus()

    def test_to_patch(self):
        patch = MonitorStatus("2024-01-01T00:00:00Z", 2).to_patch()
        assert patch == {"status": {"lastChecked": "2024-01-01T00:00:00Z", "notificationsSent": 2}}


def test_timestamp_format():
    assert re.fullmatch(r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\dZ", utc_now_rfc3339())

"""
Data model shared by the collector, evaluator, dispatcher and reconciler
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from restart_notifier.errors import ChannelDeliveryError

# Custom resource spec field holding each channel's endpoint
CHANNEL_SPEC_FIELDS = {
    "discord": "discordWebhookURL",
    "teams": "teamsWebhookURL",
    "slack": "slackWebhookURL",
}


def utc_now_rfc3339() -> str:
    """Return the current UTC time as e.g. ``2024-01-15T08:30:00Z``"""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class MonitorConfig:
    """Desired state read from a monitor resource at the start of a cycle"""

    namespace: str
    name: str
    namespaces_to_monitor: List[str] = field(default_factory=list)
    min_restarts: int = 1
    channel_endpoints: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_resource(cls, obj: Dict[str, Any]) -> "MonitorConfig":
        metadata = obj.get("metadata") or {}
        spec = obj.get("spec") or {}
        endpoints = {
            kind: (spec.get(spec_field) or "").strip()
            for kind, spec_field in CHANNEL_SPEC_FIELDS.items()
        }
        return cls(
            namespace=metadata.get("namespace", ""),
            name=metadata.get("name", ""),
            namespaces_to_monitor=list(spec.get("namespacesToMonitor") or []),
            min_restarts=int(spec.get("minRestarts") or 0),
            channel_endpoints=endpoints,
        )

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    @property
    def effective_min_restarts(self) -> int:
        """Minimum restart count, with unset or zero coerced to 1"""
        return max(self.min_restarts, 1)


@dataclass
class MonitorStatus:
    """Observed state persisted on the monitor's status subresource"""

    last_checked: Optional[str] = None
    notifications_sent: int = 0

    @classmethod
    def from_resource(cls, obj: Dict[str, Any]) -> "MonitorStatus":
        status = obj.get("status") or {}
        return cls(
            last_checked=status.get("lastChecked"),
            notifications_sent=int(status.get("notificationsSent") or 0),
        )

    def to_patch(self) -> Dict[str, Any]:
        return {
            "status": {
                "lastChecked": self.last_checked,
                "notificationsSent": self.notifications_sent,
            }
        }


@dataclass(frozen=True)
class ContainerRestartObservation:
    """Restart counter of one container at one observation instant"""

    namespace: str
    pod_name: str
    container_name: str
    restart_count: int


@dataclass(frozen=True)
class NotificationEvent:
    message: str
    observation: ContainerRestartObservation


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of delivering one message to one channel"""

    channel: str
    success: bool
    error: Optional[Exception] = None


@dataclass
class DispatchResult:
    """
    Aggregate outcome of one message fanned out to every enabled channel.

    Disabled channels never appear here, so a dispatch with no enabled
    channels is a success with zero attempts.
    """

    message: str
    outcomes: List[DispatchOutcome] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.outcomes)

    @property
    def failures(self) -> Dict[str, Exception]:
        return {o.channel: o.error for o in self.outcomes if not o.success}

    @property
    def success(self) -> bool:
        return all(o.success for o in self.outcomes)

    @property
    def any_delivered(self) -> bool:
        return any(o.success for o in self.outcomes)

    def raise_for_failures(self) -> None:
        """Raise ChannelDeliveryError if any enabled channel failed"""
        if not self.success:
            raise ChannelDeliveryError(self.message, self.failures)


@dataclass(frozen=True)
class ReconcileResult:
    """What the scheduler should do after a cycle"""

    requeue_after: Optional[float] = None
    notifications_sent: int = 0

"""
Channel adapters - one outbound webhook integration per channel kind.

Each adapter turns a plain alert message into its channel's JSON payload and
delivers it with a single POST. New channel kinds are added by subclassing
NotificationChannel and registering the class in CHANNEL_TYPES.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type

import requests

from restart_notifier.errors import DeliveryFailed
from restart_notifier.logger import get_logger

logger = get_logger(__name__)


class NotificationChannel(ABC):
    """Base class for webhook notification channels."""

    kind: str = "unnamed"

    def __init__(self, webhook_url: str, session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None) -> None:
        self.webhook_url = webhook_url
        self.session = session or requests.Session()
        self.timeout = timeout

    @abstractmethod
    def build_payload(self, message: str) -> Dict[str, Any]:
        """Build the channel's JSON body for a message."""
        ...

    def notify(self, message: str) -> None:
        """Deliver a message, raising DeliveryFailed unless the endpoint answers 200."""
        payload = self.build_payload(message)
        try:
            resp = self.session.post(
                self.webhook_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise DeliveryFailed(self.kind, f"failed to send post request: {e}") from e

        if resp.status_code != 200:
            raise DeliveryFailed(
                self.kind,
                f"received non-OK HTTP status: {resp.status_code} {resp.reason or ''}".rstrip(),
                status_code=resp.status_code,
            )
        logger.debug("Webhook delivered", channel=self.kind)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r})"


class DiscordChannel(NotificationChannel):
    kind = "discord"

    def build_payload(self, message: str) -> Dict[str, Any]:
        return {"content": message}


class TeamsChannel(NotificationChannel):
    """Microsoft Teams incoming webhook using the legacy MessageCard format."""

    kind = "teams"

    def build_payload(self, message: str) -> Dict[str, Any]:
        return {
            "@type": "MessageCard",
            "@context": "http://schema.org/extensions",
            "summary": "Pod Restart Notification",
            "themeColor": "0078D7",
            "text": message,
        }


class SlackChannel(NotificationChannel):
    kind = "slack"

    def build_payload(self, message: str) -> Dict[str, Any]:
        return {"text": message}


# Registration order is delivery order
CHANNEL_TYPES: Dict[str, Type[NotificationChannel]] = {
    DiscordChannel.kind: DiscordChannel,
    TeamsChannel.kind: TeamsChannel,
    SlackChannel.kind: SlackChannel,
}


def build_channels(endpoints: Dict[str, str], session: Optional[requests.Session] = None,
                   timeout: Optional[float] = None) -> List[NotificationChannel]:
    """Instantiate an adapter for every registered kind with a non-empty endpoint."""
    channels = []
    for kind, channel_cls in CHANNEL_TYPES.items():
        url = endpoints.get(kind) or ""
        if not url:
            continue
        channels.append(channel_cls(url, session=session, timeout=timeout))
    unknown = set(endpoints) - set(CHANNEL_TYPES)
    if unknown:
        logger.warning("Ignoring endpoints for unknown channel kinds", kinds=sorted(unknown))
    return channels

"""
Notification dispatcher - fans one alert message out to every enabled channel
"""

import threading
from typing import Dict, List, Optional

import requests

from restart_notifier import metrics
from restart_notifier.channels import CHANNEL_TYPES, NotificationChannel, build_channels
from restart_notifier.errors import DeliveryFailed
from restart_notifier.logger import NotifierLogger, get_logger
from restart_notifier.models import DispatchOutcome, DispatchResult, MonitorConfig

logger = get_logger(__name__)


class NotificationDispatcher:
    def __init__(self, default_endpoints: Optional[Dict[str, str]] = None,
                 session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None):
        # Process-level endpoints, used where a monitor leaves a channel empty
        self.default_endpoints = dict(default_endpoints or {})
        # requests.Session is not documented as thread-safe, so each reconcile
        # worker gets its own unless a session is injected
        self._session = session
        self._local = threading.local()
        self.timeout = timeout
        self.notifier_logger = NotifierLogger()

    @property
    def session(self) -> requests.Session:
        if self._session is not None:
            return self._session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = requests.Session()
        return session

    def resolve_endpoints(self, monitor: MonitorConfig) -> Dict[str, str]:
        """Resource-level endpoint wins when non-empty, else the process-level one"""
        endpoints = {}
        for kind in CHANNEL_TYPES:
            endpoints[kind] = (
                monitor.channel_endpoints.get(kind)
                or self.default_endpoints.get(kind)
                or ""
            )
        return endpoints

    def channels_for(self, monitor: MonitorConfig) -> List[NotificationChannel]:
        return build_channels(self.resolve_endpoints(monitor), session=self.session,
                              timeout=self.timeout)

    def dispatch(self, message: str, channels: List[NotificationChannel]) -> DispatchResult:
        """
        Send a message to every channel once, in order.

        A failing channel never stops delivery to the channels after it; every
        failure is logged and kept in the returned result.
        """
        result = DispatchResult(message=message)
        if not channels:
            logger.debug("No notification channels enabled, nothing to send")
            return result

        for channel in channels:
            try:
                channel.notify(message)
            except DeliveryFailed as e:
                self.notifier_logger.log_channel_failure(channel.kind, e)
                metrics.notifications_failed.labels(channel=channel.kind).inc()
                result.outcomes.append(DispatchOutcome(channel.kind, False, e))
                continue
            metrics.notifications_delivered.labels(channel=channel.kind).inc()
            result.outcomes.append(DispatchOutcome(channel.kind, True))

        return result

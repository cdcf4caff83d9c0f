"""
Exceptions raised during a reconciliation cycle
"""

from typing import Dict, Optional


class RestartNotifierError(Exception):
    """Base class for all notifier errors"""


class CollectorError(RestartNotifierError):
    """Listing pods failed; the cycle is aborted and retried later"""

    def __init__(self, message: str, namespace: Optional[str] = None):
        super().__init__(message)
        self.namespace = namespace


class StatusUpdateError(RestartNotifierError):
    """Writing the monitor status subresource failed"""


class DeliveryFailed(RestartNotifierError):
    """A single channel could not deliver a message"""

    def __init__(self, channel: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.channel = channel
        self.status_code = status_code


class ChannelDeliveryError(RestartNotifierError):
    """
    One or more enabled channels failed for a notification.

    ``failures`` maps channel kind to its error, in the order the channels
    were attempted.
    """

    def __init__(self, message: str, failures: Dict[str, Exception]):
        self.message = message
        self.failures = dict(failures)
        channels = ", ".join(
            f"{channel}: {error}" for channel, error in self.failures.items()
        )
        super().__init__(f"failed to send notification ({channels})")

    @property
    def last_error(self) -> Optional[Exception]:
        """Representative failure reason: the last channel that failed"""
        if not self.failures:
            return None
        return list(self.failures.values())[-1]

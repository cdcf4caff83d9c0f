"""
Threshold evaluation of container restart counters
"""

from typing import Iterable, List, Optional

from restart_notifier.models import ContainerRestartObservation, NotificationEvent

MESSAGE_TEMPLATE = "Pod {pod} has restarted {count} times"


def coerce_min_restarts(value: Optional[int]) -> int:
    """Unset, zero or negative thresholds become 1"""
    if not value or value < 1:
        return 1
    return int(value)


def format_message(observation: ContainerRestartObservation) -> str:
    return MESSAGE_TEMPLATE.format(pod=observation.pod_name, count=observation.restart_count)


def evaluate(observations: Iterable[ContainerRestartObservation],
             min_restarts: Optional[int]) -> List[NotificationEvent]:
    """
    Return a NotificationEvent for every container at or above the threshold.

    Events keep the order the observations were collected in. Nothing is
    remembered between calls, so a container that stays above the threshold
    qualifies again on every cycle.
    """
    threshold = coerce_min_restarts(min_restarts)
    return [
        NotificationEvent(message=format_message(obs), observation=obs)
        for obs in observations
        if obs.restart_count >= threshold
    ]

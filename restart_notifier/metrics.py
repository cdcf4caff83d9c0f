"""
Prometheus metrics for the notifier
"""

from prometheus_client import Counter, start_http_server

from restart_notifier.logger import get_logger

logger = get_logger(__name__)

notifications_delivered = Counter(
    "restart_notifier_notifications_delivered_total",
    "Total number of notifications delivered to a channel",
    ["channel"],
)

notifications_failed = Counter(
    "restart_notifier_notifications_failed_total",
    "Total number of notification deliveries that failed",
    ["channel"],
)

reconcile_cycles = Counter(
    "restart_notifier_reconcile_cycles_total",
    "Total number of reconciliation cycles",
    ["result"],  # result: success, error, not_found
)

threshold_matches = Counter(
    "restart_notifier_threshold_matches_total",
    "Total number of containers found at or above the restart threshold",
)


def start_metrics_server(port: int) -> None:
    """Expose metrics over HTTP; a port of 0 disables the endpoint"""
    if not port:
        logger.info("Metrics server disabled")
        return
    start_http_server(port)
    logger.info("Metrics server started", port=port)

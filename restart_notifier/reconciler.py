"""
Reconciliation loop for PodNotifRestart monitors
"""

import time

from restart_notifier import metrics
from restart_notifier.errors import ChannelDeliveryError, StatusUpdateError
from restart_notifier.evaluator import evaluate
from restart_notifier.logger import NotifierLogger, get_logger
from restart_notifier.models import (
    MonitorConfig,
    MonitorStatus,
    ReconcileResult,
    utc_now_rfc3339,
)

logger = get_logger(__name__)

DEFAULT_REQUEUE_AFTER = 120


class Reconciler:
    def __init__(self, k8s_client, dispatcher, requeue_after=DEFAULT_REQUEUE_AFTER):
        self.k8s_client = k8s_client
        self.dispatcher = dispatcher
        self.requeue_after = requeue_after
        self.notifier_logger = NotifierLogger()

    def reconcile(self, namespace: str, name: str) -> ReconcileResult:
        """Run one cycle for a monitor; errors propagate to the scheduler"""
        try:
            result = self._reconcile(namespace, name)
        except Exception:
            metrics.reconcile_cycles.labels(result="error").inc()
            raise
        label = "success" if result.requeue_after is not None else "not_found"
        metrics.reconcile_cycles.labels(result=label).inc()
        return result

    def _reconcile(self, namespace, name):
        key = f"{namespace}/{name}"

        # Configuration is read once and stays fixed for the whole cycle
        obj = self.k8s_client.get_monitor(namespace, name)
        if obj is None:
            self.notifier_logger.log_monitor_missing(key)
            return ReconcileResult(requeue_after=None)

        monitor = MonitorConfig.from_resource(obj)
        status = MonitorStatus.from_resource(obj)
        start_time = time.time()
        self.notifier_logger.log_cycle_start(key)

        observations = self.k8s_client.list_container_restarts(monitor.namespaces_to_monitor)
        events = evaluate(observations, monitor.effective_min_restarts)
        if events:
            metrics.threshold_matches.inc(len(events))

        channels = self.dispatcher.channels_for(monitor)
        if events and not channels:
            logger.warning("No notification channels configured", monitor=key)

        sent = 0
        failed = None
        for event in events:
            obs = event.observation
            self.notifier_logger.log_notification(key, obs.pod_name, obs.container_name,
                                                  obs.restart_count)
            result = self.dispatcher.dispatch(event.message, channels)
            if result.any_delivered:
                sent += 1
            if not result.success:
                # Remaining events of this cycle are skipped; the next cycle retries them
                failed = result
                break

        status.last_checked = utc_now_rfc3339()
        status.notifications_sent += sent
        try:
            self.k8s_client.update_monitor_status(namespace, name, status)
        except StatusUpdateError as status_err:
            if failed is None:
                raise
            # The delivery failure stays the cycle's error
            self.notifier_logger.log_error(status_err, context=f"status update for {key}")
            raise ChannelDeliveryError(failed.message, failed.failures) from status_err

        self.notifier_logger.log_cycle_end(key, len(events), sent, len(observations))
        logger.debug("Cycle duration", monitor=key, seconds=round(time.time() - start_time, 3))

        if failed is not None:
            failed.raise_for_failures()

        return ReconcileResult(requeue_after=self.requeue_after, notifications_sent=sent)

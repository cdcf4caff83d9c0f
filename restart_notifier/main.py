#!/usr/bin/env python3
"""
Pod Restart Notifier - Main Application
"""

import signal
import threading

from restart_notifier.config import config
from restart_notifier.logger import NotifierLogger, get_logger, setup_logging


def run_once(k8s_client, reconciler, logger):
    """Reconcile every monitor a single time (TEST_MODE)"""
    failures = 0
    for namespace, name in k8s_client.list_monitors():
        try:
            reconciler.reconcile(namespace, name)
        except Exception as e:
            failures += 1
            logger.error("Reconciliation failed", monitor=f"{namespace}/{name}", error=str(e))
    return 1 if failures else 0


def main():
    """Main application entry point"""
    setup_logging()
    logger = get_logger("main")
    NotifierLogger().log_startup({
        "crd": f"{config.crd_plural}.{config.crd_group}/{config.crd_version}",
        "watch_namespace": config.watch_namespace or "*",
        "requeue_after_seconds": config.requeue_after_seconds,
        "resync_interval_seconds": config.resync_interval_seconds,
        "channels": sorted(kind for kind, url in config.channel_endpoints.items() if url),
    })

    try:
        from restart_notifier.kubernetes_client import KubernetesClient
        from restart_notifier.metrics import start_metrics_server
        from restart_notifier.notifications import NotificationDispatcher
        from restart_notifier.reconciler import Reconciler
        from restart_notifier.scheduler import Scheduler

        k8s_client = KubernetesClient(config)
        dispatcher = NotificationDispatcher(
            default_endpoints=config.channel_endpoints,
            timeout=config.webhook_timeout_seconds,
        )
        reconciler = Reconciler(k8s_client, dispatcher,
                                requeue_after=config.requeue_after_seconds)

        # Test mode - run once and exit (for local testing)
        if config.test_mode:
            logger.info("Running in test mode - single execution")
            return run_once(k8s_client, reconciler, logger)

        start_metrics_server(config.metrics_port)
    except Exception as e:
        logger.error("Application failed to start", error=str(e), exc_info=True)
        return 1

    scheduler = Scheduler(reconciler.reconcile,
                          requeue_after=config.requeue_after_seconds,
                          max_workers=config.max_workers)
    stop_event = threading.Event()

    def handle_signal(signum, frame):
        logger.info("Received signal, shutting down...", signal=signum)
        stop_event.set()
        scheduler.stop()

    signal.signal(signal.SIGTERM, handle_signal)
    signal.signal(signal.SIGINT, handle_signal)

    worker = threading.Thread(target=scheduler.run, name="scheduler", daemon=True)
    worker.start()

    logger.info("Starting resync loop", interval_seconds=config.resync_interval_seconds)
    while not stop_event.is_set():
        try:
            scheduler.sync(k8s_client.list_monitors())
        except Exception as e:
            logger.warning("Failed to list monitors", error=str(e))
        stop_event.wait(config.resync_interval_seconds)

    worker.join()
    return 0


if __name__ == "__main__":
    exit(main())

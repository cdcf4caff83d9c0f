"""
Logging configuration for Pod Restart Notifier
"""

import logging
import sys
from typing import Any, Dict
import structlog
from colorama import init as colorama_init
from restart_notifier.config import config

# Initialize colorama for cross-platform colored output
colorama_init()


def setup_logging() -> None:
    """Setup structured logging for the application"""

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if config.log_format == "json"
            else structlog.dev.ConsoleRenderer(colors=True)
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, config.log_level.upper()),
    )

    # Suppress verbose client logs
    logging.getLogger("kubernetes").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance"""
    return structlog.get_logger(name)


class NotifierLogger:
    """Specialized logger for reconciliation cycles"""

    def __init__(self):
        self.logger = get_logger("restart-notifier")

    def log_startup(self, config_dict: Dict[str, Any]) -> None:
        """Log application startup"""
        self.logger.info(
            "Pod Restart Notifier starting up",
            version="1.0.0",
            config=config_dict
        )

    def log_cycle_start(self, monitor: str) -> None:
        self.logger.info(
            "Starting reconciliation cycle",
            monitor=monitor
        )

    def log_cycle_end(self, monitor: str, qualifying: int, notifications_sent: int,
                      total_checked: int) -> None:
        """Log the end of a reconciliation cycle"""
        self.logger.info(
            "Reconciliation cycle completed",
            monitor=monitor,
            qualifying_containers=qualifying,
            notifications_sent=notifications_sent,
            total_containers_checked=total_checked
        )

    def log_monitor_missing(self, monitor: str) -> None:
        self.logger.info(
            "Monitor resource not found, it may have been deleted",
            monitor=monitor
        )

    def log_notification(self, monitor: str, pod_name: str, container: str,
                         restart_count: int) -> None:
        """Log when a restart notification is about to be sent"""
        self.logger.info(
            "Sending restart notification",
            monitor=monitor,
            pod=pod_name,
            container=container,
            restart_count=restart_count
        )

    def log_channel_failure(self, channel: str, error: Exception) -> None:
        self.logger.warning(
            "Error sending notification",
            channel=channel,
            error=str(error),
            error_type=type(error).__name__
        )

    def log_error(self, error: Exception, context: str = None) -> None:
        """Log errors with context"""
        self.logger.error(
            "Error occurred",
            error=str(error),
            error_type=type(error).__name__,
            context=context,
            exc_info=True
        )

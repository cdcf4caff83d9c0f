"""
Configuration management for Pod Restart Notifier
"""

import os
from typing import Dict, Optional
from dataclasses import dataclass
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


# Channel kind -> environment variable holding the process-level endpoint
CHANNEL_ENV_VARS = {
    "discord": "DISCORD_WEBHOOK_URL",
    "teams": "TEAMS_WEBHOOK_URL",
    "slack": "SLACK_WEBHOOK_URL",
}


@dataclass
class Config:
    """Configuration class for Pod Restart Notifier"""

    # Kubernetes configuration
    kube_config_path: Optional[str] = None
    in_cluster: bool = True

    # Custom resource coordinates
    crd_group: str = "monitoring.vodafone.com"
    crd_version: str = "v1"
    crd_plural: str = "podnotifrestarts"

    # Namespace holding the monitor resources (empty = all namespaces)
    watch_namespace: str = ""

    # Scheduling configuration
    requeue_after_seconds: int = 120
    resync_interval_seconds: int = 30
    max_workers: int = 4

    # Outbound webhooks
    webhook_timeout_seconds: Optional[float] = None
    channel_endpoints: Dict[str, str] = None

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"

    # Metrics
    metrics_port: int = 8080

    # Execution control
    test_mode: bool = False

    def __post_init__(self):
        """Initialize default values after dataclass creation"""
        if self.channel_endpoints is None:
            self.channel_endpoints = {kind: "" for kind in CHANNEL_ENV_VARS}

        # Override with environment variables if present
        self.kube_config_path = os.getenv("KUBE_CONFIG_PATH", self.kube_config_path)
        self.in_cluster = os.getenv("IN_CLUSTER", str(self.in_cluster)).lower() == "true"
        self.crd_group = os.getenv("CRD_GROUP", self.crd_group)
        self.crd_version = os.getenv("CRD_VERSION", self.crd_version)
        self.crd_plural = os.getenv("CRD_PLURAL", self.crd_plural)
        self.watch_namespace = os.getenv("WATCH_NAMESPACE", self.watch_namespace)
        self.requeue_after_seconds = int(os.getenv("REQUEUE_AFTER_SECONDS", self.requeue_after_seconds))
        self.resync_interval_seconds = int(os.getenv("RESYNC_INTERVAL_SECONDS", self.resync_interval_seconds))
        self.max_workers = int(os.getenv("MAX_WORKERS", self.max_workers))
        self.log_level = os.getenv("LOG_LEVEL", self.log_level)
        self.log_format = os.getenv("LOG_FORMAT", self.log_format)
        self.metrics_port = int(os.getenv("METRICS_PORT", self.metrics_port))
        self.test_mode = os.getenv("TEST_MODE", str(self.test_mode)).lower() == "true"

        timeout_env = os.getenv("WEBHOOK_TIMEOUT_SECONDS")
        if timeout_env:
            self.webhook_timeout_seconds = float(timeout_env)

        # Process-level channel endpoints, used when a monitor leaves one empty
        for kind, env_var in CHANNEL_ENV_VARS.items():
            value = os.getenv(env_var)
            if value is not None:
                self.channel_endpoints[kind] = value.strip()


# Global configuration instance
config = Config()

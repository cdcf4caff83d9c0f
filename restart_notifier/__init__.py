"""
Pod Restart Notifier - Kubernetes Container Restart Alerting

A Python application that watches pods in a cluster and notifies operators
through Discord, Teams and Slack webhooks when containers cross a configured
restart-count threshold.
"""

__version__ = "1.0.0"
__author__ = "Pod Restart Notifier Team"

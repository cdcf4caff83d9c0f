import os
from typing import Any, Dict, List, Optional, Sequence, Tuple

from kubernetes import client, config as kube_config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError

from restart_notifier.errors import CollectorError, StatusUpdateError
from restart_notifier.logger import get_logger
from restart_notifier.models import ContainerRestartObservation, MonitorStatus

logger = get_logger(__name__)


class KubernetesClient:
    def __init__(self, settings, core_api=None, custom_api=None):
        self.group = settings.crd_group
        self.version = settings.crd_version
        self.plural = settings.crd_plural
        self.watch_namespace = settings.watch_namespace

        if core_api is not None or custom_api is not None:
            self.v1 = core_api
            self.custom = custom_api
            return

        self._load_config(settings)
        self.v1 = client.CoreV1Api()
        self.custom = client.CustomObjectsApi()
        logger.info("Kubernetes client initialized successfully")

    def _load_config(self, settings):
        # First, try the explicit path from the environment
        kubeconfig_path = settings.kube_config_path or os.getenv('KUBECONFIG')
        if kubeconfig_path and os.path.exists(kubeconfig_path):
            logger.info("Loading kubeconfig from environment", path=kubeconfig_path)
            kube_config.load_kube_config(config_file=kubeconfig_path)
            return

        if settings.in_cluster:
            try:
                # Method 1: in-cluster config (when running in Kubernetes)
                kube_config.load_incluster_config()
                logger.info("Loaded in-cluster Kubernetes configuration")
                return
            except ConfigException:
                logger.info("In-cluster configuration unavailable, falling back to kubeconfig")

        try:
            # Method 2: default kubeconfig location
            kube_config.load_kube_config()
            logger.info("Loaded kubeconfig from default location")
            return
        except ConfigException:
            pass

        # Method 3: common kubeconfig paths
        possible_paths = [
            os.path.expanduser("~/.kube/config"),
            "/etc/kubernetes/admin.conf",
            "/etc/rancher/k3s/k3s.yaml"
        ]
        for kube_path in possible_paths:
            if os.path.exists(kube_path):
                logger.info("Loading kubeconfig", path=kube_path)
                kube_config.load_kube_config(config_file=kube_path)
                return

        raise ConfigException(
            "Could not load Kubernetes configuration. "
            "Please ensure you have:\n"
            "1. A running Kubernetes cluster\n"
            "2. kubectl configured properly\n"
            "3. Or set KUBECONFIG environment variable"
        )

    def get_monitor(self, namespace: str, name: str) -> Optional[Dict[str, Any]]:
        """Fetch a monitor resource, or None if it no longer exists"""
        try:
            return self.custom.get_namespaced_custom_object(
                group=self.group,
                version=self.version,
                namespace=namespace,
                plural=self.plural,
                name=name,
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise

    def list_monitors(self) -> Dict[Tuple[str, str], Optional[int]]:
        """
        Map (namespace, name) of every monitor resource to its generation.

        The generation only moves on spec changes; status patches leave it
        alone, so it tells configuration updates apart from our own writes.
        """
        if self.watch_namespace:
            resp = self.custom.list_namespaced_custom_object(
                group=self.group,
                version=self.version,
                namespace=self.watch_namespace,
                plural=self.plural,
            )
        else:
            resp = self.custom.list_cluster_custom_object(
                group=self.group,
                version=self.version,
                plural=self.plural,
            )
        return {
            (item["metadata"]["namespace"], item["metadata"]["name"]):
                item["metadata"].get("generation")
            for item in resp.get("items", [])
        }

    def _list_pods(self, namespace: Optional[str]):
        try:
            if namespace:
                return self.v1.list_namespaced_pod(namespace=namespace, watch=False).items
            return self.v1.list_pod_for_all_namespaces(watch=False).items
        except (ApiException, HTTPError) as e:
            scope = namespace or "all namespaces"
            logger.error("Failed to list pods", namespace=scope, error=str(e))
            raise CollectorError(f"unable to list pods in {scope}: {e}", namespace=namespace) from e

    def list_container_restarts(self, namespaces: Sequence[str]) -> List[ContainerRestartObservation]:
        """
        Current restart counter of every container in every pod.

        An empty namespace list means all namespaces. Observations keep the
        order the API returns pods and container statuses in.
        """
        observations = []
        # Repeated namespaces are listed once, first occurrence keeps its place
        for namespace in (list(dict.fromkeys(namespaces)) or [None]):
            for pod in self._list_pods(namespace):
                statuses = (pod.status.container_statuses if pod.status else None) or []
                for status in statuses:
                    observations.append(ContainerRestartObservation(
                        namespace=pod.metadata.namespace,
                        pod_name=pod.metadata.name,
                        container_name=status.name,
                        restart_count=status.restart_count or 0,
                    ))
        return observations

    def update_monitor_status(self, namespace: str, name: str, status: MonitorStatus) -> None:
        """Patch the status subresource of a monitor"""
        try:
            self.custom.patch_namespaced_custom_object_status(
                group=self.group,
                version=self.version,
                namespace=namespace,
                plural=self.plural,
                name=name,
                body=status.to_patch(),
            )
        except (ApiException, HTTPError) as e:
            logger.error("Failed to update monitor status", monitor=f"{namespace}/{name}", error=str(e))
            raise StatusUpdateError(f"unable to update status of {namespace}/{name}: {e}") from e

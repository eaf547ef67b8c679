"""Client for listing, reading and deleting the resources the watcher handles."""

import logging
from typing import Any, List, Optional

from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from .errors import ClusterCommunicationError, ResourceNotFoundError
from .resources import ResourceKind

logger = logging.getLogger(__name__)

# kind -> (api attribute, read method, delete method)
_KIND_METHODS = {
    ResourceKind.POD: ("core_api", "read_namespaced_pod", "delete_namespaced_pod"),
    ResourceKind.JOB: ("batch_api", "read_namespaced_job", "delete_namespaced_job"),
    ResourceKind.REPLICA_SET: (
        "apps_api", "read_namespaced_replica_set", "delete_namespaced_replica_set"
    ),
    ResourceKind.DEPLOYMENT: (
        "apps_api", "read_namespaced_deployment", "delete_namespaced_deployment"
    ),
}


class ClusterClient:
    """Thin wrapper over the Kubernetes API for Pods and their owners."""

    def __init__(
        self,
        core_api: Optional[client.CoreV1Api] = None,
        batch_api: Optional[client.BatchV1Api] = None,
        apps_api: Optional[client.AppsV1Api] = None
    ):
        """Initialize the API clients. Kubernetes config must already be loaded."""
        self.core_api = core_api or client.CoreV1Api()
        self.batch_api = batch_api or client.BatchV1Api()
        self.apps_api = apps_api or client.AppsV1Api()

    def list_pods(self, namespace: str = "") -> List[Any]:
        """
        List pods.

        Args:
            namespace: Namespace to list from ("" for all namespaces)

        Returns:
            List of V1Pod objects

        Raises:
            ClusterCommunicationError: The API could not be reached
        """
        try:
            if namespace:
                response = self.core_api.list_namespaced_pod(namespace=namespace)
            else:
                response = self.core_api.list_pod_for_all_namespaces()
        except ApiException as e:
            raise ClusterCommunicationError(
                f"Error listing pods: {e.reason}",
                namespace=namespace,
                status=e.status
            ) from e
        except HTTPError as e:
            raise ClusterCommunicationError(
                f"Unable to communicate with the API server: {e}",
                namespace=namespace
            ) from e

        return list(response.items or [])

    def get(self, kind: ResourceKind, namespace: str, name: str) -> Any:
        """
        Read a single resource.

        Raises:
            ResourceNotFoundError: The resource does not exist
            ClusterCommunicationError: Any other API failure
        """
        api_attr, read_method, _ = _KIND_METHODS[kind]
        api = getattr(self, api_attr)
        logger.debug(f"Fetching {kind.value} {namespace}/{name}")
        return self._call(
            getattr(api, read_method), kind, namespace, name, "reading"
        )

    def delete(self, kind: ResourceKind, namespace: str, name: str) -> None:
        """
        Delete a single resource.

        Raises:
            ResourceNotFoundError: The resource does not exist
            ClusterCommunicationError: Any other API failure
        """
        api_attr, _, delete_method = _KIND_METHODS[kind]
        api = getattr(self, api_attr)
        self._call(
            getattr(api, delete_method), kind, namespace, name, "deleting"
        )

    def _call(self, method, kind: ResourceKind, namespace: str, name: str, action: str):
        try:
            return method(name=name, namespace=namespace)
        except ApiException as e:
            error_cls = ResourceNotFoundError if e.status == 404 else ClusterCommunicationError
            raise error_cls(
                f"Error {action} {kind.value} {namespace}/{name}: {e.status} {e.reason}",
                kind=kind.value,
                namespace=namespace,
                name=name,
                status=e.status
            ) from e
        except HTTPError as e:
            raise ClusterCommunicationError(
                f"Unable to communicate with the API server while {action} "
                f"{kind.value} {namespace}/{name}: {e}",
                kind=kind.value,
                namespace=namespace,
                name=name
            ) from e

"""Exceptions raised by the Pod Watcher."""

from typing import Optional


class PodWatcherError(Exception):
    """Base class for all watcher errors."""


class ClusterCommunicationError(PodWatcherError):
    """The Kubernetes API could not be reached or rejected a request."""

    def __init__(
        self,
        message: str,
        kind: str = "",
        namespace: str = "",
        name: str = "",
        status: Optional[int] = None
    ):
        super().__init__(message)
        self.kind = kind
        self.namespace = namespace
        self.name = name
        self.status = status

    @property
    def resource_path(self) -> str:
        """Human readable `Kind namespace/name` of the affected resource."""
        if not self.kind:
            return self.namespace or "all namespaces"
        return f"{self.kind} {self.namespace}/{self.name}"


class ResourceNotFoundError(ClusterCommunicationError):
    """The requested resource does not exist (HTTP 404)."""


class SidecarCommunicationError(PodWatcherError):
    """Unable to signal the mesh sidecar to shut down."""

    def __init__(self, message: str, url: str = ""):
        super().__init__(message)
        self.url = url


class MissingMetadataError(PodWatcherError):
    """A resource is missing the namespace or name needed to act on it."""

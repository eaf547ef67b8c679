"""Tears a watched pod down together with its controlling owners."""

import logging

from .errors import SidecarCommunicationError
from .resources import ResolvedResource, ResourceKind
from .watched_pod import WatchedPod

logger = logging.getLogger(__name__)


class PodCleaner:
    """Runs the sidecar shutdown, owner resolution and cascading delete for a pod."""

    def __init__(self, sidecar, resolver, deleter):
        self.sidecar = sidecar
        self.resolver = resolver
        self.deleter = deleter

    def cleanup(self, watched: WatchedPod) -> int:
        """
        Delete a pod and every recognized controlling ancestor.

        A failure to signal the sidecar is logged and does not stop the delete.

        Returns:
            Number of resources deleted

        Raises:
            PodWatcherError: The chain could not be resolved or deleted
        """
        try:
            self.sidecar.maybe_shutdown_sidecar(watched.pod, watched.path)
        except SidecarCommunicationError as e:
            logger.warning(f"{watched.path}: {e}, deleting anyway")

        chain = self.resolver.resolve(ResolvedResource(ResourceKind.POD, watched.pod))
        if chain.truncated:
            logger.info(f"{watched.path}: Owner chain has an unknown owner, deleting only what was resolved")

        return self.deleter.delete_chain(chain.deletion_order())

"""Deletes a resolved owner chain, ancestors first."""

import logging
from typing import Iterable

from .errors import MissingMetadataError, ResourceNotFoundError
from .resources import ResolvedResource

logger = logging.getLogger(__name__)


class CascadingDeleter:
    """Issues one delete per chain member, strictly in the given order."""

    def __init__(self, cluster, dry_run: bool = False):
        """
        Initialize the deleter.

        Args:
            cluster: ClusterClient used to issue deletes
            dry_run: If True, don't make actual changes
        """
        self.cluster = cluster
        self.dry_run = dry_run

    def delete_chain(self, resources: Iterable[ResolvedResource]) -> int:
        """
        Delete every resource in order.

        A resource that is already gone counts as deleted, since the
        cluster's garbage collector may remove lower members once their
        owner is deleted. Any other failure aborts the rest of the chain.

        Returns:
            Number of resources deleted (or that would be deleted in dry-run)

        Raises:
            MissingMetadataError: A resource has no namespace or name
            ClusterCommunicationError: A delete failed
        """
        deleted = 0
        for target in resources:
            self.delete_resource(target)
            deleted += 1
        return deleted

    def delete_resource(self, target: ResolvedResource) -> None:
        namespace = target.namespace
        name = target.name
        if not namespace or not name:
            raise MissingMetadataError(
                f"{target.kind.value} is missing its namespace or name "
                f"(namespace={namespace!r}, name={name!r})"
            )

        if self.dry_run:
            logger.info(f"[DRY-RUN] Would delete {target.kind.value} {namespace}/{name}")
            return

        logger.info(f"Deleting {target.kind.value} {namespace}/{name}")
        try:
            self.cluster.delete(target.kind, namespace, name)
        except ResourceNotFoundError:
            logger.info(f"{target.kind.value} {namespace}/{name} is already gone")

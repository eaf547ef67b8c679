"""Resolves the chain of controlling owners above a resource."""

import logging
from dataclasses import dataclass, field
from typing import List

from .resources import ResolvedResource, ResourceKind, get_controller_owners

logger = logging.getLogger(__name__)


@dataclass
class OwnerChain:
    """Resources in the order they were resolved: the start resource first."""
    members: List[ResolvedResource] = field(default_factory=list)
    truncated: bool = False

    def deletion_order(self) -> List[ResolvedResource]:
        """Most distant ancestor first, the start resource last."""
        return list(reversed(self.members))

    def __len__(self) -> int:
        return len(self.members)


class OwnerChainResolver:
    """Walks controller owner references upward through the cluster client."""

    def __init__(self, cluster):
        self.cluster = cluster

    def resolve(self, start: ResolvedResource) -> OwnerChain:
        """
        Resolve every recognized controlling ancestor of a resource.

        The walk stops at the first owner whose kind is not recognized;
        that owner and anything above it are left alone.

        Args:
            start: The resource to start from, usually the pod

        Returns:
            The resolved OwnerChain

        Raises:
            ClusterCommunicationError: An ancestor could not be fetched
        """
        chain = OwnerChain(members=[start])
        seen = {start.key}
        pending = [(ref, start.namespace) for ref in get_controller_owners(start.metadata)]

        while pending:
            owner, namespace = pending.pop()
            kind = ResourceKind.from_owner_kind(owner.kind)
            if kind is None:
                logger.debug(
                    f"Unknown resource type: {owner.api_version}/{owner.kind} "
                    f"{namespace}/{owner.name}. Unable to delete it!"
                )
                chain.truncated = True
                break

            key = f"{kind.value}/{namespace}/{owner.name}"
            if key in seen:
                logger.debug(f"Already resolved {kind.value} {namespace}/{owner.name}, skipping")
                continue
            seen.add(key)

            target = ResolvedResource(kind, self.cluster.get(kind, namespace, owner.name))
            chain.members.append(target)

            for super_owner in get_controller_owners(target.metadata):
                pending.append((super_owner, target.namespace or namespace))

        logger.debug(
            f"Resolved owner chain for {start}: {', '.join(str(m) for m in chain.members)}"
        )
        return chain

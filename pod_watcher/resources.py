"""Resource kinds the watcher knows how to resolve and delete."""

import enum
from dataclasses import dataclass
from typing import Any, List, Optional


class ResourceKind(enum.Enum):
    """Kubernetes kinds that can appear in a pod's ownership chain."""
    POD = "Pod"
    JOB = "Job"
    REPLICA_SET = "ReplicaSet"
    DEPLOYMENT = "Deployment"

    @classmethod
    def from_owner_kind(cls, kind: str) -> Optional["ResourceKind"]:
        """
        Map an owner reference kind onto a known owner kind.

        Returns:
            The matching ResourceKind, or None when the kind is unrecognized
        """
        for member in OWNER_KINDS:
            if member.value == kind:
                return member
        return None


OWNER_KINDS = (ResourceKind.JOB, ResourceKind.REPLICA_SET, ResourceKind.DEPLOYMENT)


@dataclass(frozen=True)
class ResolvedResource:
    """A fetched cluster object tagged with its kind."""
    kind: ResourceKind
    obj: Any

    @property
    def metadata(self):
        return self.obj.metadata

    @property
    def namespace(self) -> Optional[str]:
        return self.metadata.namespace if self.metadata else None

    @property
    def name(self) -> Optional[str]:
        return self.metadata.name if self.metadata else None

    @property
    def uid(self) -> Optional[str]:
        return self.metadata.uid if self.metadata else None

    @property
    def key(self) -> str:
        return f"{self.kind.value}/{self.namespace}/{self.name}"

    def __str__(self) -> str:
        return f"{self.kind.value} {self.namespace}/{self.name}"


def get_controller_owners(metadata) -> List[Any]:
    """Return the owner references flagged as the managing controller."""
    if metadata is None or not metadata.owner_references:
        return []
    return [ref for ref in metadata.owner_references if ref.controller]

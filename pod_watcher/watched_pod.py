"""Parsing of watcher annotations into WatchedPod objects."""

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import (
    CRITICAL_CONTAINERS_ANNOTATION,
    CONDITION_ANNOTATION,
    CRITICAL_CONTAINERS_DELIMITER,
)

logger = logging.getLogger(__name__)


class KillCondition(enum.Enum):
    """How many critical containers must exit before the pod is torn down."""
    ANY = "any"
    ALL = "all"


def parse_condition(value: Optional[str], pod_path: str = "") -> KillCondition:
    """
    Parse the condition annotation.

    Empty or missing values mean ANY. Unknown values are logged and
    treated as ANY.
    """
    normalized = (value or "").strip().lower()
    if normalized in ("", KillCondition.ANY.value):
        return KillCondition.ANY
    if normalized == KillCondition.ALL.value:
        return KillCondition.ALL

    logger.warning(f"{pod_path}: Unable to parse condition {value!r}, assuming any")
    return KillCondition.ANY


def parse_critical_containers(value: Optional[str]) -> List[str]:
    """
    Parse the critical containers annotation.

    Examples:
        "sidecar.worker" -> ["sidecar", "worker"]
        " main . proxy " -> ["main", "proxy"]
    """
    if not value:
        return []
    compact = "".join(value.split())
    names = []
    for token in compact.split(CRITICAL_CONTAINERS_DELIMITER):
        if token and token not in names:
            names.append(token)
    return names


@dataclass(frozen=True)
class WatchedPod:
    """A pod that opted in to being watched, with its parsed annotations."""
    pod: Any
    name: str
    namespace: str
    uid: Optional[str]
    critical_containers: List[str] = field(default_factory=list)
    condition: KillCondition = KillCondition.ANY

    @property
    def path(self) -> str:
        return f"{self.namespace}/{self.name}"

    @classmethod
    def from_pod(cls, pod) -> Optional["WatchedPod"]:
        """
        Build a WatchedPod from a V1Pod.

        Returns:
            The WatchedPod, or None if the pod is not annotated for watching
            or lacks a name or namespace
        """
        metadata = pod.metadata
        if metadata is None or not metadata.name or not metadata.namespace:
            return None

        annotations: Dict[str, str] = metadata.annotations or {}
        if CRITICAL_CONTAINERS_ANNOTATION not in annotations:
            return None

        path = f"{metadata.namespace}/{metadata.name}"
        return cls(
            pod=pod,
            name=metadata.name,
            namespace=metadata.namespace,
            uid=metadata.uid,
            critical_containers=parse_critical_containers(
                annotations[CRITICAL_CONTAINERS_ANNOTATION]
            ),
            condition=parse_condition(annotations.get(CONDITION_ANNOTATION), path),
        )

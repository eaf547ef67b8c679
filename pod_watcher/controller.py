"""Main watch loop for the Pod Watcher."""

import logging
import threading
from typing import List, Optional

from .cleanup import PodCleaner
from .cluster_client import ClusterClient
from .config import WatcherSettings
from .deleter import CascadingDeleter
from .errors import PodWatcherError
from .owner_chain import OwnerChainResolver
from .sidecar import SidecarShutdownCoordinator
from .termination import TerminationEvaluator
from .tracker import DeletionTracker
from .watched_pod import WatchedPod

logger = logging.getLogger(__name__)


class PodWatcherController:
    """
    Polls annotated pods and tears them down, together with their
    controlling owners, once their critical containers have exited.
    """

    def __init__(
        self,
        settings: Optional[WatcherSettings] = None,
        cluster: Optional[ClusterClient] = None,
        sidecar: Optional[SidecarShutdownCoordinator] = None,
        evaluator: Optional[TerminationEvaluator] = None,
        tracker: Optional[DeletionTracker] = None
    ):
        """
        Initialize the controller.

        Args:
            settings: Watcher settings (defaults if omitted)
            cluster: Cluster client (built from the loaded kube config if omitted)
            sidecar: Sidecar shutdown coordinator
            evaluator: Termination condition evaluator
            tracker: Suppression tracker for pods being torn down
        """
        self.settings = settings if settings is not None else WatcherSettings()
        self.cluster = cluster if cluster is not None else ClusterClient()

        if evaluator is None:
            evaluator = TerminationEvaluator(
                critical_deadline_ms=self.settings.critical_deadline_ms,
                deadline_applies_to_all=self.settings.deadline_applies_to_all
            )
        if sidecar is None:
            sidecar = SidecarShutdownCoordinator(
                container_name=self.settings.sidecar_container_name,
                grace_ms=self.settings.sidecar_grace_ms,
                dry_run=self.settings.dry_run
            )
        if tracker is None:
            tracker = DeletionTracker(window_seconds=self.settings.suppression_window_seconds)

        self.evaluator = evaluator
        self.tracker = tracker
        self.cleaner = PodCleaner(
            sidecar=sidecar,
            resolver=OwnerChainResolver(self.cluster),
            deleter=CascadingDeleter(self.cluster, dry_run=self.settings.dry_run)
        )

        self._stop_event = threading.Event()

    def fetch_candidates(self) -> List[WatchedPod]:
        """
        List pods and keep the ones annotated for watching.

        Raises:
            ClusterCommunicationError: Pods could not be listed
        """
        logger.info("Fetching pod statuses")
        pods = self.cluster.list_pods(self.settings.namespace)

        candidates = []
        for pod in pods:
            watched = WatchedPod.from_pod(pod)
            if watched is not None:
                candidates.append(watched)

        logger.debug(f"Found {len(candidates)} watched pod(s) out of {len(pods)}")
        return candidates

    def process_pod(self, watched: WatchedPod) -> bool:
        """
        Evaluate a watched pod and tear it down if its condition is met.

        Returns:
            True if a teardown was attempted
        """
        if not watched.uid:
            logger.debug(f"{watched.path}: Pod has no UID, skipping")
            return False

        if self.tracker.is_suppressed(watched.uid):
            logger.debug(f"{watched.path}: Ignoring pod as it's being deleted")
            return False

        logger.info(
            f"{watched.path}: Processing pod, critical containers "
            f"{','.join(watched.critical_containers)!r} ({watched.condition.value})"
        )

        if not self.evaluator.is_eligible(
            watched.pod, watched.critical_containers, watched.condition, watched.path
        ):
            return False

        # Suppression window starts at detection, before the teardown runs
        if not self.tracker.try_record(watched.uid):
            logger.debug(f"{watched.path}: Teardown already claimed, skipping")
            return False

        try:
            deleted = self.cleaner.cleanup(watched)
            logger.info(f"{watched.path}: Tore down {deleted} resource(s)")
        except PodWatcherError as e:
            logger.error(f"{watched.path}: There was an error while trying to delete the pod: {e}")

        return True

    def run_once(self) -> int:
        """
        Run a single poll tick.

        Returns:
            Number of pods a teardown was attempted for

        Raises:
            ClusterCommunicationError: Pods could not be listed
        """
        attempted = 0
        for watched in self.fetch_candidates():
            if self.process_pod(watched):
                attempted += 1

        self.tracker.prune()
        return attempted

    def run(self) -> None:
        """Run the controller until stopped or pods can no longer be listed."""
        logger.info("=" * 60)
        logger.info("Starting Pod Watcher")
        logger.info("=" * 60)
        logger.info(f"Namespace: {self.settings.namespace or 'all namespaces'}")
        logger.info(f"Sidecar container: {self.settings.sidecar_container_name}")
        logger.info(f"Dry run: {self.settings.dry_run}")

        while not self._stop_event.is_set():
            self.run_once()
            self._stop_event.wait(self.settings.poll_interval_seconds)

    def stop(self) -> None:
        """Stop the controller."""
        logger.info("Stopping controller...")
        self._stop_event.set()

"""Decides whether a watched pod's critical containers have terminated."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional

from .config import DEFAULT_CRITICAL_DEADLINE_MS
from .watched_pod import KillCondition

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TerminationEvaluator:
    """Evaluates container statuses against a kill condition."""

    def __init__(
        self,
        critical_deadline_ms: int = DEFAULT_CRITICAL_DEADLINE_MS,
        deadline_applies_to_all: bool = True,
        now: Callable[[], datetime] = _utcnow
    ):
        """
        Initialize the evaluator.

        Args:
            critical_deadline_ms: Time a critical container must have been
                terminated for before it counts
            deadline_applies_to_all: If False, the ALL condition counts every
                terminated container regardless of the deadline
            now: Clock returning an aware datetime
        """
        self.critical_deadline = timedelta(milliseconds=critical_deadline_ms)
        self.deadline_applies_to_all = deadline_applies_to_all
        self._now = now

    def is_eligible(
        self,
        pod,
        critical_containers: Iterable[str],
        condition: KillCondition,
        pod_path: str = ""
    ) -> bool:
        """
        Check if a pod should be torn down.

        Args:
            pod: Kubernetes Pod object
            critical_containers: Names of the critical containers
            condition: ANY or ALL
            pod_path: namespace/name used in log messages

        Returns:
            True if the pod meets its kill condition
        """
        if pod.status is None:
            logger.warning(f"{pod_path}: Pod didn't return a status, assuming everything is running")
            return False

        statuses = pod.status.container_statuses
        if not statuses:
            logger.warning(
                f"{pod_path}: Pod didn't return container statuses, assuming everything is running"
            )
            return False

        now = self._now()
        gate_on_deadline = condition == KillCondition.ANY or self.deadline_applies_to_all
        remaining = set(critical_containers)
        observed = 0
        dead = 0

        for status in statuses:
            if status.name not in remaining:
                continue
            remaining.discard(status.name)
            observed += 1

            if status.state is None:
                logger.warning(
                    f"{pod_path}: Critical container {status.name} didn't return a state, assuming it's ok"
                )
                continue

            terminated = status.state.terminated
            if terminated is None:
                continue

            if not gate_on_deadline or self._past_deadline(terminated.finished_at, now):
                dead += 1
                logger.info(
                    f"{pod_path}: Critical container {status.name} has exited, and deadline passed "
                    f"(exit code {terminated.exit_code}, reason {terminated.reason})"
                )
            else:
                logger.info(
                    f"{pod_path}: Critical container {status.name} has exited, "
                    f"but hasn't passed the deadline"
                )

        if remaining:
            logger.warning(
                f"{pod_path}: Unable to find critical container(s): {', '.join(sorted(remaining))}"
            )

        if condition == KillCondition.ALL:
            return observed > 0 and dead == observed
        return dead > 0

    def _past_deadline(self, finished_at: Optional[datetime], now: datetime) -> bool:
        if finished_at is None:
            return True
        if finished_at.tzinfo is None:
            finished_at = finished_at.replace(tzinfo=timezone.utc)
        return finished_at + self.critical_deadline <= now

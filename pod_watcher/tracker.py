"""Short-lived memory of resources that are already being torn down."""

import logging
import threading
import time
from typing import Callable, Dict

from .config import SUPPRESSION_WINDOW_SECONDS

logger = logging.getLogger(__name__)


class DeletionTracker:
    """Thread-safe map of resource UID to suppression expiry."""

    def __init__(
        self,
        window_seconds: float = SUPPRESSION_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize the tracker.

        Args:
            window_seconds: How long a recorded UID stays suppressed
            clock: Returns the current time in seconds
        """
        self.window_seconds = window_seconds
        self._clock = clock
        self._expiries: Dict[str, float] = {}
        self._lock = threading.RLock()

    def is_suppressed(self, uid: str) -> bool:
        """Check if a UID was recorded and its window hasn't passed yet."""
        with self._lock:
            expiry = self._expiries.get(uid)
            return expiry is not None and expiry > self._clock()

    def record(self, uid: str) -> float:
        """
        Suppress a UID for the configured window.

        Recording a UID that is still suppressed keeps its original expiry.

        Returns:
            The expiry timestamp
        """
        with self._lock:
            now = self._clock()
            expiry = self._expiries.get(uid)
            if expiry is None or expiry <= now:
                expiry = now + self.window_seconds
                self._expiries[uid] = expiry
            return expiry

    def try_record(self, uid: str) -> bool:
        """
        Atomically record a UID unless it is already suppressed.

        Returns:
            True if the caller now owns the teardown of this UID
        """
        with self._lock:
            if self.is_suppressed(uid):
                return False
            self.record(uid)
            return True

    def prune(self) -> int:
        """
        Drop every entry whose expiry has passed.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self._clock()
            expired = [uid for uid, expiry in self._expiries.items() if expiry <= now]
            for uid in expired:
                del self._expiries[uid]

        if expired:
            logger.debug(f"Pruned {len(expired)} expired suppression entries")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._expiries)

    def __contains__(self, uid: str) -> bool:
        with self._lock:
            return uid in self._expiries

"""Configuration settings for the Pod Watcher."""

from dataclasses import dataclass

# Pod annotations
CRITICAL_CONTAINERS_ANNOTATION = "podwatcher/critical-containers"
CONDITION_ANNOTATION = "podwatcher/condition"
CRITICAL_CONTAINERS_DELIMITER = "."

# Watch settings
POLL_INTERVAL_SECONDS = 5
SUPPRESSION_WINDOW_SECONDS = 10

# Sidecar (mesh proxy) settings
DEFAULT_SIDECAR_CONTAINER_NAME = "istio-proxy"
DEFAULT_SIDECAR_GRACE_MS = 5000
SIDECAR_ADMIN_PORT = 15000
SIDECAR_QUIT_PATH = "/quitquitquit"
SIDECAR_REQUEST_TIMEOUT_SECONDS = 5

# Grace given to a critical container after it exits
DEFAULT_CRITICAL_DEADLINE_MS = 1000


@dataclass(frozen=True)
class WatcherSettings:
    """Runtime settings for the watcher, usually built from CLI flags."""
    sidecar_container_name: str = DEFAULT_SIDECAR_CONTAINER_NAME
    sidecar_grace_ms: int = DEFAULT_SIDECAR_GRACE_MS
    critical_deadline_ms: int = DEFAULT_CRITICAL_DEADLINE_MS
    deadline_applies_to_all: bool = True
    namespace: str = ""
    dry_run: bool = False
    poll_interval_seconds: float = POLL_INTERVAL_SECONDS
    suppression_window_seconds: float = SUPPRESSION_WINDOW_SECONDS

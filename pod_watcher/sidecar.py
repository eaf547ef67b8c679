"""Graceful shutdown of the service mesh sidecar before a pod is deleted."""

import ipaddress
import logging
import time
from typing import Callable, Optional

import requests

from .config import (
    DEFAULT_SIDECAR_CONTAINER_NAME,
    DEFAULT_SIDECAR_GRACE_MS,
    SIDECAR_ADMIN_PORT,
    SIDECAR_QUIT_PATH,
    SIDECAR_REQUEST_TIMEOUT_SECONDS,
)
from .errors import SidecarCommunicationError

logger = logging.getLogger(__name__)


def quit_url(ip: str) -> str:
    """
    Build the sidecar quit URL for a pod IP.

    Examples:
        "10.0.0.7" -> "http://10.0.0.7:15000/quitquitquit"
        "fd00::7" -> "http://[fd00::7]:15000/quitquitquit"
    """
    host = ip
    try:
        if ipaddress.ip_address(ip).version == 6:
            host = f"[{ip}]"
    except ValueError:
        logger.debug(f"Pod IP {ip!r} is not an IP address, using it as a host name")
    return f"http://{host}:{SIDECAR_ADMIN_PORT}{SIDECAR_QUIT_PATH}"


class SidecarShutdownCoordinator:
    """Asks the sidecar proxy to quit and waits for it to drain."""

    def __init__(
        self,
        container_name: str = DEFAULT_SIDECAR_CONTAINER_NAME,
        grace_ms: int = DEFAULT_SIDECAR_GRACE_MS,
        dry_run: bool = False,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.container_name = container_name
        self.grace_ms = grace_ms
        self.dry_run = dry_run
        self.session = session or requests.Session()
        self._sleep = sleep

    def find_sidecar_ip(self, pod, pod_path: str = "") -> Optional[str]:
        """
        Get the IP to signal if the pod runs the sidecar container.

        Returns:
            The pod IP, or None if there is nothing to signal
        """
        if pod.status is None:
            logger.warning(f"{pod_path}: Pod didn't return a status, will not shut down the sidecar")
            return None

        statuses = pod.status.container_statuses or []
        if not any(status.name == self.container_name for status in statuses):
            return None

        if not pod.status.pod_ip:
            logger.warning(
                f"{pod_path}: Pod has a {self.container_name} container but no IP, "
                f"will not shut down the sidecar"
            )
            return None
        return pod.status.pod_ip

    def maybe_shutdown_sidecar(self, pod, pod_path: str = "") -> bool:
        """
        Signal the sidecar to quit and wait for the grace period.

        Returns:
            True if the sidecar was signalled

        Raises:
            SidecarCommunicationError: The quit request could not be sent
        """
        ip = self.find_sidecar_ip(pod, pod_path)
        if ip is None:
            return False

        url = quit_url(ip)
        if self.dry_run:
            logger.info(f"[DRY-RUN] {pod_path}: Would send shutdown request to {url}")
            return True

        try:
            response = self.session.post(url, timeout=SIDECAR_REQUEST_TIMEOUT_SECONDS)
        except requests.RequestException as e:
            raise SidecarCommunicationError(f"Unable to signal sidecar at {url}: {e}", url=url) from e

        logger.info(f"{pod_path}: Sent request to {self.container_name} to shut down")
        logger.debug(f"{pod_path}: Sidecar responded {response.status_code} {response.text!r}")

        self._sleep(self.grace_ms / 1000)
        return True

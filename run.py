#!/usr/bin/env python3
"""
Pod Watcher - Entry Point

Watches pods annotated with critical containers and, once those containers
exit, deletes the pod together with its controlling Job, ReplicaSet and
Deployment. A service mesh sidecar is asked to shut down first.

Usage:
    python run.py [--namespace NAMESPACE] [--dry-run] [--in-cluster] [-v | -d | -e]
"""

import argparse
import logging
import os
import sys

from dotenv import load_dotenv
from kubernetes import config

from pod_watcher.config import (
    DEFAULT_CRITICAL_DEADLINE_MS,
    DEFAULT_SIDECAR_CONTAINER_NAME,
    DEFAULT_SIDECAR_GRACE_MS,
    WatcherSettings,
)
from pod_watcher.controller import PodWatcherController
from pod_watcher.errors import PodWatcherError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser. Defaults are read from the environment."""
    parser = argparse.ArgumentParser(
        description="Pod Watcher - Delete pods and their owners once critical containers exit"
    )
    parser.add_argument(
        "--istio-container-name",
        default=os.environ.get("ISTIO_CONTAINER_NAME", DEFAULT_SIDECAR_CONTAINER_NAME),
        help="Name of the sidecar container inside the pod. When found, it is shut down nicely"
    )
    parser.add_argument(
        "--istio-deadline-ms",
        type=int,
        default=os.environ.get("ISTIO_DEADLINE", str(DEFAULT_SIDECAR_GRACE_MS)),
        help="Milliseconds to wait after signalling the sidecar"
    )
    parser.add_argument(
        "--critical-deadline",
        type=int,
        default=os.environ.get("CONTAINER_DEADLINE", str(DEFAULT_CRITICAL_DEADLINE_MS)),
        help="Milliseconds a critical container must have been terminated before it counts"
    )
    parser.add_argument(
        "--all-ignores-deadline",
        action="store_true",
        help="Count every terminated critical container for the 'all' condition, ignoring the deadline"
    )
    parser.add_argument(
        "--namespace", "-n",
        default=os.environ.get("WATCH_NAMESPACE", ""),
        help="Namespace to watch (default: all namespaces)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Run in dry-run mode (no changes made)"
    )
    parser.add_argument(
        "--in-cluster",
        action="store_true",
        help="Use in-cluster config (for running inside Kubernetes)"
    )

    logging_group = parser.add_mutually_exclusive_group()
    logging_group.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Enable debug logging for the watcher"
    )
    logging_group.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable all logging, including the Kubernetes client"
    )
    logging_group.add_argument(
        "--error", "-e",
        action="store_true",
        help="Disable everything but error logging"
    )
    return parser


def configure_logging(args: argparse.Namespace) -> None:
    """Configure process-wide logging from the verbosity flags."""
    level = logging.INFO
    if args.debug:
        level = logging.DEBUG
    elif args.error:
        level = logging.ERROR

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if args.verbose:
        logging.getLogger("pod_watcher").setLevel(logging.DEBUG)
    if not args.debug:
        logging.getLogger("kubernetes").setLevel(logging.WARNING)
        logging.getLogger("urllib3").setLevel(logging.WARNING)


def settings_from_args(args: argparse.Namespace) -> WatcherSettings:
    return WatcherSettings(
        sidecar_container_name=args.istio_container_name,
        sidecar_grace_ms=args.istio_deadline_ms,
        critical_deadline_ms=args.critical_deadline,
        deadline_applies_to_all=not args.all_ignores_deadline,
        namespace=args.namespace,
        dry_run=args.dry_run,
    )


def main(argv=None):
    """Main entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    configure_logging(args)

    logger.info("Starting up....")

    # Load Kubernetes configuration
    try:
        if args.in_cluster:
            config.load_incluster_config()
            logger.info("Loaded in-cluster configuration")
        else:
            config.load_kube_config()
            logger.info("Loaded kubeconfig from default location")
    except config.ConfigException as e:
        logger.error(f"Failed to load Kubernetes config: {e}")
        sys.exit(1)

    controller = PodWatcherController(settings=settings_from_args(args))

    try:
        controller.run()
    except KeyboardInterrupt:
        controller.stop()
        logger.info("Exiting, code 0")
        sys.exit(0)
    except PodWatcherError as e:
        logger.error(f"Unrecoverable error! {e}")
        logger.info("Exiting, code 1")
        sys.exit(1)


if __name__ == "__main__":
    main()

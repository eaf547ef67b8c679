"""Shared test fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

import pytest
from kubernetes import client

from pod_watcher.errors import ClusterCommunicationError, ResourceNotFoundError
from pod_watcher.resources import ResourceKind

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def owner_ref(kind: str, name: str, controller: bool = True, api_version: str = "apps/v1"):
    return client.V1OwnerReference(
        api_version=api_version,
        kind=kind,
        name=name,
        uid=f"uid-{kind.lower()}-{name}",
        controller=controller,
    )


def running(name: str):
    return client.V1ContainerStatus(
        name=name,
        image=f"{name}:latest",
        image_id=f"docker://{name}",
        ready=True,
        restart_count=0,
        state=client.V1ContainerState(running=client.V1ContainerStateRunning(started_at=NOW)),
    )


def terminated(name: str, finished_at: Optional[datetime] = None, exit_code: int = 0):
    if finished_at is None:
        finished_at = NOW - timedelta(seconds=30)
    return client.V1ContainerStatus(
        name=name,
        image=f"{name}:latest",
        image_id=f"docker://{name}",
        ready=False,
        restart_count=0,
        state=client.V1ContainerState(
            terminated=client.V1ContainerStateTerminated(
                exit_code=exit_code,
                reason="Completed",
                finished_at=finished_at,
            )
        ),
    )


def make_pod(
    name: str = "app-1",
    namespace: str = "ns",
    uid: Optional[str] = None,
    annotations: Optional[Dict[str, str]] = None,
    statuses: Optional[List] = None,
    owners: Optional[List] = None,
    pod_ip: Optional[str] = "10.0.0.7",
    with_status: bool = True,
):
    status = None
    if with_status:
        status = client.V1PodStatus(container_statuses=statuses, pod_ip=pod_ip, phase="Running")
    return client.V1Pod(
        api_version="v1",
        kind="Pod",
        metadata=client.V1ObjectMeta(
            name=name,
            namespace=namespace,
            uid=uid or f"uid-pod-{name}",
            annotations=annotations,
            owner_references=owners,
        ),
        status=status,
    )


def make_owner(kind: ResourceKind, name: str, namespace: str = "ns", owners: Optional[List] = None):
    metadata = client.V1ObjectMeta(
        name=name,
        namespace=namespace,
        uid=f"uid-{kind.value.lower()}-{name}",
        owner_references=owners,
    )
    selector = client.V1LabelSelector(match_labels={"app": name})
    template = client.V1PodTemplateSpec(
        metadata=client.V1ObjectMeta(labels={"app": name}),
        spec=client.V1PodSpec(containers=[client.V1Container(name="main", image="main:latest")]),
    )
    if kind == ResourceKind.JOB:
        return client.V1Job(
            api_version="batch/v1", kind="Job", metadata=metadata,
            spec=client.V1JobSpec(template=template),
        )
    if kind == ResourceKind.REPLICA_SET:
        return client.V1ReplicaSet(
            api_version="apps/v1", kind="ReplicaSet", metadata=metadata,
            spec=client.V1ReplicaSetSpec(selector=selector, template=template),
        )
    if kind == ResourceKind.DEPLOYMENT:
        return client.V1Deployment(
            api_version="apps/v1", kind="Deployment", metadata=metadata,
            spec=client.V1DeploymentSpec(selector=selector, template=template),
        )
    raise ValueError(f"Unsupported owner kind {kind}")


class FakeCluster:
    """In-memory stand-in for ClusterClient."""

    def __init__(self):
        self.objects: Dict[Tuple[ResourceKind, str, str], object] = {}
        self.pods: List = []
        self.list_error: Optional[Exception] = None
        self.delete_errors: Dict[Tuple[ResourceKind, str, str], Exception] = {}
        self.gets: List[Tuple[ResourceKind, str, str]] = []
        self.deletes: List[Tuple[ResourceKind, str, str]] = []

    def add(self, kind: ResourceKind, obj) -> None:
        key = (kind, obj.metadata.namespace, obj.metadata.name)
        self.objects[key] = obj
        if kind == ResourceKind.POD:
            self.pods.append(obj)

    def list_pods(self, namespace: str = ""):
        if self.list_error is not None:
            raise self.list_error
        return [p for p in self.pods if not namespace or p.metadata.namespace == namespace]

    def get(self, kind, namespace, name):
        self.gets.append((kind, namespace, name))
        try:
            return self.objects[(kind, namespace, name)]
        except KeyError:
            raise ResourceNotFoundError(
                f"{kind.value} {namespace}/{name} not found",
                kind=kind.value, namespace=namespace, name=name, status=404
            )

    def delete(self, kind, namespace, name):
        key = (kind, namespace, name)
        self.deletes.append(key)
        if key in self.delete_errors:
            raise self.delete_errors[key]
        if key not in self.objects:
            raise ResourceNotFoundError(
                f"{kind.value} {namespace}/{name} not found",
                kind=kind.value, namespace=namespace, name=name, status=404
            )
        obj = self.objects.pop(key)
        if kind == ResourceKind.POD:
            self.pods.remove(obj)


def api_failure(kind: ResourceKind, namespace: str, name: str, status: int = 500):
    return ClusterCommunicationError(
        f"Error deleting {kind.value} {namespace}/{name}",
        kind=kind.value, namespace=namespace, name=name, status=status
    )


@pytest.fixture
def cluster():
    return FakeCluster()

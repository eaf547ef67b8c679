from unittest import mock

import pytest
import requests

from conftest import make_pod, running, terminated

from pod_watcher.errors import SidecarCommunicationError
from pod_watcher.sidecar import SidecarShutdownCoordinator, quit_url


@pytest.fixture
def session():
    session = mock.Mock(spec=requests.Session)
    session.post.return_value = mock.Mock(status_code=200, text="OK\n")
    return session


@pytest.fixture
def sleep():
    return mock.Mock()


def test_signals_sidecar_and_waits_grace_period(session, sleep):
    pod = make_pod(statuses=[terminated("worker"), running("istio-proxy")], pod_ip="10.1.2.3")
    coordinator = SidecarShutdownCoordinator(grace_ms=5000, session=session, sleep=sleep)

    assert coordinator.maybe_shutdown_sidecar(pod, "ns/app-1")

    session.post.assert_called_once_with("http://10.1.2.3:15000/quitquitquit", timeout=5)
    sleep.assert_called_once_with(5.0)


def test_ipv6_pod_ip_is_bracketed(session, sleep):
    pod = make_pod(statuses=[running("istio-proxy")], pod_ip="fd00:10:244::7")
    coordinator = SidecarShutdownCoordinator(session=session, sleep=sleep)

    assert coordinator.maybe_shutdown_sidecar(pod)

    url = "http://[fd00:10:244::7]:15000/quitquitquit"
    session.post.assert_called_once_with(url, timeout=5)
    assert requests.Request("POST", url).prepare().url == url


def test_quit_url_for_ipv4():
    assert quit_url("10.1.2.3") == "http://10.1.2.3:15000/quitquitquit"


def test_absent_sidecar_is_a_noop(session, sleep):
    pod = make_pod(statuses=[terminated("worker")])
    coordinator = SidecarShutdownCoordinator(session=session, sleep=sleep)

    assert not coordinator.maybe_shutdown_sidecar(pod)

    session.post.assert_not_called()
    sleep.assert_not_called()


def test_custom_container_name(session, sleep):
    pod = make_pod(statuses=[running("linkerd-proxy")])
    coordinator = SidecarShutdownCoordinator(container_name="linkerd-proxy", session=session, sleep=sleep)

    assert coordinator.maybe_shutdown_sidecar(pod)
    session.post.assert_called_once()


def test_pod_without_status_is_skipped(session, sleep):
    coordinator = SidecarShutdownCoordinator(session=session, sleep=sleep)

    assert not coordinator.maybe_shutdown_sidecar(make_pod(with_status=False))
    session.post.assert_not_called()


def test_pod_without_ip_is_skipped(session, sleep):
    pod = make_pod(statuses=[running("istio-proxy")], pod_ip=None)
    coordinator = SidecarShutdownCoordinator(session=session, sleep=sleep)

    assert not coordinator.maybe_shutdown_sidecar(pod)
    session.post.assert_not_called()


def test_error_status_still_counts_as_signalled(session, sleep):
    session.post.return_value = mock.Mock(status_code=503, text="unavailable")
    pod = make_pod(statuses=[running("istio-proxy")])

    assert SidecarShutdownCoordinator(session=session, sleep=sleep).maybe_shutdown_sidecar(pod)
    sleep.assert_called_once()


def test_transport_failure_raises(session, sleep):
    session.post.side_effect = requests.ConnectionError("connection refused")
    pod = make_pod(statuses=[running("istio-proxy")], pod_ip="10.1.2.3")

    with pytest.raises(SidecarCommunicationError) as excinfo:
        SidecarShutdownCoordinator(session=session, sleep=sleep).maybe_shutdown_sidecar(pod)

    assert excinfo.value.url == "http://10.1.2.3:15000/quitquitquit"
    sleep.assert_not_called()


def test_dry_run_sends_nothing(session, sleep):
    pod = make_pod(statuses=[running("istio-proxy")])
    coordinator = SidecarShutdownCoordinator(dry_run=True, session=session, sleep=sleep)

    assert coordinator.maybe_shutdown_sidecar(pod)
    session.post.assert_not_called()
    sleep.assert_not_called()

import pytest
from pydantic import ValidationError

from hostpool_autoscaler.utils.datamodels.host_pool import (
    LoadBalancingMode,
    SessionHost,
    SessionHostStatus,
    parse_host_identity,
)


@pytest.mark.parametrize(
    "resource_name, expected",
    [
        ("pool-a/ip-10-0-1-5.ec2.internal", "ip-10-0-1-5"),
        ("pool-a/desktop-01.corp.example.com", "desktop-01"),
        ("pool-a/desktop-01", "desktop-01"),
        ("  pool-a/desktop-01.corp  ", "desktop-01"),
    ],
)
def test_parse_host_identity(resource_name, expected):
    assert parse_host_identity(resource_name) == expected


def test_parse_host_identity_checks_pool_qualifier():
    assert parse_host_identity("pool-a/host-1.corp", pool_id="pool-a") == "host-1"
    with pytest.raises(ValueError, match="does not belong to pool"):
        parse_host_identity("pool-b/host-1.corp", pool_id="pool-a")


@pytest.mark.parametrize(
    "resource_name",
    [
        "",
        "   ",
        "host-1.corp",
        "/host-1.corp",
        "pool-a/",
        "pool-a/.corp",
        "pool-a/host-1/extra",
        None,
    ],
)
def test_parse_host_identity_rejects_malformed_names(resource_name):
    with pytest.raises(ValueError):
        parse_host_identity(resource_name)


def test_session_host_defaults():
    host = SessionHost(name="pool-a/host-7.ec2.internal", status=SessionHostStatus.AVAILABLE)
    assert host.allow_new_sessions is True
    assert host.session_count == 0
    assert host.is_empty_and_available


def test_session_host_rejects_negative_session_count():
    with pytest.raises(ValidationError):
        SessionHost(name="pool-a/host-1", status=SessionHostStatus.AVAILABLE, session_count=-1)


def test_unavailable_host_is_not_an_empty_available_host():
    host = SessionHost(name="pool-a/host-1", status=SessionHostStatus.UNAVAILABLE)
    assert not host.is_empty_and_available


@pytest.mark.parametrize(
    "value, expected",
    [
        ("DepthFirst", LoadBalancingMode.DEPTH_FIRST),
        ("depthfirst", LoadBalancingMode.DEPTH_FIRST),
        ("BreadthFirst", LoadBalancingMode.BREADTH_FIRST),
        ("Persistent", LoadBalancingMode.UNKNOWN),
        (None, LoadBalancingMode.UNKNOWN),
    ],
)
def test_load_balancing_mode_from_value(value, expected):
    assert LoadBalancingMode.from_value(value) is expected

"""
Shared pytest fixtures.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import boto3
import pytest

from hostpool_autoscaler.configuration import ScalingConfiguration
from hostpool_autoscaler.providers.inventory import StaticInventoryProvider
from hostpool_autoscaler.utils.datamodels.host_pool import (
    HostPoolDescriptor,
    LoadBalancingMode,
    SessionHost,
    SessionHostStatus,
)
from hostpool_autoscaler.utils.error import HostpoolError
from hostpool_autoscaler.utils.response import HostpoolResponse

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s", force=True)
logging.getLogger("hostpool_logger").setLevel(logging.DEBUG)

POOL_ID = "pool-a"
RESOURCE_GROUP = "soca-test"


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Fake AWS credentials, no real profile and a throwaway HOME for CLI log files."""
    for _name in (
        "HOSTPOOL_ID",
        "HOSTPOOL_RESOURCE_GROUP",
        "HOSTPOOL_START_THRESHOLD",
        "HOSTPOOL_DEBUG",
        "AWS_PROFILE",
        "AWS_REGION",
    ):
        monkeypatch.delenv(_name, raising=False)
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.setenv("AWS_CONFIG_FILE", str(tmp_path / "aws_config"))
    monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(tmp_path / "aws_credentials"))
    monkeypatch.setenv("HOME", str(tmp_path))


def make_host(
    host: str,
    status: SessionHostStatus = SessionHostStatus.AVAILABLE,
    session_count: int = 0,
    allow_new_sessions: bool = True,
    pool_id: str = POOL_ID,
) -> SessionHost:
    return SessionHost(
        name=f"{pool_id}/{host}.ec2.internal",
        status=status,
        session_count=session_count,
        allow_new_sessions=allow_new_sessions,
    )


def available(host: str, session_count: int = 0, **kwargs) -> SessionHost:
    return make_host(host, SessionHostStatus.AVAILABLE, session_count, **kwargs)


def unavailable(host: str, **kwargs) -> SessionHost:
    return make_host(host, SessionHostStatus.UNAVAILABLE, 0, **kwargs)


def static_provider(
    hosts: List[SessionHost],
    max_sessions_per_host: int = 3,
    load_balancing_mode: LoadBalancingMode = LoadBalancingMode.DEPTH_FIRST,
) -> StaticInventoryProvider:
    return StaticInventoryProvider(
        descriptor=HostPoolDescriptor(
            pool_id=POOL_ID,
            load_balancing_mode=load_balancing_mode,
            max_sessions_per_host=max_sessions_per_host,
        ),
        hosts=hosts,
    )


class RecordingPowerController:
    """Power controller double: records submitted intents, optionally rejects them."""

    def __init__(self, reject_with: Optional[str] = None):
        self.intents = []
        self._reject_with = reject_with

    def submit(self, intent) -> HostpoolResponse:
        self.intents.append(intent)
        if self._reject_with:
            return HostpoolError.AWS_API_ERROR(service_name="ec2", helper=self._reject_with)
        return HostpoolResponse(success=True, message=intent)


@pytest.fixture
def configuration() -> ScalingConfiguration:
    return ScalingConfiguration(pool_id=POOL_ID, resource_group=RESOURCE_GROUP, start_threshold=1)


@pytest.fixture
def power_controller() -> RecordingPowerController:
    return RecordingPowerController()


@pytest.fixture
def ec2_client():
    return boto3.client("ec2", region_name="us-east-1")


@pytest.fixture
def ssm_client():
    return boto3.client("ssm", region_name="us-east-1")

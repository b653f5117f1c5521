# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from typing import Any, List, Optional, Protocol
import yaml
from pydantic import ValidationError
import hostpool_autoscaler.utils.aws.boto3_wrapper as utils_boto3
from hostpool_autoscaler.configuration import ScalingConfiguration
from hostpool_autoscaler.utils.aws.ec2_helper import (
    describe_instances_paginate,
    get_tag_value,
)
from hostpool_autoscaler.utils.aws.ssm_parameter_store import HostpoolConfig
from hostpool_autoscaler.utils.cast import HostpoolCastEngine
from hostpool_autoscaler.utils.datamodels.host_pool import (
    HostPoolDescriptor,
    LoadBalancingMode,
    SessionHost,
    SessionHostStatus,
)
from hostpool_autoscaler.utils.error import HostpoolError
from hostpool_autoscaler.utils.response import HostpoolResponse

logger = logging.getLogger("hostpool_logger")

# EC2 instance-state-name -> session host status
_EC2_STATE_TO_STATUS = {
    "running": SessionHostStatus.AVAILABLE,
    "stopped": SessionHostStatus.UNAVAILABLE,
}

TAG_CLUSTER_ID = "soca:ClusterId"
TAG_HOST_POOL_ID = "soca:HostPoolId"
TAG_ACTIVE_SESSIONS = "soca:ActiveSessions"
TAG_ALLOW_NEW_SESSIONS = "soca:AllowNewSessions"


class InventoryProvider(Protocol):
    """
    Point-in-time snapshot of a host pool. Both calls return a HostpoolResponse:
    get_pool_descriptor -> HostPoolDescriptor, list_session_hosts -> list[SessionHost] in stable listing order
    """

    def get_pool_descriptor(self, pool_id: str) -> HostpoolResponse: ...

    def list_session_hosts(self, pool_id: str) -> HostpoolResponse: ...


class StaticInventoryProvider:
    """
    In-memory snapshot. Used for offline evaluation (hostpoolctl --snapshot) and tests.

    Snapshot YAML format:
        pool_id: pool-a
        load_balancing_mode: DepthFirst
        max_sessions_per_host: 3
        session_hosts:
          - name: pool-a/host-1.corp.local
            status: Available
            session_count: 2
            allow_new_sessions: true
    """

    def __init__(self, descriptor: HostPoolDescriptor, hosts: List[SessionHost]):
        self._descriptor = descriptor
        self._hosts = list(hosts)

    @property
    def pool_id(self) -> str:
        return self._descriptor.pool_id

    @classmethod
    def from_dict(cls, snapshot: dict) -> HostpoolResponse:
        if not isinstance(snapshot, dict):
            return HostpoolError.HOST_POOL_INVENTORY_ERROR(
                pool_id="unknown",
                helper=f"Snapshot must be a dictionary, detected {type(snapshot)}",
            )
        _pool_id = snapshot.get("pool_id", "unknown")
        try:
            _descriptor = HostPoolDescriptor(
                pool_id=_pool_id,
                load_balancing_mode=LoadBalancingMode.from_value(
                    snapshot.get("load_balancing_mode")
                ),
                max_sessions_per_host=snapshot.get("max_sessions_per_host"),
            )
            _hosts = [
                SessionHost(**host) for host in snapshot.get("session_hosts") or []
            ]
        except (ValidationError, TypeError) as err:
            return HostpoolError.HOST_POOL_INVENTORY_ERROR(
                pool_id=_pool_id, helper=f"Invalid snapshot: {err}"
            )
        return HostpoolResponse(success=True, message=cls(_descriptor, _hosts))

    @classmethod
    def from_file(cls, file_path: str) -> HostpoolResponse:
        try:
            with open(file_path, "r", encoding="utf-8") as snapshot_file:
                _snapshot = yaml.safe_load(snapshot_file)
        except (OSError, yaml.YAMLError) as err:
            return HostpoolError.HOST_POOL_INVENTORY_ERROR(
                pool_id="unknown",
                helper=f"Unable to read snapshot {file_path} because of {err}",
            )
        return cls.from_dict(_snapshot)

    def get_pool_descriptor(self, pool_id: str) -> HostpoolResponse:
        if pool_id != self._descriptor.pool_id:
            return HostpoolError.HOST_POOL_INVENTORY_ERROR(
                pool_id=pool_id,
                helper=f"Snapshot only contains pool {self._descriptor.pool_id}",
            )
        return HostpoolResponse(success=True, message=self._descriptor)

    def list_session_hosts(self, pool_id: str) -> HostpoolResponse:
        if pool_id != self._descriptor.pool_id:
            return HostpoolError.HOST_POOL_INVENTORY_ERROR(
                pool_id=pool_id,
                helper=f"Snapshot only contains pool {self._descriptor.pool_id}",
            )
        return HostpoolResponse(success=True, message=list(self._hosts))


class Ec2InventoryProvider:
    """
    Pool descriptor is stored on SSM under /soca/<resource_group>/hostpools/<pool_id>/:
        - LoadBalancingMode: DepthFirst | BreadthFirst
        - MaxSessionsPerHost: int

    Session hosts are EC2 instances tagged with soca:ClusterId=<resource_group> and soca:HostPoolId=<pool_id>.
    Active session count and drain flag are published by each host on soca:ActiveSessions / soca:AllowNewSessions.
    """

    def __init__(
        self,
        configuration: ScalingConfiguration,
        client_ec2: Optional[Any] = None,
        client_ssm: Optional[Any] = None,
    ):
        self._configuration = configuration
        self._client_ec2 = client_ec2
        self._client_ssm = client_ssm

    def _get_client(self, service_name: str) -> HostpoolResponse:
        _attribute = f"_client_{service_name}"
        if getattr(self, _attribute) is None:
            _client = utils_boto3.get_boto(
                service_name=service_name,
                region_name=self._configuration.region_name,
                profile_name=self._configuration.profile_name,
            )
            if not _client.success:
                return _client
            setattr(self, _attribute, _client.message)
        return HostpoolResponse(success=True, message=getattr(self, _attribute))

    def get_pool_descriptor(self, pool_id: str) -> HostpoolResponse:
        _client_ssm = self._get_client("ssm")
        if not _client_ssm.success:
            return HostpoolError.HOST_POOL_INVENTORY_ERROR(
                pool_id=pool_id, helper=_client_ssm.message
            )

        _pool_parameters = HostpoolConfig(
            key=f"/hostpools/{pool_id}/",
            parameter_name_prefix=self._configuration.ssm_prefix,
            ssm_client=_client_ssm.message,
        ).get_value()

        if not _pool_parameters.success:
            return HostpoolError.HOST_POOL_INVENTORY_ERROR(
                pool_id=pool_id,
                helper=f"Unable to read pool parameters under {self._configuration.ssm_prefix}/hostpools/{pool_id}/: {_pool_parameters.message}",
            )

        _parameters = _pool_parameters.message
        logger.debug(f"Host pool {pool_id} parameters: {_parameters}")

        _max_sessions = HostpoolCastEngine(_parameters.get("MaxSessionsPerHost")).cast_as(int)
        if not _max_sessions.success:
            return HostpoolError.HOST_POOL_CONFIGURATION_ERROR(
                pool_id=pool_id,
                helper=f"MaxSessionsPerHost must be an integer, detected {_parameters.get('MaxSessionsPerHost')}",
            )

        return HostpoolResponse(
            success=True,
            message=HostPoolDescriptor(
                pool_id=pool_id,
                load_balancing_mode=LoadBalancingMode.from_value(
                    _parameters.get("LoadBalancingMode")
                ),
                max_sessions_per_host=_max_sessions.message,
            ),
        )

    def list_session_hosts(self, pool_id: str) -> HostpoolResponse:
        _client_ec2 = self._get_client("ec2")
        if not _client_ec2.success:
            return HostpoolError.HOST_POOL_INVENTORY_ERROR(
                pool_id=pool_id, helper=_client_ec2.message
            )

        _instances = describe_instances_paginate(
            client_ec2=_client_ec2.message,
            filters=[
                {"Name": f"tag:{TAG_CLUSTER_ID}", "Values": [self._configuration.resource_group]},
                {"Name": f"tag:{TAG_HOST_POOL_ID}", "Values": [pool_id]},
                {
                    "Name": "instance-state-name",
                    "Values": ["pending", "running", "stopping", "stopped"],
                },
            ],
        )
        if not _instances.success:
            return HostpoolError.HOST_POOL_INVENTORY_ERROR(
                pool_id=pool_id, helper=_instances.message
            )

        _hosts = []
        for instance in _instances.message:
            _session_host = self.session_host_from_ec2_instance(pool_id=pool_id, instance=instance)
            if not _session_host.success:
                return _session_host
            if _session_host.message is not None:
                _hosts.append(_session_host.message)

        logger.info(f"Found {len(_hosts)} session host(s) for pool {pool_id}")
        return HostpoolResponse(success=True, message=_hosts)

    @staticmethod
    def session_host_from_ec2_instance(pool_id: str, instance: dict) -> HostpoolResponse:
        """
        Create a SessionHost from a boto3 describe_instances response dict (Reservations.Instances).
        Return None as message for instances that cannot be targeted by power operations (no private DNS name)
        """
        _instance_id = instance.get("InstanceId")
        _private_dns_name = instance.get("PrivateDnsName")
        if not _private_dns_name:
            logger.warning(f"{_instance_id} has no PrivateDnsName, ignoring it")
            return HostpoolResponse(success=True, message=None)

        _state = instance.get("State", {}).get("Name")
        _status = _EC2_STATE_TO_STATUS.get(_state, SessionHostStatus.OTHER)

        _active_sessions = get_tag_value(instance, TAG_ACTIVE_SESSIONS)
        if _active_sessions is None:
            # Session count is unknown until the host publishes it, never report it as an empty Available host
            if _status == SessionHostStatus.AVAILABLE:
                logger.warning(
                    f"{_instance_id} is running without {TAG_ACTIVE_SESSIONS} tag, reporting it as {SessionHostStatus.OTHER.value}"
                )
                _status = SessionHostStatus.OTHER
            _active_sessions = "0"

        _session_count = HostpoolCastEngine(_active_sessions).cast_as(int)
        _allow_new_sessions = HostpoolCastEngine(
            get_tag_value(instance, TAG_ALLOW_NEW_SESSIONS, default="true")
        ).cast_as(bool)

        if not _session_count.success or not _allow_new_sessions.success:
            return HostpoolError.HOST_POOL_INVENTORY_ERROR(
                pool_id=pool_id,
                helper=f"Invalid {TAG_ACTIVE_SESSIONS} or {TAG_ALLOW_NEW_SESSIONS} tag on {_instance_id}",
            )

        try:
            _session_host = SessionHost(
                name=f"{pool_id}/{_private_dns_name}",
                status=_status,
                session_count=_session_count.message,
                allow_new_sessions=_allow_new_sessions.message,
                instance_id=_instance_id,
            )
        except ValidationError as err:
            return HostpoolError.HOST_POOL_INVENTORY_ERROR(
                pool_id=pool_id, helper=f"Invalid session host {_instance_id}: {err}"
            )

        logger.debug(f"Created SessionHost {_session_host} from {_instance_id} ({_state})")
        return HostpoolResponse(success=True, message=_session_host)

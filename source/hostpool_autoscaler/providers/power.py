# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import queue
from typing import Any, Optional, Protocol
import hostpool_autoscaler.utils.aws.boto3_wrapper as utils_boto3
from hostpool_autoscaler.configuration import ScalingConfiguration
from hostpool_autoscaler.providers.inventory import TAG_CLUSTER_ID, TAG_HOST_POOL_ID
from hostpool_autoscaler.utils.aws.ec2_helper import (
    describe_instances_paginate,
    start_instance,
    stop_instance,
)
from hostpool_autoscaler.utils.datamodels.power_action import (
    PowerAction,
    PowerActionIntent,
)
from hostpool_autoscaler.utils.error import HostpoolError
from hostpool_autoscaler.utils.response import HostpoolResponse

logger = logging.getLogger("hostpool_logger")


class PowerController(Protocol):
    """
    Accept a power-action intent. A successful response means the intent was accepted, not that the host reached its new state.
    """

    def submit(self, intent: PowerActionIntent) -> HostpoolResponse: ...


class Ec2PowerController:
    # Instance state required before each action
    _EXPECTED_STATE = {
        PowerAction.START: "stopped",
        PowerAction.STOP: "running",
    }

    def __init__(
        self,
        configuration: ScalingConfiguration,
        client_ec2: Optional[Any] = None,
        hibernate: bool = False,
    ):
        self._configuration = configuration
        self._client_ec2 = client_ec2
        self._hibernate = hibernate

    def _get_client(self) -> HostpoolResponse:
        if self._client_ec2 is None:
            _client = utils_boto3.get_boto(
                service_name="ec2",
                region_name=self._configuration.region_name,
                profile_name=self._configuration.profile_name,
            )
            if not _client.success:
                return _client
            self._client_ec2 = _client.message
        return HostpoolResponse(success=True, message=self._client_ec2)

    def resolve_instance_id(self, intent: PowerActionIntent) -> HostpoolResponse:
        """
        Find the EC2 instance backing a bare host identity (private DNS hostname) within the pool
        """
        _client = self._get_client()
        if not _client.success:
            return _client

        _instances = describe_instances_paginate(
            client_ec2=_client.message,
            filters=[
                {"Name": f"tag:{TAG_CLUSTER_ID}", "Values": [self._configuration.resource_group]},
                {"Name": f"tag:{TAG_HOST_POOL_ID}", "Values": [self._configuration.pool_id]},
                {"Name": "private-dns-name", "Values": [f"{intent.host_identity}.*"]},
                {
                    "Name": "instance-state-name",
                    "Values": [self._EXPECTED_STATE[intent.action]],
                },
            ],
        )
        if not _instances.success:
            return _instances

        _instance_ids = [instance.get("InstanceId") for instance in _instances.message]
        if len(_instance_ids) != 1:
            return HostpoolError.POWER_ACTION_ERROR(
                action=intent.action.value,
                host_identity=intent.host_identity,
                helper=f"Expected exactly one {self._EXPECTED_STATE[intent.action]} instance, found {_instance_ids}",
            )
        return HostpoolResponse(success=True, message=_instance_ids[0])

    def submit(self, intent: PowerActionIntent) -> HostpoolResponse:
        logger.info(f"Received power intent {intent}")
        _instance_id = self.resolve_instance_id(intent=intent)
        if not _instance_id.success:
            return _instance_id

        _client_ec2 = self._get_client().message
        if intent.action == PowerAction.START:
            _result = start_instance(client_ec2=_client_ec2, instance_id=_instance_id.message)
        else:
            _result = stop_instance(
                client_ec2=_client_ec2,
                instance_id=_instance_id.message,
                hibernate=self._hibernate,
            )

        if not _result.success:
            return HostpoolError.POWER_ACTION_ERROR(
                action=intent.action.value,
                host_identity=intent.host_identity,
                helper=_result.message,
            )

        logger.info(f"{intent.action.value} request accepted for {intent.host_identity} ({_instance_id.message})")
        return HostpoolResponse(success=True, message=_instance_id.message)


class PowerIntentQueue:
    """
    One-way channel between the scaling orchestrator and a power controller.
    submit() only enqueues, dispatch() drains the pending intents into another controller.
    """

    def __init__(self, maxsize: int = 0):
        self._queue = queue.Queue(maxsize=maxsize)

    def submit(self, intent: PowerActionIntent) -> HostpoolResponse:
        try:
            self._queue.put_nowait(intent)
        except queue.Full:
            return HostpoolError.POWER_ACTION_ERROR(
                action=intent.action.value,
                host_identity=intent.host_identity,
                helper=f"Intent queue is full ({self._queue.maxsize} pending)",
            )
        logger.info(f"Queued power intent {intent}")
        return HostpoolResponse(success=True, message=intent)

    def dispatch(self, controller: PowerController) -> HostpoolResponse:
        """
        Forward every pending intent to controller. Failed intents are not re-queued.
        """
        _results = []
        _failures = []
        while True:
            try:
                _intent = self._queue.get_nowait()
            except queue.Empty:
                break
            _result = controller.submit(_intent)
            _results.append(_result)
            if not _result.success:
                _failures.append(f"{_intent.action.value} {_intent.host_identity}: {_result.message}")
            self._queue.task_done()

        if _failures:
            return HostpoolResponse(
                success=False,
                message=f"{len(_failures)}/{len(_results)} intent(s) failed: {_failures}",
                status_code=502,
            )
        return HostpoolResponse(success=True, message=_results)

# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Scheduled trigger (EventBridge rule -> Lambda). Runs one scaling cycle per invocation.

Event keys are optional and override the Lambda environment:
    {"pool_id": "pool-a", "resource_group": "soca-prod", "start_threshold": 2, "dry_run": false}
"""

import logging
from hostpool_autoscaler.configuration import ScalingConfiguration
from hostpool_autoscaler.providers.inventory import Ec2InventoryProvider
from hostpool_autoscaler.providers.power import Ec2PowerController, PowerIntentQueue
from hostpool_autoscaler.scaling.orchestrator import HostPoolScaler
from hostpool_autoscaler.utils.cast import HostpoolCastEngine

logging.getLogger().setLevel(logging.INFO)
logger = logging.getLogger("hostpool_logger")


def lambda_handler(event, context):
    event = event or {}
    _configuration = ScalingConfiguration.from_env(
        pool_id=event.get("pool_id"),
        resource_group=event.get("resource_group"),
        start_threshold=event.get("start_threshold"),
    )
    if not _configuration.success:
        return _configuration.as_dict(keys=["success", "message"])
    _configuration = _configuration.message

    _dry_run = HostpoolCastEngine(event.get("dry_run", False)).cast_as(bool)
    if not _dry_run.success:
        return _dry_run.as_dict(keys=["success", "message"])

    _intents = PowerIntentQueue()
    _scaler = HostPoolScaler(
        configuration=_configuration,
        inventory_provider=Ec2InventoryProvider(configuration=_configuration),
        power_controller=_intents,
    )
    # Dry run only computes the decision, nothing is queued
    _cycle = _scaler.evaluate() if _dry_run.message else _scaler.run_cycle()

    if not _cycle.success:
        return _cycle.as_dict(keys=["success", "message"])

    if not _dry_run.message:
        _dispatch = _intents.dispatch(Ec2PowerController(configuration=_configuration))
        if not _dispatch.success:
            logger.error(f"Unable to dispatch power intent: {_dispatch.message}")
            return _dispatch.as_dict(keys=["success", "message"])

    _outcome = _cycle.message
    return {
        "success": True,
        "message": _outcome.summary,
        "dry_run": _dry_run.message,
        "outcome": _outcome.model_dump(mode="json"),
    }

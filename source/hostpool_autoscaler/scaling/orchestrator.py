# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Scaling control loop. One call to run_cycle() is one Idle -> Evaluating -> {Growing, Shrinking, Stable} -> Idle pass:

1. fetch the pool descriptor and validate it (DepthFirst only, max_sessions_per_host > 0)
2. fetch the session hosts, drop the ones in drain mode
3. aggregate demand and compute the target host count
4. compare running hosts with the target and select at most one host to start or stop
5. hand the resulting power intent (if any) to the power controller, without waiting for completion

No state is kept between cycles, every cycle starts from a fresh inventory snapshot.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict
from hostpool_autoscaler.configuration import ScalingConfiguration
from hostpool_autoscaler.providers.inventory import InventoryProvider
from hostpool_autoscaler.providers.power import PowerController
from hostpool_autoscaler.scaling.demand import aggregate_demand, filter_accepting_hosts
from hostpool_autoscaler.scaling.selector import (
    build_power_intent,
    select_host_to_start,
    select_host_to_stop,
)
from hostpool_autoscaler.scaling.target import compute_target_hosts
from hostpool_autoscaler.utils.datamodels.host_pool import LoadBalancingMode
from hostpool_autoscaler.utils.datamodels.power_action import (
    PowerAction,
    PowerActionIntent,
)
from hostpool_autoscaler.utils.error import HostpoolError
from hostpool_autoscaler.utils.response import HostpoolResponse

logger = logging.getLogger("hostpool_logger")


class ScalerState(str, Enum):
    IDLE = "Idle"
    EVALUATING = "Evaluating"
    GROWING = "Growing"
    SHRINKING = "Shrinking"
    STABLE = "Stable"


class ScalingDecision(str, Enum):
    START_HOST = "start_host"
    STOP_HOST = "stop_host"
    STABLE = "stable"
    DEFICIT_UNRESOLVED = "deficit_unresolved"
    FLOOR_PROTECTED = "floor_protected"


class ScalingOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    pool_id: str
    state: ScalerState
    decision: ScalingDecision
    current_sessions: int
    running_count: int
    target_hosts: int
    intent: Optional[PowerActionIntent] = None
    dispatched: bool = False

    @property
    def summary(self) -> str:
        if self.decision == ScalingDecision.START_HOST:
            _verb = "Started" if self.dispatched else "Would start"
            return f"{_verb} host {self.intent.host_identity}"
        if self.decision == ScalingDecision.STOP_HOST:
            _verb = "Stopped" if self.dispatched else "Would stop"
            return f"{_verb} host {self.intent.host_identity}"
        if self.decision == ScalingDecision.DEFICIT_UNRESOLVED:
            return "No action (deficit unresolved)"
        if self.decision == ScalingDecision.FLOOR_PROTECTED:
            return "No action (floor protected)"
        return "No action (stable)"


class HostPoolScaler:
    def __init__(
        self,
        configuration: ScalingConfiguration,
        inventory_provider: InventoryProvider,
        power_controller: Optional[PowerController] = None,
    ):
        self._configuration = configuration
        self._inventory_provider = inventory_provider
        self._power_controller = power_controller
        self.state = ScalerState.IDLE

    def _transition(self, state: ScalerState) -> None:
        logger.debug(f"{self._configuration.pool_id}: {self.state.value} -> {state.value}")
        self.state = state

    def evaluate(self) -> HostpoolResponse:
        """
        Compute the scaling decision for the current snapshot without emitting any power intent.
        Return a ScalingOutcome on success, a failed HostpoolResponse on fatal error (bad configuration, unreachable inventory)
        """
        try:
            return self._evaluate()
        finally:
            self._transition(ScalerState.IDLE)

    def _evaluate(self) -> HostpoolResponse:
        _pool_id = self._configuration.pool_id
        logger.info(f"Evaluating host pool {_pool_id}")

        _descriptor = self._inventory_provider.get_pool_descriptor(_pool_id)
        if not _descriptor.success:
            return HostpoolError.HOST_POOL_INVENTORY_ERROR(
                pool_id=_pool_id, helper=_descriptor.message
            )
        _descriptor = _descriptor.message

        # Only DepthFirst pools can be scaled
        if _descriptor.load_balancing_mode != LoadBalancingMode.DEPTH_FIRST:
            return HostpoolError.HOST_POOL_CONFIGURATION_ERROR(
                pool_id=_pool_id,
                helper=f"Load balancing mode must be {LoadBalancingMode.DEPTH_FIRST.value}, detected {_descriptor.load_balancing_mode.value}",
            )

        if _descriptor.max_sessions_per_host <= 0:
            return HostpoolError.HOST_POOL_CONFIGURATION_ERROR(
                pool_id=_pool_id,
                helper=f"max_sessions_per_host must be greater than 0, detected {_descriptor.max_sessions_per_host}",
            )

        _hosts = self._inventory_provider.list_session_hosts(_pool_id)
        if not _hosts.success:
            return HostpoolError.HOST_POOL_INVENTORY_ERROR(
                pool_id=_pool_id, helper=_hosts.message
            )

        self._transition(ScalerState.EVALUATING)
        _accepting_hosts = filter_accepting_hosts(_hosts.message)
        _demand = aggregate_demand(_accepting_hosts)

        try:
            _target_hosts = compute_target_hosts(
                current_sessions=_demand.current_sessions,
                max_sessions_per_host=_descriptor.max_sessions_per_host,
                start_threshold=self._configuration.start_threshold,
            )
        except ValueError as err:
            return HostpoolError.HOST_POOL_CONFIGURATION_ERROR(
                pool_id=_pool_id, helper=str(err)
            )

        _intent = None
        if _demand.running_count < _target_hosts:
            self._transition(ScalerState.GROWING)
            _selection = select_host_to_start(_accepting_hosts)
            if _selection.host is None:
                _decision = ScalingDecision.DEFICIT_UNRESOLVED
            else:
                _decision = ScalingDecision.START_HOST
                _action = PowerAction.START
        elif _demand.running_count > _target_hosts:
            self._transition(ScalerState.SHRINKING)
            _selection = select_host_to_stop(_accepting_hosts)
            if _selection.host is not None:
                _decision = ScalingDecision.STOP_HOST
                _action = PowerAction.STOP
            elif _selection.candidate_count == 1:
                _decision = ScalingDecision.FLOOR_PROTECTED
            else:
                _decision = ScalingDecision.STABLE
        else:
            self._transition(ScalerState.STABLE)
            _selection = None
            _decision = ScalingDecision.STABLE

        if _decision in (ScalingDecision.START_HOST, ScalingDecision.STOP_HOST):
            try:
                _intent = build_power_intent(
                    action=_action, host=_selection.host, pool_id=_pool_id
                )
            except ValueError as err:
                return HostpoolError.HOST_IDENTITY_ERROR(
                    resource_name=_selection.host.name, helper=str(err)
                )

        _outcome = ScalingOutcome(
            pool_id=_pool_id,
            state=self.state,
            decision=_decision,
            current_sessions=_demand.current_sessions,
            running_count=_demand.running_count,
            target_hosts=_target_hosts,
            intent=_intent,
        )
        logger.info(
            f"{_pool_id}: running={_demand.running_count} target={_target_hosts} -> {_outcome.summary}"
        )
        return HostpoolResponse(success=True, message=_outcome)

    def run_cycle(self) -> HostpoolResponse:
        """
        Evaluate the pool and hand the power intent (if any) to the power controller.
        A rejected intent is returned as a failed HostpoolResponse and is not retried.
        """
        _evaluation = self.evaluate()
        if not _evaluation.success:
            logger.error(f"Scaling cycle aborted for {self._configuration.pool_id}: {_evaluation.message}")
            return _evaluation

        _outcome = _evaluation.message
        if _outcome.intent is None:
            return _evaluation

        if self._power_controller is None:
            return HostpoolError.POWER_ACTION_ERROR(
                action=_outcome.intent.action.value,
                host_identity=_outcome.intent.host_identity,
                helper="No power controller configured",
            )

        _submit = self._power_controller.submit(_outcome.intent)
        if not _submit.success:
            return HostpoolError.POWER_ACTION_ERROR(
                action=_outcome.intent.action.value,
                host_identity=_outcome.intent.host_identity,
                helper=_submit.message,
            )

        _outcome = _outcome.model_copy(update={"dispatched": True})
        logger.info(f"Scaling cycle completed for {self._configuration.pool_id}: {_outcome.summary}")
        return HostpoolResponse(success=True, message=_outcome)

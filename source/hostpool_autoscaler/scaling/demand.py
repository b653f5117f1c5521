# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
from typing import Iterable, List
from pydantic import BaseModel, ConfigDict
from hostpool_autoscaler.utils.datamodels.host_pool import SessionHost, SessionHostStatus

logger = logging.getLogger("hostpool_logger")


class PoolDemand(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_sessions: int = 0
    running_count: int = 0


def filter_accepting_hosts(hosts: Iterable[SessionHost]) -> List[SessionHost]:
    """
    Drop hosts in drain mode (allow_new_sessions is False). Listing order is preserved.
    """
    _accepting = []
    for host in hosts:
        if host.allow_new_sessions:
            _accepting.append(host)
        else:
            logger.debug(f"{host.name} does not allow new sessions, excluding it from capacity accounting")
    return _accepting


def aggregate_demand(hosts: Iterable[SessionHost]) -> PoolDemand:
    """
    Sum active sessions and count Available hosts over an already filtered inventory
    """
    _current_sessions = 0
    _running_count = 0
    for host in hosts:
        _current_sessions += host.session_count
        if host.status == SessionHostStatus.AVAILABLE:
            _running_count += 1

    logger.info(
        f"Aggregated demand: {_current_sessions} active session(s) on {_running_count} available host(s)"
    )
    return PoolDemand(current_sessions=_current_sessions, running_count=_running_count)

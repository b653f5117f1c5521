# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Host selection policies. Each policy picks at most one host per cycle and keeps the
listing order returned by the inventory (no re-sorting):

- start: first Unavailable host
- stop: last Available host with no session, only when at least two of them exist
  so one empty host always remains as a buffer
"""

import logging
from typing import Optional, Sequence
from pydantic import BaseModel, ConfigDict
from hostpool_autoscaler.utils.datamodels.host_pool import (
    SessionHost,
    SessionHostStatus,
    parse_host_identity,
)
from hostpool_autoscaler.utils.datamodels.power_action import (
    PowerAction,
    PowerActionIntent,
)

logger = logging.getLogger("hostpool_logger")

# Minimum number of empty available hosts to keep running
STOP_FLOOR = 1


class HostSelection(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: Optional[SessionHost] = None
    candidate_count: int = 0


def select_host_to_start(hosts: Sequence[SessionHost]) -> HostSelection:
    _candidates = [host for host in hosts if host.status == SessionHostStatus.UNAVAILABLE]
    if not _candidates:
        logger.info("No Unavailable host found, no capacity to add")
        return HostSelection(host=None, candidate_count=0)

    logger.info(
        f"Found {len(_candidates)} host(s) to start: {[host.name for host in _candidates]}, picking the first one"
    )
    return HostSelection(host=_candidates[0], candidate_count=len(_candidates))


def select_host_to_stop(hosts: Sequence[SessionHost]) -> HostSelection:
    _candidates = [host for host in hosts if host.is_empty_and_available]
    if len(_candidates) <= STOP_FLOOR:
        logger.info(
            f"Found {len(_candidates)} empty available host(s), at least {STOP_FLOOR + 1} required before stopping one"
        )
        return HostSelection(host=None, candidate_count=len(_candidates))

    logger.info(
        f"Found {len(_candidates)} empty available host(s): {[host.name for host in _candidates]}, picking the last one"
    )
    return HostSelection(host=_candidates[-1], candidate_count=len(_candidates))


def build_power_intent(
    action: PowerAction, host: SessionHost, pool_id: Optional[str] = None
) -> PowerActionIntent:
    # Raises ValueError if the host name is malformed or belongs to another pool
    return PowerActionIntent(
        action=action, host_identity=parse_host_identity(host.name, pool_id=pool_id)
    )

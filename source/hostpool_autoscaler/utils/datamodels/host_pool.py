# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
import logging
from enum import Enum

logger = logging.getLogger("hostpool_logger")


class LoadBalancingMode(str, Enum):
    DEPTH_FIRST = "DepthFirst"
    BREADTH_FIRST = "BreadthFirst"
    UNKNOWN = "Unknown"

    @classmethod
    def from_value(cls, value: Optional[str]) -> LoadBalancingMode:
        # Values come from SSM, tolerate case differences ("depthfirst", "DEPTHFIRST" ...)
        for _mode in cls:
            if value is not None and str(value).strip().lower() == _mode.value.lower():
                return _mode
        return cls.UNKNOWN


class SessionHostStatus(str, Enum):
    AVAILABLE = "Available"  # powered on and healthy
    UNAVAILABLE = "Unavailable"  # powered off or unreachable
    OTHER = "Other"


class HostPoolDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    pool_id: str
    load_balancing_mode: LoadBalancingMode
    # Validated by the orchestrator so a bad value is reported as a configuration error
    max_sessions_per_host: int


def parse_host_identity(resource_name: str, pool_id: Optional[str] = None) -> str:
    """
    Return the bare session host identity used by power operations.

    Input format: "<pool_id>/<host>[.<suffix>]"
      - <pool_id> is the pool qualifier, must match pool_id when provided
      - <host> is the bare identity
      - <suffix> is the record-type suffix (e.g. DNS domain), everything after the first "."

    Example: "pool-a/ip-10-0-1-5.ec2.internal" -> "ip-10-0-1-5"

    Raises ValueError on malformed input.
    """
    if not isinstance(resource_name, str) or not resource_name.strip():
        raise ValueError(f"Session host name must be a non-empty string, detected {resource_name!r}")

    _segments = resource_name.strip().split("/")
    if len(_segments) != 2:
        raise ValueError(
            f"Session host name must follow <pool_id>/<host>[.<suffix>], detected {resource_name!r}"
        )

    _pool_qualifier, _record_name = _segments
    if not _pool_qualifier:
        raise ValueError(f"Missing pool qualifier in {resource_name!r}")
    if pool_id is not None and _pool_qualifier != pool_id:
        raise ValueError(
            f"Session host {resource_name!r} does not belong to pool {pool_id!r}"
        )

    _identity = _record_name.split(".", 1)[0]
    if not _identity:
        raise ValueError(f"Missing host name in {resource_name!r}")

    return _identity


class SessionHost(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    status: SessionHostStatus
    session_count: int = Field(default=0, ge=0)
    allow_new_sessions: bool = True
    instance_id: Optional[str] = None

    @property
    def is_empty_and_available(self) -> bool:
        return self.status == SessionHostStatus.AVAILABLE and self.session_count == 0

# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import os
import logging
from typing import Mapping, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from hostpool_autoscaler.scaling.target import DEFAULT_START_THRESHOLD
from hostpool_autoscaler.utils.cast import HostpoolCastEngine
from hostpool_autoscaler.utils.error import HostpoolError
from hostpool_autoscaler.utils.response import HostpoolResponse

logger = logging.getLogger("hostpool_logger")


class ScalingConfiguration(BaseModel):
    """
    Inputs of one scaling cycle. Passed explicitly to the orchestrator and to the AWS collaborators.

    resource_group is the namespace of the pool: SSM tree /soca/<resource_group>/ and tag soca:ClusterId on the session hosts.
    region_name / profile_name are the authentication context used to build the boto3 session.
    """

    model_config = ConfigDict(frozen=True)

    pool_id: str = Field(min_length=1)
    resource_group: str = Field(min_length=1)
    start_threshold: int = Field(default=DEFAULT_START_THRESHOLD, ge=0)
    region_name: Optional[str] = None
    profile_name: Optional[str] = None

    @property
    def ssm_prefix(self) -> str:
        return f"/soca/{self.resource_group}"

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, **overrides
    ) -> HostpoolResponse:
        """
        Build the configuration from environment variables. Non-None keyword overrides (e.g. CLI options) win over the environment:

        HOSTPOOL_ID, HOSTPOOL_RESOURCE_GROUP, HOSTPOOL_START_THRESHOLD, AWS_REGION (or AWS_DEFAULT_REGION), AWS_PROFILE
        """
        _environ = os.environ if environ is None else environ
        _values = {
            "pool_id": _environ.get("HOSTPOOL_ID"),
            "resource_group": _environ.get("HOSTPOOL_RESOURCE_GROUP"),
            "start_threshold": _environ.get("HOSTPOOL_START_THRESHOLD"),
            "region_name": _environ.get("AWS_REGION", _environ.get("AWS_DEFAULT_REGION")),
            "profile_name": _environ.get("AWS_PROFILE"),
        }
        _values.update({k: v for k, v in overrides.items() if v is not None})

        if _values["start_threshold"] in (None, ""):
            _values["start_threshold"] = DEFAULT_START_THRESHOLD
        else:
            _threshold = HostpoolCastEngine(_values["start_threshold"]).cast_as(int)
            if not _threshold.success:
                return HostpoolError.HOST_POOL_CONFIGURATION_ERROR(
                    pool_id=_values["pool_id"],
                    helper=f"start_threshold must be an integer, detected {_values['start_threshold']}",
                )
            _values["start_threshold"] = _threshold.message

        try:
            _configuration = cls(**{k: v for k, v in _values.items() if v is not None})
        except ValidationError as err:
            return HostpoolError.HOST_POOL_CONFIGURATION_ERROR(
                pool_id=_values["pool_id"],
                helper=f"Invalid scaling configuration: {err.errors(include_url=False)}",
            )

        logger.debug(f"Loaded scaling configuration {_configuration}")
        return HostpoolResponse(success=True, message=_configuration)

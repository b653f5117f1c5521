# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import boto3
import botocore.config
import logging
from typing import Optional
from hostpool_autoscaler.utils.error import HostpoolError
from hostpool_autoscaler.utils.response import HostpoolResponse

logger = logging.getLogger("hostpool_logger")


def get_boto_session(
    region_name: Optional[str] = None, profile_name: Optional[str] = None
) -> HostpoolResponse:
    """
    Build the boto3 Session used as authentication context for every AWS call of a scaling cycle
    """
    try:
        return HostpoolResponse(
            success=True,
            message=boto3.Session(region_name=region_name, profile_name=profile_name),
        )
    except Exception as err:
        return HostpoolError.AWS_API_ERROR(
            service_name="boto3",
            helper=f"Unable to create boto3 session (region {region_name}, profile {profile_name}) because of {err}",
        )


def get_boto(
    service_name: str,
    region_name: Optional[str] = None,
    profile_name: Optional[str] = None,
) -> HostpoolResponse:
    _config = botocore.config.Config(user_agent_extra="HostpoolAutoscaler/1.0")

    _session = get_boto_session(region_name=region_name, profile_name=profile_name)
    if not _session.success:
        return _session

    _boto3_params = {
        "service_name": service_name,
        "region_name": _session.message.region_name,
        "config": _config,
    }

    logger.debug(f"Building boto3 {service_name} with params {_boto3_params}")

    try:
        return HostpoolResponse(
            success=True, message=_session.message.client(**_boto3_params)
        )
    except Exception as err:
        return HostpoolError.AWS_API_ERROR(
            service_name="boto3",
            helper=f"Unable to create boto3 client for {service_name} because of {err}",
        )

# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import ClientError

from hostpool_autoscaler.utils.error import HostpoolError
from hostpool_autoscaler.utils.response import HostpoolResponse

logger = logging.getLogger("hostpool_logger")


def describe_instances_paginate(client_ec2: Any, filters: list) -> HostpoolResponse:
    # Note: This function returns a flat list of instances (Reservations.Instances) in listing order and not the raw boto3 response
    logger.info(f"Running describe_instances_paginate with {filters=}")
    _instance_info = []
    try:
        paginator = client_ec2.get_paginator("describe_instances")
        for page in paginator.paginate(Filters=filters):
            for reservation in page["Reservations"]:
                for instance in reservation["Instances"]:
                    _instance_info.append(instance)
        return HostpoolResponse(success=True, message=_instance_info)
    except Exception as err:
        return HostpoolError.AWS_API_ERROR(
            service_name="ec2",
            helper=f"Unable to describe_instances_paginate because of {err}",
        )


def get_tag_value(instance: dict, key: str, default: Any = None) -> Any:
    return next(
        (tag.get("Value") for tag in instance.get("Tags", []) if tag.get("Key") == key),
        default,
    )


def start_instance(client_ec2: Any, instance_id: str) -> HostpoolResponse:
    """
    Request an EC2 instance start. StartInstances returns as soon as the request is accepted, we don't wait for the running state.
    """
    logger.info(f"Starting instance {instance_id}")
    try:
        _response = client_ec2.start_instances(InstanceIds=[instance_id])
        logger.debug(f"start_instances Results: {_response}")
        return HostpoolResponse(
            success=True, message=_response.get("StartingInstances", [])
        )
    except ClientError as err:
        return HostpoolError.AWS_API_ERROR(
            service_name="ec2",
            helper=f"Unable to start instance {instance_id} because of {err.response['Error'].get('Code')}: {err}",
        )
    except Exception as err:
        return HostpoolError.AWS_API_ERROR(
            service_name="ec2",
            helper=f"Unable to start instance {instance_id} because of {err}",
        )


def stop_instance(
    client_ec2: Any, instance_id: str, hibernate: bool = False
) -> HostpoolResponse:
    """
    Request an EC2 instance stop. StopInstances returns as soon as the request is accepted, we don't wait for the stopped state.
    """
    logger.info(f"Stopping instance {instance_id} with {hibernate=}")
    try:
        _response = client_ec2.stop_instances(
            InstanceIds=[instance_id], Hibernate=hibernate
        )
        logger.debug(f"stop_instances Results: {_response}")
        return HostpoolResponse(
            success=True, message=_response.get("StoppingInstances", [])
        )
    except ClientError as err:
        return HostpoolError.AWS_API_ERROR(
            service_name="ec2",
            helper=f"Unable to stop instance {instance_id} because of {err.response['Error'].get('Code')}: {err}",
        )
    except Exception as err:
        return HostpoolError.AWS_API_ERROR(
            service_name="ec2",
            helper=f"Unable to stop instance {instance_id} because of {err}",
        )

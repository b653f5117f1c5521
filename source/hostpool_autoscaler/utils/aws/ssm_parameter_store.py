# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
from typing import Any
from hostpool_autoscaler.utils.error import HostpoolError
from hostpool_autoscaler.utils.response import HostpoolResponse

logger = logging.getLogger("hostpool_logger")


class HostpoolConfig:
    """
    Read-only access to an SSM Parameter Store hierarchy of a resource group (/soca/<resource_group>/<key>/)
    """

    def __init__(
        self,
        key: str,
        parameter_name_prefix: str,
        ssm_client: Any,
    ):
        self._parameter_name_prefix = parameter_name_prefix.rstrip("/")
        # Enforce "/" at the beginning and the end of the hierarchy name
        self._parameter_name = key if key.startswith("/") else f"/{key}"
        if not self._parameter_name.endswith("/"):
            self._parameter_name = f"{self._parameter_name}/"

        # _full_parameter_name is the parameter key name + specified prefix
        if self._parameter_name.startswith(self._parameter_name_prefix):
            self._full_parameter_name = self._parameter_name
        else:
            self._full_parameter_name = (
                f"{self._parameter_name_prefix}{self._parameter_name}"
            )

        self._ssm_client = ssm_client

    def get_value(self) -> HostpoolResponse:
        """
        Return every parameter under the hierarchy as a dict keyed by the name relative to the hierarchy
        """
        logger.debug(f"Trying to retrieve parameters under {self._full_parameter_name}")
        try:
            _output = {}
            _paginator = self._ssm_client.get_paginator("get_parameters_by_path")
            for _page in _paginator.paginate(
                Path=self._full_parameter_name, Recursive=True
            ):
                for _entry in _page["Parameters"]:
                    _output[_entry["Name"].split(self._full_parameter_name)[-1]] = _entry["Value"]

        except Exception as e:
            return HostpoolError.AWS_API_ERROR(
                service_name="ssm_parameterstore",
                helper=f"Unknown error while trying to retrieve parameters under {self._full_parameter_name} due to {e}",
            )

        if not _output:
            logger.info(f"No parameter found under {self._full_parameter_name}")
            return HostpoolResponse(
                success=False,
                message=f"No parameter found under {self._full_parameter_name}",
            )

        return HostpoolResponse(success=True, message=_output)

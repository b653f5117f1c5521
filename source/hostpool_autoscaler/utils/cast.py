# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from typing import Any, Type
import logging
from hostpool_autoscaler.utils.response import HostpoolResponse
from hostpool_autoscaler.utils.error import HostpoolError

logger = logging.getLogger("hostpool_logger")


class HostpoolCastEngine:
    """
    Cast values retrieved from EC2 tags, SSM parameters or environment variables (always str) to their expected type.
    Return a failed HostpoolResponse if we cannot cast the data as requested type
    """

    ALLOWED_FALSE_VALUES = ["false", "no", "off", "disabled"]
    ALLOWED_TRUE_VALUES = ["true", "yes", "on", "enabled"]

    def __init__(self, data: Any):
        self._data = data

    def cast_as(self, expected_type: Type) -> HostpoolResponse:
        logger.debug(f"Trying to cast {self._data} as {expected_type}")
        _allowed_types = [bool, int]
        if expected_type not in _allowed_types:
            return HostpoolError.CAST_ERROR(
                helper=f"Invalid type, must be one of {_allowed_types}"
            )

        # bool is a subclass of int, don't let True pass as a valid int
        if self.is_type(expected_type=expected_type) and not (
            expected_type is int and isinstance(self._data, bool)
        ):
            return HostpoolResponse(success=True, message=self._data)

        try:
            if isinstance(self._data, bytes):
                logger.debug("bytes detected, casting it back as str first.")
                self._data = self._data.decode()

            if expected_type == bool:
                # Cast specific str as bool
                if str(self._data).lower() in HostpoolCastEngine.ALLOWED_FALSE_VALUES:
                    return HostpoolResponse(success=True, message=False)
                elif str(self._data).lower() in HostpoolCastEngine.ALLOWED_TRUE_VALUES:
                    return HostpoolResponse(success=True, message=True)
                else:
                    return HostpoolError.CAST_ERROR(
                        helper=f"{self._data} is not a valid bool value."
                    )

            # Parse the str form, so "1.5", 2.5 or True are rejected instead of truncated
            return HostpoolResponse(success=True, message=int(str(self._data).strip()))

        except Exception as e:
            return HostpoolError.CAST_ERROR(
                helper=f"Unable to cast {self._data} to {expected_type} due to {e}"
            )

    def is_type(self, expected_type: Type) -> bool:
        return isinstance(self._data, expected_type)

# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from typing import Any, Optional


class HostpoolResponse:
    """
    Attributes:
        success (bool): Indicates whether the operation was successful or not.
        message (Any): Payload of the response (result on success, error description otherwise).
        status_code (int): Status code associated with the response. If not set, default to 200 if request is successful, 500 otherwise
        trace (str or None): Trace information for debugging purposes.
    """

    DEFAULT_SUCCESS_STATUS_CODE = 200
    DEFAULT_ERROR_STATUS_CODE = 500

    def __init__(
        self,
        success: bool,
        message: Any,
        status_code: Optional[int] = None,
        trace: Optional[str] = None,
    ):
        self.success = success
        self.message = message
        self.status_code = status_code
        self.trace = trace

        if not isinstance(success, bool):
            self.message = f"success must be a bool in HostpoolResponse, detected {success}"
            self.success = False
        else:
            self.success = success

        if status_code is None:
            if self.success:
                self.status_code = HostpoolResponse.DEFAULT_SUCCESS_STATUS_CODE
            else:
                self.status_code = HostpoolResponse.DEFAULT_ERROR_STATUS_CODE
        else:
            if not isinstance(status_code, int):
                self.message = f"status_code must be an int in HostpoolResponse, detected {status_code}"
                self.success = False
            elif not (100 <= status_code <= 599):
                self.message = f"status_code must be between 100 and 599 in HostpoolResponse, detected {status_code}"
                self.success = False
            else:
                self.status_code = status_code

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}: {self.__dict__}>"

    def __str__(self) -> str:
        return self.__repr__()

    def as_dict(self, keys: Optional[list] = None) -> dict:
        """
        Return a dict based on the keys format:

        attr_list = ["message", "success", "status_code"]
        -> {
            "message": instance.message,
            "success": instance.success,
            "status_code: instance.status_code
        }

        Attribute must exist in HostpoolResponse (e.g: ["custom_attr"] will AttributeError)
        """
        if keys is None:
            keys = ["success", "message", "status_code", "trace"]

        if not isinstance(keys, list):
            raise TypeError("keys must be a list")

        return {attr: getattr(self, attr) for attr in keys}

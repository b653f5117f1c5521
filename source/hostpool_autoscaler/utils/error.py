# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import importlib
import inspect
import uuid
from typing import Optional
import logging
from hostpool_autoscaler.utils.response import HostpoolResponse

logger = logging.getLogger("hostpool_logger")


# Errors are defined in these modules within hostpool_autoscaler/utils/errors folder
modules = [
    "aws_api",
    "cast",
    "host_pool",
]


class HostpoolError:
    @staticmethod
    def return_error(
        error_id: str,
        error_message: str,
        error_doc_url: Optional[str] = None,
        helper: Optional[str] = None,
        status_code: Optional[int] = 500,
    ) -> HostpoolResponse:
        _error_message = f"{error_message}{helper if helper else ''}"

        # Get the caller's frame
        _inspect_trace = []
        frame = inspect.currentframe().f_back
        while frame:
            frame_info = inspect.getframeinfo(frame)
            # keep trace pointing back to actual filename only
            if not frame_info.filename.startswith("<"):
                _inspect_trace.append(
                    f">> File: {frame_info.filename}, Line: {frame_info.lineno}, Function: {frame_info.function}"
                )
            frame = frame.f_back

        _trace_log = "\n".join(reversed(_inspect_trace))

        _request_uuid = uuid.uuid4()
        logger.error(
            f"Error ID: {error_id} | Error Message: {_error_message} | Status Code: {status_code} | Error RequestId {_request_uuid} | Error Trace: \n{_trace_log}"
        )

        # Returned message is displayed to the operator via CLI or Lambda output
        # System trace is only available on the log file
        if error_doc_url is not None:
            message = f"{_error_message}. For troubleshooting, please visit: {error_doc_url}. (Request ID: {_request_uuid})"
        else:
            message = f"{_error_message} (Request ID: {_request_uuid})"

        return HostpoolResponse(
            success=False,
            message=message,
            status_code=status_code,
            trace=_trace_log,
        )


_all_errors = {}
for module_name in modules:
    _all_errors[module_name] = []
    module = importlib.import_module(f"hostpool_autoscaler.utils.errors.{module_name}")
    for name, obj in inspect.getmembers(module, inspect.isfunction):
        _all_errors[module_name].append(name)
        # Check if the function doesn't already exist in HostpoolError
        if not hasattr(HostpoolError, name):
            setattr(HostpoolError, name, staticmethod(obj))
        else:
            raise RuntimeError(
                f"Function {name} already exists in HostpoolError. You cannot have the same error declared twice, pick a different name: {_all_errors}"
            )

# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from typing import Optional
import inspect
from hostpool_autoscaler.utils.error import HostpoolError


def HOST_POOL_CONFIGURATION_ERROR(
    pool_id: str,
    helper: Optional[str] = None,
    status_code: Optional[int] = 500,
    error_doc_url: Optional[str] = None,
):
    return HostpoolError.return_error(
        error_id=inspect.currentframe().f_code.co_name,
        error_message=f"Invalid configuration for host pool {pool_id}: ",
        error_doc_url=error_doc_url,
        helper=helper,
        status_code=status_code,
    )


def HOST_POOL_INVENTORY_ERROR(
    pool_id: str,
    helper: Optional[str] = None,
    status_code: Optional[int] = 503,
    error_doc_url: Optional[str] = None,
):
    return HostpoolError.return_error(
        error_id=inspect.currentframe().f_code.co_name,
        error_message=f"Unable to retrieve inventory for host pool {pool_id}: ",
        error_doc_url=error_doc_url,
        helper=helper,
        status_code=status_code,
    )


def HOST_IDENTITY_ERROR(
    resource_name: str,
    helper: Optional[str] = None,
    status_code: Optional[int] = 500,
    error_doc_url: Optional[str] = None,
):
    return HostpoolError.return_error(
        error_id=inspect.currentframe().f_code.co_name,
        error_message=f"Unable to extract session host identity from {resource_name}: ",
        error_doc_url=error_doc_url,
        helper=helper,
        status_code=status_code,
    )


def POWER_ACTION_ERROR(
    action: str,
    host_identity: str,
    helper: Optional[str] = None,
    status_code: Optional[int] = 502,
    error_doc_url: Optional[str] = None,
):
    return HostpoolError.return_error(
        error_id=inspect.currentframe().f_code.co_name,
        error_message=f"Unable to {action} session host {host_identity}: ",
        error_doc_url=error_doc_url,
        helper=helper,
        status_code=status_code,
    )

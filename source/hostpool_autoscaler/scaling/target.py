# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import logging

logger = logging.getLogger("hostpool_logger")

DEFAULT_START_THRESHOLD = 1


def compute_target_hosts(
    current_sessions: int,
    max_sessions_per_host: int,
    start_threshold: int = DEFAULT_START_THRESHOLD,
) -> int:
    """
    Number of running hosts needed to absorb current_sessions plus start_threshold extra sessions
    before any host is saturated:

        target_hosts = ceil((current_sessions + start_threshold) / max_sessions_per_host)

    Example: 5 sessions, threshold 1, capacity 3 -> ceil(6 / 3) = 2

    Raises ValueError when max_sessions_per_host <= 0, or when current_sessions / start_threshold are negative.
    """
    for _name, _value in (
        ("current_sessions", current_sessions),
        ("max_sessions_per_host", max_sessions_per_host),
        ("start_threshold", start_threshold),
    ):
        if isinstance(_value, bool) or not isinstance(_value, int):
            raise ValueError(f"{_name} must be an int, detected {_value!r}")

    if max_sessions_per_host <= 0:
        raise ValueError(
            f"max_sessions_per_host must be greater than 0, detected {max_sessions_per_host}"
        )
    if start_threshold < 0:
        raise ValueError(f"start_threshold must be >= 0, detected {start_threshold}")
    if current_sessions < 0:
        raise ValueError(f"current_sessions must be >= 0, detected {current_sessions}")

    # Integer ceiling division
    _target_hosts = -(-(current_sessions + start_threshold) // max_sessions_per_host)
    logger.info(
        f"Target hosts: ceil(({current_sessions} + {start_threshold}) / {max_sessions_per_host}) = {_target_hosts}"
    )
    return _target_hosts

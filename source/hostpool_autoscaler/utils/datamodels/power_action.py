# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from pydantic import BaseModel, ConfigDict
from enum import Enum


class PowerAction(str, Enum):
    START = "Start"
    STOP = "Stop"


class PowerActionIntent(BaseModel):
    # One-way message handed to the power controller, the orchestrator never waits for the transition
    model_config = ConfigDict(frozen=True)

    action: PowerAction
    host_identity: str

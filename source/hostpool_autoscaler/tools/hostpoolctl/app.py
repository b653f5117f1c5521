# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import click
import os
from hostpool_autoscaler.tools.hostpoolctl.commands.pool import pool
from hostpool_autoscaler.utils.logger import HostpoolLogger


@click.group()
@click.option("--pool-id", default=None, help="Host pool identifier. Default to $HOSTPOOL_ID")
@click.option(
    "--resource-group",
    default=None,
    help="Resource group (SSM namespace and soca:ClusterId tag) of the pool. Default to $HOSTPOOL_RESOURCE_GROUP",
)
@click.option(
    "--start-threshold",
    default=None,
    type=int,
    help="Extra sessions to absorb before any host is saturated. Default to $HOSTPOOL_START_THRESHOLD or 1",
)
@click.option("--region", default=None, help="AWS region. Default to $AWS_REGION")
@click.option("--profile", default=None, help="AWS profile. Default to $AWS_PROFILE")
@click.pass_context
def cli(ctx, pool_id, resource_group, start_threshold, region, profile):
    # Log file is located in the user's home directory
    _log_file_location = f"{os.path.expanduser('~')}/.hostpool/hostpoolctl.log"
    logger = HostpoolLogger().rotating_file_handler(file_path=_log_file_location)
    ctx.ensure_object(dict)
    ctx.obj["logger"] = logger
    ctx.obj["overrides"] = {
        "pool_id": pool_id,
        "resource_group": resource_group,
        "start_threshold": start_threshold,
        "region_name": region,
        "profile_name": profile,
    }


cli.add_command(pool)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()

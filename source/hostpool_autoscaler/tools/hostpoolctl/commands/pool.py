# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import click
from hostpool_autoscaler.configuration import ScalingConfiguration
from hostpool_autoscaler.providers.inventory import (
    Ec2InventoryProvider,
    StaticInventoryProvider,
)
from hostpool_autoscaler.providers.power import Ec2PowerController, PowerIntentQueue
from hostpool_autoscaler.scaling.demand import aggregate_demand, filter_accepting_hosts
from hostpool_autoscaler.scaling.orchestrator import HostPoolScaler
from hostpool_autoscaler.scaling.target import compute_target_hosts
from hostpool_autoscaler.tools.hostpoolctl.commands.common import print_output

_output_option = click.option(
    "-f",
    "--output",
    default="text",
    type=click.Choice(["text", "json", "yaml"]),
    help="Output result as: text, json, yaml",
)

_snapshot_option = click.option(
    "--snapshot",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Read the pool descriptor and session hosts from a YAML snapshot instead of EC2/SSM",
)


def _load_context(ctx, snapshot):
    """
    Return (configuration, inventory_provider), exit on error
    """
    _overrides = dict(ctx.obj.get("overrides", {}))
    _output = ctx.params.get("output", "text")

    if snapshot:
        _provider = StaticInventoryProvider.from_file(snapshot)
        if not _provider.success:
            print_output(message=_provider.message, output=_output, error=True)
        _provider = _provider.message
        # Snapshot carries its own pool, resource_group is only needed by the AWS collaborators
        if _overrides.get("pool_id") is None:
            _overrides["pool_id"] = _provider.pool_id
        if _overrides.get("resource_group") is None:
            _overrides["resource_group"] = "snapshot"

    _configuration = ScalingConfiguration.from_env(**_overrides)
    if not _configuration.success:
        print_output(message=_configuration.message, output=_output, error=True)
    _configuration = _configuration.message

    if not snapshot:
        _provider = Ec2InventoryProvider(configuration=_configuration)

    return _configuration, _provider


def _print_outcome(outcome, output):
    if output == "text":
        print_output(
            message=f"{outcome.summary} | pool={outcome.pool_id} sessions={outcome.current_sessions} "
            f"running={outcome.running_count} target={outcome.target_hosts}",
            output=output,
        )
    else:
        _result = outcome.model_dump(mode="json")
        _result["summary"] = outcome.summary
        print_output(message=_result, output=output)


@click.group()
def pool():
    pass


@pool.command()
@_snapshot_option
@_output_option
@click.pass_context
def describe(ctx, snapshot, output):
    """
    Print the pool descriptor, the session hosts and the aggregated demand
    """
    _configuration, _provider = _load_context(ctx, snapshot)

    _descriptor = _provider.get_pool_descriptor(_configuration.pool_id)
    if not _descriptor.success:
        print_output(message=_descriptor.message, output=output, error=True)
    _hosts = _provider.list_session_hosts(_configuration.pool_id)
    if not _hosts.success:
        print_output(message=_hosts.message, output=output, error=True)

    _demand = aggregate_demand(filter_accepting_hosts(_hosts.message))
    try:
        _target_hosts = compute_target_hosts(
            current_sessions=_demand.current_sessions,
            max_sessions_per_host=_descriptor.message.max_sessions_per_host,
            start_threshold=_configuration.start_threshold,
        )
    except ValueError as err:
        _target_hosts = f"N/A ({err})"

    if output == "text":
        _lines = [
            f"Pool: {_configuration.pool_id} ({_descriptor.message.load_balancing_mode.value}, "
            f"{_descriptor.message.max_sessions_per_host} sessions/host)",
        ]
        for _host in _hosts.message:
            _lines.append(
                f"  {_host.name:<50} {_host.status.value:<12} sessions={_host.session_count} "
                f"allow_new_sessions={_host.allow_new_sessions}"
            )
        _lines.append(
            f"Sessions: {_demand.current_sessions} | Running: {_demand.running_count} | Target: {_target_hosts}"
        )
        print_output(message="\n".join(_lines), output=output)
    else:
        print_output(
            message={
                "descriptor": _descriptor.message.model_dump(mode="json"),
                "session_hosts": [host.model_dump(mode="json") for host in _hosts.message],
                "demand": _demand.model_dump(mode="json"),
                "target_hosts": _target_hosts,
            },
            output=output,
        )


@pool.command()
@_snapshot_option
@_output_option
@click.pass_context
def evaluate(ctx, snapshot, output):
    """
    Compute the scaling decision without starting or stopping any host
    """
    _configuration, _provider = _load_context(ctx, snapshot)
    _evaluation = HostPoolScaler(
        configuration=_configuration, inventory_provider=_provider
    ).evaluate()
    if not _evaluation.success:
        print_output(message=_evaluation.message, output=output, error=True)
    _print_outcome(_evaluation.message, output)


@pool.command()
@click.option("--dry-run", is_flag=True, help="Compute the decision, do not send the power intent")
@click.option("--hibernate", is_flag=True, help="Hibernate instead of stop (instance must support hibernation)")
@_output_option
@click.pass_context
def scale(ctx, dry_run, hibernate, output):
    """
    Run one scaling cycle: start one host, stop one host or do nothing
    """
    _configuration, _provider = _load_context(ctx, snapshot=None)
    _intents = PowerIntentQueue()
    _scaler = HostPoolScaler(
        configuration=_configuration,
        inventory_provider=_provider,
        power_controller=_intents,
    )

    _cycle = _scaler.evaluate() if dry_run else _scaler.run_cycle()
    if not _cycle.success:
        print_output(message=_cycle.message, output=output, error=True)

    if not dry_run:
        _dispatch = _intents.dispatch(
            Ec2PowerController(configuration=_configuration, hibernate=hibernate)
        )
        if not _dispatch.success:
            print_output(message=_dispatch.message, output=output, error=True)

    _print_outcome(_cycle.message, output)

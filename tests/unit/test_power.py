import pytest
from botocore.stub import Stubber
from conftest import POOL_ID, RESOURCE_GROUP, RecordingPowerController

from hostpool_autoscaler.providers.power import Ec2PowerController, PowerIntentQueue
from hostpool_autoscaler.utils.datamodels.power_action import (
    PowerAction,
    PowerActionIntent,
)


def _resolve_filters(host_identity, state):
    return [
        {"Name": "tag:soca:ClusterId", "Values": [RESOURCE_GROUP]},
        {"Name": "tag:soca:HostPoolId", "Values": [POOL_ID]},
        {"Name": "private-dns-name", "Values": [f"{host_identity}.*"]},
        {"Name": "instance-state-name", "Values": [state]},
    ]


def _describe_response(*instance_ids):
    return {
        "Reservations": [
            {"Instances": [{"InstanceId": instance_id} for instance_id in instance_ids]}
        ]
    }


def _instance_state_change(instance_id, previous, current):
    _codes = {"pending": 0, "running": 16, "stopping": 64, "stopped": 80}
    return {
        "InstanceId": instance_id,
        "PreviousState": {"Code": _codes[previous], "Name": previous},
        "CurrentState": {"Code": _codes[current], "Name": current},
    }


@pytest.fixture
def controller(configuration, ec2_client):
    return Ec2PowerController(configuration=configuration, client_ec2=ec2_client)


def test_start_intent_starts_the_stopped_instance(controller, ec2_client):
    with Stubber(ec2_client) as stubber:
        stubber.add_response(
            "describe_instances",
            _describe_response("i-0000000000000000b"),
            {"Filters": _resolve_filters("ip-10-0-0-11", "stopped")},
        )
        stubber.add_response(
            "start_instances",
            {
                "StartingInstances": [
                    _instance_state_change("i-0000000000000000b", "stopped", "pending")
                ]
            },
            {"InstanceIds": ["i-0000000000000000b"]},
        )
        result = controller.submit(
            PowerActionIntent(action=PowerAction.START, host_identity="ip-10-0-0-11")
        )
        stubber.assert_no_pending_responses()

    assert result.success
    assert result.message == "i-0000000000000000b"


@pytest.mark.parametrize("hibernate", [False, True])
def test_stop_intent_stops_the_running_instance(configuration, ec2_client, hibernate):
    controller = Ec2PowerController(
        configuration=configuration, client_ec2=ec2_client, hibernate=hibernate
    )
    with Stubber(ec2_client) as stubber:
        stubber.add_response(
            "describe_instances",
            _describe_response("i-0000000000000000a"),
            {"Filters": _resolve_filters("ip-10-0-0-10", "running")},
        )
        stubber.add_response(
            "stop_instances",
            {
                "StoppingInstances": [
                    _instance_state_change("i-0000000000000000a", "running", "stopping")
                ]
            },
            {"InstanceIds": ["i-0000000000000000a"], "Hibernate": hibernate},
        )
        result = controller.submit(
            PowerActionIntent(action=PowerAction.STOP, host_identity="ip-10-0-0-10")
        )
        stubber.assert_no_pending_responses()

    assert result.success
    assert result.message == "i-0000000000000000a"


@pytest.mark.parametrize("instance_ids", [(), ("i-0000000000000000a", "i-0000000000000000c")])
def test_identity_must_resolve_to_exactly_one_instance(controller, ec2_client, instance_ids):
    with Stubber(ec2_client) as stubber:
        stubber.add_response(
            "describe_instances",
            _describe_response(*instance_ids),
            {"Filters": _resolve_filters("ip-10-0-0-10", "running")},
        )
        result = controller.submit(
            PowerActionIntent(action=PowerAction.STOP, host_identity="ip-10-0-0-10")
        )

    assert result.success is False
    assert result.status_code == 502
    assert "Expected exactly one running instance" in result.message


def test_rejected_start_is_a_power_action_error(controller, ec2_client):
    with Stubber(ec2_client) as stubber:
        stubber.add_response(
            "describe_instances",
            _describe_response("i-0000000000000000b"),
            {"Filters": _resolve_filters("ip-10-0-0-11", "stopped")},
        )
        stubber.add_client_error(
            "start_instances",
            service_error_code="InsufficientInstanceCapacity",
            expected_params={"InstanceIds": ["i-0000000000000000b"]},
        )
        result = controller.submit(
            PowerActionIntent(action=PowerAction.START, host_identity="ip-10-0-0-11")
        )

    assert result.success is False
    assert result.status_code == 502
    assert "Unable to Start session host ip-10-0-0-11" in result.message
    assert "InsufficientInstanceCapacity" in result.message


def test_queue_dispatches_intents_in_submission_order():
    intents = PowerIntentQueue()
    first = PowerActionIntent(action=PowerAction.START, host_identity="host-3")
    second = PowerActionIntent(action=PowerAction.STOP, host_identity="host-2")
    assert intents.submit(first).success
    assert intents.submit(second).success

    controller = RecordingPowerController()
    result = intents.dispatch(controller)

    assert result.success
    assert len(result.message) == 2
    assert controller.intents == [first, second]
    assert intents.dispatch(controller).message == []


def test_queue_reports_failed_intents_without_requeueing():
    intents = PowerIntentQueue()
    intents.submit(PowerActionIntent(action=PowerAction.START, host_identity="host-3"))

    controller = RecordingPowerController(reject_with="InsufficientInstanceCapacity")
    result = intents.dispatch(controller)

    assert result.success is False
    assert result.status_code == 502
    assert "1/1 intent(s) failed" in result.message
    assert "InsufficientInstanceCapacity" in result.message
    assert intents.dispatch(controller).success


def test_full_queue_rejects_intent():
    intents = PowerIntentQueue(maxsize=1)
    assert intents.submit(PowerActionIntent(action=PowerAction.START, host_identity="host-3")).success

    result = intents.submit(PowerActionIntent(action=PowerAction.START, host_identity="host-4"))
    assert result.success is False
    assert "Intent queue is full" in result.message

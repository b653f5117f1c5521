import json

import pytest
import yaml
from click.testing import CliRunner

from hostpool_autoscaler.tools.hostpoolctl.app import cli


@pytest.fixture
def snapshot(tmp_path):
    _snapshot = tmp_path / "pool-a.yaml"
    _snapshot.write_text(
        yaml.safe_dump(
            {
                "pool_id": "pool-a",
                "load_balancing_mode": "DepthFirst",
                "max_sessions_per_host": 3,
                "session_hosts": [
                    {"name": "pool-a/host-1.ec2.internal", "status": "Available", "session_count": 3},
                    {"name": "pool-a/host-2.ec2.internal", "status": "Available", "session_count": 3},
                    {"name": "pool-a/host-3.ec2.internal", "status": "Unavailable"},
                    {
                        "name": "pool-a/host-4.ec2.internal",
                        "status": "Unavailable",
                        "allow_new_sessions": False,
                    },
                ],
            }
        )
    )
    return str(_snapshot)


def _invoke(*args):
    return CliRunner().invoke(cli, list(args), obj={})


def test_evaluate_snapshot_as_text(snapshot):
    result = _invoke("pool", "evaluate", "--snapshot", snapshot)
    assert result.exit_code == 0, result.output
    assert "Would start host host-3 | pool=pool-a sessions=6 running=2 target=3" in result.stdout


def test_evaluate_snapshot_as_json(snapshot):
    result = _invoke("pool", "evaluate", "--snapshot", snapshot, "--output", "json")
    assert result.exit_code == 0, result.output
    _outcome = json.loads(result.stdout)
    assert _outcome["decision"] == "start_host"
    assert _outcome["state"] == "Growing"
    assert _outcome["intent"] == {"action": "Start", "host_identity": "host-3"}
    assert _outcome["dispatched"] is False
    assert _outcome["summary"] == "Would start host host-3"


def test_start_threshold_option_is_applied(snapshot):
    result = _invoke("--start-threshold", "0", "pool", "evaluate", "--snapshot", snapshot, "-f", "json")
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["target_hosts"] == 2


def test_describe_snapshot(snapshot):
    result = _invoke("pool", "describe", "--snapshot", snapshot, "-f", "yaml")
    assert result.exit_code == 0, result.output
    _description = yaml.safe_load(result.stdout)
    assert _description["descriptor"]["load_balancing_mode"] == "DepthFirst"
    assert len(_description["session_hosts"]) == 4
    assert _description["demand"] == {"current_sessions": 6, "running_count": 2}
    assert _description["target_hosts"] == 3


def test_describe_snapshot_as_text(snapshot):
    result = _invoke("pool", "describe", "--snapshot", snapshot)
    assert result.exit_code == 0, result.output
    assert "Pool: pool-a (DepthFirst, 3 sessions/host)" in result.stdout
    assert "Sessions: 6 | Running: 2 | Target: 3" in result.stdout


def test_pool_mismatch_exits_with_error(snapshot):
    result = _invoke("--pool-id", "pool-z", "pool", "evaluate", "--snapshot", snapshot)
    assert result.exit_code == 1
    assert "Unable to retrieve inventory for host pool pool-z" in result.stdout


def test_breadth_first_snapshot_exits_with_error(tmp_path):
    _snapshot = tmp_path / "breadth.yaml"
    _snapshot.write_text(
        yaml.safe_dump(
            {
                "pool_id": "pool-b",
                "load_balancing_mode": "BreadthFirst",
                "max_sessions_per_host": 3,
                "session_hosts": [],
            }
        )
    )
    result = _invoke("pool", "evaluate", "--snapshot", str(_snapshot))
    assert result.exit_code == 1
    assert "Load balancing mode must be DepthFirst" in result.stdout

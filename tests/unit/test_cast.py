import pytest

from hostpool_autoscaler.utils.cast import HostpoolCastEngine


@pytest.mark.parametrize(
    "value, expected",
    [("true", True), ("Yes", True), ("on", True), ("False", False), ("disabled", False), (True, True)],
)
def test_cast_as_bool(value, expected):
    result = HostpoolCastEngine(value).cast_as(bool)
    assert result.success
    assert result.message is expected


def test_cast_as_bool_rejects_unknown_values():
    assert HostpoolCastEngine("maybe").cast_as(bool).success is False


@pytest.mark.parametrize("value, expected", [("3", 3), (" 12 ", 12), (b"4", 4), (0, 0)])
def test_cast_as_int(value, expected):
    result = HostpoolCastEngine(value).cast_as(int)
    assert result.success
    assert result.message == expected


@pytest.mark.parametrize("value", ["1.5", "four", "", None, True, 2.5])
def test_cast_as_int_only_accepts_whole_numbers(value):
    assert HostpoolCastEngine(value).cast_as(int).success is False


def test_unsupported_type_is_rejected():
    result = HostpoolCastEngine("1").cast_as(float)
    assert result.success is False
    assert "Invalid type" in result.message

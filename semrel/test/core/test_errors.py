"""Tests for semrel.core.errors module."""

from semrel.core.errors import ErrorCode


def test_values_are_stable() -> None:
    assert ErrorCode.OK == 0
    assert ErrorCode.USER_ERROR == 1
    assert ErrorCode.ENV_ERROR == 2
    assert ErrorCode.HOOK_ERROR == 3
    assert ErrorCode.NETWORK_ERROR == 4
    assert ErrorCode.IO_ERROR == 5

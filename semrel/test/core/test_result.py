"""Tests for semrel.core.result module."""

import pytest

from semrel.core.result import Err, Ok, Result


def _parse_port(text: str) -> Result[int, str]:
    if not text.isdigit():
        return Err(f"not a number: {text}")
    return Ok(int(text))


def test_ok_carries_value() -> None:
    result = _parse_port("8080")
    assert isinstance(result, Ok)
    assert result.value == 8080
    assert repr(result) == "Ok(8080)"


def test_err_carries_error() -> None:
    result = _parse_port("http")
    assert isinstance(result, Err)
    assert result.error == "not a number: http"
    assert repr(result) == "Err('not a number: http')"


def test_frozen() -> None:
    result = Ok(1)
    with pytest.raises(AttributeError):
        result.value = 2  # type: ignore[misc]


def test_pattern_matching() -> None:
    match _parse_port("x"):
        case Ok(value):
            pytest.fail(f"unexpected value {value}")
        case Err(error):
            assert error == "not a number: x"

"""Tests for the exceptions module."""

import pytest
from coinchan.exceptions import (
    CoinchanError,
    ConfigurationError,
    ExecutionError,
    InvalidPoolKeyError,
    InvalidRouteError,
    NetworkError,
    UnquotableSwapError,
    ValidationError,
    describe_wallet_error,
    is_user_rejection_error,
)


def test_base_exception():
    """Test the base exception class."""
    error = CoinchanError("Test error")
    assert str(error) == "Test error"
    assert error.details == {}

    error_with_details = CoinchanError("Test error", {"key": "value"})
    assert error_with_details.details == {"key": "value"}


def test_configuration_error():
    """Test configuration error."""
    error = ConfigurationError("Config error", {"config_file": "test.yaml"})
    assert str(error) == "Config error"
    assert error.details["config_file"] == "test.yaml"
    assert isinstance(error, CoinchanError)


def test_invalid_pool_key_error():
    """Test pool key error carries the offending inputs."""
    error = InvalidPoolKeyError("Bad key", coin_id=0, fee_bps=100)
    assert str(error) == "Bad key"
    assert error.coin_id == 0
    assert error.fee_bps == 100
    assert isinstance(error, ValidationError)


def test_invalid_route_error():
    error = InvalidRouteError("Bad route", {"legs": 3})
    assert error.details["legs"] == 3
    assert isinstance(error, ValidationError)


def test_unquotable_swap_error():
    error = UnquotableSwapError("No output", amount_in=500)
    assert error.amount_in == 500
    assert isinstance(error, ValidationError)
    assert isinstance(error, CoinchanError)


def test_network_error():
    """Test network error."""
    error = NetworkError("Network failed", endpoint="https://rpc", status_code=429)
    assert str(error) == "Network failed"
    assert error.endpoint == "https://rpc"
    assert error.status_code == 429
    assert isinstance(error, CoinchanError)


def test_execution_error():
    """Test execution error."""
    error = ExecutionError("Execution failed", tx_hash="0xabc")
    assert error.tx_hash == "0xabc"
    assert isinstance(error, CoinchanError)


def test_exception_inheritance():
    """Test that all custom exceptions inherit from the base exception."""
    for exc_class in (
        ConfigurationError,
        ValidationError,
        InvalidPoolKeyError,
        InvalidRouteError,
        UnquotableSwapError,
        NetworkError,
        ExecutionError,
    ):
        assert issubclass(exc_class, CoinchanError)
        assert issubclass(exc_class, Exception)


@pytest.mark.parametrize(
    "message",
    [
        "User rejected the request.",
        "MetaMask Tx Signature: User denied transaction signature.",
        "ACTION-REJECTED",
        "Request rejected by user",
        "The user cancelled the operation",
    ],
)
def test_user_rejection_detected(message):
    assert is_user_rejection_error(Exception(message))
    assert describe_wallet_error(Exception(message)) is None


@pytest.mark.parametrize(
    "message",
    ["execution reverted: K", "insufficient funds for gas", "nonce too low"],
)
def test_other_failures_get_generic_message(message):
    assert not is_user_rejection_error(Exception(message))
    assert describe_wallet_error(Exception(message)) == (
        "Transaction failed. Please try again."
    )


def test_empty_error_is_not_rejection():
    assert not is_user_rejection_error(None)
    assert not is_user_rejection_error("")

"""
Exception hierarchy for the Coinchan ZAMM engine.

Arithmetic edge cases in the pricing core never raise: an unquotable swap is
reported as a zero amount. The types below cover construction errors (bad
pool keys, bad routes) and the collaborator boundary (RPC reads, batch
submission), plus classification of wallet errors.
"""

from typing import Any, Dict, Optional


class CoinchanError(Exception):
    """Base exception for all Coinchan related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(CoinchanError):
    """Raised when there are configuration-related issues."""

    pass


class ValidationError(CoinchanError):
    """Raised when validation of inputs fails."""

    pass


class InvalidPoolKeyError(ValidationError):
    """Raised when a pool key cannot identify a real ETH/coin pool."""

    def __init__(
        self,
        message: str,
        coin_id: Optional[int] = None,
        fee_bps: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.coin_id = coin_id
        self.fee_bps = fee_bps


class InvalidRouteError(ValidationError):
    """Raised when a route does not have one of the two supported shapes."""

    pass


class UnquotableSwapError(ValidationError):
    """Raised when a plan is requested for a quote with no output."""

    def __init__(
        self,
        message: str,
        amount_in: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.amount_in = amount_in


class NetworkError(CoinchanError):
    """Raised when network or connectivity issues occur."""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class ExecutionError(CoinchanError):
    """Raised when submitting a transaction plan fails."""

    def __init__(
        self,
        message: str,
        tx_hash: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.tx_hash = tx_hash


# Substrings wallets use when the user declines a signature request
USER_REJECTION_PATTERNS = (
    "user rejected",
    "user denied",
    "user cancelled",
    "user canceled",
    "rejected by user",
    "denied by user",
    "declined by user",
    "rejected transaction",
    "transaction was rejected",
    "user declined",
    "rejected request",
    "request rejected",
    "action-rejected",
    "user disapproved",
    "user refused",
)


def is_user_rejection_error(error: Any) -> bool:
    """Check whether an error is a wallet/user rejection rather than a failure."""
    if not error:
        return False
    message = str(error).lower()
    return any(pattern in message for pattern in USER_REJECTION_PATTERNS)


def describe_wallet_error(error: Any) -> Optional[str]:
    """
    Turn a wallet error into a user-facing message.

    Returns None for user rejections (nothing to report) and a generic
    message for every other failure.
    """
    if is_user_rejection_error(error):
        return None
    return "Transaction failed. Please try again."

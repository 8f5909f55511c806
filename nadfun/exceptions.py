"""
Exception hierarchy for the nadfun trading SDK.

Provides specific exception types for the failure modes of quoting, signing,
submitting trades and streaming chain events, so callers can decide whether to
re-quote, re-sign or give up.
"""

from typing import Any, Dict, Optional


class NadfunError(Exception):
    """Base exception for all nadfun SDK errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(NadfunError):
    """Raised when there are configuration-related issues."""

    pass


class InvalidArgumentError(NadfunError):
    """Raised when an argument is outside its accepted domain."""

    pass


class InsufficientBalanceError(NadfunError):
    """Raised when a wallet balance cannot cover a trade."""

    def __init__(
        self,
        message: str,
        required: Optional[int] = None,
        available: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.required = required
        self.available = available


class InsufficientAllowanceError(NadfunError):
    """Raised when a spender allowance cannot cover a trade."""

    def __init__(
        self,
        message: str,
        required: Optional[int] = None,
        available: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.required = required
        self.available = available


class UnsupportedOperationError(NadfunError):
    """Raised when the signer cannot perform the requested operation."""

    pass


class UserCancelledError(NadfunError):
    """Raised when the user explicitly rejects a signature request."""

    pass


class NetworkError(NadfunError):
    """Raised when network or connectivity issues occur."""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint


class RevertError(NadfunError):
    """Raised when a call, estimate or mined transaction reverts."""

    def __init__(
        self,
        message: str,
        tx_hash: Optional[str] = None,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.tx_hash = tx_hash
        self.reason = reason


class StaleQuoteError(RevertError):
    """Raised when a trade reverts because its slippage bound was violated."""

    pass


# Router custom errors that mean the quote moved past the slippage bound
SLIPPAGE_REVERT_REASONS = ("InsufficientAmountOut", "InsufficientAmountInMax")


def revert_error_for(
    message: str, reason: Optional[str] = None, tx_hash: Optional[str] = None
) -> RevertError:
    """Build the most specific revert error for a revert reason."""
    text = reason or message
    if any(name in text for name in SLIPPAGE_REVERT_REASONS):
        return StaleQuoteError(message, tx_hash=tx_hash, reason=reason)
    return RevertError(message, tx_hash=tx_hash, reason=reason)

"""
Error taxonomy for the tip jar client.

Validation errors (InvalidRequest, InvalidAmount) are raised before any wallet
or network interaction. Everything else originates at an async boundary.
"""


class TipJarError(Exception):
    """Base class for all tip jar errors."""


class InvalidRequest(TipJarError):
    """Tip request failed validation (blank or oversized message, bad address)."""


class InvalidAmount(InvalidRequest):
    """Amount is zero, negative, non-finite or out of range."""


class WalletUnavailable(TipJarError):
    """No wallet is installed or configured."""


class WalletRejected(TipJarError):
    """The user declined to connect or sign."""


class DerivationExhausted(TipJarError):
    """No bump in 255..0 produced an off-curve program address."""


class SubmissionFailed(TipJarError):
    """The network rejected the transaction or reported it as failed."""


class ConfirmationTimeout(TipJarError):
    """Transaction was submitted but confirmation was not observed in time."""

    def __init__(self, signature: str, timeout_seconds: float):
        self.signature = signature
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Transaction {signature} not confirmed within {timeout_seconds}s"
        )


class DecodeError(TipJarError):
    """An on-chain record does not match the TipHistory layout."""


class NetworkError(TipJarError):
    """RPC endpoint failed to answer a query."""


class SessionError(TipJarError):
    """Operation is not allowed in the current session phase."""

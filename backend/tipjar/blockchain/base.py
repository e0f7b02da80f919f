"""
Capability interfaces and domain types for the tip jar.

The core never talks to a wallet SDK or an RPC client directly. It goes
through the two narrow capabilities defined here:
- WalletCapability: connect and sign-and-send
- NetworkCapability: confirm a signature and list accounts by type
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import List

from solders.instruction import Instruction


class ConfirmationStatus(str, Enum):
    """Outcome of waiting for a transaction."""
    FINALIZED = "finalized"
    FAILED = "failed"


@dataclass(frozen=True)
class TipRequest:
    """A tip as entered by the user, before any validation."""
    tipper_address: str
    amount: Decimal  # SOL
    message: str
    timestamp: int  # Unix seconds


@dataclass(frozen=True)
class TipRecord:
    """Decoded TipHistory account."""
    tipper: str
    amount_lamports: int
    message: str
    timestamp: int


@dataclass(frozen=True)
class DisplayTip:
    """Feed entry derived from a TipRecord. Never persisted."""
    address: str
    tipper: str
    tipper_short: str
    amount: Decimal  # SOL
    message: str
    timestamp_millis: int


@dataclass(frozen=True)
class RawAccount:
    """Program-owned account as returned by the network."""
    address: str
    data: bytes


class WalletCapability(ABC):
    """
    Wallet seen by the core.

    Implementations raise WalletUnavailable when no wallet is present and
    WalletRejected when the user declines.
    """

    @abstractmethod
    async def connect(self) -> str:
        """Connect and return the wallet address (base58)."""
        pass

    @abstractmethod
    async def sign_and_send(self, instruction: Instruction) -> str:
        """Sign a transaction holding `instruction`, broadcast it and return its signature."""
        pass


class NetworkCapability(ABC):
    """Ledger RPC seen by the core."""

    @abstractmethod
    async def confirm(self, signature: str) -> ConfirmationStatus:
        """Block until the transaction is confirmed or known to have failed."""
        pass

    @abstractmethod
    async def query_accounts_by_type(self, type_tag: bytes) -> List[RawAccount]:
        """Return every program account whose data starts with `type_tag`."""
        pass

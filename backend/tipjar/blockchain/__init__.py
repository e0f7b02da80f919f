from tipjar.blockchain.base import (
    ConfirmationStatus,
    DisplayTip,
    NetworkCapability,
    RawAccount,
    TipRecord,
    TipRequest,
    WalletCapability,
)

__all__ = [
    "ConfirmationStatus",
    "DisplayTip",
    "NetworkCapability",
    "RawAccount",
    "TipRecord",
    "TipRequest",
    "WalletCapability",
]

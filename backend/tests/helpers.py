"""In-memory wallet and network used across the test suite."""

import asyncio
import struct
from typing import Dict, List, Optional

from solders.hash import Hash
from solders.instruction import Instruction
from solders.pubkey import Pubkey

from tipjar.blockchain.base import (
    ConfirmationStatus,
    NetworkCapability,
    RawAccount,
    WalletCapability,
)
from tipjar.core.constants import TIP_HISTORY_DISCRIMINATOR, TIP_IX_DISCRIMINATOR
from tipjar.core.errors import SubmissionFailed

# 43-character base58 strings that decode to 32 bytes
TIPPER = "Addr" + "1" * 35 + "AAAA"
OTHER_TIPPER = "Bobb" + "1" * 35 + "BBBB"

PROGRAM_ID = "4K6LtuL5hK9FGADBNgiw5cXyk3RPPz3LeLwq7M8xUzUS"
RECIPIENT = "GsJYonU5Kz4MJBHZ5UFx9oyStBpXXswnZcFUorktj2yZ"


def encode_tip_record(tipper: str, lamports: int, message: str, timestamp: int) -> bytes:
    message_bytes = message.encode("utf-8")
    return (
        TIP_HISTORY_DISCRIMINATOR
        + bytes(Pubkey.from_string(tipper))
        + struct.pack("<Q", lamports)
        + struct.pack("<I", len(message_bytes))
        + message_bytes
        + struct.pack("<q", timestamp)
    )


def decode_tip_args(data: bytes) -> tuple[int, str, int]:
    assert data[:8] == TIP_IX_DISCRIMINATOR
    lamports = struct.unpack_from("<Q", data, 8)[0]
    message_len = struct.unpack_from("<I", data, 16)[0]
    message = data[20 : 20 + message_len].decode("utf-8")
    timestamp = struct.unpack_from("<q", data, 20 + message_len)[0]
    return lamports, message, timestamp


class FakeNetwork(NetworkCapability):
    """Ledger stand-in that executes tip instructions like the program would."""

    def __init__(self):
        self.accounts: Dict[str, bytes] = {}
        self.statuses: Dict[str, ConfirmationStatus] = {}
        self.confirm_delay = 0.0
        self.confirm_calls: List[str] = []
        self.query_calls = 0
        self.query_error: Optional[Exception] = None
        self.closed = False
        self._tx_count = 0

    def execute(self, instruction: Instruction) -> str:
        tipper = instruction.accounts[0].pubkey
        tip_record = str(instruction.accounts[2].pubkey)
        if tip_record in self.accounts:
            raise SubmissionFailed(f"Allocate: account {tip_record} already in use")

        lamports, message, timestamp = decode_tip_args(bytes(instruction.data))
        self.accounts[tip_record] = encode_tip_record(str(tipper), lamports, message, timestamp)
        self._tx_count += 1
        return f"sig{self._tx_count}"

    async def confirm(self, signature: str) -> ConfirmationStatus:
        self.confirm_calls.append(signature)
        if self.confirm_delay:
            await asyncio.sleep(self.confirm_delay)
        return self.statuses.get(signature, ConfirmationStatus.FINALIZED)

    async def query_accounts_by_type(self, type_tag: bytes) -> List[RawAccount]:
        self.query_calls += 1
        if self.query_error is not None:
            raise self.query_error
        return [
            RawAccount(address=address, data=data)
            for address, data in self.accounts.items()
            if data[:8] == type_tag
        ]

    async def latest_blockhash(self) -> Hash:
        return Hash.default()

    async def is_connected(self) -> bool:
        return True

    async def close(self) -> None:
        self.closed = True


class FakeWallet(WalletCapability):
    """Wallet that records every call and forwards instructions to a FakeNetwork."""

    def __init__(self, network: FakeNetwork, address: str = TIPPER):
        self.network = network
        self.address = address
        self.connect_calls = 0
        self.sign_calls: List[Instruction] = []
        self.connect_error: Optional[Exception] = None
        self.sign_error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None

    async def connect(self) -> str:
        self.connect_calls += 1
        if self.connect_error is not None:
            raise self.connect_error
        return self.address

    async def sign_and_send(self, instruction: Instruction) -> str:
        self.sign_calls.append(instruction)
        if self.gate is not None:
            await self.gate.wait()
        if self.sign_error is not None:
            raise self.sign_error
        return self.network.execute(instruction)

"""
Tip instruction construction.

Instruction data (Anchor):
- discriminator: 8 bytes, sha256("global:tip")[:8]
- amount: u64 little-endian, lamports
- message: u32 little-endian length prefix + UTF-8 bytes
- timestamp: i64 little-endian, unix seconds

Accounts, in the order the program reads them:
- tipper (signer, writable)
- recipient (writable)
- tip_history PDA (writable, created by the program)
- system program (read-only)
"""

import base64
import struct
from typing import Union

from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from tipjar.blockchain.base import TipRequest
from tipjar.core.config import settings
from tipjar.core.constants import MESSAGE_MAX_LENGTH, SYSTEM_PROGRAM_ID, TIP_IX_DISCRIMINATOR
from tipjar.core.errors import InvalidAmount, InvalidRequest
from tipjar.services.address import to_pubkey, encode_timestamp
from tipjar.services.units import to_minor_units


def validate_tip_request(request: TipRequest, message_max_length: int = MESSAGE_MAX_LENGTH) -> int:
    """
    Check a tip request and return its amount in lamports.

    Raises InvalidAmount for a non-positive amount and InvalidRequest for a
    blank or oversized message.
    """
    lamports = to_minor_units(request.amount)
    if lamports <= 0:
        raise InvalidAmount(f"Tip amount must be greater than zero, got {request.amount}")

    if not request.message or not request.message.strip():
        raise InvalidRequest("Tip message must not be empty")
    if len(request.message) > message_max_length:
        raise InvalidRequest(
            f"Tip message is {len(request.message)} characters, "
            f"the limit is {message_max_length}"
        )

    encode_timestamp(request.timestamp)
    return lamports


def encode_tip_args(lamports: int, message: str, timestamp: int) -> bytes:
    message_bytes = message.encode("utf-8")
    ix_data = bytearray()
    ix_data.extend(TIP_IX_DISCRIMINATOR)
    ix_data.extend(struct.pack("<Q", lamports))             # amount: u64
    ix_data.extend(struct.pack("<I", len(message_bytes)))   # String length prefix
    ix_data.extend(message_bytes)                           # String data
    ix_data.extend(struct.pack("<q", timestamp))            # timestamp: i64
    return bytes(ix_data)


def build(
    request: TipRequest,
    tip_record_address: Union[str, Pubkey],
    recipient_address: Union[str, Pubkey],
    system_account: Union[str, Pubkey] = SYSTEM_PROGRAM_ID,
    program_id: Union[str, Pubkey, None] = None,
    message_max_length: int = MESSAGE_MAX_LENGTH,
) -> Instruction:
    """Validate `request` and build the unsigned `tip` instruction."""
    lamports = validate_tip_request(request, message_max_length)

    if program_id is None:
        program_id = settings.tip_program_id

    accounts = [
        AccountMeta(pubkey=to_pubkey(request.tipper_address), is_signer=True, is_writable=True),
        AccountMeta(pubkey=to_pubkey(recipient_address), is_signer=False, is_writable=True),
        AccountMeta(pubkey=to_pubkey(tip_record_address), is_signer=False, is_writable=True),
        AccountMeta(pubkey=to_pubkey(system_account), is_signer=False, is_writable=False),
    ]
    data = encode_tip_args(lamports, request.message, request.timestamp)
    return Instruction(to_pubkey(program_id), data, accounts)


def build_unsigned_transaction(
    instruction: Instruction,
    payer: Union[str, Pubkey],
    recent_blockhash: Hash,
) -> str:
    """Serialize an unsigned legacy transaction as base64 for client-side signing."""
    msg = Message.new_with_blockhash([instruction], to_pubkey(payer), recent_blockhash)
    tx = Transaction.new_unsigned(msg)
    return base64.b64encode(bytes(tx)).decode("utf-8")

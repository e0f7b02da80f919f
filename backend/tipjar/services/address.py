"""
Tip record address derivation.

Each tip lives in its own PDA derived from:
    [namespace, tipper pubkey (32 bytes), timestamp (i64, 8 bytes big-endian)]
The seed layout must match the on-chain program byte for byte, otherwise the
program computes a different address and rejects the transaction.
"""

import hashlib
import struct
from typing import Optional, Sequence, Union

from solders.pubkey import Pubkey

from tipjar.core.config import settings
from tipjar.core.constants import MAX_SEED_LENGTH
from tipjar.core.errors import DerivationExhausted, InvalidRequest

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1
PDA_MARKER = b"ProgramDerivedAddress"


def encode_timestamp(timestamp: int) -> bytes:
    """8-byte big-endian seed for a unix timestamp."""
    if isinstance(timestamp, bool) or not isinstance(timestamp, int):
        raise InvalidRequest(f"Timestamp must be an integer, got {timestamp!r}")
    if not I64_MIN <= timestamp <= I64_MAX:
        raise InvalidRequest(f"Timestamp {timestamp} does not fit in an i64")
    return struct.pack(">q", timestamp)


def to_pubkey(address: Union[str, Pubkey]) -> Pubkey:
    if isinstance(address, Pubkey):
        return address
    try:
        return Pubkey.from_string(address)
    except ValueError as e:
        raise InvalidRequest(f"Invalid Solana address {address!r}: {e}") from e


def _try_create(seeds: Sequence[bytes], program_id: Pubkey) -> Optional[Pubkey]:
    """Return the program address for `seeds`, or None when it lands on the curve."""
    digest = hashlib.sha256(b"".join(seeds) + bytes(program_id) + PDA_MARKER).digest()
    candidate = Pubkey.from_bytes(digest)
    if candidate.is_on_curve():
        return None
    return candidate


def derive(
    namespace: bytes,
    tipper_address: Union[str, Pubkey],
    timestamp: int,
    program_id: Optional[Union[str, Pubkey]] = None,
) -> tuple[Pubkey, int]:
    """
    Derive the TipHistory PDA for a tipper and timestamp.

    Returns (address, bump). Bumps are tried from 255 down to 0, the same
    canonical search the program performs.
    """
    if len(namespace) > MAX_SEED_LENGTH:
        raise InvalidRequest(f"Namespace seed exceeds {MAX_SEED_LENGTH} bytes")

    tipper = to_pubkey(tipper_address)
    program = to_pubkey(program_id if program_id is not None else settings.tip_program_id)
    seeds = [namespace, bytes(tipper), encode_timestamp(timestamp)]

    for bump in range(255, -1, -1):
        address = _try_create(seeds + [bytes([bump])], program)
        if address is not None:
            return address, bump

    raise DerivationExhausted(
        f"No valid bump for tipper={tipper} timestamp={timestamp}"
    )

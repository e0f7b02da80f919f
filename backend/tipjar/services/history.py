"""
Tip history aggregation.

TipHistory account layout (after the 8-byte Anchor discriminator):
- tipper: 32 bytes (Pubkey)
- amount: 8 bytes (u64, lamports)
- message: 4-byte u32 length + UTF-8 bytes
- timestamp: 8 bytes (i64, unix seconds)

Malformed records are skipped and counted rather than failing the whole load.
"""

import logging
import struct
from dataclasses import dataclass
from typing import Tuple

from solders.pubkey import Pubkey

from tipjar.blockchain.base import DisplayTip, NetworkCapability, TipRecord
from tipjar.core.constants import TIP_HISTORY_DISCRIMINATOR
from tipjar.core.errors import DecodeError
from tipjar.services.units import to_major_units

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryPage:
    tips: Tuple[DisplayTip, ...]
    skipped: int = 0


def short_address(address: str) -> str:
    """First 4 and last 4 characters, e.g. 'GsJY...j2yZ'."""
    return f"{address[:4]}...{address[-4:]}"


def decode_tip_record(data: bytes) -> TipRecord:
    if data[:8] != TIP_HISTORY_DISCRIMINATOR:
        raise DecodeError("Account discriminator is not TipHistory")
    if len(data) < 8 + 32:
        raise DecodeError(f"Truncated TipHistory account: {len(data)} bytes")

    try:
        offset = 8
        tipper = Pubkey.from_bytes(data[offset : offset + 32])
        offset += 32
        amount = struct.unpack_from("<Q", data, offset)[0]
        offset += 8
        message_len = struct.unpack_from("<I", data, offset)[0]
        offset += 4
        if offset + message_len > len(data):
            raise DecodeError(f"Message length {message_len} runs past end of account")
        message = data[offset : offset + message_len].decode("utf-8")
        offset += message_len
        timestamp = struct.unpack_from("<q", data, offset)[0]
    except struct.error as e:
        raise DecodeError(f"Truncated TipHistory account: {e}") from e
    except UnicodeDecodeError as e:
        raise DecodeError(f"Message is not valid UTF-8: {e}") from e
    except ValueError as e:
        raise DecodeError(f"Invalid tipper pubkey: {e}") from e

    return TipRecord(
        tipper=str(tipper),
        amount_lamports=amount,
        message=message,
        timestamp=timestamp,
    )


def to_display_tip(address: str, record: TipRecord) -> DisplayTip:
    return DisplayTip(
        address=address,
        tipper=record.tipper,
        tipper_short=short_address(record.tipper),
        amount=to_major_units(record.amount_lamports),
        message=record.message,
        timestamp_millis=record.timestamp * 1000,
    )


async def load_all(
    network: NetworkCapability,
    type_tag: bytes = TIP_HISTORY_DISCRIMINATOR,
) -> HistoryPage:
    """Fetch every TipHistory account and return them most recent first."""
    accounts = await network.query_accounts_by_type(type_tag)

    tips = []
    skipped = 0
    for account in accounts:
        try:
            record = decode_tip_record(account.data)
        except DecodeError as e:
            skipped += 1
            logger.warning(f"tip history: skipping {account.address}: {e}")
            continue
        tips.append(to_display_tip(account.address, record))

    # sorted() is stable, so same-second tips keep discovery order
    tips = sorted(tips, key=lambda tip: tip.timestamp_millis, reverse=True)

    logger.info(f"tip history: loaded {len(tips)} tips, skipped {skipped}")
    return HistoryPage(tips=tuple(tips), skipped=skipped)

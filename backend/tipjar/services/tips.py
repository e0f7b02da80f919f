"""
Tip jar service used by the HTTP API.

The browser wallet signs on the client, so the API side only derives
addresses, prepares unsigned transactions and serves the feed.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from solders.pubkey import Pubkey

from tipjar.blockchain.base import TipRequest
from tipjar.blockchain.chains.solana import SolanaNetworkService
from tipjar.core.config import Settings, settings as default_settings
from tipjar.core.constants import SYSTEM_PROGRAM_ID
from tipjar.services import address, history, transaction
from tipjar.services.history import HistoryPage
from tipjar.services.units import Amount, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedTip:
    tip_record_address: str
    bump: int
    timestamp: int
    lamports: int
    recent_blockhash: str
    unsigned_tx_base64: str


class TipService:
    """Service for the tip program, bound to one network and one config."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        network: Optional[SolanaNetworkService] = None,
    ):
        self.settings = config or default_settings
        self.network = network or SolanaNetworkService(self.settings)

    async def close(self) -> None:
        await self.network.close()

    async def is_connected(self) -> bool:
        return await self.network.is_connected()

    def get_tip_record_address(self, tipper: str, timestamp: int) -> tuple[Pubkey, int]:
        return address.derive(
            self.settings.namespace_seed, tipper, timestamp, self.settings.tip_program_id
        )

    async def load_feed(self) -> HistoryPage:
        return await history.load_all(self.network)

    async def prepare_tip(
        self,
        tipper: str,
        amount: Amount,
        message: str,
        timestamp: Optional[int] = None,
    ) -> PreparedTip:
        """Validate a tip and return an unsigned transaction for the tipper to sign."""
        request = TipRequest(
            tipper_address=tipper,
            amount=to_decimal(amount),
            message=message,
            timestamp=int(time.time()) if timestamp is None else timestamp,
        )
        lamports = transaction.validate_tip_request(request, self.settings.message_max_length)
        tip_record, bump = self.get_tip_record_address(tipper, request.timestamp)

        ix = transaction.build(
            request,
            tip_record,
            self.settings.recipient_address,
            SYSTEM_PROGRAM_ID,
            self.settings.tip_program_id,
            self.settings.message_max_length,
        )
        recent_blockhash = await self.network.latest_blockhash()
        unsigned_tx = transaction.build_unsigned_transaction(ix, tipper, recent_blockhash)

        logger.info(f"prepared tip: pda={tip_record} tipper={tipper} lamports={lamports}")
        return PreparedTip(
            tip_record_address=str(tip_record),
            bump=bump,
            timestamp=request.timestamp,
            lamports=lamports,
            recent_blockhash=str(recent_blockhash),
            unsigned_tx_base64=unsigned_tx,
        )


# Singleton instance
tip_service = TipService()


def get_tip_service() -> TipService:
    return tip_service

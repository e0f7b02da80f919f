from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class TipItem(BaseModel):
    """One entry of the tip feed."""
    address: str = Field(..., description="TipHistory account (PDA)")
    tipper: str
    tipper_short: str = Field(..., description="First 4 + last 4 characters of the tipper")
    amount: Decimal = Field(..., description="Amount in SOL")
    message: str
    timestamp_millis: int


class TipFeedResponse(BaseModel):
    """Tips, most recent first."""
    tips: list[TipItem]
    skipped: int = Field(0, description="Malformed records left out of the feed")


class TipConfigResponse(BaseModel):
    program_id: str
    recipient_address: str
    network: str
    rpc_url: str
    namespace_tag: str
    message_max_length: int
    presets: list[Decimal] = Field(..., description="Suggested amounts in SOL")


class TipAddressResponse(BaseModel):
    tipper: str
    timestamp: int
    address: str
    bump: int


class PrepareTipRequest(BaseModel):
    """Request to build an unsigned tip transaction."""
    tipper: str = Field(..., description="Tipper's wallet address")
    amount: Decimal = Field(..., description="Amount in SOL")
    message: str
    timestamp: Optional[int] = Field(None, description="Unix seconds, defaults to now")


class PrepareTipResponse(BaseModel):
    tipper: str
    tip_record_address: str
    bump: int
    timestamp: int
    lamports: int
    recent_blockhash: str
    unsigned_tx_base64: str

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tipjar.core.constants import TIP_PRESETS
from tipjar.core.errors import DerivationExhausted, InvalidRequest, NetworkError
from tipjar.schemas.tips import (
    PrepareTipRequest,
    PrepareTipResponse,
    TipAddressResponse,
    TipConfigResponse,
    TipFeedResponse,
    TipItem,
)
from tipjar.services.tips import TipService, get_tip_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/tips", tags=["tips"])


@router.get(
    "",
    response_model=TipFeedResponse,
    summary="Get the tip feed",
)
async def get_tip_feed(service: TipService = Depends(get_tip_service)) -> TipFeedResponse:
    """All tips recorded on-chain, most recent first."""
    try:
        page = await service.load_feed()
    except NetworkError as e:
        logger.error(f"Failed to load tip feed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to load tip history from the network",
        )

    return TipFeedResponse(
        tips=[TipItem(**asdict(tip)) for tip in page.tips],
        skipped=page.skipped,
    )


@router.get(
    "/config",
    response_model=TipConfigResponse,
    summary="Get tip jar configuration",
)
async def get_tip_config(service: TipService = Depends(get_tip_service)) -> TipConfigResponse:
    settings = service.settings
    return TipConfigResponse(
        program_id=settings.tip_program_id,
        recipient_address=settings.recipient_address,
        network=settings.network_label,
        rpc_url=settings.solana_rpc_url,
        namespace_tag=settings.namespace_tag,
        message_max_length=settings.message_max_length,
        presets=list(TIP_PRESETS),
    )


@router.get(
    "/address",
    response_model=TipAddressResponse,
    summary="Derive the tip record address",
)
async def get_tip_address(
    tipper: str = Query(..., description="Tipper's wallet address"),
    timestamp: int = Query(..., description="Unix seconds"),
    service: TipService = Depends(get_tip_service),
) -> TipAddressResponse:
    try:
        pda, bump = service.get_tip_record_address(tipper, timestamp)
    except InvalidRequest as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DerivationExhausted as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    return TipAddressResponse(tipper=tipper, timestamp=timestamp, address=str(pda), bump=bump)


@router.post(
    "/prepare",
    response_model=PrepareTipResponse,
    summary="Prepare an unsigned tip transaction",
)
async def prepare_tip(
    body: PrepareTipRequest,
    service: TipService = Depends(get_tip_service),
) -> PrepareTipResponse:
    """Validate the tip and return an unsigned transaction for client-side signing."""
    try:
        prepared = await service.prepare_tip(
            tipper=body.tipper,
            amount=body.amount,
            message=body.message,
            timestamp=body.timestamp,
        )
    except InvalidRequest as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DerivationExhausted as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except NetworkError as e:
        logger.error(f"Failed to prepare tip: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to prepare tip transaction",
        )

    return PrepareTipResponse(tipper=body.tipper, **asdict(prepared))

from fastapi import APIRouter, Depends
from datetime import datetime, timezone

from tipjar.services.tips import TipService, get_tip_service

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health check")
async def health_check(service: TipService = Depends(get_tip_service)):
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "network": service.settings.network_label,
    }


@router.get("/ready", summary="Readiness check")
async def readiness_check(service: TipService = Depends(get_tip_service)):
    """
    Readiness check - verifies the Solana RPC endpoint answers.
    """
    checks = {"solana_rpc": await service.is_connected()}
    all_healthy = all(checks.values())

    return {
        "status": "ready" if all_healthy else "degraded",
        "checks": checks,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

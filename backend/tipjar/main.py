import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tipjar.api import health, tips
from tipjar.core.config import settings
from tipjar.services.tips import tip_service

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events."""
    logger.info(
        f"Tip jar starting on {settings.network_label}, program={settings.tip_program_id}"
    )
    yield
    await tip_service.close()


app = FastAPI(
    title=settings.app_name,
    description="""
    Tip Jar API — "Buy Me a Coffee" on Solana

    This API provides endpoints for:
    - Reading the tip feed recovered from TipHistory accounts
    - Deriving the tip record address for a tipper and timestamp
    - Preparing unsigned tip transactions for browser-wallet signing

    ## Tip Flow

    1. Frontend calls `POST /api/v1/tips/prepare` with wallet, amount and message
    2. The wallet signs and sends the returned transaction
    3. Frontend waits for confirmation, then reloads `GET /api/v1/tips`
    """,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(tips.router, prefix=settings.api_v1_prefix)


@app.get("/", tags=["root"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "api": f"{settings.api_v1_prefix}/tips",
    }

"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mintbridge import __version__
from mintbridge.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    if not settings.has_api_key:
        logger.warning("CROSSMINT_SERVER_API_KEY not set - wallet endpoints will fail")
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="mintbridge API",
        description="Custodial wallet bridge and withdrawal API",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routes
    from mintbridge.api.routes import balance, bridge, health, wallet, withdraw

    app.include_router(health.router, tags=["Health"])
    app.include_router(wallet.router, prefix="/api", tags=["Wallet"])
    app.include_router(balance.router, prefix="/api", tags=["Balance"])
    app.include_router(bridge.router, prefix="/api", tags=["Bridge"])
    app.include_router(withdraw.router, prefix="/api", tags=["Withdraw"])

    return app


# Default app instance
app = create_app()

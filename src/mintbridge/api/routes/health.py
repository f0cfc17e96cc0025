"""Health check endpoints."""

from fastapi import APIRouter

from mintbridge import __version__
from mintbridge.config import get_settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "mintbridge"}


@router.get("/health/detailed")
async def detailed_health():
    """Detailed health check with configuration info."""
    settings = get_settings()
    return {
        "status": "healthy",
        "service": "mintbridge",
        "version": __version__,
        "signer": "configured" if settings.has_api_key else "missing api key",
        "config": settings.get_safe_dict(),
    }

"""Wallet endpoint."""

import logging
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from mintbridge.chains import ARBITRUM_CHAIN_ID, BASE_CHAIN_ID, get_explorer_address_url
from mintbridge.signing.factory import get_custodial_client

logger = logging.getLogger(__name__)

router = APIRouter()


def locator_for_user(user_id: Optional[str]) -> Optional[str]:
    """Wallet locator for a user id (None selects the configured default)."""
    return f"userId:{user_id}:evm:smart" if user_id else None


@router.get("/wallet")
async def get_wallet(user_id: Optional[str] = Query(None, alias="userId")):
    """Resolve (or provision) the custodial wallet and return its explorer links."""
    try:
        client = get_custodial_client()
        wallet = await client.resolve_or_create_wallet(locator_for_user(user_id))
    except Exception as e:
        logger.error(f"Wallet lookup failed: {e}")
        return JSONResponse(status_code=500, content={"error": str(e) or "Unknown error occurred"})

    return {
        "address": wallet.address,
        "explorerUrls": {
            "base": get_explorer_address_url(BASE_CHAIN_ID, wallet.address),
            "arbitrum": get_explorer_address_url(ARBITRUM_CHAIN_ID, wallet.address),
        },
    }

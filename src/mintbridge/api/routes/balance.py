"""Balance endpoints."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from mintbridge.services.balances import get_onchain_balances
from mintbridge.signing.factory import get_custodial_client

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(e: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(e) or "Unknown error occurred"})


@router.get("/balance")
async def get_balance():
    """Token balances as reported by the custodial backend."""
    try:
        client = get_custodial_client()
        wallet = await client.resolve_or_create_wallet()
        tokens = await client.get_wallet_balances(wallet.address)
    except Exception as e:
        logger.error(f"Balance lookup failed: {e}")
        return _error(e)

    return {
        "address": wallet.address,
        "tokens": [
            {
                "symbol": t.symbol,
                "name": t.name,
                "amount": t.amount,
                "decimals": t.decimals,
                "usdValue": t.usd_value,
                "contractAddress": t.contract_address,
            }
            for t in tokens
        ],
    }


@router.get("/balance/onchain")
async def get_balance_onchain():
    """Non-zero balances read directly from Base and Arbitrum."""
    try:
        client = get_custodial_client()
        wallet = await client.resolve_or_create_wallet()
        balances = await get_onchain_balances(wallet.address)
    except Exception as e:
        logger.error(f"On-chain balance lookup failed: {e}")
        return _error(e)

    return {
        "address": wallet.address,
        "balances": [
            {
                "symbol": b.symbol,
                "chainId": b.chain_id,
                "chain": b.chain_name,
                "amount": str(b.amount),
                "formatted": b.formatted,
                "contractAddress": b.contract_address,
            }
            for b in balances
        ],
    }

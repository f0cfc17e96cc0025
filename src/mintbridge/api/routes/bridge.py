"""Bridge endpoint (Server-Sent Events)."""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from mintbridge.api.routes.sse import event_stream_response
from mintbridge.routing.base import RouteEngine
from mintbridge.routing.factory import create_route_engine
from mintbridge.services.bridge import BridgeRequest, BridgeService

router = APIRouter()


class BridgeBody(BaseModel):
    """Bridge request body."""
    from_chain: int = Field(..., alias="fromChain")
    to_chain: int = Field(..., alias="toChain")
    from_token: str = Field(..., alias="fromToken")
    to_token: str = Field(..., alias="toToken")
    amount: str = Field(..., description="Amount in the source token's smallest unit")
    locator: Optional[str] = None


@router.post("/bridge")
async def bridge(body: BridgeBody, engine: RouteEngine = Depends(create_route_engine)):
    """Run a bridge and stream its progress."""
    request = BridgeRequest(
        from_chain=body.from_chain,
        to_chain=body.to_chain,
        from_token=body.from_token,
        to_token=body.to_token,
        amount=body.amount,
        locator=body.locator,
    )
    service = BridgeService(engine=engine)

    async def operation(emit):
        await service.execute(request, emit)

    return event_stream_response(operation)

"""Withdraw endpoint (Server-Sent Events)."""

from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from mintbridge.api.routes.sse import event_stream_response
from mintbridge.services.withdrawal import run_withdrawal, validate_destination

router = APIRouter()


class WithdrawBody(BaseModel):
    """Withdraw request body."""
    destination: str = ""
    locator: Optional[str] = None


@router.post("/withdraw")
async def withdraw(body: WithdrawBody):
    """Withdraw everything to a destination and stream progress."""
    try:
        destination = validate_destination(body.destination)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})

    async def operation(emit):
        await run_withdrawal(destination, emit, locator=body.locator)

    return event_stream_response(operation)

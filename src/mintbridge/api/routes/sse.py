"""Server-Sent Events response helper."""

from typing import AsyncIterator

from fastapi.responses import StreamingResponse

from mintbridge.services.stream import Operation, run_operation_stream

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


async def _frames(operation: Operation) -> AsyncIterator[str]:
    async for event in run_operation_stream(operation):
        yield event.to_sse()


def event_stream_response(operation: Operation) -> StreamingResponse:
    """Stream an operation's progress events as text/event-stream."""
    return StreamingResponse(
        _frames(operation),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )

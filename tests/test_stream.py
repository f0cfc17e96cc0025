"""Tests for progress events and the operation stream."""

import asyncio
import json

import pytest

from mintbridge.events import (
    CompletionStatus,
    EventKind,
    ProgressEvent,
    StepStatus,
    TransactionLink,
    WithdrawCompletePayload,
)
from mintbridge.services.stream import run_operation_stream


class TestProgressEvent:
    """Tests for event payloads and framing."""

    def test_status_without_step(self):
        event = ProgressEvent.status(StepStatus.PENDING, "Reading on-chain balances...")

        assert event.data == {"status": "PENDING", "message": "Reading on-chain balances..."}
        assert not event.is_terminal

    def test_camel_case_payload(self):
        event = ProgressEvent.complete(
            WithdrawCompletePayload(
                status=CompletionStatus.SUCCESS,
                transactions=[TransactionLink(tx_hash="0xabc", explorer_url="https://basescan.org/tx/0xabc")],
            )
        )

        assert event.is_terminal
        assert event.data["transactions"][0] == {
            "txHash": "0xabc",
            "explorerUrl": "https://basescan.org/tx/0xabc",
        }

    def test_sse_framing(self):
        event = ProgressEvent.error("No route found for this pair", code="NO_ROUTE")

        frame = event.to_sse()

        assert frame.startswith("event: error\ndata: ")
        assert frame.endswith("\n\n")
        assert json.loads(frame.split("data: ", 1)[1]) == {
            "message": "No route found for this pair",
            "code": "NO_ROUTE",
        }


class TestOperationStream:
    """Tests for run_operation_stream."""

    @pytest.mark.asyncio
    async def test_yields_events_in_order(self):
        async def operation(emit):
            emit(ProgressEvent.status(StepStatus.PENDING, "one", step=1))
            await asyncio.sleep(0)
            emit(ProgressEvent.status(StepStatus.DONE, "one", step=1))
            emit(ProgressEvent.error("boom"))

        events = [e async for e in run_operation_stream(operation)]

        assert [e.event for e in events] == [EventKind.STATUS, EventKind.STATUS, EventKind.ERROR]
        assert events[1].data["status"] == "DONE"

    @pytest.mark.asyncio
    async def test_crash_becomes_error_event(self):
        async def operation(emit):
            emit(ProgressEvent.status(StepStatus.PENDING, "working"))
            raise RuntimeError("unexpected")

        events = [e async for e in run_operation_stream(operation)]

        assert events[-1].event == EventKind.ERROR
        assert events[-1].data["message"] == "unexpected"

    @pytest.mark.asyncio
    async def test_operation_survives_disconnect(self):
        """Closing the stream early does not cancel the operation."""
        gate = asyncio.Event()
        finished = asyncio.Event()

        async def operation(emit):
            emit(ProgressEvent.status(StepStatus.PENDING, "submitted"))
            await gate.wait()
            emit(ProgressEvent.status(StepStatus.DONE, "confirmed"))
            finished.set()

        stream = run_operation_stream(operation)
        first = await stream.__anext__()
        await stream.aclose()
        gate.set()

        await asyncio.wait_for(finished.wait(), timeout=1)
        assert first.data["message"] == "submitted"

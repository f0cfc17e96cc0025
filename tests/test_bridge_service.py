"""Tests for the bridge flow and its state machine."""

import pytest

from mintbridge.events import EventKind
from mintbridge.routing.base import RouteExecutionError
from mintbridge.services.bridge import (
    BridgeAttempt,
    BridgeRequest,
    BridgeService,
    BridgeState,
    InvalidTransitionError,
)
from mintbridge.signing.base import BackendError, WalletIdentity

from conftest import ROUTE_DATA, WALLET_ADDRESS, FakeEngine


class StubWalletClient:
    """Custodial client stand-in: resolves one wallet, refuses to submit."""

    def __init__(self, error: Exception = None):
        self.error = error
        self.submitted = []

    async def resolve_or_create_wallet(self, locator=None):
        if self.error:
            raise self.error
        return WalletIdentity(locator=locator or "userId:demo-user:evm:smart", address=WALLET_ADDRESS)

    async def submit_and_confirm(self, intent, locator=None):
        self.submitted.append(intent)
        raise AssertionError("no transaction expected")


def bridge_request(**overrides) -> BridgeRequest:
    params = dict(
        from_chain=8453,
        to_chain=42161,
        from_token=ROUTE_DATA["fromToken"]["address"],
        to_token=ROUTE_DATA["toToken"]["address"],
        amount="1000000",
    )
    params.update(overrides)
    return BridgeRequest(**params)


class TestBridgeStateMachine:
    """Tests for allowed and rejected transitions."""

    def test_happy_path(self):
        attempt = BridgeAttempt()

        attempt.transition(BridgeState.ROUTE_FETCHED)
        attempt.transition(BridgeState.EXECUTING)
        attempt.transition(BridgeState.SUCCEEDED)

        assert attempt.state.is_terminal
        assert attempt.history == [
            BridgeState.NOT_STARTED,
            BridgeState.ROUTE_FETCHED,
            BridgeState.EXECUTING,
            BridgeState.SUCCEEDED,
        ]

    def test_cannot_skip_route(self):
        with pytest.raises(InvalidTransitionError):
            BridgeAttempt().transition(BridgeState.EXECUTING)

    @pytest.mark.parametrize(
        "terminal", [BridgeState.SUCCEEDED, BridgeState.FAILED, BridgeState.NO_ROUTE]
    )
    def test_terminal_states_are_final(self, terminal):
        attempt = BridgeAttempt(state=terminal)

        with pytest.raises(InvalidTransitionError):
            attempt.transition(BridgeState.EXECUTING)

    def test_no_route_only_from_start(self):
        attempt = BridgeAttempt()
        attempt.transition(BridgeState.ROUTE_FETCHED)

        with pytest.raises(InvalidTransitionError):
            attempt.transition(BridgeState.NO_ROUTE)


class TestBridgeService:
    """Tests for a full bridge attempt."""

    @pytest.mark.asyncio
    async def test_no_route(self):
        """Zero candidates: NO_ROUTE outcome, nothing executed or submitted."""
        engine = FakeEngine(routes=[])
        client = StubWalletClient()
        events = []

        attempt = await BridgeService(client=client, engine=engine).execute(
            bridge_request(), events.append
        )

        assert attempt.state == BridgeState.NO_ROUTE
        assert attempt.error is None
        assert engine.executed == []
        assert client.submitted == []
        assert events[-1].event == EventKind.ERROR
        assert events[-1].data == {"message": "No route found for this pair", "code": "NO_ROUTE"}
        assert not any(e.event == EventKind.COMPLETE for e in events)

    @pytest.mark.asyncio
    async def test_success(self, route):
        engine = FakeEngine(routes=[route], received="400000000000000")
        events = []

        attempt = await BridgeService(client=StubWalletClient(), engine=engine).execute(
            bridge_request(), events.append
        )

        assert attempt.state == BridgeState.SUCCEEDED
        assert attempt.result.tx_hashes == ["0xstep-1"]
        assert engine.requests[0].from_address == WALLET_ADDRESS
        assert engine.requests[0].slippage == 0.005

        statuses = [e.data for e in events if e.event == EventKind.STATUS]
        assert statuses[0] == {"step": 1, "status": "PENDING", "message": "Loading wallet..."}
        assert {"step": 3, "status": "DONE", "message": "Route found: ~0.00039 ETH via Across"} in statuses
        assert {"step": 4, "status": "PENDING", "message": "Step 1: PENDING (step 1/1)"} in statuses
        assert {"step": 4, "status": "PENDING", "message": "Step 1: DONE (step 1/1)"} in statuses

        assert events[-1].event == EventKind.COMPLETE
        assert events[-1].data == {
            "status": "SUCCESS",
            "transactions": [
                {"txHash": "0xstep-1", "explorerUrl": "https://arbiscan.io/tx/0xstep-1"}
            ],
            "toAmount": "0.0004",
            "toToken": "ETH",
            "toChain": 42161,
        }

    @pytest.mark.asyncio
    async def test_execution_failure(self, route):
        engine = FakeEngine(routes=[route], error=RouteExecutionError("bridge reverted"))
        events = []

        attempt = await BridgeService(client=StubWalletClient(), engine=engine).execute(
            bridge_request(), events.append
        )

        assert attempt.state == BridgeState.FAILED
        assert attempt.history[-2] == BridgeState.EXECUTING
        assert isinstance(attempt.error, RouteExecutionError)
        assert events[-1].event == EventKind.ERROR
        assert events[-1].data == {"message": "bridge reverted"}

    @pytest.mark.asyncio
    async def test_wallet_failure(self):
        engine = FakeEngine()
        events = []

        attempt = await BridgeService(
            client=StubWalletClient(error=BackendError("GET wallet failed (500): boom")),
            engine=engine,
        ).execute(bridge_request(), events.append)

        assert attempt.state == BridgeState.FAILED
        assert attempt.history == [BridgeState.NOT_STARTED, BridgeState.FAILED]
        assert engine.requests == []
        assert events[-1].event == EventKind.ERROR

    @pytest.mark.asyncio
    async def test_slippage_override(self):
        engine = FakeEngine(routes=[])

        await BridgeService(client=StubWalletClient(), engine=engine).execute(
            bridge_request(slippage=0.01)
        )

        assert engine.requests[0].slippage == 0.01

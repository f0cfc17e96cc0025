"""Bridge flow: wallet -> route discovery -> execution -> completion.

One attempt moves through:

    NOT_STARTED -> ROUTE_FETCHED -> EXECUTING -> SUCCEEDED | FAILED
    NOT_STARTED -> NO_ROUTE

NO_ROUTE is a normal terminal outcome, reported distinctly from a failure.
Progress is emitted as numbered status events (1 wallet, 2 engine,
3 route, 4 execution) followed by one complete or error event.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from mintbridge.chains import format_units, get_explorer_tx_url
from mintbridge.config import get_settings
from mintbridge.events import (
    BridgeCompletePayload,
    ProgressEvent,
    StepStatus,
    TransactionLink,
)
from mintbridge.routing.base import Route, RouteEngine, RoutesRequest
from mintbridge.routing.factory import create_route_engine
from mintbridge.routing.tracker import BridgeResult, StepUpdate, execute_bridge_route
from mintbridge.signing.adapter import CustodialSignerProvider
from mintbridge.signing.custodial import CustodialSigningClient
from mintbridge.signing.factory import get_custodial_client

logger = logging.getLogger(__name__)

NO_ROUTE_CODE = "NO_ROUTE"
NO_ROUTE_MESSAGE = "No route found for this pair"

Emit = Callable[[ProgressEvent], None]


class BridgeState(str, Enum):
    """State of one bridge attempt."""
    NOT_STARTED = "not-started"
    ROUTE_FETCHED = "route-fetched"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    NO_ROUTE = "no-route"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({BridgeState.SUCCEEDED, BridgeState.FAILED, BridgeState.NO_ROUTE})

ALLOWED_TRANSITIONS: dict[BridgeState, frozenset] = {
    BridgeState.NOT_STARTED: frozenset(
        {BridgeState.ROUTE_FETCHED, BridgeState.NO_ROUTE, BridgeState.FAILED}
    ),
    BridgeState.ROUTE_FETCHED: frozenset({BridgeState.EXECUTING, BridgeState.FAILED}),
    BridgeState.EXECUTING: frozenset({BridgeState.SUCCEEDED, BridgeState.FAILED}),
}


class InvalidTransitionError(Exception):
    """Attempted a transition the bridge state machine does not allow."""
    pass


@dataclass
class BridgeRequest:
    """Bridge parameters. amount is in the source token's smallest units."""
    from_chain: int
    to_chain: int
    from_token: str
    to_token: str
    amount: str
    slippage: Optional[float] = None
    locator: Optional[str] = None


@dataclass
class BridgeAttempt:
    """State and result of one bridge attempt."""
    state: BridgeState = BridgeState.NOT_STARTED
    route: Optional[Route] = None
    result: Optional[BridgeResult] = None
    error: Optional[Exception] = None
    history: list[BridgeState] = field(default_factory=lambda: [BridgeState.NOT_STARTED])

    def transition(self, new_state: BridgeState) -> None:
        """Move to a new state.

        Raises:
            InvalidTransitionError: Transition not allowed from the current state
        """
        if new_state not in ALLOWED_TRANSITIONS.get(self.state, frozenset()):
            raise InvalidTransitionError(f"Cannot move from {self.state.value} to {new_state.value}")
        logger.debug(f"Bridge attempt: {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)


class BridgeService:
    """Runs bridge attempts with a custodial wallet as signer."""

    def __init__(
        self,
        client: Optional[CustodialSigningClient] = None,
        engine: Optional[RouteEngine] = None,
    ):
        self.client = client
        self.engine = engine

    async def execute(self, request: BridgeRequest, emit: Optional[Emit] = None) -> BridgeAttempt:
        """Run one bridge attempt.

        Failures end in the FAILED state with an error event; they are not
        raised.
        """
        attempt = BridgeAttempt()

        def send(event: ProgressEvent) -> None:
            if emit:
                emit(event)

        try:
            # Step 1: wallet
            send(ProgressEvent.status(StepStatus.PENDING, "Loading wallet...", step=1))
            client = self.client or get_custodial_client()
            wallet = await client.resolve_or_create_wallet(request.locator)
            send(ProgressEvent.status(StepStatus.DONE, f"Wallet loaded: {wallet.address}", step=1))

            # Step 2: engine + signers
            send(ProgressEvent.status(StepStatus.PENDING, "Configuring LI.FI...", step=2))
            engine = self.engine or create_route_engine()
            signers = CustodialSignerProvider(wallet, client)
            send(ProgressEvent.status(StepStatus.DONE, "LI.FI configured", step=2))

            # Step 3: route discovery
            send(ProgressEvent.status(StepStatus.PENDING, "Finding best route...", step=3))
            route = await engine.get_best_route(
                RoutesRequest(
                    from_chain_id=request.from_chain,
                    to_chain_id=request.to_chain,
                    from_token=request.from_token,
                    to_token=request.to_token,
                    from_amount=request.amount,
                    from_address=wallet.address,
                    slippage=(
                        request.slippage
                        if request.slippage is not None
                        else get_settings().default_slippage
                    ),
                )
            )
            if route is None:
                attempt.transition(BridgeState.NO_ROUTE)
                send(ProgressEvent.error(NO_ROUTE_MESSAGE, code=NO_ROUTE_CODE))
                return attempt

            attempt.route = route
            attempt.transition(BridgeState.ROUTE_FETCHED)
            quoted = format_units(int(route.to_amount_min), route.to_token.decimals)
            tool = route.steps[0].tool_name if route.steps else engine.name
            send(ProgressEvent.status(
                StepStatus.DONE, f"Route found: ~{quoted} {route.to_token.symbol} via {tool}", step=3
            ))

            # Step 4: execution
            send(ProgressEvent.status(
                StepStatus.PENDING, "Executing bridge (this may take a few minutes)...", step=4
            ))
            attempt.transition(BridgeState.EXECUTING)

            def on_update(update: StepUpdate) -> None:
                message = f"{update.message} (step {update.step}/{update.total_steps})"
                send(ProgressEvent.status(StepStatus.PENDING, message, step=4))

            result = await execute_bridge_route(engine, route, signers, on_update)
            attempt.result = result
            attempt.transition(BridgeState.SUCCEEDED)

        except Exception as e:
            logger.error(f"Bridge attempt failed in state {attempt.state.value}: {e}")
            attempt.error = e
            attempt.transition(BridgeState.FAILED)
            send(ProgressEvent.error(str(e) or type(e).__name__))
            return attempt

        send(ProgressEvent.complete(
            BridgeCompletePayload(
                transactions=[
                    TransactionLink(
                        tx_hash=tx_hash,
                        explorer_url=get_explorer_tx_url(request.to_chain, tx_hash),
                    )
                    for tx_hash in result.tx_hashes
                ],
                to_amount=result.to_amount,
                to_token=result.to_token,
                to_chain=request.to_chain,
            )
        ))
        logger.info(
            f"Bridge complete: {result.to_amount} {result.to_token} on chain {request.to_chain} "
            f"({len(result.tx_hashes)} transaction(s))"
        )
        return attempt

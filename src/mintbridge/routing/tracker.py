"""Route execution progress tracking.

The engine fires its update hook on its own schedule, often with nothing
changed. ProgressTracker collapses those calls into one update per distinct
status tuple.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from mintbridge.chains import format_units
from mintbridge.routing.base import (
    ExecutionOptions,
    ExecutionStatus,
    Route,
    RouteEngine,
    SignerProvider,
)

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = (ExecutionStatus.ACTION_REQUIRED, ExecutionStatus.PENDING)


@dataclass(frozen=True)
class StepUpdate:
    """A deduplicated progress update."""
    message: str
    step: int  # 1-based index of the first active step
    total_steps: int


@dataclass
class BridgeResult:
    """Outcome of a successful route execution."""
    route: Route
    to_amount: str
    to_token: str
    tx_hashes: list[str] = field(default_factory=list)


class ProgressTracker:
    """Wraps an engine's route update hook and suppresses repeated states."""

    def __init__(self, on_update: Optional[Callable[[StepUpdate], None]] = None):
        self.on_update = on_update
        self._last_signature: Optional[tuple[str, ...]] = None

    @staticmethod
    def signature(route: Route) -> tuple[str, ...]:
        return tuple(status.value for status in route.statuses)

    def observe(self, route: Route) -> Optional[StepUpdate]:
        """Handle one engine notification.

        Returns:
            The emitted update, or None when the status tuple is unchanged
        """
        signature = self.signature(route)
        if signature == self._last_signature:
            return None
        self._last_signature = signature

        current = next(
            (i + 1 for i, status in enumerate(route.statuses) if status in ACTIVE_STATUSES),
            1,
        )
        message = " | ".join(f"Step {i + 1}: {status}" for i, status in enumerate(signature))
        update = StepUpdate(message=message, step=current, total_steps=len(route.steps))

        logger.debug(f"Route {route.id} progress: {message}")
        if self.on_update:
            self.on_update(update)
        return update

    __call__ = observe


def received_amount(route: Route) -> str:
    """Human-readable amount received at the destination.

    Uses the amount reported for the last step when available, otherwise the
    route's guaranteed minimum.
    """
    raw_amount = route.to_amount_min
    if route.steps and route.steps[-1].execution and route.steps[-1].execution.to_amount:
        raw_amount = route.steps[-1].execution.to_amount
    return format_units(int(raw_amount), route.to_token.decimals)


async def execute_bridge_route(
    engine: RouteEngine,
    route: Route,
    signers: SignerProvider,
    on_update: Optional[Callable[[StepUpdate], None]] = None,
) -> BridgeResult:
    """Execute a route with the custodial signer and deduplicated progress.

    Custodial smart wallets cannot produce typed-data signatures, so
    message signing is always disabled and ERC-20 spending goes through
    approve() transactions.

    Raises:
        Exception: Whatever the engine raised; no partial result is reported
    """
    tracker = ProgressTracker(on_update)
    options = ExecutionOptions(update_route_hook=tracker.observe, disable_message_signing=True)

    result = await engine.execute_route(route, signers, options)

    return BridgeResult(
        route=result,
        to_amount=received_amount(result),
        to_token=result.to_token.symbol,
        tx_hashes=result.confirmed_tx_hashes(),
    )

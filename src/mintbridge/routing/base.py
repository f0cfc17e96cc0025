"""Route engine interface and route model.

A route is an ordered list of steps (swaps and bridges) turning one asset on
one chain into another asset on another chain. The engine discovers routes
and executes them, asking a signer provider for a chain-bound signer per step
and reporting progress through a route update hook.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Protocol

from mintbridge.chains import format_units

logger = logging.getLogger(__name__)


class ExecutionStatus(str, Enum):
    """Execution status of a route step or one of its processes."""
    PENDING = "PENDING"
    ACTION_REQUIRED = "ACTION_REQUIRED"
    DONE = "DONE"
    FAILED = "FAILED"


class ProcessType(str, Enum):
    """Kind of on-chain action inside a step."""
    TOKEN_ALLOWANCE = "TOKEN_ALLOWANCE"
    SWAP = "SWAP"
    CROSS_CHAIN = "CROSS_CHAIN"


@dataclass
class TokenInfo:
    """Token as described by the route engine."""
    address: str
    symbol: str
    decimals: int
    chain_id: int
    name: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "TokenInfo":
        return cls(
            address=data.get("address", ""),
            symbol=data.get("symbol", ""),
            decimals=int(data.get("decimals", 18)),
            chain_id=int(data.get("chainId", 0)),
            name=data.get("name", ""),
        )


@dataclass
class ProcessEntry:
    """One on-chain action within a step (approval, swap, bridge)."""
    type: ProcessType
    status: ExecutionStatus = ExecutionStatus.PENDING
    tx_hash: Optional[str] = None
    chain_id: Optional[int] = None
    message: str = ""


@dataclass
class StepExecution:
    """Mutable execution state attached to a step while it runs."""
    status: ExecutionStatus = ExecutionStatus.PENDING
    process: list[ProcessEntry] = field(default_factory=list)
    to_amount: Optional[str] = None  # received amount in smallest units, once known


@dataclass
class RouteStep:
    """A single swap or bridge step of a route."""
    id: str
    type: str
    tool: str
    tool_name: str
    from_chain_id: int
    to_chain_id: int
    from_token: TokenInfo
    to_token: TokenInfo
    from_amount: str
    approval_address: Optional[str] = None
    raw: dict = field(default_factory=dict)
    execution: Optional[StepExecution] = None

    @classmethod
    def from_api(cls, data: dict) -> "RouteStep":
        action = data.get("action", {})
        estimate = data.get("estimate", {})
        tool_details = data.get("toolDetails") or {}
        return cls(
            id=str(data.get("id", "")),
            type=data.get("type", ""),
            tool=data.get("tool", ""),
            tool_name=tool_details.get("name") or data.get("tool", ""),
            from_chain_id=int(action.get("fromChainId", 0)),
            to_chain_id=int(action.get("toChainId", 0)),
            from_token=TokenInfo.from_api(action.get("fromToken", {})),
            to_token=TokenInfo.from_api(action.get("toToken", {})),
            from_amount=str(action.get("fromAmount", "0")),
            approval_address=estimate.get("approvalAddress"),
            raw=data,
        )

    @property
    def status(self) -> ExecutionStatus:
        """Current execution status (PENDING before execution starts)."""
        return self.execution.status if self.execution else ExecutionStatus.PENDING

    @property
    def is_cross_chain(self) -> bool:
        return self.from_chain_id != self.to_chain_id


@dataclass
class Route:
    """A multi-step execution plan returned by route discovery."""
    id: str
    from_chain_id: int
    to_chain_id: int
    from_token: TokenInfo
    to_token: TokenInfo
    from_amount: str
    to_amount: str
    to_amount_min: str
    steps: list[RouteStep]
    gas_cost_usd: Optional[str] = None
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict) -> "Route":
        return cls(
            id=str(data.get("id", "")),
            from_chain_id=int(data.get("fromChainId", 0)),
            to_chain_id=int(data.get("toChainId", 0)),
            from_token=TokenInfo.from_api(data.get("fromToken", {})),
            to_token=TokenInfo.from_api(data.get("toToken", {})),
            from_amount=str(data.get("fromAmount", "0")),
            to_amount=str(data.get("toAmount", "0")),
            to_amount_min=str(data.get("toAmountMin", "0")),
            steps=[RouteStep.from_api(s) for s in data.get("steps", [])],
            gas_cost_usd=data.get("gasCostUSD"),
            raw=data,
        )

    @property
    def statuses(self) -> tuple[ExecutionStatus, ...]:
        """Per-step execution statuses in step order."""
        return tuple(step.status for step in self.steps)

    def confirmed_tx_hashes(self) -> list[str]:
        """Hashes of processes that completed successfully."""
        return [
            p.tx_hash
            for step in self.steps
            if step.execution
            for p in step.execution.process
            if p.status == ExecutionStatus.DONE and p.tx_hash
        ]

    def fee_cost_usd(self) -> float:
        """Sum of protocol fee costs across steps, in USD."""
        total = 0.0
        for step in self.steps:
            for fee in step.raw.get("estimate", {}).get("feeCosts") or []:
                total += float(fee.get("amountUSD") or 0)
        return total


@dataclass
class RoutesRequest:
    """Route discovery request. Amounts are in smallest units."""
    from_chain_id: int
    to_chain_id: int
    from_token: str
    to_token: str
    from_amount: str
    from_address: str
    to_address: Optional[str] = None
    slippage: float = 0.005


RouteUpdateHook = Callable[[Route], None]


@dataclass(frozen=True)
class ExecutionOptions:
    """Options for one route execution.

    Attributes:
        update_route_hook: Called with the route whenever execution state changes
        disable_message_signing: Use approve() transactions instead of
            typed-data permit signatures for ERC-20 spending
    """
    update_route_hook: Optional[RouteUpdateHook] = None
    disable_message_signing: bool = True


class StepSigner(Protocol):
    """JSON-RPC request surface bound to one chain."""

    @property
    def address(self) -> str: ...

    async def request(self, method: str, params: Any = None) -> Any: ...


class SignerProvider(Protocol):
    """Produces a chain-bound signer; called again whenever the chain changes."""

    @property
    def address(self) -> str: ...

    def for_chain(self, chain_id: int) -> StepSigner: ...


class RouteExecutionError(Exception):
    """A route step could not be executed."""

    def __init__(self, message: str, step_id: Optional[str] = None):
        super().__init__(message)
        self.step_id = step_id


class RouteEngine(ABC):
    """Abstract route discovery and execution engine."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Engine name identifier."""
        pass

    @abstractmethod
    async def get_routes(self, request: RoutesRequest) -> list[Route]:
        """Discover candidate routes, best first. Empty when none exist."""
        pass

    @abstractmethod
    async def execute_route(
        self,
        route: Route,
        signers: SignerProvider,
        options: ExecutionOptions,
    ) -> Route:
        """Execute every step of a route.

        Args:
            route: Route to execute (its steps' execution state is updated in place)
            signers: Provider of chain-bound signers
            options: Execution options

        Returns:
            The executed route

        Raises:
            RouteExecutionError: A step failed; the attempt is abandoned
        """
        pass

    async def get_best_route(self, request: RoutesRequest) -> Optional[Route]:
        """Get the first (recommended) route, or None if no route exists."""
        routes = await self.get_routes(request)
        if not routes:
            logger.warning(
                f"No routes found for {request.from_amount} {request.from_token} "
                f"({request.from_chain_id}) -> {request.to_token} ({request.to_chain_id})"
            )
            return None
        return routes[0]


def format_route(route: Route) -> str:
    """Format a route for human-readable display."""
    from_amount = format_units(int(route.from_amount), route.from_token.decimals)
    to_amount = format_units(int(route.to_amount_min), route.to_token.decimals)

    steps = "\n".join(
        f"  {i + 1}. {step.type.upper()} via {step.tool_name}"
        for i, step in enumerate(route.steps)
    )

    return "\n".join([
        f"From: {from_amount} {route.from_token.symbol} on chain {route.from_chain_id}",
        f"To:   ~{to_amount} {route.to_token.symbol} on chain {route.to_chain_id}",
        f"Gas cost: ~${route.gas_cost_usd or 'unknown'}",
        f"Protocol fees: ~${route.fee_cost_usd():.2f}",
        f"Steps ({len(route.steps)}):",
        steps,
    ])

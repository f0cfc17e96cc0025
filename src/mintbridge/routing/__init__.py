"""Route discovery, execution and progress tracking."""

from mintbridge.routing.base import (
    ExecutionOptions,
    ExecutionStatus,
    Route,
    RouteEngine,
    RouteExecutionError,
    RoutesRequest,
    format_route,
)
from mintbridge.routing.lifi import EngineConfig, LifiEngine
from mintbridge.routing.tracker import (
    BridgeResult,
    ProgressTracker,
    StepUpdate,
    execute_bridge_route,
)

__all__ = [
    "BridgeResult",
    "EngineConfig",
    "ExecutionOptions",
    "ExecutionStatus",
    "LifiEngine",
    "ProgressTracker",
    "Route",
    "RouteEngine",
    "RouteExecutionError",
    "RoutesRequest",
    "StepUpdate",
    "execute_bridge_route",
    "format_route",
]

"""Tests for route progress tracking."""

import pytest

from mintbridge.routing.base import ExecutionStatus, Route, RouteExecutionError, StepExecution
from mintbridge.routing.tracker import ProgressTracker, execute_bridge_route, received_amount

from conftest import FakeEngine, FakeSignerProvider


def two_step_route(route_data) -> Route:
    second = dict(route_data["steps"][0], id="step-2", type="swap")
    route_data["steps"].append(second)
    return Route.from_api(route_data)


def set_statuses(route: Route, *statuses: ExecutionStatus) -> None:
    for step, status in zip(route.steps, statuses):
        step.execution = StepExecution(status=status)


class TestProgressTracker:
    """Tests for status deduplication."""

    def test_same_signature_emits_once(self, route_data):
        """The same status tuple twice in a row yields a single update."""
        updates = []
        tracker = ProgressTracker(updates.append)
        route = two_step_route(route_data)
        set_statuses(route, ExecutionStatus.ACTION_REQUIRED, ExecutionStatus.PENDING)

        tracker(route)
        tracker(route)

        assert len(updates) == 1

    def test_changed_signature_emits(self, route_data):
        updates = []
        tracker = ProgressTracker(updates.append)
        route = two_step_route(route_data)

        set_statuses(route, ExecutionStatus.PENDING, ExecutionStatus.PENDING)
        tracker(route)
        set_statuses(route, ExecutionStatus.DONE, ExecutionStatus.PENDING)
        tracker(route)
        tracker(route)

        assert [u.message for u in updates] == [
            "Step 1: PENDING | Step 2: PENDING",
            "Step 1: DONE | Step 2: PENDING",
        ]

    def test_current_step_is_first_active(self, route_data):
        tracker = ProgressTracker()
        route = two_step_route(route_data)
        set_statuses(route, ExecutionStatus.DONE, ExecutionStatus.ACTION_REQUIRED)

        update = tracker.observe(route)

        assert update.step == 2
        assert update.total_steps == 2

    def test_current_step_defaults_to_first(self, route_data):
        tracker = ProgressTracker()
        route = two_step_route(route_data)
        set_statuses(route, ExecutionStatus.DONE, ExecutionStatus.DONE)

        assert tracker.observe(route).step == 1

    def test_missing_execution_counts_as_pending(self, route):
        assert ProgressTracker.signature(route) == ("PENDING",)


class TestReceivedAmount:
    """Tests for the reported destination amount."""

    def test_uses_last_step_amount(self, route):
        route.steps[-1].execution = StepExecution(to_amount="412000000000000")

        assert received_amount(route) == "0.000412"

    def test_falls_back_to_minimum(self, route):
        assert received_amount(route) == "0.00039"


class TestExecuteBridgeRoute:
    """Tests for execute_bridge_route."""

    @pytest.mark.asyncio
    async def test_disables_message_signing(self, route):
        engine = FakeEngine([route])

        await execute_bridge_route(engine, route, FakeSignerProvider())

        _, _, options = engine.executed[0]
        assert options.disable_message_signing is True
        assert options.update_route_hook is not None

    @pytest.mark.asyncio
    async def test_result(self, route):
        engine = FakeEngine([route], received="400000000000000")
        updates = []

        result = await execute_bridge_route(engine, route, FakeSignerProvider(), updates.append)

        assert result.to_amount == "0.0004"
        assert result.to_token == "ETH"
        assert result.tx_hashes == ["0xstep-1"]
        # Engine fires the hook three times for two distinct states
        assert [u.message for u in updates] == ["Step 1: PENDING", "Step 1: DONE"]

    @pytest.mark.asyncio
    async def test_engine_error_propagates(self, route):
        engine = FakeEngine([route], error=RouteExecutionError("bridge reverted", step_id="step-1"))

        with pytest.raises(RouteExecutionError, match="bridge reverted"):
            await execute_bridge_route(engine, route, FakeSignerProvider())

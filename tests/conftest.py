"""Pytest configuration and fixtures."""

import copy
import os

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"
os.environ["CROSSMINT_SERVER_API_KEY"] = "test-key"
os.environ["CROSSMINT_API_URL"] = "https://crossmint.test"
os.environ["CROSSMINT_WALLET_LOCATOR"] = "userId:demo-user:evm:smart"
os.environ["LIFI_API_URL"] = "https://lifi.test/v1"
os.environ["BASE_RPC_URL"] = "https://base.rpc.test"
os.environ["ARBITRUM_RPC_URL"] = "https://arbitrum.rpc.test"
os.environ["POLL_INTERVAL_SECONDS"] = "0"
os.environ["POLL_MAX_ATTEMPTS"] = "3"
os.environ["LIFI_STATUS_INTERVAL_SECONDS"] = "0"
os.environ["LIFI_STATUS_MAX_ATTEMPTS"] = "3"

from mintbridge.chains import NATIVE_TOKEN_ADDRESS, TOKENS, get_supported_chains
from mintbridge.config import get_settings
from mintbridge.routing.base import (
    ExecutionStatus,
    ProcessEntry,
    ProcessType,
    Route,
    RouteEngine,
    RoutesRequest,
    StepExecution,
)
from mintbridge.signing.base import WalletIdentity
from mintbridge.signing.custodial import CustodialSigningClient
from mintbridge.signing.factory import reset_custodial_client

CROSSMINT_URL = "https://crossmint.test"
WALLET_ADDRESS = "0x1111111111111111111111111111111111111111"
DESTINATION = "0xDdDdDdDdDdDdDdDdDdDdDdDdDdDdDdDdDdDdDdDd"
LIFI_DIAMOND = "0x1231DEB6f5749EF6cE6943a275A1D3E7486F4EaE"

USDC_BASE = {
    "address": TOKENS["USDC_BASE"].address,
    "symbol": "USDC",
    "decimals": 6,
    "chainId": 8453,
    "name": "USD Coin",
}
ETH_ARBITRUM = {
    "address": NATIVE_TOKEN_ADDRESS,
    "symbol": "ETH",
    "decimals": 18,
    "chainId": 42161,
    "name": "ETH",
}

ROUTE_DATA = {
    "id": "route-1",
    "fromChainId": 8453,
    "toChainId": 42161,
    "fromToken": USDC_BASE,
    "toToken": ETH_ARBITRUM,
    "fromAmount": "1000000",
    "toAmount": "400000000000000",
    "toAmountMin": "390000000000000",
    "gasCostUSD": "0.01",
    "steps": [
        {
            "id": "step-1",
            "type": "cross",
            "tool": "across",
            "toolDetails": {"name": "Across"},
            "action": {
                "fromChainId": 8453,
                "toChainId": 42161,
                "fromToken": USDC_BASE,
                "toToken": ETH_ARBITRUM,
                "fromAmount": "1000000",
            },
            "estimate": {
                "approvalAddress": LIFI_DIAMOND,
                "feeCosts": [{"amountUSD": "0.02"}],
            },
        }
    ],
}


@pytest.fixture(autouse=True)
def fresh_settings():
    """Rebuild settings and drop the shared custodial client around each test."""
    get_settings.cache_clear()
    reset_custodial_client()
    yield
    get_settings.cache_clear()
    reset_custodial_client()


@pytest.fixture
def custodial_client() -> CustodialSigningClient:
    """Custodial client with instant polling and a small attempt budget."""
    return CustodialSigningClient(
        api_key="test-key",
        base_url=CROSSMINT_URL,
        poll_interval=0,
        max_poll_attempts=3,
    )


@pytest.fixture
def wallet() -> WalletIdentity:
    return WalletIdentity(locator="userId:demo-user:evm:smart", address=WALLET_ADDRESS)


@pytest.fixture
def chains():
    return get_supported_chains()


@pytest.fixture
def route_data() -> dict:
    """Raw LI.FI route: 1 USDC on Base to ETH on Arbitrum in one cross-chain step."""
    return copy.deepcopy(ROUTE_DATA)


class FakeSigner:
    """Chain-bound signer that records requests instead of signing."""

    def __init__(self, chain_id: int, provider: "FakeSignerProvider"):
        self.chain_id = chain_id
        self.provider = provider
        self.address = provider.address

    async def request(self, method, params=None):
        self.provider.requests.append((self.chain_id, method, params))
        if method == "eth_sendTransaction":
            if self.chain_id in self.provider.failing_chains:
                raise RuntimeError(f"send failed on chain {self.chain_id}")
            self.provider.sent += 1
            return f"0xhash{self.provider.sent}"
        return self.provider.call_results.get(method, "0x0")


class FakeSignerProvider:
    """Signer provider backed by FakeSigner."""

    def __init__(self, address: str = WALLET_ADDRESS, failing_chains=(), call_results=None):
        self.address = address
        self.failing_chains = set(failing_chains)
        self.call_results = call_results or {}
        self.requests: list[tuple] = []
        self.sent = 0

    def for_chain(self, chain_id: int) -> FakeSigner:
        return FakeSigner(chain_id, self)

    @property
    def sent_transactions(self) -> list[tuple]:
        return [r for r in self.requests if r[1] == "eth_sendTransaction"]


class FakeEngine(RouteEngine):
    """Route engine with canned routes and scripted execution."""

    def __init__(self, routes=None, error: Exception = None, received: str = None):
        self.routes = routes or []
        self.error = error
        self.received = received
        self.requests: list[RoutesRequest] = []
        self.executed: list[tuple] = []

    @property
    def name(self) -> str:
        return "fake"

    async def get_routes(self, request):
        self.requests.append(request)
        return self.routes

    async def execute_route(self, route, signers, options):
        self.executed.append((route, signers, options))
        hook = options.update_route_hook or (lambda r: None)
        for step in route.steps:
            step.execution = StepExecution()
            hook(route)
            hook(route)
            if self.error:
                step.execution.status = ExecutionStatus.FAILED
                hook(route)
                raise self.error
            step.execution.process.append(
                ProcessEntry(
                    type=ProcessType.CROSS_CHAIN,
                    status=ExecutionStatus.DONE,
                    tx_hash=f"0x{step.id}",
                )
            )
            step.execution.status = ExecutionStatus.DONE
            step.execution.to_amount = self.received
            hook(route)
        return route


@pytest.fixture
def route(route_data) -> Route:
    return Route.from_api(route_data)

"""LI.FI route engine.

Uses the LI.FI REST API for route discovery and per-step transaction data.
API docs: https://docs.li.fi/li.fi-api/li.fi-api

Execution of one step:
1. Ensure ERC-20 allowance for the step's approval address (approve() tx)
2. Fetch the step transaction (POST /advanced/stepTransaction)
3. Send it through the chain-bound signer (eth_sendTransaction)
4. Poll GET /status until the swap/bridge is DONE or FAILED

The engine only ever sends transactions; it never asks the signer for
typed-data signatures.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx

from mintbridge.chains import is_native_token
from mintbridge.rpc.erc20 import MAX_UINT256, decode_uint, encode_allowance, encode_approve
from mintbridge.routing.base import (
    ExecutionOptions,
    ExecutionStatus,
    ProcessEntry,
    ProcessType,
    Route,
    RouteEngine,
    RouteExecutionError,
    RoutesRequest,
    RouteStep,
    SignerProvider,
    StepExecution,
    StepSigner,
)

logger = logging.getLogger(__name__)

LIFI_API_URL = "https://li.quest/v1"

# GasZip routes need two transactions (swap, then bridge the swapped ETH).
# The custodial backend simulates each transaction independently, so the
# bridge leg reverts on wallets that only hold the source token.
DENIED_BRIDGES = ["gasZipBridge"]

# Terminal /status values
STATUS_DONE = "DONE"
STATUS_FAILED = "FAILED"
STATUS_INVALID = "INVALID"


@dataclass
class EngineConfig:
    """Explicit LI.FI configuration (replaces the SDK's global createConfig)."""
    integrator: str = "mintbridge"
    api_key: Optional[str] = None
    api_url: str = LIFI_API_URL
    order: str = "RECOMMENDED"
    denied_bridges: list[str] = field(default_factory=lambda: list(DENIED_BRIDGES))
    status_interval: float = 5.0
    status_max_attempts: int = 360
    timeout: float = 30.0


class LifiEngine(RouteEngine):
    """LI.FI route discovery and execution."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.base_url = self.config.api_url.rstrip("/")

    @property
    def name(self) -> str:
        return "LI.FI"

    def _get_headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.config.api_key:
            headers["x-lifi-api-key"] = self.config.api_key
        return headers

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    async def get_routes(self, request: RoutesRequest) -> list[Route]:
        """Fetch candidate routes from LI.FI.

        Raises:
            httpx.HTTPStatusError: LI.FI rejected the request
        """
        body = {
            "fromChainId": request.from_chain_id,
            "toChainId": request.to_chain_id,
            "fromTokenAddress": request.from_token,
            "toTokenAddress": request.to_token,
            "fromAmount": request.from_amount,
            "fromAddress": request.from_address,
            "options": {
                "order": self.config.order,
                "slippage": request.slippage,
                "bridges": {"deny": self.config.denied_bridges},
                "integrator": self.config.integrator,
            },
        }
        if request.to_address:
            body["toAddress"] = request.to_address

        logger.info(
            f"Requesting routes: {request.from_amount} {request.from_token} "
            f"({request.from_chain_id}) -> {request.to_token} ({request.to_chain_id})"
        )

        async with httpx.AsyncClient(timeout=self.config.timeout) as client:
            response = await client.post(
                f"{self.base_url}/advanced/routes",
                headers=self._get_headers(),
                json=body,
            )
        response.raise_for_status()

        routes = [Route.from_api(r) for r in response.json().get("routes") or []]
        logger.info(f"LI.FI returned {len(routes)} route(s)")
        return routes

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute_route(
        self,
        route: Route,
        signers: SignerProvider,
        options: ExecutionOptions,
    ) -> Route:
        if not options.disable_message_signing:
            raise RouteExecutionError(
                "Permit (typed-data) signing is not supported; "
                "execute with disable_message_signing=True"
            )

        for step in route.steps:
            step.execution = StepExecution()
            self._notify(route, options)

            try:
                signer = signers.for_chain(step.from_chain_id)
                await self._ensure_allowance(route, step, signer, options)
                await self._execute_step(route, step, signer, options)
            except Exception as e:
                logger.error(f"Step {step.id} ({step.tool_name}) failed: {e}")
                step.execution.status = ExecutionStatus.FAILED
                for process in step.execution.process:
                    if process.status != ExecutionStatus.DONE:
                        process.status = ExecutionStatus.FAILED
                self._notify(route, options)
                raise

        return route

    def _notify(self, route: Route, options: ExecutionOptions) -> None:
        if options.update_route_hook:
            options.update_route_hook(route)

    async def _ensure_allowance(
        self,
        route: Route,
        step: RouteStep,
        signer: StepSigner,
        options: ExecutionOptions,
    ) -> None:
        """Approve the step's spender if the current allowance is too low."""
        if is_native_token(step.from_token.address) or not step.approval_address:
            return

        amount = int(step.from_amount)
        result = await signer.request(
            "eth_call",
            [
                {
                    "to": step.from_token.address,
                    "data": encode_allowance(signer.address, step.approval_address),
                },
                "latest",
            ],
        )
        allowance = decode_uint(result)
        if allowance >= amount:
            logger.debug(f"Allowance sufficient for {step.from_token.symbol}: {allowance}")
            return

        process = ProcessEntry(
            type=ProcessType.TOKEN_ALLOWANCE,
            status=ExecutionStatus.ACTION_REQUIRED,
            chain_id=step.from_chain_id,
            message=f"Approve {step.from_token.symbol}",
        )
        step.execution.process.append(process)
        step.execution.status = ExecutionStatus.ACTION_REQUIRED
        self._notify(route, options)

        logger.info(f"Approving {step.from_token.symbol} for {step.approval_address}")
        process.tx_hash = await signer.request(
            "eth_sendTransaction",
            [
                {
                    "from": signer.address,
                    "to": step.from_token.address,
                    "data": encode_approve(step.approval_address, MAX_UINT256),
                    "value": "0x0",
                }
            ],
        )
        process.status = ExecutionStatus.DONE
        step.execution.status = ExecutionStatus.PENDING
        self._notify(route, options)

    async def _execute_step(
        self,
        route: Route,
        step: RouteStep,
        signer: StepSigner,
        options: ExecutionOptions,
    ) -> None:
        process = ProcessEntry(
            type=ProcessType.CROSS_CHAIN if step.is_cross_chain else ProcessType.SWAP,
            status=ExecutionStatus.ACTION_REQUIRED,
            chain_id=step.from_chain_id,
            message=f"{step.type} via {step.tool_name}",
        )
        step.execution.process.append(process)
        step.execution.status = ExecutionStatus.ACTION_REQUIRED
        self._notify(route, options)

        tx_request = await self.get_step_transaction(step)
        process.tx_hash = await signer.request(
            "eth_sendTransaction",
            [
                {
                    "from": signer.address,
                    "to": tx_request["to"],
                    "data": tx_request.get("data"),
                    "value": tx_request.get("value"),
                }
            ],
        )
        process.status = ExecutionStatus.PENDING
        step.execution.status = ExecutionStatus.PENDING
        self._notify(route, options)

        status = await self.wait_for_status(step, process.tx_hash)
        receiving = status.get("receiving") or {}
        step.execution.to_amount = receiving.get("amount")

        process.status = ExecutionStatus.DONE
        step.execution.status = ExecutionStatus.DONE
        self._notify(route, options)

    async def get_step_transaction(self, step: RouteStep) -> dict:
        """Populate a step with its transaction request.

        Raises:
            RouteExecutionError: Response carries no transaction request
        """
        async with httpx.AsyncClient(timeout=self.config.timeout) as client:
            response = await client.post(
                f"{self.base_url}/advanced/stepTransaction",
                headers=self._get_headers(),
                json=step.raw,
            )
        response.raise_for_status()

        tx_request = response.json().get("transactionRequest")
        if not tx_request or not tx_request.get("to"):
            raise RouteExecutionError(
                f"No transaction request returned for step {step.id}", step_id=step.id
            )
        return tx_request

    async def wait_for_status(self, step: RouteStep, tx_hash: str) -> dict:
        """Poll LI.FI until the step's transfer is complete.

        Raises:
            RouteExecutionError: Transfer failed or never completed
        """
        params = {
            "txHash": tx_hash,
            "bridge": step.tool,
            "fromChain": step.from_chain_id,
            "toChain": step.to_chain_id,
        }

        for attempt in range(1, self.config.status_max_attempts + 1):
            try:
                async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                    response = await client.get(
                        f"{self.base_url}/status",
                        headers=self._get_headers(),
                        params=params,
                    )
                # 404 while the transaction is not yet indexed
                if response.is_success:
                    data = response.json()
                    status = data.get("status")
                    if status == STATUS_DONE:
                        logger.info(f"Step {step.id} done ({data.get('substatus', 'COMPLETED')})")
                        return data
                    if status in (STATUS_FAILED, STATUS_INVALID):
                        raise RouteExecutionError(
                            f"Step {step.id} via {step.tool_name} failed: "
                            f"{data.get('substatusMessage') or data.get('substatus') or status}",
                            step_id=step.id,
                        )
                    logger.debug(f"Step {step.id} status {status} ({attempt})")
            except httpx.HTTPError as e:
                logger.debug(f"Status check {attempt} for {tx_hash} failed: {e}")

            await asyncio.sleep(self.config.status_interval)

        raise RouteExecutionError(
            f"Step {step.id} transaction {tx_hash} did not complete after "
            f"{self.config.status_max_attempts} status checks",
            step_id=step.id,
        )

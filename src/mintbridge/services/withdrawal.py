"""Withdrawal (settlement) sequencer.

Empties the custodial wallet to an external address:
1. USDC on Base: full balance via ERC-20 transfer()
2. ETH on Arbitrum: balance minus a gas reserve (leg skipped if nothing is left)

Balances come from a single upfront snapshot. Legs run strictly in order; a
failed leg aborts the rest. Confirmed legs are never rolled back, so a FAILED
outcome may still carry receipts.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional

from mintbridge.chains import (
    ARBITRUM_CHAIN_ID,
    BASE_CHAIN_ID,
    TOKENS,
    ChainConfig,
    format_units,
    get_explorer_tx_url,
    get_supported_chains,
)
from mintbridge.config import get_settings
from mintbridge.events import (
    CompletionStatus,
    ProgressEvent,
    StepStatus,
    TransactionLink,
    WithdrawCompletePayload,
)
from mintbridge.routing.base import SignerProvider
from mintbridge.rpc.erc20 import encode_transfer
from mintbridge.services.balances import BalanceQuery, BalanceSnapshot, read_balance_snapshot
from mintbridge.signing.adapter import CustodialSignerProvider
from mintbridge.signing.custodial import CustodialSigningClient
from mintbridge.signing.factory import get_custodial_client

logger = logging.getLogger(__name__)

# 0.0002 ETH
DEFAULT_GAS_RESERVE_WEI = 200_000_000_000_000

EMPTY_MESSAGE = "Nothing to withdraw - all balances are zero."
ADDRESS_PATTERN = re.compile(r"0x[0-9a-fA-F]{40}")

SnapshotReader = Callable[[str, list[BalanceQuery]], Awaitable[BalanceSnapshot]]
Emit = Callable[[ProgressEvent], None]


class WithdrawalStatus(str, Enum):
    """Terminal outcome of a withdrawal."""
    SUCCESS = "SUCCESS"
    EMPTY = "EMPTY"
    FAILED = "FAILED"


@dataclass
class WithdrawalLeg:
    """One transfer of the withdrawal sequence."""
    chain_id: int
    chain_name: str
    asset: str
    amount: int
    decimals: int
    to: str
    data: Optional[str] = None
    value: int = 0
    note: str = ""

    @property
    def label(self) -> str:
        return f"{format_units(self.amount, self.decimals)} {self.asset} ({self.chain_name})"

    def to_transaction(self, sender: str) -> dict:
        """eth_sendTransaction parameter object for this leg."""
        tx = {"from": sender, "to": self.to, "value": hex(self.value)}
        if self.data:
            tx["data"] = self.data
        return tx


@dataclass
class SettlementReceipt:
    """A confirmed withdrawal leg."""
    tx_hash: str
    explorer_url: str
    label: str


@dataclass
class WithdrawalOutcome:
    """Result of a withdrawal attempt."""
    status: WithdrawalStatus
    receipts: list[SettlementReceipt] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def is_partial(self) -> bool:
        """Failed after at least one leg was confirmed."""
        return self.status == WithdrawalStatus.FAILED and bool(self.receipts)


def validate_destination(destination: str) -> str:
    """Validate an EVM destination address.

    Raises:
        ValueError: Not 0x followed by exactly 40 hex digits
    """
    if not destination or not ADDRESS_PATTERN.fullmatch(destination):
        raise ValueError("Invalid destination address")
    return destination


def plan_withdrawal(
    snapshot: BalanceSnapshot,
    destination: str,
    gas_reserve_wei: int = DEFAULT_GAS_RESERVE_WEI,
    chains: Optional[dict[int, ChainConfig]] = None,
) -> list[WithdrawalLeg]:
    """Compute withdrawal legs from a balance snapshot.

    Args:
        snapshot: Upfront balances
        destination: Recipient address
        gas_reserve_wei: Native amount kept back on Arbitrum
        chains: Chain configuration (defaults to supported chains)

    Returns:
        Legs in execution order; empty when nothing can be withdrawn
    """
    chains = chains if chains is not None else get_supported_chains()
    usdc = TOKENS["USDC_BASE"]
    legs = []

    usdc_balance = snapshot.get(usdc.symbol, BASE_CHAIN_ID)
    if usdc_balance > 0:
        legs.append(
            WithdrawalLeg(
                chain_id=BASE_CHAIN_ID,
                chain_name="Base",
                asset=usdc.symbol,
                amount=usdc_balance,
                decimals=usdc.decimals,
                to=usdc.address,
                data=encode_transfer(destination, usdc_balance),
            )
        )

    arbitrum = chains[ARBITRUM_CHAIN_ID]
    eth_balance = snapshot.get(arbitrum.native_symbol, ARBITRUM_CHAIN_ID)
    send_amount = eth_balance - gas_reserve_wei if eth_balance > gas_reserve_wei else 0
    if send_amount > 0:
        legs.append(
            WithdrawalLeg(
                chain_id=ARBITRUM_CHAIN_ID,
                chain_name="Arbitrum",
                asset=arbitrum.native_symbol,
                amount=send_amount,
                decimals=arbitrum.decimals,
                to=destination,
                value=send_amount,
                note=f"{format_units(gas_reserve_wei, arbitrum.decimals)} ETH reserved for gas",
            )
        )
    elif eth_balance > 0:
        logger.info(
            f"ETH on Arbitrum ({format_units(eth_balance, 18)}) is below the gas reserve, skipping"
        )

    return legs


class WithdrawalSequencer:
    """Executes withdrawal legs through the custodial signer provider."""

    def __init__(
        self,
        signers: SignerProvider,
        gas_reserve_wei: Optional[int] = None,
        snapshot_reader: SnapshotReader = read_balance_snapshot,
        chains: Optional[dict[int, ChainConfig]] = None,
    ):
        self.signers = signers
        self.gas_reserve_wei = (
            gas_reserve_wei if gas_reserve_wei is not None else get_settings().gas_reserve_wei
        )
        self.snapshot_reader = snapshot_reader
        self.chains = chains if chains is not None else get_supported_chains()

    def balance_queries(self) -> list[BalanceQuery]:
        return [
            BalanceQuery(chain=self.chains[BASE_CHAIN_ID], token=TOKENS["USDC_BASE"]),
            BalanceQuery(chain=self.chains[ARBITRUM_CHAIN_ID]),
        ]

    async def execute(self, destination: str, emit: Optional[Emit] = None) -> WithdrawalOutcome:
        """Withdraw everything to a destination.

        Failures are reported as a FAILED outcome (and an error event), never
        raised, except for an invalid destination.

        Raises:
            ValueError: Invalid destination address
        """
        validate_destination(destination)

        def send(event: ProgressEvent) -> None:
            if emit:
                emit(event)

        receipts: list[SettlementReceipt] = []
        try:
            send(ProgressEvent.status(StepStatus.PENDING, "Reading on-chain balances..."))
            snapshot = await self.snapshot_reader(self.signers.address, self.balance_queries())
            send(ProgressEvent.status(
                StepStatus.DONE,
                " · ".join(
                    f"{b.symbol} on {b.chain_name}: {b.formatted}" for b in snapshot.balances
                ),
            ))

            legs = plan_withdrawal(snapshot, destination, self.gas_reserve_wei, self.chains)
            if not legs:
                logger.info(f"Nothing to withdraw from {self.signers.address}")
                send(ProgressEvent.complete(
                    WithdrawCompletePayload(status=CompletionStatus.EMPTY, message=EMPTY_MESSAGE)
                ))
                return WithdrawalOutcome(status=WithdrawalStatus.EMPTY)

            for leg in legs:
                message = f"Withdrawing {leg.label}..."
                if leg.note:
                    message = f"{message} ({leg.note})"
                send(ProgressEvent.status(StepStatus.PENDING, message))

                tx_hash = await self._submit_leg(leg)

                receipts.append(
                    SettlementReceipt(
                        tx_hash=tx_hash,
                        explorer_url=get_explorer_tx_url(leg.chain_id, tx_hash),
                        label=leg.label,
                    )
                )
                send(ProgressEvent.status(StepStatus.DONE, f"{leg.asset} sent · {tx_hash}"))

        except Exception as e:
            logger.error(
                f"Withdrawal to {destination} failed after {len(receipts)} confirmed leg(s): {e}"
            )
            send(ProgressEvent.error(str(e) or type(e).__name__))
            return WithdrawalOutcome(status=WithdrawalStatus.FAILED, receipts=receipts, error=e)

        send(ProgressEvent.complete(
            WithdrawCompletePayload(
                status=CompletionStatus.SUCCESS,
                transactions=[
                    TransactionLink(tx_hash=r.tx_hash, explorer_url=r.explorer_url, label=r.label)
                    for r in receipts
                ],
            )
        ))
        return WithdrawalOutcome(status=WithdrawalStatus.SUCCESS, receipts=receipts)

    async def _submit_leg(self, leg: WithdrawalLeg) -> str:
        signer = self.signers.for_chain(leg.chain_id)
        logger.info(f"Submitting withdrawal leg: {leg.label} -> {leg.to}")
        return await signer.request(
            "eth_sendTransaction", [leg.to_transaction(self.signers.address)]
        )


async def run_withdrawal(
    destination: str,
    emit: Optional[Emit] = None,
    locator: Optional[str] = None,
    client: Optional[CustodialSigningClient] = None,
) -> WithdrawalOutcome:
    """Load the custodial wallet and withdraw everything to a destination.

    Args:
        destination: Recipient address
        emit: Event callback
        locator: Wallet locator override
        client: Custodial client (defaults to the process-wide client)
    """
    validate_destination(destination)

    def send(event: ProgressEvent) -> None:
        if emit:
            emit(event)

    send(ProgressEvent.status(StepStatus.PENDING, "Loading wallet..."))
    try:
        client = client or get_custodial_client()
        wallet = await client.resolve_or_create_wallet(locator)
    except Exception as e:
        logger.error(f"Failed to load wallet for withdrawal: {e}")
        send(ProgressEvent.error(str(e) or type(e).__name__))
        return WithdrawalOutcome(status=WithdrawalStatus.FAILED, error=e)
    send(ProgressEvent.status(StepStatus.DONE, f"Wallet: {wallet.address}"))

    sequencer = WithdrawalSequencer(CustodialSignerProvider(wallet, client))
    return await sequencer.execute(destination, emit)

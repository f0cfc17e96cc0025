"""On-chain balance reads.

Balances are always read fresh from each chain's public RPC; nothing is
cached. Reads for different (asset, chain) pairs run concurrently and are
joined before anything uses them.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from mintbridge.chains import (
    NATIVE_TOKEN_ADDRESS,
    WATCHED_TOKENS,
    ChainConfig,
    Token,
    format_units,
    get_supported_chains,
)
from mintbridge.rpc.erc20 import get_native_balance, get_token_balance
from mintbridge.signing.base import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceQuery:
    """One (asset, chain) pair to read. token=None means the native asset."""
    chain: ChainConfig
    token: Optional[Token] = None

    @property
    def symbol(self) -> str:
        return self.token.symbol if self.token else self.chain.native_symbol

    @property
    def decimals(self) -> int:
        return self.token.decimals if self.token else self.chain.decimals

    @property
    def contract_address(self) -> str:
        return self.token.address if self.token else NATIVE_TOKEN_ADDRESS


@dataclass(frozen=True)
class AssetBalance:
    """Balance of one asset on one chain, in smallest units."""
    symbol: str
    chain_id: int
    chain_name: str
    amount: int
    decimals: int
    contract_address: str

    @property
    def formatted(self) -> str:
        return format_units(self.amount, self.decimals)


@dataclass(frozen=True)
class BalanceSnapshot:
    """Balances taken together at one point in time."""
    address: str
    balances: tuple[AssetBalance, ...]

    def get(self, symbol: str, chain_id: int) -> int:
        """Amount for an asset on a chain (0 when not part of the snapshot)."""
        for balance in self.balances:
            if balance.symbol == symbol and balance.chain_id == chain_id:
                return balance.amount
        return 0

    def non_zero(self) -> list[AssetBalance]:
        return [b for b in self.balances if b.amount > 0]


async def _read_balance(address: str, query: BalanceQuery) -> AssetBalance:
    if not query.chain.rpc_url:
        raise ConfigurationError(f"No RPC URL for chain {query.chain.name}")

    if query.token:
        amount = await get_token_balance(query.chain.rpc_url, query.token.address, address)
    else:
        amount = await get_native_balance(query.chain.rpc_url, address)

    return AssetBalance(
        symbol=query.symbol,
        chain_id=query.chain.chain_id,
        chain_name=query.chain.name,
        amount=amount,
        decimals=query.decimals,
        contract_address=query.contract_address,
    )


async def read_balance_snapshot(address: str, queries: list[BalanceQuery]) -> BalanceSnapshot:
    """Read all requested balances concurrently.

    Raises:
        RpcError: Any read failed (no partial snapshot is returned)
    """
    results = await asyncio.gather(*(_read_balance(address, q) for q in queries))
    snapshot = BalanceSnapshot(address=address, balances=tuple(results))
    logger.debug(
        "Balance snapshot for %s: %s",
        address,
        ", ".join(f"{b.formatted} {b.symbol} ({b.chain_name})" for b in results),
    )
    return snapshot


def default_balance_queries(chains: Optional[dict[int, ChainConfig]] = None) -> list[BalanceQuery]:
    """Native asset plus watched tokens on every supported chain."""
    chains = chains if chains is not None else get_supported_chains()
    queries = []
    for chain_id, chain in chains.items():
        queries.append(BalanceQuery(chain=chain))
        for token in WATCHED_TOKENS.get(chain_id, []):
            queries.append(BalanceQuery(chain=chain, token=token))
    return queries


async def get_onchain_balances(address: str) -> list[AssetBalance]:
    """Read native and watched token balances on all chains; non-zero only."""
    snapshot = await read_balance_snapshot(address, default_balance_queries())
    return snapshot.non_zero()

"""Custodial signer adapter.

Presents the custodial wallet as the JSON-RPC request surface a route engine
expects from a wallet client:

- eth_sendTransaction is intercepted and submitted to the custodial backend,
  resolving only once the on-chain hash is known
- every other method is forwarded verbatim to the chain's public RPC

Signers are bound to one chain. Switching chains means asking the provider
for a new signer; signers hold no mutable state.
"""

import logging
from typing import Any, Optional

from mintbridge.chains import ChainConfig, get_custodial_chain_name, get_supported_chains
from mintbridge.rpc.jsonrpc import forward_rpc
from mintbridge.signing.base import ConfigurationError, TransactionIntent, WalletIdentity
from mintbridge.signing.custodial import CustodialSigningClient

logger = logging.getLogger(__name__)

SEND_TRANSACTION_METHOD = "eth_sendTransaction"


def _parse_value(value: Any) -> Optional[int]:
    """Normalize a JSON-RPC quantity (hex string or int) to int."""
    if value is None or value == "":
        return None
    if isinstance(value, int):
        return value
    return int(str(value), 16) if str(value).startswith("0x") else int(str(value))


class CustodialSigner:
    """JSON-RPC dispatch surface for one chain, backed by the custodial wallet."""

    def __init__(
        self,
        wallet: WalletIdentity,
        client: CustodialSigningClient,
        chain: ChainConfig,
    ):
        """Bind a signer to a chain.

        Raises:
            ConfigurationError: If the chain id has no custodial chain name
        """
        custodial_chain = get_custodial_chain_name(chain.chain_id)
        if not custodial_chain:
            raise ConfigurationError(
                f"Chain ID {chain.chain_id} ({chain.name}) is not mapped to a Crossmint "
                f"chain name. Add it to CUSTODIAL_CHAIN_NAMES in mintbridge.chains"
            )
        self.wallet = wallet
        self.client = client
        self.chain = chain
        self.custodial_chain = custodial_chain

    @property
    def address(self) -> str:
        return self.wallet.address

    async def request(self, method: str, params: Any = None) -> Any:
        """Dispatch one JSON-RPC request.

        Args:
            method: JSON-RPC method name
            params: Method params

        Returns:
            Transaction hash for eth_sendTransaction, RPC result otherwise
        """
        if method == SEND_TRANSACTION_METHOD:
            return await self._send_transaction(params)

        if not self.chain.rpc_url:
            raise ConfigurationError(f"No RPC URL for chain {self.chain.name}")
        return await forward_rpc(self.chain.rpc_url, method, params)

    async def _send_transaction(self, params: Any) -> str:
        if not params:
            raise ValueError("eth_sendTransaction requires a transaction object")
        tx = params[0] if isinstance(params, (list, tuple)) else params

        if not tx.get("to"):
            raise ValueError("eth_sendTransaction requires a destination address")

        intent = TransactionIntent(
            to=tx["to"],
            chain=self.custodial_chain,
            data=tx.get("data") or None,
            value=_parse_value(tx.get("value")),
        )
        logger.info(f"Routing eth_sendTransaction on {self.custodial_chain} to {intent.to}")
        return await self.client.submit_and_confirm(intent, locator=self.wallet.locator)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(address={self.address}, chain={self.custodial_chain})"


class CustodialSignerProvider:
    """Hands out per-chain signers sharing one wallet and custodial client."""

    def __init__(
        self,
        wallet: WalletIdentity,
        client: CustodialSigningClient,
        chains: Optional[dict[int, ChainConfig]] = None,
    ):
        self.wallet = wallet
        self.client = client
        self.chains = chains if chains is not None else get_supported_chains()

    @property
    def address(self) -> str:
        return self.wallet.address

    def for_chain(self, chain_id: int) -> CustodialSigner:
        """Build a signer bound to a chain.

        Raises:
            ConfigurationError: If the chain is not supported
        """
        chain = self.chains.get(chain_id)
        if not chain:
            raise ConfigurationError(
                f"Chain {chain_id} not supported. Supported chains: {sorted(self.chains)}"
            )
        return CustodialSigner(self.wallet, self.client, chain)

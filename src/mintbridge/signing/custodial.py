"""Crossmint custodial signing client.

Talks to the Crossmint wallets REST API. The backend holds signing authority
for the smart wallet; this client never sees a private key.

Transaction submission is asynchronous on the backend side: an intent is
accepted, processed, broadcast and eventually confirmed. submit_and_confirm()
hides that by polling the transaction record until it resolves to a hash.

API reference:
- GET  /api/{version}/wallets/{locator}
- POST /api/{version}/wallets
- POST /api/{version}/wallets/{locator}/transactions
- GET  /api/{version}/wallets/{locator}/transactions/{id}
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

import httpx

from mintbridge.signing.base import (
    BackendError,
    ConfigurationError,
    TransactionFailedError,
    TransactionIntent,
    TransactionRecord,
    TransactionStatus,
    TransactionTimeoutError,
    WalletIdentity,
    owner_from_locator,
)

logger = logging.getLogger(__name__)

API_BASE = "https://www.crossmint.com"
API_VERSION = "2025-06-09"
DEFAULT_LOCATOR = "userId:demo-user:evm:smart"

DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_MAX_POLL_ATTEMPTS = 120  # ~2 minutes


@dataclass
class CustodialTokenBalance:
    """Token balance as reported by the custodial balances endpoint."""
    symbol: str
    name: str
    amount: str
    decimals: int
    usd_value: str
    contract_address: str


class CustodialSigningClient:
    """Client for the Crossmint custodial wallet API.

    Wallet identities are cached per locator for the lifetime of the client,
    since the same locator always resolves to the same address.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = API_BASE,
        api_version: str = API_VERSION,
        default_locator: str = DEFAULT_LOCATOR,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS,
        timeout: float = 30.0,
    ):
        """Initialize the client.

        Args:
            api_key: Crossmint server API key
            base_url: API host
            api_version: Wallets API version segment
            default_locator: Locator used when callers do not pass one
            poll_interval: Seconds between transaction status checks
            max_poll_attempts: Status checks before giving up
            timeout: Per-request HTTP timeout in seconds

        Raises:
            ConfigurationError: If api_key is empty
        """
        if not api_key:
            raise ConfigurationError(
                "CROSSMINT_SERVER_API_KEY is not set. Copy .env.example to .env and add your key."
            )
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.wallets_url = f"{self.base_url}/api/{api_version}/wallets"
        self.default_locator = default_locator
        self.poll_interval = poll_interval
        self.max_poll_attempts = max_poll_attempts
        self.timeout = timeout
        self._wallets: dict[str, WalletIdentity] = {}

    def _get_headers(self, json_body: bool = False) -> dict:
        headers = {"X-API-KEY": self.api_key}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _wallet_url(self, locator: str) -> str:
        return f"{self.wallets_url}/{quote(locator, safe='')}"

    # ------------------------------------------------------------------
    # Wallet get / create
    # ------------------------------------------------------------------

    async def resolve_or_create_wallet(self, locator: Optional[str] = None) -> WalletIdentity:
        """Get or create the EVM smart wallet for a locator.

        Args:
            locator: Wallet locator (defaults to the configured locator)

        Returns:
            WalletIdentity with the wallet address

        Raises:
            BackendError: Lookup failed with anything other than 404, or
                creation failed
        """
        locator = locator or self.default_locator

        cached = self._wallets.get(locator)
        if cached:
            return cached

        address = await self._fetch_wallet_address(locator)
        if address is None:
            owner = owner_from_locator(locator)
            logger.info(f"Wallet {locator} not found, creating for owner {owner}")
            address = await self._create_wallet(owner)

        wallet = WalletIdentity(locator=locator, address=address)
        self._wallets[locator] = wallet
        logger.info(f"Wallet ready: {locator} -> {address}")
        return wallet

    async def _fetch_wallet_address(self, locator: str) -> Optional[str]:
        """Look up an existing wallet. Returns None when it does not exist."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(self._wallet_url(locator), headers=self._get_headers())

        if response.status_code == 404:
            return None

        if not response.is_success:
            raise BackendError(
                f"GET wallet failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        data = response.json()
        if not data.get("address"):
            raise BackendError(f"Wallet response missing address: {data}", body=data)
        return data["address"]

    async def _create_wallet(self, owner: str) -> str:
        """Provision a new smart wallet with an API-key admin signer."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.wallets_url,
                headers=self._get_headers(json_body=True),
                json={
                    "type": "smart",
                    "chainType": "evm",
                    "config": {"adminSigner": {"type": "api-key"}},
                    "owner": owner,
                },
            )

        if not response.is_success:
            raise BackendError(
                f"Create wallet failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        created = response.json()
        if not created.get("address"):
            raise BackendError(f"Create wallet response missing address: {created}", body=created)
        return created["address"]

    # ------------------------------------------------------------------
    # Transaction submission + polling
    # ------------------------------------------------------------------

    async def submit_and_confirm(
        self,
        intent: TransactionIntent,
        locator: Optional[str] = None,
    ) -> str:
        """Submit an intent and wait for its on-chain hash.

        Args:
            intent: Call to execute
            locator: Wallet locator (defaults to the configured locator)

        Returns:
            On-chain transaction hash

        Raises:
            BackendError: Submission rejected or malformed success record
            TransactionFailedError: Backend reported the transaction failed
            TransactionTimeoutError: Polling budget exhausted
        """
        locator = locator or self.default_locator
        transaction_id = await self.submit_transaction(intent, locator)
        logger.info(f"Submitted transaction {transaction_id} on {intent.chain} to {intent.to}")
        return await self.wait_for_hash(transaction_id, locator)

    async def submit_transaction(self, intent: TransactionIntent, locator: str) -> str:
        """Submit an intent and return the backend transaction id."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                f"{self._wallet_url(locator)}/transactions",
                headers=self._get_headers(json_body=True),
                json={"params": {"calls": [intent.to_call()], "chain": intent.chain}},
            )

        if not response.is_success:
            raise BackendError(
                f"Transaction submission failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        body = response.json()
        transaction_id = body.get("id")
        if not transaction_id:
            raise BackendError(f"No transaction ID in response: {body}", body=body)
        return str(transaction_id)

    async def get_transaction(self, transaction_id: str, locator: str) -> TransactionRecord:
        """Fetch one transaction record.

        Raises:
            httpx.HTTPStatusError: Non-success response
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(
                f"{self._wallet_url(locator)}/transactions/{transaction_id}",
                headers=self._get_headers(),
            )
        response.raise_for_status()
        return TransactionRecord.from_api(transaction_id, response.json())

    async def wait_for_hash(self, transaction_id: str, locator: str) -> str:
        """Poll a transaction record until it succeeds, fails or times out."""
        for attempt in range(1, self.max_poll_attempts + 1):
            await asyncio.sleep(self.poll_interval)

            try:
                record = await self.get_transaction(transaction_id, locator)
            except (httpx.HTTPError, ValueError) as e:
                # Transient, keep polling
                logger.debug(f"Status check {attempt} for {transaction_id} failed: {e}")
                continue

            if record.status == TransactionStatus.SUCCESS.value:
                if not record.tx_hash:
                    raise BackendError(
                        f"Transaction {transaction_id} succeeded without an on-chain hash: {record.raw}",
                        body=record.raw,
                    )
                logger.info(f"Transaction {transaction_id} confirmed: {record.tx_hash}")
                return record.tx_hash

            if record.status == TransactionStatus.FAILED.value:
                logger.error(f"Transaction {transaction_id} failed: {record.raw}")
                raise TransactionFailedError(transaction_id, record.raw)

            # pending / awaiting-approval
            logger.debug(f"Transaction {transaction_id} status: {record.status} ({attempt})")

        raise TransactionTimeoutError(transaction_id, self.max_poll_attempts)

    # ------------------------------------------------------------------
    # Balances
    # ------------------------------------------------------------------

    async def get_wallet_balances(
        self, address: str, chain: str = "base"
    ) -> list[CustodialTokenBalance]:
        """Fetch token balances for a wallet address.

        Raises:
            BackendError: Non-success response
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(
                f"{self.base_url}/api/v1-alpha2/wallets/{address}/balances",
                headers=self._get_headers(),
                params={"currency": "usd", "tokens": "all", "chains": chain},
            )

        if not response.is_success:
            raise BackendError(
                f"GET balances failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        data = response.json()
        if not isinstance(data, list):
            return []

        return [
            CustodialTokenBalance(
                symbol=str(t.get("symbol") or ""),
                name=str(t.get("name") or t.get("symbol") or ""),
                amount=str(t.get("balance") or t.get("amount") or "0"),
                decimals=int(t.get("decimals") or 18),
                usd_value=str(t.get("usdValue") or t.get("valueInUSD") or "0"),
                contract_address=str(t.get("contractAddress") or t.get("tokenAddress") or ""),
            )
            for t in data
        ]

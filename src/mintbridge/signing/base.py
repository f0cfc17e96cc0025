"""Base types for custodial transaction signing.

Signing flow:
1. Resolve (or provision) the custodial wallet for a locator
2. Submit a transaction intent to the custodial backend
3. Backend signs, broadcasts and tracks the transaction
4. Poll the transaction record until it resolves to an on-chain hash
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)


class TransactionStatus(str, Enum):
    """Status of a transaction record held by the custodial backend."""
    PENDING = "pending"
    AWAITING_APPROVAL = "awaiting-approval"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TransactionStatus.SUCCESS, TransactionStatus.FAILED)


@dataclass(frozen=True)
class WalletIdentity:
    """A custodial smart wallet.

    Attributes:
        locator: Stable wallet locator, e.g. "userId:demo-user:evm:smart"
        address: Smart wallet address (identical on every EVM chain)
    """
    locator: str
    address: str

    @property
    def owner(self) -> str:
        """Owner portion of the locator ("userId:demo-user")."""
        return owner_from_locator(self.locator)


def owner_from_locator(locator: str) -> str:
    """Strip the wallet-type suffix from a locator."""
    return ":".join(locator.split(":")[:2])


@dataclass
class TransactionIntent:
    """Request to execute one on-chain call through the custodial wallet.

    Attributes:
        to: Destination address
        chain: Custodial chain name ("base", "arbitrum", ...)
        data: Optional call data (hex)
        value: Optional native value in wei
    """
    to: str
    chain: str
    data: Optional[str] = None
    value: Optional[int] = None

    def to_call(self) -> dict:
        """Encode as a call entry for the transactions endpoint."""
        return {
            "to": self.to,
            # Backend expects a hex-encoded wei string
            "value": hex(self.value) if self.value is not None else "0x0",
            "data": self.data or "0x",
        }


@dataclass
class TransactionRecord:
    """Transaction record as observed by polling the custodial backend."""
    id: str
    status: str
    tx_hash: Optional[str] = None
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_api(cls, transaction_id: str, data: dict) -> "TransactionRecord":
        on_chain = data.get("onChain") or {}
        return cls(
            id=str(data.get("id") or transaction_id),
            status=str(data.get("status", "")),
            tx_hash=on_chain.get("txId"),
            raw=data,
        )


class SigningError(Exception):
    """Base exception for custodial signing failures."""
    pass


class ConfigurationError(SigningError):
    """Setup defect (missing API key, unmapped chain, missing RPC URL).

    Never retried.
    """
    pass


class BackendError(SigningError):
    """Custodial backend returned a non-success or malformed response."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class TransactionFailedError(SigningError):
    """Custodial backend reported the transaction as failed."""

    def __init__(self, transaction_id: str, payload: Any = None):
        super().__init__(f"Transaction failed on-chain (id={transaction_id}): {payload}")
        self.transaction_id = transaction_id
        self.payload = payload


class TransactionTimeoutError(SigningError):
    """Transaction did not resolve within the polling budget."""

    def __init__(self, transaction_id: str, attempts: int):
        super().__init__(
            f"Transaction {transaction_id} timed out after {attempts} status checks"
        )
        self.transaction_id = transaction_id
        self.attempts = attempts

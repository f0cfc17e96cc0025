"""Custodial transaction signing.

- CustodialSigningClient: Crossmint wallets API (wallets, intents, polling)
- CustodialSigner: JSON-RPC surface routing sends to the custodial backend
- CustodialSignerProvider: per-chain signer factory for route execution
"""

from mintbridge.signing.adapter import CustodialSigner, CustodialSignerProvider
from mintbridge.signing.base import (
    BackendError,
    ConfigurationError,
    SigningError,
    TransactionFailedError,
    TransactionIntent,
    TransactionTimeoutError,
    WalletIdentity,
)
from mintbridge.signing.custodial import CustodialSigningClient
from mintbridge.signing.factory import get_custodial_client

__all__ = [
    "BackendError",
    "ConfigurationError",
    "CustodialSigner",
    "CustodialSignerProvider",
    "CustodialSigningClient",
    "SigningError",
    "TransactionFailedError",
    "TransactionIntent",
    "TransactionTimeoutError",
    "WalletIdentity",
    "get_custodial_client",
]

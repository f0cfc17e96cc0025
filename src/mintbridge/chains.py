"""Chain, token and explorer configuration.

Supported execution chains:
- Base (8453): USDC home chain
- Arbitrum One (42161): ETH destination chain

The custodial backend names chains by string; CUSTODIAL_CHAIN_NAMES maps
EVM chain ids onto that vocabulary.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from mintbridge.config import get_settings

BASE_CHAIN_ID = 8453
ARBITRUM_CHAIN_ID = 42161
ETHEREUM_CHAIN_ID = 1

# EVM chain id -> Crossmint chain name
CUSTODIAL_CHAIN_NAMES: dict[int, str] = {
    BASE_CHAIN_ID: "base",
    ARBITRUM_CHAIN_ID: "arbitrum",
    ETHEREUM_CHAIN_ID: "ethereum",
    137: "polygon",
    10: "optimism",
}

EXPLORER_URLS: dict[int, str] = {
    BASE_CHAIN_ID: "https://basescan.org",
    ARBITRUM_CHAIN_ID: "https://arbiscan.io",
    ETHEREUM_CHAIN_ID: "https://etherscan.io",
}

DEFAULT_EXPLORER = "https://etherscan.io"


@dataclass(frozen=True)
class ChainConfig:
    """Configuration for an EVM chain."""

    chain_id: int
    name: str
    key: str  # short lowercase identifier ("base", "arbitrum")
    native_symbol: str = "ETH"
    rpc_url: Optional[str] = None
    explorer_url: str = DEFAULT_EXPLORER
    decimals: int = 18


@dataclass(frozen=True)
class Token:
    """An ERC-20 token (or the native asset) on a specific chain."""

    symbol: str
    name: str
    address: str
    decimals: int
    chain_id: int


# Native asset placeholder address used by LI.FI
NATIVE_TOKEN_ADDRESS = "0x0000000000000000000000000000000000000000"
# Alternative native placeholder used by some aggregators
NATIVE_TOKEN_ALIAS = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"

TOKENS = {
    # Native USDC on Base (not bridged USDbC)
    "USDC_BASE": Token(
        symbol="USDC",
        name="USD Coin",
        address="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
        decimals=6,
        chain_id=BASE_CHAIN_ID,
    ),
    "USDC_ARBITRUM": Token(
        symbol="USDC",
        name="USD Coin",
        address="0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
        decimals=6,
        chain_id=ARBITRUM_CHAIN_ID,
    ),
}

# ERC-20 tokens whose balances are tracked per chain
WATCHED_TOKENS: dict[int, list[Token]] = {
    BASE_CHAIN_ID: [TOKENS["USDC_BASE"]],
    ARBITRUM_CHAIN_ID: [TOKENS["USDC_ARBITRUM"]],
}


def get_supported_chains() -> dict[int, ChainConfig]:
    """Get the chains the route engine may execute on.

    RPC URLs come from settings so they can be overridden per deployment.
    """
    settings = get_settings()
    return {
        BASE_CHAIN_ID: ChainConfig(
            chain_id=BASE_CHAIN_ID,
            name="Base",
            key="base",
            rpc_url=settings.base_rpc_url,
            explorer_url=EXPLORER_URLS[BASE_CHAIN_ID],
        ),
        ARBITRUM_CHAIN_ID: ChainConfig(
            chain_id=ARBITRUM_CHAIN_ID,
            name="Arbitrum One",
            key="arbitrum",
            rpc_url=settings.arbitrum_rpc_url,
            explorer_url=EXPLORER_URLS[ARBITRUM_CHAIN_ID],
        ),
    }


def get_custodial_chain_name(chain_id: int) -> Optional[str]:
    """Map an EVM chain id to the custodial backend's chain name."""
    return CUSTODIAL_CHAIN_NAMES.get(chain_id)


def is_native_token(address: str) -> bool:
    """Check if a token address is a native-asset placeholder."""
    return address.lower() in (NATIVE_TOKEN_ADDRESS.lower(), NATIVE_TOKEN_ALIAS.lower())


def get_explorer_tx_url(chain_id: int, tx_hash: str) -> str:
    """Get block explorer URL for a transaction."""
    base = EXPLORER_URLS.get(chain_id, DEFAULT_EXPLORER)
    return f"{base}/tx/{tx_hash}"


def get_explorer_address_url(chain_id: int, address: str) -> str:
    """Get block explorer URL for an address."""
    base = EXPLORER_URLS.get(chain_id, DEFAULT_EXPLORER)
    return f"{base}/address/{address}"


def format_units(amount: int, decimals: int) -> str:
    """Format an integer amount in smallest units as a plain decimal string.

    Trailing zeros are dropped: format_units(5_000_000, 6) == "5".
    """
    value = Decimal(amount) / (Decimal(10) ** decimals)
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def parse_units(amount: str, decimals: int) -> int:
    """Convert a human-readable amount into smallest units."""
    return int(Decimal(amount) * (Decimal(10) ** decimals))

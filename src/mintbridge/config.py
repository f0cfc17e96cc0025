"""Application configuration using pydantic-settings.

All values are read once at process start from the environment or a `.env` file.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Crossmint (custodial signer)
    # ======================
    crossmint_server_api_key: str = Field(
        default="", description="Crossmint server-side API key (X-API-KEY header)"
    )
    crossmint_wallet_locator: str = Field(
        default="userId:demo-user:evm:smart",
        description="Default wallet locator (owner + wallet type)",
    )
    crossmint_api_url: str = Field(
        default="https://www.crossmint.com", description="Crossmint API base URL"
    )
    crossmint_api_version: str = Field(
        default="2025-06-09", description="Crossmint wallets API version"
    )

    # ======================
    # LI.FI (route engine)
    # ======================
    lifi_api_url: str = Field(default="https://li.quest/v1", description="LI.FI API URL")
    lifi_integrator: str = Field(default="mintbridge", description="LI.FI integrator identifier")
    lifi_api_key: Optional[str] = Field(
        default=None, description="LI.FI API key for higher rate limits"
    )
    default_slippage: float = Field(
        default=0.005, description="Default slippage tolerance (0.5%)"
    )

    # ======================
    # Chain RPC Endpoints
    # ======================
    base_rpc_url: str = Field(default="https://mainnet.base.org", description="Base RPC URL")
    arbitrum_rpc_url: str = Field(
        default="https://arb1.arbitrum.io/rpc", description="Arbitrum One RPC URL"
    )
    ethereum_rpc_url: str = Field(
        default="https://eth.llamarpc.com", description="Ethereum RPC URL"
    )

    # ======================
    # Transaction polling
    # ======================
    poll_interval_seconds: float = Field(
        default=1.0, description="Delay between custodial transaction status checks"
    )
    poll_max_attempts: int = Field(
        default=120, description="Status checks before a transaction times out"
    )
    lifi_status_interval_seconds: float = Field(
        default=5.0, description="Delay between LI.FI bridge status checks"
    )
    lifi_status_max_attempts: int = Field(
        default=360, description="LI.FI status checks before a step times out"
    )

    # ======================
    # Withdrawals
    # ======================
    gas_reserve_wei: int = Field(
        default=200_000_000_000_000,
        description="Native balance kept back on withdrawal to pay for gas (0.0002 ETH)",
    )

    # ======================
    # API / Environment
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=True, description="Enable debug mode")

    @property
    def has_api_key(self) -> bool:
        """Check if the Crossmint API key is configured."""
        return bool(self.crossmint_server_api_key)

    def get_rpc_url(self, chain_id: int) -> str:
        """Get RPC URL for an EVM chain id ("" when unknown)."""
        rpc_map = {
            1: self.ethereum_rpc_url,
            8453: self.base_rpc_url,
            42161: self.arbitrum_rpc_url,
        }
        return rpc_map.get(chain_id, "")

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "crossmint": {
                "api_url": self.crossmint_api_url,
                "api_version": self.crossmint_api_version,
                "api_key": "***" if self.crossmint_server_api_key else "(not set)",
                "wallet_locator": self.crossmint_wallet_locator,
            },
            "lifi": {
                "api_url": self.lifi_api_url,
                "integrator": self.lifi_integrator,
                "api_key": "***" if self.lifi_api_key else "(not set)",
                "slippage": self.default_slippage,
            },
            "chains": {
                "base": {"rpc": self.base_rpc_url},
                "arbitrum": {"rpc": self.arbitrum_rpc_url},
                "ethereum": {"rpc": self.ethereum_rpc_url},
            },
            "polling": {
                "interval_seconds": self.poll_interval_seconds,
                "max_attempts": self.poll_max_attempts,
            },
            "gas_reserve_wei": self.gas_reserve_wei,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

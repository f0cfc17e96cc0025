"""Custodial client factory.

Creates the process-wide custodial signing client from settings. The client
caches resolved wallet identities, so one instance is shared per process.
"""

import logging
from typing import Optional

from mintbridge.config import get_settings
from mintbridge.signing.custodial import CustodialSigningClient

logger = logging.getLogger(__name__)

_client_instance: Optional[CustodialSigningClient] = None


def get_custodial_client() -> CustodialSigningClient:
    """Get the configured custodial client instance.

    Returns:
        CustodialSigningClient singleton

    Raises:
        ConfigurationError: If the Crossmint API key is not configured
    """
    global _client_instance

    if _client_instance is not None:
        return _client_instance

    settings = get_settings()
    logger.info(f"Initializing custodial client for {settings.crossmint_api_url}")

    _client_instance = CustodialSigningClient(
        api_key=settings.crossmint_server_api_key,
        base_url=settings.crossmint_api_url,
        api_version=settings.crossmint_api_version,
        default_locator=settings.crossmint_wallet_locator,
        poll_interval=settings.poll_interval_seconds,
        max_poll_attempts=settings.poll_max_attempts,
    )
    return _client_instance


def reset_custodial_client():
    """Reset the client instance (for testing)."""
    global _client_instance
    _client_instance = None

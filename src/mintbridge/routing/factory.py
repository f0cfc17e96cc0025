"""Factory for the route engine."""

import logging

from mintbridge.config import get_settings
from mintbridge.routing.lifi import EngineConfig, LifiEngine

logger = logging.getLogger(__name__)


def create_engine_config() -> EngineConfig:
    """Build LI.FI configuration from settings."""
    settings = get_settings()
    return EngineConfig(
        integrator=settings.lifi_integrator,
        api_key=settings.lifi_api_key,
        api_url=settings.lifi_api_url,
        status_interval=settings.lifi_status_interval_seconds,
        status_max_attempts=settings.lifi_status_max_attempts,
    )


def create_route_engine() -> LifiEngine:
    """Create the LI.FI engine.

    A new engine per call keeps configuration explicit; engines hold no
    execution state between routes.
    """
    config = create_engine_config()
    logger.debug(f"Creating LI.FI engine (integrator={config.integrator})")
    return LifiEngine(config)

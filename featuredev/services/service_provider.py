"""Service Provider — process-wide FeatureDevService wired from settings.

Invariants:
    - One HTTP client (and its connection pools) per process
    - get_featuredev_service raises until init_service has run
    - close_service releases both sync and async pools

Design Decisions:
    - Singleton initialized on startup: FastAPI lifespan manages lifecycle
      (ADR: no global import side effects)
    - FastAPI dependency is a plain function: tests swap it via dependency_overrides
"""

import logging

from featuredev.config import Settings
from featuredev.infrastructure.featuredev_client import FeatureDevHttpClient
from featuredev.infrastructure.telemetry import LoggingTelemetrySink
from featuredev.services.featuredev_service import FeatureDevService

logger = logging.getLogger(__name__)

# Singletons (initialized on startup)
http_client: FeatureDevHttpClient | None = None
featuredev_service: FeatureDevService | None = None


def init_service(settings: Settings) -> FeatureDevService:
    global http_client, featuredev_service
    http_client = FeatureDevHttpClient.from_settings(settings)
    featuredev_service = FeatureDevService(
        http_client, LoggingTelemetrySink(), settings.credential_start_url,
    )
    logger.info(f"Feature-dev client ready for {settings.featuredev_endpoint}")
    return featuredev_service


async def close_service() -> None:
    global http_client, featuredev_service
    if http_client is not None:
        await http_client.aclose()
    http_client = None
    featuredev_service = None


def get_featuredev_service() -> FeatureDevService:
    """FastAPI dependency for the feature-dev service."""
    if featuredev_service is None:
        raise RuntimeError("Feature-dev service not initialized")
    return featuredev_service

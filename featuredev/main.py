"""Feature-Dev Proxy API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map FeatureDevError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Remote client created on startup and closed on shutdown via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from featuredev.api.error_handlers import register_error_handlers
from featuredev.api.routes import conversations, health, telemetry_events
from featuredev.config import get_settings
from featuredev.infrastructure.observability import setup_logging
from featuredev.services.service_provider import close_service, init_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_service(settings)
    logger.info("Feature-dev proxy started")
    yield
    await close_service()
    logger.info("Feature-dev proxy shutting down")


app = FastAPI(
    title="Feature-Dev Proxy API", version="0.1.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(conversations.router)
app.include_router(telemetry_events.router)

register_error_handlers(app)

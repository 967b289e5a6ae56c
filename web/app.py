"""
FastAPI application for the valuation engine.

Thin JSON surface over the price lookup service. Production deployment
configuration via environment variables.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import PriceLookupService, get_active_providers
from core.valuation_engine import __version__ as ENGINE_VERSION
from utils.config import Config
from web.schemas import BatchValuationRequest, ValuationRequest


logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"

# Development fallback only
DEV_ORIGINS = ["http://localhost:8000", "http://127.0.0.1:8000"]


def value_request(
    service: PriceLookupService,
    request: ValuationRequest,
    now: Optional[date] = None,
) -> dict:
    """Run one validated request through the lookup service."""
    result = service.lookup(
        target=request.target.to_target(),
        pricecharting=request.pricecharting,
        ebay=request.ebay,
        comparables=request.to_comparables(),
        now=request.now or now,
    )
    return result.to_dict()


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or Config.load()
    debug_mode = config.debug and not config.production

    app = FastAPI(
        title="Collectibles Valuation Engine",
        description="Comparable-sales valuation for collectible video games",
        version=APP_VERSION,
        # Production settings: disable docs/redoc for private deployment
        docs_url=None if config.production else "/docs",
        redoc_url=None if config.production else "/redoc",
        openapi_url=None if config.production else "/openapi.json",
        debug=debug_mode,
    )

    # ==========================================================================
    # Healthcheck endpoints: synchronous, no IO, registered first.
    # ==========================================================================
    @app.get("/", include_in_schema=False)
    def root():
        """Root healthcheck. No dependencies, no IO."""
        return {"status": "ok"}

    @app.get("/health", include_in_schema=False)
    def health():
        """Secondary health endpoint. No dependencies, no IO."""
        return {"status": "healthy"}

    # CORS middleware - locked down for production
    allowed_origins = config.allowed_origins
    if not allowed_origins and not config.production:
        allowed_origins = DEV_ORIGINS
    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    service = PriceLookupService(policy=config.valuation_policy())

    @app.post("/api/valuations")
    def create_valuation(request: ValuationRequest):
        """Value one item from comparables and/or provider payloads."""
        return value_request(service, request)

    @app.post("/api/valuations/batch")
    def create_batch_valuation(request: BatchValuationRequest):
        """Value several items independently (e.g. a whole collection)."""
        results = [value_request(service, item, now=request.now) for item in request.items]
        logger.info("Batch valuation of %d items", len(results))
        return {"results": results}

    @app.get("/api/sources")
    def market_sources():
        """Market data providers known to the engine."""
        return {"sources": [p.to_dict() for p in get_active_providers()]}

    @app.get("/api/health")
    def api_health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": APP_VERSION,
            "engine_version": ENGINE_VERSION,
            "environment": "production" if config.production else "development",
        }

    return app


# Create app instance for uvicorn
app = create_app()

"""
Main entry point for the Camp Ecosystem API.

This module initializes the FastAPI application, sets up middleware,
configures routes, and manages the application lifecycle.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from camp_ecosystem import __version__
from camp_ecosystem.api.error_handlers import register_error_handlers
from camp_ecosystem.config import get_server_config
from camp_ecosystem.dependencies import ServiceContainer, build_container
from camp_ecosystem.logging_config import configure_logging
from camp_ecosystem.routes import balances, cache, cron, health, nft, transactions

logger = logging.getLogger(__name__)

# API Documentation tags
tags_metadata = [
    {
        "name": "balances",
        "description": "Token and SOL balances for batches of wallets",
    },
    {
        "name": "nft",
        "description": "NFT counts and compressed NFT collections",
    },
    {
        "name": "transactions",
        "description": "PEcoin transaction history",
    },
    {
        "name": "cache",
        "description": "Server cache statistics and maintenance",
    },
    {
        "name": "cron",
        "description": "Scheduled cache refresh jobs",
    },
    {
        "name": "system",
        "description": "Health checks",
    },
]


def create_application(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        container: Prebuilt services. Built from the environment at startup
            when omitted.

    Returns:
        The configured FastAPI application
    """
    server_config = get_server_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifecycle events."""
        configure_logging(server_config.log_level)

        services = container or build_container()
        app.state.container = services
        await services.cache.start_cleanup_task()

        logger.info("Application initialized successfully")

        yield  # Application is running here

        logger.info("Application shutting down...")
        await services.close()
        logger.info("Shutdown complete")

    app = FastAPI(
        title="Camp Ecosystem API",
        description="Cached balances, NFT counts and transaction history for the camp dashboard.",
        version=__version__,
        openapi_tags=tags_metadata,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        debug=server_config.debug,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register error handlers
    register_error_handlers(app)

    # Register API routers
    api_router = APIRouter(prefix="/api")
    api_router.include_router(balances.router)
    api_router.include_router(nft.router)
    api_router.include_router(transactions.router)
    api_router.include_router(cache.router)
    api_router.include_router(cron.router)
    api_router.include_router(health.router)
    app.include_router(api_router)

    return app


app = create_application()

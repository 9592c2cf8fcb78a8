"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures routes and lifespan events (registry bootstrap).
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from credochain.adapters.clock.system import SystemClock
from credochain.adapters.events.console import ConsoleEventPublisher
from credochain.adapters.repository.memory import InMemoryRegistryRepository
from credochain.adapters.repository.postgres import PostgresRegistryRepository, run_migrations
from credochain.api.v1 import router as v1_router
from credochain.config.settings import get_settings
from credochain.domain.registry import CredentialRegistry

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Credential Registry API v1 - Govern issuers, issue, revoke and verify credentials",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool and runs migrations (if configured)
    - Restores the registry, or deploys a fresh one owned by the deployer
    - Closes connection pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")

    pool = None
    if settings.database_url:
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )
        logger.info("Running database migrations...")
        run_migrations(pool)
        repository = PostgresRegistryRepository(pool)
    else:
        logger.warning("DATABASE_URL not set, registry state is kept in memory only")
        repository = InMemoryRegistryRepository()

    app.state.pool = pool
    app.state.registry = CredentialRegistry.bootstrap(
        repository=repository,
        clock=SystemClock(),
        publisher=ConsoleEventPublisher(),
        deployer=settings.deployer_address,
    )

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="credochain",
    description="Credential Registry API - Trusted issuers mint, revoke and verify credentials",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if the application (and database, when configured) is healthy.
    Raises exception if database connection fails.
    """
    pool = request.app.state.pool
    if pool is not None:
        with pool.connection() as conn:
            conn.execute("SELECT 1")

    return {"status": "healthy"}

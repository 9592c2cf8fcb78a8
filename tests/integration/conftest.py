"""
Shared fixtures for integration tests.

Provides:
- An application client running the real lifespan with the in-memory repository
- A PostgreSQL pool (skipped when no database is reachable)
"""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from psycopg_pool import ConnectionPool, PoolTimeout

from credochain.adapters.repository.postgres import run_migrations
from credochain.api.main import app
from credochain.config.settings import get_settings
from tests.helpers import OWNER, ManualClock


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch) -> Generator[TestClient, None, None]:
    """
    Client for the full application with a fresh in-memory registry.

    The registry's clock is replaced by a ManualClock, reachable as
    ``client.app.state.registry.clock``.
    """
    monkeypatch.setenv("DATABASE_URL", "")
    monkeypatch.setenv("DEPLOYER_ADDRESS", OWNER)
    get_settings.cache_clear()

    with TestClient(app) as test_client:
        app.state.registry.clock = ManualClock()
        yield test_client

    get_settings.cache_clear()


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for integration tests, or skip without a database."""
    settings = get_settings()
    if not settings.database_url:
        pytest.skip("DATABASE_URL not configured")

    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=True,
    )
    try:
        pool.wait(timeout=5)
    except PoolTimeout:
        pool.close()
        pytest.skip("PostgreSQL not reachable")

    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Empty the registry tables before each test."""
    with pool.connection() as conn:
        conn.execute("TRUNCATE credentials, issuers, registry_meta")
        conn.commit()
    yield

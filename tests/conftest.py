"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A manually advanced clock for expiry tests
- A registry wired to the in-memory repository
- A mocked event publisher
"""

from unittest.mock import Mock

import pytest

from credochain.adapters.repository.memory import InMemoryRegistryRepository
from credochain.domain.registry import CredentialRegistry
from tests.helpers import ISSUER_A, OWNER, ManualClock


@pytest.fixture
def clock() -> ManualClock:
    """Manually advanced clock starting at START_TIME."""
    return ManualClock()


@pytest.fixture
def repository() -> InMemoryRegistryRepository:
    """Fresh in-memory repository."""
    return InMemoryRegistryRepository()


@pytest.fixture
def publisher() -> Mock:
    """Event publisher double recording every published event."""
    return Mock()


@pytest.fixture
def registry(
    repository: InMemoryRegistryRepository, clock: ManualClock, publisher: Mock
) -> CredentialRegistry:
    """Freshly deployed registry owned by OWNER."""
    return CredentialRegistry.bootstrap(
        repository=repository, clock=clock, publisher=publisher, deployer=OWNER
    )


@pytest.fixture
def issuing_registry(registry: CredentialRegistry) -> CredentialRegistry:
    """Registry with ISSUER_A approved."""
    registry.add_issuer(OWNER, ISSUER_A)
    return registry

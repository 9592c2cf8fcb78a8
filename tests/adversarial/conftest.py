"""
Shared fixtures for adversarial tests.

Provides common test infrastructure for race condition and authorization
abuse tests.
"""

from unittest.mock import Mock

import pytest

from credochain.adapters.repository.memory import InMemoryRegistryRepository
from credochain.domain.registry import CredentialRegistry
from tests.helpers import ALL_ISSUERS, OWNER, ManualClock

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@pytest.fixture
def repository() -> InMemoryRegistryRepository:
    return InMemoryRegistryRepository()


@pytest.fixture
def registry(repository: InMemoryRegistryRepository) -> CredentialRegistry:
    """Registry with ISSUER_A, ISSUER_B and ISSUER_C approved."""
    registry = CredentialRegistry.bootstrap(
        repository=repository, clock=ManualClock(), publisher=Mock(), deployer=OWNER
    )
    registry.add_issuers(OWNER, ALL_ISSUERS)
    return registry

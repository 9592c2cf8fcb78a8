"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the registry requires
from infrastructure. Adapters implement these protocols.
"""

from collections.abc import Iterable
from enum import Enum
from typing import Any, Protocol

from .credential import Credential, RegistryState


class CredentialState(str, Enum):
    """
    Derived lifecycle state of a credential.

    States are computed on every read from the stored ``revoked`` flag and
    ``expires_at`` compared with the current clock; they are never stored.

    - ACTIVE: not revoked, and either never expires or expires in the future
    - EXPIRED: not revoked, expires_at reached (not sticky, purely time based)
    - REVOKED: revoked by its issuer (sticky, takes precedence over EXPIRED)
    """

    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    REVOKED = "REVOKED"


class RegistryEvent(str, Enum):
    """Events published after each successful registry mutation."""

    OWNERSHIP_TRANSFERRED = "OwnershipTransferred"
    ISSUER_ADDED = "IssuerAdded"
    CREDENTIAL_ISSUED = "CredentialIssued"
    CREDENTIAL_REVOKED = "CredentialRevoked"


class Clock(Protocol):
    """Port interface for the execution environment's clock."""

    def now(self) -> int:
        """Return the current time as unix seconds."""
        ...


class RegistryRepository(Protocol):
    """
    Port interface for registry persistence.

    Each write method must be atomic: either the whole change is durable
    when the method returns, or it raises and nothing was written. The
    registry calls a write method before applying the change in memory.
    """

    def load(self) -> RegistryState | None:
        """
        Load previously persisted registry state.

        Returns:
            The restored state, or None if the registry was never bootstrapped
        """
        ...

    def initialize(self, owner: str) -> None:
        """Persist a fresh registry owned by ``owner`` with no credentials."""
        ...

    def set_owner(self, owner: str) -> None:
        """Persist a new owner (NULL_IDENTITY after renunciation)."""
        ...

    def add_issuers(self, identities: Iterable[str]) -> None:
        """Persist issuer approvals; already approved identities are ignored."""
        ...

    def insert_credential(self, credential: Credential) -> None:
        """
        Persist a newly issued credential and advance the id counter.

        Args:
            credential: Credential whose id is exactly counter + 1
        """
        ...

    def mark_revoked(self, credential_id: int) -> None:
        """Persist revocation of an existing credential."""
        ...


class EventPublisher(Protocol):
    """Port interface for the registry event log."""

    def publish(self, event: RegistryEvent, payload: dict[str, Any]) -> None:
        """
        Publish a registry event.

        Args:
            event: Event kind
            payload: Event fields (identities, credential ids)
        """
        ...

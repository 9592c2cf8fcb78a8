"""
In-memory repository adapter - Implements RegistryRepository protocol.

Keeps its own copy of the registry records for the lifetime of the
process. Used when no database is configured, and as a test double.
"""

import copy
import threading
from collections.abc import Iterable
from dataclasses import replace

from credochain.domain.credential import Credential, RegistryState


class InMemoryRegistryRepository:
    """
    Implements RegistryRepository protocol with process-local storage.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state: RegistryState | None = None

    def load(self) -> RegistryState | None:
        with self._lock:
            # Hand out a copy so the registry and the store never alias
            return copy.deepcopy(self._state)

    def initialize(self, owner: str) -> None:
        with self._lock:
            if self._state is not None:
                raise RuntimeError("Registry already initialized")
            self._state = RegistryState(owner=owner)

    def set_owner(self, owner: str) -> None:
        with self._lock:
            self._require_state().owner = owner

    def add_issuers(self, identities: Iterable[str]) -> None:
        with self._lock:
            self._require_state().issuers.update(identities)

    def insert_credential(self, credential: Credential) -> None:
        with self._lock:
            self._require_state().record(credential)

    def mark_revoked(self, credential_id: int) -> None:
        with self._lock:
            state = self._require_state()
            if not state.has_credential(credential_id):
                raise KeyError(credential_id)
            state.credentials[credential_id] = replace(
                state.credentials[credential_id], revoked=True
            )

    def _require_state(self) -> RegistryState:
        if self._state is None:
            raise RuntimeError("Registry not initialized")
        return self._state

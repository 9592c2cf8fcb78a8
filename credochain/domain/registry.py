"""
Credential registry domain service - issuance and revocation state machine.

This module contains the core business logic of the registry: owner
governance, issuer authorization, credential id allocation, expiry
evaluation and revocation.

Credential State Machine (derived, never stored)
================================================

States:
- ACTIVE: issued, not revoked, not past expiry
- EXPIRED: expires_at != 0 and expires_at <= now (purely a function of time)
- REVOKED: revoked by its issuer (sticky, wins over EXPIRED)

Transitions:
    (issue)  -> ACTIVE, or EXPIRED if issued with a past expiry
    ACTIVE   -> EXPIRED   (clock passes expires_at, no write occurs)
    ACTIVE   -> REVOKED   (revoke_credential by the issuing issuer)
    EXPIRED  -> REVOKED   (revoke_credential by the issuing issuer)

Invalid Transitions (never allowed):
    REVOKED -> any        (revocation cannot be undone)

Governance is monotone as well: issuers are never removed, credentials are
never deleted, and a renounced owner can never be restored.

Every operation runs under a single re-entrant lock. A mutation performs its
authorization check, persists through the repository, and only then applies
the change in memory, so a rejected call or a failed write leaves no trace
and readers never observe a half-applied change.
"""

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Any

from .credential import (
    NEVER_EXPIRES,
    NULL_IDENTITY,
    Credential,
    RegistryState,
    normalize_identity,
)
from .exceptions import InvalidArgument, NotFound, Unauthorized
from .ports import Clock, CredentialState, EventPublisher, RegistryEvent, RegistryRepository

logger = logging.getLogger(__name__)


@dataclass
class CredentialRegistry:
    """
    Domain service owning the registry state.

    Callers identify themselves explicitly: every mutating operation takes
    the authenticated caller identity as its first argument.
    """

    state: RegistryState
    repository: RegistryRepository
    clock: Clock
    publisher: EventPublisher
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    @classmethod
    def bootstrap(
        cls,
        repository: RegistryRepository,
        clock: Clock,
        publisher: EventPublisher,
        deployer: str,
    ) -> "CredentialRegistry":
        """
        Restore the registry from the repository, or deploy a fresh one.

        A fresh registry is owned by ``deployer``. An existing registry keeps
        its persisted owner, even if that owner was renounced.

        Args:
            repository: Persistence adapter
            clock: Time source for issued_at and expiry checks
            publisher: Event log adapter
            deployer: Identity that becomes owner of a fresh registry

        Returns:
            Ready-to-use registry
        """
        state = repository.load()
        if state is None:
            owner = normalize_identity(deployer)
            if owner in ("", NULL_IDENTITY):
                raise InvalidArgument("Deployer must be a real identity")
            repository.initialize(owner)
            state = RegistryState(owner=owner)
            logger.info("Deployed new registry owned by %s", owner)
        else:
            logger.info(
                "Restored registry: owner=%s issuers=%d credentials=%d",
                state.owner,
                len(state.issuers),
                state.credential_count,
            )
        return cls(state=state, repository=repository, clock=clock, publisher=publisher)

    # ------------------------------------------------------------------
    # Governance
    # ------------------------------------------------------------------

    def get_owner(self) -> str:
        with self._lock:
            return self.state.owner

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        """
        Hand the owner role to another identity.

        Raises:
            Unauthorized: If caller is not the current owner
            InvalidArgument: If new_owner is the null identity
        """
        caller = normalize_identity(caller)
        new_owner = normalize_identity(new_owner)
        with self._lock:
            self._require_owner(caller, "transfer ownership")
            if new_owner in ("", NULL_IDENTITY):
                raise InvalidArgument("New owner is the zero address")
            self._set_owner(new_owner)

    def renounce_ownership(self, caller: str) -> None:
        """
        Give up the owner role permanently.

        After this no owner-gated operation can succeed again.

        Raises:
            Unauthorized: If caller is not the current owner
        """
        caller = normalize_identity(caller)
        with self._lock:
            self._require_owner(caller, "renounce ownership")
            self._set_owner(NULL_IDENTITY)

    def add_issuer(self, caller: str, identity: str) -> None:
        """Approve a single issuer. Approving an existing issuer is a no-op."""
        self.add_issuers(caller, [identity])

    def add_issuers(self, caller: str, identities: Iterable[str]) -> None:
        """
        Approve several issuers at once.

        The owner check runs once, before the identities are read or anything
        is written.

        Raises:
            TypeError: If identities is a single string rather than a collection
            Unauthorized: If caller is not the current owner
        """
        if isinstance(identities, str):
            raise TypeError("identities must be a collection of identities, not a string")
        caller = normalize_identity(caller)
        with self._lock:
            self._require_owner(caller, "add issuers")
            # Deduplicate while keeping the caller's order for the event log
            approved = list(dict.fromkeys(normalize_identity(i) for i in identities))
            self.repository.add_issuers(approved)
            self.state.issuers.update(approved)
            for identity in approved:
                logger.info("Issuer approved: %s", identity)
                self._publish(RegistryEvent.ISSUER_ADDED, {"identity": identity})

    def is_issuer(self, identity: str) -> bool:
        with self._lock:
            return normalize_identity(identity) in self.state.issuers

    # ------------------------------------------------------------------
    # Issuance and revocation
    # ------------------------------------------------------------------

    def issue_credential(self, caller: str, subject: str, ipfs_hash: str) -> int:
        """
        Issue a credential that never expires.

        Args:
            caller: Approved issuer identity
            subject: Identity the credential is about (not validated)
            ipfs_hash: Opaque content pointer, stored verbatim

        Returns:
            The new credential id

        Raises:
            Unauthorized: If caller is not an approved issuer
        """
        return self._issue(caller, subject, ipfs_hash, NEVER_EXPIRES)

    def issue_credential_with_expiry(
        self, caller: str, subject: str, ipfs_hash: str, expires_at: int
    ) -> int:
        """
        Issue a credential that expires at ``expires_at`` (unix seconds).

        A past expiry is accepted and yields an already-expired credential.
        An expiry of 0 means the credential never expires.
        """
        return self._issue(caller, subject, ipfs_hash, expires_at)

    def revoke_credential(self, caller: str, credential_id: int) -> None:
        """
        Revoke a credential. Only its original issuer may do so.

        Revoking an already revoked credential succeeds without change.

        Raises:
            NotFound: If credential_id is outside 1..total
            Unauthorized: If caller is not the credential's issuer
        """
        caller = normalize_identity(caller)
        with self._lock:
            credential = self._get(credential_id)
            if credential.issuer != caller:
                logger.warning(
                    "Rejected revoke of credential %d by %s (issuer is %s)",
                    credential_id,
                    caller,
                    credential.issuer,
                )
                raise Unauthorized("Only the issuer can revoke this credential")
            if credential.revoked:
                return
            self.repository.mark_revoked(credential_id)
            self.state.credentials[credential_id] = replace(credential, revoked=True)
            logger.info("Credential %d revoked by %s", credential_id, caller)
            self._publish(
                RegistryEvent.CREDENTIAL_REVOKED, {"id": credential_id, "issuer": caller}
            )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def verify_credential(self, credential_id: int) -> Credential:
        """
        Return the full credential record.

        Raises:
            NotFound: If credential_id is outside 1..total
        """
        with self._lock:
            return self._get(credential_id)

    def is_credential_valid(self, credential_id: int) -> bool:
        """
        Check validity against the clock at the time of the call.

        False for unknown ids, revoked credentials and credentials whose
        expiry has been reached; True otherwise. Never cached.
        """
        return self.check_credential(credential_id) is CredentialState.ACTIVE

    def check_credential(self, credential_id: int) -> CredentialState | None:
        """
        Derive the state of a credential in one read, or None if unknown.

        The clock is read once, so validity and state always agree.
        """
        with self._lock:
            if not self.state.has_credential(credential_id):
                return None
            return self._state_of(self.state.credentials[credential_id])

    def get_credential_state(self, credential_id: int) -> CredentialState:
        """
        Derive the lifecycle state of a credential.

        Raises:
            NotFound: If credential_id is outside 1..total
        """
        with self._lock:
            return self._state_of(self._get(credential_id))

    def get_credentials_by_issuer(self, identity: str) -> list[int]:
        """Ids issued by ``identity`` in issuance order (empty if none)."""
        with self._lock:
            return list(self.state.issuer_index.get(normalize_identity(identity), []))

    def get_total_credentials(self) -> int:
        with self._lock:
            return self.state.credential_count

    # ------------------------------------------------------------------
    # Internals (callers hold the lock)
    # ------------------------------------------------------------------

    def _issue(self, caller: str, subject: str, ipfs_hash: str, expires_at: int) -> int:
        caller = normalize_identity(caller)
        with self._lock:
            if caller not in self.state.issuers:
                logger.warning("Rejected issuance by non-issuer %s", caller)
                raise Unauthorized("Caller is not an approved issuer")

            credential = Credential(
                id=self.state.credential_count + 1,
                issuer=caller,
                subject=normalize_identity(subject),
                ipfs_hash=ipfs_hash,
                issued_at=self.clock.now(),
                expires_at=expires_at,
            )
            self.repository.insert_credential(credential)
            self.state.record(credential)

            logger.info(
                "Credential %d issued by %s to %s (expires_at=%d)",
                credential.id,
                caller,
                credential.subject,
                expires_at,
            )
            self._publish(
                RegistryEvent.CREDENTIAL_ISSUED,
                {"id": credential.id, "issuer": caller, "subject": credential.subject},
            )
            return credential.id

    def _get(self, credential_id: int) -> Credential:
        if not self.state.has_credential(credential_id):
            raise NotFound(credential_id)
        return self.state.credentials[credential_id]

    def _state_of(self, credential: Credential) -> CredentialState:
        if credential.revoked:
            return CredentialState.REVOKED
        if credential.is_expired(self.clock.now()):
            return CredentialState.EXPIRED
        return CredentialState.ACTIVE

    def _publish(self, event: RegistryEvent, payload: dict[str, Any]) -> None:
        # Mutation is already committed; publisher failures are logged, not raised
        try:
            self.publisher.publish(event, payload)
        except Exception:
            logger.exception("Failed to publish %s %s", event.value, payload)

    def _require_owner(self, caller: str, action: str) -> None:
        # A renounced registry has NULL_IDENTITY as owner, which nobody can act as
        if self.state.owner == NULL_IDENTITY or caller != self.state.owner:
            logger.warning("Rejected attempt by %s to %s", caller, action)
            raise Unauthorized(f"Only the owner can {action}")

    def _set_owner(self, new_owner: str) -> None:
        previous_owner = self.state.owner
        self.repository.set_owner(new_owner)
        self.state.owner = new_owner
        logger.info("Ownership transferred from %s to %s", previous_owner, new_owner)
        self._publish(
            RegistryEvent.OWNERSHIP_TRANSFERRED,
            {"previous_owner": previous_owner, "new_owner": new_owner},
        )

"""
Credential records and registry state.

Plain dataclasses holding everything the registry owns: the owner, the
approved issuer set, the credential table, the per-issuer index and the
id counter.
"""

from dataclasses import dataclass, field

NULL_IDENTITY = "0x0000000000000000000000000000000000000000"

# expires_at value for credentials that never expire
NEVER_EXPIRES = 0


def normalize_identity(identity: str) -> str:
    """
    Normalize an address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return identity.strip().lower()


@dataclass(frozen=True)
class Credential:
    """An issued credential. Only ``revoked`` ever changes after issuance."""

    id: int
    issuer: str
    subject: str
    ipfs_hash: str
    issued_at: int
    expires_at: int = NEVER_EXPIRES
    revoked: bool = False

    @property
    def never_expires(self) -> bool:
        return self.expires_at == NEVER_EXPIRES

    def is_expired(self, now: int) -> bool:
        """Expiry is reached once the clock is at or past expires_at."""
        return not self.never_expires and self.expires_at <= now


@dataclass
class RegistryState:
    """
    Mutable registry state.

    Invariants maintained by ``record``:
    - credential ids are exactly 1..credential_count
    - issuer_index[issuer] lists that issuer's ids in issuance order
    """

    owner: str
    issuers: set[str] = field(default_factory=set)
    credentials: dict[int, Credential] = field(default_factory=dict)
    issuer_index: dict[str, list[int]] = field(default_factory=dict)
    credential_count: int = 0

    def has_credential(self, credential_id: int) -> bool:
        return 1 <= credential_id <= self.credential_count

    def record(self, credential: Credential) -> None:
        """Append a newly issued credential and advance the counter."""
        if credential.id != self.credential_count + 1:
            raise ValueError(
                f"Credential id {credential.id} does not follow {self.credential_count}"
            )
        self.credentials[credential.id] = credential
        self.issuer_index.setdefault(credential.issuer, []).append(credential.id)
        self.credential_count = credential.id

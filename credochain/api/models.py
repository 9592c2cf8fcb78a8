"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from typing import Annotated

from pydantic import BaseModel, Field

from credochain.domain.credential import Credential
from credochain.domain.ports import CredentialState

ADDRESS_PATTERN = r"^0x[0-9a-fA-F]{40}$"

Address = Annotated[
    str,
    Field(pattern=ADDRESS_PATTERN, description="0x-prefixed 20-byte hex address"),
]


class TransferOwnershipRequest(BaseModel):
    """Request model for ownership transfer."""

    new_owner: Address


class OwnerResponse(BaseModel):
    """Current registry owner (zero address once renounced)."""

    owner: str


class AddIssuerRequest(BaseModel):
    """Request model for approving a single issuer."""

    identity: Address


class AddIssuersRequest(BaseModel):
    """Request model for approving several issuers at once."""

    identities: list[Address] = Field(..., min_length=1)


class IssuersResponse(BaseModel):
    """Addresses approved by the request."""

    identities: list[str]


class IssuerStatusResponse(BaseModel):
    """Whether an address is an approved issuer."""

    identity: str
    approved: bool


class IssueCredentialRequest(BaseModel):
    """Request model for issuing a credential."""

    subject: Address
    ipfs_hash: str = Field(..., description="Opaque content pointer, stored verbatim")
    expires_at: int | None = Field(
        default=None,
        ge=0,
        description="Expiry as unix seconds; omit or 0 for a credential that never expires",
    )


class IssueCredentialResponse(BaseModel):
    """Response model for a newly issued credential."""

    id: int


class CredentialResponse(BaseModel):
    """Full credential record."""

    id: int
    issuer: str
    subject: str
    ipfs_hash: str
    issued_at: int
    expires_at: int
    revoked: bool

    @classmethod
    def from_credential(cls, credential: Credential) -> "CredentialResponse":
        return cls(
            id=credential.id,
            issuer=credential.issuer,
            subject=credential.subject,
            ipfs_hash=credential.ipfs_hash,
            issued_at=credential.issued_at,
            expires_at=credential.expires_at,
            revoked=credential.revoked,
        )


class ValidityResponse(BaseModel):
    """Validity of a credential at request time."""

    id: int
    valid: bool
    state: CredentialState | None = Field(
        default=None, description="Derived state; null for unknown ids"
    )


class IssuerCredentialsResponse(BaseModel):
    """Credential ids issued by an address, in issuance order."""

    issuer: str
    credential_ids: list[int]


class TotalCredentialsResponse(BaseModel):
    """Number of credentials issued so far."""

    total: int


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str

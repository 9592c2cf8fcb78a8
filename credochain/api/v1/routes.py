"""
API v1 routes.

Defines REST endpoints for the credential registry: ownership governance,
issuer management, credential issuance, revocation and verification.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, status

from credochain.api.dependencies import get_caller, get_registry
from credochain.api.models import (
    ADDRESS_PATTERN,
    AddIssuerRequest,
    AddIssuersRequest,
    CredentialResponse,
    ErrorResponse,
    IssueCredentialRequest,
    IssueCredentialResponse,
    IssuerCredentialsResponse,
    IssuersResponse,
    IssuerStatusResponse,
    OwnerResponse,
    TotalCredentialsResponse,
    TransferOwnershipRequest,
    ValidityResponse,
)
from credochain.domain.exceptions import InvalidArgument, NotFound, RegistryError, Unauthorized
from credochain.domain.ports import CredentialState
from credochain.domain.registry import CredentialRegistry

router = APIRouter(tags=["v1"])

AddressPath = Annotated[str, Path(pattern=ADDRESS_PATTERN)]
CredentialIdPath = Annotated[int, Path(description="Credential id")]

_UNAUTHORIZED = {401: {"model": ErrorResponse, "description": "Missing caller identity"}}
_FORBIDDEN = {403: {"model": ErrorResponse, "description": "Caller lacks the required role"}}
_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Credential not found"}}


def _http_error(exc: RegistryError) -> HTTPException:
    """Translate a domain error into its HTTP status."""
    if isinstance(exc, Unauthorized):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, NotFound):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, InvalidArgument):
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(exc))


# ----------------------------------------------------------------------
# Governance
# ----------------------------------------------------------------------


@router.get("/owner", response_model=OwnerResponse, summary="Get the registry owner")
async def get_owner(
    registry: CredentialRegistry = Depends(get_registry),
) -> OwnerResponse:
    return OwnerResponse(owner=registry.get_owner())


@router.post(
    "/ownership/transfer",
    response_model=OwnerResponse,
    responses={**_UNAUTHORIZED, **_FORBIDDEN, 400: {"model": ErrorResponse}},
    summary="Transfer registry ownership",
)
async def transfer_ownership(
    request_data: TransferOwnershipRequest,
    caller: str = Depends(get_caller),
    registry: CredentialRegistry = Depends(get_registry),
) -> OwnerResponse:
    """Hand the owner role to another address. Owner only."""
    try:
        registry.transfer_ownership(caller, request_data.new_owner)
    except RegistryError as exc:
        raise _http_error(exc) from None
    return OwnerResponse(owner=registry.get_owner())


@router.post(
    "/ownership/renounce",
    response_model=OwnerResponse,
    responses={**_UNAUTHORIZED, **_FORBIDDEN},
    summary="Renounce registry ownership",
    description="Permanently give up the owner role. No issuer can be added afterwards.",
)
async def renounce_ownership(
    caller: str = Depends(get_caller),
    registry: CredentialRegistry = Depends(get_registry),
) -> OwnerResponse:
    try:
        registry.renounce_ownership(caller)
    except RegistryError as exc:
        raise _http_error(exc) from None
    return OwnerResponse(owner=registry.get_owner())


@router.post(
    "/issuers",
    response_model=IssuersResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_UNAUTHORIZED, **_FORBIDDEN},
    summary="Approve an issuer",
)
async def add_issuer(
    request_data: AddIssuerRequest,
    caller: str = Depends(get_caller),
    registry: CredentialRegistry = Depends(get_registry),
) -> IssuersResponse:
    try:
        registry.add_issuer(caller, request_data.identity)
    except RegistryError as exc:
        raise _http_error(exc) from None
    return IssuersResponse(identities=[request_data.identity.lower()])


@router.post(
    "/issuers/batch",
    response_model=IssuersResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_UNAUTHORIZED, **_FORBIDDEN},
    summary="Approve several issuers",
)
async def add_issuers(
    request_data: AddIssuersRequest,
    caller: str = Depends(get_caller),
    registry: CredentialRegistry = Depends(get_registry),
) -> IssuersResponse:
    try:
        registry.add_issuers(caller, request_data.identities)
    except RegistryError as exc:
        raise _http_error(exc) from None
    return IssuersResponse(identities=[identity.lower() for identity in request_data.identities])


@router.get(
    "/issuers/{identity}",
    response_model=IssuerStatusResponse,
    summary="Check issuer approval",
)
async def get_issuer_status(
    identity: AddressPath,
    registry: CredentialRegistry = Depends(get_registry),
) -> IssuerStatusResponse:
    return IssuerStatusResponse(identity=identity.lower(), approved=registry.is_issuer(identity))


@router.get(
    "/issuers/{identity}/credentials",
    response_model=IssuerCredentialsResponse,
    summary="List credentials issued by an address",
)
async def get_credentials_by_issuer(
    identity: AddressPath,
    registry: CredentialRegistry = Depends(get_registry),
) -> IssuerCredentialsResponse:
    """Credential ids in issuance order; empty if the address never issued."""
    return IssuerCredentialsResponse(
        issuer=identity.lower(),
        credential_ids=registry.get_credentials_by_issuer(identity),
    )


# ----------------------------------------------------------------------
# Credentials
# ----------------------------------------------------------------------


@router.post(
    "/credentials",
    response_model=IssueCredentialResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_UNAUTHORIZED, **_FORBIDDEN, 422: {"description": "Validation error"}},
    summary="Issue a credential",
    description="Issue a credential to a subject. The caller must be an approved issuer. "
    "When expires_at is given the credential expires at that unix time; "
    "a past expiry is accepted and yields an already expired credential.",
)
async def issue_credential(
    request_data: IssueCredentialRequest,
    caller: str = Depends(get_caller),
    registry: CredentialRegistry = Depends(get_registry),
) -> IssueCredentialResponse:
    try:
        if request_data.expires_at is None:
            credential_id = registry.issue_credential(
                caller, request_data.subject, request_data.ipfs_hash
            )
        else:
            credential_id = registry.issue_credential_with_expiry(
                caller, request_data.subject, request_data.ipfs_hash, request_data.expires_at
            )
    except RegistryError as exc:
        raise _http_error(exc) from None
    return IssueCredentialResponse(id=credential_id)


# Declared before /credentials/{credential_id} so "count" is not parsed as an id
@router.get(
    "/credentials/count",
    response_model=TotalCredentialsResponse,
    summary="Count issued credentials",
)
async def get_total_credentials(
    registry: CredentialRegistry = Depends(get_registry),
) -> TotalCredentialsResponse:
    return TotalCredentialsResponse(total=registry.get_total_credentials())


@router.get(
    "/credentials/{credential_id}",
    response_model=CredentialResponse,
    responses=_NOT_FOUND,
    summary="Verify a credential",
    description="Return the full credential record, including revocation status.",
)
async def verify_credential(
    credential_id: CredentialIdPath,
    registry: CredentialRegistry = Depends(get_registry),
) -> CredentialResponse:
    try:
        credential = registry.verify_credential(credential_id)
    except RegistryError as exc:
        raise _http_error(exc) from None
    return CredentialResponse.from_credential(credential)


@router.get(
    "/credentials/{credential_id}/validity",
    response_model=ValidityResponse,
    summary="Check credential validity",
    description="Valid means issued, not revoked, and not past expiry at request time. "
    "Unknown ids are reported as invalid rather than 404.",
)
async def check_validity(
    credential_id: CredentialIdPath,
    registry: CredentialRegistry = Depends(get_registry),
) -> ValidityResponse:
    state = registry.check_credential(credential_id)
    return ValidityResponse(id=credential_id, valid=state is CredentialState.ACTIVE, state=state)


@router.post(
    "/credentials/{credential_id}/revoke",
    response_model=CredentialResponse,
    responses={**_UNAUTHORIZED, **_FORBIDDEN, **_NOT_FOUND},
    summary="Revoke a credential",
    description="Only the issuer of the credential may revoke it. Revocation is permanent.",
)
async def revoke_credential(
    credential_id: CredentialIdPath,
    caller: str = Depends(get_caller),
    registry: CredentialRegistry = Depends(get_registry),
) -> CredentialResponse:
    try:
        registry.revoke_credential(caller, credential_id)
        credential = registry.verify_credential(credential_id)
    except RegistryError as exc:
        raise _http_error(exc) from None
    return CredentialResponse.from_credential(credential)

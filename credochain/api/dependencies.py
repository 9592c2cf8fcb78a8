"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting the registry
domain service and the authenticated caller identity into routes.
"""

import re

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

from credochain.api.models import ADDRESS_PATTERN
from credochain.domain.registry import CredentialRegistry

CALLER_HEADER = "X-Caller-Address"


def get_registry(request: Request) -> CredentialRegistry:
    """
    Get the registry from app state.

    The registry is bootstrapped during app lifespan startup and stored in
    app.state. There is exactly one registry per process.
    """
    return request.app.state.registry


# Caller identity security scheme for OpenAPI documentation.
# The header is set by the authenticating gateway in front of this service.
caller_header = APIKeyHeader(name=CALLER_HEADER, auto_error=False)


def get_caller(caller: str | None = Depends(caller_header)) -> str:
    """
    Extract and normalize the caller identity from the request header.

    Returns:
        Lowercased caller address

    Raises:
        HTTPException: 401 if the header is missing or not an address
    """
    if caller is None or not re.match(ADDRESS_PATTERN, caller.strip()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid caller identity",
        )
    return caller.strip().lower()

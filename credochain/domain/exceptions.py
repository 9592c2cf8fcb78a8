"""
Domain exceptions - Semantic error types for the credential registry.

This module defines domain-specific exceptions that communicate
authorization and lookup failures without leaking infrastructure details.
Every exception is raised before any state is mutated.
"""


class RegistryError(Exception):
    """Base class for credential registry domain errors."""

    pass


class Unauthorized(RegistryError):
    """Caller lacks the owner, issuer, or credential-issuer role."""

    pass


class NotFound(RegistryError):
    """Credential id is outside the issued range 1..total."""

    def __init__(self, credential_id: int) -> None:
        super().__init__(f"Credential {credential_id} not found")
        self.credential_id = credential_id


class InvalidArgument(RegistryError):
    """Null identity supplied where a real identity is required."""

    pass

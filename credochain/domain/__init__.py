"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for the credential registry
state machine. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .credential import NEVER_EXPIRES, NULL_IDENTITY, Credential, RegistryState
from .exceptions import InvalidArgument, NotFound, RegistryError, Unauthorized
from .ports import (
    Clock,
    CredentialState,
    EventPublisher,
    RegistryEvent,
    RegistryRepository,
)
from .registry import CredentialRegistry

__all__ = [
    "NEVER_EXPIRES",
    "NULL_IDENTITY",
    "Clock",
    "Credential",
    "CredentialRegistry",
    "CredentialState",
    "EventPublisher",
    "InvalidArgument",
    "NotFound",
    "RegistryError",
    "RegistryEvent",
    "RegistryRepository",
    "RegistryState",
    "Unauthorized",
]

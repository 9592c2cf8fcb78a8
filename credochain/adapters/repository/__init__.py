"""Repository adapters - Registry persistence implementations."""

from .memory import InMemoryRegistryRepository
from .postgres import PostgresRegistryRepository, run_migrations

__all__ = ["InMemoryRegistryRepository", "PostgresRegistryRepository", "run_migrations"]

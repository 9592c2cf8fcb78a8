"""
PostgreSQL repository adapter - Implements RegistryRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Persisted layout
----------------
- registry_meta: singleton row (id = 1) with the owner and the id counter
- issuers: one row per approved issuer (add-only)
- credentials: one row per credential, keyed by id; the per-issuer index is
  served by the (issuer, id) index in id order

Write Discipline
----------------
Each write method runs in a single transaction. Credential insertion
advances the counter with a compare-and-set on the previous value, so a
second process writing to the same database fails instead of silently
allocating a duplicate id. The primary key on credentials.id backs this up.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from psycopg_pool import ConnectionPool

from credochain.domain.credential import Credential, RegistryState

logger = logging.getLogger(__name__)


class PostgresRegistryRepository:
    """
    Implements RegistryRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def load(self) -> RegistryState | None:
        """
        Rebuild registry state from the database.

        Credentials are replayed in id order, which reproduces the
        per-issuer index in issuance order.

        Returns:
            Restored state, or None if registry_meta has no row yet
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("SELECT owner, credential_count FROM registry_meta WHERE id = 1")
            meta = cursor.fetchone()
            if meta is None:
                return None

            state = RegistryState(owner=meta[0])

            cursor.execute("SELECT identity FROM issuers")
            state.issuers.update(row[0] for row in cursor.fetchall())

            cursor.execute(
                """
                SELECT id, issuer, subject, ipfs_hash, issued_at, expires_at, revoked
                FROM credentials
                ORDER BY id
                """
            )
            for row in cursor.fetchall():
                state.record(
                    Credential(
                        id=row[0],
                        issuer=row[1],
                        subject=row[2],
                        ipfs_hash=row[3],
                        issued_at=row[4],
                        expires_at=row[5],
                        revoked=row[6],
                    )
                )

        if state.credential_count != meta[1]:
            raise RuntimeError(
                f"Credential counter {meta[1]} does not match "
                f"{state.credential_count} stored credentials"
            )
        return state

    def initialize(self, owner: str) -> None:
        """Insert the registry_meta row for a freshly deployed registry."""
        sql = """
            INSERT INTO registry_meta (id, owner, credential_count)
            VALUES (1, %s, 0)
            ON CONFLICT (id) DO NOTHING
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (owner,))
            if cursor.rowcount != 1:
                raise RuntimeError("Registry already initialized")
            conn.commit()

    def set_owner(self, owner: str) -> None:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("UPDATE registry_meta SET owner = %s WHERE id = 1", (owner,))
            if cursor.rowcount != 1:
                raise RuntimeError("Registry not initialized")
            conn.commit()

    def add_issuers(self, identities: Iterable[str]) -> None:
        """Insert issuer rows; existing issuers are left untouched."""
        params = [(identity,) for identity in identities]
        if not params:
            return
        sql = """
            INSERT INTO issuers (identity, added_at)
            VALUES (%s, NOW())
            ON CONFLICT (identity) DO NOTHING
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.executemany(sql, params)
            conn.commit()

    def insert_credential(self, credential: Credential) -> None:
        """
        Insert a credential and advance the counter in one transaction.

        Raises:
            RuntimeError: If the stored counter is not credential.id - 1
        """
        counter_sql = """
            UPDATE registry_meta
            SET credential_count = %s
            WHERE id = 1 AND credential_count = %s
        """
        insert_sql = """
            INSERT INTO credentials (id, issuer, subject, ipfs_hash, issued_at, expires_at, revoked)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(counter_sql, (credential.id, credential.id - 1))
            if cursor.rowcount != 1:
                raise RuntimeError(
                    f"Credential counter moved: cannot allocate id {credential.id}"
                )
            cursor.execute(
                insert_sql,
                (
                    credential.id,
                    credential.issuer,
                    credential.subject,
                    credential.ipfs_hash,
                    credential.issued_at,
                    credential.expires_at,
                    credential.revoked,
                ),
            )
            conn.commit()

    def mark_revoked(self, credential_id: int) -> None:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                "UPDATE credentials SET revoked = TRUE WHERE id = %s", (credential_id,)
            )
            if cursor.rowcount != 1:
                raise KeyError(credential_id)
            conn.commit()


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: credochain/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e

"""
Shared async Postgres connection handling.

Every Postgres-backed store (fragments, documents, summaries) owns one
psycopg AsyncConnection with pgvector types registered. Connections are
opened lazily on first use and can be shared by passing the same
connection to several stores.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import psycopg
from pgvector.psycopg import register_vector_async

from medreport_rag.core.errors import PersistenceError

logger = logging.getLogger(__name__)


class PgConnectionOwner:
    """Base class for stores backed by a single async Postgres connection."""

    def __init__(
        self,
        connection_string: str,
        connection: psycopg.AsyncConnection | None = None,
    ):
        self.connection_string = connection_string
        self._conn = connection
        self._owns_connection = connection is None

    async def connect(self) -> None:
        """Establish database connection."""
        if self._conn is not None:
            return
        try:
            self._conn = await psycopg.AsyncConnection.connect(
                self.connection_string, autocommit=True
            )
            await self._conn.execute("CREATE EXTENSION IF NOT EXISTS vector")
            await register_vector_async(self._conn)
        except psycopg.Error as e:
            self._conn = None
            raise PersistenceError(f"Could not connect to database: {e}") from e
        self._owns_connection = True

    async def close(self) -> None:
        """Close database connection."""
        if self._conn is not None and self._owns_connection:
            await self._conn.close()
        self._conn = None

    async def _connection(self) -> psycopg.AsyncConnection:
        if self._conn is None:
            await self.connect()
        return self._conn

    @asynccontextmanager
    async def _guard(self, action: str) -> AsyncIterator[None]:
        """Translate driver errors into PersistenceError."""
        try:
            yield
        except psycopg.Error as e:
            logger.error(f"Database error while {action}: {e}")
            raise PersistenceError(f"Database error while {action}: {e}") from e

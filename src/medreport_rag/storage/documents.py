"""
Document (report) repositories.

Status transitions are written only by the summarization orchestrator;
upload and deletion belong to the outer application.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import psycopg

from medreport_rag.core.errors import PersistenceError
from medreport_rag.core.protocols import Document, DocumentStatus, ReportCategory
from medreport_rag.storage.database import PgConnectionOwner


class PgDocumentRepository(PgConnectionOwner):
    """Reports table in Postgres."""

    def __init__(
        self,
        connection_string: str,
        connection: psycopg.AsyncConnection | None = None,
        table_name: str = "reports",
    ):
        super().__init__(connection_string, connection)
        self.table_name = table_name

    async def create_schema(self) -> None:
        conn = await self._connection()
        async with self._guard("creating reports schema"):
            await conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self.table_name} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    patient_name TEXT NOT NULL,
                    patient_id TEXT,
                    report_type TEXT NOT NULL,
                    file_name TEXT NOT NULL,
                    file_url TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'uploaded'
                        CHECK (status IN ('uploaded', 'processing', 'completed', 'failed')),
                    uploaded_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                    processed_at TIMESTAMPTZ
                )
                """
            )

    async def add(self, document: Document) -> None:
        """Register a report. Used by the CLI and tests; uploads are external."""
        conn = await self._connection()
        async with self._guard(f"adding report {document.id}"):
            await conn.execute(
                f"""
                INSERT INTO {self.table_name}
                    (id, user_id, patient_name, patient_id, report_type,
                     file_name, file_url, status)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    document.id,
                    document.owner_id,
                    document.patient_name,
                    document.patient_id,
                    document.category.value,
                    document.file_name,
                    document.file_url,
                    document.status.value,
                ),
            )

    async def get(self, document_id: str) -> Document | None:
        conn = await self._connection()
        async with self._guard(f"loading report {document_id}"):
            cur = await conn.execute(
                f"""
                SELECT id, user_id, file_url, file_name, report_type,
                       patient_name, patient_id, status, uploaded_at, processed_at
                FROM {self.table_name}
                WHERE id = %s
                """,
                (document_id,),
            )
            row = await cur.fetchone()

        if row is None:
            return None

        return Document(
            id=row[0],
            owner_id=row[1],
            file_url=row[2],
            file_name=row[3],
            category=ReportCategory(row[4]),
            patient_name=row[5],
            patient_id=row[6],
            status=DocumentStatus(row[7]),
            uploaded_at=row[8],
            processed_at=row[9],
        )

    async def set_status(
        self,
        document_id: str,
        status: DocumentStatus,
        processed_at: datetime | None = None,
    ) -> None:
        conn = await self._connection()
        async with self._guard(f"updating status of {document_id}"):
            cur = await conn.execute(
                f"""
                UPDATE {self.table_name}
                SET status = %s, processed_at = COALESCE(%s, processed_at)
                WHERE id = %s
                """,
                (status.value, processed_at, document_id),
            )
        if cur.rowcount == 0:
            raise PersistenceError(f"No report with id {document_id}")


class InMemoryDocumentRepository:
    """In-memory reports table for testing/development."""

    def __init__(self, documents: list[Document] | None = None):
        self._documents: dict[str, Document] = {d.id: d for d in documents or []}
        self.status_history: dict[str, list[DocumentStatus]] = {}

    async def connect(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def create_schema(self) -> None:
        pass

    async def add(self, document: Document) -> None:
        self._documents[document.id] = document

    async def get(self, document_id: str) -> Document | None:
        document = self._documents.get(document_id)
        # Copies, so callers never mutate the stored row
        return replace(document) if document else None

    async def set_status(
        self,
        document_id: str,
        status: DocumentStatus,
        processed_at: datetime | None = None,
    ) -> None:
        document = self._documents.get(document_id)
        if document is None:
            raise PersistenceError(f"No report with id {document_id}")
        self._documents[document_id] = replace(
            document,
            status=status,
            processed_at=processed_at or document.processed_at,
        )
        self.status_history.setdefault(document_id, []).append(status)

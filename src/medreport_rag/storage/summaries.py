"""
Summary stores - one summary per report, written with upsert semantics.

Regeneration overwrites the previous summary; the unique constraint on
report_id makes concurrent regenerations converge to a single row.
"""

from __future__ import annotations

import psycopg
from psycopg.types.json import Jsonb

from medreport_rag.schemas.summary import ReportSummary
from medreport_rag.storage.database import PgConnectionOwner


class PgSummaryStore(PgConnectionOwner):
    """Summaries table in Postgres."""

    def __init__(
        self,
        connection_string: str,
        connection: psycopg.AsyncConnection | None = None,
        table_name: str = "summaries",
        documents_table: str = "reports",
    ):
        super().__init__(connection_string, connection)
        self.table_name = table_name
        self.documents_table = documents_table

    async def create_schema(self) -> None:
        conn = await self._connection()
        async with self._guard("creating summaries schema"):
            await conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self.table_name} (
                    id BIGSERIAL PRIMARY KEY,
                    report_id TEXT NOT NULL UNIQUE
                        REFERENCES {self.documents_table}(id) ON DELETE CASCADE,
                    key_findings TEXT[] NOT NULL,
                    reasoning_steps JSONB NOT NULL,
                    recommendations TEXT[] NOT NULL,
                    full_summary TEXT NOT NULL,
                    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                    updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
                )
                """
            )

    async def upsert(self, summary: ReportSummary) -> None:
        conn = await self._connection()
        async with self._guard(f"upserting summary of {summary.document_id}"):
            await conn.execute(
                f"""
                INSERT INTO {self.table_name}
                    (report_id, key_findings, reasoning_steps, recommendations, full_summary)
                VALUES (%s, %s, %s, %s, %s)
                ON CONFLICT (report_id) DO UPDATE SET
                    key_findings = EXCLUDED.key_findings,
                    reasoning_steps = EXCLUDED.reasoning_steps,
                    recommendations = EXCLUDED.recommendations,
                    full_summary = EXCLUDED.full_summary,
                    updated_at = now()
                """,
                (
                    summary.document_id,
                    summary.key_findings,
                    Jsonb(summary.reasoning_steps),
                    summary.recommendations,
                    summary.full_summary,
                ),
            )

    async def get(self, document_id: str) -> ReportSummary | None:
        conn = await self._connection()
        async with self._guard(f"loading summary of {document_id}"):
            cur = await conn.execute(
                f"""
                SELECT report_id, key_findings, reasoning_steps, recommendations, full_summary
                FROM {self.table_name}
                WHERE report_id = %s
                """,
                (document_id,),
            )
            row = await cur.fetchone()

        if row is None:
            return None

        return ReportSummary(
            document_id=row[0],
            key_findings=row[1],
            reasoning_steps=row[2],
            recommendations=row[3],
            full_summary=row[4],
        )


class InMemorySummaryStore:
    """In-memory summaries table for testing/development."""

    def __init__(self):
        self._summaries: dict[str, ReportSummary] = {}
        self.upsert_count = 0

    async def connect(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def create_schema(self) -> None:
        pass

    async def upsert(self, summary: ReportSummary) -> None:
        self._summaries[summary.document_id] = summary.model_copy(deep=True)
        self.upsert_count += 1

    async def get(self, document_id: str) -> ReportSummary | None:
        summary = self._summaries.get(document_id)
        return summary.model_copy(deep=True) if summary else None

    def count(self, document_id: str | None = None) -> int:
        """Number of stored summary rows, optionally for one document."""
        if document_id is None:
            return len(self._summaries)
        return int(document_id in self._summaries)

"""
CLI commands - entry points for the pipeline.

Each command follows a consistent pattern:
1. Parse arguments
2. Load environment
3. Run the operation against a MedReportService
4. Print the JSON result
5. Return exit code
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import uuid
from pathlib import Path

from dotenv import load_dotenv

from medreport_rag.config import PipelineConfig
from medreport_rag.core.errors import MedReportRAGError
from medreport_rag.core.protocols import Document, ReportCategory
from medreport_rag.observability import init_tracing, shutdown_tracing
from medreport_rag.service import MedReportService
from medreport_rag.summarization.orchestrator import SummarizationResult


def _load_env() -> None:
    """Load environment variables from .env file."""
    load_dotenv()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _run(coro) -> int:
    init_tracing()
    try:
        return asyncio.run(coro)
    except MedReportRAGError as e:
        _print_json({"success": False, "error": str(e)})
        return 1
    finally:
        shutdown_tracing()


async def _with_service(operation) -> int:
    service = await MedReportService.from_config(PipelineConfig.from_env())
    async with service:
        return await operation(service)


def run_init_db_cli() -> int:
    """CLI entry point for schema creation."""
    _load_env()

    parser = argparse.ArgumentParser(description="Create tables and vector index")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()
    _configure_logging(args.verbose)

    async def operation(service: MedReportService) -> int:
        await service.init_db()
        _print_json({"success": True, "message": "Schema created"})
        return 0

    return _run(_with_service(operation))


def run_register_cli() -> int:
    """CLI entry point for registering a report from a local file."""
    _load_env()

    parser = argparse.ArgumentParser(description="Register a report for processing")
    parser.add_argument("file", help="Path or URL of the report text")
    parser.add_argument("--patient", required=True, help="Patient name")
    parser.add_argument("--patient-id", default=None, help="Patient identifier")
    parser.add_argument(
        "--category",
        choices=[c.value for c in ReportCategory],
        default=ReportCategory.OTHER.value,
        help="Report category",
    )
    parser.add_argument("--owner", default="cli", help="Owning user id")
    parser.add_argument("--id", dest="report_id", default=None, help="Report id")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()
    _configure_logging(args.verbose)

    document = Document(
        id=args.report_id or str(uuid.uuid4()),
        owner_id=args.owner,
        file_url=args.file,
        file_name=Path(args.file).name,
        category=ReportCategory(args.category),
        patient_name=args.patient,
        patient_id=args.patient_id,
    )

    async def operation(service: MedReportService) -> int:
        await service.documents.add(document)
        _print_json({"success": True, "report_id": document.id})
        return 0

    return _run(_with_service(operation))


def run_ingest_cli() -> int:
    """CLI entry point for ingestion."""
    _load_env()

    parser = argparse.ArgumentParser(description="Chunk, embed and store a report")
    parser.add_argument("report_id", help="Report to ingest")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()
    _configure_logging(args.verbose)

    async def operation(service: MedReportService) -> int:
        report = await service.process_document(args.report_id)
        _print_json(report.to_dict())
        return 0 if report.success else 1

    return _run(_with_service(operation))


def run_summarize_cli() -> int:
    """CLI entry point for summary generation (and regeneration)."""
    _load_env()

    parser = argparse.ArgumentParser(description="Generate a report summary")
    parser.add_argument("report_id", help="Report to summarize")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()
    _configure_logging(args.verbose)

    async def operation(service: MedReportService) -> int:
        outcome = await service.generate_summary(args.report_id)
        _print_json(outcome.to_dict())
        return 0 if isinstance(outcome, SummarizationResult) else 1

    return _run(_with_service(operation))


def main() -> int:
    """
    Main CLI entry point with subcommands.

    Usage:
        medreport-rag init-db
        medreport-rag register report.txt --patient "Jane Doe" --category lab_report
        medreport-rag ingest <report_id>
        medreport-rag summarize <report_id>
    """
    _load_env()

    parser = argparse.ArgumentParser(
        description="Medical report RAG summarization pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  init-db     Create tables, unique constraints and the vector index
  register    Register a report (uploads normally do this)
  ingest      Chunk, embed and store a report's fragments
  summarize   Generate or regenerate a report's summary

Examples:
  medreport-rag ingest 3f1c...        # Index one report
  medreport-rag summarize 3f1c...     # Summarize it (safe to repeat)
        """,
    )

    parser.add_argument(
        "command",
        choices=["init-db", "register", "ingest", "summarize"],
        help="Operation to run",
    )

    # Parse just the command first
    args, remaining = parser.parse_known_args()

    commands = {
        "init-db": run_init_db_cli,
        "register": run_register_cli,
        "ingest": run_ingest_cli,
        "summarize": run_summarize_cli,
    }

    # Re-inject remaining args for the subcommand
    sys.argv = [sys.argv[0]] + remaining

    try:
        return commands[args.command]()
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())

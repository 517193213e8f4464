"""
CLI module - command-line access to the two pipeline entry points.

Provides entry points for:
- Creating the database schema
- Registering a report for local runs
- Ingesting a report (chunk, embed, store)
- Generating or regenerating a report summary
"""

from medreport_rag.cli.commands import (
    main,
    run_init_db_cli,
    run_register_cli,
    run_ingest_cli,
    run_summarize_cli,
)

__all__ = [
    "main",
    "run_init_db_cli",
    "run_register_cli",
    "run_ingest_cli",
    "run_summarize_cli",
]

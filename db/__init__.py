"""
Database package for PromptEnrich.
Provides the SQLAlchemy engine, session scope, tables and repository functions
behind the SQL-backed step store.
"""

from db.engine import create_db_engine, get_database_url
from db.repository import (
    get_job_run_row,
    get_step_result,
    list_step_results,
    save_step_result,
    upsert_job_run,
)
from db.session import create_session_factory, session_scope
from db.tables import job_runs, metadata, step_results

__all__ = [
    "create_db_engine",
    "create_session_factory",
    "get_database_url",
    "get_job_run_row",
    "get_step_result",
    "job_runs",
    "list_step_results",
    "metadata",
    "save_step_result",
    "session_scope",
    "step_results",
    "upsert_job_run",
]

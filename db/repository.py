"""
Repository layer for job runs and step results.

Design principles:
- Functions do NOT commit; the caller's session_scope owns the transaction
- SQLAlchemy Core (insert/select/update), not ORM
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Row
from sqlalchemy.orm import Session

from db.tables import job_runs, step_results
from utils.logger import get_logger

logger = get_logger(__name__)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


# ============================================================================
# STEP RESULTS
# ============================================================================


def get_step_result(session: Session, run_id: str, step_name: str) -> Row | None:
    """Return the recorded row for (run_id, step_name), or None if the step never completed."""
    stmt = select(step_results.c.output).where(
        step_results.c.run_id == run_id, step_results.c.step_name == step_name
    )
    return session.execute(stmt).first()


def save_step_result(session: Session, run_id: str, step_name: str, output: Any) -> None:
    """
    Record a step output.

    A step is only recorded once; a second save for the same key is ignored
    so it cannot overwrite the first result. Two writers racing past the
    check both insert, and the loser raises IntegrityError from
    uq_step_results_run_step; callers treat that as already recorded.
    """
    if get_step_result(session, run_id, step_name) is not None:
        logger.debug(
            "Step already recorded",
            extra={"extra_fields": {"run_id": run_id, "step": step_name}},
        )
        return
    session.execute(
        insert(step_results).values(
            run_id=run_id, step_name=step_name, output=output, created_at=_utcnow()
        )
    )


def list_step_results(session: Session, run_id: str) -> dict[str, Any]:
    """All recorded outputs for a run, in completion order."""
    stmt = (
        select(step_results.c.step_name, step_results.c.output)
        .where(step_results.c.run_id == run_id)
        .order_by(step_results.c.id)
    )
    return {row.step_name: row.output for row in session.execute(stmt)}


# ============================================================================
# JOB RUNS
# ============================================================================


def get_job_run_row(session: Session, run_id: str) -> Row | None:
    return session.execute(select(job_runs).where(job_runs.c.run_id == run_id)).first()


def upsert_job_run(session: Session, values: dict[str, Any]) -> None:
    """Insert a job run row, or update every column if it already exists."""
    run_id = values["run_id"]
    if get_job_run_row(session, run_id) is None:
        session.execute(insert(job_runs).values(**values))
    else:
        changes = {k: v for k, v in values.items() if k != "run_id"}
        session.execute(update(job_runs).where(job_runs.c.run_id == run_id).values(**changes))

"""
Step stores: durable memory of which steps of a run already completed.

Two implementations share one interface:
- InMemoryStepStore: process-local, lock-guarded dicts (default)
- SqlStepStore: SQLAlchemy-backed, survives restarts (STEP_STORE_URL)
"""

import copy
import threading
import time
from collections.abc import Callable
from typing import Any, Protocol

from sqlalchemy import Engine
from sqlalchemy.exc import IntegrityError

from db.engine import create_db_engine
from db.repository import (
    get_job_run_row,
    get_step_result,
    list_step_results,
    save_step_result,
    upsert_job_run,
)
from db.session import create_session_factory, session_scope
from db.tables import metadata
from models.job_run import Event, JobRun, RunStatus
from utils.logger import get_logger

logger = get_logger(__name__)


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


# Returned by get_step() when nothing is recorded; None is a legitimate step output.
MISSING: Any = _Missing()


class StepStore(Protocol):
    def get_step(self, run_id: str, step_name: str) -> Any: ...

    def save_step(self, run_id: str, step_name: str, output: Any) -> None: ...

    def list_steps(self, run_id: str) -> dict[str, Any]: ...

    def save_run(self, run: JobRun) -> None: ...

    def get_run(self, run_id: str) -> JobRun | None: ...


class InMemoryStepStore:
    """
    Thread-safe in-memory step store.

    Steps execute in executor threads and the HTTP layer reads run status
    concurrently, so every access goes through one lock. Values are
    deep-copied in and out so callers cannot mutate recorded outputs.

    With retention_s set, a run that finished more than retention_s ago is
    dropped together with its step records on the next save_run or
    get_run. Queued and running runs are never dropped.
    """

    def __init__(
        self,
        retention_s: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            retention_s: How long finished runs are kept; None keeps them forever
            clock: Monotonic time source in seconds
        """
        self._steps: dict[tuple[str, str], Any] = {}
        self._order: dict[str, list[str]] = {}
        self._runs: dict[str, JobRun] = {}
        self._finished_at: dict[str, float] = {}
        self._retention_s = retention_s
        self._clock = clock
        self._lock = threading.Lock()

    def _evict_expired(self) -> None:
        # Caller holds the lock
        if self._retention_s is None or not self._finished_at:
            return
        cutoff = self._clock() - self._retention_s
        expired = [run_id for run_id, at in self._finished_at.items() if at <= cutoff]
        for run_id in expired:
            del self._finished_at[run_id]
            self._runs.pop(run_id, None)
            for step_name in self._order.pop(run_id, []):
                self._steps.pop((run_id, step_name), None)
        if expired:
            logger.debug(
                f"Evicted {len(expired)} finished runs",
                extra={"extra_fields": {"run_ids": expired, "retention_s": self._retention_s}},
            )

    def get_step(self, run_id: str, step_name: str) -> Any:
        with self._lock:
            if (run_id, step_name) not in self._steps:
                return MISSING
            return copy.deepcopy(self._steps[(run_id, step_name)])

    def save_step(self, run_id: str, step_name: str, output: Any) -> None:
        with self._lock:
            key = (run_id, step_name)
            if key in self._steps:
                return
            self._steps[key] = copy.deepcopy(output)
            self._order.setdefault(run_id, []).append(step_name)

    def list_steps(self, run_id: str) -> dict[str, Any]:
        with self._lock:
            return {
                name: copy.deepcopy(self._steps[(run_id, name)])
                for name in self._order.get(run_id, [])
            }

    def save_run(self, run: JobRun) -> None:
        with self._lock:
            self._evict_expired()
            self._runs[run.run_id] = copy.deepcopy(run)
            if run.is_finished:
                self._finished_at.setdefault(run.run_id, self._clock())
            else:
                self._finished_at.pop(run.run_id, None)

    def get_run(self, run_id: str) -> JobRun | None:
        with self._lock:
            self._evict_expired()
            run = self._runs.get(run_id)
            return copy.deepcopy(run) if run else None


class SqlStepStore:
    """Step store persisted through SQLAlchemy Core."""

    def __init__(self, database_url: str | None = None, engine: Engine | None = None):
        """
        Args:
            database_url: SQLAlchemy URL (defaults to STEP_STORE_URL)
            engine: Pre-built engine; takes precedence over database_url
        """
        self.engine = engine or create_db_engine(database_url)
        metadata.create_all(self.engine)
        self._session_factory = create_session_factory(self.engine)

    def get_step(self, run_id: str, step_name: str) -> Any:
        with session_scope(self._session_factory) as session:
            row = get_step_result(session, run_id, step_name)
            return MISSING if row is None else row.output

    def save_step(self, run_id: str, step_name: str, output: Any) -> None:
        try:
            with session_scope(self._session_factory) as session:
                save_step_result(session, run_id, step_name, output)
        except IntegrityError:
            # Lost an insert race; the first writer's output stands
            logger.debug(
                "Step recorded concurrently",
                extra={"extra_fields": {"run_id": run_id, "step": step_name}},
            )

    def list_steps(self, run_id: str) -> dict[str, Any]:
        with session_scope(self._session_factory) as session:
            return list_step_results(session, run_id)

    def save_run(self, run: JobRun) -> None:
        values = {
            "run_id": run.run_id,
            "function_id": run.function_id,
            "event_id": run.event.id,
            "event_name": run.event.name,
            "event_data": run.event.data,
            "event_ts": run.event.ts,
            "status": run.status.value,
            "attempts": run.attempts,
            "error": run.error,
            "output": run.output,
            "created_at": run.created_at,
            "updated_at": run.updated_at,
        }
        with session_scope(self._session_factory) as session:
            upsert_job_run(session, values)

    def get_run(self, run_id: str) -> JobRun | None:
        with session_scope(self._session_factory) as session:
            row = get_job_run_row(session, run_id)
            if row is None:
                return None
            return JobRun(
                run_id=row.run_id,
                function_id=row.function_id,
                event=Event(
                    name=row.event_name, data=row.event_data or {}, id=row.event_id, ts=row.event_ts
                ),
                status=RunStatus(row.status),
                attempts=row.attempts,
                error=row.error,
                output=row.output,
                created_at=row.created_at,
                updated_at=row.updated_at,
            )


def create_step_store(
    database_url: str | None = None, retention_s: float | None = None
) -> StepStore:
    """
    SqlStepStore when a URL is given, otherwise an in-memory store.

    retention_s only applies to the in-memory store; SQL rows are kept.
    """
    if database_url:
        logger.info("Using SQL step store")
        return SqlStepStore(database_url=database_url)
    logger.info(
        "Using in-memory step store",
        extra={"extra_fields": {"retention_s": retention_s}},
    )
    return InMemoryStepStore(retention_s=retention_s)

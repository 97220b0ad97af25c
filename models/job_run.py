import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class RunStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Event:
    """An inbound trigger. Immutable once dispatched."""

    name: str
    data: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    ts: str = field(default_factory=_utcnow)


@dataclass
class JobRun:
    """One execution of a job function for one event."""

    run_id: str
    function_id: str
    event: Event
    status: RunStatus = RunStatus.QUEUED
    attempts: int = 0
    error: str | None = None
    output: Any = None
    created_at: str = field(default_factory=_utcnow)
    updated_at: str = field(default_factory=_utcnow)

    @property
    def is_finished(self) -> bool:
        return self.status in (RunStatus.COMPLETED, RunStatus.FAILED)

    def touch(self) -> None:
        self.updated_at = _utcnow()

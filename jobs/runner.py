"""
JobRunner - in-process job host.

Accepts events, creates one run per triggered function and executes runs
with retry. Completed steps are recorded in the StepStore, so a retry
only re-executes the step that failed and the ones after it.
"""

import asyncio
import uuid

from models.errors import ConfigError, EnrichError, StepError
from models.job_run import Event, JobRun, RunStatus
from utils.logger import get_logger

from .registry import FunctionRegistry
from .steps import StepRunner
from .store import StepStore

logger = get_logger(__name__)


def is_retryable(error: BaseException) -> bool:
    """
    Host retry policy.

    Everything is retried except configuration problems and errors that
    explicitly declare themselves non-retryable.
    """
    cause = error.cause if isinstance(error, StepError) else error
    if isinstance(cause, ConfigError):
        return False
    if isinstance(cause, EnrichError) and getattr(cause, "retryable", True) is False:
        return False
    return True


class JobRunner:
    """
    Example usage:
        runner = JobRunner(registry, InMemoryStepStore())
        run_ids = runner.send(Event(name="demo/generate", data={"prompt": "..."}))
        run = await runner.execute(run_ids[0])
    """

    def __init__(
        self,
        registry: FunctionRegistry,
        store: StepStore,
        max_attempts: int = 3,
        retry_base_delay_s: float = 1.0,
    ):
        """
        Args:
            registry: Job functions to dispatch to
            store: Where runs and step outputs are recorded
            max_attempts: Attempts per run, including the first
            retry_base_delay_s: Backoff base; attempt n waits base * 2**(n-1)
        """
        self.registry = registry
        self.store = store
        self.max_attempts = max(max_attempts, 1)
        self.retry_base_delay_s = retry_base_delay_s

    def send(self, event: Event) -> list[str]:
        """
        Record one queued run per function triggered by the event.

        Returns:
            Run ids (empty when no function listens for the event name)
        """
        functions = self.registry.functions_for(event.name)
        run_ids = []
        for function in functions:
            run = JobRun(run_id=str(uuid.uuid4()), function_id=function.id, event=event)
            self.store.save_run(run)
            run_ids.append(run.run_id)

        logger.info(
            f"Event '{event.name}' dispatched to {len(run_ids)} functions",
            extra={
                "extra_fields": {
                    "event_id": event.id,
                    "event_name": event.name,
                    "run_ids": run_ids,
                }
            },
        )
        return run_ids

    def get_run(self, run_id: str) -> JobRun | None:
        return self.store.get_run(run_id)

    async def execute(self, run_id: str) -> JobRun:
        """
        Execute a queued run to completion or final failure.

        Raises:
            KeyError: If the run or its function is unknown
        """
        run = self.store.get_run(run_id)
        if run is None:
            raise KeyError(f"Unknown run: {run_id}")
        if run.is_finished:
            return run

        function = self.registry.get(run.function_id)
        if function is None:
            raise KeyError(f"Unknown job function: {run.function_id}")

        log_fields = {"run_id": run_id, "function_id": function.id}

        while True:
            run.attempts += 1
            run.status = RunStatus.RUNNING
            run.touch()
            self.store.save_run(run)

            logger.info(
                f"Run attempt {run.attempts}/{self.max_attempts}",
                extra={"extra_fields": {**log_fields, "attempt": run.attempts}},
            )

            try:
                output = await function.handler(run.event, StepRunner(run_id, self.store))
            except Exception as e:
                run.error = str(e)
                retry = is_retryable(e) and run.attempts < self.max_attempts

                if not retry:
                    run.status = RunStatus.FAILED
                    run.touch()
                    self.store.save_run(run)
                    logger.error(
                        f"Run failed after {run.attempts} attempts: {e}",
                        extra={"extra_fields": {**log_fields, "error_type": type(e).__name__}},
                    )
                    return run

                delay = self.retry_base_delay_s * (2 ** (run.attempts - 1))
                logger.warning(
                    f"Run attempt {run.attempts} failed, retrying in {delay:.1f}s: {e}",
                    extra={"extra_fields": {**log_fields, "delay_s": delay}},
                )
                self.store.save_run(run)
                if delay > 0:
                    await asyncio.sleep(delay)
                continue

            run.status = RunStatus.COMPLETED
            run.output = output
            run.error = None
            run.touch()
            self.store.save_run(run)
            logger.info(
                "Run completed",
                extra={"extra_fields": {**log_fields, "attempts": run.attempts}},
            )
            return run

    async def send_and_execute(self, event: Event) -> list[JobRun]:
        """Dispatch an event and run every triggered function concurrently."""
        run_ids = self.send(event)
        return list(await asyncio.gather(*(self.execute(run_id) for run_id in run_ids)))

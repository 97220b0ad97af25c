"""Durable step execution: each named step runs at most once per run."""

import inspect
from collections.abc import Callable
from typing import Any

from models.errors import StepError
from utils.logger import get_logger

from .store import MISSING, StepStore

logger = get_logger(__name__)


class StepRunner:
    """
    Executes the named steps of one run against a StepStore.

    A step whose output is already recorded for this run returns that output
    without running again, so a retried run resumes after its last
    completed step. Step outputs must be JSON-serialisable.
    """

    def __init__(self, run_id: str, store: StepStore):
        self.run_id = run_id
        self.store = store

    async def run(self, name: str, fn: Callable[[], Any]) -> Any:
        """
        Run a step once and record its output.

        Args:
            name: Step name, unique within the job function
            fn: Zero-argument callable, sync or async

        Returns:
            The step output (fresh or previously recorded)

        Raises:
            StepError: If fn raises; nothing is recorded in that case
        """
        recorded = self.store.get_step(self.run_id, name)
        if recorded is not MISSING:
            logger.info(
                f"Step '{name}' already completed, reusing recorded output",
                extra={"extra_fields": {"run_id": self.run_id, "step": name}},
            )
            return recorded

        logger.info(
            f"Step '{name}' started",
            extra={"extra_fields": {"run_id": self.run_id, "step": name}},
        )
        try:
            output = fn()
            if inspect.isawaitable(output):
                output = await output
        except Exception as e:
            logger.warning(
                f"Step '{name}' failed: {e}",
                extra={
                    "extra_fields": {
                        "run_id": self.run_id,
                        "step": name,
                        "error_type": type(e).__name__,
                    }
                },
            )
            raise StepError(name, e) from e

        self.store.save_step(self.run_id, name, output)
        logger.info(
            f"Step '{name}' completed",
            extra={"extra_fields": {"run_id": self.run_id, "step": name}},
        )
        return output

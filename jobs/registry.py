"""Registry of job functions and the events that trigger them."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from models.job_run import Event

from .steps import StepRunner

Handler = Callable[[Event, StepRunner], Awaitable[Any]]


@dataclass(frozen=True)
class JobFunction:
    id: str
    trigger_event: str
    handler: Handler


class FunctionRegistry:
    """
    Maps event names to the job functions they trigger.

    Example:
        registry = FunctionRegistry()

        @registry.create_function(id="demo-generate", event="demo/generate")
        async def demo(event, step):
            ...
    """

    def __init__(self):
        self._functions: dict[str, JobFunction] = {}

    def register(self, function: JobFunction) -> JobFunction:
        if function.id in self._functions:
            raise ValueError(f"Job function '{function.id}' is already registered")
        self._functions[function.id] = function
        return function

    def create_function(self, *, id: str, event: str) -> Callable[[Handler], JobFunction]:
        def decorator(handler: Handler) -> JobFunction:
            return self.register(JobFunction(id=id, trigger_event=event, handler=handler))

        return decorator

    def get(self, function_id: str) -> JobFunction | None:
        return self._functions.get(function_id)

    def functions_for(self, event_name: str) -> list[JobFunction]:
        """Functions triggered by event_name, in registration order."""
        return [f for f in self._functions.values() if f.trigger_event == event_name]

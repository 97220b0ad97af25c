"""
Models package for events, job runs and generation results.
"""

from .generation import GenerationResult, TokenUsage
from .job_run import Event, JobRun, RunStatus

__all__ = ["Event", "GenerationResult", "JobRun", "RunStatus", "TokenUsage"]

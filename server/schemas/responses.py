"""Pydantic response models (DTOs) for FastAPI endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponseDTO(BaseModel):
    status: str
    timestamp: str
    version: str


class TokenUsageDTO(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class EventAcceptedDTO(BaseModel):
    event_id: str
    ids: list[str] = Field(default_factory=list)


class RunStatusDTO(BaseModel):
    run_id: str
    function_id: str
    event_name: str
    status: str
    attempts: int
    error: str | None = None
    output: Any = None
    steps: dict[str, Any] = Field(default_factory=dict)
    created_at: str
    updated_at: str

    @classmethod
    def from_job_run(cls, run, steps: dict[str, Any] | None = None):
        """Convert JobRun (plus its recorded step outputs) to DTO."""
        return cls(
            run_id=run.run_id,
            function_id=run.function_id,
            event_name=run.event.name,
            status=run.status.value,
            attempts=run.attempts,
            error=run.error,
            output=run.output,
            steps=steps or {},
            created_at=run.created_at,
            updated_at=run.updated_at,
        )


class GenerationResponseDTO(BaseModel):
    text: str
    model: str
    provider: str
    latency_ms: int
    token_usage: TokenUsageDTO
    finish_reason: str | None = None
    timestamp: str

    @classmethod
    def from_generation_result(cls, result):
        """Convert GenerationResult to DTO."""
        return cls(
            text=result.text,
            model=result.model,
            provider=result.provider,
            latency_ms=result.latency_ms,
            token_usage=TokenUsageDTO(
                prompt_tokens=result.token_usage.prompt_tokens,
                completion_tokens=result.token_usage.completion_tokens,
                total_tokens=result.token_usage.total_tokens,
            ),
            finish_reason=result.finish_reason,
            timestamp=result.timestamp,
        )

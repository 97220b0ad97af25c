"""Pydantic request models for FastAPI endpoints."""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class EventRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    data: dict[str, Any] = Field(default_factory=dict)


class DemoRequest(BaseModel):
    prompt: Optional[str] = Field(None, max_length=20000)

    @field_validator("prompt")
    @classmethod
    def blank_prompt_is_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

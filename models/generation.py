from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal, Optional

FinishReason = Optional[Literal["stop", "length", "tool", "content_filter", "error"]]


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __post_init__(self):
        if self.total_tokens == 0 and (self.prompt_tokens > 0 or self.completion_tokens > 0):
            object.__setattr__(self, "total_tokens", self.prompt_tokens + self.completion_tokens)


@dataclass(frozen=True)
class GenerationResult:
    text: str
    model: str
    latency_ms: int = 0
    token_usage: TokenUsage = field(default_factory=TokenUsage)
    finish_reason: FinishReason = None
    provider: str = "anthropic"
    timestamp: str = field(default_factory=_utcnow)

    def __post_init__(self):
        valid_reasons = {"stop", "length", "tool", "content_filter", "error", None}
        if self.finish_reason not in valid_reasons:
            object.__setattr__(self, "finish_reason", None)

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe form, used as the recorded output of the generation step."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GenerationResult":
        usage = data.get("token_usage") or {}
        return cls(
            text=data.get("text", ""),
            model=data.get("model", ""),
            latency_ms=data.get("latency_ms", 0),
            token_usage=TokenUsage(**usage),
            finish_reason=data.get("finish_reason"),
            provider=data.get("provider", "anthropic"),
            timestamp=data.get("timestamp") or _utcnow(),
        )

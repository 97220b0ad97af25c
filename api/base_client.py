import time
from abc import ABC, abstractmethod

from models.generation import FinishReason, GenerationResult


class BaseTextGenerator(ABC):
    """
    Abstract base class for text-generation clients.
    Provider clients inherit from this class and implement generate().
    """

    provider_name: str = "unknown"

    def __init__(self, api_key: str, model_name: str, **kwargs):
        """
        Initialize the generator.

        Args:
            api_key: API key for the provider
            model_name: Fixed model identifier used for every call
            **kwargs: Additional provider-specific parameters
        """
        self.api_key = api_key
        self.model_name = model_name

    @abstractmethod
    def generate(self, prompt: str, **kwargs) -> GenerationResult:
        """
        Generate text for a single user prompt.

        Args:
            prompt: The final (possibly context-augmented) prompt
            **kwargs: Per-call overrides such as max_tokens or temperature

        Returns:
            GenerationResult with the generated text and token usage

        Raises:
            GenerationError: If the provider call fails
        """

    @staticmethod
    def _measure_latency(start_time: float) -> int:
        return int((time.time() - start_time) * 1000)

    @staticmethod
    def _normalize_finish_reason(raw_reason: str | None) -> FinishReason:
        mapping = {
            "end_turn": "stop",
            "stop_sequence": "stop",
            "max_tokens": "length",
            "tool_use": "tool",
            "refusal": "content_filter",
        }
        if raw_reason is None:
            return None
        return mapping.get(raw_reason)

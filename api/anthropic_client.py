import time

import anthropic

from models.errors import GenerationError
from models.generation import GenerationResult, TokenUsage
from utils.logger import get_logger

from .base_client import BaseTextGenerator

logger = get_logger(__name__)

# Transient provider failures the job host may retry.
RETRYABLE_ERRORS = (
    anthropic.APIConnectionError,
    anthropic.RateLimitError,
    anthropic.InternalServerError,
)


class AnthropicTextGenerator(BaseTextGenerator):
    """
    Anthropic Messages API client returning GenerationResult.

    Unlike the scrape client this one raises: a failed generation is
    terminal for the step and is left to the job host to retry.
    """

    provider_name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model_name: str = "claude-3-haiku-20240307",
        max_tokens: int = 1024,
        client: anthropic.Anthropic | None = None,
        **kwargs,
    ):
        """
        Initialize the Anthropic generator.

        Args:
            api_key: The Anthropic API key
            model_name: Model identifier (default: claude-3-haiku-20240307)
            max_tokens: Default output token limit per call
            client: Pre-built SDK client (tests inject a fake here)
        """
        super().__init__(api_key, model_name, **kwargs)
        self.max_tokens = max_tokens
        self.client = client or anthropic.Anthropic(api_key=api_key)

    def generate(self, prompt: str, **kwargs) -> GenerationResult:
        """
        Send one user message and return the concatenated text blocks.

        Args:
            prompt: The final prompt
            **kwargs:
                - max_tokens: Override the default output limit
                - temperature: Sampling temperature (provider default if omitted)

        Raises:
            GenerationError: On any provider failure
        """
        start_time = time.time()
        params = {
            "model": self.model_name,
            "max_tokens": kwargs.get("max_tokens", self.max_tokens),
            "messages": [{"role": "user", "content": prompt}],
        }
        if kwargs.get("temperature") is not None:
            params["temperature"] = kwargs["temperature"]

        logger.info(
            "Generating text",
            extra={
                "extra_fields": {
                    "provider": self.provider_name,
                    "model": self.model_name,
                    "prompt_chars": len(prompt),
                }
            },
        )

        try:
            response = self.client.messages.create(**params)
        except anthropic.AnthropicError as e:
            logger.error(
                f"Anthropic generation failed: {e}",
                extra={
                    "extra_fields": {
                        "model": self.model_name,
                        "error_type": type(e).__name__,
                    }
                },
            )
            raise GenerationError(
                str(e), provider=self.provider_name, retryable=isinstance(e, RETRYABLE_ERRORS)
            ) from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        usage = getattr(response, "usage", None)
        token_usage = TokenUsage(
            prompt_tokens=getattr(usage, "input_tokens", 0) or 0,
            completion_tokens=getattr(usage, "output_tokens", 0) or 0,
        )

        result = GenerationResult(
            text=text,
            model=getattr(response, "model", None) or self.model_name,
            latency_ms=self._measure_latency(start_time),
            token_usage=token_usage,
            finish_reason=self._normalize_finish_reason(getattr(response, "stop_reason", None)),
            provider=self.provider_name,
        )
        logger.info(
            "Generation complete",
            extra={
                "extra_fields": {
                    "model": result.model,
                    "latency_ms": result.latency_ms,
                    "total_tokens": token_usage.total_tokens,
                    "finish_reason": result.finish_reason,
                }
            },
        )
        return result

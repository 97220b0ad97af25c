"""Build the text generator from environment configuration."""

from config.config import Config
from models.errors import ConfigError

from .anthropic_client import AnthropicTextGenerator


def create_generator_from_env(config: Config | None = None) -> AnthropicTextGenerator:
    """
    Create the Anthropic generator from environment variables.

    Environment variables:
        ANTHROPIC_API_KEY: required
        GENERATION_MODEL: model identifier (default: claude-3-haiku-20240307)
        GENERATION_MAX_TOKENS: output limit (default: 1024)

    Raises:
        ConfigError: If ANTHROPIC_API_KEY is not set
    """
    config = config or Config()
    if not config.ANTHROPIC_API_KEY:
        raise ConfigError("ANTHROPIC_API_KEY not set in environment")

    return AnthropicTextGenerator(
        api_key=config.ANTHROPIC_API_KEY,
        model_name=config.GENERATION_MODEL,
        max_tokens=config.GENERATION_MAX_TOKENS,
    )

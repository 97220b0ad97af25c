"""Exception hierarchy for PromptEnrich."""


class EnrichError(Exception):
    """Base class for all application errors."""


class ConfigError(EnrichError):
    """Required configuration is missing or invalid."""


class GenerationError(EnrichError):
    """The text-generation provider call failed."""

    def __init__(self, message: str, *, provider: str = "anthropic", retryable: bool = False):
        super().__init__(message)
        self.provider = provider
        self.retryable = retryable


class StepError(EnrichError):
    """A job step raised; nothing was recorded for it."""

    def __init__(self, step_name: str, cause: BaseException):
        super().__init__(f"Step '{step_name}' failed: {cause}")
        self.step_name = step_name
        self.cause = cause


class InvalidEventError(EnrichError):
    """Event data has the wrong shape; retrying cannot fix it."""

    retryable = False

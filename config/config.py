import os
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_GENERATION_MODEL = "claude-3-haiku-20240307"
DEFAULT_GENERATION_MAX_TOKENS = 1024
DEFAULT_JOB_MAX_ATTEMPTS = 3
DEFAULT_JOB_RETRY_BASE_DELAY_SECONDS = 1.0
DEFAULT_RUN_RETENTION_SECONDS = 3600.0


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


class Config:
    """Configuration management for the application."""

    def __init__(self):
        """Initialize configuration with environment variables."""
        # Load environment variables from .env file if it exists
        env_path = Path(__file__).parent.parent / ".env"
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        # Provider credentials
        self.ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
        self.FIRECRAWL_API_KEY = os.getenv("FIRECRAWL_API_KEY")

        # Generation
        self.GENERATION_MODEL = os.getenv("GENERATION_MODEL", DEFAULT_GENERATION_MODEL)
        self.GENERATION_MAX_TOKENS = int(
            os.getenv("GENERATION_MAX_TOKENS", str(DEFAULT_GENERATION_MAX_TOKENS))
        )

        # Scraping (unset = no per-URL timeout)
        self.SCRAPE_TIMEOUT_SECONDS = _optional_float("SCRAPE_TIMEOUT_SECONDS")

        # Job host
        self.JOB_MAX_ATTEMPTS = max(int(os.getenv("JOB_MAX_ATTEMPTS", str(DEFAULT_JOB_MAX_ATTEMPTS))), 1)
        self.JOB_RETRY_BASE_DELAY_SECONDS = float(
            os.getenv("JOB_RETRY_BASE_DELAY_SECONDS", str(DEFAULT_JOB_RETRY_BASE_DELAY_SECONDS))
        )
        self.STEP_STORE_URL = os.getenv("STEP_STORE_URL") or None
        # Finished runs kept by the in-memory store
        self.RUN_RETENTION_SECONDS = float(
            os.getenv("RUN_RETENTION_SECONDS", str(DEFAULT_RUN_RETENTION_SECONDS))
        )

        # HTTP
        self.API_KEYS = [k.strip() for k in os.getenv("API_KEYS", "").split(",") if k.strip()]

    def validate(self) -> list[str]:
        """
        Check that the provider credentials are present.

        Returns:
            list[str]: Names of missing environment variables (empty when valid)
        """
        missing = []
        if not self.ANTHROPIC_API_KEY:
            missing.append("ANTHROPIC_API_KEY")
        if not self.FIRECRAWL_API_KEY:
            missing.append("FIRECRAWL_API_KEY")
        return missing

    def get_model_info(self) -> str:
        return f"Anthropic ({self.GENERATION_MODEL})"

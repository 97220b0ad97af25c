"""Factory for creating the scrape service from environment configuration."""

from config.config import Config
from models.errors import ConfigError
from utils.logger import get_logger

from .firecrawl_client import FirecrawlScrapeClient
from .scrape_service import ScrapeService

logger = get_logger(__name__)


def create_scrape_service_from_env(config: Config | None = None) -> ScrapeService:
    """
    Create the Firecrawl-backed ScrapeService from environment variables.

    Environment variables:
        FIRECRAWL_API_KEY: Firecrawl API key (required)
        SCRAPE_TIMEOUT_SECONDS: Per-URL timeout (default: none)

    Raises:
        ConfigError: If FIRECRAWL_API_KEY is not set
    """
    config = config or Config()
    if not config.FIRECRAWL_API_KEY:
        raise ConfigError("FIRECRAWL_API_KEY not set in environment")

    logger.info(
        "Using Firecrawl for scraping",
        extra={"extra_fields": {"timeout_s": config.SCRAPE_TIMEOUT_SECONDS}},
    )
    client = FirecrawlScrapeClient(
        api_key=config.FIRECRAWL_API_KEY, timeout_s=config.SCRAPE_TIMEOUT_SECONDS
    )
    return ScrapeService(client=client, timeout_s=config.SCRAPE_TIMEOUT_SECONDS)

"""Web scraping tools for PromptEnrich."""

from .context_pack import aggregate_context, build_final_prompt
from .contracts import ScrapeClient, ScrapeResult
from .factory import create_scrape_service_from_env
from .scrape_service import ScrapeService
from .urls import extract_urls

__all__ = [
    "ScrapeClient",
    "ScrapeResult",
    "ScrapeService",
    "aggregate_context",
    "build_final_prompt",
    "create_scrape_service_from_env",
    "extract_urls",
]

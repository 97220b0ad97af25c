"""Firecrawl client for rendering web pages to markdown.

Firecrawl handles JavaScript rendering and boilerplate removal; this wrapper
only asks for the markdown format and normalises the SDK response shape.
"""

from typing import Any

from utils.logger import get_logger

logger = get_logger(__name__)


def _markdown_of(document: Any) -> str:
    """Pull markdown out of a Firecrawl document (pydantic model or plain dict)."""
    if document is None:
        return ""
    if isinstance(document, dict):
        markdown = document.get("markdown")
    else:
        markdown = getattr(document, "markdown", None)
    return markdown or ""


class FirecrawlScrapeClient:
    """
    Thin wrapper over the Firecrawl SDK's scrape endpoint.

    Errors are NOT swallowed here; ScrapeService decides how a failed URL
    degrades.
    """

    FORMATS = ["markdown"]

    def __init__(self, api_key: str, client: Any = None, timeout_s: float | None = None):
        """
        Initialize the Firecrawl client.

        Args:
            api_key: Firecrawl API key
            client: Pre-built SDK client (tests inject a fake here)
            timeout_s: Server-side scrape timeout; None uses the Firecrawl default
        """
        if not api_key and client is None:
            raise ValueError("FIRECRAWL_API_KEY is required to create a Firecrawl client")

        if client is None:
            try:
                from firecrawl import Firecrawl
            except ModuleNotFoundError as e:
                raise ModuleNotFoundError(
                    "Dependency 'firecrawl-py' is not installed. "
                    "Install it to enable scraping: pip install firecrawl-py"
                ) from e
            client = Firecrawl(api_key=api_key)

        self.client = client
        self.timeout_s = timeout_s
        logger.info("Firecrawl client initialized")

    def scrape(self, url: str) -> str:
        """
        Scrape one URL and return its markdown ("" if the page had none).

        Raises:
            Whatever the SDK raises on HTTP or network failure
        """
        logger.debug(f"Firecrawl scrape: {url}")
        options: dict[str, Any] = {"formats": self.FORMATS}
        if self.timeout_s is not None:
            # Firecrawl takes milliseconds
            options["timeout"] = int(self.timeout_s * 1000)
        document = self.client.scrape(url, **options)
        return _markdown_of(document)

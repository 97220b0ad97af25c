"""Data contracts for the web scraping module."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class ScrapeResult:
    """Outcome of scraping one URL. markdown is "" when the scrape failed or was empty."""

    url: str
    markdown: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return bool(self.markdown)


class ScrapeClient(Protocol):
    """Anything that can turn a URL into markdown text."""

    def scrape(self, url: str) -> str:
        """Return the page as markdown ("" if the provider had no content). May raise."""
        ...

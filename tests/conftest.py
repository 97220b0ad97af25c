import threading

import pytest
from dotenv import load_dotenv

from api.base_client import BaseTextGenerator
from jobs.enrichment import register_enrichment_function
from jobs.registry import FunctionRegistry
from jobs.runner import JobRunner
from jobs.store import InMemoryStepStore
from models.errors import GenerationError
from models.generation import GenerationResult, TokenUsage
from tools.web.scrape_service import ScrapeService

# Load environment variables from .env file for tests
load_dotenv()


class FakeScrapeClient:
    """Scrape client backed by a dict of url -> markdown; urls in `failures` raise."""

    def __init__(self, pages: dict[str, str] | None = None, failures: dict[str, Exception] | None = None):
        self.pages = pages or {}
        self.failures = failures or {}
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def scrape(self, url: str) -> str:
        with self._lock:
            self.calls.append(url)
        if url in self.failures:
            raise self.failures[url]
        return self.pages.get(url, "")


class FakeGenerator(BaseTextGenerator):
    """Generator that records prompts and fails the first `failures` calls."""

    provider_name = "fake"

    def __init__(self, text: str = "generated answer", failures: int = 0, retryable: bool = True):
        super().__init__(api_key="test-key", model_name="fake-model")
        self.text = text
        self.failures_left = failures
        self.retryable = retryable
        self.prompts: list[str] = []

    def generate(self, prompt: str, **kwargs) -> GenerationResult:
        self.prompts.append(prompt)
        if self.failures_left > 0:
            self.failures_left -= 1
            raise GenerationError("fake provider outage", provider="fake", retryable=self.retryable)
        return GenerationResult(
            text=self.text,
            model=self.model_name,
            latency_ms=5,
            token_usage=TokenUsage(prompt_tokens=10, completion_tokens=5),
            finish_reason="stop",
            provider=self.provider_name,
        )


@pytest.fixture
def scrape_client():
    return FakeScrapeClient(
        pages={
            "https://a.test": "content-A",
            "https://b.test": "content-B",
        }
    )


@pytest.fixture
def scraper(scrape_client):
    return ScrapeService(client=scrape_client)


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def store():
    return InMemoryStepStore()


@pytest.fixture
def make_runner(store):
    """Build a JobRunner with the enrichment function bound to the given fakes."""

    def _make(scraper, generator, max_attempts: int = 3) -> JobRunner:
        registry = FunctionRegistry()
        register_enrichment_function(registry, scraper=scraper, generator=generator)
        return JobRunner(registry, store, max_attempts=max_attempts, retry_base_delay_s=0)

    return _make


@pytest.fixture
def make_scrape_client():
    return FakeScrapeClient


@pytest.fixture
def make_generator():
    return FakeGenerator

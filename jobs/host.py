"""Wiring: build the registry, store, runner and clients for one process."""

from dataclasses import dataclass

from api.base_client import BaseTextGenerator
from api.factory import create_generator_from_env
from config.config import Config
from tools.web.factory import create_scrape_service_from_env
from tools.web.scrape_service import ScrapeService

from .enrichment import register_enrichment_function
from .registry import FunctionRegistry
from .runner import JobRunner
from .store import StepStore, create_step_store


@dataclass
class JobHost:
    registry: FunctionRegistry
    runner: JobRunner
    scraper: ScrapeService
    generator: BaseTextGenerator


def build_job_host(
    config: Config | None = None,
    *,
    scraper: ScrapeService | None = None,
    generator: BaseTextGenerator | None = None,
    store: StepStore | None = None,
) -> JobHost:
    """
    Build a JobHost; anything not passed in is created from configuration.

    Raises:
        ConfigError: If a client must be created and its API key is missing
    """
    config = config or Config()
    scraper = scraper or create_scrape_service_from_env(config)
    generator = generator or create_generator_from_env(config)
    store = store or create_step_store(
        config.STEP_STORE_URL, retention_s=config.RUN_RETENTION_SECONDS
    )

    registry = FunctionRegistry()
    register_enrichment_function(registry, scraper=scraper, generator=generator)

    runner = JobRunner(
        registry,
        store,
        max_attempts=config.JOB_MAX_ATTEMPTS,
        retry_base_delay_s=config.JOB_RETRY_BASE_DELAY_SECONDS,
    )
    return JobHost(registry=registry, runner=runner, scraper=scraper, generator=generator)
